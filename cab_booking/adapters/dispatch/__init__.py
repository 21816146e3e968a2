"""Dispatch adapters - Implementations of the DispatchPort."""

from .http_client import HttpDispatchClient

__all__ = ["HttpDispatchClient"]
