"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the booking core to external systems:
- Token signing and caching (dispatch API bearer tokens)
- The dispatch system's booker API
"""
