"""Dispatch port - Abstraction over the external dispatch system."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import DispatchOrder, OrderReceipt


class DispatchPort(Protocol):
    """Port for submitting and cancelling orders.

    Implementation: adapters/dispatch/http_client.py
    """

    def submit_order(self, order: DispatchOrder) -> OrderReceipt:
        """Create an order in the dispatch system.

        Args:
            order: Compiled order.

        Returns:
            Receipt with the identifiers assigned by the dispatch system.

        Raises:
            DispatchError: If the order was rejected or the call failed.
            AuthError: If no bearer token could be obtained.
        """
        ...

    def cancel_order(self, order_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
        """Cancel a previously created order.

        Args:
            order_id: Hex order identifier from the receipt.
            reason: Reason recorded with the cancellation.

        Returns:
            Parsed response body.
        """
        ...
