"""Dispatch system HTTP client.

Submits compiled orders to the booker API and cancels them:
- POST /api/v1/booker/order
- POST /api/v1/booker/order/{order_id}/cancel

Bearer tokens come from a TokenProviderPort. Transient signing failures
are retried with bounded exponential backoff; an expired, unrefreshable
token is not.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests

from ...config import DispatchConfig, get_config
from ...domain.errors import AuthError, DispatchError
from ...domain.models import DispatchOrder, OrderReceipt
from ...ports.auth import TokenProviderPort

ORDER_PATH = "/api/v1/booker/order"
DEFAULT_CANCEL_REASON = "Cancelled by customer via web booking"


@dataclass
class HttpDispatchClient:
    """Dispatch adapter backed by the booker HTTP API.

    This adapter implements DispatchPort.

    Attributes:
        token_provider: Supplies bearer tokens
        config: Endpoint, timeout and retry settings
        company_id: Company the orders are placed for (cancellations)
        session: HTTP session
        sleep: Used between token retries
    """

    token_provider: TokenProviderPort
    config: DispatchConfig = field(default_factory=lambda: get_config().dispatch)
    company_id: int = field(default_factory=lambda: get_config().orders.company_id)
    session: requests.Session = field(default_factory=requests.Session, repr=False)
    sleep: Callable[[float], None] = field(default_factory=lambda: time.sleep, repr=False)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def submit_order(self, order: DispatchOrder) -> OrderReceipt:
        """Create an order in the dispatch system.

        Args:
            order: Compiled order.

        Returns:
            OrderReceipt with the hex order id and numeric job id.

        Raises:
            DispatchError: If the order was rejected or the call failed.
            AuthError: If no bearer token could be obtained.
        """
        payload = order.to_payload()
        self._logger.info(
            "Submitting order",
            extra={
                "company_id": order.company_id,
                "nodes": order.route.node_count,
            },
        )

        data = self._post(ORDER_PATH, payload)

        order_data = data.get("order") if isinstance(data.get("order"), dict) else {}
        meta = data.get("meta") if isinstance(data.get("meta"), dict) else {}
        order_id = order_data.get("order_id")
        job_id = meta.get("job_id")

        if not order_id and job_id is None and data.get("id") is None:
            raise DispatchError(
                "Dispatch response carries no order identifier",
                details=data,
            )

        receipt = OrderReceipt(
            order_id=str(order_id or job_id or data.get("id")),
            job_id=int(job_id) if str(job_id).isdigit() else None,
            raw=data,
        )
        self._logger.info(
            "Order created",
            extra={"order_id": receipt.order_id, "job_id": receipt.job_id},
        )
        return receipt

    def cancel_order(self, order_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
        """Cancel an order by its hex order id.

        Args:
            order_id: Order identifier from the receipt.
            reason: Reason recorded with the cancellation.

        Returns:
            Parsed response body.
        """
        body = {
            "company_id": self.company_id,
            "reason": reason or DEFAULT_CANCEL_REASON,
        }
        self._logger.info("Cancelling order", extra={"order_id": order_id})
        return self._post(f"{ORDER_PATH}/{order_id}/cancel", body)

    def _token(self) -> str:
        attempts = max(1, self.config.max_auth_attempts)
        for attempt in range(attempts):
            try:
                return self.token_provider.get_token(self.config.timeout_seconds)
            except AuthError as e:
                if not e.retryable or attempt == attempts - 1:
                    raise
                delay = self.config.backoff_base_seconds * (2**attempt)
                self._logger.warning(
                    "Token unavailable, retrying",
                    extra={"attempt": attempt + 1, "delay": delay, "error": str(e)},
                )
                self.sleep(delay)
        raise AssertionError("unreachable")

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        response = self._send(path, body)
        if response.status_code == 401 and hasattr(self.token_provider, "invalidate"):
            self._logger.warning("Bearer token rejected, refreshing", extra={"path": path})
            self.token_provider.invalidate()
            response = self._send(path, body)

        try:
            data = response.json()
        except ValueError as e:
            raise DispatchError(
                "Invalid JSON received from dispatch system",
                cause=e,
                status_code=response.status_code,
                details=response.text[:500],
            ) from e

        if not response.ok:
            message = "Dispatch request failed"
            if isinstance(data, dict):
                message = data.get("message") or data.get("error") or message
            self._logger.error(
                "Dispatch request failed",
                extra={"path": path, "status": response.status_code},
            )
            raise DispatchError(str(message), status_code=response.status_code, details=data)

        if not isinstance(data, dict):
            raise DispatchError(
                "Unexpected dispatch response shape",
                status_code=response.status_code,
                details=data,
            )
        return data

    def _send(self, path: str, body: Dict[str, Any]) -> requests.Response:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._token()}",
        }
        url = f"{self.config.base_url}{path}"
        try:
            return self.session.post(
                url, json=body, headers=headers, timeout=self.config.timeout_seconds
            )
        except requests.Timeout as e:
            raise DispatchError(
                f"Dispatch request timed out after {self.config.timeout_seconds}s", cause=e
            ) from e
        except requests.RequestException as e:
            raise DispatchError("Dispatch system unreachable", cause=e) from e
