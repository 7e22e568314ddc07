"""
Razorpay integration: creates gateway orders that the browser checkout
completes. Documentation: https://razorpay.com/docs/api/orders/

Only order creation is implemented. Payment callbacks are not verified;
the client reports the outcome when it places the order.
"""
import logging
import time
import uuid
from typing import Any, Dict, Optional

import requests

from .config import Settings
from .errors import UpstreamGatewayError
from .utils import round_half_up

logger = logging.getLogger(__name__)


class RazorpayGateway:
    """Thin client for the Razorpay Orders API."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.key_id = settings.razorpay_key_id
        self.key_secret = settings.razorpay_key_secret
        self.base_url = settings.razorpay_base_url
        self.currency = settings.currency
        self.session = session or requests.Session()

    @staticmethod
    def new_receipt() -> str:
        return f"receipt_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"

    def create_charge_order(self, amount: float) -> Dict[str, Any]:
        """
        Create a gateway order for ``amount`` (smallest currency unit).

        The amount is rounded half-up to an integer before it is sent.
        Returns the gateway's order object unchanged.

        Raises:
            UpstreamGatewayError: transport failure, non-2xx status or a
                body that is not JSON
        """
        data = {
            "amount": round_half_up(amount),
            "currency": self.currency,
            "receipt": self.new_receipt(),
        }
        url = f"{self.base_url}/orders"
        try:
            response = self.session.post(url, json=data, auth=(self.key_id, self.key_secret))
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("razorpay order creation failed", extra={"receipt": data["receipt"], "error": str(e)})
            raise UpstreamGatewayError() from e
        except ValueError as e:
            logger.error("razorpay returned a non-JSON body", extra={"receipt": data["receipt"]})
            raise UpstreamGatewayError() from e

        logger.info("razorpay order created", extra={"receipt": data["receipt"], "amount": data["amount"]})
        return result

    def get_public_key(self) -> str:
        return self.key_id

    def close(self) -> None:
        self.session.close()
