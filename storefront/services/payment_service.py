# storefront/services/payment_service.py
import abc
import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import aiohttp

from ..config import Config

logger = logging.getLogger(__name__)

class PaymentGateway(abc.ABC):
    """Payment processor contract.

    Results are dicts: {"success": True, "reference": ...} or
    {"success": False, "error": ...}.
    """

    @abc.abstractmethod
    async def authorize(self, amount: Decimal, currency: str,
                        billing: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abc.abstractmethod
    async def void(self, reference: str) -> Dict[str, Any]:
        """Release an authorisation that will not be captured"""

class HttpPaymentGateway(PaymentGateway):
    """JSON-over-HTTP payment processor client"""

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.base_url = (base_url or Config.PAYMENT_GATEWAY_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else Config.PAYMENT_API_KEY
        self.timeout = aiohttp.ClientTimeout(total=timeout or Config.PAYMENT_TIMEOUT)

    async def authorize(self, amount: Decimal, currency: str,
                        billing: Dict[str, Any]) -> Dict[str, Any]:
        """Request authorisation for the order total"""
        result = await self._post("/authorizations", {
            # Minor units avoid float rounding on the wire
            "amount": int((Decimal(amount) * 100).to_integral_value()),
            "currency": currency,
            "billing_details": billing,
        })
        if not result["success"]:
            return result

        data = result["data"]
        if data.get("status") != "authorized" or not data.get("id"):
            return {
                "success": False,
                "error": data.get("decline_reason") or f"Payment declined: {data.get('status')}"
            }
        return {"success": True, "reference": data["id"]}

    async def void(self, reference: str) -> Dict[str, Any]:
        result = await self._post(f"/authorizations/{reference}/void", {})
        if result["success"]:
            return {"success": True, "reference": reference}
        return result

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.base_url:
            return {"success": False, "error": "Payment gateway is not configured"}

        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(
                    f"{self.base_url}{path}",
                    json=payload,
                    headers=headers
                ) as response:
                    if response.status >= 500:
                        return {
                            "success": False,
                            "error": f"Payment gateway error: {response.status}"
                        }
                    data = await response.json(content_type=None)
                    if response.status >= 400:
                        return {
                            "success": False,
                            "error": (data or {}).get("error") or f"Payment rejected: {response.status}"
                        }
                    return {"success": True, "data": data or {}}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Payment gateway request to {path} failed: {e}")
            return {
                "success": False,
                "error": f"Payment gateway unreachable: {e}"
            }
