"""
Webhook Channel
===============
Delivers codes by POSTing JSON to an HTTP endpoint.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
import httpx
import structlog

from .base import BaseChannel, DeliveryResult, generate_delivery_id, mask_identifier

logger = structlog.get_logger(__name__)


class WebhookChannel(BaseChannel):
    """
    HTTP webhook delivery channel.
    
    The receiving endpoint is responsible for the last hop (its own SMS
    gateway, chat bot, etc.). Any 2xx response counts as delivered.
    """
    
    name = "webhook"
    
    def __init__(
        self,
        config: Dict[str, Any],
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            config: {
                "url": "https://hooks.example.com/otp",
                "name": "webhook",        # optional registry name
                "secret": "xxx",          # optional bearer token
                "timeout": 10.0,
                "cost": 0.0,
            }
            client: Pre-built client (tests, connection sharing)
        """
        super().__init__(config)
        self.url = self.config["url"]
        self.name = self.config.get("name", self.name)
        self.timeout = float(self.config.get("timeout", 10.0))
        self._owns_client = client is None
        self._client = client
    
    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {}
            if self.config.get("secret"):
                headers["Authorization"] = f"Bearer {self.config['secret']}"
            self._client = httpx.AsyncClient(headers=headers, timeout=self.timeout)
        return self._client
    
    async def send(
        self,
        identifier: str,
        code: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> DeliveryResult:
        delivery_id = generate_delivery_id(self.name)
        payload = {
            "delivery_id": delivery_id,
            "identifier": identifier,
            "code": code,
            "metadata": options or {},
        }
        
        try:
            response = await self._get_client().post(self.url, json=payload)
        except httpx.HTTPError as e:
            logger.error("Webhook delivery failed", channel=self.name, error=str(e))
            result = DeliveryResult.failed(self.name, f"Webhook request failed: {e}")
            result.delivery_id = delivery_id
            self._remember(result)
            return result
        
        if response.is_success:
            result = DeliveryResult(
                success=True,
                channel=self.name,
                delivery_id=delivery_id,
                cost=self.cost,
                recipient=identifier,
                sent_at=datetime.now(timezone.utc),
            )
            logger.info(
                "Webhook delivery accepted",
                channel=self.name,
                recipient=mask_identifier(identifier),
                status_code=response.status_code,
            )
        else:
            result = DeliveryResult.failed(
                self.name,
                f"Webhook returned HTTP {response.status_code}",
            )
            result.delivery_id = delivery_id
            logger.warning(
                "Webhook delivery rejected",
                channel=self.name,
                status_code=response.status_code,
            )
        
        self._remember(result)
        return result
    
    async def close(self) -> None:
        """Close HTTP client if we created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None
