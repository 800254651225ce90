"""
Push Channel
============
Simulated push notification delivery.
"""

import asyncio
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple
import structlog

from ..errors import ChannelDeliveryFailed
from .base import BaseChannel, DeliveryResult, mask_identifier

logger = structlog.get_logger(__name__)

DEVICE_TOKEN_PATTERN = re.compile(r'^[A-Za-z0-9_:\-]{10,255}$')


def detect_platform(device_token: str) -> str:
    """Guess the push platform from the token shape."""
    if re.fullmatch(r'[0-9a-fA-F]{64}', device_token):
        return "ios"
    if ":" in device_token:
        return "android"
    return "unknown"


class PushChannel(BaseChannel):
    """Push notification channel with a simulated transport."""
    
    name = "push"
    cost = 0.001
    
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.provider = self.config.get("provider", "Demo Push Provider")
        self.app_name = self.config.get("app_name", "SMSLY")
    
    async def send(
        self,
        identifier: str,
        code: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> DeliveryResult:
        options = options or {}
        token = (identifier or "").strip()
        if not DEVICE_TOKEN_PATTERN.match(token):
            raise ChannelDeliveryFailed(self.name, "Invalid device token format")
        
        title = options.get("title", f"{self.app_name} verification")
        priority = options.get("priority", "high")
        
        result = self._record(token)
        logger.info(
            "Push notification sent",
            device=mask_identifier(token),
            platform=detect_platform(token),
            title=title,
            priority=priority,
            category=options.get("category"),
            provider=self.provider,
            delivery_id=result.delivery_id,
        )
        return result
    
    def build_rich_payload(self, code: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Notification payload with auto-fill and copy actions.

        Args:
            code: The OTP code
            options: Overrides for `title`, `body`, `badge`, `sound`,
                `expires_in_seconds` and extra `custom_data`

        Returns:
            Options dict accepted by send()
        """
        options = options or {}
        return {
            "title": options.get("title", "Secure Login"),
            "body": options.get("body", f"Tap to auto-fill code: {code}"),
            "badge": options.get("badge", 1),
            "sound": options.get("sound", "default"),
            "priority": "high",
            "category": "OTP_VERIFICATION",
            "custom_data": {
                "otp_code": code,
                "expires_in": options.get("expires_in_seconds", 300),
                "action": "auto_fill",
                **options.get("custom_data", {}),
            },
            "actions": [
                {"id": "auto_fill", "title": "Auto Fill"},
                {"id": "copy", "title": "Copy Code"},
            ],
        }
    
    async def send_rich(
        self,
        identifier: str,
        code: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> DeliveryResult:
        """Send a notification built by build_rich_payload."""
        return await self.send(identifier, code, self.build_rich_payload(code, options))
    
    async def send_bulk(
        self,
        recipients: Sequence[Tuple[str, str]],
        options: Optional[Dict[str, Any]] = None,
    ) -> List[DeliveryResult]:
        """
        Send codes to many devices concurrently.

        Args:
            recipients: (device_token, code) pairs
            options: Shared options for every notification

        Returns:
            One DeliveryResult per recipient, in order. Invalid tokens give
            failed results instead of raising.
        """
        async def _one(token: str, code: str) -> DeliveryResult:
            try:
                return await self.send(token, code, options)
            except ChannelDeliveryFailed as e:
                return DeliveryResult.failed(self.name, str(e))
        
        results = await asyncio.gather(*(_one(token, code) for token, code in recipients))
        logger.info(
            "Bulk push notifications sent",
            total=len(results),
            failed=sum(1 for r in results if not r.success),
        )
        return list(results)
