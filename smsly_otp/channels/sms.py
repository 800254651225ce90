"""
SMS Channel
===========
Simulated SMS delivery with E.164 normalization.
"""

import re
from typing import Any, Dict, Optional
import structlog

from ..errors import ChannelDeliveryFailed
from .base import BaseChannel, DeliveryResult, mask_identifier

logger = structlog.get_logger(__name__)

E164_PATTERN = re.compile(r'^\+[1-9]\d{1,14}$')


def validate_e164(phone: str) -> bool:
    """True if the number is in E.164 format."""
    return bool(E164_PATTERN.match(phone))


def normalize_phone(phone: str, default_country: str = "1") -> str:
    """
    Normalize a phone number to E.164 format.
    
    Args:
        phone: Raw phone number
        default_country: Default country code (without +)
        
    Returns:
        E.164 formatted number
    """
    digits = re.sub(r'\D', '', phone)
    
    if phone.strip().startswith('+'):
        return f"+{digits}"
    
    # 10 digits: national US/Canada number
    if len(digits) == 10:
        return f"+{default_country}{digits}"
    
    return f"+{digits}"


class SMSChannel(BaseChannel):
    """
    SMS delivery channel.
    
    Transport is simulated: the message is logged, never sent to a carrier.
    """
    
    name = "sms"
    cost = 0.05
    
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            config: {
                "provider": "Demo SMS Provider",
                "from_number": "+15550000000",
                "default_country": "1",
                "cost": 0.05,
            }
        """
        super().__init__(config)
        self.provider = self.config.get("provider", "Demo SMS Provider")
        self.from_number = self.config.get("from_number", "+15550000000")
        self.default_country = str(self.config.get("default_country", "1"))
    
    async def send(
        self,
        identifier: str,
        code: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> DeliveryResult:
        options = options or {}
        phone = normalize_phone(identifier or "", self.default_country)
        if not validate_e164(phone):
            raise ChannelDeliveryFailed(self.name, "Invalid phone number format")
        
        template = options.get("template", "Your OTP code is: {code}")
        message = template.replace("{code}", code)
        
        result = self._record(phone)
        logger.info(
            "SMS sent",
            recipient=mask_identifier(phone),
            provider=self.provider,
            delivery_id=result.delivery_id,
            length=len(message),
        )
        return result
