"""
Email Channel
=============
Simulated email delivery.
"""

import html
import re
from typing import Any, Dict, Optional
import structlog

from ..errors import ChannelDeliveryFailed
from .base import BaseChannel, DeliveryResult, mask_identifier

logger = structlog.get_logger(__name__)

# Single @, no whitespace, dotted domain. Bounded to avoid pathological input.
EMAIL_PATTERN = re.compile(r'^[^@\s]{1,64}@[A-Za-z0-9-]{1,63}(\.[A-Za-z0-9-]{1,63})+$')


def is_valid_email(email: str) -> bool:
    return len(email) <= 254 and bool(EMAIL_PATTERN.match(email))


DEFAULT_HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h1 style="font-size: 24px;">OTP Verification</h1>
  <p>Your one-time password (OTP) code is:</p>
  <p style="font-size: 32px; font-weight: bold; letter-spacing: 8px;">{code}</p>
  <p style="font-size: 14px; color: #666;">
    This code will expire in <strong>{expires_in} minutes</strong>.<br>
    Do not share this code with anyone.
  </p>
  <p style="font-size: 12px; color: #999;">This is an automated message from {sender}</p>
</div>
"""

DEFAULT_TEXT_TEMPLATE = (
    "Your OTP code is: {code}\n\n"
    "This code will expire in {expires_in} minutes.\n"
    "Do not share this code with anyone."
)


def _fill(template: str, **values: str) -> str:
    # Plain replacement; templates may contain other braces (CSS)
    for key, value in values.items():
        template = template.replace("{" + key + "}", value)
    return template


class EmailChannel(BaseChannel):
    """Email delivery channel with a simulated transport."""
    
    name = "email"
    cost = 0.01
    
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.provider = self.config.get("provider", "Demo Email Provider")
        self.from_email = self.config.get("from_email", "noreply@smsly.io")
        self.from_name = self.config.get("from_name", "SMSLY OTP")
    
    def render(self, code: str, options: Dict[str, Any]) -> Dict[str, str]:
        """
        Subject, text body and HTML body for a code.

        Templates may contain `{code}`, `{expires_in}` and `{sender}`.
        Values substituted into the HTML body are escaped.

        Args:
            code: The OTP code
            options: `subject`, `text_template`, `html_template`, `expires_in_minutes`
        """
        expires_in = str(options.get("expires_in_minutes", 5))
        subject = options.get("subject", "Your OTP Code")
        text = _fill(
            options.get("text_template", DEFAULT_TEXT_TEMPLATE),
            code=code, expires_in=expires_in, sender=self.from_name,
        )
        body = _fill(
            options.get("html_template", DEFAULT_HTML_TEMPLATE),
            code=html.escape(code), expires_in=html.escape(expires_in), sender=html.escape(self.from_name),
        )
        return {"subject": subject, "text": text, "html": body}
    
    async def send(
        self,
        identifier: str,
        code: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> DeliveryResult:
        email = (identifier or "").strip()
        if not is_valid_email(email):
            raise ChannelDeliveryFailed(self.name, "Invalid email address format")
        
        message = self.render(code, options or {})
        result = self._record(email)
        logger.info(
            "Email sent",
            recipient=mask_identifier(email),
            subject=message["subject"],
            sender=f"{self.from_name} <{self.from_email}>",
            provider=self.provider,
            delivery_id=result.delivery_id,
        )
        return result
