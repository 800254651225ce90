"""
OTP Generator
=============
Pairs freshly generated codes with their expiry.
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple

from ..clock import Clock, SystemClock
from ..config import OTPConfig
from .codes import generate_otp


class OTPGenerator:
    """Generates codes according to an OTPConfig."""

    def __init__(self, config: Optional[OTPConfig] = None, clock: Optional[Clock] = None):
        self.config = config or OTPConfig()
        self.clock = clock or SystemClock()

    def generate(self) -> str:
        return generate_otp(
            length=self.config.otp_length,
            alphanumeric=self.config.alphanumeric,
        )

    def generate_with_expiry(self) -> Tuple[str, datetime, datetime]:
        """
        Generate a code with its validity window.
        
        Returns:
            Tuple of (code, created_at, expires_at)
        """
        now = self.clock.now()
        expires_at = now + timedelta(seconds=self.config.expiry_seconds)
        return self.generate(), now, expires_at
