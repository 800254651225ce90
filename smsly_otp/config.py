"""
OTP Configuration
=================
Settings for code generation, expiry, attempts and channels.
"""

import math
import os
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional, Tuple

from .errors import ConfigurationError

# One year
MAX_EXPIRY_MINUTES = 365 * 24 * 60


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _positive_number(value: Any) -> bool:
    """Finite and > 0; rejects bools, NaN and infinity."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


@dataclass
class OTPConfig:
    """Configuration for the OTP session manager."""
    otp_length: int = 6
    expiry_minutes: float = 5
    max_attempts: int = 3
    alphanumeric: bool = False
    cleanup_interval_seconds: float = 300  # 5 minutes
    default_channels: Tuple[str, ...] = ("sms",)
    # Opaque per-channel blocks, keyed by channel name
    channels: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.otp_length, bool) or not isinstance(self.otp_length, int) or self.otp_length <= 0:
            raise ConfigurationError(f"otp_length must be a positive integer, got {self.otp_length!r}")
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int) or self.max_attempts <= 0:
            raise ConfigurationError(f"max_attempts must be a positive integer, got {self.max_attempts!r}")
        if not _positive_number(self.expiry_minutes) or self.expiry_minutes > MAX_EXPIRY_MINUTES:
            raise ConfigurationError(f"expiry_minutes must be a positive number up to {MAX_EXPIRY_MINUTES}, got {self.expiry_minutes!r}")
        if not _positive_number(self.cleanup_interval_seconds):
            raise ConfigurationError(
                f"cleanup_interval_seconds must be a positive number, got {self.cleanup_interval_seconds!r}"
            )
        if isinstance(self.default_channels, str):
            self.default_channels = (self.default_channels,)
        self.default_channels = tuple(c.strip().lower() for c in self.default_channels if c.strip())
        if not self.default_channels:
            raise ConfigurationError("default_channels must name at least one channel")

    @property
    def expiry_seconds(self) -> float:
        return self.expiry_minutes * 60

    def summary(self) -> Dict[str, Any]:
        """Public settings, as reported by get_stats."""
        return {
            "otp_length": self.otp_length,
            "expiry_minutes": self.expiry_minutes,
            "max_attempts": self.max_attempts,
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_env(cls, channels: Optional[Dict[str, Dict[str, Any]]] = None) -> "OTPConfig":
        """
        Build a config from OTP_* environment variables.

        Args:
            channels: Per-channel config blocks (not read from the environment)

        Returns:
            Validated OTPConfig
        """
        try:
            return cls(
                otp_length=int(os.environ.get("OTP_LENGTH", "6")),
                expiry_minutes=float(os.environ.get("OTP_EXPIRY_MINUTES", "5")),
                max_attempts=int(os.environ.get("OTP_MAX_ATTEMPTS", "3")),
                alphanumeric=_env_bool("OTP_ALPHANUMERIC", False),
                cleanup_interval_seconds=float(os.environ.get("OTP_CLEANUP_INTERVAL_SECONDS", "300")),
                default_channels=tuple(os.environ.get("OTP_DEFAULT_CHANNELS", "sms").split(",")),
                channels=channels or {},
            )
        except ValueError as e:
            if isinstance(e, ConfigurationError):
                raise
            raise ConfigurationError(f"Invalid OTP environment setting: {e}") from e
