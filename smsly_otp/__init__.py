"""
SMSLY OTP
=========
One-time password sessions: generation, multi-channel delivery,
attempt-limited verification, resend and expiry cleanup.
"""

__version__ = "0.1.0"

# Config
from smsly_otp.config import OTPConfig

# Errors
from smsly_otp.errors import (
    OTPError,
    ConfigurationError,
    VerifyError,
    ResendError,
    SessionNotFound,
    AlreadyVerified,
    SessionExpired,
    ChannelDeliveryFailed,
)

# Clock
from smsly_otp.clock import Clock, SystemClock, ManualClock

# Codes & models
from smsly_otp.otp import (
    generate_otp,
    codes_match,
    OTPGenerator,
    OTPSession,
    SessionState,
    GenerationResult,
    ResendResult,
    VerifyResult,
    SessionStatusRecord,
    SessionStats,
)

# Channels
from smsly_otp.channels import (
    BaseChannel,
    ChannelRegistry,
    DeliveryResult,
    DeliveryStatus,
    SMSChannel,
    EmailChannel,
    PushChannel,
    WebhookChannel,
    build_default_registry,
)

# Manager
from smsly_otp.manager import OTPSessionManager
from smsly_otp.sweeper import SessionSweeper
from smsly_otp.metrics import OTPMetrics

__all__ = [
    # Config
    "OTPConfig",
    # Errors
    "OTPError",
    "ConfigurationError",
    "VerifyError",
    "ResendError",
    "SessionNotFound",
    "AlreadyVerified",
    "SessionExpired",
    "ChannelDeliveryFailed",
    # Clock
    "Clock",
    "SystemClock",
    "ManualClock",
    # Codes & models
    "generate_otp",
    "codes_match",
    "OTPGenerator",
    "OTPSession",
    "SessionState",
    "GenerationResult",
    "ResendResult",
    "VerifyResult",
    "SessionStatusRecord",
    "SessionStats",
    # Channels
    "BaseChannel",
    "ChannelRegistry",
    "DeliveryResult",
    "DeliveryStatus",
    "SMSChannel",
    "EmailChannel",
    "PushChannel",
    "WebhookChannel",
    "build_default_registry",
    # Manager
    "OTPSessionManager",
    "SessionSweeper",
    "OTPMetrics",
]
