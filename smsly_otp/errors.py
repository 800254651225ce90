"""
OTP Errors
==========
Typed failures raised or reported by the OTP session manager.
"""

from enum import Enum


class VerifyError(str, Enum):
    """Verification failure kinds, returned inside VerifyResult."""
    INVALID_SESSION = "INVALID_SESSION"
    ALREADY_USED = "ALREADY_USED"
    MAX_ATTEMPTS_EXCEEDED = "MAX_ATTEMPTS_EXCEEDED"
    EXPIRED = "EXPIRED"
    INVALID_CODE = "INVALID_CODE"


class OTPError(Exception):
    """Base class for OTP errors."""
    code: str = "OTP_ERROR"

    def __init__(self, message: str, session_id: str = None):
        super().__init__(message)
        self.session_id = session_id


class ConfigurationError(OTPError, ValueError):
    """Raised when the OTP configuration is invalid."""
    code = "INVALID_CONFIG"


class ResendError(OTPError):
    """Raised when a session cannot be resent."""


class SessionNotFound(ResendError):
    code = "SESSION_NOT_FOUND"

    def __init__(self, session_id: str):
        super().__init__("Session not found", session_id)


class AlreadyVerified(ResendError):
    code = "ALREADY_VERIFIED"

    def __init__(self, session_id: str):
        super().__init__("Cannot resend - OTP already verified", session_id)


class SessionExpired(ResendError):
    code = "SESSION_EXPIRED"

    def __init__(self, session_id: str):
        super().__init__("Cannot resend - OTP session expired", session_id)


class ChannelDeliveryFailed(OTPError):
    """
    Raised by a channel when it cannot deliver a code.
    
    The manager captures it in the per-channel result; it never reaches
    callers of generate_and_send or resend.
    """
    code = "CHANNEL_DELIVERY_FAILED"

    def __init__(self, channel: str, message: str):
        super().__init__(message)
        self.channel = channel
