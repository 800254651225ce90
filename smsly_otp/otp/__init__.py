"""
OTP Generation and Session Models
=================================
Secure code generation and the records tracked per session.
"""

from .codes import (
    generate_otp,
    codes_match,
    generate_session_id,
    ALPHANUMERIC_CHARS,
)
from .generator import OTPGenerator
from .models import (
    OTPSession,
    SessionState,
    GenerationResult,
    ResendResult,
    VerifyResult,
    SessionStatusRecord,
    SessionStats,
)

__all__ = [
    # Codes
    "generate_otp",
    "codes_match",
    "generate_session_id",
    "ALPHANUMERIC_CHARS",
    # Generator
    "OTPGenerator",
    # Models
    "OTPSession",
    "SessionState",
    "GenerationResult",
    "ResendResult",
    "VerifyResult",
    "SessionStatusRecord",
    "SessionStats",
]
