"""
OTP Code Utilities
==================
Secret code generation, constant-time comparison and correlation ids.
"""

import hmac
import secrets
import uuid

# Excludes confusing characters (0, O, 1, I)
ALPHANUMERIC_CHARS = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"


def generate_otp(length: int = 6, alphanumeric: bool = False) -> str:
    """
    Generate a secure random OTP.
    
    Numeric codes are drawn uniformly from [10^(n-1), 10^n - 1], so a
    code never starts with zero and always has exactly `length` digits.
    
    Args:
        length: Number of characters/digits
        alphanumeric: Use letters in addition to digits
        
    Returns:
        OTP string
    """
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise ValueError(f"OTP length must be a positive integer, got {length!r}")

    if alphanumeric:
        return ''.join(secrets.choice(ALPHANUMERIC_CHARS) for _ in range(length))

    low = 10 ** (length - 1)
    span = 10 ** length - low
    return str(low + secrets.randbelow(span))


def codes_match(candidate: str, stored: str) -> bool:
    """
    Compare a submitted code with the stored one in constant time.
    
    Non-string candidates never match. Lone surrogates are encoded as-is
    so any string input compares instead of raising.
    """
    if not isinstance(candidate, str):
        return False
    return hmac.compare_digest(
        candidate.encode("utf-8", "surrogatepass"),
        stored.encode("utf-8", "surrogatepass"),
    )


def generate_session_id() -> str:
    """Opaque session id. Not secret, only unique."""
    return f"otp_{uuid.uuid4().hex}"
