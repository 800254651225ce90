"""
OTP Models
==========
Session record and the result types returned by the session manager.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..channels.base import DeliveryResult
from ..errors import VerifyError


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _total_cost(results: List[DeliveryResult]) -> float:
    return round(sum(r.cost or 0.0 for r in results), 6)


class SessionState(str, Enum):
    """Status tag of a stored session."""
    PENDING = "pending"
    VERIFIED = "verified"
    EXPIRED = "expired"
    MAX_ATTEMPTS_EXCEEDED = "max_attempts_exceeded"


@dataclass
class OTPSession:
    """An OTP verification session."""
    session_id: str
    code: str
    identifier: str
    channels: List[str]
    created_at: datetime
    expires_at: datetime
    attempts: int = 0
    verified_at: Optional[datetime] = None
    deliveries: List[DeliveryResult] = field(default_factory=list)

    @property
    def is_verified(self) -> bool:
        return self.verified_at is not None

    def is_expired_at(self, now: datetime) -> bool:
        return now > self.expires_at

    def state_at(self, now: datetime, max_attempts: int) -> SessionState:
        if self.is_verified:
            return SessionState.VERIFIED
        if self.is_expired_at(now):
            return SessionState.EXPIRED
        if self.attempts >= max_attempts:
            return SessionState.MAX_ATTEMPTS_EXCEEDED
        return SessionState.PENDING


@dataclass
class GenerationResult:
    """Outcome of generate_and_send."""
    session_id: str
    code: str
    expires_at: datetime
    channels: List[DeliveryResult]

    @property
    def success(self) -> bool:
        return any(r.success for r in self.channels)

    @property
    def total_cost(self) -> float:
        return _total_cost(self.channels)

    def to_dict(self, include_code: bool = True) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "session_id": self.session_id,
            "expires_at": _iso(self.expires_at),
            "channels": [r.to_dict() for r in self.channels],
            "total_cost": self.total_cost,
        }
        if include_code:
            data["code"] = self.code
        return data


@dataclass
class ResendResult:
    """Outcome of resend."""
    session_id: str
    channels: List[DeliveryResult]

    @property
    def success(self) -> bool:
        return any(r.success for r in self.channels)

    @property
    def total_cost(self) -> float:
        return _total_cost(self.channels)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "session_id": self.session_id,
            "channels": [r.to_dict() for r in self.channels],
            "total_cost": self.total_cost,
        }


@dataclass
class VerifyResult:
    """Outcome of verify. Failures carry an error kind instead of raising."""
    success: bool
    error: Optional[VerifyError] = None
    message: str = ""
    verified_at: Optional[datetime] = None
    attempts_used: Optional[int] = None
    attempts_remaining: Optional[int] = None
    identifier: Optional[str] = None

    @property
    def retryable(self) -> bool:
        return self.error == VerifyError.INVALID_CODE and bool(self.attempts_remaining)

    @classmethod
    def failure(cls, error: VerifyError, message: str, **kwargs) -> "VerifyResult":
        return cls(success=False, error=error, message=message, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        if self.success:
            data.update(
                verified_at=_iso(self.verified_at),
                attempts_used=self.attempts_used,
                identifier=self.identifier,
            )
        else:
            data.update(error=self.message, code=self.error.value)
            if self.attempts_remaining is not None:
                data["attempts_remaining"] = self.attempts_remaining
        return data


@dataclass
class SessionStatusRecord:
    """Read-only projection of a stored session."""
    session_id: str
    identifier: str
    channels: List[str]
    created_at: datetime
    expires_at: datetime
    verified: bool
    verified_at: Optional[datetime]
    attempts: int
    max_attempts: int
    attempts_remaining: int
    is_expired: bool
    status: SessionState

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "identifier": self.identifier,
            "channels": list(self.channels),
            "created_at": _iso(self.created_at),
            "expires_at": _iso(self.expires_at),
            "verified": self.verified,
            "verified_at": _iso(self.verified_at),
            "attempts": self.attempts,
            "max_attempts": self.max_attempts,
            "attempts_remaining": self.attempts_remaining,
            "is_expired": self.is_expired,
            "status": self.status.value,
        }


@dataclass
class SessionStats:
    """Snapshot classification of stored sessions."""
    total_sessions: int
    active_sessions: int
    expired_sessions: int
    verified_sessions: int
    channels: List[str]
    config: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_sessions": self.total_sessions,
            "active_sessions": self.active_sessions,
            "expired_sessions": self.expired_sessions,
            "verified_sessions": self.verified_sessions,
            "channels": list(self.channels),
            "config": dict(self.config),
        }
