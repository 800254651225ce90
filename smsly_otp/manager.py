"""
OTP Session Manager
===================
Generation, multi-channel delivery, verification, resend and cleanup
of one-time password sessions.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional, Sequence, Union
import structlog

from .channels import ChannelRegistry, DeliveryResult, build_default_registry, mask_identifier
from .clock import Clock, SystemClock
from .config import OTPConfig
from .errors import AlreadyVerified, SessionExpired, SessionNotFound, VerifyError
from .metrics import UNKNOWN_CHANNEL, OTPMetrics
from .otp import (
    OTPGenerator,
    OTPSession,
    GenerationResult,
    ResendResult,
    SessionStats,
    SessionStatusRecord,
    VerifyResult,
    codes_match,
    generate_session_id,
)
from .store import SessionStore

logger = structlog.get_logger(__name__)

ChannelNames = Union[str, Sequence[str]]


def _normalize_channels(channels: ChannelNames) -> List[str]:
    """Lower-case and de-duplicate channel names, keeping order."""
    if isinstance(channels, str):
        channels = [channels]
    names: List[str] = []
    for name in channels:
        name = str(name).strip().lower()
        if name and name not in names:
            names.append(name)
    if not names:
        raise ValueError("At least one channel is required")
    return names


class OTPSessionManager:
    """
    Owns OTP sessions from generation to verification or expiry.

    Example:
        manager = OTPSessionManager(OTPConfig(max_attempts=5))
        result = await manager.generate_and_send("+14155551234", ["sms"])
        outcome = await manager.verify(result.session_id, user_input)
    """

    def __init__(
        self,
        config: Optional[OTPConfig] = None,
        channels: Optional[ChannelRegistry] = None,
        clock: Optional[Clock] = None,
        metrics: Optional[OTPMetrics] = None,
    ):
        self.config = config or OTPConfig()
        self.channels = channels if channels is not None else build_default_registry(self.config)
        self.clock = clock or SystemClock()
        self.metrics = metrics or OTPMetrics()
        self.generator = OTPGenerator(self.config, self.clock)
        self._store = SessionStore()

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def _deliver(
        self,
        channel_name: str,
        identifier: str,
        code: str,
        options: Optional[Dict[str, Any]],
    ) -> DeliveryResult:
        """Deliver through one channel. Never raises."""
        start = time.monotonic()
        try:
            channel = self.channels.get(channel_name)
            result = await channel.send(identifier, code, options or {})
        except Exception as e:
            logger.warning("Channel delivery failed", channel=channel_name, error=str(e))
            result = DeliveryResult.failed(channel_name, str(e))
        label = channel_name if channel_name in self.channels else UNKNOWN_CHANNEL
        self.metrics.delivery(label, result.success, time.monotonic() - start)
        return result

    async def _deliver_all(
        self,
        session: OTPSession,
        channel_names: List[str],
        options: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> List[DeliveryResult]:
        options = options or {}
        results = await asyncio.gather(*(
            self._deliver(name, session.identifier, session.code, options.get(name))
            for name in channel_names
        ))
        session.deliveries.extend(results)
        return list(results)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def generate_and_send(
        self,
        identifier: str,
        channels: Optional[ChannelNames] = None,
        options: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> GenerationResult:
        """
        Create a session and deliver its code through every requested channel.

        Args:
            identifier: Destination (phone number, email, device token)
            channels: Channel name or names; defaults to config.default_channels
            options: Per-channel options, keyed by channel name

        Returns:
            GenerationResult including the code. Callers that forward the
            result to an untrusted client must strip the code themselves.
        """
        if not identifier:
            raise ValueError("identifier is required")
        channel_names = _normalize_channels(
            self.config.default_channels if channels is None else channels
        )

        code, created_at, expires_at = self.generator.generate_with_expiry()
        session = OTPSession(
            session_id=generate_session_id(),
            code=code,
            identifier=identifier,
            channels=channel_names,
            created_at=created_at,
            expires_at=expires_at,
        )

        async with self._store.lock(session.session_id):
            self._store.add(session)
            self.metrics.session_created()
            logger.info(
                "OTP session created",
                session_id=session.session_id,
                identifier=mask_identifier(identifier),
                channels=channel_names,
                expires_at=expires_at.isoformat(),
            )
            results = await self._deliver_all(session, channel_names, options)

        result = GenerationResult(
            session_id=session.session_id,
            code=code,
            expires_at=expires_at,
            channels=results,
        )
        if not result.success:
            logger.warning("OTP delivery failed on all channels", session_id=session.session_id)
        return result

    async def verify(self, session_id: str, candidate_code: str) -> VerifyResult:
        """
        Check a submitted code.

        Checks run in order: unknown session, already verified, attempts
        exhausted, expired, then the constant-time comparison. Exhausted and
        expired sessions are deleted.

        Args:
            session_id: Session id from generate_and_send
            candidate_code: Code entered by the user

        Returns:
            VerifyResult; failures carry a VerifyError
        """
        try:
            async with self._store.lock(session_id):
                result = self._verify_locked(session_id, candidate_code)
        finally:
            self._store.release(session_id)
        self.metrics.verification(result.error.value if result.error else "VERIFIED")
        return result

    def _verify_locked(self, session_id: str, candidate_code: str) -> VerifyResult:
        session = self._store.get(session_id)
        if session is None:
            return VerifyResult.failure(VerifyError.INVALID_SESSION, "Invalid session ID")

        if session.is_verified:
            return VerifyResult.failure(VerifyError.ALREADY_USED, "OTP already used")

        max_attempts = self.config.max_attempts
        if session.attempts >= max_attempts:
            self._store.delete(session_id)
            logger.warning("OTP attempts exhausted", session_id=session_id, max_attempts=max_attempts)
            return VerifyResult.failure(
                VerifyError.MAX_ATTEMPTS_EXCEEDED,
                f"Maximum attempts ({max_attempts}) exceeded",
            )

        now = self.clock.now()
        if session.is_expired_at(now):
            self._store.delete(session_id)
            logger.warning("OTP expired", session_id=session_id, expired_at=session.expires_at.isoformat())
            return VerifyResult.failure(VerifyError.EXPIRED, "OTP has expired")

        session.attempts += 1

        if codes_match(candidate_code, session.code):
            session.verified_at = now
            logger.info("OTP verified successfully", session_id=session_id, attempts=session.attempts)
            return VerifyResult(
                success=True,
                verified_at=now,
                attempts_used=session.attempts,
                identifier=session.identifier,
            )

        remaining = max_attempts - session.attempts
        logger.warning("Invalid OTP attempt", session_id=session_id, remaining=remaining)
        return VerifyResult.failure(
            VerifyError.INVALID_CODE,
            "Invalid OTP code",
            attempts_remaining=remaining,
        )

    async def resend(
        self,
        session_id: str,
        channels: Optional[ChannelNames] = None,
    ) -> ResendResult:
        """
        Redeliver the existing code of a pending session.

        Args:
            session_id: Session to resend
            channels: Channels to use; defaults to the session's own

        Raises:
            SessionNotFound: Unknown session id
            AlreadyVerified: Session already verified
            SessionExpired: Session past its expiry
        """
        try:
            async with self._store.lock(session_id):
                session = self._store.get(session_id)
                if session is None:
                    raise SessionNotFound(session_id)
                if session.is_verified:
                    raise AlreadyVerified(session_id)
                if session.is_expired_at(self.clock.now()):
                    raise SessionExpired(session_id)

                channel_names = _normalize_channels(session.channels if channels is None else channels)
                logger.info("OTP resend requested", session_id=session_id, channels=channel_names)
                results = await self._deliver_all(session, channel_names)
        finally:
            self._store.release(session_id)

        return ResendResult(session_id=session_id, channels=results)

    def get_session_status(self, session_id: str) -> Optional[SessionStatusRecord]:
        """
        Read-only view of a session.

        Returns:
            SessionStatusRecord, or None if the session does not exist
        """
        session = self._store.get(session_id)
        if session is None:
            return None

        now = self.clock.now()
        max_attempts = self.config.max_attempts
        return SessionStatusRecord(
            session_id=session.session_id,
            identifier=session.identifier,
            channels=list(session.channels),
            created_at=session.created_at,
            expires_at=session.expires_at,
            verified=session.is_verified,
            verified_at=session.verified_at,
            attempts=session.attempts,
            max_attempts=max_attempts,
            attempts_remaining=max(0, max_attempts - session.attempts),
            is_expired=session.is_expired_at(now),
            status=session.state_at(now, max_attempts),
        )

    async def cleanup_expired_sessions(self) -> int:
        """
        Remove unverified sessions past their expiry.

        Returns:
            Number of sessions removed
        """
        cleaned = 0
        candidates = [
            s.session_id for s in self._store
            if not s.is_verified and s.is_expired_at(self.clock.now())
        ]

        for session_id in candidates:
            try:
                async with self._store.lock(session_id):
                    # Re-check under the lock; the session may have changed meanwhile
                    session = self._store.get(session_id)
                    if session and not session.is_verified and session.is_expired_at(self.clock.now()):
                        self._store.delete(session_id)
                        cleaned += 1
            finally:
                self._store.release(session_id)

        if cleaned:
            self.metrics.sessions_cleaned(cleaned)
            logger.info("Cleaned up expired OTP sessions", count=cleaned)
        return cleaned

    def get_stats(self) -> SessionStats:
        """Classify stored sessions as verified, expired or active."""
        now = self.clock.now()
        active = expired = verified = 0

        for session in self._store:
            if session.is_verified:
                verified += 1
            elif session.is_expired_at(now):
                expired += 1
            else:
                active += 1

        return SessionStats(
            total_sessions=active + expired + verified,
            active_sessions=active,
            expired_sessions=expired,
            verified_sessions=verified,
            channels=self.channels.names(),
            config=self.config.summary(),
        )

    async def close(self) -> None:
        await self.channels.close_all()
