"""
Channel Capability
==================
Base class and registry for OTP delivery channels.
"""

import uuid
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
import structlog

from ..errors import ChannelDeliveryFailed

logger = structlog.get_logger(__name__)

# Most recent deliveries kept per channel for get_delivery_status
DEFAULT_MAX_TRACKED_DELIVERIES = 10_000


class DeliveryStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass
class DeliveryResult:
    """Result of a single channel delivery."""
    success: bool
    channel: str
    delivery_id: Optional[str] = None
    cost: float = 0.0
    recipient: Optional[str] = None
    sent_at: Optional[datetime] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def failed(cls, channel: str, error: str, error_code: str = ChannelDeliveryFailed.code) -> "DeliveryResult":
        return cls(success=False, channel=channel, error=error, error_code=error_code)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "channel": self.channel,
            "delivery_id": self.delivery_id,
            "cost": self.cost,
            "recipient": self.recipient,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "error": self.error,
            "error_code": self.error_code,
        }


def generate_delivery_id(channel: str) -> str:
    """Correlation id for a single channel delivery."""
    return f"{channel}_{uuid.uuid4().hex[:16]}"


def mask_identifier(identifier: str) -> str:
    """
    Mask an identifier for logs.

    Keeps the domain of email addresses and the last four characters
    of everything else.
    """
    if not identifier:
        return ""
    if "@" in identifier:
        local, _, domain = identifier.partition("@")
        return f"{local[:1]}***@{domain}"
    if len(identifier) <= 4:
        return "****"
    return f"****{identifier[-4:]}"


class BaseChannel(ABC):
    """
    Abstract base class for delivery channels.

    The session manager only relies on `name` and `send`. New media are
    added by subclassing and registering an instance.
    """

    name: str = "base"
    cost: float = 0.0

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            config: Channel-specific config block, passed through opaquely
        """
        self.config = dict(config or {})
        self.cost = float(self.config.get("cost", self.cost))
        self.max_tracked_deliveries = int(
            self.config.get("max_tracked_deliveries", DEFAULT_MAX_TRACKED_DELIVERIES)
        )
        self._deliveries: "OrderedDict[str, DeliveryResult]" = OrderedDict()

    @abstractmethod
    async def send(
        self,
        identifier: str,
        code: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> DeliveryResult:
        """
        Deliver a code.

        Args:
            identifier: Destination (phone, email, device token)
            code: The OTP code
            options: Channel-specific options

        Returns:
            DeliveryResult

        Raises:
            ChannelDeliveryFailed: If the code cannot be delivered
        """

    def _record(self, identifier: str) -> DeliveryResult:
        """Build and remember a successful delivery."""
        result = DeliveryResult(
            success=True,
            channel=self.name,
            delivery_id=generate_delivery_id(self.name),
            cost=self.cost,
            recipient=identifier,
            sent_at=datetime.now(timezone.utc),
        )
        self._remember(result)
        return result

    def _remember(self, result: DeliveryResult) -> None:
        """Keep a delivery for status lookups, evicting the oldest past the cap."""
        self._deliveries[result.delivery_id] = result
        while len(self._deliveries) > self.max_tracked_deliveries:
            self._deliveries.popitem(last=False)

    async def get_delivery_status(self, delivery_id: str) -> DeliveryStatus:
        """Status of a delivery made by this channel instance."""
        result = self._deliveries.get(delivery_id)
        if result is None:
            return DeliveryStatus.UNKNOWN
        return DeliveryStatus.SENT if result.success else DeliveryStatus.FAILED

    async def close(self) -> None:
        """Release resources. Default is a no-op."""


class ChannelRegistry:
    """Name to channel lookup used by the session manager."""

    def __init__(self, channels: Optional[List[BaseChannel]] = None):
        self._channels: Dict[str, BaseChannel] = {}
        for channel in channels or []:
            self.register(channel)

    def register(self, channel: BaseChannel) -> None:
        """Register a channel under its lower-cased name."""
        self._channels[channel.name.lower()] = channel
        logger.info("Channel registered", channel=channel.name)

    def get(self, name: str) -> BaseChannel:
        """Get a channel by name."""
        channel = self._channels.get(name.lower())
        if not channel:
            raise ChannelDeliveryFailed(name, f"Unknown channel: {name}")
        return channel

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._channels

    def names(self) -> List[str]:
        """List all registered channel names."""
        return list(self._channels.keys())

    async def close_all(self) -> None:
        """Close all registered channels."""
        for channel in self._channels.values():
            await channel.close()
