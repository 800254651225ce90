"""
Test channels shared across test modules.
"""

import asyncio
from typing import Any, Dict, List, Optional

from smsly_otp.channels import BaseChannel, DeliveryResult
from smsly_otp.errors import ChannelDeliveryFailed


class RecordingChannel(BaseChannel):
    """Channel that remembers every (identifier, code, options) it was given."""

    def __init__(self, name: str = "sms", cost: float = 0.05):
        super().__init__({"cost": cost})
        self.name = name
        self.sent: List[Dict[str, Any]] = []

    async def send(self, identifier, code, options=None) -> DeliveryResult:
        self.sent.append({"identifier": identifier, "code": code, "options": options})
        return self._record(identifier)


class FailingChannel(BaseChannel):
    """Channel whose transport always fails."""

    def __init__(self, name: str = "email"):
        super().__init__()
        self.name = name
        self.calls = 0

    async def send(self, identifier, code, options=None) -> DeliveryResult:
        self.calls += 1
        raise ChannelDeliveryFailed(self.name, "Provider unavailable")


class GatedChannel(BaseChannel):
    """Channel that completes only once `gate` is set."""

    def __init__(self, name: str, gate: asyncio.Event, opens: Optional[asyncio.Event] = None):
        super().__init__()
        self.name = name
        self.gate = gate
        self.opens = opens

    async def send(self, identifier, code, options=None) -> DeliveryResult:
        if self.opens is not None:
            self.opens.set()
        await asyncio.wait_for(self.gate.wait(), timeout=1.0)
        return self._record(identifier)
