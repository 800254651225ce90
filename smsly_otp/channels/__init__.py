"""
OTP Delivery Channels
=====================
Channel capability interface, registry and built-in channels.
"""

from .base import (
    BaseChannel,
    ChannelRegistry,
    DeliveryResult,
    DeliveryStatus,
    generate_delivery_id,
    mask_identifier,
)
from .sms import SMSChannel, normalize_phone, validate_e164
from .email import EmailChannel
from .push import PushChannel
from .webhook import WebhookChannel

BUILTIN_CHANNELS = {
    "sms": SMSChannel,
    "email": EmailChannel,
    "push": PushChannel,
}


def build_default_registry(config=None) -> ChannelRegistry:
    """
    Registry with the SMS, email and push channels.
    
    Each channel gets its block from `config.channels`. A block under any
    other name with a "url" key becomes a WebhookChannel.
    """
    blocks = dict(config.channels) if config is not None else {}
    registry = ChannelRegistry()
    for name, channel_cls in BUILTIN_CHANNELS.items():
        registry.register(channel_cls(blocks.pop(name, None)))
    for name, block in blocks.items():
        if block.get("url"):
            registry.register(WebhookChannel({"name": name, **block}))
    return registry


__all__ = [
    "BaseChannel",
    "ChannelRegistry",
    "DeliveryResult",
    "DeliveryStatus",
    "generate_delivery_id",
    "mask_identifier",
    "SMSChannel",
    "EmailChannel",
    "PushChannel",
    "WebhookChannel",
    "normalize_phone",
    "validate_e164",
    "BUILTIN_CHANNELS",
    "build_default_registry",
]
