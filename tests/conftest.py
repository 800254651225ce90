"""
Shared fixtures for smsly-otp tests.
"""

import pytest

from smsly_otp.channels import ChannelRegistry
from smsly_otp.clock import ManualClock
from smsly_otp.config import OTPConfig
from smsly_otp.manager import OTPSessionManager

from helpers import FailingChannel, RecordingChannel


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sms():
    return RecordingChannel("sms", cost=0.05)


@pytest.fixture
def email():
    return RecordingChannel("email", cost=0.01)


@pytest.fixture
def failing():
    return FailingChannel("email")


@pytest.fixture
def config():
    return OTPConfig(otp_length=6, expiry_minutes=5, max_attempts=3)


@pytest.fixture
def manager(config, sms, email, clock):
    return OTPSessionManager(config, ChannelRegistry([sms, email]), clock=clock)


@pytest.fixture
def make_manager(clock):
    """Factory for managers with custom config and channels."""
    def _make(channels=None, **config_kwargs):
        registry = ChannelRegistry(channels or [RecordingChannel("sms")])
        return OTPSessionManager(OTPConfig(**config_kwargs), registry, clock=clock)
    return _make
