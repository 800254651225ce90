"""
Tests for OTPConfig.
"""

import pytest

from smsly_otp.config import OTPConfig
from smsly_otp.errors import ConfigurationError


class TestOTPConfig:
    def test_defaults(self):
        config = OTPConfig()

        assert config.otp_length == 6
        assert config.expiry_minutes == 5
        assert config.max_attempts == 3
        assert config.expiry_seconds == 300
        assert config.cleanup_interval_seconds == 300
        assert config.default_channels == ("sms",)

    @pytest.mark.parametrize("kwargs", [
        {"otp_length": 0},
        {"otp_length": "6"},
        {"max_attempts": 0},
        {"max_attempts": True},
        {"expiry_minutes": 0},
        {"expiry_minutes": -1.5},
        {"expiry_minutes": float("nan")},
        {"expiry_minutes": float("inf")},
        {"expiry_minutes": 10 ** 12},
        {"cleanup_interval_seconds": 0},
        {"cleanup_interval_seconds": float("nan")},
        {"cleanup_interval_seconds": float("inf")},
        {"cleanup_interval_seconds": "300"},
        {"default_channels": ()},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            OTPConfig(**kwargs)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            OTPConfig(otp_length=-1)

    def test_channels_normalized(self):
        config = OTPConfig(default_channels=(" SMS ", "Email"))
        assert config.default_channels == ("sms", "email")

    def test_single_channel_string(self):
        """A bare channel name is one channel, not a sequence of letters."""
        assert OTPConfig(default_channels="SMS").default_channels == ("sms",)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OTP_LENGTH", "8")
        monkeypatch.setenv("OTP_EXPIRY_MINUTES", "2.5")
        monkeypatch.setenv("OTP_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("OTP_ALPHANUMERIC", "true")
        monkeypatch.setenv("OTP_DEFAULT_CHANNELS", "email,push")

        config = OTPConfig.from_env(channels={"sms": {"provider": "Acme"}})

        assert config.otp_length == 8
        assert config.expiry_seconds == 150
        assert config.max_attempts == 5
        assert config.alphanumeric is True
        assert config.default_channels == ("email", "push")
        assert config.channels == {"sms": {"provider": "Acme"}}

    def test_from_env_invalid(self, monkeypatch):
        monkeypatch.setenv("OTP_LENGTH", "six")
        with pytest.raises(ConfigurationError):
            OTPConfig.from_env()

    @pytest.mark.parametrize("name,value", [
        ("OTP_EXPIRY_MINUTES", "nan"),
        ("OTP_EXPIRY_MINUTES", "inf"),
        ("OTP_CLEANUP_INTERVAL_SECONDS", "nan"),
    ])
    def test_from_env_non_finite(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ConfigurationError):
            OTPConfig.from_env()

    def test_summary(self):
        assert OTPConfig(max_attempts=4).summary() == {
            "otp_length": 6,
            "expiry_minutes": 5,
            "max_attempts": 4,
        }
