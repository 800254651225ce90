"""
Tests for the FastAPI adapter.
"""

import pytest
from fastapi.testclient import TestClient

from smsly_otp.api import create_app
from smsly_otp.channels import ChannelRegistry
from smsly_otp.config import OTPConfig
from smsly_otp.manager import OTPSessionManager

from helpers import RecordingChannel


@pytest.fixture
def sms_channel():
    return RecordingChannel("sms")


@pytest.fixture
def otp_manager(sms_channel):
    return OTPSessionManager(OTPConfig(max_attempts=2), ChannelRegistry([sms_channel]))


@pytest.fixture
def client(otp_manager):
    return TestClient(create_app(manager=otp_manager))


class TestGenerateEndpoint:
    def test_code_hidden_by_default(self, client, sms_channel):
        response = client.post("/otp/generate", json={"identifier": "+14155551234", "channels": "sms"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert "code" not in data
        assert data["session_id"].startswith("otp_")
        assert data["channels"][0]["channel"] == "sms"
        assert len(sms_channel.sent) == 1

    def test_code_exposed_when_enabled(self, otp_manager):
        client = TestClient(create_app(manager=otp_manager, expose_code=True))

        data = client.post("/otp/generate", json={"identifier": "+14155551234"}).json()

        assert len(data["code"]) == 6

    def test_missing_identifier(self, client):
        response = client.post("/otp/generate", json={"channels": ["sms"]})
        assert response.status_code == 422

    def test_empty_channel_list(self, client):
        response = client.post("/otp/generate", json={"identifier": "+14155551234", "channels": []})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"


class TestVerifyEndpoint:
    def test_verify_flow(self, client, sms_channel):
        session_id = client.post("/otp/generate", json={"identifier": "+14155551234"}).json()["session_id"]
        code = sms_channel.sent[0]["code"]

        wrong = client.post("/otp/verify", json={"session_id": session_id, "otp": "000000"}).json()
        assert wrong == {
            "success": False,
            "error": "Invalid OTP code",
            "code": "INVALID_CODE",
            "attempts_remaining": 1,
        }

        ok = client.post("/otp/verify", json={"session_id": session_id, "otp": code}).json()
        assert ok["success"] is True
        assert ok["attempts_used"] == 2

        replay = client.post("/otp/verify", json={"session_id": session_id, "otp": code}).json()
        assert replay["code"] == "ALREADY_USED"

    def test_unknown_session(self, client):
        data = client.post("/otp/verify", json={"session_id": "otp_missing", "otp": "123456"}).json()
        assert data["code"] == "INVALID_SESSION"

    def test_lone_surrogate_code(self, client):
        """An escaped lone surrogate in JSON is a wrong code, not a server error."""
        session_id = client.post("/otp/generate", json={"identifier": "+14155551234"}).json()["session_id"]
        body = '{"session_id": "' + session_id + '", "otp": "\\ud800"}'

        response = client.post(
            "/otp/verify",
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json()["code"] == "INVALID_CODE"
        assert response.json()["attempts_remaining"] == 1


class TestResendEndpoint:
    def test_resend(self, client, sms_channel):
        session_id = client.post("/otp/generate", json={"identifier": "+14155551234"}).json()["session_id"]

        response = client.post("/otp/resend", json={"session_id": session_id})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert sms_channel.sent[0]["code"] == sms_channel.sent[1]["code"]

    def test_resend_unknown(self, client):
        response = client.post("/otp/resend", json={"session_id": "otp_missing"})

        assert response.status_code == 404
        assert response.json()["code"] == "SESSION_NOT_FOUND"

    def test_resend_verified(self, client, sms_channel):
        session_id = client.post("/otp/generate", json={"identifier": "+14155551234"}).json()["session_id"]
        client.post("/otp/verify", json={"session_id": session_id, "otp": sms_channel.sent[0]["code"]})

        response = client.post("/otp/resend", json={"session_id": session_id})

        assert response.status_code == 409
        assert response.json()["code"] == "ALREADY_VERIFIED"


class TestSessionEndpoints:
    def test_session_status(self, client):
        session_id = client.post("/otp/generate", json={"identifier": "+14155551234"}).json()["session_id"]

        data = client.get(f"/otp/session/{session_id}").json()

        assert data["exists"] is True
        assert data["status"] == "pending"
        assert data["attempts_remaining"] == 2
        assert "code" not in data

    def test_session_not_found(self, client):
        response = client.get("/otp/session/otp_missing")

        assert response.status_code == 404
        assert response.json()["exists"] is False

    def test_cleanup_and_stats(self, client):
        client.post("/otp/generate", json={"identifier": "+14155551234"})

        cleanup = client.post("/otp/cleanup").json()
        stats = client.get("/otp/stats").json()

        assert cleanup["success"] is True
        assert cleanup["cleaned_sessions"] == 0
        assert stats["total_sessions"] == 1
        assert stats["active_sessions"] == 1
        assert stats["config"]["max_attempts"] == 2

    def test_metrics(self, client):
        client.post("/otp/generate", json={"identifier": "+14155551234"})

        response = client.get("/otp/metrics")

        assert response.status_code == 200
        assert "otp_sessions_created_total" in response.text


class TestHealth:
    def test_health_runs_sweeper(self, otp_manager):
        with TestClient(create_app(manager=otp_manager)) as client:
            data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["sweeper_running"] is True
