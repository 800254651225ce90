"""
HTTP Adapter
============
FastAPI routes translating HTTP requests into OTPSessionManager calls.

Usage:
    from smsly_otp.api import create_app
    app = create_app()

The generated code is never included in responses unless the router is
built with `expose_code=True` (local demos only).
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field
import structlog

from .config import OTPConfig
from .errors import AlreadyVerified, ResendError, SessionExpired, SessionNotFound
from .manager import OTPSessionManager
from .sweeper import SessionSweeper

logger = structlog.get_logger(__name__)

RESEND_STATUS_CODES = {
    SessionNotFound: 404,
    AlreadyVerified: 409,
    SessionExpired: 410,
}


class GenerateRequest(BaseModel):
    identifier: str = Field(..., min_length=1)
    channels: Optional[Union[str, List[str]]] = None
    options: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class VerifyRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    otp: str = Field(..., min_length=1)


class ResendRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    channels: Optional[Union[str, List[str]]] = None


def _error(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "code": code},
    )


def create_otp_router(manager: OTPSessionManager, expose_code: bool = False) -> APIRouter:
    """
    Build the /otp routes for a manager.

    Args:
        manager: Session manager backing the routes
        expose_code: Include the generated code in /otp/generate responses
    """
    router = APIRouter(prefix="/otp", tags=["otp"])

    @router.post("/generate")
    async def generate(body: GenerateRequest):
        try:
            result = await manager.generate_and_send(body.identifier, body.channels, body.options)
        except ValueError as e:
            return _error(400, str(e), "INVALID_REQUEST")
        return result.to_dict(include_code=expose_code)

    @router.post("/verify")
    async def verify(body: VerifyRequest):
        result = await manager.verify(body.session_id, body.otp)
        return result.to_dict()

    @router.post("/resend")
    async def resend(body: ResendRequest):
        try:
            result = await manager.resend(body.session_id, body.channels)
        except ResendError as e:
            return _error(RESEND_STATUS_CODES.get(type(e), 400), str(e), e.code)
        except ValueError as e:
            return _error(400, str(e), "INVALID_REQUEST")
        return result.to_dict()

    @router.get("/session/{session_id}")
    async def session_status(session_id: str):
        record = manager.get_session_status(session_id)
        if record is None:
            return JSONResponse(
                status_code=404,
                content={"exists": False, "error": "Session not found"},
            )
        return {"exists": True, **record.to_dict()}

    @router.post("/cleanup")
    async def cleanup():
        cleaned = await manager.cleanup_expired_sessions()
        return {
            "success": True,
            "cleaned_sessions": cleaned,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @router.get("/stats")
    async def stats():
        return manager.get_stats().to_dict()

    @router.get("/metrics", response_class=PlainTextResponse)
    async def metrics():
        return manager.metrics.export_prometheus()

    return router


def create_app(
    config: Optional[OTPConfig] = None,
    manager: Optional[OTPSessionManager] = None,
    expose_code: bool = False,
    service_name: str = "smsly-otp",
) -> FastAPI:
    """
    FastAPI application with the OTP routes, /health, and the cleanup sweeper.

    Args:
        config: Used to build a manager when none is given
        manager: Pre-built manager (tests, custom channels)
        expose_code: See create_otp_router
        service_name: Reported by /health
    """
    manager = manager or OTPSessionManager(config or OTPConfig.from_env())
    sweeper = SessionSweeper(manager)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper.start()
        try:
            yield
        finally:
            await sweeper.stop()
            await manager.close()

    app = FastAPI(title=service_name, lifespan=lifespan)
    app.state.otp_manager = manager
    app.state.otp_sweeper = sweeper
    app.include_router(create_otp_router(manager, expose_code=expose_code))

    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "service": service_name,
            "sweeper_running": sweeper.running,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    logger.info("OTP service app created", service=service_name, expose_code=expose_code)
    return app
