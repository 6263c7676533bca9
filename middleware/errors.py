"""
Error Mapper Middleware
=======================

Last-resort translator around the whole request tree:
- GatewayError  -> 500 "TTS: <message>"
- anything else -> 500 "TTS: Server error"
"""
from fastapi import Request
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.errors import GatewayError
from core.logger import logger


class ErrorMapperMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except GatewayError as e:
            logger.error(f"❌ {type(e).__name__} on {request.method} {request.url.path}: {e.message}")
            return PlainTextResponse(f"TTS: {e.message}", status_code=500)
        except Exception:
            logger.error(f"❌ Unexpected error on {request.method} {request.url.path}", exc_info=True)
            return PlainTextResponse("TTS: Server error", status_code=500)
