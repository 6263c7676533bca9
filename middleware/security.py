"""
Access Control Middleware
=========================

Every /{key}/... request goes through, in order:

1. Key lookup             -> 404 Key not found
2. X-SIG header present   -> 401 No signature
3. IP allow-list          -> 403 Restricted IP
4. HMAC over raw body     -> 403 Wrong signature

On success the verified key and the EXACT body bytes are put on
request.state.auth for the route handler.
"""
from fastapi import Request
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Sequence

from core.errors import AccessRejected, KeyNotFound, NoSignature, RestrictedIP, WrongSignature
from core.logger import logger
from core.security import SIGNATURE_HEADER, verify_signature
from signing.entities import AuthenticatedRequestContext, Keychain


def get_client_ip(request: Request) -> str:
    """
    Resolve caller address

    Order: transport connection address, first X-Forwarded-For entry,
    X-Real-IP, empty string.
    """
    if request.client and request.client.host:
        return request.client.host

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take first IP (original client)
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return ""


def check_ip_whitelist(client_ip: str, allowed_ips: Sequence[str]) -> bool:
    """
    Check if client IP is in whitelist

    Args:
        client_ip: Client IP address
        allowed_ips: Allowed IPs, exact string match (empty = allow all)

    Returns:
        True if allowed, False otherwise
    """
    # Empty whitelist = allow all
    if not allowed_ips:
        return True

    return client_ip in allowed_ips


def get_key_id(request: Request) -> str | None:
    """Key id for /{key}/... paths, None for everything else"""
    segments = request.url.path.strip("/").split("/")
    if len(segments) < 2 or not segments[0]:
        return None
    return segments[0]


async def authenticate(request: Request, keychain: Keychain, key_id: str) -> AuthenticatedRequestContext:
    """
    Run the access control pipeline for one request

    Raises:
        AccessRejected: With the status code of the failed step
    """
    key = keychain.get(key_id)
    if key is None:
        raise KeyNotFound()

    signature = request.headers.get(SIGNATURE_HEADER)
    if not signature:
        raise NoSignature()

    client_ip = get_client_ip(request)
    if not check_ip_whitelist(client_ip, key.ip_allow_list):
        logger.error(
            f"🚨 IP NOT WHITELISTED!\n"
            f"Key: {key.id}\n"
            f"Client IP: {client_ip}\n"
            f"Allowed IPs: {list(key.ip_allow_list)}"
        )
        raise RestrictedIP()

    body = await request.body()
    if not verify_signature(key.secret.get_secret_value(), body, signature):
        raise WrongSignature()

    return AuthenticatedRequestContext(key=key, body=body)


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request signature authentication and IP whitelisting

    Requires for every /{key}/... path:
    - known key id
    - X-SIG header with base64(HMAC-SHA256(secret, body))
    - caller IP in the key's whitelist (if the key has one)
    """

    async def dispatch(self, request: Request, call_next):
        key_id = get_key_id(request)
        if key_id is None:
            return await call_next(request)

        container = request.app.state.dishka_container
        keychain = await container.get(Keychain, component="signing")

        try:
            request.state.auth = await authenticate(request, keychain, key_id)
        except AccessRejected as e:
            logger.warning(
                f"⚠️  Rejected {request.method} {request.url.path}: "
                f"{e.message} (ip={get_client_ip(request) or 'unknown'})"
            )
            return PlainTextResponse(f"TTS: {e.message}", status_code=e.status_code)

        logger.info(f"✅ Authorized key={key_id} for {request.method} {request.url.path}")
        return await call_next(request)
