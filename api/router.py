"""
API Router
==========

Endpoints:
1. GET  /                  - Number of configured keys (no auth)
2. GET  /{key}/{platform}  - Derived address (plain text)
3. POST /{key}/{platform}  - Sign raw unsigned transaction (raw bytes in, raw bytes out)

Authentication for 2 and 3 is done by SecurityMiddleware before the handler
runs. Handlers only see request.state.auth.

⚠️  DO NOT ADD MORE ENDPOINTS WITHOUT SECURITY REVIEW
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response
from dishka.integrations.fastapi import inject
from dishka import FromComponent
from typing import Annotated

from signing.entities import AuthenticatedRequestContext, Keychain
from signing.usecases import DeriveAddressUseCase, SignTransactionUseCase


router = APIRouter()


def get_auth_context(request: Request) -> AuthenticatedRequestContext:
    """Authenticated context set by SecurityMiddleware"""
    context = getattr(request.state, "auth", None)
    if context is None:
        # Route reached without the middleware: never serve it
        raise RuntimeError("Request was not authenticated")
    return context


@router.get("/", response_class=PlainTextResponse)
@inject
async def keychain_info(
    keychain: Annotated[Keychain, FromComponent("signing")]
):
    """Number of configured keys"""
    return f"KEYCHAIN: {len(keychain)}"


@router.get("/{key}/{platform}", response_class=PlainTextResponse)
@inject
async def get_address(
    platform: str,
    context: Annotated[AuthenticatedRequestContext, Depends(get_auth_context)],
    usecase: Annotated[DeriveAddressUseCase, FromComponent("signing")]
):
    """
    Derive address of the key on the platform

    Args:
        platform: evm or svm (case-insensitive)

    Returns:
        Address as plain text
    """
    return await usecase.execute(context, platform)


@router.post("/{key}/{platform}")
@inject
async def sign_transaction(
    platform: str,
    context: Annotated[AuthenticatedRequestContext, Depends(get_auth_context)],
    usecase: Annotated[SignTransactionUseCase, FromComponent("signing")]
):
    """
    Sign raw unsigned transaction from the request body

    Security:
    - Body bytes are the ones verified by X-SIG, never re-encoded

    Returns:
        Raw signed transaction bytes
    """
    signed_transaction = await usecase.execute(context, platform)
    return Response(content=signed_transaction, media_type="application/octet-stream")
