"""
Use cases for signing operations
"""
from signing.entities import AuthenticatedRequestContext, parse_platform
from signing.services import PlatformDispatcher, Signer
from core.logger import logger


def _build_signer(
    dispatcher: PlatformDispatcher,
    context: AuthenticatedRequestContext,
    platform: str
) -> Signer:
    # Platform is validated here, i.e. only after authentication succeeded
    variant = parse_platform(platform)
    key = context.key
    return dispatcher.resolve_signer(
        variant,
        key.mnemonic.get_secret_value(),
        key.passphrase.get_secret_value() if key.passphrase is not None else None
    )


class DeriveAddressUseCase:
    """Use case for the read path: address of a key on a platform"""

    def __init__(self, dispatcher: PlatformDispatcher):
        self.dispatcher = dispatcher

    async def execute(self, context: AuthenticatedRequestContext, platform: str) -> str:
        """
        Derive address

        Returns:
            Address as text
        """
        signer = _build_signer(self.dispatcher, context, platform)
        address = signer.address

        logger.info(f"📍 Address derived: key={context.key.id}, platform={platform.upper()}, address={address}")
        return address


class SignTransactionUseCase:
    """
    Use case for the write path: sign the raw body

    The body that was authenticated is passed to the signer unmodified and the
    signer output is returned unmodified.
    """

    def __init__(self, dispatcher: PlatformDispatcher):
        self.dispatcher = dispatcher

    async def execute(self, context: AuthenticatedRequestContext, platform: str) -> bytes:
        """
        Sign transaction

        Returns:
            Serialized signed transaction
        """
        logger.info(
            f"📥 Signature request: "
            f"key={context.key.id}, "
            f"platform={platform.upper()}, "
            f"size={len(context.body)} bytes"
        )

        signer = _build_signer(self.dispatcher, context, platform)
        signed_transaction = signer.sign_transaction(context.body)

        logger.info(f"✅ Transaction signed: key={context.key.id}, platform={platform.upper()}")
        return signed_transaction
