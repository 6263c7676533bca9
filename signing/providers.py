from dishka import Provider, Scope, provide, FromComponent
from typing import Annotated

from signing.entities import Keychain
from signing.repositories import KeychainRepository, KeychainSource
from signing.services import PlatformDispatcher
from signing.usecases import DeriveAddressUseCase, SignTransactionUseCase


class SigningProvider(Provider):
    scope = Scope.REQUEST
    component = "signing"

    @provide(scope=Scope.APP)
    def get_keychain_repository(
        self,
        source: Annotated[KeychainSource, FromComponent("environment")]
    ) -> KeychainRepository:
        """Get keychain repository"""
        return KeychainRepository(source)

    @provide(scope=Scope.APP)
    async def get_keychain(
        self,
        repository: Annotated[KeychainRepository, FromComponent("signing")]
    ) -> Keychain:
        """Get keychain (loaded once, immutable afterwards)"""
        return await repository.load()

    @provide(scope=Scope.APP)
    def get_platform_dispatcher(self) -> PlatformDispatcher:
        """Get platform dispatcher (stateless singleton)"""
        return PlatformDispatcher()

    @provide
    def get_derive_address_usecase(
        self,
        dispatcher: Annotated[PlatformDispatcher, FromComponent("signing")]
    ) -> DeriveAddressUseCase:
        """Get derive address use case"""
        return DeriveAddressUseCase(dispatcher=dispatcher)

    @provide
    def get_sign_transaction_usecase(
        self,
        dispatcher: Annotated[PlatformDispatcher, FromComponent("signing")]
    ) -> SignTransactionUseCase:
        """Get sign transaction use case"""
        return SignTransactionUseCase(dispatcher=dispatcher)
