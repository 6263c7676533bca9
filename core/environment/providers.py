from dishka import Provider, Scope, provide, FromComponent
from typing import Annotated

from core.environment.config import Settings
from core.logger import logger
from signing.repositories import FileKeychainSource, InlineKeychainSource, KeychainSource


class EnvironmentProvider(Provider):
    component = "environment"
    scope = Scope.APP

    def __init__(self, settings: Settings | None = None):
        super().__init__()
        self._settings = settings

    @provide
    def get_environment(self) -> Settings:
        return self._settings or Settings()

    @provide
    def get_keychain_source(
        self,
        conf: Annotated[Settings, FromComponent("environment")]
    ) -> KeychainSource:
        """Select keychain source once: inline KEYCHAIN value wins over the file"""
        if conf.keychain is not None:
            logger.info("🔑 Keychain source: KEYCHAIN environment value")
            return InlineKeychainSource(conf.keychain)

        logger.info(f"🔑 Keychain source: file {conf.keychain_file}")
        return FileKeychainSource(conf.keychain_file)
