from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider

from core.environment.config import Settings
from core.environment.providers import EnvironmentProvider
from signing.providers import SigningProvider


def build_container(settings: Settings | None = None) -> AsyncContainer:
    """Composition root: settings and keychain source are resolved here, once"""
    return make_async_container(
        FastapiProvider(),
        EnvironmentProvider(settings),
        SigningProvider()
    )


container = build_container()
