"""
Keychain repository and sources
"""
import asyncio
import tomllib
from pathlib import Path
from typing import Protocol

from pydantic import SecretBytes, SecretStr

from api.validators import validate_keychain
from core.errors import ConfigError
from core.logger import logger
from signing.entities import KeyRecord, Keychain


class KeychainSource(Protocol):
    """Where the keychain TOML text comes from (selected once at startup)"""

    async def read(self) -> str:
        ...


class InlineKeychainSource:
    """Keychain TOML passed as a value (KEYCHAIN environment variable)"""

    def __init__(self, content: str):
        self.content = content

    async def read(self) -> str:
        return self.content

    def __repr__(self) -> str:
        return "InlineKeychainSource()"


class FileKeychainSource:
    """Keychain TOML file on disk. A missing file means an empty keychain."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def read(self) -> str:
        try:
            return await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        except FileNotFoundError:
            logger.warning(f"⚠️  Keychain file {self.path} not found, keychain is empty")
            return ""
        except OSError as e:
            raise ConfigError(f"Cannot read keychain file {self.path}: {e.strerror}") from None

    def __repr__(self) -> str:
        return f"FileKeychainSource({str(self.path)!r})"


def parse_keychain(content: str) -> Keychain:
    """
    Parse keychain TOML text into a Keychain

    Args:
        content: TOML document

    Returns:
        Validated keychain

    Raises:
        ConfigError: On syntax or schema errors
    """
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid keychain TOML: {e}") from None

    entries = validate_keychain(data)

    return Keychain({
        key_id: KeyRecord(
            id=key_id,
            secret=SecretBytes(entry.secret.encode("utf-8")),
            mnemonic=SecretStr(entry.mnemonic),
            passphrase=SecretStr(entry.passphrase) if entry.passphrase is not None else None,
            ip_allow_list=tuple(entry.get_ip_list()),
        )
        for key_id, entry in entries.items()
    })


class KeychainRepository:
    """Repository for configured signing keys"""

    def __init__(self, source: KeychainSource):
        self.source = source

    async def load(self) -> Keychain:
        """
        Read and validate the keychain

        Raises:
            ConfigError: If the source cannot be read or is invalid
        """
        content = await self.source.read()
        keychain = parse_keychain(content)

        logger.info(f"🔑 Keychain loaded from {self.source!r}: {len(keychain)} key(s)")
        return keychain
