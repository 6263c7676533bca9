"""
Entity models for Taoli Tools Signer
"""
from collections.abc import Iterator, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, SecretBytes, SecretStr

from core.errors import ValidationError


class Platform(str, Enum):
    """Supported blockchain families"""
    EVM = "EVM"
    SVM = "SVM"


def parse_platform(value: str) -> Platform:
    """
    Parse platform identifier from the route (case-insensitive)

    Raises:
        ValidationError: If platform is not supported
    """
    try:
        return Platform(value.upper())
    except ValueError:
        raise ValidationError(f"Unsupported platform: {value}") from None


class KeyRecord(BaseModel):
    """Entity for one configured key"""
    model_config = ConfigDict(frozen=True)

    id: str
    secret: SecretBytes
    mnemonic: SecretStr
    passphrase: SecretStr | None = None
    ip_allow_list: Tuple[str, ...] = ()


class Keychain(Mapping):
    """
    Read-only mapping key id -> KeyRecord

    Built once from the configuration source, never mutated afterwards.
    """

    def __init__(self, records: Dict[str, KeyRecord] | None = None):
        self._records = MappingProxyType(dict(records or {}))

    def __getitem__(self, key_id: str) -> KeyRecord:
        return self._records[key_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"Keychain({sorted(self._records)})"


class AuthenticatedRequestContext(BaseModel):
    """Key and exact body bytes of a request whose signature was verified"""
    model_config = ConfigDict(frozen=True)

    key: KeyRecord
    body: bytes
