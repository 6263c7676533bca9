"""
Keychain Validators
===================

Schema for keychain.toml:

    [alice]
    secret = "s3cr3t"
    mnemonic = "test test ... junk"
    passphrase = "optional"
    ip = ["203.0.113.7"]     # or a single string, or omitted

⚠️  Error messages MUST NOT echo input values (they contain secrets)
"""
from pydantic import BaseModel, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing import Dict, List

from core.errors import ConfigError


class KeyEntrySchema(BaseModel):
    """One [key] table of the keychain"""

    secret: str = Field(min_length=1, description="HMAC secret for X-SIG")
    mnemonic: str = Field(min_length=1, description="BIP-39 mnemonic")
    passphrase: str | None = Field(default=None, description="BIP-39 passphrase")
    ip: str | List[str] | None = Field(default=None, description="Allowed caller IP(s)")

    @field_validator('ip')
    @classmethod
    def validate_ip(cls, v: str | List[str] | None) -> List[str]:
        """Normalize single address / list / nothing into a list"""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return list(v)

    def get_ip_list(self) -> List[str]:
        """Allowed IPs (empty list = allow all)"""
        return list(self.ip or [])


keychain_adapter = TypeAdapter(Dict[str, KeyEntrySchema])


def describe_errors(error: PydanticValidationError) -> str:
    """
    Build a safe description of schema errors

    Only locations and messages are used, never the input values.
    """
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def validate_keychain(data: dict) -> Dict[str, KeyEntrySchema]:
    """
    Validate parsed TOML against the keychain schema

    Args:
        data: Parsed TOML document

    Returns:
        Mapping key id -> validated entry

    Raises:
        ConfigError: If any entry is invalid
    """
    try:
        return keychain_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid keychain: {describe_errors(e)}") from None
