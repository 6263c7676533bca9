"""
Test fixtures for Taoli Tools Signer
"""
import pytest
from fastapi.testclient import TestClient

from core.container import build_container
from core.environment.config import Settings
from core.security import compute_signature
from main import create_app


MNEMONIC = "test test test test test test test test test test test junk"

# First account of the mnemonic above (m/44'/60'/0'/0/0)
EVM_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

KEYCHAIN_TOML = f"""
[alice]
secret = "s3cr3t"
mnemonic = "{MNEMONIC}"

[bob]
secret = "b0b-secret"
mnemonic = "{MNEMONIC}"
passphrase = "extra words"
ip = "10.1.2.3"
"""

# TestClient connects from host "testclient"
ALLOWED_KEYCHAIN_TOML = f"""
[carol]
secret = "c4r0l"
mnemonic = "{MNEMONIC}"
ip = ["10.1.2.3", "testclient"]
"""


def sign(secret: str, body: bytes = b"") -> dict:
    """X-SIG header for body"""
    return {"X-SIG": compute_signature(secret.encode(), body)}


@pytest.fixture
def make_client():
    """Factory: TestClient for an app serving the given keychain TOML"""
    clients = []

    def _make(keychain: str = KEYCHAIN_TOML) -> TestClient:
        settings = Settings(keychain=keychain, environment="test")
        app = create_app(build_container(settings), settings)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    """Client for the default two-key keychain"""
    return make_client()
