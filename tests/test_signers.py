import pytest
import rlp
from eth_account import Account
from solders.hash import Hash
from solders.message import MessageV0, to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from core.errors import PlatformSigningError, ValidationError
from signing.entities import Platform, parse_platform
from signing.services import (
    EVM_DERIVATION_PATH, SIGNER_FACTORIES, EVMSigner, PlatformDispatcher, SVMSigner,
    decode_unsigned_evm_transaction
)

from conftest import EVM_ADDRESS, MNEMONIC


RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


def eip1559_unsigned(nonce: int = 0) -> bytes:
    return b"\x02" + rlp.encode([
        1, nonce, 10**9, 2 * 10**9, 21000, bytes.fromhex(RECIPIENT[2:]), 10**15, b"", []
    ])


def svm_unsigned(payer: Pubkey) -> bytes:
    instruction = transfer(TransferParams(from_pubkey=payer, to_pubkey=Pubkey.new_unique(), lamports=1000))
    message = MessageV0.try_compile(payer, [instruction], [], Hash.default())
    return bytes(VersionedTransaction.populate(message, [Signature.default()]))


def test_parse_platform_is_case_insensitive():
    assert parse_platform("evm") is Platform.EVM
    assert parse_platform("SVM") is Platform.SVM


def test_parse_platform_rejects_unknown():
    with pytest.raises(ValidationError, match="Unsupported platform: btc"):
        parse_platform("btc")


def test_every_platform_has_a_signer():
    assert set(SIGNER_FACTORIES) == set(Platform)


def test_evm_address_is_deterministic():
    assert EVMSigner(MNEMONIC).address == EVM_ADDRESS
    assert EVMSigner(MNEMONIC, "extra words").address != EVM_ADDRESS


def test_svm_address_is_deterministic():
    address = SVMSigner(MNEMONIC).address
    assert address == SVMSigner(MNEMONIC).address
    assert len(bytes(Pubkey.from_string(address))) == 32
    assert SVMSigner(MNEMONIC, "extra words").address != address


def test_invalid_mnemonic():
    with pytest.raises(PlatformSigningError):
        EVMSigner("not a valid mnemonic")
    with pytest.raises(PlatformSigningError):
        SVMSigner("not a valid mnemonic")


def test_dispatcher_builds_fresh_signers():
    dispatcher = PlatformDispatcher()
    first = dispatcher.resolve_signer(Platform.EVM, MNEMONIC)
    second = dispatcher.resolve_signer(Platform.EVM, MNEMONIC)

    assert isinstance(first, EVMSigner)
    assert first is not second
    assert isinstance(dispatcher.resolve_signer(Platform.SVM, MNEMONIC), SVMSigner)


def test_decode_eip1559():
    transaction = decode_unsigned_evm_transaction(eip1559_unsigned(nonce=7))
    assert transaction == {
        "type": 2,
        "chainId": 1,
        "maxPriorityFeePerGas": 10**9,
        "maxFeePerGas": 2 * 10**9,
        "accessList": [],
        "nonce": 7,
        "gas": 21000,
        "value": 10**15,
        "data": b"",
        "to": RECIPIENT,
    }


def test_decode_rejects_unknown_encoding():
    with pytest.raises(PlatformSigningError):
        decode_unsigned_evm_transaction(b"")
    with pytest.raises(PlatformSigningError):
        decode_unsigned_evm_transaction(b"\x05\xc0")
    with pytest.raises(PlatformSigningError):
        decode_unsigned_evm_transaction(rlp.encode([1, 2, 3]))


def test_evm_sign_eip1559():
    signed = EVMSigner(MNEMONIC).sign_transaction(eip1559_unsigned())

    account = Account.from_mnemonic(MNEMONIC, account_path=EVM_DERIVATION_PATH)
    expected = account.sign_transaction({
        "type": 2,
        "chainId": 1,
        "nonce": 0,
        "maxPriorityFeePerGas": 10**9,
        "maxFeePerGas": 2 * 10**9,
        "gas": 21000,
        "to": RECIPIENT,
        "value": 10**15,
        "data": b"",
        "accessList": [],
    })

    assert signed == bytes(expected.raw_transaction)
    assert Account.recover_transaction(signed) == EVM_ADDRESS


def test_evm_sign_legacy_eip155():
    unsigned = rlp.encode([3, 10**9, 21000, bytes.fromhex(RECIPIENT[2:]), 1, b"", 137, 0, 0])
    signed = EVMSigner(MNEMONIC).sign_transaction(unsigned)
    assert Account.recover_transaction(signed) == EVM_ADDRESS


def test_svm_sign():
    signer = SVMSigner(MNEMONIC)
    payer = Pubkey.from_string(signer.address)

    signed = VersionedTransaction.from_bytes(signer.sign_transaction(svm_unsigned(payer)))

    assert signed.signatures[0] != Signature.default()
    assert signed.signatures[0].verify(payer, to_bytes_versioned(signed.message))


def test_svm_sign_requires_key_to_be_signer():
    with pytest.raises(PlatformSigningError, match="not a required signer"):
        SVMSigner(MNEMONIC).sign_transaction(svm_unsigned(Pubkey.new_unique()))


def test_svm_sign_malformed():
    with pytest.raises(PlatformSigningError, match="Malformed"):
        SVMSigner(MNEMONIC).sign_transaction(b"\x01\x02\x03")
