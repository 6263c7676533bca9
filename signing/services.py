"""
Platform Signers
================

Every Platform variant maps to a signer factory. A signer is built from
(mnemonic, passphrase) for ONE request and then dropped; derived keys are
never cached.

EVM: eth-account, BIP-44 path m/44'/60'/0'/0/0
SVM: solders, SLIP-10 ed25519 path m/44'/501'/0'/0'
"""
from typing import Callable, Dict, List, Protocol

import rlp
from rlp.exceptions import DecodingError
from eth_account import Account
from eth_account.hdaccount import seed_from_mnemonic
from eth_utils import big_endian_to_int, to_checksum_address
from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from core.errors import PlatformSigningError
from core.logger import logger
from signing.entities import Platform


Account.enable_unaudited_hdwallet_features()

EVM_DERIVATION_PATH = "m/44'/60'/0'/0/0"
SVM_DERIVATION_PATH = "m/44'/501'/0'/0'"

# EIP-2718 envelope types
ACCESS_LIST_TX_TYPE = 0x01
DYNAMIC_FEE_TX_TYPE = 0x02


class Signer(Protocol):
    """Signing capability of one key on one platform"""

    @property
    def address(self) -> str:
        ...

    def sign_transaction(self, raw: bytes) -> bytes:
        ...


def _decode_access_list(items: List) -> List[Dict]:
    return [
        {
            "address": to_checksum_address(address),
            "storageKeys": ["0x" + key.hex() for key in storage_keys],
        }
        for address, storage_keys in items
    ]


def decode_unsigned_evm_transaction(raw: bytes) -> Dict:
    """
    Decode a serialized UNSIGNED EVM transaction into an eth-account dict

    Supported encodings:
    - legacy RLP [nonce, gasPrice, gas, to, value, data]
    - legacy EIP-155 [nonce, gasPrice, gas, to, value, data, chainId, 0, 0]
    - 0x01 || RLP [chainId, nonce, gasPrice, gas, to, value, data, accessList]
    - 0x02 || RLP [chainId, nonce, maxPriorityFeePerGas, maxFeePerGas, gas, to, value, data, accessList]

    Raises:
        PlatformSigningError: If encoding is not recognized
    """
    if not raw:
        raise PlatformSigningError("Empty EVM transaction")

    try:
        if raw[0] >= 0xC0:
            fields = rlp.decode(raw)
            tx_type = None
        elif raw[0] in (ACCESS_LIST_TX_TYPE, DYNAMIC_FEE_TX_TYPE):
            fields = rlp.decode(raw[1:])
            tx_type = raw[0]
        else:
            raise PlatformSigningError(f"Unsupported EVM transaction type: {raw[0]:#04x}")
    except DecodingError:
        raise PlatformSigningError("Malformed EVM transaction encoding") from None

    if tx_type is None:
        if len(fields) == 6:
            nonce, gas_price, gas, to, value, data = fields
            transaction = {}
        elif len(fields) == 9 and not fields[7] and not fields[8]:
            nonce, gas_price, gas, to, value, data, chain_id = fields[:7]
            transaction = {"chainId": big_endian_to_int(chain_id)}
        else:
            raise PlatformSigningError("Unsupported legacy EVM transaction layout")

        transaction.update({"gasPrice": big_endian_to_int(gas_price)})

    elif tx_type == ACCESS_LIST_TX_TYPE:
        if len(fields) != 8:
            raise PlatformSigningError("Unsupported EIP-2930 transaction layout")
        chain_id, nonce, gas_price, gas, to, value, data, access_list = fields
        transaction = {
            "type": ACCESS_LIST_TX_TYPE,
            "chainId": big_endian_to_int(chain_id),
            "gasPrice": big_endian_to_int(gas_price),
            "accessList": _decode_access_list(access_list),
        }

    else:
        if len(fields) != 9:
            raise PlatformSigningError("Unsupported EIP-1559 transaction layout")
        chain_id, nonce, max_priority_fee, max_fee, gas, to, value, data, access_list = fields
        transaction = {
            "type": DYNAMIC_FEE_TX_TYPE,
            "chainId": big_endian_to_int(chain_id),
            "maxPriorityFeePerGas": big_endian_to_int(max_priority_fee),
            "maxFeePerGas": big_endian_to_int(max_fee),
            "accessList": _decode_access_list(access_list),
        }

    transaction.update({
        "nonce": big_endian_to_int(nonce),
        "gas": big_endian_to_int(gas),
        "value": big_endian_to_int(value),
        "data": bytes(data),
    })
    if to:
        transaction["to"] = to_checksum_address(to)

    return transaction


class EVMSigner:
    """EVM account derived from the key's mnemonic"""

    def __init__(self, mnemonic: str, passphrase: str | None = None):
        try:
            self._account = Account.from_mnemonic(
                mnemonic,
                passphrase=passphrase or "",
                account_path=EVM_DERIVATION_PATH,
            )
        except Exception:
            raise PlatformSigningError("Cannot derive EVM account from mnemonic") from None

    @property
    def address(self) -> str:
        return self._account.address

    def sign_transaction(self, raw: bytes) -> bytes:
        """
        Sign serialized unsigned transaction

        Returns:
            Serialized signed transaction
        """
        transaction = decode_unsigned_evm_transaction(raw)
        try:
            signed = self._account.sign_transaction(transaction)
        except Exception as e:
            raise PlatformSigningError(f"Cannot sign EVM transaction: {type(e).__name__}") from None
        return bytes(signed.raw_transaction)


class SVMSigner:
    """Solana keypair derived from the key's mnemonic"""

    def __init__(self, mnemonic: str, passphrase: str | None = None):
        try:
            seed = seed_from_mnemonic(mnemonic, passphrase or "")
            self._keypair = Keypair.from_seed_and_derivation_path(seed, SVM_DERIVATION_PATH)
        except Exception:
            raise PlatformSigningError("Cannot derive SVM keypair from mnemonic") from None

    @property
    def address(self) -> str:
        return str(self._keypair.pubkey())

    def sign_transaction(self, raw: bytes) -> bytes:
        """
        Sign serialized VersionedTransaction

        Only this key's signature slot is filled, other signatures are kept
        as they are (partial signing).

        Returns:
            Serialized transaction with signature
        """
        try:
            transaction = VersionedTransaction.from_bytes(raw)
        except Exception:
            raise PlatformSigningError("Malformed SVM transaction encoding") from None

        message = transaction.message
        required = message.header.num_required_signatures
        signers = list(message.account_keys[:required])

        pubkey = self._keypair.pubkey()
        if pubkey not in signers:
            raise PlatformSigningError("Key is not a required signer of this SVM transaction")

        signatures = list(transaction.signatures)
        if len(signatures) < required:
            signatures += [Signature.default()] * (required - len(signatures))

        signatures[signers.index(pubkey)] = self._keypair.sign_message(to_bytes_versioned(message))
        return bytes(VersionedTransaction.populate(message, signatures))


SIGNER_FACTORIES: Dict[Platform, Callable[[str, str | None], Signer]] = {
    Platform.EVM: EVMSigner,
    Platform.SVM: SVMSigner,
}

_missing = set(Platform) - set(SIGNER_FACTORIES)
if _missing:
    raise RuntimeError(f"No signer for platform(s): {sorted(p.value for p in _missing)}")


class PlatformDispatcher:
    """Resolves a platform and seed material into a signing capability"""

    def __init__(self, factories: Dict[Platform, Callable[[str, str | None], Signer]] | None = None):
        self.factories = factories or SIGNER_FACTORIES

    def resolve_signer(self, platform: Platform, mnemonic: str, passphrase: str | None = None) -> Signer:
        """
        Build a fresh signer

        Args:
            platform: Platform variant
            mnemonic: BIP-39 mnemonic
            passphrase: BIP-39 passphrase

        Returns:
            Signer with address and sign_transaction
        """
        logger.debug(f"Building {platform.value} signer")
        return self.factories[platform](mnemonic, passphrase)
