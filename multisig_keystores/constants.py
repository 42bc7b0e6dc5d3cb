from enum import Enum
from types import MappingProxyType
from typing import Mapping


## Local types to avoid circular dependencies. This file should be independent

DerivationPath = tuple[int, ...]

BIP32_HARDENED = 0x80000000


## Networks

class Network(Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"


## Wallet configuration

class AddressType(Enum):
    P2SH = "P2SH"
    P2WSH = "P2WSH"
    P2SH_P2WSH = "P2SH-P2WSH"
    P2TR = "P2TR"


# Placeholder used by coordinators for derivation paths and fingerprints they do not know.
UNKNOWN_MARKER = "Unknown"

ROOT_FINGERPRINT_LENGTH = 8


## Keystores

class KeystoreKind(Enum):
    COLDCARD = "coldcard"
    CUSTOM = "custom"
    HERMIT = "hermit"
    LEDGER = "ledger"
    TREZOR = "trezor"


COLDCARD_WALLET_CONFIG_VERSION = "1.0.0"


## Wallet policies

class ScriptWrapper(Enum):
    SH = "sh"
    WSH = "wsh"
    SH_WSH = "sh(wsh"
    TR = "tr"


# Nested segwit is matched as a unit, so it must be tested before plain `sh`.
SUPPORTED_SCRIPT_TYPES: tuple[ScriptWrapper, ...] = (ScriptWrapper.SH_WSH, ScriptWrapper.SH,
    ScriptWrapper.WSH)

ADDRESS_TYPE_SCRIPT_WRAPPERS: Mapping[AddressType, ScriptWrapper] = MappingProxyType({
    AddressType.P2SH: ScriptWrapper.SH,
    AddressType.P2WSH: ScriptWrapper.WSH,
    AddressType.P2SH_P2WSH: ScriptWrapper.SH_WSH,
    AddressType.P2TR: ScriptWrapper.TR,
})

MULTISIG_SCRIPT = "sortedmulti"
KEY_PLACEHOLDER_SUFFIX = "/**"

# Ledger rejects longer names with an opaque invalid data error.
MAX_POLICY_NAME_LENGTH = 64
POLICY_NAME_ELLIPSIS = "..."

WALLET_POLICY_VERSION_V2 = 2
