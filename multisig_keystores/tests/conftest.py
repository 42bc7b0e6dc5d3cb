# Pytest looks here for fixtures
import copy
from typing import Any
import unittest.mock

import pytest

from multisig_keystores.config import MultisigWalletConfig


TESTNET_XPUB_UNKNOWN_PATH = "tpubDF17mBZYUi35iCPDfFAa3jFd23L5ZF49tpS1AS1cEqNwhNaS8qVVD8ZPj67iKEar" \
    "hPuMapZHuxr7TBDYA4DLxAoz25FN8ksyakdbc2V4X2Q"
TESTNET_XPUB_A = "tpubDEzYMGvKjbsnqEsjPvnG1TAxBGvk3EUJ9tqpTjnv6XEHktLASz8omNFS9VfSgbmpQWZefiRi" \
    "sKKCtERgsjsK39S6ueTHRXd8w5kNw8LzBoF"
TESTNET_XPUB_B = "tpubDF4Ar5bxLQV9qbr2bZ7N7TYYWNv28kPEChWwyvrrxTMKJjqsYhce79mUkLNiKpW121Tsh" \
    "HwjZhZbHmT66oPbwLqxJzcXLyf32ubCJyr4pRR"
TESTNET_XPUB_M45 = "tpubDA4nUAdTmYwqJEETnxhH5HyN817oXugoa63GmThiDVNDKGf4uaG6QAk9BUo7RdXv1LFF7" \
    "yBognGFPWzdwXY4XWMHyJ5mtZaVFEU5MtMfj7H"
TESTNET_UPUB = "Upub5THcsrK1mzKPEWiosEaR5Ra5sSLTfgfc2RBqxDWZt9jFrANXFzeKSpjxn7StBgBhBe1YPiZX" \
    "urj7XrQhggqYV63ZzpWUp27gWiL2wDoVwaW"
TESTNET_VPUB = "Vpub5n7tBWyvvfrs8rgaiWz4sJb6X1KrQGwj3VAD9MzDLRg419Pee4DVGzCzkdxB2U5tQor3bjDi" \
    "a2hU9VSamFF8714rJJb7TzyeSKtZ5PQ1MRN"
MAINNET_XPUB = "xpub69h9wvon4GzP2S3cLmiBsNdznt29YXBk2TSyQueZsacKZyzMqMR1Fj5JwSiKu8agDRiLWPfw" \
    "9gSChLW2Yfgpe4tzuhLUD2vFfGsfbtTA3r7"
MAINNET_YPUB = "Ypub6jGfy3TmqjoeWQhS5wBPw4xZeFubMPzPhZZVBn72J2G6xD6Z1GkbR3be51yknKt4ahighwfw" \
    "SMAgX9QFUWTxy7pKhzTaLY37EPxBEctgBCs"

KEY_ORIGIN_XFP = "76223a6e"
KEY_ORIGIN_PATH = "m/48'/1'/0'/2'"
KEY_ORIGIN_XPUB = "tpubDE7NQymr4AFtewpAsWtnreyq9ghkzQBXpCZjWLFVRAvnbf7vya2eMTvT2fPapNqL8SuVvLQd" \
    "bUbMfWLVDCZKnsEBqp6UK93QEzL8Ck23AwF"


JSON_CONFIG_UUID: dict[str, Any] = {
    "name": "Test",
    "addressType": "P2SH",
    "network": "testnet",
    "quorum": {
        "requiredSigners": 2,
        "totalSigners": 3,
    },
    "startingAddressIndex": 5,
    "extendedPublicKeys": [
        {
            "name": "unchained",
            "xpub": TESTNET_XPUB_UNKNOWN_PATH,
            "bip32Path": "Unknown",
            "xfp": "77e80477",
        },
        {
            "name": "Os_words_pass_A",
            "xpub": TESTNET_XPUB_A,
            "bip32Path": "m/45'/1/0/0",
            "xfp": "39b12f98",
        },
        {
            "name": "Os_words_pass_B",
            "xpub": TESTNET_XPUB_B,
            "bip32Path": "m/45'/1/0/0",
            "xfp": "77d36d3b",
        },
    ],
    "uuid": "OWPyFOA1",
}


@pytest.fixture
def json_config_uuid() -> dict[str, Any]:
    return copy.deepcopy(JSON_CONFIG_UUID)


@pytest.fixture
def json_config_name() -> dict[str, Any]:
    data = copy.deepcopy(JSON_CONFIG_UUID)
    del data["uuid"]
    return data


@pytest.fixture
def wallet_config(json_config_uuid: dict[str, Any]) -> MultisigWalletConfig:
    return MultisigWalletConfig.from_dict(json_config_uuid)


@pytest.fixture
def swapped_wallet_config(json_config_uuid: dict[str, Any]) -> MultisigWalletConfig:
    keys = json_config_uuid["extendedPublicKeys"]
    keys[0], keys[2] = keys[2], keys[0]
    return MultisigWalletConfig.from_dict(json_config_uuid)


@pytest.fixture
def braid_details() -> dict[str, Any]:
    return {
        "network": "testnet",
        "addressType": "P2WSH",
        "requiredSigners": 2,
        "index": 0,
        "extendedPublicKeys": [
            {
                "base58String": TESTNET_XPUB_A,
                "path": "m/45'/1/0/0",
                "rootFingerprint": "39b12f98",
            },
            {
                "base58String": TESTNET_XPUB_B,
                "path": "m/45'/1/0/0",
                "rootFingerprint": "77d36d3b",
            },
        ],
    }


@pytest.fixture
def ledger_client() -> unittest.mock.Mock:
    client = unittest.mock.Mock()
    client.get_master_fingerprint.return_value = bytes.fromhex("39b12f98")
    client.register_wallet.side_effect = \
        lambda policy: (policy.id, bytes.fromhex("deadbeef" * 8))
    client.get_wallet_address.return_value = "tb1qexampleaddress"
    return client
