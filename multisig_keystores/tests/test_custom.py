from typing import Any

import pytest

from multisig_keystores.constants import Network
from multisig_keystores.devices.custom import CustomExportExtendedPublicKey
from multisig_keystores.exceptions import ValidationError

from .conftest import TESTNET_UPUB, TESTNET_XPUB_M45


TESTNET_P2SH_PATH = "m/45'/1'/0'"
TESTNET_P2SH_XPUB = "tpubDDQubdBx9cbs16zUhpiM135EpvjSbVz7SGJyGg4rvRVEYdncZy3Kzjg6NjuFWcShiCyNqviW" \
    "TBiZPb25p4WcaLppVmAuiPMrkR1kahNoioL"
MAINNET_P2SH_PATH = "m/45'/0'/0'"
MAINNET_P2SH_XPUB = "xpub6CCHViYn5VzKFqrKjAzSSqP8XXSU5fEC6ZYSncX5pvSKoRLrPDcF8cEaZkrQvvnuwRUXeKV" \
    "joGmAqvbwVkNBFLaRiqcdVhWPyuShUrbcZsv"


def _interaction(network: Any=Network.TESTNET,
        bip32_path: str=TESTNET_P2SH_PATH) -> CustomExportExtendedPublicKey:
    return CustomExportExtendedPublicKey(network=network, bip32_path=bip32_path)


class TestConstructor:
    def test_invalid_network(self) -> None:
        with pytest.raises(ValidationError) as e:
            _interaction(network="foob")
        assert "Unknown network" in str(e.value)

    def test_network_name(self) -> None:
        assert _interaction(network="testnet").network is Network.TESTNET

    def test_invalid_path_unsupported(self) -> None:
        interaction = _interaction(bip32_path="m/45'/1'/a")
        assert not interaction.is_supported()
        with pytest.raises(ValidationError):
            interaction.parse({ "xpub": TESTNET_P2SH_XPUB })

    def test_valid_path_supported(self) -> None:
        assert _interaction().is_supported()


class TestParse:
    @pytest.mark.parametrize("data", ("test", 77, None))
    def test_not_an_object(self, data: Any) -> None:
        with pytest.raises(ValidationError) as e:
            _interaction().parse(data)
        assert "Not valid JSON" in str(e.value)

    @pytest.mark.parametrize("data", ({}, { "xpub": "" }, { "xpub": TESTNET_P2SH_XPUB[:-1] }))
    def test_invalid_xpub(self, data: dict[str, Any]) -> None:
        with pytest.raises(ValidationError) as e:
            _interaction().parse(data)
        assert "Not a valid ExtendedPublicKey" in str(e.value)

    def test_wrong_network(self) -> None:
        with pytest.raises(ValidationError) as e:
            _interaction(network=Network.MAINNET, bip32_path=MAINNET_P2SH_PATH).parse(
                { "xpub": TESTNET_P2SH_XPUB })
        assert "Not a valid ExtendedPublicKey" in str(e.value)

    def test_with_root_fingerprint(self) -> None:
        result = _interaction().parse({ "xpub": TESTNET_P2SH_XPUB,
            "rootFingerprint": "f57ec65d" })
        assert result == {
            "xpub": TESTNET_P2SH_XPUB,
            "rootFingerprint": "f57ec65d",
            "bip32Path": TESTNET_P2SH_PATH,
        }

    @pytest.mark.parametrize("root_fingerprint", (None, ""))
    def test_assigned_root_fingerprint_testnet(self, root_fingerprint: Any) -> None:
        result = _interaction().parse({ "xpub": TESTNET_P2SH_XPUB,
            "rootFingerprint": root_fingerprint })
        assert result == {
            "xpub": TESTNET_P2SH_XPUB,
            "rootFingerprint": "0b287198",
            "bip32Path": TESTNET_P2SH_PATH,
        }

    def test_assigned_root_fingerprint_mainnet(self) -> None:
        result = _interaction(network=Network.MAINNET, bip32_path=MAINNET_P2SH_PATH).parse(
            { "xpub": MAINNET_P2SH_XPUB })
        assert result == {
            "xpub": MAINNET_P2SH_XPUB,
            "rootFingerprint": "266afe03",
            "bip32Path": MAINNET_P2SH_PATH,
        }

    @pytest.mark.parametrize("root_fingerprint", ("zzzzzzzz", "f57ec65", 1234))
    def test_invalid_root_fingerprint(self, root_fingerprint: Any) -> None:
        with pytest.raises(ValidationError) as e:
            _interaction().parse({ "xpub": TESTNET_P2SH_XPUB,
                "rootFingerprint": root_fingerprint })
        assert "Root fingerprint validation error" in str(e.value)

    @pytest.mark.parametrize("bip32_path", ("m/45'/1'", "m/45'/1'/0'/0", "45'/1'"))
    def test_depth_mismatch(self, bip32_path: str) -> None:
        with pytest.raises(ValidationError) as e:
            _interaction(bip32_path=bip32_path).parse({ "xpub": TESTNET_P2SH_XPUB })
        assert "does not match depth of BIP32 path" in str(e.value)

    def test_depth_relative_path(self) -> None:
        result = _interaction(bip32_path="45'").parse({ "xpub": TESTNET_XPUB_M45 })
        assert result["bip32Path"] == "45'"

    def test_alternate_version_bytes_kept(self) -> None:
        result = _interaction(bip32_path="m/48'/1'/0'/1'").parse({ "xpub": TESTNET_UPUB,
            "rootFingerprint": "f57ec65d" })
        assert result["xpub"] == TESTNET_UPUB
