import logging
import unittest.mock

import pytest

from multisig_keystores.config import MultisigWalletConfig
from multisig_keystores.devices.ledger import LedgerConfirmMultisigAddress, \
    LedgerRegisterWalletPolicy
from multisig_keystores.exceptions import AddressMismatchError, ValidationError
from multisig_keystores.policy import MultisigWalletPolicy


REGISTERED_HMAC = "deadbeef" * 8
OTHER_HMAC = "feedface" * 8


class TestLedgerRegisterWalletPolicy:
    def test_known_hmac_not_verified(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock) -> None:
        interaction = LedgerRegisterWalletPolicy(wallet_config, ledger_client,
            policy_hmac=OTHER_HMAC)
        assert interaction.run() == OTHER_HMAC
        ledger_client.register_wallet.assert_not_called()

    def test_registers_wallet(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock) -> None:
        interaction = LedgerRegisterWalletPolicy(wallet_config, ledger_client)
        assert interaction.run() == REGISTERED_HMAC

        ledger_policy = ledger_client.register_wallet.call_args[0][0]
        assert ledger_policy == \
            MultisigWalletPolicy.from_wallet_config(wallet_config).to_ledger_policy()
        assert interaction.policy_id == ledger_policy.id
        assert interaction.policy_hmac == bytes.fromhex(REGISTERED_HMAC)

    def test_verify_mismatch_logs_error(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock, caplog: pytest.LogCaptureFixture) -> None:
        interaction = LedgerRegisterWalletPolicy(wallet_config, ledger_client,
            policy_hmac=OTHER_HMAC, verify=True)
        with caplog.at_level(logging.ERROR):
            assert interaction.run() == REGISTERED_HMAC
        ledger_client.register_wallet.assert_called_once()
        assert "did not match" in caplog.text
        assert OTHER_HMAC in caplog.text

    def test_verify_match_is_quiet(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock, caplog: pytest.LogCaptureFixture) -> None:
        interaction = LedgerRegisterWalletPolicy(wallet_config, ledger_client,
            policy_hmac=REGISTERED_HMAC, verify=True)
        with caplog.at_level(logging.WARNING):
            assert interaction.run() == REGISTERED_HMAC
        assert caplog.records == []

    def test_unexpected_policy_id_logs_warning(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock, caplog: pytest.LogCaptureFixture) -> None:
        ledger_client.register_wallet.side_effect = None
        ledger_client.register_wallet.return_value = (bytes(32),
            bytes.fromhex(REGISTERED_HMAC))
        interaction = LedgerRegisterWalletPolicy(wallet_config, ledger_client)
        with caplog.at_level(logging.WARNING):
            interaction.run()
        assert "policy id" in caplog.text

    def test_invalid_policy_hmac(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock) -> None:
        with pytest.raises(ValidationError):
            LedgerRegisterWalletPolicy(wallet_config, ledger_client, policy_hmac="xyz")

    def test_get_xfp(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock) -> None:
        interaction = LedgerRegisterWalletPolicy(wallet_config, ledger_client)
        assert interaction.get_xfp() == "39b12f98"


class TestLedgerConfirmMultisigAddress:
    def test_registers_and_gets_address(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock) -> None:
        interaction = LedgerConfirmMultisigAddress(wallet_config, ledger_client,
            "m/45'/1/0/0/1/7")
        assert interaction.braid_index == 1
        assert interaction.address_index == 7
        assert interaction.run() == "tb1qexampleaddress"

        ledger_client.register_wallet.assert_called_once()
        ledger_policy, hmac, change, index, display = \
            ledger_client.get_wallet_address.call_args[0]
        assert ledger_policy.name == "OWPyFOA1"
        assert hmac == bytes.fromhex(REGISTERED_HMAC)
        assert (change, index, display) == (1, 7, True)

    def test_known_hmac_skips_registration(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock) -> None:
        interaction = LedgerConfirmMultisigAddress(wallet_config, ledger_client,
            "m/0/3", policy_hmac=OTHER_HMAC, display=False)
        interaction.run()
        ledger_client.register_wallet.assert_not_called()
        _policy, hmac, change, index, display = ledger_client.get_wallet_address.call_args[0]
        assert (hmac, change, index, display) == (bytes.fromhex(OTHER_HMAC), 0, 3, False)

    def test_expected_address(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock) -> None:
        interaction = LedgerConfirmMultisigAddress(wallet_config, ledger_client, "m/0/0",
            expected="tb1qexampleaddress")
        assert interaction.run() == "tb1qexampleaddress"

    def test_address_mismatch(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock) -> None:
        interaction = LedgerConfirmMultisigAddress(wallet_config, ledger_client, "m/0/0",
            expected="tb1qotheraddress")
        with pytest.raises(AddressMismatchError) as e:
            interaction.run()
        assert e.value.expected == "tb1qotheraddress"
        assert e.value.actual == "tb1qexampleaddress"

    @pytest.mark.parametrize("bip32_path", ("m/45'/1/0/2/0", "m/0", "m/0/1'", "m/1'/0",
        "not a path"))
    def test_invalid_path(self, wallet_config: MultisigWalletConfig,
            ledger_client: unittest.mock.Mock, bip32_path: str) -> None:
        with pytest.raises(ValidationError):
            LedgerConfirmMultisigAddress(wallet_config, ledger_client, bip32_path)
