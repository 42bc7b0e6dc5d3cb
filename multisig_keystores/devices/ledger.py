# Multisig Keystores - keystore adapters for multisig coordinators
# Copyright (C) 2023 The Multisig Keystores Developers
#
# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Ledger Bitcoin application (2.1.0 and later) multisig wallet interactions.

A multisig wallet has to be registered on the device before it will show addresses for it
or sign for it. Registration has the user approve the policy name, the descriptor template
and each cosigner key, and the device returns an HMAC over the policy. The coordinator keeps
the HMAC and passes it with every later request so that the wallet does not have to be
approved again.
"""

from __future__ import annotations
from typing import Optional, Protocol

from ..bip32 import bip32_path_to_uints
from ..config import MultisigWalletConfig
from ..constants import BIP32_HARDENED, KeystoreKind
from ..exceptions import AddressMismatchError, ValidationError
from ..i18n import _
from ..policy import MultisigWalletPolicy
from ..standards.wallet_policy import WalletPolicy
from .interaction import Interaction


class LedgerAppClient(Protocol):
    '''The calls made on the Ledger Bitcoin application client.'''

    def get_master_fingerprint(self) -> bytes:
        ...

    def register_wallet(self, wallet: WalletPolicy) -> tuple[bytes, bytes]:
        '''Returns the policy id and the registration HMAC.'''
        ...

    def get_wallet_address(self, wallet: WalletPolicy, wallet_hmac: Optional[bytes],
            change: int, address_index: int, display: bool) -> str:
        ...


class LedgerWalletPolicyInteraction(Interaction):
    keystore_kind = KeystoreKind.LEDGER

    def __init__(self, wallet_config: MultisigWalletConfig, client: LedgerAppClient,
            policy_hmac: Optional[str]=None) -> None:
        super().__init__()

        self.client = client
        self.network = wallet_config.network
        self.wallet_policy = MultisigWalletPolicy.from_wallet_config(wallet_config)

        self.policy_hmac: Optional[bytes] = None
        self.policy_id: Optional[bytes] = None
        if policy_hmac:
            try:
                self.policy_hmac = bytes.fromhex(policy_hmac)
            except ValueError:
                raise ValidationError(_("Invalid policyHmac")) from None

    def get_xfp(self) -> str:
        return self.client.get_master_fingerprint().hex()

    def register_wallet(self, verify: bool=False) -> bytes:
        if self.policy_hmac is not None and not verify:
            return self.policy_hmac

        ledger_policy = self.wallet_policy.to_ledger_policy()
        policy_id, policy_hmac = self.client.register_wallet(ledger_policy)
        policy_hmac = bytes(policy_hmac)

        if verify and self.policy_hmac is not None and self.policy_hmac != policy_hmac:
            self.logger.error("Policy registrations did not match. Expected %s; Actual: %s",
                self.policy_hmac.hex(), policy_hmac.hex())
        if bytes(policy_id) != ledger_policy.id:
            self.logger.warning("Device returned policy id %s, expected %s",
                bytes(policy_id).hex(), ledger_policy.id.hex())

        self.policy_hmac = policy_hmac
        self.policy_id = bytes(policy_id)
        return policy_hmac


class LedgerRegisterWalletPolicy(LedgerWalletPolicyInteraction):
    def __init__(self, wallet_config: MultisigWalletConfig, client: LedgerAppClient,
            policy_hmac: Optional[str]=None, verify: bool=False) -> None:
        super().__init__(wallet_config, client, policy_hmac)
        self.verify = verify

    def run(self) -> str:
        return self.register_wallet(self.verify).hex()


class LedgerConfirmMultisigAddress(LedgerWalletPolicyInteraction):
    def __init__(self, wallet_config: MultisigWalletConfig, client: LedgerAppClient,
            bip32_path: str, policy_hmac: Optional[str]=None, expected: Optional[str]=None,
            display: bool=True) -> None:
        super().__init__(wallet_config, client, policy_hmac)

        # The braid (change) and address indexes are always the last two steps of the path.
        path = bip32_path_to_uints(bip32_path)
        if len(path) < 2:
            raise ValidationError(_("Invalid bip32 path for a multisig address {}").format(
                bip32_path))
        braid_index, address_index = path[-2:]
        if braid_index not in (0, 1):
            raise ValidationError(_("Invalid braid index {}").format(braid_index))
        if address_index >= BIP32_HARDENED:
            raise ValidationError(_("Invalid address index {}").format(address_index))

        self.bip32_path = bip32_path
        self.braid_index = braid_index
        self.address_index = address_index
        self.expected = expected
        self.display = display

    def get_address(self) -> str:
        if self.policy_hmac is None:
            raise ValidationError(_("Can't get wallet address without a wallet registration"))
        return self.client.get_wallet_address(self.wallet_policy.to_ledger_policy(),
            self.policy_hmac, self.braid_index, self.address_index, self.display)

    def run(self) -> str:
        self.register_wallet()
        address = self.get_address()
        if self.expected is not None and address != self.expected:
            raise AddressMismatchError(self.expected, address)
        return address
