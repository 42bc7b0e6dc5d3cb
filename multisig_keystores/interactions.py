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
Entry points for coordinators.

Each operation maps the keystore kind to the interaction that performs it on that kind of
keystore. Kinds without an entry get an `UnsupportedInteraction`, which raises when it is
run, so callers can build the interaction first and find out what is supported from it.
"""

from __future__ import annotations
from typing import Any, Callable, Mapping, Optional, Union

from .config import braid_details_to_wallet_config, MultisigWalletConfig
from .constants import KeystoreKind, Network
from .devices.coldcard import ColdcardExportExtendedPublicKey, ColdcardMultisigWalletConfig
from .devices.custom import CustomExportExtendedPublicKey
from .devices.interaction import Interaction, UnsupportedInteraction
from .devices.ledger import LedgerAppClient, LedgerConfirmMultisigAddress, \
    LedgerRegisterWalletPolicy
from .i18n import _
from .logs import logs
from .simple_config import SimpleConfig


logger = logs.get_logger("interactions")

UNSUPPORTED = "unsupported"

WalletConfigSource = Union[MultisigWalletConfig, Mapping[str, Any], str]
BraidDetailsSource = Union[Mapping[str, Any], str]


def keystore_kind(keystore: Union[KeystoreKind, str]) -> Optional[KeystoreKind]:
    if isinstance(keystore, KeystoreKind):
        return keystore
    try:
        return KeystoreKind(keystore)
    except ValueError:
        return None


def load_wallet_config(wallet_config: WalletConfigSource,
        config: Optional[SimpleConfig]=None) -> MultisigWalletConfig:
    if isinstance(wallet_config, MultisigWalletConfig):
        return wallet_config
    default_network = config.get_network() if config is not None else Network.MAINNET
    if isinstance(wallet_config, str):
        return MultisigWalletConfig.from_json(wallet_config, default_network)
    return MultisigWalletConfig.from_dict(wallet_config, default_network)


def _require_client(client: Optional[LedgerAppClient]) -> LedgerAppClient:
    if client is None:
        raise ValueError("A device client is required for this keystore")
    return client


def _dispatch(table: Mapping[KeystoreKind, Callable[..., Interaction]],
        keystore: Union[KeystoreKind, str], unsupported_text: str, **kwargs: Any) -> Interaction:
    kind = keystore_kind(keystore)
    factory = table.get(kind) if kind is not None else None
    if factory is None:
        logger.debug("keystore %s has no interaction: %s", keystore, unsupported_text)
        return UnsupportedInteraction(code=UNSUPPORTED, text=unsupported_text)
    logger.debug("keystore %s dispatched to %s", keystore, factory.__name__)
    return factory(**kwargs)


## Extended public key import

EXTENDED_PUBLIC_KEY_EXPORTS: Mapping[KeystoreKind, Callable[..., Interaction]] = {
    KeystoreKind.COLDCARD: ColdcardExportExtendedPublicKey,
    KeystoreKind.CUSTOM: CustomExportExtendedPublicKey,
}


def export_extended_public_key(keystore: Union[KeystoreKind, str], network: Union[Network, str],
        bip32_path: str) -> Interaction:
    '''
    The interaction that reads the extended public key for `bip32_path` the user brings back
    from the keystore, with `parse`. The depth of the key must match the depth of the path.
    '''
    return _dispatch(EXTENDED_PUBLIC_KEY_EXPORTS, keystore,
        _("This keystore is not supported when importing extended public keys."),
        network=network, bip32_path=bip32_path)


## Wallet config adapters

def _coldcard_config_adapter(json_config: Union[str, Mapping[str, Any]],
        policy_hmac: Optional[str], client: Optional[LedgerAppClient],
        config: Optional[SimpleConfig]) -> Interaction:
    return ColdcardMultisigWalletConfig(json_config)


def _ledger_config_adapter(json_config: Union[str, Mapping[str, Any]],
        policy_hmac: Optional[str], client: Optional[LedgerAppClient],
        config: Optional[SimpleConfig]) -> Interaction:
    return LedgerRegisterWalletPolicy(load_wallet_config(json_config, config),
        _require_client(client), policy_hmac=policy_hmac)


CONFIG_ADAPTERS: Mapping[KeystoreKind, Callable[..., Interaction]] = {
    KeystoreKind.COLDCARD: _coldcard_config_adapter,
    KeystoreKind.LEDGER: _ledger_config_adapter,
}


def config_adapter(keystore: Union[KeystoreKind, str],
        json_config: Union[str, Mapping[str, Any]], policy_hmac: Optional[str]=None,
        client: Optional[LedgerAppClient]=None,
        config: Optional[SimpleConfig]=None) -> Interaction:
    '''The interaction that puts a multisig wallet configuration onto the keystore.'''
    return _dispatch(CONFIG_ADAPTERS, keystore,
        _("This keystore is not supported when translating external spend configuration "
            "files."),
        json_config=json_config, policy_hmac=policy_hmac, client=client, config=config)


## Wallet policy registration

def _ledger_register_wallet_policy(wallet_config: WalletConfigSource,
        client: Optional[LedgerAppClient], policy_hmac: Optional[str], verify: Optional[bool],
        config: Optional[SimpleConfig]) -> Interaction:
    if verify is None:
        verify = config.get_verify_registration() if config is not None else False
    return LedgerRegisterWalletPolicy(load_wallet_config(wallet_config, config),
        _require_client(client), policy_hmac=policy_hmac, verify=verify)


WALLET_POLICY_REGISTRATIONS: Mapping[KeystoreKind, Callable[..., Interaction]] = {
    KeystoreKind.LEDGER: _ledger_register_wallet_policy,
}


def register_wallet_policy(keystore: Union[KeystoreKind, str],
        wallet_config: WalletConfigSource, client: Optional[LedgerAppClient]=None,
        policy_hmac: Optional[str]=None, verify: Optional[bool]=None,
        config: Optional[SimpleConfig]=None) -> Interaction:
    '''
    The interaction that registers the wallet policy of `wallet_config` on the keystore.

    When `verify` is not given it is taken from the `verify_registration` setting of
    `config`, and is off without one.
    '''
    return _dispatch(WALLET_POLICY_REGISTRATIONS, keystore,
        _("This keystore does not support registering a wallet policy."),
        wallet_config=wallet_config, client=client, policy_hmac=policy_hmac, verify=verify,
        config=config)


## Multisig address confirmation

def _ledger_confirm_multisig_address(wallet_config: Optional[WalletConfigSource],
        client: Optional[LedgerAppClient], bip32_path: str, policy_hmac: Optional[str],
        expected: Optional[str], display: bool, braid_details: Optional[BraidDetailsSource],
        config: Optional[SimpleConfig]) -> Interaction:
    # Coordinators that only track braids pass the braid of the address instead.
    if wallet_config is None:
        if braid_details is None:
            raise ValueError("Either a wallet config or braid details are required")
        wallet_config = braid_details_to_wallet_config(braid_details)
    return LedgerConfirmMultisigAddress(load_wallet_config(wallet_config, config),
        _require_client(client), bip32_path, policy_hmac=policy_hmac, expected=expected,
        display=display)


MULTISIG_ADDRESS_CONFIRMATIONS: Mapping[KeystoreKind, Callable[..., Interaction]] = {
    KeystoreKind.LEDGER: _ledger_confirm_multisig_address,
}


def confirm_multisig_address(keystore: Union[KeystoreKind, str],
        wallet_config: Optional[WalletConfigSource], client: Optional[LedgerAppClient],
        bip32_path: str, policy_hmac: Optional[str]=None, expected: Optional[str]=None,
        display: bool=True, braid_details: Optional[BraidDetailsSource]=None,
        config: Optional[SimpleConfig]=None) -> Interaction:
    return _dispatch(MULTISIG_ADDRESS_CONFIRMATIONS, keystore,
        _("This keystore is not supported when confirming multisig addresses."),
        wallet_config=wallet_config, client=client, bip32_path=bip32_path,
        policy_hmac=policy_hmac, expected=expected, display=display, braid_details=braid_details,
        config=config)
