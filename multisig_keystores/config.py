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
Multisig wallet configurations as exchanged with coordinators.

The JSON form uses the coordinator's camel case keys:

    {
        "name": "Test",
        "uuid": "OWPyFOA1",
        "addressType": "P2SH",
        "network": "testnet",
        "quorum": { "requiredSigners": 2, "totalSigners": 3 },
        "extendedPublicKeys": [
            { "name": "...", "xpub": "tpub...", "bip32Path": "m/45'/1/0/0", "xfp": "39b12f98" },
            ...
        ],
        "startingAddressIndex": 5
    }

Older exports put `requiredSigners` at the top level instead of in a `quorum` object, these
are still read.
"""

from __future__ import annotations
import dataclasses
import json
from typing import Any, cast, Mapping, Optional, Sequence, Union

from typing_extensions import NotRequired, TypedDict

from .bip32 import extended_public_key_parent_fingerprint, is_unknown_path, \
    validate_bip32_path, validate_extended_public_key, validate_root_fingerprint
from .constants import Network, UNKNOWN_MARKER
from .exceptions import ValidationError, WalletConfigError
from .i18n import _
from .logs import logs
from .networks import network_from_name


logger = logs.get_logger("config")


class QuorumDict(TypedDict):
    requiredSigners: int
    totalSigners: int


class ExtendedPublicKeyDict(TypedDict):
    xpub: str
    bip32Path: NotRequired[str]
    xfp: NotRequired[str]
    name: NotRequired[str]


class MultisigWalletConfigDict(TypedDict):
    name: NotRequired[str]
    uuid: NotRequired[str]
    addressType: str
    network: NotRequired[str]
    quorum: QuorumDict
    extendedPublicKeys: list[ExtendedPublicKeyDict]
    startingAddressIndex: NotRequired[int]
    client: NotRequired[dict[str, Any]]


class BraidExtendedPublicKeyDict(TypedDict):
    base58String: str
    path: NotRequired[str]
    rootFingerprint: NotRequired[str]


class BraidDetailsDict(TypedDict):
    network: str
    addressType: str
    extendedPublicKeys: list[BraidExtendedPublicKeyDict]
    requiredSigners: int
    index: NotRequired[int]


@dataclasses.dataclass(frozen=True)
class ExtendedPublicKeyEntry:
    xpub: str
    bip32_path: Optional[str] = None
    xfp: Optional[str] = None
    name: Optional[str] = None

    def has_known_xfp(self) -> bool:
        return bool(self.xfp) and self.xfp != UNKNOWN_MARKER

    def to_dict(self) -> ExtendedPublicKeyDict:
        data: ExtendedPublicKeyDict = { "xpub": self.xpub }
        if self.bip32_path is not None:
            data["bip32Path"] = self.bip32_path
        if self.xfp is not None:
            data["xfp"] = self.xfp
        if self.name is not None:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ExtendedPublicKeyEntry:
        if not isinstance(data, Mapping) or not data.get("xpub"):
            raise WalletConfigError(_("xpub value required"))
        return cls(xpub=data["xpub"], bip32_path=data.get("bip32Path"), xfp=data.get("xfp"),
            name=data.get("name"))


@dataclasses.dataclass(frozen=True)
class Quorum:
    required_signers: int
    total_signers: int


@dataclasses.dataclass
class MultisigWalletConfig:
    address_type: str
    quorum: Quorum
    extended_public_keys: list[ExtendedPublicKeyEntry]
    network: Network = Network.MAINNET
    name: Optional[str] = None
    uuid: Optional[str] = None
    starting_address_index: Optional[int] = None
    client: Optional[dict[str, Any]] = None

    def __post_init__(self) -> None:
        try:
            self.network = network_from_name(self.network)
        except ValueError:
            raise WalletConfigError(_("Network {} not supported.").format(self.network)) \
                from None

        self.extended_public_keys = list(self.extended_public_keys)
        if self.quorum.total_signers != len(self.extended_public_keys):
            raise WalletConfigError(_("Wallet config has {} total signers but {} extended "
                "public keys").format(self.quorum.total_signers,
                    len(self.extended_public_keys)))
        if not 1 <= self.quorum.required_signers <= self.quorum.total_signers:
            raise WalletConfigError(_("Wallet config needs between 1 and {} required "
                "signers").format(self.quorum.total_signers))

        if self.starting_address_index is not None and \
                (type(self.starting_address_index) is not int or
                    self.starting_address_index < 0):
            raise WalletConfigError(_("Expected a positive integer for startingAddressIndex"))

    @property
    def display_name(self) -> Optional[str]:
        return self.uuid or self.name

    def validate_extended_public_keys(self, requires_xfp: bool=False) -> None:
        """
        Raises `WalletConfigError` for the first problem found with the cosigner keys.

        A single seed must not provide more than one key in the quorum, so root fingerprints
        must be unique. Not every keystore needs the fingerprints, they are only required to
        be present and valid when `requires_xfp` is set.
        """
        root_fingerprints: set[str] = set()
        for entry in self.extended_public_keys:
            try:
                validate_extended_public_key(entry.xpub, self.network,
                    allow_alternate_versions=True)
            except ValidationError as e:
                raise WalletConfigError(_("Error in Xpub {}: {}").format(entry.xpub, e)) from e

            if not is_unknown_path(entry.bip32_path):
                try:
                    validate_bip32_path(cast(str, entry.bip32_path))
                except ValidationError as e:
                    raise WalletConfigError(_("Xpub Path Error: {} - {}").format(
                        entry.bip32_path, e)) from e

            if entry.has_known_xfp():
                xfp = cast(str, entry.xfp).lower()
                if xfp in root_fingerprints:
                    raise WalletConfigError(_("Duplicate root fingerprints not allowed in "
                        "same config"))
                root_fingerprints.add(xfp)

            if requires_xfp:
                if not entry.has_known_xfp():
                    raise WalletConfigError(_("ExtendedPublicKeys missing at least one xfp."))
                try:
                    validate_root_fingerprint(cast(str, entry.xfp))
                except ValidationError as e:
                    raise WalletConfigError(str(e)) from e

    def add_placeholder_fingerprints(self) -> None:
        """
        Signing devices like the Coldcard need a fingerprint for every key, but only the ones
        for their own keys have to be real. The parent fingerprint stored in the extended
        public key is used as the placeholder for the rest.
        """
        if not any(entry.has_known_xfp() for entry in self.extended_public_keys):
            raise WalletConfigError(_("At least one XFP is required to add placeholders to "
                "other xpubs"))

        entries: list[ExtendedPublicKeyEntry] = []
        for entry in self.extended_public_keys:
            if not entry.has_known_xfp():
                placeholder = extended_public_key_parent_fingerprint(entry.xpub)
                logger.debug("using placeholder fingerprint %s for %s", placeholder,
                    entry.xpub)
                entry = dataclasses.replace(entry, xfp=placeholder)
            entries.append(entry)
        self.extended_public_keys = entries

    @classmethod
    def from_dict(cls, data: Mapping[str, Any],
            default_network: Network=Network.MAINNET) -> MultisigWalletConfig:
        if not isinstance(data, Mapping):
            raise WalletConfigError(_("Wallet config must be a JSON object"))
        if not (data.get("uuid") or data.get("name")):
            raise WalletConfigError(_("Name or UUID required to create new "
                "MultisigWalletConfig"))

        address_type = data.get("addressType")
        if not isinstance(address_type, str):
            raise WalletConfigError(_("Wallet config needs addressType."))

        key_entries = data.get("extendedPublicKeys")
        if not isinstance(key_entries, list):
            raise WalletConfigError(_("Wallet config needs array of extendedPublicKeys."))
        extended_public_keys = [ ExtendedPublicKeyEntry.from_dict(entry)
            for entry in key_entries ]

        quorum_data = data.get("quorum") or {}
        required_signers = quorum_data.get("requiredSigners", data.get("requiredSigners"))
        total_signers = quorum_data.get("totalSigners", len(extended_public_keys))
        if type(required_signers) is not int or type(total_signers) is not int:
            raise WalletConfigError(_("Wallet config needs requiredSigners."))

        wallet_config = cls(
            address_type=address_type,
            quorum=Quorum(required_signers, total_signers),
            extended_public_keys=extended_public_keys,
            network=data.get("network") or default_network,
            name=data.get("name"),
            uuid=data.get("uuid"),
            starting_address_index=data.get("startingAddressIndex"),
            client=data.get("client"))
        wallet_config.validate_extended_public_keys(requires_xfp=False)
        return wallet_config

    @classmethod
    def from_json(cls, text: str,
            default_network: Network=Network.MAINNET) -> MultisigWalletConfig:
        if not isinstance(text, str):
            raise WalletConfigError(_("Must pass a valid JSON string"))
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            raise WalletConfigError(_("Unable to parse JSON.")) from None
        return cls.from_dict(data, default_network)

    def to_dict(self) -> MultisigWalletConfigDict:
        data: MultisigWalletConfigDict = {
            "addressType": self.address_type,
            "network": self.network.value,
            "quorum": {
                "requiredSigners": self.quorum.required_signers,
                "totalSigners": self.quorum.total_signers,
            },
            "extendedPublicKeys": [ entry.to_dict() for entry in self.extended_public_keys ],
        }
        if self.name is not None:
            data["name"] = self.name
        if self.uuid is not None:
            data["uuid"] = self.uuid
        if self.starting_address_index is not None:
            data["startingAddressIndex"] = self.starting_address_index
        if self.client is not None:
            data["client"] = self.client
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def braid_details_to_wallet_config(braid_details: Union[str, Mapping[str, Any]]) \
        -> MultisigWalletConfig:
    '''Build the wallet config for the braid a coordinator attaches to a multisig address.'''
    if isinstance(braid_details, str):
        try:
            braid_details = cast(BraidDetailsDict, json.loads(braid_details))
        except json.JSONDecodeError:
            raise WalletConfigError(_("Unable to parse JSON.")) from None

    braid_keys: Sequence[Mapping[str, Any]] = braid_details["extendedPublicKeys"]
    required_signers = braid_details["requiredSigners"]
    address_type = braid_details["addressType"]
    network = braid_details["network"]
    return MultisigWalletConfig(
        address_type=address_type,
        quorum=Quorum(required_signers, len(braid_keys)),
        extended_public_keys=[
            ExtendedPublicKeyEntry(xpub=key["base58String"], bip32_path=key.get("path"),
                xfp=key.get("rootFingerprint"))
            for key in braid_keys ],
        network=network,
        name=braid_details.get("name") or
            f"{required_signers}-of-{len(braid_keys)} {address_type} {network} wallet")
