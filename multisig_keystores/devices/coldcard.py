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
The Coldcard is used without a cable. Cosigner keys come off the device in the JSON file from
the `Export XPUB` menu item, and multisig wallet registration is done by loading a text file
onto the device from the micro SD card. That file names the quorum and address format, and
then lists the derivation and `xfp: xpub` pair of every cosigner in wallet order.
"""

from __future__ import annotations
import json
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from bitcoinx import bip32_key_from_string

from ..bip32 import bip32_path_to_uints, convert_extended_public_key, \
    decode_extended_public_key, extended_public_key_parent_fingerprint, \
    get_masked_derivation, validate_root_fingerprint
from ..constants import BIP32_HARDENED, COLDCARD_WALLET_CONFIG_VERSION, DerivationPath, \
    KeystoreKind, UNKNOWN_MARKER
from ..exceptions import ValidationError, WalletConfigError
from ..i18n import _
from .interaction import Interaction, require_network


COLDCARD_CONFIG_HEADER = (
    "# Coldcard Multisig setup file (exported from multisig-keystores)\n"
    "# v{version}\n"
    "#\n"
)

# The derivation paths the Coldcard exports keys for, and the key of each in the JSON file.
COLDCARD_BASE_BIP32_PATHS: Mapping[str, str] = MappingProxyType({
    "m/45'": "p2sh",
    "m/48'/0'/0'/1'": "p2sh_p2wsh",
    "m/48'/0'/0'/2'": "p2wsh",
    "m/48'/1'/0'/1'": "p2sh_p2wsh",
    "m/48'/1'/0'/2'": "p2wsh",
})
# Firmware before 3.2.0 named nested segwit the other way around.
COLDCARD_LEGACY_P2SH_P2WSH = "p2wsh_p2sh"

COLDCARD_REQUIRED_FIELDS = ("p2sh_deriv", "p2sh", "p2wsh_deriv", "p2wsh")


def _load_json_object(data: Union[str, Mapping[str, Any]]) -> Mapping[str, Any]:
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError:
            raise WalletConfigError(_("Unable to parse JSON.")) from None
    if not isinstance(data, Mapping):
        raise WalletConfigError(_("Not valid JSON."))
    return data


class ColdcardMultisigSettingsFileParser(Interaction):
    '''Reads the JSON file written by `Settings > Multisig Wallets > Export XPUB`.

    The file has an extended public key for each of the base paths the Coldcard knows, the
    requested path has to be one of them or below one of them with unhardened steps only.'''
    keystore_kind = KeystoreKind.COLDCARD

    def __init__(self, network: Any, bip32_path: str) -> None:
        super().__init__()
        self.network = require_network(network)
        self.bip32_path = bip32_path
        self.bip32_path_error = self._validate_bip32_path(bip32_path)

    def is_supported(self) -> bool:
        return self.bip32_path_error is None

    def chroot_for_bip32_path(self, bip32_path: str) -> Optional[str]:
        steps = bip32_path_to_uints(bip32_path)
        for chroot in COLDCARD_BASE_BIP32_PATHS:
            chroot_steps = bip32_path_to_uints(chroot)
            if steps[:len(chroot_steps)] == chroot_steps:
                return chroot
        return None

    def _relative_steps(self, chroot: str) -> DerivationPath:
        return bip32_path_to_uints(self.bip32_path)[len(bip32_path_to_uints(chroot)):]

    def _validate_bip32_path(self, bip32_path: str) -> Optional[str]:
        try:
            chroot = self.chroot_for_bip32_path(bip32_path)
        except ValidationError as e:
            return str(e)
        if chroot is None:
            return _("The bip32Path must begin with one of the known Coldcard paths: {}") \
                .format(", ".join(COLDCARD_BASE_BIP32_PATHS))
        if any(step & BIP32_HARDENED for step in self._relative_steps(chroot)):
            return _("The bip32Path below {} must not have hardened steps").format(chroot)
        return None

    def parse(self, data: Union[str, Mapping[str, Any]]) -> dict[str, Any]:
        '''The fields of the file, with a lower case `rootFingerprint` added.

        Files without an `xfp` are accepted when the `m/45'` key is at depth one, as its
        parent fingerprint is then the root fingerprint.'''
        file_data = dict(_load_json_object(data))
        if not file_data:
            raise WalletConfigError(_("Empty JSON file."))

        has_p2sh_p2wsh = any(file_data.get(name) and file_data.get(name + "_deriv")
            for name in ("p2sh_p2wsh", COLDCARD_LEGACY_P2SH_P2WSH))
        if not has_p2sh_p2wsh or not all(file_data.get(name)
                for name in COLDCARD_REQUIRED_FIELDS):
            raise WalletConfigError(_("Missing required params. Was this file exported from "
                "a Coldcard? If you are using firmware version 4.1.0 please upgrade to 4.1.1 "
                "or later."))

        xfp = file_data.get("xfp")
        if xfp:
            validate_root_fingerprint(xfp)
        depth = decode_extended_public_key(file_data["p2sh"])[4]
        if not xfp and depth != 1:
            raise WalletConfigError(_("No xfp in JSON file."))

        if depth == 1:
            parent_fingerprint = extended_public_key_parent_fingerprint(file_data["p2sh"])
            if xfp and xfp.lower() != parent_fingerprint:
                raise WalletConfigError(_("Computed fingerprint does not match the one in "
                    "the file."))
            xfp = xfp or parent_fingerprint

        file_data["rootFingerprint"] = xfp.lower()
        return file_data

    def derive_extended_public_key(self, file_data: Mapping[str, Any]) -> str:
        '''The key for `bip32_path`, with the standard version bytes of the network.'''
        if self.bip32_path_error is not None:
            raise ValidationError(self.bip32_path_error)
        chroot = self.chroot_for_bip32_path(self.bip32_path)
        assert chroot is not None

        field = COLDCARD_BASE_BIP32_PATHS[chroot]
        if field == "p2sh_p2wsh" and not file_data.get(field):
            field = COLDCARD_LEGACY_P2SH_P2WSH
        xpub = convert_extended_public_key(file_data[field], self.network)

        relative_steps = self._relative_steps(chroot)
        if not relative_steps:
            return xpub
        public_key = bip32_key_from_string(xpub)
        for n in relative_steps:
            public_key = public_key.child_safe(n)
        self.logger.debug("derived %s below %s", self.bip32_path, chroot)
        return public_key.to_extended_key_string()


class ColdcardExportExtendedPublicKey(ColdcardMultisigSettingsFileParser):
    def parse(self, data: Union[str, Mapping[str, Any]]) -> dict[str, Any]:
        file_data = super().parse(data)
        return {
            "xpub": self.derive_extended_public_key(file_data),
            "rootFingerprint": file_data["rootFingerprint"],
            "bip32Path": self.bip32_path,
        }


class ColdcardExportPublicKey(ColdcardMultisigSettingsFileParser):
    def parse(self, data: Union[str, Mapping[str, Any]]) -> dict[str, Any]:
        file_data = super().parse(data)
        xpub = self.derive_extended_public_key(file_data)
        return {
            "publicKey": decode_extended_public_key(xpub)[45:].hex(),
            "rootFingerprint": file_data["rootFingerprint"],
            "bip32Path": self.bip32_path,
        }


class ColdcardMultisigWalletConfig(Interaction):
    keystore_kind = KeystoreKind.COLDCARD

    def __init__(self, json_config: Union[str, Mapping[str, Any]]) -> None:
        super().__init__()
        self.json_config = _load_json_object(json_config)

        name = self.json_config.get("uuid") or self.json_config.get("name")
        if not name:
            raise WalletConfigError(_("Configuration file needs a UUID or a name."))
        self.name: str = name

        quorum = self.json_config.get("quorum")
        if not isinstance(quorum, Mapping) or \
                not (quorum.get("requiredSigners") and quorum.get("totalSigners")):
            raise WalletConfigError(_("Configuration file needs quorum.requiredSigners and "
                "quorum.totalSigners."))
        self.required_signers: int = quorum["requiredSigners"]
        self.total_signers: int = quorum["totalSigners"]

        address_type = self.json_config.get("addressType")
        if not address_type:
            raise WalletConfigError(_("Configuration file needs addressType."))
        self.address_type: str = address_type

        extended_public_keys = self.json_config.get("extendedPublicKeys")
        if not extended_public_keys or not isinstance(extended_public_keys, list):
            raise WalletConfigError(_("Configuration file needs extendedPublicKeys."))
        for entry in extended_public_keys:
            if not isinstance(entry, Mapping) or not entry.get("xpub"):
                raise WalletConfigError(_("Each of extendedPublicKeys needs an xpub."))
            # Every key needs a fingerprint, placeholders are fine for keys not on this device.
            xfp = entry.get("xfp")
            if not xfp or xfp == UNKNOWN_MARKER:
                raise WalletConfigError(_("ExtendedPublicKeys missing at least one xfp."))
            try:
                validate_root_fingerprint(xfp)
            except ValidationError as e:
                raise WalletConfigError(str(e)) from e
        self.extended_public_keys: list[Mapping[str, Any]] = list(extended_public_keys)

    def adapt(self) -> str:
        '''The contents of the text file to be loaded onto the Coldcard.'''
        lines = [
            f"Name: {self.name}",
            f"Policy: {self.required_signers} of {self.total_signers}",
            f"Format: {self.address_type}",
            "",
        ]
        for entry in self.extended_public_keys:
            derivation = get_masked_derivation(entry["xpub"], entry.get("bip32Path"))
            lines.append(f"Derivation: {derivation}")
            lines.append(f"{entry['xfp']}: {entry['xpub']}")
        return COLDCARD_CONFIG_HEADER.format(version=COLDCARD_WALLET_CONFIG_VERSION) + \
            "\n".join(lines) + "\n"

    def run(self) -> str:
        return self.adapt()
