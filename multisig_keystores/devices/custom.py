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
A "custom" keystore is anything the coordinator has no integration for. The user types or
pastes the extended public key, and optionally the root fingerprint, for the path they were
asked for.
"""

from __future__ import annotations
from typing import Any, Mapping, Optional

from ..bip32 import bip32_path_to_uints, decode_extended_public_key, \
    validate_extended_public_key, validate_root_fingerprint
from ..constants import KeystoreKind, ROOT_FINGERPRINT_LENGTH
from ..exceptions import ValidationError
from ..i18n import _
from .interaction import Interaction, require_network


class CustomExportExtendedPublicKey(Interaction):
    keystore_kind = KeystoreKind.CUSTOM

    def __init__(self, network: Any, bip32_path: str) -> None:
        super().__init__()
        self.network = require_network(network)
        self.bip32_path = bip32_path
        self.bip32_path_error: Optional[str] = None
        try:
            self.bip32_path_depth = len(bip32_path_to_uints(bip32_path))
        except ValidationError as e:
            self.bip32_path_error = str(e)

    def is_supported(self) -> bool:
        return self.bip32_path_error is None

    def parse(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Checks the pasted `xpub` against the network and the depth of the requested path.

        Without a `rootFingerprint` one is made up from the last four bytes of the public key,
        so that every key in a wallet config has one.
        """
        if self.bip32_path_error is not None:
            raise ValidationError(self.bip32_path_error)
        if not isinstance(data, Mapping):
            raise ValidationError(_("Not valid JSON."))

        xpub = data.get("xpub")
        try:
            validate_extended_public_key(xpub, self.network, allow_alternate_versions=True)
        except ValidationError as e:
            raise ValidationError(_("Not a valid ExtendedPublicKey.")) from e
        raw = decode_extended_public_key(xpub)

        root_fingerprint = data.get("rootFingerprint")
        if root_fingerprint:
            try:
                validate_root_fingerprint(root_fingerprint)
            except ValidationError as e:
                raise ValidationError(_("Root fingerprint validation error: {}.").format(
                    str(e).lower())) from e
        else:
            root_fingerprint = raw[-ROOT_FINGERPRINT_LENGTH // 2:].hex()
            self.logger.debug("assigned root fingerprint %s to %s", root_fingerprint, xpub)

        depth = raw[4]
        if depth != self.bip32_path_depth:
            raise ValidationError(_("Depth of ExtendedPublicKey ({}) does not match depth of "
                "BIP32 path ({}).").format(depth, self.bip32_path_depth))

        return {
            "xpub": xpub,
            "rootFingerprint": root_fingerprint,
            "bip32Path": self.bip32_path,
        }
