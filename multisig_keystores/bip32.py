# Multisig Keystores - keystore adapters for multisig coordinators
# Copyright (C) 2018 The Electrum developers
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

import re
from typing import Optional

from bitcoinx import Base58Error, base58_decode_check, base58_encode_check, \
    bip32_decompose_chain_string

from .constants import DerivationPath, Network, ROOT_FINGERPRINT_LENGTH, UNKNOWN_MARKER
from .exceptions import ValidationError
from .i18n import _
from .networks import lookup_xpub_verbytes, network_params


EXTENDED_KEY_LENGTH = 78

# Only apostrophes mark hardened steps, the `h` notation is not accepted from coordinators.
BIP32_PATH_RE = re.compile(r"^(m(/\d+'?)*|\d+'?(/\d+'?)*)$")
ROOT_FINGERPRINT_RE = re.compile(r"^[0-9a-fA-F]{%d}$" % ROOT_FINGERPRINT_LENGTH)


def normalize_bip32_path(path: str) -> str:
    '''Add the `m/` prefix to relative paths, like "48'/1'/0'/2'".'''
    if path.startswith("m"):
        return path
    return "m/" + path


def bip32_path_to_uints(path: str) -> DerivationPath:
    """Convert a bip32 path to a tuple of uint32 integers with hardened flags.

    m/48'/1'/0 -> (0x80000030, 0x80000001, 0)
    """
    if not isinstance(path, str) or BIP32_PATH_RE.match(path) is None:
        raise ValidationError(_("Invalid bip32 path: {}").format(path))
    if path == "m":
        return ()
    try:
        return tuple(bip32_decompose_chain_string(normalize_bip32_path(path)))
    except (TypeError, ValueError) as e:
        raise ValidationError(_("Invalid bip32 path: {}").format(path)) from e


def validate_bip32_path(path: str) -> None:
    bip32_path_to_uints(path)


def is_bip32_path(path: str) -> bool:
    try:
        validate_bip32_path(path)
        return True
    except ValidationError:
        return False


def is_unknown_path(path: Optional[str]) -> bool:
    return not path or UNKNOWN_MARKER.lower() in path.lower()


def validate_root_fingerprint(xfp: str) -> None:
    if not isinstance(xfp, str):
        raise ValidationError(_("Root fingerprint must be a string"))
    if len(xfp) != ROOT_FINGERPRINT_LENGTH:
        raise ValidationError(_("Root fingerprint must be length {}").format(
            ROOT_FINGERPRINT_LENGTH))
    if ROOT_FINGERPRINT_RE.match(xfp) is None:
        raise ValidationError(_("Root fingerprint must be valid hex"))


def decode_extended_public_key(xpub: str) -> bytes:
    '''The raw 78 bytes of any extended public key we know the version bytes of.'''
    if not isinstance(xpub, str):
        raise ValidationError(_("Extended public key must be a string"))
    try:
        raw = base58_decode_check(xpub)
    except (Base58Error, ValueError) as e:
        raise ValidationError(_("Invalid extended public key {}").format(xpub)) from e
    if len(raw) != EXTENDED_KEY_LENGTH:
        raise ValidationError(_("Invalid extended public key length {}").format(len(raw)))
    if lookup_xpub_verbytes(raw[:4]) is None:
        raise ValidationError(_("Unknown extended public key version bytes {}").format(
            raw[:4].hex()))
    if raw[45] not in (2, 3):
        raise ValidationError(_("Extended public key does not contain a compressed public key"))
    return raw


def validate_extended_public_key(xpub: str, network: Network,
        allow_alternate_versions: bool=False) -> bytes:
    '''Raises `ValidationError` unless `xpub` is an extended public key on `network`.

    By default only the standard `xpub`/`tpub` version bytes are accepted. The SLIP-132
    variants of the same network are accepted when `allow_alternate_versions` is set.'''
    raw = decode_extended_public_key(xpub)
    lookup = lookup_xpub_verbytes(raw[:4])
    assert lookup is not None
    key_network, is_standard = lookup
    params = network_params(network)
    if key_network != network or not (is_standard or allow_alternate_versions):
        raise ValidationError(_("Extended public key must begin with {}").format(
            params.XPUB_PREFIX))
    return raw


def convert_extended_public_key(xpub: str, network: Network) -> str:
    '''Re-encode `xpub` with the standard version bytes of `network`.'''
    raw = decode_extended_public_key(xpub)
    verbytes = network_params(network).XPUB_VERBYTES
    if raw[:4] == verbytes:
        return xpub
    return base58_encode_check(verbytes + raw[4:])


def extended_public_key_depth(xpub: str) -> int:
    return decode_extended_public_key(xpub)[4]


def extended_public_key_parent_fingerprint(xpub: str) -> str:
    return decode_extended_public_key(xpub)[5:9].hex()


def get_masked_derivation(xpub: str, bip32_path: Optional[str], to_mask: str="m") -> str:
    '''An unknown derivation is replaced by a path of unhardened zero steps as deep as the key.

    This keeps the depth of the path consistent with the extended public key, which is all
    a signing device can check for keys that are not its own.'''
    if is_unknown_path(bip32_path):
        return to_mask + "/0" * extended_public_key_depth(xpub)
    assert bip32_path is not None
    return bip32_path
