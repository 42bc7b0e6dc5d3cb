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
Multisig wallet policies.

A wallet configuration (quorum, address type, ordered cosigner keys) is turned into a policy
template like `wsh(sortedmulti(2,@0/**,@1/**))` and the list of key origins the `@i`
placeholders refer to. The template is positional, the `i` in `@i` is the position of the
key in the configuration. Comparing two policies for the same set of cosigners is done on
the set of key origin strings, which does not depend on that order.
"""

from __future__ import annotations
import dataclasses
import json
import re
from typing import Any, Iterable, Optional, Sequence, TYPE_CHECKING

from .bip32 import convert_extended_public_key, get_masked_derivation, normalize_bip32_path, \
    validate_bip32_path, validate_extended_public_key, validate_root_fingerprint
from .constants import ADDRESS_TYPE_SCRIPT_WRAPPERS, AddressType, KEY_PLACEHOLDER_SUFFIX, \
    MAX_POLICY_NAME_LENGTH, MULTISIG_SCRIPT, Network, POLICY_NAME_ELLIPSIS, ScriptWrapper, \
    SUPPORTED_SCRIPT_TYPES
from .exceptions import KeyOriginCountMismatchError, MalformedTemplateError, \
    MissingNameError, MissingQuorumError, QuorumExceedsKeysError, UnknownAddressTypeError, \
    UnsupportedScriptTypeError, ValidationError
from .i18n import _
from .logs import logs
from .networks import network_from_name
from .standards.wallet_policy import WalletPolicy

if TYPE_CHECKING:
    from .config import MultisigWalletConfig


logger = logs.get_logger("policy")

KEY_PLACEHOLDER_RE = re.compile(r"@\d+/\*\*")
INTEGER_RE = re.compile(r"\d+")
KEY_ORIGIN_RE = re.compile(r"^\[(?P<xfp>[^/\]]*)(?P<path>[^\]]*)\](?P<xpub>[^\[\]]+)$")


@dataclasses.dataclass(frozen=True)
class KeyOrigin:
    """
    The provenance of one cosigner key, `[76223a6e/48'/1'/0'/2']tpubDE7N...` in descriptors.
    """
    root_fingerprint: str
    bip32_path: str
    xpub: str
    network: Network

    def __post_init__(self) -> None:
        validate_root_fingerprint(self.root_fingerprint)
        validate_bip32_path(self.bip32_path)
        try:
            network = network_from_name(self.network)
        except ValueError as e:
            raise ValidationError(_("Unsupported network {}").format(self.network)) from e
        object.__setattr__(self, "network", network)
        # Equality and hashing then agree with the descriptor form.
        object.__setattr__(self, "bip32_path", normalize_bip32_path(self.bip32_path))
        validate_extended_public_key(self.xpub, network)

    def __str__(self) -> str:
        return f"[{self.root_fingerprint}{self.bip32_path[1:]}]{self.xpub}"

    @classmethod
    def from_string(cls, text: str, network: Network) -> KeyOrigin:
        match = KEY_ORIGIN_RE.match(text.strip())
        if match is None:
            raise ValidationError(_("Invalid key origin {}").format(text))
        path = match.group("path").lstrip("/")
        return cls(root_fingerprint=match.group("xfp"),
            bip32_path=path or "m",
            xpub=match.group("xpub"), network=network)


## Policy template grammar

def validate_script_type(template: str,
        supported: Sequence[ScriptWrapper]=SUPPORTED_SCRIPT_TYPES) -> ScriptWrapper:
    for script_type in supported:
        prefix = script_type.value + "("
        if template.startswith(prefix):
            return script_type
    raise UnsupportedScriptTypeError(_("Invalid script type in template {}. Only script "
        "types {} accepted").format(template, ", ".join(s.value for s in supported)))


def extract_required_signers(template: str) -> int:
    """
    The first integer literal before the first key placeholder is the quorum.
    """
    placeholder_position = template.find("@")
    head = template if placeholder_position == -1 else template[:placeholder_position]
    match = INTEGER_RE.search(head)
    if match is None:
        raise MissingQuorumError()
    return int(match.group(0))


def count_key_placeholders(template: str) -> int:
    count = len(KEY_PLACEHOLDER_RE.findall(template))
    if count == 0:
        raise MalformedTemplateError(_("No key placeholders found in template {}").format(
            template))
    return count


def validate_key_count(template: str) -> None:
    required_signers = extract_required_signers(template)
    if required_signers == 0:
        raise QuorumExceedsKeysError(_("Required signers in policy {} must be at least "
            "one").format(template))
    total_signers = count_key_placeholders(template)
    if total_signers < required_signers:
        raise QuorumExceedsKeysError(_("Required signers in policy {} is {} but found only "
            "{} total keys").format(template, required_signers, total_signers))


def validate_multisig_policy_template(template: str,
        supported: Sequence[ScriptWrapper]=SUPPORTED_SCRIPT_TYPES) -> None:
    validate_script_type(template, supported)
    validate_key_count(template)


## Template derivation

def _address_type(wallet_config: MultisigWalletConfig) -> AddressType:
    try:
        return AddressType(wallet_config.address_type)
    except ValueError:
        raise UnknownAddressTypeError(wallet_config.address_type) from None


def derive_template(wallet_config: MultisigWalletConfig) -> str:
    script_type = ADDRESS_TYPE_SCRIPT_WRAPPERS.get(_address_type(wallet_config))
    if script_type is None:
        raise UnknownAddressTypeError(wallet_config.address_type)

    # The placeholder index is the position in the configuration, whatever order it is in.
    placeholders = ",".join(f"@{index}{KEY_PLACEHOLDER_SUFFIX}"
        for index in range(len(wallet_config.extended_public_keys)))
    body = f"{MULTISIG_SCRIPT}({wallet_config.quorum.required_signers},{placeholders})"
    if script_type == ScriptWrapper.SH_WSH:
        return f"sh(wsh({body}))"
    return f"{script_type.value}({body})"


def derive_key_origins(wallet_config: MultisigWalletConfig) -> list[KeyOrigin]:
    network = wallet_config.network
    key_origins: list[KeyOrigin] = []
    for entry in wallet_config.extended_public_keys:
        xpub = convert_extended_public_key(entry.xpub, network)
        key_origins.append(KeyOrigin(
            root_fingerprint=entry.xfp, # type: ignore[arg-type]
            bip32_path=get_masked_derivation(xpub, entry.bip32_path),
            xpub=xpub,
            network=network))
    return key_origins


## Policies

def truncate_policy_name(name: str) -> str:
    """
    The limit is on the UTF-8 encoding, the name is cut at a character boundary.
    """
    encoded = name.encode()
    if len(encoded) <= MAX_POLICY_NAME_LENGTH:
        return name
    logger.warning("Wallet policy name too long. (%d) greater than max of %d bytes.",
        len(encoded), MAX_POLICY_NAME_LENGTH)
    limit = MAX_POLICY_NAME_LENGTH - len(POLICY_NAME_ELLIPSIS.encode())
    # A multibyte character split by the limit is dropped whole.
    return encoded[:limit].decode(errors="ignore") + POLICY_NAME_ELLIPSIS


class MultisigWalletPolicy:
    def __init__(self, name: str, template: str, key_origins: Iterable[KeyOrigin]) -> None:
        self._name = truncate_policy_name(name)

        validate_multisig_policy_template(template)
        self._template = template

        key_origins = tuple(key_origins)
        total_signer_count = count_key_placeholders(template)
        if total_signer_count != len(key_origins):
            raise KeyOriginCountMismatchError(total_signer_count, len(key_origins))
        self._key_origins = key_origins

    @classmethod
    def from_wallet_config(cls, wallet_config: MultisigWalletConfig) -> MultisigWalletPolicy:
        # The uuid is preferred over the name when both are present.
        name = (wallet_config.uuid or "").strip() or (wallet_config.name or "").strip()
        if not name:
            raise MissingNameError()
        return cls(name=name, template=derive_template(wallet_config),
            key_origins=derive_key_origins(wallet_config))

    @property
    def name(self) -> str:
        return self._name

    @property
    def template(self) -> str:
        return self._template

    @property
    def key_origins(self) -> tuple[KeyOrigin, ...]:
        return self._key_origins

    @property
    def keys(self) -> list[str]:
        return [ str(key_origin) for key_origin in self._key_origins ]

    def key_set(self) -> frozenset[str]:
        return frozenset(self.keys)

    def is_equivalent(self, other: MultisigWalletPolicy) -> bool:
        """
        Whether both policies describe the same cosigner set with the same script, ignoring
        the order the cosigner keys were given in and the policy names.
        """
        return self.key_set() == other.key_set() and \
            KEY_PLACEHOLDER_RE.sub("@", self._template) == \
                KEY_PLACEHOLDER_RE.sub("@", other._template)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultisigWalletPolicy):
            return NotImplemented
        return (self._name, self._template, self.keys) == \
            (other._name, other._template, other.keys)

    def __hash__(self) -> int:
        return hash((self._name, self._template, tuple(self.keys)))

    def __repr__(self) -> str:
        return f"MultisigWalletPolicy(name={self._name!r}, template={self._template!r}, " \
            f"keys={self.keys!r})"

    def to_external_policy(self) -> WalletPolicy:
        return WalletPolicy(self._name, self._template, self.keys)

    to_ledger_policy = to_external_policy

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self._name,
            "template": self._template,
            "keyOrigins": self.keys,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any], network: Network) -> MultisigWalletPolicy:
        return cls(name=data["name"], template=data["template"],
            key_origins=[ KeyOrigin.from_string(text, network) for text in data["keyOrigins"] ])

    @classmethod
    def from_json(cls, text: str, network: Network) -> MultisigWalletPolicy:
        return cls.from_dict(json.loads(text), network)


def policy_key_set(policies: Iterable[MultisigWalletPolicy]) -> Optional[frozenset[str]]:
    """
    The key set shared by all `policies`, or `None` if they do not all share one.
    """
    key_sets = { policy.key_set() for policy in policies }
    if len(key_sets) == 1:
        return key_sets.pop()
    return None
