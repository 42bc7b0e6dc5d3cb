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
Wallet policies as registered with hardware signers (BIP-388).

A wallet policy is a descriptor template, where every key expression is replaced by a
placeholder `@i` referring to the i-th entry of the key information list. The signer
registers the policy and hands back an HMAC over the serialized form, which must be given
back with every later request that uses the policy.

Serialization follows the Ledger Bitcoin application:

    version         1 byte
    name            1 byte length, utf-8 bytes
    template        varint length, sha256 of the template
    keys            varint count, merkle root of the key information strings
"""

from __future__ import annotations
from typing import Sequence

from bitcoinx import pack_varint, sha256

from ..constants import WALLET_POLICY_VERSION_V2


EMPTY_MERKLE_ROOT = bytes(32)


def merkle_leaf_hash(preimage: bytes) -> bytes:
    return sha256(b'\x00' + preimage)


def merkle_node_hash(left: bytes, right: bytes) -> bytes:
    return sha256(b'\x01' + left + right)


def _largest_power_of_two_below(n: int) -> int:
    assert n > 1
    power = 1
    while power * 2 < n:
        power *= 2
    return power


def merkle_root(leaf_hashes: Sequence[bytes]) -> bytes:
    """
    The left subtree always holds the largest power of two number of leaves that is strictly
    less than the total, so the tree shape only depends on the leaf count.
    """
    if len(leaf_hashes) == 0:
        return EMPTY_MERKLE_ROOT
    if len(leaf_hashes) == 1:
        return leaf_hashes[0]
    split = _largest_power_of_two_below(len(leaf_hashes))
    return merkle_node_hash(merkle_root(leaf_hashes[:split]), merkle_root(leaf_hashes[split:]))


class WalletPolicy:
    def __init__(self, name: str, descriptor_template: str, keys_info: Sequence[str],
            version: int=WALLET_POLICY_VERSION_V2) -> None:
        self.name = name
        self.descriptor_template = descriptor_template
        self.keys_info = list(keys_info)
        self.version = version

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WalletPolicy):
            return NotImplemented
        return self.serialize() == other.serialize()

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"WalletPolicy(name={self.name!r}, descriptor_template=" \
            f"{self.descriptor_template!r}, keys_info={self.keys_info!r})"

    def to_descriptor(self) -> str:
        """Converts a wallet policy into the descriptor (with the /<0;1> syntax)."""
        descriptor = self.descriptor_template.replace("/**", "/<0;1>/*")
        # Highest index first, otherwise `@1` would also rewrite the start of `@10`.
        for i in reversed(range(len(self.keys_info))):
            descriptor = descriptor.replace(f"@{i}", self.keys_info[i])
        if "@" in descriptor:
            raise ValueError(f"Invalid descriptor template {self.descriptor_template}: "
                "contains a key index without key information")
        return descriptor

    def serialize(self) -> bytes:
        name_bytes = self.name.encode()
        if len(name_bytes) > 0xff:
            raise ValueError(f"Wallet policy name is {len(name_bytes)} bytes long, the most "
                "that can be serialized is 255")
        template_bytes = self.descriptor_template.encode()
        return b"".join([
            bytes([self.version, len(name_bytes)]),
            name_bytes,
            pack_varint(len(template_bytes)),
            sha256(template_bytes),
            pack_varint(len(self.keys_info)),
            merkle_root([ merkle_leaf_hash(key_info.encode()) for key_info in self.keys_info ]),
        ])

    @property
    def id(self) -> bytes:
        return sha256(self.serialize())
