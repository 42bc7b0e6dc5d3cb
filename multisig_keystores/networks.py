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

# There is no "current network" here. Every function that cares about the network is passed
# one of the `Network` values explicitly and looks its parameters up in `NETWORKS`.

from types import MappingProxyType
from typing import Mapping, Optional, Type, Union

from bitcoinx import Bitcoin, BitcoinTestnet

from .constants import Network


class BitcoinMainnetParams(object):
    NETWORK = Network.MAINNET
    COIN = Bitcoin

    XPUB_VERBYTES: bytes = COIN.xpub_verbytes
    XPUB_PREFIX = 'xpub'

    # SLIP-132 script specific variants, which coordinators and devices still export.
    ALTERNATE_XPUB_VERBYTES: Mapping[str, bytes] = MappingProxyType({
        'ypub': bytes.fromhex('049d7cb2'),
        'Ypub': bytes.fromhex('0295b43f'),
        'zpub': bytes.fromhex('04b24746'),
        'Zpub': bytes.fromhex('02aa7ed3'),
    })


class BitcoinTestnetParams(object):
    NETWORK = Network.TESTNET
    COIN = BitcoinTestnet

    XPUB_VERBYTES: bytes = COIN.xpub_verbytes
    XPUB_PREFIX = 'tpub'

    ALTERNATE_XPUB_VERBYTES: Mapping[str, bytes] = MappingProxyType({
        'upub': bytes.fromhex('044a5262'),
        'Upub': bytes.fromhex('024289ef'),
        'vpub': bytes.fromhex('045f1cf6'),
        'Vpub': bytes.fromhex('02575483'),
    })


NetworkParams = Union[Type[BitcoinMainnetParams], Type[BitcoinTestnetParams]]

NETWORKS: Mapping[Network, NetworkParams] = MappingProxyType({
    Network.MAINNET: BitcoinMainnetParams,
    Network.TESTNET: BitcoinTestnetParams,
})


def network_params(network: Network) -> NetworkParams:
    return NETWORKS[network]


def network_from_name(name: Union[str, Network]) -> Network:
    '''Raises `ValueError` for anything that is not a supported network name.'''
    if isinstance(name, Network):
        return name
    return Network(str(name).lower())


def lookup_xpub_verbytes(verbytes: bytes) -> Optional[tuple[Network, bool]]:
    '''Which network a set of extended public key version bytes belongs to.

    Returns the network and whether the version bytes are the standard ones, or `None` if
    they are not known at all.'''
    for network, params in NETWORKS.items():
        if verbytes == params.XPUB_VERBYTES:
            return network, True
        if verbytes in params.ALTERNATE_XPUB_VERBYTES.values():
            return network, False
    return None
