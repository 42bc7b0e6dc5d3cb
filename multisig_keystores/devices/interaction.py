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

from __future__ import annotations
from typing import Any

from ..constants import KeystoreKind, Network
from ..exceptions import UnsupportedInteractionError, ValidationError
from ..i18n import _
from ..logs import logs
from ..networks import network_from_name


def require_network(network: Any) -> Network:
    try:
        return network_from_name(network)
    except ValueError:
        raise ValidationError(_("Unknown network.")) from None


class Interaction(object):
    '''One operation against one keystore.

    Subclasses do their work in `run`, anything that talks to a device gets the vendor
    client passed in by the caller.'''
    keystore_kind: KeystoreKind|None = None

    def __init__(self) -> None:
        name = self.keystore_kind.value if self.keystore_kind is not None else "interaction"
        self.logger = logs.get_logger(name)

    def is_supported(self) -> bool:
        return True

    def run(self) -> Any:
        raise NotImplementedError

    def parse(self, data: Any) -> Any:
        '''Interactions with keystores that are used without a cable read what the user
        brings back from the keystore here.'''
        raise NotImplementedError


class UnsupportedInteraction(Interaction):
    def __init__(self, code: str, text: str) -> None:
        super().__init__()
        self.code = code
        self.text = text

    def is_supported(self) -> bool:
        return False

    def run(self) -> Any:
        raise UnsupportedInteractionError(self.text)

    def parse(self, data: Any) -> Any:
        raise UnsupportedInteractionError(self.text)
