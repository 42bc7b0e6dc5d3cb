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

from .i18n import _


class ValidationError(Exception):
    pass


class WalletConfigError(ValidationError):
    pass


class PolicyTemplateError(Exception):
    pass

class UnsupportedScriptTypeError(PolicyTemplateError):
    pass

class MissingQuorumError(PolicyTemplateError):
    def __str__(self) -> str:
        return _("Expected to find a required number of signers from the quorum")

class QuorumExceedsKeysError(PolicyTemplateError):
    pass

class MalformedTemplateError(PolicyTemplateError):
    pass


class KeyOriginCountMismatchError(Exception):
    expected_count: int
    actual_count: int

    def __init__(self, expected_count: int, actual_count: int) -> None:
        super().__init__()

        self.expected_count = expected_count
        self.actual_count = actual_count

    def __str__(self) -> str:
        return _("Expected {} key origins but {} were passed").format(
            self.expected_count, self.actual_count)


class UnknownAddressTypeError(Exception):
    address_type: object

    def __init__(self, address_type: object) -> None:
        super().__init__()

        self.address_type = address_type

    def __str__(self) -> str:
        return _("Unknown address type: {}").format(self.address_type)


class MissingNameError(Exception):
    def __str__(self) -> str:
        return _("A wallet policy requires the wallet configuration to have a uuid or a name")


class AddressMismatchError(Exception):
    expected: str
    actual: str

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__()

        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        return _("Device returned address {} but {} was expected").format(
            self.actual, self.expected)


class UnsupportedInteractionError(Exception):
    pass
