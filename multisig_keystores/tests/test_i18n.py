from multisig_keystores import i18n
from multisig_keystores.i18n import _


def test_untranslated_message_returned() -> None:
    assert _("Unable to parse JSON.") == "Unable to parse JSON."


def test_set_language_without_catalog() -> None:
    try:
        i18n.set_language("xx")
        assert i18n._("Invalid braid index {}").format(2) == "Invalid braid index 2"
    finally:
        i18n.set_language("en")
