from __future__ import annotations
import json
import os
import stat
import threading
from typing import Any, Callable, Type, TypeVar

from .constants import Network
from .logs import logs
from .networks import network_from_name


logger = logs.get_logger("simple_config")


CONFIG_VERSION = 2
CONFIG_FILE_NAME = "config"

T = TypeVar('T')


def default_user_dir() -> str:
    return os.path.join(os.environ.get("HOME", "."), ".multisig-keystores")


class SimpleConfig:
    """
    Settings for the coordinator facing entry points.

    Options given by the application (usually from its command line) take precedence over the
    user config file in the data directory. Only the user config is ever written, and the
    data directory is created when it first is.
    """

    def __init__(self, options: dict[str, Any]|None=None,
            read_user_config_function: Callable[[str], dict[str, Any]]|None=None,
            read_user_dir_function: Callable[[], str]|None=None) -> None:
        self.lock = threading.RLock()

        self.cmdline_options = dict(options or {})
        # The version only describes the user config.
        self.cmdline_options.pop('config_version', None)
        self._replace_testnet_flag(self.cmdline_options)

        self.user_dir = read_user_dir_function or default_user_dir
        self.path = os.path.abspath(self.cmdline_options.get('multisig_keystores_path') or
            self.user_dir())
        logger.debug("multisig-keystores directory '%s'", self.path)

        read_function = read_user_config_function or read_user_config
        self.user_config = read_function(self.path) or { 'config_version': CONFIG_VERSION }
        self._upgrade_user_config()

    def _replace_testnet_flag(self, config: dict[str, Any]) -> None:
        """The old `testnet` boolean becomes the `network` name."""
        if 'testnet' not in config:
            return
        testnet = config.pop('testnet')
        if 'network' not in config:
            config['network'] = (Network.TESTNET if testnet else Network.MAINNET).value
            logger.warning('Note that the testnet variable has been deprecated. '
                'You should use network instead.')

    def _upgrade_user_config(self) -> None:
        version = self.get_config_version()
        if version >= CONFIG_VERSION:
            return
        if version < 1:
            raise ValueError(f"config upgrade: unexpected version {version}")
        logger.debug("upgrading config from version %d", version)
        with self.lock:
            self._replace_testnet_flag(self.user_config)
            self.user_config['config_version'] = CONFIG_VERSION
            self.save_user_config()

    def get(self, key: str, default: Any=None) -> Any|None:
        with self.lock:
            value = self.cmdline_options.get(key)
            return self.user_config.get(key, default) if value is None else value

    def get_explicit_type(self, return_type: Type[T], key: str, default: T) -> T:
        value = self.get(key, default)
        assert isinstance(value, return_type), f"{key} is not a {return_type.__name__}"
        return value

    def is_modifiable(self, key: str) -> bool:
        return key not in self.cmdline_options

    def set_key(self, key: str, value: Any, save: bool=True) -> None:
        if not self.is_modifiable(key):
            logger.warning("Not changing config key '%s' set on the command line", key)
            return
        with self.lock:
            if value is None:
                self.user_config.pop(key, None)
            else:
                self.user_config[key] = value
            if save:
                self.save_user_config()

    def save_user_config(self) -> None:
        os.makedirs(self.path, mode=stat.S_IRWXU, exist_ok=True)
        config_path = os.path.join(self.path, CONFIG_FILE_NAME)
        with self.lock:
            text = json.dumps(self.user_config, indent=4, sort_keys=True)
        with open(config_path, "w", encoding='utf-8') as f:
            f.write(text)
        os.chmod(config_path, stat.S_IRUSR | stat.S_IWUSR)

    def get_config_version(self) -> int:
        version = self.user_config.get('config_version', 1)
        if version > CONFIG_VERSION:
            logger.warning('WARNING: config version (%s) is higher than ours (%s)',
                version, CONFIG_VERSION)
        return version

    def get_network(self) -> Network:
        """The network for wallet configurations that do not name one."""
        return network_from_name(self.get_explicit_type(str, 'network', Network.MAINNET.value))

    def get_verify_registration(self) -> bool:
        """Whether wallet registration goes to the device even with a known HMAC."""
        return self.get_explicit_type(bool, 'verify_registration', False)


def read_user_config(path: str) -> dict[str, Any]:
    """The user config settings in the data directory `path`, if there are any."""
    config_path = os.path.join(path, CONFIG_FILE_NAME) if path else ""
    if not config_path or not os.path.isfile(config_path):
        return {}
    try:
        with open(config_path, "r", encoding='utf-8') as f:
            result = json.load(f)
    except (OSError, ValueError):
        logger.exception("Cannot read config file %s.", config_path)
        return {}
    return result if isinstance(result, dict) else {}
