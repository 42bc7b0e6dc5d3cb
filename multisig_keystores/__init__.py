from .version import PACKAGE_VERSION

__version__ = PACKAGE_VERSION
