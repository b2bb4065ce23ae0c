"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    ERROR = 1
    CONNECTION_ERROR = 2
    BUILD_FAILED = 3
    UNEXPECTED_ERROR = 4


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    RELEASES_URI = "https://www.kernel.org/releases.json"
    SOURCES_BASE_DIR = "/usr/src"
    CACHE_DIR = "/var/cache/linux-update"
    MAKE = "make"

    ENV_RELEASES_URI = "LINUX_RELEASE_URI"
    ENV_SOURCES_BASE_DIR = "LINUX_SOURCES_BASE_DIR"
    ENV_CACHE_DIR = "LINUX_CACHE_DIR"
    ENV_MAKE = "LINUX_UPDATE_MAKE"
    ENV_LOG_LEVEL = "LINUX_UPDATE_LOG_LEVEL"

    SOURCE_DIR_GLOB = "linux-*"
    CONFIG_FILE = ".config"
    DOWNLOAD_SUFFIX = ".download"
    TARBALL_SUFFIXES = (".tar.xz", ".tar.gz", ".tar.bz2", ".tar")

    TARGETS_KERNELVERSION = ("-is", "kernelversion")
    TARGETS_OLDCONFIG = ("oldconfig",)
    TARGETS_MENUCONFIG = ("menuconfig",)
    TARGETS_COMPILE = ("all",)
    TARGETS_INSTALL = ("modules_install", "install")

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    DOWNLOAD_CHUNK_SIZE = 1024 * 1024
    USER_AGENT = "linux-update/0.3.0"
