"""Shared fixtures: stub build tools and fake kernel source trees."""

import os
import stat
import textwrap
from pathlib import Path
from typing import Optional

import pytest

from kbuild.driver import BuildDriver


# Stand-in for make. Usage mirrors the real tool: make -C DIR TARGET...
# Every invocation is appended to DIR/.make.log; "kernelversion" prints the
# content of DIR/.kernelversion; "oldconfig" and "menuconfig" create .config;
# other targets fail with the status stored in DIR/.fail when it exists.
STUB_MAKE = """\
#!/bin/sh
[ "$1" = "-C" ] || exit 2
dir="$2"
shift 2
echo "$*" >> "$dir/.make.log"
case "$*" in
  "-is kernelversion")
    [ -f "$dir/.kernelversion" ] || exit 2
    cat "$dir/.kernelversion"
    ;;
  oldconfig|menuconfig)
    touch "$dir/.config"
    echo "configured"
    ;;
  *)
    if [ -f "$dir/.fail" ]; then
      echo "failing $*"
      exit "$(cat "$dir/.fail")"
    fi
    echo "built $*"
    ;;
esac
"""


def write_script(directory: Path, name: str, body: str) -> Path:
    """Write an executable shell script and return its path."""
    path = Path(directory) / name
    path.write_text(textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def make_tree(base: Path, version: str, config: Optional[str] = None, name: Optional[str] = None) -> Path:
    """Create a fake source directory answering ``kernelversion`` with ``version``."""
    path = Path(base) / (name or f"linux-{version}")
    path.mkdir(parents=True)
    (path / ".kernelversion").write_text(version + "\n")
    if config is not None:
        (path / ".config").write_text(config)
    return path


def make_log(path: Path) -> list:
    """Target lists the stub make was called with for ``path``, in order."""
    log = Path(path) / ".make.log"
    if not log.exists():
        return []
    return log.read_text().splitlines()


def open_fds():
    """Open descriptors of this process, or None where /proc is unavailable."""
    if not os.path.isdir("/proc/self/fd"):
        return None
    return set(os.listdir("/proc/self/fd"))


@pytest.fixture
def stub_make(tmp_path):
    bindir = tmp_path / "bin"
    bindir.mkdir()
    return write_script(bindir, "make", STUB_MAKE)


@pytest.fixture
def driver(stub_make):
    return BuildDriver(str(stub_make))


@pytest.fixture
def sources_dir(tmp_path):
    path = tmp_path / "src"
    path.mkdir()
    return path
