"""Argument parsing functionality for linux-update."""

import argparse
from typing import List, Optional

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _add_version(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("version",
                        metavar="VERSION",
                        help="Kernel version (default: most actual version)",
                        nargs="?",
                        default=None)


def _add_config(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-c", "--config",
                       dest="CONFIG",
                       help=("Which pre existing config should be used? Can be an other "
                             "linux-VERSION with an old config or a config-file. "
                             "It replaces an existing config."),
                       action="store",
                       type=str,
                       default=None)
    group.add_argument("--no-config",
                       dest="CONFIG",
                       help="Do not copy any config.",
                       action="store_false",
                       default=None)
    parser.set_defaults(CONFIG=None)


def _add_channel(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-a", "--any",
                       dest="MONIKER",
                       help="Select any versions.",
                       action="store_const",
                       const=None)
    group.add_argument("-o", "--longterm",
                       dest="MONIKER",
                       help="Select long term versions.",
                       action="store_const",
                       const="longterm")
    group.add_argument("-s", "--stable",
                       dest="MONIKER",
                       help="Select stable versions (default).",
                       action="store_const",
                       const="stable")
    group.add_argument("-m", "--mainline",
                       dest="MONIKER",
                       help="Select mainline versions.",
                       action="store_const",
                       const="mainline")
    parser.set_defaults(MONIKER="stable")


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with one subparser per command."""
    parser = argparse.ArgumentParser(
        prog="linux-update",
        description="Fetch, configure, compile and install linux kernel sources",
        add_help=True,
    )
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=LOG_LEVELS,
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--config-file",
                        dest="CONFIG_FILE",
                        help="Path to configuration file (YAML or JSON)",
                        action="store",
                        type=str)

    sub = parser.add_subparsers(dest="action", metavar="COMMAND")
    sub.required = True

    p = sub.add_parser("releases", help="Prints known linux-kernel releases")
    p.add_argument("moniker", metavar="MONIKER", nargs="?", default=None,
                   help="stable, mainline, longterm, linux-next (default: no moniker)")
    p.add_argument("-m", "--moniker", dest="MONIKER_OPT", default=None,
                   help="stable, mainline, longterm (default: no moniker)")
    p.add_argument("-l", "--latest", dest="LATEST", action="store_true",
                   help="Only the most actual linux kernel.")

    p = sub.add_parser("fetched", help="Prints all fetched linux-kernel")
    p.add_argument("-l", "--latest", dest="LATEST", action="store_true",
                   help="Only the most actual linux kernel.")

    p = sub.add_parser("fetch", help="Download linux-kernel")
    _add_version(p)
    _add_channel(p)
    p.add_argument("-p", "--print", dest="PRINT", action="store_true",
                   help="Only print the URI. No fetch.")

    p = sub.add_parser("importconfig",
                       help=("Imports an other config from file or an other source directory "
                             "(default: most actual version with config to most actual version)"))
    _add_version(p)
    p.add_argument("config", metavar="CONFIG", nargs="?", default=None,
                   help="Config file or linux-VERSION to import from")

    for name, aliases, text in (
            ("oldconfig", [], "Configure linux-VERSION with make oldconfig"),
            ("menuconfig", ["configure"], "Configure linux-VERSION with make menuconfig"),
            ("all", [], "Will oldconfig, compile and install kernel and modules")):
        p = sub.add_parser(name, aliases=aliases, help=text)
        p.set_defaults(action=name)
        _add_version(p)
        _add_config(p)

    p = sub.add_parser("compile", help="Will compile kernel and modules")
    _add_version(p)

    p = sub.add_parser("install",
                       help="Will install kernel and modules. It will trigger updating third-party-modules")
    _add_version(p)

    p = sub.add_parser("update", help="Download, compile and install linux-kernel")
    _add_version(p)
    _add_channel(p)
    _add_config(p)

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
