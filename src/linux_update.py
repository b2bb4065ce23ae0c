"""linux-update - keep locally built linux kernels up to date.

    Returns:
        int: Exit code
"""
import logging
import sys
from typing import List, Optional

from args import parse_args
from commands import LinuxUpdate
from common.logging_utils import configure_logging
from config import load_settings
from constants import ExitCodes
from errors import LinuxUpdateError

logger = logging.getLogger(__name__)


def _setup_logging(args) -> None:
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    configure_logging(getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)
        logger.debug("Logging to file: %s", log_file)


def dispatch(app: LinuxUpdate, args) -> None:
    """Run the subcommand selected on the command line."""
    action = args.action
    if action == "releases":
        app.releases(args.moniker or args.MONIKER_OPT, latest=args.LATEST)
    elif action == "fetched":
        app.fetched(latest=args.LATEST)
    elif action == "fetch":
        app.fetch(args.version, args.MONIKER, print_only=args.PRINT)
    elif action == "importconfig":
        app.import_config(args.version, args.config)
    elif action == "oldconfig":
        app.oldconfig(args.version, args.CONFIG)
    elif action == "menuconfig":
        app.menuconfig(args.version, args.CONFIG)
    elif action == "compile":
        app.compile(args.version)
    elif action == "install":
        app.install(args.version)
    elif action == "all":
        app.all(args.version, args.CONFIG)
    elif action == "update":
        app.update(args.version, args.MONIKER, args.CONFIG)
    else:
        raise ValueError(f"Unknown command: {action}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit status."""
    args = parse_args(argv)
    _setup_logging(args)

    try:
        settings = load_settings(args.CONFIG_FILE)
        dispatch(LinuxUpdate(settings), args)
    except LinuxUpdateError as e:
        logger.error("Error: %s", e)
        logger.debug("Traceback", exc_info=True)
        return e.exit_status.value
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130  # Standard SIGINT exit code
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Unknown and unexpected error: %s (%s)", e, type(e).__name__)
        logger.debug("Traceback", exc_info=True)
        return ExitCodes.UNEXPECTED_ERROR.value
    return ExitCodes.SUCCESS.value


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
