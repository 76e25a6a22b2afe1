import argparse
import logging
import sys

from rich.console import Console

from . import __version__, actions
from .actions import RunnerState
from .core import (
    ACTION_NAME,
    METRICS_ENVIRONMENT,
    METRICS_ENVIRONMENT_VAR,
    METRICS_ENVIRONMENT_VERSION_VAR,
)
from .logger import logger
from .modes import setup, teardown


def _setup() -> int:
    try:
        actions.export_variable(METRICS_ENVIRONMENT_VAR, METRICS_ENVIRONMENT)
        actions.export_variable(METRICS_ENVIRONMENT_VERSION_VAR, __version__)
        setup.run_setup(RunnerState())
    except Exception as e:
        logger.debug("Setup failed", exc_info=True)
        actions.set_failed(f"{ACTION_NAME} failed with {e}")
        return 1
    return 0


def _teardown() -> int:
    try:
        teardown.run_teardown(RunnerState())
    except Exception as e:
        logger.debug("Teardown failed", exc_info=True)
        actions.set_failed(f"{ACTION_NAME} post failed with {e}")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="gcevm",
        description="Create a Compute Engine instance for a workflow run and delete it afterwards",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Main step: create the instance (inputs come from INPUT_* variables)
  gcevm setup

  # Post step: delete it again if auto_delete was set
  gcevm teardown
""",
    )
    parser.add_argument("--version", action="version", version=f"gcevm v{__version__}")
    parser.add_argument(
        "--verbose", action="store_true", help="Log every gcloud call and phase change"
    )
    parser.add_argument("phase", choices=["setup", "teardown"], help="Step to run")

    args = parser.parse_args(argv)

    if args.verbose:
        logger.setLevel(logging.DEBUG)

    try:
        if args.phase == "setup":
            return _setup()
        return _teardown()
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[bold red]Operation cancelled by user.[/bold red]")
        actions.set_failed(f"{ACTION_NAME} cancelled")
        return 130


def setup_main() -> int:
    return main(["setup"])


def teardown_main() -> int:
    return main(["teardown"])


if __name__ == "__main__":
    sys.exit(main())
