import json
import shutil
import subprocess
from collections.abc import Sequence
from typing import Any

from .errors import ExecutionError
from .logger import logger
from .schemas.compute import GcloudDefaults

GCLOUD = "gcloud"


def run_json(args: Sequence[str]) -> Any:
    """
    Runs a gcloud command and returns its parsed JSON output.
    Empty output (e.g. from a delete) is returned as None.
    """
    cmd = [GCLOUD, *args, "--format=json", "--quiet"]
    logger.debug(f"Running: {' '.join(cmd)}")

    try:
        res = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise ExecutionError(args, reason=str(e)) from e

    if res.returncode != 0:
        raise ExecutionError(args, res.returncode, res.stderr)

    if not res.stdout.strip():
        return None

    try:
        return json.loads(res.stdout)
    except json.JSONDecodeError as e:
        raise ExecutionError(
            args, res.returncode, res.stderr, reason=f"invalid JSON output: {e}"
        ) from e


def is_installed() -> bool:
    return shutil.which(GCLOUD) is not None


def is_authenticated() -> bool:
    """True if gcloud has at least one active credentialed account."""
    try:
        accounts = run_json(["auth", "list", "--filter=status:ACTIVE"])
    except ExecutionError as e:
        logger.debug(f"Could not list gcloud accounts: {e}")
        return False

    return bool(accounts)


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def read_defaults() -> GcloudDefaults:
    """
    Reads project and zone from the active gcloud configuration.
    Best-effort: any failure yields empty defaults.
    """
    try:
        config = run_json(["config", "list"])
    except ExecutionError as e:
        logger.debug(f"No gcloud defaults available: {e}")
        return GcloudDefaults()

    if not isinstance(config, dict):
        return GcloudDefaults()

    project = _section(config, "core").get("project")
    zone = _section(config, "compute").get("zone")

    return GcloudDefaults(
        project=project if isinstance(project, str) else None,
        zone=zone if isinstance(zone, str) else None,
    )
