"""
Thin runtime for GitHub Actions: inputs, outputs, per-run state, job
environment, log groups and failure annotations.

Values are exchanged with the runner through the files it names in
GITHUB_OUTPUT, GITHUB_STATE and GITHUB_ENV. Without those (local runs) the
equivalent workflow command is printed instead.
"""

import json
import os
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from .errors import PreconditionError, ValidationError

TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


def issue_command(command: str, message: str = "", **properties: str) -> None:
    """Prints a ::command prop=value::message workflow command."""
    props = ",".join(f"{k}={_escape_property(v)}" for k, v in properties.items())
    head = f"{command} {props}" if props else command
    print(f"::{head}::{_escape_data(message)}", flush=True)


def _write_file_command(env_var: str, key: str, value: str) -> bool:
    path = os.environ.get(env_var)
    if not path:
        return False

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in key or delimiter in value:
        raise ValueError(f"Unexpected delimiter in value for '{key}'")

    with Path(path).open("a", encoding="utf-8") as f:
        f.write(f"{key}<<{delimiter}\n{value}\n{delimiter}\n")
    return True


def _to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


# Inputs


def get_input(name: str, required: bool = False) -> str:
    """
    Reads an action input (INPUT_<NAME>). Returns "" when not supplied.
    """
    env_name = f"INPUT_{name.replace(' ', '_').upper()}"
    value = os.environ.get(env_name, "").strip()

    if required and not value:
        raise ValidationError(f"Input required and not supplied: {name}")

    return value


def get_boolean_input(name: str, required: bool = False) -> bool | None:
    """
    Reads a boolean input using the YAML 1.2 core schema spellings.
    Returns None when not supplied.
    """
    value = get_input(name, required=required)
    if not value:
        return None
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False

    raise ValidationError(
        f"Input does not meet YAML 1.2 Core Schema specification: {name}",
        ["Support boolean input list: `true | True | TRUE | false | False | FALSE`"],
    )


# Outputs and environment


def set_output(name: str, value: Any) -> None:
    text = _to_string(value)
    if not _write_file_command("GITHUB_OUTPUT", name, text):
        issue_command("set-output", text, name=name)


def export_variable(name: str, value: Any) -> None:
    """Sets a variable for this process and every later step of the job."""
    text = _to_string(value)
    os.environ[name] = text
    if not _write_file_command("GITHUB_ENV", name, text):
        issue_command("set-env", text, name=name)


# Per-run state


class StateChannel(Protocol):
    """Key-value store that survives between the main and post steps."""

    def set(self, key: str, value: Any) -> None: ...

    def get(self, key: str) -> str | None: ...


class RunnerState:
    """
    State saved through GITHUB_STATE. The runner exposes it to the post
    step only, as STATE_<key> environment variables.
    """

    def set(self, key: str, value: Any) -> None:
        text = _to_string(value)
        if not _write_file_command("GITHUB_STATE", key, text):
            issue_command("save-state", text, name=key)

    def get(self, key: str) -> str | None:
        return os.environ.get(f"STATE_{key}") or None


# Identity


@dataclass(frozen=True)
class RunContext:
    owner: str
    repo: str
    run_id: str

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RunContext":
        env = os.environ if environ is None else environ
        repository = env.get("GITHUB_REPOSITORY", "")
        run_id = env.get("GITHUB_RUN_ID", "")

        owner, _, repo = repository.partition("/")
        if not owner or not repo or not run_id:
            raise PreconditionError(
                "GITHUB_REPOSITORY and GITHUB_RUN_ID must be set. "
                "Is this running inside a GitHub Actions workflow?"
            )

        return cls(owner=owner, repo=repo, run_id=run_id)


# Log presentation


@contextmanager
def group(title: str) -> Iterator[None]:
    """Folds everything logged inside the block under a collapsible title."""
    print(f"::group::{title}", flush=True)
    try:
        yield
    finally:
        print("::endgroup::", flush=True)


def error(message: str) -> None:
    issue_command("error", message)


def set_failed(message: str) -> None:
    """Annotates the step as failed. The caller sets the exit status."""
    error(message)
