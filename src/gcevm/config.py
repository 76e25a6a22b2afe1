from collections.abc import Mapping
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from . import actions
from .core import DEFAULT_RETRY_COUNT
from .errors import ValidationError
from .schemas.compute import GcloudDefaults


class Config(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Starts with an alphanumeric character, hyphens and underscores as separators
    name_prefix: str = Field(min_length=3, max_length=24, pattern=r"^[a-z0-9][-_a-z0-9]*$")
    zone: str = Field(min_length=1)
    project: str = Field(min_length=1)
    source_instance_template: str = Field(
        min_length=1, description="Name pattern of the instance template"
    )
    auto_delete: bool = True
    retry_on_failure: bool = False
    retry_count: PositiveInt = DEFAULT_RETRY_COUNT


def merge_sources(
    defaults: GcloudDefaults, inputs: Mapping[str, Any]
) -> dict[str, Any]:
    """
    Layers explicit inputs over gcloud defaults.
    Missing inputs (None) never override a default.
    """
    merged: dict[str, Any] = defaults.model_dump(exclude_none=True)
    merged.update({k: v for k, v in inputs.items() if v is not None})
    return merged


def describe_errors(error: pydantic.ValidationError) -> list[str]:
    problems = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "value"
        problems.append(f"{field}: {err['msg']}")
    return problems


def load_config(inputs: Mapping[str, Any], defaults: GcloudDefaults) -> Config:
    """
    Builds the validated configuration, or raises ValidationError listing
    every violated constraint.
    """
    try:
        return Config.model_validate(merge_sources(defaults, inputs))
    except pydantic.ValidationError as e:
        raise ValidationError("Invalid configuration", describe_errors(e)) from e


def read_inputs() -> dict[str, Any]:
    """
    Collects the action's `with:` inputs. Unset inputs come back as None so
    they fall through to defaults.
    """
    return {
        "name_prefix": actions.get_input("name_prefix", required=True),
        "project": actions.get_input("project_id") or None,
        "zone": actions.get_input("zone") or None,
        "source_instance_template": actions.get_input(
            "source_instance_template", required=True
        ),
        "auto_delete": actions.get_boolean_input("auto_delete"),
        "retry_on_failure": actions.get_boolean_input("retry_on_failure"),
        "retry_count": actions.get_input("retry_count") or None,
    }
