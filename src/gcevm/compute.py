from typing import Any

from . import gcloud
from .errors import MissingAddressError, NotFoundError
from .logger import logger
from .schemas.compute import Instance, InstanceRef


def get_instance_template_url(pattern: str, project: str) -> str:
    """
    Returns the URI of the first instance template whose name matches pattern.
    gcloud's listing order decides between multiple matches.
    """
    logger.info(f"Looking for instance template '{pattern}'")

    uris = gcloud.run_json(
        [
            "compute",
            "instance-templates",
            "list",
            "--project",
            project,
            "--filter",
            f"name~'{pattern}'",
            "--uri",
        ]
    )

    if not uris:
        raise NotFoundError(f"No instance templates found matching '{pattern}'")

    logger.info(f"Found instance template with uri '{uris[0]}'")

    return str(uris[0])


def _external_ip(instance: dict[str, Any]) -> str | None:
    # Assumes the first access config of the first interface carries the NAT IP
    interfaces = instance.get("networkInterfaces") or [{}]
    access_configs = interfaces[0].get("accessConfigs") or [{}]
    return access_configs[0].get("natIP")


def create_instance(
    name: str, source_instance_template: str, project: str, zone: str
) -> Instance:
    """
    Creates an instance from a template and returns it with its external IP.
    """
    result = gcloud.run_json(
        [
            "compute",
            "instances",
            "create",
            name,
            "--source-instance-template",
            source_instance_template,
            "--project",
            project,
            "--zone",
            zone,
        ]
    )

    matches = [i for i in result or [] if i.get("name") == name]
    if not matches:
        raise NotFoundError(f"Instance not found: {name}")

    ip = _external_ip(matches[0])
    if not ip:
        raise MissingAddressError(f"Instance IP not found for {name}")

    return Instance(name=name, zone=zone, project=project, ip=ip)


def delete_instance(instance: InstanceRef) -> None:
    gcloud.run_json(
        [
            "compute",
            "instances",
            "delete",
            instance.name,
            "--project",
            instance.project,
            "--zone",
            instance.zone,
        ]
    )
