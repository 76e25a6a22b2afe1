import pytest

from gcevm.compute import create_instance, delete_instance, get_instance_template_url
from gcevm.errors import ExecutionError, MissingAddressError, NotFoundError
from gcevm.schemas.compute import InstanceRef


def _gce_instance(name="ci-acme-webapp-42", nat_ip="34.1.2.3"):
    access_config = {"name": "External NAT", "type": "ONE_TO_ONE_NAT"}
    if nat_ip:
        access_config["natIP"] = nat_ip
    return {
        "name": name,
        "status": "RUNNING",
        "networkInterfaces": [
            {"networkIP": "10.0.0.2", "accessConfigs": [access_config]},
            {"networkIP": "10.1.0.2", "accessConfigs": [{"natIP": "35.9.9.9"}]},
        ],
    }


def test_get_instance_template_url_returns_first_match(mocker):
    mock_run_json = mocker.patch(
        "gcevm.compute.gcloud.run_json", return_value=["uri://a", "uri://b"]
    )

    assert get_instance_template_url("runner-.*", "my-project") == "uri://a"

    args = mock_run_json.call_args[0][0]
    assert args[:3] == ["compute", "instance-templates", "list"]
    assert args[args.index("--project") + 1] == "my-project"
    assert args[args.index("--filter") + 1] == "name~'runner-.*'"
    assert "--uri" in args


def test_get_instance_template_url_no_match(mocker):
    mocker.patch("gcevm.compute.gcloud.run_json", return_value=[])

    with pytest.raises(NotFoundError):
        get_instance_template_url("missing", "my-project")


def test_create_instance(mocker):
    mock_run_json = mocker.patch(
        "gcevm.compute.gcloud.run_json", return_value=[_gce_instance()]
    )

    instance = create_instance(
        "ci-acme-webapp-42", "uri://template", "my-project", "us-central1-a"
    )

    assert instance.name == "ci-acme-webapp-42"
    assert instance.project == "my-project"
    assert instance.zone == "us-central1-a"
    # First interface, first access config
    assert instance.ip == "34.1.2.3"

    args = mock_run_json.call_args[0][0]
    assert args == [
        "compute",
        "instances",
        "create",
        "ci-acme-webapp-42",
        "--source-instance-template",
        "uri://template",
        "--project",
        "my-project",
        "--zone",
        "us-central1-a",
    ]


def test_create_instance_not_in_response(mocker):
    mocker.patch(
        "gcevm.compute.gcloud.run_json", return_value=[_gce_instance(name="other")]
    )

    with pytest.raises(NotFoundError):
        create_instance("ci-acme-webapp-42", "uri://t", "p", "z")


def test_create_instance_empty_response(mocker):
    mocker.patch("gcevm.compute.gcloud.run_json", return_value=None)

    with pytest.raises(NotFoundError):
        create_instance("ci-acme-webapp-42", "uri://t", "p", "z")


def test_create_instance_without_external_ip(mocker):
    mocker.patch(
        "gcevm.compute.gcloud.run_json", return_value=[_gce_instance(nat_ip=None)]
    )

    with pytest.raises(MissingAddressError):
        create_instance("ci-acme-webapp-42", "uri://t", "p", "z")


def test_create_instance_without_interfaces(mocker):
    mocker.patch(
        "gcevm.compute.gcloud.run_json",
        return_value=[{"name": "ci-acme-webapp-42", "networkInterfaces": []}],
    )

    with pytest.raises(MissingAddressError):
        create_instance("ci-acme-webapp-42", "uri://t", "p", "z")


def test_delete_instance(mocker):
    mock_run_json = mocker.patch("gcevm.compute.gcloud.run_json", return_value=None)

    delete_instance(InstanceRef(name="vm-1", project="proj-1", zone="us-west1-b"))

    mock_run_json.assert_called_once_with(
        [
            "compute",
            "instances",
            "delete",
            "vm-1",
            "--project",
            "proj-1",
            "--zone",
            "us-west1-b",
        ]
    )


def test_delete_instance_propagates_errors(mocker):
    err = ExecutionError(["compute", "instances", "delete", "vm-1"], 1, "denied")
    mocker.patch("gcevm.compute.gcloud.run_json", side_effect=err)

    with pytest.raises(ExecutionError) as exc_info:
        delete_instance(InstanceRef(name="vm-1", project="p", zone="z"))

    assert exc_info.value is err
