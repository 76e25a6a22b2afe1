from pydantic import BaseModel, ConfigDict, Field


class InstanceRef(BaseModel):
    """Identifies an instance; persisted between setup and teardown."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    project: str = Field(min_length=1)
    zone: str = Field(min_length=1)


class Instance(InstanceRef):
    ip: str = Field(description="External NAT IP of the first access config")

    def ref(self) -> InstanceRef:
        return InstanceRef(name=self.name, project=self.project, zone=self.zone)


class GcloudDefaults(BaseModel):
    """
    Best-effort values from the active gcloud configuration.
    An empty instance means nothing could be read.
    """

    model_config = ConfigDict(frozen=True)

    project: str | None = None
    zone: str | None = None
