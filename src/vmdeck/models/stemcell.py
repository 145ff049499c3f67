"""Stemcell reference model."""

from pydantic import BaseModel, ConfigDict, Field


class CloudStemcell(BaseModel):
    """A stemcell image that already exists in the cloud."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    cid: str = Field(..., min_length=1, description="Cloud identifier of the image")
    name: str = Field(default="", description="Stemcell name")
    version: str = Field(default="", description="Stemcell version")
