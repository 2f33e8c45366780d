"""Request models for the HTTP transport."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ...domain.documents import DEFAULT_PROFILE, UpdatePolicy


class SaveConfigRequest(BaseModel):
    """Body of ``POST /configs``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    service: str = Field(..., min_length=1, description="Service the document belongs to")
    version: str = Field(..., min_length=1, description="Version tag recorded on the stored record")
    profile: str = Field(default=DEFAULT_PROFILE, min_length=1, description="Profile the document configures")
    namespace: str = Field(..., min_length=1, description="Namespace scoping the record")
    update_policy: UpdatePolicy = Field(..., alias="updatePolicy", description="not, add or cover")
    yaml: str = Field(..., min_length=1, description="YAML document text")
