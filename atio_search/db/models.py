"""Catalog domain models."""

from pydantic import BaseModel, Field


class InnovationCreate(BaseModel):
    """Payload for inserting a catalog record and its tags."""

    title: str = Field(..., min_length=1)
    short_description: str = ""
    long_description: str = ""
    readiness_level: str = ""
    adoption_level: str = ""
    region: str = ""
    is_grassroots: bool = False
    owner_text: str = ""
    partner_text: str = ""
    data_source: str = ""
    countries: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
    sdgs: list[str] = Field(default_factory=list)
    use_cases: list[str] = Field(default_factory=list)
    users: list[str] = Field(default_factory=list)


class InnovationRecord(BaseModel):
    """An innovation row returned from the database. Read-only."""

    id: int
    title: str
    short_description: str = ""
    long_description: str = ""
    readiness_level: str = ""
    adoption_level: str = ""
    region: str = ""
    is_grassroots: bool = False
    owner_text: str = ""
    partner_text: str = ""
    data_source: str = ""

    model_config = {"frozen": True}


class InnovationTags(BaseModel):
    """Tag-table values for one innovation, as stored."""

    countries: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
    sdgs: list[str] = Field(default_factory=list)
    use_cases: list[str] = Field(default_factory=list)
    users: list[str] = Field(default_factory=list)
