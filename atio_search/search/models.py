"""Search response models. Serialized with camelCase keys for the mobile client."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InnovationResult(_CamelModel):
    """An enriched catalog record with its relevance score attached."""

    id: int
    title: str
    short_description: str = ""
    long_description: str = ""
    readiness_level: int = 1
    readiness_name: str = ""
    adoption_level: int = 1
    adoption_name: str = ""
    region: str = ""
    is_grassroots: bool = False
    owner: str = ""
    partner: str = ""
    data_source: str = ""
    countries: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
    sdgs: list[int] = Field(default_factory=list)
    use_cases: list[str] = Field(default_factory=list)
    users: list[str] = Field(default_factory=list)
    cost: str = "med"
    complexity: str = "moderate"
    thumbs_up_count: int = 0
    match_score: float | None = None


class SearchPage(_CamelModel):
    query: str
    results: list[InnovationResult] = Field(default_factory=list)
    has_more: bool = False
    total: int = 0
