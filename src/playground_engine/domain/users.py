"""User payloads stored as YAML in the user registry."""

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Represents a registered playground user."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    admin: bool = False
    pool_affinity: str | None = Field(default=None, alias="poolAffinity")
    can_customize_duration: bool = Field(
        default=False, alias="canCustomizeDuration"
    )
    can_customize_pool_affinity: bool = Field(
        default=False, alias="canCustomizePoolAffinity"
    )
