import re

from pydantic import BaseModel, Field, field_validator

from src.components.profile.models import DEMO_USERNAME_PATTERN


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class SeedRules(BaseModel):
    current_version: int = Field(default=1, ge=1)


class IdentityRules(BaseModel):
    demo_username_pattern: str = DEMO_USERNAME_PATTERN
    demo_group: str = "Demo"
    demo_role: str = "Demo"
    admin_group: str = "Admin"
    admin_role: str = "Admin"

    @field_validator("demo_username_pattern")
    @classmethod
    def _check_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid demo_username_pattern: {e}") from e
        return v


class ReaderRules(BaseModel):
    page_size: int = Field(default=50, ge=1, le=1000)
    placeholder_email_domain: str = "placeholder.local"


class OpsRules(BaseModel):
    data_dir_required: bool = True
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    seed: SeedRules = Field(default_factory=SeedRules)
    identity: IdentityRules = Field(default_factory=IdentityRules)
    reader: ReaderRules = Field(default_factory=ReaderRules)
    ops: OpsRules = Field(default_factory=OpsRules)
