"""Registry catalog schema definitions using Pydantic.

This module defines the JSON shape of the skills and plugins registries:
``{"version": ..., "skills": [...]}`` and ``{"plugins": [...]}``.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegistryEntry(BaseModel):
    """Entry for one publishable unit in a registry."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(description="Unit name")
    source: str = Field(description="Install source (git URL, #fragment, or tree URL)")
    description: str = Field(default="", description="One-line description")
    author: str = Field(default="", description="Author display name")
    version: str = Field(default="", description="Published version, if any")
    license: str = Field(default="", description="License identifier, if any")
    components: list[str] = Field(
        default_factory=list,
        description="Component kinds the unit provides, e.g. ['commands', 'skills']",
    )

    @field_validator("author", mode="before")
    @classmethod
    def coerce_author(cls, v: object) -> object:
        """Accept an author object and keep its name."""
        if v is None:
            return ""
        if isinstance(v, dict):
            return str(v.get("name", ""))
        return v

    @field_validator("description", "version", "license", mode="before")
    @classmethod
    def null_to_empty(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("components", mode="before")
    @classmethod
    def null_to_no_components(cls, v: object) -> object:
        return [] if v is None else v

    @property
    def components_summary(self) -> str:
        return ", ".join(self.components) if self.components else "-"


class RegistryDocument(BaseModel):
    """Root schema for registry JSON files.

    A skills registry fills `skills`, a plugins registry fills `plugins`.
    """

    model_config = ConfigDict(extra="ignore")

    version: str | None = Field(default=None, description="Registry format version")
    skills: list[RegistryEntry] = Field(default_factory=list)
    plugins: list[RegistryEntry] = Field(default_factory=list)
