"""Plugin manifest schema definitions using Pydantic.

This module defines the schema for .claude-plugin/plugin.json, the file
that marks a directory as a plugin bundle.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PluginAuthor(BaseModel):
    """Author block of a plugin manifest."""

    name: str = ""
    email: str | None = None
    url: str | None = None


class PluginManifest(BaseModel):
    """Root schema for plugin.json files.

    Every field is optional: a missing name falls back to the directory
    name, the rest is display metadata.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(default="", description="Plugin identifier")
    version: str = Field(default="", description="Plugin version string")
    description: str = Field(default="", description="One-line description")
    author: PluginAuthor = Field(default_factory=PluginAuthor)

    @field_validator("author", mode="before")
    @classmethod
    def coerce_author(cls, v: object) -> object:
        """Accept "author": "Jane" as shorthand for {"name": "Jane"}."""
        if v is None:
            return {}
        if isinstance(v, str):
            return {"name": v}
        return v

    @field_validator("name", "version", "description", mode="before")
    @classmethod
    def null_to_empty(cls, v: object) -> object:
        return "" if v is None else v
