"""Engine configuration."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


OutputFormat = Literal["text", "ansi", "html"]


class AssertiveSettings(BaseSettings):
    """Settings for engines built with :func:`assertive.create`.

    Loads from environment variables automatically, e.g.
    ``ASSERTIVE_OUTPUT_FORMAT=html``.

    Attributes
    ----------
    output_format
        Initial rendering format for failure messages.
    inspect_depth
        Default depth used by ``inspect``.
    max_compare_depth
        Recursion depth past which ``equal`` tracks visited objects to detect
        circular structures.
    indent_width
        Spaces per indentation level in nested failure messages.
    render_width
        Console width used when rendering ANSI or HTML.
    """

    output_format: OutputFormat = "text"
    inspect_depth: int = Field(default=3, ge=1)
    max_compare_depth: int = Field(default=100, ge=0)
    indent_width: int = Field(default=2, ge=0)
    render_width: int = Field(default=100, ge=20)

    model_config = SettingsConfigDict(
        extra="forbid",
        env_prefix="ASSERTIVE_",
    )
