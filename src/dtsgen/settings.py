from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmitterSettings(BaseModel):
    """Settings for rendering declaration files."""

    colors: bool = Field(
        default=False,
        description="If True, identifiers, comments and warnings are ANSI-colored.",
    )
    warnings: bool = Field(
        default=True,
        description=(
            "If True, diagnostics attached to declarations are emitted as "
            "`// WARN:` comment lines after the declaration."
        ),
    )
    indent: int = Field(
        default=4, description="Number of spaces per nesting level."
    )


class ResolverSettings(BaseModel):
    """Settings for export resolution and type validation."""

    extra_types: set[str] = Field(
        default_factory=set,
        description=(
            "Additional type names accepted by the validation pass, on top of the "
            "built-in types and the `@typedef` names of the module."
        ),
    )
    module_loaders: set[str] = Field(
        default_factory=lambda: {"require"},
        description=(
            "Names of functions that load a module when called with a single "
            "string literal, eg. `require`."
        ),
    )


class GeneratorSettings(BaseSettings):
    """Top-level settings for a generator run."""

    model_config = SettingsConfigDict(env_prefix="DTSGEN_", env_nested_delimiter="__")

    module_name: Optional[str] = Field(
        default=None,
        description=(
            "Name of the declared module. If None, the source file name without "
            "extension is used."
        ),
    )
    debug: bool = Field(default=False, description="Enable debug logging.")
    emitter: EmitterSettings = Field(
        default_factory=EmitterSettings,
        description="An `EmitterSettings` object with output configuration.",
    )
    resolver: ResolverSettings = Field(
        default_factory=ResolverSettings,
        description="A `ResolverSettings` object with resolution configuration.",
    )


def load_settings(
    env_prefix: Optional[str] = None,
    env_file: Optional[str] = None,
    **kwargs,
) -> GeneratorSettings:
    config_dict = SettingsConfigDict(
        env_prefix=env_prefix if env_prefix is not None else "DTSGEN_",
        env_nested_delimiter="__",
        env_file=env_file,
    )

    class Settings(GeneratorSettings):
        model_config = config_dict

    return Settings(**kwargs)
