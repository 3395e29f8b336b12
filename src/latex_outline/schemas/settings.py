"""Settings snapshot and the per-run structure configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from latex_outline.exceptions import ConfigurationError

DEFAULT_SECTIONS = ["part", "chapter", "section", "subsection", "subsubsection"]
DEFAULT_FLOATS = ("frame",)
FLOAT_ENVIRONMENTS = ("figure", "table")


class OutlineSettings(BaseModel):
    """Immutable snapshot of the user-facing outline configuration.

    Attributes:
        sections: Section rank groups. Each entry lists one or more macro
            names separated by ``|``; the list index is the rank, 0 being
            the outermost level.
        commands: Extra macros surfaced as command elements.
        environments: Extra environments surfaced as environment elements.
        floats_enabled: Surface figure and table floats.
        float_captions_enabled: Append captions to float labels.
        float_numbers_enabled: Number floats per environment name.
        section_numbers_enabled: Number sections hierarchically.
        tex_dirs: Extra directories searched when resolving inclusions.
        cache_poll_interval_s: Delay between polls of the document source.
        cache_poll_attempts: Polls before a refresh is forced.
    """

    model_config = ConfigDict(frozen=True)

    sections: list[str] = Field(default_factory=lambda: list(DEFAULT_SECTIONS))
    commands: list[str] = Field(default_factory=list)
    environments: list[str] = Field(default_factory=list)
    floats_enabled: bool = True
    float_captions_enabled: bool = True
    float_numbers_enabled: bool = True
    section_numbers_enabled: bool = True
    tex_dirs: list[str] = Field(default_factory=list)
    cache_poll_interval_s: float = Field(default=0.1, ge=0)
    cache_poll_attempts: int = Field(default=20, ge=0)


class StructureConfig(BaseModel):
    """Configuration resolved once per construction run."""

    model_config = ConfigDict(frozen=True)

    section_index: dict[str, int]
    command_names: list[str]
    environment_names: list[str]
    tex_dirs: list[str]
    merge_sub_files: bool = True
    show_captions: bool = True
    number_floats: bool = True
    number_sections: bool = True

    @classmethod
    def from_settings(
        cls, settings: OutlineSettings, *, merge_sub_files: bool = True
    ) -> "StructureConfig":
        """Derive the run configuration from a settings snapshot.

        Raises:
            ConfigurationError: If a section name appears under two ranks.
        """
        section_index: dict[str, int] = {}
        for rank, group in enumerate(settings.sections):
            for name in group.split("|"):
                name = name.strip()
                if not name:
                    continue
                if name in section_index and section_index[name] != rank:
                    raise ConfigurationError(
                        f"Section command '{name}' is listed under ranks "
                        f"{section_index[name]} and {rank}"
                    )
                section_index[name] = rank

        environment_names = list(DEFAULT_FLOATS)
        if settings.floats_enabled:
            environment_names = [*FLOAT_ENVIRONMENTS, *environment_names]
        environment_names.extend(
            env for env in settings.environments if env not in environment_names
        )

        return cls(
            section_index=section_index,
            command_names=list(settings.commands),
            environment_names=environment_names,
            tex_dirs=list(settings.tex_dirs),
            merge_sub_files=merge_sub_files,
            show_captions=settings.float_captions_enabled,
            number_floats=settings.float_numbers_enabled,
            number_sections=settings.section_numbers_enabled,
        )

    def rank(self, name: str) -> int | None:
        """Return the configured rank of a section name, if any."""
        return self.section_index.get(name)
