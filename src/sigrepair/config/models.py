"""Configuration models describing sigrepair settings."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SigrepairBaseModel(BaseModel):
    """Shared configuration for sigrepair Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class ProbeSettings(SigrepairBaseModel):
    """Sizes of the byte prefixes read from analyzed files.

    Attributes:
        match_bytes: Number of leading bytes matched against the catalog.
        display_bytes: Number of leading bytes shown as magic numbers.
    """

    match_bytes: int = Field(default=32, gt=0)
    display_bytes: int = Field(default=16, gt=0)


class TextHeuristicSettings(SigrepairBaseModel):
    """Fallback classification of files without a signature match.

    Attributes:
        enabled: Whether printable-only files fall back to the text record.
        fallback_extension: Catalog extension used for detected text files.
        ascii_only: Restrict printable characters to ASCII; disable to accept any Unicode printable character.
    """

    enabled: bool = True
    fallback_extension: str = "txt"
    ascii_only: bool = True


class RecoverySettings(SigrepairBaseModel):
    """Extension recovery behavior.

    Attributes:
        max_extension_length: Longest trailing segment still treated as an extension.
        require_mismatch: Skip renames when the current extension is already compatible.
    """

    max_extension_length: int = Field(default=10, ge=0)
    require_mismatch: bool = True


class CatalogSettings(SigrepairBaseModel):
    """Signature catalog location.

    Attributes:
        path: YAML catalog to use instead of the packaged one.
    """

    path: Optional[str] = None


class LoggingSettings(SigrepairBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(SigrepairBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class SigrepairConfig(SigrepairBaseModel):
    """Top-level configuration struct for sigrepair.

    Attributes:
        probe: Byte prefix sizes.
        text: Text fallback settings.
        recovery: Extension recovery settings.
        catalog: Signature catalog settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    probe: ProbeSettings = Field(default_factory=ProbeSettings)
    text: TextHeuristicSettings = Field(default_factory=TextHeuristicSettings)
    recovery: RecoverySettings = Field(default_factory=RecoverySettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "SigrepairBaseModel",
    "ProbeSettings",
    "TextHeuristicSettings",
    "RecoverySettings",
    "CatalogSettings",
    "LoggingSettings",
    "CLIOptions",
    "SigrepairConfig",
]
