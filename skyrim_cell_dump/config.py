"""User settings stored in a TOML config file, and output format names."""
from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import click

from skyrim_cell_dump.esm.constants import DEFAULT_MAX_DEPTH

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

FORMAT_JSON = "json"
FORMAT_TEXT = "text"
FORMAT_CSV = "csv"

FORMAT_ALIASES = {
    "json": FORMAT_JSON,
    "text": FORMAT_TEXT,
    "plain": FORMAT_TEXT,
    "plain_text": FORMAT_TEXT,
    "plaintext": FORMAT_TEXT,
    "csv": FORMAT_CSV,
}


def resolve_format(name: str) -> str:
    """Map a user-supplied format name to its canonical name."""
    fmt = FORMAT_ALIASES.get(name.strip().lower())
    if fmt is None:
        raise click.UsageError(f"Unrecognized format {name}")
    return fmt


@dataclass
class Settings:
    format: str = FORMAT_TEXT
    pretty: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    partial: bool = False


def get_config_path() -> Path:
    """Return the TOML config file path via click.get_app_dir."""
    return Path(click.get_app_dir("skyrim-cell-dump")) / "config.toml"


def load_settings() -> Settings:
    """Read TOML config. Returns default Settings if file missing."""
    path = get_config_path()
    if not path.exists():
        return Settings()

    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise click.UsageError(f"Invalid config file {path}: {e}")

    settings = Settings()
    if "format" in data:
        settings.format = resolve_format(str(data["format"]))
    if "pretty" in data:
        if not isinstance(data["pretty"], bool):
            raise click.UsageError(f"Config 'pretty' must be true or false in {path}")
        settings.pretty = data["pretty"]
    if "partial" in data:
        if not isinstance(data["partial"], bool):
            raise click.UsageError(f"Config 'partial' must be true or false in {path}")
        settings.partial = data["partial"]
    if "max_depth" in data:
        settings.max_depth = validate_max_depth(data["max_depth"])
    return settings


def save_settings(settings: Settings) -> Path:
    """Write settings to TOML."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        f"format = '{settings.format}'",
        f"pretty = {'true' if settings.pretty else 'false'}",
        f"max_depth = {settings.max_depth}",
        f"partial = {'true' if settings.partial else 'false'}",
        "",
    ]
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def validate_max_depth(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise click.UsageError(f"max_depth must be a positive integer, got {value!r}")
    return value
