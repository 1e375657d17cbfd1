"""Configuration management: load/save TOML config files."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path

from ..visual.geometry import FecOrder, LayoutConfig

DEFAULT_CONFIG_PATH = Path("~/.config/optar/config.toml").expanduser()


@dataclass
class AppConfig:
    """Top-level application configuration."""

    # Page layout
    layout_border: int = 2
    layout_chalf: int = 3
    layout_cpitch: int = 24
    layout_text_width: int = 13
    layout_text_height: int = 24
    layout_xcrosses: int = 67
    layout_ycrosses: int = 87
    layout_fec_order: int = 4  # Hamming(4); 1 selects Golay

    # Output
    output_base: str = "optar_out"
    output_ext: str = "png"

    # Logging
    log_level: str = "INFO"

    def to_layout_config(self) -> LayoutConfig:
        return LayoutConfig(
            border=self.layout_border,
            chalf=self.layout_chalf,
            cpitch=self.layout_cpitch,
            text_width=self.layout_text_width,
            text_height=self.layout_text_height,
            xcrosses=self.layout_xcrosses,
            ycrosses=self.layout_ycrosses,
            fec_order=FecOrder.from_int(self.layout_fec_order),
        )

    def apply_layout(self, layout: LayoutConfig) -> None:
        """Copy the fields of *layout* into this config."""
        self.layout_border = layout.border
        self.layout_chalf = layout.chalf
        self.layout_cpitch = layout.cpitch
        self.layout_text_width = layout.text_width
        self.layout_text_height = layout.text_height
        self.layout_xcrosses = layout.xcrosses
        self.layout_ycrosses = layout.ycrosses
        self.layout_fec_order = int(layout.fec_order)


_TYPES = {"int": int, "str": str, int: int, str: str}


def load_config(path: Path | str | None = None) -> AppConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if the file doesn't exist.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    path = Path(path)

    config = AppConfig()

    if not path.exists():
        return config

    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    with open(path, "rb") as f:
        data = tomllib.load(f)

    # Flatten nested sections
    flat = _flatten_toml(data)

    for fld in fields(AppConfig):
        if fld.name in flat:
            setattr(config, fld.name, _TYPES[fld.type](flat[fld.name]))

    return config


def save_config(config: AppConfig, path: Path | str | None = None) -> None:
    """Save configuration to a TOML file."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    path = Path(path)

    path.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        "# optar configuration",
        "",
        f"log_level = {_toml_str(config.log_level)}",
        "",
        "[layout]",
        f"border = {config.layout_border}",
        f"chalf = {config.layout_chalf}",
        f"cpitch = {config.layout_cpitch}",
        f"text_width = {config.layout_text_width}",
        f"text_height = {config.layout_text_height}",
        f"xcrosses = {config.layout_xcrosses}",
        f"ycrosses = {config.layout_ycrosses}",
        f"fec_order = {config.layout_fec_order}",
        "",
        "[output]",
        f"base = {_toml_str(config.output_base)}",
        f"ext = {_toml_str(config.output_ext)}",
        "",
    ]

    with open(path, "w") as f:
        f.write("\n".join(lines))


def _flatten_toml(data: dict, prefix: str = "") -> dict:
    """Flatten nested TOML dict to a flat dict."""
    result = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result.update(_flatten_toml(value, f"{prefix}{key}_"))
        else:
            result[f"{prefix}{key}"] = value
    return result


def _toml_str(value: str) -> str:
    """Quote *value* as a TOML basic string.

    JSON string escapes are a subset of TOML basic string escapes.
    """
    return json.dumps(value)
