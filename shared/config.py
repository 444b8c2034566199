"""
GlyphWeave Configuration Management
====================================

Centralized configuration using Python dataclasses and TOML-based
persistence. A ``config.toml`` in the project root is picked up
automatically; every key is optional and falls back to the dataclass
default.

Example ``config.toml``::

    [global]
    log_level = "DEBUG"

    [glyphweave]
    corpus_path = "data/messages.json"
    cluster_weights = [2, 3, 4]
    alignment_pairs = [[0, 1], [2, 3]]

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"


# ========================== Tool Config ====================================


@dataclass(frozen=False, slots=True)
class GlyphWeaveConfig:
    """Parameters of the weaving and structural-analysis engine.

    ``scheme`` is a weave scheme label (``"012/102"`` is canonical).
    ``value_low``/``value_high`` bound the contiguous value range the
    scheme search looks for.
    """

    corpus_path: str = ""
    scheme: str = "012/102"
    value_low: int = 0
    value_high: int = 82

    # Transition graph
    hub_threshold: int = 10
    top_hubs: int = 10
    cluster_weights: list[int] = field(default_factory=lambda: [2, 3, 4])

    # Alignment
    match_score: int = 2
    mismatch_score: int = -1
    gap_score: int = -1
    anchor: list[int] = field(default_factory=lambda: [66, 5])
    alignment_pairs: list[list[int]] = field(
        default_factory=lambda: [[0, 1], [2, 3], [4, 5], [6, 7]]
    )

    # Predictor smoothing
    smoothing_k: float = 0.5
    lambda2: float = 0.6
    lambda1: float = 0.3
    lambda0: float = 0.1

    # Mesh layout
    column_spacing: float = 1.0
    row_spacing: float = 1.0
    row_offset: float = 0.5
    layout_trigrams: bool = True


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Logging and output settings shared by every command."""

    log_level: str = "WARNING"
    log_file: str = ""
    log_json: bool = False
    output_dir: str = "output"
    debug: bool = False
    version: str = "1.0.0"


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class GlyphConfig:
    """Master configuration aggregating global and engine settings.

    Usage:
        >>> config = GlyphConfig.load()                  # from default path
        >>> config = GlyphConfig.load("custom.toml")     # from custom path
        >>> config.glyphweave.hub_threshold
        10
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    glyphweave: GlyphWeaveConfig = field(default_factory=GlyphWeaveConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> GlyphConfig:
        """Load configuration from a TOML file.

        Args:
            path: TOML file path. Defaults to ``<project_root>/config.toml``.

        Returns:
            A fully-populated :class:`GlyphConfig`.

        Raises:
            FileNotFoundError: If *path* was given explicitly and does
                not exist. A missing default file yields pure defaults.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            glyphweave=cls._build_section(GlyphWeaveConfig, raw.get("glyphweave", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the configuration tree to a plain dictionary."""
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate *cls* from the keys it declares; others are ignored."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


def get_config(path: str | Path | None = None) -> GlyphConfig:
    """Cached wrapper around :meth:`GlyphConfig.load`.

    Passing *path* always reloads.
    """
    if not hasattr(get_config, "_cached") or path is not None:
        get_config._cached = GlyphConfig.load(path)  # type: ignore[attr-defined]
    return get_config._cached  # type: ignore[attr-defined]
