"""TOML configuration loader for the grocery module."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .matching import DEFAULT_SYNONYMS, MATCH_THRESHOLD, SynonymTable

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_DB_PATH = "~/.config/recipebook/grocery.db"


@dataclass
class MatchingConfig:
    threshold: float = MATCH_THRESHOLD
    auto_merge_uniform_clusters: bool = True
    synonym_groups: list[list[str]] = field(default_factory=list)

    def synonym_table(self) -> SynonymTable:
        """Built-in synonym groups plus any configured extras."""
        if not self.synonym_groups:
            return DEFAULT_SYNONYMS
        return DEFAULT_SYNONYMS.extended(self.synonym_groups)


@dataclass
class DatabaseConfig:
    path: str = DEFAULT_DB_PATH


@dataclass
class GroceryConfig:
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def load_config(path: str | Path | None = None) -> GroceryConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The database path can be overridden via RECIPEBOOK_DB_PATH when the file
    does not set one.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    mat = raw.get("matching", {})
    dbs = raw.get("database", {})

    # Resolve DB path: config file → environment variable → default
    db_path = dbs.get("path", "") or os.environ.get(
        "RECIPEBOOK_DB_PATH", ""
    ) or DEFAULT_DB_PATH

    return GroceryConfig(
        matching=MatchingConfig(
            threshold=float(mat.get("threshold", MATCH_THRESHOLD)),
            auto_merge_uniform_clusters=mat.get(
                "auto_merge_uniform_clusters", True
            ),
            synonym_groups=[list(g) for g in mat.get("synonym_groups", [])],
        ),
        database=DatabaseConfig(path=db_path),
    )
