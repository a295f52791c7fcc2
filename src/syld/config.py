"""User configuration for syld.

Configuration lives in ``config.toml`` inside the application directory
reported by typer (``~/.config/syld`` on Linux). A missing file means all
defaults.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomli_w
import typer

logger = logging.getLogger(__name__)

APP_NAME = "syld"

# Enrichers in priority order: local classification first, then the
# higher-confidence network sources, then name-based lookups.
DEFAULT_ENRICHER_ORDER = (
    "license_classify",
    "github",
    "open_collective",
    "liberapay",
)

KNOWN_KEYS = frozenset({"enrich", "github_token", "enrichers", "data_dir"})


def app_dir() -> Path:
    """Return the per-user application directory."""
    return Path(typer.get_app_dir(APP_NAME))


@dataclass
class Config:
    """Runtime configuration.

    Attributes:
        enrich: Whether `syld report` enriches projects by default.
        github_token: GitHub API token enabling the GitHub enricher.
        enrichers: Names of the enrichers to run, in priority order.
        data_dir: Directory holding the scan and cache databases.
    """

    enrich: bool = False
    github_token: Optional[str] = None
    enrichers: list[str] = field(default_factory=lambda: list(DEFAULT_ENRICHER_ORDER))
    data_dir: Path = field(default_factory=app_dir)

    @property
    def scan_db_path(self) -> Path:
        return self.data_dir / "syld.db"

    @property
    def cache_db_path(self) -> Path:
        return self.data_dir / "enrichment_cache.db"

    @staticmethod
    def config_path() -> Path:
        return app_dir() / "config.toml"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Load configuration from a TOML file.

        The GITHUB_TOKEN environment variable takes precedence over the
        token in the file.

        Args:
            path: Config file to read. Defaults to config_path().

        Returns:
            The loaded configuration, or defaults if the file does not exist.

        Raises:
            ValueError: If the file is not valid TOML or has invalid values.
        """
        path = path or cls.config_path()

        data: dict[str, Any] = {}
        if path.exists():
            try:
                with open(path, "rb") as f:
                    data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e
        else:
            logger.debug("No config file at %s, using defaults", path)

        config = cls._from_dict(data, path)

        env_token = os.environ.get("GITHUB_TOKEN")
        if env_token:
            config.github_token = env_token

        return config

    @classmethod
    def _from_dict(cls, data: dict[str, Any], path: Path) -> "Config":
        config = cls()

        if "enrich" in data:
            if not isinstance(data["enrich"], bool):
                raise ValueError(f"'enrich' must be true or false in {path}")
            config.enrich = data["enrich"]

        if "github_token" in data:
            config.github_token = str(data["github_token"]) or None

        if "enrichers" in data:
            enrichers = data["enrichers"]
            if not isinstance(enrichers, list):
                raise ValueError(f"'enrichers' must be a list in {path}")
            unknown = [name for name in enrichers if name not in DEFAULT_ENRICHER_ORDER]
            if unknown:
                raise ValueError(
                    f"Unknown enrichers in {path}: {', '.join(map(str, unknown))}. "
                    f"Available: {', '.join(DEFAULT_ENRICHER_ORDER)}"
                )
            config.enrichers = list(enrichers)

        if "data_dir" in data:
            config.data_dir = Path(data["data_dir"]).expanduser()

        unknown_keys = sorted(set(data) - KNOWN_KEYS)
        if unknown_keys:
            logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown_keys))

        return config

    def to_toml(self) -> str:
        """Render the effective configuration as TOML.

        The GitHub token is masked and left out entirely when unset.
        """
        data: dict[str, Any] = {"enrich": self.enrich}
        if self.github_token:
            data["github_token"] = "*" * 8
        data["enrichers"] = list(self.enrichers)
        data["data_dir"] = str(self.data_dir)
        return tomli_w.dumps(data)
