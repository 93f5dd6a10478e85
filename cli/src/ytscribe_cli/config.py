"""Configuration management for the ytscribe CLI."""

from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "ytscribe" / "config.yaml"


@dataclass
class CliConfig:
    """Defaults applied when a flag is not given."""

    language: str = "en"
    country: str = "US"
    timeout_seconds: float = 30.0

    @classmethod
    def load(cls, path: Path | None = None) -> "CliConfig":
        """Load config from ~/.config/ytscribe/config.yaml or use defaults."""
        config_path = path or DEFAULT_CONFIG_PATH

        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
                return cls(
                    language=str(data.get("language") or "en"),
                    country=str(data.get("country") or "US"),
                    timeout_seconds=float(data.get("timeout_seconds") or 30.0),
                )

        return cls()

    def save(self, path: Path | None = None):
        """Save config to file."""
        config_path = path or DEFAULT_CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump({
                "language": self.language,
                "country": self.country,
                "timeout_seconds": self.timeout_seconds,
            }, f)
