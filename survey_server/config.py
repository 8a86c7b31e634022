"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from a .env file at the project root using python-dotenv.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

root_env = BASE_DIR / ".env"
if root_env.exists():
    load_dotenv(root_env)

DATA_SOURCES = ("memory", "csv", "firebase")


@dataclass
class ServerConfig:
    """Server configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Recommendation microservice
    recommender_url: str = "http://localhost:8000"
    recommender_timeout_seconds: float = 5.0

    # Page shape
    recommendation_total: int = 8
    recommended_target: int = 4

    # Data source: "memory" | "csv" | "firebase"
    data_source: str = "csv"
    data_dir: Path = BASE_DIR / "data"
    videos_json_path: Optional[Path] = None
    # When data_source=firebase: path to service account JSON and optional project id
    firebase_credentials_path: Optional[Path] = None
    firebase_project_id: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        data_source = os.getenv("DATA_SOURCE", "csv").strip().lower() or "csv"
        if data_source not in DATA_SOURCES:
            data_source = "csv"

        def _path_env(key: str, default: Optional[Path] = None) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return default
            p = Path(v)
            return p if p.is_absolute() else (BASE_DIR / p).resolve()

        data_dir = _path_env("DATA_DIR", BASE_DIR / "data")
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            recommender_url=(
                os.getenv("RECOMMENDER_URL") or os.getenv("CLOUD_RUN_URL") or "http://localhost:8000"
            ).rstrip("/"),
            recommender_timeout_seconds=float(os.getenv("RECOMMENDER_TIMEOUT_SECONDS", "5")),
            recommendation_total=int(os.getenv("RECOMMENDATION_TOTAL", "8")),
            recommended_target=int(os.getenv("RECOMMENDED_TARGET", "4")),
            data_source=data_source,
            data_dir=data_dir,
            videos_json_path=_path_env("VIDEOS_JSON_PATH", data_dir / "videos.json"),
            firebase_credentials_path=_path_env("FIREBASE_CREDENTIALS_PATH") or _path_env("GOOGLE_APPLICATION_CREDENTIALS"),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.recommendation_total < 0:
            errors.append(f"RECOMMENDATION_TOTAL must be >= 0, got {self.recommendation_total}")
        if not 0 <= self.recommended_target <= self.recommendation_total:
            errors.append(
                f"RECOMMENDED_TARGET must be between 0 and RECOMMENDATION_TOTAL, got {self.recommended_target}"
            )
        if self.recommender_timeout_seconds <= 0:
            errors.append("RECOMMENDER_TIMEOUT_SECONDS must be positive")
        if self.data_source == "firebase" and not self.firebase_credentials_path:
            errors.append("DATA_SOURCE=firebase requires FIREBASE_CREDENTIALS_PATH")

        return len(errors) == 0, errors

    def ensure_directories(self):
        """Create the data directory used by the file-backed stores."""
        if self.data_source == "csv":
            self.data_dir.mkdir(parents=True, exist_ok=True)


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
        _config.ensure_directories()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
