"""
scribeview.config - YAML config loading and validation.

Handles loading scribeview.yaml from a workspace directory, applying
defaults, and validating service endpoints, model and language choices.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from scribeview.exceptions import ConfigError
from scribeview.language import AUTO, validate_language

CONFIG_FILENAME = "scribeview.yaml"

DEFAULT_MODEL = "llama3-70b-8192"

MODEL_LABELS: dict[str, str] = {
    "llama3-70b-8192": "LLama3 70B",
    "llama3-8b-8192": "Llama3 8B",
    "gemma-7b-it": "Gemma 7B",
}

SUPPORTED_MODELS = frozenset(MODEL_LABELS)


def validate_model(model: str) -> str:
    """Return ``model`` if it is one of the recognized identifiers."""
    if model not in SUPPORTED_MODELS:
        raise ValueError(f"model must be one of: {sorted(SUPPORTED_MODELS)}")
    return model


class ScribeviewConfig(BaseModel):
    """Resolved configuration for a Scribeview workspace."""

    user_id: str = "local"
    store_path: Path = Path("scribeview.json")

    stt_url: str = "http://localhost:3000/api/text-to-speech"
    format_url: str = "http://localhost:3000/api/format-text"
    title_url: str = "http://localhost:3000/api/generate-title"
    request_timeout: float = Field(default=300.0, gt=0.0)

    formatter_backend: str = "http"
    llm_provider: str = "groq"

    model: str = DEFAULT_MODEL
    language: str = AUTO

    config_path: Path | None = None

    @field_validator("formatter_backend")
    @classmethod
    def validate_formatter_backend(cls, v: str) -> str:
        valid = {"http", "llm"}
        if v not in valid:
            raise ValueError(f"formatter_backend must be one of: {valid}")
        return v

    @field_validator("model")
    @classmethod
    def validate_model_id(cls, v: str) -> str:
        return validate_model(v)

    @field_validator("language")
    @classmethod
    def validate_language_code(cls, v: str) -> str:
        return validate_language(v)

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        if not v or "/" in v:
            raise ValueError("user_id must be non-empty and contain no '/'")
        return v

    def resolve_store_path(self) -> Path:
        """Store path relative to the config file's directory."""
        if self.store_path.is_absolute() or self.config_path is None:
            return self.store_path
        return self.config_path.parent / self.store_path


def find_config(start: Path | None = None) -> Path | None:
    """Find scribeview.yaml in ``start`` or any parent directory."""
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def load_config(workspace_dir: Path) -> ScribeviewConfig:
    """Load and validate configuration from a workspace directory."""
    config_file = workspace_dir / CONFIG_FILENAME
    if not config_file.exists():
        raise FileNotFoundError(f"No {CONFIG_FILENAME} found in {workspace_dir}")

    with open(config_file) as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ConfigError(f"{config_file} must contain a mapping")

    merged = {key: value for key, value in raw_config.items() if value is not None}
    merged["config_path"] = config_file

    return ScribeviewConfig(**merged)


def create_default_config(user_id: str = "local", **overrides: Any) -> dict[str, Any]:
    """Create a default config dict for a new workspace."""
    defaults: dict[str, Any] = {
        "user_id": user_id,
        "store_path": "scribeview.json",
        "stt_url": "http://localhost:3000/api/text-to-speech",
        "format_url": "http://localhost:3000/api/format-text",
        "title_url": "http://localhost:3000/api/generate-title",
        "formatter_backend": "http",
        "model": DEFAULT_MODEL,
        "language": AUTO,
    }
    for key, value in overrides.items():
        if value is not None:
            defaults[key] = value
    return defaults


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
