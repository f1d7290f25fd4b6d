"""
Configuration management for decruft using Pydantic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class ExtractionConfig(BaseModel):
    """Configuration for the article extraction engine."""

    strip_unlikelys: bool = Field(
        default=True, description="Remove nodes whose class/id look like boilerplate before scoring."
    )
    weight_classes: bool = Field(default=True, description="Apply positive/negative class and id weights.")
    clean_conditionally: bool = Field(
        default=True, description="Remove low-value tables, lists, divs and forms from the extracted content."
    )
    paragraph_char_threshold: int = Field(
        default=25, ge=0, description="Minimum trimmed text length for a node to contribute to scoring."
    )
    max_elements_to_parse: int = Field(
        default=0, ge=0, description="Abort documents with more elements than this. 0 disables the limit."
    )
    n_top_candidates: int = Field(default=5, ge=1, description="Number of top candidates kept for ranking.")
    char_threshold: int = Field(
        default=0,
        ge=0,
        description="Minimum article text length before retrying with relaxed flags. 0 disables retries.",
    )
    parser: Literal["lxml", "html.parser"] = Field(
        default="lxml", description="BeautifulSoup tree builder used by extract_html()."
    )
    classes_to_preserve: List[str] = Field(
        default_factory=list, description="Extra class names kept on extracted content."
    )
    keep_classes: bool = Field(default=False, description="Leave class attributes untouched on the output.")

    @field_validator("classes_to_preserve")
    @classmethod
    def strip_class_names(cls, v: List[str]) -> List[str]:
        """Drop blank entries and surrounding whitespace."""
        return [name.strip() for name in v if name and name.strip()]


class MonitoringConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(
        default=None,
        description="Path to log file. If None, logs to console.",
    )

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Settings(BaseSettings):
    project_name: str = "decruft"
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="DECRUFT_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Settings:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    paths_to_check = [
        current_dir / "decruft.yaml",
        current_dir / "decruft.yml",
    ]
    for path in paths_to_check:
        if path.exists():
            return path

    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from an explicit file, a discovered file, or the environment."""
    config_path = path or find_config_file()
    if config_path is None:
        log.debug("No config file found. Using environment and default settings.")
        return Settings()
    return Settings.from_yaml(config_path)
