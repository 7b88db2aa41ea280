"""
Configuration Management for report summarization.

This module provides the Pydantic model and YAML loading for summarizer settings.
"""

import re
from typing import List, Optional
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from newman_summary.common.logger import get_logger

logger = get_logger(__name__)

DEFAULT_EXCLUDE_PATTERNS = [
    "Response time is below threshold",
]

DEFAULT_NOISE_ASSERTION_NAMES = [
    "accept",
    "accept-encoding",
    "accept-language",
    "cache-control",
    "connection",
    "content-length",
    "content-type",
    "cookie",
    "date",
    "host",
    "pragma",
    "referer",
    "sec-ch-ua",
    "sec-fetch-dest",
    "sec-fetch-mode",
    "sec-fetch-site",
    "user-agent",
    "postman-token",
    "x-forwarded-for",
    "x-forwarded-proto",
    "x-powered-by",
    "authorization",
    "x-auth-token",
    "x-correlation-id",
]


class SummaryConfig(BaseModel):
    """
    Complete summarizer configuration.

    Attributes:
        input_dir: Root directory searched for ``report.html`` files.
        output_path: Where the rendered summary document is written.
        status_path: Optional path for the JSON status export.
        title: Heading of the rendered document.
        html_details_fallback: Whether HTML heuristics run when no structured log exists.
        html_max_rows: Cap on failure rows harvested from one HTML document.
        json_max_rows: Cap on failure rows harvested from one structured log.
        exclude_patterns: Case-insensitive regexes; matching failures are dropped.
        noise_assertion_names: Header/metadata names that are never real assertions.
        redaction_enabled: Whether credential-like text is masked.
        workers: Number of reports processed concurrently.
    """
    input_dir: str = Field(default="unzipped", description="Root directory of extracted reports")
    output_path: str = Field(default="summary.html", description="Rendered summary path")
    status_path: Optional[str] = Field(default=None, description="JSON status export path")
    title: str = Field(default="Newman Test Results Summary", description="Document heading")
    html_details_fallback: bool = Field(default=True, description="Parse failures from HTML")
    html_max_rows: int = Field(default=5000, ge=1, description="Max failure rows per HTML report")
    json_max_rows: int = Field(default=20000, ge=1, description="Max failure rows per structured log")
    exclude_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS),
        description="Regexes of failures to ignore",
    )
    noise_assertion_names: List[str] = Field(
        default_factory=lambda: list(DEFAULT_NOISE_ASSERTION_NAMES),
        description="Assertion names treated as header noise",
    )
    redaction_enabled: bool = Field(default=True, description="Mask secrets in output")
    workers: int = Field(default=1, ge=1, description="Concurrent report workers")

    @field_validator("exclude_patterns")
    @classmethod
    def validate_exclude_patterns(cls, v: List[str]) -> List[str]:
        """Validate every exclusion pattern compiles."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid exclude pattern {pattern!r}: {e}")
        return v

    @field_validator("noise_assertion_names")
    @classmethod
    def normalize_noise_names(cls, v: List[str]) -> List[str]:
        return [name.strip().lower() for name in v if name and name.strip()]


def load_config(config_path: str) -> SummaryConfig:
    """
    Load summarizer configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        SummaryConfig instance loaded from the file.

    Raises:
        FileNotFoundError: If the configuration file doesn't exist.
        yaml.YAMLError: If the YAML file is invalid.
        ValidationError: If the configuration doesn't match the Pydantic model.
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}

        config = SummaryConfig(**data)
        logger.info(f"Loaded configuration from {config_path}")
        return config

    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML file {config_path}: {e}")
        raise
    except Exception as e:
        logger.error(f"Failed to load configuration from {config_path}: {e}")
        raise


def save_config(config: SummaryConfig, config_path: str) -> None:
    """
    Save summarizer configuration to a YAML file.

    Args:
        config: SummaryConfig instance to save.
        config_path: Path where to save the configuration file.

    Raises:
        IOError: If the file cannot be written.
    """
    config_file = Path(config_path)
    config_file.parent.mkdir(parents=True, exist_ok=True)

    try:
        data = config.model_dump()

        with open(config_file, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Saved configuration to {config_path}")

    except Exception as e:
        logger.error(f"Failed to save configuration to {config_path}: {e}")
        raise
