"""Engine configuration loaded from environment variables.

Every field can be overridden with a SCHEDULE_-prefixed variable
(SCHEDULE_TIME_TOLERANCE_MINUTES=10) or a .env file.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    """Tunable parameters for extraction and reconciliation."""

    # Reconciliation
    time_tolerance_minutes: int = Field(
        default=5,
        ge=0,
        description="Maximum time difference for two entries to pair",
    )
    require_same_location: bool = Field(
        default=False,
        description="Only pair entries at the same location",
    )
    trainer_fuzzy: bool = Field(
        default=True,
        description="Accept partial trainer-name matches when pairing",
    )

    # Layout
    column_tolerance: float = Field(
        default=30.0,
        gt=0,
        description="Horizontal distance (px) within which day headers share a column",
    )
    line_tolerance: float = Field(
        default=12.0,
        gt=0,
        description="Vertical distance (px) within which fragments share a line",
    )

    # Parsing
    fuzzy_threshold: float = Field(
        default=0.4,
        gt=0,
        le=1,
        description="Maximum normalized edit distance for a fuzzy vocabulary match",
    )
    remap_ambiguous_hours: bool = Field(
        default=False,
        description="Read an OCR'd AM hour of 1 as 11",
    )

    # Page extraction
    render_timeout: float = Field(default=10.0, gt=0, description="Per-page render budget (s)")
    recognition_timeout: float = Field(default=15.0, gt=0, description="Per-page OCR budget (s)")
    page_delay: float = Field(default=0.5, ge=0, description="Pause between pages (s)")
    dpi: int = Field(default=300, gt=0, description="PDF render resolution")
    use_gpu: bool = Field(default=False, description="Run OCR on GPU")
    ocr_lang: str = Field(default="en", description="OCR language code")

    # Storage
    db_path: str = Field(default="schedule_data.db", description="SQLite database path")

    # Logging
    log_json: bool = Field(default=False, description="Output logs in JSON format")
    log_level: str = Field(default="INFO", description="Log level")

    model_config = {
        "env_prefix": "SCHEDULE_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_settings: Optional[EngineSettings] = None


def get_settings() -> EngineSettings:
    """Get the engine settings singleton.

    Returns:
        EngineSettings: Engine settings instance
    """
    global _settings
    if _settings is None:
        _settings = EngineSettings()
    return _settings
