import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import List, Optional

from ascent.core.errors import ConfigError

RATCHET_MODES = ("floor", "target")
WEEK_STARTS = ("sunday", "monday")


class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    CONFIG_STRICT: bool = False

    # Calendar
    REFERENCE_TIMEZONE: str = "UTC"  # all "same day" checks use this zone
    WEEK_START: str = "sunday"  # sunday | monday

    # Ratchet (shared)
    RATCHET_MODE: str = "floor"  # floor | target
    RATCHET_COOLDOWN_DAYS: int = 7
    CONSISTENCY_WINDOW_DAYS: int = 14

    # Ratchet: target escalation
    TARGET_MIN_RECORDS: int = 14
    TARGET_UP_THRESHOLD: int = 85
    TARGET_DOWN_MIN_RECORDS: int = 7
    TARGET_DOWN_THRESHOLD: int = 50

    # Ratchet: floor raise
    FLOOR_MARGIN: int = 15
    FLOOR_MAX: int = 85
    FLOOR_RAISE_FACTOR: float = 0.9
    FLOOR_HISTORY_LIMIT: int = 10
    FLOOR_SLIP_WARNING: int = 10

    # History retention
    HISTORY_RETENTION_DAYS: int = 90

    # Titration
    TITRATION_MIN_DAYS: int = 14
    TITRATION_MIN_POINTS: int = 10
    TITRATION_SCORE_WINDOW_DAYS: int = 30
    TITRATION_WEEKS: int = 8

    # Persistence
    DATA_FILE: str = "ascent_data.json"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def _config_problems(cfg: Settings) -> List[str]:
    from ascent.core.dates import reference_zone

    problems = []
    if cfg.RATCHET_MODE not in RATCHET_MODES:
        problems.append(f"RATCHET_MODE must be one of {', '.join(RATCHET_MODES)} (got {cfg.RATCHET_MODE!r})")
    if cfg.WEEK_START not in WEEK_STARTS:
        problems.append(f"WEEK_START must be one of {', '.join(WEEK_STARTS)} (got {cfg.WEEK_START!r})")
    if reference_zone(cfg.REFERENCE_TIMEZONE) is None:
        problems.append(f"REFERENCE_TIMEZONE is not a known zone: {cfg.REFERENCE_TIMEZONE!r}")
    if cfg.CONSISTENCY_WINDOW_DAYS <= 0:
        problems.append("CONSISTENCY_WINDOW_DAYS must be positive")
    if cfg.HISTORY_RETENTION_DAYS <= 0:
        problems.append("HISTORY_RETENTION_DAYS must be positive")
    return problems


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate enumerated and range-bound settings.

    In strict mode raise ConfigError; otherwise emit warnings only.
    Returns False when problems were found in non-strict mode.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("ascent")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    problems = _config_problems(cfg)
    if problems:
        if strict_mode:
            raise ConfigError("Invalid configuration: " + "; ".join(problems))
        for problem in problems:
            log.warning("Invalid configuration: %s", problem)
        return False

    return True
