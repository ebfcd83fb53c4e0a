"""
Cross-titration: drain-app screen time against habit completion.
"""

from ascent.features.titration.engine import (
    classify_minutes,
    cross_titration,
    pearson,
    record_screen_time,
    score_from_correlation,
    titration_score,
)
from ascent.features.titration.sources import ManualScreenTimeSource, ScreenTimeSource
from ascent.features.titration.tables import (
    DEFAULT_TITRATION_CONFIG,
    DEFAULT_TITRATION_TABLES,
    TitrationConfig,
    TitrationTables,
)

__all__ = [
    "DEFAULT_TITRATION_CONFIG",
    "DEFAULT_TITRATION_TABLES",
    "ManualScreenTimeSource",
    "ScreenTimeSource",
    "TitrationConfig",
    "TitrationTables",
    "classify_minutes",
    "cross_titration",
    "pearson",
    "record_screen_time",
    "score_from_correlation",
    "titration_score",
]
