"""
Dopamine pool: morning baseline, intraday level, status and habit ordering.
"""

from ascent.features.pool.engine import (
    UNKNOWN_ACTIVITY,
    category_for_app,
    compute_current_level,
    compute_morning_level,
    drain_breakdown,
    log_drain_activity,
    log_recharge_activity,
    order_by_pool_level,
    pool_status,
    rate_for_category,
)
from ascent.features.pool.tables import DEFAULT_POOL_TABLES, PoolTables

__all__ = [
    "UNKNOWN_ACTIVITY",
    "DEFAULT_POOL_TABLES",
    "PoolTables",
    "category_for_app",
    "compute_current_level",
    "compute_morning_level",
    "drain_breakdown",
    "log_drain_activity",
    "log_recharge_activity",
    "order_by_pool_level",
    "pool_status",
    "rate_for_category",
]
