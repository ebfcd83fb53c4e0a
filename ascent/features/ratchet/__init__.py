"""
Invisible ratchet: adaptive difficulty driven by rolling-window consistency.
"""

from ascent.features.ratchet.consistency import consistency, cooldown_active
from ascent.features.ratchet.insights import generate_insight
from ascent.features.ratchet.service import RatchetEngine
from ascent.features.ratchet.strategies import (
    FloorDecision,
    FloorRaiseStrategy,
    FloorRatchetConfig,
    RatchetStrategy,
    TargetEscalationStrategy,
    TargetRatchetConfig,
    floor_status,
    should_suggest_easy_mode,
    strategy_for_mode,
)

__all__ = [
    "FloorDecision",
    "FloorRaiseStrategy",
    "FloorRatchetConfig",
    "RatchetEngine",
    "RatchetStrategy",
    "TargetEscalationStrategy",
    "TargetRatchetConfig",
    "consistency",
    "cooldown_active",
    "floor_status",
    "generate_insight",
    "should_suggest_easy_mode",
    "strategy_for_mode",
]
