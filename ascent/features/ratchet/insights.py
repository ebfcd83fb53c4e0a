"""
Ratchet insight generation.

Given the latest raise (if any) and the habit's consistency against its floor,
pick at most one templated insight. A raise always takes precedence over a
status-derived insight, so the same event never produces two messages.
"""

from typing import Optional

from ascent.features.ratchet.strategies import floor_status
from ascent.features.ratchet.templates import INSIGHT_TEMPLATES, STATUS_INSIGHTS
from ascent.models.ratchet import RatchetInsight, RatchetRecommendation


def _insight(kind: str, **fields) -> RatchetInsight:
    template = INSIGHT_TEMPLATES[kind]
    return RatchetInsight(type=kind, message=template["message"].format(**fields), tone=template["tone"])


def generate_insight(
    habit_name: str,
    consistency: int,
    floor: int,
    recent_raise: Optional[RatchetRecommendation] = None,
) -> Optional[RatchetInsight]:
    if recent_raise is not None and recent_raise.direction == "up":
        if recent_raise.mode == "floor":
            return _insight("floor_raised", name=habit_name, floor=recent_raise.after)
        return _insight(
            "target_raised",
            name=habit_name,
            before=recent_raise.before,
            after=recent_raise.after,
        )

    status = floor_status(consistency, floor)
    kind = STATUS_INSIGHTS.get(status.status)
    if kind is None:
        return None
    return _insight(kind, name=habit_name, consistency=consistency, floor=floor)
