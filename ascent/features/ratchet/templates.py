"""
Ratchet message templates and bands.

Kept as data so copy changes never touch the decision logic. Templates are
str.format strings; available fields are listed next to each group.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

# Fields: name, unit, consistency, before, after
RECOMMENDATION_TEMPLATES: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "target_up": MappingProxyType({
        "message": "You've hit {consistency}% consistency. Time to level up?",
        "recommendation": "{before} → {after} {unit}",
    }),
    "target_down": MappingProxyType({
        "message": "{consistency}% completion suggests this might be too ambitious.",
        "recommendation": "Consider {after} {unit} instead",
    }),
    "floor_up": MappingProxyType({
        "message": "Your {name} consistency has been solid. Your new baseline is {after}%.",
        "recommendation": "{before}% → {after}% floor",
    }),
    "floor_down": MappingProxyType({
        "message": "{name} has dropped to {consistency}% (floor: {before}%). The 2-minute version keeps the habit alive.",
        "recommendation": "Try the 2-minute version",
    }),
})

# (minimum consistency - floor, status, message, color); first match wins.
FLOOR_STATUS_BANDS: Tuple[Tuple[int, str, str, str], ...] = (
    (15, "exceeding", "Exceeding your baseline", "success"),
    (5, "solid", "Solid consistency", "poolFull"),
    (-5, "maintaining", "Maintaining your floor", "text"),
    (-15, "slipping", "Slipping below baseline", "warning"),
)
FLOOR_STATUS_FALLBACK = ("rebuilding", "Rebuilding momentum", "danger")
FLOOR_STATUS_BUILDING = ("building", "Building your foundation", "text2")

# Fields: name, consistency, floor, before, after
INSIGHT_TEMPLATES: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "floor_raised": MappingProxyType({
        "message": "Your {name} floor just rose to {floor}%. This is your new baseline - you've proven you can maintain this level.",
        "tone": "acknowledgment",
    }),
    "target_raised": MappingProxyType({
        "message": "{name} now asks for {after} instead of {before}. You've shown you can carry it.",
        "tone": "acknowledgment",
    }),
    "exceeding_floor": MappingProxyType({
        "message": "{name} is at {consistency}% - well above your {floor}% floor. The ratchet may rise soon.",
        "tone": "informational",
    }),
    "below_floor": MappingProxyType({
        "message": "{name} has dipped to {consistency}%, below your {floor}% floor. Consider the 2-minute version to rebuild.",
        "tone": "supportive",
    }),
    "rebuilding": MappingProxyType({
        "message": "{name} needs attention ({consistency}% vs {floor}% floor). Small consistent actions will raise it back.",
        "tone": "coaching",
    }),
})

# Floor status -> insight type. Statuses not listed produce no insight.
STATUS_INSIGHTS: Mapping[str, str] = MappingProxyType({
    "exceeding": "exceeding_floor",
    "slipping": "below_floor",
    "rebuilding": "rebuilding",
})
