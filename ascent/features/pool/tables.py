"""
Pool content tables.

Drain rates, the recharge catalog and the status bands are data, not logic:
the engine functions take a PoolTables instance and fall back to
DEFAULT_POOL_TABLES. Rates are pool points per minute of use.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class DrainCategory:
    name: str
    rate: float
    apps: Tuple[str, ...]
    description: str = ""


@dataclass(frozen=True)
class RechargeActivity:
    minutes: float
    boost: float
    label: str


@dataclass(frozen=True)
class StatusBand:
    min_level: int
    status: str
    message: str
    suggestion: str
    color: str


DEFAULT_DRAIN_CATEGORIES: Tuple[DrainCategory, ...] = (
    # Infinite scroll, variable reward, passive consumption.
    # A bare "X" is left out: as a substring it would match Netflix, Xcode, ...
    DrainCategory(
        name="social",
        rate=-1.5,
        apps=("TikTok", "Instagram", "Twitter", "Facebook", "Reddit", "Snapchat"),
        description="Infinite scroll + variable rewards",
    ),
    DrainCategory(
        name="video",
        rate=-0.8,
        apps=("YouTube", "Netflix", "Hulu", "Disney+", "HBO", "Twitch"),
        description="Passive consumption, finite content",
    ),
    DrainCategory(
        name="communication",
        rate=-0.3,
        apps=("Messages", "Slack", "Email", "Discord", "WhatsApp", "Telegram"),
        description="Connection, but notification-driven",
    ),
    DrainCategory(
        name="utility",
        rate=0.0,
        apps=("Maps", "Calendar", "Calculator", "Settings", "Camera", "Notes", "Weather"),
        description="Functional, no dopamine loop",
    ),
    DrainCategory(
        name="recharge",
        rate=0.2,
        apps=("Kindle", "Audible", "Meditation", "Calm", "Headspace"),
        description="Restorative activities",
    ),
)

DEFAULT_CATEGORY = "utility"

DEFAULT_RECHARGE_CATALOG: Mapping[str, Mapping[str, RechargeActivity]] = MappingProxyType({
    "exercise": MappingProxyType({
        "light": RechargeActivity(minutes=15, boost=8, label="Light exercise"),
        "moderate": RechargeActivity(minutes=30, boost=15, label="Moderate workout"),
        "intense": RechargeActivity(minutes=45, boost=12, label="Intense workout"),  # cortisol offsets some gain
    }),
    "meditation": MappingProxyType({
        "short": RechargeActivity(minutes=5, boost=5, label="Quick meditation"),
        "standard": RechargeActivity(minutes=15, boost=10, label="Full meditation"),
    }),
    "outdoors": MappingProxyType({
        "walk": RechargeActivity(minutes=20, boost=8, label="Walk outside"),
        "sunlight": RechargeActivity(minutes=15, boost=10, label="Morning sunlight"),
    }),
    "social": MappingProxyType({
        "inPerson": RechargeActivity(minutes=30, boost=10, label="In-person time"),
        "deepConversation": RechargeActivity(minutes=60, boost=15, label="Deep conversation"),
    }),
    "coldExposure": MappingProxyType({
        "shower": RechargeActivity(minutes=2, boost=12, label="Cold exposure"),
    }),
    "sleep": MappingProxyType({
        "good": RechargeActivity(minutes=7 * 60, boost=25, label="7+ hours sleep"),
        "great": RechargeActivity(minutes=8 * 60, boost=30, label="8+ hours sleep"),
    }),
})

# Highest band first; the first band whose min_level is reached wins.
DEFAULT_STATUS_BANDS: Tuple[StatusBand, ...] = (
    StatusBand(80, "high", "Full reserves. Prime time for challenging work.", "Tackle your hardest habit now.", "#22c55e"),
    StatusBand(60, "good", "Solid reserves. Good for focused work.", "A good time for any habit.", "#3b82f6"),
    StatusBand(40, "moderate", "Moderate reserves. Stick to routines.", "Keep it simple today.", "#f59e0b"),
    StatusBand(20, "low", "Low reserves. Use 2-minute versions.", "Tiny moves only. No pressure.", "#f97316"),
    StatusBand(0, "depleted", "Reserves depleted. Recovery time.", "Rest or recharge activities only.", "#ef4444"),
)


@dataclass(frozen=True)
class MorningRules:
    """Morning baseline arithmetic (pool points)."""

    baseline: int = 65
    prior_day_bonus: int = 10
    streak_bonuses: Tuple[Tuple[int, int], ...] = ((7, 5), (21, 5), (60, 5))  # (min streak days, bonus)
    sleep_bonuses: Tuple[Tuple[float, int], ...] = ((8.0, 10), (7.0, 5), (6.0, 0))  # (min hours, modifier)
    short_sleep_penalty: int = -10
    min_level: int = 20
    max_level: int = 100


@dataclass(frozen=True)
class RecoveryRule:
    """
    One recovery suggestion and when it applies.

    Hours and levels are half-open ranges. `skip_if_recent` is matched
    against "activity_type:intensity" of the day's recharges, lowercased.
    """

    activity_type: str
    intensity: str
    priority: int
    reason: str
    min_hour: int = 0
    max_hour: int = 24
    min_level: int = 0
    max_level: int = 101
    skip_if_recent: Optional[str] = None


# Evaluated in order; at most `max_suggestions` are returned.
DEFAULT_RECOVERY_RULES: Tuple[RecoveryRule, ...] = (
    RecoveryRule("outdoors", "sunlight", 1, "Morning sunlight sets your circadian rhythm for the day",
                 min_hour=6, max_hour=10, skip_if_recent="sunlight"),
    RecoveryRule("coldExposure", "shower", 1, "Cold exposure provides fastest recovery (+10-12%)",
                 max_level=30, skip_if_recent="cold"),
    RecoveryRule("boredom", "standard", 2, "Deliberate boredom recalibrates sensitivity", max_level=30),
    RecoveryRule("exercise", "light", 2, "Light movement restores without depleting", min_level=30, max_level=60),
    RecoveryRule("meditation", "standard", 3, "Meditation builds sustained baseline", min_level=30, max_level=60),
    RecoveryRule("outdoors", "walk", 2, "Counter the afternoon trough with attention restoration",
                 min_hour=14, max_hour=16),
)


@dataclass(frozen=True)
class SummaryRules:
    """End-of-day summary thresholds (pool points)."""

    heavy_drain: int = 50
    strong_recovery: int = 30
    baseline_shift: int = 10
    top_drains: int = 3
    heavy_drain_message: str = "Heavy depletion today. Consider a recovery day tomorrow."
    strong_recovery_message: str = "Strong recovery practices. Your sensitivity is improving."
    trending_up_message: str = "Your baseline is trending up compared to last week."
    trending_down_message: str = "Your baseline has dropped. Consider a 1-2 week digital detox."


@dataclass(frozen=True)
class PoolTables:
    drain_categories: Tuple[DrainCategory, ...] = DEFAULT_DRAIN_CATEGORIES
    recharge_catalog: Mapping[str, Mapping[str, RechargeActivity]] = field(
        default_factory=lambda: DEFAULT_RECHARGE_CATALOG
    )
    status_bands: Tuple[StatusBand, ...] = DEFAULT_STATUS_BANDS
    morning: MorningRules = field(default_factory=MorningRules)
    default_category: str = DEFAULT_CATEGORY
    recovery_per_hour: float = 1.0
    recovery_rules: Tuple[RecoveryRule, ...] = DEFAULT_RECOVERY_RULES
    max_suggestions: int = 3
    summary: SummaryRules = field(default_factory=SummaryRules)

    def category(self, name: str) -> Optional[DrainCategory]:
        for category in self.drain_categories:
            if category.name == name:
                return category
        return None

    def recharge_activity(self, activity_type: str, intensity: str) -> Optional[RechargeActivity]:
        return self.recharge_catalog.get(activity_type, {}).get(intensity)


DEFAULT_POOL_TABLES = PoolTables()
