"""Emotion catalog: category, localized label, display colour and emoji.

One typed table keyed by canonical emotion id (lower-cased label).  Labels
that are not in the table resolve to the ``unknown`` profile, which is
neutral, grey, and keeps the incoming label for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EmotionCategory(str, Enum):
    """Whether an emotion is outward-driving, inward-receiving, or neither."""

    ACTIVE = "active"
    PASSIVE = "passive"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class EmotionProfile:
    """Display metadata for one canonical emotion."""

    id: str
    label: str
    localized: str
    category: EmotionCategory
    color: str
    emoji: str


_A = EmotionCategory.ACTIVE
_P = EmotionCategory.PASSIVE
_N = EmotionCategory.NEUTRAL

# (label, localized, category, colour, emoji)
_ROWS: tuple[tuple[str, str, EmotionCategory, str, str], ...] = (
    ("Happiness", "快乐", _A, "#52c41a", "😊"),
    ("Satisfaction", "满足", _P, "#73d13d", "😌"),
    ("Joy", "喜悦", _A, "#95de64", "😄"),
    ("Loss", "失落", _P, "#8c8c8c", "😔"),
    ("Loneliness", "孤独", _P, "#595959", "😞"),
    ("Depression", "抑郁", _P, "#434343", "😩"),
    ("Despair", "绝望", _P, "#262626", "😨"),
    ("Irritability", "易怒", _P, "#ff7875", "😤"),
    ("Indignation", "愤慨", _A, "#ff4d4f", "😠"),
    ("Excitement", "兴奋", _A, "#ffa940", "🤗"),
    ("Anger", "愤怒", _A, "#f5222d", "😡"),
    ("Anxiety", "焦虑", _P, "#faad14", "😰"),
    ("Fear", "恐惧", _P, "#fa541c", "😨"),
    ("Panic", "惊慌", _P, "#fa8c16", "😱"),
    ("Shock", "震惊", _P, "#ad4e00", "😲"),
    ("Confusion", "困惑", _P, "#8c8c8c", "😕"),
    ("Amazement", "惊奇", _P, "#531dab", "😮"),
    ("Dislike", "厌恶", _P, "#b37feb", "😒"),
    ("Dissatisfaction", "不满", _P, "#efdbff", "😤"),
    ("Annoyance", "烦恼", _P, "#f9f0ff", "😫"),
    ("Sense of Security", "安全感", _P, "#b7eb8f", "🛡️"),
    ("Peace of Mind", "安心", _P, "#87e8de", "☮️"),
    ("Hope", "希望", _A, "#fa8c16", "✨"),
    ("Desire", "渴望", _A, "#69c0ff", "💭"),
    ("Expectation", "期待", _A, "#91d5ff", "🤞"),
    ("Guilt", "内疚", _P, "#bae7ff", "😔"),
    ("Embarrassment", "尴尬", _P, "#e6f7ff", "😳"),
    ("Regret", "后悔", _P, "#1890ff", "😞"),
    ("Sense of Achievement", "成就感", _A, "#0050b3", "🏆"),
    ("Pride", "自豪", _A, "#003a8c", "😌"),
    ("Confidence", "自信", _A, "#002766", "💪"),
    ("Tension", "紧张", _P, "#ff9c6e", "😬"),
    ("Unease", "不安", _P, "#ffbb96", "😟"),
    ("Worry", "担忧", _P, "#ffd591", "😟"),
    ("Helplessness", "无助", _P, "#fff1b8", "😔"),
    ("Dejection", "沮丧", _P, "#d9d9d9", "😞"),
    ("Tranquility", "宁静", _P, "#b5f5ec", "😌"),
    ("Relaxation", "放松", _P, "#5cdbd3", "😎"),
    ("Serenity", "安详", _P, "#36cfc9", "🧘"),
    ("Comfort", "舒适", _P, "#13c2c2", "🤗"),
    ("Doubt", "怀疑", _P, "#006d75", "🤨"),
    ("Tiredness", "疲倦", _P, "#00474f", "😴"),
    ("Exhaustion", "精疲力竭", _P, "#002329", "😵"),
    ("Isolation", "孤立", _P, "#d9d9d9", "😶"),
    ("Yearning", "渴望", _A, "#873800", "😍"),
    ("Aspiration", "抱负", _A, "#d46b08", "🎯"),
    ("Loss of Control", "失控", _P, "#fa8c16", "😵‍💫"),
    ("Relief", "宽慰", _P, "#ffd666", "😅"),
    ("Appreciation", "感激", _A, "#fff1b8", "👏"),
    ("Contentment", "满足", _P, "#fffbe6", "😊"),
    ("Uncertainty", "不确定", _P, "#f759ab", "🤷"),
    ("Pain", "痛苦", _P, "#ff85c0", "😣"),
    ("Interest", "感兴趣", _A, "#ffadd6", "🤔"),
    ("Disappointment", "失望", _A, "#1890ff", "😞"),
    ("Glee", "欢乐", _A, "#ffd6e7", "😄"),
    ("Grief", "哀伤", _P, "#fff2e8", "😭"),
    ("Melancholy", "惆怅", _P, "#feffe6", "😔"),
    ("Jealousy", "嫉妒", _P, "#eaff8f", "😒"),
    ("Contempt", "轻蔑", _A, "#5b8c00", "😏"),
    ("Understanding", "理解", _P, "#061178", "🤝"),
    ("Acceptance", "包容", _A, "#0d1a78", "🤗"),
    ("Care", "关爱", _A, "#152c78", "❤️"),
    ("Curiosity", "好奇", _A, "#99ccff", "🤔"),
    ("Victory", "胜利感", _A, "#ff4da6", "🏆"),
    ("Inferiority", "自卑", _P, "#e6005c", "😔"),
    ("Emptiness", "空虚", _P, "#99003d", "🕳️"),
    ("Belongingness", "归属感", _P, "#800033", "🏠"),
    ("Harmony", "和谐", _P, "#003366", "☯️"),
    ("Apathy", "漠然", _P, "#4d99ff", "😑"),
    ("Distress", "痛苦", _P, "#722ed1", "😣"),
    ("Stress", "压力", _P, "#ff7a45", "😫"),
    ("Gratitude", "感激", _P, "#73d13d", "🙏"),
    ("Surprise", "惊奇", _P, "#fa8c16", "😲"),
    ("Boredom", "无聊", _P, "#595959", "😴"),
    ("Frustration", "挫折", _P, "#40a9ff", "😤"),
    ("Shame", "羞耻", _P, "#096dd9", "😳"),
    ("Trust", "信任", _P, "#13c2c2", "🤝"),
    ("Love", "爱", _A, "#c41d7f", "❤️"),
    ("Nostalgia", "怀念", _P, "#ffc9db", "😌"),
    ("Compassion", "同情", _A, "#73d13d", "🤗"),
    ("Optimism", "乐观", _A, "#ffe7ba", "☀️"),
    ("Sadness", "悲伤", _P, "#595959", "😢"),
    ("Neutral", "中性", _N, "#d9d9d9", "😐"),
)


def canonical_emotion_id(label: str) -> str:
    """Catalog key for an incoming label: trimmed and lower-cased."""
    return label.strip().lower()


EMOTION_CATALOG: dict[str, EmotionProfile] = {
    canonical_emotion_id(label): EmotionProfile(
        id=canonical_emotion_id(label),
        label=label,
        localized=localized,
        category=category,
        color=color,
        emoji=emoji,
    )
    for label, localized, category, color, emoji in _ROWS
}

UNKNOWN_EMOTION = EmotionProfile(
    id="unknown",
    label="Unknown",
    localized="未知",
    category=EmotionCategory.NEUTRAL,
    color="#f0f0f0",
    emoji="❓",
)


def lookup_emotion(label: str) -> EmotionProfile:
    """Return the catalog profile for *label*, or ``UNKNOWN_EMOTION``."""
    return EMOTION_CATALOG.get(canonical_emotion_id(label), UNKNOWN_EMOTION)


def localized_label(label: str, supplied: str | None = None) -> str:
    """Localized display label.

    The catalog wins.  An emotion it does not know uses the localized label
    the record source *supplied*, if any, and otherwise keeps *label*.
    """
    profile = EMOTION_CATALOG.get(canonical_emotion_id(label))
    if profile is not None:
        return profile.localized
    if supplied and supplied.strip():
        return supplied.strip()
    return label


def emotion_category(label: str) -> EmotionCategory:
    return lookup_emotion(label).category


def emotion_color(label: str) -> str:
    return lookup_emotion(label).color
