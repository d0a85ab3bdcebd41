"""Tests for the emotion catalog and its unknown-label fallback."""

from __future__ import annotations

import pytest

from moodscope.emotions import (
    EMOTION_CATALOG,
    UNKNOWN_EMOTION,
    EmotionCategory,
    emotion_category,
    emotion_color,
    localized_label,
    lookup_emotion,
)


class TestLookup:
    @pytest.mark.parametrize("label", ["Happiness", "happiness", "  HAPPINESS "])
    def test_case_and_whitespace_insensitive(self, label: str) -> None:
        profile = lookup_emotion(label)
        assert profile.id == "happiness"
        assert profile.localized == "快乐"
        assert profile.category is EmotionCategory.ACTIVE

    def test_passive_emotion(self) -> None:
        assert emotion_category("Anxiety") is EmotionCategory.PASSIVE

    def test_unknown_falls_back(self) -> None:
        assert lookup_emotion("Schadenfreude") is UNKNOWN_EMOTION
        assert emotion_category("Schadenfreude") is EmotionCategory.NEUTRAL
        assert emotion_color("Schadenfreude") == UNKNOWN_EMOTION.color

    def test_unknown_keeps_incoming_label(self) -> None:
        assert localized_label("Schadenfreude") == "Schadenfreude"

    def test_known_localized(self) -> None:
        assert localized_label("Joy") == "喜悦"

    def test_supplied_label_for_unknown_emotion(self) -> None:
        assert localized_label("Schadenfreude", "幸灾乐祸") == "幸灾乐祸"

    def test_catalog_beats_supplied_label(self) -> None:
        assert localized_label("Joy", "开心") == "喜悦"

    def test_blank_supplied_label_ignored(self) -> None:
        assert localized_label("Schadenfreude", "  ") == "Schadenfreude"


class TestCatalog:
    def test_keys_are_canonical(self) -> None:
        for key, profile in EMOTION_CATALOG.items():
            assert key == profile.id == key.strip().lower()

    def test_colors_are_hex(self) -> None:
        for profile in EMOTION_CATALOG.values():
            assert profile.color.startswith("#")
            assert len(profile.color) == 7

    def test_has_both_categories(self) -> None:
        categories = {p.category for p in EMOTION_CATALOG.values()}
        assert {EmotionCategory.ACTIVE, EmotionCategory.PASSIVE, EmotionCategory.NEUTRAL} <= categories
