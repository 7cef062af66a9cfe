"""Tests for src.core.categorizer — trained model plus keyword scoring."""

import pytest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

from src.core.categorizer import (
    CATEGORY_KEYWORDS,
    CategoryModel,
    EventCategorizer,
    score_keywords,
    tokenize,
)
from src.core.drafts import CATEGORIES


class TestTokenize:
    def test_filters_short_words_stop_words_and_numbers(self):
        assert tokenize("Go to the gym at 7 with 2024 friends") == ["gym", "friends"]

    def test_lowercases(self):
        assert tokenize("DENTIST Appointment") == ["dentist", "appointment"]

    def test_nothing_left(self):
        assert tokenize("at 10 on it") == []


class TestScoreKeywords:
    def test_highest_score_wins(self):
        assert score_keywords("Team meeting with client") == "work"

    def test_whole_word_only(self):
        # "testing" must not count as "test", "gymnastics" not as "gym"
        assert score_keywords("gymnastics testing") == "personal"

    def test_tie_falls_back_to_personal(self):
        assert score_keywords("gym then dentist") == "personal"

    def test_no_match(self):
        assert score_keywords("zzz") == "personal"

    def test_multi_word_keyword(self):
        assert score_keywords("some mental health time") == "health"


class TestCategoryModel:
    def test_starts_unbuilt(self):
        model = CategoryModel()
        assert not model.is_ready

    def test_build_is_idempotent(self, category_model):
        assert category_model.is_ready
        assert category_model.build() is category_model

    def test_rank_covers_all_categories(self, category_model):
        ranked = category_model.rank("gym workout")
        assert {label for label, _ in ranked} == set(CATEGORIES)
        confidences = [p for _, p in ranked]
        assert confidences == sorted(confidences, reverse=True)
        assert sum(confidences) == pytest.approx(1.0)

    def test_unknown_vocabulary_ranks_empty(self, category_model):
        assert category_model.rank("asdf qwer") == []

    def test_deterministic_across_builds(self):
        first = CategoryModel().build().rank("yoga class at the gym")
        second = CategoryModel().build().rank("yoga class at the gym")
        assert first == second

    def test_concurrent_build_trains_once(self):
        model = CategoryModel()
        with patch.object(model, "_train", wraps=model._train) as train:
            with ThreadPoolExecutor(max_workers=8) as pool:
                results = list(pool.map(lambda _: model.build(), range(16)))
        assert train.call_count == 1
        assert all(r is model for r in results)

    def test_rebuild_replaces_model(self):
        model = CategoryModel().build()
        before = model.rank("doctor checkup")
        model.rebuild()
        assert model.rank("doctor checkup") == before


class TestEventCategorizer:
    @pytest.mark.parametrize("summary,expected", [
        ("Team standup meeting", "work"),
        ("Gym workout", "fitness"),
        ("Dentist appointment", "health"),
        ("Flight and hotel booking", "travel"),
        ("Calculus lecture and homework", "study"),
        ("Movie night with friends", "leisure"),
        ("Afternoon nap and meditation", "rest"),
        ("Family birthday party at home", "personal"),
    ])
    def test_common_events(self, categorizer, summary, expected):
        assert categorizer.categorize(summary) == expected

    def test_empty_text_is_personal(self, categorizer):
        assert categorizer.categorize("", "", "") == "personal"

    def test_unknown_words_are_personal(self, categorizer):
        assert categorizer.categorize("asdf qwer") == "personal"

    def test_only_stop_words_is_personal(self, categorizer):
        assert categorizer.categorize("at the", "on", "") == "personal"

    def test_description_and_location_used(self, categorizer):
        assert categorizer.categorize("Sam", "", "Downtown gym") == "fitness"

    def test_always_returns_known_category(self, categorizer):
        for text in ("party meeting", "hello world", "exam at the clinic"):
            assert categorizer.categorize(text) in CATEGORIES

    def test_unconfident_model_uses_keywords(self, category_model):
        categorizer = EventCategorizer(category_model, threshold=1.0)
        assert categorizer.categorize("Team meeting") == "work"
        assert categorizer.categorize("gym then dentist") == "personal"

    def test_model_failure_uses_keywords(self):
        model = MagicMock(spec=CategoryModel)
        model.keywords = CATEGORY_KEYWORDS
        model.rank.side_effect = RuntimeError("not trained")
        categorizer = EventCategorizer(model)
        assert categorizer.categorize("Doctor checkup") == "health"

    def test_model_label_outside_categories_ignored(self):
        model = MagicMock(spec=CategoryModel)
        model.keywords = CATEGORY_KEYWORDS
        model.rank.return_value = [("finance", 0.9)]
        categorizer = EventCategorizer(model)
        assert categorizer.categorize("Client presentation") == "work"


class TestCategorizeEvents:
    def test_fills_missing_and_keeps_existing(self, categorizer):
        events = [
            {"summary": "Gym workout"},
            {"summary": "Team meeting", "category": "leisure"},
            {"summary": "Dentist appointment", "category": "bogus"},
        ]
        result = categorizer.categorize_events(events)
        assert [e["category"] for e in result] == ["fitness", "leisure", "health"]

    def test_force_recategorizes(self, categorizer):
        events = [{"summary": "Team meeting", "category": "leisure"}]
        result = categorizer.categorize_events(events, force=True)
        assert result[0]["category"] == "work"

    def test_inputs_not_mutated(self, categorizer):
        events = [{"summary": "Gym workout"}]
        categorizer.categorize_events(events)
        assert "category" not in events[0]
