"""
Tests for app.ai.matching - project / opportunity match scoring.
"""

import pytest

from app.ai.matching import MatchResult, score_match, rank_opportunities


def _neutral_project(**overrides):
    data = {
        "alignment_keywords": ["alpha"],
        "focus_areas": ["education"],
        "innovation_level": "moonshot",
        "project_scale": "global",
    }
    data.update(overrides)
    return data


def _neutral_opportunity(**overrides):
    data = {
        "keyword_indicators": ["omega"],
        "funding_priorities": ["health"],
        "success_factors": ["track record"],
        "project_characteristics": ["local pilots"],
    }
    data.update(overrides)
    return data


class TestMissingInputs:
    """Absent analyses score zero."""

    def test_missing_project(self, opportunity_analysis):
        assert score_match(None, opportunity_analysis) == MatchResult(score=0, factors=[])

    def test_missing_opportunity(self, project_analysis):
        assert score_match(project_analysis, None) == MatchResult(score=0, factors=[])

    def test_both_missing(self):
        result = score_match(None, None)
        assert result.score == 0
        assert result.factors == []


class TestContributions:
    """Each scoring step in isolation."""

    def test_full_example(self, project_analysis, opportunity_analysis):
        """All five steps fire, factors listed in step order."""
        result = score_match(project_analysis, opportunity_analysis)

        # 10 keywords + 6 focus + 10 innovation + 8 scale + 7 confidence
        assert result.score == 41
        assert result.factors == [
            "Keyword overlap 2 (+10)",
            "Focus area overlap 1 (+6)",
            "Innovation alignment (+10)",
            "Scale alignment (+8)",
        ]

    def test_no_overlap_is_confidence_only(self):
        """With nothing in common the score is just the confidence blend."""
        result = score_match(
            _neutral_project(confidence_score=0.9),
            _neutral_opportunity(confidence_score=0.3),
        )
        assert result.score == 6
        assert result.factors == []

    def test_keyword_overlap_is_case_insensitive(self):
        result = score_match(
            _neutral_project(alignment_keywords=["AI", "Climate"]),
            _neutral_opportunity(keyword_indicators=["ai", "CLIMATE"]),
        )
        assert result.factors == ["Keyword overlap 2 (+10)"]
        assert result.score == 15

    def test_keyword_contribution_caps_at_30(self):
        keywords = [f"kw{i}" for i in range(10)]
        result = score_match(
            _neutral_project(alignment_keywords=keywords),
            _neutral_opportunity(keyword_indicators=[k.upper() for k in keywords]),
        )
        assert result.factors == ["Keyword overlap 10 (+30)"]
        assert result.score == 35

    def test_focus_contribution_caps_at_25(self):
        areas = ["a", "b", "c", "d", "e", "f"]
        result = score_match(
            _neutral_project(focus_areas=areas),
            _neutral_opportunity(funding_priorities=areas),
        )
        assert result.factors == ["Focus area overlap 6 (+25)"]
        assert result.score == 30

    def test_duplicate_entries_count_once(self):
        result = score_match(
            _neutral_project(alignment_keywords=["solar", "Solar", "SOLAR"], focus_areas=["x", "X"]),
            _neutral_opportunity(keyword_indicators=["solar", "solar"], funding_priorities=["x"]),
        )
        assert result.factors == ["Keyword overlap 1 (+5)", "Focus area overlap 1 (+6)"]

    def test_innovation_level_matches_as_substring(self):
        result = score_match(
            _neutral_project(innovation_level="Breakthrough"),
            _neutral_opportunity(success_factors=["Potential for BREAKTHROUGH results"]),
        )
        assert result.factors == ["Innovation alignment (+10)"]
        assert result.score == 15

    def test_scale_matches_as_substring(self):
        result = score_match(
            _neutral_project(project_scale="National"),
            _neutral_opportunity(project_characteristics=["national reach"]),
        )
        assert result.factors == ["Scale alignment (+8)"]
        assert result.score == 13

    def test_empty_innovation_level_never_matches(self):
        result = score_match(
            _neutral_project(innovation_level=""),
            _neutral_opportunity(success_factors=["anything"]),
        )
        assert result.factors == []


class TestConfidenceBlend:
    """Confidence scores default independently to 0.5."""

    @pytest.mark.parametrize("bad_value", [None, "not a number", float("nan"), float("inf"), [], True])
    def test_unusable_confidence_defaults(self, bad_value):
        result = score_match(
            _neutral_project(confidence_score=bad_value),
            _neutral_opportunity(confidence_score=1.0),
        )
        # (0.5 + 1.0) / 2 * 10 = 7.5 -> 8
        assert result.score == 8

    def test_missing_confidence_on_both_sides(self):
        assert score_match(_neutral_project(), _neutral_opportunity()).score == 5

    def test_numeric_strings_are_parsed(self):
        result = score_match(
            _neutral_project(confidence_score="0.2"),
            _neutral_opportunity(confidence_score="0.2"),
        )
        assert result.score == 2

    def test_zero_confidence_is_kept(self):
        result = score_match(
            _neutral_project(confidence_score=0),
            _neutral_opportunity(confidence_score=0),
        )
        assert result.score == 0


class TestBounds:
    """Score is always an int in [0, 100]."""

    def test_score_never_exceeds_100(self):
        keywords = [f"k{i}" for i in range(1000)]
        result = score_match(
            _neutral_project(
                alignment_keywords=keywords,
                focus_areas=keywords,
                innovation_level="k",
                project_scale="k",
                confidence_score=50,
            ),
            _neutral_opportunity(
                keyword_indicators=keywords,
                funding_priorities=keywords,
                success_factors=keywords,
                project_characteristics=keywords,
                confidence_score=50,
            ),
        )
        assert result.score == 100
        assert isinstance(result.score, int)

    def test_score_never_negative(self):
        result = score_match(
            _neutral_project(confidence_score=-30),
            _neutral_opportunity(confidence_score=-30),
        )
        assert result.score == 0

    def test_non_list_fields_read_as_empty(self):
        result = score_match(
            {"alignment_keywords": "solar", "focus_areas": {"a": 1}, "innovation_level": 42},
            {"keyword_indicators": None, "funding_priorities": 7, "success_factors": "high"},
        )
        assert result.score == 5
        assert result.factors == []

    def test_non_string_entries_are_ignored(self):
        result = score_match(
            _neutral_project(alignment_keywords=[None, 3, "solar"]),
            _neutral_opportunity(keyword_indicators=["SOLAR", None, {"x": 1}]),
        )
        assert result.factors == ["Keyword overlap 1 (+5)"]

    def test_deterministic(self, project_analysis, opportunity_analysis):
        first = score_match(project_analysis, opportunity_analysis)
        second = score_match(project_analysis, opportunity_analysis)
        assert first == second


class TestRanking:
    """rank_opportunities ordering, filtering and truncation."""

    def test_best_match_first(self, project_analysis, opportunity_analysis):
        ranked = rank_opportunities(
            project_analysis,
            [
                ("weak", _neutral_opportunity()),
                ("strong", opportunity_analysis),
            ],
        )
        assert [opportunity_id for opportunity_id, _ in ranked] == ["strong", "weak"]
        assert ranked[0][1].score == 41

    def test_ties_keep_input_order(self, project_analysis):
        ranked = rank_opportunities(
            project_analysis,
            [("first", _neutral_opportunity()), ("second", _neutral_opportunity())],
        )
        assert [opportunity_id for opportunity_id, _ in ranked] == ["first", "second"]

    def test_min_score_and_limit(self, project_analysis, opportunity_analysis):
        ranked = rank_opportunities(
            project_analysis,
            [
                ("weak", _neutral_opportunity()),
                ("strong", opportunity_analysis),
                ("also-strong", dict(opportunity_analysis)),
                ("missing", None),
            ],
            min_score=20,
            limit=1,
        )
        assert [opportunity_id for opportunity_id, _ in ranked] == ["strong"]
