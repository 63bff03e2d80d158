"""
Perfil meta-analysis.
"""
import pytest

from engine import score_meta_analysis


def test_reference_meta_passes(engine):
    candidate = {
        "politicalStance": "Centrist",
        "paragraphSummary": "P" * 59 + ".",
        "summary": "S" * 25,
        "bulletPointsSummary": ["one", "two", "three", "four"],
        "analysisConfidence": "medium",
        "stanceExplanation": "E" * 40,
        "topQuotes": [],
        "topics": ["a", "b", "c"],
    }
    report = engine.score(candidate, "meta-analysis")
    assert report.passed is True
    assert report.score == 1.0
    assert report.reason == "All meta-analysis quality checks passed"


def test_fixture_meta_passes(engine, meta):
    assert engine.score(meta, "meta-analysis").passed


@pytest.mark.parametrize("stance", ["Far Left", "Left-leaning", "Centrist", "Right-leaning", "Far Right"])
def test_every_stance_accepted(engine, meta, stance):
    meta["politicalStance"] = stance
    assert engine.score(meta, "meta-analysis").passed


def test_moderate_is_rejected_with_value_in_message(engine, meta):
    meta["politicalStance"] = "Moderate"
    report = engine.score(meta, "meta-analysis")
    assert [v.message for v in report.violations] == ['politicalStance "Moderate" is not a valid enum value']
    assert "Moderate" in report.reason
    assert report.score == pytest.approx(1 - 1 / 8)


def test_paragraph_summary_missing(engine, meta):
    del meta["paragraphSummary"]
    report = engine.score(meta, "meta-analysis")
    assert [v.message for v in report.violations] == ["paragraphSummary is missing or not a string"]


def test_paragraph_summary_short_fragments(engine, meta):
    meta["paragraphSummary"] = "Yes. No. Okay. Fine. Sure. Right. Well. Maybe. Nope. Done. Ok."
    report = engine.score(meta, "meta-analysis")
    assert [v.message for v in report.violations] == [
        "paragraphSummary has 0 sentences (expected at least 1)",
    ]


def test_paragraph_summary_too_short_and_no_sentence(engine, meta):
    meta["paragraphSummary"] = "Too short."
    report = engine.score(meta, "meta-analysis")
    assert [v.message for v in report.violations] == [
        "paragraphSummary has 0 sentences (expected at least 1)",
        "paragraphSummary is too short (less than 50 chars)",
    ]


@pytest.mark.parametrize("field", ["paragraphSummary", "summary", "stanceExplanation"])
def test_empty_string_counts_once(engine, meta, field):
    meta[field] = ""
    report = engine.score(meta, "meta-analysis")
    assert [v.message for v in report.violations] == [f"{field} is missing or not a string"]
    assert report.score == pytest.approx(1 - 1 / 8)


def test_summary_and_explanation_lengths(engine, meta):
    meta["summary"] = "Brief."
    meta["stanceExplanation"] = 12
    report = engine.score(meta, "meta-analysis")
    assert [v.message for v in report.violations] == [
        "summary is too short (less than 20 chars)",
        "stanceExplanation is missing or not a string",
    ]


@pytest.mark.parametrize("n, ok", [(2, False), (3, True), (7, True), (8, False)])
def test_bullet_point_bounds(engine, meta, n, ok):
    meta["bulletPointsSummary"] = [f"bullet {i}" for i in range(n)]
    assert engine.score(meta, "meta-analysis").passed is ok


def test_bullet_points_minimum_message(engine, meta):
    meta["bulletPointsSummary"] = ["one", "", "two"]
    report = engine.score(meta, "meta-analysis")
    assert [v.message for v in report.violations] == ["bulletPointsSummary has 2 items (expected at least 3)"]


def test_confidence_enum(engine, meta):
    meta["analysisConfidence"] = "certain"
    report = engine.score(meta, "meta-analysis")
    assert [v.message for v in report.violations] == ['analysisConfidence "certain" is not valid']


def test_top_quotes_elements(engine, meta):
    meta["topQuotes"] = [
        {"text": "A full quote", "context": "setup"},
        {"text": "hey ", "context": ""},
        "not an object",
    ]
    report = engine.score(meta, "meta-analysis")
    assert [v.message for v in report.violations] == [
        "topQuotes[1].text is empty or too short",
        "topQuotes[1].context is empty or missing",
        "topQuotes[2].text is empty or too short",
        "topQuotes[2].context is empty or missing",
    ]
    assert report.score == pytest.approx(0.5)


@pytest.mark.parametrize("n, ok", [(1, False), (2, True), (7, True), (8, False)])
def test_topic_bounds(engine, meta, n, ok):
    meta["topics"] = [f"topic {i}" for i in range(n)]
    assert engine.score(meta, "meta-analysis").passed is ok


def test_topics_minimum_message(engine, meta):
    meta["topics"] = ["only one", "  "]
    report = engine.score(meta, "meta-analysis")
    assert [v.message for v in report.violations] == ["topics has 1 items (expected at least 2)"]


def test_empty_object(engine):
    report = engine.score({}, "meta-analysis")
    assert not report.passed
    assert report.score == 0.0
    assert report.violations[0].message == 'politicalStance "undefined" is not a valid enum value'


def test_null_stance_rendered_as_json(engine, meta):
    meta["politicalStance"] = None
    report = engine.score(meta, "meta-analysis")
    assert [v.message for v in report.violations] == ['politicalStance "null" is not a valid enum value']


def test_per_profile_entry_point(meta):
    assert score_meta_analysis(meta).passed
