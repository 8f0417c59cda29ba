from unittest.mock import AsyncMock

import pytest

from reasonbridge_backend.services.analysis_types import AnalysisResult, FeedbackType
from reasonbridge_backend.services.exceptions import AnalysisFailedError
from reasonbridge_backend.services.response_analyzer import (
    AFFIRMATION_CONFIDENCE,
    ResponseAnalyzer,
)


def _finding(feedback_type, confidence):
    return AnalysisResult(
        type=feedback_type,
        suggestion_text=f"{feedback_type.value} suggestion",
        reasoning=f"{feedback_type.value} reasoning",
        confidence_score=confidence,
    )


def _analyzer(result=None, error=None):
    analyzer = AsyncMock()
    if error is not None:
        analyzer.analyze.side_effect = error
    else:
        analyzer.analyze.return_value = result
    return analyzer


def _orchestrator(tone=None, fallacy=None, clarity=None, tolerate=False):
    return ResponseAnalyzer(
        tone_analyzer=tone or _analyzer(),
        fallacy_detector=fallacy or _analyzer(),
        clarity_analyzer=clarity or _analyzer(),
        tolerate_analyzer_failures=tolerate,
    )


@pytest.mark.asyncio
async def test_clean_content_gets_affirmation():
    result = await ResponseAnalyzer().analyze_content(
        "I think the proposal has merit, but the costs deserve a closer look."
    )

    assert result.type == FeedbackType.AFFIRMATION
    assert result.confidence_score == pytest.approx(AFFIRMATION_CONFIDENCE)
    assert "constructive dialogue" in result.suggestion_text


@pytest.mark.asyncio
async def test_highest_confidence_wins_across_analyzers():
    # Fallacy (appeal to authority, 0.78) beats unsourced claim (0.73)
    result = await ResponseAnalyzer().analyze_content("Studies show that crime is falling.")

    assert result.type == FeedbackType.FALLACY
    assert result.subtype == "appeal_to_authority"


@pytest.mark.asyncio
async def test_equal_confidence_prefers_fallacy_over_inflammatory():
    analyzer = _orchestrator(
        tone=_analyzer(_finding(FeedbackType.INFLAMMATORY, 0.8)),
        fallacy=_analyzer(_finding(FeedbackType.FALLACY, 0.8)),
    )

    assert (await analyzer.analyze_content("x")).type == FeedbackType.FALLACY


@pytest.mark.asyncio
async def test_equal_confidence_prefers_inflammatory_over_unsourced():
    analyzer = _orchestrator(
        tone=_analyzer(_finding(FeedbackType.INFLAMMATORY, 0.75)),
        clarity=_analyzer(_finding(FeedbackType.UNSOURCED, 0.75)),
    )

    assert (await analyzer.analyze_content("x")).type == FeedbackType.INFLAMMATORY


@pytest.mark.asyncio
async def test_equal_confidence_prefers_fallacy_over_bias():
    analyzer = _orchestrator(
        fallacy=_analyzer(_finding(FeedbackType.FALLACY, 0.8)),
        clarity=_analyzer(_finding(FeedbackType.BIAS, 0.8)),
    )

    assert (await analyzer.analyze_content("x")).type == FeedbackType.FALLACY


@pytest.mark.asyncio
async def test_confidence_outranks_type_priority():
    analyzer = _orchestrator(
        fallacy=_analyzer(_finding(FeedbackType.FALLACY, 0.78)),
        clarity=_analyzer(_finding(FeedbackType.BIAS, 0.84)),
    )

    assert (await analyzer.analyze_content("x")).type == FeedbackType.BIAS


@pytest.mark.asyncio
async def test_full_analysis_returns_findings_best_first():
    analyzer = _orchestrator(
        tone=_analyzer(_finding(FeedbackType.INFLAMMATORY, 0.75)),
        fallacy=_analyzer(_finding(FeedbackType.FALLACY, 0.75)),
        clarity=_analyzer(_finding(FeedbackType.UNSOURCED, 0.81)),
    )

    findings = await analyzer.analyze_content_full("x")

    assert [f.type for f in findings] == [
        FeedbackType.UNSOURCED,
        FeedbackType.FALLACY,
        FeedbackType.INFLAMMATORY,
    ]


@pytest.mark.asyncio
async def test_full_analysis_of_clean_content_is_single_affirmation():
    findings = await _orchestrator().analyze_content_full("x")

    assert len(findings) == 1
    assert findings[0].type == FeedbackType.AFFIRMATION


@pytest.mark.asyncio
async def test_analyzer_failure_propagates_by_default():
    analyzer = _orchestrator(
        tone=_analyzer(error=RuntimeError("pattern engine crashed")),
        fallacy=_analyzer(_finding(FeedbackType.FALLACY, 0.9)),
    )

    with pytest.raises(AnalysisFailedError) as exc:
        await analyzer.analyze_content("x")

    assert isinstance(exc.value.cause, RuntimeError)


@pytest.mark.asyncio
async def test_tolerant_mode_treats_failure_as_no_finding():
    analyzer = _orchestrator(
        tone=_analyzer(error=RuntimeError("pattern engine crashed")),
        fallacy=_analyzer(_finding(FeedbackType.FALLACY, 0.9)),
        tolerate=True,
    )

    assert (await analyzer.analyze_content("x")).type == FeedbackType.FALLACY


@pytest.mark.asyncio
async def test_all_analyzers_run_concurrently_on_same_content():
    tone, fallacy, clarity = _analyzer(), _analyzer(), _analyzer()

    await _orchestrator(tone, fallacy, clarity).analyze_content("the content")

    for analyzer in (tone, fallacy, clarity):
        analyzer.analyze.assert_awaited_once_with("the content")
