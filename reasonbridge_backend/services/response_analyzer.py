"""
Response analyzer: runs the tone, fallacy and clarity analyzers concurrently
and picks the feedback to show.

Selection order is confidence (descending), then type priority
FALLACY > INFLAMMATORY > UNSOURCED > BIAS > AFFIRMATION.
"""

import asyncio
import logging
from typing import List, Optional, Protocol

from reasonbridge_backend.config import TOLERATE_ANALYZER_FAILURES
from reasonbridge_backend.services.analysis_types import AnalysisResult, FeedbackType
from reasonbridge_backend.services.clarity_analyzer import ClarityAnalyzer
from reasonbridge_backend.services.exceptions import AnalysisFailedError
from reasonbridge_backend.services.fallacy_detector import FallacyDetector
from reasonbridge_backend.services.tone_analyzer import ToneAnalyzer

logger = logging.getLogger(__name__)

AFFIRMATION_CONFIDENCE = 0.85
AFFIRMATION_MESSAGE = (
    "Great job! Your response contributes to constructive dialogue. "
    "Keep engaging thoughtfully with different perspectives."
)


class ContentAnalyzer(Protocol):
    async def analyze(self, content: str) -> Optional[AnalysisResult]:
        ...


def affirmation_result() -> AnalysisResult:
    return AnalysisResult(
        type=FeedbackType.AFFIRMATION,
        suggestion_text=AFFIRMATION_MESSAGE,
        reasoning="No issues detected in tone, logical structure, or clarity.",
        confidence_score=AFFIRMATION_CONFIDENCE,
    )


class ResponseAnalyzer:
    def __init__(
        self,
        tone_analyzer: Optional[ContentAnalyzer] = None,
        fallacy_detector: Optional[ContentAnalyzer] = None,
        clarity_analyzer: Optional[ContentAnalyzer] = None,
        tolerate_analyzer_failures: bool = TOLERATE_ANALYZER_FAILURES,
    ):
        self.tone_analyzer = tone_analyzer or ToneAnalyzer()
        self.fallacy_detector = fallacy_detector or FallacyDetector()
        self.clarity_analyzer = clarity_analyzer or ClarityAnalyzer()
        self.tolerate_analyzer_failures = tolerate_analyzer_failures

    async def analyze_content(self, content: str) -> AnalysisResult:
        """The single best finding, or an affirmation when nothing was found."""
        findings = await self._run_analyzers(content)
        if not findings:
            return affirmation_result()
        return min(findings, key=AnalysisResult.sort_key)

    async def analyze_content_full(self, content: str) -> List[AnalysisResult]:
        """Every finding, best first, or [affirmation] when nothing was found."""
        findings = await self._run_analyzers(content)
        if not findings:
            return [affirmation_result()]
        return sorted(findings, key=AnalysisResult.sort_key)

    async def _run_analyzers(self, content: str) -> List[AnalysisResult]:
        analyzers = [self.tone_analyzer, self.fallacy_detector, self.clarity_analyzer]

        # gather waits for every analyzer even when one fails
        outcomes = await asyncio.gather(
            *(analyzer.analyze(content) for analyzer in analyzers),
            return_exceptions=True,
        )

        findings: List[AnalysisResult] = []
        for analyzer, outcome in zip(analyzers, outcomes):
            if isinstance(outcome, BaseException):
                name = type(analyzer).__name__
                if not isinstance(outcome, Exception):
                    raise outcome
                if not self.tolerate_analyzer_failures:
                    logger.error(f"{name} failed: {outcome}")
                    raise AnalysisFailedError(name, outcome) from outcome
                logger.warning(f"{name} failed; treating as no finding: {outcome}")
                continue
            if outcome is not None:
                findings.append(outcome)

        return findings
