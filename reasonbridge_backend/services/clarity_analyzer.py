"""
Clarity analysis: unsourced factual claims and loaded, one-sided framing.

Unsourced claims outrank bias indicators; a response gets at most one finding.
"""

from typing import List, Optional

from reasonbridge_backend.services.analysis_types import AnalysisResult, FeedbackType
from reasonbridge_backend.services.text_patterns import compile_patterns, find_all, quote_examples


UNSOURCED_CLAIM_PATTERNS = compile_patterns([
    r"studies\s+show\s+that",
    r"research\s+(shows|proves|demonstrates)",
    r"scientists\s+(say|believe|found)",
    r"it('s| is)\s+(proven|a\s+fact)\s+that",
    r"\d+%\s+of\s+(people|users|respondents)",
    r"according\s+to\s+(experts|studies|research)",
    r"the\s+data\s+shows",
])

# Second-hand attribution; treated as unsourced
VAGUE_ATTRIBUTION_PATTERNS = compile_patterns([
    r"some\s+people\s+say",
    r"I\s+heard\s+that",
    r"they\s+say\s+that",
    r"word\s+on\s+the\s+street",
    r"rumor\s+has\s+it",
])

BIAS_PATTERNS = compile_patterns([
    # Loaded language
    r"(obviously|clearly|undeniably)\s+\w+\s+(is|are)",
    r"any\s+reasonable\s+person\s+(would|knows)",
    r"it's\s+common\s+sense\s+that",

    # One-sided framing
    r"only\s+\w+\s+would\s+(think|believe|say)",
    r"of\s+course\s+\w+\s+(is|are|would)",

    # Emotionally charged descriptors
    r"\b(radical|extremist|fanatic)\s+\w+",
    r"\b(crazy|insane|lunatic)\s+\w+",
])


class ClarityAnalyzer:
    async def analyze(self, content: str) -> Optional[AnalysisResult]:
        unsourced = self._collect(UNSOURCED_CLAIM_PATTERNS + VAGUE_ATTRIBUTION_PATTERNS, content)
        if unsourced:
            return self._unsourced_feedback(unsourced)

        bias = self._collect(BIAS_PATTERNS, content)
        if bias:
            return self._bias_feedback(bias)

        return None

    @staticmethod
    def _collect(patterns, content: str) -> List[str]:
        # Every occurrence counts, not just one per pattern
        matches: List[str] = []
        for pattern in patterns:
            matches.extend(find_all(pattern, content))
        return matches

    @staticmethod
    def _unsourced_feedback(matches: List[str]) -> AnalysisResult:
        return AnalysisResult(
            type=FeedbackType.UNSOURCED,
            suggestion_text=(
                "Consider providing specific sources for factual claims. Include links, citations, "
                "or specific study names to strengthen your argument."
            ),
            reasoning=(
                f"Detected {len(matches)} instance(s) of potentially unsourced claims "
                f"(e.g., {quote_examples(matches)}). While these may be based on real research, "
                "providing specific sources helps others verify and engage with your evidence more effectively."
            ),
            confidence_score=min(0.88, 0.65 + len(matches) * 0.08),
            educational_resources={
                "links": [
                    {"title": "How to Cite Sources", "url": "https://en.wikipedia.org/wiki/Citation"},
                    {"title": "Evaluating Information Sources", "url": "https://en.wikipedia.org/wiki/Source_criticism"},
                ]
            },
        )

    @staticmethod
    def _bias_feedback(matches: List[str]) -> AnalysisResult:
        return AnalysisResult(
            type=FeedbackType.BIAS,
            subtype="loaded_language",
            suggestion_text=(
                "Consider using more neutral language to present your argument. Avoid loaded terms "
                "and acknowledge alternative perspectives where relevant."
            ),
            reasoning=(
                f"Detected {len(matches)} instance(s) of potentially biased framing "
                f"(e.g., {quote_examples(matches)}). Using loaded language or one-sided framing may make "
                "your argument less persuasive to those who don't already agree with you."
            ),
            confidence_score=min(0.85, 0.6 + len(matches) * 0.08),
            educational_resources={
                "links": [
                    {"title": "Neutral Point of View", "url": "https://en.wikipedia.org/wiki/Wikipedia:Neutral_point_of_view"},
                    {"title": "Loaded Language", "url": "https://en.wikipedia.org/wiki/Loaded_language"},
                ]
            },
        )
