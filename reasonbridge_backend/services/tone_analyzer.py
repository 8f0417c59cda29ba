"""
Tone analysis: detects personal attacks, hostile tone and aggressive language.
"""

import re
from typing import List, Optional, Tuple

from reasonbridge_backend.services.analysis_types import AnalysisResult, FeedbackType
from reasonbridge_backend.services.text_patterns import compile_patterns, first_match, quote_examples


INFLAMMATORY_PATTERNS = compile_patterns([
    # Personal attacks - direct (you)
    r"you('re| are)\s+(stupid|dumb|idiot|moron|fool|ignorant|ridiculous)",
    r"shut\s+up",
    r"get\s+lost",

    # Personal attacks - third person, with an optional intensifier
    r"\b(they|these\s+people|those\s+people|those\s+folks|people\s+like\s+(you|this|that))\s+(are|'re)\s+"
    r"(really|very|so|completely|totally|absolutely)?\s*(stupid|dumb|idiots?|morons?|fools?|ignorant|ridiculous)",
    r"\b(this|that|these|those)\s+(is|are)\s+(really|very|so|completely|totally|absolutely)?\s*"
    r"(stupid|dumb|idiotic|moronic|foolish|ignorant|ridiculous)",

    # Aggressive language
    r"\b(hate|despise)\s+(you|your|them|this|these)",
    r"you\s+make\s+me\s+(sick|angry)",
    r"\b(makes?|making)\s+me\s+(sick|angry)",

    # Dismissive attacks
    r"\b(typical|classic)\s+(liberal|conservative|leftist|right-wing)",
    r"wake\s+up\s+sheeple",
    r"\b(everyone|anyone)\s+who\s+(thinks?|believes?|says?)\s+(this|that)\s+is\s+(stupid|dumb|an?\s+idiot)",

    # Profanity aimed at someone
    r"f\*+ck\s+(you|off|this|that|them)",
    r"\bb[s$]+t\b",
]) + [
    # Shouting: three or more all-caps words in a row (case-sensitive)
    re.compile(r"\b[A-Z]{4,}\s+[A-Z]{4,}\s+[A-Z]{4,}"),
]

HOSTILE_TONE_PATTERNS = compile_patterns([
    r"obviously\s+(you|they)\s+(don't|can't|won't)",
    r"clearly\s+you\s+(don't|can't|haven't)",
    r"anyone\s+with\s+half\s+a\s+brain",
    r"it's\s+obvious\s+that\s+you",
])

SUGGESTIONS = {
    "personal_attack": (
        "Consider rephrasing to focus on ideas rather than personal characteristics. "
        "Attack the argument, not the person."
    ),
    "hostile_tone": (
        "Your message may come across as hostile. Consider using more neutral language "
        "to foster constructive dialogue."
    ),
    "personal_attack_with_hostile_tone": (
        "This response contains personal attacks and hostile language. Reframe your points "
        "to focus on the topic at hand with respectful language."
    ),
}

EDUCATIONAL_RESOURCES = {
    "links": [
        {
            "title": "Constructive Communication Guide",
            "url": "https://en.wikipedia.org/wiki/Nonviolent_Communication",
        },
        {
            "title": "Avoiding Personal Attacks in Discussions",
            "url": "https://en.wikipedia.org/wiki/Ad_hominem",
        },
    ]
}


class ToneAnalyzer:
    """Flags inflammatory language as INFLAMMATORY feedback"""

    async def analyze(self, content: str) -> Optional[AnalysisResult]:
        # One issue per matching pattern, recording its first match
        issues: List[Tuple[str, str]] = []

        for pattern in INFLAMMATORY_PATTERNS:
            match = first_match(pattern, content)
            if match:
                issues.append(("inflammatory", match))

        for pattern in HOSTILE_TONE_PATTERNS:
            match = first_match(pattern, content)
            if match:
                issues.append(("hostile_tone", match))

        if not issues:
            return None

        subtype = self._determine_subtype(issues)

        return AnalysisResult(
            type=FeedbackType.INFLAMMATORY,
            subtype=subtype,
            suggestion_text=SUGGESTIONS[subtype],
            reasoning=self._create_reasoning(issues),
            confidence_score=min(0.95, 0.65 + len(issues) * 0.1),
            educational_resources=EDUCATIONAL_RESOURCES,
        )

    @staticmethod
    def _determine_subtype(issues: List[Tuple[str, str]]) -> str:
        kinds = {kind for kind, _ in issues}
        if kinds == {"inflammatory", "hostile_tone"}:
            return "personal_attack_with_hostile_tone"
        if "inflammatory" in kinds:
            return "personal_attack"
        return "hostile_tone"

    @staticmethod
    def _create_reasoning(issues: List[Tuple[str, str]]) -> str:
        examples = quote_examples(match for _, match in issues)
        return (
            f"Detected {len(issues)} instance(s) of potentially inflammatory language (e.g., {examples}). "
            "While passion is valuable, personal attacks or hostile tone can shut down productive "
            "dialogue and violate community standards."
        )
