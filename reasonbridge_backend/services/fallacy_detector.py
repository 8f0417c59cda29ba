"""
Logical Fallacy Detection

Identifies common fallacies in a response by phrase pattern:
- Ad hominem: attacking the person rather than the argument
- Strawman: responding to a misrepresented version of the argument
- False dichotomy: presenting only two options
- Slippery slope: cascading consequences without evidence
- Appeal to emotion: feelings in place of reasoning
- Hasty generalization: sweeping claims from limited examples
- Appeal to authority: citing authorities without specifics
"""

from collections import Counter
from typing import Dict, List, Optional, Tuple

from reasonbridge_backend.services.analysis_types import AnalysisResult, FeedbackType
from reasonbridge_backend.services.text_patterns import compile_patterns, first_match


FALLACY_PATTERNS = {
    "ad_hominem": compile_patterns([
        r"you('re| are)\s+(just|only)\s+(a|an)\s+\w+",
        r"coming\s+from\s+(someone|you)",
        r"(you|your)\s+(lack|don't\s+have)\s+(credentials|experience|expertise)",
        r"what\s+would\s+you\s+know",
    ]),
    "strawman": compile_patterns([
        r"so\s+you('re| are)\s+saying\s+(that\s+)?we\s+should",
        r"by\s+that\s+logic",
        r"if\s+we\s+follow\s+your\s+reasoning",
        r"you\s+think\s+that\s+all\s+\w+\s+are",
    ]),
    "false_dichotomy": compile_patterns([
        r"either\s+\w+\s+or\s+\w+",
        r"you('re| are)\s+(either|with\s+us\s+or\s+against\s+us)",
        r"only\s+two\s+(options|choices)",
        r"if\s+you\s+don't\s+\w+,?\s+then\s+you\s+must",
    ]),
    "slippery_slope": compile_patterns([
        r"if\s+we\s+allow\s+\w+,?\s+(then\s+)?next\s+thing",
        r"this\s+will\s+lead\s+to",
        r"where\s+does\s+it\s+(end|stop)",
        r"it's\s+a\s+slippery\s+slope",
    ]),
    "appeal_to_emotion": compile_patterns([
        r"think\s+of\s+the\s+children",
        r"how\s+would\s+you\s+feel\s+if",
        r"imagine\s+if\s+it\s+was\s+your",
        r"this\s+makes\s+me\s+(so\s+)?(angry|sad|upset)",
    ]),
    "hasty_generalization": compile_patterns([
        r"all\s+\w+\s+are\s+(always|never)",
        r"every(one)?\s+knows\s+that",
        r"(no\s+one|nobody)\s+thinks\s+that",
        r"\w+\s+always\s+(does|says|thinks)",
    ]),
    "appeal_to_authority": compile_patterns([
        r"experts\s+agree",
        r"studies\s+show",
        r"science\s+says",
        r"\w+\s+said\s+(so|it)",
    ]),
}

FALLACY_INFO: Dict[str, Dict] = {
    "ad_hominem": {
        "name": "Ad Hominem (attacking the person)",
        "suggestion": (
            "Focus on addressing the argument itself rather than attacking the person making it. "
            "What specific claims can you refute?"
        ),
        "links": [
            ("Ad Hominem Fallacy", "https://en.wikipedia.org/wiki/Ad_hominem"),
            ("Arguing Against the Person", "https://yourlogicalfallacyis.com/ad-hominem"),
        ],
    },
    "strawman": {
        "name": "Strawman (misrepresenting the argument)",
        "suggestion": (
            "Ensure you're responding to the actual argument being made, not a misrepresented version. "
            "Can you quote their exact position?"
        ),
        "links": [
            ("Straw Man Fallacy", "https://en.wikipedia.org/wiki/Straw_man"),
            ("Misrepresenting Arguments", "https://yourlogicalfallacyis.com/strawman"),
        ],
    },
    "false_dichotomy": {
        "name": "False Dichotomy (presenting only two options)",
        "suggestion": (
            "Consider whether there are more than two options available. "
            "Are there middle-ground positions or alternative approaches?"
        ),
        "links": [
            ("False Dilemma", "https://en.wikipedia.org/wiki/False_dilemma"),
            ("Black or White Thinking", "https://yourlogicalfallacyis.com/black-or-white"),
        ],
    },
    "slippery_slope": {
        "name": "Slippery Slope (claiming cascading consequences without evidence)",
        "suggestion": (
            "Provide evidence for each step in the causal chain. "
            "What specific mechanisms would lead to the predicted outcome?"
        ),
        "links": [
            ("Slippery Slope Fallacy", "https://en.wikipedia.org/wiki/Slippery_slope"),
            ("Understanding Slippery Slopes", "https://yourlogicalfallacyis.com/slippery-slope"),
        ],
    },
    "appeal_to_emotion": {
        "name": "Appeal to Emotion (using feelings instead of logic)",
        "suggestion": (
            "While emotions are valid, consider supporting your point with factual reasoning. "
            "What objective evidence supports this position?"
        ),
        "links": [
            ("Appeal to Emotion", "https://en.wikipedia.org/wiki/Appeal_to_emotion"),
            ("Emotional Reasoning", "https://yourlogicalfallacyis.com/appeal-to-emotion"),
        ],
    },
    "hasty_generalization": {
        "name": "Hasty Generalization (overgeneralizing from limited examples)",
        "suggestion": (
            "Avoid sweeping generalizations. Can you provide specific examples or acknowledge exceptions?"
        ),
        "links": [
            ("Hasty Generalization", "https://en.wikipedia.org/wiki/Hasty_generalization"),
            ("Overgeneralization", "https://yourlogicalfallacyis.com/composition-division"),
        ],
    },
    "appeal_to_authority": {
        "name": "Appeal to Authority (citing sources without specifics)",
        "suggestion": (
            "When citing authorities, provide specific sources and be open to counter-evidence. "
            "Which studies or experts specifically?"
        ),
        "links": [
            ("Appeal to Authority", "https://en.wikipedia.org/wiki/Argument_from_authority"),
            ("When Authorities Aren't Enough", "https://yourlogicalfallacyis.com/appeal-to-authority"),
        ],
    },
}


class FallacyDetector:
    """Flags logical fallacies as FALLACY feedback, subtype = most frequent fallacy"""

    async def analyze(self, content: str) -> Optional[AnalysisResult]:
        detected: List[Tuple[str, str]] = []

        for fallacy_type, patterns in FALLACY_PATTERNS.items():
            for pattern in patterns:
                match = first_match(pattern, content)
                if match:
                    detected.append((fallacy_type, match))

        if not detected:
            return None

        primary = self._most_common_fallacy(detected)

        return AnalysisResult(
            type=FeedbackType.FALLACY,
            subtype=primary,
            suggestion_text=get_fallacy_info(primary)["suggestion"],
            reasoning=self._create_reasoning(primary, detected),
            confidence_score=min(0.92, 0.7 + len(detected) * 0.08),
            educational_resources=get_educational_resources(primary),
        )

    @staticmethod
    def _most_common_fallacy(detected: List[Tuple[str, str]]) -> str:
        # Counter.most_common keeps first-seen order among ties
        counts = Counter(fallacy_type for fallacy_type, _ in detected)
        return counts.most_common(1)[0][0]

    @staticmethod
    def _create_reasoning(primary: str, detected: List[Tuple[str, str]]) -> str:
        name = get_fallacy_info(primary)["name"]
        count = sum(1 for fallacy_type, _ in detected if fallacy_type == primary)
        return (
            f"Detected {count} instance(s) of {name}. Logical fallacies can weaken your argument "
            "even when your underlying point may be valid. Consider restructuring your reasoning "
            "to strengthen your position."
        )


def get_fallacy_info(fallacy_type: str) -> Dict:
    """Display metadata for a fallacy type, with a generic fallback"""
    return FALLACY_INFO.get(fallacy_type, {
        "name": fallacy_type.replace("_", " ").title(),
        "suggestion": "Consider strengthening your logical reasoning.",
        "links": [("Logical Fallacies", "https://en.wikipedia.org/wiki/List_of_fallacies")],
    })


def get_educational_resources(fallacy_type: str) -> Dict:
    links = get_fallacy_info(fallacy_type)["links"]
    return {"links": [{"title": title, "url": url} for title, url in links]}
