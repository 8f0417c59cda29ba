"""
Value types shared by the analyzers, the feedback caches and the feedback service.

Everything here is immutable: a cached analysis is a value, and updating one
means writing a whole new value under the same key.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class FeedbackType(str, Enum):
    FALLACY = "FALLACY"
    INFLAMMATORY = "INFLAMMATORY"
    UNSOURCED = "UNSOURCED"
    BIAS = "BIAS"
    AFFIRMATION = "AFFIRMATION"


# Tie-break table for findings with equal confidence (higher wins)
FEEDBACK_TYPE_PRIORITY: Dict[FeedbackType, int] = {
    FeedbackType.FALLACY: 4,
    FeedbackType.INFLAMMATORY: 3,
    FeedbackType.UNSOURCED: 2,
    FeedbackType.BIAS: 1,
    FeedbackType.AFFIRMATION: 0,
}


class Stance(str, Enum):
    SUPPORT = "SUPPORT"
    OPPOSE = "OPPOSE"
    NUANCED = "NUANCED"


class FeedbackSensitivity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# Minimum confidence for feedback to be shown at each sensitivity
SENSITIVITY_THRESHOLDS: Dict[FeedbackSensitivity, float] = {
    FeedbackSensitivity.LOW: 0.5,
    FeedbackSensitivity.MEDIUM: 0.7,
    FeedbackSensitivity.HIGH: 0.85,
}


class HelpfulRating(str, Enum):
    HELPFUL = "HELPFUL"
    SOMEWHAT_HELPFUL = "SOMEWHAT_HELPFUL"
    NOT_HELPFUL = "NOT_HELPFUL"


# Score used when averaging user ratings in feedback analytics
HELPFUL_RATING_SCORES: Dict[HelpfulRating, float] = {
    HelpfulRating.HELPFUL: 1.0,
    HelpfulRating.SOMEWHAT_HELPFUL: 0.5,
    HelpfulRating.NOT_HELPFUL: 0.0,
}


@dataclass(frozen=True)
class AnalysisResult:
    """Output of a single content analyzer"""
    type: FeedbackType
    suggestion_text: str
    reasoning: str
    confidence_score: float
    subtype: Optional[str] = None
    educational_resources: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "subtype": self.subtype,
            "suggestion_text": self.suggestion_text,
            "reasoning": self.reasoning,
            "confidence_score": self.confidence_score,
            "educational_resources": self.educational_resources,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        """Build from a to_dict() payload. Raises KeyError/ValueError on malformed input."""
        return cls(
            type=FeedbackType(data["type"]),
            subtype=data.get("subtype"),
            suggestion_text=data["suggestion_text"],
            reasoning=data["reasoning"],
            confidence_score=float(data["confidence_score"]),
            educational_resources=data.get("educational_resources"),
        )

    def sort_key(self):
        """Ascending sort puts the preferred finding first."""
        return (-self.confidence_score, -FEEDBACK_TYPE_PRIORITY[self.type])


@dataclass(frozen=True)
class CachedAnalysisResult:
    """An AnalysisResult as stored in the exact-match cache"""
    result: AnalysisResult
    cached_at: str

    def to_dict(self) -> Dict[str, Any]:
        payload = self.result.to_dict()
        payload["cached_at"] = self.cached_at
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedAnalysisResult":
        return cls(result=AnalysisResult.from_dict(data), cached_at=str(data["cached_at"]))

    @classmethod
    def stamp(cls, result: AnalysisResult) -> "CachedAnalysisResult":
        return cls(result=result, cached_at=datetime.now(timezone.utc).isoformat())


@dataclass(frozen=True)
class FeedbackMetadata:
    """Flat payload stored next to each embedding in the vector store"""
    content_hash: str
    feedback_type: str
    suggestion_text: str
    reasoning: str
    confidence_score: float
    created_at: str
    subtype: Optional[str] = None
    topic_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        # Field names are shared with the other ReasonBridge services
        return {
            "contentHash": self.content_hash,
            "feedbackType": self.feedback_type,
            "subtype": self.subtype,
            "suggestionText": self.suggestion_text,
            "reasoning": self.reasoning,
            "confidenceScore": self.confidence_score,
            "topicId": self.topic_id,
            "createdAt": self.created_at,
        }

    @classmethod
    def for_result(
        cls,
        content_hash: str,
        result: AnalysisResult,
        topic_id: Optional[str] = None,
    ) -> "FeedbackMetadata":
        return cls(
            content_hash=content_hash,
            feedback_type=result.type.value,
            subtype=result.subtype,
            suggestion_text=result.suggestion_text,
            reasoning=result.reasoning,
            confidence_score=result.confidence_score,
            topic_id=topic_id,
            created_at=datetime.now(timezone.utc).isoformat(),
        )


@dataclass(frozen=True)
class SimilarityHit:
    result: AnalysisResult
    similarity: float


@dataclass(frozen=True)
class CacheLookupResult:
    """Diagnostic outcome of a cache lookup that never runs analysis"""
    hit: bool
    source: str  # 'redis', 'qdrant' or 'none'
    result: Optional[AnalysisResult] = None
    similarity: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"hit": self.hit, "source": self.source}
        if self.result is not None:
            payload["result"] = self.result.to_dict()
        if self.similarity is not None:
            payload["similarity"] = self.similarity
        return payload


@dataclass(frozen=True)
class PropositionAggregates:
    support_count: int
    oppose_count: int
    nuanced_count: int
    consensus_score: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StanceCounts:
    support: int = 0
    oppose: int = 0
    nuanced: int = 0
    unknown: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.support + self.oppose + self.nuanced
