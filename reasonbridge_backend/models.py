"""
SQLAlchemy models for the ReasonBridge feedback and alignment records.

Propositions carry denormalized alignment aggregates; Alignment rows remain
the source of truth and can always be re-aggregated.
"""

from sqlalchemy import (
    Column, Text, Float, Integer, Boolean, DateTime, Numeric,
    ForeignKey, Index, CheckConstraint, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
import uuid

Base = declarative_base()


class Proposition(Base):
    """A statement participants align with, plus its cached stance aggregates"""
    __tablename__ = "propositions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    topic_id = Column(UUID(as_uuid=True), nullable=False)
    statement = Column(Text, nullable=False)

    # Aggregates, written only by AlignmentAggregationService
    support_count = Column(Integer, nullable=False, default=0)
    oppose_count = Column(Integer, nullable=False, default=0)
    nuanced_count = Column(Integer, nullable=False, default=0)
    consensus_score = Column(Numeric(3, 2))  # NULL when there are no alignments

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "support_count >= 0 AND oppose_count >= 0 AND nuanced_count >= 0",
            name='non_negative_alignment_counts'
        ),
        CheckConstraint(
            "consensus_score IS NULL OR (consensus_score >= 0 AND consensus_score <= 1)",
            name='valid_consensus_score'
        ),
        Index('idx_propositions_topic', 'topic_id'),
    )


class Alignment(Base):
    """One user's stance on one proposition"""
    __tablename__ = "alignments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False)
    proposition_id = Column(UUID(as_uuid=True), ForeignKey('propositions.id', ondelete='CASCADE'), nullable=False)
    stance = Column(Text, nullable=False)  # 'SUPPORT', 'OPPOSE', 'NUANCED'
    nuance_explanation = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "stance IN ('SUPPORT', 'OPPOSE', 'NUANCED')",
            name='valid_stance'
        ),
        UniqueConstraint('user_id', 'proposition_id', name='uq_alignment_user_proposition'),
        Index('idx_alignments_proposition', 'proposition_id'),
    )


class Response(Base):
    """A discussion response; owned by the discussion service, read here"""
    __tablename__ = "responses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    topic_id = Column(UUID(as_uuid=True), nullable=False)
    author_id = Column(Text, nullable=False)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_responses_topic', 'topic_id'),
    )


class Feedback(Base):
    """Automated feedback attached to a response"""
    __tablename__ = "feedback"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    response_id = Column(UUID(as_uuid=True), ForeignKey('responses.id', ondelete='CASCADE'), nullable=False)

    type = Column(Text, nullable=False)  # FeedbackType value
    subtype = Column(Text)
    suggestion_text = Column(Text, nullable=False)
    reasoning = Column(Text, nullable=False)
    confidence_score = Column(Float, nullable=False)
    educational_resources = Column(JSONB)

    # User interaction
    displayed_to_user = Column(Boolean, nullable=False, default=False)
    user_acknowledged = Column(Boolean, nullable=False, default=False)
    user_revised = Column(Boolean, nullable=False, default=False)
    user_helpful_rating = Column(Text)  # HelpfulRating value
    dismissed_at = Column(DateTime(timezone=True))
    dismissal_reason = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "type IN ('FALLACY', 'INFLAMMATORY', 'UNSOURCED', 'BIAS', 'AFFIRMATION')",
            name='valid_feedback_type'
        ),
        CheckConstraint(
            "confidence_score >= 0 AND confidence_score <= 1",
            name='valid_feedback_confidence'
        ),
        CheckConstraint(
            "user_helpful_rating IS NULL OR user_helpful_rating IN ('HELPFUL', 'SOMEWHAT_HELPFUL', 'NOT_HELPFUL')",
            name='valid_feedback_helpful_rating'
        ),
        Index('idx_feedback_response', 'response_id'),
        Index('idx_feedback_created_at', 'created_at'),
    )
