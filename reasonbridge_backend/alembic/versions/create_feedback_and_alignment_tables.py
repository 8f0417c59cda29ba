"""Create proposition, alignment, response and feedback tables

Revision ID: create_feedback_alignment
Revises:
Create Date: 2026-09-02 10:00:00.000000
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'create_feedback_alignment'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if 'propositions' not in existing_tables:
        op.create_table(
            'propositions',
            sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
            sa.Column('topic_id', postgresql.UUID(as_uuid=True), nullable=False),
            sa.Column('statement', sa.Text, nullable=False),
            sa.Column('support_count', sa.Integer, nullable=False, server_default='0'),
            sa.Column('oppose_count', sa.Integer, nullable=False, server_default='0'),
            sa.Column('nuanced_count', sa.Integer, nullable=False, server_default='0'),
            sa.Column('consensus_score', sa.Numeric(3, 2)),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
            sa.CheckConstraint(
                "support_count >= 0 AND oppose_count >= 0 AND nuanced_count >= 0",
                name='non_negative_alignment_counts',
            ),
            sa.CheckConstraint(
                "consensus_score IS NULL OR (consensus_score >= 0 AND consensus_score <= 1)",
                name='valid_consensus_score',
            ),
        )
        op.create_index('idx_propositions_topic', 'propositions', ['topic_id'])

    if 'alignments' not in existing_tables:
        op.create_table(
            'alignments',
            sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
            sa.Column('user_id', sa.Text, nullable=False),
            sa.Column('proposition_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('propositions.id', ondelete='CASCADE'), nullable=False),
            sa.Column('stance', sa.Text, nullable=False),
            sa.Column('nuance_explanation', sa.Text),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
            sa.CheckConstraint("stance IN ('SUPPORT', 'OPPOSE', 'NUANCED')", name='valid_stance'),
            sa.UniqueConstraint('user_id', 'proposition_id', name='uq_alignment_user_proposition'),
        )
        op.create_index('idx_alignments_proposition', 'alignments', ['proposition_id'])

    if 'responses' not in existing_tables:
        op.create_table(
            'responses',
            sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
            sa.Column('topic_id', postgresql.UUID(as_uuid=True), nullable=False),
            sa.Column('author_id', sa.Text, nullable=False),
            sa.Column('content', sa.Text, nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        )
        op.create_index('idx_responses_topic', 'responses', ['topic_id'])

    if 'feedback' not in existing_tables:
        op.create_table(
            'feedback',
            sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
            sa.Column('response_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('responses.id', ondelete='CASCADE'), nullable=False),
            sa.Column('type', sa.Text, nullable=False),
            sa.Column('subtype', sa.Text),
            sa.Column('suggestion_text', sa.Text, nullable=False),
            sa.Column('reasoning', sa.Text, nullable=False),
            sa.Column('confidence_score', sa.Float, nullable=False),
            sa.Column('educational_resources', postgresql.JSONB),
            sa.Column('displayed_to_user', sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column('user_acknowledged', sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column('user_revised', sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column('user_helpful_rating', sa.Text),
            sa.Column('dismissed_at', sa.DateTime(timezone=True)),
            sa.Column('dismissal_reason', sa.Text),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.CheckConstraint(
                "type IN ('FALLACY', 'INFLAMMATORY', 'UNSOURCED', 'BIAS', 'AFFIRMATION')",
                name='valid_feedback_type',
            ),
            sa.CheckConstraint(
                "confidence_score >= 0 AND confidence_score <= 1",
                name='valid_feedback_confidence',
            ),
            sa.CheckConstraint(
                "user_helpful_rating IS NULL OR user_helpful_rating IN ('HELPFUL', 'SOMEWHAT_HELPFUL', 'NOT_HELPFUL')",
                name='valid_feedback_helpful_rating',
            ),
        )
        op.create_index('idx_feedback_response', 'feedback', ['response_id'])
        op.create_index('idx_feedback_created_at', 'feedback', ['created_at'])


def downgrade():
    op.drop_table('feedback')
    op.drop_table('responses')
    op.drop_table('alignments')
    op.drop_table('propositions')
