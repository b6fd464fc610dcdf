"""initial_schema

Revision ID: 3c9e1f0a7b42
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c9e1f0a7b42'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('chapters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('order_num', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_chapters_id', 'chapters', ['id'])

    op.create_table('question_types',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('name', sa.String(64), nullable=False),
        sa.Column('name_ja', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('reading_passages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('chapter_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['chapter_id'], ['chapters.id'])
    )
    op.create_index('ix_reading_passages_id', 'reading_passages', ['id'])
    op.create_index('ix_reading_passages_chapter_id', 'reading_passages', ['chapter_id'])

    op.create_table('questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('chapter_id', sa.Integer(), nullable=False),
        sa.Column('type_id', sa.Integer(), nullable=False),
        sa.Column('passage_id', sa.Integer(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('order_in_passage', sa.Integer(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['chapter_id'], ['chapters.id']),
        sa.ForeignKeyConstraint(['type_id'], ['question_types.id']),
        sa.ForeignKeyConstraint(['passage_id'], ['reading_passages.id'])
    )
    op.create_index('ix_questions_id', 'questions', ['id'])
    op.create_index('ix_questions_chapter_id', 'questions', ['chapter_id'])
    op.create_index('ix_questions_type_id', 'questions', ['type_id'])
    op.create_index('ix_questions_passage_id', 'questions', ['passage_id'])

    op.create_table('answers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['question_id'], ['questions.id'])
    )
    op.create_index('ix_answers_id', 'answers', ['id'])
    op.create_index('ix_answers_question_id', 'answers', ['question_id'])

    op.create_table('training_sessions',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('type_filter', sa.String(16), nullable=True),
        sa.Column('chapter_filter', sa.Text(), nullable=True),
        sa.Column('preset', sa.String(32), nullable=True),
        sa.Column('total_questions', sa.Integer(), nullable=False),
        sa.Column('current_index', sa.Integer(), nullable=False),
        sa.Column('completed', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_training_sessions_id', 'training_sessions', ['id'])

    op.create_table('session_questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(64), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False),
        sa.Column('shuffled_answer_order', sa.Text(), nullable=False),
        sa.Column('user_answer_id', sa.Integer(), nullable=True),
        sa.Column('is_correct', sa.Boolean(), nullable=True),
        sa.Column('answered_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['session_id'], ['training_sessions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['question_id'], ['questions.id']),
        sa.ForeignKeyConstraint(['user_answer_id'], ['answers.id']),
        sa.UniqueConstraint('session_id', 'display_order', name='uq_session_display_order')
    )
    op.create_index('ix_session_questions_id', 'session_questions', ['id'])
    op.create_index('ix_session_questions_session_id', 'session_questions', ['session_id'])
    op.create_index('ix_session_questions_question_id', 'session_questions', ['question_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_session_questions_question_id', table_name='session_questions')
    op.drop_index('ix_session_questions_session_id', table_name='session_questions')
    op.drop_index('ix_session_questions_id', table_name='session_questions')
    op.drop_table('session_questions')
    op.drop_index('ix_training_sessions_id', table_name='training_sessions')
    op.drop_table('training_sessions')
    op.drop_index('ix_answers_question_id', table_name='answers')
    op.drop_index('ix_answers_id', table_name='answers')
    op.drop_table('answers')
    op.drop_index('ix_questions_passage_id', table_name='questions')
    op.drop_index('ix_questions_type_id', table_name='questions')
    op.drop_index('ix_questions_chapter_id', table_name='questions')
    op.drop_index('ix_questions_id', table_name='questions')
    op.drop_table('questions')
    op.drop_index('ix_reading_passages_chapter_id', table_name='reading_passages')
    op.drop_index('ix_reading_passages_id', table_name='reading_passages')
    op.drop_table('reading_passages')
    op.drop_table('question_types')
    op.drop_index('ix_chapters_id', table_name='chapters')
    op.drop_table('chapters')
