"""create users, otp_tokens and notes

Revision ID: 3f2a9c1d7b04
Revises:
Create Date: 2025-09-14 10:21:37.114508

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql as psql


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7b04'
down_revision: Union[str, Sequence[str], None] = None
branch_labels = None
depends_on = None

otp_purpose = psql.ENUM('SIGNUP', 'LOGIN', 'PASSWORD_RESET', name='otp_purpose', create_type=False)


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', psql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('password_hash', sa.Text(), nullable=True),
        sa.Column('google_id', sa.Text(), nullable=True),
        sa.Column('avatar', sa.Text(), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.text('now()'), nullable=True),
    )
    op.create_unique_constraint('uq_users_email', 'users', ['email'])
    op.create_unique_constraint('uq_users_google_id', 'users', ['google_id'])

    otp_purpose.create(op.get_bind(), checkfirst=True)
    op.create_table(
        'otp_tokens',
        sa.Column('id', psql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('purpose', otp_purpose, nullable=False),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('user_id', psql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('now()'), nullable=True),
    )
    # matches the verifier's lookup: email + purpose + code
    op.create_index(
        'ix_otp_tokens_email_purpose_code',
        'otp_tokens',
        ['email', 'purpose', 'code'],
        unique=False,
    )

    op.create_table(
        'notes',
        sa.Column('id', psql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('user_id', psql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.text('now()'), nullable=True),
    )
    op.create_index('ix_notes_user_id_updated_at', 'notes', ['user_id', 'updated_at'])


def downgrade():
    op.drop_index('ix_notes_user_id_updated_at', table_name='notes')
    op.drop_table('notes')
    op.drop_index('ix_otp_tokens_email_purpose_code', table_name='otp_tokens')
    op.drop_table('otp_tokens')
    otp_purpose.drop(op.get_bind(), checkfirst=True)
    op.drop_constraint('uq_users_google_id', 'users', type_='unique')
    op.drop_constraint('uq_users_email', 'users', type_='unique')
    op.drop_table('users')
