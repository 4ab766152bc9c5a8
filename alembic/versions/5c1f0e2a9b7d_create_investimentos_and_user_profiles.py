"""create investimentos and user_profiles

Revision ID: 5c1f0e2a9b7d
Revises:
Create Date: 2025-09-02 19:21:47.105532

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5c1f0e2a9b7d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema: create user_profiles and investimentos."""
    op.create_table(
        'user_profiles',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('cpf', sa.String(length=11), nullable=False),
        sa.Column('dados', postgresql.JSONB(), nullable=True),
        sa.Column('criado_em', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('alterado_em', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        schema='public',
    )
    op.create_index('ix_user_profiles_cpf', 'user_profiles', ['cpf'], unique=True, schema='public')

    op.create_table(
        'investimentos',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('public.user_profiles.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('user_cpf', sa.String(length=11), nullable=False),
        sa.Column('tipo', sa.String(length=50), nullable=False),
        sa.Column('codigo', sa.String(length=20), nullable=False),
        sa.Column('valor', sa.Numeric(12, 2), nullable=False),
        sa.Column('operacao', sa.String(length=20), nullable=False),
        sa.Column('criado_em', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('alterado_em', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        schema='public',
    )


def downgrade() -> None:
    """Downgrade schema: drop investimentos and user_profiles."""
    op.drop_table('investimentos', schema='public')
    op.drop_index('ix_user_profiles_cpf', table_name='user_profiles', schema='public')
    op.drop_table('user_profiles', schema='public')
