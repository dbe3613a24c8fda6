"""initial schema - visitas, followups, app_state

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

For databases created by create_tables(): run `alembic stamp 001_initial`.
For NEW databases: run `alembic upgrade head`.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "visitas",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("data", sa.Date(), nullable=False),
        sa.Column("endereco", sa.String(500), nullable=False),
        sa.Column("lat", sa.Float()),
        sa.Column("lng", sa.Float()),
        sa.Column("empresa", sa.String(255), nullable=False),
        sa.Column("segmento", sa.String(50), nullable=False),
        sa.Column("responsavel", sa.String(50), nullable=False),
        sa.Column("estagio", sa.String(50), nullable=False),
        sa.Column("concorrencia", sa.String(255)),
        sa.Column("classificacao", sa.String(20), nullable=False),
        sa.Column("contato", sa.String(255)),
        sa.Column("obs", sa.Text()),
        sa.Column("fotos", sa.JSON()),
        sa.Column("vendedor", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
    )
    op.create_index("ix_visitas_data", "visitas", ["data"])
    op.create_index("ix_visitas_vendedor", "visitas", ["vendedor"])

    op.create_table(
        "followups",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "visita_id",
            sa.Integer(),
            sa.ForeignKey("visitas.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("data", sa.Date(), nullable=False),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("valor", sa.Numeric(12, 2)),
        sa.Column("motivo_perda", sa.String(50)),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
    )
    op.create_index("ix_followups_visita", "followups", ["visita_id"])
    op.create_index("ix_followups_visita_data", "followups", ["visita_id", "data"])

    op.create_table(
        "app_state",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime()),
    )
    op.create_index("ix_app_state_key", "app_state", ["key"], unique=True)


def downgrade() -> None:
    """Drop all tables. DESTRUCTIVE — dev/test environments only."""
    op.drop_index("ix_app_state_key", table_name="app_state")
    op.drop_table("app_state")
    op.drop_index("ix_followups_visita_data", table_name="followups")
    op.drop_index("ix_followups_visita", table_name="followups")
    op.drop_table("followups")
    op.drop_index("ix_visitas_vendedor", table_name="visitas")
    op.drop_index("ix_visitas_data", table_name="visitas")
    op.drop_table("visitas")
