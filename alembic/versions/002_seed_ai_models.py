"""seed default ai_models

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""
import uuid
from datetime import datetime, timezone
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Pricing in cents per 1M tokens
DEFAULT_MODELS = [
    ("gpt-4", "openai", "General-purpose reasoning model", 8192, 3000, 6000),
    ("claude-3-opus", "anthropic", "Long-context assistant model", 200000, 1500, 7500),
    ("gemini-2.0-flash", "google", "Fast multimodal model", 1048576, 10, 40),
]


def upgrade() -> None:
    ai_models = sa.table(
        "ai_models",
        sa.column("id", sa.String),
        sa.column("name", sa.String),
        sa.column("provider", sa.String),
        sa.column("description", sa.Text),
        sa.column("context_length", sa.Integer),
        sa.column("pricing_input", sa.Integer),
        sa.column("pricing_output", sa.Integer),
        sa.column("is_active", sa.Boolean),
        sa.column("created_at", sa.DateTime),
        sa.column("updated_at", sa.DateTime),
    )
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    op.bulk_insert(
        ai_models,
        [
            {
                "id": str(uuid.uuid4()),
                "name": name,
                "provider": provider,
                "description": description,
                "context_length": context_length,
                "pricing_input": pricing_input,
                "pricing_output": pricing_output,
                "is_active": True,
                "created_at": now,
                "updated_at": now,
            }
            for name, provider, description, context_length, pricing_input, pricing_output in DEFAULT_MODELS
        ],
    )


def downgrade() -> None:
    names = ", ".join(f"'{m[0]}'" for m in DEFAULT_MODELS)
    op.execute(f"DELETE FROM ai_models WHERE name IN ({names})")
