"""Create the contacts table.

Revision ID: 001_contacts
Revises:
Create Date: 2026-10-16

contacts holds local contact records, their structured mailing address, the
external id joining them to remote users, and the last successful push time.
external_id is indexed but not unique; the pull upsert keeps it unique for
non-null values.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_contacts"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "contacts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("external_id", sa.String(64), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("first_name", sa.String(200), nullable=True),
        sa.Column("last_name", sa.String(200), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("mailing_street", sa.String(300), nullable=True),
        sa.Column("mailing_city", sa.String(100), nullable=True),
        sa.Column("mailing_state", sa.String(100), nullable=True),
        sa.Column("mailing_postal_code", sa.String(32), nullable=True),
        sa.Column("mailing_country", sa.String(100), nullable=True),
        sa.Column("last_synced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_contacts_external_id", "contacts", ["external_id"])


def downgrade() -> None:
    op.drop_index("ix_contacts_external_id", table_name="contacts")
    op.drop_table("contacts")
