"""003: create vendors table

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE vendors (
            id                      VARCHAR(36)     PRIMARY KEY,
            user_id                 UUID            NOT NULL REFERENCES users (id),
            business_name           VARCHAR(200)    NOT NULL,
            business_type           VARCHAR(50),
            address                 TEXT,
            phone                   VARCHAR(32),
            website                 VARCHAR(500),
            description             TEXT,
            commission_rate_bps     INT             NOT NULL DEFAULT 300,
            total_leads             INT             NOT NULL DEFAULT 0,
            total_commission_paid   BIGINT          NOT NULL DEFAULT 0,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_vendors_user_id           UNIQUE (user_id),
            CONSTRAINT ck_vendors_commission_rate   CHECK (commission_rate_bps BETWEEN 100 AND 500),
            CONSTRAINT ck_vendors_total_leads       CHECK (total_leads >= 0),
            CONSTRAINT ck_vendors_total_commission  CHECK (total_commission_paid >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_vendors_updated_at
            BEFORE UPDATE ON vendors
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS vendors CASCADE;")
