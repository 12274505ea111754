"""005: create offers table

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE offers (
            id                      VARCHAR(36)     PRIMARY KEY,
            listing_id              VARCHAR(36)     NOT NULL REFERENCES listings (id),
            bidder_id               UUID            NOT NULL REFERENCES users (id),
            vendor_id               VARCHAR(36)     REFERENCES vendors (id),
            amount                  BIGINT          NOT NULL,
            message                 TEXT,
            status                  VARCHAR(20)     NOT NULL DEFAULT 'pending',
            commission_amount       BIGINT          NOT NULL,
            commission_rate_bps     INT             NOT NULL,
            commission_paid         BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_offers_amount         CHECK (amount > 0),
            CONSTRAINT ck_offers_commission     CHECK (commission_amount >= 0),
            CONSTRAINT ck_offers_status         CHECK (
                status IN ('pending', 'accepted', 'rejected', 'expired')
            ),
            CONSTRAINT ck_offers_paid_accepted  CHECK (NOT commission_paid OR status = 'accepted')
        );
    """)
    # One open (pending/accepted) offer per bidder per listing
    op.execute("""
        CREATE UNIQUE INDEX uq_offers_open_per_bidder
        ON offers (listing_id, bidder_id)
        WHERE status IN ('pending', 'accepted');
    """)
    op.execute("CREATE INDEX idx_offers_listing_created ON offers (listing_id, created_at DESC);")
    op.execute("CREATE INDEX idx_offers_bidder_created ON offers (bidder_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_offers_updated_at
            BEFORE UPDATE ON offers
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS offers CASCADE;")
