"""004: create listings table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            id                      VARCHAR(36)     PRIMARY KEY,
            seller_id               UUID            NOT NULL REFERENCES users (id),
            card_name               VARCHAR(200)    NOT NULL,
            set_name                VARCHAR(200)    NOT NULL,
            year                    SMALLINT        NOT NULL,
            condition               VARCHAR(20)     NOT NULL,
            rarity                  VARCHAR(20)     NOT NULL,
            is_graded               BOOLEAN         NOT NULL DEFAULT FALSE,
            grade                   SMALLINT,
            grading_company         VARCHAR(20),
            description             TEXT,
            front_image             TEXT            NOT NULL,
            back_image              TEXT,
            sale_mode               VARCHAR(20)     NOT NULL,
            starting_price          BIGINT,
            min_price               BIGINT,
            auction_end_time        TIMESTAMPTZ,
            auction_duration_hours  SMALLINT,
            status                  VARCHAR(20)     NOT NULL DEFAULT 'active',
            highest_bid_amount      BIGINT,
            highest_bid_bidder_id   UUID,
            highest_bid_offer_id    VARCHAR(36),
            highest_bid_at          TIMESTAMPTZ,
            total_offers            INT             NOT NULL DEFAULT 0,
            version                 BIGINT          NOT NULL DEFAULT 0,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_sale_mode    CHECK (sale_mode IN ('auction', 'request-for-quote')),
            CONSTRAINT ck_listings_status       CHECK (
                status IN ('draft', 'pending', 'active', 'sold', 'expired', 'cancelled')
            ),
            CONSTRAINT ck_listings_condition    CHECK (
                condition IN ('mint', 'near-mint', 'excellent', 'good', 'light-played', 'played', 'poor')
            ),
            CONSTRAINT ck_listings_rarity       CHECK (
                rarity IN ('common', 'uncommon', 'rare', 'holo-rare', 'ultra-rare',
                           'secret-rare', 'legendary')
            ),
            CONSTRAINT ck_listings_mode_fields  CHECK (
                (sale_mode = 'auction' AND auction_end_time IS NOT NULL
                    AND starting_price IS NOT NULL AND min_price IS NULL) OR
                (sale_mode = 'request-for-quote' AND min_price IS NOT NULL
                    AND auction_end_time IS NULL AND auction_duration_hours IS NULL)
            ),
            CONSTRAINT ck_listings_grading      CHECK (
                (is_graded AND grade BETWEEN 1 AND 10
                    AND grading_company IN ('PSA', 'TAG', 'CGC', 'Beckett')) OR
                (NOT is_graded AND grade IS NULL AND grading_company IS NULL)
            ),
            CONSTRAINT ck_listings_prices       CHECK (
                (starting_price IS NULL OR starting_price > 0) AND
                (min_price IS NULL OR min_price > 0)
            ),
            CONSTRAINT ck_listings_total_offers CHECK (total_offers >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_listings_status_created ON listings (status, created_at DESC);")
    op.execute("CREATE INDEX idx_listings_seller_created ON listings (seller_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON COLUMN listings.version IS 'Optimistic lock, bumped on every state write';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
