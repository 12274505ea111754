"""SQLAlchemy ORM model for the listings table.

Used for type reference only — persistence.py uses raw text() SQL.
Alembic migration 004_create_listings.py is the authoritative DDL source.
"""

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, SmallInteger, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.cm_common.database import Base


class ListingORM(Base):
    __tablename__ = "listings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    seller_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    card_name: Mapped[str] = mapped_column(String(200), nullable=False)
    set_name: Mapped[str] = mapped_column(String(200), nullable=False)
    year: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    condition: Mapped[str] = mapped_column(String(20), nullable=False)
    rarity: Mapped[str] = mapped_column(String(20), nullable=False)
    is_graded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    grade: Mapped[int | None] = mapped_column(SmallInteger)
    grading_company: Mapped[str | None] = mapped_column(String(20))
    description: Mapped[str | None] = mapped_column(Text)
    front_image: Mapped[str] = mapped_column(Text, nullable=False)
    back_image: Mapped[str | None] = mapped_column(Text)
    sale_mode: Mapped[str] = mapped_column(String(20), nullable=False)
    starting_price: Mapped[int | None] = mapped_column(BigInteger)
    min_price: Mapped[int | None] = mapped_column(BigInteger)
    auction_end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    auction_duration_hours: Mapped[int | None] = mapped_column(SmallInteger)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    highest_bid_amount: Mapped[int | None] = mapped_column(BigInteger)
    highest_bid_bidder_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True))
    highest_bid_offer_id: Mapped[str | None] = mapped_column(String(36))
    highest_bid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    total_offers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
