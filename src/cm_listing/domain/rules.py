"""Listing validation rules — pure functions, raise AppError subclasses.

Used by the application service when a listing is created or updated.
"""

from datetime import datetime

from src.cm_common.datetime_utils import ensure_utc, hours_from
from src.cm_common.errors import InvalidListingError, MissingFieldsError
from src.cm_listing.domain.models import AuctionMode, ListingMode, RfqMode

MIN_GRADE = 1
MAX_GRADE = 10
MIN_CARD_YEAR = 1850


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def check_required(values: dict[str, object], is_rfq: bool) -> None:
    """Raise MissingFieldsError listing every absent field (wire names).

    `values` maps wire field names to submitted values. Mode-specific
    requirements are added on top of the card fields.
    """
    card_fields = ["cardName", "set", "year", "condition", "rarity", "frontImage"]
    missing = [name for name in card_fields if _is_blank(values.get(name))]

    if is_rfq:
        if values.get("minPrice") is None:
            missing.append("minPrice")
    else:
        if values.get("startingPrice") is None:
            missing.append("startingPrice")
        if values.get("auctionEndTime") is None and values.get("auctionDuration") is None:
            missing.append("auctionEndTime")

    if missing:
        raise MissingFieldsError(missing)


def check_year(year: int, now: datetime) -> None:
    if not (MIN_CARD_YEAR <= year <= now.year + 1):
        raise InvalidListingError(f"Year must be between {MIN_CARD_YEAR} and {now.year + 1}")


def check_grading(is_graded: bool, grade: int | None, grading_company: str | None) -> None:
    """grade and gradingCompany are required together iff the card is graded."""
    if is_graded:
        if grade is None or not (MIN_GRADE <= grade <= MAX_GRADE):
            raise InvalidListingError(
                f"Grade must be between {MIN_GRADE} and {MAX_GRADE} for graded cards"
            )
        if not grading_company:
            raise InvalidListingError(
                "Valid grading company is required for graded cards "
                "(PSA, TAG, CGC, or Beckett)"
            )
    elif grade is not None or grading_company is not None:
        raise InvalidListingError("Grade and grading company are only allowed for graded cards")


def check_price(amount: int, field: str) -> None:
    if amount <= 0:
        raise InvalidListingError(f"{field} must be greater than 0")


def build_mode(
    *,
    is_rfq: bool,
    starting_price: int | None,
    min_price: int | None,
    auction_end_time: datetime | None,
    auction_duration: int | None,
    now: datetime,
    min_hours: int,
    max_hours: int,
) -> ListingMode:
    """Construct the sale-mode variant, rejecting fields of the other mode."""
    if is_rfq:
        if auction_end_time is not None or auction_duration is not None:
            raise InvalidListingError(
                "RFQ listings cannot have an auction end time or duration"
            )
        if min_price is None:
            raise MissingFieldsError(["minPrice"])
        check_price(min_price, "minPrice")
        if starting_price is not None:
            check_price(starting_price, "startingPrice")
        return RfqMode(min_price=min_price)

    if min_price is not None:
        raise InvalidListingError("Auction listings cannot have a minimum price")
    if starting_price is None:
        raise MissingFieldsError(["startingPrice"])
    check_price(starting_price, "startingPrice")

    if auction_end_time is not None and auction_duration is not None:
        raise InvalidListingError("Provide either auctionEndTime or auctionDuration, not both")
    if auction_duration is not None:
        if not (min_hours <= auction_duration <= max_hours):
            raise InvalidListingError(
                f"Auction duration must be between {min_hours} and {max_hours} hours"
            )
        return AuctionMode(end_time=hours_from(now, auction_duration), duration_hours=auction_duration)
    if auction_end_time is None:
        raise MissingFieldsError(["auctionEndTime"])

    end_time = ensure_utc(auction_end_time)
    check_end_time(end_time, now)
    return AuctionMode(end_time=end_time)


def check_end_time(end_time: datetime, now: datetime) -> None:
    if end_time <= now:
        raise InvalidListingError("Auction end time must be in the future")
