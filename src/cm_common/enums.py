"""Global enums — must match DB CHECK constraints exactly.

Values are the lowercase strings used on the wire and in the database.
"""

from enum import Enum


class SaleMode(str, Enum):
    AUCTION = "auction"
    REQUEST_FOR_QUOTE = "request-for-quote"


class ListingStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    SOLD = "sold"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class OfferStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class CardCondition(str, Enum):
    MINT = "mint"
    NEAR_MINT = "near-mint"
    EXCELLENT = "excellent"
    GOOD = "good"
    LIGHT_PLAYED = "light-played"
    PLAYED = "played"
    POOR = "poor"


class CardRarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    HOLO_RARE = "holo-rare"
    ULTRA_RARE = "ultra-rare"
    SECRET_RARE = "secret-rare"
    LEGENDARY = "legendary"


class GradingCompany(str, Enum):
    PSA = "PSA"
    TAG = "TAG"
    CGC = "CGC"
    BECKETT = "Beckett"
