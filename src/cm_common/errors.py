"""Unified error codes and custom exceptions.

Every error belongs to one category (the direct AppError subclasses below),
which fixes its HTTP status. Concrete errors carry a stable numeric code:

  1xxx: Auth/User
  2xxx: Vendor
  3xxx: Listing
  4xxx: Offer
  5xxx: Payment
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- Categories ---

class ValidationError(AppError):
    def __init__(self, code: int, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code, message, 400, details)


class UnauthorizedError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 401)


class ForbiddenError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 403)


class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class ConflictError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class InvalidStateError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 400)


class PaymentError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 400)


# --- 1xxx: Auth/User ---

class UsernameExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists")


class EmailExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists")


class InvalidCredentialsError(UnauthorizedError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password")


class AccountDisabledError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled")


class InvalidRefreshTokenError(UnauthorizedError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired")


class InvalidVerificationTokenError(UnauthorizedError):
    def __init__(self) -> None:
        super().__init__(1006, "Verification token is invalid or expired")


class EmailAlreadyVerifiedError(ConflictError):
    def __init__(self) -> None:
        super().__init__(1007, "Email already verified")


class UserNotFoundError(NotFoundError):
    def __init__(self, user_ref: str) -> None:
        super().__init__(1008, f"User not found: {user_ref}")


class TradingNotPermittedError(ForbiddenError):
    def __init__(self, detail: str) -> None:
        super().__init__(1009, detail)


class AdminRequiredError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__(1010, "Admin access required")


class SelfDemotionError(ValidationError):
    def __init__(self) -> None:
        super().__init__(1011, "Cannot remove your own admin privileges")


# --- 2xxx: Vendor ---

class VendorNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__(2001, "Vendor profile not found")


class VendorExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(2002, "User is already registered as a vendor")


class CommissionRateOutOfRangeError(ValidationError):
    def __init__(self, rate_bps: int, low: int, high: int) -> None:
        super().__init__(
            2003, f"Commission rate {rate_bps} bps out of range [{low}, {high}]"
        )


# --- 3xxx: Listing ---

class ListingNotFoundError(NotFoundError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3001, f"Card not found: {listing_id}")


class ListingNotActiveError(InvalidStateError):
    def __init__(self, listing_id: str, status: str) -> None:
        super().__init__(3002, f"Card {listing_id} is not available (status={status})")


class MissingFieldsError(ValidationError):
    def __init__(self, required: list[str]) -> None:
        super().__init__(3003, "Missing required fields", {"required": required})


class InvalidListingError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, detail)


class NotListingSellerError(ForbiddenError):
    def __init__(self, action: str) -> None:
        super().__init__(3005, f"Not authorized to {action} this card")


class InvalidListingTransitionError(InvalidStateError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(3006, f"Card status cannot change from {current} to {target}")


class ListingVersionConflictError(ConflictError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3007, f"Card {listing_id} was modified concurrently, retry")


# --- 4xxx: Offer ---

class OfferNotFoundError(NotFoundError):
    def __init__(self, offer_id: str) -> None:
        super().__init__(4001, f"Offer not found: {offer_id}")


class AuctionEndedError(InvalidStateError):
    def __init__(self) -> None:
        super().__init__(4002, "Auction has ended")


class AuctionStillOpenError(InvalidStateError):
    def __init__(self) -> None:
        super().__init__(4003, "Auction has not ended yet")


class BidTooLowError(ValidationError):
    def __init__(self, floor: int) -> None:
        super().__init__(4004, f"Bid must be higher than {floor} cents", {"floor": floor})


class OfferBelowMinimumError(ValidationError):
    def __init__(self, min_price: int) -> None:
        super().__init__(
            4005,
            f"Offer must be at least {min_price} cents for this RFQ listing",
            {"minPrice": min_price},
        )


class DuplicateOfferError(ConflictError):
    def __init__(self) -> None:
        super().__init__(4006, "You have already made an offer for this card")


class SelfBidError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__(4007, "Sellers cannot make offers on their own cards")


class OfferNotPendingError(InvalidStateError):
    def __init__(self, offer_id: str, status: str) -> None:
        super().__init__(4008, f"Offer {offer_id} in status {status} cannot be changed")


class NotOfferPartyError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__(4009, "Not authorized to view this offer")


# --- 5xxx: Payment ---

class OfferNotAcceptedError(InvalidStateError):
    def __init__(self) -> None:
        super().__init__(5001, "Offer is not accepted")


class CommissionAlreadyPaidError(ConflictError):
    def __init__(self) -> None:
        super().__init__(5002, "Commission already paid")


class PaymentFailedError(PaymentError):
    def __init__(self, detail: str = "Payment failed") -> None:
        super().__init__(5003, detail)


class NotOfferBidderError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__(5004, "Not authorized to pay commission for this offer")


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class RequestValidationFailedError(ValidationError):
    def __init__(self, errors: list[dict[str, str]]) -> None:
        super().__init__(9003, "Request validation failed", {"errors": errors})
