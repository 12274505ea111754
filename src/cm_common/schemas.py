"""Shared pydantic base for the public JSON contract.

Python attributes stay snake_case; the wire format is camelCase
(`cardName`, `auctionEndTime`, ...). Either spelling is accepted on input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


def page_count(total: int, limit: int) -> int:
    """Number of pages needed for `total` rows at `limit` per page."""
    return (total + limit - 1) // limit if total else 0
