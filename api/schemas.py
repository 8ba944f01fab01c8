"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field, field_validator

from solitaire.cards import parse_order


class NewStreamRequest(BaseModel):
    """Request to start a keystream session."""

    order: list[int] | None = Field(
        default=None,
        description="Starting deck order, top card first (identity order if omitted)",
    )

    @field_validator("order")
    @classmethod
    def _check_order(cls, value: list[int] | None) -> list[int] | None:
        if value is None:
            return None
        return list(parse_order(value))


class NewStreamResponse(BaseModel):
    """Newly created session."""

    session_id: str


class StreamRequest(BaseModel):
    """Request for a batch of keystream values."""

    count: int = Field(..., ge=1, description="Number of values to produce")
    skip_empty: bool = Field(
        default=False,
        description="Draw again on joker rounds so every value is 1-52",
    )


class CardResponse(BaseModel):
    """Card in the deck."""

    card: int
    label: str
    is_joker: bool


class DeckResponse(BaseModel):
    """Current deck of a session."""

    order: list[int]
    cards: list[CardResponse]
    joker_a_index: int
    joker_b_index: int
    rounds: int


class ValueResponse(BaseModel):
    """Result of a single round."""

    value: int = Field(..., ge=0, le=52)
    rounds: int


class StreamResponse(BaseModel):
    """Result of a batch of rounds."""

    values: list[int]
    rounds: int
