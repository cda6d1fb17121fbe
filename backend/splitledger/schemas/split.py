"""
Pydantic schemas for split configuration.

Per-participant split input is a tagged union over the four split methods;
each variant carries only the field its method needs.
"""
from pydantic import BaseModel, Field
from typing import Annotated, List, Optional, Union, Literal
from decimal import Decimal
import enum
from splitledger.models.expense import SplitMethod
from splitledger.schemas.expense import ExpenseParticipant


class EqualSplitParticipant(BaseModel):
    """Participant of an equal split."""
    method: Literal["equal"] = "equal"
    user_id: str
    display_name: Optional[str] = None


class PercentageSplitParticipant(BaseModel):
    """Participant of a percentage split."""
    method: Literal["percentage"] = "percentage"
    user_id: str
    display_name: Optional[str] = None
    percentage: Decimal


class ExactSplitParticipant(BaseModel):
    """Participant of an exact-amount split."""
    method: Literal["exact"] = "exact"
    user_id: str
    display_name: Optional[str] = None
    amount: Decimal


class SharesSplitParticipant(BaseModel):
    """Participant of a shares-weighted split."""
    method: Literal["shares"] = "shares"
    user_id: str
    display_name: Optional[str] = None
    shares: int


SplitParticipantInput = Annotated[
    Union[
        EqualSplitParticipant,
        PercentageSplitParticipant,
        ExactSplitParticipant,
        SharesSplitParticipant,
    ],
    Field(discriminator="method"),
]


class SplitErrorCode(str, enum.Enum):
    """Validation error codes for split configurations."""
    NON_POSITIVE_AMOUNT = "non_positive_amount"
    EMPTY_PARTICIPANT_SET = "empty_participant_set"
    DUPLICATE_PARTICIPANT = "duplicate_participant"
    METHOD_MISMATCH = "method_mismatch"
    PERCENTAGE_OUT_OF_RANGE = "percentage_out_of_range"
    PERCENTAGES_MUST_SUM_TO_100 = "percentages_must_sum_to_100"
    NEGATIVE_AMOUNT = "negative_amount"
    AMOUNTS_MUST_SUM_TO_TOTAL = "amounts_must_sum_to_total"
    INVALID_SHARE_COUNT = "invalid_share_count"


class SplitValidationError(BaseModel):
    """A rejected split configuration, surfaced verbatim to the caller."""
    code: SplitErrorCode
    message: str


class SplitRequest(BaseModel):
    """Schema for split calculation/validation requests."""
    total_amount: Decimal
    currency: str = "USD"
    split_method: SplitMethod
    participants: List[SplitParticipantInput]


class SplitResponse(BaseModel):
    """Schema for split calculation response."""
    total_amount: Decimal
    currency: str
    split_method: SplitMethod
    participants: List[ExpenseParticipant]


class SplitValidationResponse(BaseModel):
    """Schema for split validation response."""
    valid: bool
    error: Optional[SplitValidationError] = None
