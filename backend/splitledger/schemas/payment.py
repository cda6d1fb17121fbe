"""
Pydantic schemas for Payment entity.
"""
from pydantic import BaseModel, field_validator, model_validator
from typing import Optional
from decimal import Decimal
from splitledger.core.currency import normalize_currency_code


class Payment(BaseModel):
    """Schema for a direct payment between two group members."""
    id: str
    group_id: str
    payer_id: str
    recipient_id: str
    amount: Decimal
    currency: str
    description: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        """Currency must be a supported ISO 4217 code."""
        return normalize_currency_code(v)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        """Payments move a positive amount."""
        if not v.is_finite() or v <= 0:
            raise ValueError("Payment amount must be positive")
        return v

    @model_validator(mode="after")
    def check_distinct_parties(self):
        """A member cannot pay themselves."""
        if self.payer_id == self.recipient_id:
            raise ValueError("Payer and recipient must be different members")
        return self

    class Config:
        from_attributes = True
