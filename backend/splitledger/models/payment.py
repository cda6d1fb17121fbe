"""
Payment model for direct transfers between group members.
"""
from sqlalchemy import Column, String, Numeric, ForeignKey, Text, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from splitledger.db.base import BaseModel


class Payment(BaseModel):
    """Payment model representing money sent from one member to another."""
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("payer_id != recipient_id", name="ck_payment_distinct_parties"),
        CheckConstraint("amount > 0", name="ck_payment_positive_amount"),
    )

    group_id = Column(String(36), ForeignKey("groups.id"), nullable=False, index=True)
    payer_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    recipient_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 3), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    description = Column(Text, nullable=True)
    deleted_at = Column(DateTime, nullable=True, index=True)  # Soft delete

    # Relationships
    group = relationship("Group", back_populates="payments")
    payer = relationship("User", foreign_keys=[payer_id])
    recipient = relationship("User", foreign_keys=[recipient_id])
