"""
Group balance and settlement routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from splitledger.core.errors import GroupNotFound, LedgerError
from splitledger.db.session import get_db
from splitledger.schemas.balance import GroupBalancesResponse
from splitledger.schemas.settlement import SettlementPlanResponse
from splitledger.services.ledger_service import get_group_balances, get_settlement_plan

router = APIRouter(prefix="/groups", tags=["balances"])


def _raise_http(error: LedgerError):
    if isinstance(error, GroupNotFound):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found"
        )
    raise HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=str(error)
    )


@router.get("/{group_id}/balances", response_model=GroupBalancesResponse)
async def read_balances(group_id: str, db: Session = Depends(get_db)):
    """Get net balances for every member of a group."""
    try:
        return get_group_balances(group_id, db)
    except LedgerError as e:
        _raise_http(e)


@router.get("/{group_id}/settlement-plan", response_model=SettlementPlanResponse)
async def read_settlement_plan(group_id: str, db: Session = Depends(get_db)):
    """Suggest the payments that settle up a group."""
    try:
        return get_settlement_plan(group_id, db)
    except LedgerError as e:
        _raise_http(e)
