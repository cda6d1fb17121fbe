"""
Split calculation routes, used while an expense is being composed.
"""
from fastapi import APIRouter, HTTPException, status
from splitledger.core.errors import LedgerError, SplitConfigurationError
from splitledger.schemas.split import SplitRequest, SplitResponse, SplitValidationResponse
from splitledger.services.split_service import calculate_split, validate_split_configuration

router = APIRouter(prefix="/splits", tags=["splits"])


@router.post("/calculate", response_model=SplitResponse)
async def calculate(request: SplitRequest):
    """Calculate participant shares for a split configuration."""
    try:
        participants = calculate_split(
            request.total_amount,
            request.split_method,
            request.participants,
            request.currency
        )
    except SplitConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.error.model_dump(mode="json")
        )
    except LedgerError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )

    return SplitResponse(
        total_amount=request.total_amount,
        currency=request.currency.upper(),
        split_method=request.split_method,
        participants=participants
    )


@router.post("/validate", response_model=SplitValidationResponse)
async def validate(request: SplitRequest):
    """Validate a split configuration without calculating it."""
    try:
        error = validate_split_configuration(
            request.total_amount,
            request.split_method,
            request.participants
        )
    except LedgerError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )
    return SplitValidationResponse(valid=error is None, error=error)
