"""Admin routes for reviewing payments."""

from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from humsafar.api.deps import get_admin_id, get_payment_service
from humsafar.api.schemas import PaymentResponse
from humsafar.components.payments import PaymentService, ReviewInput, run_review
from humsafar.domain.entities import PaymentStatus, ReviewAction

router = APIRouter()


class ReviewRequest(BaseModel):
    action: ReviewAction
    reason: str | None = None


class ReviewResponse(BaseModel):
    payment: PaymentResponse
    previous_status: PaymentStatus
    granted: bool


@router.get("", response_model=list[PaymentResponse])
def list_payments(
    status: PaymentStatus | None = None,
    user_id: UUID | None = None,
    admin_id: UUID = Depends(get_admin_id),
    service: PaymentService = Depends(get_payment_service),
) -> list[PaymentResponse]:
    return [PaymentResponse.from_record(p) for p in service.list_payments(status, user_id)]


@router.post("/{payment_id}/review", response_model=ReviewResponse)
def review_payment(
    payment_id: UUID,
    request: ReviewRequest,
    admin_id: UUID = Depends(get_admin_id),
    service: PaymentService = Depends(get_payment_service),
) -> ReviewResponse:
    """Accept or reject a payment. Rejections need a reason."""
    result = run_review(
        ReviewInput(
            payment_id=payment_id,
            action=request.action,
            reviewer_id=admin_id,
            reason=request.reason,
        ),
        service,
    )
    return ReviewResponse(
        payment=PaymentResponse.from_record(result.payment),
        previous_status=result.previous_status,
        granted=result.granted,
    )
