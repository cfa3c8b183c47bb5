from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from humsafar.api.deps import get_current_member_id, get_payment_service
from humsafar.api.schemas import PaymentResponse
from humsafar.components.payments import (
    CheckoutInput,
    GatewayCallbackInput,
    PaymentService,
    SubmitScreenshotInput,
)

router = APIRouter()


# --- Request/Response Models ---


class CheckoutRequest(BaseModel):
    package_type: str
    addon_key: str | None = None


class SubmitScreenshotRequest(BaseModel):
    screenshot_ref: str = Field(min_length=1)


class GatewayCallbackRequest(BaseModel):
    success: bool
    amount: float = Field(default=0, ge=0)
    addon: str | None = None
    reference: str | None = None


class GatewayCallbackResponse(BaseModel):
    success: bool
    message: str
    payment: PaymentResponse | None = None


# --- Routes ---


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def start_checkout(
    request: CheckoutRequest,
    member_id: UUID = Depends(get_current_member_id),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    payment = service.initiate_checkout(
        CheckoutInput(
            user_id=member_id,
            package_type=request.package_type,
            addon_key=request.addon_key,
        )
    )
    return PaymentResponse.from_record(payment)


@router.post("/gateway-callback", response_model=GatewayCallbackResponse)
def gateway_callback(
    request: GatewayCallbackRequest,
    member_id: UUID = Depends(get_current_member_id),
    service: PaymentService = Depends(get_payment_service),
) -> GatewayCallbackResponse:
    """Result relayed from the payment gateway redirect."""
    result = service.handle_gateway_callback(
        GatewayCallbackInput(
            user_id=member_id,
            success=request.success,
            amount=request.amount,
            addon_key=request.addon,
            reference=request.reference,
        )
    )
    return GatewayCallbackResponse(
        success=result.success,
        message=result.message,
        payment=PaymentResponse.from_record(result.payment) if result.payment else None,
    )


@router.post("/{payment_id}/submit", response_model=PaymentResponse)
def submit_screenshot(
    payment_id: UUID,
    request: SubmitScreenshotRequest,
    member_id: UUID = Depends(get_current_member_id),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    payment = service.submit_screenshot(
        SubmitScreenshotInput(
            payment_id=payment_id,
            user_id=member_id,
            screenshot_ref=request.screenshot_ref,
        )
    )
    return PaymentResponse.from_record(payment)
