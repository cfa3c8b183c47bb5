from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from humsafar.adapters.sqlite.repos import SQLitePaymentRepo
from humsafar.api.deps import get_admin_id, get_entitlement_service, get_payment_repo
from humsafar.components.entitlements import EntitlementService

router = APIRouter()


class SyncRequest(BaseModel):
    user_id: UUID | None = None


class SyncItem(BaseModel):
    user_id: UUID
    views_limit: int
    subscription_status: str


class SyncResponse(BaseModel):
    updated: list[SyncItem]
    skipped: list[UUID]


@router.post("/sync", response_model=SyncResponse)
def sync_subscriptions(
    request: SyncRequest | None = None,
    admin_id: UUID = Depends(get_admin_id),
    service: EntitlementService = Depends(get_entitlement_service),
    payment_repo: SQLitePaymentRepo = Depends(get_payment_repo),
) -> SyncResponse:
    """Recompute every member's quota from their accepted payments."""
    user_id = request.user_id if request else None
    result = service.sync_from_payments(payment_repo, user_id=user_id)
    return SyncResponse(
        updated=[
            SyncItem(
                user_id=r.user_id,
                views_limit=r.views_limit,
                subscription_status=r.subscription_status,
            )
            for r in result.updated
        ],
        skipped=result.skipped,
    )
