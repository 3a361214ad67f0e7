from fastapi import APIRouter, Depends, Request, status

from app.core.dependencies import get_current_user, get_payment_service, get_checkout_service
from app.models.user import User
from app.schemas.payment import CreateIntentRequest, ConfirmPaymentRequest, PaymentIntentResponse, PaymentResponse
from app.schemas.user import UserResponse
from app.services.payments import PaymentService

router = APIRouter(tags=["payments"])


@router.post("/create-intent", status_code=status.HTTP_201_CREATED)
async def create_payment_intent(
    data: CreateIntentRequest,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_checkout_service),
):
    intent = await service.create_payment_intent(current_user.id, data.membership_id)
    return {"success": True, "data": PaymentIntentResponse(**intent)}


@router.post("/confirm")
async def confirm_payment(
    data: ConfirmPaymentRequest,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_checkout_service),
):
    """Verify the provider result and activate the purchased membership."""
    user_id = current_user.id
    payment = await service.confirm_payment(user_id, data.model_dump(exclude_none=True))
    user = await service.db.get(User, user_id, populate_existing=True)
    return {
        "success": True,
        "message": "Payment verified and membership activated",
        "data": {
            "payment": PaymentResponse.model_validate(payment),
            "user": UserResponse.model_validate(user),
        },
    }


@router.post("/webhook")
async def payment_webhook(request: Request, service: PaymentService = Depends(get_checkout_service)):
    # Signatures cover the exact bytes, so the body is never re-serialized
    raw_body = await request.body()
    return await service.handle_webhook(raw_body, request.headers)


@router.get("/history")
async def payment_history(
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    payments = await service.payment_history(current_user.id)
    return {"success": True, "data": {"payments": [PaymentResponse.model_validate(p) for p in payments]}}
