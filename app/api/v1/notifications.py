from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.dependencies import get_current_user, get_notification_service
from app.models.user import User
from app.schemas.notification import NotificationResponse
from app.services.notification_service import NotificationService

router = APIRouter(tags=["notifications"])


@router.get("")
async def list_notifications(
    read: Optional[bool] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    notifications, unread_count = await service.list(current_user.id, read, limit)
    return {
        "success": True,
        "data": {
            "notifications": [NotificationResponse.model_validate(n) for n in notifications],
            "unread_count": unread_count,
        },
    }


@router.put("/read-all")
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    updated = await service.mark_all_read(current_user.id)
    return {"success": True, "message": "All notifications marked as read", "data": {"updated": updated}}


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    notification = await service.mark_read(notification_id, current_user.id)
    return {"success": True, "data": {"notification": NotificationResponse.model_validate(notification)}}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    await service.delete(notification_id, current_user.id)
    return {"success": True, "message": "Notification deleted"}
