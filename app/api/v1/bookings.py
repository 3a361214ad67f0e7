from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.dependencies import get_current_user, get_booking_service
from app.core.rbac import require_staff
from app.models.booking import BookingStatusEnum
from app.models.user import User
from app.schemas.booking import BookingCreate, BookingCancel, BookingResponse
from app.schemas.common import paginate
from app.services.booking_service import BookingService

router = APIRouter(tags=["bookings"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Reserve a spot; the class enrollment counter is claimed atomically."""
    booking = await service.create_booking(current_user.id, data)
    return {
        "success": True,
        "message": "Class booked successfully",
        "data": {"booking": BookingResponse.model_validate(booking)},
    }


@router.get("")
async def list_bookings(
    status: Optional[BookingStatusEnum] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    bookings, total = await service.list_bookings(current_user.id, status, start_date, end_date, page, limit)
    return {
        "success": True,
        "data": {
            "bookings": [BookingResponse.model_validate(b) for b in bookings],
            "pagination": paginate(total, page, limit),
        },
    }


@router.get("/stats")
async def booking_stats(
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return {"success": True, "data": await service.booking_stats(current_user.id)}


@router.get("/{booking_id}")
async def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = await service.get_booking(booking_id, current_user)
    return {"success": True, "data": {"booking": BookingResponse.model_validate(booking)}}


@router.put("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: int,
    data: Optional[BookingCancel] = None,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = await service.cancel_booking(booking_id, current_user, data.reason if data else None)
    return {
        "success": True,
        "message": "Booking cancelled successfully",
        "data": {"booking": BookingResponse.model_validate(booking)},
    }


@router.put("/{booking_id}/complete")
async def complete_booking(
    booking_id: int,
    current_user: User = Depends(require_staff),
    service: BookingService = Depends(get_booking_service),
):
    booking = await service.complete_booking(booking_id)
    return {
        "success": True,
        "message": "Booking marked as completed",
        "data": {"booking": BookingResponse.model_validate(booking)},
    }
