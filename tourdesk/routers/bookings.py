# tourdesk/routers/bookings.py

from fastapi import APIRouter, Depends, HTTPException

from tourdesk.deps import get_store, require_admin
from tourdesk.exceptions import BookingNotFound, StoreError
from tourdesk.logging_config import get_logger
from tourdesk.schemas_pkg.bookings import BookingCreate, BookingUpdate
from tourdesk.services import booking_service
from tourdesk.storage import RecordStore

logger = get_logger(__name__)

router = APIRouter(tags=["Bookings"])


@router.get("")
def list_bookings(
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(require_admin),
):
    bookings = booking_service.list_bookings(store)
    return {"success": True, "data": bookings, "count": len(bookings)}


@router.post("", status_code=201)
def create_booking(body: BookingCreate, store: RecordStore = Depends(get_store)):
    try:
        booking = booking_service.create_booking(store, body.model_dump())
    except StoreError as e:
        logger.error("booking_create_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Could not create booking, please try again")
    return {"success": True, "data": booking}


# Public: the payment return page looks the booking up by reference
@router.get("/{booking_id}")
def get_booking(booking_id: str, store: RecordStore = Depends(get_store)):
    try:
        booking = booking_service.get_booking(store, booking_id)
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "data": booking}


@router.put("/{booking_id}")
def update_booking(
    booking_id: str,
    body: BookingUpdate,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(require_admin),
):
    values = body.model_dump(exclude_unset=True)
    if not values:
        raise HTTPException(status_code=400, detail="No fields to update")
    try:
        booking = booking_service.update_booking(store, booking_id, values)
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "data": booking}


@router.delete("/{booking_id}")
def delete_booking(
    booking_id: str,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(require_admin),
):
    try:
        booking_service.delete_booking(store, booking_id)
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "message": "Booking deleted"}
