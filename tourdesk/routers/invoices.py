# tourdesk/routers/invoices.py

from fastapi import APIRouter, Depends, HTTPException, Response

from tourdesk.deps import get_store
from tourdesk.exceptions import BookingNotFound
from tourdesk.logging_config import get_logger
from tourdesk.services import booking_service
from tourdesk.services.invoice_service import company_info, generate_invoice_pdf, invoice_filename
from tourdesk.storage import RecordStore

logger = get_logger(__name__)

router = APIRouter(tags=["Invoices"])


# Public like GET /api/bookings/{id}: linked from the confirmation page
@router.get("/{booking_id}")
def download_invoice(booking_id: str, store: RecordStore = Depends(get_store)):
    try:
        booking = booking_service.get_booking(store, booking_id)
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    pdf = generate_invoice_pdf(booking, company_info(store))
    logger.info("invoice_downloaded", booking_id=booking_id, size=len(pdf))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{invoice_filename(booking_id)}"'},
    )
