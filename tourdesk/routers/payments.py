"""
PayHere payment endpoints:
- POST /api/payments/checkout builds the signed checkout form for a booking
- POST /api/payments/notify receives the gateway's server-to-server notification
  (application/x-www-form-urlencoded), verifies md5sig and applies the status
  idempotently
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Form, HTTPException, Request

from tourdesk.config.settings import Settings
from tourdesk.deps import client_ip, get_payhere_credentials, get_settings, get_store
from tourdesk.exceptions import BookingNotFound, InvalidStatusTransition, SignatureMismatch, StoreError
from tourdesk.logging_config import get_logger
from tourdesk.payhere.checkout import build_checkout
from tourdesk.payhere.credentials import MerchantCredentials
from tourdesk.payhere.notification import PaymentNotification
from tourdesk.payhere.status import PaymentStatus
from tourdesk.schemas_pkg.payments import CheckoutData, CheckoutIn, CheckoutOut, NotifyOut
from tourdesk.services.audit_service import log_audit
from tourdesk.services.booking_service import apply_payment_notification
from tourdesk.services.email_service import send_payment_confirmation
from tourdesk.storage import RecordStore

logger = get_logger(__name__)

router = APIRouter(tags=["Payments"])


@router.post("/checkout", response_model=CheckoutOut)
def create_checkout(
    body: CheckoutIn,
    credentials: MerchantCredentials = Depends(get_payhere_credentials),
):
    try:
        checkout = build_checkout(
            order_id=body.booking_id,
            amount=body.amount,
            currency=body.currency,
            customer_name=body.customer_name,
            customer_email=body.customer_email,
            customer_phone=body.customer_phone,
            customer_address=body.customer_address,
            customer_city=body.customer_city,
            customer_country=body.customer_country,
            tour_name=body.tour_name,
            credentials=credentials,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(
        "checkout_created",
        order_id=checkout.order_id,
        amount=checkout.amount,
        currency=checkout.currency,
        sandbox=credentials.sandbox,
    )
    return CheckoutOut(data=CheckoutData(checkout_url=checkout.checkout_url, form_data=checkout.as_form()))


@router.post("/notify", response_model=NotifyOut)
def payment_notify(
    request: Request,
    background_tasks: BackgroundTasks,
    merchant_id: str = Form(...),
    order_id: str = Form(...),
    payhere_amount: str = Form(...),
    payhere_currency: str = Form(...),
    status_code: str = Form(...),
    md5sig: str = Form(...),
    payment_id: Optional[str] = Form(None),
    method: Optional[str] = Form(None),
    status_message: Optional[str] = Form(None),
    credentials: MerchantCredentials = Depends(get_payhere_credentials),
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    notification = PaymentNotification(
        merchant_id=merchant_id,
        order_id=order_id,
        payhere_amount=payhere_amount,
        payhere_currency=payhere_currency,
        status_code=status_code,
        md5sig=md5sig,
        payment_id=payment_id,
        method=method,
        status_message=status_message,
    )

    try:
        result = apply_payment_notification(store, notification, credentials.merchant_secret)
    except SignatureMismatch:
        logger.warning(
            "payment_notification_rejected",
            order_id=order_id,
            status_code=status_code,
            client_ip=client_ip(request),
        )
        log_audit(
            store,
            action="payment_signature_mismatch",
            resource_type="booking",
            resource_id=order_id,
            changes={"status_code": status_code, "amount": payhere_amount, "currency": payhere_currency},
            ip_address=client_ip(request),
        )
        raise HTTPException(status_code=400, detail="Invalid signature")
    except BookingNotFound as e:
        logger.warning("payment_notification_unknown_booking", order_id=order_id)
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreError as e:
        # 5xx makes the gateway redeliver; re-application is idempotent
        logger.error("payment_notification_store_failed", order_id=order_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not record payment status")

    if result.changed and result.current == PaymentStatus.PAID:
        background_tasks.add_task(send_payment_confirmation, settings, store, result.booking)

    logger.info(
        "payment_notification_processed",
        order_id=order_id,
        payment_id=payment_id,
        amount=payhere_amount,
        currency=payhere_currency,
        status_code=status_code,
        payment_status=result.current.value,
        changed=result.changed,
        method=method,
        status_message=status_message,
    )
    return NotifyOut(
        message="Payment notification processed",
        payment_status=result.current.value,
        changed=result.changed,
    )
