import unittest
from unittest import mock

from tourdesk.services import email_service

from tests.helpers import make_settings

BOOKING = {
    "id": "B007",
    "customer_name": "Nimal Perera",
    "customer_email": "nimal@tours.lk",
    "tour_package_name": "Hill Country Escape",
    "start_date": "2026-12-01",
    "end_date": "2026-12-05",
    "guests": 2,
    "total_price": 2500,
}


class TestBookingConfirmation(unittest.TestCase):
    def test_content(self):
        text, html = email_service.build_booking_confirmation(BOOKING)
        self.assertIn("B007", text)
        self.assertIn("Hill Country Escape", html)
        self.assertIn("2026-12-01 to 2026-12-05", text)

    def test_not_configured(self):
        settings = make_settings("data")
        self.assertFalse(email_service.send_email(settings, "nimal@tours.lk", "s", "t", "<p>h</p>"))

    def test_customer_and_admins(self):
        settings = make_settings("data", ADMIN_EMAILS=["ops@tours.lk"])
        with mock.patch.object(email_service, "send_email", return_value=True) as send:
            sent = email_service.send_booking_confirmations(settings, BOOKING)
        self.assertEqual(sent, ["nimal@tours.lk", "ops@tours.lk"])
        self.assertEqual(send.call_count, 2)

    def test_failures_do_not_raise(self):
        settings = make_settings("data", ADMIN_EMAILS=["ops@tours.lk"])
        with mock.patch.object(email_service, "send_email", side_effect=[RuntimeError("boom"), True]):
            sent = email_service.send_booking_confirmations(settings, BOOKING)
        self.assertEqual(sent, ["ops@tours.lk"])

    def test_invoice_attached_for_customer_only(self):
        settings = make_settings("data", ADMIN_EMAILS=["ops@tours.lk"])
        with mock.patch.object(email_service, "send_email", return_value=True) as send:
            email_service.send_booking_confirmations(settings, BOOKING, invoice_pdf=b"%PDF-1.4 test")
        customer_call, admin_call = send.call_args_list
        self.assertEqual(customer_call.args[1], "nimal@tours.lk")
        self.assertEqual(
            customer_call.kwargs["attachments"],
            [("Invoice-B007.pdf", "application/pdf", b"%PDF-1.4 test")],
        )
        self.assertEqual(admin_call.args[1], "ops@tours.lk")
        self.assertIsNone(admin_call.kwargs["attachments"])

    def test_attachment_added_to_message(self):
        settings = make_settings("data", SENDGRID_API_KEY="SG.test", SENDGRID_FROM_EMAIL="bookings@tours.lk")
        with mock.patch.object(email_service, "SendGridAPIClient") as client_cls:
            client_cls.return_value.send.return_value = mock.Mock(status_code=202)
            sent = email_service.send_email(
                settings, "nimal@tours.lk", "s", "t", "<p>h</p>",
                attachments=[("Invoice-B007.pdf", "application/pdf", b"%PDF")],
            )
        self.assertTrue(sent)
        message = client_cls.return_value.send.call_args.args[0]
        attachment = message.get()["attachments"][0]
        self.assertEqual(attachment["filename"], "Invoice-B007.pdf")
        self.assertEqual(attachment["type"], "application/pdf")
        self.assertEqual(attachment["content"], "JVBERg==")


class TestPaymentConfirmation(unittest.TestCase):
    def test_invoice_rendered_and_sent(self):
        settings = make_settings("data")
        store = mock.Mock()
        store.get.return_value = None
        with mock.patch.object(email_service, "send_email", return_value=True) as send:
            sent = email_service.send_payment_confirmation(settings, store, BOOKING)
        self.assertEqual(sent, ["nimal@tours.lk"])
        filename, mime_type, content = send.call_args.kwargs["attachments"][0]
        self.assertEqual(filename, "Invoice-B007.pdf")
        self.assertTrue(content.startswith(b"%PDF"))

    def test_render_failure_still_sends(self):
        settings = make_settings("data")
        with mock.patch.object(email_service, "generate_invoice_pdf", side_effect=RuntimeError("bad font")), \
                mock.patch.object(email_service, "send_email", return_value=True) as send:
            sent = email_service.send_payment_confirmation(settings, mock.Mock(), BOOKING)
        self.assertEqual(sent, ["nimal@tours.lk"])
        self.assertIsNone(send.call_args.kwargs["attachments"])


if __name__ == "__main__":
    unittest.main()
