import tempfile
import unittest

from fastapi.testclient import TestClient

from tourdesk.exceptions import StoreError
from tourdesk.services import booking_service, invoice_service
from tourdesk.storage import JsonFileStore

from tests.helpers import make_app, make_settings

BOOKING = {
    "id": "B007",
    "customer_name": "Nimal & Sons <Travel>",
    "customer_email": "nimal@tours.lk",
    "customer_phone": "0771234567",
    "tour_package_name": "Hill Country Escape",
    "start_date": "2026-12-01",
    "end_date": "2026-12-05",
    "guests": 2,
    "total_price": 2500,
    "payment_status": "paid",
    "payment_method": "VISA",
    "payment_id": "320025071234",
    "created_at": "2026-10-19T08:30:00+00:00",
}


class _BrokenStore:
    def get(self, table, record_id):
        raise StoreError("connection refused")


class TestInvoiceService(unittest.TestCase):
    def test_pdf_document(self):
        pdf = invoice_service.generate_invoice_pdf(BOOKING)
        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertIn(b"%%EOF", pdf[-32:])

    def test_sparse_booking(self):
        pdf = invoice_service.generate_invoice_pdf({"id": "B001", "total_price": None})
        self.assertTrue(pdf.startswith(b"%PDF"))

    def test_long_dates(self):
        self.assertEqual(invoice_service._long_date("2026-12-01"), "December 1, 2026")
        self.assertEqual(invoice_service._long_date("2026-10-19T08:30:00Z"), "October 19, 2026")
        self.assertEqual(invoice_service._long_date("next week"), "next week")
        self.assertEqual(invoice_service._long_date(None), "-")

    def test_filename(self):
        self.assertEqual(invoice_service.invoice_filename("B007"), "Invoice-B007.pdf")

    def test_company_info_from_settings_row(self):
        with tempfile.TemporaryDirectory() as tmp:
            store = JsonFileStore(tmp)
            store.upsert("settings", [{"id": "main", "site_name": "Isle Tours", "contact_address": ""}])
            company = invoice_service.company_info(store)
        self.assertEqual(company["name"], "Isle Tours")
        self.assertEqual(company["address"], invoice_service.DEFAULT_COMPANY["address"])

    def test_company_info_store_down(self):
        self.assertEqual(invoice_service.company_info(_BrokenStore()), invoice_service.DEFAULT_COMPANY)


class TestInvoiceAPI(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = JsonFileStore(self.tmp.name)
        self.client = TestClient(make_app(make_settings(self.tmp.name), self.store))
        self.booking = booking_service.create_booking(self.store, {
            "customer_name": "Nimal Perera",
            "customer_email": "nimal@tours.lk",
            "tour_package_name": "Cultural Triangle",
            "total_price": 2500,
        })

    def tearDown(self):
        self.tmp.cleanup()

    def test_download(self):
        res = self.client.get(f"/api/invoices/{self.booking['id']}")
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.headers["content-type"], "application/pdf")
        self.assertEqual(res.headers["content-disposition"], 'attachment; filename="Invoice-B001.pdf"')
        self.assertTrue(res.content.startswith(b"%PDF"))

    def test_unknown_booking(self):
        res = self.client.get("/api/invoices/B404")
        self.assertEqual(res.status_code, 404)


if __name__ == "__main__":
    unittest.main()
