import unittest
from decimal import Decimal

from tourdesk.payhere.checkout import (
    FORM_FIELDS,
    LIVE_CHECKOUT_URL,
    SANDBOX_CHECKOUT_URL,
    build_checkout,
    callback_urls,
    format_amount,
    split_customer_name,
)
from tourdesk.payhere.credentials import MerchantCredentials
from tourdesk.payhere.hashing import compute_hash


def _checkout(credentials, **overrides):
    values = dict(
        order_id="BOOK-1001",
        amount=2500,
        customer_name="Nimal Perera",
        customer_email="nimal@tours.lk",
        customer_phone="0771234567",
        customer_address="12 Galle Road",
        customer_city="Colombo",
        tour_name="Cultural Triangle 5 Days",
        credentials=credentials,
    )
    values.update(overrides)
    return build_checkout(**values)


class TestFormatAmount(unittest.TestCase):
    def test_two_decimals(self):
        self.assertEqual(format_amount(2500), "2500.00")
        self.assertEqual(format_amount(99.9), "99.90")
        self.assertEqual(format_amount(Decimal("0")), "0.00")

    def test_half_up_rounding(self):
        self.assertEqual(format_amount(10.005), "10.01")
        self.assertEqual(format_amount(10.004), "10.00")
        self.assertEqual(format_amount(Decimal("1.125")), "1.13")

    def test_rejects_invalid_amounts(self):
        for bad in (float("nan"), float("inf"), -1, True):
            with self.assertRaises(ValueError):
                format_amount(bad)


class TestCustomerName(unittest.TestCase):
    def test_split(self):
        self.assertEqual(split_customer_name("Nimal Perera"), ("Nimal", "Perera"))
        self.assertEqual(split_customer_name("  Anne  Marie   de Silva "), ("Anne", "Marie de Silva"))
        self.assertEqual(split_customer_name("Cher"), ("Cher", ""))
        self.assertEqual(split_customer_name(""), ("", ""))


class TestBuildCheckout(unittest.TestCase):
    def setUp(self):
        self.sandbox = MerchantCredentials("1221149", "mySecret", "https://tours.example.lk", sandbox=True)
        self.live = MerchantCredentials("1221149", "mySecret", "https://tours.example.lk", sandbox=False)

    def test_scenario_form(self):
        checkout = _checkout(self.sandbox)
        form = checkout.as_form()

        self.assertEqual(form["amount"], "2500.00")
        self.assertEqual(form["currency"], "LKR")
        self.assertEqual(form["country"], "Sri Lanka")
        self.assertEqual(form["first_name"], "Nimal")
        self.assertEqual(form["last_name"], "Perera")
        self.assertEqual(form["items"], "Cultural Triangle 5 Days")
        self.assertEqual(form["hash"], compute_hash("mySecret", ["1221149", "BOOK-1001", "2500.00", "LKR"]))
        self.assertEqual(checkout.hash, form["hash"])
        self.assertEqual(list(form), list(FORM_FIELDS))

    def test_hash_uses_the_posted_amount(self):
        form = _checkout(self.sandbox, amount=10.005).as_form()
        self.assertEqual(form["amount"], "10.01")
        self.assertEqual(form["hash"], compute_hash("mySecret", ["1221149", "BOOK-1001", "10.01", "LKR"]))

    def test_checkout_url_follows_sandbox_flag(self):
        self.assertEqual(_checkout(self.sandbox).checkout_url, SANDBOX_CHECKOUT_URL)
        self.assertEqual(_checkout(self.live).checkout_url, LIVE_CHECKOUT_URL)

    def test_callback_urls(self):
        form = _checkout(self.sandbox).as_form()
        self.assertEqual(form["return_url"], "https://tours.example.lk/payments/return?booking_id=BOOK-1001")
        self.assertEqual(form["cancel_url"], "https://tours.example.lk/payments/cancel?booking_id=BOOK-1001")
        self.assertEqual(form["notify_url"], "https://tours.example.lk/api/payments/notify")

    def test_trailing_slash_on_base_url(self):
        urls = callback_urls("http://localhost:3000/", "B001")
        self.assertEqual(urls["notify_url"], "http://localhost:3000/api/payments/notify")

    def test_currency_and_country_overrides(self):
        form = _checkout(self.sandbox, currency="USD", customer_country="Maldives").as_form()
        self.assertEqual(form["currency"], "USD")
        self.assertEqual(form["country"], "Maldives")
        self.assertEqual(form["hash"], compute_hash("mySecret", ["1221149", "BOOK-1001", "2500.00", "USD"]))

    def test_checkout_request_is_immutable(self):
        checkout = _checkout(self.sandbox)
        with self.assertRaises(Exception):
            checkout.amount = "1.00"
        checkout.as_form()["amount"] = "1.00"
        self.assertEqual(checkout.form_data["amount"], "2500.00")

    def test_secret_not_in_form_or_repr(self):
        checkout = _checkout(self.sandbox)
        self.assertNotIn("mySecret", checkout.as_form().values())
        self.assertNotIn("mySecret", repr(self.sandbox))


if __name__ == "__main__":
    unittest.main()
