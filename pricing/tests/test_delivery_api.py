from decimal import Decimal
from unittest import mock

import requests
from django.test import SimpleTestCase, override_settings

from pricing.services.delivery_api import ApiDeliveryCalculator

OPTIONS = {
    "delivery": True,
    "deliveryRanges": [{"range": "0-10", "fee": 0}, {"range": "10-25", "fee": 15}],
    "deliveryMinimum": 200,
}

REMOTE_QUOTE = {
    "fee": 22.5,
    "eligible": True,
    "range": "10-25 miles",
    "reason": "",
    "minimumRequired": None,
    "distanceEligible": True,
    "minimumEligible": True,
}


def fake_response(status_code=200, payload=None, json_error=False):
    response = mock.Mock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = payload
    return response


class ApiDeliveryCalculatorTests(SimpleTestCase):
    def setUp(self):
        patcher = mock.patch("pricing.services.delivery_api.requests.post")
        self.post = patcher.start()
        self.addCleanup(patcher.stop)

    def make_calculator(self, **kwargs):
        return ApiDeliveryCalculator(
            base_url=kwargs.get("base_url", "https://delivery.example.com/quote"),
            api_key="secret",
            timeout=3,
        )

    def test_remote_quote_supersedes_local(self):
        calculator = self.make_calculator()
        self.post.return_value = fake_response(payload=REMOTE_QUOTE)

        quote = calculator.calculate("1 Main St", OPTIONS, 150, 18, service_id="svc-1", vendor_id="ven-1")

        self.assertEqual(quote.fee, Decimal("22.5"))
        self.assertTrue(quote.eligible)
        self.assertEqual(quote.source, "api")

        _, kwargs = self.post.call_args
        self.assertEqual(kwargs["json"], {
            "deliveryAddress": "1 Main St",
            "orderSubtotal": 150.0,
            "serviceId": "svc-1",
            "vendorId": "ven-1",
            "distanceMiles": 18.0,
        })
        self.assertEqual(kwargs["timeout"], 3)
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer secret")

    def test_wrapped_payload(self):
        calculator = self.make_calculator()
        self.post.return_value = fake_response(payload={"success": True, "data": REMOTE_QUOTE})

        result = calculator.fetch_quote("1 Main St", 150)

        self.assertTrue(result["success"])
        self.assertEqual(result["quote"].range, "10-25 miles")

    def assert_local_fallback(self, calculator):
        quote = calculator.calculate("1 Main St", OPTIONS, 150, 18)

        self.assertEqual(quote.source, "local")
        self.assertEqual(quote.fee, Decimal("15"))
        self.assertFalse(quote.eligible)
        self.assertFalse(quote.minimum_eligible)

    def test_timeout_falls_back(self):
        calculator = self.make_calculator()
        self.post.side_effect = requests.exceptions.Timeout()
        self.assert_local_fallback(calculator)

    def test_connection_error_falls_back(self):
        calculator = self.make_calculator()
        self.post.side_effect = requests.exceptions.ConnectionError("refused")
        self.assert_local_fallback(calculator)

    def test_server_error_falls_back(self):
        calculator = self.make_calculator()
        self.post.return_value = fake_response(status_code=503, payload={"error": "down"})
        self.assert_local_fallback(calculator)

    def test_not_found_is_unavailable_not_ineligible(self):
        calculator = self.make_calculator()
        self.post.return_value = fake_response(status_code=404, payload={})

        result = calculator.fetch_quote("1 Main St", 150)

        self.assertFalse(result["success"])
        self.assertIsNone(result["quote"])
        self.assertIn("404", result["message"])

    def test_invalid_json_falls_back(self):
        calculator = self.make_calculator()
        self.post.return_value = fake_response(json_error=True)
        self.assert_local_fallback(calculator)

    def test_incomplete_payload_falls_back(self):
        calculator = self.make_calculator()
        self.post.return_value = fake_response(payload={"range": "0-10"})
        self.assert_local_fallback(calculator)

    def test_reported_failure_falls_back(self):
        calculator = self.make_calculator()
        self.post.return_value = fake_response(payload={"success": False, "error": "no vendor"})
        self.assert_local_fallback(calculator)

    def test_unconfigured_url_skips_request(self):
        calculator = self.make_calculator(base_url="")
        self.assert_local_fallback(calculator)
        self.post.assert_not_called()

    @override_settings(DELIVERY_API_URL="https://configured.example.com", DELIVERY_API_TIMEOUT=7)
    def test_reads_settings(self):
        calculator = ApiDeliveryCalculator()

        self.assertEqual(calculator.base_url, "https://configured.example.com")
        self.assertEqual(calculator.timeout, 7)
