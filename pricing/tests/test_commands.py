import json
import os
import tempfile
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase

ORDER = {
    "delivery_address": "1 Main St, Oakland, CA 94612",
    "distance_miles": 18,
    "guest_count": 40,
    "service_fee": {"type": "fixed", "fixed": 10},
    "selected_items": {"taco": 1, "c1_upgrade": 1},
    "services": [
        {
            "id": "c1",
            "name": "Taco Catering",
            "serviceType": "catering",
            "price": 25,
            "service_details": {
                "menuItems": [{"id": "upgrade", "name": "Premium Upgrade", "price": 5}],
                "combos": [{"id": "taco", "name": "Taco Bar", "pricePerPerson": 25}],
                "deliveryOptions": {
                    "delivery": True,
                    "deliveryRanges": [{"range": "0-10", "fee": 0}, {"range": "10-25", "fee": 15}],
                    "deliveryMinimum": 200,
                },
            },
        },
    ],
}


class QuoteOrderCommandTests(SimpleTestCase):
    def write_order(self, order):
        fd, path = tempfile.mkstemp(suffix=".json")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(order, fh)
        self.addCleanup(os.remove, path)
        return path

    def run_command(self, *args):
        out = StringIO()
        call_command("quote_order", *args, stdout=out)
        output = out.getvalue()
        # JSON document followed by the summary line
        document, _, summary = output.rpartition("}")
        return json.loads(document + "}"), summary

    def test_prices_order(self):
        result, summary = self.run_command(self.write_order(ORDER))

        catering = result["catering"][0]
        self.assertEqual(catering["service_id"], "c1")
        self.assertEqual(catering["final_total"], "1200")

        totals = result["totals"]
        self.assertEqual(totals["subtotal"], "1200")
        self.assertEqual(totals["service_fee"], "10.00")
        self.assertEqual(totals["delivery_fee"], "15")
        self.assertEqual(totals["delivery_quotes"]["c1"]["range"], "10-25")
        self.assertEqual(totals["delivery_details"]["minimum_warnings"], [])
        # Oakland 10.75% on 1200 + 10 + 15
        self.assertEqual(totals["tax"], "131.69")
        self.assertEqual(totals["total"], "1356.69")

        references = [item["reference"] for item in result["line_items"]]
        self.assertEqual(references, ["c1_upgrade", "service_fee"])
        self.assertEqual(result["shipping_cost"], "15")
        self.assertIn("Priced 1 service(s), 2 line item(s).", summary)

    def test_overrides(self):
        result, _ = self.run_command(self.write_order(ORDER), "--guests", "10", "--distance", "4")

        self.assertEqual(result["catering"][0]["final_total"], "300")
        self.assertEqual(result["totals"]["delivery_quotes"]["c1"]["range"], "0-10")
        self.assertEqual(result["totals"]["delivery_fee"], "0")

    def test_minimum_shortfall_still_charges_delivery(self):
        result, _ = self.run_command(self.write_order(ORDER), "--guests", "5")

        totals = result["totals"]
        self.assertEqual(totals["subtotal"], "150")
        self.assertEqual(totals["delivery_fee"], "15")
        self.assertEqual(totals["delivery_details"]["minimum_warnings"], [
            {"vendor": "Taco Catering", "required": "200", "current": "150"},
        ])

    def test_tax_exempt_flag(self):
        result, _ = self.run_command(self.write_order(ORDER), "--tax-exempt")

        self.assertEqual(result["totals"]["tax"], "0.00")
        self.assertTrue(result["totals"]["is_tax_exempt"])

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command("quote_order", "/nonexistent/order.json", stdout=StringIO())

    def test_invalid_json(self):
        fd, path = tempfile.mkstemp(suffix=".json")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write("{not json")
        self.addCleanup(os.remove, path)

        with self.assertRaises(CommandError):
            call_command("quote_order", path, stdout=StringIO())
