from decimal import Decimal
from unittest import mock

import stripe
from django.test import SimpleTestCase, override_settings

from pricing.services.stripe_tax import address_to_string, calculate_order_tax, estimate_tax
from pricing.services.tax_line_items import TaxableLineItem
from pricing.services.tax_rates import calculate_local_tax, extract_zip, get_tax_rate_by_location

SF_ADDRESS = {
    "line1": "500 Market St",
    "city": "San Francisco",
    "state": "CA",
    "postal_code": "94105",
    "country": "US",
}

VENUE = {"id": "v1", "name": "Garden Venue", "serviceType": "venues", "price": 1000}


def stripe_calculation(tax_cents, total_cents, calculation_id="taxcalc_123"):
    return {
        "id": calculation_id,
        "tax_amount_exclusive": tax_cents,
        "amount_total": total_cents,
        "tax_breakdown": [{
            "amount": tax_cents,
            "taxable_amount": total_cents - tax_cents,
            "taxability_reason": "standard_rated",
            "tax_rate_details": {
                "country": "US",
                "state": "CA",
                "percentage_decimal": "8.625",
                "tax_type": "sales_tax",
            },
        }],
    }


class LocalTaxRateTests(SimpleTestCase):
    def test_bay_area_zip(self):
        rate = get_tax_rate_by_location("500 Market St, San Francisco, CA 94105")

        self.assertEqual(rate["rate"], Decimal("0.0863"))
        self.assertEqual(rate["jurisdiction"], "San Francisco, San Francisco County")

    def test_state_name(self):
        self.assertEqual(get_tax_rate_by_location("Texas")["rate"], Decimal("0.0625"))
        self.assertEqual(get_tax_rate_by_location("Miami, Florida")["rate"], Decimal("0.06"))

    def test_state_abbreviation_whole_word(self):
        self.assertEqual(get_tax_rate_by_location("Austin, TX 73301")["rate"], Decimal("0.0625"))

    def test_abbreviation_inside_word_does_not_match(self):
        rate = get_tax_rate_by_location("Cape Town, South Africa")
        self.assertEqual(rate["description"], "Default Tax")

    def test_default_rate(self):
        self.assertEqual(get_tax_rate_by_location("")["rate"], Decimal("0.08"))
        self.assertEqual(get_tax_rate_by_location(None)["jurisdiction"], "Unknown")

    def test_extract_zip(self):
        self.assertEqual(extract_zip("Oakland, CA 94612"), "94612")
        self.assertIsNone(extract_zip("Oakland, CA"))

    def test_calculate_local_tax(self):
        tax = calculate_local_tax(100, "94105")
        self.assertEqual(tax["amount"], Decimal("8.63"))


class EstimateTaxTests(SimpleTestCase):
    @mock.patch("stripe.tax.Calculation.create")
    def test_delivery_fee_sent_as_shipping_cost(self, create):
        create.return_value = stripe_calculation(8625, 108625 + 2500)

        result = estimate_tax([TaxableLineItem(amount=100000, reference="v1")], SF_ADDRESS, delivery_fee=25)

        self.assertTrue(result["success"])
        self.assertEqual(result["tax_amount"], Decimal("86.25"))
        self.assertEqual(result["calculation_id"], "taxcalc_123")
        self.assertEqual(result["breakdown"][0]["jurisdiction"], "CA")

        _, kwargs = create.call_args
        self.assertEqual(kwargs["shipping_cost"], {"amount": 2500})
        self.assertEqual(kwargs["line_items"], [{"amount": 100000, "reference": "v1"}])
        self.assertEqual(kwargs["customer_details"]["address_source"], "shipping")

    @mock.patch("stripe.tax.Calculation.create")
    def test_no_shipping_cost_without_delivery(self, create):
        create.return_value = stripe_calculation(0, 100000)

        estimate_tax([TaxableLineItem(amount=100000, reference="v1")], SF_ADDRESS)

        _, kwargs = create.call_args
        self.assertNotIn("shipping_cost", kwargs)

    @mock.patch("stripe.tax.Calculation.create")
    def test_stripe_error(self, create):
        create.side_effect = stripe.StripeError("Invalid address")

        result = estimate_tax([TaxableLineItem(amount=100000, reference="v1")], SF_ADDRESS)

        self.assertFalse(result["success"])
        self.assertEqual(result["tax_amount"], Decimal("0.00"))
        self.assertIsNone(result["calculation_id"])


class CalculateOrderTaxTests(SimpleTestCase):
    @mock.patch("stripe.tax.Calculation.create")
    def test_stripe_result(self, create):
        create.return_value = stripe_calculation(8625, 108625)

        result = calculate_order_tax([VENUE], {}, SF_ADDRESS, method="stripe_automatic")

        self.assertEqual(result["tax_amount"], Decimal("86.25"))
        self.assertEqual(result["line_items"], [{
            "amount": 100000,
            "reference": "v1",
            "tax_code": "txcd_20030000",
            "product_data": {"name": "Garden Venue", "description": "venues service"},
        }])

    @mock.patch("stripe.tax.Calculation.create")
    def test_zero_stripe_tax_falls_back_to_local_rate(self, create):
        create.return_value = stripe_calculation(0, 100000, "taxcalc_zero")

        result = calculate_order_tax([VENUE], {}, SF_ADDRESS, method="stripe_automatic")

        self.assertEqual(result["tax_amount"], Decimal("86.30"))
        self.assertIsNone(result["calculation_id"])

    @override_settings(TAX_CALCULATION_METHOD="manual")
    @mock.patch("stripe.tax.Calculation.create")
    def test_manual_mode_skips_stripe(self, create):
        result = calculate_order_tax([VENUE], {}, SF_ADDRESS, delivery_fee=20)

        create.assert_not_called()
        # 8.63% of (1000 + 20 delivery)
        self.assertEqual(result["tax_amount"], Decimal("88.03"))
        self.assertEqual(result["total_amount"], Decimal("1108.03"))

    @mock.patch("stripe.tax.Calculation.create")
    def test_location_string_uses_local_table(self, create):
        result = calculate_order_tax([VENUE], {}, "Houston, Texas")

        create.assert_not_called()
        self.assertEqual(result["tax_amount"], Decimal("62.50"))

    def test_address_to_string(self):
        self.assertEqual(address_to_string(SF_ADDRESS), "500 Market St San Francisco, CA 94105")
        self.assertEqual(address_to_string(None), "")
