from decimal import Decimal

from django.test import SimpleTestCase

from pricing.services.order_totals import (
    ServiceFeeSettings,
    apply_adjustments,
    calculate_order_totals,
    calculate_service_total,
)

CATERING = {
    "id": "c1",
    "name": "Taco Catering",
    "vendorName": "Taco Co",
    "serviceType": "catering",
    "price": 20,
    "vendor": {"full_address": "500 Market St, San Francisco, CA 94105"},
    "service_details": {
        "menuItems": [{"id": "salad", "name": "Garden Salad", "price": 4}],
        "combos": [{"id": "taco", "name": "Taco Bar", "pricePerPerson": 20}],
        "deliveryOptions": {
            "delivery": True,
            "pickup": True,
            "deliveryRanges": [{"range": "0-10", "fee": 0}, {"range": "10-25", "fee": 15}],
            "deliveryMinimum": 300,
        },
    },
}

VENUE = {"id": "v1", "name": "Garden Venue", "serviceType": "venues", "price": 1000}

SELECTED = {"c1_taco": 1, "c1_salad": 1}
OAKLAND = "1 Main St, Oakland, CA 94612"


def order_totals(**kwargs):
    kwargs.setdefault("guest_count", 10)
    return calculate_order_totals([CATERING, VENUE], SELECTED, **kwargs)


class ServiceTotalTests(SimpleTestCase):
    def test_catering_selection(self):
        # 20 x 10 base + salad 4 x 10
        self.assertEqual(calculate_service_total(CATERING, SELECTED, 10), Decimal("240"))

    def test_whole_service(self):
        self.assertEqual(calculate_service_total(VENUE, {}), Decimal("1000"))

    def test_per_person_service_without_selection(self):
        service = {"id": "d1", "serviceType": "catering", "price": 6, "priceType": "per_person"}
        self.assertEqual(calculate_service_total(service, {}, 50), Decimal("300"))

    def test_precomputed_total_wins(self):
        service = {"id": "x", "serviceType": "venues", "price": 10, "totalPrice": "99.50"}
        self.assertEqual(calculate_service_total(service, {}), Decimal("99.50"))


class ServiceFeeTests(SimpleTestCase):
    def test_default_is_five_percent(self):
        self.assertEqual(ServiceFeeSettings.from_dict(None).fee_for(Decimal("1240")), Decimal("62"))

    def test_fixed_and_hybrid(self):
        fixed = ServiceFeeSettings.from_dict({"type": "fixed", "fixed": 25})
        hybrid = ServiceFeeSettings.from_dict({"type": "hybrid", "percentage": 2, "fixed": 10})

        self.assertEqual(fixed.fee_for(Decimal("1240")), Decimal("25"))
        self.assertEqual(hybrid.fee_for(Decimal("1240")), Decimal("34.8"))

    def test_waived(self):
        totals = order_totals(service_fee_waived=True)

        self.assertEqual(totals.service_fee, Decimal("0"))
        self.assertTrue(totals.is_service_fee_waived)


class AdjustmentTests(SimpleTestCase):
    def test_percentage_surcharge_and_fixed_discount(self):
        breakdown = apply_adjustments([
            {"label": "Rush", "type": "percentage", "value": 10},
            {"label": "Loyalty", "type": "fixed", "mode": "discount", "value": 50, "taxable": False},
        ], Decimal("1240"))

        self.assertEqual([a["amount"] for a in breakdown], [Decimal("124.00"), Decimal("-50.00")])
        self.assertEqual([a["taxable"] for a in breakdown], [True, False])

    def test_entries_without_value_ignored(self):
        with self.assertLogs("pricing.services.order_totals", level="WARNING"):
            breakdown = apply_adjustments([{"label": "Oops"}, "junk"], Decimal("100"))
        self.assertEqual(breakdown, [])


class CalculateOrderTotalsTests(SimpleTestCase):
    def test_without_delivery_address(self):
        totals = order_totals()

        self.assertEqual(totals.subtotal, Decimal("1240"))
        self.assertEqual(totals.service_subtotals, {"c1": Decimal("240"), "v1": Decimal("1000")})
        self.assertEqual(totals.service_fee, Decimal("62.00"))
        self.assertEqual(totals.delivery_fee, Decimal("0"))
        self.assertEqual(totals.delivery_details["reason"], "No delivery services selected")
        self.assertEqual(totals.tax, Decimal("0"))
        self.assertEqual(totals.tax_data["description"], "No tax")
        self.assertEqual(totals.total, Decimal("1302.00"))

    def test_delivery_minimum_checked_per_service(self):
        totals = order_totals(delivery_address=OAKLAND, distance_miles=18)

        # The order is well above 300, but the caterer's own share is 240
        self.assertEqual(totals.delivery_fee, Decimal("15"))
        self.assertTrue(totals.delivery_details["eligible"])
        self.assertEqual(totals.delivery_details["range"], "10-25")
        self.assertEqual(totals.delivery_details["minimum_warnings"], [
            {"vendor": "Taco Co", "required": Decimal("300"), "current": Decimal("240")},
        ])

        quote = totals.delivery_quotes["c1"]
        self.assertFalse(quote["minimum_eligible"])
        self.assertEqual(quote["origin"], "500 Market St, San Francisco, CA 94105")
        self.assertNotIn("v1", totals.delivery_quotes)

        # Oakland 10.75% on 1240 + 62 + 15
        self.assertEqual(totals.tax, Decimal("141.58"))
        self.assertEqual(totals.total, Decimal("1458.58"))

    def test_per_service_distance(self):
        totals = order_totals(delivery_address=OAKLAND, distance_miles=4, distances_by_service={"c1": 40})

        self.assertEqual(totals.delivery_fee, Decimal("0"))
        self.assertFalse(totals.delivery_details["eligible"])
        self.assertEqual(totals.delivery_details["reason"], "Delivery not available beyond 25 miles")

    def test_taxable_adjustments_only(self):
        totals = order_totals(
            delivery_address=OAKLAND,
            adjustments=[
                {"label": "Rush", "type": "percentage", "value": 10},
                {"label": "Loyalty", "mode": "discount", "value": 50, "taxable": False},
            ],
        )

        self.assertEqual(totals.adjustments_total, Decimal("74.00"))
        self.assertEqual(totals.taxable_adjustments_total, Decimal("124.00"))
        # 10.75% on 1240 + 62 + 0 delivery + 124
        self.assertEqual(totals.tax, Decimal("153.30"))
        self.assertEqual(totals.total, Decimal("1240") + Decimal("62.00") + Decimal("74.00") + Decimal("153.30"))

    def test_tax_exempt(self):
        totals = order_totals(delivery_address=OAKLAND, distance_miles=4, tax_exempt=True)

        self.assertEqual(totals.tax, Decimal("0"))
        self.assertEqual(totals.tax_data["jurisdiction"], "Tax Exempt")
        self.assertTrue(totals.is_tax_exempt)

    def test_malformed_service_left_out(self):
        broken = {"id": "bad", "serviceType": "catering", "service_details": "oops"}

        with self.assertLogs("pricing.services.order_totals", level="ERROR"):
            totals = calculate_order_totals([broken, VENUE], {})

        self.assertEqual(totals.skipped_services, ["bad"])
        self.assertEqual(totals.subtotal, Decimal("1000"))

    def test_same_inputs_same_totals(self):
        first = order_totals(delivery_address=OAKLAND, distance_miles=18)
        second = order_totals(delivery_address=OAKLAND, distance_miles=18)
        self.assertEqual(first.as_dict(), second.as_dict())
