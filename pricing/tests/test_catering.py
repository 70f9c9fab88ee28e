from decimal import Decimal

from django.test import SimpleTestCase

from pricing.services.catering import (
    calculate_catering_from_selections,
    calculate_catering_price,
    extract_catering_items,
    format_catering_calculation,
)

SERVICE_DETAILS = {
    "catering": {
        "menuItems": [
            {"id": "salad", "name": "Garden Salad", "price": 4},
            {"id": "lobster", "name": "Lobster Tail", "price": 12, "additionalCharge": 9},
        ],
        "combos": [
            {
                "id": "taco",
                "name": "Taco Bar",
                "pricePerPerson": 25,
                "comboCategories": [
                    {
                        "id": "protein",
                        "name": "Protein",
                        "maxSelections": 2,
                        "items": [
                            {"id": "chicken", "name": "Chicken", "price": 0},
                            {"id": "steak", "name": "Carne Asada", "price": 0, "additionalCharge": 3},
                        ],
                    },
                ],
            },
        ],
    },
}


class CalculateCateringPriceTests(SimpleTestCase):
    def test_premium_upgrade_example(self):
        calc = calculate_catering_price(25, [{"name": "Premium Upgrade", "additional_charge": 5}], 40)

        self.assertEqual(calc.base_price_total, Decimal("1000"))
        self.assertEqual(calc.additional_charges[0].total_price, Decimal("200"))
        self.assertEqual(calc.final_total, Decimal("1200"))

    def test_upcharge_ignores_quantity(self):
        calc = calculate_catering_price(10, [{"name": "Upgrade", "quantity": 7, "additionalCharge": 2}], 30)
        self.assertEqual(calc.additional_charges_total, Decimal("60"))

    def test_standalone_item_uses_unit_price_quantity_and_guests(self):
        calc = calculate_catering_price(10, [{"name": "Dessert", "quantity": 2, "unit_price": "3.50"}], 10)

        self.assertEqual(calc.additional_charges[0].total_price, Decimal("70.00"))
        self.assertEqual(calc.final_total, Decimal("170.00"))

    def test_zero_guests_behaves_like_one(self):
        zero = calculate_catering_price(25, [{"name": "Upgrade", "additional_charge": 5}], 0)
        one = calculate_catering_price(25, [{"name": "Upgrade", "additional_charge": 5}], 1)

        self.assertEqual(zero.guest_count, 1)
        self.assertEqual(zero.as_dict(), one.as_dict())

    def test_negative_guests_clamped(self):
        self.assertEqual(calculate_catering_price(25, [], -4).base_price_total, Decimal("25"))

    def test_negative_charge_is_a_discount(self):
        calc = calculate_catering_price(
            20,
            [{"name": "Staff discount", "quantity": 1, "unit_price": 0, "additional_charge": -2}],
            10,
        )

        self.assertEqual(calc.additional_charges_total, Decimal("-20"))
        self.assertEqual(calc.final_total, Decimal("180"))

    def test_final_total_is_exact(self):
        calc = calculate_catering_price(
            "19.995",
            [{"name": "Upgrade", "additional_charge": "0.333"}, {"name": "Side", "quantity": 3, "unit_price": "1.111"}],
            7,
        )

        self.assertEqual(calc.final_total, calc.base_price_total + calc.additional_charges_total)
        self.assertEqual(calc.final_total, Decimal("139.965") + Decimal("2.331") + Decimal("23.331"))

    def test_combo_items_premium_vs_included(self):
        calc = calculate_catering_price(
            25,
            [],
            10,
            [
                {"name": "Chicken", "quantity": 1, "price": 0},
                {"name": "Carne Asada", "quantity": 1, "price": 0, "additional_charge": 3},
            ],
        )

        self.assertEqual([item.name for item in calc.additional_charges], ["Carne Asada"])
        self.assertEqual([item.name for item in calc.included_items], ["Chicken"])
        self.assertEqual(calc.final_total, Decimal("280"))

    def test_summary_text(self):
        calc = calculate_catering_price(25, [{"name": "Premium Upgrade", "additional_charge": 5}], 40)
        summary = format_catering_calculation(calc)

        self.assertIn("Base Price: $25.00 x 40 guests = $1000.00", summary)
        self.assertIn("TOTAL: $1200.00", summary)


class ExtractCateringItemsTests(SimpleTestCase):
    def test_buckets(self):
        buckets = extract_catering_items(
            {"taco": 1, "salad": 2, "lobster": 1, "taco_protein_steak": 1, "taco_protein_chicken": 1, "missing": 3},
            SERVICE_DETAILS,
        )

        self.assertEqual([item["id"] for item in buckets["base_items"]], ["taco"])
        self.assertEqual(buckets["base_items"][0]["price"], Decimal("25"))

        charges = {item["id"]: item["additional_charge"] for item in buckets["additional_charge_items"]}
        self.assertEqual(charges, {"salad": Decimal("4"), "lobster": Decimal("9")})

        combo_names = [item["name"] for item in buckets["combo_category_items"]]
        self.assertEqual(combo_names, ["Carne Asada", "Chicken"])

    def test_skips_zero_quantities(self):
        buckets = extract_catering_items({"salad": 0, "taco": -1}, SERVICE_DETAILS)
        self.assertEqual(buckets, {"base_items": [], "additional_charge_items": [], "combo_category_items": []})

    def test_calculate_from_selections(self):
        calc = calculate_catering_from_selections(
            {"taco": 1, "salad": 1, "taco_protein_steak": 1, "taco_protein_chicken": 1},
            SERVICE_DETAILS,
            20,
        )

        # 25*20 base + salad 4*20 + steak upcharge 3*20
        self.assertEqual(calc.base_price_total, Decimal("500"))
        self.assertEqual(calc.additional_charges_total, Decimal("140"))
        self.assertEqual(calc.final_total, Decimal("640"))

    def test_service_prefixed_keys(self):
        calc = calculate_catering_from_selections(
            {"svc1_salad": 1},
            {"menuItems": [{"id": "salad", "price": 8}]},
            10,
            service_id="svc1",
        )
        self.assertEqual(calc.final_total, Decimal("80"))

    def test_service_prefixed_combo_category_key(self):
        buckets = extract_catering_items(
            {"svc1_taco": 1, "svc1_taco_protein_steak": 1},
            SERVICE_DETAILS,
            service_id="svc1",
        )

        self.assertEqual([item["id"] for item in buckets["base_items"]], ["taco"])
        self.assertEqual([item["name"] for item in buckets["combo_category_items"]], ["Carne Asada"])

    def test_prefixed_key_needs_matching_service(self):
        buckets = extract_catering_items({"svc2_salad": 1}, SERVICE_DETAILS, service_id="svc1")
        self.assertEqual(buckets["additional_charge_items"], [])


class MalformedCateringDetailsTests(SimpleTestCase):
    def test_catalog_entry_without_id_prices_as_empty(self):
        with self.assertLogs("pricing.services.catering", level="ERROR"):
            calc = calculate_catering_from_selections({"salad": 1}, {"menuItems": [{"price": 5}]}, 10)

        self.assertEqual(calc.final_total, Decimal("0"))
        self.assertEqual(calc.guest_count, 10)
        self.assertEqual(calc.additional_charges, [])

    def test_non_object_details_price_as_empty(self):
        with self.assertLogs("pricing.services.catering", level="ERROR"):
            calc = calculate_catering_from_selections({"salad": 1}, [1], 10)
        self.assertEqual(calc.final_total, Decimal("0"))


class RepeatablePricingTests(SimpleTestCase):
    def test_same_inputs_same_calculation(self):
        items = [
            {"name": "Premium Upgrade", "additional_charge": 5},
            {"name": "Cake", "unit_price": "3.10", "quantity": 2},
        ]
        combo_items = [{"name": "Carne Asada", "additional_charge": 3}, {"name": "Chicken"}]

        first = calculate_catering_price(25, items, 40, combo_items)
        second = calculate_catering_price(25, items, 40, combo_items)

        self.assertEqual(first, second)
        self.assertEqual(first.as_dict(), second.as_dict())
        # Inputs are not mutated
        self.assertEqual(items[0], {"name": "Premium Upgrade", "additional_charge": 5})
