# pricing/serializers.py

from rest_framework import serializers


class CoordinatesSerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)


class DeliveryQuoteRequestSerializer(serializers.Serializer):
    delivery_address = serializers.CharField(allow_blank=True)
    delivery_options = serializers.JSONField(required=False, allow_null=True)
    order_subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    distance_miles = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True)
    vendor_location = CoordinatesSerializer(required=False)
    delivery_location = CoordinatesSerializer(required=False)
    service_id = serializers.CharField(required=False, allow_blank=True)
    vendor_id = serializers.CharField(required=False, allow_blank=True)
    use_api = serializers.BooleanField(required=False, default=False)

    def validate_delivery_options(self, value):
        # Malformed options are priced as "misconfigured"; only the outer type is checked here
        if value is not None and not isinstance(value, dict):
            raise serializers.ValidationError("delivery_options must be an object.")
        return value

    def validate(self, attrs):
        if attrs.get("distance_miles") is not None and attrs["distance_miles"] < 0:
            raise serializers.ValidationError({"distance_miles": "Distance cannot be negative."})
        return attrs


class CateringItemSerializer(serializers.Serializer):
    name = serializers.CharField()
    quantity = serializers.IntegerField(min_value=0, required=False, default=1)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=0)
    additional_charge = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=0)
    is_menu_item = serializers.BooleanField(required=False, default=False)


class ComboCategoryItemSerializer(serializers.Serializer):
    name = serializers.CharField()
    quantity = serializers.IntegerField(min_value=0, required=False, default=1)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=0)
    additional_charge = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=0)


class CateringQuoteRequestSerializer(serializers.Serializer):
    """
    Either pre-bucketed items (base_price_per_person + additional_charges)
    or a raw selection (selected_items + service_details).
    """
    guest_count = serializers.IntegerField(required=False, default=1)
    base_price_per_person = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    additional_charges = CateringItemSerializer(many=True, required=False)
    combo_category_items = ComboCategoryItemSerializer(many=True, required=False)
    selected_items = serializers.DictField(child=serializers.DecimalField(max_digits=10, decimal_places=2), required=False)
    service_details = serializers.JSONField(required=False, allow_null=True)
    service_id = serializers.CharField(required=False, allow_blank=True)

    def validate_service_details(self, value):
        if value is not None and not isinstance(value, dict):
            raise serializers.ValidationError("service_details must be an object.")
        return value

    def validate(self, attrs):
        if "base_price_per_person" not in attrs and "selected_items" not in attrs:
            raise serializers.ValidationError(
                "Provide base_price_per_person or selected_items with service_details."
            )
        return attrs


class TaxLineItemsRequestSerializer(serializers.Serializer):
    services = serializers.ListField(child=serializers.DictField(), allow_empty=True)
    selected_items = serializers.DictField(child=serializers.DecimalField(max_digits=10, decimal_places=2), required=False, default=dict)
    service_fee = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    delivery_fee = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    adjustments_total = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    guest_count = serializers.IntegerField(required=False, default=1)


class TaxEstimateRequestSerializer(TaxLineItemsRequestSerializer):
    address = serializers.JSONField()

    def validate_address(self, value):
        if isinstance(value, str):
            if not value.strip():
                raise serializers.ValidationError("Event location or billing address is required.")
            return value
        if not isinstance(value, dict) or not (value.get("postal_code") or value.get("city")):
            raise serializers.ValidationError("Address needs at least a postal_code or city.")
        return value



class AdjustmentSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True)
    label = serializers.CharField(required=False, allow_blank=True)
    type = serializers.ChoiceField(choices=["fixed", "percentage"], required=False, default="fixed")
    mode = serializers.ChoiceField(choices=["surcharge", "discount"], required=False, default="surcharge")
    value = serializers.DecimalField(max_digits=12, decimal_places=2)
    taxable = serializers.BooleanField(required=False, default=True)


class ServiceFeeSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=["percentage", "fixed", "hybrid"], required=False, default="percentage")
    percentage = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, min_value=0)
    fixed = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0, min_value=0)


class OrderTotalsRequestSerializer(serializers.Serializer):
    services = serializers.ListField(child=serializers.DictField(), allow_empty=True)
    selected_items = serializers.DictField(child=serializers.DecimalField(max_digits=10, decimal_places=2), required=False, default=dict)
    delivery_address = serializers.CharField(required=False, allow_blank=True, default="")
    distance_miles = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True, min_value=0)
    distances_by_service = serializers.DictField(
        child=serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0), required=False, default=dict,
    )
    service_fee = ServiceFeeSerializer(required=False)
    adjustments = AdjustmentSerializer(many=True, required=False, default=list)
    tax_exempt = serializers.BooleanField(required=False, default=False)
    service_fee_waived = serializers.BooleanField(required=False, default=False)
    guest_count = serializers.IntegerField(required=False, default=1)
