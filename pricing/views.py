# pricing/views.py

import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .serializers import (
    CateringQuoteRequestSerializer,
    DeliveryQuoteRequestSerializer,
    OrderTotalsRequestSerializer,
    TaxEstimateRequestSerializer,
    TaxLineItemsRequestSerializer,
)
from .services.catering import (
    calculate_catering_from_selections,
    calculate_catering_price,
    format_catering_calculation,
)
from .services.delivery import calculate_delivery, delivery_options_display
from .services.delivery_api import ApiDeliveryCalculator
from .services.order_totals import calculate_order_totals
from .services.stripe_tax import calculate_order_tax
from .services.tax_line_items import build_tax_line_items
from .utils.distance import coerce_coordinates, distance_miles_between

logger = logging.getLogger(__name__)


# -------------------------
# DELIVERY
# -------------------------

@api_view(['POST'])
@permission_classes([AllowAny])
def delivery_quote(request):
    """
    Delivery fee and eligibility for one service.

    The distance comes from `distance_miles`, or is measured between
    `vendor_location` and `delivery_location` when both are sent. With
    `use_api` the remote delivery service is asked first.
    """
    serializer = DeliveryQuoteRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    distance = data.get("distance_miles")
    if distance is None:
        distance = distance_miles_between(
            coerce_coordinates(data.get("vendor_location")),
            coerce_coordinates(data.get("delivery_location")),
        )

    options = data.get("delivery_options")

    if data["use_api"]:
        quote = ApiDeliveryCalculator().calculate(
            data["delivery_address"],
            options,
            data["order_subtotal"],
            distance_miles=distance,
            service_id=data.get("service_id") or None,
            vendor_id=data.get("vendor_id") or None,
        )
    else:
        quote = calculate_delivery(data["delivery_address"], options, data["order_subtotal"], distance)

    payload = quote.as_dict()
    payload["distance_miles"] = distance
    payload["options_display"] = delivery_options_display(options)
    return Response(payload)


# -------------------------
# CATERING
# -------------------------

@api_view(['POST'])
@permission_classes([AllowAny])
def catering_quote(request):
    serializer = CateringQuoteRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    if "selected_items" in data:
        calculation = calculate_catering_from_selections(
            data["selected_items"],
            data.get("service_details") or {},
            data["guest_count"],
            service_id=data.get("service_id") or None,
        )
    else:
        calculation = calculate_catering_price(
            data["base_price_per_person"],
            data.get("additional_charges", []),
            data["guest_count"],
            data.get("combo_category_items", []),
        )

    payload = calculation.as_dict()
    payload["summary"] = format_catering_calculation(calculation)
    return Response(payload)


# -------------------------
# TAX
# -------------------------

@api_view(['POST'])
@permission_classes([AllowAny])
def tax_line_items(request):
    serializer = TaxLineItemsRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    line_items = build_tax_line_items(
        data["services"],
        data["selected_items"],
        data["service_fee"],
        data["delivery_fee"],
        data["adjustments_total"],
        guest_count=data["guest_count"],
    )
    return Response({
        "line_items": [item.as_dict() for item in line_items],
        "shipping_cost": data["delivery_fee"],
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def tax_estimate(request):
    serializer = TaxEstimateRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    result = calculate_order_tax(
        data["services"],
        data["selected_items"],
        data["address"],
        service_fee=data["service_fee"],
        delivery_fee=data["delivery_fee"],
        adjustments_total=data["adjustments_total"],
    )

    if not result["success"]:
        logger.warning(f"Tax estimate failed: {result['message']}")
        return Response({"error": result["message"]}, status=502)

    return Response(result)


# -------------------------
# ORDER TOTALS
# -------------------------

@api_view(['POST'])
@permission_classes([AllowAny])
def order_totals(request):
    """
    Subtotal, service fee, delivery, adjustments, tax and total for a whole order.

    Delivery is quoted per service against that service's own subtotal, using
    `distances_by_service[service_id]` or the order-wide `distance_miles`.
    """
    serializer = OrderTotalsRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    totals = calculate_order_totals(
        data["services"],
        data["selected_items"],
        delivery_address=data["delivery_address"],
        fee_settings=data.get("service_fee"),
        distance_miles=data.get("distance_miles"),
        adjustments=data["adjustments"],
        distances_by_service=data["distances_by_service"],
        tax_exempt=data["tax_exempt"],
        service_fee_waived=data["service_fee_waived"],
        guest_count=data["guest_count"],
    )
    return Response(totals.as_dict())
