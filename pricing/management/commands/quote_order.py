# pricing/management/commands/quote_order.py

import json

from django.core.management.base import BaseCommand, CommandError
from django.core.serializers.json import DjangoJSONEncoder

from pricing.exceptions import PricingConfigurationError
from pricing.service_details import CateringDetails, normalize_service
from pricing.services.catering import calculate_catering_from_selections
from pricing.services.order_totals import calculate_order_totals
from pricing.services.tax_line_items import build_tax_line_items


class Command(BaseCommand):
    help = 'Price an order from a JSON file: order totals, catering breakdown and tax line items'

    def add_arguments(self, parser):
        parser.add_argument('order_file', help='Path to the order JSON file')
        parser.add_argument(
            '--guests',
            type=int,
            default=None,
            help='Guest count (overrides guest_count in the file)',
        )
        parser.add_argument(
            '--distance',
            type=float,
            default=None,
            help='Delivery distance in miles (overrides distance_miles in the file)',
        )
        parser.add_argument(
            '--tax-exempt',
            action='store_true',
            help='Price the order without tax',
        )

    def handle(self, *args, **options):
        try:
            with open(options['order_file'], encoding='utf-8') as fh:
                order = json.load(fh)
        except OSError as e:
            raise CommandError(f"Cannot read {options['order_file']}: {e}")
        except json.JSONDecodeError as e:
            raise CommandError(f"Invalid JSON in {options['order_file']}: {e}")

        services = order.get('services') or []
        selected_items = order.get('selected_items') or {}
        guests = options['guests'] if options['guests'] is not None else order.get('guest_count', 1)
        distance = options['distance'] if options['distance'] is not None else order.get('distance_miles')

        catering = []
        for index, raw in enumerate(services):
            try:
                service = normalize_service(raw, index)
            except PricingConfigurationError as e:
                self.stdout.write(self.style.WARNING(f'Skipping service #{index}: {e}'))
                continue

            if isinstance(service.details, CateringDetails):
                calculation = calculate_catering_from_selections(selected_items, service.details, guests, service.id)
                catering.append({'service_id': service.id, **calculation.as_dict()})

        totals = calculate_order_totals(
            services,
            selected_items,
            delivery_address=order.get('delivery_address', ''),
            fee_settings=order.get('service_fee'),
            distance_miles=distance,
            adjustments=order.get('adjustments'),
            distances_by_service=order.get('distances_by_service'),
            tax_exempt=options['tax_exempt'] or bool(order.get('tax_exempt')),
            service_fee_waived=bool(order.get('service_fee_waived')),
            guest_count=guests,
        )

        line_items = build_tax_line_items(
            services,
            selected_items,
            totals.service_fee,
            totals.delivery_fee,
            totals.taxable_adjustments_total,
            guest_count=guests,
        )

        result = {
            'totals': totals.as_dict(),
            'catering': catering,
            'line_items': [item.as_dict() for item in line_items],
            'shipping_cost': totals.delivery_fee,
        }
        self.stdout.write(json.dumps(result, cls=DjangoJSONEncoder, indent=2))
        self.stdout.write(self.style.SUCCESS(f'Priced {len(services)} service(s), {len(line_items)} line item(s).'))
