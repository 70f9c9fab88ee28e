# pricing/urls.py

from django.urls import path
from . import views

urlpatterns = [
    path('delivery/', views.delivery_quote, name='delivery_quote'),
    path('catering/', views.catering_quote, name='catering_quote'),
    path('tax-line-items/', views.tax_line_items, name='tax_line_items'),
    path('tax-estimate/', views.tax_estimate, name='tax_estimate'),
    path('order-totals/', views.order_totals, name='order_totals'),
]
