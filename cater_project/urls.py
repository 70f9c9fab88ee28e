# cater_project/urls.py

from django.urls import path, include

urlpatterns = [
    # Pricing / delivery / tax quotes
    path('api/pricing/', include('pricing.urls')),
]
