"""Admin routes for order management."""

from django.urls import path

from .admin_views import AdminOrderListView, AdminOrderStatusView

app_name = "orders_admin"

urlpatterns = [
    path("", AdminOrderListView.as_view(), name="admin-order-list"),
    path("<int:order_id>/", AdminOrderStatusView.as_view(), name="admin-order-status"),
]
