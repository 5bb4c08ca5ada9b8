"""Administrative order endpoints.

Restricted to callers holding the admin role and throttled under their own
scope.
"""

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import IsAdminRole

from .filters import OrderFilterSet
from .serializers import AdminOrderSerializer, OrderSerializer, OrderStatusUpdateSerializer
from .services import list_all_orders, update_order_status


class AdminBaseView(APIView):
    permission_classes = [IsAdminRole]
    throttle_scope = "orders_admin"


class AdminOrderListView(AdminBaseView):
    @extend_schema(
        tags=["Admin Endpoints"],
        summary="List all orders (admin)",
        description="Every order with its owner's id, name and email, newest first. Not paginated.",
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, location="query", description="Filter by order status"),
            OpenApiParameter("user", OpenApiTypes.INT, location="query", description="Filter by owner id"),
        ],
        responses={
            200: inline_serializer(
                name="AdminOrderList",
                fields={"message": rf_serializers.CharField(), "orders": AdminOrderSerializer(many=True)},
            )
        },
    )
    def get(self, request):
        filterset = OrderFilterSet(request.query_params, queryset=list_all_orders(), request=request)
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        orders = AdminOrderSerializer(filterset.qs, many=True).data
        return Response({"message": "Orders fetched", "orders": orders})


class AdminOrderStatusView(AdminBaseView):
    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Update order status (admin)",
        description=(
            "Sets any enumerated status regardless of the current one. The tracking number is "
            "overwritten with the given value; omitting it clears the stored one."
        ),
        request=OrderStatusUpdateSerializer,
        responses={
            200: inline_serializer(
                name="OrderStatusUpdated",
                fields={"message": rf_serializers.CharField(), "order": OrderSerializer()},
            )
        },
        examples=[
            OpenApiExample("Ship", value={"status": "shipped", "tracking_number": "1Z999AA10123456784"}),
            OpenApiExample(
                "Invalid status",
                value={"message": "Invalid status", "errors": {"status": ["Invalid status"]}},
                response_only=True,
                status_codes=["400"],
            ),
        ],
    )
    def patch(self, request, order_id: int):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = update_order_status(
            order_id=order_id,
            status=serializer.validated_data["status"],
            tracking_number=serializer.validated_data.get("tracking_number"),
            actor=request.user,
        )
        return Response({"message": "Order status updated", "order": OrderSerializer(order).data})
