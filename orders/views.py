"""Orders API endpoints for the authenticated customer.

Checkout turns the caller's cart into a pending order; the remaining views
read the caller's orders or cancel one while it is still pending.
"""

from drf_spectacular.utils import OpenApiExample, extend_schema, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import IsCustomer

from .serializers import OrderItemSerializer, OrderSerializer
from .services import cancel_order, get_order_detail, list_orders_for_user, place_order

MessageResponse = inline_serializer(name="OrderMessage", fields={"message": rf_serializers.CharField()})


class OrderListView(APIView):
    """Place an order from the cart, or list the caller's orders."""

    permission_classes = [IsCustomer]

    def get_throttles(self):
        self.throttle_scope = "orders" if self.request.method == "GET" else "orders_write"
        return super().get_throttles()

    @extend_schema(
        tags=["Orders"],
        summary="List my orders",
        description="Returns the caller's orders, newest first.",
        responses={
            200: inline_serializer(
                name="OrderList",
                fields={"message": rf_serializers.CharField(), "orders": OrderSerializer(many=True)},
            )
        },
    )
    def get(self, request):
        orders = list_orders_for_user(user=request.user)
        return Response({"message": "Orders fetched", "orders": OrderSerializer(orders, many=True).data})

    @extend_schema(
        tags=["Orders"],
        summary="Place order",
        description=(
            "Creates a pending order from the caller's cart. Stock is validated and decremented, "
            "and the cart is emptied, in one transaction. Nothing is written when any step fails."
        ),
        request=None,
        responses={
            201: inline_serializer(
                name="OrderPlaced",
                fields={"message": rf_serializers.CharField(), "orderId": rf_serializers.IntegerField()},
            ),
            400: MessageResponse,
            500: MessageResponse,
        },
        examples=[
            OpenApiExample(
                "Placed",
                value={"message": "Order placed successfully", "orderId": 42},
                response_only=True,
                status_codes=["201"],
            ),
            OpenApiExample(
                "Insufficient stock",
                value={"message": "Insufficient stock for product 7", "product_id": 7},
                response_only=True,
                status_codes=["400"],
            ),
        ],
    )
    def post(self, request):
        order = place_order(user=request.user)
        return Response(
            {"message": "Order placed successfully", "orderId": order.id},
            status=status.HTTP_201_CREATED,
        )


class OrderDetailView(APIView):
    """Retrieve a single order with its lines for its owner or an admin."""

    permission_classes = [IsCustomer]
    throttle_scope = "orders"

    @extend_schema(
        tags=["Orders"],
        summary="Get order detail",
        description="Orders the caller may not see are reported as not found.",
        responses={
            200: inline_serializer(
                name="OrderDetail",
                fields={
                    "message": rf_serializers.CharField(),
                    "order": OrderSerializer(),
                    "items": OrderItemSerializer(many=True),
                },
            ),
            404: MessageResponse,
        },
        examples=[
            OpenApiExample(
                "Detail",
                value={
                    "message": "Order fetched",
                    "order": {
                        "id": 42,
                        "total": "25.00",
                        "status": "pending",
                        "tracking_number": None,
                        "created_at": "2025-01-01T12:00:00Z",
                        "updated_at": "2025-01-01T12:00:00Z",
                    },
                    "items": [
                        {
                            "id": 1,
                            "product_id": 7,
                            "name": "Linen Shirt",
                            "image_url": "https://cdn.example.com/shirt.jpg",
                            "quantity": 2,
                            "price": "10.00",
                            "line_total": "20.00",
                        }
                    ],
                },
                response_only=True,
            )
        ],
    )
    def get(self, request, order_id: int):
        order = get_order_detail(user=request.user, order_id=order_id)
        return Response(
            {
                "message": "Order fetched",
                "order": OrderSerializer(order).data,
                "items": OrderItemSerializer(order.items.all(), many=True).data,
            }
        )


class OrderCancelView(APIView):
    """Cancel one of the caller's orders while it is pending."""

    permission_classes = [IsCustomer]
    throttle_scope = "orders_write"

    @extend_schema(
        tags=["Orders"],
        summary="Cancel order",
        description="Only pending orders can be cancelled; any other status is rejected and left unchanged.",
        request=None,
        responses={
            200: inline_serializer(
                name="OrderCancelled",
                fields={"message": rf_serializers.CharField(), "order": OrderSerializer()},
            ),
            400: MessageResponse,
            404: MessageResponse,
        },
        examples=[
            OpenApiExample(
                "Not pending",
                value={"message": "Only pending orders can be cancelled"},
                response_only=True,
                status_codes=["400"],
            )
        ],
    )
    def patch(self, request, order_id: int):
        order = cancel_order(user=request.user, order_id=order_id)
        return Response({"message": "Order cancelled", "order": OrderSerializer(order).data})
