"""DRF views for cart operations."""

from common.exceptions import NotFoundError
from drf_spectacular.utils import OpenApiExample, extend_schema, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import IsCustomer

from .models import CartItem
from .selectors import cart_totals, get_cart_for_user, list_cart_items
from .serializers import AddItemSerializer, CartItemReadSerializer, UpdateItemQuantitySerializer
from .services import clear_cart, remove_item

MessageResponse = inline_serializer(name="CartMessage", fields={"message": rf_serializers.CharField()})


class CartView(APIView):
    """Read, add to, or clear the authenticated user's cart."""

    permission_classes = [IsCustomer]

    def get_throttles(self):
        self.throttle_scope = "cart" if self.request.method == "GET" else "cart_write"
        return super().get_throttles()

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Get cart",
        description="Returns the cart lines with captured prices. Empty list when the user has no cart.",
        examples=[
            OpenApiExample(
                "Cart",
                value={
                    "message": "Cart fetched",
                    "items": [
                        {
                            "id": 10,
                            "product_id": 100,
                            "name": "Linen Shirt",
                            "variant": "Size: M",
                            "quantity": 2,
                            "price": "10.00",
                            "line_total": "20.00",
                        }
                    ],
                    "subtotal": "20.00",
                    "total": "20.00",
                },
            )
        ],
    )
    def get(self, request):
        cart = get_cart_for_user(user=request.user)
        items = CartItemReadSerializer(list_cart_items(cart=cart), many=True).data
        totals = cart_totals(cart=cart)
        return Response(
            {
                "message": "Cart fetched",
                "items": items,
                "subtotal": str(totals["subtotal"]),
                "total": str(totals["total"]),
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Add item to cart",
        description="Adds a product (and optional variant). Re-adding the same pair increments the quantity.",
        request=AddItemSerializer,
        responses={201: CartItemReadSerializer, 400: MessageResponse, 404: MessageResponse},
        examples=[OpenApiExample("Add", value={"product_id": 100, "variant": "Size: M", "quantity": 2})],
    )
    def post(self, request):
        serializer = AddItemSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        item = serializer.save()
        return Response(
            {"message": "Item added to cart", "item": CartItemReadSerializer(item).data},
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Clear cart",
        description="Deletes every line in the cart. The cart itself is kept.",
        responses={200: MessageResponse},
    )
    def delete(self, request):
        clear_cart(user=request.user)
        return Response({"message": "Cart cleared"}, status=status.HTTP_200_OK)


class CartItemView(APIView):
    """Update or remove a single line of the authenticated user's cart."""

    permission_classes = [IsCustomer]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Update cart item quantity",
        request=UpdateItemQuantitySerializer,
        responses={200: CartItemReadSerializer, 400: MessageResponse, 404: MessageResponse},
    )
    def patch(self, request, item_id: int):
        try:
            item = CartItem.objects.select_related("product").get(id=item_id, cart__user_id=request.user.id)
        except CartItem.DoesNotExist:
            raise NotFoundError("Cart item not found")
        serializer = UpdateItemQuantitySerializer(instance=item, data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        item = serializer.save()
        return Response({"message": "Quantity updated", "item": CartItemReadSerializer(item).data})

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Remove cart item",
        responses={200: MessageResponse, 404: MessageResponse},
    )
    def delete(self, request, item_id: int):
        remove_item(user=request.user, item_id=item_id)
        return Response({"message": "Item removed from cart"}, status=status.HTTP_200_OK)
