"""Admin registration for cart models.

Shows cart lines inline on the cart page for support staff.
"""

from django.contrib import admin

from .models import Cart, CartItem


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    fields = ("product", "variant", "quantity", "price", "added_at")
    readonly_fields = ("added_at",)
    raw_id_fields = ("product",)


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "item_count", "created_at")
    search_fields = ("user__email", "user__username")
    inlines = [CartItemInline]

    @admin.display(description="Items")
    def item_count(self, obj):
        return obj.items.count()


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("id", "cart", "product", "variant", "quantity", "price")
    search_fields = ("product__name", "variant")
    raw_id_fields = ("cart", "product")
