from rest_framework import serializers


class LineItemReadSerializer(serializers.Serializer):
    productId = serializers.CharField(source="product_id")
    name = serializers.CharField()
    image = serializers.CharField(allow_blank=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    countInStock = serializers.IntegerField(source="count_in_stock")
    qty = serializers.IntegerField(source="quantity")
    lineTotal = serializers.DecimalField(
        source="line_total", max_digits=14, decimal_places=2
    )


class CartTotalsSerializer(serializers.Serializer):
    itemCount = serializers.IntegerField(source="item_count")
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2)


class CartReadSerializer(serializers.Serializer):
    items = LineItemReadSerializer(many=True)
    totals = CartTotalsSerializer()


class CartAddRequestSerializer(serializers.Serializer):
    # Quantities are validated by the reconciler so that a rejected add
    # reports the same error shape as a rejected quantity change.
    productId = serializers.CharField()
    qty = serializers.IntegerField(required=False)


class CartQuantityRequestSerializer(serializers.Serializer):
    qty = serializers.IntegerField()


class CheckoutResponseSerializer(serializers.Serializer):
    redirect = serializers.CharField()
    requiresLogin = serializers.BooleanField(source="requires_login")


def cart_payload(cart, totals) -> dict:
    return CartReadSerializer({"items": cart.items, "totals": totals}).data
