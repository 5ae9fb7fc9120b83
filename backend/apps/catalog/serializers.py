from rest_framework import serializers


class ProductReadSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    imageUrl = serializers.CharField(source="image_url", allow_blank=True)
    countInStock = serializers.IntegerField(source="count_in_stock")
    placeholder = serializers.BooleanField(required=False, default=False)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        # Only flag substitutes; real products keep the upstream shape.
        if not data.get("placeholder"):
            data.pop("placeholder", None)
        return data
