from typing import Dict, Optional

from drf_spectacular.utils import inline_serializer
from rest_framework import serializers


class ErrorDetailSerializer(serializers.Serializer):
    code = serializers.CharField()
    message = serializers.CharField()
    status = serializers.IntegerField()
    details = serializers.JSONField(required=False)
    hint = serializers.CharField(required=False, allow_blank=True)


class ErrorResponseSerializer(serializers.Serializer):
    error = ErrorDetailSerializer()


def paginated_response(
    item_serializer_class: type[serializers.Serializer],
    extra_fields: Optional[Dict[str, serializers.Field]] = None,
) -> type[serializers.Serializer]:
    """Create an inline paginated response serializer with standard DRF PageNumberPagination shape.

    Returns a serializer with fields: count, next, previous, results[item_serializer],
    plus any ``extra_fields`` the endpoint adds next to them.
    """
    name = getattr(item_serializer_class, "__name__", "Items")
    fields = {
        "count": serializers.IntegerField(),
        "next": serializers.CharField(allow_null=True),
        "previous": serializers.CharField(allow_null=True),
        "results": item_serializer_class(many=True),
    }
    if extra_fields:
        fields.update(extra_fields)
    return inline_serializer(name=f"Paginated{name}", fields=fields)
