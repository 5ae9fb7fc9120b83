from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework import serializers
from .container import build_product_service
from .serializers import ProductReadSerializer
from apps.api.utils import error_response
from .pagination import ProductListPagination
from apps.common import get_logger
from apps.common import i18n
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from apps.api.schemas import paginated_response, ErrorResponseSerializer

logger = get_logger(__name__).bind(component="catalog", layer="view")


@extend_schema(tags=["Catalog"])
class ProductListView(APIView):
    permission_classes = [AllowAny]
    service = build_product_service()
    log = logger.bind(view="ProductListView")

    @extend_schema(
        operation_id="products_list",
        summary="List products",
        description=(
            "Proxies the product service listing. Supports pagination via ?page and ?limit. "
            "Cached results may be served. When the product service cannot be reached the "
            "response is empty and carries degraded=true."
        ),
        responses={
            200: paginated_response(
                ProductReadSerializer,
                extra_fields={"degraded": serializers.BooleanField()},
            )
        },
    )
    def get(self, request):
        language = getattr(request, "LANGUAGE_CODE", None)
        self.log.debug("Handling product list request", language=language)
        listing = self.service.list_products(language=language)
        if listing.degraded:
            self.log.warning("Serving degraded product list", error=listing.error)
        paginator = ProductListPagination()
        page = paginator.paginate_queryset(listing.products, request, view=self)
        data = ProductReadSerializer(page, many=True).data
        response = paginator.get_paginated_response(data)
        response.data["degraded"] = listing.degraded
        return response


@extend_schema(tags=["Catalog"])
class ProductDetailView(APIView):
    permission_classes = [AllowAny]
    service = build_product_service()
    log = logger.bind(view="ProductDetailView")

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product",
        parameters=[OpenApiParameter("product_id", str, OpenApiParameter.PATH)],
        responses={
            200: ProductReadSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
            503: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, product_id: str):
        self.log.debug("Fetching product detail", product_id=product_id)
        lookup = self.service.get_product(
            product_id, language=getattr(request, "LANGUAGE_CODE", None)
        )
        if lookup.ok:
            return Response(ProductReadSerializer(lookup.product).data)
        if lookup.degraded:
            if lookup.product is not None:
                self.log.warning("Serving placeholder product", product_id=product_id)
                return Response(ProductReadSerializer(lookup.product).data)
            return error_response(
                "SERVICE_UNAVAILABLE",
                str(i18n.PRODUCT_SERVICE_UNAVAILABLE),
                {"id": str(product_id)},
                hint="Retry once the product service is reachable.",
            )
        self.log.info("Product not found", product_id=product_id)
        return error_response(
            "NOT_FOUND", str(i18n.PRODUCT_NOT_FOUND), {"id": str(product_id)}
        )
