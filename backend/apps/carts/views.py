from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from apps.api.utils import error_response
from apps.api.schemas import ErrorResponseSerializer
from apps.auth.session import AuthSession
from apps.catalog.container import build_product_service
from apps.common import get_logger
from apps.common import i18n
from .commands import CartAddCommand, CartQuantityCommand
from .container import build_cart_service
from .reconciler import CartError, CartItemNotFoundError, InvalidQuantityError
from .services import EmptyCartError, ProductNotFoundError, ProductUnavailableError
from .storage import CartStorageLimitError
from .serializers import (
    CartReadSerializer,
    CartAddRequestSerializer,
    CartQuantityRequestSerializer,
    CheckoutResponseSerializer,
    cart_payload,
)

logger = get_logger(__name__).bind(component="carts", layer="view")

PRODUCT_ID_PARAMETER = OpenApiParameter("product_id", str, OpenApiParameter.PATH)


def cart_error_response(exc: CartError):
    if isinstance(exc, InvalidQuantityError):
        if exc.maximum is None:
            message = str(i18n.INVALID_QUANTITY)
        else:
            message = str(i18n.QUANTITY_OUT_OF_RANGE) % {
                "minimum": exc.minimum,
                "maximum": exc.maximum,
            }
        return error_response("VALIDATION_ERROR", message, exc.details)
    if isinstance(exc, CartItemNotFoundError):
        return error_response("NOT_FOUND", str(i18n.CART_ITEM_NOT_FOUND), exc.details)
    if isinstance(exc, ProductNotFoundError):
        return error_response("NOT_FOUND", str(i18n.PRODUCT_NOT_FOUND), exc.details)
    if isinstance(exc, ProductUnavailableError):
        return error_response(
            "SERVICE_UNAVAILABLE",
            str(i18n.PRODUCT_SERVICE_UNAVAILABLE),
            exc.details,
            hint="The cart was left unchanged. Retry once the product service is reachable.",
        )
    if isinstance(exc, EmptyCartError):
        return error_response("VALIDATION_ERROR", str(i18n.CART_EMPTY))
    if isinstance(exc, CartStorageLimitError):
        return error_response("VALIDATION_ERROR", str(i18n.CART_TOO_LARGE), exc.details)
    return error_response("VALIDATION_ERROR", exc.message, exc.details or None)


class SessionCartView(APIView):
    permission_classes = [AllowAny]
    products = build_product_service()

    def cart_service(self, request):
        return build_cart_service(request.session, products=self.products)


@extend_schema(tags=["Cart"])
class CartView(SessionCartView):
    log = logger.bind(view="CartView")

    @extend_schema(summary="Get the session cart", responses={200: CartReadSerializer})
    def get(self, request):
        cart, totals = self.cart_service(request).get_cart()
        self.log.debug("Returning cart", items=len(cart))
        return Response(cart_payload(cart, totals))

    @extend_schema(
        summary="Empty the session cart", request=None, responses={200: CartReadSerializer}
    )
    def delete(self, request):
        cart, totals = self.cart_service(request).clear()
        self.log.info("Cart cleared via API")
        return Response(cart_payload(cart, totals))


@extend_schema(tags=["Cart"])
class CartItemsView(SessionCartView):
    log = logger.bind(view="CartItemsView")

    @extend_schema(
        summary="Add a product to the cart",
        description=(
            "Fetches the product from the product service and stores a snapshot of it in "
            "the cart. Adding a product that is already in the cart replaces its quantity "
            "instead of summing. The quantity may also be given as ?qty and defaults to 1."
        ),
        parameters=[
            OpenApiParameter(
                name="qty",
                type=int,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Quantity fallback when the body carries none",
            )
        ],
        request=CartAddRequestSerializer,
        responses={
            200: CartReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
            503: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = CartAddRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        command = CartAddCommand.from_raw(serializer.validated_data, request.query_params)
        if command is None:
            return error_response(
                "VALIDATION_ERROR", "productId is required", {"productId": None}
            )
        try:
            cart, totals = self.cart_service(request).add_product(
                command, language=getattr(request, "LANGUAGE_CODE", None)
            )
        except CartError as exc:
            self.log.warning(
                "Add to cart rejected",
                product_id=command.product_id,
                error=exc.__class__.__name__,
            )
            return cart_error_response(exc)
        self.log.info(
            "Product added to cart",
            product_id=command.product_id,
            quantity=command.quantity,
        )
        return Response(cart_payload(cart, totals))


@extend_schema(tags=["Cart"])
class CartItemDetailView(SessionCartView):
    log = logger.bind(view="CartItemDetailView")

    @extend_schema(
        summary="Change a line item's quantity",
        parameters=[PRODUCT_ID_PARAMETER],
        request=CartQuantityRequestSerializer,
        responses={
            200: CartReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def patch(self, request, product_id: str):
        serializer = CartQuantityRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        command = CartQuantityCommand.from_raw(product_id, serializer.validated_data)
        if command is None:
            return error_response("VALIDATION_ERROR", "productId is required")
        try:
            cart, totals = self.cart_service(request).set_quantity(command)
        except CartError as exc:
            self.log.warning(
                "Quantity change rejected",
                product_id=command.product_id,
                error=exc.__class__.__name__,
            )
            return cart_error_response(exc)
        return Response(cart_payload(cart, totals))

    @extend_schema(
        summary="Remove a product from the cart",
        description="Removing a product that is not in the cart succeeds and changes nothing.",
        parameters=[PRODUCT_ID_PARAMETER],
        request=None,
        responses={200: CartReadSerializer},
    )
    def delete(self, request, product_id: str):
        cart, totals = self.cart_service(request).remove_product(str(product_id))
        self.log.info("Product removed from cart", product_id=product_id)
        return Response(cart_payload(cart, totals))


@extend_schema(tags=["Cart"])
class CheckoutView(SessionCartView):
    log = logger.bind(view="CheckoutView")

    @extend_schema(
        summary="Proceed to checkout",
        description=(
            "Returns where the storefront should navigate next: the shipping step for "
            "signed-in shoppers, otherwise the login page with redirect=shipping."
        ),
        request=None,
        responses={
            200: CheckoutResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        try:
            decision = self.cart_service(request).begin_checkout(
                AuthSession(request.session)
            )
        except CartError as exc:
            return cart_error_response(exc)
        self.log.info(
            "Checkout started",
            redirect=decision.redirect,
            requires_login=decision.requires_login,
        )
        return Response(CheckoutResponseSerializer(decision).data)
