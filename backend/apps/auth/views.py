from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny
from apps.api.utils import error_response
from apps.common import get_logger
from drf_spectacular.utils import extend_schema, OpenApiResponse, OpenApiParameter
from apps.api.schemas import ErrorResponseSerializer
from .serializers import (
    LoginRequestSerializer,
    RegisterRequestSerializer,
    SignedInResponseSerializer,
    MeResponseSerializer,
    DetailResponseSerializer,
)
from .container import build_auth_service
from .session import AuthSession, resolve_redirect

logger = get_logger(__name__).bind(component="auth", layer="view")

REDIRECT_PARAMETER = OpenApiParameter(
    name="redirect",
    type=str,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Where to send the shopper after signing in, e.g. 'shipping'",
)


@extend_schema(tags=["Auth"])
class LoginView(APIView):
    permission_classes = [AllowAny]
    service = build_auth_service()
    log = logger.bind(view="LoginView")

    @extend_schema(
        summary="Sign in through the auth service",
        parameters=[REDIRECT_PARAMETER],
        request=LoginRequestSerializer,
        responses={
            200: SignedInResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            401: OpenApiResponse(response=ErrorResponseSerializer),
            503: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = LoginRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        user_info, error = self.service.login(data["email"], data["password"])
        if error:
            code, message, details = error
            self.log.warning("Login failed", code=code)
            return error_response(code, message, details)
        AuthSession(request.session).sign_in(user_info)
        redirect = resolve_redirect(request.query_params.get("redirect"))
        self.log.info("Shopper signed in", redirect=redirect)
        return Response(
            SignedInResponseSerializer({"user": user_info, "redirect": redirect}).data
        )


@extend_schema(tags=["Auth"])
class RegisterView(APIView):
    permission_classes = [AllowAny]
    service = build_auth_service()
    log = logger.bind(view="RegisterView")

    @extend_schema(
        summary="Register through the auth service",
        parameters=[REDIRECT_PARAMETER],
        request=RegisterRequestSerializer,
        responses={
            201: SignedInResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            503: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = RegisterRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        user_info, error = self.service.register(
            data["name"], data["email"], data["password"], data["confirmPassword"]
        )
        if error:
            code, message, details = error
            self.log.warning("Registration failed", code=code)
            return error_response(code, message, details)
        AuthSession(request.session).sign_in(user_info)
        redirect = resolve_redirect(request.query_params.get("redirect"))
        self.log.info("Shopper registered and signed in", redirect=redirect)
        return Response(
            SignedInResponseSerializer({"user": user_info, "redirect": redirect}).data,
            status=status.HTTP_201_CREATED,
        )


@extend_schema(
    tags=["Auth"], summary="Current sign-in state", responses={200: MeResponseSerializer}
)
class MeView(APIView):
    permission_classes = [AllowAny]
    log = logger.bind(view="MeView")

    def get(self, request):
        auth_session = AuthSession(request.session)
        self.log.debug("Returning sign-in state", signed_in=auth_session.is_signed_in)
        return Response(
            MeResponseSerializer(
                {"signedIn": auth_session.is_signed_in, "user": auth_session.user_info}
            ).data
        )


@extend_schema(tags=["Auth"])
class LogoutView(APIView):
    permission_classes = [AllowAny]
    log = logger.bind(view="LogoutView")

    @extend_schema(
        summary="Sign out",
        request=None,
        responses={200: DetailResponseSerializer},
    )
    def post(self, request):
        AuthSession(request.session).sign_out()
        self.log.info("Shopper signed out")
        return Response({"detail": "Logged out"}, status=status.HTTP_200_OK)
