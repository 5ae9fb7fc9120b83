from django.urls import path, include
from apps.catalog.views import ProductListView, ProductDetailView

urlpatterns = [
    path("products/", ProductListView.as_view(), name="api-products-list"),
    path(
        "products/<str:product_id>/",
        ProductDetailView.as_view(),
        name="api-products-detail",
    ),
    path("cart/", include("apps.carts.urls")),
    path("auth/", include("apps.auth.urls")),
]
