from django.urls import path
from .views import CartView, CartItemsView, CartItemDetailView, CheckoutView

urlpatterns = [
    path("", CartView.as_view(), name="cart"),
    path("items/", CartItemsView.as_view(), name="cart-items"),
    path(
        "items/<str:product_id>/",
        CartItemDetailView.as_view(),
        name="cart-item-detail",
    ),
    path("checkout/", CheckoutView.as_view(), name="cart-checkout"),
]
