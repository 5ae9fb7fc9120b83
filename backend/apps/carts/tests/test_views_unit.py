import json
import os
import unittest
from decimal import Decimal
from unittest.mock import patch

from django.test import override_settings
from rest_framework.test import APIRequestFactory

from apps.carts.views import CartView, CartItemsView, CartItemDetailView, CheckoutView
from apps.catalog.dtos import LOOKUP_DEGRADED, LOOKUP_OK, ProductDTO, ProductLookup


class FakeSession(dict):
    modified = False


class FakeProducts:
    def __init__(self, lookups):
        self.lookups = lookups

    def get_product(self, product_id, *, language=None):
        return self.lookups[product_id]


def make_product(product_id, price, count_in_stock=5):
    return ProductDTO(
        id=product_id,
        name=f"Product {product_id}",
        description="",
        price=Decimal(price),
        image_url=f"/images/{product_id}.jpg",
        count_in_stock=count_in_stock,
    )


class CartViewsUnitTests(unittest.TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.session = FakeSession()
        self.products = FakeProducts(
            {
                "p1": ProductLookup(status=LOOKUP_OK, product=make_product("p1", "199", 3)),
                "p2": ProductLookup(status=LOOKUP_OK, product=make_product("p2", "50")),
                "down": ProductLookup(status=LOOKUP_DEGRADED, error="timeout"),
            }
        )
        for view in (CartView, CartItemsView, CartItemDetailView, CheckoutView):
            patcher = patch.object(view, "products", self.products)
            patcher.start()
            self.addCleanup(patcher.stop)

    def call(self, view_cls, method, path, data=None, **kwargs):
        if method == "get":
            request = self.factory.get(path)
        else:
            request = getattr(self.factory, method)(path, data, format="json")
        request.session = self.session
        response = view_cls.as_view()(request, **kwargs)
        response.render()
        return response

    def add(self, product_id, qty=None, path="/api/cart/items/"):
        body = {"productId": product_id}
        if qty is not None:
            body["qty"] = qty
        return self.call(CartItemsView, "post", path, body)

    def test_get_empty_cart(self):
        response = self.call(CartView, "get", "/api/cart/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["items"], [])
        self.assertEqual(response.data["totals"]["itemCount"], 0)
        self.assertEqual(response.data["totals"]["subtotal"], "0.00")

    def test_add_items_and_totals(self):
        self.add("p1", 2)
        response = self.add("p2")
        self.assertEqual(response.status_code, 200)
        items = response.data["items"]
        self.assertEqual([i["productId"] for i in items], ["p1", "p2"])
        self.assertEqual(items[0]["qty"], 2)
        self.assertEqual(items[0]["lineTotal"], "398.00")
        self.assertEqual(items[1]["qty"], 1)
        self.assertEqual(response.data["totals"], {"itemCount": 3, "subtotal": "448.00"})
        self.assertTrue(self.session.modified)

    def test_add_uses_query_qty_fallback(self):
        response = self.add("p2", path="/api/cart/items/?qty=3")
        self.assertEqual(response.data["items"][0]["qty"], 3)

    def test_add_with_non_numeric_query_qty_is_validation_error(self):
        response = self.add("p2", path="/api/cart/items/?qty=many")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["details"]["quantity"], "many")
        self.assertNotIn("cartItems", self.session)

    def test_add_only_accepts_product_id_field(self):
        response = self.call(
            CartItemsView, "post", "/api/cart/items/", {"product_id": "p1", "quantity": 2}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("productId", response.data["error"]["details"])
        self.assertNotIn("cartItems", self.session)

    def test_adding_again_overwrites_quantity(self):
        self.add("p1", 2)
        response = self.add("p1", 1)
        self.assertEqual(len(response.data["items"]), 1)
        self.assertEqual(response.data["items"][0]["qty"], 1)

    def test_add_zero_quantity_is_validation_error(self):
        response = self.add("p1", 0)
        self.assertEqual(response.status_code, 400)
        payload = json.loads(response.content)["error"]
        self.assertEqual(payload["code"], "VALIDATION_ERROR")
        self.assertEqual(payload["details"]["quantity"], 0)
        self.assertNotIn("cartItems", self.session)

    def test_add_missing_product_id_is_validation_error(self):
        response = self.call(CartItemsView, "post", "/api/cart/items/", {"qty": 1})
        self.assertEqual(response.status_code, 400)

    def test_add_with_degraded_product_service_returns_503_and_keeps_cart(self):
        self.add("p1", 1)
        persisted = self.session["cartItems"]
        response = self.add("down", 1)
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data["error"]["code"], "SERVICE_UNAVAILABLE")
        self.assertEqual(self.session["cartItems"], persisted)

    @override_settings(
        SESSION_ENGINE="django.contrib.sessions.backends.signed_cookies",
        SESSION_COOKIE_MAX_BYTES=1000,
    )
    def test_add_over_cookie_budget_is_rejected_and_cart_not_saved(self):
        self.session["userInfo"] = {"token": os.urandom(1000).hex()}
        response = self.add("p1", 1)
        self.assertEqual(response.status_code, 400)
        error = json.loads(response.content)["error"]
        self.assertEqual(error["code"], "VALIDATION_ERROR")
        self.assertEqual(error["details"]["maxBytes"], 1000)
        self.assertNotIn("cartItems", self.session)

    @patch("apps.carts.views.build_cart_service")
    def test_product_not_found_maps_to_404(self, mock_build):
        from apps.carts.services import ProductNotFoundError

        mock_build.return_value.add_product.side_effect = ProductNotFoundError("ghost")
        response = self.add("ghost", 1)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"]["details"], {"productId": "ghost"})

    def test_patch_quantity(self):
        self.add("p1", 1)
        response = self.call(
            CartItemDetailView, "patch", "/api/cart/items/p1/", {"qty": 3}, product_id="p1"
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["items"][0]["qty"], 3)

    def test_patch_above_stock_is_rejected(self):
        self.add("p1", 1)
        response = self.call(
            CartItemDetailView, "patch", "/api/cart/items/p1/", {"qty": 4}, product_id="p1"
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["details"]["maximum"], 3)
        self.assertEqual(response.data["error"]["message"], "Quantity must be between 1 and 3")

    def test_patch_missing_item_is_not_found(self):
        response = self.call(
            CartItemDetailView, "patch", "/api/cart/items/p9/", {"qty": 1}, product_id="p9"
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"]["code"], "NOT_FOUND")

    def test_delete_item_is_idempotent(self):
        self.add("p1", 1)
        first = self.call(CartItemDetailView, "delete", "/api/cart/items/p1/", product_id="p1")
        second = self.call(CartItemDetailView, "delete", "/api/cart/items/p1/", product_id="p1")
        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(second.data["items"], [])

    def test_clear_cart(self):
        self.add("p1", 1)
        response = self.call(CartView, "delete", "/api/cart/")
        self.assertEqual(response.data["items"], [])
        self.assertNotIn("cartItems", self.session)

    def test_checkout_empty_cart_rejected(self):
        response = self.call(CheckoutView, "post", "/api/cart/checkout/")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["message"], "Cart is empty")

    def test_checkout_as_guest_redirects_to_login(self):
        self.add("p1", 1)
        response = self.call(CheckoutView, "post", "/api/cart/checkout/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.data, {"redirect": "/login?redirect=shipping", "requiresLogin": True}
        )

    def test_checkout_signed_in_goes_to_shipping(self):
        self.add("p1", 1)
        self.session["userInfo"] = {"email": "a@b.c", "name": "A"}
        response = self.call(CheckoutView, "post", "/api/cart/checkout/")
        self.assertEqual(response.data, {"redirect": "/shipping", "requiresLogin": False})
