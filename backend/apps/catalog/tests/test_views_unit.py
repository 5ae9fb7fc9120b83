import unittest
from decimal import Decimal
from unittest.mock import Mock, patch

from rest_framework.test import APIRequestFactory

from apps.catalog.dtos import (
    LOOKUP_DEGRADED,
    LOOKUP_NOT_FOUND,
    LOOKUP_OK,
    ProductDTO,
    ProductListing,
    ProductLookup,
)
from apps.catalog.services import placeholder_product
from apps.catalog.views import ProductDetailView, ProductListView


def make_product(product_id="p1"):
    return ProductDTO(
        id=product_id,
        name=f"Product {product_id}",
        description="",
        price=Decimal("19.9"),
        image_url=f"/images/{product_id}.jpg",
        count_in_stock=3,
    )


class ProductListViewTests(unittest.TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()

    def test_list_is_paginated_and_not_degraded(self):
        service = Mock()
        service.list_products.return_value = ProductListing(
            products=[make_product(f"p{i}") for i in range(15)]
        )
        with patch.object(ProductListView, "service", service):
            request = self.factory.get("/api/products/", {"limit": 5, "page": 2})
            response = ProductListView.as_view()(request)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 15)
        self.assertEqual([p["id"] for p in response.data["results"]], ["p5", "p6", "p7", "p8", "p9"])
        self.assertFalse(response.data["degraded"])
        first = response.data["results"][0]
        self.assertEqual(first["price"], "19.90")
        self.assertEqual(first["imageUrl"], "/images/p5.jpg")
        self.assertEqual(first["countInStock"], 3)
        self.assertNotIn("placeholder", first)

    def test_degraded_list_is_empty_and_flagged(self):
        service = Mock()
        service.list_products.return_value = ProductListing(degraded=True, error="down")
        with patch.object(ProductListView, "service", service):
            response = ProductListView.as_view()(self.factory.get("/api/products/"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["results"], [])
        self.assertTrue(response.data["degraded"])


class ProductDetailViewTests(unittest.TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()

    def get(self, lookup, product_id="p1"):
        service = Mock()
        service.get_product.return_value = lookup
        with patch.object(ProductDetailView, "service", service):
            request = self.factory.get(f"/api/products/{product_id}/")
            return ProductDetailView.as_view()(request, product_id=product_id)

    def test_found(self):
        response = self.get(ProductLookup(status=LOOKUP_OK, product=make_product()))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["id"], "p1")

    def test_not_found(self):
        response = self.get(ProductLookup(status=LOOKUP_NOT_FOUND), product_id="p9")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"]["code"], "NOT_FOUND")
        self.assertEqual(response.data["error"]["details"], {"id": "p9"})

    def test_degraded_without_placeholder_is_503(self):
        response = self.get(ProductLookup(status=LOOKUP_DEGRADED, error="timeout"))
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data["error"]["code"], "SERVICE_UNAVAILABLE")
        self.assertIn("hint", response.data["error"])

    def test_degraded_with_placeholder_is_flagged(self):
        response = self.get(
            ProductLookup(status=LOOKUP_DEGRADED, product=placeholder_product("p1"), error="timeout")
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["placeholder"])
