import unittest
from decimal import Decimal

from apps.catalog.services import ProductService, placeholder_product
from apps.common.http import RemoteNotFoundError, ServiceUnavailableError


class FakeCache:
    def __init__(self):
        self.store = {}

    def get(self, key, default=None):
        return self.store.get(key, default)

    def set(self, key, value, timeout=None):
        self.store[key] = value


class FakeProductClient:
    def __init__(self, products=None, error=None):
        self.products = list(products or [])
        self.error = error
        self.list_calls = 0
        self.detail_calls = []

    def list_products(self, *, language=None):
        self.list_calls += 1
        if self.error:
            raise self.error
        return {"products": self.products}

    def get_product(self, product_id, *, language=None):
        self.detail_calls.append((product_id, language))
        if self.error:
            raise self.error
        for product in self.products:
            if str(product["id"]) == product_id:
                return product
        raise RemoteNotFoundError("missing", service="product-service", status_code=404)


PRODUCTS = [
    {"id": "p1", "name": "Phone", "imageUrl": "/images/phone.jpg", "price": 199, "countInStock": 5, "description": "d"},
    {"id": "p2", "name": "Mouse", "imageUrl": "/images/mouse.jpg", "price": "50.00", "countInStock": 0, "description": ""},
]


class ProductServiceTests(unittest.TestCase):
    def build(self, client, **kwargs):
        self.cache = FakeCache()
        return ProductService(client=client, cache_backend=self.cache, **kwargs)

    def test_get_product_ok(self):
        service = self.build(FakeProductClient(PRODUCTS))
        lookup = service.get_product("p1", language="en")
        self.assertTrue(lookup.ok)
        self.assertEqual(lookup.product.price, Decimal("199"))
        self.assertFalse(lookup.product.placeholder)

    def test_get_product_not_found(self):
        service = self.build(FakeProductClient(PRODUCTS))
        lookup = service.get_product("p9")
        self.assertEqual(lookup.status, "not_found")
        self.assertIsNone(lookup.product)

    def test_unreachable_service_is_degraded_without_placeholder(self):
        error = ServiceUnavailableError("connection refused", service="product-service")
        service = self.build(FakeProductClient(error=error))
        lookup = service.get_product("p1")
        self.assertTrue(lookup.degraded)
        self.assertIsNone(lookup.product)
        self.assertEqual(lookup.error, "connection refused")

    def test_placeholder_only_when_fallback_enabled(self):
        error = ServiceUnavailableError("timeout", service="product-service")
        service = self.build(FakeProductClient(error=error), placeholder_fallback=True)
        lookup = service.get_product("p7")
        self.assertTrue(lookup.degraded)
        self.assertTrue(lookup.product.placeholder)
        self.assertEqual(lookup.product.id, "p7")

    def test_malformed_payload_is_degraded(self):
        service = self.build(FakeProductClient([{"id": "p1", "price": "lots"}]))
        self.assertTrue(service.get_product("p1").degraded)

    def test_infinite_stock_count_is_degraded(self):
        service = self.build(FakeProductClient([{"id": "p1", "price": 10, "countInStock": 1e999}]))
        lookup = service.get_product("p1")
        self.assertTrue(lookup.degraded)
        self.assertIsNone(lookup.product)

    def test_list_products_is_cached_per_language(self):
        client = FakeProductClient(PRODUCTS)
        service = self.build(client, cache_timeout=30)
        first = service.list_products(language="en")
        second = service.list_products(language="en")
        self.assertEqual([p.id for p in first.products], ["p1", "p2"])
        self.assertEqual([p.id for p in second.products], ["p1", "p2"])
        self.assertEqual(client.list_calls, 1)
        self.assertIn("products:list:lang-en", self.cache.store)
        service.list_products(language="zh")
        self.assertEqual(client.list_calls, 2)

    def test_disable_cache_always_calls_client(self):
        client = FakeProductClient(PRODUCTS)
        service = self.build(client, disable_cache=True)
        service.list_products()
        service.list_products()
        self.assertEqual(client.list_calls, 2)
        self.assertEqual(self.cache.store, {})

    def test_degraded_listing_is_not_cached(self):
        client = FakeProductClient(error=ServiceUnavailableError("down", service="product-service"))
        service = self.build(client)
        listing = service.list_products(language="en")
        self.assertTrue(listing.degraded)
        self.assertEqual(listing.products, [])
        self.assertEqual(self.cache.store, {})
        client.error = None
        client.products = PRODUCTS
        self.assertFalse(service.list_products(language="en").degraded)


class PlaceholderProductTests(unittest.TestCase):
    def test_placeholder_is_flagged(self):
        product = placeholder_product(42)
        self.assertEqual(product.id, "42")
        self.assertTrue(product.placeholder)
        self.assertEqual(product.count_in_stock, 5)
