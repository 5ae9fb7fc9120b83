import unittest
from unittest.mock import Mock

import requests

from apps.common.http import (
    RemoteNotFoundError,
    RemoteRequestError,
    ServiceClient,
    ServiceConfig,
    ServiceUnavailableError,
)


def make_response(status_code=200, json_data=None, content=b'{}', text=''):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.content = content
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


class ServiceClientTests(unittest.TestCase):
    def setUp(self):
        self.session = Mock(spec=requests.Session)
        self.config = ServiceConfig(
            name='product-service',
            base_url='http://products.local/api/v1',
            connect_timeout_seconds=1.5,
            read_timeout_seconds=3.0,
        )
        self.client = ServiceClient(self.config, session=self.session)

    def test_get_builds_url_under_base_and_returns_json(self):
        self.session.request.return_value = make_response(json_data={'id': '1'})
        result = self.client.get('products/1', headers={'Accept-Language': 'en'})
        self.assertEqual(result, {'id': '1'})
        kwargs = self.session.request.call_args.kwargs
        self.assertEqual(kwargs['method'], 'GET')
        self.assertEqual(kwargs['url'], 'http://products.local/api/v1/products/1')
        self.assertEqual(kwargs['timeout'], (1.5, 3.0))
        self.assertEqual(kwargs['headers']['Accept'], 'application/json')
        self.assertEqual(kwargs['headers']['Accept-Language'], 'en')

    def test_network_error_becomes_service_unavailable(self):
        self.session.request.side_effect = requests.ConnectionError('refused')
        with self.assertRaises(ServiceUnavailableError) as ctx:
            self.client.get('products')
        self.assertEqual(ctx.exception.service, 'product-service')
        self.assertEqual(ctx.exception.status_code, 0)
        self.assertEqual(self.session.request.call_count, 1)

    def test_timeout_is_not_retried(self):
        self.session.request.side_effect = requests.Timeout('slow')
        with self.assertRaises(ServiceUnavailableError):
            self.client.get('products')
        self.assertEqual(self.session.request.call_count, 1)

    def test_404_raises_remote_not_found(self):
        self.session.request.return_value = make_response(404, json_data={'message': 'nope'})
        with self.assertRaises(RemoteNotFoundError) as ctx:
            self.client.get('products/x')
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.payload, {'message': 'nope'})

    def test_5xx_raises_service_unavailable(self):
        self.session.request.return_value = make_response(502, json_data=ValueError('html'), text='Bad gateway')
        with self.assertRaises(ServiceUnavailableError) as ctx:
            self.client.get('products')
        self.assertEqual(ctx.exception.status_code, 502)
        self.assertEqual(ctx.exception.payload, {'message': 'Bad gateway'})

    def test_other_4xx_raises_remote_request_error_with_message(self):
        self.session.request.return_value = make_response(401, json_data={'message': 'Invalid email or password'})
        with self.assertRaises(RemoteRequestError) as ctx:
            self.client.post('auth/login', json_body={'email': 'a@b.c', 'password': 'x'})
        self.assertEqual(ctx.exception.remote_message, 'Invalid email or password')
        self.assertEqual(
            self.session.request.call_args.kwargs['json'],
            {'email': 'a@b.c', 'password': 'x'},
        )

    def test_invalid_json_body_is_service_unavailable(self):
        self.session.request.return_value = make_response(200, json_data=ValueError('bad'))
        with self.assertRaises(ServiceUnavailableError):
            self.client.get('products')

    def test_empty_body_returns_none(self):
        self.session.request.return_value = make_response(204, content=b'')
        self.assertIsNone(self.client.get('products'))

    def test_ping_targets_service_root_health(self):
        self.session.request.return_value = make_response(json_data={'status': 'ok'})
        result = self.client.ping()
        self.assertEqual(result['status'], 'ok')
        self.assertIn('latency_ms', result)
        self.assertEqual(
            self.session.request.call_args.kwargs['url'], 'http://products.local/health'
        )

    def test_ping_reports_failure(self):
        self.session.request.side_effect = requests.ConnectionError('refused')
        result = self.client.ping()
        self.assertEqual(result['status'], 'fail')
        self.assertIn('refused', result['error'])
