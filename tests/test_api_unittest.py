import os
import unittest
from unittest import mock
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import requests

from api import ApiError, ApiResponseError, BackendClient
from schemas import SaleItemPayload, SalePayload


def fake_response(status=200, body=None, json_error=False):
    resp = mock.Mock()
    resp.status_code = status
    if json_error:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = body
    return resp


PRODUCT_PAGE = {
    'success': True,
    'data': {
        'products': [
            {'id': 7, 'name': 'Heavy Duty Hinge', 'sku': 'HDH-01', 'price': 850, 'stock': 5, 'unit': 'piece'},
            {'id': 9, 'name': 'Copper Wire', 'sku': 'CW-25', 'price': '120.5', 'stock': 40, 'unit': 'm'},
        ],
        'pagination': {'currentPage': 1, 'totalPages': 3, 'totalItems': 42, 'itemsPerPage': 20,
                       'hasNextPage': True, 'hasPreviousPage': False},
    },
}


class BackendClientTests(unittest.TestCase):
    def setUp(self):
        self.session = mock.Mock()
        self.session.headers = {}
        self.client = BackendClient(base_url='https://example.test/wp-json/ims/v1/', token='t0k',
                                    timeout=5, session=self.session)

    def test_auth_header(self):
        self.assertEqual(self.session.headers['Authorization'], 'Bearer t0k')
        self.assertEqual(self.session.headers['Accept'], 'application/json')

    def test_list_products(self):
        self.session.request.return_value = fake_response(body=PRODUCT_PAGE)
        data = self.client.list_products(page=2, search='hinge')

        kwargs = self.session.request.call_args.kwargs
        self.assertEqual(kwargs['url'], 'https://example.test/wp-json/ims/v1/products')
        self.assertEqual(kwargs['params'], {'page': 2, 'limit': 20, 'search': 'hinge'})
        self.assertEqual(kwargs['timeout'], 5)
        self.assertEqual([p.id for p in data.products], [7, 9])
        self.assertEqual(data.products[1].price, 120.5)
        self.assertEqual(data.pagination.total_pages, 3)
        self.assertTrue(data.pagination.has_next_page)

    def test_product_to_model(self):
        self.session.request.return_value = fake_response(
            body={'success': True, 'data': PRODUCT_PAGE['data']['products'][0]})
        product = self.client.get_product(7).to_product()
        self.assertEqual((product.id, product.name, product.price, product.unit), (7, 'Heavy Duty Hinge', 850, 'piece'))

    def test_unexpected_shape_fails_fast(self):
        # products at the top level instead of under data
        self.session.request.return_value = fake_response(body={'success': True, 'products': []})
        with self.assertRaises(ApiResponseError):
            self.client.list_products()

    def test_success_false(self):
        self.session.request.return_value = fake_response(
            body={'success': False, 'data': {'products': []}, 'message': 'Database offline'})
        with self.assertRaises(ApiResponseError) as ctx:
            self.client.list_products()
        self.assertIn('Database offline', str(ctx.exception))

    def test_http_error(self):
        self.session.request.return_value = fake_response(status=500, body={})
        with self.assertRaises(ApiError) as ctx:
            self.client.list_customers()
        self.assertEqual(ctx.exception.status_code, 500)

    def test_invalid_json(self):
        self.session.request.return_value = fake_response(json_error=True)
        with self.assertRaises(ApiResponseError):
            self.client.list_customers()

    def test_network_error(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(ApiError):
            self.client.list_products()

    def test_create_sale_posts_camel_case(self):
        self.session.request.return_value = fake_response(
            status=201, body={'success': True, 'data': {'id': 31, 'orderNumber': 'ORD-031'}})
        payload = SalePayload(
            customer_id=3,
            items=[SaleItemPayload(product_id=7, quantity=2.5, unit_price=850)],
            discount=100,
            payment_method='card',
            notes='deliver tomorrow',
        )
        confirmation = self.client.create_sale(payload)

        kwargs = self.session.request.call_args.kwargs
        self.assertEqual(kwargs['method'], 'POST')
        self.assertEqual(kwargs['headers'], {'Content-Type': 'application/json'})
        self.assertEqual(kwargs['json'], {
            'customerId': 3,
            'items': [{'productId': 7, 'quantity': 2.5, 'unitPrice': 850.0}],
            'discount': 100.0,
            'paymentMethod': 'card',
            'notes': 'deliver tomorrow',
        })
        self.assertEqual(confirmation.data.order_number, 'ORD-031')


if __name__ == '__main__':
    unittest.main()
