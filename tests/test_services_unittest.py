import os
import json
import unittest
from unittest import mock
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from api import ApiError
from models import Customer, InvalidQuantityError, Product
from preferences import PINNED_PRODUCTS_KEY, MemoryKeyValueStore
from schemas import Pagination, ProductPageData, ProductRecord, SaleConfirmation
from services import (
    CartService,
    CheckoutService,
    EmptyCartError,
    ProductService,
    SubmissionInProgressError,
)


def hinge():
    return Product(7, "Heavy Duty Hinge", "HDH-01", 850, stock=5, unit="piece")


def confirmation(sale_id=31, order_number='ORD-031'):
    return SaleConfirmation.model_validate(
        {'success': True, 'data': {'id': sale_id, 'orderNumber': order_number}})


class CartServiceTests(unittest.TestCase):
    def setUp(self):
        self.store = MemoryKeyValueStore({PINNED_PRODUCTS_KEY: '[4]'})
        self.svc = CartService(self.store, tax_rate=0.10)
        self.svc.mount()

    def test_mount_loads_pins(self):
        self.assertTrue(self.svc.pins.is_pinned(4))
        self.assertTrue(self.svc.cart.is_empty())

    def test_toggle_pin_writes_store(self):
        self.svc.toggle_pin(7)
        self.assertEqual(json.loads(self.store.get(PINNED_PRODUCTS_KEY)), [4, 7])

    def test_custom_quantity(self):
        self.svc.add_custom_quantity(hinge(), '2.5')
        self.assertAlmostEqual(self.svc.cart.get_item(7).quantity, 2.5)
        with self.assertRaises(InvalidQuantityError):
            self.svc.add_custom_quantity(hinge(), '')
        with self.assertRaises(InvalidQuantityError):
            self.svc.add_custom_quantity(hinge(), '0')
        self.assertAlmostEqual(self.svc.cart.get_item(7).quantity, 2.5)

    def test_step_quantity(self):
        self.svc.add_to_cart(hinge(), 1)
        self.svc.step_quantity(7, 0.25)
        self.svc.step_quantity(7, 1)
        self.assertAlmostEqual(self.svc.cart.item_count, 2.25)
        self.assertAlmostEqual(self.svc.get_totals().subtotal, 2.25 * 850)
        self.svc.step_quantity(404, 1)
        self.svc.step_quantity(7, -2.25)
        self.assertTrue(self.svc.cart.is_empty())

    def test_totals_use_session_discount(self):
        self.svc.add_to_cart(hinge(), 3)
        self.svc.discount = 200
        totals = self.svc.get_totals()
        self.assertAlmostEqual(totals.tax, 235)
        self.assertAlmostEqual(totals.grand_total, 2585)

    def test_cancel_resets_sale(self):
        self.svc.add_to_cart(hinge(), 1)
        self.svc.discount = 50
        self.svc.customer = Customer(1, "ABC Furniture")
        self.svc.cancel()
        self.assertTrue(self.svc.cart.is_empty())
        self.assertEqual(self.svc.discount, 0)
        self.assertIsNone(self.svc.customer)
        self.assertTrue(self.svc.pins.is_pinned(4))


class CheckoutServiceTests(unittest.TestCase):
    def setUp(self):
        self.client = mock.Mock()
        self.checkout = CheckoutService(self.client)
        self.session = CartService(MemoryKeyValueStore(), tax_rate=0.10)
        self.session.mount()

    def test_build_payload(self):
        self.session.add_to_cart(hinge(), 2)
        self.session.set_price(7, 800)
        self.session.customer = Customer(3, "John Hardware Co.", "9876543210")
        self.session.discount = 100
        self.session.payment_method = 'credit'
        wire = CheckoutService.build_payload(self.session).to_wire()
        self.assertEqual(wire['customerId'], 3)
        self.assertEqual(wire['items'], [{'productId': 7, 'quantity': 2, 'unitPrice': 800}])
        self.assertEqual(wire['discount'], 100)
        self.assertEqual(wire['paymentMethod'], 'credit')

    def test_walk_in_sale_has_no_customer(self):
        self.session.add_to_cart(hinge(), 1)
        self.assertIsNone(CheckoutService.build_payload(self.session).customer_id)

    def test_success_clears_cart(self):
        self.client.create_sale.return_value = confirmation()
        self.session.add_to_cart(hinge(), 3)
        self.session.discount = 200

        conf, totals, lines = self.checkout.checkout(self.session)

        self.assertEqual(conf.data.id, 31)
        self.assertAlmostEqual(totals.grand_total, 2585)
        self.assertEqual([l.product_id for l in lines], [7])
        self.assertTrue(self.session.cart.is_empty())
        self.assertEqual(self.session.discount, 0)

    def test_failure_keeps_cart(self):
        self.client.create_sale.side_effect = ApiError("HTTP error! status: 500", status_code=500)
        self.session.add_to_cart(hinge(), 3)
        with self.assertRaises(ApiError):
            self.checkout.checkout(self.session)
        self.assertEqual(self.session.cart.get_item(7).quantity, 3)

        # manual retry goes through once the backend recovers
        self.client.create_sale.side_effect = None
        self.client.create_sale.return_value = confirmation()
        self.checkout.checkout(self.session)
        self.assertTrue(self.session.cart.is_empty())

    def test_empty_cart_not_submitted(self):
        with self.assertRaises(EmptyCartError):
            self.checkout.checkout(self.session)
        self.client.create_sale.assert_not_called()

    def test_second_submit_while_pending(self):
        self.session.add_to_cart(hinge(), 1)
        other = CartService(MemoryKeyValueStore(), tax_rate=0.10)
        other.add_to_cart(hinge(), 1)

        def reenter(payload):
            with self.assertRaises(SubmissionInProgressError):
                self.checkout.checkout(other)
            return confirmation()

        self.client.create_sale.side_effect = reenter
        self.checkout.checkout(self.session)
        self.assertEqual(self.client.create_sale.call_count, 1)
        self.assertFalse(other.cart.is_empty())


class ProductServiceTests(unittest.TestCase):
    def test_display_list_puts_pins_first(self):
        client = mock.Mock()
        client.list_products.return_value = ProductPageData(
            products=[
                ProductRecord(id=1, name='Wood Screws', sku='WS004', price=12),
                ProductRecord(id=2, name='Cabinet Handles', sku='CH002', price=25),
                ProductRecord(id=3, name='Door Hinges', sku='DH001', price=45),
            ],
            pagination=Pagination(),
        )
        session = CartService(MemoryKeyValueStore({PINNED_PRODUCTS_KEY: '[1]'}))
        session.mount()

        products, pagination = ProductService(client).get_display_list(session.pins, search='s')

        self.assertEqual([p.id for p in products], [1, 2, 3])
        self.assertEqual(pagination.current_page, 1)
        client.list_products.assert_called_once_with(page=1, limit=20, search='s', category=None)


if __name__ == '__main__':
    unittest.main()
