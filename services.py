import logging

import config
from models import Cart, CartError
from preferences import PinnedProductStore, sort_products_for_display
from quantity import parse_quantity
from schemas import SaleItemPayload, SalePayload

logger = logging.getLogger(__name__)


class EmptyCartError(CartError):
    pass


class SubmissionInProgressError(CartError):
    pass


#Product Service
class ProductService:
    def __init__(self, client):
        self.client = client

    def get_page(self, page=1, limit=20, search=None, category=None):
        """Return (products, pagination) for one catalog page."""
        data = self.client.list_products(page=page, limit=limit, search=search, category=category)
        return [r.to_product() for r in data.products], data.pagination

    def get_product_by_id(self, product_id):
        return self.client.get_product(product_id).to_product()

    def get_display_list(self, pins, page=1, limit=20, search=None, category=None):
        products, pagination = self.get_page(page=page, limit=limit, search=search, category=category)
        return sort_products_for_display(products, pins.pinned), pagination


#Customer service
class CustomerService:
    def __init__(self, client):
        self.client = client

    def search(self, term=None, page=1, limit=20):
        data = self.client.list_customers(page=page, limit=limit, search=term)
        return [r.to_customer() for r in data.customers]


#Cart service
class CartService:
    """One in-progress sale on the sales screen: cart, adjustments, customer."""

    def __init__(self, pin_store, tax_rate=None):
        self.cart = Cart()
        self.pins = PinnedProductStore(pin_store)
        self.tax_rate = config.TAX_RATE if tax_rate is None else tax_rate
        self.discount = 0
        self.customer = None
        self.payment_method = 'cash'
        self.notes = ''

    def mount(self):
        """Screen mount: fresh cart, pinned set read from storage."""
        self.reset()
        self.pins.load()

    def add_to_cart(self, product, qty=1):
        return self.cart.add_item(product, qty)

    def add_custom_quantity(self, product, text):
        """Add the typed quantity (e.g. "2.5" kg) for `product`."""
        return self.cart.add_item(product, parse_quantity(text))

    def update_quantity(self, product_id, qty):
        self.cart.update_quantity(product_id, qty)

    def step_quantity(self, product_id, delta):
        self.cart.adjust_quantity(product_id, delta)

    def set_price(self, product_id, price):
        self.cart.update_item_price(product_id, price)

    def remove_from_cart(self, product_id):
        self.cart.remove_item(product_id)

    def toggle_pin(self, product_id):
        return self.pins.toggle(product_id)

    def get_items(self):
        return list(self.cart)

    def get_totals(self):
        return self.cart.compute_totals(self.discount, self.tax_rate)

    def reset(self):
        self.cart.clear()
        self.discount = 0
        self.customer = None
        self.payment_method = 'cash'
        self.notes = ''

    def cancel(self):
        logger.info("Sale cancelled with %d line(s) in cart", len(self.cart))
        self.reset()


#Check-out service
class CheckoutService:
    def __init__(self, client):
        self.client = client
        self._in_flight = False

    @staticmethod
    def build_payload(session):
        return SalePayload(
            customer_id=session.customer.id if session.customer else None,
            items=[
                SaleItemPayload(product_id=item.product_id, quantity=item.quantity, unit_price=item.unit_price)
                for item in session.cart
            ],
            discount=session.discount,
            payment_method=session.payment_method,
            notes=session.notes,
        )

    def checkout(self, session):
        """Submit the session's cart. The cart is cleared only after the
        backend confirms; on failure it is left as-is for a manual retry.

        Returns (confirmation, totals, lines) so a receipt can be rendered.
        """
        if session.cart.is_empty():
            raise EmptyCartError("Cart is empty")
        if self._in_flight:
            raise SubmissionInProgressError("A sale is already being submitted")

        totals = session.get_totals()
        payload = self.build_payload(session)
        self._in_flight = True
        try:
            confirmation = self.client.create_sale(payload)
        finally:
            self._in_flight = False

        lines = session.get_items()
        logger.info("Sale %s created (%d line(s), total %.2f)",
                    confirmation.data.order_number or confirmation.data.id, len(lines), totals.grand_total)
        session.reset()
        return confirmation, totals, lines
