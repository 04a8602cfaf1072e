import logging
import math
from numbers import Real

logger = logging.getLogger(__name__)


class CartError(Exception):
    """Base class for cart input errors."""


class InvalidQuantityError(CartError, ValueError):
    pass


class InvalidProductError(CartError, ValueError):
    pass


class InvalidPriceError(CartError, ValueError):
    pass


class InvalidDiscountError(CartError, ValueError):
    pass


def _is_number(value):
    # bool is a Real subclass but never a meaningful quantity
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _check_quantity(quantity):
    if not _is_number(quantity):
        raise InvalidQuantityError(f"Quantity must be a finite number, got {quantity!r}")
    return quantity


#product model (catalog snapshot source)
class Product:
    def __init__(self, id, name, sku, price, stock=0, unit='piece', category=None):
        self.id = id
        self.name = name
        self.sku = sku
        self.price = price
        self.stock = stock
        self.unit = unit
        self.category = category

    def __repr__(self):
        return f"Product(id={self.id!r}, sku={self.sku!r}, price={self.price!r})"


#customer model
class Customer:
    def __init__(self, id, name, phone=None, email=None):
        self.id = id
        self.name = name
        self.phone = phone
        self.email = email


#cart line model
class LineItem:
    """One cart row. Name, sku, unit and price are copied from the product
    when the line is created and do not follow later catalog changes.
    """

    def __init__(self, product_id, product_name, sku, unit, quantity, unit_price):
        self.product_id = product_id
        self.product_name = product_name
        self.sku = sku
        self.unit = unit
        self.quantity = quantity
        self.catalog_price = unit_price
        self.adjusted_price = None

    @classmethod
    def from_product(cls, product, quantity):
        return cls(product.id, product.name, product.sku, product.unit, quantity, product.price)

    @property
    def unit_price(self):
        if self.adjusted_price is not None:
            return self.adjusted_price
        return self.catalog_price

    @property
    def total(self):
        return self.quantity * self.unit_price

    def __repr__(self):
        return f"LineItem({self.product_id!r}, qty={self.quantity!r}, total={self.total!r})"


#derived totals
class SaleTotals:
    __slots__ = ('subtotal', 'discount', 'tax', 'grand_total')

    def __init__(self, subtotal, discount, tax, grand_total):
        self.subtotal = subtotal
        self.discount = discount
        self.tax = tax
        self.grand_total = grand_total

    def as_dict(self):
        return {
            'subtotal': self.subtotal,
            'discount': self.discount,
            'tax': self.tax,
            'grandTotal': self.grand_total,
        }

    def __eq__(self, other):
        if not isinstance(other, SaleTotals):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        return (f"SaleTotals(subtotal={self.subtotal!r}, discount={self.discount!r}, "
                f"tax={self.tax!r}, grand_total={self.grand_total!r})")


def compute_totals(items, discount=0, tax_rate=0.10):
    """Subtotal, discount, tax and grand total for a list of line items.

    Tax is charged on the discounted amount. The discount is an absolute
    amount and is not capped at the subtotal, so the grand total can go
    negative.
    """
    if not _is_number(discount) or discount < 0:
        raise InvalidDiscountError(f"Discount must be a non-negative number, got {discount!r}")
    if not _is_number(tax_rate) or tax_rate < 0:
        raise ValueError(f"Tax rate must be a non-negative number, got {tax_rate!r}")
    subtotal = sum(item.total for item in items)
    tax = (subtotal - discount) * tax_rate
    return SaleTotals(subtotal, discount, tax, subtotal - discount + tax)


#cart model
class Cart:
    def __init__(self):
        self.items = []

    def _find(self, product_id):
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def get_item(self, product_id):
        return self._find(product_id)

    def add_item(self, product, quantity=1):
        """Add `quantity` of `product`, merging into an existing line for the
        same product id. Raises InvalidQuantityError for non-positive or
        non-finite quantities and InvalidPriceError for a missing or negative
        price; the cart is left untouched in both cases.
        """
        product_id = getattr(product, 'id', None)
        if product_id is None or product_id == '' or isinstance(product_id, bool):
            raise InvalidProductError(f"Product has no usable id: {product!r}")
        _check_quantity(quantity)
        if quantity <= 0:
            raise InvalidQuantityError(f"Quantity must be greater than zero, got {quantity!r}")
        price = getattr(product, 'price', None)
        if not _is_number(price) or price < 0:
            raise InvalidPriceError(f"Product {product_id!r} has no valid price: {price!r}")

        item = self._find(product_id)
        if item is not None:
            item.quantity += quantity
            logger.debug("Merged %s into cart line %s (qty now %s)", quantity, product_id, item.quantity)
            return item

        item = LineItem.from_product(product, quantity)
        self.items.append(item)
        logger.debug("Added cart line %s qty=%s", product_id, quantity)
        return item

    def update_quantity(self, product_id, new_quantity):
        _check_quantity(new_quantity)
        item = self._find(product_id)
        if item is None:
            logger.debug("update_quantity ignored, %s not in cart", product_id)
            return
        if new_quantity <= 0:
            self.remove_item(product_id)
            return
        item.quantity = new_quantity

    def adjust_quantity(self, product_id, delta):
        """Step a line's quantity by `delta` (the +/- buttons)."""
        _check_quantity(delta)
        item = self._find(product_id)
        if item is None:
            logger.debug("adjust_quantity ignored, %s not in cart", product_id)
            return
        self.update_quantity(product_id, item.quantity + delta)

    def update_item_price(self, product_id, new_price):
        if not _is_number(new_price) or new_price <= 0:
            raise InvalidPriceError(f"Price must be greater than zero, got {new_price!r}")
        item = self._find(product_id)
        if item is None:
            logger.debug("update_item_price ignored, %s not in cart", product_id)
            return
        item.adjusted_price = new_price

    def remove_item(self, product_id):
        before = len(self.items)
        self.items = [item for item in self.items if item.product_id != product_id]
        if len(self.items) == before:
            logger.debug("remove_item ignored, %s not in cart", product_id)

    def clear(self):
        self.items = []

    def compute_totals(self, discount=0, tax_rate=0.10):
        return compute_totals(self.items, discount, tax_rate)

    @property
    def subtotal(self):
        return sum(item.total for item in self.items)

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)

    def is_empty(self):
        return not self.items

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(list(self.items))

    def __contains__(self, product_id):
        return self._find(product_id) is not None
