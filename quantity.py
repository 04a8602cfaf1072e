"""Free-text quantity entry for weight and length based units (2.5 kg, 0.75 m)."""
import math
import re

from models import InvalidQuantityError

# empty (still typing), digits, one optional dot, digits after it
QUANTITY_INPUT_RE = re.compile(r'^[0-9]*\.?[0-9]*$')


def is_acceptable_input(text):
    """True if `text` may stay in the quantity box while the operator types."""
    if text is None:
        return False
    return QUANTITY_INPUT_RE.fullmatch(text) is not None


def parse_quantity(text):
    """Parse the submitted quantity text.

    Raises InvalidQuantityError with an operator-facing message when the
    text is not a positive number. Nothing is defaulted.
    """
    if not is_acceptable_input(text):
        raise InvalidQuantityError("Please enter a valid quantity (numbers and one decimal point only)")
    try:
        value = float(text)
    except ValueError:
        raise InvalidQuantityError("Please enter a valid quantity")
    if not math.isfinite(value) or value <= 0:
        raise InvalidQuantityError("Quantity must be greater than zero")
    return value
