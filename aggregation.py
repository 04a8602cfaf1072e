"""
Shared list helpers for the console screens: search filters, client-side
pagination and the summary cards shown above order and customer lists.

All functions are pure; they never modify their inputs.
"""
import math


def _matches(value, term):
    return value is not None and term in str(value).casefold()


def filter_products(products, search='', category=None):
    """Products whose name or SKU contains `search` (case-insensitive),
    optionally limited to one category.
    """
    term = (search or '').casefold()
    result = []
    for p in products:
        if term and not (_matches(p.name, term) or _matches(p.sku, term)):
            continue
        if category is not None and p.category != category:
            continue
        result.append(p)
    return result


def filter_customers(customers, search=''):
    term = (search or '').casefold()
    if not term:
        return list(customers)
    return [c for c in customers
            if _matches(c.name, term) or _matches(c.phone, term) or _matches(c.email, term)]


def filter_orders(orders, search='', payment_method='all'):
    """Orders matching order number, customer name or any product name."""
    term = (search or '').casefold()
    result = []
    for order in orders:
        if term:
            hit = (_matches(order.get('orderNumber'), term)
                   or _matches(order.get('customerName'), term)
                   or any(_matches(i.get('productName'), term) for i in order.get('items') or []))
            if not hit:
                continue
        if payment_method != 'all' and order.get('paymentMethod') != payment_method:
            continue
        result.append(order)
    return result


def paginate(items, page=1, per_page=20):
    """Slice `items` to one page. Returns (page_items, info) where info uses the
    same keys as the backend's pagination block.
    """
    if per_page < 1:
        raise ValueError("per_page must be at least 1")
    items = list(items)
    total_items = len(items)
    total_pages = max(1, math.ceil(total_items / per_page))
    page = min(max(1, page), total_pages)
    start = (page - 1) * per_page
    info = {
        'currentPage': page,
        'totalPages': total_pages,
        'totalItems': total_items,
        'itemsPerPage': per_page,
        'hasNextPage': page < total_pages,
        'hasPreviousPage': page > 1,
    }
    return items[start:start + per_page], info


def summarize_sales(orders, include_cancelled=False):
    """totalSales / totalOrders / avgOrderValue over a list of order dicts."""
    counted = [o for o in orders if include_cancelled or o.get('status') != 'cancelled']
    total_sales = sum(float(o.get('total') or 0) for o in counted)
    total_orders = len(counted)
    return {
        'totalSales': total_sales,
        'totalOrders': total_orders,
        'avgOrderValue': total_sales / total_orders if total_orders else 0.0,
    }


def sales_by_payment_method(orders):
    totals = {}
    for o in orders:
        if o.get('status') == 'cancelled':
            continue
        method = o.get('paymentMethod') or 'unknown'
        totals[method] = totals.get(method, 0.0) + float(o.get('total') or 0)
    return totals


def summarize_customers(customers):
    """Totals for the customers screen. Each customer is a dict with
    `dueAmount` and `status`.
    """
    return {
        'totalDues': sum(float(c.get('dueAmount') or 0) for c in customers),
        'activeCustomers': sum(1 for c in customers if c.get('status') == 'active'),
        'customersWithDues': sum(1 for c in customers if float(c.get('dueAmount') or 0) > 0),
    }


def low_stock(products, threshold=5):
    """Products at or below `threshold` units, lowest stock first."""
    return sorted((p for p in products if p.stock <= threshold), key=lambda p: p.stock)
