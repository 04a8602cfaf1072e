import argparse
import logging
import sys

import config
from api import ApiError, BackendClient
from database import DatabaseManager
from models import CartError
from preferences import PinnedProductStore, SqliteKeyValueStore
from services import ProductService

logger = logging.getLogger(__name__)


def cmd_products(args, pins):
    service = ProductService(BackendClient())
    products, pagination = service.get_display_list(
        pins, page=args.page, limit=args.limit, search=args.search, category=args.category)
    for p in products:
        mark = '*' if pins.is_pinned(p.id) else ' '
        print(f"{mark} {p.id:>6}  {p.sku:<12} {p.name:<40} {p.price:>10,.2f}  {p.stock:g} {p.unit}")
    print(f"page {pagination.current_page}/{pagination.total_pages} ({pagination.total_items} products)")


def cmd_pin(args, pins):
    for pid in args.product_ids:
        state = pins.toggle(pid)
        print(f"{pid}: {'pinned' if state else 'unpinned'}")


def cmd_pins(args, pins):
    for pid in sorted(pins.pinned):
        print(pid)


def build_parser():
    parser = argparse.ArgumentParser(description="Hardware store POS helper")
    parser.add_argument('--db', help='Preferences database path')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('products', help='List catalog products, pinned first')
    p.add_argument('--search', default=None)
    p.add_argument('--category', default=None)
    p.add_argument('--page', type=int, default=1)
    p.add_argument('--limit', type=int, default=20)
    p.set_defaults(func=cmd_products)

    p = sub.add_parser('pin', help='Toggle the pinned flag of one or more products')
    p.add_argument('product_ids', nargs='+', type=int)
    p.set_defaults(func=cmd_pin)

    p = sub.add_parser('pins', help='Show pinned product ids')
    p.set_defaults(func=cmd_pins)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    config.setup_logging(logging.DEBUG if args.verbose else None)

    pins = PinnedProductStore(SqliteKeyValueStore(DatabaseManager(args.db)))
    pins.load()
    try:
        args.func(args, pins)
    except (ApiError, CartError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
