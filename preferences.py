"""Operator preferences kept on the device, independent of any cart session."""
import json
import logging
from datetime import datetime

from database import DatabaseManager, commit_with_retry
from models import InvalidProductError

logger = logging.getLogger(__name__)

PINNED_PRODUCTS_KEY = 'pinnedProducts'


class KeyValueStore:
    """String slots addressed by key. `get` returns None for a missing key."""

    def get(self, key):
        raise NotImplementedError

    def set(self, key, value):
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial=None):
        self._data = dict(initial or {})

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value


class SqliteKeyValueStore(KeyValueStore):
    def __init__(self, db=None):
        self.db = db or DatabaseManager()

    def get(self, key):
        conn = self.db.connect()
        try:
            row = conn.execute('SELECT value FROM preferences WHERE key = ?', (key,)).fetchone()
        finally:
            conn.close()
        return row['value'] if row else None

    def set(self, key, value):
        now = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        conn = self.db.connect()
        try:
            conn.execute(
                'INSERT INTO preferences (key, value, updated_at) VALUES (?, ?, ?) '
                'ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at',
                (key, value, now),
            )
            commit_with_retry(conn)
        finally:
            conn.close()


def _coerce_id(raw):
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().lstrip('-').isdigit():
        return int(raw.strip())
    return None


class PinnedProductStore:
    """Products the operator has flagged for quick access.

    The whole set is written back on every toggle, last write wins.
    """

    def __init__(self, store, key=PINNED_PRODUCTS_KEY):
        self.store = store
        self.key = key
        self._pinned = set()

    @property
    def pinned(self):
        return frozenset(self._pinned)

    def load(self):
        """Read the persisted set. Missing or malformed data yields an empty set."""
        self._pinned = set()
        raw = self.store.get(self.key)
        if raw is None:
            return self.pinned
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed pinned products value %r", raw)
            return self.pinned
        if not isinstance(data, list):
            logger.warning("Ignoring pinned products value that is not a list: %r", raw)
            return self.pinned
        for entry in data:
            pid = _coerce_id(entry)
            if pid is None:
                logger.warning("Skipping invalid pinned product id %r", entry)
                continue
            self._pinned.add(pid)
        return self.pinned

    def toggle(self, product_id):
        """Pin or unpin `product_id`, persist, and return the new pinned state."""
        pid = _coerce_id(product_id)
        if pid is None:
            raise InvalidProductError(f"Cannot pin product with id {product_id!r}")
        product_id = pid
        updated = set(self._pinned)
        now_pinned = product_id not in updated
        if now_pinned:
            updated.add(product_id)
        else:
            updated.discard(product_id)
        # memory only changes once the write has gone through
        self.store.set(self.key, json.dumps(sorted(updated)))
        self._pinned = updated
        logger.info("Product %s %s", product_id, 'pinned' if now_pinned else 'unpinned')
        return now_pinned

    def is_pinned(self, product_id):
        return _coerce_id(product_id) in self._pinned


def sort_products_for_display(products, pinned_ids):
    """Pinned products first, then by name (case-insensitive) within each group."""
    pinned_ids = set(pinned_ids)
    return sorted(
        products,
        key=lambda p: (p.id not in pinned_ids, (p.name or '').casefold()),
    )
