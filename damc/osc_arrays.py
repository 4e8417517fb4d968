"""Keyed arrays of OSC nodes whose set of keys is itself an OSC value."""

import logging

from .osc_flat_array import OscFlatArray
from .osc_node import KEYS_NODE, OscContainer
from .osc_variables import OscVariable
from .utils import is_number, remove_all

log = logging.getLogger(__name__)


class OscGenericArray(OscContainer):
    """Child nodes created by a factory, one per integer key.

    The list of keys is published at ``<address>/keys``. Changing it over OSC
    creates or removes items, and addressing a missing numeric child creates it.
    """

    def __init__(self, parent, name, factory=None):
        self._factory = factory
        self._items = {}
        self._next_key = 0
        super().__init__(parent, name)
        self._keys = OscFlatArray(self, KEYS_NODE, int)
        self._keys.add_change_callback(self._on_keys_changed)

    def set_factory(self, factory):
        """Set the callable ``factory(parent, key)`` that creates a new item."""
        self._factory = factory

    def __getitem__(self, key):
        return self._items[key]

    def __contains__(self, key):
        return key in self._items

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        """Iterate over the keys in ascending order."""
        return iter(sorted(self._items))

    def items(self):
        """Return the ``(key, item)`` pairs in ascending key order."""
        return [(key, self._items[key]) for key in sorted(self._items)]

    def values(self):
        """Return the items in ascending key order."""
        return [self._items[key] for key in sorted(self._items)]

    def next_key(self):
        """Return a key not used yet and reserve it."""
        key = self._next_key
        self._next_key += 1
        return key

    def append(self):
        """Add an item under the next free key."""
        self._require_factory()
        self.insert(self.next_key())

    def insert(self, key):
        """Add an item under ``key``."""
        self._require_factory()
        if self._next_key <= key:
            self._next_key = key + 1
        self._keys.update_data(lambda keys: keys.append(key))

    def erase(self, key):
        """Remove the item under ``key``."""
        self._keys.update_data(lambda keys: remove_all(keys, key))

    def resize(self, size):
        """Remove the largest keys or append new items until there are ``size`` items."""
        if size < 0:
            raise ValueError(f"array size cannot be negative: {size}")
        while len(self._items) > size:
            self.erase(max(self._items))
        while len(self._items) < size:
            self.append()

    def execute_path(self, address, arguments):
        child_name, _ = self.split_address(address)
        if child_name and is_number(child_name):
            key = int(child_name)
            if key not in self._items:
                log.debug("%s: detect new key %d by direct access", self.full_address, key)
                self.insert(key)
        super().execute_path(address, arguments)

    def _initialize_item(self, item):
        """Hook run on every newly created item."""

    def _require_factory(self):
        if self._factory is None:
            raise RuntimeError(f"{self.full_address}: no item factory set")

    def _on_keys_changed(self, old_keys, new_keys):
        keys_to_keep = []
        must_update_keys = False

        for key in new_keys:
            if key in keys_to_keep:
                log.error("%s: Duplicate key %d", self.full_address, key)
                must_update_keys = True
                continue
            keys_to_keep.append(key)
            if key not in old_keys:
                self._insert_value(key)

        for key in old_keys:
            if key not in keys_to_keep:
                self._erase_value(key)

        if must_update_keys:
            self._keys.set_data(keys_to_keep)

    def _insert_value(self, key):
        if key in self._items:
            return
        self._require_factory()
        log.debug("%s: new item %d", self.full_address, key)
        item = self._factory(self, key)
        self._initialize_item(item)
        self._items[key] = item

    def _erase_value(self, key):
        log.debug("%s: removing item %d", self.full_address, key)
        item = self._items.pop(key, None)
        if item is not None:
            item.detach()
        self._next_key = max(self._items) + 1 if self._items else 0


class OscArray(OscGenericArray):
    """An array of ``OscVariable`` items sharing a default value, converters and callbacks."""

    def __init__(self, parent, name, default=0.0):
        self._default = default
        self._to_osc = None
        self._from_osc = None
        self._change_callbacks = []
        super().__init__(parent, name, self._create_item)

    def _create_item(self, parent, key):
        return OscVariable(parent, str(key), self._default)

    def set_osc_converters(self, to_osc, from_osc):
        """Apply these OSC converters to items created from now on."""
        self._to_osc = to_osc
        self._from_osc = from_osc

    def add_change_callback(self, callback):
        """Register ``callback`` on items created from now on."""
        self._change_callbacks.append(callback)

    def _initialize_item(self, item):
        if self._to_osc is not None or self._from_osc is not None:
            item.set_osc_converters(self._to_osc, self._from_osc)
        for callback in self._change_callbacks:
            item.add_change_callback(callback)


class OscContainerArray(OscGenericArray):
    """An array of container nodes built by the factory."""