# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2024/10/19 21:37:08
# @Author : Kariko Lin

"""
Basically a stack of dicts, read through as one.

The stack holds one *primary* dict, owned and writable, followed by any
number of *secondary* layers. Secondary layers are borrowed from the caller
and never written to.

    ```python
    defaults = {'colour': 'red', 'size': 3}
    lm = LayeredMap(defaults)
    lm['size'] = 5          # lands in primary, `defaults` stays 3.
    lm.remove('size')       # primary entry gone, `defaults` shows through.
    ```
"""

import logging
from collections.abc import Hashable, Iterator, Mapping, MutableMapping
from types import MappingProxyType
from typing import Any, TypeVar
from warnings import warn

from .loaders import load_layers

_MISSING: Any = object()

K = TypeVar('K', bound=Hashable)
V = TypeVar('V')


class DuplicateKeyError(ValueError):
    """Key already exists in the primary layer."""
    def __init__(self, key: Hashable) -> None:
        super().__init__(f'Attempt to add an existing key ({key!r}) was aborted.')
        self.key = key


class LayeredMap(MutableMapping[K, V]):
    """A dict made of layers, resolving each key in the first layer having it.

    Lookup order is primary first, then secondary layers by index, so
    `get_layer(0)` is the one checked right after primary.

    Every write goes to primary. Writing a key which only a secondary layer
    has *shadows* it. Deleting it again lets the secondary value show
    through, since the layer itself is never touched.

    Secondary layers are kept by reference. Mutating them from outside is
    visible here at once. Take `merge()` if a snapshot is wanted.
    """

    def __init__(
        self, *layers: Mapping[K, V],
        primary: Mapping[K, V] | None = None
    ) -> None:
        self._primary: dict[K, V] = dict(primary) if primary else {}
        self._layers: list[Mapping[K, V]] = []
        for i in layers:
            self._check_layer(i)
            self._layers.append(i)

    @classmethod
    def from_yaml(
        cls, source: str | bytes, *,
        with_primary: bool = False
    ) -> 'LayeredMap[Any, Any]':
        """Build a map from a multi-document YAML stream, one layer per doc.

        With `with_primary=True` the first document seeds the primary dict,
        which is what `loaders.dump_layers()` produces.
        """
        layers = load_layers(source)
        if with_primary and layers:
            primary, *layers = layers
            return cls(*layers, primary=primary)
        return cls(*layers)

    def _check_layer(self, layer: object) -> None:
        if not isinstance(layer, Mapping):
            raise TypeError(
                f'layer must be a mapping, not {type(layer).__name__}')
        if self._reaches(layer):
            raise ValueError(
                'a LayeredMap cannot be a layer of itself, even nested')

    def _reaches(self, layer: Mapping[Any, Any]) -> bool:
        """Whether `self` is found walking down nested `LayeredMap` layers."""
        stack, visited = [layer], set()
        while stack:
            i = stack.pop()
            if i is self:
                return True
            if isinstance(i, LayeredMap) and id(i) not in visited:
                visited.add(id(i))
                stack.extend(i._layers)
        return False

    # lookup

    def try_get(self, key: K) -> tuple[bool, V | None]:
        """Same scan as `self[key]`, but reports a miss instead of raising."""
        if key in self._primary:
            return True, self._primary[key]
        for layer in self._layers:
            if key in layer:
                return True, layer[key]
        return False, None

    def __getitem__(self, key: K) -> V:
        found, value = self.try_get(key)
        if not found:
            raise KeyError(key)
        return value

    def find_layer(self, key: K) -> int | None:
        """Index of the layer providing `key`: 0 for primary,
        `i + 1` for `get_layer(i)`, `None` if nothing has it."""
        for i, layer in enumerate((self._primary, *self._layers)):
            if key in layer:
                return i
        return None

    # write

    def set(self, key: K, value: V) -> None:
        """Replace the value of a *visible* key.

        Raises `KeyError` if no layer has `key`. The new value always goes
        to primary, whichever layer held the key before.
        """
        if key not in self:
            raise KeyError(key)
        self._primary[key] = value

    def __setitem__(self, key: K, value: V) -> None:
        self.set(key, value)

    def add(self, key: K, value: V) -> None:
        # only primary counts. secondary ones are free to shadow.
        if key in self._primary:
            raise DuplicateKeyError(key)
        self._primary[key] = value

    def try_add(self, key: K, value: V) -> bool:
        if key in self._primary:
            return False
        self._primary[key] = value
        return True

    def update(self, other: Any = (), /, **kwargs: V) -> None:
        """Insert or overwrite pairs in primary, like `dict.update()`.

        Unlike `self[key] = value`, keys need not be visible beforehand.
        """
        self._primary.update(other, **kwargs)

    def setdefault(self, key: K, default: V = None) -> V:
        found, value = self.try_get(key)
        if found:
            return value
        self.add(key, default)
        return default

    # remove

    def remove(self, key: K) -> bool:
        """Drop `key` from primary. Secondary layers are not consulted."""
        if key not in self._primary:
            return False
        del self._primary[key]
        return True

    def __delitem__(self, key: K) -> None:
        if not self.remove(key):
            raise KeyError(key)
        # same as INI inheritance: the lower layer still answers.
        if (layer := self.find_layer(key)) is not None:
            warn(
                f'"{key}" is still provided by layer {layer} after deletion.',
                stacklevel=2)

    def pop(self, key: K, default: Any = _MISSING) -> V:
        if key in self._primary:
            return self._primary.pop(key)
        if default is _MISSING:
            raise KeyError(key)
        return default

    def popitem(self) -> tuple[K, V]:
        return self._primary.popitem()

    def clear(self) -> None:
        """Empty primary. Layers are kept, see `clear_layers()`."""
        self._primary.clear()

    def clear_primary(self) -> None:
        self.clear()

    # membership & enumeration

    def __contains__(self, key: object) -> bool:
        return key in self._primary or any(key in i for i in self._layers)

    def contains_key(self, key: K) -> bool:
        return key in self

    def contains_value(self, value: object) -> bool:
        """Whether `value` is the *effective* value of some key.
        Shadowed values don't count."""
        for key in self:
            found = self[key]
            if found is value or found == value:
                return True
        return False

    def __iter__(self) -> Iterator[K]:
        seen: set[K] = set()
        for layer in (self._primary, *self._layers):
            for key in layer:
                if key not in seen:
                    seen.add(key)
                    yield key

    def __len__(self) -> int:
        return len(set(self._primary).union(*self._layers))

    def values(self) -> list[V]:
        """Collect effective values, *unique* and in key order.

        Hashable values are deduplicated through a set. Unhashable ones
        fall back to a linear scan among themselves.
        """
        ret: list[V] = []
        seen: set[Any] = set()
        unhashable: list[V] = []
        for key in self:
            value = self[key]
            try:
                if value in seen:
                    continue
                seen.add(value)
            except TypeError:
                if value in unhashable:
                    continue
                unhashable.append(value)
            ret.append(value)
        return ret

    def to_dict(self) -> dict[K, V]:
        """Resolve every visible key into a plain dict."""
        return {key: self[key] for key in self}

    # layers

    @property
    def layer_count(self) -> int:
        """Secondary layers, plus one for primary."""
        return len(self._layers) + 1

    def add_layer(self, layer: Mapping[K, V], index: int | None = None) -> None:
        """Insert a secondary layer at `index` (append if `None`).

        `index` is clamped into `[0, len(layers)]` rather than wrapped,
        i.e. `-5` means top priority and `10000` means the bottom.
        """
        self._check_layer(layer)
        count = len(self._layers)
        if index is None:
            index = count
        elif not 0 <= index <= count:
            clamped = min(max(index, 0), count)
            logging.debug(f'Layer index {index} clamped to {clamped}.')
            index = clamped
        self._layers.insert(index, layer)
        logging.debug(f'Layer added at {index}, {count + 1} secondary now.')

    def remove_layer(self, index: int) -> None:
        # out of range is just ignored.
        if not 0 <= index < len(self._layers):
            logging.debug(f'No layer at {index} to remove, ignored.')
            return
        del self._layers[index]
        logging.debug(f'Layer {index} removed.')

    def clear_layers(self) -> None:
        self._layers.clear()
        logging.debug('All secondary layers cleared.')

    def get_layers(self) -> tuple[Mapping[K, V], ...]:
        """Read-only views of secondary layers, in priority order.

        Each view is live, but the tuple is not: a later `add_layer()` or
        `remove_layer()` won't show up in a tuple already returned.
        """
        return tuple(MappingProxyType(i) for i in self._layers)

    def get_layer(self, index: int) -> Mapping[K, V]:
        if not 0 <= index < len(self._layers):
            raise IndexError(
                f'layer index {index} out of range '
                f'({len(self._layers)} secondary layers)')
        return MappingProxyType(self._layers[index])

    def get_primary(self) -> Mapping[K, V]:
        return MappingProxyType(self._primary)

    def merge(self) -> 'LayeredMap[K, V]':
        """Flatten into a new map with everything in primary, no layers.

        The result is decoupled from this map's layers (a shallow copy).
        """
        return type(self)(primary=self.to_dict())

    def copy(self) -> 'LayeredMap[K, V]':
        """Copy primary, but share the very same secondary layers."""
        return type(self)(*self._layers, primary=self._primary)

    def __repr__(self) -> str:
        return '<%s { .primary = %d, .layers = %d }>' % (
            type(self).__name__, len(self._primary), len(self._layers))
