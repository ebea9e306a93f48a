#  -*- coding: utf-8 -*-
"""
Explicit metadata store for class and property mapping declarations.

Every declaration made through ``atjson`` (``json_class``, ``json_property``
and friends) ends up as an entry of a ``MetadataStore``. Entries are keyed by
a metadata key, the class they are attached to and, optionally, the name of a
property of that class.

Lookup semantics
----------------
``MetadataStore.get`` looks at the slot of the given class first and then
walks the class ``__mro__``, so a subclass sees the declarations of its
ancestors unless it overrides them. Defining metadata on a subclass never
touches the slot of an ancestor.

Field registries are kept per class (only the names declared directly on the
class) and are merged on demand by ``MetadataStore.collect``, walking the MRO
from the most basic ancestor down to the class itself.
"""

from __future__ import annotations

import weakref

from dataclasses import dataclass

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from collections.abc import Hashable
from typing import Any, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from .mapper import JsonMapper


MappingFn = Callable[['JsonMapper', Any], Any]
"""Custom (de)serialization function: receives the running mapper and a value"""


MAPPING_METADATA = 'atjson:mapping'
FIELDS_METADATA = 'atjson:fields'
MAPPING_OPTIONS = 'atjson:options'
TYPE_HINT_METADATA = 'atjson:type-hint'
GENERATOR_METADATA = 'atjson:generator'


# ========== ========== ========== ========== ========== ==========
def get_full_qualified_name(cls: type) -> str:
    """
    Get the fully qualified name of a class.

    Returns the full module path and class name, except for built-in types
    which return only the class name.

    Examples
    --------
    >>> get_full_qualified_name(int)
    'int'

    >>> from pathlib import Path
    >>> get_full_qualified_name(Path)
    'pathlib.Path'
    """
    module = cls.__module__

    if module is None or module == 'builtins':
        return cls.__qualname__

    return f"{module}.{cls.__qualname__}"


def check_types(obj: Any,
                types: type | tuple[type, ...],
                can_be_none: bool = False,
                raise_error: bool = True) -> bool:
    """Checks if ``obj`` is instance of ``types``.

    Parameters
    ----------
    obj : object
        Object whose type must be checked.
    types : type or tuple of types
        Expected types of ``obj``.
    can_be_none : bool
        Set this if ``None`` is an acceptable value for ``obj``.
    raise_error : bool
        If True, ``TypeError`` is raised when ``obj`` has an unexpected type.

    Returns
    -------
    bool
        True if ``obj`` is an instance of one of the given ``types``.

    Raises
    ------
    TypeError
        if ``obj`` is not an instance of one of the given ``types`` and
        ``raise_error = True``
    """
    if can_be_none:
        if isinstance(types, tuple):
            types = (*types, None.__class__)
        else:
            types = (types, None.__class__)

    result = isinstance(obj, types)

    if not result and raise_error:

        if isinstance(types, tuple):
            cls_names = ', '.join(get_full_qualified_name(cls) for cls in types)
        else:
            cls_names = get_full_qualified_name(types)

        error_msg = f"Expected instance of one of the following classes: {cls_names}. " \
                    f"Given {get_full_qualified_name(type(obj))} instead"
        raise TypeError(error_msg)

    return result


# ========== ========== ========== ========== ========== ==========
@dataclass(frozen=True, slots=True)
class MappingRule:
    """
    Mapping declaration attached to one property of one class.

    Attributes
    ----------
    name : str or None
        External (JSON side) key. ``None`` means the property name itself.
    serialize : MappingFn or None
        Transform applied when serializing. ``None`` copies the raw value.
    deserialize : MappingFn or None
        Transform applied when deserializing. ``None`` copies the raw value.
    complex_type : type or None
        Registered class of nested values (complex properties, arrays of
        complex objects and complex-valued maps).
    is_array : bool
        The property holds a list.
    is_map : bool
        The property holds a key/value mapping.
    throw_if_not_array : bool
        Shape mismatches on array properties raise instead of mapping to None.
    """
    name: str | None = None
    serialize: MappingFn | None = None
    deserialize: MappingFn | None = None
    complex_type: type | None = None
    is_array: bool = False
    is_map: bool = False
    throw_if_not_array: bool = False

    def external_name(self, property_name: str) -> str:
        return self.name or property_name


@dataclass(frozen=True, slots=True)
class ClassRegistration:
    """Class level options recorded by ``json_class``."""
    ignore_undecorated_properties: bool = True


@dataclass(frozen=True, slots=True)
class TypeHint:
    """Value hints read by the mock generator."""
    hint: Any = None
    is_enum: bool = False
    min_length: int | None = None
    max_length: int | None = None


# ========== ========== ========== ========== ========== ==========
class MetadataStore:
    """
    Registry of mapping metadata keyed by class identity and property name.

    Examples
    --------
    >>> store = MetadataStore()
    >>> class C: ...
    >>> class D(C): ...
    >>> store.define('foo', 42, C, 'bar')
    >>> store.get('foo', D, 'bar')
    42
    >>> store.get_own('foo', D, 'bar') is None
    True
    """

    # ========== ========== ========== ========== ========== class attributes
    __slots__ = ('_slots', '__weakref__')

    # ========== ========== ========== ========== ========== special methods
    def __init__(self) -> None:
        self._slots: weakref.WeakKeyDictionary[type, dict[str | None, dict[Hashable, Any]]] = \
            weakref.WeakKeyDictionary()

    def __contains__(self, target: type) -> bool:
        return target in self._slots

    # ========== ========== ========== ========== ========== public methods
    def define(self,
               key: Hashable,
               value: Any,
               target: type,
               property_name: str | None = None) -> None:
        """Associate ``value`` to ``key`` on ``target`` (and ``property_name``)."""
        check_types(target, type)

        slot = self._slots.setdefault(target, {})
        slot.setdefault(property_name, {})[key] = value

    def get_own(self,
                key: Hashable,
                target: type,
                property_name: str | None = None,
                default: Any = None) -> Any:
        """Value defined directly on ``target``, without looking at ancestors."""
        try:
            return self._slots[target][property_name][key]
        except (KeyError, TypeError):
            return default

    def get(self,
            key: Hashable,
            target: type,
            property_name: str | None = None,
            default: Any = None) -> Any:
        """Value defined on ``target`` or, failing that, on its nearest ancestor."""
        for klass in getattr(target, '__mro__', ()):

            slot = self._slots.get(klass)

            if slot is None:
                continue

            entries = slot.get(property_name)

            if entries is not None and key in entries:
                return entries[key]

        return default

    def collect(self, key: Hashable, target: type) -> tuple:
        """
        Merge the sequences stored under ``key`` along the MRO of ``target``.

        Ancestors come first; repeated items keep their first position.
        """
        merged: dict[Any, None] = {}

        for klass in reversed(getattr(target, '__mro__', ())):
            for item in self.get_own(key, klass, default=()):
                merged.setdefault(item, None)

        return tuple(merged)

    def clear(self, target: type | None = None) -> None:
        """Forget the metadata of ``target``, or of every class when None."""
        if target is None:
            self._slots.clear()
        else:
            self._slots.pop(target, None)


default_store = MetadataStore()
"""Process wide store used whenever no explicit store is given"""


def resolve_store(store: MetadataStore | None) -> MetadataStore:
    return default_store if store is None else store


__all__ = [
    'MetadataStore',
    'MappingRule',
    'ClassRegistration',
    'TypeHint',
    'default_store',
    'MAPPING_METADATA',
    'FIELDS_METADATA',
    'MAPPING_OPTIONS',
    'TYPE_HINT_METADATA',
    'GENERATOR_METADATA',
]
