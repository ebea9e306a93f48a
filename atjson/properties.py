#  -*- coding: utf-8 -*-
"""
Mapping declarations: property factories and class registration.

A mapped class declares its JSON schema with class attributes built by the
factories of this module, and registers itself with ``json_class``::

    @json_class
    class Address:
        line1 = json_property()
        zip_code = json_property('zip')

    @json_class(ignore_undecorated_properties=False)
    class Person:
        name = json_property()
        age = json_property('eta')
        address = json_complex_property(Address)
        previous = json_array_of_complex_property(Address, 'prevs')
        phones = json_map()

Every factory funnels into ``make_custom_decorator``, which builds a
``JsonProperty``. When the owning class is created, the ``JsonProperty``
writes its ``MappingRule`` into the metadata store and appends its name to
the class field registry.
"""

from __future__ import annotations

import dataclasses
import logging

from collections.abc import Mapping
from numbers import Number

from .errors import MappingConfigurationError, ShapeMismatchError
from .metadata import (MetadataStore, MappingRule, ClassRegistration, TypeHint,
                       MappingFn, resolve_store, check_types, get_full_qualified_name,
                       MAPPING_METADATA, FIELDS_METADATA, MAPPING_OPTIONS,
                       TYPE_HINT_METADATA, GENERATOR_METADATA)

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import TypeVar, Callable, Any, TypeAlias, Self, TYPE_CHECKING

if TYPE_CHECKING:
    from .mapper import JsonMapper


logger = logging.getLogger(__name__)


T = TypeVar('T')
"""Represent the type of the property"""

Getter: TypeAlias = Callable[[object], T]
Params: TypeAlias = str | Mapping[str, Any] | None
Factory: TypeAlias = Callable[..., 'JsonProperty']

_OPTION_KEYS = frozenset({'name', 'serialize', 'deserialize'})


# ========== ========== ========== ========== ========== ==========
class JsonProperty:
    """
    Class attribute declaring how one property is mapped to JSON.

    ``JsonProperty`` is a non-data descriptor. Values assigned on an instance
    live in the instance ``__dict__`` (and are what the mapper serializes);
    reading a property that was never assigned returns the declared default.
    Accessing the attribute on the class returns the declaration itself.

    Parameters
    ----------
    rule : MappingRule
        Mapping rule registered for the property.
    default : object or callable, optional
        Value returned while the property is unset. A callable receives the
        instance and its result is stored on the instance.
    type_hint : TypeHint, optional
        Value hints for the mock generator.
    generator : callable, optional
        Zero-argument function used by the mock generator for this property.
    store : MetadataStore, optional
        Store receiving the declaration. Defaults to ``default_store``.

    Examples
    --------
    >>> @json_class
    ... class Sample:
    ...     numbers = json_array().type_hint(int).array_hint(1, 3)
    ...     label = json_property(default='none')
    >>> Sample().label
    'none'
    """

    # ========== ========== ========== ========== ========== class attributes
    __slots__ = ('_rule', '_default', '_type_hint', '_generator', '_store',
                 'name', 'owner', '__weakref__')

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 rule: MappingRule | None = None,
                 *,
                 default: T | Getter | None = None,
                 type_hint: TypeHint | None = None,
                 generator: Callable[[], Any] | None = None,
                 store: MetadataStore | None = None) -> None:

        self._rule: MappingRule = MappingRule() if rule is None else rule
        self._default: T | Getter | None = default
        self._type_hint: TypeHint | None = type_hint
        self._generator: Callable[[], Any] | None = generator
        self._store: MetadataStore | None = store

    def __set_name__(self, owner: type, name: str) -> None:
        """Register the rule on ``owner`` when the class body is executed."""
        self.name: str = name
        self.owner: type = owner

        store = resolve_store(self._store)

        fields = store.get_own(FIELDS_METADATA, owner, default=())

        if name not in fields:
            store.define(FIELDS_METADATA, (*fields, name), owner)

        store.define(MAPPING_METADATA, self._rule, owner, name)

        if self._type_hint is not None:
            store.define(TYPE_HINT_METADATA, self._type_hint, owner, name)

        if self._generator is not None:
            store.define(GENERATOR_METADATA, self._generator, owner, name)

    def __get__(self, instance: object | None, owner: type) -> Any:
        if instance is None:
            return self

        # only reached while the instance holds no value for this property
        if callable(self._default):
            value = self._default(instance)
            instance.__dict__[self.name] = value
            return value

        return self._default

    def __repr__(self) -> str:
        owner = getattr(self, 'owner', None)
        where = f"{owner.__qualname__}.{self.name}" if owner is not None else 'unbound'
        return f"<{type(self).__name__} {where} -> {self.external_name!r}>"

    # ========== ========== ========== ========== ========== private methods
    def _replace(self, **changes: Any) -> Self:
        kwargs = dict(rule=self._rule,
                      default=self._default,
                      type_hint=self._type_hint,
                      generator=self._generator,
                      store=self._store)
        kwargs.update(changes)

        return type(self)(**kwargs)

    def _with_hint(self, **changes: Any) -> Self:
        hint = TypeHint() if self._type_hint is None else self._type_hint
        return self._replace(type_hint=dataclasses.replace(hint, **changes))

    # ========== ========== ========== ========== ========== public methods
    def type_hint(self, hint: Any) -> Self:
        """Declare the type the mock generator should produce (item type for arrays)."""
        return self._with_hint(hint=hint, is_enum=False)

    def enum_hint(self, enum: Any) -> Self:
        """Declare an enumeration whose members the mock generator picks from."""
        return self._with_hint(hint=enum, is_enum=True)

    def array_hint(self, min_length: int, max_length: int | None = None) -> Self:
        """Bound the length of generated arrays (``max_length`` alone when given once)."""
        if max_length is None:
            min_length, max_length = 1, min_length

        if not 0 <= min_length <= max_length:
            raise MappingConfigurationError(
                f"Invalid array length bounds: {min_length}..{max_length}")

        return self._with_hint(min_length=min_length, max_length=max_length)

    def generator(self, func: Callable[[], Any]) -> Self:
        """Set the function the mock generator calls for this property."""
        return self._replace(generator=func)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def rule(self) -> MappingRule:
        return self._rule

    @property
    def external_name(self) -> str | None:
        return self._rule.external_name(getattr(self, 'name', None))


# ========== ========== ========== ========== ========== helpers
def json_type_name(value: Any) -> str:
    """
    Name of the JSON type of ``value``.

    Objects with no JSON counterpart report their qualified class name.

    >>> json_type_name('bar'), json_type_name(1.5), json_type_name(None)
    ('string', 'number', 'null')
    """
    if value is None:
        return 'null'

    if isinstance(value, bool):
        return 'boolean'

    if isinstance(value, Number):
        return 'number'

    if isinstance(value, str):
        return 'string'

    if isinstance(value, Mapping):
        return 'object'

    if isinstance(value, (list, tuple)):
        return 'array'

    return get_full_qualified_name(type(value))


def map_array(mapper: JsonMapper,
              value: Any,
              item_fn: MappingFn | None = None,
              throw_if_not_array: bool = False) -> list | None:
    """
    Apply ``item_fn`` to every element of an array value.

    Parameters
    ----------
    mapper : JsonMapper
        Running mapper, forwarded to ``item_fn``.
    value : object
        Candidate array. Lists and tuples are accepted.
    item_fn : callable, optional
        Item transform ``(mapper, item) -> item``. Items are copied as-is when
        omitted.
    throw_if_not_array : bool
        Raise instead of returning None when ``value`` is not an array.

    Returns
    -------
    list or None
        New list, same length and order as ``value``; None when ``value`` is
        not an array.

    Raises
    ------
    ShapeMismatchError
        If ``value`` is not an array and ``throw_if_not_array`` is set.
    """
    if isinstance(value, (list, tuple)):

        if item_fn is None:
            return list(value)

        return [item_fn(mapper, item) for item in value]

    observed = json_type_name(value)

    if throw_if_not_array:
        raise ShapeMismatchError('array', observed, value)

    logger.debug("Expected array, got %s: mapped to None", observed)

    return None


def _normalize_params(params: Params, **options: Any) -> dict[str, Any]:
    """Merge positional ``params`` (name or options mapping) with keyword options."""
    check_types(params, (str, Mapping), can_be_none=True)

    if params is None:
        resolved = {}

    elif isinstance(params, str):
        resolved = {'name': params}

    else:
        resolved = dict(params)

    unknown = set(resolved) - _OPTION_KEYS

    if unknown:
        raise MappingConfigurationError(f"Unknown mapping options: {sorted(unknown)}")

    for key, value in options.items():
        if value is not None:
            resolved[key] = value

    return resolved


def _check_mapping(value: Any) -> None:
    if not isinstance(value, Mapping):
        raise ShapeMismatchError('object', json_type_name(value), value)


# ========== ========== ========== ========== ========== factories
def make_custom_decorator(serialize: MappingFn,
                          deserialize: MappingFn,
                          **flags: Any) -> Factory:
    """
    Build a reusable property factory from a pair of mapping functions.

    Parameters
    ----------
    serialize : callable
        ``(mapper, value) -> json_value``.
    deserialize : callable
        ``(mapper, json_value) -> value``.
    **flags
        Descriptive ``MappingRule`` fields (``complex_type``, ``is_array``,
        ``is_map``, ``throw_if_not_array``).

    Returns
    -------
    callable
        Factory ``(params=None, *, default=None, store=None) -> JsonProperty``
        where ``params`` is the external name or an options mapping.

    Examples
    --------
    >>> import datetime
    >>> json_year = make_custom_decorator(
    ...     lambda mapper, d: str(d.year),
    ...     lambda mapper, s: datetime.date(int(s), 1, 1))
    >>> @json_class
    ... class Event:
    ...     when = json_year('year')
    """

    def factory(params: Params = None,
                *,
                default: Any = None,
                store: MetadataStore | None = None) -> JsonProperty:

        options = _normalize_params(params)

        rule = MappingRule(name=options.get('name'),
                           serialize=serialize,
                           deserialize=deserialize,
                           **flags)

        return JsonProperty(rule, default=default, store=store)

    return factory


def json_property(params: Params = None,
                  *,
                  serialize: MappingFn | None = None,
                  deserialize: MappingFn | None = None,
                  default: Any = None,
                  store: MetadataStore | None = None) -> JsonProperty:
    """
    The basic declaration for simple properties.

    The value is copied as-is unless custom functions are given.

    Parameters
    ----------
    params : str or mapping, optional
        External name, or a mapping with ``name``, ``serialize`` and
        ``deserialize`` entries.
    serialize, deserialize : callable, optional
        Custom ``(mapper, value)`` transforms.
    default : object or callable, optional
        See ``JsonProperty``.
    store : MetadataStore, optional
        Store receiving the declaration.

    Examples
    --------
    >>> @json_class
    ... class MyClass:
    ...     basic = json_property()
    ...     renamed = json_property('extName')
    ...     code = json_property({'name': 'custom',
    ...                           'serialize': lambda m, n: str(n),
    ...                           'deserialize': lambda m, s: int(s)})
    """
    options = _normalize_params(params, serialize=serialize, deserialize=deserialize)

    return JsonProperty(MappingRule(**options), default=default, store=store)


def json_array(params: Params = None,
               *,
               serialize: MappingFn | None = None,
               deserialize: MappingFn | None = None,
               throw_if_not_array: bool = False,
               default: Any = None,
               store: MetadataStore | None = None) -> JsonProperty:
    """
    Declaration for arrays of simple values.

    ``serialize`` and ``deserialize`` are item level transforms and must be
    given together. A value that is not an array maps to None, or raises
    ``ShapeMismatchError`` when ``throw_if_not_array`` is set.

    Raises
    ------
    MappingConfigurationError
        If only one of ``serialize`` / ``deserialize`` is given.

    Examples
    --------
    >>> @json_class
    ... class MyClass:
    ...     tags = json_array()
    ...     codes = json_array('extCodes',
    ...                        serialize=lambda m, n: str(n),
    ...                        deserialize=lambda m, s: int(s),
    ...                        throw_if_not_array=True)
    """
    options = _normalize_params(params, serialize=serialize, deserialize=deserialize)

    serialize_item = options.get('serialize')
    deserialize_item = options.get('deserialize')

    if (serialize_item is None) != (deserialize_item is None):
        raise MappingConfigurationError('serialize and deserialize must be defined together')

    factory = make_custom_decorator(
        lambda mapper, value: map_array(mapper, value, serialize_item, throw_if_not_array),
        lambda mapper, value: map_array(mapper, value, deserialize_item, throw_if_not_array),
        is_array=True,
        throw_if_not_array=throw_if_not_array)

    return factory(options.get('name'), default=default, store=store)


def json_complex_property(complex_type: type,
                          params: Params = None,
                          *,
                          default: Any = None,
                          store: MetadataStore | None = None) -> JsonProperty:
    """Declaration for a nested object of a registered class. None passes through."""
    check_types(complex_type, type)

    def serialize(mapper: JsonMapper, value: Any) -> Any:
        return mapper.serialize(value)

    def deserialize(mapper: JsonMapper, value: Any) -> Any:
        if value is None:
            return None

        return mapper.deserialize(complex_type, value)

    factory = make_custom_decorator(serialize, deserialize, complex_type=complex_type)

    return factory(params, default=default, store=store)


def json_array_of_complex_property(complex_type: type,
                                   params: Params = None,
                                   *,
                                   throw_if_not_array: bool = False,
                                   default: Any = None,
                                   store: MetadataStore | None = None) -> JsonProperty:
    """
    Declaration for an array of nested objects of a registered class.

    Shape mismatches behave as in ``json_array``; None items pass through.
    """
    check_types(complex_type, type)

    def serialize_item(mapper: JsonMapper, item: Any) -> Any:
        return mapper.serialize(item)

    def deserialize_item(mapper: JsonMapper, item: Any) -> Any:
        if item is None:
            return None

        return mapper.deserialize(complex_type, item)

    factory = make_custom_decorator(
        lambda mapper, value: map_array(mapper, value, serialize_item, throw_if_not_array),
        lambda mapper, value: map_array(mapper, value, deserialize_item, throw_if_not_array),
        complex_type=complex_type,
        is_array=True,
        throw_if_not_array=throw_if_not_array)

    return factory(params, default=default, store=store)


def json_map(params: Params = None,
             *,
             complex_type: type | None = None,
             default: Any = None,
             store: MetadataStore | None = None) -> JsonProperty:
    """
    Declaration for ``dict`` properties mapped to a JSON object with the same keys.

    Values are (de)serialized through the mapper when ``complex_type`` is
    given and copied otherwise. Key order is preserved.

    Raises
    ------
    ShapeMismatchError
        While mapping, if the value is neither None nor a mapping.
    """
    check_types(complex_type, type, can_be_none=True)

    def serialize(mapper: JsonMapper, value: Any) -> Any:
        if value is None:
            return None

        _check_mapping(value)

        if complex_type is None:
            return dict(value)

        return {key: mapper.serialize(item) for key, item in value.items()}

    def deserialize(mapper: JsonMapper, value: Any) -> Any:
        if value is None:
            return None

        _check_mapping(value)

        if complex_type is None:
            return dict(value)

        return {key: None if item is None else mapper.deserialize(complex_type, item)
                for key, item in value.items()}

    factory = make_custom_decorator(serialize, deserialize, complex_type=complex_type, is_map=True)

    return factory(params, default=default, store=store)


# ========== ========== ========== ========== ========== class registration
def json_class(cls: type | None = None,
               *,
               ignore_undecorated_properties: bool = True,
               store: MetadataStore | None = None) -> Any:
    """
    Register a class with the mapping engine.

    Usable bare (``@json_class``) or with options
    (``@json_class(ignore_undecorated_properties=False)``).

    Parameters
    ----------
    ignore_undecorated_properties : bool, default True
        If True, attributes without a declaration are dropped in both
        directions. If False, they are copied verbatim.
    store : MetadataStore, optional
        Store receiving the registration.

    Raises
    ------
    MappingConfigurationError
        If two properties of the class are mapped to the same JSON key.

    Notes
    -----
    Registration is not inherited: every class handed to the mapper,
    subclasses included, must be registered itself.
    """

    def decorator(klass: type) -> type:
        check_types(klass, type)

        _store = resolve_store(store)

        seen: dict[str, str] = {}

        for prop_name in _store.collect(FIELDS_METADATA, klass):

            rule: MappingRule | None = _store.get(MAPPING_METADATA, klass, prop_name)

            if rule is None:
                continue

            external = rule.external_name(prop_name)

            if external in seen:
                raise MappingConfigurationError(
                    f"Properties '{seen[external]}' and '{prop_name}' of class {klass.__name__} "
                    f"are both mapped to the JSON key '{external}'")

            seen[external] = prop_name

        _store.define(MAPPING_OPTIONS, ClassRegistration(ignore_undecorated_properties), klass)

        return klass

    if cls is None:
        return decorator

    return decorator(cls)


__all__ = [
    'JsonProperty',
    'json_class',
    'json_property',
    'json_array',
    'json_complex_property',
    'json_array_of_complex_property',
    'json_map',
    'make_custom_decorator',
    'map_array',
    'json_type_name',
]
