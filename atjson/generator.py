#  -*- coding: utf-8 -*-
"""
Random instances of mapped classes, built from their mapping metadata.

``MockGenerator`` only reads the metadata store. For every field of a class
it decides what to produce from, in order:

1. a generator function declared with ``JsonProperty.generator``;
2. the mapping rule (arrays, maps and complex properties);
3. a type or enum hint declared with ``JsonProperty.type_hint`` /
   ``JsonProperty.enum_hint``;
4. the class annotation of the property.

Properties without usable type information are generated as an empty dict
(or an empty list for arrays) and a warning is logged.
"""

from __future__ import annotations

import datetime
import enum
import inspect
import logging
import string
import types
import typing

import numpy

from .metadata import (MetadataStore, MappingRule, TypeHint, resolve_store, check_types,
                       MAPPING_METADATA, FIELDS_METADATA, MAPPING_OPTIONS,
                       TYPE_HINT_METADATA, GENERATOR_METADATA)

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import TypeVar, Callable, Any


logger = logging.getLogger(__name__)


T = TypeVar('T')

DEFAULT_MIN_ARRAY_LENGTH = 1
DEFAULT_MAX_ARRAY_LENGTH = 10
MAX_MAP_SIZE = 5

_ALPHABET = list(string.ascii_letters + string.digits)


def _strip_optional(annotation: Any) -> Any:
    """``X | None`` and ``Optional[X]`` become ``X``."""
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]

        if len(args) == 1:
            return args[0]

    return annotation


def _container_item_type(annotation: Any) -> Any:
    """Item type of ``list[X]`` / ``tuple[X, ...]`` and value type of ``dict[K, X]``."""
    annotation = _strip_optional(annotation)
    args = typing.get_args(annotation)

    if not args:
        return None

    return args[-1] if typing.get_origin(annotation) is dict else args[0]


class MockGenerator:
    """
    Build randomized instances of mapped classes.

    Parameters
    ----------
    store : MetadataStore, optional
        Store to read. Defaults to ``default_store``.
    rng : numpy.random.Generator or int, optional
        Random generator, or a seed for a new one.
    ignore_warnings : bool
        Do not log warnings about properties without type information.

    Examples
    --------
    >>> @json_class
    ... class Point:
    ...     x: float = json_property()
    ...     tags = json_array().type_hint(str).array_hint(2)
    >>> point = MockGenerator(rng=7).generate(Point)
    >>> isinstance(point.x, float), 1 <= len(point.tags) <= 2
    (True, True)
    """

    # ========== ========== ========== ========== ========== class attributes
    __slots__ = ('_store', '_rng', '_ignore_warnings')

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 store: MetadataStore | None = None,
                 rng: numpy.random.Generator | int | None = None,
                 ignore_warnings: bool = False) -> None:

        self._store: MetadataStore = resolve_store(store)
        self._rng: numpy.random.Generator = numpy.random.default_rng(rng)
        self._ignore_warnings: bool = ignore_warnings

    # ========== ========== ========== ========== ========== private methods
    def _warn(self, message: str, *args: Any) -> None:
        if not self._ignore_warnings:
            logger.warning(message, *args)

    @staticmethod
    def _annotations(cls: type) -> dict[str, Any]:
        try:
            return typing.get_type_hints(cls)

        except (NameError, TypeError) as error:
            logger.debug("Cannot resolve annotations of %s (%s), using raw ones",
                         cls.__qualname__, error)

            annotations = {}

            for klass in reversed(cls.__mro__):
                annotations.update(inspect.get_annotations(klass))

            return annotations

    def _is_mapped(self, cls: Any) -> bool:
        return isinstance(cls, type) and (
            self._store.get_own(MAPPING_OPTIONS, cls) is not None
            or bool(self._store.collect(FIELDS_METADATA, cls)))

    def _random_string(self) -> str:
        length = int(self._rng.integers(8, 16, endpoint=True))
        return ''.join(self._rng.choice(_ALPHABET, size=length))

    def _random_choice(self, choices: Any) -> Any:
        """Random item of ``choices``; enum members are replaced by their value."""
        members = list(choices)
        member = members[int(self._rng.integers(len(members)))]

        if isinstance(member, enum.Enum):
            return member.value

        return member

    def _length(self, hint: TypeHint | None, low: int, high: int) -> int:
        if hint is not None and hint.max_length is not None:
            low, high = hint.min_length or 0, hint.max_length

        return int(self._rng.integers(low, high, endpoint=True))

    def _item_factory(self,
                      annotation: Any,
                      rule: MappingRule,
                      hint: TypeHint | None,
                      where: str) -> Callable[[], Any] | None:

        if rule.complex_type is not None:
            return lambda: self.generate(rule.complex_type)

        if hint is not None and hint.hint is not None:
            if hint.is_enum:
                return lambda: self._random_choice(hint.hint)

            return lambda: self.generate_value(hint.hint, where)

        item_type = _container_item_type(annotation)

        if item_type is None:
            return None

        return lambda: self.generate_value(item_type, where)

    def _generate_field(self, cls: type, prop_name: str, annotation: Any) -> Any:
        where = f"{cls.__qualname__}.{prop_name}"

        generator = self._store.get(GENERATOR_METADATA, cls, prop_name)

        if generator is not None:
            return generator()

        rule: MappingRule = self._store.get(MAPPING_METADATA, cls, prop_name, default=MappingRule())
        hint: TypeHint | None = self._store.get(TYPE_HINT_METADATA, cls, prop_name)

        if rule.is_array:
            make_item = self._item_factory(annotation, rule, hint, where)

            if make_item is None:
                self._warn("%s: array without type hint, it will be generated empty", where)
                return []

            length = self._length(hint, DEFAULT_MIN_ARRAY_LENGTH, DEFAULT_MAX_ARRAY_LENGTH)

            return [make_item() for _ in range(length)]

        if rule.is_map:
            make_item = self._item_factory(annotation, rule, hint, where)

            if make_item is None:
                self._warn("%s: map without type hint, it will be generated as {}", where)
                return {}

            return {self._random_string(): make_item()
                    for _ in range(self._length(hint, 1, MAX_MAP_SIZE))}

        if rule.complex_type is not None:
            return self.generate(rule.complex_type)

        if hint is not None and hint.hint is not None:
            if hint.is_enum:
                return self._random_choice(hint.hint)

            return self.generate_value(hint.hint, where)

        return self.generate_value(annotation, where)

    # ========== ========== ========== ========== ========== public methods
    def generate(self, cls: type[T]) -> T:
        """
        Build an instance of ``cls`` with every mapped field set to a random value.

        Parameters
        ----------
        cls : type
            Mapped class, instantiated without arguments.

        Returns
        -------
        object
            The generated instance.
        """
        check_types(cls, type)

        target = cls()
        annotations = self._annotations(cls)

        for prop_name in self._store.collect(FIELDS_METADATA, cls):
            setattr(target, prop_name,
                    self._generate_field(cls, prop_name, annotations.get(prop_name)))

        return target

    def generate_value(self, annotation: Any, where: str = 'value') -> Any:
        """Random value of the type described by ``annotation``."""
        annotation = _strip_optional(annotation)
        origin = typing.get_origin(annotation)

        if annotation is bool:
            return bool(self._rng.integers(2))

        if annotation is int:
            return int(self._rng.integers(0, 1000))

        if annotation is float:
            return float(self._rng.random())

        if annotation is str:
            return self._random_string()

        if annotation is datetime.datetime:
            return datetime.datetime.now()

        if annotation is datetime.date:
            return datetime.date.today()

        if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
            return self._random_choice(annotation)

        if origin in (list, tuple) and typing.get_args(annotation):
            item_type = typing.get_args(annotation)[0]
            length = self._length(None, DEFAULT_MIN_ARRAY_LENGTH, DEFAULT_MAX_ARRAY_LENGTH)
            return [self.generate_value(item_type, where) for _ in range(length)]

        if self._is_mapped(annotation):
            return self.generate(annotation)

        self._warn("%s: no usable type information, it will be generated as {}", where)

        return {}

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def store(self) -> MetadataStore:
        return self._store

    @property
    def rng(self) -> numpy.random.Generator:
        return self._rng


__all__ = [
    'MockGenerator',
]
