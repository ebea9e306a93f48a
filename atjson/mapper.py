#  -*- coding: utf-8 -*-
"""
The mapping engine.

``JsonMapper`` walks an instance of a registered class (or a JSON object)
against the rules recorded in a ``MetadataStore`` and produces the
counterpart representation:

- ``serialize`` turns an instance into a dict ready for a JSON encoder;
- ``deserialize`` builds an instance of a class from a dict or a JSON string;
- ``deserialize_array`` does the same element-wise for a list.

Mapped classes can opt into two hooks, detected through the runtime checkable
protocols ``CustomSerialize`` and ``AfterDeserialize``. The member must be
callable: a data attribute of the same name is not a hook.

- ``custom_serialize(mapper)`` fully replaces the default serialization;
- ``after_deserialize()`` runs once every field has been assigned.

A subclass overriding ``after_deserialize`` must call
``super().after_deserialize()`` itself if the ancestor behaviour is wanted.
"""

from __future__ import annotations

import json
import logging

from collections.abc import Mapping

from .errors import UnregisteredClassError, ShapeMismatchError
from .metadata import (MetadataStore, MappingRule, ClassRegistration,
                       resolve_store, check_types,
                       MAPPING_METADATA, FIELDS_METADATA, MAPPING_OPTIONS)
from .properties import json_type_name

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import TypeVar, Callable, Any, TypeAlias, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


T = TypeVar('T')

Parser: TypeAlias = Callable[[str | bytes], Any]
Encoder: TypeAlias = Callable[..., str]


@runtime_checkable
class CustomSerialize(Protocol):
    """Capability of classes that serialize themselves."""

    def custom_serialize(self, mapper: JsonMapper) -> Any:
        ...


@runtime_checkable
class AfterDeserialize(Protocol):
    """Capability of classes post-processing their deserialized state."""

    def after_deserialize(self) -> None:
        ...


class JsonMapper:
    """
    Serialize and deserialize instances of registered classes.

    Parameters
    ----------
    store : MetadataStore, optional
        Store holding the class registrations and mapping rules. Defaults to
        ``default_store``.
    parser : callable, optional
        Function turning JSON text into Python values, used when
        ``deserialize`` receives a string. Defaults to ``json.loads``.
    encoder : callable, optional
        Function used by ``dumps``. Defaults to ``json.dumps``.

    Examples
    --------
    >>> @json_class
    ... class Person:
    ...     name = json_property()
    ...     age = json_property('eta')
    >>> mapper = JsonMapper()
    >>> person = mapper.deserialize(Person, '{"name": "Ada", "eta": 36}')
    >>> person.age
    36
    >>> mapper.serialize(person)
    {'name': 'Ada', 'eta': 36}
    """

    # ========== ========== ========== ========== ========== class attributes
    __slots__ = ('_store', '_parser', '_encoder')

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 store: MetadataStore | None = None,
                 parser: Parser | None = None,
                 encoder: Encoder | None = None) -> None:

        self._store: MetadataStore = resolve_store(store)
        self._parser: Parser = json.loads if parser is None else parser
        self._encoder: Encoder = json.dumps if encoder is None else encoder

    # ========== ========== ========== ========== ========== private methods
    def _registration(self, cls: type) -> ClassRegistration:
        registration = self._store.get_own(MAPPING_OPTIONS, cls)

        if registration is None:
            raise UnregisteredClassError(cls)

        return registration

    def _parse(self, source: Any, parser: Parser | None) -> Any:
        if isinstance(source, (str, bytes, bytearray)):
            return (self._parser if parser is None else parser)(source)

        return source

    # ========== ========== ========== ========== ========== public methods
    def serialize(self, source: Any) -> Any:
        """
        Serialize an instance of a registered class.

        Parameters
        ----------
        source : object
            Instance to serialize. None is returned unchanged.

        Returns
        -------
        object
            A new dict keyed by external names, or whatever
            ``custom_serialize`` returns.

        Raises
        ------
        UnregisteredClassError
            If the class of ``source`` (or of a nested value) is not
            registered.
        ShapeMismatchError
            If an array property declared with ``throw_if_not_array`` does
            not hold an array.
        """
        if source is None:
            return None

        cls = type(source)
        registration = self._registration(cls)

        if isinstance(source, CustomSerialize) and callable(source.custom_serialize):
            return source.custom_serialize(self)

        logger.debug("Serializing %s", cls.__qualname__)

        target = {}

        for prop_name, value in vars(source).items():

            rule: MappingRule | None = self._store.get(MAPPING_METADATA, cls, prop_name)

            if rule is None:
                if not registration.ignore_undecorated_properties:
                    target[prop_name] = value

                continue

            if rule.serialize is not None:
                value = rule.serialize(self, value)

            target[rule.external_name(prop_name)] = value

        return target

    def deserialize(self, cls: type[T], source: Any, parser: Parser | None = None) -> T:
        """
        Build an instance of ``cls`` from a JSON object.

        Parameters
        ----------
        cls : type
            Registered class, instantiated without arguments.
        source : mapping or str
            JSON object, or JSON text parsed with ``parser``.
        parser : callable, optional
            Parser overriding the mapper's one for this call.

        Returns
        -------
        object
            The populated instance. Properties whose external key is absent
            from ``source`` keep their defaults; a key present with a null
            value is assigned None.

        Raises
        ------
        UnregisteredClassError
            If ``cls`` (or a nested class) is not registered.
        TypeError
            If ``source`` is not a JSON object.
        ShapeMismatchError
            If an array property declared with ``throw_if_not_array`` does
            not receive an array.
        """
        registration = self._registration(cls)

        source = self._parse(source, parser)
        check_types(source, Mapping)

        logger.debug("Deserializing %s", cls.__qualname__)

        target = cls()
        consumed: set[str] = set()

        for prop_name in self._store.collect(FIELDS_METADATA, cls):

            rule: MappingRule | None = self._store.get(MAPPING_METADATA, cls, prop_name)

            if rule is None:
                continue

            name = rule.external_name(prop_name)

            if name not in source:
                continue

            value = source[name]

            if rule.deserialize is not None:
                value = rule.deserialize(self, value)

            setattr(target, prop_name, value)
            consumed.add(name)

        if not registration.ignore_undecorated_properties:

            for key, value in source.items():
                if key not in consumed:
                    setattr(target, key, value)

        if isinstance(target, AfterDeserialize) and callable(target.after_deserialize):
            target.after_deserialize()

        return target

    def deserialize_array(self, cls: type[T], source: Any, parser: Parser | None = None) -> list[T]:
        """
        Deserialize every element of a JSON array into an instance of ``cls``.

        Raises
        ------
        ShapeMismatchError
            If ``source`` is not an array.
        """
        source = self._parse(source, parser)

        if not isinstance(source, (list, tuple)):
            raise ShapeMismatchError('array', json_type_name(source), source)

        return [self.deserialize(cls, item, parser) for item in source]

    def dumps(self, source: Any, **kwargs: Any) -> str:
        """Serialize ``source`` and encode the result as JSON text."""
        return self._encoder(self.serialize(source), **kwargs)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def store(self) -> MetadataStore:
        return self._store

    @property
    def parser(self) -> Parser:
        return self._parser


__all__ = [
    'JsonMapper',
    'CustomSerialize',
    'AfterDeserialize',
]
