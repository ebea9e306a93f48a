#  -*- coding: utf-8 -*-
"""
Exceptions raised by the mapping declarations and the mapping engine.

Every error derives from ``MappingError`` and from the builtin exception a
caller would expect for the same situation, so ``except TypeError`` keeps
working around ``JsonMapper`` calls.
"""

from __future__ import annotations

from typing import Any


class MappingError(Exception):
    """Base class of all atjson errors."""


class MappingConfigurationError(MappingError, ValueError):
    """
    Inconsistent declaration detected while a class is being defined.

    Case:
        - ``json_array`` given only one of ``serialize`` / ``deserialize``.
        - two properties of the same class mapped to the same JSON key.
    """


class UnregisteredClassError(MappingError, TypeError):
    """A class reached the mapping engine without ``json_class`` registration."""

    def __init__(self, cls: type) -> None:
        super().__init__(f"Class {cls.__name__} is not decorated with @json_class")
        self.cls = cls


class ShapeMismatchError(MappingError, TypeError):
    """A container was expected and something else was found."""

    def __init__(self, expected: str, observed: str, value: Any = None) -> None:
        super().__init__(f"Expected {expected}, got {observed}")
        self.expected = expected
        self.observed = observed
        self.value = value


__all__ = [
    'MappingError',
    'MappingConfigurationError',
    'UnregisteredClassError',
    'ShapeMismatchError',
]
