#  -*- coding: utf-8 -*-
"""
Test suite for MockGenerator.

Tests cover:
- Values from class annotations
- Complex, array and map properties
- Type, enum and array length hints
- Generator functions
- Warnings for properties without type information
"""

import datetime
import enum
import logging

import numpy
import pytest
from unittest.mock import Mock

from atjson import (MockGenerator, JsonMapper, MetadataStore, json_class, json_property,
                    json_array, json_complex_property, json_array_of_complex_property, json_map)


# ========== ========== ========== ========== Models
class Color(enum.Enum):
    RED = 'red'
    GREEN = 'green'
    BLUE = 'blue'


COLOR_VALUES = {color.value for color in Color}


@json_class
class Leaf:
    label: str = json_property()
    weight: float = json_property()


@json_class
class Tree:
    name: str = json_property()
    age: int = json_property('eta')
    alive: bool = json_property()
    planted: datetime.date = json_property()
    color: Color = json_property()
    root: Leaf = json_complex_property(Leaf)
    leaves: list[Leaf] = json_array_of_complex_property(Leaf)
    tags: list[str] = json_array()
    scores = json_array().type_hint(int).array_hint(1, 3)
    rings = json_array().type_hint(float).array_hint(4, 10)
    shade = json_property().enum_hint(Color)
    index: dict[str, Leaf] = json_map(complex_type=Leaf)
    counts: dict[str, int] = json_map()


@json_class
class Paint:
    brand: str = json_property()
    color: Color = json_property()
    accents = json_array().enum_hint(Color)
    finish = json_property().enum_hint(Color)


@json_class
class Untyped:
    anything = json_property()
    items = json_array()
    table = json_map()


# ========== ========== ========== ========== Fixtures
@pytest.fixture
def generator() -> MockGenerator:
    return MockGenerator(rng=1234)


# ========== ========== ========== ========== Annotations
class TestAnnotations:

    def test_primitives(self, generator: MockGenerator) -> None:
        tree = generator.generate(Tree)

        assert isinstance(tree, Tree)
        assert isinstance(tree.name, str) and 8 <= len(tree.name) <= 16
        assert isinstance(tree.age, int) and 0 <= tree.age < 1000
        assert isinstance(tree.alive, bool)
        assert isinstance(tree.planted, datetime.date)
        assert tree.color in COLOR_VALUES

    def test_complex(self, generator: MockGenerator) -> None:
        tree = generator.generate(Tree)

        assert isinstance(tree.root, Leaf)
        assert isinstance(tree.root.label, str)
        assert isinstance(tree.root.weight, float)

    def test_array_of_complex(self, generator: MockGenerator) -> None:
        tree = generator.generate(Tree)

        assert 1 <= len(tree.leaves) <= 10
        assert all(isinstance(leaf, Leaf) for leaf in tree.leaves)

    def test_array_item_type_from_annotation(self, generator: MockGenerator) -> None:
        tree = generator.generate(Tree)

        assert len(tree.tags) >= 1
        assert all(isinstance(tag, str) for tag in tree.tags)

    def test_maps(self, generator: MockGenerator) -> None:
        tree = generator.generate(Tree)

        assert 1 <= len(tree.index) <= 5
        assert all(isinstance(key, str) for key in tree.index)
        assert all(isinstance(value, Leaf) for value in tree.index.values())
        assert all(isinstance(value, int) for value in tree.counts.values())

    def test_generated_instance_serializes(self, generator: MockGenerator) -> None:
        tree = generator.generate(Tree)
        tree.planted = tree.planted.isoformat()

        serialized = JsonMapper().serialize(tree)

        assert serialized['eta'] == tree.age
        assert serialized['root'] == {'label': tree.root.label, 'weight': tree.root.weight}
        assert len(serialized['leaves']) == len(tree.leaves)


# ========== ========== ========== ========== Hints
class TestHints:

    def test_array_bounds(self, generator: MockGenerator) -> None:
        for _ in range(50):
            tree = generator.generate(Tree)

            assert 1 <= len(tree.scores) <= 3
            assert all(isinstance(score, int) for score in tree.scores)

            assert 4 <= len(tree.rings) <= 10
            assert all(isinstance(ring, float) for ring in tree.rings)

    def test_enum_hint(self, generator: MockGenerator) -> None:
        shades = {generator.generate(Tree).shade for _ in range(50)}

        assert shades <= COLOR_VALUES
        assert len(shades) > 1

    def test_enum_hint_on_array(self, generator: MockGenerator) -> None:
        @json_class
        class Palette:
            colors = json_array().enum_hint(Color).array_hint(5, 5)

        palette = generator.generate(Palette)

        assert len(palette.colors) == 5
        assert all(color in COLOR_VALUES for color in palette.colors)

    def test_enum_values_encode_as_json(self, generator: MockGenerator) -> None:
        mapper = JsonMapper()
        paint = generator.generate(Paint)

        assert paint.color in COLOR_VALUES
        assert paint.finish in COLOR_VALUES
        assert all(color in COLOR_VALUES for color in paint.accents)

        restored = mapper.deserialize(Paint, mapper.dumps(paint))

        assert vars(restored) == vars(paint)
        assert Color(restored.color) in Color

    def test_generator_function(self, generator: MockGenerator) -> None:
        func = Mock(return_value='fixed')

        @json_class
        class C:
            value = json_property().generator(func)
            other = json_property().type_hint(int)

        c = generator.generate(C)

        func.assert_called_once_with()
        assert c.value == 'fixed'
        assert isinstance(c.other, int)

    def test_generator_function_wins_over_rule(self, generator: MockGenerator) -> None:
        @json_class
        class C:
            values = json_array().type_hint(int).generator(lambda: [1, 2, 3])

        assert generator.generate(C).values == [1, 2, 3]


# ========== ========== ========== ========== Reproducibility and stores
class TestGeneratorConfiguration:

    def test_seed_reproducible(self) -> None:
        first = MockGenerator(rng=42).generate(Leaf)
        second = MockGenerator(rng=42).generate(Leaf)

        assert vars(first) == vars(second)

    def test_accepts_numpy_generator(self) -> None:
        rng = numpy.random.default_rng(0)

        assert MockGenerator(rng=rng).rng is rng

    def test_explicit_store(self) -> None:
        store = MetadataStore()

        @json_class(store=store)
        class C:
            x: int = json_property(store=store)

        isolated = MockGenerator(store=store, rng=0)

        assert isinstance(isolated.generate(C).x, int)
        assert isolated.store is store
        assert vars(MockGenerator(rng=0).generate(C)) == {}

    def test_generate_requires_a_class(self, generator: MockGenerator) -> None:
        with pytest.raises(TypeError):
            generator.generate(Leaf())

    @pytest.mark.parametrize('annotation, expected', [
        (int, int),
        (float, float),
        (str, str),
        (bool, bool),
        (int | None, int),
        (datetime.datetime, datetime.datetime),
    ])
    def test_generate_value(self, generator: MockGenerator, annotation, expected) -> None:
        assert isinstance(generator.generate_value(annotation), expected)

    def test_generate_value_of_list(self, generator: MockGenerator) -> None:
        values = generator.generate_value(list[int])

        assert 1 <= len(values) <= 10
        assert all(isinstance(value, int) for value in values)


# ========== ========== ========== ========== Warnings
class TestWarnings:

    def test_untyped_properties(self, generator: MockGenerator, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger='atjson.generator'):
            untyped = generator.generate(Untyped)

        assert untyped.anything == {}
        assert untyped.items == []
        assert untyped.table == {}

        messages = [record.getMessage() for record in caplog.records]

        assert any('Untyped.anything' in message for message in messages)
        assert any('Untyped.items' in message and 'array' in message for message in messages)
        assert any('Untyped.table' in message and 'map' in message for message in messages)

    def test_ignore_warnings(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger='atjson.generator'):
            untyped = MockGenerator(rng=0, ignore_warnings=True).generate(Untyped)

        assert untyped.items == []
        assert not [record for record in caplog.records if record.name == 'atjson.generator']
