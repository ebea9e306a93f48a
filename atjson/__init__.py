#  -*- coding: utf-8 -*-
"""
atjson: declarative mapping between JSON values and Python objects.

Classes declare, property by property, how they map to JSON (renaming,
custom transforms, nested objects, arrays and maps). A ``JsonMapper`` walks
those declarations to serialize instances into JSON-ready values and to build
instances back from JSON.

Modules
-------
metadata
    ``MetadataStore``: explicit registry of class and property declarations
properties
    Declaration factories (``json_property``, ``json_array``, ...) and
    ``json_class`` registration
mapper
    ``JsonMapper`` engine and the ``CustomSerialize`` / ``AfterDeserialize``
    hooks
generator
    ``MockGenerator``: random instances built from the declarations
display
    ``MappingSchema``: Rich rendering of a class mapping
errors
    Exception hierarchy

Examples
--------
>>> from atjson import JsonMapper, json_class, json_property, json_array_of_complex_property
>>>
>>> @json_class
... class Address:
...     line1 = json_property()
...     zip_code = json_property('zip')
>>>
>>> @json_class
... class Person:
...     name = json_property()
...     age = json_property('eta')
...     addresses = json_array_of_complex_property(Address)
>>>
>>> mapper = JsonMapper()
>>> person = mapper.deserialize(Person, {'name': 'Ada', 'eta': 36,
...                                      'addresses': [{'line1': 'Main St', 'zip': '1000'}]})
>>> person.addresses[0].zip_code
'1000'
>>> mapper.serialize(person)['eta']
36
"""


from .errors import *
from .metadata import *
from .properties import *
from .mapper import *
from .generator import *
from .display import *


__all__ = [
    "JsonMapper",
    "CustomSerialize",
    "AfterDeserialize",
    "MetadataStore",
    "MappingRule",
    "ClassRegistration",
    "TypeHint",
    "default_store",
    "JsonProperty",
    "json_class",
    "json_property",
    "json_array",
    "json_complex_property",
    "json_array_of_complex_property",
    "json_map",
    "make_custom_decorator",
    "map_array",
    "MockGenerator",
    "MappingSchema",
    "DisplaySettings",
    "MappingError",
    "MappingConfigurationError",
    "UnregisteredClassError",
    "ShapeMismatchError",
]


try:
    # this will run if atjson is installed
    from importlib.metadata import metadata, PackageNotFoundError

    meta = metadata('atjson')

    __author__ = meta.get('Author-email')
    __license__ = meta.get('License')
    __version__ = meta['Version']

except PackageNotFoundError:
    # this will run during development
    import toml
    from pathlib import Path

    pyproject_filepath = Path(__file__).parent.parent / "pyproject.toml"

    with pyproject_filepath.open() as file:
        pyproject = toml.load(file)

    __version__ = pyproject["project"]["version"]
    __author__ = pyproject["project"]["authors"][0]["name"]
    __license__ = pyproject["project"]["license"]["text"]
