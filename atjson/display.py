#  -*- coding: utf-8 -*-
"""
Rich terminal display of registered mappings.

``MappingSchema`` renders the mapping declared for a class (JSON keys, kind
of each property, nested types and class options) as a Rich panel. Display
options live in ``DisplaySettings``, itself a mapped class, so a theme can be
stored as JSON through ``JsonMapper``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from io import StringIO

from rich.text import Text
from rich.panel import Panel
from rich.console import Console, Group, RenderableType
from rich.table import Table
from rich import box

from .metadata import (MetadataStore, MappingRule, ClassRegistration, resolve_store,
                       check_types, get_full_qualified_name,
                       MAPPING_METADATA, FIELDS_METADATA, MAPPING_OPTIONS)
from .properties import json_class, json_property


# ========== ========== ========== ========== ========== ==========
@json_class
class DisplaySettings:
    """
    Configuration for terminal display formatting.

    Attributes
    ----------
    console_width : int
        Maximum console output width in characters. Default 120.
    property_style : str
        Style for labels in forms. Default 'bold bright_yellow'.
    panel_border_style : str
        Style for panel borders. Default 'bright_cyan'.
    panel_box : str
        Box style name from rich.box. Default 'ROUNDED'.
    panel_title_align : str
        Panel title alignment. Default 'center'.
    table_header_style : str
        Style for table headers. Default 'bold bright_yellow'.
    table_spacing : int
        Column spacing in characters. Default 4.

    Examples
    --------
    Store a theme::

        settings = DisplaySettings()
        settings.panel_border_style = 'green'
        text = JsonMapper().dumps(settings)
        settings = JsonMapper().deserialize(DisplaySettings, text)
    """

    console_width: int = json_property(default=120)
    property_style: str = json_property(default='bold bright_yellow')
    panel_border_style: str = json_property(default='bright_cyan')
    panel_box: str = json_property(default='ROUNDED')
    panel_title_align: str = json_property(default='center')
    table_header_style: str = json_property(default='bold bright_yellow')
    table_spacing: int = json_property(default=4)


class Displayable(ABC):
    """
    Abstract base for objects with Rich terminal display.

    Subclasses define ``_title()`` and ``_content()``; the panel, its styling
    and the rendering to text are handled here.
    """

    def __init__(self, settings: DisplaySettings | None = None) -> None:
        self.display_settings: DisplaySettings = DisplaySettings() if settings is None else settings

    # ========== ========== ========== ========== ========== special methods
    def __str__(self) -> str:
        string_io = StringIO()
        console = Console(file=string_io,
                          force_terminal=True,
                          width=self.display_settings.console_width)

        console.print(self._display_panel())

        return string_io.getvalue()

    def __rich__(self) -> RenderableType:
        return self._display_panel()

    # ========== ========== ========== ========== ========== protected methods
    @abstractmethod
    def _title(self) -> Text:
        ...

    @abstractmethod
    def _content(self) -> RenderableType:
        ...

    def _display_panel(self) -> Panel:
        return Panel(
            self._content(),
            title=self._title(),
            border_style=self.display_settings.panel_border_style,
            title_align=self.display_settings.panel_title_align,
            expand=False,
            box=getattr(box, self.display_settings.panel_box)
        )

    # ========== ========== ========== ========== ========== public methods
    def format_as_form(self, data: dict[str, str]) -> Table:
        """Two-column key/value table, keys styled with ``property_style``."""
        form = Table.grid(padding=(0, self.display_settings.table_spacing), expand=False)
        form.add_column(justify='left', style=self.display_settings.property_style)
        form.add_column(justify='left', style=None)

        for prop, value in data.items():
            form.add_row(f'{prop}:', value)

        return form


def describe_kind(rule: MappingRule) -> str:
    """Short label of the kind of a mapping rule."""
    if rule.is_array and rule.complex_type is not None:
        return 'array of complex'

    if rule.is_array:
        return 'array'

    if rule.is_map:
        return 'map'

    if rule.complex_type is not None:
        return 'complex'

    if rule.serialize is not None or rule.deserialize is not None:
        return 'custom'

    return 'property'


class MappingSchema(Displayable):
    """
    Display of the mapping registered for a class.

    Parameters
    ----------
    cls : type
        Class to describe.
    store : MetadataStore, optional
        Store to read. Defaults to ``default_store``.
    settings : DisplaySettings, optional
        Display options.

    Examples
    --------
    >>> print(MappingSchema(Person))  # doctest: +SKIP
    """

    def __init__(self,
                 cls: type,
                 store: MetadataStore | None = None,
                 settings: DisplaySettings | None = None) -> None:
        super().__init__(settings)

        check_types(cls, type)

        self.cls: type = cls
        self.store: MetadataStore = resolve_store(store)

    def _title(self) -> Text:
        return Text(get_full_qualified_name(self.cls))

    def _content(self) -> RenderableType:
        registration: ClassRegistration | None = self.store.get_own(MAPPING_OPTIONS, self.cls)

        if registration is None:
            options = {'registered': 'no'}
        else:
            ignored = 'ignored' if registration.ignore_undecorated_properties else 'copied'
            options = {'registered': 'yes', 'undecorated properties': ignored}

        return Group(self.format_as_form(options), Text(), self.rows_table())

    def rows(self) -> list[tuple[str, str, str, str]]:
        """(property, JSON key, kind, nested type) for every mapped field."""
        rows = []

        for prop_name in self.store.collect(FIELDS_METADATA, self.cls):

            rule: MappingRule | None = self.store.get(MAPPING_METADATA, self.cls, prop_name)

            if rule is None:
                continue

            nested = '' if rule.complex_type is None else rule.complex_type.__qualname__
            rows.append((prop_name, rule.external_name(prop_name), describe_kind(rule), nested))

        return rows

    def rows_table(self) -> Table:
        table = Table(box=None,
                      padding=(0, self.display_settings.table_spacing),
                      header_style=self.display_settings.table_header_style,
                      expand=False)

        for header in ('property', 'JSON key', 'kind', 'type'):
            table.add_column(header, justify='left')

        for row in self.rows():
            table.add_row(*row)

        return table


__all__ = [
    'DisplaySettings',
    'Displayable',
    'MappingSchema',
    'describe_kind',
]
