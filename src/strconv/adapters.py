"""
Driver adapters backed by conversion descriptors.

This module plugs descriptors into the drivers' own adaptation hooks, so a
type converts the same way whichever driver binds or fetches it:

1. psycopg: text-format Dumper and Loader classes in an AdaptersMap
2. sqlite3: adapters keyed by Python class and converters keyed by
   declared column type

Usage:
    adapter_registry = get_adapter_registry()

    # PostgreSQL
    conn = psycopg.connect(...)
    conn.adapters.update(adapter_registry.postgres(
        dumpers=[Colour], loaders={'int2': numpy.int16}))

    # SQLite
    sqlite_conn = sqlite3.connect(..., detect_types=sqlite3.PARSE_DECLTYPES)
    adapter_registry.sqlite(sqlite_conn, adapters=[Colour],
                            converters={'colour': Colour})
"""
import logging
import sqlite3
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

import psycopg
from psycopg.adapt import AdaptersMap, Dumper, Loader
from psycopg.postgres import types as pg_types

from strconv.capabilities import origin_class
from strconv.conversion import as_text
from strconv.registry import resolve
from strconv.traits import StringTraits, encode_text

logger = logging.getLogger(__name__)

SQLiteConnection = TypeVar('SQLiteConnection')


class TraitsDumper(Dumper):
    """Dumper writing the descriptor's text; null values become NULL."""

    traits: StringTraits

    def dump(self, obj):
        text = self.traits.render(obj)
        if text is None:
            return None
        return encode_text(text, self.traits.name)


class TraitsLoader(Loader):
    """Loader reading field text through the descriptor."""

    traits: StringTraits

    def load(self, data):
        return self.traits.from_string(as_text(data, self.traits.name))


def make_dumper(tp: Any) -> type[TraitsDumper]:
    traits = resolve(tp)
    name = f'{origin_class(tp).__name__}Dumper'
    return type(name, (TraitsDumper,), {'traits': traits})


def make_loader(tp: Any) -> type[TraitsLoader]:
    traits = resolve(tp)
    name = f'{origin_class(tp).__name__}Loader'
    return type(name, (TraitsLoader,), {'traits': traits})


def _postgres_oid(type_code: int | str) -> int:
    if isinstance(type_code, int):
        return type_code
    info = pg_types.get(type_code)
    if info is None:
        raise ValueError(f'Unknown PostgreSQL type {type_code!r}; pass its oid instead')
    return info.oid


class AdapterRegistry:
    """Registry of driver adapters built from conversion descriptors"""

    def postgres(self, dumpers: Iterable[Any] = (),
                 loaders: Mapping[int | str, Any] | None = None,
                 base: AdaptersMap | None = None) -> AdaptersMap:
        """Create PostgreSQL adapter map

        Args:
            dumpers: Types whose values are bound through their descriptor
            loaders: PostgreSQL type name or oid -> type to load fields as
            base: Adapters to extend, by default psycopg's global adapters

        Returns
            AdaptersMap with the dumpers and loaders registered
        """
        postgres_adapters = AdaptersMap(base if base is not None else psycopg.adapters)

        for tp in dumpers:
            postgres_adapters.register_dumper(origin_class(tp), make_dumper(tp))
            logger.debug(f'Registered psycopg dumper for {resolve(tp).name}')

        for type_code, tp in (loaders or {}).items():
            postgres_adapters.register_loader(_postgres_oid(type_code), make_loader(tp))
            logger.debug(f'Registered psycopg loader {type_code!r} -> {resolve(tp).name}')

        return postgres_adapters

    def sqlite(self, connection: SQLiteConnection, adapters: Iterable[Any] = (),
               converters: Mapping[str, Any] | None = None) -> None:
        """Register SQLite adapters for a connection

        Args:
            connection: SQLite connection object
            adapters: Types whose values are bound through their descriptor
            converters: Declared column type -> type to load fields as

        Note:
            Due to SQLite's architecture, adapters are registered globally
            rather than per-connection. Converters only apply to connections
            opened with ``detect_types=sqlite3.PARSE_DECLTYPES``.
        """
        connection.execute('SELECT 1')

        for tp in adapters:
            traits = resolve(tp)
            sqlite3.register_adapter(origin_class(tp), traits.render)
            logger.debug(f'Registered sqlite3 adapter for {traits.name}')

        for declared, tp in (converters or {}).items():
            traits = resolve(tp)
            sqlite3.register_converter(declared, lambda data, traits=traits:
                                       traits.from_string(as_text(data, traits.name)))
            logger.debug(f'Registered sqlite3 converter {declared!r} -> {traits.name}')


def get_adapter_registry() -> AdapterRegistry:
    """Get the adapter registry for database connections

    Returns
        AdapterRegistry instance
    """
    return AdapterRegistry()
