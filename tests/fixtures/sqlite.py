import sqlite3

import pytest


@pytest.fixture
def sqlite_conn():
    """Create an in-memory SQLite database with declared-type converters enabled"""
    conn = sqlite3.connect(':memory:', detect_types=sqlite3.PARSE_DECLTYPES)

    create_table = """
    CREATE TABLE test_table (
        id INTEGER PRIMARY KEY,
        colour COLOUR,
        price PRICE,
        tags TAGS
    )
    """
    conn.execute(create_table)

    yield conn
    conn.close()
