"""Schema helpers: script splitting and structural introspection."""

import sqlite3
from typing import Any

from boothdb.ports.db_session import DbSessionPort


def _is_comment_only(text: str) -> bool:
    return all(
        not line.strip() or line.strip().startswith("--") for line in text.splitlines()
    )


def split_statements(script: str) -> list[str]:
    """
    Split a SQL script into individually executable statements.

    Uses sqlite's own completeness check, so semicolons inside string
    literals, comments and CREATE TRIGGER bodies do not split a statement.

    Args:
        script: SQL text, one or more statements each ending in ';'.

    Returns:
        Statements in script order, with comment-only fragments dropped.

    Raises:
        ValueError: If the script ends with an unterminated statement.
    """
    statements: list[str] = []
    buffer: list[str] = []

    for line in script.splitlines():
        buffer.append(line)
        candidate = "\n".join(buffer)
        if sqlite3.complete_statement(candidate):
            if not _is_comment_only(candidate):
                statements.append(candidate.strip())
            buffer = []

    leftover = "\n".join(buffer)
    if not _is_comment_only(leftover):
        raise ValueError(f"Unterminated SQL statement: {leftover.strip()[:80]!r}")

    return statements


async def store_exists(session: DbSessionPort) -> bool:
    """A store exists once it holds at least one user table."""
    row = await session.fetchone(
        """
        SELECT COUNT(*) FROM sqlite_master
        WHERE type = 'table' AND name NOT LIKE 'sqlite_%'
        """
    )
    return bool(row and row[0])


async def table_exists(session: DbSessionPort, table: str) -> bool:
    """Check whether a table exists."""
    row = await session.fetchone(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
        [table],
    )
    return row is not None


async def column_exists(session: DbSessionPort, table: str, column: str) -> bool:
    """Check whether a table has a column. False if the table is missing."""
    rows = await session.fetchall(f"PRAGMA table_info({_quote(table)})")
    return any(row[1] == column for row in rows)


async def describe_schema(session: DbSessionPort) -> dict[str, Any]:
    """
    Capture the structural shape of the store.

    Returns a mapping with ``tables`` (name -> columns and indexes) and
    ``views`` (sorted names). Column and index entries are keyed by name,
    so two stores compare equal regardless of the order in which columns
    were added.
    """
    table_rows = await session.fetchall(
        """
        SELECT name FROM sqlite_master
        WHERE type = 'table' AND name NOT LIKE 'sqlite_%'
        ORDER BY name
        """
    )
    tables: dict[str, Any] = {}
    for table_row in table_rows:
        table_name = table_row[0]
        columns = {
            row[1]: {
                "type": (row[2] or "").upper(),
                "notnull": bool(row[3]),
                "default": row[4],
                "pk": row[5],
            }
            for row in await session.fetchall(f"PRAGMA table_info({_quote(table_name)})")
        }

        indexes: dict[str, Any] = {}
        for index_row in await session.fetchall(f"PRAGMA index_list({_quote(table_name)})"):
            index_name = index_row[1]
            index_columns = [
                info[2]
                for info in await session.fetchall(f"PRAGMA index_info({_quote(index_name)})")
            ]
            indexes[index_name] = {"unique": bool(index_row[2]), "columns": index_columns}

        tables[table_name] = {"columns": columns, "indexes": indexes}

    view_rows = await session.fetchall(
        "SELECT name FROM sqlite_master WHERE type = 'view' ORDER BY name"
    )

    return {"tables": tables, "views": [row[0] for row in view_rows]}


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'
