"""
Patch persistence for alignment-inspector.

Patches are kept in a small SQLite database, one row per patched record,
keyed by the literal ``"<kind>:<identifier>"`` string. The same flat mapping
can be exported to and imported from a JSON file for sharing.
"""
from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict

from alignment_inspector.exceptions import StorageError

logger = logging.getLogger(__name__)

# Default patch database location
DEFAULT_PATCH_DB = Path.home() / ".alignment_inspector_patches.db"

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS patches (
    key TEXT PRIMARY KEY,
    patch TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class PatchDB:
    """Loads and saves the flat patch mapping.

    ``load`` never raises: a missing, unreadable or corrupt database yields
    an empty mapping. ``save`` logs failures and only raises
    :class:`StorageError` when ``raise_errors`` is set.
    """

    def __init__(self, db_path: str | Path | None = None, *, raise_errors: bool = False):
        self.db_path = Path(db_path) if db_path else DEFAULT_PATCH_DB
        self.raise_errors = raise_errors

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        conn.executescript(SCHEMA_SQL)
        row = conn.execute("SELECT version FROM schema_version LIMIT 1").fetchone()
        if row is None:
            conn.execute("INSERT INTO schema_version VALUES (?)", (SCHEMA_VERSION,))

    def load(self) -> Dict[str, Dict[str, Any]]:
        """Return the persisted ``{"kind:identifier": {field: value}}`` mapping."""
        if not self.db_path.exists():
            logger.debug(f"No patch database at {self.db_path}")
            return {}

        try:
            conn = self._get_connection()
            try:
                rows = conn.execute("SELECT key, patch FROM patches").fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.warning(f"Could not read patches from {self.db_path}: {e}")
            return {}

        patches: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            try:
                patch = json.loads(row["patch"])
            except (TypeError, json.JSONDecodeError):
                logger.warning(f"Skipping undecodable patch {row['key']!r}")
                continue
            patches[row["key"]] = patch
        logger.debug(f"Loaded {len(patches)} patches from {self.db_path}")
        return patches

    def save(self, patches: Mapping[str, Mapping[str, Any]]) -> bool:
        """Replace the stored patches with ``patches``.

        Returns True on success.
        """
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = self._get_connection()
            try:
                with conn:
                    self._ensure_schema(conn)
                    conn.execute("DELETE FROM patches")
                    conn.executemany(
                        "INSERT INTO patches (key, patch) VALUES (?, ?)",
                        [
                            (key, json.dumps(dict(patch), ensure_ascii=False))
                            for key, patch in patches.items()
                        ],
                    )
            finally:
                conn.close()
        except (sqlite3.Error, OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save patches to {self.db_path}: {e}")
            if self.raise_errors:
                raise StorageError(f"Failed to save patches: {e}") from e
            return False

        logger.debug(f"Saved {len(patches)} patches to {self.db_path}")
        return True


# ---------------------------------------------------------------------------
# JSON exchange files
# ---------------------------------------------------------------------------

def export_patches(patches: Mapping[str, Mapping[str, Any]], path: str | Path) -> None:
    """Write the flat patch mapping to a JSON file."""
    path = Path(path)
    try:
        path.write_text(
            json.dumps({k: dict(v) for k, v in patches.items()},
                       ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )
    except OSError as e:
        raise StorageError(f"Failed to export patches to {path}: {e}") from e
    logger.info(f"Exported {len(patches)} patches to {path}")


def import_patches(path: str | Path) -> Dict[str, Any]:
    """Read a flat patch mapping from a JSON file.

    Returns an empty mapping if the file is missing or not a JSON object.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning(f"Patch file not found: {path}")
        return {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable patch file {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring patch file {path}: root is not an object")
        return {}
    return data
