"""SQLite-backed node catalog.

The catalog is written only by a rebuild, which replaces every row inside a
single transaction. All query-time access opens the database read-only.
"""

import logging
import sqlite3
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import Any, Optional

from n8n_mcp.core.exceptions import CatalogError

from .models import BuildMetadata, NodeDescriptor, NodeSummary, Provenance

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS nodes (
  node_type TEXT PRIMARY KEY,
  package_name TEXT,
  display_name TEXT,
  description TEXT,
  category TEXT,
  documentation TEXT,
  properties_schema TEXT,
  operations TEXT,
  credentials_required TEXT,
  development_style TEXT,
  is_ai_tool INTEGER DEFAULT 0,
  is_trigger INTEGER DEFAULT 0,
  is_webhook INTEGER DEFAULT 0,
  is_versioned INTEGER DEFAULT 0,
  version TEXT,
  updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS metadata (
  key TEXT PRIMARY KEY,
  value TEXT
);
"""

NODE_COLUMNS = [
    "node_type",
    "package_name",
    "display_name",
    "description",
    "category",
    "documentation",
    "properties_schema",
    "operations",
    "credentials_required",
    "development_style",
    "is_ai_tool",
    "is_trigger",
    "is_webhook",
    "is_versioned",
    "version",
]

SUMMARY_COLUMNS = [
    "node_type",
    "package_name",
    "display_name",
    "description",
    "category",
    "is_ai_tool",
    "is_trigger",
    "is_webhook",
]

BOOL_COLUMNS = {"is_ai_tool", "is_trigger", "is_webhook", "is_versioned"}

META_VERSION = "n8n_version"
META_REBUILT_AT = "rebuilt_at"
META_SOURCE = "source"
META_DOCS_EXTRACTED = "docs_extracted"
META_SOURCE_TAG = "source_tag"


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def _escape_like(keyword: str) -> str:
    return keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_dict(row: sqlite3.Row) -> dict[str, Any]:
    data = {key: row[key] for key in row.keys()}
    for key in BOOL_COLUMNS & data.keys():
        data[key] = bool(data[key])
    for key in ("display_name", "description", "package_name"):
        if key in data and data[key] is None:
            data[key] = ""
    # Columns left NULL by older builds
    if data.get("development_style") is None:
        data.pop("development_style", None)
    if data.get("version") is None:
        data.pop("version", None)
    return data


def version_number(tag: str) -> str:
    """``n8n@2.0.3`` -> ``2.0.3``; branch names are kept as they are."""
    return tag[len("n8n@") :] if tag.startswith("n8n@") else tag


class CatalogStore:
    """Persistent, queryable table of node descriptors plus build metadata."""

    def __init__(self, db_path: Path, read_only: bool = True, logger: Optional[logging.Logger] = None):
        """Open the catalog.

        Args:
            db_path: Path to the SQLite database file
            read_only: Open without write access (all query-time use)
            logger: Logger for store activity (defaults to the module logger)

        Raises:
            CatalogError: If the database cannot be opened
        """
        self.db_path = Path(db_path)
        self.read_only = read_only
        self.logger = logger or logging.getLogger(__name__)
        self._conn = self._connect()

    def _connect(self) -> sqlite3.Connection:
        try:
            if self.read_only:
                if not self.db_path.exists():
                    raise CatalogError(f"Catalog database not found: {self.db_path}. Run 'n8n-mcp rebuild' first.")
                conn = sqlite3.connect(f"{self.db_path.resolve().as_uri()}?mode=ro", uri=True, check_same_thread=False)
            else:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                # Autocommit mode: replace_all manages its own transaction
                conn = sqlite3.connect(str(self.db_path), isolation_level=None)
                conn.executescript(SCHEMA_SQL)
        except sqlite3.Error as e:
            raise CatalogError(f"Failed to open catalog database {self.db_path}: {e}") from e

        conn.row_factory = sqlite3.Row
        # SQLite LIKE folds ASCII only
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        self.logger.debug(f"Opened catalog {self.db_path} (read_only={self.read_only})")
        return conn

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "CatalogStore":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    # Write side

    def replace_all(self, descriptors: Iterable[NodeDescriptor], build_metadata: BuildMetadata) -> int:
        """Replace the whole catalog with a new build.

        Every node and metadata row is deleted and the new set inserted in one
        transaction. Duplicate node types keep the last descriptor.

        Returns:
            Number of node rows in the catalog after the rebuild
        """
        if self.read_only:
            raise CatalogError("Catalog opened read-only; open with read_only=False to rebuild")

        placeholders = ", ".join("?" for _ in NODE_COLUMNS)
        insert_sql = f"INSERT OR REPLACE INTO nodes ({', '.join(NODE_COLUMNS)}) VALUES ({placeholders})"  # noqa: S608

        conn = self._conn
        try:
            conn.execute("BEGIN IMMEDIATE")
            conn.execute("DELETE FROM nodes")
            conn.execute("DELETE FROM metadata")
            for descriptor in descriptors:
                data = descriptor.model_dump()
                conn.execute(insert_sql, [data[column] for column in NODE_COLUMNS])
            conn.executemany(
                "INSERT INTO metadata (key, value) VALUES (?, ?)",
                [
                    (META_VERSION, version_number(build_metadata.source_version_tag)),
                    (META_REBUILT_AT, build_metadata.built_at.isoformat()),
                    (META_SOURCE, build_metadata.provenance.value),
                    (META_DOCS_EXTRACTED, str(build_metadata.docs_extracted)),
                    (META_SOURCE_TAG, build_metadata.source_version_tag),
                ],
            )
            conn.execute("COMMIT")
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            self.logger.exception("Catalog rebuild failed, previous catalog kept")
            raise

        count = self.count()
        self.logger.info(f"Saved {count} nodes to {self.db_path}")
        return count

    # Read side

    def count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) FROM nodes").fetchone()
        return int(row[0])

    def get(self, node_type: str) -> Optional[NodeDescriptor]:
        """Return the full descriptor stored under ``node_type``, or None."""
        row = self._conn.execute(
            f"SELECT {', '.join(NODE_COLUMNS)} FROM nodes WHERE node_type = ?",  # noqa: S608
            (node_type,),
        ).fetchone()
        return NodeDescriptor(**_row_to_dict(row)) if row else None

    def search(self, keyword: str, limit: int = 10) -> list[NodeSummary]:
        """Case-insensitive substring search over type, name, description and documentation.

        Matching uses Unicode case folding, so ``"überweisung"`` finds ``"Überweisung"``.

        Returns the reduced projection only; use ``get`` for the full descriptor.
        """
        pattern = f"%{_escape_like(keyword.casefold())}%"
        rows = self._conn.execute(
            f"""
            SELECT {", ".join(SUMMARY_COLUMNS)}
            FROM nodes
            WHERE casefold(node_type) LIKE ? ESCAPE '\\'
               OR casefold(display_name) LIKE ? ESCAPE '\\'
               OR casefold(description) LIKE ? ESCAPE '\\'
               OR casefold(documentation) LIKE ? ESCAPE '\\'
            ORDER BY display_name, node_type
            LIMIT ?
            """,  # noqa: S608
            (pattern, pattern, pattern, pattern, max(limit, 0)),
        ).fetchall()
        return [NodeSummary(**_row_to_dict(row)) for row in rows]

    def list_by_category(self, category: str) -> list[NodeDescriptor]:
        rows = self._conn.execute(
            f"SELECT {', '.join(NODE_COLUMNS)} FROM nodes WHERE category = ? ORDER BY display_name, node_type",  # noqa: S608
            (category,),
        ).fetchall()
        return [NodeDescriptor(**_row_to_dict(row)) for row in rows]

    def list_categories(self) -> list[str]:
        rows = self._conn.execute(
            "SELECT DISTINCT category FROM nodes WHERE category IS NOT NULL ORDER BY category"
        ).fetchall()
        return [row["category"] for row in rows]

    def list_ai_capable(self) -> list[NodeDescriptor]:
        rows = self._conn.execute(
            f"SELECT {', '.join(NODE_COLUMNS)} FROM nodes "  # noqa: S608
            "WHERE is_ai_tool = 1 OR category = 'AI' ORDER BY display_name, node_type"
        ).fetchall()
        return [NodeDescriptor(**_row_to_dict(row)) for row in rows]

    def _metadata(self) -> dict[str, str]:
        table = self._conn.execute("SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'metadata'").fetchone()
        if not table:
            self.logger.warning("No metadata table found in catalog")
            return {}
        return {row["key"]: row["value"] for row in self._conn.execute("SELECT key, value FROM metadata")}

    def get_build_version(self) -> Optional[str]:
        """The platform version the catalog was built for, or None."""
        try:
            return self._metadata().get(META_VERSION) or None
        except sqlite3.Error as e:
            self.logger.error(f"Failed to read catalog version: {e}")
            return None

    def get_build_metadata(self) -> Optional[BuildMetadata]:
        try:
            metadata = self._metadata()
        except sqlite3.Error as e:
            self.logger.error(f"Failed to read catalog metadata: {e}")
            return None
        if META_VERSION not in metadata:
            return None

        try:
            return BuildMetadata(
                source_version_tag=metadata.get(META_SOURCE_TAG, metadata[META_VERSION]),
                built_at=datetime.fromisoformat(metadata[META_REBUILT_AT]),
                provenance=Provenance(metadata.get(META_SOURCE, Provenance.LOCAL_AND_REMOTE_DOCS.value)),
                docs_extracted=int(metadata.get(META_DOCS_EXTRACTED, "0")),
            )
        except (KeyError, ValueError) as e:
            self.logger.warning(f"Catalog metadata is incomplete: {e}")
            return None

    def statistics(self) -> dict[str, Any]:
        """Node totals, per-package counts and AI node count."""
        by_package = self._conn.execute(
            "SELECT package_name, COUNT(*) AS count FROM nodes GROUP BY package_name ORDER BY package_name"
        ).fetchall()
        ai_nodes = self._conn.execute("SELECT COUNT(*) FROM nodes WHERE is_ai_tool = 1").fetchone()
        return {
            "total_nodes": self.count(),
            "by_package": [{"package_name": row["package_name"], "count": row["count"]} for row in by_package],
            "ai_nodes": int(ai_nodes[0]),
        }
