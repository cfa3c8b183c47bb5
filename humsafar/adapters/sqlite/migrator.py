import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


class SQLiteMigrator:
    """Applies numbered ``.sql`` files once each, in filename order."""

    def __init__(self, db_path: str, migrations_dir: str | Path | None = None):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir) if migrations_dir else DEFAULT_MIGRATIONS_DIR

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _ensure_migration_table(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT UNIQUE NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
        """)

    def applied(self) -> set[str]:
        conn = self._get_connection()
        try:
            self._ensure_migration_table(conn)
            return {row[0] for row in conn.execute("SELECT filename FROM _migrations")}
        finally:
            conn.close()

    def pending(self) -> list[str]:
        done = self.applied()
        return [p.name for p in sorted(self.migrations_dir.glob("*.sql")) if p.name not in done]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        if not self.migrations_dir.is_dir():
            raise FileNotFoundError(f"Migrations directory not found: {self.migrations_dir}")

        applied_now = []
        conn = self._get_connection()
        try:
            self._ensure_migration_table(conn)
            for filename in self.pending():
                logger.info("Applying migration: %s", filename)
                self._apply_migration(conn, filename)
                applied_now.append(filename)
        finally:
            conn.close()

        logger.info("Migrations up to date (%d applied)", len(applied_now))
        return applied_now

    def _read_up_script(self, filename: str) -> str:
        content = (self.migrations_dir / filename).read_text()
        # Everything before "-- Down" is the forward script.
        return content.split("-- Down")[0]

    def _apply_migration(self, conn: sqlite3.Connection, filename: str) -> None:
        script = self._read_up_script(filename)
        try:
            conn.executescript(script)
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (filename,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {filename} failed: {e}") from e
