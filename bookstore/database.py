import logging
import sqlite3
import threading
from typing import Optional

from bookstore import contract
from bookstore.config import settings

logger = logging.getLogger(__name__)

# Bump when the schema changes and handle the step in on_upgrade.
DATABASE_VERSION = 1

SQL_CREATE_BOOKS_TABLE = f"""
    CREATE TABLE IF NOT EXISTS {contract.TABLE_NAME} (
        {contract.COLUMN_ID} INTEGER PRIMARY KEY AUTOINCREMENT,
        {contract.COLUMN_PRODUCT_NAME} TEXT NOT NULL,
        {contract.COLUMN_PRICE} REAL NOT NULL,
        {contract.COLUMN_QUANTITY} INTEGER NOT NULL,
        {contract.COLUMN_SUPPLIER_NAME} TEXT,
        {contract.COLUMN_SUPPLIER_PHONE_NUMBER} TEXT
    )
"""


class BookDbHelper:
    """Opens connections to the books database and keeps its schema current.

    The schema is created lazily, the first time a connection is requested.
    Each caller gets its own connection and is responsible for closing it.
    """

    def __init__(self, db_file: Optional[str] = None, version: int = DATABASE_VERSION,
                 timeout: Optional[float] = None) -> None:
        self.db_file = db_file or settings.database_file
        self.version = version
        self.timeout = settings.database_timeout if timeout is None else timeout
        self._initialized = False
        self._init_lock = threading.Lock()

    def get_connection(self) -> sqlite3.Connection:
        """Return a new connection, creating or upgrading the schema on first use."""
        if not self._initialized:
            with self._init_lock:
                if not self._initialized:
                    self._initialize()
                    self._initialized = True
        return self._connect()

    def get_version(self) -> int:
        conn = self._connect()
        try:
            return conn.execute("PRAGMA user_version").fetchone()[0]
        finally:
            conn.close()

    def on_create(self, conn: sqlite3.Connection) -> None:
        """Called when the database is created for the first time."""
        logger.info(f"Creating table '{contract.TABLE_NAME}' in {self.db_file}")
        logger.debug(SQL_CREATE_BOOKS_TABLE)
        conn.execute(SQL_CREATE_BOOKS_TABLE)

    def on_upgrade(self, conn: sqlite3.Connection, old_version: int, new_version: int) -> None:
        # Only version 1 exists so far.
        logger.info(f"Upgrading database from version {old_version} to {new_version}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_file, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize(self) -> None:
        conn = self._connect()
        try:
            # Readers do not block the single writer.
            conn.execute("PRAGMA journal_mode=WAL;")
            current = conn.execute("PRAGMA user_version").fetchone()[0]
            if current == self.version:
                return
            if current > self.version:
                raise sqlite3.DatabaseError(
                    f"Can't downgrade database from version {current} to {self.version}"
                )
            if current == 0:
                self.on_create(conn)
            else:
                self.on_upgrade(conn, current, self.version)
            conn.execute(f"PRAGMA user_version = {int(self.version)}")
            conn.commit()
        finally:
            conn.close()
