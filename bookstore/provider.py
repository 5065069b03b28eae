import logging
import sqlite3
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from bookstore import contract
from bookstore.database import BookDbHelper
from bookstore.exceptions import InvalidAddress, InvalidArgument
from bookstore.notifications import ChangeNotifier, Observer, Subscription
from bookstore.routing import Match, build_book_matcher, parse_id, with_appended_id
from bookstore.validators import BookValidator

logger = logging.getLogger(__name__)


class BookProvider:
    """Content-provider style access to the books table.

    Callers address either the whole collection
    (``content://<authority>/books``) or a single book
    (``content://<authority>/books/<id>``). Writes are validated before they
    reach storage and every successful change is announced on the notifier.
    """

    def __init__(self, db_helper: Optional[BookDbHelper] = None, authority: Optional[str] = None,
                 notifier: Optional[ChangeNotifier] = None, db_file: Optional[str] = None) -> None:
        self.authority = authority or contract.CONTENT_AUTHORITY
        self.db_helper = db_helper or BookDbHelper(db_file)
        self.notifier = notifier or ChangeNotifier()
        self.content_uri = contract.content_uri(self.authority)
        self._matcher = build_book_matcher(self.authority)

    # ------------------------- Reads ------------------------- #
    def query(self, uri: str, projection: Optional[Sequence[str]] = None, selection: Optional[str] = None,
              selection_args: Optional[Sequence[Any]] = None, sort_order: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return the rows at ``uri`` as dicts, projected to ``projection``."""
        match = self._matcher.match(uri)
        if match == Match.BOOKS:
            pass
        elif match == Match.BOOK_ID:
            selection, selection_args = self._item_selection(uri)
        else:
            raise InvalidAddress(uri, "query")

        sql = f"SELECT {self._columns_for(projection)} FROM {contract.TABLE_NAME}"
        if selection:
            sql += f" WHERE {selection}"
        if sort_order:
            sql += f" ORDER BY {sort_order}"

        conn = self.db_helper.get_connection()
        try:
            rows = conn.execute(sql, tuple(selection_args or ())).fetchall()
            return [dict(row) for row in rows]
        finally:
            conn.close()

    def get_type(self, uri: str) -> str:
        match = self._matcher.match(uri)
        if match == Match.BOOKS:
            return contract.content_list_type(self.authority)
        if match == Match.BOOK_ID:
            return contract.content_item_type(self.authority)
        raise InvalidAddress(uri, "resolve the type of")

    # ------------------------- Writes ------------------------- #
    def insert(self, uri: str, values: Optional[Mapping[str, Any]]) -> Optional[str]:
        """Insert a book and return its item address, or None if storage refused the row."""
        match = self._matcher.match(uri)
        if match == Match.BOOKS:
            return self._insert_book(uri, values)
        if match == Match.NO_MATCH:
            raise InvalidAddress(uri, "insert into")
        raise InvalidArgument(f"Insertion is not supported for {uri}")

    def update(self, uri: str, values: Optional[Mapping[str, Any]], selection: Optional[str] = None,
               selection_args: Optional[Sequence[Any]] = None) -> int:
        """Apply a partial update and return the number of rows changed."""
        match = self._matcher.match(uri)
        if match == Match.BOOKS:
            return self._update_books(uri, values, selection, selection_args)
        if match == Match.BOOK_ID:
            # The id in the address decides which row changes.
            return self._update_books(uri, values, *self._item_selection(uri))
        raise InvalidAddress(uri, "update")

    def delete(self, uri: str, selection: Optional[str] = None,
               selection_args: Optional[Sequence[Any]] = None) -> int:
        """Delete the rows at ``uri`` and return how many were removed."""
        match = self._matcher.match(uri)
        if match == Match.BOOKS:
            pass
        elif match == Match.BOOK_ID:
            selection, selection_args = self._item_selection(uri)
        else:
            raise InvalidAddress(uri, "delete")

        sql = f"DELETE FROM {contract.TABLE_NAME}"
        params: tuple = ()
        if selection:
            sql += f" WHERE {selection}"
            params = tuple(selection_args or ())

        conn = self.db_helper.get_connection()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            rows_deleted = cursor.rowcount
        finally:
            conn.close()

        if rows_deleted != 0:
            self.notifier.notify_change(uri)
        return rows_deleted

    # ------------------------- Observers ------------------------- #
    def register_observer(self, uri: str, callback: Observer, notify_for_descendants: bool = False) -> Subscription:
        return self.notifier.register(uri, callback, notify_for_descendants)

    # ------------------------- Helpers ------------------------- #
    def _insert_book(self, uri: str, values: Optional[Mapping[str, Any]]) -> Optional[str]:
        cleaned = BookValidator.validate_insert(values)

        unknown = [column for column in cleaned if column not in contract.WRITABLE_COLUMNS]
        if unknown:
            logger.error(f"Failed to insert row for {uri}: table has no columns {unknown}")
            return None

        columns = list(cleaned)
        sql = (
            f"INSERT INTO {contract.TABLE_NAME} ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})"
        )
        conn = self.db_helper.get_connection()
        try:
            cursor = conn.execute(sql, [cleaned[column] for column in columns])
            conn.commit()
            row_id = cursor.lastrowid
        except sqlite3.Error as e:
            logger.error(f"Failed to insert row for {uri}: {e}")
            return None
        finally:
            conn.close()

        logger.info(f"Inserted book {row_id} ({cleaned[contract.COLUMN_PRODUCT_NAME]!r})")
        self.notifier.notify_change(uri)
        return with_appended_id(uri, row_id)

    def _update_books(self, uri: str, values: Optional[Mapping[str, Any]], selection: Optional[str],
                      selection_args: Optional[Sequence[Any]]) -> int:
        cleaned = BookValidator.validate_update(values or {})

        # Nothing to write, so leave storage alone.
        if not cleaned:
            return 0

        for column in cleaned:
            if column not in contract.WRITABLE_COLUMNS:
                raise InvalidArgument(f"Column {column!r} cannot be updated")

        columns = list(cleaned)
        sql = f"UPDATE {contract.TABLE_NAME} SET {', '.join(f'{column} = ?' for column in columns)}"
        params = [cleaned[column] for column in columns]
        if selection:
            sql += f" WHERE {selection}"
            params.extend(selection_args or ())

        conn = self.db_helper.get_connection()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            rows_updated = cursor.rowcount
        finally:
            conn.close()

        if rows_updated != 0:
            self.notifier.notify_change(uri)
        return rows_updated

    @staticmethod
    def _item_selection(uri: str) -> Tuple[str, Tuple[Any, ...]]:
        row_id = parse_id(uri)
        if row_id > contract.MAX_INTEGER:
            # No stored row can carry this id.
            return "0", ()
        return f"{contract.COLUMN_ID} = ?", (row_id,)

    @staticmethod
    def _columns_for(projection: Optional[Sequence[str]]) -> str:
        if not projection:
            return ", ".join(contract.ALL_COLUMNS)
        for column in projection:
            if column not in contract.ALL_COLUMNS:
                raise InvalidArgument(f"Unknown column {column!r} in projection")
        return ", ".join(projection)
