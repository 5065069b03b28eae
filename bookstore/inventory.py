import logging
from typing import Any, Dict, List, Optional

from bookstore import contract
from bookstore.book import Book
from bookstore.exceptions import OutOfStockError
from bookstore.notifications import Observer, Subscription
from bookstore.provider import BookProvider
from bookstore.routing import parse_id, with_appended_id

logger = logging.getLogger(__name__)

# Sample stock for an empty inventory.
DUMMY_BOOKS = (
    Book("Close to Home", 14.5, 4, "BookExpres", "+407854561230"),
    Book("Small Change", 7.99, 15, "UNISA", "+31654123456"),
    Book("Gone With The Wind", 5.99, 7, "Red Pepper", "+40784222159"),
    Book("Where Rainbow Ends", 10.5, 21, "Bookshelf", "+39765489124"),
)

SORTABLE_COLUMNS = (
    contract.COLUMN_ID,
    contract.COLUMN_PRODUCT_NAME,
    contract.COLUMN_PRICE,
    contract.COLUMN_QUANTITY,
)


class Inventory:
    """Works with books as objects on top of the content provider."""

    def __init__(self, provider: Optional[BookProvider] = None, db_file: Optional[str] = None) -> None:
        self.provider = provider or BookProvider(db_file=db_file)

    @property
    def content_uri(self) -> str:
        return self.provider.content_uri

    def book_uri(self, book_id: int) -> str:
        return with_appended_id(self.content_uri, book_id)

    # ------------------------- Core operations ------------------------- #
    def list_books(self, sort_by: str = contract.COLUMN_ID, descending: bool = False) -> List[Book]:
        if sort_by not in SORTABLE_COLUMNS:
            raise ValueError(f"Invalid sort_by. Allowed: {', '.join(SORTABLE_COLUMNS)}")
        order = f"{sort_by} {'DESC' if descending else 'ASC'}"
        rows = self.provider.query(self.content_uri, sort_order=order)
        return [Book.from_dict(row) for row in rows]

    def find_book(self, book_id: int) -> Optional[Book]:
        rows = self.provider.query(self.book_uri(book_id))
        return Book.from_dict(rows[0]) if rows else None

    def add_book(self, book: Book) -> Optional[int]:
        """Insert ``book`` and return its new id, or None when it was not saved."""
        uri = self.provider.insert(self.content_uri, book.to_values())
        if uri is None:
            return None
        book.id = parse_id(uri)
        return book.id

    def update_book(self, book_id: int, **fields: Any) -> Optional[Book]:
        """Change only the given fields. Returns the updated book or None if not found."""
        if not fields:
            raise ValueError("Nothing to update. Provide at least one field.")
        if self.provider.update(self.book_uri(book_id), fields) == 0:
            return None
        return self.find_book(book_id)

    def remove_book(self, book_id: int) -> bool:
        return self.provider.delete(self.book_uri(book_id)) > 0

    def delete_all(self) -> int:
        return self.provider.delete(self.content_uri)

    # ------------------------- Stock ------------------------- #
    def sell(self, book_id: int) -> Book:
        """Reduce the quantity of a book by one."""
        return self._adjust_stock(book_id, -1)

    def restock(self, book_id: int, amount: int = 1) -> Book:
        if amount < 1:
            raise ValueError("Restock amount must be at least 1.")
        return self._adjust_stock(book_id, amount)

    def _adjust_stock(self, book_id: int, delta: int) -> Book:
        while True:
            book = self.find_book(book_id)
            if book is None:
                raise LookupError(f"Book {book_id} not found.")
            quantity = book.quantity + delta
            if quantity < 0:
                raise OutOfStockError(f"'{book.product_name}' is out of stock.")
            logger.info(f"Changing stock of book {book_id} from {book.quantity} to {quantity}")
            # Only written if the stock is still what was read.
            changed = self.provider.update(
                self.content_uri,
                {contract.COLUMN_QUANTITY: quantity},
                f"{contract.COLUMN_ID} = ? AND {contract.COLUMN_QUANTITY} = ?",
                [book_id, book.quantity],
            )
            if changed:
                break
            logger.debug(f"Stock of book {book_id} changed concurrently, retrying")
        updated = self.find_book(book_id)
        if updated is None:
            raise LookupError(f"Book {book_id} not found.")
        return updated

    def insert_dummy_data(self) -> List[int]:
        ids = []
        for sample in DUMMY_BOOKS:
            book_id = self.add_book(Book.from_dict(sample.to_dict()))
            if book_id is not None:
                ids.append(book_id)
        return ids

    def get_statistics(self) -> Dict[str, Any]:
        rows = self.provider.query(
            self.content_uri, projection=[contract.COLUMN_PRICE, contract.COLUMN_QUANTITY]
        )
        return {
            "total_books": len(rows),
            "total_units": sum(row[contract.COLUMN_QUANTITY] for row in rows),
            "stock_value": round(sum(row[contract.COLUMN_PRICE] * row[contract.COLUMN_QUANTITY] for row in rows), 2),
            "out_of_stock": sum(1 for row in rows if row[contract.COLUMN_QUANTITY] == 0),
        }

    # ------------------------- Observers ------------------------- #
    def subscribe(self, callback: Observer) -> Subscription:
        """Call ``callback`` with the changed address whenever any book changes."""
        return self.provider.register_observer(self.content_uri, callback, notify_for_descendants=True)
