"""Names shared by the provider and its callers: authority, paths, columns and type tags."""
from typing import Tuple

from bookstore.config import settings

SCHEME = "content"

# Identifies this store among other providers in the same process.
CONTENT_AUTHORITY = settings.content_authority

PATH_BOOKS = "books"

CURSOR_DIR_BASE_TYPE = "vnd.android.cursor.dir"
CURSOR_ITEM_BASE_TYPE = "vnd.android.cursor.item"

TABLE_NAME = "books"

COLUMN_ID = "id"
COLUMN_PRODUCT_NAME = "product_name"
COLUMN_PRICE = "price"
COLUMN_QUANTITY = "quantity"
COLUMN_SUPPLIER_NAME = "supplier_name"
COLUMN_SUPPLIER_PHONE_NUMBER = "supplier_phone_number"

# Columns a caller may write; the id is assigned by the store.
WRITABLE_COLUMNS: Tuple[str, ...] = (
    COLUMN_PRODUCT_NAME,
    COLUMN_PRICE,
    COLUMN_QUANTITY,
    COLUMN_SUPPLIER_NAME,
    COLUMN_SUPPLIER_PHONE_NUMBER,
)

ALL_COLUMNS: Tuple[str, ...] = (COLUMN_ID,) + WRITABLE_COLUMNS

REQUIRED_COLUMNS: Tuple[str, ...] = (COLUMN_PRODUCT_NAME, COLUMN_PRICE, COLUMN_QUANTITY)

# Largest value an SQLite INTEGER column can hold.
MAX_INTEGER = 2 ** 63 - 1


def base_content_uri(authority: str = CONTENT_AUTHORITY) -> str:
    return f"{SCHEME}://{authority}"


def content_uri(authority: str = CONTENT_AUTHORITY) -> str:
    """Collection address for all books under ``authority``."""
    return f"{base_content_uri(authority)}/{PATH_BOOKS}"


def content_list_type(authority: str = CONTENT_AUTHORITY) -> str:
    return f"{CURSOR_DIR_BASE_TYPE}/{authority}/{PATH_BOOKS}"


def content_item_type(authority: str = CONTENT_AUTHORITY) -> str:
    return f"{CURSOR_ITEM_BASE_TYPE}/{authority}/{PATH_BOOKS}"


CONTENT_URI = content_uri()
CONTENT_LIST_TYPE = content_list_type()
CONTENT_ITEM_TYPE = content_item_type()
