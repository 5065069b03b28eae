import logging
import math
import re
from typing import Any, Dict, Mapping, Optional

from bookstore import contract
from bookstore.exceptions import InvalidInput

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")

_MESSAGES = {
    contract.COLUMN_PRODUCT_NAME: "Book requires a name.",
    contract.COLUMN_PRICE: "Book requires a valid price.",
    contract.COLUMN_QUANTITY: "Book requires a valid quantity.",
}


class BookValidator:
    """Field checks applied before any book row is written.

    Only the fields present in ``values`` are checked, so the same rules serve
    full inserts and partial updates. Values are returned normalized: prices as
    floats, quantities as ints and names as strings.
    """

    @staticmethod
    def as_float(value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            try:
                result = float(value)
            except OverflowError:
                return None
        elif isinstance(value, str):
            try:
                result = float(value.strip())
            except ValueError:
                return None
        else:
            return None
        if math.isnan(result) or math.isinf(result):
            return None
        return result

    @staticmethod
    def as_int(value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            result = value
        elif isinstance(value, float) and value.is_integer():
            result = int(value)
        elif isinstance(value, str) and _INTEGER.fullmatch(value.strip()):
            result = int(value.strip())
        else:
            return None
        # Storage holds signed 64-bit integers only.
        if not -contract.MAX_INTEGER - 1 <= result <= contract.MAX_INTEGER:
            return None
        return result

    @staticmethod
    def as_text(value: Any) -> Optional[str]:
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    @staticmethod
    def validate_update(values: Mapping[str, Any]) -> Dict[str, Any]:
        """Check the fields present in ``values`` and return them normalized."""
        cleaned: Dict[str, Any] = dict(values)

        if contract.COLUMN_PRODUCT_NAME in values:
            name = BookValidator.as_text(values[contract.COLUMN_PRODUCT_NAME])
            logger.debug(f"The product name: {name!r}")
            if not name:
                raise InvalidInput(_MESSAGES[contract.COLUMN_PRODUCT_NAME], contract.COLUMN_PRODUCT_NAME)
            cleaned[contract.COLUMN_PRODUCT_NAME] = name

        if contract.COLUMN_PRICE in values:
            price = BookValidator.as_float(values[contract.COLUMN_PRICE])
            logger.debug(f"The price: {price!r}")
            if price is None or price < 0:
                raise InvalidInput(_MESSAGES[contract.COLUMN_PRICE], contract.COLUMN_PRICE)
            cleaned[contract.COLUMN_PRICE] = price

        if contract.COLUMN_QUANTITY in values:
            quantity = BookValidator.as_int(values[contract.COLUMN_QUANTITY])
            logger.debug(f"The quantity: {quantity!r}")
            if quantity is None or quantity < 0:
                raise InvalidInput(_MESSAGES[contract.COLUMN_QUANTITY], contract.COLUMN_QUANTITY)
            cleaned[contract.COLUMN_QUANTITY] = quantity

        # Supplier details are free-form and may be missing or empty.
        for column in (contract.COLUMN_SUPPLIER_NAME, contract.COLUMN_SUPPLIER_PHONE_NUMBER):
            if column in values:
                cleaned[column] = BookValidator.as_text(values[column])

        return cleaned

    @staticmethod
    def validate_insert(values: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Like ``validate_update`` but name, price and quantity must all be present."""
        values = values or {}
        for column in contract.REQUIRED_COLUMNS:
            if column not in values:
                raise InvalidInput(_MESSAGES[column], column)
        return BookValidator.validate_update(values)
