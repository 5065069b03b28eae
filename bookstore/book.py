from __future__ import annotations

from bookstore import contract


class Book:
    """Represents a single book item held in the inventory."""

    def __init__(self, product_name: str, price: float, quantity: int,
                 supplier_name: str | None = None, supplier_phone_number: str | None = None,
                 id: int | None = None) -> None:
        self.id = id
        self.product_name = product_name
        self.price = price
        self.quantity = quantity
        self.supplier_name = supplier_name
        self.supplier_phone_number = supplier_phone_number

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.product_name} ({self.quantity} x {self.price:.2f})"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Book(id={self.id!r}, product_name={self.product_name!r})"

    def to_dict(self) -> dict:
        return {
            contract.COLUMN_ID: self.id,
            contract.COLUMN_PRODUCT_NAME: self.product_name,
            contract.COLUMN_PRICE: self.price,
            contract.COLUMN_QUANTITY: self.quantity,
            contract.COLUMN_SUPPLIER_NAME: self.supplier_name,
            contract.COLUMN_SUPPLIER_PHONE_NUMBER: self.supplier_phone_number,
        }

    def to_values(self) -> dict:
        """Writable columns only, as passed to an insert."""
        values = self.to_dict()
        values.pop(contract.COLUMN_ID)
        return values

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(
            id=data.get(contract.COLUMN_ID),
            product_name=data[contract.COLUMN_PRODUCT_NAME],
            price=data[contract.COLUMN_PRICE],
            quantity=data[contract.COLUMN_QUANTITY],
            supplier_name=data.get(contract.COLUMN_SUPPLIER_NAME),
            supplier_phone_number=data.get(contract.COLUMN_SUPPLIER_PHONE_NUMBER),
        )
