import logging
from datetime import datetime, timezone
from typing import List

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from bookstore import contract
from bookstore.book import Book
from bookstore.config import settings
from bookstore.exceptions import InvalidInput, OutOfStockError
from bookstore.inventory import SORTABLE_COLUMNS, Inventory

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

inventory = Inventory()

app = FastAPI(title=settings.app_name, version=settings.app_version)


# --- Models ---
class BookModel(BaseModel):
    id: int
    product_name: str
    price: float
    quantity: int
    supplier_name: str | None = None
    supplier_phone_number: str | None = None


class BookCreateModel(BaseModel):
    product_name: str
    price: float
    quantity: int
    supplier_name: str | None = None
    supplier_phone_number: str | None = None


class BookUpdateModel(BaseModel):
    """Fields left out of the request body are not changed."""
    product_name: str | None = None
    price: float | None = None
    quantity: int | None = None
    supplier_name: str | None = None
    supplier_phone_number: str | None = None


class RestockModel(BaseModel):
    amount: int = Field(default=1, ge=1)


class StatsModel(BaseModel):
    total_books: int
    total_units: int
    stock_value: float
    out_of_stock: int


def _to_model(book: Book) -> BookModel:
    return BookModel(**book.to_dict())


def _get_or_404(book_id: int) -> Book:
    book = inventory.find_book(book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found.")
    return book


# --- Health ---
@app.get("/health")
def health():
    """Lightweight health endpoint with a quick database round-trip."""
    db_ok = True
    try:
        total = len(inventory.provider.query(inventory.content_uri, projection=[contract.COLUMN_ID]))
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        db_ok = False
        total = 0
    return {
        "status": "healthy" if db_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "db": db_ok,
        "total_books": total,
    }


# --- Books ---
@app.get("/books", response_model=List[BookModel])
def list_books(
    sort_by: str = Query(contract.COLUMN_ID, description="id | product_name | price | quantity"),
    order: str = Query("asc", description="asc | desc"),
):
    if sort_by not in SORTABLE_COLUMNS:
        raise HTTPException(status_code=400, detail=f"Invalid sort_by. Allowed: {', '.join(SORTABLE_COLUMNS)}")
    if order not in ("asc", "desc"):
        raise HTTPException(status_code=400, detail="Invalid order. Allowed: asc, desc")
    return [_to_model(b) for b in inventory.list_books(sort_by=sort_by, descending=order == "desc")]


@app.get("/books/{book_id}", response_model=BookModel)
def get_book(book_id: int):
    return _to_model(_get_or_404(book_id))


@app.post("/books", response_model=BookModel, status_code=201)
def add_book(payload: BookCreateModel):
    book = Book(**payload.model_dump())
    try:
        book_id = inventory.add_book(book)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    if book_id is None:
        raise HTTPException(status_code=500, detail="Book not saved.")
    return _to_model(book)


@app.put("/books/{book_id}", response_model=BookModel)
def update_book(book_id: int, update: BookUpdateModel):
    fields = update.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="Provide at least one field to update.")
    try:
        book = inventory.update_book(book_id, **fields)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found.")
    return _to_model(book)


@app.delete("/books/{book_id}")
def delete_book(book_id: int):
    if not inventory.remove_book(book_id):
        raise HTTPException(status_code=404, detail="Book not found.")
    return {"message": "Book removed."}


@app.delete("/books")
def delete_all_books():
    return {"deleted": inventory.delete_all()}


@app.post("/books/seed", response_model=List[BookModel], status_code=201)
def seed_books():
    ids = inventory.insert_dummy_data()
    return [_to_model(_get_or_404(book_id)) for book_id in ids]


@app.post("/books/{book_id}/sale", response_model=BookModel)
def sell_book(book_id: int):
    try:
        return _to_model(inventory.sell(book_id))
    except LookupError:
        raise HTTPException(status_code=404, detail="Book not found.")
    except OutOfStockError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.post("/books/{book_id}/restock", response_model=BookModel)
def restock_book(book_id: int, payload: RestockModel):
    try:
        return _to_model(inventory.restock(book_id, payload.amount))
    except LookupError:
        raise HTTPException(status_code=404, detail="Book not found.")
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/stats", response_model=StatsModel)
def get_stats():
    return StatsModel(**inventory.get_statistics())
