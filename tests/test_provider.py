import sqlite3
import threading

import pytest

from bookstore import contract
from bookstore.exceptions import InvalidAddress, InvalidArgument, InvalidInput
from bookstore.provider import BookProvider
from bookstore.routing import parse_id


def _count(provider):
    return len(provider.query(provider.content_uri))


def test_insert_first_book_returns_item_address(provider, dune):
    uri = provider.insert(provider.content_uri, dune)
    assert uri == f"{provider.content_uri}/1"

    rows = provider.query(provider.content_uri)
    assert rows == [{
        "id": 1,
        "product_name": "Dune",
        "price": 9.99,
        "quantity": 3,
        "supplier_name": None,
        "supplier_phone_number": None,
    }]


def test_insert_then_query_item_round_trip(provider):
    values = {
        "product_name": "Small Change",
        "price": 7.99,
        "quantity": 15,
        "supplier_name": "UNISA",
        "supplier_phone_number": "+31654123456",
    }
    uri = provider.insert(provider.content_uri, values)
    rows = provider.query(uri)
    assert len(rows) == 1
    row = rows[0]
    assert row["id"] == parse_id(uri)
    for key, value in values.items():
        assert row[key] == value


def test_ids_are_fresh_and_never_reused(provider, dune):
    first = parse_id(provider.insert(provider.content_uri, dune))
    second = parse_id(provider.insert(provider.content_uri, dune))
    assert second > first

    assert provider.delete(f"{provider.content_uri}/{second}") == 1
    third = parse_id(provider.insert(provider.content_uri, dune))
    assert third > second


@pytest.mark.parametrize("bad", [
    {"product_name": "", "price": 5.0, "quantity": 1},
    {"product_name": None, "price": 5.0, "quantity": 1},
    {"product_name": "Dune", "price": -0.01, "quantity": 1},
    {"product_name": "Dune", "price": 5.0, "quantity": -1},
    {"product_name": "Dune", "quantity": 1},
    {"product_name": "Dune", "price": 5.0},
    {"price": 5.0, "quantity": 1},
])
def test_insert_invalid_input_creates_nothing(provider, changes, bad):
    with pytest.raises(InvalidInput):
        provider.insert(provider.content_uri, bad)
    assert _count(provider) == 0
    assert changes == []


def test_insert_empty_name_example(provider, dune):
    provider.insert(provider.content_uri, dune)
    with pytest.raises(InvalidInput, match="name"):
        provider.insert(provider.content_uri, {"product_name": "", "price": 5.0, "quantity": 1})
    assert _count(provider) == 1


def test_insert_without_values_is_invalid(provider):
    with pytest.raises(InvalidInput):
        provider.insert(provider.content_uri, None)


def test_insert_accepts_zero_price_and_quantity(provider):
    uri = provider.insert(provider.content_uri, {"product_name": "Free", "price": 0, "quantity": 0})
    row = provider.query(uri)[0]
    assert row["price"] == 0.0
    assert row["quantity"] == 0


def test_insert_on_item_address_is_not_supported(provider, dune):
    with pytest.raises(InvalidArgument) as exc_info:
        provider.insert(f"{provider.content_uri}/1", dune)
    assert not isinstance(exc_info.value, InvalidAddress)


def test_insert_on_unknown_address(provider, dune):
    with pytest.raises(InvalidAddress):
        provider.insert("content://com.example.android.books/pets", dune)


def test_insert_unknown_column_is_soft_failure(provider, changes, dune):
    assert provider.insert(provider.content_uri, {**dune, "isbn": "123"}) is None
    assert _count(provider) == 0
    assert changes == []


def test_insert_storage_error_is_soft_failure(provider, changes, dune):
    provider.query(provider.content_uri)  # create schema
    conn = sqlite3.connect(provider.db_helper.db_file)
    conn.execute(
        "CREATE TRIGGER reject_books BEFORE INSERT ON books "
        "BEGIN SELECT RAISE(ABORT, 'rejected'); END"
    )
    conn.commit()
    conn.close()

    assert provider.insert(provider.content_uri, dune) is None
    assert changes == []


def test_insert_notifies_collection(provider, changes, dune):
    provider.insert(provider.content_uri, dune)
    assert changes == [provider.content_uri]


def test_query_projection_and_order(provider):
    for name, price in (("B", 2.0), ("A", 3.0), ("C", 1.0)):
        provider.insert(provider.content_uri, {"product_name": name, "price": price, "quantity": 1})

    rows = provider.query(provider.content_uri, projection=["product_name"], sort_order="price DESC")
    assert rows == [{"product_name": "A"}, {"product_name": "B"}, {"product_name": "C"}]


def test_query_selection(provider):
    for name, qty in (("A", 0), ("B", 5), ("C", 9)):
        provider.insert(provider.content_uri, {"product_name": name, "price": 1.0, "quantity": qty})

    rows = provider.query(provider.content_uri, projection=["product_name"],
                          selection="quantity > ?", selection_args=[1], sort_order="product_name")
    assert [r["product_name"] for r in rows] == ["B", "C"]


def test_query_item_address_overrides_selection(provider, dune):
    uri = provider.insert(provider.content_uri, dune)
    rows = provider.query(uri, selection="quantity > ?", selection_args=[100])
    assert len(rows) == 1


def test_query_missing_item_is_empty(provider):
    assert provider.query(f"{provider.content_uri}/42") == []


def test_query_unknown_projection_column(provider):
    with pytest.raises(InvalidArgument):
        provider.query(provider.content_uri, projection=["title"])


@pytest.mark.parametrize("uri", [
    "content://com.example.android.books/pets",
    "content://other.authority/books",
    "http://com.example.android.books/books",
    "content://com.example.android.books/books/abc",
    "content://com.example.android.books/books/1/extra",
    "books",
])
def test_unknown_addresses_fail_every_operation(provider, dune, uri):
    with pytest.raises(InvalidAddress):
        provider.query(uri)
    with pytest.raises(InvalidAddress):
        provider.insert(uri, dune)
    with pytest.raises(InvalidArgument):
        provider.update(uri, {"quantity": 1})
    with pytest.raises(InvalidArgument):
        provider.delete(uri)
    with pytest.raises(InvalidAddress):
        provider.get_type(uri)


def test_update_only_quantity_keeps_other_fields(provider, changes, dune):
    uri = provider.insert(provider.content_uri, {**dune, "supplier_name": "Ace"})
    changes.clear()

    assert provider.update(uri, {"quantity": 2}) == 1

    row = provider.query(uri)[0]
    assert row["quantity"] == 2
    assert row["product_name"] == "Dune"
    assert row["price"] == 9.99
    assert row["supplier_name"] == "Ace"
    assert changes == [uri]


def test_update_empty_values_touches_nothing(provider, changes, dune):
    uri = provider.insert(provider.content_uri, dune)
    changes.clear()

    assert provider.update(uri, {}) == 0
    assert provider.update(uri, None) == 0
    assert changes == []


def test_update_validates_present_fields_only(provider, dune):
    uri = provider.insert(provider.content_uri, dune)

    with pytest.raises(InvalidInput):
        provider.update(uri, {"price": -1})
    with pytest.raises(InvalidInput):
        provider.update(uri, {"product_name": ""})
    with pytest.raises(InvalidInput):
        provider.update(uri, {"quantity": None})

    assert provider.query(uri)[0]["price"] == 9.99
    # Supplier fields may be emptied.
    assert provider.update(uri, {"supplier_name": "", "supplier_phone_number": None}) == 1


def test_update_missing_item_returns_zero_without_notifying(provider, changes):
    assert provider.update(f"{provider.content_uri}/99", {"quantity": 1}) == 0
    assert changes == []


def test_update_item_ignores_passed_selection(provider, dune):
    first = provider.insert(provider.content_uri, dune)
    provider.insert(provider.content_uri, dune)

    assert provider.update(first, {"quantity": 7}, selection="1 = 1") == 1
    quantities = [r["quantity"] for r in provider.query(provider.content_uri, sort_order="id")]
    assert quantities == [7, 3]


def test_update_collection_with_selection(provider, changes):
    for name in ("A", "B", "C"):
        provider.insert(provider.content_uri, {"product_name": name, "price": 1.0, "quantity": 1})
    changes.clear()

    count = provider.update(provider.content_uri, {"price": 2.5}, "product_name IN (?, ?)", ["A", "C"])
    assert count == 2
    assert changes == [provider.content_uri]
    prices = {r["product_name"]: r["price"] for r in provider.query(provider.content_uri)}
    assert prices == {"A": 2.5, "B": 1.0, "C": 2.5}


def test_update_cannot_change_id(provider, dune):
    uri = provider.insert(provider.content_uri, dune)
    with pytest.raises(InvalidArgument):
        provider.update(uri, {"id": 5})
    with pytest.raises(InvalidArgument):
        provider.update(uri, {"isbn": "x"})
    assert provider.query(uri)[0]["id"] == 1


def test_delete_existing_item(provider, dune):
    uri = provider.insert(provider.content_uri, dune)
    seen = []
    provider.register_observer(uri, seen.append)

    assert provider.delete(uri) == 1
    assert seen == [uri]
    assert provider.query(uri) == []


def test_delete_missing_item(provider, changes):
    assert provider.delete(f"{provider.content_uri}/5") == 0
    assert changes == []


def test_delete_collection(provider, changes, dune):
    for _ in range(3):
        provider.insert(provider.content_uri, dune)
    changes.clear()

    assert provider.delete(provider.content_uri) == 3
    assert changes == [provider.content_uri]
    assert _count(provider) == 0


def test_delete_collection_with_selection(provider, dune):
    provider.insert(provider.content_uri, dune)
    provider.insert(provider.content_uri, {**dune, "quantity": 0})
    assert provider.delete(provider.content_uri, "quantity = ?", [0]) == 1
    assert _count(provider) == 1


def test_get_type(provider):
    assert provider.get_type(provider.content_uri) == contract.CONTENT_LIST_TYPE
    assert provider.get_type(f"{provider.content_uri}/3") == contract.CONTENT_ITEM_TYPE
    assert contract.CONTENT_LIST_TYPE.startswith("vnd.android.cursor.dir/")
    assert contract.CONTENT_ITEM_TYPE.startswith("vnd.android.cursor.item/")


def test_custom_authority(db_file, dune):
    provider = BookProvider(db_file=db_file, authority="org.example.shop")
    uri = provider.insert("content://org.example.shop/books", dune)
    assert uri == "content://org.example.shop/books/1"
    assert provider.get_type(uri) == "vnd.android.cursor.item/org.example.shop/books"
    with pytest.raises(InvalidAddress):
        provider.query(f"content://{contract.CONTENT_AUTHORITY}/books")


def test_providers_share_storage(db_file, dune):
    writer = BookProvider(db_file=db_file)
    reader = BookProvider(db_file=db_file)
    writer.insert(writer.content_uri, dune)
    assert len(reader.query(reader.content_uri)) == 1


def test_concurrent_inserts_get_distinct_ids(provider, dune):
    uris = []
    lock = threading.Lock()

    def worker():
        for _ in range(5):
            uri = provider.insert(provider.content_uri, dune)
            with lock:
                uris.append(uri)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert None not in uris
    assert len(set(uris)) == 20
    assert _count(provider) == 20


def test_insert_quantity_beyond_storage_range(provider, changes):
    with pytest.raises(InvalidInput, match="quantity"):
        provider.insert(provider.content_uri, {"product_name": "X", "price": 1.0, "quantity": 10 ** 20})
    assert _count(provider) == 0
    assert changes == []


def test_insert_price_too_large_for_float(provider):
    with pytest.raises(InvalidInput, match="price"):
        provider.insert(provider.content_uri, {"product_name": "X", "price": 10 ** 400, "quantity": 1})
    assert _count(provider) == 0


def test_largest_storable_quantity(provider):
    uri = provider.insert(provider.content_uri, {"product_name": "X", "price": 1.0, "quantity": contract.MAX_INTEGER})
    assert provider.query(uri)[0]["quantity"] == contract.MAX_INTEGER


def test_update_quantity_beyond_storage_range(provider, dune):
    uri = provider.insert(provider.content_uri, dune)
    with pytest.raises(InvalidInput):
        provider.update(uri, {"quantity": 10 ** 20})
    assert provider.query(uri)[0]["quantity"] == 3


def test_oversized_item_id_matches_nothing(provider, changes, dune):
    provider.insert(provider.content_uri, dune)
    changes.clear()
    uri = f"{provider.content_uri}/99999999999999999999"

    assert provider.query(uri) == []
    assert provider.update(uri, {"quantity": 1}) == 0
    assert provider.delete(uri) == 0
    assert provider.get_type(uri) == contract.CONTENT_ITEM_TYPE
    assert changes == []
    assert _count(provider) == 1
    with pytest.raises(InvalidInput):
        provider.update(uri, {"price": -1})
