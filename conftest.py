import pytest

from bookstore.inventory import Inventory
from bookstore.provider import BookProvider


@pytest.fixture
def db_file(tmp_path, request):
    # Unique database file per test
    return str(tmp_path / f"test_{request.node.name}.db")


@pytest.fixture
def provider(db_file):
    return BookProvider(db_file=db_file)


@pytest.fixture
def inventory(provider):
    return Inventory(provider)


@pytest.fixture
def changes(provider):
    """Addresses announced for the books collection and everything below it."""
    seen = []
    subscription = provider.register_observer(provider.content_uri, seen.append, notify_for_descendants=True)
    yield seen
    subscription.cancel()


@pytest.fixture
def dune():
    return {"product_name": "Dune", "price": 9.99, "quantity": 3}
