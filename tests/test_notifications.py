import pytest

from bookstore.exceptions import InvalidAddress
from bookstore.notifications import ChangeNotifier

BOOKS = "content://shop/books"
BOOK_1 = "content://shop/books/1"
BOOK_2 = "content://shop/books/2"


@pytest.fixture
def notifier():
    return ChangeNotifier()


def test_exact_address(notifier):
    seen = []
    notifier.register(BOOK_1, seen.append)
    assert notifier.notify_change(BOOK_1) == 1
    assert notifier.notify_change(BOOK_2) == 0
    assert seen == [BOOK_1]


def test_descendants_only_when_requested(notifier):
    plain, deep = [], []
    notifier.register(BOOKS, plain.append)
    notifier.register(BOOKS, deep.append, notify_for_descendants=True)

    notifier.notify_change(BOOK_2)
    assert plain == []
    assert deep == [BOOK_2]


def test_collection_change_reaches_item_observers(notifier):
    seen = []
    notifier.register(BOOK_1, seen.append)
    notifier.notify_change(BOOKS)
    assert seen == [BOOKS]


def test_other_authority_is_ignored(notifier):
    seen = []
    notifier.register(BOOKS, seen.append, notify_for_descendants=True)
    notifier.notify_change("content://elsewhere/books")
    assert seen == []


def test_cancel(notifier):
    seen = []
    subscription = notifier.register(BOOKS, seen.append)
    assert subscription.active
    assert subscription.cancel() is True
    assert subscription.cancel() is False
    assert not subscription.active
    notifier.notify_change(BOOKS)
    assert seen == []
    assert notifier.observer_count() == 0


def test_failing_observer_does_not_stop_others(notifier, caplog):
    seen = []

    def broken(uri):
        raise RuntimeError("boom")

    notifier.register(BOOKS, broken)
    notifier.register(BOOKS, seen.append)
    assert notifier.notify_change(BOOKS) == 2
    assert seen == [BOOKS]
    assert "Change observer failed" in caplog.text


def test_observer_may_unregister_itself(notifier):
    calls = []

    def once(uri):
        calls.append(uri)
        subscription.cancel()

    subscription = notifier.register(BOOKS, once)
    notifier.notify_change(BOOKS)
    notifier.notify_change(BOOKS)
    assert calls == [BOOKS]


def test_invalid_address(notifier):
    with pytest.raises(InvalidAddress):
        notifier.register("books", lambda uri: None)
    with pytest.raises(InvalidAddress):
        notifier.notify_change("http://shop/books")
