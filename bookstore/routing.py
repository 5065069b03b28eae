"""Resolves content addresses to the resource shape they name."""
import re
from enum import IntEnum
from typing import Iterable, Optional, Tuple
from urllib.parse import urlsplit

from bookstore import contract
from bookstore.exceptions import InvalidAddress

_DIGITS = re.compile(r"[0-9]+")


class Match(IntEnum):
    NO_MATCH = -1
    BOOKS = 1
    BOOK_ID = 2


def split_uri(uri: str) -> Optional[Tuple[str, Tuple[str, ...]]]:
    """Return ``(authority, path segments)`` for a content URI, or None when it is not one."""
    if not isinstance(uri, str):
        return None
    try:
        parts = urlsplit(uri)
    except ValueError:
        return None
    if parts.scheme != contract.SCHEME or not parts.netloc:
        return None
    if parts.query or parts.fragment:
        return None
    segments = tuple(s for s in parts.path.split("/") if s)
    return parts.netloc, segments


def parse_id(uri: str) -> int:
    """Extract the trailing numeric id of an item address."""
    split = split_uri(uri)
    if split is None or not split[1] or not _DIGITS.fullmatch(split[1][-1]):
        raise InvalidAddress(uri, "parse an id from")
    return int(split[1][-1])


def with_appended_id(uri: str, row_id: int) -> str:
    return f"{uri.rstrip('/')}/{int(row_id)}"


class UriMatcher:
    """Immutable table of ``(authority, path pattern, code)`` rules.

    A ``#`` segment in a pattern matches one segment of ASCII digits and a
    ``*`` segment matches any single segment. Rules are tried in order and the
    first match wins; anything else resolves to ``Match.NO_MATCH``.
    """

    def __init__(self, rules: Iterable[Tuple[str, str, int]]) -> None:
        self._rules = tuple(
            (authority, tuple(s for s in path.split("/") if s), code)
            for authority, path, code in rules
        )

    @property
    def rules(self) -> Tuple[Tuple[str, Tuple[str, ...], int], ...]:
        return self._rules

    def match(self, uri: str) -> int:
        split = split_uri(uri)
        if split is None:
            return Match.NO_MATCH
        authority, segments = split
        for rule_authority, pattern, code in self._rules:
            if rule_authority == authority and self._segments_match(pattern, segments):
                return code
        return Match.NO_MATCH

    @staticmethod
    def _segments_match(pattern: Tuple[str, ...], segments: Tuple[str, ...]) -> bool:
        if len(pattern) != len(segments):
            return False
        for expected, actual in zip(pattern, segments):
            if expected == "#":
                if not _DIGITS.fullmatch(actual):
                    return False
            elif expected != "*" and expected != actual:
                return False
        return True


def build_book_matcher(authority: str = contract.CONTENT_AUTHORITY) -> UriMatcher:
    """Routing table for the books collection and single-book addresses."""
    return UriMatcher((
        (authority, contract.PATH_BOOKS, Match.BOOKS),
        (authority, f"{contract.PATH_BOOKS}/#", Match.BOOK_ID),
    ))
