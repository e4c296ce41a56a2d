"""Shape helpers for paginated REST and GraphQL responses.

GraphQL connections are located either through the connection path a
query declares up front, or by a depth-first search for the first object
carrying a ``pageInfo {hasNextPage, endCursor}`` block. REST pages are
merged on their total-count field when both pages carry one.
"""

from __future__ import annotations

from typing import Any, Optional

from scripts.orgmigrate.errors import PageableFieldNotFound

MAX_SEARCH_DEPTH = 6
TOTAL_COUNT_KEYS = ("total_count", "totalCount")

Path = tuple[str, ...]


def _is_page_info(value: Any) -> bool:
    return isinstance(value, dict) and "hasNextPage" in value


def find_page_info_path(node: Any, max_depth: int = MAX_SEARCH_DEPTH) -> Optional[Path]:
    """Return the key path to the first mapping exposing pageInfo, or None.

    Lists are not descended into: a connection nested inside the items of
    another connection belongs to each item, not to the page.
    """

    def walk(value: Any, path: Path, depth: int) -> Optional[Path]:
        if not isinstance(value, dict):
            return None
        if _is_page_info(value.get("pageInfo")):
            return path
        if depth >= max_depth:
            return None
        for key, child in value.items():
            found = walk(child, path + (key,), depth + 1)
            if found is not None:
                return found
        return None

    return walk(node, (), 0)


def get_at(node: Any, path: Path) -> Any:
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def page_info_at(node: Any, path: Path) -> Optional[dict]:
    connection = get_at(node, path)
    if isinstance(connection, dict) and _is_page_info(connection.get("pageInfo")):
        return connection["pageInfo"]
    return None


def first_list_field(node: Any) -> Optional[str]:
    """Name of the first list-valued property, in declaration order."""
    if not isinstance(node, dict):
        return None
    for key, value in node.items():
        if isinstance(value, list):
            return key
    return None


def merge_connection(original: dict, newer: dict, path: Path) -> dict:
    """Prepend the original page's items to the newer page's connection.

    The newer page keeps its own pageInfo; it is returned, mutated.
    """
    old_conn = get_at(original, path)
    new_conn = get_at(newer, path)
    field = first_list_field(new_conn) or first_list_field(old_conn)
    if field is None or not isinstance(new_conn, dict):
        raise PageableFieldNotFound(path)
    old_items = (old_conn or {}).get(field) or []
    new_conn[field] = list(old_items) + list(new_conn.get(field) or [])
    return newer


def _total_count_key(result: Any) -> Optional[str]:
    if isinstance(result, dict):
        for key in TOTAL_COUNT_KEYS:
            if key in result:
                return key
    return None


def merge_rest_pages(current: Any, nested: Any) -> Any:
    """Combine one REST page with the already-merged remaining pages."""
    current_key = _total_count_key(current)
    nested_key = _total_count_key(nested)
    if current_key and nested_key:
        merged = dict(current)
        merged[current_key] = (current[current_key] or 0) + (nested[nested_key] or 0)
        field = first_list_field(current)
        if field is not None:
            merged[field] = list(current[field]) + list(nested.get(field) or [])
        return merged

    if current is None:
        items: list = []
    elif isinstance(current, list):
        items = list(current)
    else:
        items = [current]
    if isinstance(nested, list):
        return items + nested
    return items + [nested]
