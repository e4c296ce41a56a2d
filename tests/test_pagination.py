import pytest

from scripts.orgmigrate.errors import PageableFieldNotFound
from scripts.orgmigrate.pagination import (
    find_page_info_path,
    first_list_field,
    merge_connection,
    merge_rest_pages,
    page_info_at,
)

PAGE_INFO = {"hasNextPage": True, "endCursor": "abc"}


def _nest(keys, leaf):
    node = leaf
    for key in reversed(keys):
        node = {key: node}
    return node


def test_finds_first_connection_depth_first():
    body = {
        "data": {
            "organization": {
                "login": "acme",
                "teams": {"pageInfo": PAGE_INFO, "nodes": []},
                "repositories": {"pageInfo": PAGE_INFO, "nodes": []},
            }
        }
    }
    assert find_page_info_path(body) == ("data", "organization", "teams")


def test_page_info_at_root():
    assert find_page_info_path({"pageInfo": PAGE_INFO, "nodes": []}) == ()


def test_search_depth_is_bounded_at_six():
    leaf = {"pageInfo": PAGE_INFO, "nodes": []}
    six = ["a", "b", "c", "d", "e", "f"]
    assert find_page_info_path(_nest(six, leaf)) == tuple(six)
    assert find_page_info_path(_nest(six + ["g"], leaf)) is None


def test_connections_inside_lists_are_ignored():
    body = {"data": {"items": [{"members": {"pageInfo": PAGE_INFO, "nodes": []}}]}}
    assert find_page_info_path(body) is None


def test_page_info_must_have_has_next_page():
    body = {"data": {"conn": {"pageInfo": {"endCursor": "x"}, "nodes": []}}}
    assert find_page_info_path(body) is None
    assert page_info_at(body, ("data", "conn")) is None


def test_first_list_field_uses_declaration_order():
    assert first_list_field({"pageInfo": {}, "edges": [1], "nodes": [2]}) == "edges"
    assert first_list_field({"pageInfo": {}}) is None
    assert first_list_field(None) is None


def test_merge_connection_keeps_newest_page_info():
    path = ("data", "conn")
    old = {"data": {"conn": {"pageInfo": {"hasNextPage": True, "endCursor": "1"}, "edges": ["a"]}}}
    new = {"data": {"conn": {"pageInfo": {"hasNextPage": False, "endCursor": "2"}, "edges": ["b"]}}}

    merged = merge_connection(old, new, path)

    assert merged["data"]["conn"]["edges"] == ["a", "b"]
    assert merged["data"]["conn"]["pageInfo"]["endCursor"] == "2"


def test_merge_connection_without_list_fails():
    path = ("data", "conn")
    old = {"data": {"conn": {"pageInfo": PAGE_INFO}}}
    new = {"data": {"conn": {"pageInfo": PAGE_INFO}}}
    with pytest.raises(PageableFieldNotFound):
        merge_connection(old, new, path)


def test_merge_rest_pages_sums_total_count():
    merged = merge_rest_pages(
        {"total_count": 2, "secrets": [{"name": "A"}, {"name": "B"}]},
        {"total_count": 1, "secrets": [{"name": "C"}]},
    )
    assert merged == {
        "total_count": 3,
        "secrets": [{"name": "A"}, {"name": "B"}, {"name": "C"}],
    }


def test_merge_rest_pages_coerces_to_list():
    assert merge_rest_pages([1, 2], [3]) == [1, 2, 3]
    assert merge_rest_pages({"id": 1}, {"id": 2}) == [{"id": 1}, {"id": 2}]
    assert merge_rest_pages([1], {"id": 2}) == [1, {"id": 2}]
