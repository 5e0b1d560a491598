"""Unit tests for MetaobjectOps."""

from datetime import date, datetime, timezone
from itertools import islice
from unittest.mock import Mock

import pytest

from metaobject_kit.exceptions import (
    EmptyUpdate,
    InvalidQueryShape,
    RemoteProtocolError,
    RemoteSemanticError,
    UnknownField,
)
from metaobject_kit.ops.metaobject_ops import MetaobjectOps, PageInfo


def _node(index, stars=None):
    return {
        "_id": f"gid://shopify/Metaobject/{index}",
        "_handle": f"review-{index}",
        "_updatedAt": "2024-01-01T00:00:00Z",
        "field0": {"value": f"Reviewer {index}"},
        "field1": {"value": str(stars if stars is not None else index % 5)},
    }


def _page(nodes, has_next_page=False, end_cursor=None, start_cursor=None):
    return {
        "data": {
            "metaobjects": {
                "edges": [{"node": node} for node in nodes],
                "pageInfo": {
                    "startCursor": start_cursor,
                    "endCursor": end_cursor,
                    "hasNextPage": has_next_page,
                    "hasPreviousPage": False,
                },
            }
        }
    }


def _user_errors(operation, message):
    return {"data": {operation: {"userErrors": [{"field": ["fields"], "message": message}]}}}


# ---------------------------------------------------------------------------
# list / get
# ---------------------------------------------------------------------------


def test_list_with_excluded_field(review):
    request = Mock(
        return_value=_page(
            [{"_id": "gid://1", "_handle": "r-1", "_updatedAt": "2024-01-01T00:00:00Z", "field0": {"value": "4"}}],
            end_cursor="c1",
            start_cursor="c0",
        )
    )
    ops = MetaobjectOps(review, request)

    result = ops.list(fields={"name": False}, query={"displayName": "Great"}, first=10, sort_key="updated_at")

    assert result.items == [
        {
            "_id": "gid://1",
            "_handle": "r-1",
            "_updatedAt": datetime(2024, 1, 1, tzinfo=timezone.utc),
            "stars": 4,
        }
    ]
    assert result.page_info == PageInfo(start_cursor="c0", end_cursor="c1")
    document, variables = request.call_args.args
    assert "metaobjects(type: $type" in document
    assert "$field0: String!" in document
    assert "$field1" not in document
    assert variables == {
        "type": "review",
        "query": 'display_name:"Great"',
        "after": None,
        "before": None,
        "first": 10,
        "last": None,
        "reverse": None,
        "sortKey": "updated_at",
        "field0": "stars",
    }


@pytest.mark.parametrize(
    "kwargs",
    [
        {"first": 0},
        {"first": 251},
        {"first": 5, "last": 5},
        {"sort_key": "title"},
    ],
)
def test_list_rejects_invalid_paging(review, kwargs):
    request = Mock()
    ops = MetaobjectOps(review, request)

    with pytest.raises(InvalidQueryShape):
        ops.list(**kwargs)

    request.assert_not_called()


def test_list_raises_protocol_errors(review):
    request = Mock(return_value={"errors": [{"message": "Field 'x' doesn't exist"}]})
    ops = MetaobjectOps(review, request)

    with pytest.raises(RemoteProtocolError) as exc_info:
        ops.list()

    assert exc_info.value.errors == [{"message": "Field 'x' doesn't exist"}]


def test_get_returns_decoded_record(review):
    request = Mock(return_value={"data": {"metaobject": _node(7, stars=5)}})
    ops = MetaobjectOps(review, request)

    record = ops.get("gid://shopify/Metaobject/7")

    assert record["name"] == "Reviewer 7"
    assert record["stars"] == 5
    assert record["_handle"] == "review-7"
    document, variables = request.call_args.args
    assert "metaobject(id: $id)" in document
    assert variables == {"id": "gid://shopify/Metaobject/7", "field0": "name", "field1": "stars"}


def test_get_returns_none_for_missing_record(review):
    ops = MetaobjectOps(review, Mock(return_value={"data": {"metaobject": None}}))

    assert ops.get("gid://shopify/Metaobject/404") is None


# ---------------------------------------------------------------------------
# iterate
# ---------------------------------------------------------------------------


def _paged_store(total, page_size):
    pages = []
    for start in range(0, total, page_size):
        end = min(start + page_size, total)
        pages.append(
            _page(
                [_node(index) for index in range(start, end)],
                has_next_page=end < total,
                end_cursor=f"cursor-{end}",
            )
        )
    return pages


def test_iterate_pages_through_every_record(review, scripted_request):
    request = scripted_request(_paged_store(250, 100))
    ops = MetaobjectOps(review, request)

    records = list(ops.iterate(page_size=100))

    assert len(request.calls) == 3
    assert len(records) == 250
    assert [record["_id"] for record in records] == [f"gid://shopify/Metaobject/{i}" for i in range(250)]
    assert [variables["after"] for _, variables in request.calls] == [None, "cursor-100", "cursor-200"]
    assert all(variables["first"] == 100 for _, variables in request.calls)


def test_iterate_is_lazy_and_stops_when_abandoned(review, scripted_request):
    request = scripted_request(_paged_store(250, 100))
    ops = MetaobjectOps(review, request)

    iterator = ops.iterate(page_size=100)
    assert request.calls == []

    first_five = list(islice(iterator, 5))
    iterator.close()

    assert len(first_five) == 5
    assert len(request.calls) == 1


def test_iterate_honours_limit(review, scripted_request):
    request = scripted_request(_paged_store(250, 100))
    ops = MetaobjectOps(review, request)

    records = list(ops.iterate(page_size=100, limit=150))

    assert len(records) == 150
    assert [variables["first"] for _, variables in request.calls] == [100, 50]


def test_iterate_with_zero_limit_makes_no_requests(review):
    request = Mock()
    ops = MetaobjectOps(review, request)

    assert list(ops.iterate(limit=0)) == []
    request.assert_not_called()


def test_iterate_validates_arguments_eagerly(review):
    ops = MetaobjectOps(review, Mock())

    with pytest.raises(InvalidQueryShape):
        ops.iterate(page_size=0)


# ---------------------------------------------------------------------------
# insert / update
# ---------------------------------------------------------------------------


def test_insert_encodes_values_and_decodes_echo(book):
    created = {
        "_id": "gid://shopify/Metaobject/1",
        "_handle": "dune",
        "_updatedAt": "2024-01-01T00:00:00Z",
        "field0": {"value": "Dune"},
        "field1": {"value": "2.0"},
        "field2": {"value": "1965-08-01"},
        "field3": None,
    }
    request = Mock(return_value={"data": {"metaobjectCreate": {"metaobject": created, "userErrors": []}}})
    ops = MetaobjectOps(book, request)

    record = ops.insert(
        {"title": "Dune", "price": 2, "published": date(1965, 8, 1), "tags": None, "_handle": "dune"}
    )

    document, variables = request.call_args.args
    assert "metaobjectCreate(metaobject: $metaobject)" in document
    assert variables["metaobject"] == {
        "type": "book",
        "fields": [
            {"key": "title", "value": "Dune"},
            {"key": "price", "value": "2.0"},
            {"key": "published_on", "value": "1965-08-01"},
        ],
        "handle": "dune",
    }
    assert variables["field2"] == "published_on"
    assert record["price"] == 2.0
    assert record["published"] == date(1965, 8, 1)
    assert record["tags"] is None
    assert record["_id"] == "gid://shopify/Metaobject/1"


def test_insert_unknown_field_raises_before_request(book):
    request = Mock()
    ops = MetaobjectOps(book, request)

    with pytest.raises(UnknownField):
        ops.insert({"title": "Dune", "author": "Herbert"})

    request.assert_not_called()


def test_insert_user_errors_raise(book):
    request = Mock(return_value=_user_errors("metaobjectCreate", "Title can't be blank"))
    ops = MetaobjectOps(book, request)

    with pytest.raises(RemoteSemanticError) as exc_info:
        ops.insert({"price": 1})

    assert exc_info.value.user_errors[0]["message"] == "Title can't be blank"


def test_update_builds_partial_input(book):
    request = Mock(
        return_value={"data": {"metaobjectUpdate": {"metaobject": {"_id": "gid://1"}, "userErrors": []}}}
    )
    ops = MetaobjectOps(book, request)

    record = ops.update("gid://1", {"price": 3.5, "tags": None, "_handle": "new-handle"}, status="DRAFT")

    document, variables = request.call_args.args
    assert "metaobjectUpdate(id: $id, metaobject: $metaobject)" in document
    assert variables["id"] == "gid://1"
    assert variables["metaobject"] == {
        "fields": [{"key": "price", "value": "3.5"}, {"key": "tags", "value": ""}],
        "handle": "new-handle",
        "capabilities": {"publishable": {"status": "DRAFT"}},
    }
    assert record["_id"] == "gid://1"
    assert record["title"] is None


def test_update_handle_only(book):
    request = Mock(return_value={"data": {"metaobjectUpdate": {"metaobject": {}, "userErrors": []}}})
    ops = MetaobjectOps(book, request)

    ops.update("gid://1", handle="renamed")

    assert request.call_args.args[1]["metaobject"] == {"handle": "renamed"}


@pytest.mark.parametrize("fields", [None, {}])
def test_update_without_changes_raises(book, fields):
    request = Mock()
    ops = MetaobjectOps(book, request)

    with pytest.raises(EmptyUpdate):
        ops.update("gid://1", fields)

    request.assert_not_called()


def test_update_rejects_unknown_fields_and_status(book):
    ops = MetaobjectOps(book, Mock())

    with pytest.raises(UnknownField):
        ops.update("gid://1", {"subtitle": "x"})
    with pytest.raises(InvalidQueryShape):
        ops.update("gid://1", status="LIVE")


def test_update_user_errors_raise(book):
    ops = MetaobjectOps(book, Mock(return_value=_user_errors("metaobjectUpdate", "Value is invalid")))

    with pytest.raises(RemoteSemanticError, match="Value is invalid"):
        ops.update("gid://1", {"price": -1})


# ---------------------------------------------------------------------------
# delete / bulk delete
# ---------------------------------------------------------------------------


def test_delete(review):
    request = Mock(return_value={"data": {"metaobjectDelete": {"deletedId": "gid://1", "userErrors": []}}})
    ops = MetaobjectOps(review, request)

    assert ops.delete("gid://1") == "gid://1"
    assert request.call_args.args[1] == {"id": "gid://1"}


def test_delete_user_errors_raise(review):
    ops = MetaobjectOps(review, Mock(return_value=_user_errors("metaobjectDelete", "Record not found")))

    with pytest.raises(RemoteSemanticError):
        ops.delete("gid://404")


def test_bulk_delete_is_scoped_to_type(review):
    job = {"id": "gid://shopify/Job/1", "done": False}
    request = Mock(return_value={"data": {"metaobjectBulkDelete": {"job": job, "userErrors": []}}})
    ops = MetaobjectOps(review, request)

    assert ops.bulk_delete(["gid://1", "gid://2"]) == job
    document, variables = request.call_args.args
    assert "metaobjectBulkDelete(where: { ids: $ids, type: $type })" in document
    assert variables == {"ids": ["gid://1", "gid://2"], "type": "review"}


def test_bulk_delete_with_no_ids_makes_no_request(review):
    request = Mock()
    ops = MetaobjectOps(review, request)

    assert ops.bulk_delete([]) is None
    request.assert_not_called()
