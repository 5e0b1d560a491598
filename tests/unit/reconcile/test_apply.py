"""Unit tests for introspection, change set application and reconciliation."""

from unittest.mock import Mock

import pytest

from metaobject_kit.exceptions import (
    PartialApplyError,
    ReconciliationCancelled,
    RemoteProtocolError,
    RemoteSemanticError,
)
from metaobject_kit.reconcile.apply import apply_change_set, introspect_remote_schema, reconcile
from metaobject_kit.reconcile.diff import ChangeSet, FieldDelete, ObjectUpdate
from metaobject_kit.schema.field_kinds import FieldKind
from metaobject_kit.schema.validations import Validation


def _definition_node(definition_id, type_name, fields, name=None):
    return {
        "id": definition_id,
        "type": type_name,
        "name": name or type_name,
        "description": None,
        "displayNameKey": None,
        "fieldDefinitions": fields,
    }


def _field_node(key, type_name, required=False, validations=None, name=None):
    return {
        "key": key,
        "name": name or key,
        "description": "",
        "required": required,
        "type": {"name": type_name},
        "validations": validations or [],
    }


def _definitions_page(nodes, has_next_page=False, end_cursor=None):
    return {
        "data": {
            "metaobjectDefinitions": {
                "nodes": nodes,
                "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
            }
        }
    }


def _ok(operation, **extra):
    return {"data": {operation: {"userErrors": [], **extra}}}


def test_introspect_parses_definitions(scripted_request):
    request = scripted_request(
        [
            _definitions_page(
                [
                    _definition_node(
                        "gid://1",
                        "book",
                        [
                            _field_node("title", "single_line_text_field", required=True),
                            _field_node(
                                "price",
                                "number_decimal",
                                validations=[{"name": "min", "value": "0.0"}],
                            ),
                            _field_node("cover", "metaobject_reference"),
                        ],
                        name="Book",
                    )
                ]
            )
        ]
    )

    definitions = introspect_remote_schema(request)

    assert len(definitions) == 1
    book = definitions[0]
    assert book.id == "gid://1"
    assert book.type == "book"
    assert book.name == "Book"
    assert list(book.fields) == ["title", "price", "cover"]
    assert book.fields["title"].required is True
    assert book.fields["price"].kind is FieldKind.DECIMAL
    assert book.fields["price"].validations == (Validation("min", "0.0"),)
    assert book.fields["cover"].kind == "metaobject_reference"


def test_introspect_follows_cursor_pagination(scripted_request):
    request = scripted_request(
        [
            _definitions_page([_definition_node("gid://1", "book", [])], has_next_page=True, end_cursor="c1"),
            _definitions_page([_definition_node("gid://2", "author", [])]),
        ]
    )

    definitions = introspect_remote_schema(request, page_size=1)

    assert [definition.type for definition in definitions] == ["book", "author"]
    assert request.calls[0][1] == {"first": 1, "after": None}
    assert request.calls[1][1] == {"first": 1, "after": "c1"}


def test_introspect_raises_on_protocol_errors(scripted_request):
    request = scripted_request([{"errors": {"graphQLErrors": [{"message": "Throttled"}]}}])

    with pytest.raises(RemoteProtocolError, match="Throttled"):
        introspect_remote_schema(request)


def test_apply_runs_creates_updates_then_deletes(book):
    request = Mock(
        side_effect=[
            _ok("metaobjectDefinitionCreate"),
            _ok("metaobjectDefinitionUpdate"),
            _ok("metaobjectDefinitionDelete", deletedId="gid://9"),
        ]
    )
    change_set = ChangeSet(
        create=[book],
        update=[ObjectUpdate(id="gid://2", type="review", changes={"name": "Reviews"})],
        delete=["gid://9"],
        deleted_types={"gid://9": "legacy"},
    )

    report = apply_change_set(request, change_set)

    assert report.to_dict() == {"created": ["book"], "updated": ["review"], "deleted": ["gid://9"]}
    assert report.steps == 3
    documents = [call.args[0] for call in request.call_args_list]
    assert "metaobjectDefinitionCreate" in documents[0]
    assert "metaobjectDefinitionUpdate" in documents[1]
    assert "metaobjectDefinitionDelete" in documents[2]
    assert request.call_args_list[0].args[1] == {"definition": book.to_create_input()}
    assert request.call_args_list[1].args[1] == {"id": "gid://2", "definition": {"name": "Reviews"}}
    assert request.call_args_list[2].args[1] == {"id": "gid://9"}


def test_first_step_failure_propagates_unchanged(book):
    request = Mock(
        return_value={
            "data": {
                "metaobjectDefinitionCreate": {
                    "userErrors": [{"field": ["definition", "type"], "message": "Type is taken"}]
                }
            }
        }
    )

    with pytest.raises(RemoteSemanticError) as exc_info:
        apply_change_set(request, ChangeSet(create=[book]))

    assert exc_info.value.user_errors[0]["message"] == "Type is taken"


def test_later_failure_reports_partial_apply(book):
    request = Mock(
        side_effect=[
            _ok("metaobjectDefinitionCreate"),
            {"errors": [{"message": "Internal error"}]},
        ]
    )
    change_set = ChangeSet(
        create=[book],
        update=[ObjectUpdate(id="gid://2", type="review", field_changes=[FieldDelete("old")])],
    )

    with pytest.raises(PartialApplyError) as exc_info:
        apply_change_set(request, change_set)

    assert exc_info.value.report.created == ["book"]
    assert exc_info.value.report.updated == []
    assert isinstance(exc_info.value.__cause__, RemoteProtocolError)


def test_reconcile_noop_issues_only_introspection(book, scripted_request):
    request = scripted_request(
        [
            _definitions_page(
                [
                    _definition_node(
                        "gid://1",
                        "book",
                        [
                            _field_node("title", "single_line_text_field", required=True, name="Title"),
                            _field_node(
                                "price",
                                "number_decimal",
                                validations=[{"name": "max", "value": "999.99"}, {"name": "min", "value": "0.0"}],
                            ),
                            _field_node("published_on", "date"),
                            _field_node("tags", "list.single_line_text_field"),
                        ],
                        name="Book",
                    )
                ]
            )
        ]
    )

    report = reconcile(request, {"book": book})

    assert report.steps == 0
    assert len(request.calls) == 1


def test_reconcile_cancelled_when_confirmation_declined(scripted_request):
    request = scripted_request([_definitions_page([_definition_node("gid://9", "legacy", [])])])
    confirm = Mock(return_value=False)

    with pytest.raises(ReconciliationCancelled):
        reconcile(request, {}, confirm=confirm)

    confirm.assert_called_once()
    assert confirm.call_args.args[0].delete == ["gid://9"]
    assert len(request.calls) == 1


def test_reconcile_does_not_ask_for_additive_changes(book, scripted_request):
    request = scripted_request([_definitions_page([]), _ok("metaobjectDefinitionCreate")])
    confirm = Mock(return_value=False)

    report = reconcile(request, {"book": book}, confirm=confirm)

    confirm.assert_not_called()
    assert report.created == ["book"]


def test_reconcile_applies_confirmed_deletes(scripted_request):
    request = scripted_request(
        [
            _definitions_page([_definition_node("gid://9", "legacy", [])]),
            _ok("metaobjectDefinitionDelete", deletedId="gid://9"),
        ]
    )

    report = reconcile(request, {}, confirm=lambda change_set: True)

    assert report.deleted == ["gid://9"]
