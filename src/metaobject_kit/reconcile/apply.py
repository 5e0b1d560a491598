"""Introspect the remote schema and apply change sets to it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from metaobject_kit.backends.graphql_client import RequestFunction, check_protocol_errors, execute_mutation
from metaobject_kit.backends.graphql_queries import (
    CREATE_METAOBJECT_DEFINITION_MUTATION,
    DELETE_METAOBJECT_DEFINITION_MUTATION,
    LIST_METAOBJECT_DEFINITIONS_QUERY,
    UPDATE_METAOBJECT_DEFINITION_MUTATION,
)
from metaobject_kit.exceptions import PartialApplyError, ReconciliationCancelled, RemoteError
from metaobject_kit.reconcile.diff import ChangeSet, diff_schemas
from metaobject_kit.schema.definitions import FieldDefinition, ObjectDefinition, RemoteObjectDefinition
from metaobject_kit.schema.field_kinds import FieldKind
from metaobject_kit.schema.validations import Validation

logger = logging.getLogger(__name__)

DEFINITIONS_PAGE_SIZE = 250

ConfirmCallback = Callable[[ChangeSet], bool]


@dataclass
class ApplyReport:
    """Steps of a change set that were applied, in order.

    ``created`` and ``updated`` hold object types; ``deleted`` holds the
    remote ids of deleted definitions.
    """

    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)

    @property
    def steps(self) -> int:
        return len(self.created) + len(self.updated) + len(self.deleted)

    def to_dict(self) -> Dict[str, List[str]]:
        return {"created": list(self.created), "updated": list(self.updated), "deleted": list(self.deleted)}


def _parse_field(node: Mapping[str, Any]) -> FieldDefinition:
    type_name = (node.get("type") or {}).get("name", "")
    return FieldDefinition(
        key=node["key"],
        kind=FieldKind.from_wire(type_name) or type_name,
        name=node.get("name"),
        required=node.get("required"),
        description=node.get("description"),
        validations=tuple(
            Validation(validation["name"], validation["value"]) for validation in node.get("validations") or []
        ),
    )


def _parse_definition(node: Mapping[str, Any]) -> RemoteObjectDefinition:
    fields = {}
    for field_node in node.get("fieldDefinitions") or []:
        definition = _parse_field(field_node)
        fields[definition.key] = definition
    return RemoteObjectDefinition(
        id=node["id"],
        type=node["type"],
        fields=fields,
        name=node.get("name"),
        description=node.get("description"),
        display_name_key=node.get("displayNameKey"),
    )


def introspect_remote_schema(
    request: RequestFunction,
    page_size: int = DEFINITIONS_PAGE_SIZE,
) -> List[RemoteObjectDefinition]:
    """Fetch every remote object definition, following cursor pagination.

    Raises:
        RemoteProtocolError: When a page request fails
    """
    definitions: List[RemoteObjectDefinition] = []
    cursor: Optional[str] = None
    while True:
        response = request(LIST_METAOBJECT_DEFINITIONS_QUERY, {"first": page_size, "after": cursor})
        data = check_protocol_errors(response, "metaobjectDefinitions")
        connection = data.get("metaobjectDefinitions") or {}
        definitions.extend(_parse_definition(node) for node in connection.get("nodes") or [])

        page_info = connection.get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            break
        cursor = page_info.get("endCursor")

    logger.debug(f"Introspected {len(definitions)} remote object definitions")
    return definitions


def apply_change_set(request: RequestFunction, change_set: ChangeSet) -> ApplyReport:
    """Apply creates, then updates, then deletes.

    Nothing is rolled back. A failure after at least one applied step raises
    :class:`PartialApplyError` carrying the report of the completed steps; a
    failure of the very first step propagates unchanged.

    Raises:
        RemoteProtocolError: When the first step fails at the protocol level
        RemoteSemanticError: When the first step is rejected by the store
        PartialApplyError: When a later step fails
    """
    report = ApplyReport()
    try:
        for definition in change_set.create:
            execute_mutation(
                request,
                CREATE_METAOBJECT_DEFINITION_MUTATION,
                {"definition": definition.to_create_input()},
                "metaobjectDefinitionCreate",
            )
            report.created.append(definition.type)
            logger.info(f"Created metaobject definition {definition.type}")

        for update in change_set.update:
            execute_mutation(
                request,
                UPDATE_METAOBJECT_DEFINITION_MUTATION,
                {"id": update.id, "definition": update.to_input()},
                "metaobjectDefinitionUpdate",
            )
            report.updated.append(update.type)
            logger.info(f"Updated metaobject definition {update.type}")

        for definition_id in change_set.delete:
            execute_mutation(
                request,
                DELETE_METAOBJECT_DEFINITION_MUTATION,
                {"id": definition_id},
                "metaobjectDefinitionDelete",
            )
            report.deleted.append(definition_id)
            logger.info(f"Deleted metaobject definition {change_set.deleted_types.get(definition_id, definition_id)}")
    except RemoteError as e:
        if report.steps == 0:
            raise
        raise PartialApplyError(
            f"Reconciliation stopped after {report.steps} applied steps: {e}",
            report,
            {"error_type": type(e).__name__},
        ) from e

    return report


def reconcile(
    request: RequestFunction,
    local: Mapping[str, ObjectDefinition],
    confirm: Optional[ConfirmCallback] = None,
) -> ApplyReport:
    """Introspect, diff and apply in one go.

    Args:
        request: Request function for the remote store
        local: Local definitions keyed by schema attribute name
        confirm: Called with the change set when it deletes definitions or
            fields; returning ``False`` cancels before anything is applied.
            Without a callback destructive steps are applied unconfirmed.

    Raises:
        ReconciliationCancelled: When ``confirm`` declines
    """
    change_set = diff_schemas(local, introspect_remote_schema(request))
    if change_set.is_empty:
        logger.info("Remote schema is up to date")
        return ApplyReport()

    if confirm is not None and change_set.is_destructive and not confirm(change_set):
        raise ReconciliationCancelled(
            "Destructive changes were declined",
            {
                "deleted_types": [change_set.deleted_types.get(i, i) for i in change_set.delete],
                "deleted_fields": [f"{type_}.{key}" for type_, key in change_set.field_deletions()],
            },
        )

    return apply_change_set(request, change_set)
