"""Read and write operations for the records of one object type.

Records are plain dictionaries keyed by field alias, plus the selected
metafields (``_id``, ``_handle``, ``_updatedAt``). Values are decoded through
the owning field's kind, so a ``decimal`` field comes back as ``float`` and a
``date_time`` field as an aware UTC ``datetime``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from metaobject_kit.backends.graphql_client import RequestFunction, check_protocol_errors, execute_mutation
from metaobject_kit.backends.graphql_queries import (
    BULK_DELETE_METAOBJECTS_MUTATION,
    CREATE_METAOBJECT_MUTATION_TEMPLATE,
    DELETE_METAOBJECT_MUTATION,
    GET_METAOBJECT_QUERY_TEMPLATE,
    LIST_METAOBJECTS_QUERY_TEMPLATE,
    UPDATE_METAOBJECT_MUTATION_TEMPLATE,
    render_document,
)
from metaobject_kit.exceptions import EmptyUpdate, InvalidQueryShape, UnknownField
from metaobject_kit.models.inputs import IteratorParams, ListParams, UpdateParams
from metaobject_kit.query.filters import build_list_query
from metaobject_kit.query.projection import (
    FieldSelection,
    Selection,
    build_item_selection,
    decode_node,
    field_variables,
    resolve_selection,
    variable_definitions,
)
from metaobject_kit.schema.definitions import FieldDefinition, ObjectDefinition

logger = logging.getLogger(__name__)

HANDLE_FIELD = "_handle"

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class PageInfo:
    start_cursor: Optional[str] = None
    end_cursor: Optional[str] = None
    has_next_page: bool = False
    has_previous_page: bool = False

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "PageInfo":
        return cls(
            start_cursor=data.get("startCursor"),
            end_cursor=data.get("endCursor"),
            has_next_page=bool(data.get("hasNextPage")),
            has_previous_page=bool(data.get("hasPreviousPage")),
        )


@dataclass
class ListResult:
    items: List[Dict[str, Any]] = field(default_factory=list)
    page_info: PageInfo = field(default_factory=PageInfo)


def _validated(model: Type[ModelT], **kwargs: Any) -> ModelT:
    try:
        return model(**kwargs)
    except ValidationError as e:
        raise InvalidQueryShape(
            f"Invalid {model.__name__}: {e}",
            {"errors": [error["msg"] for error in e.errors()]},
        ) from e


class MetaobjectOps:
    """Operations bound to one object definition and one request function."""

    def __init__(self, definition: ObjectDefinition, request: RequestFunction):
        self._definition = definition
        self._request = request

    @property
    def definition(self) -> ObjectDefinition:
        return self._definition

    def _field(self, alias: str) -> FieldDefinition:
        definition = self._definition.fields.get(alias)
        if definition is None:
            raise UnknownField(
                f'Unknown field "{alias}" for {self._definition.type}',
                {"type": self._definition.type, "field": alias},
            )
        return definition

    def _render(self, template: str, selection: Selection) -> str:
        return render_document(template, variable_definitions(selection), build_item_selection(selection))

    def _list_page(
        self, selection: Selection, variables: Dict[str, Any]
    ) -> Tuple[List[Dict[str, Any]], PageInfo]:
        document = self._render(LIST_METAOBJECTS_QUERY_TEMPLATE, selection)
        response = self._request(
            document,
            {
                "type": self._definition.type,
                **variables,
                **field_variables(self._definition, selection),
            },
        )
        data = check_protocol_errors(response, "metaobjects")
        connection = data.get("metaobjects") or {}
        items = [
            decode_node(self._definition, selection, edge.get("node") or {})
            for edge in connection.get("edges") or []
        ]
        return items, PageInfo.from_wire(connection.get("pageInfo") or {})

    # ---------------------------------------------------------------------
    # Reads
    # ---------------------------------------------------------------------

    def list(
        self,
        *,
        fields: FieldSelection = None,
        query: Any = None,
        after: Optional[str] = None,
        before: Optional[str] = None,
        first: Optional[int] = None,
        last: Optional[int] = None,
        reverse: Optional[bool] = None,
        sort_key: Optional[str] = None,
    ) -> ListResult:
        """Fetch one page of records.

        Args:
            fields: Field selection; ``None`` selects everything
            query: Search string or structured filter
            after: Cursor to page forward from
            before: Cursor to page backward from
            first: Number of records after the cursor
            last: Number of records before the cursor
            reverse: Reverse the sort order
            sort_key: One of ``id``, ``type``, ``updated_at``, ``display_name``

        Returns:
            ListResult with the decoded records and the page info

        Raises:
            QueryShapeError: When the selection, filter or paging is malformed
            UnknownField: When the selection names an unknown field
            RemoteProtocolError: When the request fails
        """
        params = _validated(
            ListParams,
            query=query,
            after=after,
            before=before,
            first=first,
            last=last,
            reverse=reverse,
            sort_key=sort_key,
        )
        selection = resolve_selection(self._definition, fields)
        variables = {"query": build_list_query(params.query), **params.to_variables()}
        items, page_info = self._list_page(selection, variables)
        logger.debug(f"Listed {len(items)} {self._definition.type} records")
        return ListResult(items=items, page_info=page_info)

    def get(self, id: str, fields: FieldSelection = None) -> Optional[Dict[str, Any]]:
        """Fetch one record by id; ``None`` when the store has no such record."""
        selection = resolve_selection(self._definition, fields)
        document = self._render(GET_METAOBJECT_QUERY_TEMPLATE, selection)
        response = self._request(document, {"id": id, **field_variables(self._definition, selection)})
        data = check_protocol_errors(response, "metaobject")
        node = data.get("metaobject")
        if not node:
            return None
        return decode_node(self._definition, selection, node)

    def iterate(
        self,
        *,
        fields: FieldSelection = None,
        query: Any = None,
        reverse: Optional[bool] = None,
        sort_key: Optional[str] = None,
        page_size: int = 100,
        limit: Optional[int] = None,
    ) -> Iterator[Dict[str, Any]]:
        """Lazily yield every matching record, one page request at a time.

        Arguments are validated immediately; the first request is only issued
        when the first record is pulled. Each further page is requested only
        once the previous one is exhausted, and abandoning the iterator issues
        no more requests.

        Args:
            fields: Field selection; ``None`` selects everything
            query: Search string or structured filter
            reverse: Reverse the sort order
            sort_key: One of ``id``, ``type``, ``updated_at``, ``display_name``
            page_size: Records requested per page (1-250)
            limit: Stop after this many records
        """
        params = _validated(
            IteratorParams,
            query=query,
            reverse=reverse,
            sort_key=sort_key,
            page_size=page_size,
            limit=limit,
        )
        selection = resolve_selection(self._definition, fields)
        return self._iterate(selection, build_list_query(params.query), params)

    def _iterate(
        self, selection: Selection, compiled_query: Optional[str], params: IteratorParams
    ) -> Iterator[Dict[str, Any]]:
        remaining = params.limit
        cursor: Optional[str] = None
        pages = 0
        while remaining is None or remaining > 0:
            first = params.page_size if remaining is None else min(params.page_size, remaining)
            items, page_info = self._list_page(
                selection,
                {
                    "query": compiled_query,
                    "after": cursor,
                    "first": first,
                    "reverse": params.reverse,
                    "sortKey": params.sort_key,
                },
            )
            pages += 1
            if remaining is not None:
                items = items[:remaining]
                remaining -= len(items)
            yield from items

            if not page_info.has_next_page:
                break
            cursor = page_info.end_cursor
        logger.debug(f"Iterated {self._definition.type} over {pages} pages")

    # ---------------------------------------------------------------------
    # Writes
    # ---------------------------------------------------------------------

    def insert(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Create a record and return it decoded with every field selected.

        ``None`` values are omitted; ``_handle`` sets the handle of the new
        record.

        Raises:
            UnknownField: When a key is not a field alias
            RemoteSemanticError: When the store rejects the record
        """
        handle = None
        field_inputs = []
        for alias, value in values.items():
            if alias == HANDLE_FIELD:
                handle = value
                continue
            definition = self._field(alias)
            if value is None:
                continue
            field_inputs.append({"key": definition.key, "value": definition.encode(value)})

        metaobject: Dict[str, Any] = {"type": self._definition.type, "fields": field_inputs}
        if handle is not None:
            metaobject["handle"] = handle

        selection = resolve_selection(self._definition)
        payload = execute_mutation(
            self._request,
            self._render(CREATE_METAOBJECT_MUTATION_TEMPLATE, selection),
            {"metaobject": metaobject, **field_variables(self._definition, selection)},
            "metaobjectCreate",
        )
        record = decode_node(self._definition, selection, payload.get("metaobject") or {})
        logger.debug(f"Inserted {self._definition.type} record {record.get('_id')}")
        return record

    def update(
        self,
        id: str,
        fields: Optional[Mapping[str, Any]] = None,
        *,
        handle: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Update a record and return it decoded with every field selected.

        Args:
            id: Record id
            fields: Field values by alias; ``None`` clears a field and
                ``_handle`` renames the record
            handle: New handle
            status: Publishable status, ``ACTIVE`` or ``DRAFT``

        Raises:
            EmptyUpdate: When no change is given
            UnknownField: When a key is not a field alias
            RemoteSemanticError: When the store rejects the update
        """
        params = _validated(UpdateParams, handle=handle, status=status)
        new_handle = params.handle
        field_inputs = []
        for alias, value in (fields or {}).items():
            if alias == HANDLE_FIELD:
                new_handle = value
                continue
            definition = self._field(alias)
            field_inputs.append({"key": definition.key, "value": "" if value is None else definition.encode(value)})

        metaobject: Dict[str, Any] = {}
        if field_inputs:
            metaobject["fields"] = field_inputs
        if new_handle is not None:
            metaobject["handle"] = new_handle
        capabilities = params.capabilities()
        if capabilities is not None:
            metaobject["capabilities"] = capabilities
        if not metaobject:
            raise EmptyUpdate("At least one update must be specified", {"id": id})

        selection = resolve_selection(self._definition)
        payload = execute_mutation(
            self._request,
            self._render(UPDATE_METAOBJECT_MUTATION_TEMPLATE, selection),
            {"id": id, "metaobject": metaobject, **field_variables(self._definition, selection)},
            "metaobjectUpdate",
        )
        return decode_node(self._definition, selection, payload.get("metaobject") or {})

    def delete(self, id: str) -> str:
        """Delete a record and return the deleted id."""
        payload = execute_mutation(self._request, DELETE_METAOBJECT_MUTATION, {"id": id}, "metaobjectDelete")
        return payload.get("deletedId") or id

    def bulk_delete(self, ids: Iterable[str]) -> Optional[Dict[str, Any]]:
        """Delete records of this type by id.

        Returns:
            The asynchronous job reported by the store, or ``None`` when
            ``ids`` is empty and no request was made
        """
        id_list = list(ids)
        if not id_list:
            return None
        payload = execute_mutation(
            self._request,
            BULK_DELETE_METAOBJECTS_MUTATION,
            {"ids": id_list, "type": self._definition.type},
            "metaobjectBulkDelete",
        )
        logger.debug(f"Bulk delete of {len(id_list)} {self._definition.type} records submitted")
        return payload.get("job")
