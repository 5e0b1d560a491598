"""Pydantic models for operation parameters.

These models validate the paging and update arguments of the metaobject
operations before any request is built.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, model_validator

MAX_PAGE_SIZE = 250

SortKey = Literal["id", "type", "updated_at", "display_name"]


class ListParams(BaseModel):
    """Parameters for a single page of ``metaobjects``."""

    query: Annotated[
        Any,
        Field(
            default=None,
            description="Search string or structured filter",
            examples=[{"displayName": "Dune"}, {"updatedAt": {"$gte": "2024-01-01"}}],
        ),
    ]
    after: Annotated[
        Optional[str],
        Field(default=None, description="Cursor to page forward from (endCursor of a previous page)"),
    ]
    before: Annotated[
        Optional[str],
        Field(default=None, description="Cursor to page backward from (startCursor of a previous page)"),
    ]
    first: Annotated[
        Optional[int],
        Field(default=None, ge=1, le=MAX_PAGE_SIZE, description="Number of records after the cursor"),
    ]
    last: Annotated[
        Optional[int],
        Field(default=None, ge=1, le=MAX_PAGE_SIZE, description="Number of records before the cursor"),
    ]
    reverse: Annotated[
        Optional[bool],
        Field(default=None, description="Reverse the sort order"),
    ]
    sort_key: Annotated[
        Optional[SortKey],
        Field(default=None, description="Attribute to sort by"),
    ]

    @model_validator(mode="after")
    def check_direction(self) -> "ListParams":
        if self.first is not None and self.last is not None:
            raise ValueError("first and last cannot be combined")
        return self

    def to_variables(self) -> Dict[str, Any]:
        """Paging variables of the list document; the query is compiled separately."""
        return {
            "after": self.after,
            "before": self.before,
            "first": self.first,
            "last": self.last,
            "reverse": self.reverse,
            "sortKey": self.sort_key,
        }


class IteratorParams(BaseModel):
    """Parameters for iterating over every matching record."""

    query: Annotated[
        Any,
        Field(default=None, description="Search string or structured filter"),
    ]
    reverse: Annotated[
        Optional[bool],
        Field(default=None, description="Reverse the sort order"),
    ]
    sort_key: Annotated[
        Optional[SortKey],
        Field(default=None, description="Attribute to sort by"),
    ]
    page_size: Annotated[
        int,
        Field(default=100, ge=1, le=MAX_PAGE_SIZE, description="Records fetched per request"),
    ]
    limit: Annotated[
        Optional[int],
        Field(default=None, ge=0, description="Stop after this many records"),
    ]


class UpdateParams(BaseModel):
    """Non-field parts of a metaobject update."""

    handle: Annotated[
        Optional[str],
        Field(default=None, min_length=1, description="New handle of the record"),
    ]
    status: Annotated[
        Optional[Literal["ACTIVE", "DRAFT"]],
        Field(default=None, description="Publishable status"),
    ]

    def capabilities(self) -> Optional[Dict[str, Any]]:
        if self.status is None:
            return None
        return {"publishable": {"status": self.status}}
