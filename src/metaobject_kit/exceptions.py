"""Custom exceptions for metaobject-kit.

This module defines domain-specific exceptions that provide clear error context
and debugging information for schema declaration, request building, remote
calls and reconciliation.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class MetaobjectKitError(Exception):
    """Base exception for all metaobject-kit errors.

    Attributes:
        context: Dictionary containing error details such as the object type,
                field key or operation name involved.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Initialize the error with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dictionary with error details for debugging
        """
        super().__init__(message)
        self.context = context or {}


# ---------------------------------------------------------------------------
# Declaration errors
# ---------------------------------------------------------------------------


class DeclarationError(MetaobjectKitError):
    """Raised while declaring a schema. Fatal and not retryable."""


class DuplicateFieldKey(DeclarationError):
    """Two field aliases of one object definition resolve to the same key."""


class ValidationKindMismatch(DeclarationError):
    """A validation was requested that the field kind does not support."""


class EmptyFileTypeSet(DeclarationError):
    """A file type validation was requested with neither images nor videos."""


class InvalidIdentifier(DeclarationError):
    """An object type or field key does not match the identifier rules."""


# ---------------------------------------------------------------------------
# Request shape errors
# ---------------------------------------------------------------------------


class QueryShapeError(MetaobjectKitError):
    """Raised when a caller-supplied selection or filter cannot be compiled."""


class EmptyFieldSelection(QueryShapeError):
    """A field selection mapping was given but it selects nothing."""


class ConflictingQueryKeys(QueryShapeError):
    """An operator that must stand alone was combined with other keys."""


class InvalidQueryShape(QueryShapeError):
    """A filter or paging parameter has a shape the query grammar rejects."""


# ---------------------------------------------------------------------------
# Remote errors
# ---------------------------------------------------------------------------


class RemoteError(MetaobjectKitError):
    """Base class for failures reported by, or on the way to, the remote store."""


class RemoteProtocolError(RemoteError):
    """The call failed at the transport or GraphQL protocol level.

    Attributes:
        errors: Raw GraphQL error objects (or synthesized ones for HTTP failures).
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.errors = list(errors or [])


class RemoteSemanticError(RemoteError):
    """The call succeeded but the store rejected the input via ``userErrors``.

    Attributes:
        user_errors: The ``userErrors`` list returned by the mutation.
    """

    def __init__(
        self,
        message: str,
        user_errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.user_errors = list(user_errors or [])


class AuthenticationError(RemoteProtocolError):
    """The store refused the access token (HTTP 401/403)."""


# ---------------------------------------------------------------------------
# API misuse
# ---------------------------------------------------------------------------


class UsageError(MetaobjectKitError):
    """Raised when an operation is called with arguments it cannot accept."""


class UnknownField(UsageError):
    """A field alias was supplied that the object definition does not declare."""


class EmptyUpdate(UsageError):
    """An update was requested without any change."""


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------


class ReconciliationError(MetaobjectKitError):
    """Base class for failures while applying a change set."""


class PartialApplyError(ReconciliationError):
    """Some steps of a change set were applied before a later step failed.

    Attributes:
        report: ApplyReport describing the steps that did succeed.
    """

    def __init__(self, message: str, report: Any, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.report = report


class ReconciliationCancelled(ReconciliationError):
    """The caller declined to apply destructive changes."""


class SchemaLoadError(MetaobjectKitError):
    """The local schema module could not be located or imported."""
