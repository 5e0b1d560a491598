"""GraphQL transport and response classification for the Admin API.

Any callable ``(document, variables) -> dict`` can drive the rest of the
package. :class:`StoreGraphQLClient` is the ``requests`` based one; the
``check_*`` helpers classify whatever such a callable returns.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

import requests

from metaobject_kit.exceptions import AuthenticationError, RemoteProtocolError, RemoteSemanticError

logger = logging.getLogger(__name__)

RequestFunction = Callable[[str, Optional[Dict[str, Any]]], Dict[str, Any]]

ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"


class StoreGraphQLClient:
    """Thin HTTP client wrapper for GraphQL execution.

    Instances are request functions: calling one posts the document and
    returns the parsed response body. GraphQL-level ``errors`` are returned
    untouched; only HTTP and network failures raise here.
    """

    def __init__(self, session: Any, endpoint: str, access_token: str, timeout: float = 60) -> None:
        self._session = session
        self._endpoint = endpoint
        self._access_token = access_token
        self._timeout = timeout

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        try:
            response = self._session.post(
                self._endpoint,
                json=payload,
                headers={
                    ACCESS_TOKEN_HEADER: self._access_token,
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
            response.raise_for_status()
            result = response.json()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            if status in {401, 403}:
                raise AuthenticationError(
                    "Access token was rejected by the store",
                    [{"message": f"HTTP {status}"}],
                    {"endpoint": self._endpoint, "status": status},
                ) from exc
            error_text = exc.response.text if exc.response is not None else str(exc)
            raise RemoteProtocolError(
                f"GraphQL request failed: {error_text}",
                [{"message": error_text}],
                {"endpoint": self._endpoint, "status": status},
            ) from exc
        except (requests.RequestException, ValueError) as exc:
            raise RemoteProtocolError(
                f"GraphQL request failed: {exc}",
                [{"message": str(exc)}],
                {"endpoint": self._endpoint},
            ) from exc

        if not isinstance(result, dict):
            raise RemoteProtocolError(
                "GraphQL response was not a JSON object",
                context={"endpoint": self._endpoint},
            )
        return result

    __call__ = execute


def _error_list(errors: Any) -> List[Dict[str, Any]]:
    if isinstance(errors, Mapping):
        errors = errors.get("graphQLErrors") or []
    return [error if isinstance(error, dict) else {"message": str(error)} for error in errors or []]


def check_protocol_errors(response: Mapping[str, Any], operation: str) -> Dict[str, Any]:
    """Raise on GraphQL errors and return the response ``data``.

    ``errors`` may be a plain list of GraphQL errors or a mapping carrying a
    ``graphQLErrors`` list; either non-empty form is a protocol failure.

    Raises:
        RemoteProtocolError: When the response carries errors
    """
    errors = _error_list(response.get("errors"))
    if errors:
        messages = "; ".join(str(error.get("message", error)) for error in errors)
        logger.error(f"{operation} failed: {messages}")
        raise RemoteProtocolError(f"{operation} failed: {messages}", errors, {"operation": operation})
    return response.get("data") or {}


def check_user_errors(data: Mapping[str, Any], operation: str) -> Dict[str, Any]:
    """Return the mutation payload of ``operation``, raising on ``userErrors``.

    Raises:
        RemoteSemanticError: When the payload has a non-empty ``userErrors`` list
    """
    payload = data.get(operation) or {}
    user_errors = payload.get("userErrors") or []
    if user_errors:
        messages = "; ".join(str(error.get("message", error)) for error in user_errors)
        logger.error(f"{operation} rejected: {messages}")
        raise RemoteSemanticError(
            f"{operation} rejected: {messages}",
            user_errors,
            {"operation": operation},
        )
    return payload


def execute_mutation(
    request: RequestFunction,
    document: str,
    variables: Optional[Dict[str, Any]],
    operation: str,
) -> Dict[str, Any]:
    """Run a mutation and return its payload once both error layers are clear."""
    response = request(document, variables)
    data = check_protocol_errors(response, operation)
    return check_user_errors(data, operation)
