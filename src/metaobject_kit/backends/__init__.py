"""Remote store access: GraphQL documents and the HTTP transport.

Example:
    from metaobject_kit.backends import StoreGraphQLClient

    client = StoreGraphQLClient(requests.Session(), endpoint, access_token)
    response = client(query, {"id": "gid://shopify/Metaobject/1"})
"""

from metaobject_kit.backends.graphql_client import (
    RequestFunction,
    StoreGraphQLClient,
    check_protocol_errors,
    check_user_errors,
    execute_mutation,
)

__all__ = [
    "RequestFunction",
    "StoreGraphQLClient",
    "check_protocol_errors",
    "check_user_errors",
    "execute_mutation",
]
