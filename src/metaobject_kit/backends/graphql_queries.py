"""Centralized GraphQL documents for the metaobject Admin API."""

from __future__ import annotations

from typing import Iterable

_USER_ERRORS = """
    userErrors {
      field
      message
    }
"""


# ---------------------------------------------------------------------
# Metaobject definitions
# ---------------------------------------------------------------------

LIST_METAOBJECT_DEFINITIONS_QUERY = """
query ListMetaobjectDefinitions($first: Int!, $after: String) {
  metaobjectDefinitions(first: $first, after: $after) {
    nodes {
      id
      name
      type
      description
      displayNameKey
      fieldDefinitions {
        key
        name
        description
        required
        type { name }
        validations { name value }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""

CREATE_METAOBJECT_DEFINITION_MUTATION = f"""
mutation CreateMetaobjectDefinition($definition: MetaobjectDefinitionCreateInput!) {{
  metaobjectDefinitionCreate(definition: $definition) {{
    metaobjectDefinition {{
      id
      type
    }}
{_USER_ERRORS}
  }}
}}
"""

UPDATE_METAOBJECT_DEFINITION_MUTATION = f"""
mutation UpdateMetaobjectDefinition($id: ID!, $definition: MetaobjectDefinitionUpdateInput!) {{
  metaobjectDefinitionUpdate(id: $id, definition: $definition) {{
    metaobjectDefinition {{
      id
      type
    }}
{_USER_ERRORS}
  }}
}}
"""

DELETE_METAOBJECT_DEFINITION_MUTATION = f"""
mutation DeleteMetaobjectDefinition($id: ID!) {{
  metaobjectDefinitionDelete(id: $id) {{
    deletedId
{_USER_ERRORS}
  }}
}}
"""


# ---------------------------------------------------------------------
# Metaobjects
# ---------------------------------------------------------------------

UPDATE_METAOBJECT_MUTATION_TEMPLATE = """
mutation UpdateMetaobject($id: ID!, $metaobject: MetaobjectUpdateInput!{variables}) {{
  metaobjectUpdate(id: $id, metaobject: $metaobject) {{
    metaobject {{
      {selection}
    }}
    userErrors {{
      field
      message
    }}
  }}
}}
"""

DELETE_METAOBJECT_MUTATION = f"""
mutation DeleteMetaobject($id: ID!) {{
  metaobjectDelete(id: $id) {{
    deletedId
{_USER_ERRORS}
  }}
}}
"""

BULK_DELETE_METAOBJECTS_MUTATION = f"""
mutation BulkDeleteMetaobjects($ids: [ID!]!, $type: String!) {{
  metaobjectBulkDelete(where: {{ ids: $ids, type: $type }}) {{
    job {{
      id
      done
    }}
{_USER_ERRORS}
  }}
}}
"""

LIST_METAOBJECTS_QUERY_TEMPLATE = """
query ListMetaobjects($type: String!, $query: String, $after: String, $before: String, $first: Int, $last: Int, $reverse: Boolean, $sortKey: String{variables}) {{
  metaobjects(type: $type, query: $query, after: $after, before: $before, first: $first, last: $last, reverse: $reverse, sortKey: $sortKey) {{
    edges {{
      node {{
        {selection}
      }}
    }}
    pageInfo {{
      startCursor
      endCursor
      hasNextPage
      hasPreviousPage
    }}
  }}
}}
"""

GET_METAOBJECT_QUERY_TEMPLATE = """
query GetMetaobject($id: ID!{variables}) {{
  metaobject(id: $id) {{
    {selection}
  }}
}}
"""

CREATE_METAOBJECT_MUTATION_TEMPLATE = """
mutation CreateMetaobject($metaobject: MetaobjectCreateInput!{variables}) {{
  metaobjectCreate(metaobject: $metaobject) {{
    metaobject {{
      {selection}
    }}
    userErrors {{
      field
      message
    }}
  }}
}}
"""


def render_document(template: str, variable_definitions: Iterable[str], selection: str) -> str:
    """Fill a projection template with ``$fieldN`` variable definitions and a node selection."""
    variables = "".join(f", {definition}" for definition in variable_definitions)
    return template.format(variables=variables, selection=selection)
