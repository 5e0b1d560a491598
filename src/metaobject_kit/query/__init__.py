"""Query building: filter compilation and field projection."""

from metaobject_kit.query.filters import build_list_query
from metaobject_kit.query.projection import METAFIELDS, Selection, decode_node, resolve_selection

__all__ = ["METAFIELDS", "Selection", "build_list_query", "decode_node", "resolve_selection"]
