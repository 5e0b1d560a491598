"""Record operations for declared object types."""

from metaobject_kit.ops.metaobject_ops import ListResult, MetaobjectOps, PageInfo

__all__ = ["ListResult", "MetaobjectOps", "PageInfo"]
