"""Load a local schema module by path."""

from __future__ import annotations

import importlib.util
import logging
import sys
from pathlib import Path
from typing import Dict, Union

from metaobject_kit.exceptions import SchemaLoadError
from metaobject_kit.schema.definitions import ObjectDefinition

logger = logging.getLogger(__name__)

_MODULE_NAME = "metaobject_kit_local_schema"


def load_local_schema(path: Union[str, Path]) -> Dict[str, ObjectDefinition]:
    """Import a Python file and collect its object definitions.

    Every module attribute that is an :class:`ObjectDefinition` becomes one
    entry, keyed by attribute name. Other attributes are ignored.

    Args:
        path: Path to the schema module

    Returns:
        Mapping of attribute name to object definition

    Raises:
        SchemaLoadError: When the file does not exist or fails to import
    """
    schema_path = Path(path).expanduser().resolve()
    if not schema_path.is_file():
        raise SchemaLoadError(f"Schema file not found: {schema_path}", {"path": str(schema_path)})

    spec = importlib.util.spec_from_file_location(_MODULE_NAME, schema_path)
    if spec is None or spec.loader is None:
        raise SchemaLoadError(f"Cannot import schema file: {schema_path}", {"path": str(schema_path)})

    module = importlib.util.module_from_spec(spec)
    # Schema files may import siblings.
    sys.path.insert(0, str(schema_path.parent))
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise SchemaLoadError(
            f"Failed to import schema file {schema_path}: {e}",
            {"path": str(schema_path), "error_type": type(e).__name__},
        ) from e
    finally:
        sys.path.remove(str(schema_path.parent))

    schema = {
        name: value for name, value in vars(module).items() if isinstance(value, ObjectDefinition)
    }
    logger.debug(f"Loaded {len(schema)} object definitions from {schema_path}")
    return schema
