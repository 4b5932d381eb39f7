"""Type registry and custom type collection."""

import json
import logging
from typing import Any

from ramlview.raml.nodes import ApiNode, LibraryNode, TypeNode

logger = logging.getLogger(__name__)


class TypeRegistry:
    """Resolves ``library.TypeName`` references to declared types.

    Library aliases come from ``uses``. Bare ``TypeName`` references resolve
    against the API's own ``types``.
    """

    def __init__(self, libraries: dict[str, LibraryNode] | None = None, local_types: list[TypeNode] | None = None):
        self.libraries = dict(libraries or {})
        self.local_types = list(local_types or [])

    def find(self, reference: str) -> tuple[str | None, TypeNode] | None:
        """Return ``(library alias, type)`` for a reference, or None."""
        keys = reference.strip().split(".")
        if len(keys) == 2:
            alias, name = keys
            library = self.libraries.get(alias)
            candidates = library.types if library else []
        elif len(keys) == 1:
            alias, name = None, keys[0]
            candidates = self.local_types
        else:
            return None

        for type_node in candidates:
            if type_node.name == name:
                return alias, type_node
        return None

    @staticmethod
    def qualify(alias: str | None, name: str) -> str:
        """Reference to ``name`` as seen from inside library ``alias``."""
        if alias is None or "." in name:
            return name
        return f"{alias}.{name}"


def build_type_registry(api: ApiNode) -> TypeRegistry:
    return TypeRegistry(libraries=api.uses, local_types=api.types)


def collect_types(data: dict) -> tuple[dict[str, Any], list[str]]:
    """Custom type declarations of the root document and their names."""
    types = data.get("types")
    if not isinstance(types, dict):
        return {}, []
    return dict(types), list(types)


def collect_schemas(data: dict) -> list[dict]:
    """JSON schema declarations as ``[{name: schema}]``."""
    declarations = data.get("schemas")
    if isinstance(declarations, list):
        # RAML 0.8 style: a list of single-entry mappings
        merged = {}
        for item in declarations:
            if isinstance(item, dict):
                merged.update(item)
        declarations = merged
    if not isinstance(declarations, dict):
        return []

    schemas = []
    for name, schema in declarations.items():
        if isinstance(schema, str):
            try:
                schema = json.loads(schema)
            except ValueError:
                logger.warning("Schema %r is not valid JSON, skipped", name)
                continue
        schemas.append({name: schema})
    return schemas
