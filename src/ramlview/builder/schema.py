"""Schema normalisation.

Request and response bodies describe their payload in one of three ways:
JSON schema content, references to named types (possibly inheriting from
several parents), or inline ``properties``. All of them end up as the same
:class:`ParameterTable`.
"""

import json
import logging
from typing import Any

from ramlview.builder.models import ParameterRow, ParameterTable, ResponseBodySchema
from ramlview.builder.types import TypeRegistry
from ramlview.raml.nodes import BodyNode, PropertyNode, ResponseNode

logger = logging.getLogger(__name__)

METADATA_KEY = "__METADATA__"

BUILTIN_TYPES = {
    "any", "object", "array", "union", "string", "number", "integer",
    "boolean", "date-only", "time-only", "datetime-only", "datetime",
    "file", "nil",
}


def build_json_schema_table(schema_content: Any) -> ParameterTable:
    """Table for JSON schema content (text or an already parsed object)."""
    if isinstance(schema_content, (dict, list)):
        schema = schema_content
    else:
        try:
            schema = json.loads(schema_content)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring malformed JSON schema: %s", e)
            return ParameterTable()
    return _walk_schema(schema)


def _walk_schema(schema: Any) -> ParameterTable:
    if isinstance(schema, dict) and "items" in schema:
        schema = schema["items"]
    if not isinstance(schema, dict) or not isinstance(schema.get("properties"), dict):
        return ParameterTable()

    required_names = schema.get("required") if isinstance(schema.get("required"), list) else []

    rows = []
    for name, value in schema["properties"].items():
        if not isinstance(value, dict):
            value = {}
        if isinstance(value.get("items"), dict):
            value = value["items"]

        nested = _walk_schema(value) if "properties" in value else None

        if isinstance(value.get("required"), bool):
            is_required = value["required"]
        elif required_names:
            is_required = name in required_names
        else:
            is_required = None

        description = value.get("description")
        rows.append(
            ParameterRow(
                name=name,
                type=value.get("type"),
                description=description if isinstance(description, str) else None,
                is_required=is_required,
                nested_properties=nested,
            )
        )
    return ParameterTable.from_rows(rows)


def build_properties_table(properties: list[PropertyNode]) -> ParameterTable:
    """Table for inline property declarations."""
    return ParameterTable.from_rows([_property_row(prop) for prop in properties])


def _property_row(prop: PropertyNode) -> ParameterRow:
    return ParameterRow(
        name=prop.name,
        type=prop.type[0] if prop.type else None,
        description=prop.description or None,
        is_required=prop.required,
    )


def resolve_type_reference(
    reference: str,
    registry: TypeRegistry,
    _seen: frozenset = frozenset(),
) -> ParameterTable:
    """Table for a named type, including the properties of all its parents.

    Parent rows come first, followed by the type's own properties. Parents
    are looked up in the library the type was declared in.
    """
    found = registry.find(reference)
    if found is None:
        logger.debug("Type reference %r does not resolve", reference)
        return ParameterTable()

    alias, type_node = found
    key = registry.qualify(alias, type_node.name)
    if key in _seen:
        logger.warning("Type inheritance cycle through %r, stopped", key)
        return ParameterTable()
    seen = _seen | {key}

    table = ParameterTable()
    for parent in type_node.type:
        if parent in BUILTIN_TYPES:
            continue
        table = table.union(resolve_type_reference(registry.qualify(alias, parent), registry, seen))

    if type_node.properties:
        table = table.union(build_properties_table(type_node.properties))
    elif type_node.schema_content is not None:
        table = table.union(build_json_schema_table(type_node.schema_content))
    return table


def build_request_body(bodies: list[BodyNode], registry: TypeRegistry) -> ParameterTable:
    """Request body table; the first representation that yields rows wins.

    JSON schema content is tried first, then type references (each ``|``
    alternative in turn), then inline properties.
    """
    for body in bodies:
        if body.schema_content is not None:
            table = build_json_schema_table(body.schema_content)
            if table.tbody:
                return table

    for body in bodies:
        if not body.type or body.properties:
            continue
        for declared in body.type:
            for alternative in declared.split("|"):
                table = resolve_type_reference(alternative.strip(), registry)
                if table.tbody:
                    return table

    for body in bodies:
        if body.properties:
            table = build_properties_table(body.properties)
            if table.tbody:
                return table

    return ParameterTable()


def build_response_body(responses: list[ResponseNode], code: str = "200") -> ResponseBodySchema:
    """Schema of the response with status ``code``.

    Only JSON schema content is normalised. The raw body declaration is
    attached as ``type`` for renderers that want it unprocessed.
    """
    table = ParameterTable()
    raw_type = None

    for response in responses:
        if response.code != code:
            continue
        for body in response.bodies:
            if body.schema_content is not None:
                schema_table = build_json_schema_table(body.schema_content)
                if schema_table.tbody:
                    table = schema_table
            raw_type = strip_metadata(body.to_json())

    return ResponseBodySchema(thead=table.thead, tbody=table.tbody, type=raw_type)


def strip_metadata(data: dict) -> dict:
    return {key: value for key, value in data.items() if key != METADATA_KEY}
