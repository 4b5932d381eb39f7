"""Typed RAML AST nodes.

The loader (or any other RAML provider adapter) converts a parsed RAML 1.0
document into these models. Optional facets are plain ``None`` / empty
values, so the builder never has to look up accessors or catch errors
raised by a provider.
"""

from typing import Any

from pydantic import BaseModel


class ParameterNode(BaseModel):
    """A URI, base URI or query parameter declaration."""

    name: str
    type: list[str] = []
    description: str | None = None
    required: bool = True
    example: Any = None
    default: Any = None
    min_length: int | None = None
    max_length: int | None = None
    repeat: bool | None = None
    raw: dict = {}

    def to_json(self) -> dict:
        return dict(self.raw)


class PropertyNode(BaseModel):
    """A property of an object type or an inline body declaration."""

    name: str
    type: list[str] = []
    description: str | None = None
    required: bool = True
    raw: dict = {}


class TypeNode(BaseModel):
    """A named data type declared under ``types`` or ``schemas``."""

    name: str
    type: list[str] = []  # parent types
    properties: list[PropertyNode] = []
    schema_content: Any = None  # JSON schema text, when the type is one
    raw: Any = None


class LibraryNode(BaseModel):
    """A library imported with ``uses``."""

    alias: str
    types: list[TypeNode] = []


class ExampleNode(BaseModel):
    """One named entry of an ``examples`` facet."""

    name: str
    value: str | None = None  # raw text
    structured_value: Any = None


class BodyNode(BaseModel):
    """A request or response body for one media type."""

    name: str  # media type
    type: list[str] = []
    properties: list[PropertyNode] = []
    schema_content: Any = None
    example: Any = None
    examples: list[ExampleNode] = []
    raw: dict = {}

    def to_json(self) -> dict:
        return dict(self.raw)


class ResponseNode(BaseModel):
    code: str
    description: str | None = None
    bodies: list[BodyNode] = []


class AnnotationNode(BaseModel):
    name: str
    value: Any = None
    type: str | None = None


class MethodNode(BaseModel):
    method: str  # get / post / ...
    description: str | None = None
    secured_by: list[str | None] = []
    query_parameters: list[ParameterNode] = []
    bodies: list[BodyNode] = []
    responses: list[ResponseNode] = []
    annotations: list[AnnotationNode] = []


class ResourceNode(BaseModel):
    relative_uri: str
    complete_relative_uri: str
    display_name: str | None = None  # only when declared explicitly
    description: str | None = None
    type: str | None = None  # applied resource type
    methods: list[MethodNode] = []
    resources: list["ResourceNode"] = []
    uri_parameters: list[ParameterNode] = []
    annotations: list[AnnotationNode] = []


class SecuritySchemeNode(BaseModel):
    name: str
    raw: dict = {}

    def to_json(self) -> dict:
        return dict(self.raw)


class DocumentationNode(BaseModel):
    title: str
    content: str | None = None


class ApiNode(BaseModel):
    """Root of a loaded and expanded RAML API definition."""

    title: str = ""
    version: str | None = None
    raml_version: str = "RAML10"
    base_uri: str | None = None
    base_uri_parameters: list[ParameterNode] = []
    protocols: list[str] = []
    description: str | None = None
    documentation: list[DocumentationNode] = []
    secured_by: list[str | None] = []
    security_schemes: list[SecuritySchemeNode] = []
    resources: list[ResourceNode] = []
    uses: dict[str, LibraryNode] = {}
    types: list[TypeNode] = []
    raw: dict | None = None

    def to_json(self) -> dict | None:
        """Plain JSON view of the whole document, as loaded."""
        return self.raw
