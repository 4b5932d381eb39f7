"""View model produced from a RAML API definition.

The models serialise with camelCase keys (``model_dump(by_alias=True)``);
the key names are the contract with documentation templates.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ViewModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# header column -> row field
TABLE_COLUMNS = {
    "name": "name",
    "type": "type",
    "description": "description",
    "example": "example",
    "default": "default",
    "min_length": "min_length",
    "max_length": "max_length",
    "required": "is_required",
}


class HeaderFlags(ViewModel):
    """Which optional columns a table shows."""

    name: bool = False
    type: bool = False
    description: bool = False
    example: bool = False
    default: bool = False
    min_length: bool = False
    max_length: bool = False
    required: bool = False


class ParameterRow(ViewModel):
    name: str
    type: Any = None
    description: str | None = None
    is_required: bool | None = None
    example: Any = None
    default: Any = None
    min_length: int | None = None
    max_length: int | None = None
    repeat: bool | None = None
    nested_properties: "ParameterTable | None" = None


class ParameterTable(ViewModel):
    """Rows of parameters or schema properties plus their header flags.

    A header flag is set when at least one row has a value for that column.
    Tables are only ever combined by :meth:`union`, so flags never go back
    to false once a row sets them.
    """

    thead: HeaderFlags = Field(default_factory=HeaderFlags)
    tbody: list[ParameterRow] = []

    @classmethod
    def from_rows(cls, rows: list[ParameterRow]) -> "ParameterTable":
        flags = {
            column: any(getattr(row, field) is not None for row in rows)
            for column, field in TABLE_COLUMNS.items()
        }
        return cls(thead=HeaderFlags(**flags), tbody=list(rows))

    def union(self, other: "ParameterTable") -> "ParameterTable":
        return self.from_rows(self.tbody + other.tbody)


ParameterRow.model_rebuild()


class ResponseBodySchema(ParameterTable):
    """Schema of the successful response, plus the raw body declaration."""

    type: dict | None = None


class ResponseExample(ViewModel):
    code: str
    description: str = ""
    response: Any = None


class Endpoint(ViewModel):
    """One HTTP method on one resource."""

    model_config = ConfigDict(frozen=True)

    uri: str
    method: str
    secured_by: str = ""
    description: str | None = None
    uri_parameters: ParameterTable = Field(default_factory=ParameterTable)
    query_parameters: ParameterTable = Field(default_factory=ParameterTable)
    request_body: ParameterTable = Field(default_factory=ParameterTable)
    response_body: ResponseBodySchema = Field(default_factory=ResponseBodySchema)
    response_example: list[ResponseExample] | None = None
    annotations: list[dict] = []


class Resource(ViewModel):
    uri: str
    name: str
    description: str = ""
    type: str = ""
    endpoints: list[Endpoint] = []
    annotations: list[dict] = []


class DocumentationSection(ViewModel):
    title: str
    content: str | None = None


class ApiDocument(ViewModel):
    """Root of the view model."""

    title: str = Field(default="", alias="apiTitle")
    raml_version: str = ""
    version: str = Field(default="", alias="apiVersion")
    protocol: str = Field(default="", alias="apiProtocol")
    base_uri: str = Field(default="", alias="apiBaseUri")
    base_uri_parameters: list[dict] = []
    description: str = Field(default="", alias="apiDescription")
    documentations: list[DocumentationSection] = Field(default=[], alias="apiDocumentations")
    security_schemes: list[dict] = Field(default=[], alias="apiSecuritySchemes")
    secured_by: dict = Field(default={}, alias="apiSecuredBy")
    resources: list[Resource] = Field(default=[], alias="apiResources")
    types: dict[str, Any] = Field(default={}, alias="apiAllTypes")
    type_names: list[str] = Field(default=[], alias="typeNamesArray")
    schemas: list[dict] = Field(default=[], alias="apiAllSchemas")
