"""API level metadata: protocols, base URI, description, documentation."""

from ramlview.builder.models import DocumentationSection
from ramlview.markup import Renderer, markdown_to_html
from ramlview.raml.nodes import ApiNode


def build_protocol(api: ApiNode) -> str:
    if not api.protocols:
        return ""
    return "Protocols: " + ", ".join(api.protocols)


def build_base_uri(api: ApiNode, placeholder: str = "{version}") -> str:
    if not api.base_uri:
        return ""
    if api.version is None:
        return api.base_uri
    return api.base_uri.replace(placeholder, api.version)


def build_base_uri_parameters(api: ApiNode) -> list[dict]:
    # version is already reported on its own
    return [parameter.to_json() for parameter in api.base_uri_parameters if parameter.name != "version"]


def build_description(api: ApiNode, render: Renderer = markdown_to_html) -> str:
    return render(api.description) or ""


def build_documentations(api: ApiNode, render: Renderer = markdown_to_html) -> list[DocumentationSection]:
    return [
        DocumentationSection(title=documentation.title, content=render(documentation.content))
        for documentation in api.documentation
    ]
