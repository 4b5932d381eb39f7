"""Endpoint extraction: one Endpoint per method of a resource."""

import logging

from ramlview.builder.annotations import build_annotations
from ramlview.builder.examples import build_response_examples
from ramlview.builder.models import Endpoint, ParameterRow, ParameterTable
from ramlview.builder.schema import build_request_body, build_response_body
from ramlview.builder.types import TypeRegistry
from ramlview.config import BuildConfig
from ramlview.markup import Renderer, markdown_to_html
from ramlview.raml.nodes import MethodNode, ParameterNode, ResourceNode

logger = logging.getLogger(__name__)


def build_endpoints(resource: ResourceNode, registry: TypeRegistry, config: BuildConfig) -> list[Endpoint]:
    """Endpoints of a resource followed, depth first, by its nested resources'."""
    endpoints = [build_endpoint(resource, method, registry, config) for method in resource.methods]
    for child in resource.resources:
        endpoints.extend(build_endpoints(child, registry, config))
    return endpoints


def build_endpoint(
    resource: ResourceNode,
    method: MethodNode,
    registry: TypeRegistry,
    config: BuildConfig,
) -> Endpoint:
    render = config.renderer()
    logger.info("URI %s %s", resource.complete_relative_uri, method.method)

    return Endpoint(
        uri=resource.complete_relative_uri,
        method=method.method.lower(),
        secured_by=_scheme_name(method.secured_by),
        description=render(method.description),
        uri_parameters=build_uri_parameters(resource.uri_parameters, render),
        query_parameters=build_query_parameters(method.query_parameters, render),
        request_body=build_request_body(method.bodies, registry),
        response_body=build_response_body(method.responses, config.response_schema_code),
        response_example=build_response_examples(method.responses),
        annotations=build_annotations(method.annotations),
    )


def build_uri_parameters(parameters: list[ParameterNode], render: Renderer = markdown_to_html) -> ParameterTable:
    return ParameterTable.from_rows(
        [
            ParameterRow(
                name=parameter.name,
                type=_first(parameter.type),
                description=render(parameter.description),
            )
            for parameter in parameters
        ]
    )


def build_query_parameters(parameters: list[ParameterNode], render: Renderer = markdown_to_html) -> ParameterTable:
    return ParameterTable.from_rows(
        [
            ParameterRow(
                name=parameter.name,
                type=_first(parameter.type),
                description=render(parameter.description),
                is_required=parameter.required,
                example=parameter.example,
                default=parameter.default,
                min_length=parameter.min_length,
                max_length=parameter.max_length,
                repeat=parameter.repeat,
            )
            for parameter in parameters
        ]
    )


def _scheme_name(secured_by: list[str | None]) -> str:
    for name in secured_by:
        if name:
            return name
    return ""


def _first(values: list[str]) -> str | None:
    return values[0] if values else None
