"""Builds the documentation view model from a loaded RAML API."""

import json
import logging

from ramlview.builder.metadata import (
    build_base_uri,
    build_base_uri_parameters,
    build_description,
    build_documentations,
    build_protocol,
)
from ramlview.builder.models import ApiDocument
from ramlview.builder.resources import build_resources
from ramlview.builder.security import build_secured_by, build_security_schemes
from ramlview.builder.types import build_type_registry, collect_schemas, collect_types
from ramlview.config import BuildConfig
from ramlview.exceptions import InvalidRamlError
from ramlview.raml.nodes import ApiNode

logger = logging.getLogger(__name__)


def build_view_model(api: ApiNode, config: BuildConfig | None = None) -> ApiDocument:
    """Convert an API definition into an :class:`ApiDocument`.

    Raises InvalidRamlError if the root has no JSON representation. Any
    other missing piece of the definition falls back to an empty value.
    """
    config = config or BuildConfig()
    data = _root_json(api)
    logger.debug("Building view model for %r", api.title)
    render = config.renderer()

    registry = build_type_registry(api)
    types, type_names = collect_types(data)

    return ApiDocument(
        title=api.title,
        raml_version=api.raml_version,
        version=api.version or "",
        protocol=build_protocol(api),
        base_uri=build_base_uri(api, config.version_placeholder),
        base_uri_parameters=build_base_uri_parameters(api),
        description=build_description(api, render),
        documentations=build_documentations(api, render),
        security_schemes=build_security_schemes(api),
        secured_by=build_secured_by(api),
        resources=build_resources(api, registry, config),
        types=types,
        type_names=type_names,
        schemas=collect_schemas(data),
    )


def _root_json(api: ApiNode) -> dict:
    data = api.to_json()
    if not isinstance(data, dict):
        raise InvalidRamlError("API definition has no JSON representation")
    try:
        json.dumps(data)
    except (TypeError, ValueError) as e:
        raise InvalidRamlError(f"API definition is not serialisable: {e}") from e
    return data
