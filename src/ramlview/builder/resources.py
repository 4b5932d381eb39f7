"""Resource tree flattening."""

import logging

from ramlview.builder.annotations import build_annotations
from ramlview.builder.endpoints import build_endpoints
from ramlview.builder.models import Resource
from ramlview.builder.types import TypeRegistry
from ramlview.config import BuildConfig
from ramlview.raml.nodes import ApiNode, ResourceNode

logger = logging.getLogger(__name__)


def build_resources(api: ApiNode, registry: TypeRegistry, config: BuildConfig) -> list[Resource]:
    """Top-level resources, each with the endpoints of its whole subtree.

    Resources are grouped by name for the documentation: a resource whose
    name was already used by an earlier one is left out.
    """
    resources = []
    names = set()

    for node in api.resources:
        name = resource_name(node)
        if name in names:
            logger.debug("Skipping %s: resource name %r already used", node.complete_relative_uri, name)
            continue
        names.add(name)

        resources.append(
            Resource(
                uri=node.complete_relative_uri,
                name=name,
                description=node.description or "",
                type=node.type or "",
                endpoints=build_endpoints(node, registry, config),
                annotations=build_annotations(node.annotations),
            )
        )
    return resources


def resource_name(resource: ResourceNode) -> str:
    if resource.display_name:
        return resource.display_name
    return capitalize_first_letter(resource.complete_relative_uri.replace("/", "", 1))


def capitalize_first_letter(text: str) -> str:
    return text[:1].upper() + text[1:]
