"""RAML 1.0 document loader.

Reads a RAML file with PyYAML and converts it into the node models of
:mod:`ramlview.raml.nodes`. ``!include`` tags, ``uses`` libraries, traits
(``is``) and resource types (``type``) are expanded here, so the builder
only ever sees a flat, fully resolved tree.

The loader is lenient: it does not validate RAML, and shapes it does not
understand are read as empty.
"""

import copy
import datetime
import json
import logging
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

from ramlview.exceptions import RamlLoadError
from ramlview.raml.nodes import (
    AnnotationNode,
    ApiNode,
    BodyNode,
    DocumentationNode,
    ExampleNode,
    LibraryNode,
    MethodNode,
    ParameterNode,
    PropertyNode,
    ResourceNode,
    ResponseNode,
    SecuritySchemeNode,
    TypeNode,
)

logger = logging.getLogger(__name__)

RAML_HEADER = "#%RAML 1.0"
DEFAULT_MEDIA_TYPE = "application/json"
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace", "connect")
YAML_SUFFIXES = (".raml", ".yaml", ".yml")
EXAMPLE_FACETS = {"value", "displayName", "description", "strict"}

URI_TEMPLATE_RE = re.compile(r"\{([^{}/]+)\}")
TEMPLATE_PARAM_RE = re.compile(r"<<\s*([A-Za-z_][\w-]*)\s*(?:\|\s*!(\w+)\s*)?>>")


def load_api(file_path: Path) -> ApiNode:
    """Load a RAML 1.0 API definition from disk."""
    file_path = Path(file_path)
    text = _read_text(file_path)

    header = text.lstrip().splitlines()[0].strip() if text.strip() else ""
    if header.split() != RAML_HEADER.split():
        raise RamlLoadError("missing '#%RAML 1.0' header", path=str(file_path))

    doc = _parse_yaml(text, file_path)
    if not isinstance(doc, dict):
        raise RamlLoadError("RAML document is not a mapping", path=str(file_path))

    return build_api(doc, base_dir=file_path.parent)


def load_library(alias: str, file_path: Path) -> tuple[LibraryNode, dict]:
    """Load a RAML library; returns the node and its raw declarations."""
    text = _read_text(file_path)
    doc = _parse_yaml(text, file_path)
    if not isinstance(doc, dict):
        raise RamlLoadError("RAML library is not a mapping", path=str(file_path))
    doc = _plain(doc)

    library = LibraryNode(
        alias=alias,
        types=_build_types(_declarations(doc)),
    )
    return library, doc


def build_api(doc: dict, base_dir: Path | None = None) -> ApiNode:
    """Build an :class:`ApiNode` from an already parsed RAML mapping."""
    doc = _plain(doc)
    base_dir = Path(base_dir) if base_dir is not None else Path.cwd()

    libraries: dict[str, LibraryNode] = {}
    library_docs: dict[str, dict] = {}
    for alias, path in _mapping(doc.get("uses")).items():
        library, library_doc = load_library(alias, base_dir / str(path))
        libraries[alias] = library
        library_docs[alias] = library_doc

    ctx = _Context(doc, library_docs)
    base_uri = _text(doc.get("baseUri"))

    resources = [
        _build_resource(key, value, "", ctx)
        for key, value in doc.items()
        if _is_resource_key(key)
    ]

    return ApiNode(
        title=_text(doc.get("title")) or "",
        version=_text(doc.get("version")),
        base_uri=base_uri,
        base_uri_parameters=_build_parameters(
            doc.get("baseUriParameters"),
            implicit=URI_TEMPLATE_RE.findall(base_uri or ""),
        ),
        protocols=_protocols(doc.get("protocols"), base_uri),
        description=_text(doc.get("description")),
        documentation=[
            DocumentationNode(title=_text(item.get("title")) or "", content=_text(item.get("content")))
            for item in _sequence(doc.get("documentation"))
            if isinstance(item, dict)
        ],
        secured_by=_secured_by(doc.get("securedBy")),
        security_schemes=_build_security_schemes(doc.get("securitySchemes")),
        resources=resources,
        uses=libraries,
        types=_build_types(_declarations(doc)),
        raw=doc,
    )


class _Context:
    """Document-wide lookups used while building resources."""

    def __init__(self, doc: dict, library_docs: dict[str, dict]):
        self.doc = doc
        self.library_docs = library_docs
        self.media_type = _media_type(doc.get("mediaType"))

    def lookup(self, kind: str, name: str) -> Any:
        """Find a named declaration (trait, resource type, ...), library-aware."""
        source = self.doc
        if "." in name:
            alias, _, name = name.partition(".")
            source = self.library_docs.get(alias)
            if source is None:
                return None
        return _mapping(_declarations(source, kind)).get(name)

    def schema_content(self, type_name: str) -> Any:
        """JSON schema text behind a named type, if the type is a JSON schema."""
        if "." in type_name:
            alias, _, local = type_name.partition(".")
            source = self.library_docs.get(alias)
        else:
            source, local = self.doc, type_name
        if source is None:
            return None

        declaration = _declarations(source).get(local)
        if isinstance(declaration, dict):
            declaration = declaration.get("type", declaration.get("schema"))
        if isinstance(declaration, str) and _looks_like_json(declaration):
            return declaration
        return None

    def annotation_type(self, name: str) -> str | None:
        declaration = self.lookup("annotationTypes", name)
        if isinstance(declaration, str):
            return declaration
        if isinstance(declaration, dict):
            types = _type_list(declaration.get("type"))
            if types:
                return types[0]
            if "properties" in declaration:
                return "object"
        return None


# Resources and methods


def _build_resource(relative_uri: str, value: Any, parent_uri: str, ctx: _Context) -> ResourceNode:
    mapping = _mapping(value)
    complete_uri = parent_uri + relative_uri
    params = {
        "resourcePath": complete_uri,
        "resourcePathName": _resource_path_name(complete_uri),
    }

    type_name, mapping = _apply_resource_type(mapping, params, ctx)
    resource_traits = _references(mapping.get("is"))
    resource_secured_by = _secured_by(mapping.get("securedBy"))

    methods = [
        _build_method(
            key,
            mapping[key],
            traits=resource_traits,
            secured_by=resource_secured_by,
            params=params,
            ctx=ctx,
        )
        for key in mapping
        if key in HTTP_METHODS
    ]
    children = [
        _build_resource(key, child, complete_uri, ctx)
        for key, child in mapping.items()
        if _is_resource_key(key)
    ]

    return ResourceNode(
        relative_uri=relative_uri,
        complete_relative_uri=complete_uri,
        display_name=_text(mapping.get("displayName")),
        description=_text(mapping.get("description")),
        type=type_name,
        methods=methods,
        resources=children,
        uri_parameters=_build_parameters(
            mapping.get("uriParameters"),
            implicit=URI_TEMPLATE_RE.findall(relative_uri),
        ),
        annotations=_build_annotations(mapping, ctx),
    )


def _build_method(
    name: str,
    value: Any,
    traits: list[tuple[str, dict]],
    secured_by: list[str | None],
    params: dict,
    ctx: _Context,
) -> MethodNode:
    mapping = _mapping(value)
    method_params = {**params, "methodName": name}

    for trait_name, trait_params in traits + _references(mapping.get("is")):
        trait = ctx.lookup("traits", trait_name)
        if not isinstance(trait, dict):
            logger.debug("Unknown trait %r on %s %s", trait_name, name, params["resourcePath"])
            continue
        mapping = _merge(mapping, _substitute(trait, {**method_params, **trait_params}))

    return MethodNode(
        method=name,
        description=_text(mapping.get("description")),
        secured_by=_secured_by(mapping.get("securedBy")) or secured_by,
        query_parameters=_build_parameters(mapping.get("queryParameters")),
        bodies=_build_bodies(mapping.get("body"), ctx),
        responses=[
            ResponseNode(
                code=str(code),
                description=_text(_mapping(response).get("description")),
                bodies=_build_bodies(_mapping(response).get("body"), ctx),
            )
            for code, response in _mapping(mapping.get("responses")).items()
        ],
        annotations=_build_annotations(mapping, ctx),
    )


def _apply_resource_type(mapping: dict, params: dict, ctx: _Context, depth: int = 0) -> tuple[str | None, dict]:
    reference = _references(mapping.get("type"))
    if not reference:
        return None, mapping

    type_name, type_params = reference[0]
    definition = ctx.lookup("resourceTypes", type_name)
    if not isinstance(definition, dict) or depth > 8:
        logger.debug("Unknown resource type %r on %s", type_name, params["resourcePath"])
        return type_name, mapping

    definition = _substitute(definition, {**params, **type_params})
    # an inherited resource type applies to the definition first
    _, definition = _apply_resource_type(definition, params, ctx, depth + 1)

    applied = {}
    for key, value in definition.items():
        if key == "type":
            continue
        if isinstance(key, str) and key.endswith("?") and key[:-1] in HTTP_METHODS:
            if key[:-1] not in mapping:
                continue
            key = key[:-1]
        if key in HTTP_METHODS:
            value = _substitute(value, {"methodName": key})
        applied[key] = value

    # resource level traits of both the resource and its type apply
    traits = _as_list(mapping.get("is")) + _as_list(applied.get("is"))
    merged = _merge({k: v for k, v in mapping.items() if k != "type"}, applied)
    if traits:
        merged["is"] = traits
    return type_name, merged


# Parameters, bodies and types


def _build_parameters(value: Any, implicit: list[str] | None = None) -> list[ParameterNode]:
    parameters = []
    for key, declaration in _mapping(value).items():
        name, optional = _optional_name(key)
        decl = _declaration_mapping(declaration)
        required = decl.get("required") if isinstance(decl.get("required"), bool) else not optional
        types = _type_list(decl.get("type")) or ["string"]

        repeat = decl.get("repeat")
        parameters.append(
            ParameterNode(
                name=name,
                type=types,
                description=_text(decl.get("description")),
                required=required,
                example=_unwrap_example(decl.get("example")),
                default=decl.get("default"),
                min_length=_int(decl.get("minLength")),
                max_length=_int(decl.get("maxLength")),
                repeat=repeat if isinstance(repeat, bool) else None,
                raw={"name": name, **decl, "type": types, "required": required},
            )
        )

    declared = {parameter.name for parameter in parameters}
    for name in implicit or []:
        if name in declared:
            continue
        declared.add(name)
        parameters.append(
            ParameterNode(
                name=name,
                type=["string"],
                required=True,
                raw={"name": name, "type": ["string"], "required": True},
            )
        )
    return parameters


def _build_properties(value: Any) -> list[PropertyNode]:
    properties = []
    for key, declaration in _mapping(value).items():
        name, optional = _optional_name(key)
        decl = _declaration_mapping(declaration)
        required = decl.get("required") if isinstance(decl.get("required"), bool) else not optional
        types = _type_list(decl.get("type")) or (["object"] if "properties" in decl else ["string"])
        properties.append(
            PropertyNode(
                name=name,
                type=types,
                description=_text(decl.get("description")),
                required=required,
                raw={"name": name, **decl},
            )
        )
    return properties


def _build_types(declarations: dict) -> list[TypeNode]:
    types = []
    for name, declaration in declarations.items():
        if isinstance(declaration, str) and _looks_like_json(declaration):
            types.append(TypeNode(name=str(name), schema_content=declaration, raw=declaration))
            continue

        decl = _declaration_mapping(declaration)
        type_value = decl.get("type", decl.get("schema"))
        schema_content = None
        if isinstance(type_value, str) and _looks_like_json(type_value):
            schema_content, type_value = type_value, None

        types.append(
            TypeNode(
                name=str(name),
                type=_type_list(type_value),
                properties=_build_properties(decl.get("properties")),
                schema_content=schema_content,
                raw=declaration,
            )
        )
    return types


def _build_bodies(value: Any, ctx: _Context) -> list[BodyNode]:
    if value is None:
        return []
    if isinstance(value, (str, list)):
        return [_build_body(ctx.media_type, value, ctx)]

    mapping = _mapping(value)
    if all("/" in str(key) for key in mapping):
        return [_build_body(str(key), body, ctx) for key, body in mapping.items()]
    return [_build_body(ctx.media_type, mapping, ctx)]


def _build_body(media_type: str, value: Any, ctx: _Context) -> BodyNode:
    decl = _declaration_mapping(value)
    type_value = decl.get("type", decl.get("schema"))

    schema_content = None
    if isinstance(type_value, dict):
        # inline type declaration
        decl = _merge(decl, {k: v for k, v in type_value.items() if k != "type"})
        type_value = type_value.get("type")

    if isinstance(type_value, str) and _looks_like_json(type_value):
        schema_content, types = type_value, []
    else:
        types = _type_list(type_value)
        if len(types) == 1:
            schema_content = ctx.schema_content(types[0])

    properties = _build_properties(decl.get("properties"))
    if not types and properties and schema_content is None:
        types = ["object"]

    return BodyNode(
        name=media_type,
        type=types,
        properties=properties,
        schema_content=schema_content,
        example=_unwrap_example(decl.get("example")),
        examples=_build_examples(decl.get("examples")),
        raw={"name": media_type, **decl},
    )


def _build_examples(value: Any) -> list[ExampleNode]:
    examples = []
    for name, example in _mapping(value).items():
        example = _unwrap_example(example, parse=False)
        if isinstance(example, str):
            parsed = _parse_json(example)
            structured = parsed if isinstance(parsed, (dict, list)) else None
            text = example
        else:
            structured = example
            text = json.dumps(example, default=str)
        examples.append(ExampleNode(name=str(name), value=text, structured_value=structured))
    return examples


def _build_annotations(mapping: dict, ctx: _Context) -> list[AnnotationNode]:
    return [
        AnnotationNode(name=key[1:-1], value=value, type=ctx.annotation_type(key[1:-1]))
        for key, value in mapping.items()
        if isinstance(key, str) and key.startswith("(") and key.endswith(")")
    ]


def _build_security_schemes(value: Any) -> list[SecuritySchemeNode]:
    if isinstance(value, list):
        # RAML 0.8 style: a list of single-entry mappings
        merged = {}
        for item in value:
            merged.update(_mapping(item))
        value = merged

    schemes = []
    for name, declaration in _mapping(value).items():
        decl = _mapping(declaration)
        schemes.append(
            SecuritySchemeNode(
                name=str(name),
                raw={"name": str(name), **decl},
            )
        )
    return schemes


# Helpers


def _read_text(file_path: Path) -> str:
    try:
        return file_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise RamlLoadError(f"cannot read file: {e}", path=str(file_path)) from e


def _parse_yaml(text: str, file_path: Path) -> Any:
    try:
        return yaml.load(text, Loader=_include_loader(file_path.parent))
    except yaml.YAMLError as e:
        raise RamlLoadError(f"invalid YAML: {e}", path=str(file_path)) from e


def _include_loader(base_dir: Path) -> type:
    """A SafeLoader subclass resolving ``!include`` relative to ``base_dir``."""

    class IncludeLoader(yaml.SafeLoader):
        pass

    def include(loader: yaml.SafeLoader, node: yaml.Node) -> Any:
        target = base_dir / str(loader.construct_scalar(node)).strip()
        text = _read_text(target)
        if target.suffix.lower() in YAML_SUFFIXES:
            return yaml.load(text, Loader=_include_loader(target.parent))
        return text

    IncludeLoader.add_constructor("!include", include)
    return IncludeLoader


def _plain(value: Any) -> Any:
    """Copy of ``value`` with JSON-friendly keys and scalars."""
    if isinstance(value, dict):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _declarations(doc: dict, kind: str | None = None) -> dict:
    """Named declarations of a document; ``types`` merges in ``schemas``."""
    if kind is not None:
        return _mapping(doc.get(kind))
    return {**_mapping(doc.get("schemas")), **_mapping(doc.get("types"))}


def _merge(primary: dict, secondary: dict) -> dict:
    """Deep merge where values already in ``primary`` win."""
    result = dict(primary)
    for key, value in secondary.items():
        if key not in result or result[key] is None:
            result[key] = copy.deepcopy(value)
        elif isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge(result[key], value)
    return result


def _substitute(value: Any, params: dict) -> Any:
    """Replace ``<<name>>`` placeholders in keys and values."""
    if isinstance(value, dict):
        return {_substitute(key, params): _substitute(item, params) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute(item, params) for item in value]
    if not isinstance(value, str) or "<<" not in value:
        return value

    whole = TEMPLATE_PARAM_RE.fullmatch(value.strip())
    if whole and whole.group(2) is None and whole.group(1) in params:
        return params[whole.group(1)]

    def replace(match: re.Match) -> str:
        name, transform = match.group(1), match.group(2)
        if name not in params:
            return match.group(0)
        return _transform(str(params[name]), transform)

    return TEMPLATE_PARAM_RE.sub(replace, value)


def _transform(text: str, transform: str | None) -> str:
    if transform == "singularize":
        return text[:-1] if text.endswith("s") else text
    if transform == "pluralize":
        return text if text.endswith("s") else text + "s"
    if transform == "uppercase":
        return text.upper()
    if transform == "lowercase":
        return text.lower()
    if transform == "uppercamelcase":
        return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_\s]+", text))
    if transform == "lowercamelcase":
        camel = _transform(text, "uppercamelcase")
        return camel[:1].lower() + camel[1:]
    return text


def _references(value: Any) -> list[tuple[str, dict]]:
    """Normalise ``is`` / ``type`` references to ``(name, params)`` pairs."""
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    references = []
    for item in items:
        if isinstance(item, str):
            references.append((item, {}))
        elif isinstance(item, dict):
            for name, params in item.items():
                references.append((str(name), _mapping(params)))
    return references


def _secured_by(value: Any) -> list[str | None]:
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    schemes: list[str | None] = []
    for item in items:
        if item is None or isinstance(item, str):
            schemes.append(item)
        elif isinstance(item, dict) and item:
            schemes.append(str(next(iter(item))))
    return schemes


def _protocols(value: Any, base_uri: str | None) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if isinstance(value, list):
        return [str(item).upper() for item in value]
    scheme = urlparse(base_uri or "").scheme
    return [scheme.upper()] if scheme in ("http", "https") else []


def _media_type(value: Any) -> str:
    if isinstance(value, list) and value:
        value = value[0]
    return str(value) if value else DEFAULT_MEDIA_TYPE


def _type_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, list):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return []


def _declaration_mapping(value: Any) -> dict:
    """Read a type declaration that may be written as a bare type expression."""
    if isinstance(value, (str, list)):
        return {"type": value}
    return _mapping(value)


def _unwrap_example(value: Any, parse: bool = True) -> Any:
    if isinstance(value, dict) and "value" in value:
        facets = {key for key in value if not key.startswith("(")}
        if facets <= EXAMPLE_FACETS:
            value = value["value"]
    if parse and isinstance(value, str):
        parsed = _parse_json(value)
        if isinstance(parsed, (dict, list)):
            return parsed
    return value


def _parse_json(text: str) -> Any:
    if not _looks_like_json(text):
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _looks_like_json(text: str) -> bool:
    return text.lstrip().startswith(("{", "["))


def _optional_name(key: Any) -> tuple[str, bool]:
    name = str(key)
    if name.endswith("?"):
        return name[:-1], True
    return name, False


def _resource_path_name(uri: str) -> str:
    segments = [s for s in uri.split("/") if s and not URI_TEMPLATE_RE.fullmatch(s)]
    return segments[-1] if segments else ""


def _is_resource_key(key: Any) -> bool:
    return isinstance(key, str) and key.startswith("/")


def _mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _sequence(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_list(value: Any) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, dict):
        # RAML 0.8 style {value: ...}
        value = value.get("value")
        return None if value is None else str(value)
    return str(value)


def _int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None
