"""Security scheme extraction."""

from ramlview.raml.nodes import ApiNode


def build_security_schemes(api: ApiNode) -> list[dict]:
    return [scheme.to_json() for scheme in api.security_schemes]


def build_secured_by(api: ApiNode) -> dict:
    """Full definition of the scheme securing the whole API, or ``{}``."""
    name = next((scheme for scheme in api.secured_by if scheme), None)
    if name is None:
        return {}

    for scheme in api.security_schemes:
        if scheme.name == name:
            return scheme.to_json()
    return {}
