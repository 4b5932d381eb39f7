"""Response example extraction."""

from typing import Any

from ramlview.builder.models import ResponseExample
from ramlview.raml.nodes import BodyNode, ResponseNode


def build_response_examples(responses: list[ResponseNode]) -> list[ResponseExample] | None:
    """One example per response body, or None when nothing is declared.

    A response without a body still gets an entry with an empty response,
    so every status code shows up in the documentation.
    """
    examples = []
    for response in responses:
        description = response.description or ""
        if not response.bodies:
            examples.append(ResponseExample(code=response.code, description=description, response=""))
            continue
        for body in response.bodies:
            examples.append(
                ResponseExample(code=response.code, description=description, response=_body_example(body))
            )

    return examples or None


def _body_example(body: BodyNode) -> Any:
    if body.example is not None:
        return body.example
    if body.examples:
        # TODO: expose every named example, not only the first one
        first = body.examples[0]
        if first.structured_value is not None:
            return first.structured_value
        return first.value
    return None
