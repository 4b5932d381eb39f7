"""Annotation extraction for resources and methods."""

from ramlview.raml.nodes import AnnotationNode


def build_annotations(annotations: list[AnnotationNode]) -> list[dict]:
    """``[{name: {"value": ..., "type": ...}}]``; ``type`` only when declared."""
    result = []
    for annotation in annotations:
        entry = {"value": annotation.value}
        if annotation.type is not None:
            entry["type"] = annotation.type
        result.append({annotation.name: entry})
    return result
