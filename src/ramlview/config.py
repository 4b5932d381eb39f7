"""Build configuration for the view model builder."""

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field

from ramlview.markup import Renderer, markdown_to_html, plain_text

ENV_RENDER_MARKDOWN = "RAMLVIEW_RENDER_MARKDOWN"
ENV_RESPONSE_SCHEMA_CODE = "RAMLVIEW_RESPONSE_SCHEMA_CODE"


class BuildConfig(BaseModel):
    """Options that shape the generated view model."""

    render_markdown: bool = Field(default=True)
    response_schema_code: str = Field(default="200")
    version_placeholder: str = Field(default="{version}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BuildConfig":
        """Read overrides from ``RAMLVIEW_*`` environment variables."""
        env = os.environ if environ is None else environ
        values = {}
        if ENV_RENDER_MARKDOWN in env:
            values["render_markdown"] = env[ENV_RENDER_MARKDOWN]
        if ENV_RESPONSE_SCHEMA_CODE in env:
            values["response_schema_code"] = env[ENV_RESPONSE_SCHEMA_CODE]
        return cls(**values)

    def renderer(self) -> Renderer:
        return markdown_to_html if self.render_markdown else plain_text
