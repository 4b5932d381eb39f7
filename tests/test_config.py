from ramlview.config import BuildConfig
from ramlview.markup import markdown_to_html, plain_text


class TestBuildConfig:
    def test_defaults(self):
        config = BuildConfig()
        assert config.render_markdown is True
        assert config.response_schema_code == "200"
        assert config.version_placeholder == "{version}"

    def test_from_env(self):
        config = BuildConfig.from_env({
            "RAMLVIEW_RENDER_MARKDOWN": "false",
            "RAMLVIEW_RESPONSE_SCHEMA_CODE": "201",
        })
        assert config.render_markdown is False
        assert config.response_schema_code == "201"

    def test_from_env_ignores_unrelated(self):
        assert BuildConfig.from_env({"HOME": "/root"}) == BuildConfig()

    def test_renderer(self):
        assert BuildConfig().renderer() is markdown_to_html
        assert BuildConfig(render_markdown=False).renderer() is plain_text


class TestMarkup:
    def test_markdown_to_html(self):
        assert markdown_to_html("*hi*") == "<p><em>hi</em></p>"

    def test_empty_text(self):
        assert markdown_to_html(None) is None
        assert markdown_to_html("") is None
        assert plain_text("") is None
