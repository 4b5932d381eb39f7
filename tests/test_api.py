from pathlib import Path

import pytest

from ramlview.builder.api import build_view_model
from ramlview.builder.resources import build_resources, resource_name
from ramlview.builder.types import TypeRegistry
from ramlview.config import BuildConfig
from ramlview.exceptions import InvalidRamlError
from ramlview.raml.loader import load_api
from ramlview.raml.nodes import ApiNode, ResourceNode, SecuritySchemeNode

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def document():
    return build_view_model(load_api(FIXTURES / "users.raml"))


class TestMetadata:
    def test_title_and_versions(self, document):
        assert document.title == "Users API"
        assert document.version == "v1"
        assert document.raml_version == "RAML10"

    def test_base_uri_version_substitution(self, document):
        assert document.base_uri == "https://api.example.com/v1/{region}"

    def test_base_uri_parameters_skip_version(self, document):
        assert [p["name"] for p in document.base_uri_parameters] == ["region"]
        assert document.base_uri_parameters[0]["description"] == "Deployment region"

    def test_protocol(self, document):
        assert document.protocol == "Protocols: HTTPS"

    def test_description_and_documentation_html(self, document):
        assert document.description == "<p>Manage <strong>users</strong> of the platform.</p>"
        assert document.documentations[0].title == "Getting started"
        assert document.documentations[0].content == "<p>Read the <em>guide</em> first.</p>"

    def test_types_and_schemas(self, document):
        assert document.type_names == ["User"]
        assert "properties" in document.types["User"]
        assert list(document.schemas[0]) == ["Error"]
        assert document.schemas[0]["Error"]["properties"]["code"]["type"] == "integer"


class TestSecurity:
    def test_all_schemes(self, document):
        assert [s["name"] for s in document.security_schemes] == ["oauth_2_0", "basic"]

    def test_root_secured_by_resolves_full_scheme(self, document):
        assert document.secured_by["name"] == "oauth_2_0"
        assert document.secured_by["type"] == "OAuth 2.0"
        assert document.secured_by["settings"]["authorizationGrants"] == ["authorization_code"]

    def test_unknown_root_scheme(self):
        api = ApiNode(
            title="x",
            secured_by=["missing"],
            security_schemes=[SecuritySchemeNode(name="basic", raw={"name": "basic"})],
            raw={},
        )
        assert build_view_model(api).secured_by == {}


class TestResources:
    def test_names_and_duplicates(self, document):
        assert [r.name for r in document.resources] == ["Users", "Teams", "Empty"]

    def test_names_are_unique(self, document):
        names = [r.name for r in document.resources]
        assert len(names) == len(set(names))

    def test_nested_endpoints_absorbed(self, document):
        users = document.resources[0]
        assert [(e.method, e.uri) for e in users.endpoints] == [
            ("get", "/users"),
            ("post", "/users"),
            ("get", "/users/{userId}"),
        ]

    def test_empty_resource_is_kept(self, document):
        empty = document.resources[2]
        assert empty.uri == "/empty"
        assert empty.endpoints == []

    def test_resource_type_and_annotations(self, document):
        users, teams, _ = document.resources
        assert teams.type == "collection"
        assert teams.description == "Collection of groups"
        assert users.annotations == [{"audience": {"value": "internal", "type": "string"}}]

    def test_resource_name_derivation(self):
        assert resource_name(ResourceNode(relative_uri="/users", complete_relative_uri="/users")) == "Users"
        assert resource_name(ResourceNode(relative_uri="/", complete_relative_uri="/")) == ""
        explicit = ResourceNode(relative_uri="/users", complete_relative_uri="/users", display_name="People")
        assert resource_name(explicit) == "People"

    def test_first_resource_wins(self):
        api = ApiNode(resources=[
            ResourceNode(relative_uri="/a", complete_relative_uri="/a", description="first"),
            ResourceNode(relative_uri="/b", complete_relative_uri="/b", display_name="A", description="second"),
        ])
        resources = build_resources(api, TypeRegistry(), BuildConfig())
        assert len(resources) == 1
        assert resources[0].description == "first"


class TestUsersRoundTrip:
    def test_list_users(self, document):
        get = document.resources[0].endpoints[0]
        assert get.method == "get"
        assert get.secured_by == ""
        assert get.description == "<p>List users</p>"

        query = get.query_parameters
        assert len(query.tbody) == 1
        limit = query.tbody[0]
        assert (limit.name, limit.type, limit.is_required, limit.example) == ("limit", "integer", False, 10)
        assert query.thead.example is True
        assert query.thead.default is False

        assert [(e.code, e.response) for e in get.response_example] == [("200", {"id": 1})]

    def test_response_body_raw_type(self, document):
        get = document.resources[0].endpoints[0]
        assert get.response_body.tbody == []
        assert get.response_body.type == {"name": "application/json", "example": {"id": 1}}

    def test_create_user(self, document):
        post = document.resources[0].endpoints[1]
        assert post.secured_by == "basic"
        assert [(r.name, r.is_required) for r in post.request_body.tbody] == [("name", True), ("email", False)]
        assert post.response_example[0].code == "201"
        assert post.response_example[0].description == "Created"
        assert post.response_example[0].response == ""

    def test_get_user(self, document):
        get = document.resources[0].endpoints[2]
        assert [r.name for r in get.uri_parameters.tbody] == ["userId"]
        rows = {r.name: r for r in get.response_body.tbody}
        assert rows["id"].is_required is True
        assert [r.name for r in rows["profile"].nested_properties.tbody] == ["bio"]
        assert get.annotations == [{"deprecated": {"value": {"since": "v0"}, "type": "object"}}]

        codes = [(e.code, e.response) for e in get.response_example]
        assert codes == [("200", None), ("404", {"code": 404, "message": "not found"})]

    def test_trait_query_parameters(self, document):
        get, delete = document.resources[1].endpoints
        assert get.description == "<p>List groups</p>"
        assert [r.name for r in delete.query_parameters.tbody] == ["offset"]
        assert delete.response_example[0].code == "204"

    def test_serialized_shape(self, document):
        data = document.model_dump(by_alias=True)
        endpoint = data["apiResources"][0]["endpoints"][0]
        assert endpoint["queryParameters"]["tbody"][0]["isRequired"] is False
        assert endpoint["responseExample"] == [{"code": "200", "description": "", "response": {"id": 1}}]


class TestLibraryApi:
    def test_request_bodies(self):
        document = build_view_model(load_api(FIXTURES / "library.raml"))
        people, accounts = document.resources
        post, put = people.endpoints
        assert [r.name for r in post.request_body.tbody] == ["id", "name", "createdAt", "email"]
        assert [r.name for r in put.request_body.tbody] == ["flag"]
        assert [r.name for r in accounts.endpoints[0].request_body.tbody] == ["number", "balance"]
        assert accounts.endpoints[0].request_body.tbody[0].is_required is True


class TestBuildViewModel:
    def test_root_without_json_is_fatal(self):
        with pytest.raises(InvalidRamlError):
            build_view_model(ApiNode(title="broken"))

    def test_root_with_unserialisable_json_is_fatal(self):
        with pytest.raises(InvalidRamlError):
            build_view_model(ApiNode(title="broken", raw={"value": object()}))

    def test_minimal_root_defaults(self):
        document = build_view_model(ApiNode(raw={}))
        assert document.title == ""
        assert document.version == ""
        assert document.protocol == ""
        assert document.base_uri == ""
        assert document.description == ""
        assert document.resources == []
        assert document.secured_by == {}
        assert document.types == {}
        assert document.schemas == []

    def test_each_build_returns_fresh_document(self):
        api = load_api(FIXTURES / "users.raml")
        first = build_view_model(api)
        second = build_view_model(api)
        assert first == second
        assert first is not second
        assert first.resources is not second.resources

    def test_plain_text_descriptions(self):
        document = build_view_model(load_api(FIXTURES / "users.raml"), BuildConfig(render_markdown=False))
        assert document.description == "Manage **users** of the platform."
