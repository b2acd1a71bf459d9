"""
Tests for the plugin contract: forms, input decoding, auth and registry.
"""

import pytest
from pydantic import Field

from wakflo_extensions.integrations import ALL_INTEGRATIONS, build_registry, default_registry
from wakflo_extensions.sdk import (
    Action,
    ActionMetadata,
    AuthContext,
    AuthError,
    AuthSchema,
    DynamicFieldContext,
    ExecuteContext,
    FieldType,
    FormBuilder,
    FormSchema,
    InputValidationError,
    Integration,
    IntegrationMetadata,
    IntegrationRegistry,
    Option,
    RegistryError,
    RequiredStr,
    StepInput,
    Trigger,
    TriggerMetadata,
    TriggerType,
    parse_input,
)
from wakflo_extensions.sdk.forms import FormSchemaError
from wakflo_extensions.sdk.inputs import drop_empty, split_csv


async def no_options(ctx):
    return []


# =============================================================================
# Forms
# =============================================================================


class TestFormSchema:
    """Tests for FormBuilder / FormSchema."""

    def test_builder_preserves_order_and_required(self):
        """Fields keep declaration order and required keys are exported."""
        form = (
            FormBuilder("create_task", "Create Task")
            .text("content", "Content", required=True)
            .number("priority", "Priority", default=1)
            .checkbox("done", "Done")
            .build()
        )
        assert [f.key for f in form.fields] == ["content", "priority", "done"]
        assert form.required_keys == ["content"]
        schema = form.to_json_schema()
        assert schema["required"] == ["content"]
        assert schema["properties"]["priority"] == {
            "type": "number",
            "title": "Priority",
            "x-widget": "number",
            "default": 1,
        }
        assert schema["properties"]["done"]["type"] == "boolean"

    def test_select_options(self):
        """Static options are exported as enum plus labels."""
        form = FormBuilder("f", "F").select("status", "Status", [("draft", "Draft"), ("published", "Published")]).build()
        prop = form.to_json_schema()["properties"]["status"]
        assert prop["enum"] == ["draft", "published"]
        assert prop["x-options"][1] == {"id": "published", "name": "Published"}

    def test_array_items(self):
        form = FormBuilder("f", "F").array("tags", "Tags", items=FieldType.TEXT).build()
        assert form.to_json_schema()["properties"]["tags"]["items"] == {"type": "string"}

    def test_dynamic_dependencies_exported(self):
        """Dynamic fields expose their dependencies."""
        form = (
            FormBuilder("f", "F")
            .dynamic("project", "Project", no_options)
            .dynamic("section", "Section", no_options, depends_on=["project"])
            .dynamic("labels", "Labels", no_options, multi=True)
            .build()
        )
        props = form.to_json_schema()["properties"]
        assert props["section"]["x-depends-on"] == ["project"]
        assert props["labels"]["type"] == "array"
        assert form.get("section").dynamic.resolver is no_options

    def test_duplicate_key_rejected(self):
        """Duplicate keys are rejected at build time."""
        with pytest.raises(FormSchemaError, match="Duplicate"):
            FormBuilder("f", "F").text("a", "A").text("a", "Again").build()

    def test_unknown_dependency_rejected(self):
        """A dependency must be declared earlier in the form."""
        with pytest.raises(FormSchemaError, match="unknown field"):
            FormBuilder("f", "F").dynamic("b", "B", no_options, depends_on=["a"]).text("a", "A").build()

    def test_contains_and_len(self):
        form = FormSchema(id="f", title="F")
        assert len(form) == 0
        assert "x" not in form


class TestDynamicFieldContext:
    """Tests for option search filtering."""

    def test_respond_filters_by_search(self):
        """Search text filters names case-insensitively."""
        ctx = DynamicFieldContext(search="SAL")
        options = [Option("1", "Sales"), Option("2", "Support")]
        assert ctx.respond(options) == [Option("1", "Sales")]

    def test_respond_without_search(self):
        ctx = DynamicFieldContext()
        options = [Option("1", "Sales")]
        assert ctx.respond(options) == options

    def test_value_treats_blank_as_missing(self):
        ctx = DynamicFieldContext(input={"a": "  ", "b": "x"})
        assert ctx.value("a") is None
        assert ctx.value("b") == "x"


# =============================================================================
# Inputs
# =============================================================================


class SampleInput(StepInput):
    name: RequiredStr
    count: int = Field(default=1, alias="itemCount", ge=1)


class TestParseInput:
    """Tests for parse_input."""

    def test_valid_input_by_alias(self):
        """Aliases are honored and values are stripped."""
        data = parse_input(SampleInput, {"name": "  Bob ", "itemCount": "3"}, "test")
        assert data.name == "Bob"
        assert data.count == 3

    def test_blank_required_field(self):
        """A blank required field raises InputValidationError naming it."""
        with pytest.raises(InputValidationError) as exc_info:
            parse_input(SampleInput, {"name": "   "}, "test")
        assert "name" in str(exc_info.value)
        assert exc_info.value.errors[0]["field"] == "name"
        assert exc_info.value.integration == "test"

    def test_missing_input(self):
        """None input is treated as an empty form."""
        with pytest.raises(InputValidationError):
            parse_input(SampleInput, None, "test")

    def test_split_csv(self):
        assert split_csv("vip, new ,,") == ["vip", "new"]
        assert split_csv(["a", " "]) == ["a"]
        assert split_csv(None) == []

    def test_drop_empty(self):
        assert drop_empty({"a": 1, "b": None, "c": " ", "d": 0}) == {"a": 1, "d": 0}


# =============================================================================
# Auth
# =============================================================================


class TestAuthContext:
    """Tests for AuthContext."""

    def test_require_missing(self):
        """A missing credential raises AuthError."""
        with pytest.raises(AuthError, match="domain is required"):
            AuthContext(extra={"domain": " "}).require("domain", "freshdesk")

    def test_require_strips(self):
        assert AuthContext(extra={"api-key": " k "}).require("api-key", "x") == "k"

    def test_require_token(self):
        """Blank tokens are rejected."""
        with pytest.raises(AuthError, match="access token"):
            AuthContext(access_token="").require_token("todoist")
        assert AuthContext(access_token="abc").require_token("todoist") == "abc"

    def test_oauth2_schema_dict(self):
        schema = AuthSchema.oauth2(
            authorization_url="https://example.com/auth",
            token_url="https://example.com/token",
            scopes=["read"],
        )
        exported = schema.to_dict()
        assert exported["strategy"] == "oauth2"
        assert exported["scopes"] == ["read"]


# =============================================================================
# Registry
# =============================================================================


class EchoAction(Action):
    metadata = ActionMetadata(id="echo", display_name="Echo", description="Echo input")

    def properties(self):
        return FormBuilder("echo", "Echo").text("text", "Text").build()

    async def perform(self, ctx):
        return dict(ctx.input)


def make_integration(integration_id="echo", name="Echo", actions=(EchoAction(),)):
    return Integration(
        metadata=IntegrationMetadata(id=integration_id, name=name, description="Echo"),
        auth=AuthSchema.none(),
        actions=actions,
    )


class TestIntegrationRegistry:
    """Tests for IntegrationRegistry."""

    def test_register_and_find(self):
        """Registered actions are found by id."""
        registry = IntegrationRegistry()
        registry.register(make_integration())
        assert "echo" in registry
        assert registry.find_action("echo", "echo").id == "echo"

    def test_duplicate_registration(self):
        registry = IntegrationRegistry()
        registry.register(make_integration())
        with pytest.raises(RegistryError, match="already registered"):
            registry.register(make_integration())

    def test_missing_name_rejected(self):
        with pytest.raises(RegistryError, match="must have a name"):
            IntegrationRegistry().register(make_integration(name=""))

    def test_unknown_lookups(self):
        registry = IntegrationRegistry()
        registry.register(make_integration())
        with pytest.raises(RegistryError, match="not found"):
            registry.get_required("nope")
        with pytest.raises(RegistryError, match="Action 'nope'"):
            registry.find_action("echo", "nope")
        with pytest.raises(RegistryError, match="Trigger 'nope'"):
            registry.find_trigger("echo", "nope")

    def test_duplicate_action_ids_rejected(self):
        """Two actions with the same id cannot share an integration."""
        with pytest.raises(ValueError, match="Duplicate action"):
            make_integration(actions=(EchoAction(), EchoAction()))

    def test_unregister(self):
        registry = IntegrationRegistry()
        registry.register(make_integration())
        assert registry.unregister("echo") is True
        assert registry.unregister("echo") is False
        assert len(registry) == 0


class TestBundledIntegrations:
    """Tests for the bundled integration set."""

    EXPECTED = {
        "googlesheets",
        "mailchimp",
        "telegrambot",
        "discord",
        "freshdesk",
        "campaignmonitor",
        "ghostcms",
        "jiracloud",
        "hubspot",
        "todoist",
        "pinterest",
        "zohocrm",
    }

    def test_all_integrations_register(self):
        """Every bundled integration passes registry validation."""
        registry = build_registry()
        assert set(registry.list_ids()) == self.EXPECTED
        assert len(ALL_INTEGRATIONS) == len(self.EXPECTED)

    def test_default_registry_is_shared(self):
        assert default_registry() is default_registry()

    def test_describe_exports_json_schemas(self):
        """Descriptors include auth and a JSON schema for every item."""
        for descriptor in build_registry().describe():
            assert descriptor["auth"]["strategy"] in ("oauth2", "custom", "none")
            for item in descriptor["actions"] + descriptor["triggers"]:
                assert item["properties"]["type"] == "object"
                assert item["displayName"]

    def test_every_integration_has_actions(self):
        for integration in build_registry().list_integrations():
            assert integration.actions, integration.id

    def test_custom_auth_exports_fields(self):
        descriptor = build_registry().get_required("freshdesk").describe()
        assert descriptor["auth"]["strategy"] == "custom"
        assert descriptor["auth"]["fields"]["required"] == ["domain", "api-key"]


# =============================================================================
# Triggers
# =============================================================================


class TickTrigger(Trigger):
    metadata = TriggerMetadata(id="tick", display_name="Tick", description="Returns the poll input")

    def properties(self):
        return FormBuilder("tick", "Tick").build()

    async def execute(self, ctx):
        return [ctx.input]


class TestTriggerContract:
    """Tests for the Trigger base class and integration lookups."""

    @pytest.mark.asyncio
    async def test_lifecycle_defaults(self):
        """Polling triggers have no-op start/stop and no criteria."""
        trigger = TickTrigger()
        ctx = ExecuteContext(input={"n": 1})

        assert await trigger.start(ctx) is None
        assert await trigger.execute(ctx) == [{"n": 1}]
        assert await trigger.stop(ctx) is None
        assert trigger.criteria() == {}
        assert trigger.metadata.type is TriggerType.POLLING

    def test_integration_lookups(self):
        integration = Integration(
            metadata=IntegrationMetadata(id="clock", name="Clock", description="Clock"),
            auth=AuthSchema.oauth2(authorization_url="https://a", token_url="https://t", scopes=("read",)),
            actions=(EchoAction(),),
            triggers=(TickTrigger(),),
        )
        registry = IntegrationRegistry()
        registry.register(integration)

        assert registry.find_trigger("clock", "tick").id == "tick"
        assert integration.get_trigger("missing") is None
        assert integration.auth_for(integration.get_action("echo")) is integration.auth
        assert integration.describe()["triggers"][0]["type"] == "polling"
        assert integration.describe()["auth"]["scopes"] == ["read"]
