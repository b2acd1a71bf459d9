"""Zoho CRM actions."""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import Field, field_validator

from ...sdk import (
    JSON,
    Action,
    ActionMetadata,
    Blankable,
    FormBuilder,
    FormSchema,
    InputValidationError,
    PerformContext,
    RequiredStr,
    StepInput,
    parse_input,
)
from .client import ZohoCRMClient, get_modules

INTEGRATION = "zohocrm"

OptionalStr = Annotated[str | None, Blankable]
OptionalPage = Annotated[int | None, Blankable]

SORT_FIELDS = ("id", "Created_Time", "Modified_Time")
SORT_ORDERS = [("asc", "Ascending"), ("desc", "Descending")]

SAMPLE_RECORD = {
    "id": "4150868000001944196",
    "Last_Name": "Lovelace",
    "Email": "ada@example.com",
    "Created_Time": "2024-05-01T10:00:00+00:00",
    "Modified_Time": "2024-05-01T10:00:00+00:00",
}


def zoho_page(page: int | None) -> int | None:
    """Pages are 1-based in forms and 0-based in the API."""
    return page - 1 if page else None


class ModuleInput(StepInput):
    module: RequiredStr


class RecordInput(ModuleInput):
    record_id: RequiredStr = Field(alias="recordId")


# =============================================================================
# Read
# =============================================================================


class GetRecordAction(Action):
    metadata = ActionMetadata(
        id="get_record",
        display_name="Get Record",
        description="Returns a single record of a module.",
        sample_output=SAMPLE_RECORD,
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("get_record", "Get Record")
            .dynamic("module", "Module", get_modules, required=True)
            .text("recordId", "Record ID", required=True)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(RecordInput, ctx.input, INTEGRATION)
        async with ZohoCRMClient.from_context(ctx) as client:
            return client.first_record(await client.get(f"/{data.module}/{data.record_id}"))


class ListRecordsInput(ModuleInput):
    page: OptionalPage = Field(default=None, ge=1)
    per_page: OptionalPage = Field(default=None, ge=1, le=200, alias="perPage")
    fields: str = "id,Created_Time,Modified_Time"
    sort_order: OptionalStr = Field(default=None, alias="sortOrder")

    @field_validator("fields", mode="before")
    @classmethod
    def default_fields(cls, value: Any) -> Any:
        return value or "id,Created_Time,Modified_Time"


class ListRecordsAction(Action):
    metadata = ActionMetadata(
        id="list_records",
        display_name="List Records",
        description="Lists records of a module.",
        sample_output={"records": [SAMPLE_RECORD], "count": 1, "module": "Leads"},
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("list_records", "List Records")
            .dynamic("module", "Module", get_modules, required=True)
            .number("page", "Page", default=1)
            .number("perPage", "Records Per Page", default=200)
            .text("fields", "Fields", default="id,Created_Time,Modified_Time")
            .select("sortOrder", "Sort Order", SORT_ORDERS)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(ListRecordsInput, ctx.input, INTEGRATION)
        params = {
            "fields": data.fields,
            "page": zoho_page(data.page),
            "per_page": data.per_page,
            "sort_order": data.sort_order,
        }
        async with ZohoCRMClient.from_context(ctx) as client:
            records, info = await client.records(f"/{data.module}", params)

        result: dict[str, Any] = {"records": records, "count": len(records), "module": data.module}
        if info:
            result["info"] = info
        return result


class SearchRecordsInput(ModuleInput):
    criteria: OptionalStr = None
    email: OptionalStr = None
    phone: OptionalStr = None
    word: OptionalStr = None
    page: OptionalPage = Field(default=None, ge=1)
    per_page: OptionalPage = Field(default=None, ge=1, le=200, alias="perPage")
    sort_field: OptionalStr = Field(default=None, alias="sortField")
    sort_order: OptionalStr = Field(default=None, alias="sortOrder")


def search_params(data: SearchRecordsInput) -> dict[str, Any]:
    """
    Build search query parameters.

    Raises:
        InputValidationError: On malformed criteria, a missing search term
            or an unsupported sort field
    """
    params: dict[str, Any] = {"page": zoho_page(data.page), "per_page": data.per_page}

    if data.criteria:
        criteria = data.criteria.strip("()")
        if len(criteria.split(":")) < 3:
            raise InputValidationError("invalid criteria format: must be field:operator:value", INTEGRATION)
        params["criteria"] = f"({criteria})"
    for key in ("email", "phone", "word"):
        if getattr(data, key):
            params[key] = getattr(data, key)
    if not any(params.get(key) for key in ("criteria", "email", "phone", "word")):
        raise InputValidationError("one of criteria, email, phone or word is required", INTEGRATION)

    if data.sort_field:
        if data.sort_field not in SORT_FIELDS:
            raise InputValidationError(
                "invalid sort field. Zoho CRM only supports sorting by 'id', 'Created_Time', or 'Modified_Time'",
                INTEGRATION,
            )
        params["sort_by"] = data.sort_field
        params["sort_order"] = "desc" if data.sort_order == "desc" else "asc"
    return params


class SearchRecordsAction(Action):
    metadata = ActionMetadata(
        id="search_records",
        display_name="Search Records",
        description="Searches records by criteria, email, phone or keyword.",
        sample_output={"records": [SAMPLE_RECORD], "info": {"count": 1, "more_records": False}},
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("search_records", "Search Records")
            .dynamic("module", "Module", get_modules, required=True)
            .text("criteria", "Criteria", placeholder="(Last_Name:equals:Lovelace)")
            .email("email", "Email")
            .text("phone", "Phone")
            .text("word", "Keyword")
            .number("page", "Page", default=1)
            .number("perPage", "Records Per Page", default=200)
            .select("sortField", "Sort By", [(f, f) for f in SORT_FIELDS])
            .select("sortOrder", "Sort Order", SORT_ORDERS)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(SearchRecordsInput, ctx.input, INTEGRATION)
        params = search_params(data)
        async with ZohoCRMClient.from_context(ctx) as client:
            records, info = await client.records(f"/{data.module}/search", params)

        if not info:
            info = {"per_page": data.per_page, "count": len(records), "page": data.page, "more_records": False}
        return {"records": records, "info": info}


# =============================================================================
# Write
# =============================================================================


class UpdateRecordInput(RecordInput):
    data: dict[str, Any]

    @field_validator("data", mode="before")
    @classmethod
    def parse_json(cls, value: Any) -> Any:
        if isinstance(value, str):
            text = value.strip()
            if not (text.startswith("{") and text.endswith("}")):
                raise ValueError("data must be a JSON object")
            return json.loads(text)
        return value


class UpdateRecordAction(Action):
    metadata = ActionMetadata(
        id="update_record",
        display_name="Update Record",
        description="Updates fields of a record.",
        sample_output={
            "code": "SUCCESS",
            "details": {"id": "4150868000001944196", "Modified_Time": "2024-05-02T10:00:00+00:00"},
            "message": "record updated",
            "status": "success",
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("update_record", "Update Record")
            .dynamic("module", "Module", get_modules, required=True)
            .text("recordId", "Record ID", required=True)
            .long_text("data", "Data", required=True, placeholder='{"Last_Name": "Lovelace"}')
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(UpdateRecordInput, ctx.input, INTEGRATION)
        if not data.data:
            raise InputValidationError("empty data: please provide at least one field to update", INTEGRATION)
        async with ZohoCRMClient.from_context(ctx) as client:
            result = await client.put(f"/{data.module}/{data.record_id}", json={"data": [data.data]})
            return client.first_record(result)
