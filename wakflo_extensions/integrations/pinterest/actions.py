"""Pinterest actions."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Annotated, Any

from pydantic import Field

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
from ...sdk.inputs import drop_empty
from .client import PinterestClient, get_ad_accounts, get_board_pins, get_boards

INTEGRATION = "pinterest"

OptionalStr = Annotated[str | None, Blankable]

MEDIA_SOURCE_TYPES = [("image_url", "Image URL"), ("video_id", "Video ID"), ("image_base64", "Image (Base64)")]
METRIC_TYPES = [
    ("IMPRESSION", "Impressions"),
    ("SAVE", "Saves"),
    ("PIN_CLICK", "Pin Clicks"),
    ("OUTBOUND_CLICK", "Outbound Clicks"),
    ("VIDEO_MRC_VIEW", "Video Views"),
    ("VIDEO_AVG_WATCH_TIME", "Average Watch Time"),
    ("VIDEO_V50_WATCH_TIME", "Video Watch Time"),
    ("QUARTILE_95_PERCENT_VIEW", "95% Video Views"),
]
APP_TYPES = [("ALL", "All"), ("MOBILE", "Mobile"), ("TABLET", "Tablet"), ("WEB", "Web")]
SPLIT_FIELDS = [("NO_SPLIT", "No Split"), ("APP_TYPE", "App Type")]

MAX_ANALYTICS_DAYS = 90

_DATE_FORMATS = ("%Y-%m-%dT%H:%M:%SZ", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d", "%m/%d/%Y", "%d-%m-%Y")

SAMPLE_PIN = {
    "id": "813744226420795884",
    "board_id": "549755885175",
    "title": "Sunset",
    "description": "Golden hour",
    "link": "https://example.com/sunset",
    "created_at": "2024-05-01T10:00:00",
    "media": {"media_type": "image"},
}

_PIN_TEXT_FIELDS = ("title", "description", "link", "alt_text", "note")


def parse_analytics_date(value: str) -> date:
    """
    Parse a user supplied analytics date.

    Raises:
        ValueError: If no known format matches
    """
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unable to parse date: {value}")


def _pin_fields(data: StepInput) -> dict[str, Any]:
    return drop_empty({key: getattr(data, key) for key in _PIN_TEXT_FIELDS})


def _pin_text_form(builder: FormBuilder) -> FormBuilder:
    return (
        builder.text("title", "Title")
        .long_text("description", "Description")
        .url("link", "Link")
        .text("alt_text", "Alt Text")
        .long_text("note", "Note", description="Private note visible only to you.")
    )


# =============================================================================
# Pins
# =============================================================================


class CreatePinInput(StepInput):
    board_id: RequiredStr
    media_source_type: RequiredStr
    media_source_url: OptionalStr = None
    media_source_id: OptionalStr = None
    title: OptionalStr = None
    description: OptionalStr = None
    link: OptionalStr = None
    alt_text: OptionalStr = None
    note: OptionalStr = None
    dominant_color: OptionalStr = None


def media_source(data: CreatePinInput) -> dict[str, str]:
    """
    Build the pin's ``media_source`` object.

    Raises:
        InputValidationError: If the source type is unknown, unsupported,
            or missing its URL / media id
    """
    source_type = data.media_source_type
    if source_type == "image_url":
        if not data.media_source_url:
            raise InputValidationError("media source URL is required for image URL type", INTEGRATION)
        return {"source_type": source_type, "url": data.media_source_url}
    if source_type == "video_id":
        if not data.media_source_id:
            raise InputValidationError("media source ID is required for video ID type", INTEGRATION)
        return {"source_type": source_type, "media_id": data.media_source_id}
    if source_type == "image_base64":
        raise InputValidationError("image base64 upload is not supported", INTEGRATION)
    raise InputValidationError("invalid media source type", INTEGRATION)


class CreatePinAction(Action):
    metadata = ActionMetadata(
        id="create_pin",
        display_name="Create Pin",
        description="Creates a pin on a board from an image URL or an uploaded video.",
        sample_output=SAMPLE_PIN,
    )

    def properties(self) -> FormSchema:
        builder = (
            FormBuilder("create_pin", "Create Pin")
            .dynamic("board_id", "Board", get_boards, required=True)
            .select("media_source_type", "Media Source Type", MEDIA_SOURCE_TYPES, required=True, default="image_url")
            .url("media_source_url", "Media URL")
            .text("media_source_id", "Media ID")
        )
        return _pin_text_form(builder).text("dominant_color", "Dominant Color", placeholder="#6E7874").build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CreatePinInput, ctx.input, INTEGRATION)
        pin = {
            "board_id": data.board_id,
            "media_source": media_source(data),
            **_pin_fields(data),
            **drop_empty({"dominant_color": data.dominant_color}),
        }
        async with PinterestClient.from_context(ctx) as client:
            return await client.post("/pins", json=pin)


class UpdatePinInput(StepInput):
    board_id: OptionalStr = None
    pin_id: RequiredStr
    title: OptionalStr = None
    description: OptionalStr = None
    link: OptionalStr = None
    alt_text: OptionalStr = None
    note: OptionalStr = None


class UpdatePinAction(Action):
    metadata = ActionMetadata(
        id="update_pin",
        display_name="Update Pin",
        description="Updates the text fields of a pin or moves it to another board.",
        sample_output=SAMPLE_PIN,
    )

    def properties(self) -> FormSchema:
        builder = (
            FormBuilder("update_pin", "Update Pin")
            .dynamic("board_id", "Board", get_boards, description="Lists its pins; the pin is moved here if it is on another board.")
            .dynamic("pin_id", "Pin", get_board_pins, depends_on=["board_id"], required=True)
        )
        return _pin_text_form(builder).build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(UpdatePinInput, ctx.input, INTEGRATION)
        update = {**drop_empty({"board_id": data.board_id}), **_pin_fields(data)}
        if not update:
            raise InputValidationError("at least one field must be provided for update", INTEGRATION)
        async with PinterestClient.from_context(ctx) as client:
            return await client.patch(f"/pins/{data.pin_id}", json=update)


class SearchPinsInput(StepInput):
    keyword: RequiredStr
    bookmark: OptionalStr = None
    ad_account_id: OptionalStr = None


class SearchPinsAction(Action):
    """Search the connected user's own pins."""

    metadata = ActionMetadata(
        id="search_pins",
        display_name="Search Pins",
        description="Searches pins saved by the connected account.",
        sample_output={"items": [SAMPLE_PIN], "bookmark": None},
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("search_pins", "Search Pins")
            .text("keyword", "Keyword", required=True)
            .text("bookmark", "Bookmark", description="Cursor from a previous page.")
            .dynamic("ad_account_id", "Ad Account", get_ad_accounts)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(SearchPinsInput, ctx.input, INTEGRATION)
        params = {"query": data.keyword, "bookmark": data.bookmark, "ad_account_id": data.ad_account_id}
        async with PinterestClient.from_context(ctx) as client:
            result = await client.get("/search/pins", params=params)

        if isinstance(result, dict) and result.get("items") == []:
            return {
                "items": [],
                "message": "No pins found. Pinterest only searches within your own saved pins.",
                "bookmark": None,
            }
        return result


# =============================================================================
# Analytics
# =============================================================================


class GetPinAnalyticsInput(StepInput):
    board_id: OptionalStr = None
    pin_id: RequiredStr
    metric_type: RequiredStr
    start_date: RequiredStr
    end_date: RequiredStr
    app_types: OptionalStr = None
    split_field: OptionalStr = None
    ad_account_id: Annotated[str | None, Blankable] = Field(default=None, pattern=r"^\d+$")


class GetPinAnalyticsAction(Action):
    metadata = ActionMetadata(
        id="get_pin_analytics",
        display_name="Get Pin Analytics",
        description="Returns metrics of a pin over a date range of at most 90 days.",
        sample_output={
            "all": {
                "daily_metrics": [{"date": "2024-05-01", "data_status": "READY", "metrics": {"IMPRESSION": 42}}],
                "summary_metrics": {"IMPRESSION": 42},
            }
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("get_pin_analytics", "Get Pin Analytics")
            .dynamic("board_id", "Board", get_boards)
            .text("pin_id", "Pin ID", required=True)
            .select("metric_type", "Metric", METRIC_TYPES, required=True, default="IMPRESSION")
            .date_time("start_date", "Start Date", required=True)
            .date_time("end_date", "End Date", required=True)
            .select("app_types", "App Types", APP_TYPES, default="ALL")
            .select("split_field", "Split Field", SPLIT_FIELDS, default="NO_SPLIT")
            .dynamic("ad_account_id", "Ad Account", get_ad_accounts)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(GetPinAnalyticsInput, ctx.input, INTEGRATION)
        try:
            start = parse_analytics_date(data.start_date)
        except ValueError as e:
            raise InputValidationError("invalid start date format", INTEGRATION) from e
        try:
            end = parse_analytics_date(data.end_date)
        except ValueError as e:
            raise InputValidationError("invalid end date format", INTEGRATION) from e
        if start > end:
            raise InputValidationError("start date must be before end date", INTEGRATION)
        if end - start > timedelta(days=MAX_ANALYTICS_DAYS):
            raise InputValidationError(f"date range cannot exceed {MAX_ANALYTICS_DAYS} days", INTEGRATION)

        params = {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "metric_types": data.metric_type,
            "app_types": data.app_types,
            "split_field": data.split_field,
            "ad_account_id": data.ad_account_id,
        }
        async with PinterestClient.from_context(ctx) as client:
            return await client.get(f"/pins/{data.pin_id}/analytics", params=params)
