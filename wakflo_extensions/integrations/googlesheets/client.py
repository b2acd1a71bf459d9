"""
Google Sheets API client.

Talks to the Sheets v4 REST API for spreadsheet data and to Drive v3 for
listing spreadsheets. Authenticated with the OAuth2 access token the host
resolved for the connection.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from ...sdk import ConnectorClient, DynamicFieldContext, InvocationContext, Option

logger = logging.getLogger(__name__)

SHEETS_API_URL = "https://sheets.googleapis.com/v4"
DRIVE_API_URL = "https://www.googleapis.com/drive/v3"
SPREADSHEET_MIME_TYPE = "application/vnd.google-apps.spreadsheet"


def a1_range(sheet_title: str, cells: str) -> str:
    """Build an A1 range, quoting the sheet title (``'My Sheet'!A1``)."""
    escaped = sheet_title.replace("'", "''")
    return f"'{escaped}'!{cells}"


class GoogleSheetsClient(ConnectorClient):
    """Client for the Google Sheets and Drive APIs."""

    def __init__(self, token: str, **kwargs: Any):
        super().__init__(base_url=SHEETS_API_URL, **kwargs)
        self.token = token

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> GoogleSheetsClient:
        return cls(
            ctx.auth.require_token("googlesheets"),
            settings=ctx.settings,
            transport=ctx.transport,
        )

    @property
    def name(self) -> str:
        return "googlesheets"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    # =========================================================================
    # Spreadsheets
    # =========================================================================

    async def get_spreadsheet(self, spreadsheet_id: str) -> dict[str, Any]:
        data = await self.get(f"/spreadsheets/{quote(spreadsheet_id, safe='')}")
        return self.expect_object(data, "spreadsheet")

    async def list_sheet_properties(self, spreadsheet_id: str) -> list[dict[str, Any]]:
        """Return the ``properties`` object of every sheet in a spreadsheet."""
        spreadsheet = await self.get_spreadsheet(spreadsheet_id)
        return [s.get("properties", {}) for s in spreadsheet.get("sheets") or []]

    async def batch_update(self, spreadsheet_id: str, requests: list[dict[str, Any]]) -> Any:
        return await self.post(
            f"/spreadsheets/{quote(spreadsheet_id, safe='')}:batchUpdate",
            json={"requests": requests},
        )

    # =========================================================================
    # Values
    # =========================================================================

    async def get_values(self, spreadsheet_id: str, range_: str) -> dict[str, Any]:
        data = await self.get(
            f"/spreadsheets/{quote(spreadsheet_id, safe='')}/values/{quote(range_, safe='')}"
        )
        return self.expect_object(data, "values")

    async def append_values(self, spreadsheet_id: str, range_: str, rows: list[list[Any]]) -> Any:
        logger.info(f"[googlesheets] Appending {len(rows)} row(s) to {range_}")
        return await self.post(
            f"/spreadsheets/{quote(spreadsheet_id, safe='')}/values/{quote(range_, safe='')}:append",
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"range": range_, "majorDimension": "ROWS", "values": rows},
        )

    async def update_values(self, spreadsheet_id: str, range_: str, rows: list[list[Any]]) -> Any:
        logger.info(f"[googlesheets] Updating {range_}")
        return await self.put(
            f"/spreadsheets/{quote(spreadsheet_id, safe='')}/values/{quote(range_, safe='')}",
            params={"valueInputOption": "RAW"},
            json={"range": range_, "majorDimension": "ROWS", "values": rows},
        )

    async def copy_sheet(self, spreadsheet_id: str, sheet_id: int, destination_id: str) -> Any:
        return await self.post(
            f"/spreadsheets/{quote(spreadsheet_id, safe='')}/sheets/{sheet_id}:copyTo",
            json={"destinationSpreadsheetId": destination_id},
        )

    # =========================================================================
    # Drive
    # =========================================================================

    async def list_spreadsheets(self, *, include_team_drives: bool = False) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "q": f"mimeType='{SPREADSHEET_MIME_TYPE}' and trashed = false",
            "fields": "files(id, name)",
            "supportsAllDrives": "true",
        }
        if include_team_drives:
            params["includeItemsFromAllDrives"] = "true"
        data = await self.get(f"{DRIVE_API_URL}/files", params=params)
        return self.expect_object(data, "files").get("files") or []


# =============================================================================
# Dynamic options
# =============================================================================


def _spreadsheet_id(ctx: DynamicFieldContext) -> str | None:
    return ctx.value("spreadsheetId") or ctx.value("spreadSheetId")


async def get_spreadsheets(ctx: DynamicFieldContext) -> list[Option]:
    async with GoogleSheetsClient.from_context(ctx) as client:
        files = await client.list_spreadsheets(include_team_drives=bool(ctx.value("includeTeamDrives")))
    return ctx.respond([Option(id=f["id"], name=f.get("name", f["id"])) for f in files])


async def get_sheet_titles(ctx: DynamicFieldContext) -> list[Option]:
    spreadsheet_id = _spreadsheet_id(ctx)
    if not spreadsheet_id:
        return []
    async with GoogleSheetsClient.from_context(ctx) as client:
        sheets = await client.list_sheet_properties(spreadsheet_id)
    return ctx.respond([Option(id=s["title"], name=s["title"]) for s in sheets if s.get("title")])


async def get_sheet_ids(ctx: DynamicFieldContext) -> list[Option]:
    spreadsheet_id = _spreadsheet_id(ctx)
    if not spreadsheet_id:
        return []
    async with GoogleSheetsClient.from_context(ctx) as client:
        sheets = await client.list_sheet_properties(spreadsheet_id)
    return ctx.respond(
        [Option(id=str(s.get("sheetId", 0)), name=s.get("title", "")) for s in sheets]
    )
