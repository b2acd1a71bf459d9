"""Google Sheets actions."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AliasChoices, Field, field_validator

from ...sdk import (
    JSON,
    Action,
    ActionMetadata,
    Blankable,
    DecodeError,
    FormBuilder,
    FormSchema,
    InputValidationError,
    PerformContext,
    RequiredStr,
    StepInput,
    parse_input,
)
from .client import GoogleSheetsClient, a1_range, get_sheet_ids, get_sheet_titles, get_spreadsheets

INTEGRATION = "googlesheets"

SpreadsheetId = Annotated[
    RequiredStr,
    Field(validation_alias=AliasChoices("spreadsheetId", "spreadSheetId")),
]


def _with_spreadsheet(builder: FormBuilder) -> FormBuilder:
    return builder.checkbox(
        "includeTeamDrives",
        "Include Team Drives",
        description="Determines if sheets from Team Drives should be included in the results.",
        default=False,
    ).dynamic(
        "spreadsheetId",
        "Spreadsheet",
        get_spreadsheets,
        depends_on=["includeTeamDrives"],
        required=True,
        description="The spreadsheet to work with.",
    )


def _with_sheet_title(builder: FormBuilder, key: str = "sheetTitle") -> FormBuilder:
    return builder.dynamic(
        key,
        "Sheet",
        get_sheet_titles,
        depends_on=["spreadsheetId"],
        required=True,
        description="Title of the worksheet (tab).",
    )


def _sheet_summary(properties: dict[str, Any]) -> dict[str, Any]:
    """Reshape a sheet's ``properties`` into the worksheet output object."""
    # The API omits zero-valued fields, so sheetId/index default to 0.
    result: dict[str, Any] = {
        "found": True,
        "sheetId": properties.get("sheetId", 0),
        "title": properties.get("title", ""),
        "index": properties.get("index", 0),
    }
    if properties.get("sheetType"):
        result["sheetType"] = properties["sheetType"]

    grid = properties.get("gridProperties")
    if grid is not None:
        grid_props = {
            "rowCount": grid.get("rowCount", 0),
            "columnCount": grid.get("columnCount", 0),
        }
        if grid.get("frozenRowCount"):
            grid_props["frozenRowCount"] = grid["frozenRowCount"]
        if grid.get("frozenColumnCount"):
            grid_props["frozenColumnCount"] = grid["frozenColumnCount"]
        result["gridProperties"] = grid_props

    tab_color = properties.get("tabColor")
    if tab_color is not None:
        result["tabColor"] = {
            "red": tab_color.get("red", 0),
            "green": tab_color.get("green", 0),
            "blue": tab_color.get("blue", 0),
            "alpha": tab_color.get("alpha", 0),
        }
    return result


def _row_values(value: Any) -> list[Any]:
    """Accept a list of cell values, a list of ``{"value": x}`` items or a CSV string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",")]
    if isinstance(value, dict):
        value = value.get("values", [])
    cells: list[Any] = []
    for item in value:
        cells.append(item.get("value") if isinstance(item, dict) else item)
    return cells


# =============================================================================
# Find worksheet
# =============================================================================


class FindWorksheetInput(StepInput):
    spreadsheet_id: SpreadsheetId
    sheet_title: RequiredStr = Field(alias="sheetTitle")


class FindWorksheetAction(Action):
    """Find a worksheet by its title."""

    metadata = ActionMetadata(
        id="find_worksheet",
        display_name="Find Worksheet",
        description="Finds a worksheet in a spreadsheet by its title and returns its properties.",
        sample_output={
            "found": True,
            "sheetId": 0,
            "title": "Sheet1",
            "index": 0,
            "sheetType": "GRID",
            "gridProperties": {"rowCount": 1000, "columnCount": 26},
        },
    )

    def properties(self) -> FormSchema:
        builder = _with_spreadsheet(FormBuilder("find_worksheet", "Find Worksheet"))
        return builder.text(
            "sheetTitle",
            "Sheet Title",
            required=True,
            description="Exact title of the worksheet to find.",
        ).build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(FindWorksheetInput, ctx.input, INTEGRATION)

        async with GoogleSheetsClient.from_context(ctx) as client:
            sheets = await client.list_sheet_properties(data.spreadsheet_id)

        for properties in sheets:
            if properties.get("title") == data.sheet_title:
                return _sheet_summary(properties)

        return {
            "found": False,
            "message": f"No sheet found with title '{data.sheet_title}' in spreadsheet",
        }


# =============================================================================
# Get worksheet by id
# =============================================================================


class GetWorksheetByIdInput(StepInput):
    spreadsheet_id: SpreadsheetId
    sheet_id: int = Field(alias="sheetId")


class GetWorksheetByIdAction(Action):
    """Look up a worksheet by its numeric id."""

    metadata = ActionMetadata(
        id="get_worksheet_by_id",
        display_name="Get Worksheet By ID",
        description="Retrieves a worksheet's properties using its numeric sheet id.",
        sample_output={"found": True, "sheetId": 123456, "title": "Data", "index": 1},
    )

    def properties(self) -> FormSchema:
        builder = _with_spreadsheet(FormBuilder("get_worksheet_by_id", "Get Worksheet By ID"))
        return builder.dynamic(
            "sheetId",
            "Sheet",
            get_sheet_ids,
            depends_on=["spreadsheetId"],
            required=True,
        ).build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(GetWorksheetByIdInput, ctx.input, INTEGRATION)

        async with GoogleSheetsClient.from_context(ctx) as client:
            sheets = await client.list_sheet_properties(data.spreadsheet_id)

        for properties in sheets:
            if properties.get("sheetId", 0) == data.sheet_id:
                return _sheet_summary(properties)

        return {
            "found": False,
            "message": f"No sheet found with ID {data.sheet_id} in spreadsheet",
        }


# =============================================================================
# Add row
# =============================================================================


class AddRowInput(StepInput):
    spreadsheet_id: SpreadsheetId
    sheet_title: RequiredStr = Field(alias="sheetTitle")
    sheet_row: Annotated[str | None, Blankable] = Field(default=None, alias="sheetRow")
    values: list[Any] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def normalize_values(cls, value: Any) -> list[Any]:
        return _row_values(value)


class AddRowInWorksheetAction(Action):
    """Append a row of values after the last row with data."""

    metadata = ActionMetadata(
        id="add_row_in_worksheet",
        display_name="Add Row In Worksheet",
        description="Appends a new row of values to a worksheet.",
        sample_output={
            "spreadsheetId": "1BxiMVs0XRA5nFMdKvBdBZjgmUUqptlbs74OgvE2upms",
            "tableRange": "Sheet1!A1:E10",
            "updates": {"updatedRange": "Sheet1!A11:E11", "updatedRows": 1, "updatedCells": 5},
        },
    )

    def properties(self) -> FormSchema:
        builder = _with_sheet_title(_with_spreadsheet(FormBuilder("add_row_in_worksheet", "Add Row")))
        return (
            builder.text(
                "sheetRow",
                "Start Cell",
                description="Cell where the table starts, e.g. A1.",
                default="A1",
            )
            .array("values", "Values", required=True, description="Cell values for the new row.")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(AddRowInput, ctx.input, INTEGRATION)
        if not data.values:
            raise InputValidationError("at least one value is required", INTEGRATION)

        range_ = a1_range(data.sheet_title, data.sheet_row or "A1")
        async with GoogleSheetsClient.from_context(ctx) as client:
            return await client.append_values(data.spreadsheet_id, range_, [data.values])


# =============================================================================
# Read row
# =============================================================================


class ReadRowInput(StepInput):
    spreadsheet_id: SpreadsheetId
    sheet_title: RequiredStr = Field(alias="sheetTitle")
    row: int = Field(alias="rowNumber", ge=1)


class ReadRowInWorksheetAction(Action):
    """Read one row, keyed by the header row when there is one."""

    metadata = ActionMetadata(
        id="read_row_in_worksheet",
        display_name="Read Row In Worksheet",
        description="Reads the values of a row and maps them to the worksheet's header row.",
        sample_output={
            "row": {"Name": "Ada", "Email": "ada@example.com"},
            "values": ["Ada", "ada@example.com"],
            "range": "Sheet1!A2:Z2",
        },
    )

    def properties(self) -> FormSchema:
        builder = _with_sheet_title(_with_spreadsheet(FormBuilder("read_row_in_worksheet", "Read Row")))
        return builder.number("rowNumber", "Row Number", required=True, description="1-based row number.").build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(ReadRowInput, ctx.input, INTEGRATION)

        async with GoogleSheetsClient.from_context(ctx) as client:
            response = await client.get_values(
                data.spreadsheet_id, a1_range(data.sheet_title, f"{data.row}:{data.row}")
            )
            rows = response.get("values") or []
            if not rows:
                raise DecodeError(f"no data found in row {data.row}", INTEGRATION)
            values = rows[0]

            if data.row == 1:
                headers: list[Any] = values
            else:
                header_response = await client.get_values(data.spreadsheet_id, a1_range(data.sheet_title, "1:1"))
                header_rows = header_response.get("values") or []
                headers = header_rows[0] if header_rows else []

        row = {str(header): values[i] for i, header in enumerate(headers) if i < len(values)}
        return {"row": row, "values": values, "range": response.get("range", "")}


# =============================================================================
# Update row
# =============================================================================


class UpdateRowInput(StepInput):
    spreadsheet_id: SpreadsheetId
    sheet_title: RequiredStr = Field(alias="sheetTitle")
    sheet_row: RequiredStr = Field(alias="sheetRow")
    values: list[Any] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def normalize_values(cls, value: Any) -> list[Any]:
        return _row_values(value)


class UpdateRowInWorksheetAction(Action):
    """Overwrite the cells of a row."""

    metadata = ActionMetadata(
        id="update_row_in_worksheet",
        display_name="Update Row In Worksheet",
        description="Overwrites the values of a row starting at the given cell.",
        sample_output={
            "success": True,
            "updatedRange": "Sheet1!A5:C5",
            "updatedRows": 1,
            "updatedColumns": 3,
            "updatedCells": 3,
            "spreadsheetId": "1BxiMVs0XRA5nFMdKvBdBZjgmUUqptlbs74OgvE2upms",
        },
    )

    def properties(self) -> FormSchema:
        builder = _with_sheet_title(_with_spreadsheet(FormBuilder("update_row_in_worksheet", "Update Row")))
        return (
            builder.text("sheetRow", "Row Range", required=True, description="Start cell of the row, e.g. A5.")
            .array("values", "Values", required=True)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(UpdateRowInput, ctx.input, INTEGRATION)
        if not data.values:
            raise InputValidationError("at least one value is required", INTEGRATION)

        async with GoogleSheetsClient.from_context(ctx) as client:
            result = await client.update_values(
                data.spreadsheet_id, a1_range(data.sheet_title, data.sheet_row), [data.values]
            )

        result = client.expect_object(result, "update")
        return {
            "success": True,
            "updatedRange": result.get("updatedRange"),
            "updatedRows": result.get("updatedRows", 0),
            "updatedColumns": result.get("updatedColumns", 0),
            "updatedCells": result.get("updatedCells", 0),
            "spreadsheetId": result.get("spreadsheetId", data.spreadsheet_id),
        }


# =============================================================================
# Copy worksheet
# =============================================================================


class CopyWorksheetInput(StepInput):
    spreadsheet_id: SpreadsheetId
    sheet_title: RequiredStr = Field(alias="sheetTitle")
    destination_spreadsheet_id: Annotated[str | None, Blankable] = Field(
        default=None, alias="destinationSpreadsheetId"
    )
    new_sheet_title: Annotated[str | None, Blankable] = Field(default=None, alias="newSheetTitle")


class CopyWorksheetAction(Action):
    """Copy a worksheet within a spreadsheet or into another one."""

    metadata = ActionMetadata(
        id="copy_worksheet",
        display_name="Copy Worksheet",
        description="Copies a worksheet to the same or another spreadsheet, optionally renaming the copy.",
        sample_output={
            "sheetId": 987654,
            "title": "Copy of Sheet1",
            "index": 2,
            "destinationSpreadsheetId": "1BxiMVs0XRA5nFMdKvBdBZjgmUUqptlbs74OgvE2upms",
            "success": True,
        },
    )

    def properties(self) -> FormSchema:
        builder = _with_sheet_title(_with_spreadsheet(FormBuilder("copy_worksheet", "Copy Worksheet")))
        return (
            builder.text(
                "destinationSpreadsheetId",
                "Destination Spreadsheet ID",
                description="Leave empty to copy within the source spreadsheet.",
            )
            .text("newSheetTitle", "New Sheet Title")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CopyWorksheetInput, ctx.input, INTEGRATION)
        destination = data.destination_spreadsheet_id or data.spreadsheet_id

        async with GoogleSheetsClient.from_context(ctx) as client:
            sheets = await client.list_sheet_properties(data.spreadsheet_id)
            source = next((s for s in sheets if s.get("title") == data.sheet_title), None)
            if source is None:
                raise InputValidationError(
                    f"sheet with title '{data.sheet_title}' not found in source spreadsheet",
                    INTEGRATION,
                )

            copied = client.expect_object(
                await client.copy_sheet(data.spreadsheet_id, source.get("sheetId", 0), destination),
                "copy",
            )
            if data.new_sheet_title:
                await client.batch_update(
                    destination,
                    [
                        {
                            "updateSheetProperties": {
                                "properties": {
                                    "sheetId": copied.get("sheetId", 0),
                                    "title": data.new_sheet_title,
                                },
                                "fields": "title",
                            }
                        }
                    ],
                )
                copied["title"] = data.new_sheet_title

        return {
            "sheetId": copied.get("sheetId", 0),
            "title": copied.get("title", ""),
            "index": copied.get("index", 0),
            "destinationSpreadsheetId": destination,
            "success": True,
        }


# =============================================================================
# Add column
# =============================================================================


class AddColumnInput(StepInput):
    spreadsheet_id: SpreadsheetId
    sheet_id: int = Field(alias="sheetId")
    column_index: int = Field(alias="sheetColumnIndex", ge=0)
    column_name: Annotated[str | None, Blankable] = Field(default=None, alias="columnName")


class AddColumnInWorksheetAction(Action):
    """Insert an empty column, optionally writing a header cell."""

    metadata = ActionMetadata(
        id="add_column_in_worksheet",
        display_name="Add Column In Worksheet",
        description="Inserts a new column at the given index and optionally sets its header.",
        sample_output={"spreadsheetId": "1BxiMVs0XRA5nFMdKvBdBZjgmUUqptlbs74OgvE2upms", "replies": [{}, {}]},
    )

    def properties(self) -> FormSchema:
        builder = _with_spreadsheet(FormBuilder("add_column_in_worksheet", "Add Column"))
        return (
            builder.dynamic("sheetId", "Sheet", get_sheet_ids, depends_on=["spreadsheetId"], required=True)
            .number("sheetColumnIndex", "Column Index", required=True, description="0-based index of the new column.")
            .text("columnName", "Column Name", description="Header written to the first row.")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(AddColumnInput, ctx.input, INTEGRATION)

        requests: list[dict[str, Any]] = [
            {
                "insertDimension": {
                    "range": {
                        "sheetId": data.sheet_id,
                        "dimension": "COLUMNS",
                        "startIndex": data.column_index,
                        "endIndex": data.column_index + 1,
                    },
                    "inheritFromBefore": False,
                }
            }
        ]
        if data.column_name:
            requests.append(
                {
                    "updateCells": {
                        "range": {
                            "sheetId": data.sheet_id,
                            "startRowIndex": 0,
                            "endRowIndex": 1,
                            "startColumnIndex": data.column_index,
                            "endColumnIndex": data.column_index + 1,
                        },
                        "rows": [{"values": [{"userEnteredValue": {"stringValue": data.column_name}}]}],
                        "fields": "userEnteredValue",
                    }
                }
            )

        async with GoogleSheetsClient.from_context(ctx) as client:
            return await client.batch_update(data.spreadsheet_id, requests)
