"""Google Sheets integration."""

from ...sdk import AuthSchema, Integration, IntegrationMetadata
from .actions import (
    AddColumnInWorksheetAction,
    AddRowInWorksheetAction,
    CopyWorksheetAction,
    FindWorksheetAction,
    GetWorksheetByIdAction,
    ReadRowInWorksheetAction,
    UpdateRowInWorksheetAction,
)
from .client import GoogleSheetsClient

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.readonly",
]


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="googlesheets",
            name="Google Sheets",
            description="Read, append and update rows and worksheets in Google Sheets spreadsheets.",
            icon="logos:google-sheets",
            categories=("productivity", "spreadsheets"),
        ),
        auth=AuthSchema.oauth2(
            authorization_url="https://accounts.google.com/o/oauth2/auth",
            token_url="https://oauth2.googleapis.com/token",
            scopes=SCOPES,
            description="Connect your Google account.",
        ),
        actions=(
            FindWorksheetAction(),
            GetWorksheetByIdAction(),
            AddRowInWorksheetAction(),
            ReadRowInWorksheetAction(),
            UpdateRowInWorksheetAction(),
            CopyWorksheetAction(),
            AddColumnInWorksheetAction(),
        ),
    )


__all__ = ["GoogleSheetsClient", "create_integration"]
