"""Pinterest triggers."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from ...sdk import (
    JSON,
    Blankable,
    ExecuteContext,
    FormBuilder,
    FormSchema,
    StepInput,
    Trigger,
    TriggerMetadata,
    filter_since,
    parse_input,
)
from ...sdk.polling import newest_timestamp, utc_now
from .actions import SAMPLE_PIN
from .client import PinterestClient, get_boards

INTEGRATION = "pinterest"


class PinCreatedInput(StepInput):
    board_id: Annotated[str | None, Blankable] = None
    page_size: int = Field(default=25, ge=1, le=250)


class PinCreatedTrigger(Trigger):
    """
    Pins created since the last run.

    The newest ``created_at`` seen becomes the next ``lastRun`` so a poll
    that returns nothing new leaves the cursor in place.
    """

    metadata = TriggerMetadata(
        id="pin_created",
        display_name="Pin Created",
        description="Triggers when a new pin is created, optionally on one board.",
        sample_output=[SAMPLE_PIN],
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("pin_created", "Pin Created")
            .dynamic("board_id", "Board", get_boards)
            .number("page_size", "Page Size", default=25)
            .build()
        )

    async def execute(self, ctx: ExecuteContext) -> JSON:
        data = parse_input(PinCreatedInput, ctx.input, INTEGRATION)
        last_run = ctx.last_run
        path = f"/boards/{data.board_id}/pins" if data.board_id else "/pins"

        async with PinterestClient.from_context(ctx) as client:
            pins = await client.items(path, {"page_size": data.page_size})

        newest = newest_timestamp(pins, "created_at")
        if last_run is None:
            ctx.set_last_run(newest or utc_now())
            return pins

        if newest is not None and newest > last_run:
            ctx.set_last_run(newest)
        return filter_since(pins, last_run, "created_at")
