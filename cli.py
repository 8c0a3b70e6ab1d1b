"""CLI commands for event lottery management."""

import asyncio
from datetime import datetime
from uuid import UUID

import typer

from src.config.logging import setup_logging
from src.config.settings import settings
from src.errors import LotteryServiceError
from src.events.features.create_event.write_model import NewEventDTO, SqlCreateEventWriteModel
from src.events.features.lottery.write_model import SqlLotteryWriteModel
from src.notifications.repository.write_models import SqlNotificationWriteModel
from src.push_service import get_push_service
from src.users.repository.write_models import SqlUserWriteModel

app = typer.Typer(help="CLI commands for event lottery management")


def _lottery_write_model() -> SqlLotteryWriteModel:
    return SqlLotteryWriteModel(
        notification_write_model=SqlNotificationWriteModel(push_service=get_push_service()),
    )


def _fail(error: LotteryServiceError) -> None:
    typer.secho(f"{error.kind}: {error.message}", fg=typer.colors.RED)
    raise typer.Exit(1)


@app.command()
def create_event(
    organizer_id: str = typer.Argument(..., help="Installation id of the organizer"),
    name: str = typer.Option(..., "--name", "-n", help="Event name"),
    description: str = typer.Option(..., "--description", "-d", help="Event description"),
    max_attendees: int = typer.Option(None, "--max-attendees", "-a", help="Number of spots"),
    max_waiting_list: int = typer.Option(
        None, "--max-waiting-list", "-w", help="Waiting list limit, 0 for none"
    ),
    registration_start: datetime = typer.Option(None, "--registration-start"),
    registration_end: datetime = typer.Option(None, "--registration-end"),
    location_name: str = typer.Option(None, "--location", "-l"),
):
    """Create an event owned by an organizer."""
    new_event = NewEventDTO(
        name=name,
        description=description,
        location_name=location_name,
        max_attendees=max_attendees,
        max_waiting_list=max_waiting_list,
        registration_start=registration_start,
        registration_end=registration_end,
    )
    try:
        event = asyncio.run(SqlCreateEventWriteModel().create_event(organizer_id, new_event))
    except LotteryServiceError as e:
        _fail(e)

    typer.secho("Event created!", fg=typer.colors.GREEN)
    typer.secho(f"  Event ID: {event.event_id}", fg=typer.colors.CYAN)
    typer.secho(f"  Name: {event.name}", fg=typer.colors.BLUE)
    if event.registration_end:
        typer.secho(f"  Registration ends: {event.registration_end}", fg=typer.colors.BLUE)


async def _watch_lotteries(interval: float) -> None:
    write_model = _lottery_write_model()
    while True:
        await write_model.process_due_lotteries()
        await asyncio.sleep(interval)


@app.command()
def run_lotteries(
    watch: bool = typer.Option(
        False, "--watch", help="Keep polling for due lotteries instead of running once"
    ),
    interval: float = typer.Option(
        None, "--interval", "-i", help="Seconds between polls (default LOTTERY_POLL_INTERVAL)"
    ),
):
    """Draw winners for every event whose registration has closed."""
    setup_logging()
    if watch:
        interval = interval or settings.LOTTERY_POLL_INTERVAL
        typer.secho(f"Polling for due lotteries every {interval}s", fg=typer.colors.BLUE)
        try:
            asyncio.run(_watch_lotteries(interval))
        except KeyboardInterrupt:
            typer.secho("Stopped", fg=typer.colors.YELLOW)
        return

    draws = asyncio.run(_lottery_write_model().process_due_lotteries())
    typer.secho(f"Processed {len(draws)} due lotteries", fg=typer.colors.GREEN)
    for draw in draws:
        if draw.winners:
            typer.secho(
                f"  {draw.event_id}: {len(draw.winners)} invited", fg=typer.colors.CYAN
            )


@app.command()
def draw(
    event_id: str = typer.Argument(..., help="Event UUID"),
):
    """Run the lottery for one event now."""
    try:
        result = asyncio.run(_lottery_write_model().run_lottery(UUID(event_id)))
    except LotteryServiceError as e:
        _fail(e)

    if not result.drawn:
        typer.secho("Event is not eligible for a draw", fg=typer.colors.YELLOW)
        return
    typer.secho(f"Drew {len(result.winners)} winners", fg=typer.colors.GREEN)
    for winner in result.winners:
        typer.secho(f"  - {winner}", fg=typer.colors.BLUE)
    if result.lottery_complete:
        typer.secho("Lottery complete", fg=typer.colors.MAGENTA)


@app.command()
def complete_lottery(
    event_id: str = typer.Argument(..., help="Event UUID"),
):
    """Close the lottery of an event. No more joins or draws afterwards."""
    try:
        event = asyncio.run(_lottery_write_model().complete_lottery(UUID(event_id)))
    except LotteryServiceError as e:
        _fail(e)

    typer.secho(f"Lottery for {event.name} is complete", fg=typer.colors.GREEN)


@app.command()
def promote_user(
    user_id: str = typer.Argument(..., help="Installation id of the user"),
    name: str = typer.Option("", "--name", "-n", help="Name used if the profile is new"),
):
    """Raise a user one role: entrant to organizer, organizer to admin."""

    async def _promote():
        write_model = SqlUserWriteModel()
        await write_model.ensure_user(user_id, name=name)
        return await write_model.promote_user(user_id)

    try:
        user = asyncio.run(_promote())
    except LotteryServiceError as e:
        _fail(e)

    typer.secho(f"{user.user_id} is now {user.role.value}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
