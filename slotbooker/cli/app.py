"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional, Tuple

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.memory_repository import InMemoryReservationRepository
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import SlotbookerError
from ..domain.formatting import describe_open_days, format_reservation
from ..services.booking import BookingService

app = typer.Typer(
    name="slotbooker",
    help="Consulter les créneaux disponibles et valider des réservations",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
DataOption = Annotated[Optional[Path], typer.Option("--data", "-d", help="Reservations JSON file (overrides reservations_file)")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Afficher les journaux de débogage.")] = False,
):
    """
    slotbooker - créneaux, durées et validation de réservations.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(
    config_file: Optional[Path], data_file: Optional[Path]
) -> Tuple[AppConfig, BookingService, InMemoryReservationRepository]:
    """Load configuration and reservations, exiting with a message on failure."""
    try:
        config = AppConfig.load_from_yaml(config_file or get_default_config_path())

        data_path = data_file or config.reservations_file
        if data_path is not None:
            repository = InMemoryReservationRepository.load_from_json(data_path, timezone=config.timezone)
        else:
            repository = InMemoryReservationRepository()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Erreur:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    return config, BookingService(config, repository), repository


def _parse_moment(value: str, tz: str) -> pendulum.DateTime:
    try:
        return pendulum.from_format(value, "YYYY-MM-DD HH:mm", tz=tz)
    except ValueError as e:
        console.print(f"[red]Date/heure invalide '{escape(value)}' (attendu: YYYY-MM-DD HH:mm): {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _print_errors(errors) -> None:
    console.print(f"[bold red]✗ {len(errors)} règle(s) non respectée(s):[/bold red]")
    for error in errors:
        console.print(f"  • {escape(error)}")


@app.command()
def services(config_file: ConfigOption = None):
    """
    List the configured services and the opening calendar.
    """
    config, _, _ = _load(config_file, None)

    if not config.services:
        console.print("[yellow]Aucun service défini dans la configuration.[/yellow]")
        return

    table = Table(
        title="Services",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Identifiant", style="bold yellow")
    table.add_column("Nom")
    table.add_column("Description", style="dim")

    for service in config.services:
        table.add_row(service.slug, service.name, service.description)

    calendar = config.calendar
    console.print()
    console.print(table)
    console.print(
        f"Ouvert {describe_open_days(calendar.open_weekdays)}, de {calendar.opening_hour}h "
        f"à {calendar.closing_hour}h, créneaux de {calendar.slot_minutes} minutes."
    )
    console.print()


@app.command()
def day(
    service: Annotated[str, typer.Argument(help="Service (identifiant ou nom)")],
    date: Annotated[Optional[str], typer.Option("--date", help="Jour (YYYY-MM-DD). Par défaut: aujourd'hui")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Show the slot grid of a service for one day.
    """
    config, booking, _ = _load(config_file, data_file)
    tz = config.timezone

    try:
        target = pendulum.from_format(date, "YYYY-MM-DD", tz=tz) if date else pendulum.now(tz)
    except ValueError as e:
        console.print(f"[red]Erreur lors de l'analyse de la date: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    try:
        calendar_day = booking.calendar_day(service, target)
    except SlotbookerError as e:
        console.print(f"[bold red]Erreur:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"\n[bold cyan]{calendar_day.service_id}[/bold cyan] - {calendar_day.date.format('DD/MM/YYYY')}")
    if calendar_day.closed_message:
        console.print(f"[yellow]{calendar_day.closed_message}[/yellow]")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Heure")
    table.add_column("Statut")

    for slot in calendar_day.slots:
        if slot.available:
            status = "[green]disponible[/green]"
        elif slot.is_past:
            status = "[dim]passé[/dim]"
        else:
            status = "[red]indisponible[/red]"
        table.add_row(slot.label, status)

    console.print(table)
    console.print(
        f"{len(calendar_day.available_slots())} créneau(x) disponible(s) sur {len(calendar_day.slots)}. "
        f"Jour précédent: {calendar_day.previous_day.format('YYYY-MM-DD')}, "
        f"jour suivant: {calendar_day.next_day.format('YYYY-MM-DD')}\n"
    )


@app.command()
def durations(
    service: Annotated[str, typer.Argument(help="Service (identifiant ou nom)")],
    start: Annotated[str, typer.Argument(help="Début (YYYY-MM-DD HH:mm)")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List the durations bookable from a start time.
    """
    config, booking, _ = _load(config_file, data_file)
    start_at = _parse_moment(start, config.timezone)

    try:
        options = booking.available_durations(service, start_at)
    except SlotbookerError as e:
        console.print(f"[bold red]Erreur:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if not options:
        console.print("[yellow]⚠ Ce créneau n'est plus disponible.[/yellow]")
        raise typer.Exit(1)

    console.print(f"[bold green]✓ {len(options)} durée(s) disponible(s):[/bold green]")
    for option in options:
        console.print(f"  {option.label:<12} (jusqu'à {option.end.format('HH:mm')})")


@app.command()
def check(
    service: Annotated[str, typer.Argument(help="Service (identifiant ou nom)")],
    start: Annotated[str, typer.Argument(help="Début (YYYY-MM-DD HH:mm)")],
    end: Annotated[str, typer.Argument(help="Fin (YYYY-MM-DD HH:mm)")],
    exclude: Annotated[Optional[str], typer.Option("--exclude", help="Identifiant de la réservation à ignorer (modification)")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Validate a proposed reservation against every business rule.
    """
    config, booking, repository = _load(config_file, data_file)
    start_at = _parse_moment(start, config.timezone)
    end_at = _parse_moment(end, config.timezone)

    try:
        exclude_id = repository.resolve_identity(exclude) if exclude is not None else None
        errors = booking.validate(service, start_at, end_at, exclude_id=exclude_id)
    except SlotbookerError as e:
        console.print(f"[bold red]Erreur:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if errors:
        _print_errors(errors)
        raise typer.Exit(1)

    console.print("[bold green]✓ Réservation valide.[/bold green]")


@app.command()
def book(
    service: Annotated[str, typer.Argument(help="Service (identifiant ou nom)")],
    start: Annotated[str, typer.Argument(help="Début (YYYY-MM-DD HH:mm)")],
    end: Annotated[str, typer.Argument(help="Fin (YYYY-MM-DD HH:mm)")],
    owner: Annotated[Optional[str], typer.Option("--owner", help="Titulaire de la réservation")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Validate and commit a reservation (dry run: the data file is not modified).
    """
    config, booking, _ = _load(config_file, data_file)
    start_at = _parse_moment(start, config.timezone)
    end_at = _parse_moment(end, config.timezone)

    try:
        result = booking.book(service, start_at, end_at, owner=owner)
    except SlotbookerError as e:
        console.print(f"[bold red]Erreur:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if not result.ok:
        _print_errors(result.errors)
        raise typer.Exit(1)

    reservation = result.reservation
    console.print(
        f"[bold green]✓ Réservation #{reservation.identity} confirmée:[/bold green] "
        f"{reservation.service_id}, {format_reservation(reservation.time_range)}"
    )


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbooker[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
