"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Any, Coroutine, Dict, List, Optional
from urllib.parse import parse_qsl, urlparse

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.appointment_store import JsonAppointmentStore
from ..adapters.doctor_directory import JsonDoctorDirectory
from ..adapters.rating_store import JsonRatingStore
from ..adapters.rest_client import RestAppointmentClient
from ..adapters.session_auth import SessionAuthProvider
from ..config import AppConfig, get_default_config_path
from ..domain import calendar_state
from ..domain.availability_resolver import AvailabilityResolver
from ..domain.calendar_state import CalendarSelection
from ..domain.exceptions import (
    BookingError,
    DateInPast,
    DocslotsError,
    PersistenceError,
    ReviewError,
    SlotNotOffered,
)
from ..domain.models import Doctor
from ..services.booking import BookingConfirmed, BookingOutcome, DeferredLogin
from ..services.scheduler import SchedulerService

app = typer.Typer(
    name="docslots",
    help="Buscar horarios disponibles y agendar citas médicas",
    add_completion=False,
)

console = Console()

WEEKDAY_HEADERS = ["Lun", "Mar", "Mié", "Jue", "Vie", "Sáb", "Dom"]

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")] = False,
):
    """
    docslots - doctor availability and appointment booking.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    try:
        return AppConfig.load_from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _build_auth(config: AppConfig) -> SessionAuthProvider:
    return SessionAuthProvider(
        login_base_url=config.auth.login_url,
        session_file=config.auth.session_file,
        use_keyring=config.auth.use_keyring,
    )


def _build_scheduler(config: AppConfig) -> SchedulerService:
    try:
        return _create_scheduler(config)
    except DocslotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _create_scheduler(config: AppConfig) -> SchedulerService:
    if config.api.base_url:
        store = RestAppointmentClient(
            base_url=config.api.base_url,
            token=config.api.token,
            timeout=config.api.timeout_seconds,
        )
    else:
        store = JsonAppointmentStore(config.data.appointments_file)

    return SchedulerService(
        doctors=JsonDoctorDirectory(config.data.doctors_file),
        store=store,
        auth=_build_auth(config),
        ratings=JsonRatingStore(config.data.ratings_file),
        interval_minutes=config.scheduler.interval_minutes,
        timezone=config.timezone,
    )


def _get_doctor(scheduler: SchedulerService, slug: str) -> Doctor:
    try:
        return scheduler.get_doctor(slug)
    except DocslotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _parse_month(value: str) -> pendulum.Date:
    try:
        return pendulum.from_format(value, "YYYY-MM").date()
    except ValueError:
        console.print(f"[red]Mes inválido: {value} (formato YYYY-MM)[/red]")
        raise typer.Exit(1)


def _render_month(
    selection: CalendarSelection,
    resolver: AvailabilityResolver,
    today: pendulum.Date,
    locale: str,
) -> Table:
    month = selection.displayed_month
    table = Table(
        title=month.format("MMMM YYYY", locale=locale).capitalize(),
        show_header=True,
        header_style="bold cyan",
    )
    for header in WEEKDAY_HEADERS:
        table.add_column(header, justify="center")

    open_weekdays = set(resolver.available_weekdays())

    for week in calendar_state.month_grid(month):
        cells = []
        for day in week:
            if day is None:
                cells.append("")
            elif day == selection.selected_date:
                cells.append(f"[reverse]{day.day}[/reverse]")
            elif day < today:
                cells.append(f"[dim]{day.day}[/dim]")
            elif day.weekday() in open_weekdays:
                cells.append(f"[bold green]{day.day}[/bold green]")
            else:
                cells.append(str(day.day))
        table.add_row(*cells)

    return table


def _print_slots(slots, selected: Optional[str] = None) -> None:
    if not slots:
        console.print("[yellow]No hay horarios disponibles para este día.[/yellow]")
        return

    rendered = [
        f"[reverse]{slot}[/reverse]" if slot == selected else slot
        for slot in slots
    ]
    console.print("  " + "  ".join(rendered))


@app.command()
def doctors(
    specialty: Annotated[Optional[str], typer.Option("--specialty", help="Filter by specialty")] = None,
    city: Annotated[Optional[str], typer.Option("--city", help="Filter by city")] = None,
    config_file: ConfigOption = None,
):
    """
    List doctors that currently accept bookings.
    """
    config = _load_config(config_file)
    scheduler = _build_scheduler(config)

    results = scheduler.search_doctors(specialty=specialty, city=city)
    if not results:
        console.print("[yellow]No se encontraron doctores.[/yellow]")
        return

    table = Table(title="Doctores", show_header=True, header_style="bold cyan")
    table.add_column("Slug", style="bold yellow")
    table.add_column("Nombre")
    table.add_column("Especialidad")
    table.add_column("Ciudad")
    table.add_column("Costo", justify="right")

    for doctor in results:
        table.add_row(doctor.slug, doctor.name, doctor.specialty, doctor.city, f"${doctor.cost:.2f}")

    console.print()
    console.print(table)
    console.print()


@app.command()
def calendar(
    slug: Annotated[str, typer.Argument(help="Doctor slug or id")],
    month: Annotated[Optional[str], typer.Option("--month", help="Month to show (YYYY-MM)")] = None,
    date: Annotated[Optional[str], typer.Option("--date", help="Pre-selected date (YYYY-MM-DD)")] = None,
    time: Annotated[Optional[str], typer.Option("--time", help="Pre-selected time (HH:MM)")] = None,
    config_file: ConfigOption = None,
):
    """
    Show a month calendar with the doctor's open days.

    --date and --time behave like the doctor page link parameters: malformed
    values are ignored.
    """
    config = _load_config(config_file)
    scheduler = _build_scheduler(config)
    doctor = _get_doctor(scheduler, slug)

    now = pendulum.now(config.timezone)
    today = now.date()

    params: Dict[str, str] = {}
    if date:
        params["date"] = date
    if time:
        params["time"] = time
    selection = calendar_state.from_deep_link(params, today)

    if month:
        target = _parse_month(month)
        last_allowed = today.start_of("month").add(months=config.scheduler.months_ahead)
        if target > last_allowed:
            console.print(f"[yellow]Solo se pueden ver {config.scheduler.months_ahead} meses hacia adelante.[/yellow]")
            target = last_allowed
        while selection.displayed_month < target.start_of("month"):
            selection = calendar_state.next_month(selection)
        while selection.displayed_month > target.start_of("month"):
            selection = calendar_state.prev_month(selection)

    resolver = AvailabilityResolver(doctor.availability, config.scheduler.interval_minutes)

    console.print()
    console.print(f"[bold cyan]{doctor.name}[/bold cyan] · {doctor.specialty} · ${doctor.cost:.2f}")
    console.print(_render_month(selection, resolver, today, config.locale))

    if selection.selected_date is not None:
        slots = scheduler.bookable_slots(doctor, selection.selected_date, now)
        console.print(f"\n[bold]Horarios para {selection.selected_date.format('YYYY-MM-DD')}:[/bold]")
        _print_slots(slots, selection.selected_slot)
    else:
        console.print("\nSelecciona una fecha (--date) para ver los horarios.")
    console.print()


@app.command()
def slots(
    slug: Annotated[str, typer.Argument(help="Doctor slug or id")],
    date: Annotated[str, typer.Option("--date", help="Date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
):
    """
    List the bookable times of a doctor on a date.
    """
    config = _load_config(config_file)
    scheduler = _build_scheduler(config)
    doctor = _get_doctor(scheduler, slug)

    day = calendar_state.parse_date_param(date)
    if day is None:
        console.print(f"[red]Fecha inválida: {date} (formato YYYY-MM-DD)[/red]")
        raise typer.Exit(1)

    _print_slots(scheduler.bookable_slots(doctor, day, pendulum.now(config.timezone)))


def _submit(
    booking: Coroutine[Any, Any, BookingOutcome],
    doctor: Doctor,
    locale: str,
    offered_slots: List[str],
) -> None:
    try:
        outcome = asyncio.run(booking)
    except DateInPast:
        console.print("[bold red]No se pudo agendar:[/bold red] La fecha ya pasó.")
        raise typer.Exit(1)
    except SlotNotOffered:
        console.print("[bold red]No se pudo agendar:[/bold red] Ese horario no está disponible.")
        _print_slots(offered_slots)
        raise typer.Exit(1)
    except BookingError as e:
        console.print(f"[bold red]No se pudo agendar:[/bold red] {e}")
        raise typer.Exit(1)
    except PersistenceError as e:
        logging.getLogger(__name__).debug("Booking failed: %s", e)
        console.print(
            "[bold red]Error al agendar:[/bold red] Hubo un problema al crear tu cita. Intenta de nuevo."
        )
        raise typer.Exit(1)

    if isinstance(outcome, DeferredLogin):
        console.print("[yellow]Inicia sesión para continuar con la reserva:[/yellow]")
        console.print(f"  {outcome.login_url}")
        console.print(f"[dim]Luego ejecuta: docslots book {doctor.slug} --callback-url '{outcome.callback_url}'[/dim]")
        return

    if isinstance(outcome, BookingConfirmed):
        appointment = outcome.appointment
        console.print(
            f"[bold green]✓ ¡Cita agendada![/bold green] Tu cita con {doctor.name} "
            f"ha sido confirmada para el "
            f"{appointment.start_time.format('LL', locale=locale)} "
            f"a las {appointment.start_time.format('HH:mm')}."
        )


@app.command()
def book(
    slug: Annotated[str, typer.Argument(help="Doctor slug or id")],
    date: Annotated[Optional[str], typer.Option("--date", help="Date (YYYY-MM-DD)")] = None,
    time: Annotated[Optional[str], typer.Option("--time", help="Time (HH:MM)")] = None,
    callback_url: Annotated[
        Optional[str],
        typer.Option("--callback-url", help="Resume a booking from the URL given at login"),
    ] = None,
    config_file: ConfigOption = None,
):
    """
    Book an appointment with a doctor.

    Examples:

        docslots book dra-ruiz --date 2026-11-02 --time 09:30

        # After signing in
        docslots book dra-ruiz --callback-url '/doctors/dra-ruiz?date=2026-11-02&time=09:30'
    """
    config = _load_config(config_file)
    scheduler = _build_scheduler(config)
    doctor = _get_doctor(scheduler, slug)

    now = pendulum.now(config.timezone)

    if callback_url:
        params = dict(parse_qsl(urlparse(callback_url).query))
        day = calendar_state.parse_date_param(params.get("date"))
        booking = scheduler.resume_after_login(params, doctor, now)
    else:
        day = calendar_state.parse_date_param(date)
        booking = scheduler.book_at(doctor, day, time, now)

    offered = scheduler.bookable_slots(doctor, day, now) if day is not None else []
    _submit(booking, doctor, config.locale, offered)


@app.command()
def login(
    user_id: Annotated[str, typer.Argument(help="Your user id")],
    config_file: ConfigOption = None,
):
    """
    Store the signed-in user for later bookings.
    """
    config = _load_config(config_file)
    auth = _build_auth(config)
    try:
        auth.login(user_id)
    except DocslotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if auth.insecure_storage_warning:
        console.print(f"[yellow]⚠ {auth.insecure_storage_warning}[/yellow]")
    console.print(f"[green]✓ Sesión iniciada como {user_id.strip()}[/green]")


@app.command()
def logout(config_file: ConfigOption = None):
    """
    Remove the stored session.
    """
    config = _load_config(config_file)
    _build_auth(config).logout()
    console.print("[green]✓ Sesión cerrada.[/green]")


@app.command()
def whoami(config_file: ConfigOption = None):
    """
    Show the signed-in user.
    """
    config = _load_config(config_file)
    user = _build_auth(config).current_user()
    if not user.is_authenticated:
        console.print("[yellow]No has iniciado sesión.[/yellow]")
        raise typer.Exit(1)
    console.print(user.id)


@app.command()
def appointments(config_file: ConfigOption = None):
    """
    List the signed-in user's appointments.
    """
    config = _load_config(config_file)
    scheduler = _build_scheduler(config)
    user = _build_auth(config).current_user()
    if not user.is_authenticated:
        console.print("[yellow]No has iniciado sesión.[/yellow]")
        raise typer.Exit(1)

    try:
        booked = asyncio.run(scheduler.patient_appointments(user.id))
    except PersistenceError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not booked:
        console.print("[yellow]No tienes citas agendadas.[/yellow]")
        return

    for appointment in booked:
        console.print(f"  {appointment.format_display()}  [dim]{appointment.doctor_id}[/dim]")


@app.command()
def reviews(
    slug: Annotated[str, typer.Argument(help="Doctor slug or id")],
    config_file: ConfigOption = None,
):
    """
    Show a doctor's rating and latest reviews.
    """
    config = _load_config(config_file)
    scheduler = _build_scheduler(config)
    doctor = _get_doctor(scheduler, slug)

    try:
        summary = asyncio.run(scheduler.rating_summary(doctor))
        recent = asyncio.run(scheduler.recent_ratings(doctor))
        eligible = asyncio.run(scheduler.can_review(doctor))
    except DocslotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"\n[bold cyan]{doctor.name}[/bold cyan] ★ {summary.average:.1f} ({summary.count} reseñas)\n")
    for rating in recent:
        when = rating.created_at.format("D MMM YYYY", locale=config.locale) if rating.created_at else ""
        console.print(f"  {'★' * rating.rating}{'☆' * (5 - rating.rating)}  {escape(rating.comment)} [dim]{when}[/dim]")

    if eligible:
        console.print(f"\n[green]Puedes dejar una reseña: docslots review {doctor.slug} --rating 5 --comment '...'[/green]")
    console.print()


@app.command()
def review(
    slug: Annotated[str, typer.Argument(help="Doctor slug or id")],
    rating: Annotated[int, typer.Option("--rating", "-r", help="Stars from 1 to 5")],
    comment: Annotated[str, typer.Option("--comment", help="Your experience with the doctor")],
    config_file: ConfigOption = None,
):
    """
    Rate a doctor after a completed appointment.
    """
    config = _load_config(config_file)
    scheduler = _build_scheduler(config)
    doctor = _get_doctor(scheduler, slug)

    try:
        asyncio.run(scheduler.submit_review(doctor, rating, comment))
    except ReviewError as e:
        console.print(f"[bold red]No se puede enviar la reseña:[/bold red] {e}")
        raise typer.Exit(1)
    except DocslotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print("[green]✓ ¡Comentario enviado![/green]")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]docslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
