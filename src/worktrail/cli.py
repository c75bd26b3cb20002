import os
import sys
from datetime import date, datetime, timedelta
from typing import Optional
import typer
from sqlalchemy.exc import SQLAlchemyError
from worktrail.config import settings
from worktrail.domain.duration import Duration
from worktrail.domain.exceptions import ConfigurationError, WorktrailError
from worktrail.logging import logger, setup_logging

app = typer.Typer(no_args_is_help=True)

_DATE_FORMATS = ["%Y-%m-%d"]
_DATETIME_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M"]


@app.callback()
def main(
    ctx: typer.Context,
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More log output (repeatable)."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors."),
):
    """
    Work presence tracking and timesheet reports.
    """
    setup_logging(verbose, quiet)
    # doctor reports a bad zone itself; every other command needs a usable one.
    if ctx.invoked_subcommand != "doctor":
        try:
            settings.tzinfo
        except (KeyError, ValueError) as e:
            _fail(f"WORKTRAIL_TIMEZONE {settings.TIMEZONE!r} is not a known zone ({e})")


def _fail(message: str) -> None:
    logger.error(message)
    print(f"❌ {message}", file=sys.stderr)
    raise typer.Exit(code=1)


def _open_store() -> None:
    """Create the schema if needed. Called once, before the command touches the store."""
    from worktrail.infra.db.engine import init_db
    try:
        init_db()
    except WorktrailError as e:
        _fail(e.message)


def _report_range(start: Optional[datetime], end: Optional[datetime]) -> tuple[date, date]:
    end_day = end.date() if end else datetime.now(settings.tzinfo).date()
    start_day = start.date() if start else end_day - timedelta(days=settings.REPORT_DAYS - 1)
    if start_day > end_day:
        _fail(f"Start {start_day} is after end {end_day}")
    return start_day, end_day


@app.command(name="doctor")
def doctor():
    """
    Check system configuration and environment health.
    """
    logger.info("Running doctor check...")

    failures: list[str] = []
    passed = 0

    print("\n🩺 worktrail doctor\n")

    # ── Check 1: Environment / Interpreter ──────────────────────────────────
    print("[Environment]")
    print(f"  Python: {sys.version.split()[0]}")
    print(f"  Prefix: {sys.prefix}")
    passed += 1

    # ── Check 2: Timesheet policy ───────────────────────────────────────────
    print("\n[Configuration]")
    print(f"  DEFAULT_EXPECTED_SECONDS:    {Duration(settings.DEFAULT_EXPECTED_SECONDS).format_unsigned()}")
    try:
        print(f"  TIMEZONE:                    {settings.tzinfo or 'system local'}")
        passed += 1
    except (KeyError, ValueError) as e:
        print(f"  TIMEZONE:                    ❌ {settings.TIMEZONE!r} ({e})")
        failures.append(f"TIMEZONE {settings.TIMEZONE!r} is not a known zone")

    # ── Check 3: Toggl credentials ──────────────────────────────────────────
    if settings.toggl_credentials():
        print("  Toggl credentials:           ✅ Set")
        passed += 1
    else:
        print("  Toggl credentials:           ❌ Missing")
        failures.append("No Toggl credentials: set WORKTRAIL_TOGGL_API_TOKEN in .env")

    print(f"  Probes:                      {len(settings.PROBES)} configured")

    # ── Check 4: DB file / directory writability ────────────────────────────
    print("\n[Database]")
    data_dir = settings.data_dir
    db_file = settings.db_path
    if settings.DATABASE_URL:
        print(f"  DATABASE_URL                 ⚠️  Custom URL, file checks skipped")
    elif db_file.exists():
        if os.access(db_file, os.W_OK):
            print(f"  {db_file}          ✅ Exists and writable")
            passed += 1
        else:
            print(f"  {db_file}          ❌ Exists but NOT writable")
            failures.append(f"{db_file} exists but is not writable; check file permissions")
    elif data_dir.exists():
        if os.access(data_dir, os.W_OK):
            print(f"  {db_file}          ✅ Does not exist yet; {data_dir}/ is writable")
            passed += 1
        else:
            print(f"  {db_file}          ❌ {data_dir}/ is not writable")
            failures.append(f"{data_dir}/ is not writable; the database cannot be created")
    else:
        print(f"  {db_file}          ✅ {data_dir}/ will be created on first use")
        passed += 1

    # ── Summary ──────────────────────────────────────────────────────────────
    total = passed + len(failures)
    print(f"\n{'─' * 50}")
    if failures:
        print(f"Result: {passed}/{total} checks passed\n")
        for msg in failures:
            print(f"  ❌ {msg}")
        print()
        raise typer.Exit(code=1)
    else:
        print(f"Result: {passed}/{total} checks passed, all good ✅")
        print()


db_app = typer.Typer(help="Database management commands.")
app.add_typer(db_app, name="db")


@db_app.command("init")
def init():
    """Initialize the database tables."""
    _open_store()
    logger.info("Database initialized successfully.")
    print("✅ Database initialized.")


@db_app.command("clear")
def clear(yes: bool = typer.Option(False, "--yes", help="Do not ask for confirmation.")):
    """Delete the database file."""
    db_file = settings.db_path
    if settings.DATABASE_URL:
        _fail("db clear only works with the default SQLite file")
    if not db_file.exists():
        print("Nothing to clear.")
        return
    if not yes:
        typer.confirm(f"Delete {db_file}?", abort=True)
    logger.warning("Removing database %s", db_file)
    db_file.unlink()
    print("✅ Database removed.")


event_app = typer.Typer(help="Presence events.")
app.add_typer(event_app, name="event")


@event_app.command("add")
def event_add(
    name: str = typer.Argument(..., help="Location or activity name."),
    when: Optional[datetime] = typer.Option(
        None, "--date", "-d", formats=_DATETIME_FORMATS, help="Local time of the event (default: now).",
    ),
):
    """Record a presence event."""
    from worktrail.infra.db.uow import UnitOfWork
    from worktrail.services.events_service import EventsService
    _open_store()
    try:
        with UnitOfWork() as uow:
            EventsService(uow, settings.tzinfo).add_event(name, when)
    except (WorktrailError, SQLAlchemyError) as e:
        _fail(f"Could not add event: {e}")
    print(f"✅ Recorded {name}")


@event_app.command("list")
def event_list():
    """List all recorded events."""
    from worktrail.domain.clock import as_utc
    from worktrail.infra.db.uow import UnitOfWork
    from worktrail.services.events_service import EventsService
    _open_store()
    tz = settings.tzinfo
    with UnitOfWork() as uow:
        events = EventsService(uow, tz).list_events()
        if not events:
            print("No events recorded.")
            return
        for e in events:
            print(f"{as_utc(e.time).astimezone(tz):%Y-%m-%d %H:%M:%S}  {e.name}")


@event_app.command("export")
def event_export():
    """Print all events as JSON."""
    from worktrail.infra.db.uow import UnitOfWork
    from worktrail.services.events_service import EventsService
    _open_store()
    with UnitOfWork() as uow:
        print(EventsService(uow, settings.tzinfo).export_events())


@event_app.command("import")
def event_import(
    source: typer.FileText = typer.Argument("-", help="JSON file from `event export` (default: stdin)."),
):
    """Import events from a JSON export. Existing (date, name) pairs are replaced."""
    from worktrail.infra.db.uow import UnitOfWork
    from worktrail.services.events_service import EventsService
    _open_store()
    try:
        with UnitOfWork() as uow:
            summary, report = EventsService(uow, settings.tzinfo).import_events(source.read())
    except (WorktrailError, SQLAlchemyError) as e:
        _fail(f"Import failed: {e}")
    print(f"Imported {summary.imported}/{summary.received} events "
          f"({summary.invalid} invalid, {summary.failed} failed)")
    if not report.ok:
        for failure in report.failures:
            print(f"  ❌ {failure}")
        raise typer.Exit(code=1)


@app.command("detect")
def detect():
    """Run configured probes and record an event for each one that succeeds."""
    from worktrail.infra.db.uow import UnitOfWork
    from worktrail.services.detect_service import DetectService
    from worktrail.services.events_service import EventsService
    if not settings.PROBES:
        print("No probes configured (WORKTRAIL_PROBES).")
        return
    _open_store()
    try:
        with UnitOfWork() as uow:
            detected = DetectService(EventsService(uow, settings.tzinfo)).detect(settings.PROBES)
    except (WorktrailError, SQLAlchemyError) as e:
        _fail(f"Detection failed: {e}")
    for name in detected:
        print(f"Detected {name}")


probe_app = typer.Typer(help="Presence probes.")
app.add_typer(probe_app, name="probe")


@probe_app.command("list")
def probe_list():
    """Show configured probes."""
    if not settings.PROBES:
        print("No probes configured.")
        return
    for name, command in settings.PROBES.items():
        print(f"{name}: {command}")


toggl_app = typer.Typer(help="Toggl Track import.")
app.add_typer(toggl_app, name="toggl")


def _toggl_client():
    from worktrail.infra.toggl.client import TogglClient
    credentials = settings.toggl_credentials()
    if credentials is None:
        raise ConfigurationError("There is no Toggl access configured (WORKTRAIL_TOGGL_API_TOKEN).")
    username, password = credentials
    return TogglClient(
        username, password,
        base_url=settings.TOGGL_BASE_URL,
        timeout=settings.TOGGL_TIMEOUT_SECONDS,
    )


def _sync(start: date, end: date):
    from worktrail.infra.db.uow import UnitOfWork
    from worktrail.services.toggl_service import TogglService
    with _toggl_client() as client, UnitOfWork() as uow:
        return TogglService(uow, client, settings.tzinfo).sync(start, end)


@toggl_app.command("sync")
def toggl_sync(
    start: Optional[datetime] = typer.Option(None, formats=_DATE_FORMATS, help="First day (default: sync window)."),
    end: Optional[datetime] = typer.Option(None, formats=_DATE_FORMATS, help="Last day (default: today)."),
):
    """Import time entries from Toggl."""
    end_day = end.date() if end else datetime.now(settings.tzinfo).date()
    start_day = start.date() if start else end_day - timedelta(weeks=settings.TOGGL_SYNC_WEEKS)
    _open_store()
    try:
        result = _sync(start_day, end_day)
    except (WorktrailError, SQLAlchemyError) as e:
        _fail(f"Sync failed: {e}")
    print(f"✅ Synced {result.report.written} entries {result.start} → {result.end} "
          f"({result.rejected} rejected, {len(result.report.failures)} failed)")


timesheet_app = typer.Typer(help="Timesheet reports.")
app.add_typer(timesheet_app, name="timesheet")


def _build_report(start: date, end: date, fill: bool):
    from worktrail.infra.db.uow import UnitOfWork
    from worktrail.services.timesheet_service import TimesheetService
    with UnitOfWork() as uow:
        return TimesheetService(uow, settings.tzinfo).build_report(
            start, end,
            default_expected=Duration(settings.DEFAULT_EXPECTED_SECONDS),
            fill=fill,
        )


def _print_timesheet(sheet) -> None:
    header = f"{'Date':<14}{'Start':>9}{'End':>9}{'Actual':>11}{'Expected':>11}{'Delta':>11}{'Saldo':>12}  Locations"
    print(header)
    print("─" * len(header))
    for row in sheet.rows:
        active = bool(row.actual_duration or row.expected_duration)
        start = row.normalized_start_of_business.strftime("%H:%M") if active else ""
        end = row.normalized_end_of_business.strftime("%H:%M") if active else ""
        actual = row.actual_duration.format_unsigned() if row.actual_duration else ""
        expected = row.expected_duration.format_unsigned() if row.expected_duration else ""
        delta = row.delta.format_signed() if row.delta else ""
        print(f"{row.date:%a %Y-%m-%d}{start:>9}{end:>9}{actual:>11}{expected:>11}{delta:>11}"
              f"{row.saldo.format_signed():>12}  {row.locations}")
    print("─" * len(header))
    print(f"{'Total':<32}{sheet.total_actual.format_unsigned():>11}"
          f"{sheet.total_expected.format_unsigned():>11}{'':>11}{sheet.saldo.format_signed():>12}")
    if sheet.skipped_rows:
        print(f"⚠️  {sheet.skipped_rows} day(s) could not be read and are missing")


@timesheet_app.command("show")
def timesheet_show(
    start: Optional[datetime] = typer.Option(None, formats=_DATE_FORMATS, help="First day shown."),
    end: Optional[datetime] = typer.Option(None, formats=_DATE_FORMATS, help="Last day shown (default: today)."),
    compact: bool = typer.Option(False, "--compact", help="Only days with time entries."),
    sync: Optional[bool] = typer.Option(
        None, "--sync/--no-sync", help="Import from Toggl first (default: when configured).",
    ),
):
    """Show the daily timesheet."""
    start_day, end_day = _report_range(start, end)
    _open_store()
    if sync is None:
        sync = settings.toggl_credentials() is not None
    try:
        if sync:
            today = datetime.now(settings.tzinfo).date()
            _sync(today - timedelta(weeks=settings.TOGGL_SYNC_WEEKS), today)
        sheet = _build_report(start_day, end_day, fill=not compact)
    except (WorktrailError, SQLAlchemyError) as e:
        _fail(f"Could not build timesheet: {e}")
    if not sheet.rows:
        print(f"No time entries between {start_day} and {end_day}.")
        return
    _print_timesheet(sheet)


@timesheet_app.command("export")
def timesheet_export(
    start: Optional[datetime] = typer.Option(None, formats=_DATE_FORMATS, help="First day."),
    end: Optional[datetime] = typer.Option(None, formats=_DATE_FORMATS, help="Last day (default: today)."),
):
    """Print the gap-filled timesheet as JSON (durations in seconds)."""
    from pydantic import TypeAdapter
    from worktrail.schemas.timesheet import TimeSheetRow
    start_day, end_day = _report_range(start, end)
    _open_store()
    try:
        sheet = _build_report(start_day, end_day, fill=True)
    except (WorktrailError, SQLAlchemyError) as e:
        _fail(f"Could not build timesheet: {e}")
    print(TypeAdapter(list[TimeSheetRow]).dump_json(sheet.rows, indent=2).decode())


@timesheet_app.command("expect")
def timesheet_expect(
    day: datetime = typer.Argument(..., formats=_DATE_FORMATS, help="Date (YYYY-MM-DD)."),
    seconds: int = typer.Argument(..., help="Expected work in seconds, e.g. 0 for a holiday."),
):
    """Set the expected work duration for one date."""
    from worktrail.infra.db.uow import UnitOfWork
    from worktrail.services.timesheet_service import TimesheetService
    _open_store()
    try:
        with UnitOfWork() as uow:
            TimesheetService(uow, settings.tzinfo).set_expected(day.date(), Duration(seconds))
    except (WorktrailError, SQLAlchemyError) as e:
        _fail(f"Could not set expected duration: {e}")
    print(f"✅ Expecting {Duration(seconds).format_unsigned()} on {day.date()}")


if __name__ == "__main__":
    app()
