"""CLI-интерфейс для сверки и синхронизации."""
from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from asana_youtrack_sync.clients import AsanaClient, YouTrackAPIError, YouTrackClient
from asana_youtrack_sync.config import AppConfig
from asana_youtrack_sync.errors import ActionError, ConfigurationError, SnapshotFetchError, StorageError
from asana_youtrack_sync.models import ClassificationResult, SuppressionScope
from asana_youtrack_sync.services.suppression_store import SuppressionStore
from asana_youtrack_sync.services.sync import SyncAction, SyncRequest, SyncService

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Временный игнор живёт в памяти процесса, одиночная команда его сразу теряет
TEMPORARY_SCOPE_HINT = "временный игнор действует только внутри сессии: используйте --forever или команду interactive"

INTERACTIVE_HELP = (
    "Команды: analyze [колонка ...] | sync [GID ...] | create-missing | ignore GID | "
    "ignore-forever GID | unignore GID | unignore-forever GID | list | help | quit"
)
INTERACTIVE_SUPPRESSION = {
    "ignore": (True, SuppressionScope.TEMPORARY),
    "ignore-forever": (True, SuppressionScope.PERMANENT),
    "unignore": (False, SuppressionScope.TEMPORARY),
    "unignore-forever": (False, SuppressionScope.PERMANENT),
}

app = typer.Typer(help="Синхронизация статусов задач Asana → YouTrack")


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT)


def echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def fail(exc: Exception) -> NoReturn:
    typer.echo(f"Ошибка: {exc}", err=True)
    raise typer.Exit(code=1)


def build_service(config_path: Path, *, dry_run_override: Optional[bool] = None) -> SyncService:
    try:
        config = AppConfig.load(config_path)
        if dry_run_override is not None:
            config.sync.dry_run = dry_run_override
        config.ensure_runtime_dirs()
        store = SuppressionStore(config.ignored_path)
    except ConfigurationError as exc:
        fail(exc)
    asana = AsanaClient(config.asana, timeout=config.sync.request_timeout)
    youtrack = YouTrackClient(config.youtrack, timeout=config.sync.request_timeout)
    return SyncService(config, asana, youtrack, store)


ConfigOption = typer.Option(Path("config.yaml"), "--config", "-c", help="Путь к YAML конфигурации")
VerbosityOption = typer.Option(0, "--verbose", "-v", count=True, help="Уровень логирования")
DryRunOption = typer.Option(
    None,
    "--dry-run/--no-dry-run",
    help="Не менять YouTrack (по умолчанию берётся из конфигурации)",
)


@app.command("analyze")
def analyze(
    groups: Optional[List[str]] = typer.Option(None, "--group", "-g", help="Колонки Asana (подстрока, можно несколько)"),
    config_path: Path = ConfigOption,
    verbosity: int = VerbosityOption,
) -> None:
    """Сверяет задачи Asana и YouTrack и выводит результат по корзинам."""
    configure_logging(verbosity)
    service = build_service(config_path)
    try:
        result = service.analyze(groups)
    except SnapshotFetchError as exc:
        fail(exc)
    echo_json(result.to_dict())


@app.command("create-missing")
def create_missing(
    config_path: Path = ConfigOption,
    verbosity: int = VerbosityOption,
    dry_run: Optional[bool] = DryRunOption,
) -> None:
    """Создаёт в YouTrack задачи, которых там ещё нет."""
    configure_logging(verbosity)
    service = build_service(config_path, dry_run_override=dry_run)
    try:
        report = service.create_missing()
    except SnapshotFetchError as exc:
        fail(exc)
    echo_json(report.to_dict())


@app.command("create-single")
def create_single(
    task_id: str = typer.Argument(..., help="GID задачи Asana"),
    config_path: Path = ConfigOption,
    verbosity: int = VerbosityOption,
    dry_run: Optional[bool] = DryRunOption,
) -> None:
    """Создаёт задачу YouTrack для одной задачи Asana."""
    configure_logging(verbosity)
    service = build_service(config_path, dry_run_override=dry_run)
    try:
        outcome = service.create_single(task_id)
    except (SnapshotFetchError, ActionError) as exc:
        fail(exc)
    echo_json(asdict(outcome))


@app.command("sync")
def sync(
    ticket_ids: Optional[List[str]] = typer.Option(None, "--ticket", "-t", help="GID задач; по умолчанию все расхождения"),
    action: SyncAction = typer.Option(SyncAction.SYNC, "--action", "-a", help="sync, ignore_temp или ignore_forever"),
    config_path: Path = ConfigOption,
    verbosity: int = VerbosityOption,
    dry_run: Optional[bool] = DryRunOption,
) -> None:
    """Синхронизирует статусы расходящихся задач."""
    configure_logging(verbosity)
    if action is SyncAction.IGNORE_TEMP:
        fail(ValueError(TEMPORARY_SCOPE_HINT))
    service = build_service(config_path, dry_run_override=dry_run)
    try:
        if action is SyncAction.SYNC:
            report = service.sync_mismatched(ticket_ids or None)
        else:
            report = service.process_sync_requests([SyncRequest(ticket_id, action) for ticket_id in ticket_ids or []])
    except SnapshotFetchError as exc:
        fail(exc)
    echo_json(report.to_dict())


@app.command("ignore")
def ignore(
    action: str = typer.Argument("list", help="add, remove или list"),
    ticket_id: Optional[str] = typer.Argument(None, help="GID задачи Asana"),
    forever: bool = typer.Option(False, "--forever", help="Постоянный игнор (сохраняется в файл)"),
    config_path: Path = ConfigOption,
    verbosity: int = VerbosityOption,
) -> None:
    """Управляет постоянным списком игнорируемых задач."""
    configure_logging(verbosity)
    if action not in ("add", "remove", "list"):
        fail(ValueError(f"неизвестное действие '{action}'"))
    if action != "list":
        if not ticket_id:
            fail(ValueError("нужно указать GID задачи"))
        if not forever:
            fail(ValueError(TEMPORARY_SCOPE_HINT))
    service = build_service(config_path)
    try:
        if action == "add":
            service.suppress(ticket_id, SuppressionScope.PERMANENT)
        elif action == "remove":
            service.unsuppress(ticket_id, SuppressionScope.PERMANENT)
    except StorageError as exc:
        fail(exc)
    echo_json(service.suppression_state())


# region interactive
def _print_analysis(result: ClassificationResult) -> None:
    echo_json(
        {
            "summary": result.counts(),
            "mismatched": [ticket.source.id for ticket in result.mismatched],
            "missing_in_target": [record.id for record in result.missing_in_target],
            "suppressed": list(result.suppressed),
            "alerts": [alert.message for alert in result.alerts],
        }
    )


def run_interactive_command(service: SyncService, command: str, args: List[str]) -> bool:
    """Выполняет одну команду сессии. Возвращает False, если сессию пора завершить."""
    if command in ("quit", "exit", "q"):
        return False
    if command == "analyze":
        _print_analysis(service.analyze(args or None))
    elif command == "sync":
        echo_json(service.sync_mismatched(args or None).to_dict())
    elif command == "create-missing":
        echo_json(service.create_missing().to_dict())
    elif command in INTERACTIVE_SUPPRESSION:
        if not args:
            raise ValueError("нужно указать GID задачи")
        add, scope = INTERACTIVE_SUPPRESSION[command]
        for ticket_id in args:
            if add:
                service.suppress(ticket_id, scope)
            else:
                service.unsuppress(ticket_id, scope)
        echo_json(service.suppression_state())
    elif command == "list":
        echo_json(service.suppression_state())
    elif command == "help":
        typer.echo(INTERACTIVE_HELP)
    else:
        raise ValueError(f"неизвестная команда '{command}', введите help")
    return True


@app.command("interactive")
def interactive(
    config_path: Path = ConfigOption,
    verbosity: int = VerbosityOption,
    dry_run: Optional[bool] = DryRunOption,
) -> None:
    """Сессия сверки: временный игнор действует до выхода из неё."""
    configure_logging(verbosity)
    service = build_service(config_path, dry_run_override=dry_run)
    typer.echo(INTERACTIVE_HELP)
    while True:
        try:
            line = typer.prompt("Команда", prompt_suffix="> ")
        except typer.Abort:
            break
        parts = line.split()
        if not parts:
            continue
        try:
            if not run_interactive_command(service, parts[0].lower(), parts[1:]):
                break
        except (SnapshotFetchError, StorageError, ValueError) as exc:
            typer.echo(f"Ошибка: {exc}", err=True)


# endregion


@app.command("status")
def status(
    config_path: Path = ConfigOption,
    verbosity: int = VerbosityOption,
) -> None:
    """Показывает текущую конфигурацию и состояние игнора."""
    configure_logging(verbosity)
    echo_json(build_service(config_path).status())


@app.command("verify")
def verify(
    config_path: Path = ConfigOption,
    verbosity: int = VerbosityOption,
) -> None:
    """Проверяет соединение с API и ключ проекта YouTrack."""
    configure_logging(verbosity)
    service = build_service(config_path)
    try:
        service.fetch_source_snapshot()
        project = service.youtrack.find_project()
    except (SnapshotFetchError, YouTrackAPIError) as exc:
        fail(exc)
    if project is None:
        fail(ConfigurationError("проект YouTrack не найден, проверьте youtrack.project_id"))
    if project.get("shortName") != service.youtrack.project_id:
        fail(ConfigurationError(f"укажите youtrack.project_id: {project.get('shortName')}"))
    typer.echo("Соединение успешно")


if __name__ == "__main__":
    app()
