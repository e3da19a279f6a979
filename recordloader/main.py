from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable

import typer
import yaml

from recordloader.common.runtime import generate_run_id, getDurationMs
from recordloader.config import Settings, loadSettings
from recordloader.domain.exceptions import BadConfigError, InvalidIdentifierError, RecordMissingError
from recordloader.factory import LoaderFactory
from recordloader.infra.http.ils_api_client import ApiError
from recordloader.loggingSetup import closeCommandLogger, createCommandLogger, logEvent
from recordloader.usecases.record_loader import RecordLoader

app = typer.Typer(no_args_is_help=True, add_completion=False)


def ensureDir(path: str) -> None:
    """
    Назначение:
        Создаёт каталог, если он отсутствует.
    """
    Path(path).mkdir(parents=True, exist_ok=True)


def recordToDict(record: Any) -> dict[str, Any]:
    """
    Назначение:
        Сериализация драйвера записи для вывода в stdout.
    """
    to_dict = getattr(record, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return {"source": record.get_source_identifier(), "id": record.get_unique_id()}


def readParamsFile(paramsFile: str | None) -> dict[str, dict] | None:
    """
    Назначение:
        Читает YAML с параметрами backend по источникам (source -> mapping).

    Поведение:
        - Нет файла/не mapping -> exit code 2.
    """
    if not paramsFile:
        return None
    p = Path(paramsFile)
    if not p.exists() or not p.is_file():
        typer.echo(f"ERROR: params file not found: {paramsFile}", err=True)
        raise typer.Exit(code=2)
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
        typer.echo("ERROR: params file must map source names to parameter mappings", err=True)
        raise typer.Exit(code=2)
    return data


def runCommand(
    ctx: typer.Context,
    commandName: str,
    runner: Callable[[logging.Logger], int],
) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - создаёт логгер + файл лога
        - маппит ошибки загрузчика в exit code
        - пишет длительность в лог в finally

    Поведение:
        - RecordMissingError -> exit code 1.
        - InvalidIdentifierError / BadConfigError / ApiError / ValueError -> exit code 2.
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]

    startMonotonic = time.monotonic()
    logger, logFilePath = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )

    exitCode = 0
    try:
        logEvent(logger, logging.INFO, runId, "core", f"Command started sources={ctx.obj['sources']}")
        exitCode = runner(logger)
    except RecordMissingError as exc:
        logEvent(logger, logging.ERROR, runId, "loader", exc.describe())
        typer.echo(f"ERROR: {exc}", err=True)
        exitCode = 1
    except InvalidIdentifierError as exc:
        logEvent(logger, logging.ERROR, runId, "loader", exc.describe())
        typer.echo(f"ERROR: invalid record request: {exc}", err=True)
        exitCode = 2
    except BadConfigError as exc:
        logEvent(logger, logging.ERROR, runId, "config", exc.describe())
        typer.echo(f"ERROR: bad configuration: {exc}", err=True)
        exitCode = 2
    except ApiError as exc:
        logEvent(logger, logging.ERROR, runId, "api", f"API failure {exc.describe()}")
        typer.echo(f"ERROR: backend failure ({exc.code}): {exc}", err=True)
        exitCode = 2
    except ValueError as exc:
        logEvent(logger, logging.ERROR, runId, "core", str(exc))
        typer.echo(f"ERROR: {exc}", err=True)
        exitCode = 2
    finally:
        durationMs = getDurationMs(startMonotonic, time.monotonic())
        logEvent(
            logger,
            logging.INFO,
            runId,
            "core",
            f"Command finished exit_code={exitCode} duration_ms={durationMs} log_file={logFilePath}",
        )
        closeCommandLogger(logger)

    if exitCode:
        raise typer.Exit(code=exitCode)


def createLoader(ctx: typer.Context, logger: logging.Logger, apiTransport=None) -> RecordLoader:
    factory = LoaderFactory(
        ctx.obj["settings"],
        logger=logger,
        run_id=ctx.obj["runId"],
        transport=apiTransport,
    )
    return factory.create_record_loader()


def runLoadCommand(
    ctx: typer.Context,
    recordId: str,
    source: str | None,
    tolerateMissing: bool,
    apiTransport=None,
) -> None:
    def execute(logger: logging.Logger) -> int:
        loader = createLoader(ctx, logger, apiTransport)
        record = loader.load(recordId, source, tolerate_missing=tolerateMissing)
        typer.echo(json.dumps(recordToDict(record), ensure_ascii=False, indent=2))
        return 0

    runCommand(ctx, "load", execute)


def runLoadBatchCommand(
    ctx: typer.Context,
    requests: list[str],
    tolerateMissing: bool,
    paramsFile: str | None,
    apiTransport=None,
) -> None:
    paramsBySource = readParamsFile(paramsFile)

    def execute(logger: logging.Logger) -> int:
        loader = createLoader(ctx, logger, apiTransport)
        records = loader.load_batch(requests, tolerate_missing=tolerateMissing, params_by_source=paramsBySource)
        typer.echo(json.dumps([recordToDict(r) for r in records], ensure_ascii=False, indent=2))
        return 0

    runCommand(ctx, "load-batch", execute)


@app.callback()
def root(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to YAML config"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (generated if omitted)"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for log files"),
    logLevel: str | None = typer.Option(None, "--log-level", help="ERROR|WARN|INFO|DEBUG"),
    defaultSource: str | None = typer.Option(None, "--default-source", help="Source for bare record ids"),
    timeoutSeconds: float | None = typer.Option(None, "--timeout-seconds", help="API timeout in seconds"),
    retries: int | None = typer.Option(None, "--retries", help="Retry attempts on network errors"),
    tlsSkipVerify: bool | None = typer.Option(
        None,
        "--tls-skip-verify/--no-tls-skip-verify",
        help="Disable TLS verification",
        show_default=True,
    ),
    caFile: str | None = typer.Option(None, "--ca-file", help="CA bundle for TLS verification"),
):
    """
    Назначение:
        Корневой callback:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - создаёт каталог логов
        - сохраняет всё в ctx.obj для подкоманд
    """
    if not runId:
        runId = generate_run_id()

    cliOverrides = {
        "log_dir": logDir,
        "log_level": logLevel,
        "default_source": defaultSource,
        "timeout_seconds": timeoutSeconds,
        "retries": retries,
        "tls_skip_verify": tlsSkipVerify,
        "ca_file": caFile,
    }
    try:
        loaded = loadSettings(config_path=config, cli_overrides=cliOverrides)
    except ValueError as exc:
        typer.echo(f"ERROR: invalid settings: {exc}", err=True)
        raise typer.Exit(code=2)

    ensureDir(loaded.settings.log_dir)

    ctx.obj = {
        "runId": runId,
        "settings": loaded.settings,
        "sources": loaded.sources_used,
    }


@app.command("load")
def load(
    ctx: typer.Context,
    recordId: str = typer.Argument(..., help="Record id"),
    source: str | None = typer.Option(None, "--source", help="Record source (defaults to --default-source)"),
    tolerateMissing: bool = typer.Option(
        False,
        "--tolerate-missing/--no-tolerate-missing",
        help="Return a placeholder instead of failing on missing records",
    ),
):
    runLoadCommand(ctx, recordId, source, tolerateMissing)


@app.command("load-batch")
def loadBatch(
    ctx: typer.Context,
    requests: list[str] = typer.Argument(..., help="Record requests: 'source|id' or bare ids"),
    tolerateMissing: bool = typer.Option(
        False,
        "--tolerate-missing/--no-tolerate-missing",
        help="Return placeholders instead of failing on missing records",
    ),
    paramsFile: str | None = typer.Option(None, "--params-file", help="YAML with backend params per source"),
):
    runLoadBatchCommand(ctx, requests, tolerateMissing, paramsFile)


@app.command("sources")
def sources(ctx: typer.Context):
    settings: Settings = ctx.obj["settings"]
    typer.echo(f"default_source={settings.default_source}")
    for name, cfg in settings.backends.items():
        base_url = ((cfg or {}).get("API") or {}).get("base_url")
        typer.echo(f"backend {name} base_url={base_url}")
    for name, cfg in settings.fallbacks.items():
        base_url = ((cfg or {}).get("API") or {}).get("base_url")
        typer.echo(f"fallback {name} base_url={base_url}")


def main() -> None:
    app(prog_name="recordloader")


if __name__ == "__main__":
    main()
