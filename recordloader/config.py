from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import os
import yaml

ENV_PREFIX = "RECORDLOADER_"


@dataclass(frozen=True)
class Settings:
    # Loader
    default_source: str = "Solr"

    # Logging
    log_dir: str = "./logs"
    log_level: str = "INFO"

    # HTTP
    timeout_seconds: float = 120.0
    retries: int = 0
    tls_skip_verify: bool = False
    ca_file: str | None = None

    # source -> {"API": {...}}
    backends: dict = field(default_factory=dict)
    fallbacks: dict = field(default_factory=dict)


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


def _read_yaml_config(path: Path) -> dict:
    if not path.exists():
        return {}
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            return {}
        return data


def _env_get(name: str) -> str | None:
    v = os.getenv(ENV_PREFIX + name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def _parse_int(v: str | None) -> int | None:
    if v is None:
        return None
    return int(v)


def _parse_float(v: str | None) -> float | None:
    if v is None:
        return None
    return float(v)


def _parse_bool(v: str | None) -> bool | None:
    if v is None:
        return None
    vv = v.lower()
    if vv in ("1", "true", "yes", "y"):
        return True
    if vv in ("0", "false", "no", "n"):
        return False
    raise ValueError(f"Invalid boolean env value: {v}")


def _section(cfg: dict, name: str) -> dict:
    value = cfg.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping of source -> driver config")
    return value


def loadSettings(
    config_path: str | None,
    cli_overrides: dict,
) -> LoadedSettings:
    """
    Назначение:
        Собирает итоговые настройки.

    Алгоритм:
        Priority: CLI > ENV > config > defaults.
        backends/fallbacks задаются только в config-файле.
    """
    sources: list[str] = []
    defaults = Settings()

    # 1) config file
    cfg: dict = {}
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")

    # 2) env
    env = {
        "default_source": _env_get("DEFAULT_SOURCE"),
        "log_dir": _env_get("LOG_DIR"),
        "log_level": _env_get("LOG_LEVEL"),
        "timeout_seconds": _parse_float(_env_get("TIMEOUT_SECONDS")),
        "retries": _parse_int(_env_get("RETRIES")),
        "tls_skip_verify": _parse_bool(_env_get("TLS_SKIP_VERIFY")),
        "ca_file": _env_get("CA_FILE"),
    }
    if any(v is not None for v in env.values()):
        sources.append("env")

    merged = {
        "default_source": cfg.get("default_source", defaults.default_source),
        "log_dir": cfg.get("log_dir", defaults.log_dir),
        "log_level": cfg.get("log_level", defaults.log_level),
        "timeout_seconds": cfg.get("timeout_seconds", defaults.timeout_seconds),
        "retries": cfg.get("retries", defaults.retries),
        "tls_skip_verify": cfg.get("tls_skip_verify", defaults.tls_skip_verify),
        "ca_file": cfg.get("ca_file", defaults.ca_file),
    }

    for k, v in env.items():
        if v is not None:
            merged[k] = v

    # 3) apply CLI overrides (only those explicitly passed)
    if any(v is not None for v in cli_overrides.values()):
        sources.append("cli")

    for k, v in cli_overrides.items():
        if v is None:
            continue
        merged[k] = v

    settings = Settings(
        default_source=str(merged["default_source"]),
        log_dir=str(merged["log_dir"]),
        log_level=str(merged["log_level"]),
        timeout_seconds=float(merged["timeout_seconds"]),
        retries=int(merged["retries"]),
        tls_skip_verify=bool(merged["tls_skip_verify"]),
        ca_file=merged["ca_file"],
        backends=_section(cfg, "backends"),
        fallbacks=_section(cfg, "fallbacks"),
    )

    return LoadedSettings(settings=settings, sources_used=sources)
