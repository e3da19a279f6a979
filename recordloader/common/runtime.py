from __future__ import annotations

import time
import uuid


def generate_run_id() -> str:
    """
    Назначение:
        run_id запуска команды: UTC-метка времени + короткий случайный суффикс.
        Файлы логов команд при этом сортируются по времени запуска.
    """
    return f"{time.strftime('%Y%m%dT%H%M%SZ', time.gmtime())}-{uuid.uuid4().hex[:8]}"


def getDurationMs(startMonotonic: float, endMonotonic: float) -> int:
    """Длительность в миллисекундах по monotonic timestamps."""
    return int((endMonotonic - startMonotonic) * 1000)
