from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Sequence

from recordloader.domain.ports.records import RecordDriverProtocol

# Непрозрачный набор параметров конкретного backend (fq, fields, ...).
ParamBag = Mapping[str, Any]

# Входной запрос записи: "source|id", голый id или {"source": ..., "id": ...}.
RawRecordRequest = str | Mapping[str, Any]


@dataclass(frozen=True)
class RecordRef:
    """
    Назначение:
        Каноническая ссылка на запись: пара (source, id).
    Инварианты/гарантии:
        - Неизменяема; равенство и hash по паре (source, id), регистр учитывается.
    """

    source: str
    id: str

    def __str__(self) -> str:
        return f"{self.source}:{self.id}"


@dataclass(frozen=True)
class BatchGroup:
    """
    Назначение:
        Группа идентификаторов одного источника для одного вызова поиска.

    Поля:
        source: имя источника (backend).
        ids: id в исходном порядке появления, без дублей.
        params: параметры backend для этого источника или None.
    """

    source: str
    ids: tuple[str, ...]
    params: ParamBag | None = None

    @property
    def is_single(self) -> bool:
        return len(self.ids) == 1


@dataclass
class RecordCollection:
    """
    Назначение:
        Ответ backend на один вызов retrieve/retrieve_batch.
    Контракт:
        - Может быть короче запрошенного списка id и в другом порядке.
    """

    source: str
    records: list[RecordDriverProtocol] = field(default_factory=list)

    def __iter__(self) -> Iterator[RecordDriverProtocol]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def get_records(self) -> list[RecordDriverProtocol]:
        return list(self.records)

    @classmethod
    def empty(cls, source: str) -> "RecordCollection":
        return cls(source=source, records=[])

    @classmethod
    def of(cls, source: str, records: Sequence[RecordDriverProtocol]) -> "RecordCollection":
        return cls(source=source, records=list(records))


__all__ = ["ParamBag", "RawRecordRequest", "RecordRef", "BatchGroup", "RecordCollection"]
