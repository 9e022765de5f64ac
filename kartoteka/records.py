"""Fixed-size binary records stored in the patient, examination and log files."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar

END_MARKER = -1
ACTIVE = 0
DELETED = 1


class RecordError(Exception):
    """A record or a record file is malformed or cannot be processed."""


class DuplicateKeyError(RecordError):
    """A record with the same key is already stored."""


class RecordNotFoundError(RecordError, LookupError):
    """No active record carries the requested key."""


class HashedFileFullError(RecordError):
    """The hashed file has no free slot left for a record."""


def _encode(text: str, size: int) -> bytes:
    raw = text.encode("utf-8")[: size - 1]
    return raw.decode("utf-8", "ignore").encode("utf-8")


def _decode(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", "replace")


def _pack(fmt: struct.Struct, *values: object) -> bytes:
    try:
        return fmt.pack(*values)
    except (struct.error, OverflowError) as exc:
        raise RecordError(f"cannot pack record: {exc}") from exc


def _unpack(fmt: struct.Struct, data: bytes) -> tuple:
    if len(data) != fmt.size:
        raise RecordError(f"expected {fmt.size} bytes, got {len(data)}")
    return fmt.unpack(data)


@dataclass
class Patient:
    """A patient's card in the sequential patient file."""

    card_number: int = 0
    first_name: str = ""
    last_name: str = ""
    birth_date: str = ""
    jmbg: str = ""
    weight: float = 0.0
    height: float = 0.0
    pollen_allergy: str = ""

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<i31s31s11s14sxff3sx")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return _pack(
            self._FORMAT,
            self.card_number,
            _encode(self.first_name, 31),
            _encode(self.last_name, 31),
            _encode(self.birth_date, 11),
            _encode(self.jmbg, 14),
            self.weight,
            self.height,
            _encode(self.pollen_allergy, 3),
        )

    @classmethod
    def unpack(cls, data: bytes) -> Patient:
        card, first, last, birth, jmbg, weight, height, allergy = _unpack(cls._FORMAT, data)
        return cls(
            card,
            _decode(first),
            _decode(last),
            _decode(birth),
            _decode(jmbg),
            weight,
            height,
            _decode(allergy),
        )


@dataclass
class Examination:
    """One blood-pressure examination of a patient."""

    examination_id: int = 0
    card_number: int = 0
    date: str = ""
    systolic: int = 0
    diastolic: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<ii11sxii")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return _pack(
            self._FORMAT,
            self.examination_id,
            self.card_number,
            _encode(self.date, 11),
            self.systolic,
            self.diastolic,
        )

    @classmethod
    def unpack(cls, data: bytes) -> Examination:
        exam_id, card, date, systolic, diastolic = _unpack(cls._FORMAT, data)
        return cls(exam_id, card, _decode(date), systolic, diastolic)


@dataclass
class PatientSummary:
    """A patient with averaged blood pressure, kept in the hashed file."""

    card_number: int = 0
    first_name: str = ""
    last_name: str = ""
    jmbg: str = ""
    weight: float = 0.0
    height: float = 0.0
    average_systolic: float = 0.0
    average_diastolic: float = 0.0
    examination_count: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<i31s31s14sffffi")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return _pack(
            self._FORMAT,
            self.card_number,
            _encode(self.first_name, 31),
            _encode(self.last_name, 31),
            _encode(self.jmbg, 14),
            self.weight,
            self.height,
            self.average_systolic,
            self.average_diastolic,
            self.examination_count,
        )

    @classmethod
    def unpack(cls, data: bytes) -> PatientSummary:
        (card, first, last, jmbg, weight, height,
         systolic, diastolic, count) = _unpack(cls._FORMAT, data)
        return cls(
            card,
            _decode(first),
            _decode(last),
            _decode(jmbg),
            weight,
            height,
            systolic,
            diastolic,
            count,
        )


@dataclass
class LogEntry:
    """One entry of the file-access log."""

    entry_id: int = 0
    record_id: int = 0
    operation: str = ""
    access_count: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<ii16si")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return _pack(
            self._FORMAT,
            self.entry_id,
            self.record_id,
            _encode(self.operation, 16),
            self.access_count,
        )

    @classmethod
    def unpack(cls, data: bytes) -> LogEntry:
        entry_id, record_id, operation, count = _unpack(cls._FORMAT, data)
        return cls(entry_id, record_id, _decode(operation), count)


P = TypeVar("P")


@dataclass
class Slot(Generic[P]):
    """A stored record: its key, its deletion state and its payload."""

    key: int
    deleted: int
    payload: P

    _HEADER: ClassVar[struct.Struct] = struct.Struct("<ii")

    def pack(self) -> bytes:
        return _pack(self._HEADER, self.key, self.deleted) + self.payload.pack()

    @classmethod
    def unpack(cls, data: bytes, payload_type: type) -> Slot:
        if len(data) != cls.size(payload_type):
            raise RecordError(
                f"expected {cls.size(payload_type)} bytes, got {len(data)}"
            )
        header = cls._HEADER.size
        key, deleted = cls._HEADER.unpack(data[:header])
        return cls(key, deleted, payload_type.unpack(data[header:]))

    @classmethod
    def size(cls, payload_type: type) -> int:
        return cls._HEADER.size + payload_type.SIZE