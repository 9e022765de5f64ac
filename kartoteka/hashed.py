"""The hashed file of patients with averaged blood pressure."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator

from .blockfile import BlockFile
from .logfile import AccessLog
from .records import (
    ACTIVE,
    DELETED,
    END_MARKER,
    Examination,
    HashedFileFullError,
    Patient,
    PatientSummary,
    RecordNotFoundError,
    Slot,
)

BUCKETS = 9
BUCKET_SIZE = 4
STEP = 1
CAPACITY = BUCKETS * BUCKET_SIZE
PATIENT_BLOCKING_FACTOR = 4
EXAMINATION_BLOCKING_FACTOR = 6
OPERATIONS = ("upis", "modifikacija")


def is_overflow(index: int, key: int) -> bool:
    """True when the slot at this index lies outside the key's home bucket."""
    return index // BUCKET_SIZE != key % BUCKETS


def _probe(card_number: int) -> Iterator[tuple[int, int, int]]:
    """Yield (bucket, position, index) in linear-probing order."""
    start = card_number % BUCKETS
    for step in range(BUCKETS):
        bucket = (start + step * STEP) % BUCKETS
        for position in range(BUCKET_SIZE):
            yield bucket, position, bucket * BUCKET_SIZE + position


def _empty_slot() -> Slot:
    return Slot(END_MARKER, ACTIVE, PatientSummary())


def _matches(slot: Slot, card_number: int) -> bool:
    return (
        slot.key == card_number
        and slot.payload.card_number == card_number
        and slot.deleted == ACTIVE
    )


@dataclass
class _Totals:
    summary: PatientSummary
    systolic: float = 0.0
    diastolic: float = 0.0
    count: int = 0


class HashedFile:
    """A fixed table of buckets addressed by card number, with linear probing."""

    def __init__(self, path="rasuta.dat", log: AccessLog | None = None) -> None:
        self.path = Path(path)
        self.log = log if log is not None else AccessLog()
        self._slot_size = Slot.size(PatientSummary)

    def _read(self, fp: BinaryIO, index: int) -> Slot:
        fp.seek(index * self._slot_size)
        data = fp.read(self._slot_size)
        if len(data) < self._slot_size:
            return _empty_slot()
        return Slot.unpack(data, PatientSummary)

    def _write(self, fp: BinaryIO, index: int, slot: Slot) -> None:
        fp.seek(index * self._slot_size)
        fp.write(slot.pack())

    def _search(self, fp: BinaryIO, card_number: int) -> tuple[int | None, Slot | None, int]:
        reads = 0
        for _, _, index in _probe(card_number):
            slot = self._read(fp, index)
            reads += 1
            if _matches(slot, card_number):
                return index, slot, reads
        return None, None, reads

    def _free_index(self, fp: BinaryIO, card_number: int) -> tuple[int | None, int]:
        reads = 0
        for _, _, index in _probe(card_number):
            slot = self._read(fp, index)
            reads += 1
            if slot.key == END_MARKER or slot.deleted != ACTIVE:
                self.log.record("trazenje", reads, card_number)
                return index, reads
        self.log.record("trazenje", reads, card_number)
        return None, reads

    def _insert(self, summary: PatientSummary) -> tuple[int, int]:
        with self.path.open("r+b") as fp:
            index, reads = self._free_index(fp, summary.card_number)
            if index is None:
                raise HashedFileFullError(
                    f"no free slot for card {summary.card_number} in {self.path}"
                )
            self._write(fp, index, Slot(summary.card_number, ACTIVE, summary))
        return index, reads + 1

    def build(self, patients_path, examinations_path) -> None:
        """Create the table from the patient and examination files."""
        patients = BlockFile(patients_path, Patient, PATIENT_BLOCKING_FACTOR)
        examinations = BlockFile(examinations_path, Examination, EXAMINATION_BLOCKING_FACTOR)

        totals: list[_Totals] = []
        by_card: dict[int, _Totals] = {}
        for _, _, slot in patients.active():
            if len(totals) >= CAPACITY:
                break
            patient = slot.payload
            item = _Totals(
                PatientSummary(
                    card_number=patient.card_number,
                    first_name=patient.first_name,
                    last_name=patient.last_name,
                    jmbg=patient.jmbg,
                    weight=patient.weight,
                    height=patient.height,
                )
            )
            totals.append(item)
            by_card.setdefault(patient.card_number, item)

        for _, _, slot in examinations.active():
            item = by_card.get(slot.payload.card_number)
            if item is not None:
                item.systolic += slot.payload.systolic
                item.diastolic += slot.payload.diastolic
                item.count += 1

        table = [_empty_slot() for _ in range(CAPACITY)]
        for item in totals:
            card = item.summary.card_number
            if card == 0:
                continue
            if item.count:
                item.summary.average_systolic = item.systolic / item.count
                item.summary.average_diastolic = item.diastolic / item.count
            item.summary.examination_count = item.count
            index = next(
                (
                    index
                    for _, _, index in _probe(card)
                    if table[index].deleted == ACTIVE and table[index].key == END_MARKER
                ),
                None,
            )
            if index is None:
                raise HashedFileFullError(f"no free slot for card {card}")
            table[index] = Slot(card, ACTIVE, item.summary)

        with self.path.open("wb") as fp:
            fp.write(b"".join(slot.pack() for slot in table))

    def slots(self) -> Iterator[tuple[int, Slot]]:
        """Yield (index, slot) for every slot stored in the file."""
        with self.path.open("rb") as fp:
            index = 0
            while len(data := fp.read(self._slot_size)) == self._slot_size:
                yield index, Slot.unpack(data, PatientSummary)
                index += 1

    def insert(self, summary: PatientSummary) -> int:
        """Store a summary in the first free slot of its probe chain."""
        return self._insert(summary)[0]

    def find(self, card_number: int) -> tuple[int, PatientSummary] | None:
        """Return (index, summary) of the live record for this card, or None."""
        with self.path.open("rb") as fp:
            index, slot, _ = self._search(fp, card_number)
        return None if slot is None else (index, slot.payload)

    def average_pressure(self, card_number: int) -> tuple[float, float, int, int]:
        """Return (systolic, diastolic, bucket, position) of a record in its home bucket."""
        with self.path.open("rb") as fp:
            for bucket, position, index in _probe(card_number):
                slot = self._read(fp, index)
                if not is_overflow(index, slot.key) and _matches(slot, card_number):
                    summary = slot.payload
                    return (
                        summary.average_systolic,
                        summary.average_diastolic,
                        bucket,
                        position,
                    )
        raise RecordNotFoundError(f"card {card_number} is not stored in {self.path}")

    def frequent_patients(self) -> list[tuple[int, int, PatientSummary]]:
        """Patients with at least three examinations and a pressure gap of at most 25."""
        found = []
        for index, slot in self.slots():
            summary = slot.payload
            gap = int(summary.average_systolic - summary.average_diastolic)
            if slot.deleted == ACTIVE and summary.examination_count >= 3 and gap <= 25:
                found.append((slot.key % BUCKETS, index % BUCKET_SIZE, summary))
        return found

    def delete(self, card_number: int) -> int:
        """Mark the record for this card as deleted and return its index."""
        counter = 0
        with self.path.open("r+b") as fp:
            for _, _, index in _probe(card_number):
                slot = self._read(fp, index)
                counter += 1
                if _matches(slot, card_number):
                    self.log.record("trazenje", counter, card_number)
                    slot.deleted = DELETED
                    self._write(fp, index, slot)
                    counter += 1
                    break
            else:
                index = None
        self.log.record("brisanje", counter, card_number)
        if index is None:
            raise RecordNotFoundError(f"card {card_number} is not stored in {self.path}")
        return index

    def propagate_patient(self, patient: Patient, operation: str) -> int:
        """Carry an insertion or a change of a patient into the table."""
        if operation not in OPERATIONS:
            raise ValueError(f"unknown operation {operation!r}")
        card = patient.card_number
        if operation == "upis":
            summary = PatientSummary(
                card_number=card,
                first_name=patient.first_name,
                last_name=patient.last_name,
                jmbg=patient.jmbg,
                weight=patient.weight,
                height=patient.height,
            )
            index, accesses = self._insert(summary)
            self.log.record(operation, accesses, card)
            return index

        with self.path.open("r+b") as fp:
            index, slot, counter = self._search(fp, card)
            if slot is not None:
                self.log.record("trazenje", counter, card)
                summary = slot.payload
                summary.weight = patient.weight
                summary.height = patient.height
                summary.first_name = patient.first_name
                summary.last_name = patient.last_name
                summary.jmbg = patient.jmbg
                summary.card_number = card
                slot.deleted = ACTIVE
                self._write(fp, index, slot)
                counter += 1
        self.log.record(operation, counter, card)
        if slot is None:
            raise RecordNotFoundError(f"card {card} is not stored in {self.path}")
        return index

    def propagate_examination(self, examination: Examination) -> PatientSummary:
        """Fold a new examination into the patient's running averages."""
        card = examination.card_number
        with self.path.open("r+b") as fp:
            index, slot, counter = self._search(fp, card)
            if slot is not None:
                self.log.record("trazenje", counter, card)
                summary = slot.payload
                summary.examination_count += 1
                count = summary.examination_count
                if count == 1:
                    summary.average_systolic = float(examination.systolic)
                    summary.average_diastolic = float(examination.diastolic)
                else:
                    summary.average_systolic = (
                        summary.average_systolic * (count - 1) + examination.systolic
                    ) / count
                    summary.average_diastolic = (
                        summary.average_diastolic * (count - 1) + examination.diastolic
                    ) / count
                slot.deleted = ACTIVE
                self._write(fp, index, slot)
                counter += 1
        self.log.record("upis", counter, card)
        if slot is None:
            raise RecordNotFoundError(f"card {card} is not stored in {self.path}")
        return slot.payload