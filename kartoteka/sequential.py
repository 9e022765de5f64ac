"""Sequential blocked files of patients and examinations."""

from __future__ import annotations

from contextlib import suppress
from pathlib import Path

from .blockfile import BlockFile
from .hashed import HashedFile
from .records import Examination, Patient, RecordNotFoundError

PATIENT_BLOCKING_FACTOR = 4
EXAMINATION_BLOCKING_FACTOR = 6


def format_patient(patient: Patient) -> str:
    """Render a patient's card the way the menus show it."""
    return (
        f"Ime: {patient.first_name}\n"
        f"Prezime: {patient.last_name}\n"
        f"Datum rodjenja: {patient.birth_date}\n"
        f"Broj kartona: {patient.card_number}\n"
        f"JMBG: {patient.jmbg}\n"
        f"Visina: {patient.height:.2f} cm\n"
        f"Tezina: {patient.weight:.2f} kg\n"
        f"Alergija na polen: {patient.pollen_allergy}\n"
    )


class PatientFile:
    """Patients keyed by card number; changes are carried into the hashed file."""

    def __init__(self, path="pacijenti.dat", hashed: HashedFile | None = None) -> None:
        self._file: BlockFile[Patient] = BlockFile(path, Patient, PATIENT_BLOCKING_FACTOR)
        self.hashed = hashed

    @property
    def path(self) -> Path:
        return self._file.path

    def create(self) -> None:
        """Start an empty patient file."""
        self._file.create()

    def _propagate(self, patient: Patient, operation: str) -> None:
        if self.hashed is None or not self.hashed.path.exists():
            return
        with suppress(RecordNotFoundError):
            self.hashed.propagate_patient(patient, operation)

    def add(self, patient: Patient) -> tuple[int, int]:
        """Store a new patient and return its (block, position)."""
        stored = Patient.unpack(patient.pack())
        location = self._file.append(stored.card_number, stored)
        self._propagate(stored, "upis")
        return location

    def find(self, card_number: int) -> Patient | None:
        slot = self._file.find(card_number)
        return None if slot is None else slot.payload

    def locate(self, card_number: int) -> tuple[int, int, Patient]:
        """Return (block, position, patient) for a live patient."""
        found = next(
            (
                (block, position, slot.payload)
                for block, position, slot in self._file.active()
                if slot.key == card_number
            ),
            None,
        )
        if found is None:
            raise RecordNotFoundError(f"card {card_number} is not stored in {self.path}")
        return found

    def modify(
        self,
        card_number: int,
        first_name: str,
        last_name: str,
        jmbg: str,
        birth_date: str,
        weight: float,
        height: float,
        pollen_allergy: str,
    ) -> Patient:
        """Replace a patient's data and return what was stored."""
        if self.find(card_number) is None:
            raise RecordNotFoundError(f"card {card_number} is not stored in {self.path}")
        stored = Patient.unpack(
            Patient(
                card_number=card_number,
                first_name=first_name,
                last_name=last_name,
                birth_date=birth_date,
                jmbg=jmbg,
                weight=weight,
                height=height,
                pollen_allergy=pollen_allergy,
            ).pack()
        )
        self._file.replace(card_number, stored)
        self._propagate(stored, "modifikacija")
        return stored


class ExaminationFile:
    """Examinations keyed by their identifier."""

    def __init__(self, path="pregledi.dat") -> None:
        self._file: BlockFile[Examination] = BlockFile(
            path, Examination, EXAMINATION_BLOCKING_FACTOR
        )

    @property
    def path(self) -> Path:
        return self._file.path

    def create(self) -> None:
        """Start an empty examination file."""
        self._file.create()

    def add(self, examination: Examination) -> tuple[int, int]:
        """Store a new examination and return its (block, position)."""
        stored = Examination.unpack(examination.pack())
        return self._file.append(stored.examination_id, stored)

    def find(self, examination_id: int) -> Examination | None:
        slot = self._file.find(examination_id)
        return None if slot is None else slot.payload

    def equal_pressure(
        self, patients: PatientFile
    ) -> list[tuple[int, int, Examination, Patient | None]]:
        """Examinations whose positive systolic pressure equals the diastolic one."""
        return [
            (block, position, slot.payload, patients.find(slot.payload.card_number))
            for block, position, slot in self._file.active()
            if slot.payload.systolic == slot.payload.diastolic and slot.payload.systolic > 0
        ]