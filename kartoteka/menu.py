"""Interactive text menus over the patient, examination, hashed and log files."""

from __future__ import annotations

import argparse
import sys
from collections import deque
from pathlib import Path
from typing import Callable, TextIO

from .hashed import HashedFile
from .logfile import AccessLog, format_entries, format_report
from .records import (
    DuplicateKeyError,
    Examination,
    Patient,
    PatientSummary,
    RecordError,
    RecordNotFoundError,
)
from .sequential import ExaminationFile, PatientFile, format_patient

MAIN_MENU = (
    "Meni:\n"
    "1. Formiraj datoteku pacijenata\n"
    "2. Formiraj datoteku pregleda\n"
    "3. Upisi slog u datoteku pacijenata\n"
    "4. Upisi slog u datoteku pregleda\n"
    "5. Prikazi alergiju pacijenta\n"
    "6. Prikazi pacijente sa jednakim pritiskom\n"
    "7. Modifikuj podatke o pacijentu\n"
    "8. Rad sa rasutim datotekama\n"
    "9. Prikaži izveštaj datoteka sa evidencijama\n"
    "10. Prikaži prosečan broj pristupa po operaciji\n"
    "0. Izlaz iz programa\n"
)

HASHED_MENU = (
    "Meni:\n"
    "1. Formiraj rasutu datoteku pacijenata i pregleda\n"
    "2. Upisi slog u rasutu datoteku\n"
    "4. Prikazi prosecan sistolni i dijastolni pritisak pacijenta\n"
    "5. Prikaz svih pacijenata koji su bili na barem 3 pregleda,\n"
    " a razlika izmedju sistolnog i dijastolnog pritiska je manja ili jednaka 25\n"
    "6. Logičko brisanje aktuelnog sloga iz aktivne datoteke\n"
    "0. Izlaz iz rada sa rasutim datotekama\n"
)


class _WordReader:
    """Whitespace-separated words read lazily from a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._pending: deque[str] = deque()

    def next(self) -> str:
        while not self._pending:
            line = self._stream.readline()
            if not line:
                raise EOFError
            self._pending.extend(line.split())
        return self._pending.popleft()


class Menu:
    """The main menu and the hashed-file submenu, driven by text input."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None,
                 workdir=None) -> None:
        self._words = _WordReader(stdin if stdin is not None else sys.stdin)
        self._out = stdout if stdout is not None else sys.stdout
        self.workdir = Path(workdir) if workdir is not None else Path.cwd()
        self.patients_name = "pacijenti.dat"
        self.examinations_name = "pregledi.dat"
        self.hashed_name = "rasuta.dat"
        self.log = AccessLog(self.workdir / "log.dat")

    def _hashed(self) -> HashedFile:
        return HashedFile(self.workdir / self.hashed_name, self.log)

    def _patients(self) -> PatientFile:
        return PatientFile(self.workdir / self.patients_name, self._hashed())

    def _examinations(self) -> ExaminationFile:
        return ExaminationFile(self.workdir / self.examinations_name)

    def _print(self, text: str) -> None:
        self._out.write(text)

    def _ask(self, prompt: str) -> str:
        self._print(prompt)
        return self._words.next()

    def _ask_int(self, prompt: str) -> int:
        return int(self._ask(prompt))

    def _ask_float(self, prompt: str) -> float:
        return float(self._ask(prompt))

    def _loop(self, text: str, actions: dict[int, Callable[[], None]], farewell: str) -> bool:
        """Run a menu until 0 is chosen (True) or input ends (False)."""
        while True:
            self._print(text)
            try:
                answer = self._ask("Unesite izbor: ")
            except EOFError:
                return False
            try:
                choice = int(answer)
            except ValueError:
                choice = None
            if choice == 0:
                self._print(farewell)
                return True
            action = actions.get(choice)
            if action is None:
                self._print("Nepoznat izbor, molimo pokusajte ponovo.\n")
                continue
            try:
                action()
            except EOFError:
                return False
            except ValueError:
                self._print("Neispravan unos.\n")
            except OSError as exc:
                self._print(f"Greska pri otvaranju datoteke {exc.filename}.\n")
            except RecordError as exc:
                self._print(f"Greska: {exc}\n")

    def run(self) -> None:
        """Run the main menu until the user quits or input ends."""
        self._loop(
            MAIN_MENU,
            {
                1: self._create_patients,
                2: self._create_examinations,
                3: self._add_patient,
                4: self._add_examination,
                5: self._show_allergy,
                6: self._show_equal_pressure,
                7: self._modify_patient,
                8: self._hashed_session,
                9: self._show_log,
                10: self._show_report,
            },
            "Izlaz iz programa.\n",
        )

    def run_hashed(self) -> bool:
        """Run the hashed-file menu; False when input ended before quitting."""
        return self._loop(
            HASHED_MENU,
            {
                1: self._build_hashed,
                2: self._insert_hashed,
                4: self._average_pressure,
                5: self._frequent_patients,
                6: self._delete_hashed,
            },
            "Izlaz iz programa.\n",
        )

    def _hashed_session(self) -> None:
        if not self.run_hashed():
            raise EOFError

    def _create_patients(self) -> None:
        name = self._ask("Unesite ime datoteke: ")
        PatientFile(self.workdir / name).create()
        self.patients_name = name
        self._print("Formirana je datoteka pacijenata.\n")

    def _create_examinations(self) -> None:
        name = self._ask("Unesite ime datoteke: ")
        ExaminationFile(self.workdir / name).create()
        self.examinations_name = name
        self._print("Formirana je datoteka pregleda.\n")

    def _add_patient(self) -> None:
        self._print("Popunite podatke pacijenta:\n")
        first_name = self._ask("Ime:\n")
        last_name = self._ask("Prezime:\n")
        birth_date = self._ask("Datum rodjenja (dd.mm.yyyy):\n")
        card = self._ask_int("Broj kartona:\n")
        jmbg = self._ask("JMBG:\n")
        weight = self._ask_float("Tezina:\n")
        height = self._ask_float("Visina:\n")
        allergy = self._ask("Alergija na polen (da/ne):\n")
        patient = Patient(card, first_name, last_name, birth_date, jmbg, weight, height, allergy)
        try:
            self._patients().add(patient)
        except DuplicateKeyError:
            self._print(f"Pacijent sa brojem kartona {card} vec postoji.\n")

    def _add_examination(self) -> None:
        self._print("Popunite podatke pregleda:\n")
        exam_id = self._ask_int("ID pregleda:\n")
        card = self._ask_int("Broj kartona:\n")
        date = self._ask("Datum pregleda (dd.mm.yyyy):\n")
        systolic = self._ask_int("Sistolni pritisak:\n")
        diastolic = self._ask_int("Dijastolni pritisak:\n")
        try:
            self._examinations().add(Examination(exam_id, card, date, systolic, diastolic))
        except DuplicateKeyError:
            self._print(f"Pregled sa ID {exam_id} vec postoji.\n")

    def _show_allergy(self) -> None:
        card = self._ask_int("Unesite broj kartona pacijenta: ")
        try:
            block, position, patient = self._patients().locate(card)
        except RecordNotFoundError:
            self._print("Pacijent sa ovim brojem kartona nije pronadjen....\n")
            return
        self._print(format_patient(patient))
        self._print(f"Adresa bloka: {block}\nBroj sloga: {position}\n")

    def _show_equal_pressure(self) -> None:
        found = self._examinations().equal_pressure(self._patients())
        for block, position, exam, patient in found:
            if patient is not None:
                self._print(format_patient(patient))
            self._print(
                f"Sistolni pritisak: {exam.systolic}\n"
                f"Adresa bloka: {block}\nBroj sloga: {position}\n"
            )

    def _modify_patient(self) -> None:
        card = self._ask_int("Unesite broj kartona pacijenta kojeg zelite da modifikujete: ")
        first_name = self._ask("Unesite novo ime: ")
        last_name = self._ask("Unesite novo prezime: ")
        jmbg = self._ask("Unesite novi JMBG: ")
        birth_date = self._ask("Unesite novi datum rodjenja (dd.mm.yyyy): ")
        weight = self._ask_float("Unesite novu tezinu: ")
        height = self._ask_float("Unesite novu visinu: ")
        allergy = self._ask("Unesite novu alergiju na polen (da/ne): ")
        try:
            self._patients().modify(
                card, first_name, last_name, jmbg, birth_date, weight, height, allergy
            )
        except RecordNotFoundError:
            self._print(f"Pacijent sa brojem kartona {card} nije pronadjen.\n")
            return
        self._print("Podaci pacijenta su uspešno modifikovani.\n")

    def _show_log(self) -> None:
        if self.log.path.exists():
            self._print(format_entries(self.log.entries()))

    def _show_report(self) -> None:
        threshold = self._ask_int("Unesite prag za prosecan broj pristupa po operaciji: ")
        self._print("Prosecni broj pristupa po operaciji:\n")
        if not self.log.path.exists():
            self._print(f"Greska pri otvaranju datoteke {self.log.path.name}.\n")
            return
        self._print(format_report(self.log.report(), threshold))

    def _build_hashed(self) -> None:
        name = self._ask("Unesite ime datoteke: \n")
        HashedFile(self.workdir / name, self.log).build(
            self.workdir / self.patients_name, self.workdir / self.examinations_name
        )
        self.hashed_name = name
        self._print("Formirana je rasuta datoteka pacijenata i pregleda.\n")

    def _insert_hashed(self) -> None:
        card = self._ask_int("Unesite broj kartona: \n")
        first_name = self._ask("Unesite ime pacijenta: \n")
        last_name = self._ask("Unesite prezime pacijenta: \n")
        jmbg = self._ask("Unesite JMBG pacijenta: \n")
        weight = self._ask_float("Unesite tezinu pacijenta: \n")
        height = self._ask_float("Unesite visinu pacijenta: \n")
        systolic = self._ask_float("Unesite prosek sistolnog pritiska: \n")
        diastolic = self._ask_float("Unesite prosek dijastolnog pritiska: \n")
        count = self._ask_int("Unesite broj pregleda: \n")
        summary = PatientSummary(
            card, first_name, last_name, jmbg, weight, height, systolic, diastolic, count
        )
        self._hashed().insert(summary)
        self._print("Slog je upisan u rasutu datoteku.\n")

    def _average_pressure(self) -> None:
        card = self._ask_int("Unesite broj kartona: \n")
        try:
            systolic, diastolic, bucket, position = self._hashed().average_pressure(card)
        except RecordNotFoundError:
            self._print("Pacijent sa datim brojem kartona nije pronadjen\n")
            return
        self._print(
            f"Prosecni sistolni pritisak: {systolic:.2f}\n"
            f"Prosecni dijastolni pritisak: {diastolic:.2f}\n"
            f"Adresa baketa: {bucket}, \n Broj sloga: {position} \n"
        )

    def _frequent_patients(self) -> None:
        found = self._hashed().frequent_patients()
        if not found:
            self._print("Nije pronadjen nijedan takav pacijent\n")
            return
        patients = self._patients()
        for bucket, position, summary in found:
            patient = patients.find(summary.card_number)
            if patient is not None:
                self._print(format_patient(patient))
            self._print(f"Adresa baketa: {bucket}\nBroj sloga: {position}\n")

    def _delete_hashed(self) -> None:
        card = self._ask_int("Unesite broj kartona: \n")
        try:
            self._hashed().delete(card)
        except RecordNotFoundError:
            self._print("Pacijent sa datim brojem kartona nije pronadjen\n")
            return
        self._print("Slog je logicki obrisan.\n")


def main(argv=None) -> int:
    """Start the interactive menu in the given working directory."""
    parser = argparse.ArgumentParser(prog="kartoteka")
    parser.add_argument("workdir", nargs="?", default=".", help="directory holding the files")
    args = parser.parse_args(argv)
    Menu(sys.stdin, sys.stdout, Path(args.workdir)).run()
    return 0