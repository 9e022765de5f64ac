import io

from kartoteka.hashed import HashedFile
from kartoteka.logfile import AccessLog
from kartoteka.menu import Menu, main
from kartoteka.sequential import PatientFile

SETUP = "1\npacijenti.dat\n2\npregledi.dat\n"
PATIENT = "3\nMarko\nMarkovic\n01.01.1990\n7\nX123\n80\n180\nda\n"


def exam(exam_id, systolic, diastolic):
    return f"4\n{exam_id}\n7\n02.02.2020\n{systolic}\n{diastolic}\n"


def run_menu(tmp_path, text):
    out = io.StringIO()
    Menu(io.StringIO(text), out, tmp_path).run()
    return out.getvalue()


def test_add_and_show_patient(tmp_path):
    out = run_menu(tmp_path, SETUP + PATIENT + "5\n7\n0\n")
    assert "Ime: Marko" in out
    assert "Adresa bloka: 0\nBroj sloga: 0\n" in out
    assert out.endswith("Izlaz iz programa.\n")
    assert PatientFile(tmp_path / "pacijenti.dat").find(7).last_name == "Markovic"


def test_unknown_choice(tmp_path):
    out = run_menu(tmp_path, "42\n0\n")
    assert "Nepoznat izbor, molimo pokusajte ponovo." in out


def test_end_of_input_stops(tmp_path):
    out = run_menu(tmp_path, "")
    assert out.endswith("Unesite izbor: ")
    assert "Izlaz iz programa." not in out


def test_duplicate_patient_reported(tmp_path):
    out = run_menu(tmp_path, SETUP + PATIENT + PATIENT + "0\n")
    assert "Pacijent sa brojem kartona 7 vec postoji." in out


def test_missing_patient_shown(tmp_path):
    out = run_menu(tmp_path, SETUP + "5\n99\n0\n")
    assert "Pacijent sa ovim brojem kartona nije pronadjen...." in out


def test_missing_file_reported(tmp_path):
    out = run_menu(tmp_path, "5\n7\n0\n")
    assert "Greska pri otvaranju datoteke" in out


def test_invalid_number_reported(tmp_path):
    out = run_menu(tmp_path, SETUP + "3\nA\nB\nC\nabc\n0\n")
    assert "Neispravan unos." in out
    assert out.endswith("Izlaz iz programa.\n")


def test_equal_pressure(tmp_path):
    out = run_menu(tmp_path, SETUP + PATIENT + exam(1, 120, 80) + exam(2, 90, 90) + "6\n0\n")
    assert out.count("Sistolni pritisak: 90") == 1
    assert out.count("Ime: Marko") == 1


def test_modify_patient(tmp_path):
    out = run_menu(
        tmp_path,
        SETUP + PATIENT + "7\n7\nPetar\nPetrovic\nX124\n02.02.1991\n81\n181\nne\n0\n",
    )
    assert "Podaci pacijenta su uspešno modifikovani." in out
    assert PatientFile(tmp_path / "pacijenti.dat").find(7).first_name == "Petar"


def test_modify_missing_patient(tmp_path):
    out = run_menu(tmp_path, SETUP + "7\n99\nA\nB\nC\nD\n1\n1\nda\n0\n")
    assert "Pacijent sa brojem kartona 99 nije pronadjen." in out


def test_hashed_average_and_delete(tmp_path):
    text = (
        SETUP + PATIENT + exam(1, 120, 80) + exam(2, 120, 80)
        + "8\n1\nrasuta.dat\n4\n7\n6\n7\n4\n7\n0\n0\n"
    )
    out = run_menu(tmp_path, text)
    assert "Formirana je rasuta datoteka pacijenata i pregleda." in out
    assert "Prosecni sistolni pritisak: 120.00" in out
    assert "Slog je logicki obrisan." in out
    assert "Pacijent sa datim brojem kartona nije pronadjen" in out
    hashed = HashedFile(tmp_path / "rasuta.dat", AccessLog(tmp_path / "log.dat"))
    assert hashed.find(7) is None


def test_hashed_frequent_patients(tmp_path):
    text = (
        SETUP + PATIENT + exam(1, 120, 100) + exam(2, 120, 100) + exam(3, 120, 100)
        + "8\n1\nrasuta.dat\n5\n0\n0\n"
    )
    out = run_menu(tmp_path, text)
    after = out.split("Formirana je rasuta datoteka pacijenata i pregleda.", 1)[1]
    assert "Ime: Marko" in after
    assert "Adresa baketa:" in after


def test_hashed_insert(tmp_path):
    text = (
        SETUP + "8\n1\nrasuta.dat\n2\n11\nAna\nAnic\nX125\n60\n170\n110\n70\n2\n0\n0\n"
    )
    out = run_menu(tmp_path, text)
    assert "Slog je upisan u rasutu datoteku." in out
    _, summary = HashedFile(tmp_path / "rasuta.dat", AccessLog(tmp_path / "log.dat")).find(11)
    assert summary.first_name == "Ana"
    assert summary.examination_count == 2


def test_log_listing_and_report(tmp_path):
    text = (
        SETUP + PATIENT + "8\n1\nrasuta.dat\n6\n7\n0\n9\n10\n100\n0\n"
    )
    out = run_menu(tmp_path, text)
    assert "Naziv operacije: brisanje" in out
    assert "Operacija: trazenje, Broj slogova:" in out
    assert "Prosecni broj pristupa po operaciji:" in out


def test_report_without_log(tmp_path):
    out = run_menu(tmp_path, "10\n5\n0\n")
    assert "Greska pri otvaranju datoteke log.dat." in out


def test_main_runs_menu(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("1\npacijenti.dat\n0\n"))
    assert main([str(tmp_path)]) == 0
    assert "Formirana je datoteka pacijenata." in capsys.readouterr().out
    assert (tmp_path / "pacijenti.dat").exists()