# kartoteka

A small record-keeping system for patients and their examinations, built on
binary files organised the classic way:

- **Blocked sequential files** for patients (4 slots per block) and
  examinations (6 slots per block). Records are stored in fixed-size blocks;
  a sentinel key marks the end of the file.
- **A hashed file** holding one summary per patient (average systolic and
  diastolic pressure, number of examinations). It has 9 buckets of 4 slots
  and resolves collisions by linear probing.
- **An access log** (7 entries per block) that counts how many slot reads and
  writes each operation on the hashed file took, with a per-operation report.

## Installation

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Interactive use

```
kartoteka [WORKDIR]
```

This opens a numbered menu working in `WORKDIR` (the current directory by
default). From it you can create the patient and examination files, add
records, show a patient's card by card number, list examinations whose
systolic and diastolic pressure were equal, change a patient's data, open the
hashed-file submenu, and view the access log and its report.

The hashed-file submenu builds the hashed file from the patient and
examination files, inserts a summary by hand, shows a patient's average
pressure, lists patients with at least three examinations whose pressure gap
is at most 25, and marks a record as deleted.

By default the menu uses `pacijenti.dat`, `pregledi.dat`, `rasuta.dat` and
`log.dat`; creating a file under another name from the menu makes later
choices use that name.

## Library use

```python
from kartoteka.logfile import AccessLog, format_report
from kartoteka.hashed import HashedFile
from kartoteka.sequential import PatientFile, ExaminationFile
from kartoteka.records import Patient, Examination

log = AccessLog("log.dat")
hashed = HashedFile("rasuta.dat", log)

patients = PatientFile("pacijenti.dat", hashed)
patients.create()
patients.add(Patient(card_number=12, first_name="Ana", last_name="Test",
                     birth_date="01.01.1990", jmbg="test-jmbg",
                     weight=60.0, height=170.0, pollen_allergy="ne"))

exams = ExaminationFile("pregledi.dat")
exams.create()
exams.add(Examination(examination_id=1, card_number=12, date="02.02.2024",
                      systolic=120, diastolic=80))

hashed.build("pacijenti.dat", "pregledi.dat")
print(hashed.average_pressure(12))   # (systolic, diastolic, bucket, position)

print(format_report(log.report(), threshold=3))
```

Once the hashed file exists, `PatientFile.add` and `PatientFile.modify` carry
the change into it, and `HashedFile.propagate_examination` folds a new
examination into a patient's running averages.

Failed lookups raise `RecordNotFoundError`, inserting an existing key raises
`DuplicateKeyError`, and a full hashed file raises `HashedFileFullError`. All
three derive from `RecordError`, found in `kartoteka.records`.

## What it does not do

- Records cannot be deleted from the patient and examination files; only the
  hashed file supports (logical) deletion.
- Adding an examination to the examination file does not update the hashed
  file by itself; call `HashedFile.propagate_examination` or rebuild.
- The log report only warns when the average number of accesses for
  searching exceeds the threshold; the hashed file is never reorganised.