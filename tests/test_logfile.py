import pytest

from kartoteka.logfile import (
    LOG_BLOCKING_FACTOR,
    OPERATIONS,
    AccessLog,
    OperationStats,
    format_entries,
    format_report,
)


@pytest.fixture
def log(tmp_path):
    return AccessLog(tmp_path / "log.dat")


def test_record_creates_missing_file(log):
    entry = log.record("upis", 2, 17)
    assert log.path.exists()
    assert entry.entry_id == 1
    assert [e for _, _, e in log.entries()] == [entry]


def test_ids_increase(log):
    first = log.record("upis", 1, 5)
    second = log.record("trazenje", 3, 5)
    assert second.entry_id == first.entry_id + 1


def test_find_entry(log):
    log.record("upis", 1, 5)
    entry = log.record("brisanje", 4, 8)
    assert log.find(entry.entry_id) == entry
    assert log.find(entry.entry_id + 10) is None


def test_new_instance_continues_ids(log):
    first = log.record("upis", 1, 5)
    reopened = AccessLog(log.path)
    second = reopened.record("upis", 1, 6)
    assert second.entry_id > first.entry_id
    assert len(list(reopened.entries())) == 2


def test_entries_span_blocks(log):
    for number in range(LOG_BLOCKING_FACTOR + 1):
        log.record("upis", 1, number)
    blocks = [block for block, _, _ in log.entries()]
    assert blocks == [0] * LOG_BLOCKING_FACTOR + [1]


def test_report_totals(log):
    log.record("trazenje", 3, 10)
    log.record("trazenje", 5, 11)
    log.record("upis", 2, 10)
    log.record("nepoznato", 9, 10)
    stats = {item.operation: item for item in log.report()}
    assert stats["trazenje"].record_count == 2
    assert stats["trazenje"].access_count == 3 + 5
    assert stats["trazenje"].average == (3 + 5) / 2
    assert stats["upis"].access_count == 2
    assert stats["brisanje"].record_count == 0
    assert sum(item.access_count for item in stats.values()) == 3 + 5 + 2


def test_report_order(log):
    log.record("modifikacija", 1, 1)
    assert [item.operation for item in log.report()] == list(OPERATIONS)


def test_average_without_records_is_zero():
    assert OperationStats("upis").average == 0.0


def test_entries_on_missing_file_raises(log):
    with pytest.raises(FileNotFoundError):
        list(log.entries())


def test_format_entries(log):
    log.record("upis", 2, 17)
    text = format_entries(log.entries())
    assert "Naziv operacije: upis\n" in text
    assert "ID za pristup: 17\n" in text
    assert "Adresa bloka: 0\n" in text


def test_format_report_threshold_warning():
    stats = [OperationStats("trazenje", 2, 8)]
    assert "veće od praga 3" in format_report(stats, 3)
    assert "veće od praga" not in format_report(stats, 4)


def test_format_report_line():
    text = format_report([OperationStats("upis", 1, 2)], 0)
    assert text == "Operacija: upis, Broj slogova: 1, Broj pristupa: 2, Prosečan broj pristupa: 2.00\n"