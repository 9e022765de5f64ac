import pytest

from kartoteka.blockfile import BlockFile
from kartoteka.records import (
    END_MARKER,
    DuplicateKeyError,
    Examination,
    RecordError,
    RecordNotFoundError,
    Slot,
)


def _exam(exam_id, systolic=120, diastolic=80):
    return Examination(exam_id, 1, "01.01.2024", systolic, diastolic)


@pytest.fixture
def block_file(tmp_path):
    bf = BlockFile(tmp_path / "pregledi.dat", Examination, 3)
    bf.create()
    return bf


def test_create_writes_one_empty_block(block_file):
    blocks = list(block_file.blocks())
    assert len(blocks) == 1
    assert blocks[0][0].key == END_MARKER
    assert list(block_file.active()) == []


def test_file_size_is_whole_blocks(block_file):
    for exam_id in range(1, 6):
        block_file.append(exam_id, _exam(exam_id))
    size = block_file.path.stat().st_size
    assert size % (Slot.size(Examination) * 3) == 0


def test_append_then_find(block_file):
    exam = _exam(4)
    block_file.append(4, exam)
    slot = block_file.find(4)
    assert slot.payload == exam
    assert slot.key == 4


def test_find_missing_returns_none(block_file):
    block_file.append(1, _exam(1))
    assert block_file.find(2) is None


def test_duplicate_key_raises(block_file):
    block_file.append(1, _exam(1))
    with pytest.raises(DuplicateKeyError):
        block_file.append(1, _exam(1, 130))


def test_append_positions_and_growth(tmp_path):
    bf = BlockFile(tmp_path / "f.dat", Examination, 2)
    bf.create()
    assert bf.append(10, _exam(10)) == (0, 0)
    assert bf.append(11, _exam(11)) == (0, 1)
    assert bf.append(12, _exam(12)) == (1, 0)
    assert [slot.key for _, _, slot in bf.active()] == [10, 11, 12]
    assert len(list(bf.blocks())) == 2


def test_active_keeps_insertion_order(block_file):
    keys = [7, 3, 9, 1, 5]
    for key in keys:
        block_file.append(key, _exam(key))
    assert [slot.key for _, _, slot in block_file.active()] == keys
    assert all(block_file.find(key).payload.examination_id == key for key in keys)


def test_replace_changes_payload(block_file):
    block_file.append(1, _exam(1))
    block_file.append(2, _exam(2))
    updated = _exam(2, 150, 95)
    assert block_file.replace(2, updated) == (0, 1)
    assert block_file.find(2).payload == updated
    assert block_file.find(1).payload == _exam(1)


def test_replace_missing_raises(block_file):
    with pytest.raises(RecordNotFoundError):
        block_file.replace(99, _exam(99))


def test_append_to_missing_file_raises(tmp_path):
    bf = BlockFile(tmp_path / "nema.dat", Examination, 3)
    with pytest.raises(FileNotFoundError):
        bf.append(1, _exam(1))


def test_append_to_empty_file_raises(tmp_path):
    path = tmp_path / "prazna.dat"
    path.write_bytes(b"")
    bf = BlockFile(path, Examination, 3)
    with pytest.raises(RecordError):
        bf.append(1, _exam(1))


def test_invalid_blocking_factor_raises(tmp_path):
    with pytest.raises(ValueError):
        BlockFile(tmp_path / "f.dat", Examination, 0)