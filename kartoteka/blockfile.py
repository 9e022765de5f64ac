"""Sequential files of fixed-size slots grouped into blocks."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generic, Iterator, TypeVar

from .records import (
    ACTIVE,
    END_MARKER,
    DuplicateKeyError,
    RecordError,
    RecordNotFoundError,
    Slot,
)

P = TypeVar("P")


class BlockFile(Generic[P]):
    """A file of blocks holding slots, terminated by an end-marker slot."""

    def __init__(self, path, payload_type: type, blocking_factor: int) -> None:
        if blocking_factor < 1:
            raise ValueError("blocking factor must be at least 1")
        self.path = Path(path)
        self.payload_type = payload_type
        self.blocking_factor = blocking_factor
        self._slot_size = Slot.size(payload_type)
        self._block_size = self._slot_size * blocking_factor

    def _empty_block(self) -> list[Slot]:
        block = [Slot(0, END_MARKER, self.payload_type()) for _ in range(self.blocking_factor)]
        block[0].key = END_MARKER
        return block

    def _end_slot(self) -> Slot:
        return Slot(END_MARKER, END_MARKER, self.payload_type())

    @staticmethod
    def _pack_block(block: list[Slot]) -> bytes:
        return b"".join(slot.pack() for slot in block)

    def _unpack_block(self, data: bytes) -> list[Slot]:
        return [
            Slot.unpack(data[start:start + self._slot_size], self.payload_type)
            for start in range(0, len(data), self._slot_size)
        ]

    def create(self) -> None:
        """Write a new file holding a single empty block."""
        with self.path.open("wb") as fp:
            fp.write(self._pack_block(self._empty_block()))

    def blocks(self) -> Iterator[list[Slot]]:
        """Yield every complete block of the file."""
        with self.path.open("rb") as fp:
            while len(data := fp.read(self._block_size)) == self._block_size:
                yield self._unpack_block(data)

    def active(self) -> Iterator[tuple[int, int, Slot]]:
        """Yield (block, position, slot) for live slots up to the end marker."""
        for block_index, block in enumerate(self.blocks()):
            for position, slot in enumerate(block):
                if slot.key == END_MARKER:
                    return
                if slot.deleted == ACTIVE:
                    yield block_index, position, slot

    def find(self, key: int) -> Slot | None:
        """Return the live slot with this key, or None."""
        return next((slot for _, _, slot in self.active() if slot.key == key), None)

    def append(self, key: int, payload: P) -> tuple[int, int]:
        """Store a payload at the end marker and return its (block, position)."""
        if self.find(key) is not None:
            raise DuplicateKeyError(f"key {key} is already stored in {self.path}")
        with self.path.open("r+b") as fp:
            count = fp.seek(0, os.SEEK_END) // self._block_size
            if count == 0:
                raise RecordError(f"{self.path} holds no complete block")
            offset = (count - 1) * self._block_size
            fp.seek(offset)
            block = self._unpack_block(fp.read(self._block_size))
            position = next(
                (index for index, slot in enumerate(block) if slot.key == END_MARKER), None
            )
            if position is None:
                raise RecordError(f"{self.path} has no end marker in its last block")
            block[position] = Slot(key, ACTIVE, payload)
            fp.seek(offset)
            if position + 1 < self.blocking_factor:
                block[position + 1] = self._end_slot()
                fp.write(self._pack_block(block))
            else:
                fp.write(self._pack_block(block))
                fp.write(self._pack_block(self._empty_block()))
        return count - 1, position

    def replace(self, key: int, payload: P) -> tuple[int, int]:
        """Overwrite the payload of the live slot with this key."""
        location = next(
            ((block, pos) for block, pos, slot in self.active() if slot.key == key), None
        )
        if location is None:
            raise RecordNotFoundError(f"key {key} is not stored in {self.path}")
        block, pos = location
        with self.path.open("r+b") as fp:
            fp.seek(block * self._block_size + pos * self._slot_size)
            fp.write(Slot(key, ACTIVE, payload).pack())
        return location