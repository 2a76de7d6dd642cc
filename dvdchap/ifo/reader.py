"""Big-endian reader for DVD-Video IFO files.

IFO tables are located by sector number from the start of the file, and
the records inside a table by byte offsets from the table start.  A
:class:`BinaryReader` covers one such window of the file; :meth:`sector`
and :meth:`slice` open sub-windows over the same buffer without copying.
"""

from __future__ import annotations

import struct
from pathlib import Path
from typing import Union

SECTOR_SIZE = 2048

_U8 = struct.Struct(">B")
_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")


class BinaryReader:
    """Cursor over a window of an IFO buffer.

    Every read is bounds-checked against the window and raises
    :class:`ValueError` when it would run past the end; the parsers turn
    that into :class:`~dvdchap.errors.IfoFormatError`.
    """

    __slots__ = ("_data", "_pos", "_start", "_end")

    def __init__(self, source: Union[bytes, memoryview, str, Path]) -> None:
        if isinstance(source, (str, Path)):
            source = Path(source).read_bytes()
        self._data = source if isinstance(source, memoryview) else memoryview(source)
        self._start = 0
        self._end = len(self._data)
        self._pos = 0

    def __enter__(self) -> BinaryReader:
        return self

    def __exit__(self, *_: object) -> None:
        self._data.release()

    @property
    def size(self) -> int:
        """Length of this window in bytes."""
        return self._end - self._start

    def tell(self) -> int:
        return self._pos - self._start

    def seek(self, offset: int) -> None:
        """Move the cursor to *offset* within the window."""
        if not 0 <= offset <= self.size:
            raise ValueError(f"seek to offset {offset} outside window of {self.size} bytes")
        self._pos = self._start + offset

    def skip(self, n: int) -> None:
        self._check(self.tell(), n)
        self._pos += n

    def _check(self, offset: int, n: int) -> None:
        if offset < 0 or offset + n > self.size:
            raise ValueError(
                f"need {n} bytes at offset {offset}, but window is {self.size} bytes"
            )

    # -- windows --

    def slice(self, offset: int, length: int | None = None) -> BinaryReader:
        """Return a reader over ``[offset, offset + length)`` of this window.

        Without *length* the new window runs to the end of this one.
        """
        if length is None:
            length = max(0, self.size - offset)
        self._check(offset, length)
        child = object.__new__(BinaryReader)
        child._data = self._data
        child._start = child._pos = self._start + offset
        child._end = child._start + length
        return child

    def sector(self, sector_no: int) -> BinaryReader:
        """Return a reader from the start of *sector_no* to the end of the window."""
        return self.slice(sector_no * SECTOR_SIZE)

    # -- sequential reads --

    def _unpack(self, fmt: struct.Struct) -> int:
        self._check(self.tell(), fmt.size)
        (value,) = fmt.unpack_from(self._data, self._pos)
        self._pos += fmt.size
        return value

    def u8(self) -> int:
        return self._unpack(_U8)

    def u16(self) -> int:
        return self._unpack(_U16)

    def u32(self) -> int:
        return self._unpack(_U32)

    def read_bytes(self, n: int) -> bytes:
        self._check(self.tell(), n)
        data = bytes(self._data[self._pos : self._pos + n])
        self._pos += n
        return data

    def read_string(self, n: int) -> str:
        """Read *n* bytes as ASCII with NUL padding removed."""
        return self.read_bytes(n).replace(b"\x00", b"").decode("ascii", errors="replace")

    # -- positional reads (cursor unchanged) --

    def _unpack_at(self, fmt: struct.Struct, offset: int) -> int:
        self._check(offset, fmt.size)
        return fmt.unpack_from(self._data, self._start + offset)[0]

    def u8_at(self, offset: int) -> int:
        return self._unpack_at(_U8, offset)

    def u16_at(self, offset: int) -> int:
        return self._unpack_at(_U16, offset)

    def u32_at(self, offset: int) -> int:
        return self._unpack_at(_U32, offset)
