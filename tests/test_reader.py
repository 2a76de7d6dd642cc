"""Tests for the IFO BinaryReader."""

import struct

import pytest

from dvdchap.ifo.reader import SECTOR_SIZE, BinaryReader


class TestPrimitiveReads:
    """Test u8, u16, u32 big-endian reads."""

    def test_u8(self) -> None:
        r = BinaryReader(b"\xab")
        assert r.u8() == 0xAB

    def test_u16(self) -> None:
        r = BinaryReader(struct.pack(">H", 0xBEEF))
        assert r.u16() == 0xBEEF

    def test_u32(self) -> None:
        r = BinaryReader(struct.pack(">I", 0xDEADBEEF))
        assert r.u32() == 0xDEADBEEF


class TestPositionalReads:
    """Test the *_at reads that leave the cursor alone."""

    def test_reads_at_offset(self) -> None:
        r = BinaryReader(b"\x00\x01" + struct.pack(">HI", 0x0203, 0x04050607))
        assert r.u8_at(1) == 0x01
        assert r.u16_at(2) == 0x0203
        assert r.u32_at(4) == 0x04050607
        assert r.tell() == 0

    def test_read_at_past_end_raises(self) -> None:
        r = BinaryReader(b"\x00\x01\x02")
        with pytest.raises(ValueError, match="need 4 bytes"):
            r.u32_at(1)


class TestReadBytesAndString:
    def test_read_bytes(self) -> None:
        r = BinaryReader(b"\x01\x02\x03\x04")
        assert r.read_bytes(3) == b"\x01\x02\x03"
        assert r.read_bytes(1) == b"\x04"

    def test_read_string(self) -> None:
        r = BinaryReader(b"DVDVIDEO-VMG\x00")
        assert r.read_string(12) == "DVDVIDEO-VMG"

    def test_read_string_strips_nulls(self) -> None:
        r = BinaryReader(b"AB\x00\x00\x00")
        assert r.read_string(5) == "AB"


class TestCursor:
    def test_tell_advances_after_read(self) -> None:
        r = BinaryReader(b"\x00" * 10)
        r.u8()
        assert r.tell() == 1
        r.u16()
        assert r.tell() == 3

    def test_seek(self) -> None:
        r = BinaryReader(b"\x00\x01\x02\x03")
        r.seek(2)
        assert r.u8() == 0x02

    def test_skip(self) -> None:
        r = BinaryReader(b"\x00\x01\x02\x03")
        r.skip(3)
        assert r.u8() == 0x03

    def test_seek_out_of_range_raises(self) -> None:
        r = BinaryReader(b"\x00\x01")
        with pytest.raises(ValueError):
            r.seek(10)


class TestSlice:
    def test_slice_basic(self) -> None:
        r = BinaryReader(b"\x00\x01\x02\x03\x04\x05")
        child: BinaryReader = r.slice(2, 3)
        assert child.size == 3
        assert child.tell() == 0
        assert [child.u8(), child.u8(), child.u8()] == [0x02, 0x03, 0x04]

    def test_slice_to_end(self) -> None:
        r = BinaryReader(b"\x00\x01\x02\x03")
        child = r.slice(1)
        assert child.size == 3
        child.seek(2)
        assert child.u8() == 0x03

    def test_slice_independent_of_parent(self) -> None:
        r = BinaryReader(b"\x00\x01\x02\x03\x04\x05")
        child: BinaryReader = r.slice(1, 2)
        child.u8()
        assert r.tell() == 0

    def test_slice_cannot_read_past_its_end(self) -> None:
        r = BinaryReader(b"\x00\x01\x02\x03")
        child = r.slice(0, 2)
        with pytest.raises(ValueError):
            child.u32()

    def test_sector(self) -> None:
        data = b"\x00" * SECTOR_SIZE + b"\xaa\xbb"
        r = BinaryReader(data)
        s = r.sector(1)
        assert s.size == 2
        assert s.u16() == 0xAABB

    def test_sector_beyond_file_raises(self) -> None:
        r = BinaryReader(b"\x00" * 16)
        with pytest.raises(ValueError):
            r.sector(3)


class TestSourceAndRelease:
    def test_reads_from_path(self, tmp_path) -> None:
        p = tmp_path / "x.bin"
        p.write_bytes(b"\x12\x34")
        with BinaryReader(p) as r:
            assert r.u16() == 0x1234

    def test_context_exit_releases_buffer(self) -> None:
        r = BinaryReader(b"\x00\x01")
        with r:
            pass
        with pytest.raises(ValueError):
            r.u8()


class TestWindows:
    def test_window_reads_are_relative(self) -> None:
        data = b"\x00" * SECTOR_SIZE + struct.pack(">HH", 0x0102, 0x0304)
        table = BinaryReader(data).sector(1)
        entry = table.slice(2)
        assert entry.u16_at(0) == 0x0304
        with pytest.raises(ValueError, match="need 2 bytes at offset 2"):
            entry.u16_at(2)
