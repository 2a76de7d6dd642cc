"""Parser for DVD-Video Title Set information (``VTS_xx_0.IFO``).

Only the two tables needed to place chapters are decoded: the
part-of-title search pointer table (VTS_PTT_SRPT) and the program chain
information table (VTS_PGCIT).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from dvdchap.errors import IfoFormatError
from dvdchap.ifo.reader import BinaryReader
from dvdchap.model import (
    CellPlayback,
    CellPlaybackTime,
    PartOfTitle,
    ProgramChain,
    TitlePtts,
    VideoTitleSet,
)

log = logging.getLogger(__name__)

VTS_MAGIC = "DVDVIDEO-VTS"

# VTSI_MAT field offsets
_VTS_PTT_SRPT_SECTOR = 0x0C8
_VTS_PGCIT_SECTOR = 0x0CC

# PGC field offsets
_PGC_NR_OF_PROGRAMS = 0x02
_PGC_NR_OF_CELLS = 0x03
_PGC_PLAYBACK_TIME = 0x04
_PGC_PROGRAM_MAP_OFFSET = 0xE6
_PGC_CELL_PLAYBACK_OFFSET = 0xE8

_CELL_PLAYBACK_SIZE = 24
_PTT_ENTRY_SIZE = 4

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _read_playback_time(r: BinaryReader) -> CellPlaybackTime:
    return CellPlaybackTime(hour=r.u8(), minute=r.u8(), second=r.u8(), frame_u=r.u8())


def _parse_ptt_srpt(r: BinaryReader) -> list[TitlePtts]:
    """Parse VTS_PTT_SRPT into one :class:`TitlePtts` per title in the set.

    Each title's PTT list runs from its offset up to the next title's
    offset; the last one ends at ``last_byte``.
    """
    nr_of_srpts = r.u16()
    r.skip(2)  # reserved
    last_byte = r.u32()
    offsets = [r.u32() for _ in range(nr_of_srpts)]

    table: list[TitlePtts] = []
    for idx, start in enumerate(offsets):
        end = offsets[idx + 1] if idx + 1 < len(offsets) else last_byte + 1
        count = (end - start) // _PTT_ENTRY_SIZE
        if count < 0:
            log.warning("PTT table for VTS title %d has negative size; treating as empty", idx + 1)
            count = 0
        r.seek(start)
        ptts = []
        for _ in range(count):
            pgcn = r.u16()
            pgn = r.u16()
            ptts.append(PartOfTitle(pgcn=pgcn, pgn=pgn))
        table.append(TitlePtts(ptt=ptts))
    return table


def _parse_pgc(r: BinaryReader) -> ProgramChain:
    """Parse one program chain; *r* starts at the PGC header."""
    nr_of_programs = r.u8_at(_PGC_NR_OF_PROGRAMS)
    nr_of_cells = r.u8_at(_PGC_NR_OF_CELLS)
    playback_time = _read_playback_time(r.slice(_PGC_PLAYBACK_TIME, 4))
    program_map_offset = r.u16_at(_PGC_PROGRAM_MAP_OFFSET)
    cell_playback_offset = r.u16_at(_PGC_CELL_PLAYBACK_OFFSET)

    program_map: list[int] = []
    if nr_of_programs and program_map_offset:
        pm = r.slice(program_map_offset, nr_of_programs)
        program_map = [pm.u8() for _ in range(nr_of_programs)]

    cells: list[CellPlayback] = []
    if nr_of_cells and cell_playback_offset:
        cp = r.slice(cell_playback_offset, nr_of_cells * _CELL_PLAYBACK_SIZE)
        for _ in range(nr_of_cells):
            cp.skip(4)  # category flags, still time, cell command
            cells.append(CellPlayback(playback_time=_read_playback_time(cp)))
            cp.skip(16)  # first sector, first ILVU end, last VOBU start, last sector

    return ProgramChain(program_map=program_map, cell_playback=cells, playback_time=playback_time)


def _parse_pgcit(r: BinaryReader) -> list[ProgramChain]:
    """Parse VTS_PGCIT; PGC start offsets are relative to the table start."""
    nr_of_pgci_srp = r.u16()
    r.skip(2)  # reserved
    _last_byte = r.u32()

    starts: list[int] = []
    for _ in range(nr_of_pgci_srp):
        r.skip(4)  # entry id, block flags, parental mask
        starts.append(r.u32())

    return [_parse_pgc(r.slice(start)) for start in starts]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_vts(source: Union[BinaryReader, str, Path], vts_number: int = 0) -> VideoTitleSet:
    """Parse a ``VTS_xx_0.IFO`` (or ``.BUP``) and return a :class:`VideoTitleSet`."""
    if isinstance(source, BinaryReader):
        return _parse_vts_reader(source, "", vts_number)
    path = Path(source)
    with BinaryReader(path) as r:
        return _parse_vts_reader(r, path.name, vts_number)


def _parse_vts_reader(r: BinaryReader, name: str, vts_number: int) -> VideoTitleSet:
    label = name or f"VTS {vts_number}"
    try:
        magic = r.read_string(12)
        if magic != VTS_MAGIC:
            raise IfoFormatError(f"Not a VTS IFO file (magic={magic!r})")
        ptt_sector = r.u32_at(_VTS_PTT_SRPT_SECTOR)
        pgcit_sector = r.u32_at(_VTS_PGCIT_SECTOR)
        if ptt_sector == 0 or pgcit_sector == 0:
            raise IfoFormatError(f"{label} is missing its PTT or PGC table")
        ptts = _parse_ptt_srpt(r.sector(ptt_sector))
        pgcs = _parse_pgcit(r.sector(pgcit_sector))
    except ValueError as e:
        raise IfoFormatError(f"Truncated {label}: {e}") from e

    log.debug("%s: %d titles, %d program chains", label, len(ptts), len(pgcs))
    return VideoTitleSet(vts_number=vts_number, part_of_title_table=ptts, pgc_information_table=pgcs)
