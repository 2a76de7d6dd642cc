"""Parser for the DVD-Video Video Manager (``VIDEO_TS.IFO``)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from dvdchap.errors import IfoFormatError
from dvdchap.ifo.reader import BinaryReader
from dvdchap.model import TitleInfo, VideoManager

log = logging.getLogger(__name__)

VMG_MAGIC = "DVDVIDEO-VMG"

# VMGI_MAT field offsets
_NR_OF_TITLE_SETS = 0x03E
_TT_SRPT_SECTOR = 0x0C4

_TITLE_ENTRY_SIZE = 12

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse_title_entry(r: BinaryReader) -> TitleInfo:
    """Parse one 12-byte TT_SRPT entry."""
    r.skip(2)  # playback type, number of angles
    nr_of_ptts = r.u16()
    r.skip(2)  # parental id mask
    title_set_nr = r.u8()
    vts_ttn = r.u8()
    r.skip(4)  # start sector of the title set
    return TitleInfo(title_set_nr=title_set_nr, vts_ttn=vts_ttn, nr_of_ptts=nr_of_ptts)


def _parse_tt_srpt(r: BinaryReader) -> list[TitleInfo]:
    """Parse the title search pointer table."""
    nr_of_srpts = r.u16()
    r.skip(2)  # reserved
    last_byte = r.u32()
    available = (last_byte + 1 - 8) // _TITLE_ENTRY_SIZE
    if nr_of_srpts > available:
        log.warning(
            "TT_SRPT claims %d titles but only has room for %d; truncating",
            nr_of_srpts,
            available,
        )
        nr_of_srpts = max(0, available)

    titles: list[TitleInfo] = []
    for idx in range(nr_of_srpts):
        title = _parse_title_entry(r)
        if title.title_set_nr == 0 or title.vts_ttn == 0:
            log.warning("Title %d has invalid title set %d / ttn %d", idx + 1, title.title_set_nr, title.vts_ttn)
        titles.append(title)
    return titles


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_vmg(source: Union[BinaryReader, str, Path]) -> VideoManager:
    """Parse a ``VIDEO_TS.IFO`` (or ``.BUP``) and return a :class:`VideoManager`."""
    if isinstance(source, BinaryReader):
        return _parse_vmg_reader(source, "")
    path = Path(source)
    with BinaryReader(path) as r:
        return _parse_vmg_reader(r, path.name)


def _parse_vmg_reader(r: BinaryReader, name: str) -> VideoManager:
    label = name or "VMG"
    try:
        magic = r.read_string(12)
        if magic != VMG_MAGIC:
            raise IfoFormatError(f"Not a VMG IFO file (magic={magic!r})")
        nr_of_title_sets = r.u16_at(_NR_OF_TITLE_SETS)
        tt_srpt_sector = r.u32_at(_TT_SRPT_SECTOR)
        if tt_srpt_sector == 0:
            raise IfoFormatError(f"{label} has no title search pointer table")
        titles = _parse_tt_srpt(r.sector(tt_srpt_sector))
    except ValueError as e:
        raise IfoFormatError(f"Truncated {label}: {e}") from e

    log.debug("%s: %d titles in %d title sets", label, len(titles), nr_of_title_sets)
    return VideoManager(titles=titles, nr_of_title_sets=nr_of_title_sets)
