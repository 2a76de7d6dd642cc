"""Chapter boundary computation from DVD navigation tables.

A title's chapters are its part-of-title (PTT) entries.  Each entry points
at a program inside a program chain; the program map turns that into the
chapter's first cell.  A chapter therefore covers the cells from its own
entry cell up to (but excluding) the next chapter's entry cell.  Cell
durations are BCD timecodes, summed here in frames and converted to
milliseconds once per boundary so NTSC's 1001/1000 factor never
accumulates rounding error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

from dvdchap.errors import IfoFormatError, TitleRangeError
from dvdchap.ifo.disc import Disc, open_title_set
from dvdchap.model import (
    CellPlayback,
    ChapterBoundary,
    PartOfTitle,
    ProgramChain,
    TitleInfo,
    VideoTitleSet,
)
from dvdchap.timecode import format_timestamp, frames_to_ms

log = logging.getLogger(__name__)


class ChapterSink(Protocol):
    """Consumer of the per-title chapter event stream.

    Per title: ``on_title_start``, then one ``on_chapter_start`` per
    boundary with its 1-based ordinal (the first always at 0 ms, timestamps
    non-decreasing), then ``on_title_end``.
    """

    def on_title_start(self) -> None: ...

    def on_chapter_start(self, ordinal: int, timestamp_ms: int) -> None: ...

    def on_title_end(self) -> None: ...


@dataclass(slots=True)
class CellRange:
    """Inclusive, 0-based cell range of one chapter inside *pgc*."""

    pgc: ProgramChain
    start_cell: int
    end_cell: int

    def __iter__(self) -> Iterator[CellPlayback]:
        # An inverted range yields nothing.
        for idx in range(self.start_cell, self.end_cell + 1):
            if not 0 <= idx < len(self.pgc.cell_playback):
                raise IfoFormatError(
                    f"cell {idx + 1} outside program chain with {len(self.pgc.cell_playback)} cells"
                )
            yield self.pgc.cell_playback[idx]

    def __len__(self) -> int:
        return max(0, self.end_cell - self.start_cell + 1)


# ---------------------------------------------------------------------------
# Cell-range resolution (all 1-based disc indices are converted here)
# ---------------------------------------------------------------------------


def _ptt_entry(vts: VideoTitleSet, vts_ttn: int, chapter_index: int) -> PartOfTitle:
    if not 1 <= vts_ttn <= len(vts.part_of_title_table):
        raise IfoFormatError(
            f"title number {vts_ttn} not in VTS {vts.vts_number} "
            f"({len(vts.part_of_title_table)} titles)"
        )
    ptts = vts.part_of_title_table[vts_ttn - 1].ptt
    if not 0 <= chapter_index < len(ptts):
        raise IfoFormatError(f"chapter {chapter_index + 1} missing from PTT table of VTS title {vts_ttn}")
    return ptts[chapter_index]


def _program_chain(vts: VideoTitleSet, pgcn: int) -> ProgramChain:
    if not 1 <= pgcn <= len(vts.pgc_information_table):
        raise IfoFormatError(
            f"PGC {pgcn} not in VTS {vts.vts_number} ({len(vts.pgc_information_table)} PGCs)"
        )
    return vts.pgc_information_table[pgcn - 1]


def _entry_cell(pgc: ProgramChain, pgn: int) -> int:
    """Return the 0-based entry cell of 1-based program *pgn*."""
    if not 1 <= pgn <= len(pgc.program_map):
        raise IfoFormatError(f"program {pgn} not in program map of {len(pgc.program_map)} entries")
    return pgc.program_map[pgn - 1] - 1


def resolve_chapter_cells(
    vts: VideoTitleSet, vts_ttn: int, chapter_index: int, next_chapter_index: int
) -> CellRange:
    """Return the cells of *chapter_index*, bounded by *next_chapter_index*.

    Chapter indices are 0-based; *vts_ttn* is the 1-based title number
    inside the title set.  The range is not validated: a start past the
    end simply means an empty chapter.
    """
    start = _ptt_entry(vts, vts_ttn, chapter_index)
    start_cell = _entry_cell(_program_chain(vts, start.pgcn), start.pgn)

    end = _ptt_entry(vts, vts_ttn, next_chapter_index)
    end_pgc = _program_chain(vts, end.pgcn)
    end_cell = _entry_cell(end_pgc, end.pgn) - 1

    return CellRange(pgc=end_pgc, start_cell=start_cell, end_cell=end_cell)


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------


def chapter_frames(cells: CellRange, fps: int) -> tuple[int, int]:
    """Sum the durations of *cells* in frames.

    Returns ``(frames, fps)`` where *fps* is the rate measured on the last
    cell, or the incoming *fps* when the range is empty.
    """
    frames = 0
    for cell in cells:
        time = cell.playback_time
        fps = time.fps
        frames += time.frames
    return frames, fps


def chapter_boundaries(vts: VideoTitleSet, title: TitleInfo) -> list[ChapterBoundary]:
    """Compute the start time of every chapter of *title*.

    The first chapter always starts at 0 ms.  Frames are accumulated over
    the whole title and converted with the most recently measured rate.
    """
    boundaries = [ChapterBoundary(ordinal=1, timestamp_ms=0)]
    overall_frames = 0
    fps = 0  # DVDs are either NTSC or PAL throughout

    for chapter in range(title.nr_of_ptts - 1):
        cells = resolve_chapter_cells(vts, title.vts_ttn, chapter, chapter + 1)
        if not len(cells):
            log.debug(
                "Chapter %d of VTS title %d has an empty cell range [%d, %d]",
                chapter + 1,
                title.vts_ttn,
                cells.start_cell,
                cells.end_cell,
            )
        frames, fps = chapter_frames(cells, fps)
        overall_frames += frames
        boundaries.append(
            ChapterBoundary(ordinal=chapter + 2, timestamp_ms=frames_to_ms(overall_frames, fps))
        )
    return boundaries


def declared_length_ms(vts: VideoTitleSet, title: TitleInfo) -> int | None:
    """Playback time declared by the program chain the title starts in.

    Returns ``None`` when the title has no first chapter or its PGC
    reference is dangling; only the chapter walk reports those as errors.
    """
    if not 1 <= title.vts_ttn <= len(vts.part_of_title_table):
        return None
    ptts = vts.part_of_title_table[title.vts_ttn - 1].ptt
    if not ptts or not 1 <= ptts[0].pgcn <= len(vts.pgc_information_table):
        return None
    declared = vts.pgc_information_table[ptts[0].pgcn - 1].playback_time
    if declared is None:
        return None
    return frames_to_ms(declared.frames, declared.fps)


def emit_title_chapters(vts: VideoTitleSet, title: TitleInfo, sink: ChapterSink) -> None:
    """Emit one title's event block to *sink*.

    Boundaries are computed before the first event, so a damaged title
    produces no events at all.
    """
    boundaries = chapter_boundaries(vts, title)
    declared_ms = declared_length_ms(vts, title)
    if declared_ms is not None:
        log.debug(
            "VTS title %d: last chapter starts at %s, program chain declares %s",
            title.vts_ttn,
            format_timestamp(boundaries[-1].timestamp_ms),
            format_timestamp(declared_ms),
        )
    sink.on_title_start()
    for boundary in boundaries:
        sink.on_chapter_start(boundary.ordinal, boundary.timestamp_ms)
    sink.on_title_end()


def emit_disc_chapters(disc: Disc, sink: ChapterSink, title_index: int | None = None) -> None:
    """Emit chapters for every title of *disc*, or only the 0-based *title_index*.

    Each title opens its own title set and releases it before the next one.
    """
    if title_index is None:
        indices = range(disc.title_count)
    else:
        if not 0 <= title_index < disc.title_count:
            raise TitleRangeError(title_index + 1, disc.title_count)
        indices = range(title_index, title_index + 1)

    for idx in indices:
        title = disc.titles[idx]
        with open_title_set(disc, idx) as vts:
            log.info(
                "Title %d: %d chapters in VTS %d, title %d",
                idx + 1,
                title.nr_of_ptts,
                title.title_set_nr,
                title.vts_ttn,
            )
            emit_title_chapters(vts, title, sink)
