from __future__ import annotations

from dataclasses import dataclass, field

from dvdchap.timecode import decode_bcd, frame_digits, frame_rate_of


@dataclass(slots=True)
class CellPlaybackTime:
    """Raw BCD playback time as stored on disc."""

    hour: int
    minute: int
    second: int
    frame_u: int

    @property
    def fps(self) -> int:
        return frame_rate_of(self.frame_u)

    @property
    def seconds(self) -> int:
        return decode_bcd(self.hour) * 3600 + decode_bcd(self.minute) * 60 + decode_bcd(self.second)

    @property
    def frames(self) -> int:
        """Total duration in frames at this time's own frame rate."""
        return self.seconds * self.fps + frame_digits(self.frame_u)


@dataclass(slots=True)
class CellPlayback:
    playback_time: CellPlaybackTime


@dataclass(slots=True)
class ProgramChain:
    program_map: list[int]  # 1-based program -> 1-based entry cell
    cell_playback: list[CellPlayback]
    playback_time: CellPlaybackTime | None = None  # declared length of the whole chain


@dataclass(slots=True)
class PartOfTitle:
    pgcn: int  # 1-based index into the PGC information table
    pgn: int  # 1-based program number inside that PGC


@dataclass(slots=True)
class TitlePtts:
    ptt: list[PartOfTitle] = field(default_factory=list)


@dataclass(slots=True)
class VideoTitleSet:
    """Parsed contents of a ``VTS_xx_0.IFO`` file."""

    vts_number: int
    part_of_title_table: list[TitlePtts]
    pgc_information_table: list[ProgramChain]


@dataclass(slots=True)
class TitleInfo:
    """One entry of the VMG title search pointer table."""

    title_set_nr: int
    vts_ttn: int
    nr_of_ptts: int


@dataclass(slots=True)
class VideoManager:
    """Parsed contents of ``VIDEO_TS.IFO``."""

    titles: list[TitleInfo]
    nr_of_title_sets: int = 0


@dataclass(slots=True)
class ChapterBoundary:
    ordinal: int  # 1-based within the title
    timestamp_ms: int
