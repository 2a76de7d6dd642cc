"""Opening a DVD-Video file structure and its title sets.

Both handles are context managers: the IFO is read and parsed fully on
entry and nothing is kept open afterwards, so leaving the ``with`` block
releases the title set on every exit path.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from dvdchap.errors import IfoFormatError, OpenError
from dvdchap.ifo.vmg import parse_vmg
from dvdchap.ifo.vts import parse_vts
from dvdchap.model import TitleInfo, VideoManager, VideoTitleSet

log = logging.getLogger(__name__)

T = TypeVar("T")

VMG_BASENAME = "VIDEO_TS"


@dataclass(slots=True)
class Disc:
    """An opened disc: the resolved ``VIDEO_TS`` directory plus its VMG."""

    path: Path
    video_ts: Path
    vmg: VideoManager

    @property
    def titles(self) -> list[TitleInfo]:
        return self.vmg.titles

    @property
    def title_count(self) -> int:
        return len(self.vmg.titles)


def resolve_video_ts(path_str: str | Path) -> Path:
    """Resolve *path_str* to the actual ``VIDEO_TS`` directory.

    Accepts the disc root (a dir containing ``VIDEO_TS/``), the ``VIDEO_TS``
    directory itself, or the ``VIDEO_TS.IFO`` file.
    """
    p = Path(path_str).resolve()
    if p.is_file() and p.stem.upper() == VMG_BASENAME:
        return p.parent
    if not p.is_dir():
        raise OpenError(f"Failed to open DVD structure under {path_str}: not a directory")
    if _find_file(p, f"{VMG_BASENAME}.IFO") or _find_file(p, f"{VMG_BASENAME}.BUP"):
        return p
    for child in p.iterdir():
        if child.is_dir() and child.name.upper() == VMG_BASENAME:
            return child
    raise OpenError(
        f"Failed to open DVD structure under {path_str}: "
        "expected a VIDEO_TS directory or a parent containing one"
    )


def _find_file(directory: Path, name: str) -> Path | None:
    """Case-insensitive lookup; discs ripped on different systems vary."""
    exact = directory / name
    if exact.is_file():
        return exact
    wanted = name.upper()
    for child in directory.iterdir():
        if child.name.upper() == wanted and child.is_file():
            return child
    return None


def _read_ifo_or_backup(
    directory: Path, basename: str, parse: Callable[[Path], T], what: str
) -> T:
    """Parse ``<basename>.IFO``, falling back to ``<basename>.BUP``.

    Raises :class:`OpenError` naming *what* when neither copy is usable.
    """
    failures: list[str] = []
    for ext in ("IFO", "BUP"):
        candidate = _find_file(directory, f"{basename}.{ext}")
        if candidate is None:
            failures.append(f"{basename}.{ext} not found")
            log.debug("%s.%s not found in %s", basename, ext, directory)
            continue
        try:
            result = parse(candidate)
        except (IfoFormatError, OSError) as e:
            failures.append(f"{candidate.name}: {e}")
            log.warning("Unable to read %s (%s)", candidate.name, e)
            continue
        if ext == "BUP":
            log.warning("Using backup %s for %s", candidate.name, what)
        else:
            log.info("Opened %s", candidate.name)
        return result
    raise OpenError(f"Failed to open IFO for {what} ({'; '.join(failures)})")


@contextmanager
def open_disc(path: str | Path) -> Iterator[Disc]:
    """Open the DVD structure at *path* and yield a :class:`Disc`."""
    video_ts = resolve_video_ts(path)
    try:
        vmg = _read_ifo_or_backup(video_ts, VMG_BASENAME, parse_vmg, "the video manager")
    except OpenError as e:
        raise OpenError(f"Failed to open DVD structure under {path}: {e}") from e
    yield Disc(path=Path(path), video_ts=video_ts, vmg=vmg)


@contextmanager
def open_title_set(disc: Disc, title_index: int) -> Iterator[VideoTitleSet]:
    """Open the title set owning the 0-based *title_index*.

    Title sets are not cached: two titles sharing a set each open it.
    """
    title = disc.titles[title_index]
    vts_nr = title.title_set_nr
    basename = f"VTS_{vts_nr:02d}_0"
    vts = _read_ifo_or_backup(
        disc.video_ts,
        basename,
        lambda p: parse_vts(p, vts_number=vts_nr),
        f"title {title_index + 1} (title set {vts_nr})",
    )
    try:
        yield vts
    finally:
        log.debug("Released title set %d", vts_nr)
