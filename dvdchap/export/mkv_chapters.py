"""Matroska XML chapter file generation.

:class:`MatroskaChapterWriter` consumes the chapter event stream and
builds a document ``mkvmerge --chapters`` accepts: one ``EditionEntry``
per DVD title, one ``ChapterAtom`` per chapter boundary.
"""

from __future__ import annotations

import random
import xml.etree.ElementTree as ET
from collections.abc import Callable
from pathlib import Path

from dvdchap.timecode import format_timestamp

UidSource = Callable[[], int]

_DOCTYPE_COMMENT = '<!-- <!DOCTYPE Chapters SYSTEM "matroskachapters.dtd"> -->'


def random_uid_source(seed: int | None = None) -> UidSource:
    """Return a callable yielding non-zero 64-bit UIDs.

    Matroska reserves UID 0, so it is skipped.  Without *seed* the
    generator is seeded from OS entropy.
    """
    rng = random.Random(seed)

    def _next_uid() -> int:
        uid = 0
        while uid == 0:
            uid = rng.getrandbits(64)
        return uid

    return _next_uid


class MatroskaChapterWriter:
    """Builds a Matroska chapters document from title/chapter events."""

    def __init__(self, uid_source: UidSource | None = None, language: str = "und") -> None:
        self._uid = uid_source or random_uid_source()
        self._language = language
        self._root = ET.Element("Chapters")
        self._edition: ET.Element | None = None

    # -- ChapterSink --

    def on_title_start(self) -> None:
        edition = ET.SubElement(self._root, "EditionEntry")
        ET.SubElement(edition, "EditionFlagHidden").text = "0"
        ET.SubElement(edition, "EditionFlagDefault").text = "0"
        ET.SubElement(edition, "EditionFlagOrdered").text = "0"
        ET.SubElement(edition, "EditionUID").text = str(self._uid())
        self._edition = edition

    def on_chapter_start(self, ordinal: int, timestamp_ms: int) -> None:
        if self._edition is None:
            raise RuntimeError("chapter event received outside a title")
        atom = ET.SubElement(self._edition, "ChapterAtom")
        ET.SubElement(atom, "ChapterUID").text = str(self._uid())
        ET.SubElement(atom, "ChapterTimeStart").text = format_timestamp(timestamp_ms)
        disp = ET.SubElement(atom, "ChapterDisplay")
        ET.SubElement(disp, "ChapterString").text = f"Chapter {ordinal:02d}"
        ET.SubElement(disp, "ChapterLanguage").text = self._language
        ET.SubElement(disp, "ChapLanguageIETF").text = self._language

    def on_title_end(self) -> None:
        self._edition = None

    # -- output --

    @property
    def edition_count(self) -> int:
        return len(self._root)

    def to_xml(self) -> str:
        """Render the document collected so far."""
        root = self._root
        ET.indent(root, space="  ")
        body = ET.tostring(root, encoding="unicode")
        return f'<?xml version="1.0"?>\n{_DOCTYPE_COMMENT}\n{body}\n'

    def write(self, path: str | Path) -> Path:
        """Write the document to *path*, creating parent directories."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(self.to_xml(), encoding="utf-8")
        return p
