"""Output formatters (Matroska chapters XML)."""

from dvdchap.export.mkv_chapters import MatroskaChapterWriter, random_uid_source
