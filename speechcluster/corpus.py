"""Speech records, labels and text-file discovery."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from speechcluster.config import DEFAULTS
from speechcluster.errors import InvalidArgument
from speechcluster.utils import natural_sort_key

logger = logging.getLogger("speechcluster")

# "George_Washington_1790" -> speaker "George Washington", year "1790"
_STEM_RE = re.compile(r"^(?P<speaker>.+?)[_-](?P<year>\d{4})$")


@dataclass(frozen=True)
class SpeechRecord:
    doc_id: int
    speaker: str
    year: str
    text: str


def make_label(record: SpeechRecord) -> str:
    return f"{record.doc_id}_{record.speaker}_{record.year}"


def build_labels(records: Sequence[SpeechRecord]) -> list[str]:
    return [make_label(r) for r in records]


def discover_speeches(input_dir: Path) -> list[Path]:
    """Find all speech text files in *input_dir*, naturally sorted."""
    speeches = [
        p for p in input_dir.iterdir()
        if p.is_file() and p.suffix.lower() in DEFAULTS.text_extensions
    ]
    speeches.sort(key=natural_sort_key)
    return speeches


def _parse_stem(stem: str) -> tuple[str, str]:
    match = _STEM_RE.match(stem)
    if match is None:
        return stem, ""
    return match.group("speaker").replace("_", " "), match.group("year")


def load_speeches(paths: Sequence[Path]) -> list[SpeechRecord]:
    """Read each file as one speech; ids are 1-based in file order."""
    records = []
    for doc_id, path in enumerate(paths, start=1):
        speaker, year = _parse_stem(path.stem)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidArgument(f"{path} is not valid UTF-8: {exc}") from exc
        records.append(SpeechRecord(
            doc_id=doc_id,
            speaker=speaker,
            year=year,
            text=text,
        ))
    logger.info("Loaded %d speeches", len(records))
    return records
