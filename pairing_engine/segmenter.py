"""Split a raw bid-package text dump into per-trip blocks."""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Iterator, List

from .schemas import TripBlock

LOGGER = logging.getLogger(__name__)

TRIP_HEADER_RE = re.compile(r"^#\d{4,5}\s+[A-Z]{2}")


class SegmenterState(Enum):
    OUTSIDE = "outside"
    IN_BLOCK = "in_block"


def is_trip_header(line: str) -> bool:
    return bool(TRIP_HEADER_RE.match(line.strip()))


def iter_trip_blocks(raw_text: str) -> Iterator[TripBlock]:
    """Yield one :class:`TripBlock` per trip header, in document order.

    Lines before the first header are preamble and never emitted. Each block
    keeps its lines verbatim (line endings included), so joining the emitted
    texts reproduces the document from the first header onwards.
    """

    state = SegmenterState.OUTSIDE
    buffer: List[str] = []
    header_line = 0
    index = 0

    for line_number, line in enumerate(raw_text.splitlines(keepends=True), start=1):
        if is_trip_header(line):
            if state is SegmenterState.IN_BLOCK:
                yield TripBlock(index=index, line_number=header_line, text="".join(buffer))
                index += 1
            state = SegmenterState.IN_BLOCK
            buffer = [line]
            header_line = line_number
        elif state is SegmenterState.IN_BLOCK:
            buffer.append(line)

    if state is SegmenterState.IN_BLOCK:
        yield TripBlock(index=index, line_number=header_line, text="".join(buffer))


def split_trip_blocks(raw_text: str) -> List[TripBlock]:
    blocks = list(iter_trip_blocks(raw_text))
    LOGGER.debug("Segmented %d trip blocks", len(blocks))
    return blocks
