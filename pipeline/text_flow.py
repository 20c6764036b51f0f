"""TextFlowEngine — greedy word wrap into a fixed-width column.

Knows nothing about pages; PageFlowEngine decides where each line lands.
"""
from typing import Iterator

from models.document import LineBlock
from utils.fonts import FontMetrics


def flow_text(
    text: str,
    column_width: float,
    metrics: FontMetrics,
    size_pt: float,
) -> Iterator[LineBlock]:
    """Yield the lines of ``text`` wrapped to ``column_width`` millimetres.

    Newlines separate paragraphs; a blank paragraph becomes an empty line.
    A word wider than the column is placed alone on its own line, unbroken.
    Whitespace-only text yields nothing.
    """
    text = text.strip()
    if not text:
        return
    for paragraph in text.splitlines():
        words = paragraph.split()
        if not words:
            yield LineBlock(text="")
            continue
        line = ""
        for word in words:
            candidate = f"{line} {word}" if line else word
            if line and metrics.text_width(candidate, size_pt) > column_width:
                yield LineBlock(text=line)
                line = word
            else:
                line = candidate
        yield LineBlock(text=line)
