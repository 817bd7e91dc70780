"""Reading rows from an input stream."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from colhist.core.models import RowError, RowResult

LINE_TERMINATORS = "\r\n"


def read_rows(
    stream: Iterable[bytes | str],
    encoding: str = "utf-8",
    skip_header: bool = False,
) -> Iterator[tuple[int, RowResult[str]]]:
    """Yield ``(line_number, row)`` pairs from a line-oriented stream.

    Line numbers start at 1 and count the header, so they match what an
    editor shows. A line that cannot be decoded becomes a failed_read error
    rather than ending the stream.

    Args:
        stream: Binary stream (or any iterable of lines, bytes or text)
        encoding: Encoding used to decode byte lines
        skip_header: Drop the first line
    """
    for line_number, raw in enumerate(stream, start=1):
        if skip_header and line_number == 1:
            continue

        if isinstance(raw, bytes):
            try:
                text = raw.decode(encoding)
            except UnicodeDecodeError as e:
                yield line_number, RowResult.fail(RowError.failed_read(str(e), line_number))
                continue
        else:
            text = raw

        yield line_number, RowResult.ok(text.rstrip(LINE_TERMINATORS))
