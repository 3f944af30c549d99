"""
app/services/feed_loader.py

Turns raw feed text into an ordered, immutable collection of project records.

Load flow
---------
1. ``FeedConnector.fetch_text()`` on a worker thread (the only suspension point).
2. Strip the body, split into lines, discard the header line.
3. Decode each line positionally and coerce every field.
4. Admit rows with a positive project id; count the rest as dropped.

A transport failure raises :class:`FeedFetchError` and aborts the load.
A malformed row never does: its fields are defaulted instead.
"""

from __future__ import annotations

import asyncio
import logging

from app.connectors.base import FeedConnector
from app.domain.project_record import LoadResult, ProjectRecord, RowValidationError
from app.logging_utils import log_event
from app.parsers.line_decoder import decode_line
from app.validators.field_coercers import ProjectRowParser

logger = logging.getLogger(__name__)


def parse_feed_text(text: str, *, parser: ProjectRowParser | None = None) -> LoadResult:
    """
    Parse a complete feed body (header included) into a :class:`LoadResult`.

    Blank lines fail the project id check and are counted as dropped.
    """

    row_parser = parser or ProjectRowParser()
    lines = text.strip().split("\n")

    records: list[ProjectRecord] = []
    row_errors: list[RowValidationError] = []
    rows_read = 0
    rows_dropped = 0

    # Row numbers are 1-based data rows; the header is row 0.
    for row_number, line in enumerate(lines[1:], start=1):
        rows_read += 1
        record, errors = row_parser.parse_row(decode_line(line), row_number=row_number)
        row_errors.extend(errors)
        if record is None:
            rows_dropped += 1
            continue
        records.append(record)

    return LoadResult(
        records=tuple(records),
        rows_read=rows_read,
        rows_dropped=rows_dropped,
        row_errors=tuple(row_errors),
    )


class FeedLoader:
    """
    Loads the project feed from a :class:`FeedConnector`.

    Parameters
    ----------
    connector:
        Source of raw feed text. The loader never retries it.
    parser:
        Optional row parser override.
    """

    def __init__(
        self,
        connector: FeedConnector,
        *,
        parser: ProjectRowParser | None = None,
    ) -> None:
        self._connector = connector
        self._parser = parser or ProjectRowParser()

    async def load(self) -> LoadResult:
        """
        Fetch and parse the feed.

        Raises
        ------
        FeedFetchError
            When the source cannot be reached or returns a non-success status.
        """

        log_event(logger, logging.DEBUG, "feed_load_started", source=self._connector.source)
        text = await asyncio.to_thread(self._connector.fetch_text)
        result = parse_feed_text(text, parser=self._parser)

        for error in result.row_errors:
            logger.debug(
                "Feed row defaulted row=%s column=%s value=%r message=%s",
                error.row_number,
                error.column,
                error.value,
                error.message,
            )
        if result.rows_dropped:
            logger.warning(
                "Feed load dropped %d of %d rows without a positive project id",
                result.rows_dropped,
                result.rows_read,
            )
        log_event(
            logger,
            logging.INFO,
            "feed_load_completed",
            source=self._connector.source,
            rows_read=result.rows_read,
            rows_loaded=len(result.records),
            rows_dropped=result.rows_dropped,
            fields_defaulted=result.fields_defaulted,
        )
        return result
