"""Utilities for the NationStates daily data dumps.

The dumps are large gzip-compressed XML documents,
so they are walked incrementally rather than parsed whole.
"""

import datetime
import gzip
import io
import logging
import zlib
from typing import BinaryIO, Callable, Iterator, List, Optional

import xml.etree.ElementTree as etree

from nsshards.exceptions import APIResponseInvalid
from nsshards.models import DumpModel, NationData, RegionData

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def current_dump_day(now: Optional[datetime.datetime] = None) -> datetime.date:
    """Calculates the latest day available for the data dump.
    A datadump is generated ~2230 PST for that day, so the dump will be considered
    available at 2300 PST or 0700 UTC the next day.
    Should match the day of the latest archive dump.

    now should be an aware datetime, and defaults to the current time.
    """
    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc)
    utc = now.astimezone(datetime.timezone.utc)
    logger.debug("Current time is %s UTC", utc)
    return (
        utc.date() - datetime.timedelta(days=1)
        if utc.time().hour >= 7
        else utc.date() - datetime.timedelta(days=2)
    )


def iter_dump(
    source: BinaryIO,
    container: str,
    tag: str,
    parser: Callable[[etree.Element], DumpModel],
) -> Iterator[DumpModel]:
    """Iteratively parses each record of a gzip-compressed dump,
    without storing the entirety in memory simultaneously.

    Only `tag` nodes that are direct children of the `container` root
    node are parsed, nested nodes with the same tag are part of their record.
    Raises APIResponseInvalid if the data is not a valid dump.
    """
    try:
        with gzip.GzipFile(fileobj=source, mode="rb") as dump:
            # Looking for start events allows us to retrieve
            # the starting, parent, element using the `next()` call.
            iterator = etree.iterparse(dump, events=("start", "end"))
            try:
                _, root = next(iterator)
            except StopIteration:
                raise APIResponseInvalid("Data dump contained no XML.") from None
            if root.tag != container:
                raise APIResponseInvalid(
                    f"Expected a {container} data dump, got root node {root.tag}."
                )

            depth = 1
            for event, element in iterator:
                if event == "start":
                    depth += 1
                    continue
                depth -= 1
                # `end` signifies the element is fully parsed
                if depth == 1 and element.tag == tag:
                    yield parser(element)
                    # Remove references to parsed records to free memory
                    root.clear()
    except etree.ParseError as error:
        raise APIResponseInvalid(f"Data dump contained malformed XML: {error}") from error
    except (OSError, EOFError, zlib.error) as error:
        raise APIResponseInvalid(f"Data dump is not valid gzip data: {error}") from error


def decode_dump(
    data: bytes,
    container: str,
    tag: str,
    parser: Callable[[etree.Element], DumpModel],
) -> List[DumpModel]:
    """Parses every record of a gzip-compressed dump held in memory."""
    logger.info("Iteratively parsing %s dump", container)
    records = list(iter_dump(io.BytesIO(data), container, tag, parser))
    logger.info("Parsed %s records from %s dump", len(records), container)
    return records


def decode_nation_dump(data: bytes) -> List[NationData]:
    """Parses each nation of a nations dump."""
    return decode_dump(data, "NATIONS", "NATION", NationData.from_xml)


def decode_region_dump(data: bytes) -> List[RegionData]:
    """Parses each region of a regions dump."""
    return decode_dump(data, "REGIONS", "REGION", RegionData.from_xml)
