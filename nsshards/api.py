"""Wrapper around the NS API, making ratelimited requests
and parsing the responses into models.
See https://www.nationstates.net/pages/api.html for NS API details.
"""

import datetime
import logging
from typing import Callable, Dict, List, Optional, TypeVar

import xml.etree.ElementTree as etree
import requests

from nsshards.dumps import decode_nation_dump, decode_region_dump
from nsshards.exceptions import APIRequestFailure, APIResponseInvalid, InvalidArgument
from nsshards.models import NationData, RegionData, WorldAssemblyData, WorldData
from nsshards.parser import as_xml
from nsshards.ratelimit import RateGate, RequestClass
from nsshards.shards import (
    Council,
    NationShards,
    RegionShards,
    WorldAssemblyShards,
    WorldShards,
)
from nsshards import uri

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

T = TypeVar("T")

# Exact body returned by NS when a telegram is accepted
TELEGRAM_QUEUED = "queued\n"


def _decode(
    data: bytes, rootTag: str, parser: Callable[[etree.Element], T]
) -> T:
    """Parses a response body, checking the root node before handing it to parser.

    Malformed content raises APIResponseInvalid.
    """
    root = as_xml(data)
    if root.tag != rootTag:
        raise APIResponseInvalid(f"Expected a {rootTag} node, got {root.tag}.")
    try:
        return parser(root)
    except (ValueError, KeyError) as error:
        raise APIResponseInvalid(
            f"Malformed {rootTag} response: {error!r}"
        ) from error


def _text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as error:
        raise APIResponseInvalid(f"Response is not valid text: {data!r}") from error


class NSRequester:
    """Class to manage making requests from the NS API

    Every request waits on the rateGate, which can be shared between requesters
    (e.g. with different user agents) to keep their combined traffic under the limit.
    """

    def __init__(self, userAgent: str, rateGate: Optional[RateGate] = None) -> None:
        if not isinstance(userAgent, str) or not userAgent.strip():
            raise InvalidArgument("A non-empty user agent is required by the NS API.")

        # Save user agent and construct headers object for later use
        self.userAgent = userAgent
        self.headers: Dict[str, str] = {"User-Agent": userAgent}

        self.rateGate = rateGate if rateGate is not None else RateGate()

    def request(
        self,
        target: str,
        requestClass: RequestClass = RequestClass.STANDARD,
        description: Optional[str] = None,
    ) -> bytes:
        """Returns the body retrieved from the target uri.

        Waits on the rate gate first, and marks it only if the request succeeded.
        description replaces the uri in the log, for uris containing secrets.
        Raises APIRequestFailure if the request fails or NS responds with an error status.
        """
        with self.rateGate.admission(requestClass):
            logger.info("Requesting %s", description or target)
            try:
                # Streaming and closing ensures the connection is released on every path
                with requests.get(target, headers=self.headers, stream=True) as response:
                    response.raise_for_status()
                    return response.content
            except requests.RequestException as error:
                failed = error.response
                statusCode = failed.status_code if failed is not None else None
                raise APIRequestFailure(
                    f"Request to {description or target} failed: {error}", statusCode
                ) from error

    def nation(self, nation: str, shards: NationShards) -> NationData:
        """Requests the given shards of a nation.

        With no shards enabled, NS returns its standard set.
        """
        target = uri.nation_uri(nation, shards)
        return _decode(self.request(target), "NATION", NationData.from_xml)

    def region(self, region: str, shards: RegionShards) -> RegionData:
        """Requests the given shards of a region.

        With no shards enabled, NS returns its standard set.
        """
        target = uri.region_uri(region, shards)
        return _decode(self.request(target), "REGION", RegionData.from_xml)

    def world(self, shards: WorldShards) -> WorldData:
        """Requests the given world shards, at least one must be enabled."""
        target = uri.world_uri(shards)
        return _decode(self.request(target), "WORLD", WorldData.from_xml)

    def world_assembly(
        self, council: Council, shards: WorldAssemblyShards
    ) -> WorldAssemblyData:
        """Requests the given shards of a World Assembly council."""
        target = uri.world_assembly_uri(council, shards)
        return _decode(self.request(target), "WA", WorldAssemblyData.from_xml)

    def nation_dump(self, date: Optional[datetime.date] = None) -> List[NationData]:
        """Downloads and parses the nations dump.

        The most recent dump is used, unless a date of an archived dump is given.
        """
        data = self.request(uri.nation_dump_uri(date))
        try:
            return decode_nation_dump(data)
        except (ValueError, KeyError) as error:
            raise APIResponseInvalid(f"Malformed nations dump: {error!r}") from error

    def region_dump(self, date: Optional[datetime.date] = None) -> List[RegionData]:
        """Downloads and parses the regions dump.

        The most recent dump is used, unless a date of an archived dump is given.
        """
        data = self.request(uri.region_dump_uri(date))
        try:
            return decode_region_dump(data)
        except (ValueError, KeyError) as error:
            raise APIResponseInvalid(f"Malformed regions dump: {error!r}") from error

    def send_telegram(
        self,
        clientKey: str,
        telegramId: str,
        telegramSecretKey: str,
        recipient: str,
        recruitment: bool = True,
    ) -> None:
        """Sends a telegram template to the recipient through the telegram API.

        recruitment selects which telegram cooldown applies,
        and must match the type of the template.
        Raises APIResponseInvalid if NS does not report the telegram as queued.
        """
        target = uri.telegram_uri(clientKey, telegramId, telegramSecretKey, recipient)
        requestClass = (
            RequestClass.RECRUITMENT_TELEGRAM
            if recruitment
            else RequestClass.NON_RECRUITMENT_TELEGRAM
        )
        body = _text(
            self.request(
                target,
                requestClass,
                description=f"telegram {telegramId} to {recipient}",
            )
        )
        if body != TELEGRAM_QUEUED:
            raise APIResponseInvalid(f"Telegram was not queued, got {body!r}.")

    def verify(self, nation: str, checksum: str, token: Optional[str] = None) -> bool:
        """Checks a login verification checksum of a nation.

        Returns True if the checksum is valid for the nation (and token, if given).
        See https://www.nationstates.net/pages/api.html#verification
        """
        target = uri.authentication_uri(nation, checksum, token)
        body = _text(self.request(target))
        try:
            result = int(body)
        except ValueError as error:
            raise APIResponseInvalid(
                f"Expected 0 or 1 from verification, got {body!r}."
            ) from error
        if result not in (0, 1):
            raise APIResponseInvalid(f"Expected 0 or 1 from verification, got {body!r}.")
        return result == 1
