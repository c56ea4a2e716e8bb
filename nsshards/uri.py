"""Construction of NS API request URIs.

Every builder validates its arguments before producing anything,
raising InvalidArgument, so no request is made with bad input.
"""

import datetime
from typing import Optional, Tuple
from urllib.parse import quote_plus

from nsshards.core import joined_parameter
from nsshards.exceptions import InvalidArgument
from nsshards.shards import (
    Council,
    NationShards,
    RegionShards,
    WorldAssemblyShards,
    WorldShards,
)

# The API version requested by every API uri
API_VERSION = 4

SITE_URL = "https://www.nationstates.net"
API_URL = SITE_URL + "/cgi-bin/api.cgi"


def require_text(name: str, value: Optional[str]) -> str:
    """Returns value, raising InvalidArgument if it is None or empty."""
    if value is None:
        raise InvalidArgument(f"{name} must not be None.")
    if not isinstance(value, str):
        raise InvalidArgument(f"{name} must be a string, got {type(value).__name__}.")
    if value == "":
        raise InvalidArgument(f"{name} must not be empty.")
    return value


def encode(name: str, value: str) -> str:
    """Percent encodes a caller supplied value for use in a query string."""
    try:
        return quote_plus(require_text(name, value))
    except UnicodeError as error:
        raise InvalidArgument(
            f"{name} contains characters that cannot be included in a URI."
        ) from error


def query_string(*parameters: Tuple[str, str]) -> str:
    """Joins already encoded key-value pairs, appending the API version."""
    return "&".join(
        f"{key}={value}" for key, value in (*parameters, ("v", str(API_VERSION)))
    )


def api_uri(*parameters: Tuple[str, str]) -> str:
    """Returns the API uri with the given (encoded) parameters."""
    return API_URL + "?" + query_string(*parameters)


def _check_selector(selector: object, kind: type) -> None:
    if selector is None:
        raise InvalidArgument("The shards object must not be None.")
    if not isinstance(selector, kind):
        raise InvalidArgument(
            f"Expected {kind.__name__}, got {type(selector).__name__}."
        )


def nation_uri(nation: str, shards: NationShards) -> str:
    """Returns the uri requesting the given shards of a nation.

    The `q` parameter is omitted if no shards are enabled,
    in which case NS responds with the standard shards.
    """
    name = encode("nation", nation)
    _check_selector(shards, NationShards)
    tokens = shards.tokens()
    if tokens:
        return api_uri(("nation", name), ("q", joined_parameter(*tokens)))
    return api_uri(("nation", name))


def region_uri(region: str, shards: RegionShards) -> str:
    """Returns the uri requesting the given shards of a region.

    The `q` parameter is omitted if no shards are enabled,
    in which case NS responds with the standard shards.
    """
    name = encode("region", region)
    _check_selector(shards, RegionShards)
    tokens = shards.tokens()
    if tokens:
        return api_uri(("region", name), ("q", joined_parameter(*tokens)))
    return api_uri(("region", name))


def world_uri(shards: WorldShards) -> str:
    """Returns the uri requesting the given world shards, at least one is required."""
    _check_selector(shards, WorldShards)
    if not shards.any_enabled():
        raise InvalidArgument("At least one shard must be enabled in the request.")
    return api_uri(("q", shards.query()))


def world_assembly_uri(council: Council, shards: WorldAssemblyShards) -> str:
    """Returns the uri requesting the given shards of a World Assembly council."""
    try:
        council = Council(council)
    except ValueError as error:
        raise InvalidArgument(f"Unknown World Assembly council {council!r}.") from error
    _check_selector(shards, WorldAssemblyShards)
    if not shards.primary_enabled():
        raise InvalidArgument(
            "At least one shard (that is not votesHistory, delegateVotesHistory "
            "or delegateVotes) must be enabled in the request."
        )
    return api_uri(("wa", str(council.value)), ("q", shards.query()))


def telegram_uri(
    clientKey: str, telegramId: str, telegramSecretKey: str, recipient: str
) -> str:
    """Returns the uri that sends a telegram through the telegram API."""
    return api_uri(
        ("a", "sendTG"),
        ("client", encode("clientKey", clientKey)),
        ("tgid", encode("telegramId", telegramId)),
        ("key", encode("telegramSecretKey", telegramSecretKey)),
        ("to", encode("recipient", recipient)),
    )


def authentication_uri(
    nation: str, checksum: str, token: Optional[str] = None
) -> str:
    """Returns the uri that verifies a login checksum of a nation.

    token is the optional site specific token, it must not be empty if given.
    """
    parameters = [
        ("a", "verify"),
        ("nation", encode("nation", nation)),
        ("checksum", encode("checksum", checksum)),
    ]
    if token is not None:
        parameters.append(("token", encode("token", token)))
    return api_uri(*parameters)


def _dump_uri(dump: str, date: Optional[datetime.date]) -> str:
    if date is None:
        return f"{SITE_URL}/pages/{dump}.xml.gz"
    # Archive dumps are named by the day they were generated
    return f"{SITE_URL}/archive/{dump}/{date.isoformat()}-{dump}-xml.gz"


def nation_dump_uri(date: Optional[datetime.date] = None) -> str:
    """Returns the uri of the daily nations dump, or the archived one of the given day."""
    return _dump_uri("nations", date)


def region_dump_uri(date: Optional[datetime.date] = None) -> str:
    """Returns the uri of the daily regions dump, or the archived one of the given day."""
    return _dump_uri("regions", date)
