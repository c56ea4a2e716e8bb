"""Command line access to the NS API.

Prints the requested data as JSON, e.g.
    python -m nsshards --agent "Testlandia" nation testlandia region population
"""

import argparse
import dataclasses
import json
import logging
import os
import sys
import typing as t

from nsshards import api
from nsshards import core
from nsshards.exceptions import APIError
from nsshards.shards import (
    Council,
    NationShards,
    RegionShards,
    WorldAssemblyShards,
    WorldShards,
)

logger = logging.getLogger(__name__)

# Environment variable checked for a user agent if one is not passed
AGENT_VARIABLE = "NSSHARDS_USER_AGENT"


def select(shardsType: t.Any, names: t.Iterable[str], **configuration: t.Any) -> t.Any:
    """Constructs a selector of the given type, enabling each named shard.

    Shards can be named by field (e.g. fullName) or by NS token (e.g. fullname).
    Raises ValueError if a name is not a shard of the selector.
    """
    lookup = {}
    for field, token in shardsType._catalog:
        lookup[field] = field
        lookup.setdefault(token, field)

    flags = {}
    for name in names:
        if name not in lookup:
            raise ValueError(f"Unknown shard {name!r}.")
        flags[lookup[name]] = True
    return shardsType(**flags, **configuration)


def build_parser() -> argparse.ArgumentParser:
    """Constructs the argument parser of the command line interface."""
    parser = argparse.ArgumentParser(
        prog="nsshards", description="Request data from the NS API."
    )
    parser.add_argument(
        "--agent",
        default=os.environ.get(AGENT_VARIABLE),
        help=f"User agent to identify with, defaults to ${AGENT_VARIABLE}.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log each request made."
    )

    subparsers = parser.add_subparsers(dest="endpoint", required=True)

    nation = subparsers.add_parser("nation", help="Request shards of a nation.")
    nation.add_argument("name", help="Name of the nation.")
    nation.add_argument("shards", nargs="*", help="Shards to request.")

    region = subparsers.add_parser("region", help="Request shards of a region.")
    region.add_argument("name", help="Name of the region.")
    region.add_argument("shards", nargs="*", help="Shards to request.")

    world = subparsers.add_parser("world", help="Request world shards.")
    world.add_argument("shards", nargs="+", help="Shards to request.")

    wa = subparsers.add_parser("wa", help="Request shards of a World Assembly council.")
    wa.add_argument(
        "-c",
        "--council",
        type=int,
        choices=[council.value for council in Council],
        default=Council.GENERAL_ASSEMBLY.value,
        help="1 for the General Assembly, 2 for the Security Council.",
    )
    wa.add_argument("shards", nargs="+", help="Shards to request.")

    return parser


def request(requester: api.NSRequester, args: argparse.Namespace) -> t.Any:
    """Makes the request described by the parsed arguments."""
    if args.endpoint == "nation":
        return requester.nation(args.name, select(NationShards, args.shards))
    if args.endpoint == "region":
        return requester.region(args.name, select(RegionShards, args.shards))
    if args.endpoint == "world":
        return requester.world(select(WorldShards, args.shards))
    return requester.world_assembly(
        Council(args.council), select(WorldAssemblyShards, args.shards)
    )


def main(argv: t.Optional[t.Sequence[str]] = None) -> int:
    """Main function, returns the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.agent:
        parser.error(f"a user agent is required, use --agent or set ${AGENT_VARIABLE}")

    core.configure_logger(
        logging.getLogger(), level=logging.INFO if args.verbose else logging.WARNING
    )

    requester = api.NSRequester(args.agent)
    try:
        result = request(requester, args)
    except APIError as error:
        logger.error("%s", error)
        return 1
    except ValueError as error:
        parser.error(str(error))

    print(json.dumps(dataclasses.asdict(result), default=str, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
