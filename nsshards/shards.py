"""Selection of the shards to request from each NS API.

Each selector is a dataclass of boolean flags, one per shard, plus any
configuration the shards need. Flags are emitted as shard tokens in
catalog order, so the same selector always produces the same query.
See https://www.nationstates.net/pages/api.html for the shard descriptions.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as t
from typing import AbstractSet, ClassVar, List, Optional, Sequence, Tuple
from urllib.parse import quote_plus

from nsshards.core import clean_format, joined_parameter
from nsshards.exceptions import InvalidArgument

# Maximum number of tags accepted by the regionsbytag shard
REGIONS_BY_TAG_LIMIT = 10


def _check_natural(name: str, value: t.Any, allowZero: bool = True) -> None:
    """Raises InvalidArgument if value is not a non-negative (or positive) int."""
    # bool is a subclass of int, but never a sensible id or count
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}.")
    if value < 0 or (value == 0 and not allowZero):
        raise InvalidArgument(f"{name} must not be {value}.")


def _encode(name: str, value: str) -> str:
    """Percent encodes a value embedded in a shard token."""
    try:
        return quote_plus(value, safe="")
    except UnicodeError as error:
        raise InvalidArgument(
            f"{name} contains characters that cannot be included in a URI."
        ) from error


class _Shards:
    """Shared behaviour of the shard selectors.

    Subclasses are dataclasses of bool fields, and list (field, token)
    pairs in _catalog in the order they should be emitted.
    """

    _catalog: ClassVar[Sequence[Tuple[str, str]]] = ()

    @classmethod
    def every(cls, **overrides: t.Any) -> t.Any:
        """Constructs a selector with every shard enabled.

        Keyword arguments are passed through, and take priority.
        """
        flags: t.Dict[str, t.Any] = {field: True for field, _ in cls._catalog}
        flags.update(overrides)
        return cls(**flags)

    def enabled(self) -> List[str]:
        """Returns the field names of the enabled shards, in catalog order."""
        return [field for field, _ in self._catalog if getattr(self, field)]

    def any_enabled(self) -> bool:
        """Whether at least one shard is enabled."""
        return bool(self.enabled())

    def validate(self) -> None:
        """Raises InvalidArgument if the configuration is unusable.

        Called on construction and again when the request is built.
        """

    def _token(self, field: str, token: str) -> str:
        """Returns the full token of a shard, subclasses add configuration."""
        return token

    def tokens(self) -> List[str]:
        """Validates, then returns the tokens of all enabled shards in order."""
        self.validate()
        return [
            self._token(field, token)
            for field, token in self._catalog
            if getattr(self, field)
        ]

    def query(self) -> str:
        """Returns the tokens joined for use as the `q` parameter."""
        return joined_parameter(*self.tokens())

    def __post_init__(self) -> None:
        self.validate()


@dataclasses.dataclass()
class NationShards(_Shards):
    """Shards of the nation API.

    If no shards are enabled, NS returns a standard set of nation data.
    censusStatisticsIds lists the census ids requested by censusStatistics,
    a None entry requests the current day's census.
    """

    name: bool = False
    fullName: bool = False
    type: bool = False
    motto: bool = False
    category: bool = False
    worldAssemblyMembership: bool = False
    worldAssemblyEndorsements: bool = False
    generalAssemblyVote: bool = False
    securityCouncilVote: bool = False
    freedomDescriptions: bool = False
    region: bool = False
    population: bool = False
    taxPercentage: bool = False
    animal: bool = False
    animalDescription: bool = False
    currency: bool = False
    flag: bool = False
    majorIndustry: bool = False
    crime: bool = False
    sensibilities: bool = False
    governmentBudgetPriority: bool = False
    governmentBudget: bool = False
    governmentDescription: bool = False
    economyDescription: bool = False
    notable: bool = False
    admirable: bool = False
    founded: bool = False
    firstLogin: bool = False
    lastLogin: bool = False
    lastActivity: bool = False
    influence: bool = False
    freedomScores: bool = False
    publicSectorPercentage: bool = False
    causesOfDeath: bool = False
    leader: bool = False
    capital: bool = False
    religion: bool = False
    regionalCensusRanking: bool = False
    worldCensusRanking: bool = False
    censusStatistics: bool = False
    censusStatisticsIds: Sequence[Optional[int]] = (None,)
    legislation: bool = False
    happenings: bool = False
    demonymAdjective: bool = False
    demonymNoun: bool = False
    demonymNounPlural: bool = False
    numberOfFactbooks: bool = False
    factbookMetadata: bool = False
    numberOfDispatches: bool = False
    dispatchMetadata: bool = False
    issuesAnswered: bool = False
    databaseId: bool = False

    _catalog: ClassVar[Sequence[Tuple[str, str]]] = (
        ("name", "name"),
        ("fullName", "fullname"),
        ("type", "type"),
        ("motto", "motto"),
        ("category", "category"),
        ("worldAssemblyMembership", "wa"),
        ("worldAssemblyEndorsements", "endorsements"),
        ("generalAssemblyVote", "gavote"),
        ("securityCouncilVote", "scvote"),
        ("freedomDescriptions", "freedom"),
        ("region", "region"),
        ("population", "population"),
        ("taxPercentage", "tax"),
        ("animal", "animal"),
        ("animalDescription", "animaltrait"),
        ("currency", "currency"),
        ("flag", "flag"),
        ("majorIndustry", "majorindustry"),
        ("crime", "crime"),
        ("sensibilities", "sensibilities"),
        ("governmentBudgetPriority", "govtpriority"),
        ("governmentBudget", "govt"),
        ("governmentDescription", "govtdesc"),
        ("economyDescription", "industrydesc"),
        ("notable", "notable"),
        ("admirable", "admirable"),
        ("founded", "founded"),
        ("firstLogin", "firstlogin"),
        ("lastLogin", "lastlogin"),
        ("lastActivity", "lastactivity"),
        ("influence", "influence"),
        ("freedomScores", "freedomscores"),
        ("publicSectorPercentage", "publicsector"),
        ("causesOfDeath", "deaths"),
        ("leader", "leader"),
        ("capital", "capital"),
        ("religion", "religion"),
        ("regionalCensusRanking", "rcensus"),
        ("worldCensusRanking", "wcensus"),
        ("censusStatistics", "censusscore"),
        ("legislation", "legislation"),
        ("happenings", "happenings"),
        ("demonymAdjective", "demonym"),
        ("demonymNoun", "demonym2"),
        ("demonymNounPlural", "demonym2plural"),
        ("numberOfFactbooks", "factbooks"),
        ("factbookMetadata", "factbooklist"),
        ("numberOfDispatches", "dispatches"),
        ("dispatchMetadata", "dispatchlist"),
        ("issuesAnswered", "answered"),
        ("databaseId", "dbid"),
    )

    def validate(self) -> None:
        if self.censusStatisticsIds is None:
            raise InvalidArgument("censusStatisticsIds must not be None.")
        for censusId in self.censusStatisticsIds:
            if censusId is not None:
                _check_natural("Census statistic id", censusId)
        if self.censusStatistics and len(self.censusStatisticsIds) == 0:
            raise InvalidArgument(
                "censusStatisticsIds must not be empty when censusStatistics is enabled."
            )

    def tokens(self) -> List[str]:
        # The census shard expands to one token per id, so is handled here
        self.validate()
        tokens = []
        for field, token in self._catalog:
            if not getattr(self, field):
                continue
            if field == "censusStatistics":
                tokens.extend(
                    token if censusId is None else f"{token}-{censusId}"
                    for censusId in self.censusStatisticsIds
                )
            else:
                tokens.append(token)
        return tokens


@dataclasses.dataclass()
class RegionShards(_Shards):
    """Shards of the region API.

    If no shards are enabled, NS returns a standard set of region data.
    messagesOffset is the number of recent messages skipped by the messages shard.
    """

    name: bool = False
    factbook: bool = False
    numberOfNations: bool = False
    nations: bool = False
    delegate: bool = False
    numberOfDelegateVotes: bool = False
    delegateAuthority: bool = False
    generalAssemblyVote: bool = False
    securityCouncilVote: bool = False
    founder: bool = False
    founderAuthority: bool = False
    officers: bool = False
    power: bool = False
    flag: bool = False
    embassies: bool = False
    tags: bool = False
    happenings: bool = False
    history: bool = False
    lastUpdate: bool = False
    poll: bool = False
    messages: bool = False
    messagesOffset: int = 0

    # messages must remain the final shard, NS ignores any that follow it
    _catalog: ClassVar[Sequence[Tuple[str, str]]] = (
        ("name", "name"),
        ("factbook", "factbook"),
        ("numberOfNations", "numnations"),
        ("nations", "nations"),
        ("delegate", "delegate"),
        ("numberOfDelegateVotes", "delegatevotes"),
        ("delegateAuthority", "delegateauth"),
        ("generalAssemblyVote", "gavote"),
        ("securityCouncilVote", "scvote"),
        ("founder", "founder"),
        ("founderAuthority", "founderauth"),
        ("officers", "officers"),
        ("power", "power"),
        ("flag", "flag"),
        ("embassies", "embassies"),
        ("tags", "tags"),
        ("happenings", "happenings"),
        ("history", "history"),
        ("lastUpdate", "lastupdate"),
        ("poll", "poll"),
        ("messages", "messages"),
    )

    def validate(self) -> None:
        _check_natural("messagesOffset", self.messagesOffset)

    def _token(self, field: str, token: str) -> str:
        if field == "messages":
            return f"{token};offset={self.messagesOffset}"
        return token


class HappeningsView(enum.Enum):
    """Limits happenings to a particular group of nations."""

    NATION = "nation"
    REGION = "region"


class HappeningsFilter(enum.Enum):
    """Limits happenings to a particular type.

    Filters are emitted in declaration order.
    """

    # National
    LAW = "law"
    CHANGE = "change"
    DISPATCH = "dispatch"
    # Regional
    RMB = "rmb"
    EMBASSY = "embassy"
    EJECT = "eject"
    ADMIN = "admin"
    # Movement
    MOVE = "move"
    FOUNDING = "founding"
    CTE = "cte"
    # World Assembly
    VOTE = "vote"
    RESOLUTION = "resolution"
    MEMBER = "member"
    ENDO = "endo"


@dataclasses.dataclass()
class HappeningsConfiguration:
    """Configuration of the world happenings shard.

    view and viewValue go together, e.g. view=HappeningsView.REGION, viewValue="the pacific".
    filters is a set of HappeningsFilter, None does not filter.
    """

    view: Optional[HappeningsView] = None
    viewValue: Optional[str] = None
    filters: Optional[AbstractSet[HappeningsFilter]] = None
    limit: Optional[int] = None
    sinceId: Optional[int] = None
    beforeId: Optional[int] = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raises InvalidArgument if the configuration is unusable."""
        if self.view is not None and not self.viewValue:
            raise InvalidArgument("viewValue must be provided when view is set.")
        if self.filters is not None:
            if len(self.filters) == 0:
                raise InvalidArgument("filters must not be empty, use None instead.")
            for item in self.filters:
                if not isinstance(item, HappeningsFilter):
                    raise InvalidArgument(f"Unknown happenings filter {item!r}.")
        if self.limit is not None:
            _check_natural("limit", self.limit, allowZero=False)
        if self.sinceId is not None:
            _check_natural("sinceId", self.sinceId)
        if self.beforeId is not None:
            _check_natural("beforeId", self.beforeId)

    def parameters(self) -> str:
        """Returns the `;key=value` parameters of the happenings token."""
        self.validate()
        parameters = ""
        if self.view is not None and self.viewValue:
            viewValue = _encode("viewValue", clean_format(self.viewValue))
            parameters += f";view={self.view.value}.{viewValue}"
        if self.filters is not None:
            parameters += ";filter=" + joined_parameter(
                *(item.value for item in HappeningsFilter if item in self.filters)
            )
        if self.limit is not None:
            parameters += f";limit={self.limit}"
        if self.sinceId is not None:
            parameters += f";sinceid={self.sinceId}"
        if self.beforeId is not None:
            parameters += f";beforeid={self.beforeId}"
        return parameters


@dataclasses.dataclass()
class RegionsByTagConfiguration:
    """Configuration of the world regionsbytag shard.

    Regions must have every tag in includeTags, and none in excludeTags.
    At most ten tags can be given between the two.
    Tags are sent lowercase with underscores for spaces, as NS names them.
    """

    includeTags: Sequence[str] = ()
    excludeTags: Sequence[str] = ()

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raises InvalidArgument if the configuration is unusable."""
        includeTags = self.includeTags or ()
        excludeTags = self.excludeTags or ()
        if not includeTags and not excludeTags:
            raise InvalidArgument("At least one tag must be included or excluded.")
        if len(includeTags) + len(excludeTags) > REGIONS_BY_TAG_LIMIT:
            raise InvalidArgument(
                f"No more than {REGIONS_BY_TAG_LIMIT} tags can be given, "
                f"got {len(includeTags) + len(excludeTags)}."
            )
        for tag in (*includeTags, *excludeTags):
            if not isinstance(tag, str) or not tag:
                raise InvalidArgument(f"Tags must be non-empty strings, got {tag!r}.")

    def parameters(self) -> str:
        """Returns the `;tags=` parameter of the regionsbytag token."""
        self.validate()
        tags = [f"-{_encode('tag', clean_format(tag))}" for tag in self.excludeTags or ()]
        tags.extend(_encode("tag", clean_format(tag)) for tag in self.includeTags or ())
        return ";tags=" + ",".join(tags)


@dataclasses.dataclass()
class WorldShards(_Shards):
    """Shards of the world API. At least one shard must be enabled.

    happenings requires happeningsConfiguration,
    and regionsByTag requires regionsByTagConfiguration.
    happenings and regionsByTag cannot be requested together.
    """

    numberOfNations: bool = False
    numberOfRegions: bool = False
    censusName: bool = False
    censusId: bool = False
    censusSize: bool = False
    censusScale: bool = False
    censusMedian: bool = False
    featuredRegion: bool = False
    happenings: bool = False
    happeningsConfiguration: Optional[HappeningsConfiguration] = dataclasses.field(
        default_factory=HappeningsConfiguration
    )
    newNations: bool = False
    regionsByTag: bool = False
    regionsByTagConfiguration: Optional[RegionsByTagConfiguration] = None

    _catalog: ClassVar[Sequence[Tuple[str, str]]] = (
        ("numberOfNations", "numnations"),
        ("numberOfRegions", "numregions"),
        ("censusName", "census"),
        ("censusId", "censusid"),
        ("censusSize", "censussize"),
        ("censusScale", "censusscale"),
        ("censusMedian", "censusmedian"),
        ("featuredRegion", "featuredregion"),
        ("happenings", "happenings"),
        ("newNations", "newnations"),
        ("regionsByTag", "regionsbytag"),
    )

    @classmethod
    def every(cls, **overrides: t.Any) -> WorldShards:
        """Constructs a selector with every shard that can be combined enabled.

        regionsByTag is left disabled, since it excludes happenings
        and needs tags to be configured.
        """
        overrides.setdefault("regionsByTag", False)
        return super().every(**overrides)

    def validate(self) -> None:
        if self.happenings:
            if self.happeningsConfiguration is None:
                raise InvalidArgument(
                    "happeningsConfiguration must be provided when happenings is enabled."
                )
            self.happeningsConfiguration.validate()
        if self.regionsByTag:
            if self.regionsByTagConfiguration is None:
                raise InvalidArgument(
                    "regionsByTagConfiguration must be provided when regionsByTag is enabled."
                )
            self.regionsByTagConfiguration.validate()
        if self.happenings and self.regionsByTag:
            raise InvalidArgument(
                "happenings and regionsByTag cannot be requested together."
            )

    def _token(self, field: str, token: str) -> str:
        if field == "happenings" and self.happeningsConfiguration is not None:
            return token + self.happeningsConfiguration.parameters()
        if field == "regionsByTag" and self.regionsByTagConfiguration is not None:
            return token + self.regionsByTagConfiguration.parameters()
        return token


class Council(enum.IntEnum):
    """The two councils of the World Assembly, valued by their API id."""

    GENERAL_ASSEMBLY = 1
    SECURITY_COUNCIL = 2


@dataclasses.dataclass()
class WorldAssemblyShards(_Shards):
    """Shards of the World Assembly API.

    At least one shard other than votesHistory, delegateVotesHistory,
    and delegateVotes must be enabled, and those three require resolution.
    """

    numberOfNations: bool = False
    numberOfDelegates: bool = False
    delegates: bool = False
    members: bool = False
    happenings: bool = False
    membershipHappenings: bool = False
    resolution: bool = False
    votesHistory: bool = False
    delegateVotesHistory: bool = False
    delegateVotes: bool = False
    lastResolution: bool = False

    _catalog: ClassVar[Sequence[Tuple[str, str]]] = (
        ("numberOfNations", "numnations"),
        ("numberOfDelegates", "numdelegates"),
        ("delegates", "delegates"),
        ("members", "members"),
        ("happenings", "happenings"),
        ("membershipHappenings", "memberlog"),
        ("resolution", "resolution"),
        ("votesHistory", "votetrack"),
        ("delegateVotesHistory", "dellog"),
        ("delegateVotes", "delvotes"),
        ("lastResolution", "lastresolution"),
    )

    # Shards that only extend the resolution shard
    _dependent: ClassVar[Sequence[str]] = (
        "votesHistory",
        "delegateVotesHistory",
        "delegateVotes",
    )

    def primary_enabled(self) -> bool:
        """Whether a shard that can stand on its own is enabled."""
        return any(field not in self._dependent for field in self.enabled())

    def validate(self) -> None:
        # Construction with nothing enabled is allowed,
        # the primary shard requirement is checked when building the request
        if not self.resolution:
            for field in self._dependent:
                if getattr(self, field):
                    raise InvalidArgument(
                        f"{field} must not be enabled unless resolution is also enabled."
                    )
