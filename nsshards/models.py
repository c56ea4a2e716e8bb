"""Models of object structures returned from the NationStates API.

Every field is optional: it is None when the shard was not requested,
or NS did not include it. Lists are empty, not None,
when the shard was returned without any entries.
"""

from __future__ import annotations

import dataclasses
import datetime
import typing as t
from typing import Callable, Generic, List, Optional

import xml.etree.ElementTree as etree

from nsshards.parser import NodeParse, attribute, content, percentage, timestamp

T = t.TypeVar("T")


@dataclasses.dataclass(frozen=True)
class Freedoms(Generic[T]):
    """Dataclass that contains info on freedoms"""

    civilRights: T
    economy: T
    politicalFreedom: T

    @classmethod
    def from_xml(
        cls, node: etree.Element, converter: Callable[[str], T]
    ) -> Freedoms[T]:
        """Constructs a Freedoms object using the given node.
        Casts the content of each subnode using the converter.
        All three subnodes are required.
        """
        data = NodeParse(node)
        return cls(
            civilRights=converter(data.simple("CIVILRIGHTS")),
            economy=converter(data.simple("ECONOMY")),
            politicalFreedom=converter(data.simple("POLITICALFREEDOM")),
        )


@dataclasses.dataclass(frozen=True)
class GovernmentBudget:
    """Percentage of a nation's budget spent on each area."""

    environment: float
    socialEquality: float
    education: float
    lawAndOrder: float
    administration: float
    welfare: float
    spirituality: float
    defence: float
    publicTransport: float
    healthcare: float
    commerce: float

    @classmethod
    def from_xml(cls, node: etree.Element) -> GovernmentBudget:
        """Constructs a GovernmentBudget from a GOVT node, every area is required."""
        data = NodeParse(node)
        return cls(
            environment=percentage(data.simple("ENVIRONMENT")),
            socialEquality=percentage(data.simple("SOCIALEQUALITY")),
            education=percentage(data.simple("EDUCATION")),
            lawAndOrder=percentage(data.simple("LAWANDORDER")),
            administration=percentage(data.simple("ADMINISTRATION")),
            welfare=percentage(data.simple("WELFARE")),
            spirituality=percentage(data.simple("SPIRITUALITY")),
            defence=percentage(data.simple("DEFENCE")),
            publicTransport=percentage(data.simple("PUBLICTRANSPORT")),
            healthcare=percentage(data.simple("HEALTHCARE")),
            commerce=percentage(data.simple("COMMERCE")),
        )


@dataclasses.dataclass(frozen=True)
class DeathCause:
    """Dataclass of the type of death and percentage"""

    cause: str
    percentage: float

    @classmethod
    def from_xml(cls, node: etree.Element) -> DeathCause:
        """Constructs a DeathCause from a CAUSE node, as contained in the NS deaths shard
        (https://www.nationstates.net/cgi-bin/api.cgi?nation=testlandia&q=deaths).
        """
        return cls(cause=node.attrib["type"], percentage=percentage(content(node)))


@dataclasses.dataclass(frozen=True)
class CensusScore:
    """The score of a nation on one census scale.

    id corresponds to the trend page
    (such as https://www.nationstates.net/nation=testlandia/detail=trend/censusid=78).
    """

    id: Optional[int]
    value: float

    @classmethod
    def from_xml(cls, node: etree.Element) -> CensusScore:
        """Creates a CensusScore from a CENSUSSCORE node."""
        return cls(id=attribute(node, "id", int), value=float(content(node)))


@dataclasses.dataclass(frozen=True)
class Happening:
    """Class that represents a NS happening, or a region history entry.

    id is only provided by the world happenings shard.
    """

    id: Optional[int] = None
    timestamp: Optional[datetime.datetime] = None
    text: Optional[str] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> Happening:
        """Parse a happening from an EVENT node.
        (See https://www.nationstates.net/cgi-bin/api.cgi?q=happenings)
        """
        data = NodeParse(node)
        return cls(
            id=attribute(node, "id", int),
            timestamp=data.optional("TIMESTAMP", timestamp),
            text=data.optional("TEXT"),
        )


@dataclasses.dataclass(frozen=True)
class DispatchMetadata:
    """Metadata of a dispatch or factbook written by a nation."""

    id: Optional[int] = None
    title: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    created: Optional[datetime.datetime] = None
    edited: Optional[datetime.datetime] = None
    views: Optional[int] = None
    score: Optional[int] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> DispatchMetadata:
        """Creates a DispatchMetadata from a DISPATCH or FACTBOOK node
        (See https://www.nationstates.net/cgi-bin/api.cgi?nation=testlandia&q=dispatchlist)
        """
        data = NodeParse(node)
        return cls(
            id=attribute(node, "id", int),
            title=data.optional("TITLE"),
            author=data.optional("AUTHOR"),
            category=data.optional("CATEGORY"),
            subcategory=data.optional("SUBCATEGORY"),
            created=data.optional("CREATED", timestamp),
            edited=data.optional("EDITED", timestamp),
            views=data.optional("VIEWS", int),
            score=data.optional("SCORE", int),
        )


@dataclasses.dataclass(frozen=True)
class NationData:
    """Dataclass of the data returned by a request to the nation API,
    or the data of a nation in the nations data dump.
    """

    name: Optional[str] = None
    fullName: Optional[str] = None
    type: Optional[str] = None
    motto: Optional[str] = None
    category: Optional[str] = None
    worldAssemblyMembership: Optional[str] = None
    worldAssemblyEndorsements: Optional[List[str]] = None
    generalAssemblyVote: Optional[str] = None
    securityCouncilVote: Optional[str] = None
    freedomDescriptions: Optional[Freedoms[str]] = None
    region: Optional[str] = None
    population: Optional[int] = None
    taxPercentage: Optional[float] = None
    animal: Optional[str] = None
    animalDescription: Optional[str] = None
    currency: Optional[str] = None
    flag: Optional[str] = None
    majorIndustry: Optional[str] = None
    crime: Optional[str] = None
    sensibilities: Optional[str] = None
    governmentBudgetPriority: Optional[str] = None
    governmentBudget: Optional[GovernmentBudget] = None
    governmentDescription: Optional[str] = None
    economyDescription: Optional[str] = None
    notable: Optional[str] = None
    admirable: Optional[str] = None
    founded: Optional[str] = None
    firstLogin: Optional[datetime.datetime] = None
    lastLogin: Optional[datetime.datetime] = None
    lastActivity: Optional[str] = None
    influence: Optional[str] = None
    freedomScores: Optional[Freedoms[int]] = None
    publicSectorPercentage: Optional[float] = None
    causesOfDeath: Optional[List[DeathCause]] = None
    leader: Optional[str] = None
    capital: Optional[str] = None
    religion: Optional[str] = None
    regionalCensusRanking: Optional[int] = None
    worldCensusRanking: Optional[int] = None
    censusStatistics: Optional[List[CensusScore]] = None
    legislation: Optional[List[str]] = None
    happenings: Optional[List[Happening]] = None
    demonymAdjective: Optional[str] = None
    demonymNoun: Optional[str] = None
    demonymNounPlural: Optional[str] = None
    numberOfFactbooks: Optional[int] = None
    factbookMetadata: Optional[List[DispatchMetadata]] = None
    numberOfDispatches: Optional[int] = None
    dispatchMetadata: Optional[List[DispatchMetadata]] = None
    issuesAnswered: Optional[int] = None
    databaseId: Optional[int] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> NationData:
        """Constructs a NationData using a NATION node.

        Used for both live responses and each nation of the nations dump.
        """
        data = NodeParse(node)

        # CENSUSSCORE nodes are not wrapped in a parent node
        censusNodes = data.all("CENSUSSCORE")

        return cls(
            name=data.optional("NAME"),
            fullName=data.optional("FULLNAME"),
            type=data.optional("TYPE"),
            motto=data.optional("MOTTO"),
            category=data.optional("CATEGORY"),
            worldAssemblyMembership=data.optional("UNSTATUS"),
            worldAssemblyEndorsements=data.delimited("ENDORSEMENTS", ","),
            generalAssemblyVote=data.optional("GAVOTE"),
            securityCouncilVote=data.optional("SCVOTE"),
            freedomDescriptions=data.node(
                "FREEDOM", lambda node: Freedoms.from_xml(node, str)
            ),
            region=data.optional("REGION"),
            population=data.optional("POPULATION", int),
            taxPercentage=data.optional("TAX", float),
            animal=data.optional("ANIMAL"),
            animalDescription=data.optional("ANIMALTRAIT"),
            currency=data.optional("CURRENCY"),
            flag=data.optional("FLAG"),
            majorIndustry=data.optional("MAJORINDUSTRY"),
            crime=data.optional("CRIME"),
            sensibilities=data.optional("SENSIBILITIES"),
            governmentBudgetPriority=data.optional("GOVTPRIORITY"),
            governmentBudget=data.node("GOVT", GovernmentBudget.from_xml),
            governmentDescription=data.optional("GOVTDESC"),
            economyDescription=data.optional("INDUSTRYDESC"),
            notable=data.optional("NOTABLE"),
            admirable=data.optional("ADMIRABLE"),
            founded=data.optional("FOUNDED"),
            firstLogin=data.optional("FIRSTLOGIN", timestamp),
            lastLogin=data.optional("LASTLOGIN", timestamp),
            lastActivity=data.optional("LASTACTIVITY"),
            influence=data.optional("INFLUENCE"),
            freedomScores=data.node(
                "FREEDOMSCORES", lambda node: Freedoms.from_xml(node, int)
            ),
            publicSectorPercentage=data.optional("PUBLICSECTOR", percentage),
            causesOfDeath=data.children("DEATHS", "CAUSE", DeathCause.from_xml),
            leader=data.optional("LEADER"),
            capital=data.optional("CAPITAL"),
            religion=data.optional("RELIGION"),
            regionalCensusRanking=data.optional("RCENSUS", int),
            worldCensusRanking=data.optional("WCENSUS", int),
            censusStatistics=(
                [CensusScore.from_xml(census) for census in censusNodes]
                if censusNodes
                else None
            ),
            legislation=data.children("LEGISLATION", "LAW", content),
            happenings=data.children("HAPPENINGS", "EVENT", Happening.from_xml),
            demonymAdjective=data.optional("DEMONYM"),
            demonymNoun=data.optional("DEMONYM2"),
            demonymNounPlural=data.optional("DEMONYM2PLURAL"),
            numberOfFactbooks=data.optional("FACTBOOKS", int),
            factbookMetadata=data.children(
                "FACTBOOKLIST", "FACTBOOK", DispatchMetadata.from_xml
            ),
            numberOfDispatches=data.optional("DISPATCHES", int),
            dispatchMetadata=data.children(
                "DISPATCHLIST", "DISPATCH", DispatchMetadata.from_xml
            ),
            issuesAnswered=data.optional("ISSUES_ANSWERED", int),
            databaseId=data.optional("DBID", int),
        )


@dataclasses.dataclass(frozen=True)
class Votes:
    """Votes for and against the World Assembly resolution at vote."""

    votesFor: Optional[int] = None
    votesAgainst: Optional[int] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> Votes:
        """Constructs Votes from a region GAVOTE or SCVOTE node."""
        data = NodeParse(node)
        return cls(
            votesFor=data.optional("FOR", int),
            votesAgainst=data.optional("AGAINST", int),
        )


@dataclasses.dataclass(frozen=True)
class Officer:
    """Class that represents a Officer for a region,
    and the related available data.
    """

    nation: Optional[str] = None  # Name of officer
    office: Optional[str] = None  # Name of office
    authority: Optional[str] = None  # Authority permissions (each letter is a perm)
    time: Optional[datetime.datetime] = None  # When they were appointed
    by: Optional[str] = None  # Who appointed the officer
    order: Optional[int] = None  # Position in officer list on NS

    @classmethod
    def from_xml(cls, node: etree.Element) -> Officer:
        """Method that parses a Officer object from
        an OFFICER xml node, as contained by the OFFICERS shard.
        """
        data = NodeParse(node)
        return cls(
            nation=data.optional("NATION"),
            office=data.optional("OFFICE"),
            authority=data.optional("AUTHORITY"),
            time=data.optional("TIME", timestamp),
            by=data.optional("BY"),
            order=data.optional("ORDER", int),
        )


@dataclasses.dataclass(frozen=True)
class Embassy:
    """Class that represents the data of an embassy for a Region.

    status is None for an established embassy,
    otherwise the type given by NS (e.g. 'pending', 'closing').
    """

    region: str
    status: Optional[str] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> Embassy:
        """Method that parses a Embassy object from a EMBASSY XML node"""
        return cls(region=content(node), status=node.get("type"))


@dataclasses.dataclass(frozen=True)
class Message:
    """A post on a regional message board."""

    id: Optional[int] = None
    timestamp: Optional[datetime.datetime] = None
    nation: Optional[str] = None
    text: Optional[str] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> Message:
        """Constructs a Message from a POST node of the messages shard."""
        data = NodeParse(node)
        return cls(
            id=attribute(node, "id", int),
            timestamp=data.optional("TIMESTAMP", timestamp),
            nation=data.optional("NATION"),
            text=data.optional("MESSAGE"),
        )


@dataclasses.dataclass(frozen=True)
class PollOption:
    """An option of a regional poll."""

    id: Optional[int] = None
    text: Optional[str] = None
    votes: Optional[int] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> PollOption:
        """Constructs a PollOption from an OPTION node of the poll shard."""
        data = NodeParse(node)
        return cls(
            id=attribute(node, "id", int),
            text=data.optional("OPTIONTEXT"),
            votes=data.optional("VOTES", int),
        )


@dataclasses.dataclass(frozen=True)
class Poll:
    """The poll currently running in a region."""

    id: Optional[int] = None
    title: Optional[str] = None
    text: Optional[str] = None
    region: Optional[str] = None
    start: Optional[datetime.datetime] = None
    stop: Optional[datetime.datetime] = None
    author: Optional[str] = None
    options: Optional[List[PollOption]] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> Poll:
        """Constructs a Poll from the POLL node of the poll shard."""
        data = NodeParse(node)
        return cls(
            id=attribute(node, "id", int),
            title=data.optional("TITLE"),
            text=data.optional("TEXT"),
            region=data.optional("REGION"),
            start=data.optional("START", timestamp),
            stop=data.optional("STOP", timestamp),
            author=data.optional("AUTHOR"),
            options=data.children("OPTIONS", "OPTION", PollOption.from_xml),
        )


@dataclasses.dataclass(frozen=True)
class RegionData:
    """Class that represents the data returned by a request to the region API,
    or the data of a region in the regions dump.
    """

    name: Optional[str] = None
    factbook: Optional[str] = None
    numberOfNations: Optional[int] = None
    nations: Optional[List[str]] = None
    delegate: Optional[str] = None
    numberOfDelegateVotes: Optional[int] = None
    delegateAuthority: Optional[str] = None
    generalAssemblyVote: Optional[Votes] = None
    securityCouncilVote: Optional[Votes] = None
    founder: Optional[str] = None
    founderAuthority: Optional[str] = None
    officers: Optional[List[Officer]] = None
    power: Optional[str] = None
    flag: Optional[str] = None
    embassies: Optional[List[Embassy]] = None
    tags: Optional[List[str]] = None
    happenings: Optional[List[Happening]] = None
    history: Optional[List[Happening]] = None
    lastUpdate: Optional[datetime.datetime] = None
    poll: Optional[Poll] = None
    messages: Optional[List[Message]] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> RegionData:
        """Parses Region data from a REGION node.

        Used for both live responses and each region of the regions dump.
        """
        data = NodeParse(node)
        return cls(
            name=data.optional("NAME"),
            factbook=data.optional("FACTBOOK"),
            numberOfNations=data.optional("NUMNATIONS", int),
            nations=data.delimited("NATIONS", ":"),
            delegate=data.optional("DELEGATE"),
            numberOfDelegateVotes=data.optional("DELEGATEVOTES", int),
            delegateAuthority=data.optional("DELEGATEAUTH"),
            generalAssemblyVote=data.node("GAVOTE", Votes.from_xml),
            securityCouncilVote=data.node("SCVOTE", Votes.from_xml),
            founder=data.optional("FOUNDER"),
            founderAuthority=data.optional("FOUNDERAUTH"),
            officers=data.children("OFFICERS", "OFFICER", Officer.from_xml),
            power=data.optional("POWER"),
            flag=data.optional("FLAG"),
            embassies=data.children("EMBASSIES", "EMBASSY", Embassy.from_xml),
            tags=data.children("TAGS", "TAG", content),
            happenings=data.children("HAPPENINGS", "EVENT", Happening.from_xml),
            history=data.children("HISTORY", "EVENT", Happening.from_xml),
            lastUpdate=data.optional("LASTUPDATE", timestamp),
            poll=data.node("POLL", Poll.from_xml),
            messages=data.children("MESSAGES", "POST", Message.from_xml),
        )


@dataclasses.dataclass(frozen=True)
class WorldData:
    """Class that represents the data returned by a request to the world API."""

    numberOfNations: Optional[int] = None
    numberOfRegions: Optional[int] = None
    censusName: Optional[str] = None
    censusId: Optional[int] = None
    censusSize: Optional[int] = None
    censusScale: Optional[str] = None
    censusMedian: Optional[float] = None
    featuredRegion: Optional[str] = None
    happenings: Optional[List[Happening]] = None
    newNations: Optional[List[str]] = None
    regionsByTag: Optional[List[str]] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> WorldData:
        """Parses World data from the WORLD node."""
        data = NodeParse(node)

        # The census shard carries the id as an attribute,
        # the censusid shard as text; the latter takes priority
        censusId = data.node("CENSUS", lambda census: attribute(census, "id", int))
        if data.has_name("CENSUSID"):
            censusId = int(data.simple("CENSUSID"))

        return cls(
            numberOfNations=data.optional("NUMNATIONS", int),
            numberOfRegions=data.optional("NUMREGIONS", int),
            censusName=data.optional("CENSUS"),
            censusId=censusId,
            censusSize=data.optional("CENSUSSIZE", int),
            censusScale=data.optional("CENSUSSCALE"),
            censusMedian=data.optional("CENSUSMEDIAN", float),
            featuredRegion=data.optional("FEATUREDREGION"),
            happenings=data.children("HAPPENINGS", "EVENT", Happening.from_xml),
            newNations=data.delimited("NEWNATIONS", ","),
            regionsByTag=data.delimited("REGIONS", ","),
        )


@dataclasses.dataclass(frozen=True)
class DelegateVote:
    """The vote of a delegate on the resolution at vote."""

    nation: Optional[str] = None
    votes: Optional[int] = None
    timestamp: Optional[datetime.datetime] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> DelegateVote:
        """Constructs a DelegateVote from a DELEGATE node of the delvotes shard."""
        data = NodeParse(node)
        return cls(
            nation=data.optional("NATION"),
            votes=data.optional("VOTES", int),
            timestamp=data.optional("TIMESTAMP", timestamp),
        )


@dataclasses.dataclass(frozen=True)
class DelegateVoteAction:
    """An entry of the delegate vote log, e.g. a delegate voting or withdrawing."""

    timestamp: Optional[datetime.datetime] = None
    nation: Optional[str] = None
    action: Optional[str] = None
    votes: Optional[int] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> DelegateVoteAction:
        """Constructs a DelegateVoteAction from an ENTRY node of the dellog shard."""
        data = NodeParse(node)
        return cls(
            timestamp=data.optional("TIMESTAMP", timestamp),
            nation=data.optional("NATION"),
            action=data.optional("ACTION"),
            votes=data.optional("VOTES", int),
        )


def _vote_track(node: etree.Element) -> List[int]:
    """Parses the hourly vote counts of a VOTE_TRACK_FOR/AGAINST node."""
    return [int(content(entry)) for entry in node.findall("N")]


@dataclasses.dataclass(frozen=True)
class Resolution:
    """The World Assembly resolution at vote.

    The history and delegate fields are only present if the
    votetrack, dellog, and delvotes shards were requested.
    """

    category: Optional[str] = None
    created: Optional[datetime.datetime] = None
    text: Optional[str] = None
    title: Optional[str] = None
    subcategory: Optional[str] = None
    author: Optional[str] = None
    votesFor: Optional[int] = None
    votesAgainst: Optional[int] = None
    votesForHistory: Optional[List[int]] = None
    votesAgainstHistory: Optional[List[int]] = None
    delegateVotesHistory: Optional[List[DelegateVoteAction]] = None
    delegateVotesFor: Optional[List[DelegateVote]] = None
    delegateVotesAgainst: Optional[List[DelegateVote]] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> Resolution:
        """Constructs a Resolution from the RESOLUTION node."""
        data = NodeParse(node)
        return cls(
            category=data.optional("CATEGORY"),
            created=data.optional("CREATED", timestamp),
            text=data.optional("DESC"),
            title=data.optional("NAME"),
            subcategory=data.optional("OPTION"),
            author=data.optional("PROPOSED_BY"),
            votesFor=data.optional("TOTAL_VOTES_FOR", int),
            votesAgainst=data.optional("TOTAL_VOTES_AGAINST", int),
            votesForHistory=data.node("VOTE_TRACK_FOR", _vote_track),
            votesAgainstHistory=data.node("VOTE_TRACK_AGAINST", _vote_track),
            delegateVotesHistory=data.children(
                "DELLOG", "ENTRY", DelegateVoteAction.from_xml
            ),
            delegateVotesFor=data.children(
                "DELVOTES_FOR", "DELEGATE", DelegateVote.from_xml
            ),
            delegateVotesAgainst=data.children(
                "DELVOTES_AGAINST", "DELEGATE", DelegateVote.from_xml
            ),
        )


@dataclasses.dataclass(frozen=True)
class WorldAssemblyData:
    """Class that represents the data returned by a request to the World Assembly API."""

    numberOfNations: Optional[int] = None
    numberOfDelegates: Optional[int] = None
    members: Optional[List[str]] = None
    delegates: Optional[List[str]] = None
    happenings: Optional[List[Happening]] = None
    membershipHappenings: Optional[List[Happening]] = None
    resolution: Optional[Resolution] = None
    lastResolution: Optional[str] = None

    @classmethod
    def from_xml(cls, node: etree.Element) -> WorldAssemblyData:
        """Parses World Assembly data from the WA node."""
        data = NodeParse(node)
        return cls(
            numberOfNations=data.optional("NUMNATIONS", int),
            numberOfDelegates=data.optional("NUMDELEGATES", int),
            members=data.delimited("MEMBERS", ","),
            delegates=data.delimited("DELEGATES", ","),
            happenings=data.children("HAPPENINGS", "EVENT", Happening.from_xml),
            membershipHappenings=data.children(
                "MEMBERLOG", "EVENT", Happening.from_xml
            ),
            resolution=data.node("RESOLUTION", Resolution.from_xml),
            lastResolution=data.optional("LASTRESOLUTION"),
        )


# Models that can be parsed from a data dump
DumpModel = t.TypeVar("DumpModel", NationData, RegionData)
