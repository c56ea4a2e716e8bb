"""
Tests for parsing XML responses into models.
"""

import datetime

import pytest

from nsshards.exceptions import APIResponseInvalid
from nsshards.models import (
    Embassy,
    NationData,
    RegionData,
    WorldAssemblyData,
    WorldData,
)
from nsshards.parser import as_xml, delimited, percentage, timestamp

UTC = datetime.timezone.utc


def nation(body: str) -> NationData:
    """Parse a nation from the children of a NATION node."""
    return NationData.from_xml(as_xml(f'<NATION id="testlandia">{body}</NATION>'))


class TestParserHelpers:
    """Test cases for the text conversions."""

    def test_percentage_strips_sign(self):
        """Test that a trailing percent sign is ignored."""
        assert percentage("24%") == 24.0
        assert percentage("3.5") == 3.5

    def test_timestamp_is_aware_utc(self):
        """Test that epoch seconds become aware UTC datetimes."""
        assert timestamp("86400") == datetime.datetime(1970, 1, 2, tzinfo=UTC)

    def test_delimited_empty(self):
        """Test that empty text is an empty list, not a list of one empty string."""
        assert delimited("", ",") == []
        assert delimited("a,b", ",") == ["a", "b"]

    def test_malformed_xml(self):
        """Test that non XML data is reported as an invalid response."""
        with pytest.raises(APIResponseInvalid):
            as_xml(b"<html>")
        with pytest.raises(APIResponseInvalid):
            as_xml(b"")


class TestNationData:
    """Test cases for NationData parsing."""

    def test_empty_nation(self):
        """Test that a nation without any shards has every field unset."""
        data = NationData.from_xml(as_xml("<NATION/>"))

        assert data == NationData()

    def test_absent_shards_are_none(self):
        """Test that shards that were not returned are None."""
        data = nation("<NAME>Testlandia</NAME>")

        assert data.name == "Testlandia"
        assert data.population is None
        assert data.worldAssemblyEndorsements is None
        assert data.governmentBudget is None
        assert data.happenings is None

    def test_empty_endorsements(self):
        """Test that an empty endorsement list is an empty sequence."""
        data = nation("<ENDORSEMENTS></ENDORSEMENTS>")

        assert data.worldAssemblyEndorsements == []

    def test_endorsements(self):
        """Test that endorsements are split on commas."""
        data = nation("<ENDORSEMENTS>a,b_c</ENDORSEMENTS>")

        assert data.worldAssemblyEndorsements == ["a", "b_c"]

    def test_government_budget(self):
        """Test that budget percentages have their sign stripped."""
        data = nation(
            "<GOVT><ADMINISTRATION>1.5</ADMINISTRATION><DEFENCE>10%</DEFENCE>"
            "<EDUCATION>8</EDUCATION><ENVIRONMENT>24%</ENVIRONMENT>"
            "<HEALTHCARE>9</HEALTHCARE><COMMERCE>12</COMMERCE>"
            "<LAWANDORDER>7</LAWANDORDER><PUBLICTRANSPORT>3</PUBLICTRANSPORT>"
            "<SOCIALEQUALITY>5</SOCIALEQUALITY><SPIRITUALITY>0</SPIRITUALITY>"
            "<WELFARE>20</WELFARE></GOVT>"
        )

        assert data.governmentBudget.environment == 24.0
        assert data.governmentBudget.defence == 10.0
        assert data.governmentBudget.spirituality == 0.0

    def test_incomplete_government_budget(self):
        """Test that a partial composite is rejected."""
        with pytest.raises(KeyError):
            nation("<GOVT><ENVIRONMENT>24%</ENVIRONMENT></GOVT>")

    def test_freedoms(self):
        """Test that freedom descriptions and scores are parsed."""
        data = nation(
            "<FREEDOM><CIVILRIGHTS>Good</CIVILRIGHTS><ECONOMY>Strong</ECONOMY>"
            "<POLITICALFREEDOM>Excellent</POLITICALFREEDOM></FREEDOM>"
            "<FREEDOMSCORES><CIVILRIGHTS>60</CIVILRIGHTS><ECONOMY>75</ECONOMY>"
            "<POLITICALFREEDOM>70</POLITICALFREEDOM></FREEDOMSCORES>"
        )

        assert data.freedomDescriptions.economy == "Strong"
        assert data.freedomScores.politicalFreedom == 70

    def test_numbers_and_times(self):
        """Test that numeric and time shards are converted."""
        data = nation(
            "<POPULATION>1500</POPULATION><TAX>12.5</TAX>"
            "<PUBLICSECTOR>30.2%</PUBLICSECTOR><LASTLOGIN>60</LASTLOGIN>"
            "<RCENSUS>0</RCENSUS>"
        )

        assert data.population == 1500
        assert data.taxPercentage == 12.5
        assert data.publicSectorPercentage == 30.2
        assert data.lastLogin == datetime.datetime(1970, 1, 1, 0, 1, tzinfo=UTC)
        assert data.regionalCensusRanking == 0

    def test_malformed_number(self):
        """Test that a non numeric count is reported."""
        with pytest.raises(ValueError):
            nation("<POPULATION>many</POPULATION>")

    def test_causes_of_death(self):
        """Test that causes of death keep their type and percentage."""
        data = nation(
            '<DEATHS><CAUSE type="Old Age">80.5%</CAUSE>'
            '<CAUSE type="Acts of God">19.5</CAUSE></DEATHS>'
        )

        assert [cause.cause for cause in data.causesOfDeath] == ["Old Age", "Acts of God"]
        assert data.causesOfDeath[0].percentage == 80.5

    def test_every_census_score(self):
        """Test that each census score is parsed from its own node."""
        data = nation(
            '<CENSUSSCORE id="0">55.5</CENSUSSCORE><CENSUSSCORE id="46">1.25</CENSUSSCORE>'
        )

        assert [(census.id, census.value) for census in data.censusStatistics] == [
            (0, 55.5),
            (46, 1.25),
        ]

    def test_repeated_children(self):
        """Test that repeated children keep document order and may be empty."""
        data = nation(
            "<LEGISLATION><LAW>first</LAW><LAW>second</LAW></LEGISLATION>"
            "<HAPPENINGS></HAPPENINGS>"
        )

        assert data.legislation == ["first", "second"]
        assert data.happenings == []

    def test_dispatch_list(self):
        """Test that dispatch metadata is parsed."""
        data = nation(
            '<DISPATCHLIST><DISPATCH id="1234"><TITLE>News</TITLE>'
            "<AUTHOR>testlandia</AUTHOR><CATEGORY>Factbook</CATEGORY>"
            "<SUBCATEGORY>Overview</SUBCATEGORY><CREATED>100</CREATED>"
            "<EDITED>200</EDITED><VIEWS>5</VIEWS><SCORE>2</SCORE>"
            "</DISPATCH></DISPATCHLIST>"
        )

        (dispatch,) = data.dispatchMetadata
        assert dispatch.id == 1234
        assert dispatch.title == "News"
        assert dispatch.views == 5
        assert dispatch.edited == datetime.datetime.fromtimestamp(200, UTC)


class TestRegionData:
    """Test cases for RegionData parsing."""

    def test_region(self):
        """Test the parsing of common region shards."""
        data = RegionData.from_xml(
            as_xml(
                '<REGION id="the_pacific"><NAME>The Pacific</NAME>'
                "<NATIONS>a:b:c</NATIONS><NUMNATIONS>3</NUMNATIONS>"
                "<GAVOTE><FOR>10</FOR><AGAINST>2</AGAINST></GAVOTE>"
                '<EMBASSIES><EMBASSY>Lazarus</EMBASSY><EMBASSY type="pending">Osiris</EMBASSY>'
                "</EMBASSIES><TAGS><TAG>Large</TAG><TAG>Feeder</TAG></TAGS>"
                '<MESSAGES><POST id="7"><TIMESTAMP>10</TIMESTAMP><NATION>a</NATION>'
                "<MESSAGE>Hello</MESSAGE></POST></MESSAGES>"
                "<HISTORY><EVENT><TIMESTAMP>5</TIMESTAMP><TEXT>Founded</TEXT></EVENT></HISTORY>"
                "</REGION>"
            )
        )

        assert data.nations == ["a", "b", "c"]
        assert data.numberOfNations == 3
        assert data.generalAssemblyVote.votesFor == 10
        assert data.securityCouncilVote is None
        assert data.embassies == [Embassy("Lazarus"), Embassy("Osiris", "pending")]
        assert data.tags == ["Large", "Feeder"]
        assert data.messages[0].id == 7
        assert data.messages[0].text == "Hello"
        assert data.history[0].text == "Founded"
        assert data.history[0].id is None

    def test_empty_nations(self):
        """Test that an empty region has an empty nation list."""
        data = RegionData.from_xml(as_xml("<REGION><NATIONS/></REGION>"))

        assert data.nations == []

    def test_poll(self):
        """Test the parsing of a regional poll."""
        data = RegionData.from_xml(
            as_xml(
                '<REGION><POLL id="99"><TITLE>Lunch?</TITLE><START>0</START>'
                '<OPTIONS><OPTION id="0"><OPTIONTEXT>Yes</OPTIONTEXT><VOTES>4</VOTES>'
                "</OPTION></OPTIONS></POLL></REGION>"
            )
        )

        assert data.poll.id == 99
        assert data.poll.stop is None
        assert data.poll.options[0].text == "Yes"
        assert data.poll.options[0].votes == 4

    def test_officers(self):
        """Test the parsing of regional officers."""
        data = RegionData.from_xml(
            as_xml(
                "<REGION><OFFICERS><OFFICER><NATION>a</NATION><OFFICE>Minister</OFFICE>"
                "<AUTHORITY>CE</AUTHORITY><TIME>0</TIME><BY>b</BY><ORDER>1</ORDER>"
                "</OFFICER></OFFICERS><DELEGATEAUTH>X</DELEGATEAUTH></REGION>"
            )
        )

        assert data.officers[0].office == "Minister"
        assert data.officers[0].order == 1
        assert data.delegateAuthority == "X"


class TestWorldData:
    """Test cases for WorldData parsing."""

    def test_world(self):
        """Test the parsing of world shards."""
        data = WorldData.from_xml(
            as_xml(
                '<WORLD><NUMNATIONS>250000</NUMNATIONS><CENSUS id="3">Wealth</CENSUS>'
                "<NEWNATIONS></NEWNATIONS><REGIONS>a,b</REGIONS>"
                '<HAPPENINGS><EVENT id="42"><TIMESTAMP>1</TIMESTAMP><TEXT>Moved</TEXT>'
                "</EVENT></HAPPENINGS></WORLD>"
            )
        )

        assert data.numberOfNations == 250000
        assert data.censusName == "Wealth"
        assert data.censusId == 3
        assert data.newNations == []
        assert data.regionsByTag == ["a", "b"]
        assert data.happenings[0].id == 42

    def test_census_id_shard_takes_priority(self):
        """Test that the censusid shard overrides the census attribute."""
        data = WorldData.from_xml(
            as_xml('<WORLD><CENSUS id="3">Wealth</CENSUS><CENSUSID>7</CENSUSID></WORLD>')
        )

        assert data.censusId == 7


class TestWorldAssemblyData:
    """Test cases for WorldAssemblyData parsing."""

    def test_resolution(self):
        """Test the parsing of the resolution at vote and its details."""
        data = WorldAssemblyData.from_xml(
            as_xml(
                "<WA><NUMNATIONS>100</NUMNATIONS><MEMBERS>a,b</MEMBERS>"
                "<RESOLUTION><NAME>Repeal</NAME><TOTAL_VOTES_FOR>30</TOTAL_VOTES_FOR>"
                "<VOTE_TRACK_FOR><N>1</N><N>5</N></VOTE_TRACK_FOR>"
                "<VOTE_TRACK_AGAINST></VOTE_TRACK_AGAINST>"
                "<DELLOG><ENTRY><TIMESTAMP>3</TIMESTAMP><NATION>d</NATION>"
                "<ACTION>FOR</ACTION><VOTES>20</VOTES></ENTRY></DELLOG>"
                "<DELVOTES_FOR><DELEGATE><NATION>d</NATION><VOTES>20</VOTES>"
                "<TIMESTAMP>3</TIMESTAMP></DELEGATE></DELVOTES_FOR>"
                "</RESOLUTION></WA>"
            )
        )

        resolution = data.resolution
        assert data.numberOfNations == 100
        assert data.members == ["a", "b"]
        assert resolution.title == "Repeal"
        assert resolution.votesFor == 30
        assert resolution.votesAgainst is None
        assert resolution.votesForHistory == [1, 5]
        assert resolution.votesAgainstHistory == []
        assert resolution.delegateVotesHistory[0].action == "FOR"
        assert resolution.delegateVotesFor[0].votes == 20
        assert resolution.delegateVotesAgainst is None
