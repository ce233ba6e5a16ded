"""Tests for populate / to_array / json_serialize on containers."""

import json
from datetime import UTC, datetime

import pytest

from revisioning.content import Block, Page, Revision
from revisioning.content.fields import FieldSpec, populate, project
from revisioning.errors import InvalidArgumentError


def _published_page() -> Page:
    page = Page("author-1", "Initial")
    page.set_name("home")
    page.set_author("Jane")
    page.set_site_id(10)
    r1, r2 = Revision.create("author-1", revision_id=1), Revision.create("author-1", revision_id=2)
    page.add_revision(r1)
    page.add_revision(r2)
    page.set_published_revision(r1)
    page.set_staged_revision(r2)
    return page


class TestToArray:
    def test_default_shape(self):
        page = _published_page()
        data = page.to_array()

        assert data["name"] == "home"
        assert data["author"] == "Jane"
        assert data["publishedRevisionId"] == 1
        assert data["stagedRevisionId"] == 2
        assert data["siteId"] == 10
        assert data["createdByUserId"] == "author-1"
        assert data["pageType"] == "n"
        assert data["lastPublished"] == page.last_published
        assert "revisions" not in data

    def test_date_strings(self):
        page = Page("author-1")
        page.set_last_published(datetime(2026, 2, 18, 10, 0, tzinfo=UTC))
        data = page.to_array()

        assert data["lastPublishedString"] == "2026-02-18T10:00:00+0000"
        assert data["createdDateString"] == page.created_date.strftime("%Y-%m-%dT%H:%M:%S%z")

    def test_last_published_string_none_when_unset(self):
        assert Block("author-1").to_array()["lastPublishedString"] is None

    def test_custom_date_format(self):
        page = Page("author-1", date_format="%Y-%m-%d")
        page.set_last_published(datetime(2026, 2, 18, 10, 0, tzinfo=UTC))
        assert page.to_array()["lastPublishedString"] == "2026-02-18"

    def test_revisions_included_when_not_ignored(self):
        data = _published_page().to_array(ignore=())
        assert [r["revisionId"] for r in data["revisions"]] == [1, 2]
        assert data["revisions"][0]["wasPublished"] is True

    def test_explicit_ignore(self):
        data = _published_page().to_array(ignore=["name", "siteId", "createdDateString"])
        assert "name" not in data
        assert "siteId" not in data
        assert "createdDateString" not in data
        assert "revisions" in data


class TestJsonSerialize:
    def test_excludes_revisions_and_is_json_compatible(self):
        data = _published_page().json_serialize()

        assert "revisions" not in data
        assert "site" not in data
        assert data["siteId"] == 10
        assert isinstance(data["lastPublished"], str)
        json.dumps(data)


class TestPopulate:
    def test_sets_known_properties(self):
        page = Page("author-1")
        page.populate({"name": "about", "author": "Sam", "siteId": 3, "pageType": "t"})

        assert page.name == "about"
        assert page.author == "Sam"
        assert page.site_id == 3
        assert page.page_type == "t"

    def test_unknown_and_read_only_keys_skipped(self):
        page = Page("author-1")
        page.populate({"nonsense": 1, "publishedRevisionId": 5, "createdDateString": "x"})
        assert page.published_revision_id is None

    def test_creation_fields_ignored_by_default(self):
        page = Page("author-1", "Initial")
        created = page.created_date
        page.populate({"createdByUserId": "forger", "createdReason": "forged", "createdDate": "2000-01-01T00:00:00Z"})

        assert page.created_by_user_id == "author-1"
        assert page.created_reason == "Initial"
        assert page.created_date == created

    def test_custom_ignore(self):
        page = Page("author-1")
        page.populate({"name": "about", "author": "Sam"}, ignore=["author"])
        assert page.name == "about"
        assert page.author is None

    def test_last_published_parses_iso_string(self):
        page = Page("author-1")
        page.populate({"lastPublished": "2026-02-18T10:00:00+00:00"})
        assert page.last_published == datetime(2026, 2, 18, 10, 0, tzinfo=UTC)

    def test_invalid_name_propagates(self):
        page = Page("author-1")
        with pytest.raises(InvalidArgumentError):
            page.populate({"name": "my page"})
        assert page.name is None

    def test_round_trip(self):
        source = _published_page()
        source.set_page_type("t")
        target = Page("someone-else")

        target.populate(source.to_array())

        assert target.name == source.name
        assert target.author == source.author
        assert target.last_published == source.last_published
        assert target.site_id == source.site_id
        assert target.page_type == "t"
        assert target.created_by_user_id == "someone-else"

    def test_round_trip_fresh_page(self):
        source = Page("author-1")
        target = Page("someone-else")
        target.set_name("stale")

        target.populate(source.to_array())

        assert target.name is None
        assert target.author is None
        assert target.last_published is None
        assert target.site_id is None
        assert target.page_type == "n"

    def test_round_trip_named_unpublished_page(self):
        source = Page("author-1")
        source.set_name("drafts-only")
        source.add_revision(Revision.create("author-1", revision_id=1))
        target = Page("someone-else")

        target.populate(source.to_array())

        assert target.name == "drafts-only"
        assert target.last_published is None
        assert target.to_array()["lastPublishedString"] is None

    def test_round_trip_keeps_modification_trail(self):
        source = Page("author-1")
        source.set_modified_by("editor", "fix")
        target = Page("someone-else")

        target.populate(source.to_array())

        assert target.tracking.modified_by_user_id == "editor"
        assert target.tracking.modified_reason == "fix"
        assert target.tracking.modified_date == source.tracking.modified_date

    def test_modified_date_parses_iso_string(self):
        page = Page("author-1")
        page.populate({"modifiedByUserId": "editor", "modifiedDate": "2026-02-18T10:00:00+00:00"})
        assert page.tracking.modified_by_user_id == "editor"
        assert page.tracking.modified_date == datetime(2026, 2, 18, 10, 0, tzinfo=UTC)

    def test_populate_from_object(self):
        source = _published_page()
        target = Page("someone-else")
        target.populate_from_object(source)
        assert target.name == "home"

    def test_populate_from_non_container_is_noop(self):
        target = Page("someone-else")
        target.populate_from_object({"name": "home"})
        assert target.name is None


class TestFieldTable:
    class _Thing:
        def __init__(self) -> None:
            self.value = 0

        def set_value(self, value: int) -> None:
            self.value = value

    FIELDS = (
        FieldSpec("value", getter=lambda t: t.value, setter=_Thing.set_value),
        FieldSpec("secret", getter=lambda t: "s", populate_ignored=True, project_ignored=True),
        FieldSpec("writeOnly", setter=lambda t, v: None),
    )

    def test_project_uses_default_ignore(self):
        assert project(self._Thing(), self.FIELDS) == {"value": 0}

    def test_project_with_empty_ignore(self):
        assert project(self._Thing(), self.FIELDS, ignore=()) == {"value": 0, "secret": "s"}

    def test_populate_applies_setters(self):
        thing = self._Thing()
        populate(thing, self.FIELDS, {"value": 4, "missing": 1})
        assert thing.value == 4
