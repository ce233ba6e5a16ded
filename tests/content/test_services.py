"""Tests for container document load/save."""

import json
from pathlib import Path

import pytest

from revisioning.content import Block, Page, Revision, load_container, save_container
from revisioning.errors import DocumentError


def _page() -> Page:
    page = Page("author-1", "Initial")
    page.set_name("home")
    page.set_site_id(10)
    for i in (1, 2, 3):
        page.add_revision(Revision.create("author-1", revision_id=i, content={"n": i}))
    page.set_published_revision(page.get_revision_by_id(1))
    page.set_staged_revision(page.get_revision_by_id(2))
    return page


class TestSaveContainer:
    def test_writes_document(self, tmp_path: Path):
        path = tmp_path / "pages" / "home.json"
        save_container(_page(), path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["containerType"] == "page"
        assert data["name"] == "home"
        assert [r["revisionId"] for r in data["revisions"]] == [1, 2, 3]


class TestLoadContainer:
    def test_restores_state(self, tmp_path: Path):
        original = _page()
        path = tmp_path / "home.json"
        save_container(original, path)

        loaded = load_container(path)

        assert isinstance(loaded, Page)
        assert loaded.name == "home"
        assert loaded.site_id == 10
        assert loaded.published_revision_id == 1
        assert loaded.staged_revision_id == 2
        assert loaded.published_revision is loaded.get_revision_by_id(1)
        assert loaded.last_published == original.last_published
        assert loaded.created_date == original.created_date
        assert loaded.created_reason == "Initial"
        assert [r.revision_id for r in loaded.iter_revisions()] == [1, 2, 3]
        assert loaded.get_last_saved_draft_revision().revision_id == 3

    def test_block_type(self, tmp_path: Path):
        block = Block("author-1")
        block.set_name("footer")
        path = tmp_path / "footer.json"
        save_container(block, path)

        assert isinstance(load_container(path), Block)

    def test_unnamed_unpublished_container(self, tmp_path: Path):
        page = Page("author-1")
        page.add_revision(Revision.create("author-1", revision_id=1))
        path = tmp_path / "draft.json"
        save_container(page, path)

        loaded = load_container(path)

        assert loaded.name is None
        assert loaded.last_published is None
        assert loaded.get_revision_by_id(1) is not None
        assert loaded.published_revision is None

    def test_keeps_modification_trail(self, tmp_path: Path):
        page = _page()
        page.set_modified_by("editor", "fix")
        path = tmp_path / "home.json"
        save_container(page, path)

        loaded = load_container(path)

        assert loaded.tracking.modified_by_user_id == "editor"
        assert loaded.tracking.modified_reason == "fix"
        assert loaded.tracking.modified_date == page.tracking.modified_date

    def test_passes_container_options(self, tmp_path: Path):
        path = tmp_path / "home.json"
        save_container(_page(), path)

        loaded = load_container(path, invalidate_draft_cache=True, date_format="%Y")

        assert loaded.invalidate_draft_cache is True
        assert loaded.date_format == "%Y"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(DocumentError):
            load_container(tmp_path / "nope.json")

    def test_corrupt_json(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DocumentError):
            load_container(path)

    def test_unknown_type(self, tmp_path: Path):
        path = tmp_path / "odd.json"
        path.write_text(json.dumps({"containerType": "widget", "createdByUserId": "u"}), encoding="utf-8")
        with pytest.raises(DocumentError):
            load_container(path)

    def test_dangling_slot(self, tmp_path: Path):
        path = tmp_path / "dangling.json"
        path.write_text(
            json.dumps({"containerType": "page", "createdByUserId": "u", "publishedRevisionId": 5, "revisions": []}),
            encoding="utf-8",
        )
        with pytest.raises(DocumentError):
            load_container(path)

    def test_missing_creator(self, tmp_path: Path):
        path = tmp_path / "anon.json"
        path.write_text(json.dumps({"containerType": "page"}), encoding="utf-8")
        with pytest.raises(DocumentError):
            load_container(path)
