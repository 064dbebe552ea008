"""Tests for story fixture loading (doorkeeper.fixtures)."""

import json

import pytest

from doorkeeper.fixtures import StoryFixture, load_fixture_from_file
from doorkeeper.models import Capability, SubjectKind
from doorkeeper.stores import EDGE_TYPE_HAS_JIRA_ISSUE

FIXTURE = {
    "story": {
        "story_id": "7",
        "subject_phid": "PHID-TASK-1",
        "author_phid": "PHID-USER-2",
        "text": "bob closed T7.",
    },
    "subjects": [
        {
            "phid": "PHID-TASK-1",
            "kind": "TASK",
            "title": "Broken export",
            "monogram": "T7",
            "uri": "https://phab.example.com/T7",
            "owner_phid": "PHID-USER-1",
            "follower_phids": ["PHID-USER-3"],
        }
    ],
    "edges": ["PHID-XOBJ-1"],
    "records": [
        {
            "phid": "PHID-XOBJ-1",
            "application_domain": "jira.example.com",
            "object_id": "OPS-9",
            "viewers": ["PHID-USER-omnipotent"],
        }
    ],
    "accounts": [
        {
            "user_phid": "PHID-USER-1",
            "account_domain": "jira.example.com",
            "account_id": "alice",
            "access_token": "tok",
        },
        {
            "user_phid": "PHID-USER-3",
            "account_domain": "jira.example.com",
            "account_id": "carol",
            "capabilities": ["view"],
        },
    ],
}


@pytest.fixture
def fixture_file(tmp_path):
    path = tmp_path / "story.json"
    path.write_text(json.dumps(FIXTURE))
    return path


class TestLoadFixture:
    def test_load_valid_fixture(self, fixture_file):
        fixture = load_fixture_from_file(fixture_file)

        assert isinstance(fixture, StoryFixture)
        assert fixture.story.story_id == "7"
        assert fixture.subjects[0].kind is SubjectKind.TASK

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Fixture file not found"):
            load_fixture_from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(ValueError, match="bad.json"):
            load_fixture_from_file(path)

    def test_missing_story_rejected(self, tmp_path):
        path = tmp_path / "nostory.json"
        path.write_text(json.dumps({"subjects": []}))

        with pytest.raises(ValueError, match="Failed to validate fixture"):
            load_fixture_from_file(path)

    def test_unknown_kind_rejected(self, tmp_path):
        data = json.loads(json.dumps(FIXTURE))
        data["subjects"][0]["kind"] = "PSTE"
        path = tmp_path / "paste.json"
        path.write_text(json.dumps(data))

        with pytest.raises(ValueError):
            load_fixture_from_file(path)


class TestConversion:
    def test_to_story(self, fixture_file):
        story = load_fixture_from_file(fixture_file).to_story()

        assert story.subject_phid == "PHID-TASK-1"
        assert story.author_phid == "PHID-USER-2"
        assert story.uri is None

    def test_to_stores(self, fixture_file):
        stores = load_fixture_from_file(fixture_file).to_stores()

        subject = stores.subjects.load("PHID-USER-omnipotent", "PHID-TASK-1")
        assert subject.monogram == "T7"
        assert subject.follower_phids == ("PHID-USER-3",)
        assert stores.edges.load_destination_phids(
            "PHID-TASK-1", EDGE_TYPE_HAS_JIRA_ISSUE
        ) == ["PHID-XOBJ-1"]

    def test_record_viewers_respected(self, fixture_file):
        stores = load_fixture_from_file(fixture_file).to_stores()

        assert stores.records.query("PHID-USER-omnipotent", ["PHID-XOBJ-1"])
        assert stores.records.query("PHID-USER-9", ["PHID-XOBJ-1"]) == []

    def test_account_defaults_and_capabilities(self, fixture_file):
        stores = load_fixture_from_file(fixture_file).to_stores()

        alice, carol = stores.accounts.accounts
        assert alice.account_type == "jira"
        assert alice.capabilities == frozenset({Capability.VIEW, Capability.EDIT})
        assert alice.access_token.get_secret_value() == "tok"
        assert carol.capabilities == frozenset({Capability.VIEW})
