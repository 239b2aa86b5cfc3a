"""Tests for check-attr parsing and the attribute query client (git mocked)."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from prowners_core.errors import GitCommandError, QueryExecutionError
from prowners_core.git.attributes import AttributeQueryClient, parse_check_attr, split_owners
from prowners_core.git.snapshot import Snapshot


def _snapshot(output="", error=None):
    repository = MagicMock()
    if error is not None:
        repository.run.side_effect = error
    else:
        repository.run.return_value = output
    return Snapshot(repository=repository, revision="b" * 40, location=Path("/tmp/git_idx_x"))


class TestParseCheckAttr:
    def test_value(self):
        assert parse_check_attr("a.txt\0owners\0alice,bob\0", "owners") == "alice,bob"

    @pytest.mark.parametrize("info", ["unspecified", "unset", "set", ""])
    def test_no_value(self, info):
        assert parse_check_attr(f"a.txt\0owners\0{info}\0", "owners") is None

    def test_other_attribute_ignored(self):
        assert parse_check_attr("a.txt\0diff\0python\0", "owners") is None

    def test_empty_output(self):
        assert parse_check_attr("", "owners") is None

    def test_path_with_spaces(self):
        assert parse_check_attr("my file.txt\0owners\0carol\0", "owners") == "carol"


class TestSplitOwners:
    def test_whitespace_separated(self):
        assert split_owners("alice bob@example.com") == ["alice", "bob@example.com"]

    def test_comma_separated(self):
        assert split_owners("alice,bob@example.com") == ["alice", "bob@example.com"]

    def test_mixed_and_repeated_separators(self):
        assert split_owners("  alice,, bob\tcarol\n") == ["alice", "bob", "carol"]

    def test_none(self):
        assert split_owners(None) == []

    def test_undecodable_bytes_become_replacement_characters(self):
        assert split_owners("j\udce9r\udcf4me,alice") == ["j\ufffdr\ufffdme", "alice"]


class TestAttributeQueryClient:
    def test_runs_check_attr_against_snapshot_index(self):
        snapshot = _snapshot("a.txt\0owners\0alice\0")

        AttributeQueryClient().owners_for(snapshot, "a.txt")

        snapshot.repository.run.assert_called_once_with(
            "check-attr", "-z", "--cached", "owners", "--", "a.txt", env={"GIT_INDEX_FILE": "/tmp/git_idx_x/index"}
        )

    def test_returns_tokens(self):
        snapshot = _snapshot("a.txt\0owners\0alice,bob@example.com\0")
        assert AttributeQueryClient().owners_for(snapshot, "a.txt") == ["alice", "bob@example.com"]

    def test_unset_attribute_is_empty_not_error(self):
        snapshot = _snapshot("b.txt\0owners\0unspecified\0")
        assert AttributeQueryClient().owners_for(snapshot, "b.txt") == []

    def test_custom_attribute_name(self):
        snapshot = _snapshot("a.txt\0reviewers\0carol\0")
        client = AttributeQueryClient(attribute="reviewers")

        assert client.owners_for(snapshot, "a.txt") == ["carol"]
        assert "reviewers" in snapshot.repository.run.call_args.args

    def test_git_failure_raises_query_execution_error(self):
        snapshot = _snapshot(error=GitCommandError(["git", "check-attr"], 128, "fatal: not a git repository"))

        with pytest.raises(QueryExecutionError, match="a.txt"):
            AttributeQueryClient().owners_for(snapshot, "a.txt")
