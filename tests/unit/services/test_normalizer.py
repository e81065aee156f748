"""Unit tests for the record normalizer."""

from __future__ import annotations

from datetime import UTC, datetime

from ghactivity.services.github.constants import API_BASE_URL
from ghactivity.services.github.merge import merge
from ghactivity.services.github.normalizer import (
    comment_from_commit_comment,
    comment_record,
    commit_record,
    event_record,
    gist_record,
    profile_from_graph,
    pull_request_from_search,
    pull_request_from_graph,
    pull_request_record,
    repository_from_rest,
    repository_record,
    star_record,
    to_records,
)
from ghactivity.services.github.schemas import (
    CommitSearchItem,
    GraphCommitComment,
    GraphPullRequest,
    GraphUserProfile,
    RestEvent,
    RestGist,
    RestRepository,
    SearchIssueItem,
    StarItem,
)
from ghactivity.services.github.types import Comment, SourceKind
from tests.helpers.github_fakes import (
    commit_json,
    event_json,
    gist_json,
    graph_issue_node,
    repo_json,
    search_issue_json,
    star_json,
)


class TestActivityRecords:
    def test_event_record_uses_event_api_url(self):
        record = event_record(RestEvent.model_validate(event_json(123)))

        assert record is not None
        assert record.kind is SourceKind.EVENT
        assert record.url == f"{API_BASE_URL}/events/123"
        assert record.repository == "octocat/hello-world"
        assert record.author == "octocat"
        assert record.timestamp == datetime(2026, 1, 15, 10, 0, tzinfo=UTC)

    def test_zero_timestamp_is_skipped(self):
        event = RestEvent.model_validate(event_json(1, created_at="0001-01-01T00:00:00Z"))
        assert event_record(event) is None

    def test_commit_record_prefers_author_date(self):
        record = commit_record(CommitSearchItem.model_validate(commit_json("abc123")))

        assert record is not None
        assert record.kind is SourceKind.COMMIT
        assert record.timestamp == datetime(2026, 1, 15, 10, 0, tzinfo=UTC)
        assert record.repository == "octocat/hello-world"

    def test_commit_record_falls_back_to_committer_date(self):
        payload = commit_json("abc123")
        payload["commit"]["author"] = None
        record = commit_record(CommitSearchItem.model_validate(payload))

        assert record is not None
        assert record.timestamp == datetime(2026, 1, 16, tzinfo=UTC)

    def test_pull_request_record_from_search(self):
        item = SearchIssueItem.model_validate(
            search_issue_json("https://github.com/acme/widget/pull/42")
        )
        record = pull_request_record(pull_request_from_search(item))

        assert record is not None
        assert record.repository == "acme/widget"
        assert record.title == "Fix bug"

    def test_comment_record_title_is_first_body_line(self):
        comment = Comment(
            url="https://github.com/acme/widget/issues/1#issuecomment-9",
            created_at=datetime(2026, 1, 1, tzinfo=UTC),
            repository="acme/widget",
            body="\nLooks good to me\n\nsecond paragraph",
        )
        record = comment_record(comment)

        assert record is not None
        assert record.title == "Looks good to me"

    def test_gist_record(self):
        record = gist_record(RestGist.model_validate(gist_json("g1")))

        assert record is not None
        assert record.url == "https://gist.github.com/g1"
        assert record.title == "created gist: notes"

    def test_star_record(self):
        record = star_record(StarItem.model_validate(star_json("acme/widget")))

        assert record is not None
        assert record.kind is SourceKind.STAR
        assert record.url == "https://github.com/acme/widget/stargazers"
        assert record.repository == "acme/widget"

    def test_starring_own_repository_keeps_both_records(self):
        star = star_record(StarItem.model_validate(star_json("octocat/hello-world")))
        created = repository_record(
            repository_from_rest(RestRepository.model_validate(repo_json("octocat/hello-world")))
        )

        merged = merge([created], [star])

        assert [r.kind for r in merged] == [SourceKind.REPOSITORY, SourceKind.STAR]

    def test_star_without_timestamp_is_skipped(self):
        payload = star_json("acme/widget")
        payload["starred_at"] = None
        assert star_record(StarItem.model_validate(payload)) is None

    def test_forks_do_not_produce_repository_records(self):
        fork = repository_from_rest(RestRepository.model_validate(repo_json("o/f", fork=True)))
        own = repository_from_rest(RestRepository.model_validate(repo_json("o/r")))

        assert repository_record(fork) is None
        assert repository_record(own) is not None

    def test_to_records_drops_none(self):
        events = [
            RestEvent.model_validate(event_json(1)),
            RestEvent.model_validate(event_json(2, created_at="1970-01-01T00:00:00Z")),
        ]
        assert [r.url for r in to_records(events, event_record)] == [f"{API_BASE_URL}/events/1"]


class TestProjections:
    def test_pull_request_from_graph_uses_name_with_owner(self):
        node = GraphPullRequest.model_validate(
            graph_issue_node("https://github.com/acme/widget/pull/3")
        )
        pr = pull_request_from_graph(node)

        assert pr.repository == "acme/widget"
        assert pr.url == "https://github.com/acme/widget/pull/3"

    def test_commit_comment_falls_back_to_commit_url(self):
        node = GraphCommitComment.model_validate(
            {
                "createdAt": "2026-01-01T00:00:00Z",
                "commit": {"url": "https://github.com/acme/widget/commit/abc"},
            }
        )
        comment = comment_from_commit_comment(node)

        assert comment.url == "https://github.com/acme/widget/commit/abc"
        assert comment.repository == "acme/widget"

    def test_profile_from_graph_appends_social_accounts(self):
        user = GraphUserProfile.model_validate(
            {
                "login": "octocat",
                "bio": "Builder",
                "socialAccounts": {
                    "nodes": [
                        {"provider": "MASTODON", "url": "https://hachyderm.io/@octo"},
                        {"provider": "GENERIC", "url": "https://octo.dev"},
                        {"provider": "GENERIC", "url": "https://other.dev"},
                    ]
                },
            }
        )
        profile = profile_from_graph(user)

        assert profile.bio == (
            "Builder | [MASTODON] https://hachyderm.io/@octo | https://octo.dev | https://other.dev"
        )
        assert profile.blog == "https://octo.dev"
        assert len(profile.social_accounts) == 3

    def test_profile_from_graph_keeps_existing_blog(self):
        user = GraphUserProfile.model_validate(
            {
                "login": "octocat",
                "websiteUrl": "https://blog.example",
                "socialAccounts": {"nodes": [{"provider": "GENERIC", "url": "https://octo.dev"}]},
            }
        )
        profile = profile_from_graph(user)

        assert profile.blog == "https://blog.example"
        assert profile.bio == "https://octo.dev"
