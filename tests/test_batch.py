"""Tests for the quality check and incremental batch planning."""

import json
from repofeed.core.batch import is_acceptable, load_existing, plan_batch, DENYLIST
from repofeed.core.feed import make_entry

GOOD = ("Packs a tiny HTTP router and a SQLite-backed job queue into one module, "
        "handy for weekend automation scripts.")
TEMPLATE = ("A compelling Python project that explores repo. Worth diving into for developers "
            "interested in modern software patterns and clean implementations.")


class TestIsAcceptable:
    """Test the article quality predicate."""

    def test_good_article(self):
        assert is_acceptable(GOOD)

    def test_missing_or_short(self):
        assert not is_acceptable(None)
        assert not is_acceptable("")
        assert not is_acceptable("Short but fine.")

    def test_length_threshold_is_exclusive(self):
        assert not is_acceptable("x" * 50, min_chars=50)
        assert is_acceptable("x" * 51, min_chars=50)

    def test_fallback_template_rejected(self):
        assert not is_acceptable(TEMPLATE)

    def test_denylist_case_insensitive(self):
        for phrase in DENYLIST:
            text = f"{GOOD} It is a {phrase.upper()} for sure."
            assert not is_acceptable(text), phrase


class TestLoadExisting:
    """Test reading the previous feed."""

    def test_missing_file(self, tmp_path):
        assert load_existing(tmp_path / "nope.json") == {}

    def test_unreadable_json(self, tmp_path):
        p = tmp_path / "repos.json"
        p.write_text("{not json", encoding="utf-8")
        assert load_existing(p) == {}

    def test_repos_not_a_list(self, tmp_path):
        p = tmp_path / "repos.json"
        for body in ('{"repos": null}', '{"repos": {"1": {}}}', '[1, 2]', '{}'):
            p.write_text(body, encoding="utf-8")
            assert load_existing(p) == {}, body

    def test_indexes_by_id_and_skips_bad_entries(self, tmp_path, make_repo):
        entry = make_entry(make_repo(7), GOOD, "ai")
        p = tmp_path / "repos.json"
        p.write_text(json.dumps({
            "lastUpdated": "2025-01-01T00:00:00Z",
            "repos": [entry.model_dump(mode="json", by_alias=True), {"name": "no-id"}],
        }), encoding="utf-8")

        existing = load_existing(p)

        assert list(existing) == [7]
        assert existing[7].summary == GOOD
        assert existing[7].summary_source == "ai"


class TestPlanBatch:
    """Test queueing, capping and carry-forward."""

    def test_everything_new_is_queued(self, make_repo):
        repos = [make_repo(i) for i in range(1, 4)]
        plan = plan_batch(repos, {}, batch_size=10)
        assert plan.queued == repos
        assert plan.carried == []
        assert plan.deferred == []

    def test_acceptable_articles_are_carried(self, make_repo):
        repos = [make_repo(1), make_repo(2)]
        existing = {1: make_entry(repos[0], GOOD, "ai")}

        plan = plan_batch(repos, existing, batch_size=10)

        assert [r.id for r, _ in plan.carried] == [1]
        assert plan.carried[0][1].summary == GOOD
        assert [r.id for r in plan.queued] == [2]

    def test_denylisted_articles_are_queued(self, make_repo):
        repos = [make_repo(1), make_repo(2)]
        existing = {
            1: make_entry(repos[0], TEMPLATE, "fallback"),
            2: make_entry(repos[1], GOOD + " A real game-changer.", "ai"),
        }

        plan = plan_batch(repos, existing, batch_size=10)

        assert [r.id for r in plan.queued] == [1, 2]
        assert set(plan.previous) == {1, 2}

    def test_cap_is_respected(self, make_repo):
        repos = [make_repo(i) for i in range(1, 8)]
        for cap in (0, 1, 3, 7, 20):
            plan = plan_batch(repos, {}, batch_size=cap)
            assert len(plan.queued) == min(cap, 7)
            assert plan.needing == 7

    def test_never_generated_before_stale(self, make_repo):
        repos = [make_repo(1), make_repo(2), make_repo(3)]
        existing = {1: make_entry(repos[0], TEMPLATE, "fallback")}

        plan = plan_batch(repos, existing, batch_size=2)

        assert [r.id for r in plan.queued] == [2, 3]
        assert [r.id for r in plan.deferred] == [1]

    def test_pending_entry_counts_as_new(self, make_repo):
        repo = make_repo(1)
        existing = {1: make_entry(repo, None, "pending")}

        plan = plan_batch([repo], existing, batch_size=1)

        assert plan.queued == [repo]
        assert plan.previous == {}
