"""Unit tests for environment-driven settings."""

from ghactivity.config.settings import Settings


class TestDefaults:
    """Defaults without any environment."""

    def test_budget_defaults(self):
        s = Settings(_env_file=None)
        assert s.target_data_points == 160
        assert s.budget_tiers == [(20, 8), (50, 6), (100, 4)]
        assert s.budget_floor_pages == 3
        assert s.comment_max_additional_pages == 2

    def test_no_token_configured(self, monkeypatch):
        monkeypatch.delenv("GHACTIVITY_GITHUB_TOKEN", raising=False)
        s = Settings(_env_file=None)
        assert s.github_token == ""
        assert s.github_token_configured is False


class TestEnvironmentOverrides:
    """Values read from GHACTIVITY_* variables."""

    def test_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("GHACTIVITY_GITHUB_TOKEN", "ghp_example")
        monkeypatch.setenv("GHACTIVITY_TARGET_DATA_POINTS", "300")
        monkeypatch.setenv("GHACTIVITY_AGGREGATION_TIMEOUT", "12.5")

        s = Settings(_env_file=None)

        assert s.github_token_configured is True
        assert s.target_data_points == 300
        assert s.aggregation_timeout == 12.5

    def test_budget_tiers_from_json(self, monkeypatch):
        monkeypatch.setenv("GHACTIVITY_BUDGET_TIERS", "[[10, 5], [40, 2]]")

        s = Settings(_env_file=None)

        assert s.budget_tiers == [(10, 5), (40, 2)]

    def test_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("ghactivity_debug", "true")
        assert Settings(_env_file=None).debug is True
