from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GHACTIVITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # GitHub credential (optional). Without a valid token the REST path is used
    # and GraphQL-only sources (comments) are reported as auth-required.
    github_token: str = ""

    # Application
    debug: bool = False

    # Minimum number of activity records the aggregator tries to reach
    target_data_points: int = 160

    # Adaptive page budget, evaluated once after the first page:
    # accumulated < below -> up to `pages` additional pages, else the floor.
    # Override via env as JSON, e.g. GHACTIVITY_BUDGET_TIERS='[[20, 8], [50, 6]]'
    budget_tiers: list[tuple[int, int]] = [(20, 8), (50, 6), (100, 4)]
    budget_floor_pages: int = 3

    # Comments use a fixed budget instead of the tiered one
    comment_target: int = 200
    comment_max_additional_pages: int = 2

    # REST offset pagination
    rest_per_page: int = 100
    search_max_pages: int = 2  # PR / issue search
    events_max_pages: int = 3  # 3 x 100 is the platform's event window
    commit_search_pages: int = 2  # fetched in parallel

    # HTML enrichment fallback
    profile_html_max_bytes: int = 2 * 1024 * 1024

    # Timeouts (seconds)
    request_timeout: float = 30.0
    aggregation_timeout: float = 60.0

    # Transport-level response cache
    cache_ttl_seconds: int = 600
    cache_max_entries: int = 512

    @property
    def github_token_configured(self) -> bool:
        """Check if a GitHub token was supplied (validity is checked separately)."""
        return bool(self.github_token)


settings = Settings()
