from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    `github_username` is the single account whose contributions are served.
    """

    github_graphql_url: str = "https://api.github.com/graphql"
    github_username: str = "octocat"
    github_token: str | None = None
    github_timeout_seconds: float = 20.0
    user_agent: str = "github-contribution-proxy"
    contributions_max_age_seconds: int = 3600
    years_max_age_seconds: int = 21600
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
