"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for HtmxTodo happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. cognito_client_id -> COGNITO_CLIENT_ID).

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved. Development and test runs get a generated SECRET_KEY with a
      warning; production refuses to start without one.

ENV drives three derived flags, mirroring how the app is deployed:
  cookie_secure       -- only in production (cookies need HTTPS there)
  enable_stack_trace  -- only in development
  effective_database_url -- TEST_DATABASE_URL when ENV=test

Layer rule: core/ is the kernel. This module may not import from api/, web/,
auth/, or lists/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.constants import ENV_DEVELOPMENT, ENV_PRODUCTION, ENV_TEST

logger = logging.getLogger("htmxtodo.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).parent.parent / 'htmxtodo.db'}"
_VALID_ENVS = {ENV_DEVELOPMENT, ENV_PRODUCTION, ENV_TEST}


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    env: str = ENV_DEVELOPMENT
    host: str = "127.0.0.1"
    port: int = 8080
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a key or raises, so callers never see "".
    secret_key: str = ""
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost", "testserver"]

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL
    # Named shared-memory URI: request handlers run in a thread pool, and a
    # plain :memory: database is private to one connection.
    test_database_url: str = "sqlite:///file:htmxtodo_test?mode=memory&cache=shared&uri=true"

    # ------------------------------------------------------------------
    # Cognito (values come from the infra/ stack outputs)
    # ------------------------------------------------------------------

    aws_region: str = "us-east-1"
    cognito_user_pool_id: str = ""
    cognito_client_id: str = ""

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Derived flags
    # ------------------------------------------------------------------

    @property
    def cookie_secure(self) -> bool:
        return self.env == ENV_PRODUCTION

    @property
    def enable_stack_trace(self) -> bool:
        return self.env == ENV_DEVELOPMENT

    @property
    def effective_database_url(self) -> str:
        if self.env == ENV_TEST:
            return self.test_database_url
        return self.database_url

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_env_and_secret_key(self) -> "Settings":
        """Reject unknown ENV values and enforce the SECRET_KEY policy.

        Development and test: auto-generate a random key with a warning.
            Sessions will not survive restart -- acceptable locally.

        Production: refuse to start if SECRET_KEY is missing. The key signs
            the session cookie, so a random key would log everyone out on
            every restart.

        All environments: reject keys shorter than 32 characters.
        """
        self.env = self.env.lower()
        if self.env not in _VALID_ENVS:
            raise ValueError(f"ENV must be one of {sorted(_VALID_ENVS)}, got {self.env!r}.")
        if not self.secret_key:
            if self.env != ENV_PRODUCTION:
                self.secret_key = secrets.token_hex(32)
                logger.warning("WARNING: Using auto-generated SECRET_KEY. Sessions will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production. "
                    "Set SECRET_KEY in your environment or .env file, "
                    "or run with ENV=development."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
