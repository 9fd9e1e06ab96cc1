"""Environment-driven settings for taskchain.

Values are read from ``TASKCHAIN_``-prefixed environment variables and an
optional ``.env`` file. The ``default_*`` fields form the engine-wide
behavior policy; leaving one unset lets that field fall through to the
built-in default.

Examples:
    >>> import os
    >>> os.environ["TASKCHAIN_DEFAULT_MAX_RETRIES"] = "2"
    >>> TaskchainSettings().default_behavior().max_retries
    2
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from taskchain.execution.models import BehaviorPolicy


class TaskchainSettings(BaseSettings):
    """Process-wide configuration.

    Fields
    ──────
    log_level                      : structlog level
    log_json                       : force JSON (True) / console (False) output, auto if unset
    default_max_retries            : engine-wide retry budget per task
    default_skip_item_on_fail      : engine-wide skip permission
    default_do_not_break_on_error  : engine-wide downgrade of raised errors
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "WARNING"
    log_json: bool | None = None

    # ── Engine defaults ──────────────────────────────────────────
    default_max_retries: int | None = Field(default=None, ge=0)
    default_skip_item_on_fail: bool | None = None
    default_do_not_break_on_error: bool | None = None

    def default_behavior(self) -> BehaviorPolicy:
        """Build the engine-wide ``BehaviorPolicy`` from these settings."""
        from taskchain.execution.models import BehaviorPolicy

        return BehaviorPolicy(
            do_not_break_on_error=self.default_do_not_break_on_error,
            skip_item_on_fail=self.default_skip_item_on_fail,
            max_retries=self.default_max_retries,
        )
