"""Configuration management for reviewsync"""

import os
from dataclasses import dataclass
from typing import Optional

from reviewsync.errors import ConfigError


# Maximum line distance at which two findings with the same fingerprint in the
# same file are treated as one logical issue.
LINE_PROXIMITY_THRESHOLD = 20

# Maximum line gap at which adjacent findings share one platform comment.
GROUPING_DISTANCE = 3

# Pause after each platform write, in milliseconds.
INLINE_COMMENT_DELAY_MS = 100

MAX_INLINE_COMMENTS = 20

ADO_THREAD_STATUS_VALUES = {"active": 1, "pending": 6}


@dataclass(frozen=True)
class SyncConfig:
    """Resolved settings for one sync run."""

    proximity_threshold: int = LINE_PROXIMITY_THRESHOLD
    grouping_distance: int = GROUPING_DISTANCE
    comment_delay_ms: int = INLINE_COMMENT_DELAY_MS
    max_inline_comments: int = MAX_INLINE_COMMENTS
    ado_thread_status: str = "active"

    @property
    def comment_delay_seconds(self) -> float:
        return self.comment_delay_ms / 1000.0

    @property
    def ado_thread_status_value(self) -> int:
        return ADO_THREAD_STATUS_VALUES[self.ado_thread_status]

    @classmethod
    def from_env(
        cls,
        *,
        proximity_threshold: Optional[int] = None,
        grouping_distance: Optional[int] = None,
        comment_delay_ms: Optional[int] = None,
        max_inline_comments: Optional[int] = None,
        ado_thread_status: Optional[str] = None,
    ) -> "SyncConfig":
        """
        Build a config from environment variables and explicit overrides.

        Priority hierarchy (from highest to lowest):
        1. Explicit keyword argument (CLI flag)
        2. Environment variable (e.g., REVIEWSYNC_PROXIMITY_THRESHOLD)
        3. Module default

        Environment variables:
            REVIEWSYNC_PROXIMITY_THRESHOLD
            REVIEWSYNC_GROUPING_DISTANCE
            REVIEWSYNC_COMMENT_DELAY_MS
            REVIEWSYNC_MAX_INLINE_COMMENTS
            REVIEWSYNC_ADO_THREAD_STATUS

        Raises:
            ConfigError: If a value is negative or the thread status is unknown
        """
        status = ado_thread_status or os.getenv("REVIEWSYNC_ADO_THREAD_STATUS") or "active"
        status = status.strip().lower()
        if status not in ADO_THREAD_STATUS_VALUES:
            raise ConfigError(
                "ado_thread_status",
                f"expected one of {sorted(ADO_THREAD_STATUS_VALUES)}, got {status!r}",
            )

        return cls(
            proximity_threshold=_resolve_int(
                "proximity_threshold",
                proximity_threshold,
                "REVIEWSYNC_PROXIMITY_THRESHOLD",
                LINE_PROXIMITY_THRESHOLD,
            ),
            grouping_distance=_resolve_int(
                "grouping_distance",
                grouping_distance,
                "REVIEWSYNC_GROUPING_DISTANCE",
                GROUPING_DISTANCE,
            ),
            comment_delay_ms=_resolve_int(
                "comment_delay_ms",
                comment_delay_ms,
                "REVIEWSYNC_COMMENT_DELAY_MS",
                INLINE_COMMENT_DELAY_MS,
            ),
            max_inline_comments=_resolve_int(
                "max_inline_comments",
                max_inline_comments,
                "REVIEWSYNC_MAX_INLINE_COMMENTS",
                MAX_INLINE_COMMENTS,
            ),
            ado_thread_status=status,
        )


def _resolve_int(setting: str, override: Optional[int], env_var: str, default: int) -> int:
    if override is not None:
        value = override
    else:
        try:
            value = int(os.getenv(env_var, default))
        except ValueError:
            # If invalid value provided, return default
            value = default

    if value < 0:
        raise ConfigError(setting, f"must be zero or positive, got {value}")
    return value
