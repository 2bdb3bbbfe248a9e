"""
Retry policy configuration for backend calls.

Design Pattern: Strategy Pattern
RetryPolicy encapsulates backoff behavior, so RetryingOperationRunner can
apply different retry strategies without changing its attempt loop.

Design Rationale:
- Safe default: RetryPolicy.NONE never retries
- STANDARD mirrors the mobile app's defaults (3 retries, 1s..30s, x2, 10% jitter)
- Every computed delay is capped at max_delay_ms before jitter is added
"""

from __future__ import annotations

import os
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for bounded exponential backoff with jitter.

    Examples:
        # Simple: just specify the retry count (uses standard delays)
        policy = RetryPolicy.with_max_retries(5)

        # Named policy: predefined sensible defaults
        policy = RetryPolicy.STANDARD

        # Custom policy: full control
        policy = RetryPolicy(
            max_retries=4,
            base_delay_ms=500,
            max_delay_ms=10000,
            backoff_multiplier=2.0,
            jitter_factor=0.2,
        )
    """

    max_retries: int
    """Number of retries after the first attempt.

    max_retries = 3 means up to 4 invocations of the operation:
    - Attempt 1: immediate
    - Attempt 2: after base_delay
    - Attempt 3: after base_delay * backoff_multiplier
    - Attempt 4: after base_delay * backoff_multiplier^2
    """

    base_delay_ms: int
    """Delay before the first retry in milliseconds."""

    max_delay_ms: int
    """Upper bound for the un-jittered delay in milliseconds."""

    backoff_multiplier: float
    """Growth factor between consecutive delays. Must be greater than 1."""

    jitter_factor: float = 0.0
    """Fraction of the delay added as uniform random jitter, in [0, 1]."""

    # =========================================================================
    # Predefined Policies
    # =========================================================================

    if TYPE_CHECKING:
        NONE: RetryPolicy
        STANDARD: RetryPolicy
        AGGRESSIVE: RetryPolicy
    else:
        # Set after class definition
        NONE = cast("RetryPolicy", None)
        STANDARD = cast("RetryPolicy", None)
        AGGRESSIVE = cast("RetryPolicy", None)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must be >= 0, got {self.base_delay_ms}")
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError(
                f"max_delay_ms ({self.max_delay_ms}) must be >= "
                f"base_delay_ms ({self.base_delay_ms})"
            )
        if self.backoff_multiplier <= 1.0:
            raise ValueError(
                f"backoff_multiplier must be > 1, got {self.backoff_multiplier}"
            )
        if not 0.0 <= self.jitter_factor <= 1.0:
            raise ValueError(f"jitter_factor must be in [0, 1], got {self.jitter_factor}")

    @classmethod
    def with_max_retries(cls, max_retries: int) -> RetryPolicy:
        """
        Create a policy with a custom retry count and standard delays.

        Args:
            max_retries: Number of retries after the first attempt

        Returns:
            RetryPolicy with standard delays

        Example:
            policy = RetryPolicy.with_max_retries(5)
        """
        return cls(
            max_retries=max_retries,
            base_delay_ms=1000,
            max_delay_ms=30000,
            backoff_multiplier=2.0,
            jitter_factor=0.1,
        )

    @classmethod
    def from_env(cls, prefix: str = "GOODDEEDS_RETRY_") -> RetryPolicy:
        """
        Build a policy from environment variables.

        Reads {prefix}MAX_RETRIES, {prefix}BASE_DELAY_MS, {prefix}MAX_DELAY_MS,
        {prefix}BACKOFF_MULTIPLIER and {prefix}JITTER_FACTOR. Unset variables
        keep the STANDARD value.

        Raises:
            ValueError: If a variable is set but malformed or out of range

        Example:
            # $ export GOODDEEDS_RETRY_MAX_RETRIES=5
            policy = RetryPolicy.from_env()
        """
        standard = cls.STANDARD

        def read(name: str, convert, default):
            raw = os.getenv(prefix + name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return convert(raw.strip())
            except ValueError as e:
                raise ValueError(f"Invalid value for {prefix + name}: {raw!r}") from e

        return cls(
            max_retries=read("MAX_RETRIES", int, standard.max_retries),
            base_delay_ms=read("BASE_DELAY_MS", int, standard.base_delay_ms),
            max_delay_ms=read("MAX_DELAY_MS", int, standard.max_delay_ms),
            backoff_multiplier=read("BACKOFF_MULTIPLIER", float, standard.backoff_multiplier),
            jitter_factor=read("JITTER_FACTOR", float, standard.jitter_factor),
        )

    def delay_for_attempt(self, attempt: int) -> int | None:
        """
        Calculate the un-jittered delay after a failed attempt.

        Uses exponential backoff: base_delay * backoff_multiplier^(attempt-1)
        capped at max_delay.

        Args:
            attempt: The attempt that just failed (1-indexed)

        Returns:
            Delay in milliseconds before the next attempt, or None if the
            retry budget is spent.

        Example:
            policy = RetryPolicy.STANDARD
            policy.delay_for_attempt(1)  # 1000
            policy.delay_for_attempt(2)  # 2000
            policy.delay_for_attempt(4)  # None (3 retries used)
        """
        if attempt > self.max_retries:
            return None

        # attempt=1 (first retry): multiplier^0 = 1 → base_delay
        # attempt=2 (second retry): multiplier^1 → base_delay * multiplier
        exponent = attempt - 1
        delay_ms = self.base_delay_ms * (self.backoff_multiplier**exponent)

        return int(min(delay_ms, self.max_delay_ms))

    def jittered_delay_ms(self, attempt: int, rng: random.Random | None = None) -> float | None:
        """
        Delay after a failed attempt with uniform jitter in [0, delay * jitter_factor].

        Never exceeds max_delay_ms * (1 + jitter_factor).
        """
        delay = self.delay_for_attempt(attempt)
        if delay is None:
            return None
        if self.jitter_factor == 0.0 or delay == 0:
            return float(delay)

        rand = rng.random() if rng is not None else random.random()
        return delay + delay * self.jitter_factor * rand

    def worst_case_wait_ms(self) -> float:
        """Upper bound on total backoff time across all retries."""
        total = 0.0
        for attempt in range(1, self.max_retries + 1):
            total += self.delay_for_attempt(attempt) * (1 + self.jitter_factor)
        return total

    def __repr__(self) -> str:
        """Readable representation for debugging."""
        return (
            f"RetryPolicy(max_retries={self.max_retries}, "
            f"base_delay_ms={self.base_delay_ms}, "
            f"max_delay_ms={self.max_delay_ms}, "
            f"backoff_multiplier={self.backoff_multiplier}, "
            f"jitter_factor={self.jitter_factor})"
        )


# Initialize predefined policies after class definition
RetryPolicy.NONE = RetryPolicy(
    max_retries=0, base_delay_ms=0, max_delay_ms=0, backoff_multiplier=2.0
)

RetryPolicy.STANDARD = RetryPolicy(
    max_retries=3,
    base_delay_ms=1000,  # 1 second
    max_delay_ms=30000,  # 30 seconds
    backoff_multiplier=2.0,
    jitter_factor=0.1,
)

RetryPolicy.AGGRESSIVE = RetryPolicy(
    max_retries=8,
    base_delay_ms=100,  # 100 milliseconds
    max_delay_ms=10000,  # 10 seconds
    backoff_multiplier=1.5,
    jitter_factor=0.2,
)
