"""
Reconnect policy — bounded, linearly backing-off reconnection.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ReconnectPolicy:
    """
    How the push channel recovers from unclean closes.

    Fluent builder pattern — chain methods to configure.

    Example:
        policy = (
            ReconnectPolicy()
            .with_max_attempts(5)
            .with_delays(base=1.0, maximum=8.0)
        )

        policy.delay_for(0)  # 1.0
        policy.delay_for(9)  # 8.0

    Note: Immutable — each method returns a new ReconnectPolicy.
    """

    max_attempts: int = 3
    base_delay: float = 3.0
    max_delay: float = 10.0

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be >= 0")

    def delay_for(self, attempts: int) -> float:
        """Delay before the reconnect that follows `attempts` earlier tries."""
        return min(self.base_delay * (attempts + 1), self.max_delay)

    def exhausted(self, attempts: int) -> bool:
        return attempts >= self.max_attempts

    def with_max_attempts(self, attempts: int) -> ReconnectPolicy:
        return ReconnectPolicy(
            max_attempts=attempts,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
        )

    def with_delays(
        self,
        *,
        base: float | None = None,
        maximum: float | None = None,
    ) -> ReconnectPolicy:
        """
        Set the per-attempt step and the cap, in seconds.

        Example:
            .with_delays(base=3.0, maximum=10.0)
        """
        return ReconnectPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay if base is None else base,
            max_delay=self.max_delay if maximum is None else maximum,
        )


__all__ = ("ReconnectPolicy",)
