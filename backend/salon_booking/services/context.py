from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Who triggered an operation. Used for logging only."""
    actor_id: int | None = None


ANONYMOUS = RequestContext()
