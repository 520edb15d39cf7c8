from fastapi import Header

from .services.context import RequestContext


def get_request_context(x_actor_id: int | None = Header(None)) -> RequestContext:
    """Actor identity for logs; authentication happens upstream."""
    return RequestContext(actor_id=x_actor_id)
