"""Request ID helper for endpoints.

Prefers the id bound on `request.state` by the request-id middleware and falls
back to the observability logging context.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from contentsite.obs import logging as obs_logging

REQUEST_ID_ATTR = "request_id"


def get_request_id(request: Optional[Request] = None, default: str = "unknown") -> str:
    if request is not None:
        rid = getattr(request.state, REQUEST_ID_ATTR, None)
        if rid:
            return str(rid)
    return obs_logging.current_request_id() or default
