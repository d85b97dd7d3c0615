"""Pure ASGI middleware giving every exchange an X-Request-Id.

An inbound id is reused when it looks sane; otherwise a UUID is minted. The id
lands in `scope["state"]` (read back as `request.state.request_id`) and on the
response headers. Streaming bodies pass through untouched.
"""

from __future__ import annotations

import re
import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from contentsite.api.request_id import REQUEST_ID_ATTR

HEADER = "X-Request-Id"
_ACCEPTABLE = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


class RequestIdMiddleware:
	def __init__(self, app: ASGIApp) -> None:
		self.app = app

	async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
		if scope["type"] != "http":
			await self.app(scope, receive, send)
			return

		inbound = Headers(scope=scope).get(HEADER)
		rid = inbound if inbound and _ACCEPTABLE.match(inbound) else str(uuid.uuid4())
		scope.setdefault("state", {})[REQUEST_ID_ATTR] = rid

		async def send_with_id(message: Message) -> None:
			if message["type"] == "http.response.start":
				headers = MutableHeaders(scope=message)
				if HEADER not in headers:
					headers.append(HEADER, rid)
			await send(message)

		await self.app(scope, receive, send_with_id)
