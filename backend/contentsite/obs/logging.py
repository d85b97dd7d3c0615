"""JSON log lines enriched with the current request context."""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from contentsite.settings import settings

_LOGGER_NAME = "contentsite"

# request_id / route / ip for the request being served
_LOG_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar("contentsite_log_context", default={})

_REDACT_MARKERS = ("token", "secret", "authorization", "password", "cookie")
_REDACTED = "[redacted]"
_MAX_TEXT = 256
_MAX_ITEMS = 10
_MAX_DEPTH = 3

_STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


def bind_context(
	*,
	request_id: Optional[str] = None,
	route: Optional[str] = None,
	client_ip: Optional[str] = None,
) -> Token:
	"""Layer request fields over the current context; pass the token to `reset_context`."""
	fields = dict(_LOG_CONTEXT.get())
	for key, value in (("request_id", request_id), ("route", route), ("ip", client_ip)):
		if value is not None:
			fields[key] = value
	return _LOG_CONTEXT.set(fields)


def reset_context(token: Token) -> None:
	_LOG_CONTEXT.reset(token)


def current_request_id() -> Optional[str]:
	return _LOG_CONTEXT.get().get("request_id")


def _scrub(key: str, value: Any, depth: int = 0) -> Any:
	if any(marker in key.lower() for marker in _REDACT_MARKERS):
		return _REDACTED
	if isinstance(value, str):
		return value if len(value) <= _MAX_TEXT else value[:_MAX_TEXT] + "…"
	if depth >= _MAX_DEPTH:
		return repr(value)[:_MAX_TEXT]
	if isinstance(value, Mapping):
		items = list(value.items())
		scrubbed = {str(k): _scrub(str(k), v, depth + 1) for k, v in items[:_MAX_ITEMS]}
		if len(items) > _MAX_ITEMS:
			scrubbed["…"] = f"+{len(items) - _MAX_ITEMS} keys"
		return scrubbed
	if isinstance(value, (list, tuple, set, frozenset)):
		values = list(value)
		scrubbed_list = [_scrub(key, v, depth + 1) for v in values[:_MAX_ITEMS]]
		if len(values) > _MAX_ITEMS:
			scrubbed_list.append("…")
		return scrubbed_list
	return value


class JSONLogFormatter(logging.Formatter):
	"""One JSON object per record: envelope, request context, then extras."""

	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"logger": record.name,
			"msg": record.getMessage(),
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		payload.update(_LOG_CONTEXT.get())
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		for key, value in vars(record).items():
			if key not in _STANDARD_ATTRS and key not in payload:
				payload[key] = _scrub(key, value)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Drop a share of info records; other levels always pass."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = min(1.0, max(0.0, settings.obs_log_sampling_rate_info))
		return rate >= 1.0 or random.random() < rate


def configure_logging() -> logging.Logger:
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root = logging.getLogger()
	root.handlers[:] = [handler]
	root.setLevel(settings.obs_log_level)
	# http_request lines from the middleware replace the server's access log
	logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
	return logging.getLogger(_LOGGER_NAME)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _LOGGER_NAME)
