"""Resolve delivery settings from keyword arguments and ``HEC_*`` variables.

Environment variables take precedence over keyword arguments so deployments
can reconfigure a host without code changes.
"""

from __future__ import annotations

import codecs
import os
import re
from typing import Any, Callable, TypeVar

from lib_log_hec.config import TRUE_VALUES
from lib_log_hec.domain.errors import ConfigurationError
from lib_log_hec.domain.settings import DeliveryConfig

T = TypeVar("T")

ENV_PREFIX = "HEC_"

_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _env_bool(name: str, default: bool) -> bool:
    """Return the boolean value of an environment variable with fallback.

    Examples
    --------
    >>> _ = os.environ.pop('HEC_EXAMPLE_BOOL', None)
    >>> _env_bool('HEC_EXAMPLE_BOOL', default=True)
    True
    >>> os.environ['HEC_EXAMPLE_BOOL'] = 'off'
    >>> _env_bool('HEC_EXAMPLE_BOOL', default=True)
    False
    >>> _ = os.environ.pop('HEC_EXAMPLE_BOOL')
    """

    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag (1/0, true/false, yes/no, on/off), got {value!r}")


def _env_number(name: str, default: T, convert: Callable[[str], T]) -> T:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return convert(value.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be numeric, got {value!r}") from exc


def _env_str(name: str, default: str | None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    return value or None


_ESCAPE_PATTERN = re.compile(r"\\(?:[nrt\\]|x[0-9a-fA-F]{2}|u[0-9a-fA-F]{4})")


def unescape_line_breaker(value: str) -> str:
    """Expand backslash escapes such as ``\\r\\n`` typed in a shell or ``.env``.

    Only ASCII escape sequences are rewritten; other characters pass through.

    Examples
    --------
    >>> unescape_line_breaker(r"\\r\\n")
    '\\r\\n'
    >>> unescape_line_breaker("\u00e9")
    '\u00e9'
    """

    return _ESCAPE_PATTERN.sub(lambda match: codecs.decode(match.group(0), "unicode_escape"), value)


_STRING_OPTIONS = (
    "host",
    "token",
    "default_host",
    "host_key",
    "default_source",
    "source_key",
    "default_index",
    "index_key",
    "sourcetype",
    "channel",
    "ca_file",
    "client_cert",
    "client_key",
    "client_key_pass",
    "event_key",
)
_BOOL_OPTIONS = ("use_ack", "ssl_verify_peer", "raw", "use_caller_time")


def build_delivery_config(**options: Any) -> DeliveryConfig:
    """Merge ``options`` with ``HEC_*`` overrides and validate the result.

    Unknown option names raise :class:`ConfigurationError`; missing options
    keep the :class:`DeliveryConfig` defaults.

    Examples
    --------
    >>> build_delivery_config(token='T', port=9088).base_url
    'http://localhost:9088'
    """

    defaults = DeliveryConfig.__dataclass_fields__
    unknown = sorted(set(options) - set(defaults))
    if unknown:
        raise ConfigurationError(f"unknown delivery option(s): {', '.join(unknown)}")

    resolved: dict[str, Any] = {}
    for name in _STRING_OPTIONS:
        fallback = options.get(name, defaults[name].default if name != "token" else None)
        resolved[name] = _env_str(ENV_PREFIX + name.upper(), fallback)
    for name in _BOOL_OPTIONS:
        resolved[name] = _env_bool(ENV_PREFIX + name.upper(), bool(options.get(name, defaults[name].default)))

    resolved["port"] = _env_number("HEC_PORT", options.get("port", defaults["port"].default), int)
    resolved["ack_interval"] = _env_number("HEC_ACK_INTERVAL", options.get("ack_interval", defaults["ack_interval"].default), float)
    resolved["ack_retry_limit"] = _env_number(
        "HEC_ACK_RETRY_LIMIT", options.get("ack_retry_limit", defaults["ack_retry_limit"].default), int
    )
    resolved["request_timeout"] = _env_number(
        "HEC_REQUEST_TIMEOUT", options.get("request_timeout", defaults["request_timeout"].default), float
    )
    line_breaker = os.getenv("HEC_LINE_BREAKER")
    if line_breaker is not None:
        resolved["line_breaker"] = unescape_line_breaker(line_breaker)
    else:
        resolved["line_breaker"] = options.get("line_breaker", defaults["line_breaker"].default)

    if not resolved["token"]:
        raise ConfigurationError("'token' parameter is required (pass token= or set HEC_TOKEN)")
    return DeliveryConfig(**resolved)


__all__ = ["ENV_PREFIX", "build_delivery_config", "unescape_line_breaker"]
