"""Immutable delivery configuration resolved once at startup.

Purpose
-------
Capture every option recognised by the delivery pipeline and enforce the
option combinations the collector protocol requires before any network
activity happens.

Contents
--------
* :class:`DeliveryConfig` frozen dataclass with validation and derived helpers.

System Role
-----------
Shared read-only by every delivery cycle; built by
:func:`lib_log_hec.runtime._settings.build_delivery_config` from keyword
arguments and ``HEC_*`` environment overrides.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .errors import ConfigurationError

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8088
DEFAULT_ACK_INTERVAL = 1.0
DEFAULT_ACK_RETRY_LIMIT = 3
DEFAULT_LINE_BREAKER = "\n"
DEFAULT_REQUEST_TIMEOUT = 30.0


@dataclass(slots=True, frozen=True)
class DeliveryConfig:
    """Delivery options shared by formatter, client, and ack tracker.

    Attributes
    ----------
    host, port:
        Collector endpoint; the scheme is ``https`` when ``ssl_verify_peer`` is
        enabled, ``http`` otherwise.
    token:
        HEC token sent as ``Authorization: Splunk <token>``.
    default_host, default_source, default_index, sourcetype:
        Static metadata. In raw mode they become request query parameters.
    host_key, source_key, index_key:
        Record fields whose values override the defaults per event
        (structured mode only).
    use_ack, channel, ack_interval, ack_retry_limit:
        Indexer acknowledgement settings.
    ssl_verify_peer, ca_file, client_cert, client_key, client_key_pass:
        TLS options passed through to the HTTP client.
    raw, event_key:
        Raw mode and the record field carrying the event body.
    use_caller_time:
        Keep the caller timestamp when ``event_key`` is set in structured mode.
    line_breaker:
        Terminator appended to every formatted fragment.
    request_timeout:
        Seconds allowed for each HTTP request.

    Examples
    --------
    >>> DeliveryConfig(token='T').base_url
    'http://localhost:8088'
    >>> DeliveryConfig(token='T', raw=True)
    Traceback (most recent call last):
    ...
    lib_log_hec.domain.errors.ConfigurationError: 'event_key' parameter is required when 'raw' is true
    """

    token: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    default_host: str | None = None
    host_key: str | None = None
    default_source: str | None = None
    source_key: str | None = None
    default_index: str | None = None
    index_key: str | None = None
    sourcetype: str | None = None
    use_ack: bool = False
    channel: str | None = None
    ack_interval: float = DEFAULT_ACK_INTERVAL
    ack_retry_limit: int = DEFAULT_ACK_RETRY_LIMIT
    ssl_verify_peer: bool = False
    ca_file: str | None = None
    client_cert: str | None = None
    client_key: str | None = None
    client_key_pass: str | None = None
    raw: bool = False
    event_key: str | None = None
    use_caller_time: bool = False
    line_breaker: str = DEFAULT_LINE_BREAKER
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if not self.token:
            raise ConfigurationError("'token' parameter is required")
        if not self.host:
            raise ConfigurationError("'host' parameter must not be empty")
        if self.port <= 0:
            raise ConfigurationError("'port' parameter must be positive")
        if self.use_ack and not self.channel:
            raise ConfigurationError("'channel' parameter is required when 'use_ack' is true")
        if self.use_ack and self.ack_interval < 0:
            raise ConfigurationError("'ack_interval' parameter must be a non negative number")
        if self.ack_retry_limit < 0:
            raise ConfigurationError("'ack_retry_limit' parameter must be a non negative integer")
        if self.raw and not self.event_key:
            raise ConfigurationError("'event_key' parameter is required when 'raw' is true")
        if self.raw and not self.channel:
            raise ConfigurationError("'channel' parameter is required when 'raw' is true")
        if bool(self.client_cert) != bool(self.client_key):
            raise ConfigurationError("'client_cert' and 'client_key' must be configured together")
        if self.request_timeout <= 0:
            raise ConfigurationError("'request_timeout' parameter must be positive")

    @property
    def scheme(self) -> str:
        return "https" if self.ssl_verify_peer else "http"

    @property
    def base_url(self) -> str:
        """Return ``scheme://host:port`` for the collector."""

        return f"{self.scheme}://{self.host}:{self.port}"

    def raw_query(self) -> dict[str, str]:
        """Return the raw-mode query parameters built from static defaults.

        Examples
        --------
        >>> DeliveryConfig(token='T', raw=True, event_key='msg', channel='C', default_index='main').raw_query()
        {'index': 'main'}
        """

        query: dict[str, str] = {}
        if self.default_host:
            query["host"] = self.default_host
        if self.default_source:
            query["source"] = self.default_source
        if self.default_index:
            query["index"] = self.default_index
        if self.sourcetype:
            query["sourcetype"] = self.sourcetype
        return query

    def to_dict(self, *, mask_secrets: bool = True) -> dict[str, Any]:
        """Return the configuration as a dictionary, masking credentials by default."""

        data = asdict(self)
        if mask_secrets:
            for secret in ("token", "client_key_pass"):
                if data[secret]:
                    data[secret] = "***"
        return data


__all__ = [
    "DEFAULT_ACK_INTERVAL",
    "DEFAULT_ACK_RETRY_LIMIT",
    "DEFAULT_HOST",
    "DEFAULT_LINE_BREAKER",
    "DEFAULT_PORT",
    "DEFAULT_REQUEST_TIMEOUT",
    "DeliveryConfig",
]
