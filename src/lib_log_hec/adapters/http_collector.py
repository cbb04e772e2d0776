"""HTTP Event Collector adapter built on :mod:`requests`.

Purpose
-------
Issue the ingest and acknowledgement requests against the collector and map
every failure onto the pipeline's error taxonomy.

Contents
--------
* :data:`EVENT_PATH`, :data:`RAW_PATH`, :data:`ACK_PATH` - endpoint paths.
* :func:`build_headers` - static request headers.
* :class:`HecHttpCollector` - concrete :class:`CollectorPort` implementation.

System Role
-----------
Owns one :class:`requests.Session` configured once at construction (headers,
TLS trust store, client certificate). Connection pooling is delegated to the
session.
"""

from __future__ import annotations

import json
import logging
import ssl
from collections.abc import Mapping, Sequence
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from lib_log_hec.application.ports.collector import CollectorPort
from lib_log_hec.domain.errors import ProtocolError, TransportError
from lib_log_hec.domain.results import FailureReason
from lib_log_hec.domain.settings import DeliveryConfig

logger = logging.getLogger(__name__)

EVENT_PATH = "/services/collector"
RAW_PATH = "/services/collector/raw"
ACK_PATH = "/services/collector/ack"


def build_headers(config: DeliveryConfig) -> dict[str, str]:
    """Return the headers sent with every collector request.

    Examples
    --------
    >>> build_headers(DeliveryConfig(token='T', use_ack=True, channel='C'))
    {'Content-type': 'application/json', 'Authorization': 'Splunk T', 'X-Splunk-Request-Channel': 'C'}
    """

    headers = {
        "Content-type": "application/json",
        "Authorization": f"Splunk {config.token}",
    }
    if config.channel:
        headers["X-Splunk-Request-Channel"] = config.channel
    return headers


class _PassphraseTLSAdapter(HTTPAdapter):
    """Transport adapter presenting a client certificate with an encrypted key."""

    def __init__(self, ssl_context: ssl.SSLContext, **kwargs: Any) -> None:
        self._ssl_context = ssl_context
        super().__init__(**kwargs)

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        kwargs["ssl_context"] = self._ssl_context
        super().init_poolmanager(*args, **kwargs)


def _build_ssl_context(config: DeliveryConfig) -> ssl.SSLContext:
    context = ssl.create_default_context(cafile=config.ca_file)
    if not config.ssl_verify_peer:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    if config.client_cert and config.client_key:
        context.load_cert_chain(config.client_cert, config.client_key, password=config.client_key_pass)
    return context


class HecHttpCollector(CollectorPort):
    """Post payloads to the collector through a shared session.

    Parameters
    ----------
    config:
        Validated delivery configuration.
    session:
        Optional pre-built session (tests, shared connection pools). The
        collector configures it but only closes sessions it created.
    """

    def __init__(self, config: DeliveryConfig, *, session: requests.Session | None = None) -> None:
        self._config = config
        self._base_url = config.base_url
        self._timeout = config.request_timeout
        self._owns_session = session is None
        self._session = self._prepare_session(session if session is not None else requests.Session())

    def _prepare_session(self, session: requests.Session) -> requests.Session:
        config = self._config
        session.headers.update(build_headers(config))
        if config.ca_file:
            session.verify = config.ca_file
        else:
            session.verify = config.ssl_verify_peer
        if config.client_cert and config.client_key:
            if config.client_key_pass:
                session.mount(f"{config.scheme}://", _PassphraseTLSAdapter(_build_ssl_context(config)))
            else:
                session.cert = (config.client_cert, config.client_key)
        return session

    @property
    def session(self) -> requests.Session:
        return self._session

    def send_events(self, payload: str) -> Mapping[str, Any]:
        return self._post(EVENT_PATH, payload)

    def send_raw(self, payload: str, query: Mapping[str, str]) -> Mapping[str, Any]:
        return self._post(RAW_PATH, payload, params=dict(query))

    def poll_acks(self, ack_ids: Sequence[Any]) -> Mapping[str, Any]:
        return self._post(ACK_PATH, json.dumps({"acks": list(ack_ids)}))

    def close(self) -> None:
        """Close the session when this collector created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "HecHttpCollector":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    def _post(self, path: str, body: str, *, params: dict[str, str] | None = None) -> Mapping[str, Any]:
        url = self._base_url + path
        try:
            response = self._session.post(
                url,
                data=body.encode("utf-8"),
                params=params or None,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"POST {path} failed: {exc}") from exc

        logger.debug("collector response path=%s status=%s body=%s", path, response.status_code, response.text)
        if not 200 <= response.status_code < 300:
            raise ProtocolError(
                f"POST {path} returned HTTP {response.status_code}: {response.text.strip()}",
                reason=FailureReason.HTTP_STATUS,
            )
        try:
            parsed = response.json()
        except ValueError as exc:
            raise ProtocolError(f"POST {path} returned an unparsable body: {response.text!r}") from exc
        if not isinstance(parsed, Mapping):
            raise ProtocolError(f"POST {path} returned {type(parsed).__name__}, expected a JSON object")
        return parsed


__all__ = ["ACK_PATH", "EVENT_PATH", "RAW_PATH", "HecHttpCollector", "build_headers"]
