"""Runtime façade that wires the delivery pipeline for host applications.

Purpose
-------
Expose a stable entry point (``init``, ``deliver``, ``shutdown``) that host
buffering layers call instead of importing the inner layers directly.

Contents
--------
* ``init`` - composition root resolving settings and building the runtime.
* ``deliver`` - run one delivery cycle for a buffered batch.
* ``shutdown`` - interrupt pending ack waits and release the HTTP session.
* ``inspect_runtime`` - read-only snapshot of the active configuration.
* ``summary_info`` - metadata banner used by the CLI.

System Role
-----------
Forms the outer shell: the host hands over batches and receives
:class:`~lib_log_hec.domain.results.DeliveryResult` values; requeue policy
stays with the host.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from lib_log_hec.application.use_cases.deliver_batch import DiagnosticHook
from lib_log_hec.domain.records import Batch
from lib_log_hec.domain.results import DeliveryResult
from lib_log_hec.domain.settings import DeliveryConfig

from ._composition import build_runtime
from ._settings import build_delivery_config
from ._state import DeliveryRuntime, clear_runtime, current_runtime, is_initialised, set_runtime


@dataclass(frozen=True)
class RuntimeSnapshot:
    """Immutable view over the active delivery runtime."""

    base_url: str
    raw: bool
    use_ack: bool
    channel: str | None
    ack_interval: float
    ack_retry_limit: int


def init(*, config: DeliveryConfig | None = None, diagnostic_hook: DiagnosticHook = None, **options: Any) -> None:
    """Compose the delivery runtime once at startup.

    Why
    ---
    Configuration errors must stop the host before any record is accepted,
    and the HTTP session (headers, TLS trust store) is built exactly once.

    Parameters
    ----------
    config:
        Pre-built :class:`DeliveryConfig`; when given, ``options`` must be empty.
    diagnostic_hook:
        Callback receiving pipeline milestones (``sent``, ``delivered``,
        ``failed`` ...).
    **options:
        Keyword arguments accepted by :class:`DeliveryConfig`; ``HEC_*``
        environment variables take precedence.

    Raises
    ------
    ConfigurationError
        Invalid or missing option combinations.
    RuntimeError
        When called twice without :func:`shutdown`.

    Examples
    --------
    >>> import lib_log_hec as hec  # doctest: +SKIP
    >>> hec.init(token="T", default_index="main")  # doctest: +SKIP
    >>> hec.deliver([(1000, {"msg": "hello"})]).ok  # doctest: +SKIP
    True
    >>> hec.shutdown()  # doctest: +SKIP
    """

    if is_initialised():
        raise RuntimeError(
            "lib_log_hec.init() cannot be called twice without shutdown(); call lib_log_hec.shutdown() first",
        )
    if config is not None and options:
        raise ValueError("pass either config= or keyword options, not both")
    resolved = config if config is not None else build_delivery_config(**options)
    set_runtime(build_runtime(resolved, diagnostic=diagnostic_hook))


def deliver(batch: Batch) -> DeliveryResult:
    """Run one synchronous delivery cycle for ``batch``.

    Delivery failures are returned as ``Failed`` results, never raised.
    Raises :class:`RuntimeError` when :func:`init` has not been called.
    """

    return current_runtime().deliver(batch)


def shutdown() -> None:
    """Interrupt pending ack waits, close the HTTP session, and clear state."""

    runtime = clear_runtime()
    if runtime is None:
        raise RuntimeError("lib_log_hec.shutdown() called without an active runtime")
    runtime.close()


def inspect_runtime() -> RuntimeSnapshot:
    """Return a read-only snapshot of the current runtime state."""

    config = current_runtime().config
    return RuntimeSnapshot(
        base_url=config.base_url,
        raw=config.raw,
        use_ack=config.use_ack,
        channel=config.channel,
        ack_interval=config.ack_interval,
        ack_retry_limit=config.ack_retry_limit,
    )


def summary_info() -> str:
    """Return the metadata banner used by the CLI ``info`` command."""

    from .. import __init__conf__

    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


__all__ = [
    "DeliveryRuntime",
    "RuntimeSnapshot",
    "build_delivery_config",
    "build_runtime",
    "deliver",
    "init",
    "inspect_runtime",
    "is_initialised",
    "shutdown",
    "summary_info",
]
