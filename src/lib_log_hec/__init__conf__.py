"""Static package metadata surfaced by the CLI ``info`` command."""

from __future__ import annotations

from typing import Callable

name = "lib_log_hec"
title = "Deliver structured log batches to an HTTP Event Collector"
version = "0.1.0"
homepage = "https://github.com/bitranox/lib_log_hec"
author = "bitranox"
author_email = "bitranox@gmail.com"
shell_command = "lib_log_hec"


def print_info(writer: Callable[[str], None] | None = None) -> None:
    """Emit the metadata banner line by line.

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for lib_log_hec:\\n'
    """

    emit = writer or (lambda text: print(text, end=""))
    fields = (
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("author_email", author_email),
        ("shell_command", shell_command),
    )
    pad = max(len(label) for label, _ in fields)
    emit(f"Info for {name}:\n")
    emit("\n")
    for label, value in fields:
        emit(f"    {label:<{pad}} = {value}\n")


__all__ = ["name", "title", "version", "homepage", "author", "author_email", "shell_command", "print_info"]
