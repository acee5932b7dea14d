"""Last-error bookkeeping and the warning channel."""

from __future__ import annotations

import logging

diagnostics = logging.getLogger("metastock_catalog.diagnostics")

MAX_ERROR_LENGTH = 1024


class ErrorReporter:
    """Holds the text of the last fatal error.

    Warnings never touch the stored error: they are logged on the
    ``metastock_catalog.diagnostics`` logger and processing continues.
    """

    def __init__(self) -> None:
        self._error = ""

    @property
    def last_error(self) -> str:
        return self._error

    def set_error(self, context: str, detail: str | None = None) -> None:
        """Store ``"<context>"`` or ``"<context>: <detail>"``, truncated."""
        if detail:
            text = f"{context}: {detail}"
        else:
            text = context
        self._error = text[:MAX_ERROR_LENGTH]

    def record(self, exc: BaseException) -> None:
        self.set_error(str(exc) or type(exc).__name__)

    def clear(self) -> None:
        self._error = ""

    def warn(self, message: str, *args: object) -> None:
        diagnostics.warning(message, *args)
