from __future__ import annotations


class SelectionError(Exception):
    """Base class for failures the candidate selector recovers from."""


class ProviderUnavailable(SelectionError):
    """A catalog source could not be reached, timed out or sent a bad payload."""

    def __init__(self, provider: str, reason: str = "") -> None:
        self.provider = provider
        self.reason = reason
        message = f"catalog provider {provider!r} unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NoMatch(SelectionError):
    """A catalog was queried successfully but nothing survived the relaxation ladder."""

    def __init__(self, source: str, catalog_size: int, hard_stop: bool = False) -> None:
        self.source = source
        self.catalog_size = catalog_size
        # True when an explicit ingredient request ended the search early.
        self.hard_stop = hard_stop
        super().__init__(f"no match in {source} catalog of {catalog_size} items")
