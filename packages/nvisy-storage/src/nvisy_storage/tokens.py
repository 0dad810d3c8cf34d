"""Continuation tokens for segmented listings.

A token tracks *where* an enumeration resumes. It is one of three states:
the initial token starts a listing, a marker token carries the opaque value
the service returned with the previous page, and the terminal token means
no further pages exist.
"""

from enum import StrEnum
from typing import Self

from pydantic import BaseModel, model_validator


class TokenState(StrEnum):
    """State of a continuation token."""

    INITIAL = "initial"
    MARKER = "marker"
    TERMINAL = "terminal"


class ContinuationToken(BaseModel, frozen=True):
    """Opaque position in a paginated listing."""

    state: TokenState
    """Which of the three token states this is."""

    value: str | None = None
    """Service-issued marker. Only set for the `marker` state."""

    @model_validator(mode="after")
    def _check_value(self) -> Self:
        if self.state is TokenState.MARKER and not self.value:
            msg = "Marker tokens require a non-empty value"
            raise ValueError(msg)
        if self.state is not TokenState.MARKER and self.value is not None:
            msg = f"{self.state.value.capitalize()} tokens cannot carry a value"
            raise ValueError(msg)
        return self

    @classmethod
    def initial(cls) -> Self:
        """Token that starts a new enumeration."""
        return cls(state=TokenState.INITIAL)

    @classmethod
    def terminal(cls) -> Self:
        """Token that marks the end of an enumeration."""
        return cls(state=TokenState.TERMINAL)

    @classmethod
    def marker(cls, value: str) -> Self:
        """Token resuming from a service-issued marker."""
        return cls(state=TokenState.MARKER, value=value)

    @classmethod
    def from_marker(cls, next_marker: str | None) -> Self:
        """Map a service `NextMarker` to a token.

        Storage services signal the last page with a missing or empty marker.
        """
        if not next_marker:
            return cls.terminal()
        return cls.marker(next_marker)

    @property
    def is_initial(self) -> bool:
        return self.state is TokenState.INITIAL

    @property
    def is_terminal(self) -> bool:
        return self.state is TokenState.TERMINAL

    def __str__(self) -> str:
        if self.state is TokenState.MARKER:
            return f"marker({self.value})"
        return self.state.value
