from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TypeAlias

import pytest

from nvisy_storage.datatypes import Page
from nvisy_storage.tokens import ContinuationToken

# A step is either (items, next_marker) or an exception to raise.
Step: TypeAlias = tuple[list[str], str | None] | BaseException


class ScriptedFetcher:
    """PageFetcher that replays a fixed sequence of pages and records calls."""

    def __init__(self, steps: Sequence[Step], *, block_on: int | None = None) -> None:
        self._steps = list(steps)
        self._block_on = block_on
        self.calls: list[ContinuationToken] = []
        self.aborted = False

    async def fetch_page(self, token: ContinuationToken) -> Page[str]:
        self.calls.append(token)
        if self._block_on == len(self.calls):
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.aborted = True
                raise

        step = self._steps[len(self.calls) - 1]
        if isinstance(step, BaseException):
            raise step
        items, next_marker = step
        return Page[str](
            items=items,
            token=token,
            next_token=ContinuationToken.from_marker(next_marker),
        )


@pytest.fixture()
def scripted():
    return ScriptedFetcher
