"""Domain error taxonomy.

Data-shape problems (missing storytellers, malformed references, ambiguous
links) are reported as output variants by the resolver and reporter. Only the
conditions below are raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


class StoreError(RuntimeError):
    """Base class for backing-store failures."""


class StoreUnavailableError(StoreError):
    """Transient store failure (connectivity, timeout); safe to retry."""


class StoreRequestError(StoreError):
    """The store rejected a request; retrying will not help."""


class StorytellerNotFoundError(LookupError):
    """Raised by operator operations addressing an unknown storyteller."""

    def __init__(self, storyteller_id: UUID) -> None:
        super().__init__(f"Storyteller {storyteller_id} not found")
        self.storyteller_id = storyteller_id

