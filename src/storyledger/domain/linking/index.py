"""In-memory lookup index over the storyteller corpus."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from .normalize import normalize_email, normalize_text

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from uuid import UUID

    from storyledger.domain.model import Storyteller


class StorytellerIndex:
    """Point, email and display-name lookups built once per resolver run."""

    def __init__(self, storytellers: Iterable[Storyteller] = ()) -> None:
        self._by_id: dict[UUID, Storyteller] = {}
        self._by_email: defaultdict[str, list[UUID]] = defaultdict(list)
        self._by_name: defaultdict[str, list[UUID]] = defaultdict(list)
        for storyteller in storytellers:
            self.add(storyteller)

    def add(self, storyteller: Storyteller) -> None:
        if storyteller.id in self._by_id:
            return
        self._by_id[storyteller.id] = storyteller
        email_key = normalize_email(storyteller.email)
        if email_key is not None:
            self._by_email[email_key].append(storyteller.id)
        name_key = normalize_text(storyteller.display_name)
        if name_key is not None:
            self._by_name[name_key].append(storyteller.id)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, storyteller_id: object) -> bool:
        return storyteller_id in self._by_id

    def __iter__(self) -> Iterator[Storyteller]:
        return iter(self._by_id.values())

    def get(self, storyteller_id: UUID) -> Storyteller | None:
        return self._by_id.get(storyteller_id)

    def match_email(self, email_key: str) -> tuple[UUID, ...]:
        return tuple(self._by_email.get(email_key, ()))

    def match_name(self, name_key: str) -> tuple[UUID, ...]:
        return tuple(self._by_name.get(name_key, ()))

    def match_name_containment(self, fragment: str, *, min_length: int) -> tuple[UUID, ...]:
        """Names containing ``fragment`` or contained in it, excluding exact matches."""

        if len(fragment) < min_length:
            return ()
        matches: list[UUID] = []
        for name_key, ids in self._by_name.items():
            if name_key == fragment or len(name_key) < min_length:
                continue
            if fragment in name_key or name_key in fragment:
                matches.extend(ids)
        return tuple(matches)
