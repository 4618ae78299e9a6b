from __future__ import annotations

import threading
from typing import Iterable, List, Optional, Set

from ..schemas import Lead
from .normalize import generate_dedupe_key
from .roles import is_valid_title


def is_duplicate(candidate: Lead, existing: Iterable[Lead]) -> bool:
    """True iff some existing lead shares the candidate's non-empty dedupe key."""
    key = generate_dedupe_key(candidate)
    if not key:
        return False
    return any(generate_dedupe_key(e) == key for e in existing)


def qualification_failure(lead: Lead) -> Optional[str]:
    """Return why a lead does not qualify, or None when it does.

    Phone is mandatory; an email alone never qualifies.
    """
    if not lead.phone and not lead.email:
        return "no-contact"
    if not lead.phone:
        return "no-phone"
    if not is_valid_title(lead.title):
        return "title"
    return None


class LeadCollector:
    """Accumulates accepted leads; the single serialization point for dedupe.

    - Seeded with records from previous runs
    - Thread-safe (coarse lock)
    - At most one accepted lead per dedupe key
    """

    def __init__(self, existing: Optional[Iterable[Lead]] = None) -> None:
        self._lock = threading.Lock()
        self._keys: Set[str] = set()
        self._accepted: List[Lead] = []
        self.existing_count = 0
        for lead in existing or []:
            self.existing_count += 1
            key = generate_dedupe_key(lead)
            if key:
                self._keys.add(key)

    def seen(self, lead: Lead) -> bool:
        """Cheap pre-check against existing and already accepted leads."""
        key = generate_dedupe_key(lead)
        if not key:
            return False
        with self._lock:
            return key in self._keys

    def add(self, lead: Lead) -> bool:
        """Atomically accept the lead unless its key was already taken."""
        key = generate_dedupe_key(lead)
        with self._lock:
            if key and key in self._keys:
                return False
            if key:
                self._keys.add(key)
            self._accepted.append(lead)
            return True

    @property
    def accepted(self) -> List[Lead]:
        with self._lock:
            return list(self._accepted)

    def __len__(self) -> int:
        with self._lock:
            return len(self._accepted)
