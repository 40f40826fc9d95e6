# client-side voting session: per-phase star banks + per-idea counts
import itertools
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from . import config
from .catalog import Catalog
from .models import Phase, Selection, VoteRecord


@dataclass(frozen=True)
class StarToken:
    phase: Phase
    serial: int


class PhaseStarBank:
    """
    Stars of one phase that are not bound to an idea.
    """

    def __init__(self, phase: Phase, tokens: Iterable[StarToken]):
        self.phase = phase
        self.available: List[StarToken] = list(tokens)

    def __len__(self) -> int:
        return len(self.available)

    def __contains__(self, token: StarToken) -> bool:
        return token in self.available

    def take(self, token: StarToken) -> bool:
        if token not in self.available:
            return False
        self.available.remove(token)
        return True

    def put(self, token: StarToken) -> None:
        self.available.append(token)

    def peek(self) -> Optional[StarToken]:
        return self.available[0] if self.available else None


def iso_now() -> str:
    # same shape as JavaScript's Date.toISOString()
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class VotingSession:
    """
    State of one voting session, created on session start and dropped on
    reload.

    Invariant per phase: stars in the bank + votes on that phase's ideas
    == stars_per_phase. Only ideas of the active phase accept or give back
    stars, and a phase's bank is created once, the first time the phase
    becomes active.
    """

    def __init__(
        self,
        catalog: Catalog,
        stars_per_phase: int = config.STARS_PER_PHASE,
        max_votes_per_card: int = config.MAX_VOTES_PER_CARD,
        phases: Sequence[str] = tuple(config.PHASES),
    ):
        self.catalog = catalog
        self.stars_per_phase = stars_per_phase
        self.max_votes_per_card = max_votes_per_card
        self.phases = [Phase(p) for p in phases]
        self.phase_index = 0
        self.banks: Dict[Phase, PhaseStarBank] = {}
        self.counts: Dict[int, int] = {}
        self._serials = itertools.count(1)
        self._activate(self.current_phase)

    # ----------- phases -----------

    @property
    def current_phase(self) -> Phase:
        return self.phases[self.phase_index]

    @property
    def is_final_phase(self) -> bool:
        return self.phase_index == len(self.phases) - 1

    @property
    def is_complete(self) -> bool:
        return self.is_final_phase and self.can_advance(self.current_phase)

    def _fresh_token(self, phase: Phase) -> StarToken:
        return StarToken(phase=phase, serial=next(self._serials))

    def _activate(self, phase: Phase) -> PhaseStarBank:
        bank = self.banks.get(phase)
        if bank is None:
            bank = PhaseStarBank(phase, (self._fresh_token(phase) for _ in range(self.stars_per_phase)))
            self.banks[phase] = bank
        return bank

    def bank(self, phase: Optional[Phase] = None) -> Optional[PhaseStarBank]:
        """
        Star bank of `phase` (default: active phase); None if never entered.
        """
        return self.banks.get(Phase(phase) if phase is not None else self.current_phase)

    def advance(self) -> bool:
        if self.is_final_phase or not self.can_advance(self.current_phase):
            return False
        self.phase_index += 1
        self._activate(self.current_phase)
        return True

    def go_back(self) -> bool:
        if self.phase_index == 0:
            return False
        self.phase_index -= 1
        return True

    # ----------- votes -----------

    def count(self, idea_id: int) -> int:
        return self.counts.get(idea_id, 0)

    def phase_total(self, phase: Phase) -> int:
        return sum(self.count(idea.id) for idea in self.catalog.in_phase(phase))

    def can_advance(self, phase: Phase) -> bool:
        # all of the phase's stars spent; partial allocation blocks
        return self.phase_total(phase) == self.stars_per_phase

    def _in_active_phase(self, idea_id: int) -> bool:
        idea = self.catalog.get(idea_id)
        return idea is not None and idea.phase == self.current_phase

    def allocate(self, idea_id: int, token: StarToken) -> bool:
        if not self._in_active_phase(idea_id):
            return False
        if self.count(idea_id) >= self.max_votes_per_card:
            return False
        if not self.banks[self.current_phase].take(token):
            return False
        self.counts[idea_id] = self.count(idea_id) + 1
        return True

    def deallocate(self, idea_id: int) -> bool:
        if not self._in_active_phase(idea_id):
            return False
        current = self.count(idea_id)
        if current == 0:
            return False
        if current == 1:
            del self.counts[idea_id]
        else:
            self.counts[idea_id] = current - 1
        self.banks[self.current_phase].put(self._fresh_token(self.current_phase))
        return True

    def deposit(self, token: StarToken, overlapping_idea_ids: Iterable[int]) -> Optional[int]:
        """
        Resolve a dropped star to at most one idea.

        Among the overlapped ideas of the active phase the smallest id wins.
        Returns the idea that received the star, or None when the drop is a
        no-op and the star stays in the bank.
        """
        candidates = [i for i in set(overlapping_idea_ids) if self._in_active_phase(i)]
        if not candidates:
            return None
        target = min(candidates)
        return target if self.allocate(target, token) else None

    # ----------- submission -----------

    def selections(self) -> List[Selection]:
        return [
            Selection(id=idea.id, title=idea.title, phase=idea.phase, votes=self.count(idea.id))
            for idea in self.catalog
            if self.count(idea.id) > 0
        ]

    def build_record(self, voter: str, timestamp: Optional[str] = None) -> VoteRecord:
        return VoteRecord(voter=voter, timestamp=timestamp or iso_now(), selections=self.selections())
