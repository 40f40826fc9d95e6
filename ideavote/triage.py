# triage mode: swipe through the deck, cutting / keeping / loving ideas
import random
from enum import Enum
from typing import Dict, List, Optional

from . import config
from .catalog import Catalog
from .models import Idea, Phase


class Status(str, Enum):
    CANDIDATE = "candidate"
    CUT = "cut"
    LOVED = "loved"


ACTIVE = (Status.CANDIDATE, Status.LOVED)


class TriageError(Exception):
    pass


class TriageSession:
    """
    Queue of active ideas (candidate or loved) with a cyclic pointer.

    The deck order is the catalog order, or a shuffle drawn once from
    random.Random(seed) when a seed is given. The seed is kept on the
    session so the same deck can be rebuilt.
    """

    def __init__(self, catalog: Catalog, seed: Optional[int] = None, goals: Optional[Dict[str, int]] = None):
        self.catalog = catalog
        self.seed = seed
        deck = list(catalog)
        if seed is not None:
            random.Random(seed).shuffle(deck)
        self.deck: List[Idea] = deck
        self.statuses: Dict[int, Status] = {idea.id: Status.CANDIDATE for idea in deck}
        self.goals: Dict[Phase, int] = {Phase(p): config.DEFAULT_PHASE_GOAL for p in config.PHASES}
        for phase, goal in (goals or {}).items():
            self.set_goal(phase, goal)
        self.index = 0

    def set_goal(self, phase, goal: int) -> None:
        # goals below one fall back to one
        self.goals[Phase(phase)] = goal if goal and goal >= 1 else 1

    def start(self) -> None:
        self.index = 0

    # ----------- queue -----------

    def active_queue(self) -> List[Idea]:
        return [idea for idea in self.deck if self.statuses[idea.id] in ACTIVE]

    @property
    def current(self) -> Optional[Idea]:
        queue = self.active_queue()
        if 0 <= self.index < len(queue):
            return queue[self.index]
        return None

    @property
    def is_cleared(self) -> bool:
        return not self.active_queue()

    def status(self, idea_id: int) -> Status:
        return self.statuses[idea_id]

    def _require_current(self, idea_id: int) -> None:
        current = self.current
        if current is None:
            raise TriageError("Deck cleared, no current idea")
        if current.id != idea_id:
            raise TriageError(f"Idea {idea_id} is not the current idea ({current.id})")

    def advance(self) -> None:
        if self.index >= len(self.active_queue()) - 1:
            self.index = 0
        else:
            self.index += 1

    # ----------- actions -----------

    def cut(self, idea_id: int) -> None:
        self._require_current(idea_id)
        was_last = self.index >= len(self.active_queue()) - 1
        self.statuses[idea_id] = Status.CUT
        # otherwise the next idea slides into the current slot
        if was_last:
            self.index = 0

    def love(self, idea_id: int) -> None:
        self._require_current(idea_id)
        self.statuses[idea_id] = Status.LOVED
        self.advance()

    def keep(self, idea_id: int) -> None:
        self._require_current(idea_id)
        self.advance()

    # ----------- goals -----------

    def active_count(self, phase) -> int:
        phase = Phase(phase)
        return sum(1 for idea in self.active_queue() if idea.phase == phase)

    def distance_to_goal(self, phase) -> int:
        """
        How many more ideas of `phase` need cutting to reach its goal.
        Informational only.
        """
        return max(0, self.active_count(phase) - self.goals[Phase(phase)])

    # ----------- export -----------

    def export_markdown(self) -> str:
        remaining = [idea for idea in self.catalog if self.statuses[idea.id] in ACTIVE]
        lines = ["# Remaining Ideas", ""]
        for phase in config.PHASES:
            phase_ideas = [i for i in remaining if i.phase == Phase(phase)]
            if not phase_ideas:
                continue
            lines += [f"## {phase} ({len(phase_ideas)})", ""]
            for idea in phase_ideas:
                heart = "❤️ " if self.statuses[idea.id] == Status.LOVED else ""
                lines.append(f"### {heart}{idea.title}")
                if idea.purpose:
                    lines.append(f"- **Purpose**: {idea.purpose}")
                if idea.how_it_works:
                    lines.append(f"- **How It Works**: {idea.how_it_works}")
                lines.append("")
        return "\n".join(lines) + "\n"
