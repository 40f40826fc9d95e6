# static idea catalog, the single source of truth for idea ids
from importlib import resources
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import TypeAdapter

from .models import Idea, Phase

_ideas_adapter = TypeAdapter(List[Idea])


class Catalog:
    """
    Immutable, ordered collection of ideas keyed by id.
    """

    def __init__(self, ideas: List[Idea]):
        by_id: Dict[int, Idea] = {}
        for idea in ideas:
            if idea.id in by_id:
                raise ValueError(f"Duplicate idea id {idea.id} in catalog")
            by_id[idea.id] = idea
        self._ideas = tuple(ideas)
        self._by_id = by_id

    def __iter__(self):
        return iter(self._ideas)

    def __len__(self) -> int:
        return len(self._ideas)

    def __contains__(self, idea_id: int) -> bool:
        return idea_id in self._by_id

    def get(self, idea_id: int) -> Optional[Idea]:
        return self._by_id.get(idea_id)

    def in_phase(self, phase: Union[Phase, str]) -> List[Idea]:
        phase = Phase(phase)
        return [i for i in self._ideas if i.phase == phase]

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "Catalog":
        return cls(_ideas_adapter.validate_json(text))

    @classmethod
    def from_records(cls, records: List[dict]) -> "Catalog":
        return cls(_ideas_adapter.validate_python(records))


def load_catalog(path: Optional[Path] = None) -> Catalog:
    """
    Load the catalog from `path`, or the bundled data/ideas.json.
    """
    if path is not None:
        return Catalog.from_json(Path(path).read_bytes())
    bundled = resources.files("ideavote") / "data" / "ideas.json"
    return Catalog.from_json(bundled.read_bytes())

