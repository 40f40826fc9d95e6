import logging
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from .models import IdeaTally, VoteRecord

logger = logging.getLogger(__name__)


def aggregate_votes(records: Iterable[Any]) -> List[IdeaTally]:
    """
    Sum stars and collect unique voters per idea across all ballots.

    Ranked by total stars, highest first. Ties keep the order in which the
    ideas first appeared in the ballots.
    """
    tallies: Dict[int, IdeaTally] = {}

    for i, raw in enumerate(records):
        try:
            record = raw if isinstance(raw, VoteRecord) else VoteRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Skipping malformed ballot #{i}: {e.error_count()} error(s)")
            continue

        for sel in record.selections:
            tally = tallies.get(sel.id)
            if tally is None:
                tally = IdeaTally(id=sel.id, title=sel.title, phase=sel.phase)
                tallies[sel.id] = tally
            if tally.title is None:
                tally.title = sel.title
            if tally.phase is None:
                tally.phase = sel.phase
            tally.total_stars += sel.votes
            if record.voter not in tally.voters:
                tally.voters.append(record.voter)

    return sorted(tallies.values(), key=lambda t: t.total_stars, reverse=True)
