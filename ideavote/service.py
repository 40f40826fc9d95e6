# vote persistence (read, append, write) + read side
import logging
from typing import Any, List

from .errors import ConflictError, ValidationError, WriteConflictError
from .models import SubmitAck, VoteIn, VoteRecord
from .store import GitHubVoteStore

logger = logging.getLogger(__name__)


def validate_submission(vote: VoteIn) -> VoteRecord:
    """
    voter must be non-empty and selections present; an empty selections
    list is a valid (if pointless) ballot.
    """
    if not vote.voter or vote.selections is None:
        raise ValidationError()
    return VoteRecord(voter=vote.voter, timestamp=vote.timestamp, selections=vote.selections)


async def submit_vote(store: GitHubVoteStore, vote: VoteIn, max_attempts: int = 1) -> SubmitAck:
    """
    Append one ballot to the stored list.

    Not idempotent: the same payload submitted twice is stored twice.
    With max_attempts == 1 a stale sha fails the request. Larger values
    re-read and re-append after a sha conflict, then give up with
    ConflictError.
    """
    record = validate_submission(vote)
    stored = record.to_stored()
    message = f"Add vote from {record.voter}"
    max_attempts = max(1, max_attempts)
    last_conflict = None

    for attempt in range(1, max_attempts + 1):
        current = await store.read()
        records = list(current.records)
        records.append(stored)
        try:
            await store.write(records, current.sha, message)
        except WriteConflictError as e:
            if max_attempts == 1:
                raise
            logger.warning(f"Vote from {record.voter} hit a sha conflict (attempt {attempt}/{max_attempts})")
            last_conflict = e
            continue
        logger.info(f"Saved vote from {record.voter} ({len(records)} ballots stored)")
        return SubmitAck()

    raise ConflictError(details=last_conflict.details if last_conflict else None)


async def list_votes(store: GitHubVoteStore) -> List[Any]:
    """
    Raw stored ballots; [] when the file does not exist yet.
    """
    current = await store.read()
    return current.records
