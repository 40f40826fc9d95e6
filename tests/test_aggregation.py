from ideavote.aggregation import aggregate_votes


def test_sums_stars_and_counts_voters() -> None:
    records = [
        {"voter": "Alice", "timestamp": "t1", "selections": [{"id": 7, "votes": 1}]},
        {"voter": "Bob", "timestamp": "t2", "selections": [{"id": 7, "votes": 2}]},
    ]
    (tally,) = aggregate_votes(records)
    assert tally.id == 7
    assert tally.total_stars == 3
    assert tally.voter_count == 2
    assert tally.voters == ["Alice", "Bob"]


def test_same_voter_counted_once() -> None:
    records = [
        {"voter": "Alice", "selections": [{"id": 1, "votes": 2}]},
        {"voter": "Alice", "selections": [{"id": 1, "votes": 1}]},
    ]
    (tally,) = aggregate_votes(records)
    assert tally.total_stars == 3
    assert tally.voter_count == 1


def test_ranked_descending_ties_keep_input_order() -> None:
    records = [
        {"voter": "A", "selections": [
            {"id": 4, "votes": 1},
            {"id": 9, "votes": 2},
            {"id": 2, "votes": 1},
        ]},
        {"voter": "B", "selections": [{"id": 5, "votes": 1}]},
    ]
    assert [t.id for t in aggregate_votes(records)] == [9, 4, 2, 5]


def test_title_and_phase_from_first_sighting() -> None:
    records = [{"voter": "A", "selections": [{"id": 3, "title": "Constraint Inventory", "phase": "Planning", "votes": 1}]}]
    (tally,) = aggregate_votes(records)
    assert tally.title == "Constraint Inventory"
    assert tally.phase.value == "Planning"


def test_malformed_ballots_skipped() -> None:
    records = [
        {"voter": "A", "selections": [{"id": 1, "votes": 1}]},
        {"selections": "nope"},
        "garbage",
    ]
    (tally,) = aggregate_votes(records)
    assert tally.total_stars == 1


def test_empty() -> None:
    assert aggregate_votes([]) == []


def test_title_and_phase_filled_from_later_ballots() -> None:
    records = [
        {"voter": "A", "selections": [{"id": 3, "votes": 1}]},
        {"voter": "B", "selections": [{"id": 3, "title": "Constraint Inventory", "phase": "Planning", "votes": 1}]},
    ]
    (tally,) = aggregate_votes(records)
    assert tally.title == "Constraint Inventory"
    assert tally.phase.value == "Planning"
