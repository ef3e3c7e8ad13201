import pytest

from landhud.leadlists.statuses import (
    ListStatus,
    StoredStatus,
    TRANSITIONS,
    callback_target,
    can_transition,
    to_list,
    to_stored,
)


def test_status_mapping_is_total_and_one_to_one():
    stored = {to_stored(s) for s in ListStatus}
    assert stored == set(StoredStatus)
    for s in ListStatus:
        assert to_list(to_stored(s)) == s
    for s in StoredStatus:
        assert to_stored(to_list(s)) == s


def test_status_mapping_known_pairs():
    assert to_stored("scrubbing") == StoredStatus.PROCESSING
    assert to_stored("uploaded_to_launchcontrol") == StoredStatus.LAUNCHED
    assert to_list("processing") == ListStatus.SCRUBBING
    assert to_list("failed") == ListStatus.ERROR
    assert to_list("READY") == ListStatus.READY


def test_unrecognised_values_have_explicit_defaults():
    assert to_stored("launching-soon") == StoredStatus.PENDING
    assert to_stored(None) == StoredStatus.PENDING
    assert to_list("archived") == ListStatus.ERROR


@pytest.mark.parametrize("finished", [ListStatus.ERROR, ListStatus.CANCELLED])
def test_finished_lists_never_go_back(finished):
    assert TRANSITIONS[finished] == frozenset()
    for s in ListStatus:
        assert not can_transition(finished, s)


def test_forward_edges():
    assert can_transition("incoming", "scrubbing")
    assert can_transition("scrubbing", "ready")
    assert can_transition("scrubbing", "error")
    assert can_transition("ready", "uploaded_to_launchcontrol")
    assert can_transition("scrubbing", "cancelled")
    assert not can_transition("ready", "scrubbing")
    assert not can_transition("ready", "error")
    assert not can_transition("uploaded_to_launchcontrol", "ready")


def test_callback_target():
    assert callback_target("ready", None, "ready") == ListStatus.READY
    assert callback_target("Completed", None, "ready") == ListStatus.READY
    assert callback_target("failed", None, "ready") == ListStatus.ERROR
    # an error message wins over a success word
    assert callback_target("success", "bad format", "ready") == ListStatus.ERROR
    assert callback_target(None, "bad format", "ready") == ListStatus.ERROR


def test_callback_target_unknown_word_uses_fallback():
    assert callback_target("weird", None, "ready") == ListStatus.READY
    assert callback_target("weird", None, "error") == ListStatus.ERROR
    # a non-terminal fallback is not allowed
    assert callback_target("weird", None, "scrubbing") == ListStatus.READY
