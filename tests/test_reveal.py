"""Tests for reveal step building and the reveal sequencer."""

from decimal import Decimal

import pytest

from pqscoreboard.core.errors import InvalidStateError, NotPresentableError
from pqscoreboard.core.matrix import ScoreMatrix
from pqscoreboard.output.base import RecordingSurface
from pqscoreboard.output.caspar import CasparClient
from pqscoreboard.reveal import (
    Action,
    RevealOptions,
    RevealSequencer,
    RevealState,
    StepKind,
    build_steps,
    next_action,
)


def describe(steps):
    result = []
    for step in steps:
        if step.kind is StepKind.SCORE:
            result.append((step.category_name, step.team_name, step.value))
        elif step.kind is StepKind.RUNNING_TOTALS:
            result.append((step.category_name, "running", step.totals))
        else:
            result.append(("total", step.team_name, step.value))
    return result


# ============ build_steps ============

def test_steps_in_category_then_team_order(matrix):
    steps = build_steps(matrix)
    assert describe(steps) == [
        ("X", "A", 1), ("X", "B", 3),
        ("Y", "A", 2), ("Y", "B", 4),
        ("total", "A", 3), ("total", "B", 7),
    ]
    assert [s.index for s in steps] == list(range(6))


def test_step_order_does_not_depend_on_scores(matrix):
    before = [(s.kind, s.team_index, s.category_index) for s in build_steps(matrix)]
    matrix.set_score(0, 0, 1000)
    matrix.set_score(1, 1, -1000)
    after = [(s.kind, s.team_index, s.category_index) for s in build_steps(matrix)]
    assert before == after


def test_running_totals_are_cumulative(matrix):
    steps = build_steps(matrix, show_running_totals=True)
    assert describe(steps) == [
        ("X", "A", 1), ("X", "B", 3), ("X", "running", (1, 3)),
        ("Y", "A", 2), ("Y", "B", 4), ("Y", "running", (3, 7)),
        ("total", "A", 3), ("total", "B", 7),
    ]


def test_steps_are_a_snapshot(matrix):
    steps = build_steps(matrix)
    matrix.set_score(0, 0, 50)
    assert steps[0].value == 1
    assert steps[-2].value == 3


@pytest.mark.parametrize("teams,categories", [(0, 2), (2, 0), (0, 0)])
def test_unpresentable_matrix(teams, categories):
    with pytest.raises(NotPresentableError):
        build_steps(ScoreMatrix(teams, categories))


def test_step_to_dict(matrix):
    step = build_steps(matrix, show_running_totals=True)[2]
    assert step.to_dict() == {
        "index": 2,
        "kind": "running_totals",
        "team_index": None,
        "team": None,
        "category_index": 0,
        "category": "X",
        "value": None,
        "totals": ["1", "3"],
    }


# ============ next_action ============

@pytest.mark.parametrize("state,index,count,elapsed,expected", [
    (RevealState.RUNNING, 0, 3, False, Action.RENDER),
    (RevealState.RUNNING, 1, 3, False, Action.WAIT),
    (RevealState.RUNNING, 1, 3, True, Action.RENDER),
    (RevealState.RUNNING, 3, 3, False, Action.COMPLETE),
    (RevealState.RUNNING, 3, 3, True, Action.COMPLETE),
    (RevealState.CANCELLED, 1, 3, True, Action.STOP),
    (RevealState.COMPLETED, 3, 3, False, Action.STOP),
    (RevealState.IDLE, 0, 3, False, Action.STOP),
])
def test_next_action(state, index, count, elapsed, expected):
    assert next_action(state, index, count, elapsed) is expected


# ============ RevealSequencer ============

def test_full_run(matrix, surface, make_sequencer, sleeps):
    seq = make_sequencer()
    assert seq.state is RevealState.IDLE
    seq.start(matrix, RevealOptions(inter_step_delay=0.5, target_surface=surface))

    assert seq.state is RevealState.COMPLETED
    assert surface.clear_count == 1
    assert describe(surface.get_steps()) == describe(build_steps(matrix))
    assert seq.rendered_count == 6
    # One delay between each pair of steps, none before the first
    assert sleeps == [0.5] * 5
    assert seq.wait(0)


def test_cancel_after_second_step(matrix, make_sequencer):
    seq = make_sequencer()

    class CancellingSurface(RecordingSurface):
        def render(self, step):
            super().render(step)
            if step.index == 1:
                seq.cancel()

    surface = CancellingSurface()
    seq.start(matrix, RevealOptions(target_surface=surface))

    assert seq.state is RevealState.CANCELLED
    assert [s.index for s in surface.get_steps()] == [0, 1]
    assert seq.rendered_count == 2


def test_cancel_during_delay(matrix, surface, make_sequencer):
    seq = make_sequencer(sleep=lambda delay: seq.cancel())
    seq.start(matrix, RevealOptions(target_surface=surface))
    assert seq.state is RevealState.CANCELLED
    assert len(surface.get_steps()) == 1


def test_start_on_empty_matrix_stays_idle(surface, make_sequencer):
    seq = make_sequencer()
    with pytest.raises(NotPresentableError):
        seq.start(ScoreMatrix(0, 3), RevealOptions(target_surface=surface))
    assert seq.state is RevealState.IDLE
    assert surface.clear_count == 0
    assert surface.get_steps() == []


def test_start_without_surface_stays_idle(matrix, make_sequencer):
    seq = make_sequencer()
    with pytest.raises(NotPresentableError):
        seq.start(matrix, RevealOptions())
    assert seq.state is RevealState.IDLE


def test_start_while_running(matrix, surface, make_sequencer):
    pending = []
    seq = make_sequencer(spawn=pending.append)
    seq.start(matrix, RevealOptions(target_surface=surface))
    assert seq.state is RevealState.RUNNING

    with pytest.raises(InvalidStateError):
        seq.start(matrix, RevealOptions(target_surface=surface))

    pending[0]()
    assert seq.state is RevealState.COMPLETED
    assert len(surface.get_steps()) == 6


def test_no_restart_after_terminal_state(matrix, surface, make_sequencer):
    seq = make_sequencer()
    seq.start(matrix, RevealOptions(target_surface=surface))
    with pytest.raises(InvalidStateError):
        seq.start(matrix, RevealOptions(target_surface=surface))


@pytest.mark.parametrize("run", [False, True])
def test_cancel_only_while_running(matrix, surface, make_sequencer, run):
    seq = make_sequencer()
    if run:
        seq.start(matrix, RevealOptions(target_surface=surface))
    with pytest.raises(InvalidStateError):
        seq.cancel()


def test_cancel_before_playback_starts(matrix, surface, make_sequencer):
    pending = []
    seq = make_sequencer(spawn=pending.append)
    seq.start(matrix, RevealOptions(target_surface=surface))
    seq.cancel()
    pending[0]()
    assert seq.state is RevealState.CANCELLED
    assert surface.clear_count == 0
    assert surface.get_steps() == []


def test_edits_during_reveal_do_not_affect_it(matrix, surface, make_sequencer):
    pending = []
    seq = make_sequencer(spawn=pending.append)
    seq.start(matrix, RevealOptions(target_surface=surface))
    matrix.set_score(0, 0, 42)
    matrix.add_team("C")
    pending[0]()
    values = [s.value for s in surface.get_steps()]
    assert values == [1, 3, 2, 4, 3, 7]


def test_surface_failure_cancels_run(matrix, make_sequencer):
    class BrokenSurface(RecordingSurface):
        def render(self, step):
            if step.index == 2:
                raise RuntimeError("display lost")
            super().render(step)

    surface = BrokenSurface()
    seq = make_sequencer()
    seq.start(matrix, RevealOptions(target_surface=surface))
    assert seq.state is RevealState.CANCELLED
    assert seq.error == "display lost"
    assert len(surface.get_steps()) == 2


def test_spawn_failure_cancels_run(matrix, surface, make_sequencer):
    def spawn(play):
        raise RuntimeError("no scheduler")

    seq = make_sequencer(spawn=spawn)
    with pytest.raises(RuntimeError):
        seq.start(matrix, RevealOptions(target_surface=surface))
    assert seq.state is RevealState.CANCELLED


def test_change_callback_sees_each_transition(matrix, surface, make_sequencer):
    states = []
    seq = make_sequencer(on_change=lambda s: states.append(s.state))
    seq.start(matrix, RevealOptions(target_surface=surface))
    assert states == [RevealState.RUNNING, RevealState.COMPLETED]


def test_threaded_playback(matrix, surface):
    seq = RevealSequencer()
    seq.start(matrix, RevealOptions(inter_step_delay=0.001, target_surface=surface))
    assert seq.wait(5)
    assert seq.state is RevealState.COMPLETED
    assert len(surface.get_steps()) == 6


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        RevealOptions(inter_step_delay=-1)


def test_to_dict(matrix, surface, make_sequencer):
    seq = make_sequencer()
    assert seq.to_dict()["state"] == "idle"
    seq.start(matrix, RevealOptions(show_running_totals=True, target_surface=surface))
    data = seq.to_dict()
    assert data["state"] == "completed"
    assert data["step_count"] == 8
    assert data["rendered"] == 8
    assert data["show_running_totals"] is True
    assert Decimal(7) == surface.get_steps()[-1].value


def test_unreachable_caspar_cancels_run(matrix, make_sequencer):
    surface = CasparClient(host="127.0.0.1", port=1)
    seq = make_sequencer()
    seq.start(matrix, RevealOptions(target_surface=surface))
    assert seq.state is RevealState.CANCELLED
    assert "CasparCG command failed" in seq.error
    assert seq.rendered_count == 0


@pytest.mark.parametrize("delay", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_delay_rejected(delay):
    with pytest.raises(ValueError):
        RevealOptions(inter_step_delay=delay)
