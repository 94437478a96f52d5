"""Tests for the editor controller and the session."""

import io

import pytest

from pqscoreboard.core.matrix import ScoreMatrix
from pqscoreboard.core.session import ScoreboardSession
from pqscoreboard.editor.controller import EditorController
from pqscoreboard.reveal.sequencer import RevealState


@pytest.fixture
def session():
    return ScoreboardSession()


@pytest.fixture
def controller(session, make_sequencer):
    return EditorController(session, sequencer_factory=make_sequencer)


@pytest.fixture
def opened(controller, matrix):
    controller.session.replace(matrix)
    return controller


def test_new_scoreboard(controller):
    result = controller.new_scoreboard(3, 2)
    assert result.ok
    assert controller.session.matrix.team_count == 3
    assert controller.session.matrix.category_count == 2


def test_new_scoreboard_rejects_negative_counts(controller):
    result = controller.new_scoreboard(-1, 2)
    assert not result.ok
    assert result.message.startswith("Failed to create new scoreboard")
    assert controller.session.matrix is None


def test_edit_commands_need_an_open_scoreboard(controller):
    for result in (
        controller.add_team("A"),
        controller.add_category("X", []),
        controller.set_score(0, 0, 1),
        controller.save_stream(io.BytesIO()),
    ):
        assert not result.ok
        assert result.error_type == "InvalidStateError"


def test_add_team_and_category(opened):
    result = opened.add_team("C")
    assert result.ok
    assert result.data["team_index"] == 2

    result = opened.add_category("Z", ["1", "2", "3.5"])
    assert result.ok
    assert opened.session.matrix.get_total_score(2) == 3.5


def test_failed_add_leaves_session_intact(opened):
    before = opened.session.matrix.scores()
    result = opened.add_team("A")
    assert not result.ok
    assert result.error_type == "DuplicateNameError"
    assert result.message == "Failed to add team: Team 'A' already exists"

    result = opened.add_category("Q", [1, 2, 3])
    assert result.error_type == "ShapeMismatchError"
    assert opened.session.matrix.scores() == before


def test_set_score_text_returns_new_total(opened):
    result = opened.set_score_text(0, 1, " 10.5 ")
    assert result.ok
    assert result.data == {"changed": True, "total": "11.5"}

    result = opened.set_score_text(0, 1, "10.50")
    assert result.ok
    assert result.data == {"changed": False}


def test_set_score_text_rejects_bad_text(opened):
    result = opened.set_score_text(1, 0, "ten")
    assert not result.ok
    assert result.message == (
        "Failed to set score for team 'B' for category 'X': 'ten' is not a valid score."
    )
    assert result.data["value"] == "3"
    assert opened.session.matrix.get_score(1, 0) == 3


def test_set_score_text_bad_index(opened):
    result = opened.set_score_text(5, 0, "1")
    assert result.error_type == "IndexOutOfRangeError"


def test_listeners_notified_on_changes(opened):
    calls = []
    opened.session.add_listener(lambda: calls.append(1))
    opened.add_team("C")
    opened.set_score(0, 0, 1)  # unchanged, no notification
    opened.set_score(0, 0, 2)
    opened.add_team("C")  # failed, no notification
    assert len(calls) == 2


def test_failing_listener_does_not_break_commands(opened):
    def broken():
        raise RuntimeError("boom")

    opened.session.add_listener(broken)
    assert opened.add_team("C").ok


def test_open_save_and_close_files(tmp_path, opened, matrix):
    path = str(tmp_path / "board.csv")
    assert opened.save_file(path).ok
    assert opened.session.path == path

    assert opened.close().ok
    assert opened.session.matrix is None

    result = opened.open_file(path)
    assert result.ok
    assert opened.session.matrix == matrix
    assert opened.session.path == path


def test_save_without_path(opened):
    result = opened.save_file()
    assert not result.ok
    assert "No file name given" in result.message


def test_open_missing_file(controller, tmp_path):
    result = controller.open_file(str(tmp_path / "missing.csv"))
    assert not result.ok
    assert result.error_type == "FileNotFoundError"


def test_open_malformed_stream_keeps_current_scoreboard(opened, matrix):
    result = opened.open_stream(io.BytesIO(b"Category,A\nX,abc\n"), "bad.csv")
    assert not result.ok
    assert result.error_type == "FormatError"
    assert opened.session.matrix is matrix


def test_open_json_stream(controller):
    data = b'{"teams": ["A"], "categories": ["X"], "scores": [["4"]]}'
    assert controller.open_stream(io.BytesIO(data), "board.json").ok
    assert controller.session.matrix.get_total_score(0) == 4


def test_capabilities(controller, surface):
    assert controller.capabilities() == {
        "can_edit": False, "can_save": False, "can_reveal": False, "can_cancel": False,
    }
    controller.new_scoreboard(2, 0)
    caps = controller.capabilities()
    assert caps["can_edit"] and caps["can_save"]
    assert not caps["can_reveal"]
    controller.add_category("X", [0, 0])
    assert controller.capabilities()["can_reveal"]


def test_grid_has_totals_row(opened):
    grid = opened.grid()
    assert grid["columns"] == ["A", "B"]
    assert grid["rows"][0] == {"label": "X", "cells": ["1", "3"]}
    assert grid["rows"][-1] == {"label": "Σ", "cells": ["3", "7"], "read_only": True}


def test_start_reveal_uses_config_defaults(opened, surface, sleeps, default_config):
    default_config.reveal.inter_step_delay = 0.25
    default_config.reveal.show_running_totals = True
    result = opened.start_reveal(surface)
    assert result.ok
    assert opened.session.reveal.state is RevealState.COMPLETED
    assert len(surface.get_steps()) == 8
    assert set(sleeps) == {0.25}


def test_start_reveal_with_overrides(opened, surface, sleeps):
    result = opened.start_reveal(surface, inter_step_delay=0, show_running_totals=False)
    assert result.ok
    assert len(surface.get_steps()) == 6
    assert set(sleeps) == {0}


def test_start_reveal_not_presentable(controller, surface):
    controller.new_scoreboard(0, 3)
    result = controller.start_reveal(surface)
    assert not result.ok
    assert result.error_type == "NotPresentableError"
    assert controller.session.reveal is None
    assert surface.clear_count == 0


def test_start_reveal_bad_delay(opened, surface):
    result = opened.start_reveal(surface, inter_step_delay="soon")
    assert not result.ok


@pytest.mark.parametrize("delay", ["nan", "inf"])
def test_start_reveal_non_finite_delay(opened, surface, delay):
    result = opened.start_reveal(surface, inter_step_delay=delay)
    assert not result.ok
    assert opened.session.reveal is None
    assert surface.clear_count == 0


def test_running_notification_sees_new_reveal(session, make_sequencer, matrix, surface):
    seen = []
    controller = EditorController(session, sequencer_factory=lambda: make_sequencer(
        spawn=lambda play: None,
        on_change=lambda seq: seen.append((seq.state, session.reveal is seq)),
    ))
    session.replace(matrix)

    assert controller.start_reveal(surface).ok
    assert seen == [(RevealState.RUNNING, True)]
    assert controller.capabilities()["can_cancel"]


def test_failed_start_restores_previous_reveal(session, make_sequencer, matrix, surface):
    controller = EditorController(session, sequencer_factory=make_sequencer)
    session.replace(matrix)
    assert controller.start_reveal(surface).ok
    previous = session.reveal

    def refuse(play):
        raise RuntimeError("no scheduler")

    controller._sequencer_factory = lambda: make_sequencer(spawn=refuse)
    with pytest.raises(RuntimeError):
        controller.start_reveal(surface)
    assert session.reveal is previous
    assert previous.state is RevealState.COMPLETED


def test_one_running_reveal_at_a_time(session, make_sequencer, matrix, surface):
    pending = []
    controller = EditorController(
        session, sequencer_factory=lambda: make_sequencer(spawn=pending.append))
    session.replace(matrix)

    first = controller.start_reveal(surface)
    assert first.ok
    second = controller.start_reveal(surface)
    assert second.error_type == "InvalidStateError"

    assert controller.cancel_reveal().ok
    assert session.reveal.state is RevealState.CANCELLED
    assert controller.cancel_reveal().error_type == "InvalidStateError"

    # A new reveal gets a new sequencer
    assert controller.start_reveal(surface).ok
    assert len(pending) == 2


def test_cancel_without_reveal(controller):
    result = controller.cancel_reveal()
    assert result.error_type == "InvalidStateError"


def test_session_to_dict(opened):
    data = opened.session.to_dict()
    assert data["open"] is True
    assert data["scoreboard"]["teams"] == ["A", "B"]
    assert data["reveal"] is None


def test_session_replace_notifies(session):
    calls = []
    session.add_listener(lambda: calls.append(session.is_open))
    session.replace(ScoreMatrix(1, 1), "x.csv")
    session.close()
    assert calls == [True, False]
    assert session.path is None
