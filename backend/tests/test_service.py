import pytest

from conftest import FakeTimer
from drawguess.game import service
from drawguess.game.errors import NotAuthorized, PhaseMismatch, PreconditionFailed, RoomFull
from drawguess.game.models import Capability, Phase
from drawguess.realtime import events


def _start_drawing(room, word="Cat"):
    service.start_round(room, "ava")
    service.select_word(room, "ava", word)
    room.timer = FakeTimer()
    return room.timer


def test_start_round_assigns_drawer(room):
    emissions = service.start_round(room, "ava")

    assert room.phase is Phase.WORD_SELECTION
    assert room.round == 1
    assert room.drawer_id == "ava"
    assert room.players["ava"].is_drawing is True
    assert room.players["bea"].is_drawing is False
    assert [e.event for e in emissions] == [events.GAME_STARTED]
    assert emissions[0].args[0]["gameState"] == "word-selection"


def test_viewer_cannot_start(room):
    with pytest.raises(NotAuthorized) as info:
        service.start_round(room, "bea")
    assert info.value.event == events.GAME_START_DENIED
    assert room.phase is Phase.WAITING
    assert room.round == 0


def test_start_needs_two_players(directory):
    room = directory.create_room("ava")
    service.add_player(room, "ava", "Ava", Capability.DRAWER_CAPABLE)

    with pytest.raises(PreconditionFailed) as info:
        service.start_round(room, "ava")
    assert info.value.code == "not_enough_players"
    assert info.value.event == events.GAME_START_DENIED
    assert room.phase is Phase.WAITING


def test_start_outside_waiting_is_ignored(room):
    service.start_round(room, "ava")
    with pytest.raises(PhaseMismatch):
        service.start_round(room, "ava")
    assert room.round == 1


def test_select_word_starts_drawing(room):
    service.start_round(room, "ava")
    emissions = service.select_word(room, "ava", "  Cat ")

    assert room.phase is Phase.DRAWING
    assert room.word == "Cat"
    assert room.time_left == 60
    assert room.round_locked is False
    assert emissions[0].event == events.WORD_SELECTED
    assert emissions[0].args[0]["currentWord"] == "Cat"


def test_only_drawer_selects_word(room):
    service.start_round(room, "ava")
    with pytest.raises(NotAuthorized) as info:
        service.select_word(room, "bea", "Dog")
    assert info.value.event == events.WORD_SELECTION_DENIED
    assert room.phase is Phase.WORD_SELECTION
    assert room.word == ""


def test_select_word_outside_word_selection(room):
    _start_drawing(room)
    with pytest.raises(PhaseMismatch):
        service.select_word(room, "ava", "Dog")
    assert room.word == "Cat"


def test_drawing_update_goes_to_others(room):
    _start_drawing(room)
    strokes = [{"path": "M0 0 L1 1"}]

    emissions = service.update_drawing(room, "ava", strokes)

    assert room.drawing_data == strokes
    assert len(emissions) == 1
    assert emissions[0].event == events.DRAWING_UPDATE
    assert emissions[0].target == "others"
    assert emissions[0].args == (strokes,)


def test_viewer_cannot_draw(room):
    _start_drawing(room)
    with pytest.raises(NotAuthorized) as info:
        service.update_drawing(room, "bea", [])
    assert info.value.event == events.DRAWING_DENIED
    assert room.drawing_data is None


def test_wrong_guess_is_logged_without_scoring(room):
    _start_drawing(room)

    emissions = service.submit_guess(room, "bea", "dog")

    assert [e.event for e in emissions] == [events.GUESS_SUBMITTED]
    assert emissions[0].args[0]["guess"] == "dog"
    assert emissions[0].args[0]["playerName"] == "Bea"
    assert len(room.guesses) == 1
    assert room.players["ava"].score == 0
    assert room.players["bea"].score == 0
    assert room.phase is Phase.DRAWING


def test_correct_guess_emits_correct_then_finished(room):
    timer = _start_drawing(room)
    service.submit_guess(room, "bea", "dog")

    emissions = service.submit_guess(room, "bea", "  cAT ")

    assert [e.event for e in emissions] == [events.CORRECT_GUESS, events.ROUND_FINISHED]
    guess, before = emissions[0].args
    assert guess["guess"] == "  cAT "
    assert before["gameState"] == "drawing"
    assert before["currentWord"] == "Cat"
    after = emissions[1].args[0]
    assert after["gameState"] == "finished"
    assert after["currentWord"] == ""

    assert room.players["ava"].score == 10
    assert room.players["bea"].score == 15
    assert room.round_locked is True
    assert timer.cancelled is True
    assert room.timer is None
    assert room.phase is Phase.FINISHED
    assert [g.text for g in room.guesses] == ["dog", "  cAT "]


def test_locked_round_rejects_second_correct_guess(room):
    service.add_player(room, "cyd", "Cyd", Capability.VIEWER_ONLY)
    _start_drawing(room)
    service.submit_guess(room, "bea", "cat")

    # Put the room back in drawing to isolate the lock from the phase check.
    room.phase = Phase.DRAWING
    with pytest.raises(PhaseMismatch):
        service.submit_guess(room, "cyd", "cat")

    assert room.players["cyd"].score == 0
    assert room.players["ava"].score == 10


def test_drawer_cannot_guess(room):
    _start_drawing(room)
    with pytest.raises(NotAuthorized) as info:
        service.submit_guess(room, "ava", "cat")
    assert info.value.event == events.GUESS_DENIED
    assert room.guesses == []


def test_guess_outside_drawing_is_ignored(room):
    service.start_round(room, "ava")
    with pytest.raises(PhaseMismatch):
        service.submit_guess(room, "bea", "cat")


def test_tick_counts_down(room):
    _start_drawing(room)

    emissions = service.tick(room)

    assert room.time_left == 59
    assert [e.event for e in emissions] == [events.TIMER_UPDATE]
    assert emissions[0].args == (59,)


def test_tick_to_zero_finishes_round_without_scoring(room):
    timer = _start_drawing(room)
    room.time_left = 1

    emissions = service.tick(room)

    assert [e.event for e in emissions] == [events.TIMER_UPDATE, events.ROUND_ENDED]
    assert room.phase is Phase.FINISHED
    assert timer.cancelled is True
    assert room.timer is None
    assert all(p.score == 0 for p in room.players.values())


def test_tick_outside_drawing_stops_timer(room):
    service.start_round(room, "ava")
    timer = FakeTimer()
    room.timer = timer

    assert service.tick(room) == []
    assert timer.cancelled is True
    assert room.time_left == 60


def test_continue_starts_next_round(room):
    _start_drawing(room)
    service.submit_guess(room, "bea", "cat")

    emissions = service.continue_to_next_round(room, "ava")

    assert [e.event for e in emissions] == [events.CONTINUE_TO_WORD_SELECTION]
    assert room.phase is Phase.WORD_SELECTION
    assert room.round == 2
    assert room.round_locked is False
    assert room.word == ""
    assert room.drawing_data is None
    assert room.guesses == []
    assert room.time_left == 60
    # Scores survive across rounds.
    assert room.players["bea"].score == 15


def test_continue_at_max_rounds_is_game_over(room):
    _start_drawing(room)
    service.submit_guess(room, "bea", "cat")
    room.round = 3

    emissions = service.continue_to_next_round(room, "ava")

    assert [e.event for e in emissions] == [events.GAME_OVER]
    assert room.phase is Phase.GAME_OVER
    with pytest.raises(PhaseMismatch):
        service.start_round(room, "ava")


def test_only_host_continues(room):
    _start_drawing(room)
    service.submit_guess(room, "bea", "cat")
    with pytest.raises(NotAuthorized) as info:
        service.continue_to_next_round(room, "bea")
    assert info.value.event == events.CONTINUE_DENIED
    assert room.phase is Phase.FINISHED


def test_continue_while_drawing_is_ignored(room):
    _start_drawing(room)
    with pytest.raises(PhaseMismatch):
        service.continue_to_next_round(room, "ava")
    assert room.phase is Phase.DRAWING


def test_removing_drawer_resets_room(room):
    service.add_player(room, "cyd", "Cyd", Capability.VIEWER_ONLY)
    timer = _start_drawing(room)
    service.update_drawing(room, "ava", [{"x": 1}])

    emissions = service.remove_player(room, "ava")

    assert room.phase is Phase.WAITING
    assert room.word == ""
    assert room.drawing_data is None
    assert room.drawer_id is None
    assert timer.cancelled is True
    assert not any(p.is_drawing for p in room.players.values())
    assert [e.event for e in emissions] == [events.PLAYER_LEFT]


def test_removing_viewer_keeps_round(room):
    service.add_player(room, "cyd", "Cyd", Capability.VIEWER_ONLY)
    _start_drawing(room)

    service.remove_player(room, "cyd")

    assert room.phase is Phase.DRAWING
    assert "cyd" not in room.players


def test_removing_last_player_emits_nothing(room):
    service.remove_player(room, "bea")
    assert service.remove_player(room, "ava") == []
    assert room.players == {}


def test_room_capacity(room):
    service.add_player(room, "cyd", "Cyd", Capability.VIEWER_ONLY)
    service.add_player(room, "dee", "Dee", Capability.VIEWER_ONLY)

    with pytest.raises(RoomFull):
        service.add_player(room, "eve", "Eve", Capability.VIEWER_ONLY)
    assert len(room.players) == 4


def test_second_drawing_device_is_denied(room):
    with pytest.raises(NotAuthorized) as info:
        service.add_player(room, "zed", "Zed", Capability.DRAWER_CAPABLE)
    assert info.value.event == events.JOIN_DENIED
    assert "zed" not in room.players


def test_drawing_device_inherits_orphaned_room(room):
    service.remove_player(room, "ava")
    service.add_player(room, "zed", "Zed", Capability.DRAWER_CAPABLE)
    assert room.host_id == "zed"


def test_join_emissions(room):
    emissions = service.add_player(room, "cyd", "Cyd", Capability.VIEWER_ONLY)
    assert [(e.event, e.target) for e in emissions] == [
        (events.ROOM_JOINED, "sender"),
        (events.PLAYER_JOINED, "others"),
    ]


def test_cancel_requires_host(room):
    timer = _start_drawing(room)
    with pytest.raises(NotAuthorized) as info:
        service.cancel(room, "bea")
    assert info.value.event == events.CANCEL_DENIED
    assert timer.cancelled is False

    emissions = service.cancel(room, "ava")
    assert [e.event for e in emissions] == [events.GAME_CANCELLED]
    assert timer.cancelled is True


def test_phase_sequence_over_a_full_game(room):
    seen = [room.phase]
    service.start_round(room, "ava")
    for rnd in range(3):
        seen.append(room.phase)
        service.select_word(room, "ava", f"word{rnd}")
        seen.append(room.phase)
        if rnd % 2:
            room.time_left = 1
            service.tick(room)
        else:
            service.submit_guess(room, "bea", f"WORD{rnd}")
        seen.append(room.phase)
        service.continue_to_next_round(room, "ava")
    seen.append(room.phase)

    edges = set(zip(seen, seen[1:]))
    allowed = {
        (Phase.WAITING, Phase.WORD_SELECTION),
        (Phase.WORD_SELECTION, Phase.DRAWING),
        (Phase.DRAWING, Phase.FINISHED),
        (Phase.FINISHED, Phase.WORD_SELECTION),
        (Phase.FINISHED, Phase.GAME_OVER),
    }
    assert edges <= allowed
    assert seen[-1] is Phase.GAME_OVER
    # Rounds 1 and 3 were solved; round 2 timed out.
    assert room.players["ava"].score == 20
    assert room.players["bea"].score == 30


def test_select_word_before_any_round_is_ignored(room):
    with pytest.raises(PhaseMismatch):
        service.select_word(room, "ava", "Cat")
    with pytest.raises(PhaseMismatch):
        service.update_drawing(room, "ava", [])
    assert room.phase is Phase.WAITING
    assert room.word == ""
