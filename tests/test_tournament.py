import pytest

from threecard.errors import GameError
from threecard.models import GamePhase
from threecard.tournament import champion, final_rankings, is_tournament_over, prune_roster

from .helpers import actor, create_engine, event_names, find_event, player, start_game


def test_two_player_hand_end_to_end():
    engine = create_engine()
    start_game(engine)
    room = engine.room
    assert room.pot == 200
    assert room.min_bet == 100

    a = actor(engine)
    b = player(engine, "p0")
    engine.view_cards(a.id)
    engine.place_bet(a.id, 200)
    assert (a.money, room.min_bet) == (700, 200)

    with pytest.raises(GameError):
        engine.place_bet(b.id, 150)
    events = engine.place_bet(b.id, 200)

    assert b.money == 800
    assert room.pot == 500
    assert room.current_round == 2
    assert "hand-ended" not in event_names(events)

    assert actor(engine) is a
    engine.place_bet(a.id, 200)
    events = engine.fold(b.id)

    ended = find_event(events, "hand-ended")
    assert ended.data["winners"] == [a.id]
    assert ended.data["pot"] == 700
    assert a.money == 500 + 700
    assert engine.awaiting_next_hand


def test_tournament_ends_at_hand_cap_and_ranks_by_money():
    engine = create_engine(players=3, hand_cap=1)
    start_game(engine)
    engine.view_cards("p1")
    engine.place_bet("p1", 500)
    engine.fold("p2")
    events = engine.fold("p0")

    assert event_names(events)[-2:] == ["hand-ended", "tournament-ended"]
    ended = find_event(events, "tournament-ended")
    # The cap leaves everyone on the roster; the first seat is named champion
    # even though p1 finished richest.
    assert ended.data["winner"]["id"] == "p0"
    assert [entry["id"] for entry in ended.data["rankings"]] == ["p1", "p0", "p2"]
    assert engine.room.phase == GamePhase.ENDED
    assert not engine.awaiting_next_hand
    assert engine.start_next_hand() == []


def test_default_cap_is_starting_player_count():
    engine = create_engine()
    start_game(engine)
    assert engine.room.hand_limit == 2
    engine.fold("p1")
    assert engine.awaiting_next_hand

    events = engine.start_next_hand()

    assert event_names(events)[0] == "new-hand-started"
    assert engine.room.hands_played == 2
    assert engine.room.dealer_index == 1
    assert actor(engine).id == "p0"
    events = engine.fold("p0")
    assert "tournament-ended" in event_names(events)


def test_start_next_hand_rechecks_termination():
    engine = create_engine(players=3, hand_cap=5)
    start_game(engine)
    engine.fold("p1")
    engine.fold("p2")
    assert engine.awaiting_next_hand

    # Balances changed between the resolved hand and the timer firing.
    player(engine, "p1").money = 0
    player(engine, "p2").money = 0
    prune_roster(engine.room)

    events = engine.start_next_hand()

    assert event_names(events) == ["tournament-ended"]
    assert engine.room.phase == GamePhase.ENDED
    assert engine.room.hands_played == 1


def test_roster_pruning_and_champion():
    engine = create_engine(players=3, hand_cap=10)
    start_game(engine)
    room = engine.room
    player(engine, "p0").money = 0
    assert prune_roster(room) == ["p1", "p2"]
    assert not is_tournament_over(room)

    player(engine, "p1").money = 100
    player(engine, "p2").money = 900
    assert champion(room).id == "p1"
    assert [p.id for p in final_rankings(room)] == ["p2", "p1", "p0"]

    player(engine, "p2").money = 0
    prune_roster(room)
    assert is_tournament_over(room)
    assert champion(room).id == "p1"


def test_eliminated_player_sits_out_following_hands():
    engine = create_engine(players=3, starting_money=300, hand_cap=5)
    start_game(engine)
    engine.all_in("p1")
    events = engine.fold("p2")
    # An all-in player holds no money, so p0 is the only contender left.
    ended = find_event(events, "hand-ended")
    assert ended.data["winners"] == ["p0"]
    assert ended.data["eliminated"] == ["p1"]

    assert engine.room.tournament_players == ["p0", "p2"]
    engine.start_next_hand()
    out = player(engine, "p1")
    assert out.hand == []
    assert out.status.value == "eliminated"


def test_start_game_validation():
    engine = create_engine(players=1)
    with pytest.raises(GameError) as excinfo:
        engine.start_game("p0")
    assert excinfo.value.code == "NOT_ENOUGH_PLAYERS"

    engine.add_player("p1", "Player1")
    with pytest.raises(GameError) as excinfo:
        engine.start_game("p1")
    assert excinfo.value.code == "NOT_HOST"

    start_game(engine)
    with pytest.raises(GameError) as excinfo:
        engine.start_game("p0")
    assert excinfo.value.code == "GAME_ALREADY_STARTED"
    with pytest.raises(GameError) as excinfo:
        engine.add_player("p2", "Late")
    assert excinfo.value.code == "GAME_ALREADY_STARTED"


def test_seat_management_rules():
    engine = create_engine(players=2)
    with pytest.raises(GameError) as excinfo:
        engine.add_player("p9", "  player1 ")
    assert excinfo.value.code == "NAME_TAKEN"
    with pytest.raises(GameError) as excinfo:
        engine.add_player("p9", "   ")
    assert excinfo.value.code == "NAME_REQUIRED"

    for idx in range(2, 8):
        engine.add_player(f"p{idx}", f"Player{idx}")
    with pytest.raises(GameError) as excinfo:
        engine.add_player("p8", "Player8")
    assert excinfo.value.code == "ROOM_FULL"
    assert [p.position for p in engine.room.players] == list(range(8))


def test_disconnect_mid_hand_is_a_fold():
    engine = create_engine(players=3)
    start_game(engine)
    assert actor(engine).id == "p1"

    events = engine.disconnect("p1")

    assert player(engine, "p1").status.value == "folded"
    assert not player(engine, "p1").connected
    assert actor(engine).id == "p2"
    assert event_names(events)[:2] == ["player-disconnected", "room-updated"]
    assert all("p1" not in event.to for event in events)


def test_disconnect_of_last_opponent_ends_hand():
    engine = create_engine()
    start_game(engine)
    events = engine.disconnect("p0")
    ended = find_event(events, "hand-ended")
    assert ended.data["winners"] == ["p1"]


def test_waiting_room_disconnects():
    engine = create_engine(players=3)
    events = engine.disconnect("p1")
    assert event_names(events) == ["player-disconnected", "room-updated"]
    # Seats are never removed, so positions keep their join-time values.
    assert [p.id for p in engine.room.players] == ["p0", "p1", "p2"]
    assert [p.position for p in engine.room.players] == [0, 1, 2]
    assert not player(engine, "p1").connected
    assert [p["connected"] for p in events[1].data["players"]] == [True, False, True]

    events = engine.disconnect("p0")
    assert event_names(events) == ["room-closed"]
    assert engine.closed


def test_guest_who_left_before_start_sits_out_the_hand():
    engine = create_engine(players=3)
    engine.disconnect("p2")
    start_game(engine)
    absent = player(engine, "p2")
    assert absent.position == 2
    assert absent.status.value == "folded"
    assert engine.room.starting_player_count == 3
