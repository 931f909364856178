import pytest

from threecard.cards import Card, build_deck, deal, parse_label
from threecard.errors import GameError
from threecard.lobby import error_event
from threecard.models import GamePhase

from .helpers import actor, create_engine, start_game


def test_game_error_is_a_value_error_with_code():
    exc = GameError("BET_TOO_LOW", "Minimum bet is 100")
    assert isinstance(exc, ValueError)
    assert str(exc) == "Minimum bet is 100"
    event = error_event("s1", exc)
    assert event.ev == "error"
    assert event.to == ("s1",)
    assert event.data == {"code": "BET_TOO_LOW", "message": "Minimum bet is 100"}


def test_actions_before_game_starts_are_rejected():
    engine = create_engine()
    with pytest.raises(GameError) as excinfo:
        engine.place_bet("p1", 100)
    assert excinfo.value.code == "GAME_NOT_ACTIVE"


def test_actions_after_tournament_end_are_rejected():
    engine = create_engine(hand_cap=1)
    start_game(engine)
    engine.fold("p1")
    assert engine.room.phase == GamePhase.ENDED
    with pytest.raises(GameError) as excinfo:
        engine.place_bet("p0", 100)
    assert excinfo.value.code == "GAME_NOT_ACTIVE"


def test_unknown_player_rejected():
    engine = create_engine()
    start_game(engine)
    with pytest.raises(GameError) as excinfo:
        engine.fold("stranger")
    assert excinfo.value.code == "PLAYER_NOT_FOUND"


def test_all_in_twice_rejected():
    engine = create_engine(players=3)
    start_game(engine)
    shover = actor(engine)
    engine.all_in(shover.id)
    with pytest.raises(GameError) as excinfo:
        engine.all_in(shover.id)
    assert excinfo.value.code == "ALREADY_ALL_IN"


def test_rejected_intent_leaves_room_untouched():
    engine = create_engine()
    start_game(engine)
    before = engine.room_state()
    with pytest.raises(GameError):
        engine.place_bet(actor(engine).id, 5_000)
    assert engine.room_state() == before


def test_card_label_parsing_errors():
    assert parse_label("10s") == Card("10", "spades")
    with pytest.raises(ValueError, match="Invalid card label"):
        parse_label("100s")
    with pytest.raises(ValueError, match="Invalid suit"):
        parse_label("Ax")
    with pytest.raises(ValueError, match="Invalid rank"):
        parse_label("1h")


def test_deal_raises_when_deck_exhausted():
    deck = build_deck()
    deal(deck, 51)
    with pytest.raises(ValueError, match="Not enough cards"):
        deal(deck, 3)
    assert len(deck) == 1
