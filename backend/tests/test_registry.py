import pytest

from hintword.game.errors import (
    GameInProgressError,
    LobbyFullError,
    LobbyIdsExhaustedError,
    LobbyNotFoundError,
    PlayerNotInLobbyError,
    ValidationError,
)
from hintword.game.models import Settings
from hintword.game.registry import LOBBY_ID_ALPHABET, MAX_LOBBY_ID_ATTEMPTS, LobbyRegistry


def test_create_lobby_has_only_host_and_is_waiting(registry):
    lobby = registry.create_lobby("h1", "  Hank  ")

    assert len(lobby.id) == 6
    assert all(ch in LOBBY_ID_ALPHABET for ch in lobby.id)
    assert lobby.host_id == "h1"
    assert [(p.id, p.name, p.score) for p in lobby.players] == [("h1", "Hank", 0)]
    assert lobby.state.status == "waiting"
    assert registry.find_lobby_id("h1") == lobby.id


def test_create_lobby_uses_default_settings():
    reg = LobbyRegistry(default_settings=Settings(time_limit=90, hint_interval=10, max_players=4))
    lobby = reg.create_lobby("h", "Hank")
    assert (lobby.settings.time_limit, lobby.settings.hint_interval, lobby.settings.max_players) == (90, 10, 4)

    # Lobbies never share a settings object.
    lobby.settings.max_players = 2
    assert reg.create_lobby("h2", "Hal").settings.max_players == 4


def test_lobby_ids_skip_live_collisions():
    class ScriptedRng:
        def __init__(self, codes):
            self._codes = list(codes)

        def choices(self, alphabet, k):
            return list(self._codes.pop(0))

    reg = LobbyRegistry(rng=ScriptedRng(["AAAAAA", "AAAAAA", "BBBBBB"]))
    first = reg.create_lobby("h1", "One")
    second = reg.create_lobby("h2", "Two")
    assert (first.id, second.id) == ("AAAAAA", "BBBBBB")


def test_lobby_id_generation_gives_up_when_no_id_is_free():
    class StuckRng:
        calls = 0

        def choices(self, alphabet, k):
            self.calls += 1
            return ["Q"] * k

    rng = StuckRng()
    reg = LobbyRegistry(id_length=1, rng=rng)
    reg.create_lobby("h1", "One")

    with pytest.raises(LobbyIdsExhaustedError) as excinfo:
        reg.create_lobby("h2", "Two")

    assert excinfo.value.kind == "CapacityExceeded"
    assert rng.calls == 1 + MAX_LOBBY_ID_ATTEMPTS
    assert [lobby.id for lobby in reg.list_lobbies()] == ["Q"]
    assert reg.find_lobby_id("h2") is None


@pytest.mark.parametrize("name", ["", "   ", None, "x" * 21, "<script>", "tab\there"])
def test_create_lobby_rejects_bad_names(registry, name):
    with pytest.raises(ValidationError):
        registry.create_lobby("h1", name)
    assert len(registry) == 0


def test_join_appends_in_order(registry):
    lobby = registry.create_lobby("h", "Hank")
    joined, rejoined = registry.join_lobby(lobby.id, "p", "Pia")

    assert rejoined is False
    assert [p.id for p in joined.players] == ["h", "p"]
    assert registry.find_lobby_id("p") == lobby.id


def test_join_is_idempotent_for_members(registry):
    lobby = registry.create_lobby("h", "Hank")
    registry.join_lobby(lobby.id, "p", "Pia")
    again, rejoined = registry.join_lobby(lobby.id, "p", "Pia")

    assert rejoined is True
    assert [p.id for p in again.players] == ["h", "p"]


def test_join_accepts_lowercase_lobby_id(registry):
    lobby = registry.create_lobby("h", "Hank")
    joined, _ = registry.join_lobby(f" {lobby.id.lower()} ", "p", "Pia")
    assert joined is lobby


def test_join_unknown_lobby(registry):
    with pytest.raises(LobbyNotFoundError):
        registry.join_lobby("NOPE42", "p", "Pia")


def test_join_requires_lobby_id(registry):
    with pytest.raises(ValidationError):
        registry.join_lobby("", "p", "Pia")


def test_join_rejected_mid_round_but_member_can_rejoin(two_player_lobby, registry):
    session = two_player_lobby
    session.start_game("host")

    with pytest.raises(GameInProgressError):
        registry.join_lobby(session.id, "late", "Lou")
    lobby, rejoined = registry.join_lobby(session.id, "guest", "Pia")
    assert rejoined is True
    assert len(lobby.players) == 2


def test_join_rejected_when_full(registry):
    lobby = registry.create_lobby("h", "Hank")
    registry.get_session(lobby.id).update_settings("h", {"maxPlayers": 2})
    registry.join_lobby(lobby.id, "p", "Pia")

    with pytest.raises(LobbyFullError):
        registry.join_lobby(lobby.id, "q", "Quinn")
    assert [p.id for p in lobby.players] == ["h", "p"]
    assert registry.find_lobby_id("q") is None


def test_host_leaving_transfers_host(registry):
    lobby = registry.create_lobby("h", "Hank")
    registry.join_lobby(lobby.id, "p", "Pia")
    registry.join_lobby(lobby.id, "q", "Quinn")

    remaining = registry.leave_lobby(lobby.id, "h")

    assert remaining is lobby
    assert lobby.host_id == "p"
    assert [p.id for p in lobby.players] == ["p", "q"]
    assert registry.find_lobby_id("h") is None


def test_last_member_leaving_disbands(registry):
    lobby = registry.create_lobby("h", "Hank")

    assert registry.leave_lobby(lobby.id, "h") is None
    with pytest.raises(LobbyNotFoundError):
        registry.get_lobby(lobby.id)
    assert len(registry) == 0


def test_leave_requires_membership(registry):
    lobby = registry.create_lobby("h", "Hank")
    with pytest.raises(PlayerNotInLobbyError):
        registry.leave_lobby(lobby.id, "stranger")
    with pytest.raises(LobbyNotFoundError):
        registry.leave_lobby("ZZZZZZ", "h")


def test_disconnect_is_a_leave(registry):
    lobby = registry.create_lobby("h", "Hank")
    registry.join_lobby(lobby.id, "p", "Pia")

    assert registry.handle_disconnect("h") == (lobby.id, lobby)
    assert lobby.host_id == "p"

    assert registry.handle_disconnect("p") == (lobby.id, None)
    assert registry.list_lobbies() == []


def test_disconnect_of_unknown_player(registry):
    assert registry.handle_disconnect("ghost") is None
