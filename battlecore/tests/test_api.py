"""
Tests for API layer.

Tests:
- API service methods
- HTTP routes and error responses
- Session lifecycle via API
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.schemas import (
    ActionKind,
    ActionRequest,
    CreatureSpec,
    DifficultyLevel,
    ItemSpec,
    SessionStatus,
    StartBattleRequest,
    StatPreviewRequest,
)
from ..api.service import APIService
from ..engine_core.errors import SessionNotFound


def hero(creature_id, **kwargs):
    return CreatureSpec(creature_id=creature_id, species_name=creature_id.capitalize(), **kwargs)


class TestAPIService:
    """Tests for APIService."""

    @pytest.fixture
    def service(self):
        """Create a fresh API service."""
        return APIService()

    def test_start_battle(self, service):
        """A starter collection against a medium opponent."""
        response = service.start_battle(StartBattleRequest(seed=7))

        assert response.status == SessionStatus.PLAYER_TURN
        assert response.battle_id == response.session_id
        assert response.difficulty == DifficultyLevel.MEDIUM
        assert response.turn_number == 1
        assert response.active_side == "player"
        assert len(response.player.hand) == 4
        assert response.player.energy == 12
        assert response.log[0].message == "Battle started! Difficulty: Medium"

    def test_opponent_hand_is_hidden(self, service):
        response = service.start_battle(StartBattleRequest(difficulty="hard", seed=7))

        assert response.opponent.hand == []
        assert response.opponent.hand_count == 4
        assert response.opponent.deck_count == 4

    def test_seeded_battles_match(self, service):
        first = service.start_battle(StartBattleRequest(seed=21))
        second = service.start_battle(StartBattleRequest(seed=21))

        assert first.session_id != second.session_id
        assert first.player.hand == second.player.hand
        assert first.opponent.hand_count == second.opponent.hand_count

    def test_custom_deck(self, service):
        request = StartBattleRequest(
            seed=1,
            player_hand=[hero("aria", rarity="Rare", form=1)],
            player_deck=[hero("bram")],
            player_tools=[ItemSpec(item_id="t-1", name="Claws", item_type="strength", effect="Surge")],
        )
        response = service.start_battle(request)

        assert [c.creature_id for c in response.player.hand] == ["aria"]
        assert response.player.deck_count == 1
        assert response.player.tools[0].category == "tool"

    def test_duplicate_creature_ids(self, service):
        request = StartBattleRequest(player_hand=[hero("aria")], player_deck=[hero("aria")])
        with pytest.raises(ValueError):
            service.start_battle(request)

    def test_duplicate_item_ids(self, service):
        spec = ItemSpec(item_id="x", name="Charm", item_type="magic", effect="Echo")
        request = StartBattleRequest(player_hand=[hero("aria")], player_tools=[spec], player_spells=[spec])
        with pytest.raises(ValueError):
            service.start_battle(request)

    def test_unknown_session(self, service):
        with pytest.raises(SessionNotFound):
            service.get_state("nonexistent-id")
        with pytest.raises(SessionNotFound):
            service.submit_action("nonexistent-id", ActionRequest(action_type="end_turn"))
        with pytest.raises(SessionNotFound):
            service.legal_actions("nonexistent-id")

    def test_legal_actions(self, service):
        session_id = service.start_battle(StartBattleRequest(seed=3)).session_id
        response = service.legal_actions(session_id)

        assert response.count == len(response.actions)
        assert response.actions[-1].action_type == ActionKind.END_TURN
        assert response.actions[-1].description == "end turn"

    def test_submit_legal_action(self, service):
        session_id = service.start_battle(StartBattleRequest(seed=3)).session_id
        first = service.legal_actions(session_id).actions[0]

        request = ActionRequest(
            action_type=first.action_type,
            creature_id=first.creature_id,
            target_id=first.target_id,
            item_id=first.item_id,
        )
        assert service.submit_action(session_id, request).success

    def test_end_turn_runs_opponent(self, service):
        session_id = service.start_battle(StartBattleRequest(seed=3)).session_id
        response = service.submit_action(session_id, ActionRequest(action_type="end_turn"))

        assert response.success
        assert response.opponent_actions[-1] == "end turn"
        assert response.state.status in (SessionStatus.PLAYER_TURN, SessionStatus.GAME_OVER)

    def test_rejected_action(self, service):
        session_id = service.start_battle(StartBattleRequest(seed=3)).session_id
        request = ActionRequest(action_type="attack", creature_id="ghost", target_id="opp-1")
        response = service.submit_action(session_id, request)

        assert not response.success
        assert response.error_code == "UNKNOWN_REFERENCE"
        assert response.state.log[-1].message == response.error

    def test_end_session(self, service):
        session_id = service.start_battle(StartBattleRequest(seed=3)).session_id
        assert service.list_sessions() == [session_id]

        assert service.end_session(session_id)
        assert not service.end_session(session_id)
        assert service.list_sessions() == []

    def test_preview_stats(self, service):
        request = StatPreviewRequest(creature=hero("aria"), opponent=hero("bram"))
        response = service.preview_stats(request)

        assert response.stats.physical_attack == 34
        assert response.power == 141
        assert response.opponent_id == "bram"
        assert response.type_advantage == pytest.approx(1.0)
        assert response.battle_odds == pytest.approx(0.5)
        assert response.expected_damage == 23

    def test_preview_without_opponent(self, service):
        response = service.preview_stats(StatPreviewRequest(creature=hero("aria")))
        assert response.opponent_id is None
        assert response.battle_odds is None


class TestHTTPRoutes:
    """Tests for the FastAPI routes."""

    @pytest.fixture
    def client(self):
        return TestClient(create_app(service=APIService()))

    @pytest.fixture
    def battle(self, client):
        response = client.post("/api/v1/battles", json={"difficulty": "hard", "seed": 3})
        assert response.status_code == 200
        return response.json()

    def test_start_battle(self, battle):
        assert battle["status"] == "player_turn"
        assert battle["difficulty"] == "hard"
        assert battle["opponent"]["hand"] == []
        assert battle["opponent"]["hand_count"] == 4

    def test_get_battle(self, client, battle):
        response = client.get(f"/api/v1/battles/{battle['session_id']}")
        assert response.status_code == 200
        assert response.json()["session_id"] == battle["session_id"]

    def test_unknown_battle(self, client):
        response = client.get("/api/v1/battles/nonexistent-id")

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "SESSION_NOT_FOUND"
        assert data["details"] == {"session_id": "nonexistent-id"}
        assert data["api_version"] == "v1"

    def test_list_battles(self, client, battle):
        data = client.get("/api/v1/battles").json()
        assert data == {"sessions": [battle["session_id"]], "count": 1}

    def test_bad_difficulty(self, client):
        response = client.post("/api/v1/battles", json={"difficulty": "nightmare"})
        assert response.status_code == 422

    def test_duplicate_ids(self, client):
        spec = {"creature_id": "aria", "species_name": "Aria"}
        response = client.post("/api/v1/battles", json={"player_hand": [spec], "player_deck": [spec]})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_submit_action(self, client, battle):
        url = f"/api/v1/battles/{battle['session_id']}/actions"
        response = client.post(url, json={"action_type": "end_turn"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["opponent_actions"]

    def test_rejected_action_is_not_an_http_error(self, client, battle):
        url = f"/api/v1/battles/{battle['session_id']}/actions"
        response = client.post(url, json={"action_type": "defend", "creature_id": "ghost"})

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["error_code"] == "UNKNOWN_REFERENCE"

    def test_action_on_unknown_battle(self, client):
        response = client.post("/api/v1/battles/nope/actions", json={"action_type": "end_turn"})
        assert response.status_code == 404

    def test_legal_actions(self, client, battle):
        data = client.get(f"/api/v1/battles/{battle['session_id']}/legal-actions").json()
        assert data["count"] == len(data["actions"])
        assert data["actions"][-1]["action_type"] == "end_turn"

    def test_end_battle(self, client, battle):
        url = f"/api/v1/battles/{battle['session_id']}"
        response = client.delete(url, params={"reason": "test"})

        assert response.json() == {"success": True, "session_id": battle["session_id"]}
        assert client.get(url).status_code == 404

    def test_stats_preview(self, client):
        body = {"creature": {"creature_id": "aria", "species_name": "Aria"}}
        data = client.post("/api/v1/stats/preview", json=body).json()
        assert data["power"] == 141

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["service"] == "battlecore"

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/health"
