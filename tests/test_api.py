import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_chat_service, get_moderation_service, get_profile_service
from application.services.chat_service import ChatApplicationService
from application.services.moderation_service import ModerationApplicationService
from application.services.notification_service import NotificationBroadcaster
from application.services.profile_service import ProfileApplicationService
from application.services.token_service import TokenService
from domain.moderation.entity import BlockRecord
from domain.user.entity import User
from infrastructure.database import create_tables
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork
from fakes import InMemoryUnitOfWork, RecordingBroker
from main import app


def _auth(user_id: int, role: str = "seeker") -> dict:
    token = TokenService().create_access_token(user_id, role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client():
    uow = InMemoryUnitOfWork(users=[User(id=1, name="Asha"), User(id=2, name="Ravi")])
    broker = RecordingBroker()
    broadcaster = NotificationBroadcaster(broker)
    app.dependency_overrides[get_chat_service] = lambda: ChatApplicationService(uow)
    app.dependency_overrides[get_moderation_service] = lambda: ModerationApplicationService(uow, broadcaster)
    app.dependency_overrides[get_profile_service] = lambda: ProfileApplicationService(uow, broadcaster)
    test_client = TestClient(app)
    test_client.uow = uow
    test_client.broker = broker
    yield test_client
    app.dependency_overrides.clear()


def test_routes_registered():
    paths = {r.path for r in app.routes}
    assert "/api/v1/ws" in paths
    assert "/api/v1/chat/send" in paths
    assert "/api/v1/users/block" in paths
    assert "/api/v1/users/report" in paths
    assert "/api/v1/profile/{user_id}/kyc" in paths


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "healthy"
    assert "X-Request-ID" in resp.headers


def test_chat_requires_token(client):
    assert client.get("/api/v1/chat/").status_code == 401


def test_send_and_list_chat(client):
    resp = client.post("/api/v1/chat/send", json={"receiverId": 2, "message": "hi"}, headers=_auth(1))
    assert resp.status_code == 200
    assert resp.json()["data"]["senderId"] == 1

    chats = client.get("/api/v1/chat/", headers=_auth(2)).json()["data"]
    assert chats[0]["id"] == 1
    assert chats[0]["unreadCount"] == 1
    assert chats[0]["name"] == "Asha"


def test_send_without_receiver_is_400(client):
    resp = client.post("/api/v1/chat/send", json={"message": "hi"}, headers=_auth(1))
    assert resp.status_code == 400
    assert resp.json()["code"] == 70003


def test_edit_other_users_message_is_403(client):
    sent = client.post("/api/v1/chat/send", json={"receiverId": 2, "message": "hi"}, headers=_auth(1)).json()["data"]
    resp = client.put(f"/api/v1/chat/{sent['id']}", json={"message": "x"}, headers=_auth(2))
    assert resp.status_code == 403
    assert client.delete("/api/v1/chat/999", headers=_auth(1)).status_code == 404


def test_block_notifies_both_parties(client):
    resp = client.post("/api/v1/users/block", json={"targetId": 2}, headers=_auth(1))
    assert resp.status_code == 200
    assert resp.json()["data"]["targetId"] == 2
    assert [ch for ch, _ in client.broker.events("userBlocked")] == ["1", "2"]


def test_block_self_is_400(client):
    resp = client.post("/api/v1/users/block", json={"targetId": 1}, headers=_auth(1))
    assert resp.status_code == 400


def test_kyc_requires_admin(client):
    resp = client.post("/api/v1/profile/2/kyc", json={"status": "verified"}, headers=_auth(1))
    assert resp.status_code == 403

    resp = client.post("/api/v1/profile/2/kyc", json={"status": "verified"}, headers=_auth(9, role="admin"))
    assert resp.status_code == 200
    assert resp.json()["data"]["kycStatus"] == "verified"
    assert [ch for ch, _ in client.broker.events("kycVerified")] == ["2"]


async def _store_block(user_id: int, target_id: int) -> None:
    async with SQLAlchemyUnitOfWork() as uow:
        await uow.block_repository.create(BlockRecord(id=None, user_id=user_id, target_id=target_id))


@pytest.fixture
def live_client():
    # Full lifespan wiring; the in-memory database lives until the engine is disposed on exit.
    with TestClient(app) as test_client:
        test_client.portal.call(create_tables)
        yield test_client


def _register(sock, user_id) -> None:
    assert sock.receive_json()["type"] == "welcome"
    sock.send_json({"type": "register", "data": user_id})
    assert sock.receive_json()["type"] == "registered"


def test_websocket_relay_end_to_end(live_client, caplog):
    with live_client.websocket_connect("/api/v1/ws") as sock1, live_client.websocket_connect("/api/v1/ws") as sock2:
        _register(sock1, 1)
        _register(sock2, "2")

        payload = {"senderId": 1, "receiverId": 2, "text": "hi"}
        sock1.send_json({"type": "sendMessage", "data": payload})

        to_receiver = sock2.receive_json()
        assert to_receiver["type"] == "receiveMessage"
        assert to_receiver["data"] == payload
        echo = sock1.receive_json()
        assert echo["type"] == "receiveMessage"
        assert echo["data"]["text"] == "hi"

        sock1.send_json(["not", "an", "object"])
        assert sock1.receive_json()["type"] == "error"

    assert "moderation_lookup_failed" not in caplog.text


def test_websocket_blocked_pair_gets_message_blocked(live_client, caplog):
    live_client.portal.call(_store_block, 4, 3)

    with live_client.websocket_connect("/api/v1/ws") as sock3, live_client.websocket_connect("/api/v1/ws") as sock4:
        _register(sock3, 3)
        _register(sock4, 4)

        payload = {"senderId": 3, "receiverId": 4, "text": "hello?"}
        sock3.send_json({"type": "sendMessage", "data": payload})

        blocked = sock3.receive_json()
        assert blocked["type"] == "messageBlocked"
        assert blocked["data"] == {"reason": "User blocked", "data": payload}

        # The receiver's next frame is the pong, not the message.
        sock4.send_json({"type": "ping"})
        assert sock4.receive_json()["type"] == "pong"

    assert "moderation_lookup_failed" not in caplog.text


def test_websocket_invalid_json_keeps_session(live_client):
    presence = live_client.app.state.realtime_service.presence
    with live_client.websocket_connect("/api/v1/ws") as sock:
        _register(sock, 1)
        assert presence.is_online(1)

        sock.send_text("not json{")
        error = sock.receive_json()
        assert error["type"] == "error"
        assert error["data"]["message_key"] == "ws.error.bad_frame"
        assert presence.is_online(1)

        sock.send_json({"type": "ping"})
        assert sock.receive_json()["type"] == "pong"
