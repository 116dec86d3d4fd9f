import json
from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from lokal.ai.gateway import AIGateway, get_ai_gateway
from lokal.core.database import get_db
from lokal.core.kv_store import MemoryKeyValueStore
from lokal.deps import get_current_identity, get_state_store
from lokal.routers.admin_ai import router as admin_ai_router
from lokal.routers.discover import router as discover_router
from lokal.services.identity import AuthIdentity
from lokal.services.prompt_history import get_prompt_history
from tests.fixtures_data import SUPER_ADMIN_EMAIL


class _FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error

    def generate_content(self, *, model, contents, config=None):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text, candidates=[])


class _Forbidden(Exception):
    code = 403


def _build_client(db, *, text=None, error=None, email=SUPER_ADMIN_EMAIL):
    store = MemoryKeyValueStore()
    models = _FakeModels(text, error)
    gateway = AIGateway(lambda _key: SimpleNamespace(models=models), model="m", search_model="s", maps_model="p")

    app = FastAPI()
    app.include_router(discover_router)
    app.include_router(admin_ai_router)
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_identity] = lambda: AuthIdentity(id="admin-1", email=email)
    app.dependency_overrides[get_ai_gateway] = lambda: gateway
    app.dependency_overrides[get_state_store] = lambda: store
    return TestClient(app), store


@pytest.fixture(autouse=True)
def _api_key(monkeypatch):
    monkeypatch.delenv("VITE_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")


def test_location_envelope(db):
    client, _store = _build_client(db, text="Raleigh")

    response = client.get("/api/discover/location", params={"lat": 35.77, "lng": -78.63})

    assert response.json() == {"status": "success", "data": "Raleigh"}


def test_location_rejects_out_of_range_latitude(db):
    client, _store = _build_client(db, text="Nowhere")

    assert client.get("/api/discover/location", params={"lat": 91, "lng": 0}).status_code == 422


def test_nearby_deals_failure_is_empty_list(db):
    client, _store = _build_client(db, error=RuntimeError("timeout"))

    response = client.get("/api/discover/deals", params={"lat": 1, "lng": 2})

    assert response.json() == {"status": "error", "data": []}


def test_place_search_records_prompt(db):
    client, store = _build_client(db, text="No places")

    response = client.get("/api/discover/places", params={"q": "pizza", "lat": 1, "lng": 2})

    assert response.json() == {"status": "empty", "data": []}
    assert get_prompt_history(store, "admin-1", "search")[0]["prompt"] == "pizza"


def test_outreach_permission_error_offers_key_selection(db):
    client, store = _build_client(db, error=_Forbidden("forbidden"))

    response = client.post("/api/admin/ai/outreach-email", json={"name": "Fix-It Bikes", "type": "Bike repair"})

    assert response.status_code == 403
    assert response.json()["detail"]["action"] == "select_key"
    assert response.json()["detail"]["status"] == "permission_error"
    assert len(get_prompt_history(store, "admin-1", "email_gen")) == 1


def test_outreach_without_key_is_503(db, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY")
    client, _store = _build_client(db, text="unused")

    response = client.post("/api/admin/ai/outreach-email", json={"name": "Fix-It Bikes", "type": "Bike repair"})

    assert response.status_code == 503


def test_outreach_success(db):
    client, _store = _build_client(db, text="Dear Fix-It Bikes")

    response = client.post("/api/admin/ai/outreach-email", json={"name": "Fix-It Bikes", "type": "Bike repair"})

    assert response.status_code == 200
    assert response.json() == {"text": "Dear Fix-It Bikes", "sources": []}


def test_deal_content_records_prompt(db):
    payload = {"title": "Latte Week", "description": "Every day", "discount": "20% OFF", "code": "LATTE20"}
    client, store = _build_client(db, text=json.dumps(payload))

    response = client.post("/api/admin/ai/deal-content", json={"name": "Bean There", "type": "Cafe"})

    assert response.json() == {"status": "success", "data": payload}
    assert get_prompt_history(store, "admin-1", "deal_gen")[0]["params"] == {"type": "Cafe"}


def test_ai_admin_routes_require_admin(db):
    client, _store = _build_client(db, text="tip", email="someone@example.com")

    response = client.post("/api/admin/ai/analyze-deal", json={"title": "Free Croissant"})

    assert response.status_code == 403


@pytest.mark.parametrize(
    "path, params",
    [
        ("/api/discover/location", {"lat": 1, "lng": 2}),
        ("/api/discover/geocode", {"q": "raleigh"}),
        ("/api/discover/deals", {"lat": 1, "lng": 2}),
        ("/api/discover/places", {"q": "pizza", "lat": 1, "lng": 2}),
    ],
)
def test_discover_routes_require_sign_in(path, params):
    calls = []
    gateway = AIGateway(lambda _key: calls.append(_key), model="m", search_model="s", maps_model="p")
    app = FastAPI()
    app.include_router(discover_router)
    app.dependency_overrides[get_ai_gateway] = lambda: gateway
    app.dependency_overrides[get_state_store] = lambda: MemoryKeyValueStore()
    client = TestClient(app)

    response = client.get(path, params=params)

    assert response.status_code == 401
    assert calls == []


def test_geocode_without_answer_is_404(db):
    client, _store = _build_client(db, text="null")

    response = client.get("/api/discover/geocode", params={"q": "atlantis"})

    assert response.status_code == 404


def test_admin_prompts_are_not_visible_to_other_users(db):
    client, store = _build_client(db, text="Dear Secret Target Cafe")

    client.post("/api/admin/ai/outreach-email", json={"name": "Secret Target Cafe", "type": "Cafe"})

    assert get_prompt_history(store, "user-9") == []
    assert get_prompt_history(store, "admin-1", "email_gen")[0]["prompt"] == "Secret Target Cafe"
