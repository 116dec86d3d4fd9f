from fastapi.testclient import TestClient


REQUIRED_ROUTES = {
    "/",
    "/api/profile",
    "/api/deals",
    "/api/deals/{deal_id}/redeem",
    "/api/deals/{deal_id}/save",
    "/api/businesses",
    "/api/admin/businesses",
    "/api/admin/contracts",
    "/api/admin/usage",
    "/api/admin/leads",
    "/api/admin/ai/outreach-email",
    "/api/discover/places",
    "/api/prompt-history",
    "/api/preferences",
    "/internal/metrics/endpoints",
}


def test_api_startup_and_router_registration(monkeypatch):
    from lokal import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    with TestClient(main.app) as client:
        response = client.get("/")
        docs_response = client.get("/docs")
        openapi_response = client.get("/openapi.json")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert docs_response.status_code == 200
    assert openapi_response.status_code == 200

    paths = set(openapi_response.json()["paths"])
    assert REQUIRED_ROUTES.issubset(paths)
