from fastapi.testclient import TestClient
from profile_analyzer.main import app

def test_health_check():
    client = TestClient(app)
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}

def test_index_lists_endpoints():
    client = TestClient(app)
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["version"] == "1.0.0"
    assert body["endpoints"]["profile"] == "/api/github/profile/:username"
    assert body["endpoints"]["analyzedUsers"] == "/api/github/users/analyzed"
