from fastapi.testclient import TestClient


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_user(client: TestClient, name: str, email: str, password: str = "secret1") -> dict:
    res = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert res.status_code == 201, res.text
    return res.json()


def create_task(client: TestClient, token: str, **fields) -> dict:
    body = {"title": "T", "description": "D", **fields}
    res = client.post("/api/tasks", json=body, headers=auth_header(token))
    assert res.status_code == 201, res.text
    return res.json()
