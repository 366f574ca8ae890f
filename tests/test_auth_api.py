# tests/test_auth_api.py


def test_register_login_me(client, register):
    user_id, headers = register("new@example.com", "client", name="Nora")
    r = client.get("/me", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"id": user_id, "email": "new@example.com", "name": "Nora", "role": "client"}


def test_duplicate_email(client, register):
    register("dup@example.com", "client")
    r = client.post("/users", json={"email": "dup@example.com", "password": "another-pass", "role": "client"})
    assert r.status_code == 409


def test_admins_cannot_self_register(client):
    r = client.post("/users", json={"email": "boss@example.com", "password": "another-pass", "role": "admin"})
    assert r.status_code == 403


def test_bad_credentials(client, register):
    register("who@example.com", "client")
    r = client.post("/auth/login", data={"username": "who@example.com", "password": "wrong-password"})
    assert r.status_code == 401
    assert client.get("/me").status_code == 401
    assert client.get("/me", headers={"Authorization": "Bearer junk"}).status_code == 401


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
