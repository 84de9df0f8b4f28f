def test_signup_and_login(client):
    res = client.post("/signup", json={"username": "erin", "email": "erin@example.com", "password": "pw123456"})
    assert res.status_code == 201
    data = res.json()
    assert data["username"] == "erin"
    assert data["email"] == "erin@example.com"
    assert "password" not in data

    res = client.post("/login", json={"email": "erin@example.com", "password": "pw123456"})
    assert res.status_code == 200
    token = res.json()["token"]

    res = client.get("/users/history", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200


def test_signup_conflict(client):
    body = {"username": "erin", "email": "erin@example.com", "password": "pw"}
    assert client.post("/signup", json=body).status_code == 201
    res = client.post("/signup", json=body)
    assert res.status_code == 409
    assert res.json() == {"detail": "Email or username already taken"}


def test_signup_missing_fields(client):
    res = client.post("/signup", json={"username": "erin"})
    assert res.status_code == 400


def test_login_bad_password(client, make_user):
    make_user("frank", email="frank@example.com")
    res = client.post("/login", json={"email": "frank@example.com", "password": "nope"})
    assert res.status_code == 401
    assert res.json() == {"detail": "Invalid credentials"}


def test_login_fixture_password(client, make_user):
    make_user("gina", email="gina@example.com")
    res = client.post("/login", json={"email": "gina@example.com", "password": "secret123"})
    assert res.status_code == 200
    assert res.json()["token"]


def test_security_headers(client):
    res = client.get("/check")
    assert res.headers["X-Frame-Options"] == "DENY"
    assert res.headers["X-Content-Type-Options"] == "nosniff"
