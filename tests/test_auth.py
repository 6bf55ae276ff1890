from resource_hub.utils.security import decode_access_token


def _register(client, username="newuser", email="newuser@example.com"):
    return client.post(
        "/register",
        json={
            "username": username,
            "email": email,
            "password": "s3cret-pass",
            "display_name": "New User",
            "department": "Mathematics",
        },
    )


def test_register(client):
    response = _register(client)
    assert response.status_code == 201
    body = response.json()
    assert body["username"] == "newuser"
    assert body["role"] == "user"
    assert "password" not in body
    assert "password_hash" not in body


def test_register_duplicate_email(client):
    _register(client)
    response = _register(client, username="other")
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_register_duplicate_username(client):
    _register(client)
    response = _register(client, email="other@example.com")
    assert response.status_code == 400
    assert response.json()["detail"] == "Username already taken"


def test_login_returns_token(client, moderator):
    response = client.post(
        "/login",
        json={"email": moderator.email, "password": "testpass123"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"

    payload = decode_access_token(body["access_token"])
    assert payload["sub"] == str(moderator.user_id)
    assert payload["role"] == "moderator"


def test_login_wrong_password(client, student):
    response = client.post(
        "/login",
        json={"email": student.email, "password": "wrong"},
    )
    assert response.status_code == 401


def test_invalid_token_rejected(client):
    response = client.get(
        "/submissions/mine", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401
