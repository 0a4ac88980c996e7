from __future__ import annotations

# Lagos, where the sample shops live
LAGOS_LAT = 6.5244
LAGOS_LNG = 3.3792


def login(client, email: str, password: str):
    return client.post("/auth/login", json={"email": email, "password": password})


def login_user(client):
    return login(client, "user@example.com", "user123")


def login_owner(client):
    return login(client, "owner@example.com", "owner123")


def login_admin(client):
    return login(client, "admin@example.com", "admin123")
