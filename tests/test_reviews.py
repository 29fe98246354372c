from conftest import auth_header, register


def _create_room(client, token, **overrides):
    payload = {"title": "Cozy room", "rent": 450, "deposit": 900, "location": "Downtown"}
    payload.update(overrides)
    r = client.post("/rooms", json=payload, headers=auth_header(token))
    assert r.status_code == 201, r.text
    return r.json()


def _review(client, token, room_id, rating, comment=""):
    return client.post(
        f"/rooms/{room_id}/reviews",
        json={"rating": rating, "comment": comment},
        headers=auth_header(token),
    )


def test_reviews_update_room_summary(client):
    owner = register(client, "owner@example.com", "Owner")
    room = _create_room(client, owner)

    tokens = [register(client, f"r{i}@example.com", f"R{i}") for i in range(3)]
    for token, rating in zip(tokens, [5, 4, 3]):
        r = _review(client, token, room["id"], rating, "  fine  ")
        assert r.status_code == 201, r.text
        assert r.json()["comment"] == "fine"

    body = client.get(f"/rooms/{room['id']}").json()
    assert body["rating"] == 4.0
    assert body["reviews"] == 3

    listed = client.get(f"/rooms/{room['id']}/reviews").json()
    assert listed["total"] == 3
    assert {item["user_name"] for item in listed["items"]} == {"R0", "R1", "R2"}


def test_resubmit_replaces_review(client):
    owner = register(client, "owner@example.com")
    room = _create_room(client, owner)
    reviewer = register(client, "rev@example.com")

    assert _review(client, reviewer, room["id"], 4).status_code == 201
    assert _review(client, reviewer, room["id"], 2).status_code == 201

    body = client.get(f"/rooms/{room['id']}").json()
    assert (body["rating"], body["reviews"]) == (2.0, 1)
    assert client.get(f"/rooms/{room['id']}/reviews").json()["total"] == 1


def test_unauthenticated_review_401(client):
    owner = register(client, "owner@example.com")
    room = _create_room(client, owner)

    r = client.post(f"/rooms/{room['id']}/reviews", json={"rating": 5, "comment": "nice"})
    assert r.status_code == 401
    assert r.headers.get("WWW-Authenticate") == "Bearer"

    assert client.get(f"/rooms/{room['id']}/reviews").json()["total"] == 0
    assert client.get(f"/rooms/{room['id']}").json()["reviews"] == 0


def test_review_missing_room_404(client):
    token = register(client, "rev@example.com")
    assert _review(client, token, "missing", 3).status_code == 404
    assert client.get("/rooms/missing/reviews").status_code == 404


def test_review_rating_out_of_range_422(client):
    owner = register(client, "owner@example.com")
    room = _create_room(client, owner)
    assert _review(client, owner, room["id"], 6).status_code == 422
    assert _review(client, owner, room["id"], 0).status_code == 422


def test_manual_recompute(client, db):
    owner = register(client, "owner@example.com")
    room = _create_room(client, owner)
    _review(client, owner, room["id"], 3)

    assert client.post(f"/rooms/{room['id']}/rating/recompute").status_code == 401

    r = client.post(f"/rooms/{room['id']}/rating/recompute", headers=auth_header(owner))
    assert r.status_code == 200, r.text
    assert r.json() == {"room_id": room["id"], "rating": 3.0, "reviews": 1}

    r = client.post("/rooms/missing/rating/recompute", headers=auth_header(owner))
    assert r.status_code == 404
