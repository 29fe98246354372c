from conftest import auth_header, make_room, make_user, register


def _seed_rooms(db):
    owner = make_user(db, "seed-owner", "Seed")
    make_room(db, owner, title="Downtown studio", rent=700, location="Downtown",
              amenities=["WiFi", "AC", "Furnished"], rating=4.7, reviews=12, featured=True)
    make_room(db, owner, title="Student room", rent=300, location="University Area",
              description="Close to campus", amenities=["WiFi", "Kitchen Access"], rating=4.1, reviews=5)
    make_room(db, owner, title="Balcony flat", rent=1200, location="East Side",
              amenities=["WiFi", "AC", "Balcony"], rating=4.9, reviews=2)


def test_room_crud_by_owner(client):
    token = register(client, "owner@example.com", "Olga")
    payload = {
        "title": "  Cozy room ",
        "rent": 450,
        "deposit": 900,
        "location": "Downtown",
        "amenities": ["WiFi", " WiFi", "AC", ""],
    }
    r = client.post("/rooms", json=payload, headers=auth_header(token))
    assert r.status_code == 201, r.text
    room = r.json()
    assert room["title"] == "Cozy room"
    assert room["amenities"] == ["WiFi", "AC"]
    assert room["owner_name"] == "Olga"
    assert (room["rating"], room["reviews"]) == (0.0, 0)

    r = client.patch(f"/rooms/{room['id']}", json={"rent": 500, "featured": True}, headers=auth_header(token))
    assert r.status_code == 200, r.text
    assert r.json()["rent"] == 500
    assert r.json()["featured"] is True
    assert r.json()["title"] == "Cozy room"

    mine = client.get("/rooms/mine", headers=auth_header(token)).json()
    assert [x["id"] for x in mine["items"]] == [room["id"]]

    assert client.delete(f"/rooms/{room['id']}", headers=auth_header(token)).status_code == 204
    assert client.get(f"/rooms/{room['id']}").status_code == 404


def test_rating_fields_not_client_writable(client):
    token = register(client, "owner@example.com")
    room = client.post(
        "/rooms", json={"title": "A", "rent": 1, "location": "B"}, headers=auth_header(token)
    ).json()

    r = client.patch(f"/rooms/{room['id']}", json={"rating": 5, "reviews": 99}, headers=auth_header(token))
    assert r.status_code == 200
    assert (r.json()["rating"], r.json()["reviews"]) == (0.0, 0)


def test_only_owner_may_modify(client):
    owner = register(client, "owner@example.com")
    other = register(client, "other@example.com")
    room = client.post(
        "/rooms", json={"title": "A", "rent": 1, "location": "B"}, headers=auth_header(owner)
    ).json()

    assert client.patch(f"/rooms/{room['id']}", json={"rent": 2}, headers=auth_header(other)).status_code == 403
    assert client.delete(f"/rooms/{room['id']}", headers=auth_header(other)).status_code == 403
    assert client.delete("/rooms/missing", headers=auth_header(owner)).status_code == 404


def test_room_writes_require_auth(client):
    assert client.post("/rooms", json={"title": "A", "rent": 1, "location": "B"}).status_code == 401
    assert client.get("/rooms/mine").status_code == 401


def test_delete_room_removes_reviews_and_favorites(client):
    owner = register(client, "owner@example.com")
    fan = register(client, "fan@example.com")
    room = client.post(
        "/rooms", json={"title": "A", "rent": 1, "location": "B"}, headers=auth_header(owner)
    ).json()
    client.post(f"/rooms/{room['id']}/reviews", json={"rating": 5}, headers=auth_header(fan))
    client.put(f"/favorites/{room['id']}", headers=auth_header(fan))

    assert client.delete(f"/rooms/{room['id']}", headers=auth_header(owner)).status_code == 204
    assert client.get("/favorites", headers=auth_header(fan)).json()["total"] == 0


def test_list_rooms_filters(client, db):
    _seed_rooms(db)

    body = client.get("/rooms", params={"q": "campus"}).json()
    assert [x["title"] for x in body["items"]] == ["Student room"]

    body = client.get("/rooms", params={"q": "DOWNTOWN"}).json()
    assert body["total"] == 1

    body = client.get("/rooms", params=[("amenities", "WiFi"), ("amenities", "AC")]).json()
    assert {x["title"] for x in body["items"]} == {"Downtown studio", "Balcony flat"}
    assert body["total"] == 2

    body = client.get("/rooms", params={"min_rent": 400, "max_rent": 1000}).json()
    assert [x["title"] for x in body["items"]] == ["Downtown studio"]

    body = client.get("/rooms", params={"min_rating": 4.5}).json()
    assert body["total"] == 2

    body = client.get("/rooms", params={"featured": True}).json()
    assert [x["title"] for x in body["items"]] == ["Downtown studio"]

    body = client.get("/rooms", params={"location": "East Side"}).json()
    assert [x["title"] for x in body["items"]] == ["Balcony flat"]


def test_list_rooms_sorting_and_pagination(client, db):
    _seed_rooms(db)

    body = client.get("/rooms", params={"sort": "rent_asc"}).json()
    assert [x["rent"] for x in body["items"]] == [300, 700, 1200]

    body = client.get("/rooms", params={"sort": "rent_desc"}).json()
    assert [x["rent"] for x in body["items"]] == [1200, 700, 300]

    body = client.get("/rooms", params={"sort": "rating"}).json()
    assert [x["title"] for x in body["items"]] == ["Balcony flat", "Downtown studio", "Student room"]

    p1 = client.get("/rooms", params={"sort": "rent_asc", "limit": 1, "offset": 0}).json()
    p2 = client.get("/rooms", params={"sort": "rent_asc", "limit": 1, "offset": 1}).json()
    assert p1["total"] == p2["total"] == 3
    assert p1["items"][0]["id"] != p2["items"][0]["id"]

    p = client.get("/rooms", params=[("amenities", "WiFi"), ("sort", "rent_asc"), ("limit", 1), ("offset", 2)]).json()
    assert p["total"] == 3
    assert [x["rent"] for x in p["items"]] == [1200]


def test_amenities_match_whole_elements(client, db):
    owner = make_user(db, "amenity-owner", "Ann")
    make_room(db, owner, title="Plain", amenities=["WiFi"])
    make_room(db, owner, title="Odd names", amenities=["100% cotton_sheets", "Кухня"])

    assert client.get("/rooms", params={"amenities": "Wi"}).json()["total"] == 0

    body = client.get("/rooms", params={"amenities": "100% cotton_sheets"}).json()
    assert [x["title"] for x in body["items"]] == ["Odd names"]

    body = client.get("/rooms", params={"amenities": "Кухня"}).json()
    assert [x["title"] for x in body["items"]] == ["Odd names"]

    # "_" and "%" are literals, not LIKE wildcards.
    assert client.get("/rooms", params={"amenities": "100% cotton%sheets"}).json()["total"] == 0
