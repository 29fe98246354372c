from pathlib import Path

import pytest

from app.core.errors import AuthenticationRequired, InvalidUpload
from app.core.identity import Identity
from app.services.storage import save_room_image, uploads_root

from conftest import auth_header, register

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def test_save_room_image_writes_under_owner_dir():
    url = save_room_image(identity=Identity(user_id="u1"), filename="Photo.PNG", content=PNG)
    assert url.startswith("/uploads/rooms/u1/")
    assert url.endswith(".png")

    stored = uploads_root() / Path(url.removeprefix("/uploads/"))
    assert stored.read_bytes() == PNG


def test_save_room_image_rejects_bad_input():
    owner = Identity(user_id="u1")
    with pytest.raises(AuthenticationRequired):
        save_room_image(identity=None, filename="a.png", content=PNG)
    with pytest.raises(InvalidUpload):
        save_room_image(identity=owner, filename="a.png", content=b"")
    with pytest.raises(InvalidUpload):
        save_room_image(identity=owner, filename="notes.txt", content=b"hello")


def test_upload_endpoint(client):
    token = register(client, "owner@example.com")
    r = client.post(
        "/rooms/images",
        files={"file": ("room.jpg", b"\xff\xd8\xff" + b"\x00" * 16, "image/jpeg")},
        headers=auth_header(token),
    )
    assert r.status_code == 201, r.text
    url = r.json()["url"]
    assert url.endswith(".jpg")

    served = client.get(url)
    assert served.status_code == 200
    assert served.content.startswith(b"\xff\xd8\xff")


def test_upload_requires_auth(client):
    r = client.post("/rooms/images", files={"file": ("room.jpg", b"\xff\xd8\xff", "image/jpeg")})
    assert r.status_code == 401
