"""End-to-end HTTP behaviour against SQLite and in-memory Kafka/MinIO fakes."""
import pytest

from photofeed.errors import StorageError


async def register(client, name):
    resp = await client.post(
        "/api/user",
        json={"username": name, "email": f"{name}@example.com", "password": "pw"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


async def create_post(client, user_id, caption="hello"):
    resp = await client.post(
        "/api/post",
        data={"user_id": str(user_id), "caption": caption},
        files={"photo": ("pic.jpg", b"\xff\xd8\xff", "image/jpeg")},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_follow_scenario(client, notifier):
    u1 = await register(client, "one")
    u2 = await register(client, "two")
    edge = {"follower_id": u1, "following_id": u2}

    resp = await client.post("/api/follow", json=edge)
    assert resp.status_code == 201
    assert resp.json() == {"status": 201}

    resp = await client.post("/api/follow", json=edge)
    assert resp.status_code == 409
    assert resp.json() == {"error": "User already followed"}

    resp = await client.request("DELETE", "/api/unfollow", json=edge)
    assert resp.status_code == 201

    resp = await client.request("DELETE", "/api/unfollow", json=edge)
    assert resp.status_code == 404

    resp = await client.post("/api/follow", json={"follower_id": u1, "following_id": u1})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Cannot follow yourself"}

    assert notifier.events == [
        {"topic": "follow", "payload": edge},
        {"topic": "unfollow", "payload": edge},
    ]


@pytest.mark.asyncio
async def test_followers_listing(client):
    u1 = await register(client, "one")
    u2 = await register(client, "two")
    await client.post("/api/follow", json={"follower_id": u1, "following_id": u2})

    resp = await client.get(f"/api/user/{u2}/followers")
    assert resp.json() == [{"username": "one", "profile_pic": None}]

    resp = await client.get(f"/api/user/{u1}/following")
    assert resp.json() == [{"username": "two", "profile_pic": None}]

    resp = await client.get("/api/user/999/followers")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_undecodable_body_is_400(client):
    resp = await client.post("/api/follow", json={"follower_id": "abc", "following_id": 2})
    assert resp.status_code == 400
    assert "error" in resp.json()

    resp = await client.post(
        "/api/like", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_like_flow(client, notifier):
    author = await register(client, "author")
    post = await create_post(client, author)
    body = {"user_id": author, "post_id": post["id"]}

    resp = await client.post("/api/like", json=body)
    assert resp.status_code == 201

    resp = await client.post("/api/like", json=body)
    assert resp.status_code == 409
    assert resp.json() == {"error": "Post already liked"}

    resp = await client.get(f"/api/like/{post['id']}")
    assert resp.json() == {"count": 1}

    resp = await client.request("DELETE", "/api/like", json=body)
    assert resp.status_code == 200
    assert resp.json() == {"status": 200}

    resp = await client.request("DELETE", "/api/like", json=body)
    assert resp.status_code == 404

    resp = await client.post("/api/like", json={"user_id": author, "post_id": 9999})
    assert resp.status_code == 404

    assert notifier.topics() == ["post", "like", "unlike"]


@pytest.mark.asyncio
async def test_user_crud(client):
    uid = await register(client, "carol")

    resp = await client.post(
        "/api/user",
        json={"username": "carol2", "email": "carol@example.com", "password": "pw"},
    )
    assert resp.status_code == 409

    resp = await client.put("/api/user", json={"id": uid, "bio": "photographer"})
    assert resp.status_code == 200
    assert resp.json()["bio"] == "photographer"

    resp = await client.get(f"/api/user/{uid}")
    assert resp.json()["username"] == "carol"
    assert "password" not in resp.json()

    resp = await client.delete(f"/api/user/{uid}")
    assert resp.status_code == 200

    resp = await client.get(f"/api/user/{uid}")
    assert resp.status_code == 404
    assert resp.json() == {"error": "User not found"}


@pytest.mark.asyncio
async def test_posts_and_photos(client, photo_store):
    author = await register(client, "dave")
    post = await create_post(client, author, caption="first")

    resp = await client.get(f"/api/post/{post['id']}")
    assert resp.json()["caption"] == "first"

    resp = await client.get(f"/api/post/user/{author}")
    assert [p["id"] for p in resp.json()] == [post["id"]]

    resp = await client.get("/api/post/all")
    assert len(resp.json()) == 1

    resp = await client.get(post["image_url"])
    assert resp.status_code == 200
    assert resp.content == b"\xff\xd8\xff"

    resp = await client.delete(f"/api/post/{post['id']}")
    assert resp.status_code == 200
    resp = await client.get(f"/api/post/{post['id']}")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_post_for_unknown_user(client, photo_store, notifier):
    resp = await client.post(
        "/api/post",
        data={"user_id": "404"},
        files={"photo": ("pic.jpg", b"x", "image/jpeg")},
    )
    assert resp.status_code == 404
    assert photo_store.objects == {}
    assert notifier.events == []


@pytest.mark.asyncio
async def test_profile_picture_upload(client):
    uid = await register(client, "erin")

    resp = await client.post(
        "/api/photo",
        data={"id": str(uid)},
        files={"photo": ("me.png", b"png-bytes", "image/png")},
    )
    assert resp.status_code == 200
    key = resp.json()["filename"]

    resp = await client.get(f"/api/user/{uid}")
    assert resp.json()["profile_pic"] == f"/api/photo/{key}"

    resp = await client.get(f"/api/photo/{key}")
    assert resp.content == b"png-bytes"


@pytest.mark.asyncio
async def test_missing_photo(client):
    resp = await client.get("/api/photo/0000000000000000")
    assert resp.status_code == 404
    assert resp.json() == {"error": "No such key"}


@pytest.mark.asyncio
async def test_storage_failure_is_500(client, photo_store):
    author = await register(client, "fay")
    photo_store.error = StorageError("storage.s3.put", RuntimeError("disk full"))

    resp = await client.post(
        "/api/post",
        data={"user_id": str(author)},
        files={"photo": ("pic.jpg", b"x", "image/jpeg")},
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal error"}


@pytest.mark.asyncio
async def test_register_password_over_72_bytes_is_400(client):
    resp = await client.post(
        "/api/user",
        json={"username": "gus", "email": "gus@example.com", "password": "é" * 72},
    )
    assert resp.status_code == 400
    assert "72 bytes" in resp.json()["error"]

    resp = await client.get("/api/user/1")
    assert resp.status_code == 404
