#!/usr/bin/env python3
"""
Seed script — creates a small dataset through the public API.

Creates:
  • 10 users
  • A follow graph (each user follows 4 others)
  • 3 photo posts per user
  • Some likes across posts

Run after docker compose up:
  python scripts/seed_data.py --api-url http://localhost:8000

All IDs are printed so you can use them in curl commands.
"""
import argparse
import json
import random
import time
import urllib.error
import urllib.request
import uuid
from dataclasses import dataclass
from typing import Optional


BASE_USERS = [
    ("alice_shots", "Street photography, mostly at night."),
    ("bob_builder", "Timber frames and the sawdust in between."),
    ("carol_codes", None),
    ("dave_designs", "Posters, typefaces, too much coffee."),
    ("eve_outdoors", "Ridge lines and trail mix."),
    ("frank_film", "35mm only."),
    ("grace_gardens", None),
    ("henry_hikes", "Summits, slowly."),
    ("iris_inks", "Ink on paper."),
    ("jack_jazz", "Live sets, blurry photos."),
]

SAMPLE_CAPTIONS = [
    "Golden hour from the roof.",
    "First frost of the year.",
    "New desk, same mess.",
    "Harbour at dawn, no filter.",
    "Someone left the tram doors open and the city walked in.",
    "Sunday market haul.",
    "Finally finished the bookshelf.",
    "Fog rolling over the ridge.",
    "Old camera, new roll.",
    "Can't stop photographing this doorway.",
    None,
]

# Smallest valid GIF; enough for the object store and the photo endpoint
PLACEHOLDER_PHOTO = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01"
    b"\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)


def encode_multipart(
    fields: dict[str, str],
    files: dict[str, tuple[str, bytes, str]],
    boundary: Optional[str] = None,
) -> tuple[bytes, str]:
    """Build a multipart/form-data body. Returns (body, content_type)."""
    boundary = boundary or uuid.uuid4().hex
    lines: list[bytes] = []
    for name, value in fields.items():
        lines += [
            f"--{boundary}".encode(),
            f'Content-Disposition: form-data; name="{name}"'.encode(),
            b"",
            str(value).encode(),
        ]
    for name, (filename, data, content_type) in files.items():
        lines += [
            f"--{boundary}".encode(),
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"'.encode(),
            f"Content-Type: {content_type}".encode(),
            b"",
            data,
        ]
    lines += [f"--{boundary}--".encode(), b""]
    return b"\r\n".join(lines), f"multipart/form-data; boundary={boundary}"


@dataclass
class ApiClient:
    base_url: str

    def _send(self, req: urllib.request.Request) -> dict:
        try:
            with urllib.request.urlopen(req, timeout=10) as resp:
                return json.loads(resp.read())
        except urllib.error.HTTPError as e:
            body = e.read().decode()
            print(f"  HTTP {e.code} on {req.get_method()} {req.full_url}: {body}")
            return {}

    def post(self, path: str, data: dict) -> dict:
        req = urllib.request.Request(
            f"{self.base_url}{path}",
            data=json.dumps(data).encode(),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        return self._send(req)

    def put(self, path: str, data: dict) -> dict:
        req = urllib.request.Request(
            f"{self.base_url}{path}",
            data=json.dumps(data).encode(),
            headers={"Content-Type": "application/json"},
            method="PUT",
        )
        return self._send(req)

    def post_form(self, path: str, fields: dict, files: dict) -> dict:
        body, content_type = encode_multipart(fields, files)
        req = urllib.request.Request(
            f"{self.base_url}{path}",
            data=body,
            headers={"Content-Type": content_type},
            method="POST",
        )
        return self._send(req)

    def get(self, path: str) -> dict:
        req = urllib.request.Request(f"{self.base_url}{path}", method="GET")
        return self._send(req)


def wait_for_api(client: ApiClient, retries: int = 15) -> None:
    print(f"Waiting for API at {client.base_url} ...")
    for _ in range(retries):
        try:
            if client.get("/health").get("status") == "ok":
                print("  API is ready!\n")
                return
        except (urllib.error.URLError, ConnectionError):
            pass
        time.sleep(3)
    raise RuntimeError(f"API not reachable at {client.base_url} after {retries} retries")


def follow_plan(user_ids: list[int], per_user: int = 4) -> list[tuple[int, int]]:
    """Random (follower, following) pairs; never a self-follow, never a repeat."""
    pairs = []
    for follower_id in user_ids:
        others = [u for u in user_ids if u != follower_id]
        for following_id in random.sample(others, k=min(per_user, len(others))):
            pairs.append((follower_id, following_id))
    return pairs


def main(api_url: str) -> None:
    client = ApiClient(api_url)
    wait_for_api(client)

    # ── Create users ─────────────────────────────────────────────────────
    print("Creating users...")
    user_ids: list[int] = []
    for username, bio in BASE_USERS:
        result = client.post(
            "/api/user",
            {"username": username, "email": f"{username}@example.com", "password": "seed-password"},
        )
        uid = result.get("id")
        if uid is None:
            print(f"  ✗ Failed to create {username}")
            continue
        user_ids.append(uid)
        if bio:
            client.put("/api/user", {"id": uid, "bio": bio})
        print(f"  ✓ {username} ({uid})")

    if not user_ids:
        print("No users created — aborting")
        return

    # ── Create follow graph ───────────────────────────────────────────────
    print("\nCreating follow relationships...")
    pairs = follow_plan(user_ids)
    for follower_id, following_id in pairs:
        client.post("/api/follow", {"follower_id": follower_id, "following_id": following_id})
    print(f"  ✓ {len(pairs)} follow edges created")

    # ── Create posts ──────────────────────────────────────────────────────
    print("\nCreating posts...")
    post_ids: list[int] = []
    for user_id in user_ids:
        for n in range(3):
            fields = {"user_id": str(user_id)}
            caption = random.choice(SAMPLE_CAPTIONS)
            if caption:
                fields["caption"] = caption
            result = client.post_form(
                "/api/post",
                fields,
                {"photo": (f"seed_{user_id}_{n}.gif", PLACEHOLDER_PHOTO, "image/gif")},
            )
            if result.get("id") is not None:
                post_ids.append(result["id"])
    print(f"  ✓ {len(post_ids)} posts created")

    # ── Create some likes ─────────────────────────────────────────────────
    print("\nAdding likes...")
    likes = 0
    for post_id in post_ids:
        for user_id in random.sample(user_ids, k=random.randint(0, min(5, len(user_ids)))):
            if client.post("/api/like", {"user_id": user_id, "post_id": post_id}):
                likes += 1
    print(f"  ✓ {likes} likes added")

    # ── Print summary ─────────────────────────────────────────────────────
    print("\n" + "=" * 60)
    print("Seed complete! Here are some commands to try:\n")
    u = user_ids[0]
    print(f"# Who follows '{BASE_USERS[0][0]}':")
    print(f"  curl -s '{api_url}/api/user/{u}/followers' | python3 -m json.tool\n")
    if post_ids:
        print("# Like count of the first post:")
        print(f"  curl -s '{api_url}/api/like/{post_ids[0]}'\n")
    print("# Upload a profile picture:")
    print(f"  curl -s -X POST '{api_url}/api/photo' -F id={u} -F photo=@me.jpg\n")
    print("# Check Jaeger traces: http://localhost:16686")
    print("# Check Prometheus: http://localhost:9090")
    print("# Check MinIO: http://localhost:9001 (minioadmin/minioadmin)")
    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the photofeed API")
    parser.add_argument("--api-url", default="http://localhost:8000", help="API base URL")
    args = parser.parse_args()
    main(args.api_url)
