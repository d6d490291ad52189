import uuid


def test_first_request_creates_the_user(client, auth_headers):
    user_id = uuid.uuid4()
    headers = auth_headers(
        user_id,
        email="sam@example.com",
        first_name="Sam",
        profile_image_url="https://cdn.example.com/sam.png",
    )
    r = client.get("/api/auth/user", headers=headers)
    assert r.status_code == 200
    user = r.json()
    assert user["id"] == str(user_id)
    assert user["email"] == "sam@example.com"
    assert user["first_name"] == "Sam"
    assert user["vibe_score"] == 0


def test_later_requests_fill_missing_claims_only(client, auth_headers):
    user_id = uuid.uuid4()
    client.get("/api/auth/user", headers=auth_headers(user_id, first_name="Sam"))
    r = client.get(
        "/api/auth/user",
        headers=auth_headers(user_id, first_name="Samantha", last_name="Lee"),
    )
    assert r.json()["first_name"] == "Sam"
    assert r.json()["last_name"] == "Lee"


def test_profile_edits_survive_later_requests(client, login):
    user_id, headers = login(first_name="Alice")
    r = client.put(f"/api/users/{user_id}", json={"first_name": "Ally"}, headers=headers)
    assert r.json()["first_name"] == "Ally"

    r = client.get("/api/auth/user", headers=headers)
    assert r.json()["first_name"] == "Ally"


def test_email_owned_by_another_user_is_not_copied(client, auth_headers):
    first = client.get(
        "/api/auth/user", headers=auth_headers(uuid.uuid4(), email="x@example.com")
    )
    assert first.json()["email"] == "x@example.com"

    second_id = uuid.uuid4()
    headers = auth_headers(second_id, email="x@example.com", first_name="Twin")
    for _ in range(2):
        r = client.get("/api/auth/user", headers=headers)
        assert r.status_code == 200
        assert r.json()["id"] == str(second_id)
        assert r.json()["email"] is None
        assert r.json()["first_name"] == "Twin"


def test_missing_token_is_401(client):
    r = client.get("/api/auth/user")
    assert r.status_code == 401


def test_token_without_uuid_subject_is_401(client, auth_headers):
    r = client.get("/api/auth/user", headers=auth_headers("not-a-uuid"))
    assert r.status_code == 401


def test_profile_includes_stats(client, login):
    alice_id, alice = login(first_name="Alice")
    bob_id, bob = login()
    client.post("/api/posts/", json={"content": "hey"}, headers=alice)
    client.post(f"/api/users/{alice_id}/follow", headers=bob)

    r = client.get(f"/api/users/{alice_id}", headers=bob)
    assert r.status_code == 200
    profile = r.json()
    assert profile["first_name"] == "Alice"
    assert profile["stats"] == {"posts": 1, "followers": 1, "following": 0, "vibe_score": 0}


def test_unknown_user_is_404(client, login):
    _, headers = login()
    assert client.get(f"/api/users/{uuid.uuid4()}", headers=headers).status_code == 404


def test_update_own_profile(client, login):
    user_id, headers = login()
    r = client.put(
        f"/api/users/{user_id}",
        json={"username": "vibequeen", "bio": "main character energy"},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["username"] == "vibequeen"
    assert r.json()["bio"] == "main character energy"

    r = client.get("/api/users/by-username/vibequeen", headers=headers)
    assert r.status_code == 200
    assert r.json()["id"] == str(user_id)


def test_cannot_update_someone_else(client, login):
    alice_id, _ = login()
    _, bob = login()
    r = client.put(f"/api/users/{alice_id}", json={"bio": "hacked"}, headers=bob)
    assert r.status_code == 403


def test_username_must_be_unique(client, login):
    alice_id, alice = login()
    bob_id, bob = login()
    client.put(f"/api/users/{alice_id}", json={"username": "taken"}, headers=alice)
    r = client.put(f"/api/users/{bob_id}", json={"username": "taken"}, headers=bob)
    assert r.status_code == 409


def test_follow_flow(client, login):
    alice_id, alice = login()
    bob_id, bob = login()

    assert client.post(f"/api/users/{alice_id}/follow", headers=bob).json() == {"success": True}
    assert client.post(f"/api/users/{alice_id}/follow", headers=bob).json() == {"success": False}
    assert client.get(f"/api/users/{alice_id}/is-following", headers=bob).json() == {
        "following": True
    }

    followers = client.get(f"/api/users/{alice_id}/followers", headers=alice).json()
    assert [u["id"] for u in followers] == [str(bob_id)]
    following = client.get(f"/api/users/{bob_id}/following", headers=alice).json()
    assert [u["id"] for u in following] == [str(alice_id)]

    assert client.delete(f"/api/users/{alice_id}/follow", headers=bob).json() == {"success": True}
    assert client.delete(f"/api/users/{alice_id}/follow", headers=bob).json() == {"success": False}
    assert client.get(f"/api/users/{alice_id}/is-following", headers=bob).json() == {
        "following": False
    }


def test_cannot_follow_yourself(client, login):
    user_id, headers = login()
    r = client.post(f"/api/users/{user_id}/follow", headers=headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot follow yourself"


def test_cannot_follow_unknown_user(client, login):
    _, headers = login()
    r = client.post(f"/api/users/{uuid.uuid4()}/follow", headers=headers)
    assert r.status_code == 404
