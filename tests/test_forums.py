from app.core.permissions import AccessLevel


def _create_forum(client, headers, title="Hacker News"):
    res = client.post("/api/v1/forums", json={"data": {"title": title, "text": ["Welcome"]}}, headers=headers)
    assert res.status_code == 200
    return res.json()["data"]["forum"]


def test_standard_user_cannot_create_forum(client, make_user, auth_headers):
    user = make_user("alice")
    res = client.post("/api/v1/forums", json={"data": {"title": "Nope"}}, headers=auth_headers(user))
    assert res.status_code == 401
    assert res.json()["error"]["type"] == "NotAllowed"


def test_duplicate_forum_title_is_rejected(client, make_user, auth_headers):
    mod = make_user("mod", access_level=AccessLevel.MODERATOR)
    _create_forum(client, auth_headers(mod))
    res = client.post("/api/v1/forums", json={"data": {"title": "Hacker News"}}, headers=auth_headers(mod))
    assert res.status_code == 403


def test_threads_need_forum_access(client, make_user, auth_headers):
    mod = make_user("mod", access_level=AccessLevel.MODERATOR)
    reader = make_user("reader")
    forum = _create_forum(client, auth_headers(mod))

    res = client.get(f"/api/v1/forums/{forum['id']}/threads", headers=auth_headers(reader))
    assert res.status_code == 401

    res = client.put(
        f"/api/v1/forums/{forum['id']}/access",
        json={"data": {"userIds": [reader.id]}},
        headers=auth_headers(mod),
    )
    assert res.status_code == 200

    res = client.get(f"/api/v1/forums/{forum['id']}/threads", headers=auth_headers(reader))
    assert res.status_code == 200
    assert res.json()["data"]["threads"] == []


def test_thread_and_posts_flow(client, make_user, auth_headers):
    mod = make_user("mod", access_level=AccessLevel.MODERATOR)
    reader = make_user("reader")
    forum = _create_forum(client, auth_headers(mod))
    client.put(f"/api/v1/forums/{forum['id']}/access", json={"data": {"userIds": [reader.id]}}, headers=auth_headers(mod))

    res = client.post(
        "/api/v1/forumThreads",
        json={"data": {"forumId": forum["id"], "title": "First", "text": ["hello"]}},
        headers=auth_headers(reader),
    )
    assert res.status_code == 200
    thread = res.json()["data"]["thread"]
    assert reader.id in thread["userIds"]

    root = client.post(
        "/api/v1/forumPosts",
        json={"data": {"threadId": thread["id"], "text": ["root"]}},
        headers=auth_headers(reader),
    ).json()["data"]["post"]
    reply = client.post(
        "/api/v1/forumPosts",
        json={"data": {"threadId": thread["id"], "text": ["reply"], "parentPostId": root["id"]}},
        headers=auth_headers(reader),
    ).json()["data"]["post"]
    assert root["depth"] == 0
    assert reply["depth"] == 1

    res = client.get(f"/api/v1/forumThreads/{thread['id']}/posts", headers=auth_headers(reader))
    assert [post["id"] for post in res.json()["data"]["posts"]] == [root["id"], reply["id"]]


def test_removing_forum_removes_threads(client, make_user, auth_headers):
    admin = make_user("admin", access_level=AccessLevel.ADMIN)
    forum = _create_forum(client, auth_headers(admin))
    thread = client.post(
        "/api/v1/forumThreads",
        json={"data": {"forumId": forum["id"], "title": "Gone soon"}},
        headers=auth_headers(admin),
    ).json()["data"]["thread"]

    assert client.delete(f"/api/v1/forums/{forum['id']}", headers=auth_headers(admin)).status_code == 200
    assert client.get(f"/api/v1/forumThreads/{thread['id']}", headers=auth_headers(admin)).status_code == 404
