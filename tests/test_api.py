from uuid import uuid4

from httpx import ASGITransport, AsyncClient

from app.auth import create_access_token
from app.main import app
from app.services import AggregateViewBuilder

ENVELOPE_KEYS = {"statusCode", "data", "meta", "message", "success"}


class TestEnvelope:
    """Response and error envelopes"""

    async def test_healthcheck(self, client):
        response = await client.get("/api/v1/healthcheck")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == ENVELOPE_KEYS
        assert body["success"] is True
        assert body["data"] == {"status": "ok", "database": "healthy"}

    async def test_not_found(self, client):
        response = await client.get(f"/api/v1/videos/{uuid4()}")

        assert response.status_code == 404
        body = response.json()
        assert body["statusCode"] == 404
        assert body["success"] is False
        assert body["message"] == "Video not found"
        assert body["errors"] == []

    async def test_invalid_id(self, client):
        response = await client.get("/api/v1/videos/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["success"] is False

    async def test_missing_token(self, client, video):
        response = await client.post(f"/api/v1/likes/toggle/v/{video.id}")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["success"] is False

    async def test_token_for_unknown_user(self, client, video):
        headers = {"Authorization": f"Bearer {create_access_token(uuid4())}"}
        response = await client.post(f"/api/v1/likes/toggle/v/{video.id}", headers=headers)

        assert response.status_code == 401

    async def test_garbage_token(self, client, video):
        headers = {"Authorization": "Bearer garbage"}
        response = await client.get(f"/api/v1/videos/{video.id}", headers=headers)

        assert response.status_code == 401

    async def test_unexpected_error(self, client, video, monkeypatch):
        """An unhandled exception still renders the error envelope"""
        async def broken(self, *args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(AggregateViewBuilder, "video_detail", broken)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get(f"/api/v1/videos/{video.id}")

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/json")
        body = response.json()
        assert body["statusCode"] == 500
        assert body["success"] is False
        assert body["message"] == "Internal server error"

    async def test_body_validation_error(self, client, alice, auth_headers):
        response = await client.post("/api/v1/tweets", json={}, headers=auth_headers(alice))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0]["field"] == "body.content"


class TestReactionEndpoints:
    async def test_like_toggle(self, client, alice, video, auth_headers):
        url = f"/api/v1/likes/toggle/v/{video.id}"

        liked = await client.post(url, headers=auth_headers(alice))
        assert liked.status_code == 200
        body = liked.json()
        assert set(body) == ENVELOPE_KEYS
        assert body["data"] == {"isLiked": True, "likes": 1}
        assert body["message"] == "Like created successfully"

        unliked = await client.post(url, headers=auth_headers(alice))
        assert unliked.json()["data"] == {"isLiked": False, "likes": 0}
        assert unliked.json()["message"] == "Like removed successfully"

    async def test_dislike_toggle(self, client, bob, video, auth_headers):
        response = await client.post(f"/api/v1/dislikes/toggle/v/{video.id}", headers=auth_headers(bob))

        assert response.json()["data"] == {"isDisliked": True, "dislikes": 1}

    async def test_tweet_like_has_no_count(self, client, alice, bob, auth_headers):
        created = await client.post(
            "/api/v1/tweets", json={"content": "hi"}, headers=auth_headers(bob)
        )
        tweet_id = created.json()["data"]["id"]

        response = await client.post(f"/api/v1/likes/toggle/t/{tweet_id}", headers=auth_headers(alice))

        assert response.json()["data"] == {"isLiked": True, "likes": None}

    async def test_unknown_kind(self, client, alice, video, auth_headers):
        response = await client.post(f"/api/v1/likes/toggle/x/{video.id}", headers=auth_headers(alice))
        assert response.status_code == 400

    async def test_liked_videos_and_clear(self, client, alice, video, auth_headers):
        headers = auth_headers(alice)
        await client.post(f"/api/v1/likes/toggle/v/{video.id}", headers=headers)

        liked = await client.get("/api/v1/likes/videos", headers=headers)
        assert [v["id"] for v in liked.json()["data"]] == [str(video.id)]

        cleared = await client.delete("/api/v1/likes/videos", headers=headers)
        assert cleared.status_code == 200

        liked = await client.get("/api/v1/likes/videos", headers=headers)
        assert liked.json()["data"] == []


class TestVideoEndpoints:
    async def test_detail_is_viewer_relative(self, client, alice, bob, video, auth_headers):
        await client.post(f"/api/v1/likes/toggle/v/{video.id}", headers=auth_headers(bob))

        as_bob = (await client.get(f"/api/v1/videos/{video.id}", headers=auth_headers(bob))).json()["data"]
        anonymous = (await client.get(f"/api/v1/videos/{video.id}")).json()["data"]

        assert as_bob["likes"] == anonymous["likes"] == 1
        assert as_bob["isLiked"] is True
        assert anonymous["isLiked"] is False
        assert as_bob["owner"]["username"] == "alice"
        assert as_bob["views"] == 1

    async def test_view_lands_in_history(self, client, bob, video, auth_headers):
        await client.get(f"/api/v1/videos/{video.id}", headers=auth_headers(bob))

        history = await client.get("/api/v1/users/history/videos", headers=auth_headers(bob))

        assert [v["id"] for v in history.json()["data"]] == [str(video.id)]

    async def test_publish_and_list(self, client, alice, auth_headers):
        created = await client.post(
            "/api/v1/videos",
            json={
                "title": "My trip",
                "description": "Holiday footage",
                "videoUrl": "https://cdn.test/trip.mp4",
                "thumbnailUrl": "https://cdn.test/trip.png",
                "duration": 12.5,
            },
            headers=auth_headers(alice),
        )
        assert created.status_code == 201
        assert created.json()["statusCode"] == 201

        listing = await client.get("/api/v1/videos", params={"page": 1, "limit": 5})
        body = listing.json()
        assert [v["title"] for v in body["data"]] == ["My trip"]
        assert body["meta"] == {"currentPage": 1, "totalPages": 1, "pageSize": 5, "totalItems": 1}

    async def test_bad_pagination(self, client):
        response = await client.get("/api/v1/videos", params={"page": 0})
        assert response.status_code == 400


class TestCommentEndpoints:
    async def test_comments_under_video_path(self, client, alice, video, make_comments):
        await make_comments(video, alice, ["c1", "c2", "c3"])

        response = await client.get(f"/api/v1/videos/{video.id}/comments", params={"page": 2, "limit": 2})

        body = response.json()
        assert response.status_code == 200
        assert [c["content"] for c in body["data"]] == ["c1"]
        assert body["meta"] == {"totalCommentsCount": 3, "page": 2, "limit": 2, "totalPages": 2}

    async def test_paged_comments(self, client, alice, video, make_comments):
        await make_comments(video, alice, ["c1", "c2", "c3"])

        response = await client.get(f"/api/v1/comments/{video.id}", params={"page": 1, "limit": 2})

        body = response.json()
        assert [c["content"] for c in body["data"]] == ["c3", "c2"]
        assert body["meta"] == {"totalCommentsCount": 3, "page": 1, "limit": 2, "totalPages": 2}

    async def test_add_comment(self, client, bob, video, auth_headers):
        response = await client.post(
            f"/api/v1/comments/{video.id}", json={"content": "great"}, headers=auth_headers(bob)
        )

        assert response.status_code == 201
        assert response.json()["data"]["content"] == "great"


class TestSubscriptionEndpoints:
    async def test_toggle_and_status(self, client, alice, bob, auth_headers):
        toggled = await client.post(f"/api/v1/subscriptions/u/{alice.id}", headers=auth_headers(bob))
        assert toggled.json()["data"] == {"isSubscribed": True, "subscribersCount": 1}

        status = await client.get(f"/api/v1/subscriptions/s/{alice.id}", headers=auth_headers(bob))
        assert status.json()["data"] == {"isSubscribed": True, "subscribersCount": 1}

        subscribers = await client.get(f"/api/v1/subscriptions/u/{alice.id}")
        assert subscribers.json()["meta"] == {"subscribersCount": 1}
        assert subscribers.json()["data"][0]["username"] == "bob"

        channels = await client.get(f"/api/v1/subscriptions/c/{bob.id}")
        assert channels.json()["data"][0]["subscribersCount"] == 1

    async def test_toggle_without_prefix(self, client, alice, bob, auth_headers):
        subscribed = await client.post(f"/api/v1/subscriptions/{alice.id}", headers=auth_headers(bob))
        assert subscribed.json()["data"] == {"isSubscribed": True, "subscribersCount": 1}

        unsubscribed = await client.post(f"/api/v1/subscriptions/{alice.id}", headers=auth_headers(bob))
        assert unsubscribed.json()["data"] == {"isSubscribed": False, "subscribersCount": 0}

    async def test_channel_profile(self, client, alice, bob, auth_headers):
        await client.post(f"/api/v1/subscriptions/u/{alice.id}", headers=auth_headers(bob))

        response = await client.get("/api/v1/users/c/Alice", headers=auth_headers(bob))

        data = response.json()["data"]
        assert data["username"] == "alice"
        assert data["subscribersCount"] == 1
        assert data["isSubscribed"] is True


class TestPlaylistEndpoints:
    async def test_create_and_add(self, client, alice, video, make_video, auth_headers):
        second = await make_video(alice, title="second")
        headers = auth_headers(alice)

        created = await client.post(
            "/api/v1/playlist",
            json={"name": "Mix", "description": "Stuff", "videos": [str(video.id)]},
            headers=headers,
        )
        assert created.status_code == 201
        playlist_id = created.json()["data"]["id"]

        added = await client.patch(
            "/api/v1/playlist/add",
            json={"playlistIds": [playlist_id], "videoId": str(second.id)},
            headers=headers,
        )
        assert added.json()["data"] == {"modifiedCount": 1}

        fetched = await client.get(f"/api/v1/playlist/{playlist_id}")
        assert fetched.json()["data"]["videos"] == [str(video.id), str(second.id)]
