from uuid import uuid4

import pytest
from sqlalchemy import select

from app.exceptions import Conflict, InvalidArgument, NotFound
from app.models import Comment, Video, Visibility
from app.services import (
    AggregateViewBuilder,
    CommentService,
    PlaylistService,
    TweetService,
    UserService,
    VideoService,
)


class TestVideoService:
    async def test_publish_validates_input(self, db, alice):
        with pytest.raises(InvalidArgument):
            await VideoService(db).publish(alice.id, " ", "desc", "https://v", "https://t")
        with pytest.raises(InvalidArgument):
            await VideoService(db).publish(alice.id, "title", "desc", "", "https://t")

    async def test_record_view_recomputes_from_history(self, db, alice, bob, video):
        videos = VideoService(db)

        assert await videos.record_view(alice.id, video.id) == 1
        assert await videos.record_view(bob.id, video.id) == 2
        assert await videos.record_view(alice.id, video.id) == 3

        refreshed = await db.scalar(select(Video.views).where(Video.id == video.id))
        assert refreshed == 3

    async def test_record_view_of_missing_video(self, db, alice):
        with pytest.raises(NotFound):
            await VideoService(db).record_view(alice.id, uuid4())

    async def test_only_owner_can_modify(self, db, bob, video):
        with pytest.raises(NotFound) as exc_info:
            await VideoService(db).update(bob.id, video.id, title="hijacked")
        assert exc_info.value.detail == "Video not found or not authorized"

    async def test_set_visibility(self, db, alice, video):
        updated = await VideoService(db).set_visibility(alice.id, video.id, Visibility.PRIVATE)
        assert updated.visibility == Visibility.PRIVATE

    async def test_delete_removes_comments(self, db, alice, video, make_comments):
        await make_comments(video, alice, ["a", "b"])

        await VideoService(db).delete(alice.id, video.id)

        remaining = await db.execute(select(Comment).where(Comment.video_id == video.id))
        assert remaining.scalars().all() == []

    async def test_deleted_video_leaves_detail_and_feed(self, db, alice, video, make_video):
        kept = await make_video(alice, title="kept")
        video_id = video.id

        await VideoService(db).delete(alice.id, video_id)

        views = AggregateViewBuilder(db)
        with pytest.raises(NotFound):
            await views.video_detail(video_id)
        items, total = await views.video_feed()
        assert [v.id for v in items] == [kept.id]
        assert total == 1


class TestCommentService:
    async def test_add_reply(self, db, alice, bob, video):
        comments = CommentService(db)
        parent = await comments.add(alice.id, video.id, "first!")
        reply = await comments.add(bob.id, video.id, "  agreed  ", parent_comment_id=parent.id)

        assert reply.parent_comment_id == parent.id
        assert reply.content == "agreed"

    async def test_parent_must_belong_to_video(self, db, alice, video, make_video):
        other = await make_video(alice, title="other")
        comments = CommentService(db)
        parent = await comments.add(alice.id, other.id, "elsewhere")

        with pytest.raises(NotFound) as exc_info:
            await comments.add(alice.id, video.id, "reply", parent_comment_id=parent.id)
        assert exc_info.value.detail == "Parent comment not found"

    async def test_missing_video(self, db, alice):
        with pytest.raises(NotFound):
            await CommentService(db).add(alice.id, uuid4(), "hello")

    async def test_blank_content(self, db, alice, video):
        with pytest.raises(InvalidArgument):
            await CommentService(db).add(alice.id, video.id, "   ")

    async def test_update_by_non_owner(self, db, alice, bob, video):
        comment = await CommentService(db).add(alice.id, video.id, "mine")
        with pytest.raises(NotFound):
            await CommentService(db).update(bob.id, comment.id, "yours now")

    async def test_delete_removes_reply_thread(self, db, alice, bob, video):
        comments = CommentService(db)
        parent = await comments.add(alice.id, video.id, "parent")
        reply = await comments.add(bob.id, video.id, "reply", parent_comment_id=parent.id)
        await comments.add(alice.id, video.id, "reply to reply", parent_comment_id=reply.id)
        other = await comments.add(bob.id, video.id, "unrelated")

        await comments.delete(alice.id, parent.id)

        remaining = await db.execute(select(Comment.id).where(Comment.video_id == video.id))
        assert remaining.scalars().all() == [other.id]


class TestPlaylistService:
    async def test_create_dedupes_and_sets_thumbnail(self, db, alice, make_video):
        v1 = await make_video(alice, title="one", thumbnail_url="https://cdn.test/one.png")
        v2 = await make_video(alice, title="two")

        playlist = await PlaylistService(db).create(
            alice.id, "Mix", "Favourites", [v1.id, v2.id, v1.id, uuid4()]
        )

        assert [entry.video_id for entry in playlist.entries] == [v1.id, v2.id]
        assert playlist.thumbnail == "https://cdn.test/one.png"

    async def test_add_and_remove_video(self, db, alice, make_video):
        v1 = await make_video(alice, title="one")
        v2 = await make_video(alice, title="two")
        playlists = PlaylistService(db)
        first = await playlists.create(alice.id, "First", "desc", [v1.id])
        second = await playlists.create(alice.id, "Second", "desc")

        assert await playlists.add_video(alice.id, [first.id, second.id], v2.id) == 2
        assert [e.video_id for e in (await playlists.get(first.id)).entries] == [v1.id, v2.id]

        with pytest.raises(InvalidArgument):
            await playlists.add_video(alice.id, [first.id, second.id], v2.id)

        assert await playlists.remove_video(alice.id, [first.id], v2.id) == 1
        with pytest.raises(InvalidArgument):
            await playlists.remove_video(alice.id, [first.id], v2.id)

    async def test_other_users_playlists_are_untouched(self, db, alice, bob, video):
        playlists = PlaylistService(db)
        owned_by_bob = await playlists.create(bob.id, "Bob's", "desc")

        with pytest.raises(InvalidArgument):
            await playlists.add_video(alice.id, [owned_by_bob.id], video.id)
        with pytest.raises(NotFound):
            await playlists.delete(alice.id, owned_by_bob.id)

    async def test_delete(self, db, alice, video):
        playlists = PlaylistService(db)
        playlist = await playlists.create(alice.id, "Gone", "soon", [video.id])

        await playlists.delete(alice.id, playlist.id)

        with pytest.raises(NotFound):
            await playlists.get(playlist.id)


class TestTweetService:
    async def test_list_and_delete(self, db, alice, bob):
        tweets = TweetService(db)
        tweet = await tweets.create(alice.id, "hello world")

        assert [t.id for t in await tweets.list_for_user(alice.id)] == [tweet.id]

        with pytest.raises(NotFound):
            await tweets.delete(bob.id, tweet.id)
        await tweets.delete(alice.id, tweet.id)
        assert await tweets.list_for_user(alice.id) == []


class TestUserService:
    async def test_username_is_lowercased(self, db, make_user):
        user = await make_user("MixedCase")
        assert user.username == "mixedcase"

    async def test_duplicate_username(self, db, alice):
        with pytest.raises(Conflict):
            await UserService(db).create("Alice", "other@test.com")

    async def test_get_missing(self, db):
        with pytest.raises(NotFound):
            await UserService(db).get(uuid4())

    async def test_watch_history_removal(self, db, alice, bob, make_video):
        v1 = await make_video(bob, title="one")
        v2 = await make_video(bob, title="two")
        videos = VideoService(db)
        for video in (v1, v2, v1):
            await videos.record_view(alice.id, video.id)

        users = UserService(db)
        assert await users.history_video_ids(alice.id) == [v1.id, v2.id, v1.id]

        assert await users.remove_from_watch_history(alice.id, v1.id) == 2
        assert await users.history_video_ids(alice.id) == [v2.id]

        with pytest.raises(NotFound):
            await users.remove_from_watch_history(alice.id, v1.id)

        assert await users.clear_watch_history(alice.id) == 1
        assert await users.history_video_ids(alice.id) == []
