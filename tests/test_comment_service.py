import pytest
from sqlalchemy import select

from playerstats.core.errors import BadRequestError, ForbiddenError, NotFoundError, NotLoggedInError
from playerstats.models.banned_users import BannedUser
from playerstats.models.comments import Comment
from playerstats.models.notifications import Notification
from playerstats.models.statistics import Statistic
from playerstats.models.users import Users
from playerstats.schemas.comments import CommentCreate
from playerstats.services.comment_service import CommentService
from playerstats.services.event_store import ClientInfo
from playerstats.utils.security import Viewer

GUEST = Viewer()
GUEST_COMMENT = CommentCreate(comment="Great clip", author={"name": "Sam", "email": "sam@example.com"})


@pytest.fixture
async def member(db):
    user = Users(display_name="Member", email="member@example.com", avatar_url="https://avatars/member.png")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return Viewer(user_id=user.id, user=user)


class TestAddComment:
    async def test_guest_comment_records_event_and_notification(self, db, make_player):
        player = await make_player()

        comment = await CommentService(db).add_comment(
            player.id, GUEST_COMMENT, GUEST, ClientInfo(ip="192.0.2.10", user_agent="curl/8.0")
        )

        assert comment.author_email == "sam@example.com"
        assert comment.author_ip == "192.0.2.10"
        assert comment.approved == 0
        statistic = (await db.execute(select(Statistic))).scalar_one()
        assert statistic.type == "comment"
        notification = (await db.execute(select(Notification))).scalar_one()
        assert notification.type == "comment"
        assert notification.statistic_id is None

    async def test_immediate_approval(self, db, make_player):
        player = await make_player(comments={"isClosed": False, "whoCanSubmit": "all", "immediatelyApprove": True})

        comment = await CommentService(db).add_comment(player.id, GUEST_COMMENT, GUEST)

        assert comment.approved == 1

    async def test_logged_in_author_comes_from_account(self, db, make_player, member):
        player = await make_player()

        comment = await CommentService(db).add_comment(player.id, CommentCreate(comment="hi"), member)

        assert comment.author_email == "member@example.com"
        assert comment.user_id == member.user_id

    async def test_closed_comments(self, db, make_player):
        player = await make_player(comments={"isClosed": True})

        with pytest.raises(NotFoundError) as exc_info:
            await CommentService(db).add_comment(player.id, GUEST_COMMENT, GUEST)

        assert exc_info.value.code == "comments-closed"

    async def test_members_only(self, db, make_player):
        player = await make_player(comments={"whoCanSubmit": "loggedin"})

        with pytest.raises(NotLoggedInError) as exc_info:
            await CommentService(db).add_comment(player.id, GUEST_COMMENT, GUEST)

        assert exc_info.value.status_code == 213

    async def test_guest_needs_author(self, db, make_player):
        player = await make_player()

        with pytest.raises(BadRequestError):
            await CommentService(db).add_comment(player.id, CommentCreate(comment="anon"), GUEST)

    async def test_banned_email(self, db, make_player):
        player = await make_player()
        db.add(BannedUser(user_id=0, email="sam@example.com", ip="198.51.100.7", note="spam", registrar=1))
        await db.commit()

        with pytest.raises(ForbiddenError) as exc_info:
            await CommentService(db).add_comment(player.id, GUEST_COMMENT, GUEST, ClientInfo(ip="192.0.2.10"))

        assert exc_info.value.code == "is-banned"
        assert "spam" in exc_info.value.message
        assert (await db.execute(select(Comment))).first() is None


class TestListing:
    async def test_public_list_only_shows_approved(self, db, make_player, member):
        player = await make_player(comments={"immediatelyApprove": True})
        service = CommentService(db)
        await service.add_comment(player.id, CommentCreate(comment="first"), member)
        pending = await service.add_comment(player.id, GUEST_COMMENT, GUEST)
        await service.reject(pending.id)

        comments = await service.list_public(player.id)

        assert [c.content for c in comments] == ["first"]
        assert comments[0].avatar == "https://avatars/member.png"

    async def test_guest_avatar_falls_back(self, db, make_player):
        player = await make_player(comments={"immediatelyApprove": True})
        service = CommentService(db)
        await service.add_comment(player.id, GUEST_COMMENT, GUEST)

        comments = await service.list_public(player.id)

        assert comments[0].avatar == service.settings.default_avatar_url

    async def test_admin_list_hides_banned_and_labels_guests(self, db, make_player):
        player = await make_player()
        service = CommentService(db)
        await service.add_comment(player.id, GUEST_COMMENT, GUEST)
        await service.add_comment(
            player.id, CommentCreate(comment="buy now", author={"name": "Bot", "email": "bot@example.com"}), GUEST
        )
        db.add(BannedUser(user_id=0, email="bot@example.com", ip="203.0.113.50", note="", registrar=1))
        await db.commit()

        comments = await service.list_admin()

        assert [c.user_email for c in comments] == ["sam@example.com"]
        assert comments[0].user_id == "Guest"
        assert comments[0].player_name == "Intro"


class TestModeration:
    async def test_approve_returns_player_comments(self, db, make_player):
        player = await make_player()
        service = CommentService(db)
        comment = await service.add_comment(player.id, GUEST_COMMENT, GUEST)

        comments = await service.approve(comment.id)

        assert [(c.id, c.approved) for c in comments] == [(comment.id, 1)]

    async def test_approve_missing(self, db):
        with pytest.raises(NotFoundError):
            await CommentService(db).approve(31337)

    async def test_reply_inherits_player(self, db, make_player, member):
        player = await make_player()
        service = CommentService(db)
        parent = await service.add_comment(player.id, GUEST_COMMENT, GUEST)

        reply = await service.reply(parent.id, "Thanks!", member)

        assert reply.parent_id == parent.id
        assert reply.player_id == player.id
        assert reply.approved == 1

    async def test_reply_needs_text(self, db, make_player, member):
        player = await make_player()
        service = CommentService(db)
        parent = await service.add_comment(player.id, GUEST_COMMENT, GUEST)

        with pytest.raises(BadRequestError):
            await service.reply(parent.id, "   ", member)

    async def test_reply_to_missing_comment(self, db, member):
        with pytest.raises(BadRequestError):
            await CommentService(db).reply(999, "hello", member)

    async def test_delete(self, db, make_player):
        player = await make_player()
        service = CommentService(db)
        comment = await service.add_comment(player.id, GUEST_COMMENT, GUEST)

        remaining = await service.delete(comment.id)

        assert remaining == []
