from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.config import AppSettings
from playerstats.core.errors import BadRequestError, ForbiddenError, NotFoundError, NotLoggedInError, StorageError
from playerstats.models.banned_users import BannedUser
from playerstats.models.comments import Comment, CommentApproval
from playerstats.models.statistics import StatisticType
from playerstats.models.users import Users
from playerstats.schemas.comments import AdminComment, CommentCreate, PublicComment
from playerstats.schemas.players import CommentsOptions
from playerstats.services.ban_service import GUEST_LABEL, BanService, ban_message
from playerstats.services.event_store import ClientInfo, EventStore
from playerstats.services.geolocation import GeoLookup
from playerstats.services.player_service import PlayerRepository, resolve_player_title
from playerstats.utils.security import Viewer


class CommentService:
    def __init__(self, db: AsyncSession, geo: Optional[GeoLookup] = None, settings: Optional[AppSettings] = None):
        self.db = db
        self.players = PlayerRepository(db)
        self.bans = BanService(db)
        self.events = EventStore(db, geo=geo)
        self.settings = settings or AppSettings()

    async def _commit(self, step: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Storage failure on {step}: {e}")
            raise StorageError(f"Problem occurred on {step}")

    async def _get_comment(self, comment_id: int) -> Comment:
        comment = await self.db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("No comment found with this ID")
        return comment

    async def add_comment(
        self,
        player_id: int,
        payload: CommentCreate,
        viewer: Viewer,
        client: Optional[ClientInfo] = None,
    ) -> Comment:
        client = client or ClientInfo()
        player = await self.players.get_or_404(player_id)
        options = CommentsOptions(**((player.options or {}).get("comments") or {}))

        if options.isClosed:
            raise NotFoundError("Comments are closed!", code="comments-closed")
        if options.whoCanSubmit == "loggedin" and not viewer.is_logged_in:
            raise NotLoggedInError("User not logged in")

        if viewer.is_logged_in:
            author_name, author_email = viewer.user.display_name, viewer.user.email
        elif payload.author is not None:
            author_name, author_email = payload.author.name, payload.author.email
        else:
            raise BadRequestError("Guest comments need an author name and email")

        ban = await self.bans.find_ban(email=author_email, user_id=viewer.user_id, ip=client.ip)
        if ban is not None:
            logger.warning(f"Rejected comment from banned author {author_email} ({client.ip})")
            raise ForbiddenError(ban_message(ban), code="is-banned")

        comment = Comment(
            player_id=player_id,
            author_name=author_name,
            author_email=author_email,
            author_ip=client.ip,
            user_id=viewer.user_id,
            content=payload.comment,
            approved=int(CommentApproval.APPROVED if options.immediatelyApprove else CommentApproval.PENDING),
            agent=client.user_agent[:500],
        )
        self.db.add(comment)
        await self._commit("inserting comment")
        await self.db.refresh(comment)

        comment_type = StatisticType.COMMENT.value
        await self.events.add_event(player_id, comment_type, viewer.user_id, client)
        await self.events.add_notification(player_id, comment_type, viewer.user_id)

        logger.info(f"Comment {comment.id} added to player {player_id} (approved={comment.approved})")
        return comment

    async def list_public(self, player_id: int, limit: int = 10, offset: int = 0) -> List[PublicComment]:
        await self.players.get_or_404(player_id)
        result = await self.db.execute(
            select(Comment, Users.avatar_url)
            .outerjoin(Users, Users.id == Comment.user_id)
            .where(
                Comment.player_id == player_id,
                Comment.approved == int(CommentApproval.APPROVED),
            )
            .order_by(Comment.creation_date.desc(), Comment.id.desc())
            .offset(offset)
            .limit(limit)
        )

        comments = []
        for comment, avatar_url in result.all():
            avatar = avatar_url if comment.user_id and avatar_url else self.settings.default_avatar_url
            comments.append(
                PublicComment(
                    id=comment.id,
                    player_id=comment.player_id,
                    parent_id=comment.parent_id,
                    author_name=comment.author_name,
                    author_email=comment.author_email,
                    author_ip=comment.author_ip,
                    user_id=comment.user_id,
                    content=comment.content,
                    approved=comment.approved,
                    creation_date=comment.creation_date,
                    avatar=avatar,
                )
            )
        return comments

    async def list_admin(self) -> List[AdminComment]:
        result = await self.db.execute(
            select(Comment)
            .where(Comment.author_email.not_in(select(BannedUser.email)))
            .order_by(Comment.creation_date.desc(), Comment.id.desc())
        )
        comments = result.scalars().all()
        players = await self.players.get_many(comment.player_id for comment in comments)

        output = []
        for comment in comments:
            player = players.get(comment.player_id)
            output.append(
                AdminComment(
                    id=comment.id,
                    user_email=comment.author_email,
                    user_name=comment.author_name,
                    user_ip=comment.author_ip,
                    submit_date=comment.creation_date,
                    comment=comment.content,
                    player_id=comment.player_id,
                    player_name=resolve_player_title(player.options, player.videos) if player else "",
                    status=comment.approved,
                    user_id=comment.user_id or GUEST_LABEL,
                )
            )
        return output

    async def list_for_player(self, player_id: Optional[int]) -> List[Comment]:
        result = await self.db.execute(
            select(Comment)
            .where(Comment.player_id == player_id)
            .order_by(Comment.creation_date.desc(), Comment.id.desc())
        )
        return list(result.scalars().all())

    async def player_comments(self, player_id: int) -> List[Comment]:
        await self.players.get_or_404(player_id)
        return await self.list_for_player(player_id)

    async def set_approval(self, comment_id: int, state: CommentApproval) -> List[Comment]:
        comment = await self._get_comment(comment_id)
        comment.approved = int(state)
        await self._commit("updating comment")
        logger.info(f"Comment {comment_id} set to {state.name.lower()}")
        return await self.list_for_player(comment.player_id)

    async def approve(self, comment_id: int) -> List[Comment]:
        return await self.set_approval(comment_id, CommentApproval.APPROVED)

    async def reject(self, comment_id: int) -> List[Comment]:
        return await self.set_approval(comment_id, CommentApproval.REJECTED)

    async def reply(
        self,
        comment_id: int,
        text: str,
        viewer: Viewer,
        client: Optional[ClientInfo] = None,
    ) -> Comment:
        client = client or ClientInfo()
        if not text or not text.strip():
            raise BadRequestError("Reply text is required")

        parent = await self.db.get(Comment, comment_id)
        if parent is None:
            raise BadRequestError("Cannot reply to a missing comment")

        reply = Comment(
            player_id=parent.player_id,
            parent_id=parent.id,
            author_name=viewer.user.display_name if viewer.user else "",
            author_email=viewer.user.email if viewer.user else "",
            author_ip=client.ip,
            user_id=viewer.user_id,
            content=text,
            approved=int(CommentApproval.APPROVED),
            agent=client.user_agent[:500],
        )
        self.db.add(reply)
        await self._commit("inserting comment")
        await self.db.refresh(reply)
        logger.info(f"Reply {reply.id} added to comment {comment_id}")
        return reply

    async def delete(self, comment_id: int) -> List[Comment]:
        comment = await self._get_comment(comment_id)
        player_id = comment.player_id
        await self.db.delete(comment)
        await self._commit("deleting comment")
        logger.info(f"Comment {comment_id} deleted")
        return await self.list_for_player(player_id)
