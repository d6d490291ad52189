import re
import uuid
from collections import Counter
from datetime import timedelta
from typing import Any

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, and_, col, or_, select

from feels.core.config import settings
from feels.models import (
    Comment,
    CommentCreate,
    CommentWithUser,
    ConversationPreview,
    DirectMessage,
    DirectMessageCreate,
    DirectMessagePublic,
    DirectMessageWithUsers,
    FeedPost,
    Follow,
    HashtagCount,
    Like,
    Post,
    PostCreate,
    PostWithUser,
    User,
    UserPublic,
    UserStats,
    UserUpdateProfile,
    UserUpsert,
    get_datetime_utc,
)

HASHTAG_RE = re.compile(r"#(\w+)")


# Users

def get_user(*, session: Session, user_id: uuid.UUID) -> User | None:
    return session.get(User, user_id)


def get_user_by_username(*, session: Session, username: str) -> User | None:
    statement = select(User).where(User.username == username)
    return session.exec(statement).first()


def _email_taken(*, session: Session, email: str, user_id: uuid.UUID) -> bool:
    statement = select(User.id).where(User.email == email, User.id != user_id)
    return session.exec(statement).first() is not None


def upsert_user(*, session: Session, user_in: UserUpsert) -> User:
    """
    Create the user on first sight. Later calls only fill claims the row is
    still missing, so profile edits are never overwritten by token claims.
    An email already owned by another user is dropped instead of failing.
    """
    claims = user_in.model_dump(exclude={"id"}, exclude_none=True)
    email = claims.get("email")
    if email and _email_taken(session=session, email=email, user_id=user_in.id):
        del claims["email"]

    db_user = session.get(User, user_in.id)
    if db_user is None:
        db_user = User.model_validate(claims, update={"id": user_in.id})
    else:
        changes = {k: v for k, v in claims.items() if getattr(db_user, k) is None}
        if not changes:
            return db_user
        db_user.sqlmodel_update(changes, update={"updated_at": get_datetime_utc()})
    session.add(db_user)
    try:
        session.commit()
    except IntegrityError:
        # Lost a race for the same email; keep the user without it
        session.rollback()
        if "email" not in claims:
            raise
        return upsert_user(
            session=session, user_in=user_in.model_copy(update={"email": None})
        )
    session.refresh(db_user)
    return db_user


def update_user_profile(
    *, session: Session, db_user: User, user_in: UserUpdateProfile
) -> User:
    user_data = user_in.model_dump(exclude_unset=True)
    db_user.sqlmodel_update(user_data, update={"updated_at": get_datetime_utc()})
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    return db_user


def get_user_stats(*, session: Session, user_id: uuid.UUID) -> UserStats:
    posts = session.exec(
        select(func.count()).select_from(Post).where(Post.user_id == user_id)
    ).one()
    followers = session.exec(
        select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
    ).one()
    following = session.exec(
        select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
    ).one()
    user = session.get(User, user_id)
    return UserStats(
        posts=posts,
        followers=followers,
        following=following,
        vibe_score=user.vibe_score if user else 0,
    )


def _user_public(user: User) -> UserPublic:
    return UserPublic.model_validate(user.model_dump())


# Posts

def create_post(*, session: Session, post_in: PostCreate, user_id: uuid.UUID) -> Post:
    extra_data: dict[str, Any] = {"user_id": user_id}
    if post_in.is_story:
        extra_data["expires_at"] = get_datetime_utc() + timedelta(
            hours=settings.STORY_TTL_HOURS
        )
    db_post = Post.model_validate(post_in, update=extra_data)
    session.add(db_post)
    session.commit()
    session.refresh(db_post)
    return db_post


def get_post(*, session: Session, post_id: uuid.UUID) -> Post | None:
    return session.get(Post, post_id)


def _post_listing(viewer_id: uuid.UUID | None = None):
    """Posts joined with their author, with like/comment counts derived from the join tables."""
    likes_count = (
        select(func.count(col(Like.id))).where(Like.post_id == Post.id).scalar_subquery()
    )
    comments_count = (
        select(func.count(col(Comment.id)))
        .where(Comment.post_id == Post.id)
        .scalar_subquery()
    )
    columns: list[Any] = [
        Post,
        User,
        likes_count.label("likes_count"),
        comments_count.label("comments_count"),
    ]
    if viewer_id is not None:
        is_liked = (
            select(col(Like.id))
            .where(Like.post_id == Post.id, Like.user_id == viewer_id)
            .exists()
        )
        columns.append(is_liked.label("is_liked"))
    return select(*columns).join(User, col(Post.user_id) == col(User.id))


def _newest_first(statement):
    return statement.order_by(col(Post.created_at).desc(), col(Post.id).desc())


def _rows_to_posts(rows, model: type[PostWithUser]) -> list[Any]:
    posts = []
    for row in rows:
        post, user, likes_count, comments_count, *rest = row
        data = {
            **post.model_dump(),
            "user": user.model_dump(),
            "likes_count": likes_count or 0,
            "comments_count": comments_count or 0,
        }
        if rest:
            data["is_liked"] = bool(rest[0])
        posts.append(model.model_validate(data))
    return posts


def _not_a_story():
    return col(Post.is_story).is_(False)


def get_feed_posts(
    *, session: Session, viewer_id: uuid.UUID, limit: int = 20, offset: int = 0
) -> list[FeedPost]:
    now = get_datetime_utc()
    statement = _post_listing(viewer_id).where(
        _not_a_story(),
        or_(col(Post.expires_at).is_(None), col(Post.expires_at) > now),
    )
    statement = _newest_first(statement).offset(offset).limit(limit)
    return _rows_to_posts(session.exec(statement).all(), FeedPost)


def get_feed_post(
    *, session: Session, post_id: uuid.UUID, viewer_id: uuid.UUID
) -> FeedPost | None:
    statement = _post_listing(viewer_id).where(Post.id == post_id)
    posts = _rows_to_posts(session.exec(statement).all(), FeedPost)
    return posts[0] if posts else None


def get_user_posts(
    *, session: Session, user_id: uuid.UUID, limit: int = 20, offset: int = 0
) -> list[PostWithUser]:
    statement = _post_listing().where(Post.user_id == user_id, _not_a_story())
    statement = _newest_first(statement).offset(offset).limit(limit)
    return _rows_to_posts(session.exec(statement).all(), PostWithUser)


def get_stories(*, session: Session) -> list[PostWithUser]:
    now = get_datetime_utc()
    statement = _post_listing().where(
        col(Post.is_story).is_(True),
        col(Post.expires_at).is_not(None),
        col(Post.expires_at) > now,
    )
    return _rows_to_posts(session.exec(_newest_first(statement)).all(), PostWithUser)


def delete_post(*, session: Session, post_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    post = session.get(Post, post_id)
    if not post or post.user_id != user_id:
        return False
    session.delete(post)
    session.commit()
    return True


# Likes

def _bump_counter(session: Session, post_id: uuid.UUID, column, delta: int) -> None:
    session.exec(
        update(Post)
        .where(col(Post.id) == post_id)
        .values({column: column + delta})
        .execution_options(synchronize_session=False)
    )


def like_post(*, session: Session, post_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    """Insert the like and bump the counter in one transaction. False if already liked."""
    try:
        session.add(Like(post_id=post_id, user_id=user_id))
        session.flush()
        _bump_counter(session, post_id, col(Post.likes_count), 1)
        session.commit()
    except IntegrityError:
        session.rollback()
        return False
    return True


def unlike_post(*, session: Session, post_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    result = session.exec(
        delete(Like).where(col(Like.post_id) == post_id, col(Like.user_id) == user_id)
    )
    if not result.rowcount:
        session.rollback()
        return False
    _bump_counter(session, post_id, col(Post.likes_count), -1)
    session.commit()
    return True


def is_post_liked(*, session: Session, post_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    statement = select(Like).where(Like.post_id == post_id, Like.user_id == user_id)
    return session.exec(statement).first() is not None


# Comments

def create_comment(
    *,
    session: Session,
    comment_in: CommentCreate,
    post_id: uuid.UUID,
    user_id: uuid.UUID,
) -> Comment:
    db_comment = Comment.model_validate(
        comment_in, update={"post_id": post_id, "user_id": user_id}
    )
    session.add(db_comment)
    session.flush()
    _bump_counter(session, post_id, col(Post.comments_count), 1)
    session.commit()
    session.refresh(db_comment)
    return db_comment


def get_post_comments(*, session: Session, post_id: uuid.UUID) -> list[CommentWithUser]:
    statement = (
        select(Comment, User)
        .join(User, col(Comment.user_id) == col(User.id))
        .where(Comment.post_id == post_id)
        .order_by(col(Comment.created_at).desc(), col(Comment.id).desc())
    )
    return [
        CommentWithUser.model_validate({**comment.model_dump(), "user": user.model_dump()})
        for comment, user in session.exec(statement).all()
    ]


def delete_comment(
    *, session: Session, comment_id: uuid.UUID, user_id: uuid.UUID
) -> bool:
    comment = session.get(Comment, comment_id)
    if not comment or comment.user_id != user_id:
        return False
    post_id = comment.post_id
    session.delete(comment)
    session.flush()
    _bump_counter(session, post_id, col(Post.comments_count), -1)
    session.commit()
    return True


# Follows

def follow_user(
    *, session: Session, follower_id: uuid.UUID, following_id: uuid.UUID
) -> bool:
    try:
        session.add(Follow(follower_id=follower_id, following_id=following_id))
        session.commit()
    except IntegrityError:
        session.rollback()
        return False
    return True


def unfollow_user(
    *, session: Session, follower_id: uuid.UUID, following_id: uuid.UUID
) -> bool:
    result = session.exec(
        delete(Follow).where(
            col(Follow.follower_id) == follower_id,
            col(Follow.following_id) == following_id,
        )
    )
    session.commit()
    return bool(result.rowcount)


def is_following(
    *, session: Session, follower_id: uuid.UUID, following_id: uuid.UUID
) -> bool:
    statement = select(Follow).where(
        Follow.follower_id == follower_id, Follow.following_id == following_id
    )
    return session.exec(statement).first() is not None


def get_followers(*, session: Session, user_id: uuid.UUID) -> list[User]:
    statement = (
        select(User)
        .join(Follow, col(Follow.follower_id) == col(User.id))
        .where(Follow.following_id == user_id)
        .order_by(col(Follow.created_at).desc())
    )
    return list(session.exec(statement).all())


def get_following(*, session: Session, user_id: uuid.UUID) -> list[User]:
    statement = (
        select(User)
        .join(Follow, col(Follow.following_id) == col(User.id))
        .where(Follow.follower_id == user_id)
        .order_by(col(Follow.created_at).desc())
    )
    return list(session.exec(statement).all())


# Direct messages

def create_message(
    *, session: Session, message_in: DirectMessageCreate, sender_id: uuid.UUID
) -> DirectMessage:
    db_message = DirectMessage.model_validate(message_in, update={"sender_id": sender_id})
    session.add(db_message)
    session.commit()
    session.refresh(db_message)
    return db_message


def _users_by_id(session: Session, user_ids) -> dict[uuid.UUID, UserPublic]:
    statement = select(User).where(col(User.id).in_(list(user_ids)))
    return {user.id: _user_public(user) for user in session.exec(statement).all()}


def get_conversation(
    *, session: Session, user_id: uuid.UUID, other_user_id: uuid.UUID
) -> list[DirectMessageWithUsers]:
    statement = (
        select(DirectMessage)
        .where(
            or_(
                and_(
                    DirectMessage.sender_id == user_id,
                    DirectMessage.receiver_id == other_user_id,
                ),
                and_(
                    DirectMessage.sender_id == other_user_id,
                    DirectMessage.receiver_id == user_id,
                ),
            )
        )
        .order_by(col(DirectMessage.created_at).desc(), col(DirectMessage.id).desc())
    )
    messages = session.exec(statement).all()
    users = _users_by_id(session, {user_id, other_user_id})
    return [
        DirectMessageWithUsers.model_validate(
            {
                **message.model_dump(),
                "sender": users[message.sender_id],
                "receiver": users[message.receiver_id],
            }
        )
        for message in messages
    ]


def get_conversations(*, session: Session, user_id: uuid.UUID) -> list[ConversationPreview]:
    """One preview per counterpart: the most recent message plus the unread count."""
    statement = (
        select(DirectMessage)
        .where(
            or_(DirectMessage.sender_id == user_id, DirectMessage.receiver_id == user_id)
        )
        .order_by(col(DirectMessage.created_at).desc(), col(DirectMessage.id).desc())
    )
    latest: dict[uuid.UUID, DirectMessage] = {}
    unread: Counter[uuid.UUID] = Counter()
    for message in session.exec(statement).all():
        counterpart = (
            message.receiver_id if message.sender_id == user_id else message.sender_id
        )
        if counterpart == user_id:
            continue
        latest.setdefault(counterpart, message)
        if message.receiver_id == user_id and not message.is_read:
            unread[counterpart] += 1

    users = _users_by_id(session, latest.keys())
    return [
        ConversationPreview(
            user=users[counterpart],
            last_message=DirectMessagePublic.model_validate(message.model_dump()),
            unread_count=unread[counterpart],
        )
        for counterpart, message in latest.items()
    ]


def mark_message_as_read(
    *, session: Session, message_id: uuid.UUID, receiver_id: uuid.UUID
) -> bool:
    result = session.exec(
        update(DirectMessage)
        .where(
            col(DirectMessage.id) == message_id,
            col(DirectMessage.receiver_id) == receiver_id,
        )
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    return bool(result.rowcount)


# Search

def _contains_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_users(*, session: Session, query: str, limit: int = 20) -> list[User]:
    pattern = _contains_pattern(query)
    full_name = (
        func.coalesce(User.first_name, "") + " " + func.coalesce(User.last_name, "")
    )
    statement = (
        select(User)
        .where(
            or_(
                col(User.username).ilike(pattern, escape="\\"),
                col(User.first_name).ilike(pattern, escape="\\"),
                col(User.last_name).ilike(pattern, escape="\\"),
                full_name.ilike(pattern, escape="\\"),
            )
        )
        .order_by(col(User.username))
        .limit(limit)
    )
    return list(session.exec(statement).all())


def search_posts(*, session: Session, query: str, limit: int = 20) -> list[PostWithUser]:
    statement = _post_listing().where(
        col(Post.content).ilike(_contains_pattern(query), escape="\\"),
        _not_a_story(),
    )
    statement = _newest_first(statement).limit(limit)
    return _rows_to_posts(session.exec(statement).all(), PostWithUser)


def search_hashtags(*, session: Session, query: str, limit: int = 20) -> list[HashtagCount]:
    """Count hashtags containing `query` across the posts that mention it."""
    needle = query.lstrip("#").lower()
    statement = select(Post.content).where(
        col(Post.content).ilike(_contains_pattern(f"#{needle}"), escape="\\"),
        _not_a_story(),
    )
    counts: Counter[str] = Counter()
    for content in session.exec(statement).all():
        for tag in HASHTAG_RE.findall(content or ""):
            tag = tag.lower()
            if needle in tag:
                counts[tag] += 1
    return [HashtagCount(tag=tag, count=count) for tag, count in counts.most_common(limit)]
