import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import EmailStr
from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel


def get_datetime_utc() -> datetime:
    return datetime.now(timezone.utc)


# Shared properties
class UserBase(SQLModel):
    email: EmailStr | None = Field(default=None, unique=True, index=True, max_length=255)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    profile_image_url: str | None = Field(default=None, max_length=2048)
    username: str | None = Field(default=None, unique=True, index=True, max_length=64)
    bio: str | None = Field(default=None, max_length=500)


# Identity claims used to create the user row and fill in missing fields
class UserUpsert(SQLModel):
    id: uuid.UUID
    email: EmailStr | None = Field(default=None, max_length=255)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    profile_image_url: str | None = Field(default=None, max_length=2048)


# Properties to receive via API on update, all are optional
class UserUpdateProfile(SQLModel):
    username: str | None = Field(default=None, min_length=1, max_length=64)
    bio: str | None = Field(default=None, max_length=500)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)


# Database model, database table inferred from class name
class User(UserBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    vibe_score: int = 0
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    posts: list["Post"] = Relationship(back_populates="user", cascade_delete=True)


# Properties to return via API, id is always required
class UserPublic(UserBase):
    id: uuid.UUID
    vibe_score: int = 0
    created_at: datetime | None = None


class UserStats(SQLModel):
    posts: int
    followers: int
    following: int
    vibe_score: int


class UserProfile(UserPublic):
    stats: UserStats


class Success(SQLModel):
    success: bool


# Contents of the identity provider's token
class TokenPayload(SQLModel):
    sub: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None


# Posts

MediaType = Literal["image", "video", "meme"]


class PostBase(SQLModel):
    content: str | None = Field(default=None, max_length=5000)
    ai_prompt: str | None = Field(default=None, max_length=5000)
    media_url: str | None = Field(default=None, max_length=2048)
    media_type: str | None = Field(default=None, max_length=20)
    detected_emotion: str | None = Field(default=None, max_length=50)
    mood: str | None = Field(default=None, max_length=50)
    caption: str | None = Field(default=None, max_length=2200)
    is_story: bool = False


class PostCreate(PostBase):
    media_type: MediaType | None = None


class Post(PostBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="user.id", nullable=False, ondelete="CASCADE", index=True
    )
    likes_count: int = 0
    comments_count: int = 0
    remix_count: int = 0
    expires_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
        index=True,
    )
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    user: User | None = Relationship(back_populates="posts")
    likes: list["Like"] = Relationship(back_populates="post", cascade_delete=True)
    comments: list["Comment"] = Relationship(back_populates="post", cascade_delete=True)


class PostPublic(PostBase):
    id: uuid.UUID
    user_id: uuid.UUID
    likes_count: int = 0
    comments_count: int = 0
    remix_count: int = 0
    expires_at: datetime | None = None
    created_at: datetime | None = None


class PostWithUser(PostPublic):
    user: UserPublic


class FeedPost(PostWithUser):
    is_liked: bool = False


# Likes

class Like(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("user_id", "post_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")
    post_id: uuid.UUID = Field(foreign_key="post.id", nullable=False, ondelete="CASCADE")
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    post: Post | None = Relationship(back_populates="likes")


# Comments

class CommentCreate(SQLModel):
    content: str = Field(min_length=1, max_length=2000)


class Comment(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")
    post_id: uuid.UUID = Field(
        foreign_key="post.id", nullable=False, ondelete="CASCADE", index=True
    )
    content: str = Field(max_length=2000)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    post: Post | None = Relationship(back_populates="comments")


class CommentPublic(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    post_id: uuid.UUID
    content: str
    created_at: datetime | None = None


class CommentWithUser(CommentPublic):
    user: UserPublic


# Follows

class Follow(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("follower_id", "following_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    follower_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")
    following_id: uuid.UUID = Field(
        foreign_key="user.id", nullable=False, ondelete="CASCADE"
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class FollowStatus(SQLModel):
    following: bool


# Direct messages

class DirectMessageBase(SQLModel):
    content: str | None = Field(default=None, max_length=5000)
    media_url: str | None = Field(default=None, max_length=2048)
    media_type: str | None = Field(default=None, max_length=20)


class DirectMessageCreate(DirectMessageBase):
    receiver_id: uuid.UUID
    media_type: MediaType | None = None


class DirectMessage(DirectMessageBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    sender_id: uuid.UUID = Field(
        foreign_key="user.id", nullable=False, ondelete="CASCADE", index=True
    )
    receiver_id: uuid.UUID = Field(
        foreign_key="user.id", nullable=False, ondelete="CASCADE", index=True
    )
    is_read: bool = False
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class DirectMessagePublic(DirectMessageBase):
    id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    is_read: bool
    created_at: datetime | None = None


class DirectMessageWithUsers(DirectMessagePublic):
    sender: UserPublic
    receiver: UserPublic


class ConversationPreview(SQLModel):
    user: UserPublic
    last_message: DirectMessagePublic
    unread_count: int


# Search

class HashtagCount(SQLModel):
    tag: str
    count: int


# Analytics

class AnalyticsCounter(SQLModel, table=True):
    key: str = Field(primary_key=True, max_length=255)
    count: int = 0


class AnalyticsStats(SQLModel):
    total_vibes: int = 0
    today_vibes: int = 0
    copy_clicks: int = 0
    top_mood: str | None = None
    most_used_preset: str | None = None


class TrackVibe(SQLModel):
    preset: str | None = Field(default=None, max_length=100)
    mood: str | None = Field(default=None, max_length=100)
