from fastapi import APIRouter

from feels.api.routes import (
    analytics,
    auth,
    comments,
    messages,
    posts,
    search,
    stories,
    users,
    utils,
    vibe,
)

api_router = APIRouter()
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(utils.router, tags=["utils"])
api_router.include_router(vibe.router, prefix="/vibe", tags=["vibe"])
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_router.include_router(comments.router, prefix="/comments", tags=["comments"])
api_router.include_router(stories.router, prefix="/stories", tags=["stories"])
api_router.include_router(messages.router, tags=["messages"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
