"""
Community Routes

Posts:
POST /community/posts - Create post
GET /community/posts - List posts (category, search)
GET /community/posts/{post_id} - Get post, counts a view
PATCH /community/posts/{post_id}/like - Toggle like
DELETE /community/posts/{post_id} - Delete post and its replies (author or admin)

Replies:
GET /community/replies/{post_id} - Replies, oldest first
POST /community/replies/{post_id} - Reply to post
PATCH /community/replies/{reply_id}/like - Toggle like
DELETE /community/replies/{reply_id} - Delete reply (author or admin)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from careerflow.core.auth import get_current_user
from careerflow.db.mongodb import get_db
from careerflow.services.community_service import CommunityService
from careerflow.schemas.schemas import (
    PostCreate, PostEnvelope, PostListResponse,
    ReplyCreate, ReplyEnvelope, ReplyListResponse,
    LikeResponse, MessageResponse
)

posts_router = APIRouter(prefix="/community/posts", tags=["Community"])
replies_router = APIRouter(prefix="/community/replies", tags=["Community"])


def get_community_service(db: Database = Depends(get_db)) -> CommunityService:
    return CommunityService(db)


# ============================================================
# POSTS
# ============================================================

@posts_router.post("", response_model=PostEnvelope, status_code=201)
def create_post(
    post: PostCreate,
    user: dict = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service)
):
    return PostEnvelope(message="Post created", post=service.create_post(user, post))


@posts_router.get("", response_model=PostListResponse)
def list_posts(
    category: Optional[str] = Query(None, description="Category, or 'all'"),
    search: Optional[str] = Query(None, description="Search title and body"),
    user: dict = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service)
):
    return PostListResponse(posts=service.list_posts(category=category, search=search))


@posts_router.get("/{post_id}", response_model=PostEnvelope)
def get_post(
    post_id: str,
    user: dict = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service)
):
    return PostEnvelope(post=service.get_post(post_id))


@posts_router.patch("/{post_id}/like", response_model=LikeResponse)
def like_post(
    post_id: str,
    user: dict = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service)
):
    return LikeResponse(**service.like_post(user, post_id))


@posts_router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: str,
    user: dict = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service)
):
    service.delete_post(user, post_id)
    return MessageResponse(message="Post deleted.")


# ============================================================
# REPLIES
# ============================================================

@replies_router.get("/{post_id}", response_model=ReplyListResponse)
def list_replies(
    post_id: str,
    user: dict = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service)
):
    return ReplyListResponse(replies=service.list_replies(post_id))


@replies_router.post("/{post_id}", response_model=ReplyEnvelope, status_code=201)
def create_reply(
    post_id: str,
    reply: ReplyCreate,
    user: dict = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service)
):
    return ReplyEnvelope(message="Reply added", reply=service.create_reply(user, post_id, reply))


@replies_router.patch("/{reply_id}/like", response_model=LikeResponse)
def like_reply(
    reply_id: str,
    user: dict = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service)
):
    return LikeResponse(**service.like_reply(user, reply_id))


@replies_router.delete("/{reply_id}", response_model=MessageResponse)
def delete_reply(
    reply_id: str,
    user: dict = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service)
):
    service.delete_reply(user, reply_id)
    return MessageResponse(message="Reply deleted.")
