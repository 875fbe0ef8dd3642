from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from patronage.api.deps import (
    get_content_repo,
    get_current_viewer,
    get_optional_viewer,
    get_read_context,
)
from patronage.api.schemas import PostWriteRequest, dump, ok
from patronage.components.feed import ReadContext, get_creator_posts, get_my_posts
from patronage.components.posts import (
    CreatePostInput,
    DeletePostInput,
    UpdatePostInput,
    create_post,
    delete_post,
    update_post,
)
from patronage.components.posts.ports import ContentWriteRepoPort
from patronage.domain.entities import Viewer

router = APIRouter()


@router.post("/posts", status_code=status.HTTP_201_CREATED)
def create(
    body: PostWriteRequest,
    viewer: Viewer = Depends(get_current_viewer),
    repo: ContentWriteRepoPort = Depends(get_content_repo),
) -> dict[str, Any]:
    post = create_post(CreatePostInput(viewer=viewer, fields=body.fields_set()), repo=repo)
    return ok(dump(post), "Post created", status.HTTP_201_CREATED)


@router.put("/posts/{post_id}")
def update(
    post_id: UUID,
    body: PostWriteRequest,
    viewer: Viewer = Depends(get_current_viewer),
    repo: ContentWriteRepoPort = Depends(get_content_repo),
) -> dict[str, Any]:
    post = update_post(
        UpdatePostInput(viewer=viewer, post_id=post_id, updates=body.fields_set()), repo=repo
    )
    return ok(dump(post), "Post updated")


@router.delete("/posts/{post_id}")
def delete(
    post_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    repo: ContentWriteRepoPort = Depends(get_content_repo),
) -> dict[str, Any]:
    delete_post(DeletePostInput(viewer=viewer, post_id=post_id), repo=repo)
    return ok(None, "Post deleted")


# /posts/me must be registered before /posts/{creator_id}
@router.get("/posts/me")
def read_my_posts(
    viewer: Viewer = Depends(get_current_viewer),
    ctx: ReadContext = Depends(get_read_context),
) -> dict[str, Any]:
    return ok(get_my_posts(viewer, ctx=ctx), "My posts fetched")


@router.get("/posts/{creator_id}")
def read_creator_posts(
    creator_id: UUID,
    viewer: Viewer | None = Depends(get_optional_viewer),
    ctx: ReadContext = Depends(get_read_context),
) -> dict[str, Any]:
    return ok(get_creator_posts(viewer, creator_id, ctx=ctx), "Creator posts fetched")
