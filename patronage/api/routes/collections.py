from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from patronage.api.deps import (
    get_content_repo,
    get_current_viewer,
    get_optional_viewer,
    get_read_context,
)
from patronage.api.schemas import CollectionWriteRequest, dump, ok
from patronage.components.feed import ReadContext, get_collection, get_creator_collections
from patronage.components.posts import (
    CreateCollectionInput,
    DeleteCollectionInput,
    UpdateCollectionInput,
    create_collection,
    delete_collection,
    update_collection,
)
from patronage.components.posts.ports import ContentWriteRepoPort
from patronage.domain.entities import Viewer

router = APIRouter()


@router.get("/collections")
def read_my_collections(
    viewer: Viewer = Depends(get_current_viewer),
    ctx: ReadContext = Depends(get_read_context),
) -> dict[str, Any]:
    return ok(get_creator_collections(viewer, viewer.id, ctx=ctx), "Collections fetched")


@router.get("/collections/detail/{collection_id}")
def read_collection(
    collection_id: UUID,
    viewer: Viewer | None = Depends(get_optional_viewer),
    ctx: ReadContext = Depends(get_read_context),
) -> dict[str, Any]:
    """A collection, plus its member posts when the viewer may open it."""
    detail = get_collection(viewer, collection_id, ctx=ctx)
    return ok({"collection": detail.collection, "items": detail.items}, "Collection fetched")


@router.get("/collections/{creator_id}")
def read_creator_collections(
    creator_id: UUID,
    viewer: Viewer | None = Depends(get_optional_viewer),
    ctx: ReadContext = Depends(get_read_context),
) -> dict[str, Any]:
    return ok(get_creator_collections(viewer, creator_id, ctx=ctx), "Collections fetched")


@router.post("/collections", status_code=status.HTTP_201_CREATED)
def create(
    body: CollectionWriteRequest,
    viewer: Viewer = Depends(get_current_viewer),
    repo: ContentWriteRepoPort = Depends(get_content_repo),
) -> dict[str, Any]:
    collection = create_collection(
        CreateCollectionInput(viewer=viewer, fields=body.fields_set()), repo=repo
    )
    return ok(dump(collection), "Collection created", status.HTTP_201_CREATED)


@router.put("/collections/{collection_id}")
def update(
    collection_id: UUID,
    body: CollectionWriteRequest,
    viewer: Viewer = Depends(get_current_viewer),
    repo: ContentWriteRepoPort = Depends(get_content_repo),
) -> dict[str, Any]:
    collection = update_collection(
        UpdateCollectionInput(
            viewer=viewer, collection_id=collection_id, updates=body.fields_set()
        ),
        repo=repo,
    )
    return ok(dump(collection), "Collection updated")


@router.delete("/collections/{collection_id}")
def delete(
    collection_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    repo: ContentWriteRepoPort = Depends(get_content_repo),
) -> dict[str, Any]:
    delete_collection(DeleteCollectionInput(viewer=viewer, collection_id=collection_id), repo=repo)
    return ok(None, "Collection deleted")
