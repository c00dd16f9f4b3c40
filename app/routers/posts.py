from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import (
    PostListParams,
    get_current_user_id,
    get_image_storage,
    get_reference_policy,
)
from app.references import ReferencePolicy
from app.schemas import MessageResponse, PaginatedResponse, PostCreate, PostResponse, PostUpdate
from app.services import post_service
from app.storage import ImageStorage, ImageUpload

# Post updates and deletes are open to any authenticated user; only
# comment deletion is restricted to the author.
router = APIRouter(prefix="/api/v1/posts", tags=["posts"])


async def _read_upload(upload: UploadFile | None) -> ImageUpload | None:
    if upload is None or not upload.filename:
        return None
    return ImageUpload(filename=upload.filename, data=await upload.read())

_UPDATE_FIELDS = ("title", "content", "category")


def _form_text(value) -> str:
    # A file sent under a text field name counts as a blank value.
    return value if isinstance(value, str) else ""

@router.get("", response_model=PaginatedResponse)
async def list_posts(params: PostListParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await post_service.list_posts(db, params.query)

@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, db: AsyncSession = Depends(get_db)):
    return await post_service.get_post(db, post_id)

@router.post("", status_code=201, response_model=PostResponse)
async def create_post(
    title: str | None = Form(None),
    content: str | None = Form(None),
    category: str | None = Form(None),
    featured_image: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    _user_id: str = Depends(get_current_user_id),
    policy: ReferencePolicy = Depends(get_reference_policy),
    storage: ImageStorage = Depends(get_image_storage),
):
    return await post_service.create_post(
        db,
        PostCreate(title=title, content=content, category=category),
        await _read_upload(featured_image),
        storage=storage,
        policy=policy,
    )

@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    request: Request,
    featured_image: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    _user_id: str = Depends(get_current_user_id),
    policy: ReferencePolicy = Depends(get_reference_policy),
    storage: ImageStorage = Depends(get_image_storage),
):
    # Presence is read from the raw form: Form(None) would turn an empty
    # value into "not supplied" and skip its validation.
    form = await request.form()
    fields = {name: _form_text(form[name]) for name in _UPDATE_FIELDS if name in form}
    return await post_service.update_post(
        db,
        post_id,
        PostUpdate(**fields),
        await _read_upload(featured_image),
        storage=storage,
        policy=policy,
    )

@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    db: AsyncSession = Depends(get_db),
    _user_id: str = Depends(get_current_user_id),
):
    return await post_service.delete_post(db, post_id)
