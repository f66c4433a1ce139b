import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Cookie, Depends, File, Form, Request, Response, UploadFile
from fastapi.responses import HTMLResponse

from .auth import create_access_token, require_admin
from .config import settings
from .globals import image_store, pair_selector, progress_store, templates, user_store
from .models import (
    Credentials,
    Image,
    ImageUpdate,
    PairResponse,
    ResetSignal,
    TokenResponse,
    User,
)

logger = logging.getLogger("imagequiz.router")

router = APIRouter()


# --- Dependencies ---
def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return session_id


# --- Pages ---
@router.get("/", response_class=HTMLResponse)
async def home(request: Request):
    return templates.TemplateResponse(request, "start.html", {})


@router.get("/quiz", response_class=HTMLResponse)
async def quiz_page(request: Request):
    return templates.TemplateResponse(request, "quiz.html", {})


@router.get("/admin", response_class=HTMLResponse)
async def admin_page(request: Request):
    return templates.TemplateResponse(request, "admin.html", {})


@router.get("/health")
def health():
    return {"status": "ok"}


# --- Quiz ---
@router.get("/api/quiz/pair")
def get_quiz_pair(response: Response, session_id: Optional[str] = Depends(get_session_id)):
    if not session_id:
        session_id = str(uuid.uuid4())
        logger.info(f"New quiz session: {session_id}")
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        httponly=True,
        samesite="lax",
    )

    outcome = pair_selector.next_pair(session_id)
    if isinstance(outcome, ResetSignal):
        return outcome

    return PairResponse(
        images=[outcome.correct_image, outcome.incorrect_image],
        correct_image_id=outcome.correct_image.id,
        total_pairs=outcome.total_pairs,
        remaining_pairs=outcome.remaining_pairs,
        current_pair=outcome.current_pair_index,
    )


@router.post("/api/quiz/reset")
def reset_quiz(response: Response, session_id: Optional[str] = Depends(get_session_id)):
    if session_id:
        progress_store.clear(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}


@router.get("/api/images", response_model=List[Image])
def list_images():
    return image_store.list()


# --- Auth ---
@router.post("/api/register")
def register(body: Credentials):
    user_store.register(body.username, body.password)
    return {"success": True}


@router.post("/api/login", response_model=TokenResponse)
def login(body: Credentials):
    user = user_store.authenticate(body.username, body.password)
    return TokenResponse(token=create_access_token(user))


# --- Admin ---
@router.post("/api/upload", response_model=Image)
def upload_image(
    image: UploadFile = File(...),
    is_correct: bool = Form(...),
    admin: User = Depends(require_admin),
):
    data = image.file.read()
    return image_store.upload(data, image.filename, is_correct, image.content_type)


@router.get("/api/admin/images", response_model=List[Image])
def admin_list_images(admin: User = Depends(require_admin)):
    return image_store.list()


@router.get("/api/admin/images/{image_id}", response_model=Image)
def admin_get_image(image_id: str, admin: User = Depends(require_admin)):
    return image_store.get(image_id)


@router.put("/api/admin/images/{image_id}", response_model=Image)
def admin_update_image(
    image_id: str, body: ImageUpdate, admin: User = Depends(require_admin)
):
    return image_store.update(image_id, body.is_correct)


@router.delete("/api/admin/images/{image_id}")
def admin_delete_image(image_id: str, admin: User = Depends(require_admin)):
    image_store.delete(image_id)
    logger.info(f"Image {image_id} deleted by {admin.username}")
    return {"message": "Image deleted successfully"}
