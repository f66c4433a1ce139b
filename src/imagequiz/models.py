from datetime import datetime
from typing import List

from pydantic import BaseModel


# --- Domain records ---
class Image(BaseModel):
    id: str
    image_path: str
    is_correct: bool
    created_at: datetime


class QuizProgress(BaseModel):
    session_id: str
    shown_image_ids: List[str] = []
    updated_at: datetime


class User(BaseModel):
    id: int
    username: str
    password_hash: str


# --- Pair selection outcomes ---
class PairResult(BaseModel):
    correct_image: Image
    incorrect_image: Image
    total_pairs: int
    remaining_pairs: int
    current_pair_index: int


class ResetSignal(BaseModel):
    reset: bool = True


# --- API payloads ---
class PairResponse(BaseModel):
    images: List[Image]
    correct_image_id: str
    total_pairs: int
    remaining_pairs: int
    current_pair: int


class ImageUpdate(BaseModel):
    is_correct: bool


class Credentials(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    token: str
