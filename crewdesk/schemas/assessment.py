from __future__ import annotations
from datetime import datetime
from typing import Any, Literal
from pydantic import BaseModel, Field

AssessmentStatus = Literal["draft", "published"]


class OptionItem(BaseModel):
    option_order: int | None = None
    option_text: str | None = None
    is_correct: bool = False


class QuestionItem(BaseModel):
    question_order: int | None = None
    question_type: str | None = None
    question_text: str | None = None
    points: int | None = None
    correct_answer_text: str | None = None
    explanation: str | None = None
    metadata_json: dict[str, Any] = {}
    options: list[OptionItem] = []


class AssessmentCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    company_id: str | None = None
    ship_id: int | None = None
    status: AssessmentStatus = "draft"
    metadata_json: dict[str, Any] = {}
    questions: list[QuestionItem] = []


class AssessmentUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    ship_id: int | None = None
    status: AssessmentStatus | None = None
    metadata_json: dict[str, Any] | None = None
    # When present the whole question tree is replaced
    questions: list[QuestionItem] | None = None


class OptionRead(BaseModel):
    id: str
    option_order: int | None = None
    option_text: str | None = None
    is_correct: bool

    model_config = {"from_attributes": True}


class QuestionRead(BaseModel):
    id: str
    question_order: int | None = None
    question_type: str | None = None
    question_text: str | None = None
    points: int | None = None
    correct_answer_text: str | None = None
    explanation: str | None = None
    metadata_json: dict[str, Any] = {}
    options: list[OptionRead] = []

    model_config = {"from_attributes": True}


class AssessmentRead(BaseModel):
    id: str
    company_id: str
    ship_id: int | None = None
    created_by_user_id: int | None = None
    title: str
    description: str | None = None
    status: str
    metadata_json: dict[str, Any] = {}
    questions: list[QuestionRead] = []
    created_at: datetime

    model_config = {"from_attributes": True}
