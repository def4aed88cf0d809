from __future__ import annotations

from sqlalchemy import String, Integer, Boolean, JSON, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crewdesk.models.base import Base, ULIDMixin


class Assessment(Base, ULIDMixin):
    __tablename__ = "assessments"
    __scope_fields__ = {
        "company_id": "company_id",
        "ship_id": "ship_id",
        "owner_user_id": "created_by_user_id",
        "status": "status",
    }

    company_id: Mapped[str] = mapped_column(String(26), ForeignKey("companies.id"), index=True)
    ship_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("ships.id"), nullable=True)
    created_by_user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="draft")  # draft | published
    metadata_json: Mapped[dict] = mapped_column(JSON, default=dict)

    questions = relationship(
        "AssessmentQuestion", back_populates="assessment", lazy="selectin",
        cascade="all, delete-orphan", order_by="AssessmentQuestion.question_order",
    )


class AssessmentQuestion(Base, ULIDMixin):
    __tablename__ = "assessment_questions"

    assessment_id: Mapped[str] = mapped_column(String(26), ForeignKey("assessments.id", ondelete="CASCADE"))
    question_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    question_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    question_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    points: Mapped[int | None] = mapped_column(Integer, nullable=True)
    correct_answer_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_json: Mapped[dict] = mapped_column(JSON, default=dict)

    assessment = relationship("Assessment", back_populates="questions")
    options = relationship(
        "AssessmentOption", back_populates="question", lazy="selectin",
        cascade="all, delete-orphan", order_by="AssessmentOption.option_order",
    )


class AssessmentOption(Base, ULIDMixin):
    __tablename__ = "assessment_options"

    question_id: Mapped[str] = mapped_column(String(26), ForeignKey("assessment_questions.id", ondelete="CASCADE"))
    option_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    option_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_correct: Mapped[bool] = mapped_column(Boolean, default=False)

    question = relationship("AssessmentQuestion", back_populates="options")
