"""
Training Models.
Trainings (video/PDF material with an optional quiz), playlists grouping
trainings, and the per-user assignment that tracks completion and the quiz
attempt.
"""
import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from humance.database import Base


class QuizStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    PASSED = "passed"
    FAILED = "failed"


class Training(Base):
    __tablename__ = "trainings"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, default="", nullable=False)
    youtube_url = Column(String, nullable=True)
    pdf_url = Column(String, nullable=True)
    # [{"question_text": ..., "options": [...], "correct_answer_index": n}]; None when there is no quiz
    quiz = Column(JSON, nullable=True)
    prerequisite_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    assignments = relationship("UserTraining", back_populates="training", cascade="all, delete-orphan")

    @property
    def has_quiz(self) -> bool:
        return bool(self.quiz)

    def __repr__(self):
        return f"<Training {self.id}: {self.title}>"


class TrainingPlaylist(Base):
    __tablename__ = "training_playlists"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, default="", nullable=False)
    # Ordered training ids
    training_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class UserTraining(Base):
    """One training assigned to one user."""
    __tablename__ = "user_trainings"
    __table_args__ = (
        UniqueConstraint("user_id", "training_id", name="uq_user_training"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    training_id = Column(Integer, ForeignKey("trainings.id", ondelete="CASCADE"), nullable=False, index=True)
    completed = Column(Boolean, default=False, nullable=False)
    quiz_status = Column(String(20), default=QuizStatus.NOT_STARTED.value, nullable=False)
    quiz_score = Column(Integer, nullable=True)
    assigned_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="trainings")
    training = relationship("Training", back_populates="assignments")
