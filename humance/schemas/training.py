from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator, model_validator
from typing import Dict, List, Optional
from datetime import datetime
from humance.models.training import QuizStatus

_http_url = TypeAdapter(AnyHttpUrl)


def _url_or_blank(value: Optional[str], message: str) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError(message)
    return value


class QuizQuestion(BaseModel):
    question_text: str
    options: List[str]
    correct_answer_index: int = Field(..., ge=0)

    @field_validator("question_text")
    @classmethod
    def question_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("A pergunta é obrigatória.")
        return v

    @field_validator("options")
    @classmethod
    def drop_blank_options(cls, v: List[str]) -> List[str]:
        options = [option.strip() for option in v if option and option.strip()]
        if len(options) < 2:
            raise ValueError("Deve haver pelo menos duas opções.")
        return options

    @model_validator(mode="after")
    def answer_is_an_option(self):
        if self.correct_answer_index >= len(self.options):
            raise ValueError("Selecione uma resposta correta.")
        return self


class TrainingCreate(BaseModel):
    title: str = Field(..., min_length=3)
    description: str = Field(..., min_length=10)
    category: str = ""
    youtube_url: Optional[str] = None
    pdf_url: Optional[str] = None
    questions: List[QuizQuestion] = []
    prerequisite_ids: List[int] = []

    @field_validator("youtube_url")
    @classmethod
    def youtube_url_valid(cls, v: Optional[str]) -> Optional[str]:
        return _url_or_blank(v, "Por favor, insira uma URL do YouTube válida.")

    @field_validator("pdf_url")
    @classmethod
    def pdf_url_valid(cls, v: Optional[str]) -> Optional[str]:
        return _url_or_blank(v, "Por favor, insira uma URL válida para o PDF.")

    @field_validator("prerequisite_ids")
    @classmethod
    def unique_prerequisites(cls, v: List[int]) -> List[int]:
        return list(dict.fromkeys(v))


class TrainingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    category: str = ""
    youtube_url: Optional[str] = None
    pdf_url: Optional[str] = None
    quiz: Optional[List[QuizQuestion]] = None
    prerequisite_ids: List[int] = []
    created_at: Optional[datetime] = None


class TrainingAssignmentRequest(BaseModel):
    training_id: int
    user_ids: List[int] = Field(..., min_length=1)


class PlaylistCreate(BaseModel):
    name: str = Field(..., min_length=3)
    description: str = ""
    training_ids: List[int] = Field(..., min_length=1)

    @field_validator("training_ids")
    @classmethod
    def unique_trainings(cls, v: List[int]) -> List[int]:
        return list(dict.fromkeys(v))


class PlaylistResponse(BaseModel):
    id: int
    name: str
    description: str = ""
    training_ids: List[int]
    trainings: List[TrainingResponse] = []
    created_at: Optional[datetime] = None


class PlaylistAssignmentRequest(BaseModel):
    playlist_id: int
    user_ids: List[int] = Field(..., min_length=1)


class AssignmentResult(BaseModel):
    created_count: int
    skipped_count: int = 0


class PublicQuizQuestion(BaseModel):
    """A quiz question as shown to the person taking it."""
    question_text: str
    options: List[str]


class MyTraining(BaseModel):
    assignment_id: int
    training_id: int
    title: str
    description: str
    category: str = ""
    youtube_url: Optional[str] = None
    pdf_url: Optional[str] = None
    has_quiz: bool
    completed: bool
    quiz_status: QuizStatus
    quiz_score: Optional[int] = None


class QuizView(BaseModel):
    assignment_id: int
    training_id: int
    title: str
    questions: List[PublicQuizQuestion]
    quiz_status: QuizStatus
    quiz_score: Optional[int] = None


class QuizSubmission(BaseModel):
    # question index -> chosen option index
    answers: Dict[str, int]


class QuizResult(BaseModel):
    success: bool = True
    message: str
    score: int
    passed: bool


class AssignedUser(BaseModel):
    assignment_id: int
    user_id: int
    name: str
    email: str
    completed: bool
    quiz_status: QuizStatus
    quiz_score: Optional[int] = None


class TrainingStatusUpdate(BaseModel):
    completed: bool


class TrainingProgressSummary(BaseModel):
    total_assigned: int
    total_completed: int
    completion_rate: int
