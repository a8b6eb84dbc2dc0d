"""
Training Service Layer

Trainings and playlists are managed by HR and assigned to people. Each
assignment tracks completion and a single quiz attempt: the quiz is graded as
the rounded percentage of correct answers and passes at 70, which also
completes the training. HR can reset an attempt to let the person retry.
"""
import logging
import math
from typing import Dict, List, Mapping, Sequence, Tuple

from sqlalchemy.orm import Session

from humance.core.exceptions import AccessDeniedError, ConflictError, NotFoundError, ValidationFailedError
from humance.models.training import QuizStatus, Training, TrainingPlaylist, UserTraining
from humance.models.user import User
from humance.schemas.auth import AuthContext
from humance.schemas.training import PlaylistCreate, TrainingCreate, TrainingResponse
from humance.services import access
from humance.services.audit import AuditService
from humance.services.base import commit_or_fail
from humance.services.notification import NotificationService
from humance.services.org_service import team_for_manager

logger = logging.getLogger(__name__)

PASSING_SCORE = 70


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def grade_quiz(questions: Sequence[Mapping], answers: Mapping[str, int]) -> Tuple[int, bool]:
    """
    Score is the percentage of questions answered with the correct option,
    rounded half up. Unanswered questions count as wrong.
    """
    if not questions:
        raise ValidationFailedError("Quiz não encontrado para este treinamento.")
    correct = sum(
        1
        for index, question in enumerate(questions)
        if answers.get(str(index)) == question["correct_answer_index"]
    )
    score = _round_half_up(correct * 100 / len(questions))
    return score, score >= PASSING_SCORE


def completion_rate(total_assigned: int, total_completed: int) -> int:
    if total_assigned == 0:
        return 0
    return _round_half_up(total_completed * 100 / total_assigned)


# --- Trainings ---

def get_training(db: Session, training_id: int) -> Training:
    training = db.get(Training, training_id)
    if not training:
        raise NotFoundError("Treinamento não encontrado.")
    return training


def list_trainings(db: Session) -> List[Training]:
    return db.query(Training).order_by(Training.created_at, Training.id).all()


def _check_prerequisites(db: Session, prerequisite_ids: List[int], training_id: int = None):
    if training_id is not None and training_id in prerequisite_ids:
        raise ValidationFailedError("Um treinamento não pode ser pré-requisito de si mesmo.")
    if not prerequisite_ids:
        return
    found = db.query(Training.id).filter(Training.id.in_(prerequisite_ids)).count()
    if found != len(prerequisite_ids):
        raise ValidationFailedError("Pré-requisito não encontrado.")


def _apply(training: Training, data: TrainingCreate):
    training.title = data.title.strip()
    training.description = data.description.strip()
    training.category = data.category.strip()
    training.youtube_url = data.youtube_url
    training.pdf_url = data.pdf_url
    training.quiz = [q.model_dump() for q in data.questions] or None
    training.prerequisite_ids = data.prerequisite_ids


def create_training(db: Session, data: TrainingCreate) -> Training:
    _check_prerequisites(db, data.prerequisite_ids)
    training = Training()
    _apply(training, data)
    db.add(training)
    commit_or_fail(db, "Erro ao salvar treinamento.")
    db.refresh(training)
    logger.info(f"Training {training.id} created")
    return training


def update_training(db: Session, training_id: int, data: TrainingCreate) -> Training:
    """Quiz attempts already graded keep their score."""
    training = get_training(db, training_id)
    _check_prerequisites(db, data.prerequisite_ids, training_id=training.id)
    _apply(training, data)
    commit_or_fail(db, "Erro ao salvar treinamento.")
    db.refresh(training)
    return training


def delete_training(db: Session, actor: AuthContext, training_id: int):
    """Assignments go with the training; playlists and prerequisites stop referencing it."""
    training = get_training(db, training_id)

    for playlist in db.query(TrainingPlaylist).all():
        if training.id in (playlist.training_ids or []):
            playlist.training_ids = [tid for tid in playlist.training_ids if tid != training.id]
    for other in db.query(Training).filter(Training.id != training.id).all():
        if training.id in (other.prerequisite_ids or []):
            other.prerequisite_ids = [tid for tid in other.prerequisite_ids if tid != training.id]

    AuditService.log(
        db, actor,
        action="training_deleted",
        entity_type="training",
        entity_id=training.id,
        details={"title": training.title, "assignments": len(training.assignments)},
    )
    db.delete(training)
    commit_or_fail(db, "Erro ao excluir treinamento.")


# --- Assignments ---

def _users(db: Session, user_ids: List[int]) -> List[User]:
    unique_ids = list(dict.fromkeys(user_ids))
    users = db.query(User).filter(User.id.in_(unique_ids)).all()
    if len(users) != len(unique_ids):
        raise ValidationFailedError("Dados inválidos para atribuição.")
    return users


def _assign(db: Session, users: List[User], trainings: List[Training]) -> Tuple[int, int]:
    """Creates the missing (user, training) pairs. The caller commits."""
    existing = {
        (user_id, training_id)
        for user_id, training_id in db.query(UserTraining.user_id, UserTraining.training_id).filter(
            UserTraining.user_id.in_([u.id for u in users]),
            UserTraining.training_id.in_([t.id for t in trainings]),
        )
    }
    created = skipped = 0
    for user in users:
        for training in trainings:
            if (user.id, training.id) in existing:
                skipped += 1
                continue
            db.add(UserTraining(
                user_id=user.id,
                training_id=training.id,
                completed=False,
                quiz_status=QuizStatus.NOT_STARTED.value,
            ))
            NotificationService.notify_user(
                db, user.id,
                "Novo treinamento",
                f"Você recebeu o treinamento \"{training.title}\".",
            )
            created += 1
    return created, skipped


def assign_training(db: Session, training_id: int, user_ids: List[int]) -> Dict[str, int]:
    training = get_training(db, training_id)
    users = _users(db, user_ids)
    created, skipped = _assign(db, users, [training])
    commit_or_fail(db, "Erro ao atribuir treinamentos.")
    logger.info(f"Training {training_id} assigned", extra={"created_count": created, "skipped_count": skipped})
    return {"created_count": created, "skipped_count": skipped}


def get_assignment(db: Session, assignment_id: int) -> UserTraining:
    assignment = db.get(UserTraining, assignment_id)
    if not assignment:
        raise NotFoundError("Atribuição de treinamento não encontrada.")
    return assignment


def _ensure_owner_or_admin(actor: AuthContext, assignment: UserTraining):
    if not actor.is_admin and assignment.user_id != actor.user_id:
        raise AccessDeniedError("Este treinamento não está atribuído a você.")


def my_trainings(db: Session, actor: AuthContext) -> List[dict]:
    assignments = (
        db.query(UserTraining)
        .filter(UserTraining.user_id == actor.user_id)
        .order_by(UserTraining.assigned_at, UserTraining.id)
        .all()
    )
    return [
        {
            "assignment_id": a.id,
            "training_id": a.training.id,
            "title": a.training.title,
            "description": a.training.description,
            "category": a.training.category,
            "youtube_url": a.training.youtube_url,
            "pdf_url": a.training.pdf_url,
            "has_quiz": a.training.has_quiz,
            "completed": a.completed,
            "quiz_status": a.quiz_status,
            "quiz_score": a.quiz_score,
        }
        for a in assignments
    ]


def assigned_users(db: Session, training_id: int) -> List[dict]:
    get_training(db, training_id)
    rows = (
        db.query(UserTraining, User)
        .join(User, User.id == UserTraining.user_id)
        .filter(UserTraining.training_id == training_id)
        .order_by(User.name)
        .all()
    )
    return [
        {
            "assignment_id": assignment.id,
            "user_id": user.id,
            "name": user.name,
            "email": user.email,
            "completed": assignment.completed,
            "quiz_status": assignment.quiz_status or QuizStatus.NOT_STARTED.value,
            "quiz_score": assignment.quiz_score,
        }
        for assignment, user in rows
    ]


def quiz_view(db: Session, actor: AuthContext, assignment_id: int) -> dict:
    """The quiz without its answer key."""
    assignment = get_assignment(db, assignment_id)
    _ensure_owner_or_admin(actor, assignment)
    training = assignment.training
    if not training.has_quiz:
        raise NotFoundError("Quiz não encontrado para este treinamento.")
    return {
        "assignment_id": assignment.id,
        "training_id": training.id,
        "title": training.title,
        "questions": [
            {"question_text": q["question_text"], "options": q["options"]} for q in training.quiz
        ],
        "quiz_status": assignment.quiz_status,
        "quiz_score": assignment.quiz_score,
    }


def submit_quiz(db: Session, actor: AuthContext, assignment_id: int, answers: Mapping[str, int]) -> dict:
    assignment = get_assignment(db, assignment_id)
    if assignment.user_id != actor.user_id:
        raise AccessDeniedError("Apenas o participante pode responder o quiz.")
    if assignment.quiz_status != QuizStatus.NOT_STARTED.value:
        raise ConflictError("Quiz já respondido. Solicite ao RH uma nova tentativa.")

    score, passed = grade_quiz(assignment.training.quiz or [], answers)
    assignment.quiz_score = score
    assignment.quiz_status = (QuizStatus.PASSED if passed else QuizStatus.FAILED).value
    assignment.completed = passed

    AuditService.log(
        db, actor,
        action="quiz_submitted",
        entity_type="user_training",
        entity_id=assignment.id,
        details={"training_id": assignment.training_id, "score": score, "passed": passed},
    )
    commit_or_fail(db, "Erro ao enviar resultado do quiz.")
    logger.info(f"Quiz graded for assignment {assignment.id}: {score}")
    return {"success": True, "message": "Quiz enviado com sucesso!", "score": score, "passed": passed}


def reset_quiz_attempt(db: Session, actor: AuthContext, assignment_id: int) -> UserTraining:
    access.require_admin(actor)
    assignment = get_assignment(db, assignment_id)
    before = {
        "completed": assignment.completed,
        "quiz_status": assignment.quiz_status,
        "quiz_score": assignment.quiz_score,
    }
    assignment.completed = False
    assignment.quiz_status = QuizStatus.NOT_STARTED.value
    assignment.quiz_score = None

    AuditService.log(
        db, actor,
        action="quiz_attempt_reset",
        entity_type="user_training",
        entity_id=assignment.id,
        details={"user_id": assignment.user_id, "training_id": assignment.training_id},
        before_state=before,
    )
    commit_or_fail(db, "Erro ao reiniciar tentativa.")
    return assignment


def update_training_status(db: Session, actor: AuthContext, assignment_id: int, completed: bool) -> UserTraining:
    """
    Trainings without a quiz are completed by hand. When there is a quiz,
    only HR may override the result.
    """
    assignment = get_assignment(db, assignment_id)
    _ensure_owner_or_admin(actor, assignment)
    if (
        not actor.is_admin
        and assignment.training.has_quiz
        and completed != (assignment.quiz_status == QuizStatus.PASSED.value)
    ):
        raise ConflictError("A conclusão deste treinamento depende do quiz.")

    assignment.completed = completed
    commit_or_fail(db, "Erro ao atualizar status.")
    return assignment


def remove_assignment(db: Session, actor: AuthContext, assignment_id: int):
    access.require_admin(actor)
    assignment = get_assignment(db, assignment_id)
    AuditService.log(
        db, actor,
        action="training_assignment_removed",
        entity_type="user_training",
        entity_id=assignment.id,
        details={"user_id": assignment.user_id, "training_id": assignment.training_id},
    )
    db.delete(assignment)
    commit_or_fail(db, "Erro ao remover usuário do treinamento.")


def progress_summary(db: Session, actor: AuthContext) -> dict:
    """Assigned vs completed trainings: own for collaborators, team for managers, company for HR."""
    query = db.query(UserTraining)
    if actor.is_collaborator:
        query = query.filter(UserTraining.user_id == actor.user_id)
    elif actor.is_manager:
        team_ids = [u.id for u in team_for_manager(db, actor.user_id)]
        if not team_ids:
            return {"total_assigned": 0, "total_completed": 0, "completion_rate": 0}
        query = query.filter(UserTraining.user_id.in_(team_ids))

    total_assigned = query.count()
    total_completed = query.filter(UserTraining.completed.is_(True)).count()
    return {
        "total_assigned": total_assigned,
        "total_completed": total_completed,
        "completion_rate": completion_rate(total_assigned, total_completed),
    }


# --- Playlists ---

def get_playlist(db: Session, playlist_id: int) -> TrainingPlaylist:
    playlist = db.get(TrainingPlaylist, playlist_id)
    if not playlist:
        raise NotFoundError("Playlist não encontrada.")
    return playlist


def _playlist_trainings(db: Session, training_ids: List[int]) -> List[Training]:
    """Trainings in playlist order, skipping any that no longer exist."""
    if not training_ids:
        return []
    by_id = {t.id: t for t in db.query(Training).filter(Training.id.in_(training_ids))}
    return [by_id[tid] for tid in training_ids if tid in by_id]


def _playlist_to_dict(db: Session, playlist: TrainingPlaylist) -> dict:
    return {
        "id": playlist.id,
        "name": playlist.name,
        "description": playlist.description or "",
        "training_ids": playlist.training_ids or [],
        "trainings": [TrainingResponse.model_validate(t) for t in _playlist_trainings(db, playlist.training_ids or [])],
        "created_at": playlist.created_at,
    }


def list_playlists(db: Session) -> List[dict]:
    playlists = db.query(TrainingPlaylist).order_by(TrainingPlaylist.created_at, TrainingPlaylist.id).all()
    return [_playlist_to_dict(db, p) for p in playlists]


def _check_trainings_exist(db: Session, training_ids: List[int]):
    found = db.query(Training.id).filter(Training.id.in_(training_ids)).count()
    if found != len(training_ids):
        raise ValidationFailedError("Treinamento não encontrado.")


def create_playlist(db: Session, data: PlaylistCreate) -> dict:
    _check_trainings_exist(db, data.training_ids)
    playlist = TrainingPlaylist(
        name=data.name.strip(),
        description=data.description.strip(),
        training_ids=data.training_ids,
    )
    db.add(playlist)
    commit_or_fail(db, "Erro ao salvar playlist.")
    db.refresh(playlist)
    return _playlist_to_dict(db, playlist)


def update_playlist(db: Session, playlist_id: int, data: PlaylistCreate) -> dict:
    playlist = get_playlist(db, playlist_id)
    _check_trainings_exist(db, data.training_ids)
    playlist.name = data.name.strip()
    playlist.description = data.description.strip()
    playlist.training_ids = data.training_ids
    commit_or_fail(db, "Erro ao salvar playlist.")
    db.refresh(playlist)
    return _playlist_to_dict(db, playlist)


def delete_playlist(db: Session, playlist_id: int):
    """Assignments made through the playlist stay."""
    playlist = get_playlist(db, playlist_id)
    db.delete(playlist)
    commit_or_fail(db, "Erro ao excluir playlist.")


def assign_playlist(db: Session, playlist_id: int, user_ids: List[int]) -> Dict[str, int]:
    """Assigns every training of the playlist; pairs that already exist are skipped."""
    playlist = get_playlist(db, playlist_id)
    users = _users(db, user_ids)
    trainings = _playlist_trainings(db, playlist.training_ids or [])
    if not trainings:
        return {"created_count": 0, "skipped_count": 0}

    created, skipped = _assign(db, users, trainings)
    commit_or_fail(db, "Erro ao atribuir a playlist.")
    logger.info(f"Playlist {playlist_id} assigned", extra={"created_count": created, "skipped_count": skipped})
    return {"created_count": created, "skipped_count": skipped}
