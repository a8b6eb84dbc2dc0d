from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from humance.core.schemas import ActionResponse
from humance.database import get_db
from humance.routers.auth_deps import get_auth_context, require_admin
from humance.schemas.auth import AuthContext
from humance.schemas.training import (
    AssignedUser, AssignmentResult, MyTraining, PlaylistAssignmentRequest, PlaylistCreate,
    PlaylistResponse, QuizResult, QuizSubmission, QuizView, TrainingAssignmentRequest,
    TrainingCreate, TrainingProgressSummary, TrainingResponse, TrainingStatusUpdate
)
from humance.services import training_service

router = APIRouter(prefix="/trainings", tags=["trainings"])


@router.get("/", response_model=List[TrainingResponse])
def list_trainings(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return training_service.list_trainings(db)


@router.post("/", response_model=ActionResponse[TrainingResponse], status_code=201)
def create_training(
    data: TrainingCreate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    training = training_service.create_training(db, data)
    return ActionResponse.ok("Treinamento criado com sucesso!", TrainingResponse.model_validate(training))


@router.get("/mine", response_model=List[MyTraining])
def my_trainings(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    return training_service.my_trainings(db, actor)


@router.get("/progress", response_model=TrainingProgressSummary)
def training_progress(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    return training_service.progress_summary(db, actor)


@router.post("/assign", response_model=ActionResponse[AssignmentResult])
def assign_training(
    request: TrainingAssignmentRequest,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    result = training_service.assign_training(db, request.training_id, request.user_ids)
    return ActionResponse.ok(
        f"{result['created_count']} novas atribuições de treinamento realizadas com sucesso!",
        AssignmentResult(**result),
    )


# --- Playlists ---

@router.get("/playlists", response_model=List[PlaylistResponse])
def list_playlists(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return training_service.list_playlists(db)


@router.post("/playlists", response_model=ActionResponse[PlaylistResponse], status_code=201)
def create_playlist(
    data: PlaylistCreate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    playlist = training_service.create_playlist(db, data)
    return ActionResponse.ok("Playlist criada com sucesso!", PlaylistResponse(**playlist))


@router.post("/playlists/assign", response_model=ActionResponse[AssignmentResult])
def assign_playlist(
    request: PlaylistAssignmentRequest,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    result = training_service.assign_playlist(db, request.playlist_id, request.user_ids)
    if result["created_count"] == 0 and result["skipped_count"] == 0:
        return ActionResponse.ok("A playlist está vazia. Nenhum treinamento atribuído.", AssignmentResult(**result))
    return ActionResponse.ok(
        f"{result['created_count']} novas atribuições de treinamento realizadas com sucesso!",
        AssignmentResult(**result),
    )


@router.put("/playlists/{playlist_id}", response_model=ActionResponse[PlaylistResponse])
def update_playlist(
    playlist_id: int,
    data: PlaylistCreate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    playlist = training_service.update_playlist(db, playlist_id, data)
    return ActionResponse.ok("Playlist atualizada com sucesso!", PlaylistResponse(**playlist))


@router.delete("/playlists/{playlist_id}", response_model=ActionResponse)
def delete_playlist(
    playlist_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    training_service.delete_playlist(db, playlist_id)
    return ActionResponse.ok("Playlist excluída com sucesso!")


# --- Assignments ---

@router.get("/assignments/{assignment_id}/quiz", response_model=QuizView)
def get_quiz(
    assignment_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    return training_service.quiz_view(db, actor, assignment_id)


@router.post("/assignments/{assignment_id}/quiz", response_model=QuizResult)
def submit_quiz(
    assignment_id: int,
    submission: QuizSubmission,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    return training_service.submit_quiz(db, actor, assignment_id, submission.answers)


@router.post("/assignments/{assignment_id}/reset", response_model=ActionResponse)
def reset_quiz_attempt(
    assignment_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    training_service.reset_quiz_attempt(db, actor, assignment_id)
    return ActionResponse.ok("Tentativa do quiz reiniciada com sucesso!")


@router.patch("/assignments/{assignment_id}", response_model=ActionResponse)
def update_training_status(
    assignment_id: int,
    update: TrainingStatusUpdate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context),
):
    training_service.update_training_status(db, actor, assignment_id, update.completed)
    return ActionResponse.ok("Status do treinamento atualizado!")


@router.delete("/assignments/{assignment_id}", response_model=ActionResponse)
def remove_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    training_service.remove_assignment(db, actor, assignment_id)
    return ActionResponse.ok("Usuário removido do treinamento com sucesso.")


# --- Single training ---

@router.get("/{training_id}/assignments", response_model=List[AssignedUser])
def list_assigned_users(
    training_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return training_service.assigned_users(db, training_id)


@router.get("/{training_id}", response_model=TrainingResponse)
def get_training(
    training_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    return training_service.get_training(db, training_id)


@router.put("/{training_id}", response_model=ActionResponse[TrainingResponse])
def update_training(
    training_id: int,
    data: TrainingCreate,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    training = training_service.update_training(db, training_id, data)
    return ActionResponse.ok("Treinamento atualizado com sucesso!", TrainingResponse.model_validate(training))


@router.delete("/{training_id}", response_model=ActionResponse)
def delete_training(
    training_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(require_admin()),
):
    training_service.delete_training(db, actor, training_id)
    return ActionResponse.ok("Treinamento excluído com sucesso!")
