"""
Bonus tier tables, stored as configuration documents.

Both tables are seeded with the company defaults the first time they are
read. A read that fails at the store level serves the defaults instead so
reports keep working.
"""
import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from humance.models.bonus_parameters import ConfigDocument, KPI_BONUS_KEY, PERFORMANCE_BONUS_KEY
from humance.schemas.auth import AuthContext
from humance.schemas.bonus import BonusParameters, KpiBonusParameters
from humance.services.audit import AuditService
from humance.services.base import commit_or_fail
from humance.services.scoring import BonusRule, KpiBonusRule

logger = logging.getLogger(__name__)

DEFAULT_BONUS_PARAMETERS = {
    "rules": [
        {"min_score": 0, "max_score": 3.99, "bonus_percentage": 0},
        {"min_score": 4, "max_score": 6.99, "bonus_percentage": 50},
        {"min_score": 7, "max_score": 10, "bonus_percentage": 100},
    ]
}

DEFAULT_KPI_BONUS_PARAMETERS = {
    "rules": [
        {"min_score": 0, "max_score": 4.99, "bonus_value_leader": 0, "bonus_value_led": 0},
        {"min_score": 5, "max_score": 7.99, "bonus_value_leader": 250, "bonus_value_led": 150},
        {"min_score": 8, "max_score": 10, "bonus_value_leader": 500, "bonus_value_led": 300},
    ]
}


def _load_or_seed(db: Session, key: str, defaults: dict) -> dict:
    try:
        document = db.get(ConfigDocument, key)
        if document is None:
            document = ConfigDocument(key=key, data=defaults)
            db.add(document)
            db.commit()
            logger.info(f"Seeded default configuration '{key}'")
        return document.data
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Could not load configuration '{key}', serving defaults")
        return defaults


def _save(db: Session, actor: AuthContext, key: str, data: dict):
    document = db.get(ConfigDocument, key)
    before = document.data if document else None
    if document is None:
        db.add(ConfigDocument(key=key, data=data))
    else:
        document.data = data

    AuditService.log(
        db, actor,
        action="bonus_parameters_updated",
        entity_type="config",
        entity_id=None,
        details={"key": key},
        before_state=before,
        after_state=data,
    )
    commit_or_fail(db, "Erro ao salvar parâmetros de bônus.")


def get_bonus_parameters(db: Session) -> BonusParameters:
    return BonusParameters.model_validate(_load_or_seed(db, PERFORMANCE_BONUS_KEY, DEFAULT_BONUS_PARAMETERS))


def update_bonus_parameters(db: Session, actor: AuthContext, params: BonusParameters) -> BonusParameters:
    _save(db, actor, PERFORMANCE_BONUS_KEY, params.model_dump(mode="json"))
    return params


def get_kpi_bonus_parameters(db: Session) -> KpiBonusParameters:
    return KpiBonusParameters.model_validate(_load_or_seed(db, KPI_BONUS_KEY, DEFAULT_KPI_BONUS_PARAMETERS))


def update_kpi_bonus_parameters(db: Session, actor: AuthContext, params: KpiBonusParameters) -> KpiBonusParameters:
    _save(db, actor, KPI_BONUS_KEY, params.model_dump(mode="json"))
    return params


def performance_rules(db: Session) -> List[BonusRule]:
    return [BonusRule(**rule.model_dump()) for rule in get_bonus_parameters(db).rules]


def kpi_rules(db: Session) -> List[KpiBonusRule]:
    return [KpiBonusRule(**rule.model_dump()) for rule in get_kpi_bonus_parameters(db).rules]
