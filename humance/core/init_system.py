import logging
from humance.core.config import settings
from humance.services import auth as auth_service
from humance.database import SessionLocal
from humance.models.user import User, UserRole
from humance.services import bonus_service

logger = logging.getLogger(__name__)


def init_system_data():
    """
    First-start bootstrap.
    Creates an administrator when the users table is empty and a bootstrap
    password is configured, and seeds the default bonus tables.
    """
    db = SessionLocal()
    try:
        user_count = db.query(User).count()
        if user_count == 0 and settings.bootstrap_admin_password:
            logger.info("Running startup initialization...")
            admin_user = User(
                name="Administrador",
                email=settings.bootstrap_admin_email.lower(),
                hashed_password=auth_service.get_password_hash(settings.bootstrap_admin_password),
                role=UserRole.ADMIN,
                is_active=True,
            )
            db.add(admin_user)
            db.commit()
            logger.info(f"Created bootstrap administrator: {admin_user.email}")
        elif user_count == 0:
            logger.warning("No users found and BOOTSTRAP_ADMIN_PASSWORD is not set; skipping admin bootstrap.")
        else:
            logger.info(f"System initialization check: {user_count} user(s) found.")

        bonus_service.get_bonus_parameters(db)
        bonus_service.get_kpi_bonus_parameters(db)
    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
    finally:
        db.close()
