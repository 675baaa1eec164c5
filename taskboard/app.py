"""Application wiring: settings, storage and services"""

from typing import Optional

from .auth.service import AuthService
from .auth.tokens import TokenService
from .services.task_service import TaskService
from .services.task_store import TaskStore
from .services.user_store import UserStore
from .storage import Database, open_database
from .utils.config import Settings, load_settings
from .utils.logger import get_logger, setup_logger

logger = get_logger(__name__)


class TaskboardApp:
    """Holds the configured store and the services built on it"""

    def __init__(self, settings: Optional[Settings] = None, database: Optional[Database] = None):
        self.settings = settings
        self.database = database
        self.user_store: Optional[UserStore] = None
        self.task_store: Optional[TaskStore] = None
        self.tokens: Optional[TokenService] = None
        self.auth_service: Optional[AuthService] = None
        self.task_service: Optional[TaskService] = None

    def initialize(self, configure_logging: bool = True) -> "TaskboardApp":
        """Load configuration (unless given), set up logging and build services."""
        if self.settings is None:
            self.settings = load_settings()
        settings = self.settings

        if configure_logging:
            setup_logger(
                log_level=settings.logging.level,
                log_format=settings.logging.format,
                file_path=settings.logging.file_path,
                max_bytes=settings.logging.max_bytes,
                backup_count=settings.logging.backup_count,
            )

        if self.database is None:
            self.database = open_database(settings.storage)

        self.user_store = UserStore(self.database)
        self.task_store = TaskStore(self.database)
        self.tokens = TokenService(
            settings.auth.secret_key,
            ttl_seconds=settings.auth.token_ttl_days * 24 * 60 * 60,
        )
        self.auth_service = AuthService(
            self.user_store, self.tokens, bcrypt_rounds=settings.auth.bcrypt_rounds
        )
        self.task_service = TaskService(self.task_store)

        logger.info(
            "Taskboard initialized",
            app_name=settings.app.name,
            version=settings.app.version,
            environment=settings.app.environment,
            storage=self.database.backend,
        )
        return self

    def shutdown(self) -> None:
        if self.database is not None:
            self.database.close()
            logger.info("Storage closed")
