from src.config import settings
from src.infra.database import DatabaseManager
from src.infra.email_sender import EmailSender
from src.services.auth_service.auth import AuthService
from src.services.auth_service.repository import RoleRepository, UserRepository
from src.services.auth_service.service import UserService


def get_database() -> DatabaseManager:
    return DatabaseManager()


def get_user_repository() -> UserRepository:
    return UserRepository(get_database())


def get_role_repository() -> RoleRepository:
    return RoleRepository(get_database())


def get_user_service() -> UserService:
    return UserService(get_user_repository(), get_role_repository())


def get_email_sender() -> EmailSender:
    return EmailSender(settings.smtp)


def get_auth_service() -> AuthService:
    return AuthService(get_user_repository(), get_email_sender(), settings.auth)
