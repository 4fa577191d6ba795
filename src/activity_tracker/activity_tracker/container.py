from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Collection

from .activities.mysql_activity_repository import MySQLActivityRepository
from .activities.repository import ActivityRepository
from .activities.service import ActivityService
from .artifacts.store import ArtifactStore, LocalArtifactStore
from .core.constants import DEFAULT_CERTIFICATE_EXTENSIONS
from .database.connection import DatabaseConnection, DBConfig
from .reports.service import ActivityReportService
from .scope.resolver import ScopeResolver
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    activities_repo: ActivityRepository
    artifacts: ArtifactStore
    scope: ScopeResolver

    auth_service: AuthService
    user_service: UserService
    activity_service: ActivityService
    report_service: ActivityReportService


def build_services(
    *,
    users_repo: UserRepository,
    activities_repo: ActivityRepository,
    artifacts: ArtifactStore,
    allowed_extensions: Collection[str] = DEFAULT_CERTIFICATE_EXTENSIONS,
) -> Container:
    scope = ScopeResolver(users_repo)
    return Container(
        users_repo=users_repo,
        activities_repo=activities_repo,
        artifacts=artifacts,
        scope=scope,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, activities_repo, scope),
        activity_service=ActivityService(
            activities_repo,
            users_repo,
            artifacts,
            scope,
            allowed_extensions=allowed_extensions,
        ),
        report_service=ActivityReportService(activities_repo, scope),
    )


def build_container(
    *,
    db_config: dict,
    upload_dir: str | Path,
    allowed_extensions: Collection[str] = DEFAULT_CERTIFICATE_EXTENSIONS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        users_repo=MySQLUserRepository(conn),
        activities_repo=MySQLActivityRepository(conn),
        artifacts=LocalArtifactStore(upload_dir),
        allowed_extensions=allowed_extensions,
    )
