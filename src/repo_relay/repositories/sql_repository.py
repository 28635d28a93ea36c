"""SQLAlchemy implementation of MetadataStore."""

import asyncio
import logging
from dataclasses import asdict

from sqlalchemy import create_engine, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from repo_relay.config import settings
from repo_relay.entities import (
    FileChange,
    GithubProfileEntity,
    MigrationJobEntity,
    MigrationJobStatus,
    MigrationStatus,
    RemoteRepository,
    StoredRepository,
    UserEntity,
    Visibility,
    remote_to_stored,
)
from repo_relay.errors import NotFoundError
from repo_relay.repositories.sql_models import (
    Base,
    GithubProfileModel,
    GithubTokenModel,
    MigrationJobModel,
    RepositoryModel,
    UserModel,
    utcnow,
)

logger = logging.getLogger(__name__)

# Columns copied verbatim between StoredRepository and RepositoryModel
_REPOSITORY_FIELDS = (
    "github_id",
    "name",
    "full_name",
    "github_profile_id",
    "private",
    "default_branch",
    "description",
    "homepage",
    "language",
    "size",
    "has_issues",
    "has_projects",
    "has_wiki",
    "archived",
    "disabled",
    "fork",
    "html_url",
    "git_url",
    "ssh_url",
    "clone_url",
    "stargazers_count",
    "watchers_count",
    "forks_count",
    "open_issues_count",
    "technologies",
    "migration_eligible",
    "total_files",
)


def _user_to_entity(row: UserModel) -> UserEntity:
    profile = row.github_profile
    token = row.github_token
    return UserEntity(
        id=row.id,
        email=row.email,
        username=row.username,
        github_profile_id=profile.id if profile else None,
        github_login=profile.login if profile else None,
        github_avatar_url=profile.avatar_url if profile else None,
        github_token=token.access_token if token else None,
    )


def _repository_to_entity(row: RepositoryModel) -> StoredRepository:
    values = {name: getattr(row, name) for name in _REPOSITORY_FIELDS}
    values["technologies"] = list(row.technologies or [])
    return StoredRepository(
        id=row.id,
        github_profile=GithubProfileEntity(
            login=row.github_profile.login,
            avatar_url=row.github_profile.avatar_url or "",
        ),
        visibility=Visibility(row.visibility),
        migration_status=MigrationStatus(row.migration_status),
        last_synced=row.last_synced,
        created_at=row.created_at,
        updated_at=row.updated_at,
        **values,
    )


def _job_to_entity(row: MigrationJobModel) -> MigrationJobEntity:
    return MigrationJobEntity(
        id=row.id,
        repository_id=row.repository_id,
        user_id=row.user_id,
        name=row.name,
        description=row.description,
        type=row.type,
        source_version=row.source_version,
        target_version=row.target_version,
        status=MigrationJobStatus(row.status),
        progress=row.progress,
        files_changed=[FileChange(**change) for change in row.files_changed or []],
        created_at=row.created_at,
    )


class SqlMetadataRepository:
    """Relational metadata store on SQLAlchemy.

    The engine and sessions are synchronous. Every public method is a
    coroutine that runs one unit of work in a worker thread, so a slow
    query never stalls the event loop. Multi-row writes run inside a
    single transaction.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def create(cls, database_url: str | None = None, create_schema: bool = True) -> "SqlMetadataRepository":
        """Factory method to build the engine and (optionally) the schema.

        Args:
            database_url: SQLAlchemy URL. If None, uses settings.
            create_schema: Create missing tables on startup.

        Returns:
            Configured SqlMetadataRepository
        """
        url = database_url or settings.database_url
        kwargs: dict = {}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
                # One shared connection, otherwise every session sees an empty DB
                kwargs["poolclass"] = StaticPool

        engine = create_engine(url, **kwargs)
        if create_schema:
            Base.metadata.create_all(engine)
        return cls(engine)

    def _session(self) -> Session:
        return self._sessions()

    # Users

    async def get_user(self, user_id: str) -> UserEntity | None:
        def _sync() -> UserEntity | None:
            with self._session() as session:
                row = session.get(UserModel, user_id)
                return _user_to_entity(row) if row else None

        return await asyncio.to_thread(_sync)

    async def create_user(
        self,
        email: str,
        username: str,
        github_login: str | None = None,
        github_token: str | None = None,
        avatar_url: str = "",
    ) -> UserEntity:
        """Create a user with an optional linked GitHub profile and token."""

        def _sync() -> UserEntity:
            with self._sessions.begin() as session:
                user = UserModel(email=email, username=username)
                session.add(user)
                session.flush()
                if github_login:
                    session.add(GithubProfileModel(user_id=user.id, login=github_login, avatar_url=avatar_url))
                if github_token:
                    session.add(GithubTokenModel(user_id=user.id, access_token=github_token))
                user_id = user.id

            with self._session() as session:
                row = session.get(UserModel, user_id)
                if row is None:
                    raise NotFoundError("User not found")
                return _user_to_entity(row)

        return await asyncio.to_thread(_sync)

    # Repositories

    async def find_repository(self, github_profile_id: str, full_name: str) -> StoredRepository | None:
        def _sync() -> StoredRepository | None:
            with self._session() as session:
                row = session.scalars(
                    select(RepositoryModel).where(
                        RepositoryModel.github_profile_id == github_profile_id,
                        RepositoryModel.full_name == full_name,
                    )
                ).first()
                return _repository_to_entity(row) if row else None

        return await asyncio.to_thread(_sync)

    async def list_repositories(self, github_profile_id: str) -> list[StoredRepository]:
        def _sync() -> list[StoredRepository]:
            with self._session() as session:
                rows = session.scalars(
                    select(RepositoryModel)
                    .where(RepositoryModel.github_profile_id == github_profile_id)
                    .order_by(RepositoryModel.full_name)
                ).all()
                return [_repository_to_entity(row) for row in rows]

        return await asyncio.to_thread(_sync)

    async def upsert_repositories(
        self,
        github_profile_id: str,
        repositories: list[RemoteRepository],
    ) -> list[StoredRepository]:
        def _sync() -> list[StoredRepository]:
            now = utcnow()
            row_ids: list[int] = []

            with self._sessions.begin() as session:
                for remote in repositories:
                    # Rows belong to one profile; another profile's row is never touched
                    row = session.scalars(
                        select(RepositoryModel).where(
                            RepositoryModel.github_profile_id == github_profile_id,
                            RepositoryModel.github_id == remote.github_id,
                        )
                    ).first()
                    existing = _repository_to_entity(row) if row else None
                    stored = remote_to_stored(remote, github_profile_id, existing)

                    if row is None:
                        row = RepositoryModel()
                        session.add(row)

                    for name in _REPOSITORY_FIELDS:
                        setattr(row, name, getattr(stored, name))
                    row.visibility = stored.visibility.value
                    row.migration_status = stored.migration_status.value
                    row.last_synced = now
                    session.flush()
                    row_ids.append(row.id)

            with self._session() as session:
                rows = session.scalars(select(RepositoryModel).where(RepositoryModel.id.in_(row_ids))).all()
                by_id = {row.id: _repository_to_entity(row) for row in rows}
            return [by_id[row_id] for row_id in row_ids]

        stored = await asyncio.to_thread(_sync)
        logger.info("Upserted %d repositories for profile %s", len(stored), github_profile_id)
        return stored

    # Migration jobs

    async def create_migration_job(
        self,
        repository_id: int,
        user_id: str,
        name: str,
        description: str,
        type: str,
        source_version: str,
        target_version: str,
    ) -> MigrationJobEntity:
        def _sync() -> MigrationJobEntity:
            with self._sessions.begin() as session:
                repository = session.get(RepositoryModel, repository_id)
                if repository is None:
                    raise NotFoundError("Repository not found")

                job = MigrationJobModel(
                    repository_id=repository_id,
                    user_id=user_id,
                    name=name,
                    description=description,
                    type=type,
                    source_version=source_version,
                    target_version=target_version,
                    status=MigrationJobStatus.PENDING.value,
                    progress=0,
                    files_changed=[],
                )
                session.add(job)
                repository.migration_status = MigrationStatus.ANALYZING.value
                session.flush()
                return _job_to_entity(job)

        return await asyncio.to_thread(_sync)

    async def complete_migration_job(self, job_id: str, changes: list[FileChange]) -> MigrationJobEntity:
        def _sync() -> MigrationJobEntity:
            with self._sessions.begin() as session:
                job = session.get(MigrationJobModel, job_id)
                if job is None:
                    raise NotFoundError("Migration job not found")

                job.files_changed = [asdict(change) for change in changes]
                job.status = MigrationJobStatus.COMPLETED.value
                job.progress = 100
                session.flush()
                return _job_to_entity(job)

        return await asyncio.to_thread(_sync)

    async def health_check(self) -> bool:
        def _sync() -> bool:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True

        try:
            return await asyncio.to_thread(_sync)
        except SQLAlchemyError as e:
            logger.warning("Database health check failed: %s", e)
            return False

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
