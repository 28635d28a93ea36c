"""SQLAlchemy models for the relational metadata store."""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    username: Mapped[str] = mapped_column(String(100), unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    github_profile: Mapped["GithubProfileModel | None"] = relationship(
        back_populates="user", uselist=False, lazy="joined"
    )
    github_token: Mapped["GithubTokenModel | None"] = relationship(
        back_populates="user", uselist=False, lazy="joined"
    )


class GithubProfileModel(Base):
    __tablename__ = "github_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True)
    login: Mapped[str] = mapped_column(String(100), index=True)
    avatar_url: Mapped[str] = mapped_column(String(500), default="")

    user: Mapped[UserModel] = relationship(back_populates="github_profile")


class GithubTokenModel(Base):
    __tablename__ = "github_tokens"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True)
    access_token: Mapped[str] = mapped_column(String(255))

    user: Mapped[UserModel] = relationship(back_populates="github_token")


class RepositoryModel(Base):
    __tablename__ = "repositories"
    # The same GitHub repository is linked once per profile that synced it
    __table_args__ = (UniqueConstraint("github_profile_id", "full_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    github_id: Mapped[int] = mapped_column(Integer, index=True)
    name: Mapped[str] = mapped_column(String(255))
    full_name: Mapped[str] = mapped_column(String(255), index=True)
    github_profile_id: Mapped[str] = mapped_column(ForeignKey("github_profiles.id"), index=True)

    private: Mapped[bool] = mapped_column(Boolean, default=False)
    default_branch: Mapped[str] = mapped_column(String(255), default="main")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    homepage: Mapped[str | None] = mapped_column(String(500), nullable=True)
    language: Mapped[str | None] = mapped_column(String(100), nullable=True)
    visibility: Mapped[str] = mapped_column(String(20), default="public")
    size: Mapped[int] = mapped_column(Integer, default=0)
    has_issues: Mapped[bool] = mapped_column(Boolean, default=True)
    has_projects: Mapped[bool] = mapped_column(Boolean, default=True)
    has_wiki: Mapped[bool] = mapped_column(Boolean, default=True)
    archived: Mapped[bool] = mapped_column(Boolean, default=False)
    disabled: Mapped[bool] = mapped_column(Boolean, default=False)
    fork: Mapped[bool] = mapped_column(Boolean, default=False)
    html_url: Mapped[str] = mapped_column(String(500), default="")
    git_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    ssh_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    clone_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Denormalized counters
    stargazers_count: Mapped[int] = mapped_column(Integer, default=0)
    watchers_count: Mapped[int] = mapped_column(Integer, default=0)
    forks_count: Mapped[int] = mapped_column(Integer, default=0)
    open_issues_count: Mapped[int] = mapped_column(Integer, default=0)

    technologies: Mapped[list[str]] = mapped_column(JSON, default=list)
    migration_status: Mapped[str] = mapped_column(String(20), default="PENDING")
    migration_eligible: Mapped[bool] = mapped_column(Boolean, default=True)
    total_files: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_synced: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    github_profile: Mapped[GithubProfileModel] = relationship(lazy="joined")


class MigrationJobModel(Base):
    __tablename__ = "migration_jobs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    repository_id: Mapped[int] = mapped_column(ForeignKey("repositories.id"), index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    type: Mapped[str] = mapped_column(String(100))
    source_version: Mapped[str] = mapped_column(String(100))
    target_version: Mapped[str] = mapped_column(String(100))
    status: Mapped[str] = mapped_column(String(20), default="PENDING")
    progress: Mapped[int] = mapped_column(Integer, default=0)
    files_changed: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
