"""User domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserEntity:
    """An authenticated user and the GitHub credentials linked to them.

    Attributes:
        id: Application user id (the JWT ``sub`` claim)
        email: Primary email
        username: Display username
        github_profile_id: Linked GitHub profile row id, if any
        github_login: GitHub login of the linked profile
        github_avatar_url: Avatar of the linked profile
        github_token: OAuth access token used for GitHub API calls
    """

    id: str
    email: str
    username: str
    github_profile_id: str | None = None
    github_login: str | None = None
    github_avatar_url: str | None = None
    github_token: str | None = None

    @property
    def has_github_profile(self) -> bool:
        return self.github_profile_id is not None
