from dataclasses import dataclass


@dataclass(frozen=True)
class GitHubProfile:
    github_user_id: int
    username: str
    profile_url: str
    avatar_url: str
