from __future__ import annotations

import dataclasses
import sys
from collections.abc import Mapping
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError


def load_env_file(path: Path) -> bool:
    """Load `path` into os.environ without overriding set variables; warn when it is missing."""
    if not path.is_file():
        print(f"Warning: env file not found: {path}", file=sys.stderr)
        return False
    return bool(load_dotenv(dotenv_path=path, override=False))


def parse_modes(raw: str) -> list[str]:
    modes = [m.strip() for m in str(raw or "").split(",")]
    modes = [m for m in modes if m]
    if not modes:
        raise ConfigError("MODE is not set (expected a comma-separated list of providers)")
    return modes


@dataclasses.dataclass(frozen=True)
class GithubConfig:
    token: str = ""
    owner: str = ""
    repo: str = ""
    api_url: str = ""


@dataclasses.dataclass(frozen=True)
class JiraConfig:
    url: str = ""
    user: str = ""
    token: str = ""
    query: str = ""


@dataclasses.dataclass(frozen=True)
class ConfluenceConfig:
    url: str = ""
    user: str = ""
    token: str = ""
    space: str = ""


@dataclasses.dataclass(frozen=True)
class SlackConfig:
    token: str = ""
    query: str = ""
    api_url: str = ""


@dataclasses.dataclass(frozen=True)
class Settings:
    mode: str = ""
    github: GithubConfig = GithubConfig()
    jira: JiraConfig = JiraConfig()
    confluence: ConfluenceConfig = ConfluenceConfig()
    slack: SlackConfig = SlackConfig()


def load_settings(env: Mapping[str, str]) -> Settings:
    def get(key: str) -> str:
        return str(env.get(key, "") or "").strip()

    return Settings(
        mode=get("MODE"),
        github=GithubConfig(
            token=get("GITHUB_TOKEN"),
            owner=get("GITHUB_OWNER"),
            repo=get("GITHUB_REPO"),
            api_url=get("GITHUB_API_URL"),
        ),
        jira=JiraConfig(
            url=get("JIRA_URL"),
            user=get("JIRA_USER"),
            token=get("JIRA_TOKEN"),
            query=get("JIRA_QUERY"),
        ),
        confluence=ConfluenceConfig(
            url=get("CONFLUENCE_URL"),
            user=get("CONFLUENCE_USER"),
            token=get("CONFLUENCE_TOKEN"),
            space=get("CONFLUENCE_SPACE"),
        ),
        slack=SlackConfig(
            token=get("SLACK_TOKEN"),
            query=get("SLACK_QUERY"),
            api_url=get("SLACK_API_URL"),
        ),
    )
