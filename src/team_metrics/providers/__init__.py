from __future__ import annotations

from .confluence import ConfluenceClient
from .github import GithubClient
from .jira import JiraClient
from .slack import SlackClient

__all__ = ["ConfluenceClient", "GithubClient", "JiraClient", "SlackClient"]
