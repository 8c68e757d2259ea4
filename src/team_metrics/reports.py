from __future__ import annotations

import functools
from collections.abc import Mapping

from .bars import bars
from .cancel import CancelToken
from .config import ConfluenceConfig, GithubConfig, JiraConfig, Settings, SlackConfig
from .counts import count, group_by
from .pipeline import Report
from .progress import Writer
from .providers import ConfluenceClient, GithubClient, JiraClient, SlackClient
from .providers.confluence import creator_name
from .providers.github import login_of
from .providers.jira import assignee_name, author_name
from .providers.slack import user_of


def write_section(w: Writer, title: str, counts: Mapping[str, int]) -> None:
    w.write(f"{title}:\n{bars(counts)}\n")


def run_github(cfg: GithubConfig, w: Writer, cancel: CancelToken) -> None:
    gh = GithubClient(cfg.token, api_url=cfg.api_url)

    prs = gh.open_prs(cancel, cfg.owner, cfg.repo)
    write_section(w, "Open PRs", count(group_by(prs, login_of)))

    prs = gh.closed_prs(cancel, cfg.owner, cfg.repo)
    write_section(w, "Closed PRs", count(group_by(prs, login_of)))

    numbers = [int(pr.get("number") or 0) for pr in prs]

    reviews = gh.pr_reviews(cancel, cfg.owner, cfg.repo, numbers)
    write_section(w, "PR Reviews", count(group_by(reviews, login_of)))

    comments = gh.pr_comments(cancel, cfg.owner, cfg.repo, numbers)
    write_section(w, "PR Comments", count(group_by(comments, login_of)))


def run_jira(cfg: JiraConfig, w: Writer, cancel: CancelToken) -> None:
    j = JiraClient(cfg.url, cfg.user, cfg.token)

    issues = j.issues(cancel, cfg.query)
    write_section(w, "JIRA Issues", count(group_by(issues, assignee_name)))

    keys = [str(issue.get("key") or "") for issue in issues]
    comments = j.issue_comments(cancel, keys)
    write_section(w, "JIRA Comments", count(group_by(comments, author_name)))


def run_confluence(cfg: ConfluenceConfig, w: Writer, cancel: CancelToken) -> None:
    c = ConfluenceClient(cfg.url, cfg.user, cfg.token)

    space_pages = c.space_pages(cancel, cfg.space)
    ids = [str(page.get("id") or "") for page in space_pages]

    pages = c.pages(cancel, cfg.space, ids)
    write_section(w, "Confluence Pages", count(group_by(pages, creator_name)))


def run_slack(cfg: SlackConfig, w: Writer, cancel: CancelToken) -> None:
    c = SlackClient(cfg.token, api_url=cfg.api_url)

    messages = c.messages(cancel, cfg.query)
    write_section(w, "Slack Messages", count(group_by(messages, user_of)))


def build_reports(settings: Settings) -> dict[str, Report]:
    return {
        "github": functools.partial(run_github, settings.github),
        "jira": functools.partial(run_jira, settings.jira),
        "confluence": functools.partial(run_confluence, settings.confluence),
        "slack": functools.partial(run_slack, settings.slack),
    }
