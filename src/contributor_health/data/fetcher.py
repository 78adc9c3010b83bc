# src/contributor_health/data/fetcher.py

"""GitHub fetcher for contributors, profiles, issues and pull requests."""

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Iterable, List

import requests

logger = logging.getLogger(__name__)

# Placeholder login GitHub shows for deleted accounts
GHOST_LOGIN = "ghost"

PRS_QUERY = """
query($owner: String!, $repo: String!, $cursor: String) {
  repository(owner: $owner, name: $repo) {
    pullRequests(first: 100, after: $cursor, orderBy: {field: CREATED_AT, direction: DESC}) {
      edges {
        node {
          number
          title
          state
          createdAt
          closedAt
          mergedAt
          additions
          deletions
          author { login, ... on User { databaseId } }
        }
        cursor
      }
      pageInfo { hasNextPage }
    }
  }
}
"""

ISSUES_QUERY = """
query($owner: String!, $repo: String!, $cursor: String) {
  repository(owner: $owner, name: $repo) {
    issues(first: 100, after: $cursor, orderBy: {field: CREATED_AT, direction: DESC}) {
      edges {
        node {
          number
          title
          state
          createdAt
          closedAt
          author { login, ... on User { databaseId } }
        }
        cursor
      }
      pageInfo { hasNextPage }
    }
  }
}
"""


class GitHubDataFetcher:
    """Fetches contributor activity from the GitHub REST and GraphQL APIs."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        start_date: datetime,
        output_dir: str = "data",
        timeout: int = 30,
    ):
        """Initialize the fetcher."""
        self.token = token
        self.owner = owner
        self.repo = repo
        self.start_date = start_date
        self.output_dir = output_dir
        self.timeout = timeout
        self.api_url = "https://api.github.com"
        self.graphql_url = "https://api.github.com/graphql"
        self.headers = {
            "Authorization": f"bearer {token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "contributor-health",
        }

    def _execute_query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a GraphQL query and handle potential errors."""
        response = requests.post(
            self.graphql_url,
            json={"query": query, "variables": variables},
            headers=self.headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        response_json = response.json()

        if "errors" in response_json:
            error_messages = [error["message"] for error in response_json["errors"]]
            raise ValueError(
                f"GraphQL API returned errors: {', '.join(error_messages)}"
            )
        if "data" not in response_json:
            raise ValueError(
                "Unexpected response from GraphQL API: 'data' key is missing."
            )
        return response_json

    def _get(self, path: str, params: Dict[str, Any] | None = None) -> requests.Response:
        response = requests.get(
            f"{self.api_url}{path}",
            params=params,
            headers=self.headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def _get_author_info(self, author_obj) -> Dict[str, Any]:
        """Helper to safely extract author information."""
        if not author_obj:
            return {"login": GHOST_LOGIN, "id": None}
        return {
            "login": author_obj.get("login", GHOST_LOGIN),
            # databaseId only exists when the author is a User
            "id": author_obj.get("databaseId"),
        }

    def _is_before_start(self, created_at: str) -> bool:
        return datetime.fromisoformat(created_at.replace("Z", "+00:00")) < self.start_date

    def _paginate(self, query: str, connection: str) -> List[Dict[str, Any]]:
        """Walks a newest-first GraphQL connection until it passes `start_date`."""
        nodes: List[Dict[str, Any]] = []
        cursor = None
        has_more = True

        while has_more:
            variables = {"owner": self.owner, "repo": self.repo, "cursor": cursor}
            response = self._execute_query(query, variables)
            data = response["data"]["repository"][connection]

            reached_start = False
            for edge in data["edges"]:
                node = edge["node"]
                cursor = edge["cursor"]
                if self._is_before_start(node["createdAt"]):
                    reached_start = True
                    break
                node["author"] = self._get_author_info(node.get("author"))
                nodes.append(node)

            has_more = data["pageInfo"]["hasNextPage"] and not reached_start

        return nodes

    def fetch_prs(self) -> List[Dict[str, Any]]:
        """Fetch pull requests created since `start_date`."""
        return self._paginate(PRS_QUERY, "pullRequests")

    def fetch_issues(self) -> List[Dict[str, Any]]:
        """Fetch issues created since `start_date`."""
        return self._paginate(ISSUES_QUERY, "issues")

    def fetch_contributors(self, limit: int | None = None) -> List[Dict[str, Any]]:
        """Fetch the contributor list with lifetime contribution counts."""
        contributors: List[Dict[str, Any]] = []
        page = 1

        while True:
            response = self._get(
                f"/repos/{self.owner}/{self.repo}/contributors",
                params={"per_page": 100, "page": page},
            )
            batch = response.json()
            if not batch:
                break
            contributors.extend(
                {"login": c["login"], "contributions": c.get("contributions", 0)}
                for c in batch
                if c.get("login")
            )
            if limit and len(contributors) >= limit:
                return contributors[:limit]
            if len(batch) < 100:
                break
            page += 1

        return contributors

    def fetch_profiles(self, logins: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Fetch public profiles; a failed lookup only loses that profile."""
        profiles: Dict[str, Dict[str, Any]] = {}
        for login in logins:
            try:
                user = self._get(f"/users/{login}").json()
            except requests.RequestException as exc:
                logger.warning("Could not fetch profile for %s: %s", login, exc)
                continue
            profiles[login] = {"location": user.get("location"), "name": user.get("name")}
        return profiles

    def _save(self, filename: str, payload: Any) -> None:
        path = os.path.join(self.output_dir, filename)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    def fetch_all(self, max_contributors: int | None = None) -> Dict[str, int]:
        """Fetch everything the analysis needs and save it to `output_dir`."""
        contributors = self.fetch_contributors(limit=max_contributors)
        profiles = self.fetch_profiles(c["login"] for c in contributors)
        prs = self.fetch_prs()
        issues = self.fetch_issues()

        self._save("contributors_raw.json", contributors)
        self._save("profiles_raw.json", profiles)
        self._save("prs_raw.json", prs)
        self._save("issues_raw.json", issues)

        return {
            "contributors": len(contributors),
            "profiles": len(profiles),
            "prs": len(prs),
            "issues": len(issues),
        }
