from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests

from .config import Config, ConfigError, Profile


logger = logging.getLogger(__name__)


class ClientError(RuntimeError):
    """Raised when the registry cannot be reached or answers with errors."""


@dataclass
class LatestVersion:
    services: List[str] = field(default_factory=list)
    subgraphs: List[Tuple[str, str]] = field(default_factory=list)
    supergraph_sdl: Optional[str] = None


@dataclass
class ServicesByTarget:
    latest_version: Optional[LatestVersion] = None


LIST_PROJECTS_QUERY = """
query ListProjects($selector: OrganizationSelectorInput!) {
  organization(reference: { bySelector: $selector }) {
    projects {
      edges { node { slug } }
    }
  }
}
"""

TARGETS_BY_PROJECT_QUERY = """
query TargetsByProject($selector: ProjectSelectorInput!) {
  project(reference: { bySelector: $selector }) {
    targets {
      edges { node { slug } }
    }
  }
}
"""

SERVICES_BY_TARGET_QUERY = """
query ServicesByTarget($selector: TargetSelectorInput!) {
  target(reference: { bySelector: $selector }) {
    latestValidSchemaVersion {
      supergraph
      schemas {
        edges {
          node {
            ... on CompositeSchema { service source }
          }
        }
      }
    }
  }
}
"""


def _edges(conn: Any) -> List[Dict[str, Any]]:
    """Return the node dicts of a relay-style connection, tolerating nulls."""
    if not isinstance(conn, dict):
        return []
    nodes = []
    for edge in conn.get("edges") or []:
        node = (edge or {}).get("node")
        if isinstance(node, dict):
            nodes.append(node)
    return nodes


class HiveClient:
    """Blocking GraphQL client for a schema registry profile."""

    def __init__(self, profile: Profile, session: Optional[requests.Session] = None):
        self.profile = profile
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HiveClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.profile.token:
            headers["Authorization"] = f"Bearer {self.profile.token}"
        return headers

    def execute(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Run one GraphQL operation and return its `data` payload."""
        logger.debug("POST %s (%s)", self.profile.endpoint, variables)
        try:
            resp = self.session.post(
                self.profile.endpoint,
                json={"query": query, "variables": variables},
                headers=self._headers(),
                timeout=self.profile.timeout,
            )
        except requests.RequestException as e:
            raise ClientError(f"Connection to {self.profile.endpoint} failed: {e}") from e

        if resp.status_code in (401, 403):
            raise ClientError(f"Unauthorized ({resp.status_code}): check the token for profile '{self.profile.name}'")
        if resp.status_code >= 400:
            raise ClientError(f"HTTP {resp.status_code} from {self.profile.endpoint}: {resp.text[:200]}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise ClientError(f"Invalid JSON from {self.profile.endpoint}") from e

        errors = payload.get("errors") or []
        if errors:
            messages = "; ".join(str(err.get("message", err)) for err in errors)
            raise ClientError(f"GraphQL error: {messages}")

        return payload.get("data") or {}

    def _organization(self) -> str:
        if not self.profile.organization:
            raise ConfigError(f"Profile '{self.profile.name}' has no organization set")
        return self.profile.organization

    def list_projects(self) -> List[str]:
        data = self.execute(
            LIST_PROJECTS_QUERY,
            {"selector": {"organizationSlug": self._organization()}},
        )
        org = data.get("organization") or {}
        return [n["slug"] for n in _edges(org.get("projects")) if n.get("slug")]

    def targets_by_project(self, project: str) -> List[str]:
        data = self.execute(
            TARGETS_BY_PROJECT_QUERY,
            {"selector": {"organizationSlug": self._organization(), "projectSlug": project}},
        )
        proj = data.get("project") or {}
        return [n["slug"] for n in _edges(proj.get("targets")) if n.get("slug")]

    def services_by_target(self, project: str, target: str) -> ServicesByTarget:
        data = self.execute(
            SERVICES_BY_TARGET_QUERY,
            {
                "selector": {
                    "organizationSlug": self._organization(),
                    "projectSlug": project,
                    "targetSlug": target,
                }
            },
        )
        tgt = data.get("target") or {}
        latest = tgt.get("latestValidSchemaVersion")
        if not latest:
            return ServicesByTarget(latest_version=None)

        subgraphs: List[Tuple[str, str]] = []
        for node in _edges(latest.get("schemas")):
            service = node.get("service")
            if not service:
                # Single (non-composite) schemas carry no service name
                continue
            subgraphs.append((service, node.get("source") or ""))

        return ServicesByTarget(
            latest_version=LatestVersion(
                services=[name for name, _ in subgraphs],
                subgraphs=subgraphs,
                supergraph_sdl=latest.get("supergraph"),
            )
        )


class HiveDataProvider:
    """Async data provider backed by a blocking HiveClient.

    Each call runs in a worker thread so the event loop can keep painting,
    but the caller awaits it before handling the next key.
    """

    def __init__(self, client: HiveClient):
        self.client = client

    def close(self) -> None:
        self.client.close()

    async def list_projects(self) -> List[str]:
        return await asyncio.to_thread(self.client.list_projects)

    async def targets_by_project(self, project: str) -> List[str]:
        return await asyncio.to_thread(self.client.targets_by_project, project)

    async def services_by_target(self, project: str, target: str) -> ServicesByTarget:
        return await asyncio.to_thread(self.client.services_by_target, project, target)


def get_client(config: Optional[Config], profile_name: Optional[str] = None) -> HiveClient:
    if config is None:
        raise ConfigError("No config loaded")
    return HiveClient(config.get_profile(profile_name))


def provider_for_profile(config: Optional[Config], profile_name: Optional[str]) -> HiveDataProvider:
    return HiveDataProvider(get_client(config, profile_name))
