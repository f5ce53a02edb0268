"""tools/sonar/api.py

All SonarQube HTTP calls live here.

Design goals:
  - Keep network I/O separated from parsing and report assembly.
  - One attempt per call with a fixed timeout. Retries are the caller's
    business; the report pipeline decides which failures are fatal.
  - Every failure surfaces as SonarAPIError so callers handle a single type.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests

from .types import SonarConfig

logger = logging.getLogger(__name__)


DEFAULT_METRIC_KEYS: List[str] = [
    "bugs",
    "vulnerabilities",
    "code_smells",
    "coverage",
    "duplicated_lines_density",
    "ncloc",
    "sqale_index",
    "sqale_rating",
    "reliability_rating",
    "security_rating",
    "security_hotspots",
    "new_bugs",
    "new_vulnerabilities",
    "new_code_smells",
    "new_coverage",
    "new_duplicated_lines_density",
]

_PAGE_SIZE = 100


class SonarAPIError(RuntimeError):
    """A SonarQube API call failed (transport, HTTP status, or payload)."""

    def __init__(self, endpoint: str, message: str, status_code: Optional[int] = None) -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"{endpoint}: HTTP {status_code}: {message}")
        else:
            super().__init__(f"{endpoint}: {message}")


def _auth_headers(cfg: SonarConfig) -> Dict[str, str]:
    headers = {"Accept": "application/json"}
    if cfg.token:
        # SonarQube accepts the token as the basic-auth user with an empty password.
        raw = base64.b64encode(f"{cfg.token}:".encode("utf-8")).decode("ascii")
        headers["Authorization"] = f"Basic {raw}"
    return headers


class SonarClient:
    """Thin SonarQube Web API client.

    Safe to share between threads: every call is an independent
    ``requests.get`` with no client-side mutable state.
    """

    def __init__(self, cfg: SonarConfig) -> None:
        self.cfg = SonarConfig(
            host=cfg.host.rstrip("/"),
            token=cfg.token,
            timeout_seconds=cfg.timeout_seconds,
        )

    # -------------------------
    # transport
    # -------------------------

    def _request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        try:
            resp = requests.get(
                f"{self.cfg.host}{endpoint}",
                params=params,
                headers=_auth_headers(self.cfg),
                timeout=self.cfg.timeout_seconds,
            )
        except requests.RequestException as e:
            raise SonarAPIError(endpoint, f"request failed: {e}") from e

        if not resp.content:
            raise SonarAPIError(endpoint, "empty response from SonarQube API", resp.status_code)
        if resp.status_code >= 400:
            raise SonarAPIError(endpoint, resp.text[:200], resp.status_code)
        return resp

    def _get_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        resp = self._request(endpoint, params)
        try:
            data = resp.json()
        except ValueError as e:
            raise SonarAPIError(endpoint, "could not decode JSON response") from e
        if not isinstance(data, dict):
            raise SonarAPIError(endpoint, "unexpected JSON payload (expected an object)")
        return data

    # -------------------------
    # projects / branches
    # -------------------------

    def validate(self) -> None:
        """Raise SonarAPIError if the server cannot be reached."""
        self._get_json("/api/system/status")

    def get_projects(self) -> List[Dict[str, Any]]:
        """Fetch all projects via /api/projects/search (paginated)."""
        projects: List[Dict[str, Any]] = []
        page = 1
        while True:
            data = self._get_json("/api/projects/search", {"ps": _PAGE_SIZE, "p": page})
            batch = data.get("components") or []
            projects.extend(batch)

            total = int((data.get("paging") or {}).get("total") or 0)
            if len(projects) >= total or not batch:
                break
            page += 1
        return projects

    def get_branches(self, project_key: str) -> List[Dict[str, Any]]:
        data = self._get_json("/api/project_branches/list", {"project": project_key})
        return data.get("branches") or []

    # -------------------------
    # quality gate / measures
    # -------------------------

    def get_quality_gate_status(self, project_key: str, branch: str = "") -> Dict[str, Any]:
        params: Dict[str, Any] = {"projectKey": project_key}
        if branch:
            params["branch"] = branch
        data = self._get_json("/api/qualitygates/project_status", params)
        return data.get("projectStatus") or {}

    def get_measures(
        self,
        project_key: str,
        branch: str = "",
        metric_keys: Sequence[str] = DEFAULT_METRIC_KEYS,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"component": project_key, "metricKeys": ",".join(metric_keys)}
        if branch:
            params["branch"] = branch
        data = self._get_json("/api/measures/component", params)
        return (data.get("component") or {}).get("measures") or []

    # -------------------------
    # issues / hotspots / analyses
    # -------------------------

    def get_issues(self, project_key: str, branch: str = "", max_results: int = 500) -> Tuple[List[Dict[str, Any]], int]:
        """Fetch unresolved issues, capped at max_results.

        Returns (issues, total) where total is the server-side count, which can
        exceed len(issues).
        """
        issues: List[Dict[str, Any]] = []
        total = 0
        page = 1
        while True:
            params: Dict[str, Any] = {
                "componentKeys": project_key,
                "ps": _PAGE_SIZE,
                "p": page,
                "resolved": "false",
                # textRange + flows are needed for snippet location.
                "additionalFields": "_all",
            }
            if branch:
                params["branch"] = branch

            data = self._get_json("/api/issues/search", params)
            batch = data.get("issues") or []
            total = int(data.get("total") or (data.get("paging") or {}).get("total") or 0)
            issues.extend(batch)

            paging_total = int((data.get("paging") or {}).get("total") or total)
            if len(issues) >= paging_total or len(issues) >= max_results or not batch:
                break
            page += 1

        return issues[:max_results], total

    def get_hotspots(self, project_key: str, branch: str = "", max_results: int = 100) -> Tuple[List[Dict[str, Any]], int]:
        hotspots: List[Dict[str, Any]] = []
        total = 0
        page = 1
        while True:
            params: Dict[str, Any] = {"projectKey": project_key, "ps": _PAGE_SIZE, "p": page}
            if branch:
                params["branch"] = branch

            data = self._get_json("/api/hotspots/search", params)
            batch = data.get("hotspots") or []
            total = int((data.get("paging") or {}).get("total") or 0)
            hotspots.extend(batch)

            if len(hotspots) >= total or len(hotspots) >= max_results or not batch:
                break
            page += 1

        return hotspots[:max_results], total

    def get_analyses(self, project_key: str, branch: str = "", limit: int = 1) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"project": project_key, "ps": limit}
        if branch:
            params["branch"] = branch
        data = self._get_json("/api/project_analyses/search", params)
        return data.get("analyses") or []

    # -------------------------
    # rules / sources
    # -------------------------

    def get_rule(self, rule_key: str) -> Dict[str, Any]:
        """Fetch /api/rules/show for a rule key and return the ``rule`` object."""
        data = self._get_json("/api/rules/show", {"key": rule_key})
        rule = data.get("rule")
        if not isinstance(rule, dict):
            raise SonarAPIError("/api/rules/show", f"no rule object for {rule_key}")
        return rule

    def get_source_code(self, component: str, from_line: int, to_line: int) -> List[Tuple[int, str]]:
        """Return [(line_number, code), ...] for a component line range.

        /api/sources/show is tried first because it carries explicit line
        numbers; /api/sources/raw (plain text) is the fallback.
        """
        try:
            lines = self._get_source_show(component, from_line, to_line)
        except SonarAPIError as e:
            logger.debug("sources/show failed for %s, falling back to raw: %s", component, e)
            lines = []
        if lines:
            return lines

        params = {"key": component, "from": from_line, "to": to_line}
        resp = self._request("/api/sources/raw", params)

        out: List[Tuple[int, str]] = []
        for i, code in enumerate(resp.text.split("\n")):
            line_no = from_line + i
            if line_no > to_line:
                break
            out.append((line_no, code))
        return out

    def _get_source_show(self, component: str, from_line: int, to_line: int) -> List[Tuple[int, str]]:
        data = self._get_json("/api/sources/show", {"key": component, "from": from_line, "to": to_line})
        out: List[Tuple[int, str]] = []
        for entry in data.get("sources") or []:
            if not isinstance(entry, (list, tuple)) or len(entry) < 2:
                continue
            line_no, code = entry[0], entry[1]
            try:
                n = int(line_no)
            except (TypeError, ValueError):
                n = 0
            out.append((n, code if isinstance(code, str) else ""))
        return out
