from __future__ import annotations

"""pipeline.report.enrichment

Bounded-concurrency enrichment of findings with code snippets and
"how to fix" guidance.

Concurrency model
-----------------
- A ThreadPoolExecutor with a fixed number of workers (5) consumes one task
  per candidate. The caller blocks until every task has finished; there is
  no early exit and no timeout beyond the HTTP client's own.
- Each task writes only to ``slots[i]`` for its own candidate index, so the
  result list needs no lock and keeps upstream order regardless of which
  worker finishes first.
- The rule guidance cache is the only state shared between workers. Its
  lock is held for dictionary access only, never across a network call.

Failure policy
--------------
Enrichment is best effort. A failed snippet or rule fetch leaves that field
empty for that candidate; it never fails the pool or the report.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from sonar_report.domain import ReportOptions
from tools.sonar.rules import guidance_from_rule

from .locations import SourceFetcher, fetch_code_snippet

logger = logging.getLogger(__name__)

MAX_WORKERS = 5


class EnrichmentClient(SourceFetcher, Protocol):
    def get_rule(self, rule_key: str) -> Dict[str, Any]: ...


@dataclass(frozen=True)
class EnrichmentResult:
    code_snippet: str = ""
    how_to_fix: str = ""


class RuleGuidanceCache:
    """Rule key -> extracted guidance, scoped to one report generation.

    ``get_or_fetch`` guarantees at most one fetch per rule key: a worker that
    asks for a key whose fetch is already in flight waits for that fetch
    rather than starting a second one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[str, str] = {}
        self._in_flight: Dict[str, threading.Event] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, rule_key: str) -> Optional[str]:
        with self._lock:
            return self._entries.get(rule_key)

    def get_or_fetch(self, rule_key: str, fetch: Callable[[str], str]) -> str:
        with self._lock:
            if rule_key in self._entries:
                return self._entries[rule_key]
            pending = self._in_flight.get(rule_key)
            if pending is None:
                done = threading.Event()
                self._in_flight[rule_key] = done

        if pending is not None:
            pending.wait()
            with self._lock:
                return self._entries.get(rule_key, "")

        value = ""
        try:
            value = fetch(rule_key)
        finally:
            with self._lock:
                self._entries[rule_key] = value
                del self._in_flight[rule_key]
            done.set()
        return value


def _fetch_guidance(client: EnrichmentClient, rule_key: str) -> str:
    try:
        return guidance_from_rule(client.get_rule(rule_key))
    except Exception as e:
        logger.debug("Rule guidance unavailable for %s: %s", rule_key, e)
        return ""


def _fetch_snippet(client: EnrichmentClient, issue: Mapping[str, Any]) -> str:
    try:
        return fetch_code_snippet(client, issue)
    except Exception as e:
        logger.debug("Code snippet unavailable for %s: %s", issue.get("key"), e)
        return ""


def _enrich_one(
    client: EnrichmentClient,
    issue: Mapping[str, Any],
    options: ReportOptions,
    cache: RuleGuidanceCache,
) -> EnrichmentResult:
    snippet = ""
    how_to_fix = ""
    if options.include_code_snippets:
        snippet = _fetch_snippet(client, issue)
    if options.include_how_to_fix:
        rule_key = str(issue.get("rule") or "")
        if rule_key:
            how_to_fix = cache.get_or_fetch(rule_key, lambda k: _fetch_guidance(client, k))
    return EnrichmentResult(code_snippet=snippet, how_to_fix=how_to_fix)


def enrich_issues(
    client: EnrichmentClient,
    issues: Sequence[Mapping[str, Any]],
    options: ReportOptions,
    *,
    cache: Optional[RuleGuidanceCache] = None,
    max_workers: int = MAX_WORKERS,
) -> List[EnrichmentResult]:
    """Enrich each issue; result i belongs to issues[i].

    Returns empty results without any network call when both options are
    disabled.
    """
    slots: List[EnrichmentResult] = [EnrichmentResult()] * len(issues)
    if not issues or not options.enrichment_enabled:
        return slots

    cache = cache if cache is not None else RuleGuidanceCache()

    def _task(index: int) -> None:
        slots[index] = _enrich_one(client, issues[index], options, cache)

    with ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="enrich") as ex:
        futures = [ex.submit(_task, i) for i in range(len(issues))]
        for fut in futures:
            # _task absorbs fetch errors; anything raised here is a bug.
            fut.result()

    logger.debug(
        "Enriched %d issues (%d workers, %d distinct rules)",
        len(issues),
        max_workers,
        len(cache),
    )
    return slots


def select_candidates(
    issues: Sequence[Mapping[str, Any]],
    per_severity: int,
) -> List[Tuple[int, Mapping[str, Any]]]:
    """First *per_severity* issues of each severity, in upstream order.

    Returns (index into issues, issue) pairs.
    """
    seen: Dict[str, int] = {}
    out: List[Tuple[int, Mapping[str, Any]]] = []
    for i, issue in enumerate(issues):
        sev = str(issue.get("severity") or "")
        if seen.get(sev, 0) < per_severity:
            seen[sev] = seen.get(sev, 0) + 1
            out.append((i, issue))
    return out
