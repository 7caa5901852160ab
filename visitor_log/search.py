"""
Visitor search.

Plain token search over first and last names, plus fuzzy suggestions for
when the plain search finds nobody (typos at the front desk are common).
"""

from dataclasses import dataclass, field

from rapidfuzz import fuzz, process


@dataclass
class SearchResult:
    exact: object = None
    candidates: list = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.candidates


def normalize_query(query) -> str:
    return (query or "").lower().strip()


def search_visitors(visitors, query):
    """Find visitors whose first or last name contains every query token.

    When exactly one match has the query as its full name, that visitor is
    returned alone as ``exact``.
    """
    term = normalize_query(query)
    if not term:
        return SearchResult()

    tokens = term.split()
    found = [
        v for v in visitors
        if all(t in v.firstName.lower() or t in v.lastName.lower() for t in tokens)
    ]

    exact = [v for v in found if f"{v.firstName.lower()} {v.lastName.lower()}" == term]
    if len(exact) == 1:
        return SearchResult(exact=exact[0], candidates=exact)
    return SearchResult(candidates=found)


def suggest_visitors(visitors, query, limit: int = 5, score_cutoff: float = 60):
    """Return visitors whose full name is close to the query, best first."""
    term = normalize_query(query)
    if not term or not visitors:
        return []

    names = [v.full_name.lower() for v in visitors]
    # get tuples: (name, score, idx)
    results = process.extract(
        term,
        names,
        scorer=fuzz.WRatio,
        limit=limit,
        score_cutoff=score_cutoff,
    )
    results = sorted(results, key=lambda x: x[1], reverse=True)
    return [visitors[idx] for _, _, idx in results]
