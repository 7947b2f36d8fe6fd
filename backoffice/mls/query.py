# backoffice/mls/query.py
"""
Translate listing search parameters into an OData query for the MLS feed.

Pieces (leaf first):
  - fragments   : typed boolean sub-expressions; quoting and parentheses
                  are applied only when rendering
  - FilterBuilder: accumulates fragments, renders the `$filter` value
  - expand_search: free text -> AND of per-word OR-of-contains
  - resolve_sort : sort keyword -> `$orderby` value (total)
  - build_query  : paging + filter + order into ordered query components
"""
import math
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple

from backoffice.models import ListingQueryParams

PAGE_SIZE = 50

# priceMax at or above this is treated as "no upper bound"
PRICE_MAX_CEILING = 1_000_000

ANY = "any"

SEARCH_FIELDS = (
    "UnparsedAddress",
    "City",
    "StateOrProvince",
    "PostalCode",
    "PropertyType",
)

DEFAULT_ORDER_BY = "ModificationTimestamp desc"

_ORDER_BY = {
    "price_desc": "ListPrice desc",
    "price_asc":  "ListPrice asc",
    "newest":     "ModificationTimestamp desc",
    # no popularity signal upstream; alias of newest
    "popular":    "ModificationTimestamp desc",
}


def quote(value: str) -> str:
    """OData string literal: single quotes doubled, wrapped in quotes."""
    return "'" + str(value).replace("'", "''") + "'"


# ---------- Fragments ----------

class Fragment(Protocol):
    def render(self) -> str: ...


@dataclass(frozen=True)
class Comparison:
    field: str
    op: str                 # ge | le | eq
    value: str
    quoted: bool = False    # string literal vs. numeric literal as supplied

    def render(self) -> str:
        value = quote(self.value) if self.quoted else str(self.value)
        return f"{self.field} {self.op} {value}"


@dataclass(frozen=True)
class Contains:
    field: str
    term: str

    def render(self) -> str:
        return f"contains({self.field},{quote(self.term)})"


@dataclass(frozen=True)
class AnyOf:
    parts: Tuple[Fragment, ...]

    def render(self) -> str:
        return "(" + " or ".join(p.render() for p in self.parts) + ")"


@dataclass(frozen=True)
class AllOf:
    parts: Tuple[Fragment, ...]

    def render(self) -> str:
        return "( " + " and ".join(p.render() for p in self.parts) + " )"


@dataclass
class FilterBuilder:
    fragments: List[Fragment] = field(default_factory=list)

    def add(self, fragment: Optional[Fragment]) -> "FilterBuilder":
        if fragment is not None:
            self.fragments.append(fragment)
        return self

    def __bool__(self) -> bool:
        return bool(self.fragments)

    def render(self) -> str:
        return " and ".join(f.render() for f in self.fragments)


# ---------- Rules ----------

def _is_set(value: Optional[str]) -> bool:
    return bool(value) and value != ANY


def _as_number(value: Optional[str]) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def expand_search(text: Optional[str]) -> Optional[Fragment]:
    """
    Every word must appear in at least one searchable field
    (not necessarily the same field for each word).
    """
    terms = (text or "").split()
    if not terms:
        return None
    return AllOf(tuple(
        AnyOf(tuple(Contains(f, term) for f in SEARCH_FIELDS))
        for term in terms
    ))


def filter_fragments(params: ListingQueryParams) -> FilterBuilder:
    """One fragment per active filter dimension; omitted dimensions add nothing."""
    fb = FilterBuilder()
    fb.add(expand_search(params.search))

    # comparisons (NaN fails both tests, so non-numeric prices are dropped)
    if params.price_min and _as_number(params.price_min) > 0:
        fb.add(Comparison("ListPrice", "ge", params.price_min))
    if _is_set(params.price_max) and _as_number(params.price_max) < PRICE_MAX_CEILING:
        fb.add(Comparison("ListPrice", "le", params.price_max))
    if _is_set(params.beds):
        fb.add(Comparison("BedroomsTotal", "ge", params.beds))
    if _is_set(params.baths):
        fb.add(Comparison("BathroomsTotalInteger", "ge", params.baths))

    # categorical
    if _is_set(params.property_type):
        fb.add(Comparison("PropertyType", "eq", params.property_type, quoted=True))
    if _is_set(params.status):
        fb.add(Comparison("StandardStatus", "eq", params.status, quoted=True))

    return fb


def resolve_sort(sort: Optional[str]) -> str:
    return _ORDER_BY.get(sort or "", DEFAULT_ORDER_BY)


def resolve_page(raw) -> int:
    """Missing, non-numeric or < 1 all resolve to the first page."""
    try:
        page = int(str(raw).strip())
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def total_pages(total: int) -> int:
    return math.ceil(total / PAGE_SIZE)


# ---------- Assembly ----------

@dataclass(frozen=True)
class UpstreamQuery:
    page: int
    order_by: str
    filter_expr: Optional[str] = None

    @property
    def skip(self) -> int:
        return (self.page - 1) * PAGE_SIZE

    @property
    def params(self) -> Tuple[Tuple[str, str], ...]:
        """Ordered query components; `$filter` only when something constrains."""
        components: List[Tuple[str, str]] = [
            ("$top", str(PAGE_SIZE)),
            ("$skip", str(self.skip)),
            ("$count", "true"),
        ]
        if self.filter_expr:
            components.append(("$filter", self.filter_expr))
        components.append(("$orderby", self.order_by))
        return tuple(components)

    def get(self, key: str) -> Optional[str]:
        return dict(self.params).get(key)

    def render(self) -> str:
        """Unencoded `k=v&...` form, as it appears in logs."""
        return "&".join(f"{k}={v}" for k, v in self.params)


def build_query(params: ListingQueryParams) -> UpstreamQuery:
    fb = filter_fragments(params)
    return UpstreamQuery(
        page=resolve_page(params.page),
        order_by=resolve_sort(params.sort),
        filter_expr=fb.render() if fb else None,
    )
