"""
Wire format of the list query contract.

Request side: a :class:`QueryDescriptor` <-> query parameters, either one
parameter per filter or an RSQL ``filter`` expression.

Response side: every endpoint wraps its page differently. :func:`wrap`
produces an endpoint's shape, :func:`unwrap` turns it back into the one
canonical :class:`ResultEnvelope`.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .descriptor import DateRange, QueryDescriptor, SortSpec
from .envelope import ResultEnvelope
from .evaluator import paginate
from .errors import QueryValidationError, ServerError
from .resources import FilterStyle, Record, ResourceSpec, Wrapping

Params = List[Tuple[str, str]]

# -----------------------------
# RSQL
# -----------------------------
_rsql_re = re.compile(r"^([A-Za-z_][\w.]*)(==|=ge=|=le=)(.*)$", re.S)
_rsql_reserved = set(";,\"'()\\")


def _quote(value: str) -> str:
    """Double-quote a value holding RSQL delimiters, backslash-escaping quotes."""
    if value and not any(c in _rsql_reserved or c.isspace() for c in value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return re.sub(r"\\(.)", r"\1", value[1:-1], flags=re.S)
    return value


def _split_clauses(expression: str) -> List[str]:
    """Split on ``;`` outside quoted values."""
    clauses: List[str] = []
    buf: List[str] = []
    quote: Optional[str] = None
    chars = iter(expression)
    for ch in chars:
        if quote is not None and ch == "\\":
            buf.append(ch)
            buf.append(next(chars, ""))
            continue
        if ch in "\"'" and (quote is None or quote == ch):
            quote = None if quote else ch
        elif ch == ";" and quote is None:
            clauses.append("".join(buf))
            buf = []
            continue
        buf.append(ch)
    if quote is not None:
        raise QueryValidationError(f"Unterminated quote in filter: {expression!r}")
    clauses.append("".join(buf))
    return clauses


def encode_rsql(resource: ResourceSpec, descriptor: QueryDescriptor) -> str:
    """
    Fold filters, date range and search into one RSQL expression, e.g.
    ``status==CONFIRMED;appointmentTime=ge=2025-01-01T00:00:00Z``.
    Values holding delimiters are quoted: ``patientName=="*a;b*"``.
    """
    clauses: List[str] = []
    for name, value in descriptor.filters.items():
        clauses.append(f"{resource.filter_field(name)}=={_quote(value)}")
    if descriptor.date_range is not None and resource.date_field:
        dr = descriptor.date_range
        clauses.append(f"{resource.date_field}=ge={dr.start.isoformat()}T00:00:00Z")
        clauses.append(f"{resource.date_field}=le={dr.end.isoformat()}T23:59:59Z")
    if descriptor.search and resource.search_fields:
        # the backend treats ==*x* on a search field as a search over all of them
        clauses.append(f"{resource.search_fields[0]}=={_quote('*' + descriptor.search + '*')}")
    return ";".join(clauses)


def _rsql_date(raw: str) -> date:
    try:
        return datetime.fromisoformat(raw.strip()).date()
    except ValueError:
        raise QueryValidationError(f"Invalid date in filter: {raw!r}") from None


def parse_rsql(resource: ResourceSpec, expression: str) -> Tuple[Optional[str], Dict[str, str], Optional[DateRange]]:
    """Parse an RSQL ``filter`` parameter into (search, filters, date range)."""
    search: Optional[str] = None
    filters: Dict[str, str] = {}
    start: Optional[date] = None
    end: Optional[date] = None
    by_field = {f: name for name, f in resource.filters.items()}

    for clause in (c.strip() for c in _split_clauses(expression or "")):
        if not clause:
            continue
        m = _rsql_re.match(clause)
        if not m:
            raise QueryValidationError(f"Malformed filter clause: {clause!r}")
        field, op, value = m.groups()
        value = _unquote(value)
        if op == "==" and len(value) >= 2 and value.startswith("*") and value.endswith("*"):
            if field not in resource.search_fields:
                raise QueryValidationError(f"Cannot search {resource.name} by '{field}'")
            search = value[1:-1]
        elif op == "==":
            if field not in by_field:
                raise QueryValidationError(f"Unknown filter '{field}' for {resource.name}")
            filters[by_field[field]] = value
        elif field != resource.date_field:
            raise QueryValidationError(f"Cannot range-filter {resource.name} by '{field}'")
        elif op == "=ge=":
            start = _rsql_date(value)
        else:
            end = _rsql_date(value)

    return search, filters, DateRange.from_bounds(start, end)


# -----------------------------
# Request parameters
# -----------------------------
def encode_params(resource: ResourceSpec, descriptor: QueryDescriptor) -> Params:
    params: Params = [("page", str(descriptor.page)), ("size", str(descriptor.size))]
    if descriptor.sort is not None:
        params.append(("sort", descriptor.sort.encode()))

    if resource.filter_style is FilterStyle.RSQL:
        expression = encode_rsql(resource, descriptor)
        if expression:
            params.append(("filter", expression))
        return params

    if descriptor.search:
        params.append(("search", descriptor.search))
    for name, value in descriptor.filters.items():
        resource.filter_field(name)
        params.append((name, value))
    if descriptor.date_range is not None:
        params.append(("startDate", descriptor.date_range.start.isoformat()))
        params.append(("endDate", descriptor.date_range.end.isoformat()))
    return params


def _int_param(qp: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(qp.get(name, default))
    except (TypeError, ValueError):
        return default


def _date_param(qp: Mapping[str, str], name: str) -> Optional[date]:
    raw = (qp.get(name) or "").strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        raise QueryValidationError(f"Invalid {name}: {raw!r}") from None


def decode_params(
    resource: ResourceSpec,
    qp: Mapping[str, str],
    default_size: int = 10,
    max_size: int = 100,
) -> QueryDescriptor:
    """
    Build a descriptor from request parameters.

    Paging is lenient: non-integers fall back to defaults, ``size`` is
    clamped to ``[1, max_size]`` and a negative ``page`` to 0. Everything
    else is strict and raises :class:`QueryValidationError`.
    """
    size = min(max(_int_param(qp, "size", default_size), 1), max_size)
    page = max(_int_param(qp, "page", 0), 0)

    sort = None
    if qp.get("sort"):
        sort = SortSpec.parse(qp["sort"])
        resource.check_sort(sort)

    if resource.filter_style is FilterStyle.RSQL:
        search, filters, date_range = parse_rsql(resource, qp.get("filter", ""))
        if qp.get("search"):
            search = qp["search"]
    else:
        search = qp.get("search")
        filters = {name: qp[name] for name in resource.filters if qp.get(name)}
        date_range = DateRange.from_bounds(_date_param(qp, "startDate"), _date_param(qp, "endDate"))

    return QueryDescriptor(
        page=page,
        size=size,
        search=search,
        filters=filters,
        date_range=date_range,
        sort=sort,
    )


# -----------------------------
# Response envelopes
# -----------------------------
def _page_body(resource: ResourceSpec, envelope: ResultEnvelope) -> Dict[str, Any]:
    body = envelope.to_json()
    if resource.page_key != "page":
        body[resource.page_key] = body.pop("page")
    return body


def wrap(resource: ResourceSpec, result: ResultEnvelope | Sequence[Record]) -> Any:
    """
    Wrap a page (or, for unpaginated endpoints, the full record list) the
    way ``resource``'s endpoint does.
    """
    if resource.wrapping is Wrapping.DATA_LIST:
        records = result.content if isinstance(result, ResultEnvelope) else list(result)
        return {"data": records}
    if not isinstance(result, ResultEnvelope):
        raise TypeError(f"{resource.name} responses are paginated")
    body = _page_body(resource, result)
    if resource.wrapping is Wrapping.DATA:
        return {"data": body}
    if resource.wrapping is Wrapping.STATUS_DATA:
        return {"status": "success", "data": body}
    return body


def _malformed(resource: ResourceSpec, why: str) -> ServerError:
    return ServerError(f"Malformed {resource.name} response: {why}")


def _as_int(resource: ResourceSpec, body: Mapping[str, Any], key: str, default: Optional[int]) -> int:
    value = body.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise _malformed(resource, f"'{key}' is not an integer")
    return value


def _records(resource: ResourceSpec, rows: List[Any]) -> List[Record]:
    if not all(isinstance(r, Mapping) for r in rows):
        raise _malformed(resource, "record is not an object")
    return [resource.normalize(r) for r in rows]


def unwrap(resource: ResourceSpec, payload: Any, descriptor: QueryDescriptor) -> ResultEnvelope:
    """
    Normalize an endpoint's raw JSON into the canonical envelope.

    Records go through the resource's normalizer exactly once here.
    ``totalPages`` and ``last`` are recomputed, not copied.
    """
    if resource.wrapping is Wrapping.BARE:
        body = payload
    else:
        if not isinstance(payload, Mapping) or "data" not in payload:
            raise _malformed(resource, "missing 'data'")
        body = payload["data"]

    if resource.wrapping is Wrapping.DATA_LIST:
        if not isinstance(body, list):
            raise _malformed(resource, "'data' is not a list")
        records = _records(resource, body)
        return paginate(records, descriptor.page, descriptor.size)

    if not isinstance(body, Mapping):
        raise _malformed(resource, "page is not an object")
    content = body.get("content")
    if not isinstance(content, list):
        raise _malformed(resource, "'content' is not a list")

    page_value = body.get(resource.page_key, body.get("page", descriptor.page))
    page = _as_int(resource, {"page": page_value}, "page", descriptor.page)
    size = _as_int(resource, body, "size", descriptor.size)
    total = _as_int(resource, body, "totalElements", None)
    if page < 0 or size < 1 or total < 0:
        raise _malformed(resource, "negative paging values")
    if len(content) > size:
        raise _malformed(resource, f"{len(content)} records on a page of {size}")

    records = _records(resource, content)
    return ResultEnvelope.build(records, page, size, total)
