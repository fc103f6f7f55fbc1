"""
Registry of listable resources.

Each :class:`ResourceSpec` declares, once, everything the list query
contract needs to know about a resource: its endpoint, which fields
free-text search looks at, which exact-match filters exist, the date field
a date range applies to, the sortable fields, how the endpoint wraps its
response and which actor roles may list it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple

from .descriptor import SortDirection, SortSpec
from .errors import PermissionDeniedError, QueryValidationError, UnknownResourceError

Record = Dict[str, Any]


class Role(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    NURSE = "nurse"
    RECEPTIONIST = "receptionist"
    PATIENT = "patient"
    LAB = "lab"


@dataclass(frozen=True)
class Actor:
    """The user on whose behalf a list is requested."""

    role: Role
    id: Optional[str] = None


class Wrapping(str, Enum):
    """How an endpoint wraps its paginated payload."""

    BARE = "bare"                # {content, page, ...}
    DATA = "data"                # {data: {content, page, ...}}
    STATUS_DATA = "status_data"  # {status, data: {content, page, ...}}
    DATA_LIST = "data_list"      # {data: [...]} without pagination fields


class FilterStyle(str, Enum):
    PARAMS = "params"  # one query parameter per filter
    RSQL = "rsql"      # filters folded into a single `filter` parameter


def lookup(record: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path (``patient.fullName``) against nested dicts."""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def _first(record: Mapping[str, Any], *paths: str, default: Any = None) -> Any:
    for path in paths:
        value = lookup(record, path)
        if value is not None:
            return value
    return default


def _identity(record: Record) -> Record:
    return dict(record)


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    path: str
    search_fields: Tuple[str, ...]
    # request parameter name -> record field
    filters: Mapping[str, str]
    sortable: Tuple[str, ...]
    roles: FrozenSet[Role]
    date_field: Optional[str] = None
    default_sort: Optional[SortSpec] = None
    wrapping: Wrapping = Wrapping.BARE
    page_key: str = "page"
    filter_style: FilterStyle = FilterStyle.PARAMS
    normalize: Callable[[Record], Record] = field(default=_identity, compare=False)

    def permits(self, actor: Optional[Actor]) -> bool:
        return actor is not None and actor.role in self.roles

    def check_access(self, actor: Optional[Actor]) -> None:
        if not self.permits(actor):
            role = actor.role.value if actor is not None else "anonymous"
            raise PermissionDeniedError(f"Role '{role}' may not list {self.name}")

    def filter_field(self, name: str) -> str:
        try:
            return self.filters[name]
        except KeyError:
            raise QueryValidationError(f"Unknown filter '{name}' for {self.name}") from None

    def check_sort(self, sort: Optional[SortSpec]) -> None:
        if sort is not None and sort.field not in self.sortable:
            raise QueryValidationError(f"Cannot sort {self.name} by '{sort.field}'")

    def effective_sort(self, sort: Optional[SortSpec]) -> Optional[SortSpec]:
        self.check_sort(sort)
        return sort if sort is not None else self.default_sort


# -----------------------------
# Record normalizers
# -----------------------------
# Backends have returned the same resource in several shapes over time.
# Each normalizer maps those shapes onto the flat canonical record once.

def _normalize_invoice(record: Record) -> Record:
    out = dict(record)
    out["patientId"] = _first(record, "patientId", "patient.id")
    out["patientName"] = _first(record, "patientName", "patient.fullName")
    out["totalAmount"] = _first(record, "totalAmount", "total", default=0)
    out["paidAmount"] = _first(record, "paidAmount", default=0)
    out["balanceDue"] = _first(record, "balanceDue", "balance", default=0)
    out.pop("patient", None)
    out.pop("balance", None)
    return out


def _normalize_payment(record: Record) -> Record:
    out = dict(record)
    out["method"] = _first(record, "method", "gateway")
    out["patientName"] = _first(record, "patientName", "invoice.patient.fullName")
    out.pop("gateway", None)
    return out


def _normalize_encounter(record: Record) -> Record:
    """Appointments and medical exams embed patient and doctor objects."""
    out = dict(record)
    out["patientId"] = _first(record, "patientId", "patient.id")
    out["patientName"] = _first(record, "patientName", "patient.fullName")
    out["doctorId"] = _first(record, "doctorId", "doctor.id")
    out["doctorName"] = _first(record, "doctorName", "doctor.fullName")
    out.pop("patient", None)
    out.pop("doctor", None)
    return out


def _normalize_schedule(record: Record) -> Record:
    out = dict(record)
    out["employeeId"] = _first(record, "employeeId", "doctorId", "employee.id")
    out["employeeName"] = _first(record, "employeeName", "employee.fullName")
    out.pop("employee", None)
    return out


def _desc(field_name: str) -> SortSpec:
    return SortSpec(field=field_name, direction=SortDirection.DESC)


STAFF = frozenset({Role.ADMIN, Role.DOCTOR, Role.NURSE})

RESOURCES: Dict[str, ResourceSpec] = {
    spec.name: spec
    for spec in (
        ResourceSpec(
            name="patients",
            path="/api/patients",
            search_fields=("fullName", "phoneNumber", "email", "identificationNumber"),
            filters={"gender": "gender", "bloodType": "bloodType"},
            date_field="createdAt",
            sortable=("fullName", "dateOfBirth", "createdAt", "gender"),
            wrapping=Wrapping.DATA,
            roles=STAFF | {Role.RECEPTIONIST},
        ),
        ResourceSpec(
            name="invoices",
            path="/api/billing/invoices",
            search_fields=("invoiceNumber", "patientName"),
            filters={"status": "status", "patientId": "patientId"},
            date_field="invoiceDate",
            sortable=("invoiceNumber", "invoiceDate", "dueDate", "totalAmount", "balanceDue", "status"),
            default_sort=_desc("invoiceDate"),
            wrapping=Wrapping.STATUS_DATA,
            roles=frozenset({Role.ADMIN, Role.RECEPTIONIST}),
            normalize=_normalize_invoice,
        ),
        ResourceSpec(
            name="payments",
            path="/api/billing/payments",
            search_fields=("transactionId", "patientName"),
            filters={"method": "method", "status": "status"},
            date_field="paidAt",
            sortable=("paidAt", "amount", "status"),
            default_sort=_desc("paidAt"),
            wrapping=Wrapping.STATUS_DATA,
            roles=frozenset({Role.ADMIN, Role.RECEPTIONIST}),
            normalize=_normalize_payment,
        ),
        ResourceSpec(
            name="employees",
            path="/api/hr/employees",
            search_fields=("fullName", "email"),
            filters={"departmentId": "departmentId", "role": "role", "status": "status"},
            date_field="hiredAt",
            sortable=("fullName", "hiredAt", "role"),
            wrapping=Wrapping.DATA,
            roles=frozenset({Role.ADMIN}),
        ),
        ResourceSpec(
            name="medicines",
            path="/medicines",
            search_fields=("name", "activeIngredient", "description"),
            filters={"categoryId": "categoryId"},
            date_field="createdAt",
            sortable=("name", "price", "stockQuantity", "createdAt"),
            wrapping=Wrapping.BARE,
            roles=STAFF,
        ),
        ResourceSpec(
            name="medical-exams",
            path="/api/medical-exams",
            search_fields=("patientName", "doctorName", "diagnosis"),
            filters={"patientId": "patientId", "doctorId": "doctorId", "status": "status"},
            date_field="examDate",
            sortable=("examDate", "patientName", "doctorName", "status"),
            default_sort=_desc("examDate"),
            wrapping=Wrapping.STATUS_DATA,
            roles=STAFF,
            normalize=_normalize_encounter,
        ),
        ResourceSpec(
            name="appointments",
            path="/api/appointments/all",
            search_fields=("patientName", "doctorName"),
            filters={"patientId": "patientId", "doctorId": "doctorId", "status": "status"},
            date_field="appointmentTime",
            sortable=("appointmentTime", "patientName", "doctorName", "status"),
            default_sort=_desc("appointmentTime"),
            wrapping=Wrapping.STATUS_DATA,
            filter_style=FilterStyle.RSQL,
            roles=STAFF | {Role.RECEPTIONIST, Role.PATIENT},
            normalize=_normalize_encounter,
        ),
        ResourceSpec(
            name="schedules",
            path="/api/hr/schedules/doctors",
            search_fields=("employeeName",),
            filters={"departmentId": "departmentId", "doctorId": "employeeId", "status": "status"},
            date_field="workDate",
            sortable=("workDate", "employeeName", "status"),
            wrapping=Wrapping.DATA,
            page_key="number",
            roles=STAFF,
            normalize=_normalize_schedule,
        ),
        ResourceSpec(
            name="lab-orders",
            path="/api/lab/orders",
            search_fields=("patientName", "testName"),
            filters={"status": "status", "priority": "priority"},
            date_field="orderedAt",
            sortable=("orderedAt", "patientName", "priority", "status"),
            default_sort=_desc("orderedAt"),
            wrapping=Wrapping.DATA_LIST,
            roles=STAFF | {Role.LAB},
        ),
    )
}


def get_resource(name: str) -> ResourceSpec:
    try:
        return RESOURCES[name]
    except KeyError:
        raise UnknownResourceError(f"Unknown resource '{name}'") from None
