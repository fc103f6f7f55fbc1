"""Fixed demo dataset, shared by the SQLite seed and the in-memory store."""
from __future__ import annotations

import copy
from datetime import date, datetime
from typing import Dict, List

from .resources import Record

_PATIENTS = [
    # id, fullName, email, phone, idNumber, gender, blood, dob, created
    ("p001", "Nguyen Van An", "nguyenvanan@gmail.com", "0901234567", "079090001234", "MALE", "O+", date(1990, 5, 15), datetime(2025, 1, 15, 10, 0)),
    ("p002", "Tran Thi Mai", "tranthimai@gmail.com", "0912345678", "079085002345", "FEMALE", "A+", date(1985, 8, 20), datetime(2025, 2, 10, 14, 30)),
    ("p003", "Le Hoang Phuc", "lehoangphuc@gmail.com", "0923456789", "079078003456", "MALE", "B-", date(1978, 12, 1), datetime(2025, 3, 5, 9, 15)),
    ("p004", "Pham Minh Duc", None, "0934567890", "079095004567", "MALE", "AB+", date(1995, 3, 25), datetime(2025, 4, 20, 11, 45)),
    ("p005", "Vo Thi Hong", "vothihong@gmail.com", "0945678901", "079000005678", "FEMALE", "O-", date(2000, 7, 10), datetime(2025, 5, 12, 16, 20)),
    ("p006", "Hoang Duc Thang", "hoangducthang@gmail.com", "0956789012", "079088006789", "MALE", "A-", date(1988, 11, 30), datetime(2025, 6, 8, 8, 30)),
    ("p007", "Dang Van Khanh", "dangvankhanh@gmail.com", "0967890123", "079092007890", "MALE", "B+", date(1992, 4, 18), datetime(2025, 7, 22, 13, 0)),
    ("p008", "Bui Thi Thao", "buithithao@gmail.com", "0978901234", "079083008901", "FEMALE", "AB-", date(1983, 9, 5), datetime(2025, 8, 14, 10, 45)),
    ("p009", "Ngo Quang Huy", "ngoquanghuy@gmail.com", "0989012345", "079075009012", "MALE", "O+", date(1975, 2, 28), datetime(2025, 9, 30, 15, 30)),
    ("p010", "Ly Thi Kim", None, "0990123456", "079098010123", "FEMALE", "A+", date(1998, 6, 12), datetime(2025, 10, 18, 12, 15)),
    ("p011", "Anna Nguyen", "anna.nguyen@gmail.com", "0903456712", "079096011234", "FEMALE", "O+", date(1996, 1, 31), datetime(2025, 1, 31, 23, 59, 59)),
    ("p012", "Nancy Tran", "nancy.tran@gmail.com", "0914567823", "079091012345", "FEMALE", "B+", date(1991, 10, 2), datetime(2025, 2, 1, 0, 0)),
    ("p013", "Đặng Thị Ánh", "dang.anh@gmail.com", "0925678934", "079099013456", "FEMALE", "A-", date(1999, 9, 9), datetime(2025, 5, 20, 8, 45)),
]

_INVOICES = [
    # id, number, patientId, patientName, status, invoiceDate, dueDate, total, paid
    ("inv001", "INV-2025-0001", "p001", "Nguyen Van An", "PAID", datetime(2025, 1, 16, 9, 0), date(2025, 1, 31), 500000, 500000),
    ("inv002", "INV-2025-0002", "p002", "Tran Thi Mai", "UNPAID", datetime(2025, 1, 20, 10, 30), date(2025, 2, 4), 1000000, 0),
    ("inv003", "INV-2025-0003", "p003", "Le Hoang Phuc", "PARTIALLY_PAID", datetime(2025, 1, 31, 23, 59, 59), date(2025, 2, 15), 700000, 200000),
    ("inv004", "INV-2025-0004", "p005", "Vo Thi Hong", "OVERDUE", datetime(2025, 2, 3, 8, 15), date(2025, 2, 18), 1250000, 0),
    ("inv005", "INV-2025-0005", "p001", "Nguyen Van An", "CANCELLED", datetime(2025, 2, 10, 14, 0), None, 300000, 0),
    ("inv006", "INV-2025-0006", "p007", "Dang Van Khanh", "UNPAID", datetime(2025, 3, 1, 11, 0), date(2025, 3, 16), 700000, 0),
    ("inv007", "INV-2025-0007", "p011", "Anna Nguyen", "PAID", datetime(2025, 3, 12, 16, 45), date(2025, 3, 27), 450000, 450000),
    ("inv008", "INV-2025-0008", "p012", "Nancy Tran", "UNPAID", datetime(2025, 4, 2, 9, 30), date(2025, 4, 17), 2000000, 0),
]

_PAYMENTS = [
    # id, transactionId, invoiceId, patientName, method, status, amount, paidAt
    ("pay001", "TXN-000101", "inv001", "Nguyen Van An", "CASH", "COMPLETED", 500000, datetime(2025, 1, 16, 9, 20)),
    ("pay002", "TXN-000102", "inv003", "Le Hoang Phuc", "VNPAY", "COMPLETED", 200000, datetime(2025, 2, 1, 10, 0)),
    ("pay003", "TXN-000103", "inv004", "Vo Thi Hong", "MOMO", "FAILED", 1250000, datetime(2025, 2, 4, 12, 0)),
    ("pay004", "TXN-000104", "inv007", "Anna Nguyen", "BANK_TRANSFER", "COMPLETED", 450000, datetime(2025, 3, 13, 8, 0)),
    ("pay005", "TXN-000105", "inv006", "Dang Van Khanh", "CASH", "PENDING", 700000, datetime(2025, 3, 14, 15, 30)),
    ("pay006", "TXN-000106", "inv002", "Tran Thi Mai", "VNPAY", "REFUNDED", 1000000, datetime(2025, 3, 20, 17, 5)),
]

_EMPLOYEES = [
    # id, fullName, email, departmentId, role, status, hiredAt
    ("emp-101", "Dr. Tran Van Minh", "minh.tran@hms.vn", "dept-cardio", "DOCTOR", "ACTIVE", date(2018, 3, 1)),
    ("emp-102", "Dr. Le Thi Lan", "lan.le@hms.vn", "dept-pedia", "DOCTOR", "ACTIVE", date(2019, 7, 15)),
    ("emp-103", "Nguyen Thi Hoa", "hoa.nguyen@hms.vn", "dept-cardio", "NURSE", "ACTIVE", date(2020, 1, 6)),
    ("emp-104", "Pham Van Long", "long.pham@hms.vn", None, "RECEPTIONIST", "ACTIVE", date(2021, 9, 1)),
    ("emp-105", "Dr. Hoang Anh Tuan", "tuan.hoang@hms.vn", "dept-neuro", "DOCTOR", "ON_LEAVE", date(2016, 11, 20)),
    ("emp-106", "Vu Thi Ngoc", "ngoc.vu@hms.vn", "dept-lab", "LAB_TECHNICIAN", "ACTIVE", date(2022, 4, 11)),
    ("emp-107", "Do Minh Chau", None, "dept-pedia", "NURSE", "INACTIVE", date(2017, 5, 29)),
    ("emp-108", "Admin Nguyen", "admin@hms.vn", None, "ADMIN", "ACTIVE", date(2015, 1, 2)),
]

_MEDICINES = [
    # id, name, activeIngredient, description, categoryId, unit, price, stock, createdAt
    ("med001", "Paracetamol 500mg", "Paracetamol", "Pain relief and fever reduction", "cat-analgesic", "TABLET", 2000, 1200, datetime(2024, 11, 2, 8, 0)),
    ("med002", "Amoxicillin 500mg", "Amoxicillin", "Broad-spectrum penicillin antibiotic", "cat-antibiotic", "CAPSULE", 3500, 640, datetime(2024, 11, 5, 9, 0)),
    ("med003", "Ibuprofen 400mg", "Ibuprofen", "Anti-inflammatory analgesic", "cat-analgesic", "TABLET", 2500, 0, datetime(2024, 12, 1, 10, 0)),
    ("med004", "Omeprazole 20mg", "Omeprazole", "Proton pump inhibitor", "cat-gastro", "CAPSULE", 4000, 310, datetime(2025, 1, 8, 11, 0)),
    ("med005", "Cefuroxime 250mg", "Cefuroxime", "Second-generation cephalosporin", "cat-antibiotic", "TABLET", 9000, 95, datetime(2025, 1, 20, 14, 0)),
    ("med006", "Loratadine 10mg", "Loratadine", "Antihistamine for allergies", "cat-antihistamine", "TABLET", 1500, 820, datetime(2025, 2, 14, 15, 0)),
    ("med007", "Metformin 850mg", "Metformin", None, "cat-diabetes", "TABLET", 1800, 1500, datetime(2025, 3, 3, 16, 0)),
    ("med008", "Salbutamol inhaler", "Salbutamol", "Bronchodilator for asthma", "cat-respiratory", "INHALER", 65000, 42, datetime(2025, 3, 30, 9, 30)),
]

_EXAMS = [
    # id, patientId, patientName, doctorId, doctorName, diagnosis, status, examDate
    ("exam001", "p001", "Nguyen Van An", "emp-101", "Dr. Tran Van Minh", "Hypertension stage 1", "COMPLETED", datetime(2025, 1, 16, 8, 30)),
    ("exam002", "p002", "Tran Thi Mai", "emp-102", "Dr. Le Thi Lan", "Seasonal influenza", "COMPLETED", datetime(2025, 1, 20, 9, 45)),
    ("exam003", "p003", "Le Hoang Phuc", "emp-101", "Dr. Tran Van Minh", "Atrial fibrillation", "PENDING", datetime(2025, 1, 31, 15, 0)),
    ("exam004", "p005", "Vo Thi Hong", "emp-105", "Dr. Hoang Anh Tuan", "Migraine", "COMPLETED", datetime(2025, 2, 3, 7, 50)),
    ("exam005", "p011", "Anna Nguyen", "emp-102", "Dr. Le Thi Lan", None, "PENDING", datetime(2025, 3, 12, 16, 0)),
    ("exam006", "p007", "Dang Van Khanh", "emp-101", "Dr. Tran Van Minh", "Chest pain, unspecified", "COMPLETED", datetime(2025, 3, 1, 10, 10)),
]

_APPOINTMENTS = [
    # id, patientId, patientName, doctorId, doctorName, status, type, reason, appointmentTime
    ("apt001", "p001", "Nguyen Van An", "emp-101", "Dr. Tran Van Minh", "COMPLETED", "CONSULTATION", "Blood pressure check", datetime(2025, 1, 16, 8, 0)),
    ("apt002", "p002", "Tran Thi Mai", "emp-102", "Dr. Le Thi Lan", "COMPLETED", "CONSULTATION", "Fever", datetime(2025, 1, 20, 9, 30)),
    ("apt003", "p003", "Le Hoang Phuc", "emp-101", "Dr. Tran Van Minh", "CONFIRMED", "FOLLOW_UP", "Palpitations", datetime(2025, 1, 31, 14, 30)),
    ("apt004", "p005", "Vo Thi Hong", "emp-105", "Dr. Hoang Anh Tuan", "COMPLETED", "CONSULTATION", "Headache", datetime(2025, 2, 3, 7, 30)),
    ("apt005", "p004", "Pham Minh Duc", "emp-102", "Dr. Le Thi Lan", "CANCELLED", "CONSULTATION", "Cough", datetime(2025, 2, 12, 10, 0)),
    ("apt006", "p007", "Dang Van Khanh", "emp-101", "Dr. Tran Van Minh", "COMPLETED", "EMERGENCY", "Chest pain", datetime(2025, 3, 1, 10, 0)),
    ("apt007", "p011", "Anna Nguyen", "emp-102", "Dr. Le Thi Lan", "CONFIRMED", "CONSULTATION", "Rash", datetime(2025, 3, 12, 15, 45)),
    ("apt008", "p012", "Nancy Tran", "emp-105", "Dr. Hoang Anh Tuan", "SCHEDULED", "CONSULTATION", "Dizziness", datetime(2025, 4, 2, 9, 0)),
    ("apt009", "p009", "Ngo Quang Huy", "emp-101", "Dr. Tran Van Minh", "NO_SHOW", "FOLLOW_UP", "Follow-up ECG", datetime(2025, 4, 10, 11, 15)),
    ("apt010", "p006", "Hoang Duc Thang", "emp-102", "Dr. Le Thi Lan", "SCHEDULED", "CONSULTATION", "Back pain", datetime(2025, 4, 15, 13, 30)),
]

_SCHEDULES = [
    # id, employeeId, employeeName, departmentId, status, workDate, shift
    ("sch001", "emp-101", "Dr. Tran Van Minh", "dept-cardio", "AVAILABLE", date(2025, 4, 14), "MORNING"),
    ("sch002", "emp-101", "Dr. Tran Van Minh", "dept-cardio", "BOOKED", date(2025, 4, 15), "AFTERNOON"),
    ("sch003", "emp-102", "Dr. Le Thi Lan", "dept-pedia", "AVAILABLE", date(2025, 4, 14), "MORNING"),
    ("sch004", "emp-102", "Dr. Le Thi Lan", "dept-pedia", "CANCELLED", date(2025, 4, 16), "MORNING"),
    ("sch005", "emp-105", "Dr. Hoang Anh Tuan", "dept-neuro", "AVAILABLE", date(2025, 4, 17), "EVENING"),
    ("sch006", "emp-101", "Dr. Tran Van Minh", "dept-cardio", "AVAILABLE", date(2025, 4, 18), "MORNING"),
    ("sch007", "emp-102", "Dr. Le Thi Lan", "dept-pedia", "BOOKED", date(2025, 4, 18), "AFTERNOON"),
    ("sch008", "emp-105", "Dr. Hoang Anh Tuan", "dept-neuro", "AVAILABLE", date(2025, 4, 21), "MORNING"),
]

_LAB_ORDERS = [
    # id, patientName, testName, status, priority, orderedAt
    ("lab001", "Nguyen Van An", "Lipid panel", "COMPLETED", "NORMAL", datetime(2025, 1, 16, 9, 0)),
    ("lab002", "Le Hoang Phuc", "ECG", "IN_PROGRESS", "URGENT", datetime(2025, 1, 31, 15, 10)),
    ("lab003", "Vo Thi Hong", "Brain MRI", "PENDING", "NORMAL", datetime(2025, 2, 3, 8, 0)),
    ("lab004", "Dang Van Khanh", "Troponin I", "COMPLETED", "URGENT", datetime(2025, 3, 1, 10, 20)),
    ("lab005", "Anna Nguyen", "Complete blood count", "PENDING", "NORMAL", datetime(2025, 3, 12, 16, 10)),
]


def _rows(keys: str, rows) -> List[Record]:
    names = keys.split()
    return [dict(zip(names, row)) for row in rows]


def _invoices() -> List[Record]:
    out = _rows("id invoiceNumber patientId patientName status invoiceDate dueDate totalAmount paidAmount", _INVOICES)
    for inv in out:
        inv["balanceDue"] = 0 if inv["status"] == "CANCELLED" else inv["totalAmount"] - inv["paidAmount"]
    return out


_DATASETS: Dict[str, List[Record]] = {
    "patients": _rows("id fullName email phoneNumber identificationNumber gender bloodType dateOfBirth createdAt", _PATIENTS),
    "invoices": _invoices(),
    "payments": _rows("id transactionId invoiceId patientName method status amount paidAt", _PAYMENTS),
    "employees": _rows("id fullName email departmentId role status hiredAt", _EMPLOYEES),
    "medicines": _rows("id name activeIngredient description categoryId unit price stockQuantity createdAt", _MEDICINES),
    "medical-exams": _rows("id patientId patientName doctorId doctorName diagnosis status examDate", _EXAMS),
    "appointments": _rows("id patientId patientName doctorId doctorName status type reason appointmentTime", _APPOINTMENTS),
    "schedules": _rows("id employeeId employeeName departmentId status workDate shift", _SCHEDULES),
    "lab-orders": _rows("id patientName testName status priority orderedAt", _LAB_ORDERS),
}


def demo_records(resource_name: str) -> List[Record]:
    """Return a fresh copy of the demo rows for one resource, in id order."""
    return copy.deepcopy(_DATASETS.get(resource_name, []))


def demo_datasets() -> Dict[str, List[Record]]:
    return {name: demo_records(name) for name in _DATASETS}
