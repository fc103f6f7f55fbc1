from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Type

from sqlalchemy import Date, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class RecordMixin:
    """
    Attribute names follow the JSON field names of the API, so a row maps
    onto a record without a translation table.
    """

    def to_record(self) -> Dict[str, Any]:
        return {c.key: getattr(self, c.key) for c in self.__table__.columns}


class PatientModel(RecordMixin, Base):
    __tablename__ = "patient"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    fullName: Mapped[str] = mapped_column(String(200))
    email: Mapped[str | None] = mapped_column(String(200))
    phoneNumber: Mapped[str | None] = mapped_column(String(40))
    identificationNumber: Mapped[str | None] = mapped_column(String(40))
    gender: Mapped[str | None] = mapped_column(String(20))        # MALE | FEMALE | OTHER
    bloodType: Mapped[str | None] = mapped_column(String(4))
    dateOfBirth: Mapped[date | None] = mapped_column(Date)
    createdAt: Mapped[datetime] = mapped_column(DateTime)


class InvoiceModel(RecordMixin, Base):
    __tablename__ = "invoice"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    invoiceNumber: Mapped[str] = mapped_column(String(40))
    patientId: Mapped[str] = mapped_column(String(32))
    patientName: Mapped[str] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(20))               # UNPAID | PARTIALLY_PAID | PAID | OVERDUE | CANCELLED
    invoiceDate: Mapped[datetime] = mapped_column(DateTime)
    dueDate: Mapped[date | None] = mapped_column(Date)
    totalAmount: Mapped[int] = mapped_column(Integer)
    paidAmount: Mapped[int] = mapped_column(Integer, default=0)
    balanceDue: Mapped[int] = mapped_column(Integer, default=0)


class PaymentModel(RecordMixin, Base):
    __tablename__ = "payment"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    transactionId: Mapped[str] = mapped_column(String(64))
    invoiceId: Mapped[str] = mapped_column(String(32))
    patientName: Mapped[str] = mapped_column(String(200))
    method: Mapped[str] = mapped_column(String(20))               # CASH | VNPAY | MOMO | BANK_TRANSFER
    status: Mapped[str] = mapped_column(String(20))
    amount: Mapped[int] = mapped_column(Integer)
    paidAt: Mapped[datetime] = mapped_column(DateTime)


class EmployeeModel(RecordMixin, Base):
    __tablename__ = "employee"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    fullName: Mapped[str] = mapped_column(String(200))
    email: Mapped[str | None] = mapped_column(String(200))
    departmentId: Mapped[str | None] = mapped_column(String(32))
    role: Mapped[str] = mapped_column(String(20))
    status: Mapped[str] = mapped_column(String(20))
    hiredAt: Mapped[date | None] = mapped_column(Date)


class MedicineModel(RecordMixin, Base):
    __tablename__ = "medicine"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    activeIngredient: Mapped[str | None] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text)
    categoryId: Mapped[str | None] = mapped_column(String(32))
    unit: Mapped[str | None] = mapped_column(String(20))
    price: Mapped[int] = mapped_column(Integer)
    stockQuantity: Mapped[int] = mapped_column(Integer, default=0)
    createdAt: Mapped[datetime] = mapped_column(DateTime)


class MedicalExamModel(RecordMixin, Base):
    __tablename__ = "medical_exam"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    patientId: Mapped[str] = mapped_column(String(32))
    patientName: Mapped[str] = mapped_column(String(200))
    doctorId: Mapped[str] = mapped_column(String(32))
    doctorName: Mapped[str] = mapped_column(String(200))
    diagnosis: Mapped[str | None] = mapped_column(String(400))
    status: Mapped[str] = mapped_column(String(20))
    examDate: Mapped[datetime] = mapped_column(DateTime)


class AppointmentModel(RecordMixin, Base):
    __tablename__ = "appointment"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    patientId: Mapped[str] = mapped_column(String(32))
    patientName: Mapped[str] = mapped_column(String(200))
    doctorId: Mapped[str] = mapped_column(String(32))
    doctorName: Mapped[str] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(20))               # SCHEDULED | CONFIRMED | COMPLETED | CANCELLED | NO_SHOW
    type: Mapped[str | None] = mapped_column(String(20))
    reason: Mapped[str | None] = mapped_column(String(400))
    appointmentTime: Mapped[datetime] = mapped_column(DateTime)


class ScheduleModel(RecordMixin, Base):
    __tablename__ = "doctor_schedule"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    employeeId: Mapped[str] = mapped_column(String(32))
    employeeName: Mapped[str] = mapped_column(String(200))
    departmentId: Mapped[str | None] = mapped_column(String(32))
    status: Mapped[str] = mapped_column(String(20))
    workDate: Mapped[date] = mapped_column(Date)
    shift: Mapped[str | None] = mapped_column(String(20))


class LabOrderModel(RecordMixin, Base):
    __tablename__ = "lab_order"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    patientName: Mapped[str] = mapped_column(String(200))
    testName: Mapped[str] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(20))
    priority: Mapped[str] = mapped_column(String(20))             # NORMAL | URGENT
    orderedAt: Mapped[datetime] = mapped_column(DateTime)


# resource name -> ORM model
MODELS: Dict[str, Type[Base]] = {
    "patients": PatientModel,
    "invoices": InvoiceModel,
    "payments": PaymentModel,
    "employees": EmployeeModel,
    "medicines": MedicineModel,
    "medical-exams": MedicalExamModel,
    "appointments": AppointmentModel,
    "schedules": ScheduleModel,
    "lab-orders": LabOrderModel,
}
