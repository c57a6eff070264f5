"""
Ledger enumerations.
"""

import enum


class IntervenantType(str, enum.Enum):
    """External party type enumeration."""
    CLIENT = "CLIENT"
    SUPPLIER = "SUPPLIER"
    PARTNER = "PARTNER"  # Associate / shareholder
    EMPLOYEE = "EMPLOYEE"
    CASH_BANK = "CASH_BANK"
    OTHER = "OTHER"


class MovementKind(str, enum.Enum):
    """Direction of a movement, seen from the company."""
    INFLOW = "INFLOW"  # Money entering the company
    OUTFLOW = "OUTFLOW"  # Money leaving the company


class Modality(str, enum.Enum):
    """Settlement modality of a movement."""
    CASH = "CASH"
    CHECK = "CHECK"
    TRANSFER = "TRANSFER"
    STOCK = "STOCK"
    SALARY = "SALARY"
    OTHER = "OTHER"


class AdvanceStatus(str, enum.Enum):
    """Advance repayment status."""
    ONGOING = "ONGOING"
    PARTIALLY_REPAID = "PARTIALLY_REPAID"
    FULLY_REPAID = "FULLY_REPAID"


class DisbursementStatus(str, enum.Enum):
    """Disbursement justification status."""
    OPEN = "OPEN"
    PARTIALLY_JUSTIFIED = "PARTIALLY_JUSTIFIED"
    JUSTIFIED = "JUSTIFIED"


class DisbursementCategory(str, enum.Enum):
    """What the disbursed funds were handed out for."""
    STOCK_PURCHASE = "STOCK_PURCHASE"
    BANK_DEPOSIT = "BANK_DEPOSIT"
    SALARY_ADVANCE = "SALARY_ADVANCE"
    GENERAL_EXPENSE = "GENERAL_EXPENSE"
    CASH_END_OF_DAY = "CASH_END_OF_DAY"
    OTHER = "OTHER"


class JustificationCategory(str, enum.Enum):
    """How justified funds were spent."""
    STOCK_PURCHASE = "STOCK_PURCHASE"
    BANK_DEPOSIT = "BANK_DEPOSIT"
    SALARY = "SALARY"
    SUPPLIER_PAYMENT = "SUPPLIER_PAYMENT"
    GENERAL_EXPENSE = "GENERAL_EXPENSE"
    OTHER = "OTHER"


class DocumentType(str, enum.Enum):
    """External payment obligation type."""
    INVOICE = "INVOICE"
    PAYSLIP = "PAYSLIP"
    PURCHASE_ORDER = "PURCHASE_ORDER"
    CONTRACT = "CONTRACT"
    OTHER = "OTHER"


class DocumentStatus(str, enum.Enum):
    """Document payment status."""
    UNPAID = "UNPAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"


class AlertType(str, enum.Enum):
    """Threshold rule that produced an alert."""
    DEBT_THRESHOLD = "DEBT_THRESHOLD"
    LOW_CASH = "LOW_CASH"
    OVERDUE_DISBURSEMENT = "OVERDUE_DISBURSEMENT"
    LONG_OPEN_DISBURSEMENT = "LONG_OPEN_DISBURSEMENT"
    HIGH_OUTSTANDING_DISBURSEMENTS = "HIGH_OUTSTANDING_DISBURSEMENTS"
    RECONCILIATION_GAP = "RECONCILIATION_GAP"


class AlertSeverity(str, enum.Enum):
    """Alert severity."""
    WARNING = "WARNING"
    ERROR = "ERROR"
