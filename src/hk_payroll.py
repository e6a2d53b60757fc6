"""
HK SME Payroll Compliance Engine
=================================
Statutory payroll figures for Hong Kong SME employers: MPF mandatory and
voluntary contributions (Master Trust and Industry Scheme), proportional
gross-pay reallocation for disregarded periods, and the Employment
Ordinance 12-month Average Daily Wage. In-memory store, no persistence.
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
import uuid
from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

logging.basicConfig(format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger("hk_payroll")

WHOLE = Decimal("1")
CENTS = Decimal("0.01")
ZERO = Decimal("0")

# ─── MPF Constants ────────────────────────────────────────────────────────────
MPF_RATE = Decimal("0.05")
MPF_MONTHLY_CAP_INCOME = Decimal("30000")
MPF_MONTHLY_MIN_INCOME = Decimal("7100")
MPF_MAX_CONTRIBUTION = Decimal("1500")
DEFAULT_PERIOD_DAYS = 30

# Industry Scheme daily bands: (lower bound inclusive, employer daily, employee daily).
# The top band is percentage based and capped, see INDUSTRY_DAILY_CAP.
INDUSTRY_SCHEME_BANDS = [
    (Decimal("0"), Decimal("10"), Decimal("0")),
    (Decimal("280"), Decimal("10"), Decimal("10")),
    (Decimal("350"), Decimal("20"), Decimal("20")),
]
INDUSTRY_PERCENT_BAND_FLOOR = Decimal("650")
INDUSTRY_DAILY_CAP = Decimal("50")

# ─── 713 / Payroll Constants ──────────────────────────────────────────────────
MONTHLY_DAY_DIVISOR = Decimal("30")
ADW_WINDOW_MONTHS = 12
REPORTING_YEAR_START = "2024-12"
REPORTING_YEAR_END = "2025-11"

PERIOD_KEY = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def _dec(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _whole(value: Decimal) -> Decimal:
    return value.quantize(WHOLE, rounding=ROUND_HALF_UP)


def _check_period(period: str) -> str:
    if not isinstance(period, str) or not PERIOD_KEY.match(period):
        raise ValueError(f"Invalid period key {period!r}, expected YYYY-MM")
    return period


# ─── Enumerations ─────────────────────────────────────────────────────────────
class PaymentType(str, Enum):
    MONTHLY = "Monthly"
    CASUAL = "Casual"


class MPFScheme(str, Enum):
    MASTER_TRUST = "Master Trust"
    INDUSTRY_SCHEME = "Industry Scheme"


class DisregardedReason(str, Enum):
    MATERNITY = "Maternity"
    SICKNESS = "Sickness"
    WIC = "WIC"            # employees' compensation (work injury)
    UNPAID = "Unpaid"
    OTHER = "Other"


class PayRule(str, Enum):
    FOUR_FIFTHS = "4/5"
    NO_PAY = "No Pay"
    FULL_PAY = "Full Pay"

    @property
    def factor(self) -> Decimal:
        return {"4/5": Decimal("0.8"), "No Pay": ZERO, "Full Pay": WHOLE}[self.value]


# ─── Data Classes ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class PayBasis:
    payment_type: PaymentType
    rate: Decimal             # Monthly salary or casual daily rate

    def __post_init__(self):
        if isinstance(self.payment_type, str):
            object.__setattr__(self, "payment_type", PaymentType(self.payment_type))
        object.__setattr__(self, "rate", _dec(self.rate))

    @property
    def daily_rate(self) -> Decimal:
        if self.payment_type == PaymentType.MONTHLY:
            return self.rate / MONTHLY_DAY_DIVISOR
        return self.rate

    def pay_for(self, days: int, factor: Decimal = WHOLE) -> Decimal:
        """Pay for a number of days, dividing last so half units stay exact."""
        if self.payment_type == PaymentType.MONTHLY:
            return days * self.rate * factor / MONTHLY_DAY_DIVISOR
        return days * self.rate * factor

    def baseline_gross(self, total_days: int) -> Decimal:
        """Gross pay for the period with nothing disregarded."""
        if self.payment_type == PaymentType.MONTHLY:
            return self.rate
        return total_days * self.rate


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    payment_type: PaymentType
    base_rate: Decimal        # Monthly salary or daily rate
    mpf_scheme: MPFScheme
    voluntary_rate: Decimal = ZERO   # Percent of gross, 0-100
    hkid: str = ""

    def __post_init__(self):
        if isinstance(self.payment_type, str):
            object.__setattr__(self, "payment_type", PaymentType(self.payment_type))
        if isinstance(self.mpf_scheme, str):
            object.__setattr__(self, "mpf_scheme", MPFScheme(self.mpf_scheme))
        object.__setattr__(self, "base_rate", _dec(self.base_rate))
        object.__setattr__(self, "voluntary_rate", _dec(self.voluntary_rate))
        if self.base_rate < 0:
            raise ValueError(f"Employee {self.id} has a negative base rate")
        if not ZERO <= self.voluntary_rate <= Decimal("100"):
            raise ValueError(f"Employee {self.id} voluntary rate must be within 0-100")

    @property
    def pay_basis(self) -> PayBasis:
        return PayBasis(self.payment_type, self.base_rate)


@dataclass(frozen=True)
class DisregardedAnnotation:
    reason: DisregardedReason
    days: int
    pay: Decimal
    entry_id: Optional[str] = None   # Registry entry currently applied


@dataclass
class PeriodRecord:
    id: str
    employee_id: str
    period: str               # YYYY-MM
    total_days: int
    gross_pay: Decimal = ZERO
    mpf_relevant_income: Decimal = ZERO
    mpf_employer_mandatory: Decimal = ZERO
    mpf_employee_mandatory: Decimal = ZERO
    mpf_employee_voluntary: Decimal = ZERO
    net_pay: Decimal = ZERO
    annotation: Optional[DisregardedAnnotation] = None

    @property
    def is_disregarded(self) -> bool:
        return self.annotation is not None

    @property
    def disregarded_reason(self) -> Optional[DisregardedReason]:
        return self.annotation.reason if self.annotation else None

    @property
    def disregarded_pay(self) -> Decimal:
        return self.annotation.pay if self.annotation else ZERO

    @property
    def disregarded_days(self) -> int:
        return self.annotation.days if self.annotation else 0

    @property
    def applied_entry_id(self) -> Optional[str]:
        return self.annotation.entry_id if self.annotation else None

    @property
    def mpf_total_contribution(self) -> Decimal:
        return self.mpf_employer_mandatory + self.mpf_employee_mandatory + self.mpf_employee_voluntary


@dataclass
class DisregardedPeriodEntry:
    id: str
    employee_id: str
    month: str                # YYYY-MM
    reason: DisregardedReason
    days: int
    pay_rule: PayRule

    def __post_init__(self):
        if isinstance(self.reason, str):
            self.reason = DisregardedReason(self.reason)
        if isinstance(self.pay_rule, str):
            self.pay_rule = PayRule(self.pay_rule)
        _check_period(self.month)
        if isinstance(self.days, bool) or not isinstance(self.days, int) or self.days < 0:
            raise ValueError(f"Disregarded days must be a non-negative integer, got {self.days!r}")

    @property
    def key(self) -> Tuple[str, str]:
        return (self.employee_id, self.month)


@dataclass
class ADWDetail:
    period: str
    gross: Decimal
    days: int
    excluded: bool
    excluded_days: int
    excluded_pay: Decimal
    reason: Optional[DisregardedReason] = None


@dataclass
class ADWResult:
    gross_total: Decimal
    days_total: int
    excluded_pay: Decimal
    excluded_days: int
    final_adw: Decimal
    details: List[ADWDetail] = field(default_factory=list)

    @property
    def valid_pay(self) -> Decimal:
        return self.gross_total - self.excluded_pay

    @property
    def valid_days(self) -> int:
        return self.days_total - self.excluded_days


@dataclass
class TaxYearSummary:
    employee_id: str
    employee_name: str
    hkid: str
    year_start: str
    year_end: str
    periods: int
    total_income: Decimal
    total_employer_mandatory: Decimal
    total_employee_mandatory: Decimal
    total_voluntary: Decimal


# ─── MPF Contribution Calculator ──────────────────────────────────────────────
def compute_mpf(
    scheme: MPFScheme,
    gross_pay,
    period_days: int = DEFAULT_PERIOD_DAYS,
) -> Tuple[Decimal, Decimal]:
    """Mandatory MPF contributions for one period.

    Returns (employer_mandatory, employee_mandatory), unrounded. Master Trust
    works on the period's relevant income; the Industry Scheme bands the daily
    average and scales the daily contribution back to the period.
    """
    scheme = MPFScheme(scheme)
    gross = _dec(gross_pay)
    if gross < 0:
        raise ValueError(f"Gross pay cannot be negative: {gross}")
    if period_days < 0:
        raise ValueError(f"Period days cannot be negative: {period_days}")

    if scheme == MPFScheme.MASTER_TRUST:
        if gross > MPF_MONTHLY_CAP_INCOME:
            return MPF_MAX_CONTRIBUTION, MPF_MAX_CONTRIBUTION
        if gross < MPF_MONTHLY_MIN_INCOME:
            return gross * MPF_RATE, ZERO
        return gross * MPF_RATE, gross * MPF_RATE

    days = Decimal(period_days)
    daily_average = gross / (days or WHOLE)
    if daily_average >= INDUSTRY_PERCENT_BAND_FLOOR:
        employer_daily = employee_daily = min(INDUSTRY_DAILY_CAP, daily_average * MPF_RATE)
    else:
        employer_daily, employee_daily = INDUSTRY_SCHEME_BANDS[0][1:]
        for floor, er, ee in INDUSTRY_SCHEME_BANDS:
            if daily_average >= floor:
                employer_daily, employee_daily = er, ee
    return employer_daily * days, employee_daily * days


# ─── Proportional Pay Reallocator ─────────────────────────────────────────────
def _affected_days(disregarded_days: int, total_days: int) -> int:
    return min(max(disregarded_days, 0), total_days)


def reallocate_pay(
    pay_basis: PayBasis,
    total_days: int,
    disregarded_days: int,
    pay_rule: PayRule,
) -> Tuple[Decimal, Decimal]:
    """Split a period into normal and disregarded days.

    Returns (gross_pay, excluded_pay). The excluded pay is everything paid for
    the disregarded days, whatever the pay rule.
    """
    pay_rule = PayRule(pay_rule)
    affected_days = _affected_days(disregarded_days, total_days)
    normal_pay = pay_basis.pay_for(total_days - affected_days)
    period_pay = pay_basis.pay_for(affected_days, pay_rule.factor)
    return normal_pay + period_pay, period_pay


# ─── Payroll Record Recompute ─────────────────────────────────────────────────
def recompute_record(
    record: PeriodRecord,
    employee: Optional[Employee],
    new_gross_pay,
    annotation: Optional[DisregardedAnnotation],
) -> PeriodRecord:
    """Rebuild MPF, net pay and the disregarded annotation of a record in place.

    An unresolved employee leaves the record untouched.
    """
    if employee is None or employee.id != record.employee_id:
        logger.warning("No employee for record %s, recompute skipped", record.id)
        return record

    gross = _dec(new_gross_pay)
    employer, employee_mandatory = compute_mpf(employee.mpf_scheme, gross, record.total_days)
    voluntary = gross * employee.voluntary_rate / 100

    record.gross_pay = _whole(gross)
    record.mpf_relevant_income = record.gross_pay
    record.mpf_employer_mandatory = _whole(employer)
    record.mpf_employee_mandatory = _whole(employee_mandatory)
    record.mpf_employee_voluntary = _whole(voluntary)
    record.net_pay = record.gross_pay - record.mpf_employee_mandatory - record.mpf_employee_voluntary

    if annotation is not None:
        annotation = replace(annotation, days=int(annotation.days), pay=_whole(_dec(annotation.pay)))
    record.annotation = annotation
    return record


# ─── ADW Aggregator ───────────────────────────────────────────────────────────
def compute_adw(employee: Employee, all_records: Iterable[PeriodRecord]) -> ADWResult:
    """713 Average Daily Wage over the latest 12 periods of an employee."""
    history = sorted(
        (r for r in all_records if r.employee_id == employee.id),
        key=lambda r: r.period,
        reverse=True,
    )[:ADW_WINDOW_MONTHS]

    gross_total = ZERO
    days_total = 0
    excluded_pay = ZERO
    excluded_days = 0
    details = []
    for rec in history:
        gross_total += rec.gross_pay
        days_total += rec.total_days
        if rec.is_disregarded:
            excluded_pay += rec.disregarded_pay
            excluded_days += rec.disregarded_days
        details.append(ADWDetail(
            period=rec.period,
            gross=rec.gross_pay,
            days=rec.total_days,
            excluded=rec.is_disregarded,
            excluded_days=rec.disregarded_days,
            excluded_pay=rec.disregarded_pay,
            reason=rec.disregarded_reason,
        ))

    valid_pay = gross_total - excluded_pay
    valid_days = days_total - excluded_days
    final_adw = valid_pay / valid_days if valid_days > 0 else ZERO

    return ADWResult(
        gross_total=gross_total,
        days_total=days_total,
        excluded_pay=excluded_pay,
        excluded_days=excluded_days,
        final_adw=final_adw.quantize(CENTS, rounding=ROUND_HALF_UP),
        details=details,
    )


def reporting_months(start: str = REPORTING_YEAR_START, end: str = REPORTING_YEAR_END) -> List[str]:
    """YYYY-MM keys from start to end inclusive."""
    year, month = map(int, _check_period(start).split("-"))
    last = _check_period(end)
    months = []
    while True:
        key = f"{year:04d}-{month:02d}"
        if key > last:
            break
        months.append(key)
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return months


# ─── Store ────────────────────────────────────────────────────────────────────
class PayrollStore:
    """In-memory employees, period records and disregarded-period entries."""

    def __init__(self):
        self._employees: Dict[str, Employee] = {}
        self._records: Dict[Tuple[str, str], PeriodRecord] = {}
        self._entries: Dict[str, DisregardedPeriodEntry] = {}

    def save_employee(self, emp: Employee) -> Employee:
        self._employees[emp.id] = emp
        return emp

    def get_employee(self, emp_id: str) -> Optional[Employee]:
        return self._employees.get(emp_id)

    def list_employees(self) -> List[Employee]:
        return sorted(self._employees.values(), key=lambda e: e.id)

    def save_record(self, rec: PeriodRecord) -> PeriodRecord:
        self._records[(rec.employee_id, rec.period)] = rec
        return rec

    def get_record(self, emp_id: str, period: str) -> Optional[PeriodRecord]:
        return self._records.get((emp_id, period))

    def list_records(self, emp_id: Optional[str] = None) -> List[PeriodRecord]:
        if emp_id is None:
            return list(self._records.values())
        return [r for r in self._records.values() if r.employee_id == emp_id]

    def save_entry(self, entry: DisregardedPeriodEntry) -> DisregardedPeriodEntry:
        self._entries[entry.id] = entry
        return entry

    def get_entry(self, entry_id: str) -> Optional[DisregardedPeriodEntry]:
        return self._entries.get(entry_id)

    def delete_entry(self, entry_id: str) -> Optional[DisregardedPeriodEntry]:
        return self._entries.pop(entry_id, None)

    def find_entry(self, emp_id: str, month: str) -> Optional[DisregardedPeriodEntry]:
        for entry in self._entries.values():
            if entry.key == (emp_id, month):
                return entry
        return None

    def list_entries(self, emp_id: Optional[str] = None) -> List[DisregardedPeriodEntry]:
        if emp_id is None:
            return list(self._entries.values())
        return [e for e in self._entries.values() if e.employee_id == emp_id]


# ─── Payroll Service ──────────────────────────────────────────────────────────
class PayrollService:
    EDITABLE_FIELDS = ("employee_id", "month", "reason", "days", "pay_rule")

    def __init__(self, store: Optional[PayrollStore] = None):
        self.store = store or PayrollStore()

    def add_employee(
        self,
        name: str,
        payment_type: PaymentType,
        base_rate: Decimal,
        mpf_scheme: Optional[MPFScheme] = None,
        voluntary_rate: Decimal = ZERO,
        hkid: str = "",
        employee_id: Optional[str] = None,
    ) -> Employee:
        payment_type = PaymentType(payment_type)
        if mpf_scheme is None:
            mpf_scheme = (MPFScheme.MASTER_TRUST if payment_type == PaymentType.MONTHLY
                          else MPFScheme.INDUSTRY_SCHEME)
        emp = Employee(
            id=employee_id or f"EMP-{uuid.uuid4().hex[:8].upper()}",
            name=name,
            payment_type=payment_type,
            base_rate=_dec(base_rate),
            mpf_scheme=MPFScheme(mpf_scheme),
            voluntary_rate=_dec(voluntary_rate),
            hkid=hkid,
        )
        self.store.save_employee(emp)
        logger.info("Employee added: %s (%s)", emp.name, emp.id)
        return emp

    # ── Period generation ──
    def open_period(self, employee_id: str, period: str, total_days: int = DEFAULT_PERIOD_DAYS) -> PeriodRecord:
        """Create the record for one month, applying any disregarded period already registered."""
        _check_period(period)
        emp = self.store.get_employee(employee_id)
        if not emp:
            raise ValueError(f"Employee {employee_id} not found")
        if total_days < 0:
            raise ValueError(f"Period days cannot be negative: {total_days}")
        if self.store.get_record(employee_id, period):
            raise ValueError(f"Period {period} already open for {employee_id}")

        rec = PeriodRecord(id=f"{employee_id}-{period}", employee_id=employee_id,
                           period=period, total_days=total_days)
        recompute_record(rec, emp, emp.pay_basis.baseline_gross(total_days), None)
        self.store.save_record(rec)
        entry = self.store.find_entry(employee_id, period)
        if entry:
            self._apply(entry)
        logger.info("Period opened: %s (gross=%s)", rec.id, rec.gross_pay)
        return rec

    def open_periods(
        self,
        employee_id: str,
        periods: Iterable[str],
        total_days: int = DEFAULT_PERIOD_DAYS,
    ) -> List[PeriodRecord]:
        return [self.open_period(employee_id, p, total_days) for p in periods]

    # ── Disregarded-period registry ──
    def add_disregarded_entry(
        self,
        employee_id: str,
        month: str,
        reason: DisregardedReason,
        days: int,
        pay_rule: PayRule,
    ) -> List[PeriodRecord]:
        entry = DisregardedPeriodEntry(
            id=f"DP-{uuid.uuid4().hex[:8].upper()}",
            employee_id=employee_id,
            month=month,
            reason=reason,
            days=days,
            pay_rule=pay_rule,
        )
        self._check_unique(entry)
        self.store.save_entry(entry)
        logger.info("Disregarded period added: %s %s %s (%s days, %s)",
                    entry.id, employee_id, month, days, entry.pay_rule.value)
        self._apply(entry)
        return self.store.list_records()

    def edit_disregarded_entry(self, entry_id: str, **fields) -> List[PeriodRecord]:
        entry = self.store.get_entry(entry_id)
        if not entry:
            raise ValueError(f"Disregarded period {entry_id} not found")
        unknown = set(fields) - set(self.EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot edit fields: {', '.join(sorted(unknown))}")

        updated = DisregardedPeriodEntry(**{**entry.__dict__, **fields})
        self._check_unique(updated)
        if updated.key != entry.key:
            self._restore_baseline(*entry.key)
        self.store.save_entry(updated)
        logger.info("Disregarded period edited: %s -> %s %s", entry_id, *updated.key)
        self._apply(updated)
        return self.store.list_records()

    def delete_disregarded_entry(self, entry_id: str) -> List[PeriodRecord]:
        entry = self.store.delete_entry(entry_id)
        if not entry:
            raise ValueError(f"Disregarded period {entry_id} not found")
        logger.info("Disregarded period deleted: %s", entry_id)
        self._restore_baseline(*entry.key)
        return self.store.list_records()

    def rebuild(self) -> List[PeriodRecord]:
        """Reset every record to baseline, then re-apply the registry."""
        for rec in self.store.list_records():
            self._restore_baseline(rec.employee_id, rec.period)
        for entry in self.store.list_entries():
            self._apply(entry)
        return self.store.list_records()

    def _check_unique(self, entry: DisregardedPeriodEntry):
        existing = self.store.find_entry(*entry.key)
        if existing and existing.id != entry.id:
            raise ValueError(
                f"{entry.employee_id} already has disregarded period {existing.id} in {entry.month}"
            )

    def _apply(self, entry: DisregardedPeriodEntry):
        rec = self.store.get_record(*entry.key)
        if not rec:
            logger.warning("No period record %s for %s, nothing recomputed", entry.month, entry.employee_id)
            return
        emp = self.store.get_employee(entry.employee_id)
        if not emp:
            logger.warning("Employee %s not found, recompute skipped", entry.employee_id)
            return
        gross, excluded_pay = reallocate_pay(emp.pay_basis, rec.total_days, entry.days, entry.pay_rule)
        annotation = DisregardedAnnotation(
            reason=entry.reason,
            days=_affected_days(entry.days, rec.total_days),
            pay=excluded_pay,
            entry_id=entry.id,
        )
        recompute_record(rec, emp, gross, annotation)

    def _restore_baseline(self, employee_id: str, month: str):
        rec = self.store.get_record(employee_id, month)
        emp = self.store.get_employee(employee_id)
        if not rec or not emp:
            return
        recompute_record(rec, emp, emp.pay_basis.baseline_gross(rec.total_days), None)

    # ── Reporting ──
    def compute_adw(self, employee_id: str) -> ADWResult:
        emp = self.store.get_employee(employee_id)
        if not emp:
            raise ValueError(f"Employee {employee_id} not found")
        return compute_adw(emp, self.store.list_records(employee_id))

    def tax_year_summary(
        self,
        employee_id: str,
        year_start: str = REPORTING_YEAR_START,
        year_end: str = REPORTING_YEAR_END,
    ) -> TaxYearSummary:
        """Yearly figures for the employer's return (IR56B)."""
        emp = self.store.get_employee(employee_id)
        if not emp:
            raise ValueError(f"Employee {employee_id} not found")
        _check_period(year_start)
        _check_period(year_end)

        recs = [r for r in self.store.list_records(employee_id)
                if year_start <= r.period <= year_end]
        return TaxYearSummary(
            employee_id=emp.id,
            employee_name=emp.name,
            hkid=emp.hkid,
            year_start=year_start,
            year_end=year_end,
            periods=len(recs),
            total_income=sum((r.gross_pay for r in recs), ZERO),
            total_employer_mandatory=sum((r.mpf_employer_mandatory for r in recs), ZERO),
            total_employee_mandatory=sum((r.mpf_employee_mandatory for r in recs), ZERO),
            total_voluntary=sum((r.mpf_employee_voluntary for r in recs), ZERO),
        )


def load_scenario(path: Path) -> PayrollService:
    """Build a service from a JSON scenario of employees, periods and entries."""
    data = json.loads(Path(path).read_text())
    svc = PayrollService()
    for item in data.get("employees", []):
        emp = svc.add_employee(
            name=item.get("name", item["id"]),
            payment_type=PaymentType(item["payment_type"]),
            base_rate=_dec(item["base_rate"]),
            mpf_scheme=item.get("mpf_scheme"),
            voluntary_rate=_dec(item.get("voluntary_rate", 0)),
            hkid=item.get("hkid", ""),
            employee_id=item["id"],
        )
        for period, days in sorted(item.get("periods", {}).items()):
            svc.open_period(emp.id, period, int(days))
    for item in data.get("disregarded", []):
        svc.add_disregarded_entry(
            employee_id=item["employee_id"],
            month=item["month"],
            reason=DisregardedReason(item["reason"]),
            days=int(item["days"]),
            pay_rule=PayRule(item["pay_rule"]),
        )
    return svc


# ─── CLI ───────────────────────────────────────────────────────────────────────
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hk-payroll", description="HK SME Payroll Compliance Engine")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("mpf", help="MPF mandatory contributions for one period")
    p.add_argument("scheme", choices=[s.value for s in MPFScheme])
    p.add_argument("gross")
    p.add_argument("--days", type=int, default=DEFAULT_PERIOD_DAYS)

    p = sub.add_parser("reallocate", help="Recompute gross pay for a disregarded period")
    p.add_argument("--type", required=True, choices=[t.value for t in PaymentType])
    p.add_argument("--rate", required=True)
    p.add_argument("--total-days", type=int, default=DEFAULT_PERIOD_DAYS)
    p.add_argument("--days", type=int, required=True)
    p.add_argument("--rule", required=True, choices=[r.value for r in PayRule])

    p = sub.add_parser("adw", help="713 Average Daily Wage ledger")
    p.add_argument("scenario")
    p.add_argument("employee_id")

    p = sub.add_parser("summary", help="Tax-year income and MPF totals")
    p.add_argument("scenario")
    p.add_argument("employee_id")
    p.add_argument("--start", default=REPORTING_YEAR_START)
    p.add_argument("--end", default=REPORTING_YEAR_END)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return _run(args)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


def _run(args) -> int:
    if args.command == "mpf":
        er, ee = compute_mpf(MPFScheme(args.scheme), _dec(args.gross), args.days)
        print(f"Scheme:    {args.scheme} ({args.days} days)")
        print(f"  Employer:  ${_whole(er):>10,}")
        print(f"  Employee:  ${_whole(ee):>10,}")

    elif args.command == "reallocate":
        basis = PayBasis(PaymentType(args.type), _dec(args.rate))
        gross, excluded = reallocate_pay(basis, args.total_days, args.days, PayRule(args.rule))
        print(f"  Daily Rate:    ${basis.daily_rate.quantize(CENTS, rounding=ROUND_HALF_UP):>10,}")
        print(f"  Gross Pay:     ${_whole(gross):>10,}")
        print(f"  Excluded Pay:  ${_whole(excluded):>10,}")
        print(f"  Excluded Days:  {_affected_days(args.days, args.total_days):>10}")

    elif args.command == "adw":
        svc = load_scenario(Path(args.scenario))
        result = svc.compute_adw(args.employee_id)
        print(f"\n{'='*62}")
        print(f"  713 AVERAGE DAILY WAGE — {args.employee_id}")
        print(f"{'─'*62}")
        print(f"  {'Period':<9} {'Gross':>10} {'Days':>5}  {'Status':<11} {'Excl.Pay':>9} {'Excl.Days':>9}")
        for d in result.details:
            status = "Disregarded" if d.excluded else "Included"
            excl_pay = f"-{d.excluded_pay}" if d.excluded else "-"
            excl_days = f"-{d.excluded_days}" if d.excluded else "-"
            print(f"  {d.period:<9} {d.gross:>10,} {d.days:>5}  {status:<11} {excl_pay:>9} {excl_days:>9}")
        print(f"{'─'*62}")
        print(f"  Net Wages (A):   ${result.valid_pay:>12,}")
        print(f"  Net Days (B):     {result.valid_days:>12}")
        print(f"  ADW (A / B):     ${result.final_adw:>12,}")

    elif args.command == "summary":
        svc = load_scenario(Path(args.scenario))
        s = svc.tax_year_summary(args.employee_id, args.start, args.end)
        print(f"\nTax Year Summary — {s.employee_name} — {s.year_start} to {s.year_end}")
        print(f"  Periods:                 {s.periods:>10}")
        print(f"  Total Income:           ${s.total_income:>10,}")
        print(f"  Employee Mandatory MPF: ${s.total_employee_mandatory:>10,}")
        print(f"  Employer Mandatory MPF: ${s.total_employer_mandatory:>10,}")
        print(f"  Voluntary MPF:          ${s.total_voluntary:>10,}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
