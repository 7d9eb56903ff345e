from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Period = Literal["first", "second"]
ReportKind = Literal["bimonthly", "season", "payroll", "detailed", "transfer", "annual"]


class TaskDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    description: str
    category: str
    unit: str
    price: Decimal = Field(ge=0)


class TaskGroup(BaseModel):
    category: str
    tasks: list[TaskDefinition] = Field(default_factory=list)


class DailyLogEntry(BaseModel):
    id: str | None = None
    worker_id: int
    task_id: int
    date: dt.date
    quantity: Decimal = Field(ge=0)
    observation: str = ""


class WorkedDaysEntry(BaseModel):
    worker_id: int
    year: int
    month: int = Field(ge=1, le=12)
    period: Period
    days: int = Field(ge=0)


class Worker(BaseModel):
    id: int
    name: str
    seniority_percentage: Decimal = Field(default=Decimal("0"), ge=0)
    departement: str = ""
    number_of_children: int = Field(default=0, ge=0)
    rib: str = ""
    cnss: str = ""
    matricule: str = ""
    bank_code: str | None = None
    is_archived: bool = False


class ManualDeductions(BaseModel):
    advance: Decimal = Decimal("0")
    income_tax: Decimal = Decimal("0")


class ContributionSplit(BaseModel):
    """Social contribution expressed as its two statutory components."""

    cnss_rate: Decimal
    amo_rate: Decimal


class PayrollConfig(BaseModel):
    contribution_rate: Decimal | ContributionSplit
    milk_task_id: int
    meal_task_id: int
    manual_deductions: ManualDeductions | None = None

    @property
    def allowance_task_ids(self) -> frozenset[int]:
        return frozenset({self.milk_task_id, self.meal_task_id})


class TaskLine(BaseModel):
    task_id: int
    description: str
    unit: str
    quantity: Decimal
    price: Decimal
    amount: Decimal


class PayrollLineItem(BaseModel):
    """Derived payroll figures for one worker over one reporting window.

    Amounts keep full precision; rounding happens when rendering.
    """

    worker_id: int
    worker_name: str
    task_lines: list[TaskLine] = Field(default_factory=list)
    total_operation: Decimal = Decimal("0")
    seniority_rate: Decimal = Decimal("0")
    seniority_bonus: Decimal = Decimal("0")
    gross_total: Decimal = Decimal("0")
    social_deduction: Decimal = Decimal("0")
    cnss_deduction: Decimal | None = None
    amo_deduction: Decimal | None = None
    worked_days: int = 0
    milk_allowance: Decimal = Decimal("0")
    meal_allowance: Decimal = Decimal("0")
    advance: Decimal = Decimal("0")
    income_tax: Decimal = Decimal("0")
    net_pay: Decimal = Decimal("0")

    @property
    def has_activity(self) -> bool:
        return self.total_operation != 0 or self.worked_days != 0


class SummaryRow(BaseModel):
    """Row of the bi-monthly quantity statement."""

    worker_id: int
    worker_name: str
    quantities: dict[int, Decimal] = Field(default_factory=dict)
    worked_days: int = 0


class TransferRow(BaseModel):
    worker_id: int
    worker_name: str
    rib: str = ""
    bank_code: str | None = None
    net_pay: Decimal
    net_pay_words: str


class Report(BaseModel):
    kind: ReportKind
    params: dict = Field(default_factory=dict)
    rows: list[PayrollLineItem | SummaryRow | TransferRow] = Field(default_factory=list)
    totals: dict[str, Decimal] = Field(default_factory=dict)
    catalog_version: int = 1


class SavedReport(BaseModel):
    id: str
    kind: ReportKind
    params: dict = Field(default_factory=dict)
    snapshot: Report
    revision: int = 1
    created_at: dt.datetime
    updated_at: dt.datetime
