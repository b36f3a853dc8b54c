"""
Reconciliation data model

Immutable records and derived results shared by the parser, engine,
sequencer and exporter. Derived structures are rebuilt on every query.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence, Tuple


class RecordCategory(Enum):
    """Record categories"""
    BILL = "bill"
    CREDIT = "credit"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def sort_rank(self) -> int:
        """Bills sort before credits"""
        return 0 if self is RecordCategory.BILL else 1


@dataclass(frozen=True)
class Record:
    """One accepted row from a source file"""
    name: str
    total: float
    headers: Tuple[str, ...]
    row_data: Mapping[str, str]
    category: RecordCategory

    def __post_init__(self):
        object.__setattr__(self, 'headers', tuple(self.headers))
        object.__setattr__(self, 'row_data', MappingProxyType(dict(self.row_data)))

    def value(self, header: str) -> str:
        return self.row_data.get(header) or ''

    @property
    def date_value(self) -> str:
        """Raw value of the first header named 'date' (any case)"""
        for header in self.headers:
            if header.lower() == 'date':
                return self.value(header)
        return ''


@dataclass(frozen=True)
class AnnotatedRecord:
    """Record paired with its resolved monetary amount"""
    record: Record
    amount: float

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def category(self) -> RecordCategory:
        return self.record.category

    @property
    def headers(self) -> Tuple[str, ...]:
        return self.record.headers

    @property
    def row_data(self) -> Mapping[str, str]:
        return self.record.row_data

    @property
    def is_bill(self) -> bool:
        return self.record.category is RecordCategory.BILL

    @property
    def signed_amount(self) -> float:
        return self.amount if self.is_bill else -self.amount


@dataclass(frozen=True)
class CounterpartyGroup:
    """Records sharing a case-insensitive counterparty name"""
    key: str
    name: str
    bills: Tuple[Record, ...] = ()
    credits: Tuple[Record, ...] = ()

    @property
    def records(self) -> Tuple[Record, ...]:
        return self.bills + self.credits


@dataclass(frozen=True)
class CompanySummary:
    """Per-counterparty totals"""
    key: str
    name: str
    bill_sum: float
    credit_sum: float
    balance: float

    @property
    def status(self) -> str:
        if self.balance > 0:
            return 'Outstanding'
        if self.balance < 0:
            return 'Overpaid'
        return 'Settled'


@dataclass(frozen=True)
class Summary:
    """Aggregate totals across all counterparties"""
    total_bills: float
    total_credits: float
    net_balance: float
    companies: Tuple[CompanySummary, ...] = ()

    def company(self, key: str) -> Optional[CompanySummary]:
        for company in self.companies:
            if company.key == key:
                return company
        return None


@dataclass(frozen=True)
class ReconciliationResult:
    """Output of one reconciliation run"""
    records: Tuple[AnnotatedRecord, ...]
    headers: Tuple[str, ...]
    groups: Mapping[str, CounterpartyGroup]
    summary: Summary

    def __post_init__(self):
        object.__setattr__(self, 'records', tuple(self.records))
        object.__setattr__(self, 'headers', tuple(self.headers))
        object.__setattr__(self, 'groups', MappingProxyType(dict(self.groups)))

    @property
    def company_count(self) -> int:
        return len(self.groups)

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records


@dataclass(frozen=True)
class SequencedRecord:
    """Record with the running balance after applying it"""
    entry: AnnotatedRecord
    running_balance: float
    company_key: str


@dataclass(frozen=True)
class CompanyLedger:
    """Sequenced rows of one counterparty"""
    summary: CompanySummary
    rows: Tuple[SequencedRecord, ...]


@dataclass(frozen=True)
class ReconciliationState:
    """
    Snapshot of the two loaded category collections

    Uploads never mutate a state; they build a new one that the session
    swaps in with a single assignment.
    """
    bills: Tuple[Record, ...] = ()
    credits: Tuple[Record, ...] = ()
    bill_headers: Tuple[str, ...] = ()
    credit_headers: Tuple[str, ...] = ()

    @staticmethod
    def _headers_of(records: Sequence[Record]) -> Tuple[str, ...]:
        return tuple(records[0].headers) if records else ()

    def with_category(self, category: RecordCategory,
                      records: Sequence[Record]) -> 'ReconciliationState':
        records = tuple(records)
        if category is RecordCategory.BILL:
            return ReconciliationState(records, self.credits,
                                       self._headers_of(records), self.credit_headers)
        return ReconciliationState(self.bills, records,
                                   self.bill_headers, self._headers_of(records))

    def with_categories(self, bills: Sequence[Record],
                        credits: Sequence[Record]) -> 'ReconciliationState':
        bills, credits = tuple(bills), tuple(credits)
        return ReconciliationState(bills, credits,
                                   self._headers_of(bills), self._headers_of(credits))

    @property
    def is_empty(self) -> bool:
        return not self.bills and not self.credits


EMPTY_STATE = ReconciliationState()


@dataclass(frozen=True)
class UploadStatus:
    """Outcome of the last upload into a slot"""
    slot: str
    ok: bool
    message: str
    bill_count: int = 0
    credit_count: int = 0


@dataclass(frozen=True)
class ExportDocument:
    """Serialized export ready to be written or downloaded"""
    filename: str
    content: str
    content_type: str = 'text/csv'
    encoding: str = 'utf-8'
    metadata: Dict[str, int] = field(default_factory=dict, compare=False)

    def write_to(self, directory) -> Path:
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        file_path = directory / self.filename
        # newline='' keeps the '\n' line endings on every platform
        with open(file_path, 'w', encoding=self.encoding, newline='') as f:
            f.write(self.content)
        return file_path
