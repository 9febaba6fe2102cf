from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from solders.transaction import VersionedTransaction


class LegStatus(str, Enum):
    FINALIZED = "finalized"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    SKIPPED = "skipped"  # dry run, never broadcast


@dataclass(frozen=True)
class UnsignedLeg:
    index: int  # 1-based, execution order
    encoded: str
    transaction: VersionedTransaction

    @property
    def message(self):
        return self.transaction.message


@dataclass(frozen=True)
class SignedLeg:
    leg: UnsignedLeg
    transaction: VersionedTransaction

    @property
    def index(self) -> int:
        return self.leg.index

    def serialize(self) -> bytes:
        return bytes(self.transaction)


@dataclass(frozen=True)
class LegResult:
    index: int
    signature: str | None
    status: LegStatus


@dataclass
class SwapReport:
    fee_micro_lamports: int | None = None
    pool_ids: list[str | None] = field(default_factory=list)
    legs: list[LegResult] = field(default_factory=list)

    @property
    def finalized(self) -> int:
        return sum(1 for r in self.legs if r.status == LegStatus.FINALIZED)
