# errors.py
# Exceptions raised by the protocol engine, and the reasons a verifier may
# reject a proof. Rejections are returned as Verdict values, never raised.

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ZKPError(Exception):
    pass


class ConstructionError(ZKPError, ValueError):
    """Malformed graph (self-loop, vertex out of range, bad vertex count)."""


class InvalidPermutation(ZKPError, ValueError):
    """Permutation is not a bijection on [0, n)."""


class ProtocolStructureError(ZKPError):
    """Broken prover or tampered data: wrong shapes, lengths or round order."""


class InvalidWitness(ZKPError):
    """The prover's secret cycle is not a Hamiltonian cycle of its graph."""


class GraphFormatError(ZKPError, ValueError):
    """Graph, cycle or proof file could not be parsed."""


class VerificationFailure(str, Enum):
    COMMITMENT_MISMATCH = "CommitmentMismatch"
    INVALID_PERMUTATION = "InvalidPermutation"
    ISOMORPHISM_MISMATCH = "IsomorphismMismatch"
    INVALID_CYCLE_SHAPE = "InvalidCycleShape"
    EDGE_NOT_IN_COMMITTED_GRAPH = "EdgeNotInCommittedGraph"
    ROUND_COUNT_MISMATCH = "RoundCountMismatch"
    CHALLENGE_MISMATCH = "ChallengeMismatch"


@dataclass(frozen=True)
class Verdict:
    accepted: bool
    failed_round_index: Optional[int] = None
    reason: Optional[VerificationFailure] = None
    detail: str = "ok"

    @classmethod
    def ok(cls) -> "Verdict":
        return cls(True)

    @classmethod
    def reject(cls, reason: VerificationFailure, detail: str, round_index: Optional[int] = None) -> "Verdict":
        return cls(False, round_index, reason, detail)

    def at_round(self, index: int) -> "Verdict":
        # same decision, tagged with the index of the round that produced it
        return Verdict(self.accepted, index, self.reason, self.detail)

    def __bool__(self):
        return self.accepted

    def to_dict(self) -> dict:
        out = {"accepted": self.accepted, "detail": self.detail}
        if self.failed_round_index is not None:
            out["failedRoundIndex"] = self.failed_round_index
        if self.reason is not None:
            out["reason"] = self.reason.value
        return out

    def __str__(self):
        if self.accepted:
            return "accepted"
        where = f" at round {self.failed_round_index}" if self.failed_round_index is not None else ""
        return f"rejected{where}: {self.reason.value} ({self.detail})"
