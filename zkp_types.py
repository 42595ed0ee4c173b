# zkp_types.py
# Values exchanged between Prover and Verifier, plus their JSON form
# (same shape as the open_package / commit_package files of a session).

from dataclasses import dataclass
from typing import Union

from commitment import Commitment
from errors import ProtocolStructureError


@dataclass(frozen=True)
class RevealPermutation:
    """Answer to challenge 0: pi and the edges of G' = pi(G)."""
    permutation: tuple
    permuted_edges: tuple

    CHALLENGE = 0


@dataclass(frozen=True)
class RevealCycle:
    """Answer to challenge 1: the edges of G' and the edges of pi(cycle). pi stays secret."""
    permuted_edges: tuple
    cycle_edges: tuple

    CHALLENGE = 1


Response = Union[RevealPermutation, RevealCycle]


@dataclass(frozen=True)
class ProofRound:
    commitment: Commitment
    response: Response

    @property
    def challenge(self) -> int:
        return self.response.CHALLENGE


@dataclass(frozen=True)
class Proof:
    k: int
    rounds: tuple

    def challenges(self) -> list[int]:
        return [r.challenge for r in self.rounds]


def is_challenge_bit(c) -> bool:
    return not isinstance(c, bool) and isinstance(c, int) and c in (0, 1)


# =============================
# JSON form
# =============================

def round_to_dict(rnd: ProofRound) -> dict:
    resp = rnd.response
    out = {"type": resp.CHALLENGE, "permutedGraphEdges": [list(e) for e in resp.permuted_edges]}
    if isinstance(resp, RevealPermutation):
        out["permutation"] = list(resp.permutation)
    else:
        out["cycleEdges"] = [list(e) for e in resp.cycle_edges]
    return {"challenge": rnd.challenge, "commitment": rnd.commitment.to_dict(), "response": out}


def proof_to_dict(proof: Proof) -> dict:
    return {"k": proof.k, "rounds": [round_to_dict(r) for r in proof.rounds]}


def _field(obj, key, where):
    if not isinstance(obj, dict) or key not in obj:
        raise ProtocolStructureError(f"{where}: missing '{key}'")
    return obj[key]


def _hex(value, where) -> bytes:
    if not isinstance(value, str):
        raise ProtocolStructureError(f"{where}: expected hex string")
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise ProtocolStructureError(f"{where}: invalid hex") from None


def _ints(value, where) -> tuple:
    if not isinstance(value, list) or not all(isinstance(x, int) and not isinstance(x, bool) for x in value):
        raise ProtocolStructureError(f"{where}: expected a list of integers")
    return tuple(value)


def _pairs(value, where) -> tuple:
    if not isinstance(value, list):
        raise ProtocolStructureError(f"{where}: expected a list of edges")
    out = []
    for e in value:
        pair = _ints(e, where)
        if len(pair) != 2:
            raise ProtocolStructureError(f"{where}: edge {e!r} is not a pair")
        out.append(pair)
    return tuple(out)


def round_from_dict(obj, index=0) -> ProofRound:
    where = f"round {index}"
    c = _field(obj, "commitment", where)
    commitment = Commitment(_hex(_field(c, "digest", where), where), _hex(_field(c, "nonce", where), where))
    r = _field(obj, "response", where)
    rtype = _field(r, "type", where)
    edges = _pairs(_field(r, "permutedGraphEdges", where), where)
    if rtype == 0 and not isinstance(rtype, bool):
        response = RevealPermutation(_ints(_field(r, "permutation", where), where), edges)
    elif rtype == 1 and not isinstance(rtype, bool):
        response = RevealCycle(edges, _pairs(_field(r, "cycleEdges", where), where))
    else:
        raise ProtocolStructureError(f"{where}: unknown response type {rtype!r}")
    if "challenge" in obj and obj["challenge"] != response.CHALLENGE:
        raise ProtocolStructureError(f"{where}: challenge does not match response type")
    return ProofRound(commitment, response)


def proof_from_dict(obj) -> Proof:
    k = _field(obj, "k", "proof")
    rounds = _field(obj, "rounds", "proof")
    if isinstance(k, bool) or not isinstance(k, int) or not isinstance(rounds, list):
        raise ProtocolStructureError("proof: 'k' must be an int and 'rounds' a list")
    return Proof(k, tuple(round_from_dict(r, i) for i, r in enumerate(rounds)))
