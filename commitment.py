# commitment.py
# Hash commitment: digest = SHA-256(message || nonce), nonce = 32 random bytes.
# Graphs are committed through their canonical edge-list serialization.

import hmac
from dataclasses import dataclass
from hashlib import sha256

from graph_model import normalize_edge
from rng import resolve

COMMIT_NONCE_SIZE = 32  # 256 bits


@dataclass(frozen=True)
class Commitment:
    digest: bytes
    nonce: bytes

    def to_dict(self) -> dict:
        return {"digest": self.digest.hex(), "nonce": self.nonce.hex()}


def commit(message: bytes, rng=None) -> Commitment:
    nonce = resolve(rng).token_bytes(COMMIT_NONCE_SIZE)
    return Commitment(sha256(message + nonce).digest(), nonce)


def open_commitment(commitment: Commitment, message: bytes) -> bool:
    computed = sha256(message + commitment.nonce).digest()
    return hmac.compare_digest(computed, commitment.digest)


def serialize_edges(edges) -> bytes:
    """
    Canonical form of an edge set: pairs normalized to (min, max), duplicates
    dropped, ascending by (u, v), encoded as b"u,v|u,v|...". Two lists naming
    the same edges in any order or orientation serialize identically.
    """
    canon = sorted({normalize_edge(u, v) for u, v in edges})
    return "|".join(f"{u},{v}" for u, v in canon).encode("ascii")


def serialize_graph(graph) -> bytes:
    return serialize_edges(graph.edges())


def commit_to_graph(graph, rng=None) -> Commitment:
    return commit(serialize_graph(graph), rng)
