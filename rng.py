# rng.py
# Random sources handed explicitly to permutation, nonce and challenge generation.
#  - SecureRandom: process-wide CSPRNG (secrets), the default everywhere
#  - HmacCounterDRBG: deterministic HMAC-SHA256 counter generator, for replay and tests only

import hmac, secrets, struct, threading
from hashlib import sha256

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

DRBG_KEY_SIZE = 32  # 256-bit key


class SecureRandom:
    """Thin wrapper over the OS CSPRNG. Stateless, so safe to share between threads."""

    def randbits(self, k: int) -> int:
        return secrets.randbits(k)

    def randbelow(self, n: int) -> int:
        if n <= 0:
            raise ValueError("invalid range")
        return secrets.randbelow(n)

    def randbit(self) -> int:
        return secrets.randbits(1)

    def token_bytes(self, k: int) -> bytes:
        return secrets.token_bytes(k)


def derive_drbg_key(seed: bytes, context: bytes = b"hamzkp-drbg") -> bytes:
    hkdf = HKDF(algorithm=hashes.SHA256(), length=DRBG_KEY_SIZE, salt=None, info=context)
    return hkdf.derive(seed)


class HmacCounterDRBG:
    """
    Deterministic generator: block i = HMAC-SHA256(key, be64(i)).
    Two instances built from the same seed produce the same stream, which makes
    a whole proof session replayable. Never use it for real proofs.
    """

    def __init__(self, key: bytes):
        self.key = key
        self.counter = 0
        self._lock = threading.Lock()

    @classmethod
    def from_seed(cls, seed: bytes, context: bytes = b"hamzkp-drbg") -> "HmacCounterDRBG":
        return cls(derive_drbg_key(seed, context))

    def _block(self) -> bytes:
        with self._lock:
            c = struct.pack(">Q", self.counter)
            self.counter += 1
        return hmac.new(self.key, c, sha256).digest()

    def token_bytes(self, k: int) -> bytes:
        out = b""
        while len(out) < k:
            out += self._block()
        return out[:k]

    def randbits(self, k: int) -> int:
        # k-bit integer from the top bits of ceil(k/8) bytes
        if k <= 0:
            return 0
        nbytes = (k + 7) // 8
        r = int.from_bytes(self.token_bytes(nbytes), "big")
        return r >> (nbytes * 8 - k)

    def randbelow(self, n: int) -> int:
        # uniform on [0, n): rejection sampling on bit_length(n) bits
        if n <= 0:
            raise ValueError("invalid range")
        k = n.bit_length()
        r = self.randbits(k)
        while r >= n:
            r = self.randbits(k)
        return r

    def randbit(self) -> int:
        return self.randbits(1)


DEFAULT_RNG = SecureRandom()


def resolve(rng):
    return DEFAULT_RNG if rng is None else rng
