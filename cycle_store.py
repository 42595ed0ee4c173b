#!/usr/bin/env python3
"""
cycle_store.py
- Seals the prover's secret Hamiltonian cycle with a passphrase (scrypt -> AES-GCM)
- Unseals it for a proving session
Files written next to outpath: .enc (nonce || ciphertext), .salt, .meta.json, all 0600.
Dependencies: cryptography

Usage:
    python cycle_store.py seal --cycle cycle.txt --out ~/.zkp-ham/cycle
    python cycle_store.py show --out ~/.zkp-ham/cycle
"""

import json, os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from errors import GraphFormatError
from graph_io import format_cycle, parse_cycle

# -----------------------
# Parameters
# -----------------------
SALT_SIZE = 16
NONCE_SIZE = 12        # AES-GCM nonce
SCRYPT_N = 2**17       # work factor
SCRYPT_R = 8
SCRYPT_P = 1
AAD = b"hamzkp-cycle-v1"
SALT_FILE_SUFFIX = ".salt"
ENC_FILE_SUFFIX  = ".enc"
META_FILE_SUFFIX = ".meta.json"


def derive_key_from_passphrase(passphrase: str, salt: bytes, n: int = SCRYPT_N, r: int = SCRYPT_R, p: int = SCRYPT_P) -> bytes:
    kdf = Scrypt(salt=salt, length=32, n=n, r=r, p=p)
    return kdf.derive(passphrase.encode("utf-8"))


def _write_private(path, data: bytes):
    with open(path, "wb") as f:
        f.write(data)
    os.chmod(path, 0o600)


def seal_cycle(cycle, passphrase: str, outpath: str, scrypt_n: int = SCRYPT_N) -> None:
    salt = os.urandom(SALT_SIZE)
    key = derive_key_from_passphrase(passphrase, salt, n=scrypt_n)
    nonce = os.urandom(NONCE_SIZE)
    ct = AESGCM(key).encrypt(nonce, format_cycle(cycle).encode("ascii"), AAD)
    d = os.path.dirname(outpath)
    if d:
        os.makedirs(d, exist_ok=True)
    _write_private(outpath + ENC_FILE_SUFFIX, nonce + ct)
    _write_private(outpath + SALT_FILE_SUFFIX, salt)
    meta = {"scheme": "scrypt+AESGCM", "scrypt": {"n": scrypt_n, "r": SCRYPT_R, "p": SCRYPT_P},
            "salt_size": SALT_SIZE, "nonce_size": NONCE_SIZE, "length": len(cycle)}
    _write_private(outpath + META_FILE_SUFFIX, json.dumps(meta).encode("utf-8"))


def unseal_cycle(passphrase: str, outpath: str, n=None) -> list[int]:
    """Raises GraphFormatError on a wrong passphrase or corrupted files."""
    with open(outpath + META_FILE_SUFFIX, "r") as f:
        meta = json.load(f)
    with open(outpath + SALT_FILE_SUFFIX, "rb") as f:
        salt = f.read()
    with open(outpath + ENC_FILE_SUFFIX, "rb") as f:
        data = f.read()
    params = meta.get("scrypt", {})
    key = derive_key_from_passphrase(passphrase, salt, params.get("n", SCRYPT_N),
                                     params.get("r", SCRYPT_R), params.get("p", SCRYPT_P))
    nonce, ct = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        plain = AESGCM(key).decrypt(nonce, ct, AAD)
    except InvalidTag:
        raise GraphFormatError("cannot unseal cycle: wrong passphrase or corrupted file") from None
    return parse_cycle(plain.decode("ascii"), n)


def cli(argv=None):
    import argparse, getpass
    from graph_io import load_cycle

    p = argparse.ArgumentParser()
    p.add_argument("cmd", choices=["seal", "show"], help="seal: encrypt a cycle file; show: decrypt and print")
    p.add_argument("--cycle", default="cycle.txt", help="plain cycle file to seal")
    p.add_argument("--out", default="~/.zkp-ham/cycle", help="base path (no suffix)")
    p.add_argument("--remove-plain", action="store_true", help="delete the plain cycle file after sealing")
    args = p.parse_args(argv)

    out = os.path.expanduser(args.out)
    if args.cmd == "seal":
        cycle = load_cycle(args.cycle)
        pw = getpass.getpass("Passphrase to seal cycle: ")
        seal_cycle(cycle, pw, out)
        print("[store] sealed cycle written to", out + ENC_FILE_SUFFIX)
        if args.remove_plain:
            os.remove(args.cycle)
            print("[store] removed", args.cycle)
    else:
        pw = getpass.getpass("Passphrase to unseal cycle: ")
        cycle = unseal_cycle(pw, out)
        print("[store] cycle:", " ".join(map(str, cycle)))


if __name__ == "__main__":
    cli()
