#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Mutation fuzzing of the phpser decoder.
#
# Generates three fuzz categories:
#   A) valid encodings with random byte flips / inserts / deletes
#   B) valid encodings cut at a random offset
#   C) random session streams with mutated names and values
#
# The decoder may reject any of these, but only with a PHPSerializeError.
# Any other exception prints a minimal repro payload and exits non-zero.

import os, sys, json, base64, random
from typing import Any, Dict

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from phpser import PHPSerializeError, TypeRegistry, deserialize, serialize, serialize_session

SEED = int(os.environ.get("PHPSER_SEED", "4242"))
ROUNDS = int(os.environ.get("PHPSER_FUZZ_ROUNDS", "5000"))

random.seed(SEED)

# Mutations pull bytes from the grammar's alphabet so they hit parser
# branches instead of dying on the first tag.
ALPHABET = b'Nbidsa O:;{}"|0123456789-.E'


class Probe:
    x: Any
    y: Any


REGISTRY = TypeRegistry([Probe])

def b64(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def crash(label: str, payload: bytes, exc: BaseException, ctx: Dict[str, Any]) -> None:
    print("CRASH:", label)
    print("EXC :", type(exc).__name__, exc)
    print("INPUT_B64:", b64(payload))
    print("CTX:", json.dumps(ctx)[:4000])
    raise SystemExit(1)

# --- generators ---

def rand_bytes(nmax: int) -> bytes:
    return bytes(random.getrandbits(8) for _ in range(random.randint(0, nmax)))

def rand_value(depth: int = 0) -> Any:
    r = random.random()
    if depth > 4 or r < 0.45:
        return random.choice([
            None, True, False,
            random.randint(-(2**63), 2**63 - 1),
            random.uniform(-1e6, 1e6),
            rand_bytes(12),
        ])
    if r < 0.70:
        return [rand_value(depth + 1) for _ in range(random.randint(0, 4))]
    if r < 0.90:
        return {random.choice([random.randint(0, 5), rand_bytes(4)]): rand_value(depth + 1)
                for _ in range(random.randint(0, 4))}
    return {"__probe__": [(b"x", rand_value(depth + 1)), (b"y", rand_value(depth + 1))]}

def encode(value: Any) -> bytes:
    if isinstance(value, dict) and "__probe__" in value:
        fields = value["__probe__"]
        inner = b"".join(serialize(k) + serialize(v) for k, v in fields)
        return b'O:5:"probe":%d:{%s}' % (len(fields), inner)
    return serialize(value)

def mutate(raw: bytes) -> bytes:
    buf = bytearray(raw)
    for _ in range(random.randint(1, 4)):
        op = random.random()
        pos = random.randint(0, len(buf))
        if op < 0.4 and buf:
            buf[min(pos, len(buf) - 1)] = random.choice(ALPHABET)
        elif op < 0.7:
            buf.insert(pos, random.choice(ALPHABET))
        elif buf:
            del buf[min(pos, len(buf) - 1)]
    return bytes(buf)

def try_decode(label: str, payload: bytes, ctx: Dict[str, Any]) -> None:
    for assoc in (False, True):
        try:
            deserialize(payload, assoc, registry=REGISTRY)
        except PHPSerializeError:
            pass
        except Exception as exc:  # anything else is a decoder bug
            crash(label, payload, exc, dict(ctx, assoc=assoc))

def main() -> int:
    for i in range(ROUNDS):
        r = random.random()

        # A) mutated valid encodings
        if r < 0.50:
            raw = encode(rand_value())
            try_decode("A mutate", mutate(raw), {"round": i})
            continue

        # B) truncated valid encodings
        if r < 0.80:
            raw = encode(rand_value())
            cut = random.randint(0, max(0, len(raw) - 1))
            try_decode("B truncate", raw[:cut], {"round": i, "cut": cut})
            continue

        # C) session streams
        session = {"k%d" % n: rand_value(1) for n in range(random.randint(1, 4))}
        raw = serialize_session({k: v for k, v in session.items()
                                 if not (isinstance(v, dict) and "__probe__" in v)})
        try_decode("C session", mutate(raw), {"round": i})

    print(f"OK: {ROUNDS} rounds without crashes, seed={SEED}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
