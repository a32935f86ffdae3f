#!/usr/bin/env python3
# tools/invariants_runner.py
#
# Round-trip invariants (property tests) for phpser.
#
# This runner:
# - generates random values inside the serializable model
# - checks algebraic invariants of serialize / deserialize
#
# Exit code:
#   0 -> all checks passed
#   1 -> invariant violation

import os, sys, json, base64, math, random
from typing import Any, Dict, List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from phpser import (
    TruncatedInputError,
    deserialize,
    deserialize_session,
    serialize,
    serialize_session,
)

SEED = int(os.environ.get("PHPSER_SEED", "1337"))
TRIALS = int(os.environ.get("PHPSER_TRIALS", "2000"))
MAX_GEN_DEPTH = int(os.environ.get("PHPSER_GEN_MAX_DEPTH", "5"))
MAX_KEYS = int(os.environ.get("PHPSER_GEN_MAX_KEYS", "6"))
MAX_LIST = int(os.environ.get("PHPSER_GEN_MAX_LIST", "6"))
MAX_BYTES = int(os.environ.get("PHPSER_GEN_MAX_BYTES", "24"))

random.seed(SEED)

def b64(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def rand_bytes() -> bytes:
    return bytes(random.getrandbits(8) for _ in range(random.randint(0, MAX_BYTES)))

def rand_float() -> float:
    r = random.random()
    if r < 0.3:
        return float(random.randint(-1000, 1000))
    if r < 0.6:
        return random.uniform(-1.0, 1.0)
    return random.uniform(-1.0, 1.0) * 10.0 ** random.randint(-30, 30)

def rand_scalar() -> Any:
    return random.choice([
        None, True, False,
        random.randint(-(2**63), 2**63 - 1),
        rand_float(),
        rand_bytes(),
    ])

def gen_value(depth: int) -> Any:
    """Values that decode back to themselves in non-assoc mode.

    Lists stay lists; dicts are given at least one bytes key so the
    0..n-1 heuristic can't turn them into lists.
    """
    if depth >= MAX_GEN_DEPTH:
        return rand_scalar()
    r = random.random()
    if r < 0.35:
        d: Dict[Any, Any] = {b"k": gen_value(depth + 1)}
        for _ in range(random.randint(0, MAX_KEYS)):
            key = rand_bytes() if random.random() < 0.7 else random.randint(-5, 50)
            d[key] = gen_value(depth + 1)
        return d
    if r < 0.65:
        return [gen_value(depth + 1) for _ in range(random.randint(0, MAX_LIST))]
    return rand_scalar()

def same(a: Any, b: Any) -> bool:
    if isinstance(a, float) and isinstance(b, float):
        return a == b and math.copysign(1, a) == math.copysign(1, b)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(same(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        return list(a) == list(b) and all(same(a[k], b[k]) for k in a)
    return type(a) is type(b) and a == b

def fail(label: str, ctx: Dict[str, Any]) -> int:
    print("INVARIANT FAIL:", label)
    print("CTX:", json.dumps(ctx)[:2000])
    return 1

def main() -> int:
    for t in range(TRIALS):
        v = gen_value(0)

        # (1) Encode stability (encode twice, same bytes)
        raw1 = serialize(v)
        raw2 = serialize(v)
        if raw1 != raw2:
            return fail("encode stability", {"trial": t})

        # (2) Round trip
        back = deserialize(raw1)
        if not same(back, v):
            return fail("round trip", {"trial": t, "input_b64": b64(raw1)})

        # (3) Re-encoding the decoded value is byte-identical
        if serialize(back) != raw1:
            return fail("re-encode identity", {"trial": t, "input_b64": b64(raw1)})

        # (4) Every strict prefix is truncated, never silently accepted
        cut = random.randint(0, len(raw1) - 1)
        try:
            deserialize(raw1[:cut])
        except TruncatedInputError:
            pass
        else:
            return fail("prefix accepted", {"trial": t, "cut": cut, "input_b64": b64(raw1)})

        # (5) Assoc mode: pair lists survive exactly
        pairs: List[Any] = [(b"p%d" % i, gen_value(MAX_GEN_DEPTH)) for i in range(random.randint(1, 4))]
        if not same_pairs(deserialize(serialize(pairs, True), True), pairs):
            return fail("assoc round trip", {"trial": t})

        # (6) Session round trip
        session = {"s%d" % i: gen_value(1) for i in range(random.randint(0, 3))}
        if not same(deserialize_session(serialize_session(session)), session):
            return fail("session round trip", {"trial": t})

    print(f"OK: invariants passed for TRIALS={TRIALS} seed={SEED}")
    return 0

def same_pairs(a: Any, b: List[Any]) -> bool:
    return (isinstance(a, list) and len(a) == len(b)
            and all(same(x[0], y[0]) and same(x[1], y[1]) for x, y in zip(a, b)))

if __name__ == "__main__":
    raise SystemExit(main())
