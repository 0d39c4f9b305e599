"""
Document generators for the reader benchmarks.

Every generator returns JSON text produced by the standard library encoder,
seeded so runs compare like with like.
"""

import json
import random
import string
from typing import Any

_SEED = 20240115
_ESCAPE_PROBABILITY = 0.3


def generate_test_data(data_type: str) -> str:
    """Generates JSON text for the named document shape."""
    generators = {
        "small_object": _generate_small_object,
        "mixed_array": _generate_mixed_array,
        "nested_structure": _generate_nested_structure,
        "string_heavy": _generate_string_heavy,
        "unicode_escapes": _generate_unicode_escapes,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    rng = random.Random(_SEED)
    return json.dumps(generators[data_type](rng))


def _generate_small_object(rng: random.Random) -> dict[str, Any]:
    """A small record (< 1KB) with one nested object."""
    return {
        "id": rng.randint(10000, 99999),
        "name": _random_string(rng, 12),
        "email": f"{_random_string(rng, 8)}@example.com",
        "active": rng.choice([True, False]),
        "balance": round(rng.uniform(0.0, 10000.0), 2),
        "metadata": {"created": "2024-01-15T10:30:00Z", "source": "api"},
    }


def _generate_mixed_array(rng: random.Random) -> list[Any]:
    """Two hundred values of every JSON kind."""
    makers = [
        lambda i: rng.randint(-1000, 1000),
        lambda i: round(rng.uniform(-100.0, 100.0), 3),
        lambda i: _random_string(rng, rng.randint(5, 30)),
        lambda i: rng.choice([True, False]),
        lambda i: None,
        lambda i: {"index": i, "score": round(rng.uniform(0, 100), 2)},
    ]
    return [rng.choice(makers)(i) for i in range(200)]


def _generate_nested_structure(rng: random.Random) -> dict[str, Any]:
    """A tree six levels deep, fanning out three ways per level."""

    def node(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"value": _random_string(rng, 10)}
        return {
            "level": depth,
            "items": [node(depth - 1) for _ in range(3)],
        }

    return node(6)


def _generate_string_heavy(rng: random.Random) -> dict[str, Any]:
    """Strings dense with characters the encoder must escape."""
    specials = ['"', "\\", "/", "\b", "\f", "\n", "\r", "\t"]

    def escaped_string() -> str:
        return "".join(
            rng.choice(specials)
            if rng.random() < _ESCAPE_PROBABILITY
            else rng.choice(string.ascii_letters + " ")
            for _ in range(50)
        )

    return {
        "strings": [escaped_string() for _ in range(100)],
        "paths": {
            f"key_{i}": f"C:\\Users\\{_random_string(rng, 8)}\\file_{i}.txt"
            for i in range(20)
        },
    }


def _generate_unicode_escapes(rng: random.Random) -> list[str]:
    """Non-ASCII text, emitted as \\u escapes including surrogate pairs."""
    alphabet = "äöüßéñ漢字かな\U0001f600\U0001f680"
    return [
        "".join(rng.choice(alphabet) for _ in range(20)) for _ in range(100)
    ]


def _random_string(rng: random.Random, length: int) -> str:
    """Generates a random ASCII letter string of the given length."""
    return "".join(rng.choices(string.ascii_letters, k=length))
