"""
Test data generators for JSON5 parsing benchmarks.

Creates the same data in two spellings:
- plain JSON, which every library under comparison can read
- idiomatic JSON5 (comments, bare keys, indentation), which only j5codec reads

Data comes in different sizes (small/medium/large), complexity levels
(simple/nested/mixed) and string-heavy content with escape sequences.
"""

import json
import random
import string
from typing import Any

import j5codec

# Constants for random data generation
_INT_TYPE = 1
_FLOAT_TYPE = 2
_STRING_TYPE = 3
_BOOL_TYPE = 4
_NULL_TYPE = 5
_ESCAPE_PROBABILITY = 0.3

DATA_TYPES = [
    "small_object",
    "large_object",
    "mixed_array",
    "nested_structure",
    "string_heavy",
    "manifest",
]


def generate_data(data_type: str) -> Any:
    """Builds the Python data for the specified type."""
    generators = {
        "small_object": _generate_small_object,
        "large_object": _generate_large_object,
        "mixed_array": _generate_mixed_array,
        "nested_structure": _generate_nested_structure,
        "string_heavy": _generate_string_heavy,
        "manifest": _generate_manifest,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return generators[data_type]()


def generate_test_data(data_type: str) -> str:
    """Generates plain JSON test data based on specified type."""
    return json.dumps(generate_data(data_type))


def generate_json5_data(data_type: str) -> str:
    """Generates the same data as commented, indented JSON5."""
    body = j5codec.dumps(generate_data(data_type), indent=2)
    return f"// benchmark data: {data_type}\n{body}\n"


def _generate_small_object() -> dict[str, Any]:
    """Generates a small object (< 1KB) with basic key-value pairs."""
    return {
        "id": 12345,
        "name": "Alice Johnson",
        "email": "alice@example.com",
        "active": True,
        "balance": 1234.56,
        "metadata": {"created": "2024-01-15T10:30:00Z", "source": "api"},
    }


def _timestamp() -> str:
    return (
        f"2024-{random.randint(1, 12):02d}-{random.randint(1, 28):02d}"
        f"T{random.randint(0, 23):02d}:{random.randint(0, 59):02d}:00Z"
    )


def _generate_large_object() -> dict[str, Any]:
    """Generates a large object (> 10KB) with many fields."""
    # Generate a user profile with extensive data
    return {
        "user_id": random.randint(1000000, 9999999),
        "profile": {
            "personal": {
                "first_name": _random_string(10),
                "last_name": _random_string(12),
                "email": f"{_random_string(8)}@{_random_string(6)}.com",
                "address": {
                    "street": f"{random.randint(1, 9999)} {_random_string(8)} St",
                    "city": _random_string(12),
                    "zip": f"{random.randint(10000, 99999)}",
                    "country": "US",
                },
            },
            "preferences": {
                "language": random.choice(["en", "es", "fr", "de", "zh"]),
                "timezone": random.choice(
                    ["America/New_York", "Europe/London", "Asia/Tokyo"]
                ),
                "notifications": {
                    "email": random.choice([True, False]),
                    "push": random.choice([True, False]),
                },
            },
        },
        # Generate transaction history
        "transactions": [
            {
                "id": f"txn_{i:06d}",
                "amount": round(random.uniform(1.0, 1000.0), 2),
                "currency": random.choice(["USD", "EUR", "GBP", "JPY"]),
                "timestamp": _timestamp(),
                "description": f"Payment for {_random_string(20)}",
                "status": random.choice(["completed", "pending", "failed"]),
            }
            for i in range(50)  # 50 transactions
        ],
        # Generate activity log
        "activity_log": [
            {
                "timestamp": _timestamp(),
                "action": random.choice(["login", "logout", "purchase", "view"]),
                "user_agent": f"Mozilla/5.0 ({_random_string(20)})",
            }
            for _ in range(30)  # 30 log entries
        ],
    }


def _generate_mixed_array() -> list[Any]:
    """Generates a large array with mixed data types."""
    array: list[Any] = []

    # Add various data types
    for i in range(200):
        choice = random.randint(1, 6)
        if choice == _INT_TYPE:
            array.append(random.randint(-1000, 1000))
        elif choice == _FLOAT_TYPE:
            array.append(round(random.uniform(-100.0, 100.0), 3))
        elif choice == _STRING_TYPE:
            array.append(_random_string(random.randint(5, 30)))
        elif choice == _BOOL_TYPE:
            array.append(random.choice([True, False]))
        elif choice == _NULL_TYPE:
            array.append(None)
        else:
            # Nested object
            array.append(
                {
                    "index": i,
                    "value": _random_string(10),
                    "score": round(random.uniform(0, 100), 2),
                }
            )

    return array


def _generate_nested_structure() -> dict[str, Any]:
    """Generates a deeply nested structure."""

    def create_nested_dict(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"value": _random_string(10)}

        return {
            "level": depth,
            "data": _random_string(15),
            "items": [create_nested_dict(depth - 1) for _ in range(3)],
            "nested": create_nested_dict(depth - 1),
        }

    return create_nested_dict(6)  # 6 levels deep


def _generate_string_heavy() -> dict[str, Any]:
    """Generates strings full of characters that need escaping."""

    def create_escaped_string() -> str:
        chars = []
        for _ in range(50):
            if random.random() < _ESCAPE_PROBABILITY:
                chars.append(random.choice(['"', "\\", "\b", "\f", "\n", "\r", "\t"]))
            else:
                chars.append(
                    random.choice(string.ascii_letters + string.digits + " ")
                )
        return "".join(chars)

    return {
        "strings": [create_escaped_string() for _ in range(100)],
        "unicode": [
            f"Unicode: {chr(random.randint(0x00A1, 0x024F))}" for _ in range(50)
        ],
        "mixed_content": {
            f"key_{i}": {
                "description": create_escaped_string(),
                "content": 'Content with \n newlines \t tabs and " quotes',
                "path": f"C:\\Users\\{_random_string(8)}\\file_{i}.txt",
            }
            for i in range(20)
        },
    }


def _generate_manifest() -> dict[str, Any]:
    """Generates a package manifest with many dependencies."""
    return {
        "name": _random_string(8).lower(),
        "version": f"{random.randint(0, 9)}.{random.randint(0, 20)}.0",
        "description": f"The {_random_string(10)} package",
        "dependencies": [
            {
                "name": _random_string(random.randint(4, 12)).lower(),
                "version": f"^{random.randint(0, 5)}.{random.randint(0, 9)}.0",
                "optional": random.random() < 0.2,
            }
            for _ in range(100)
        ],
    }


def _random_string(length: int) -> str:
    """Generates a random string of specified length."""
    return "".join(random.choices(string.ascii_letters, k=length))
