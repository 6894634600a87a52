#!/usr/bin/env python3
"""Collect baseline calculation timings for every supported jurisdiction."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from globaltax.backend.app.services.calculation_service import calculate_tax  # noqa: E402
from globaltax.backend.engine import build_registry, get_registry  # noqa: E402

SAMPLE_SALARY = 85_000


def measure_registry_build() -> dict[str, float]:
    """Time a cold registry build, including configuration parsing."""

    start = perf_counter()
    build_registry()
    return {"build_ms": (perf_counter() - start) * 1000}


def measure_jurisdiction(code: str, iterations: int) -> dict[str, float]:
    """Return timing statistics for repeated service-level calculations."""

    payload = {"country": code, "gross_salary": SAMPLE_SALARY}
    calculate_tax(payload)  # Warm cache
    start = perf_counter()
    for _ in range(iterations):
        calculate_tax(payload)
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def main() -> None:
    iterations = int(os.getenv("GLOBALTAX_PROFILE_ITERATIONS", "200"))
    report = {
        "registry": measure_registry_build(),
        "jurisdictions": {
            code: measure_jurisdiction(code, iterations)
            for code in get_registry().supported_countries()
        },
    }
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
