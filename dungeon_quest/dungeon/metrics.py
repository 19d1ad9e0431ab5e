from typing import Dict


def init_metrics() -> Dict[str, int | float | dict]:
    return {
        "leaves": 0,
        "rooms": 0,
        "rooms_skipped": 0,
        "features": 0,
        "features_reverted": 0,
        "corridors": 0,
        "corridor_cells": 0,
        "doors": 0,
        "phase_ms": {},
        "runtime_ms": 0.0,
    }
