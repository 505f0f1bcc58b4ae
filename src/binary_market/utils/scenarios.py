"""Utilities for loading market scenarios from YAML/JSON files.

A scenario describes the accounts, host settings and the ordered list of
calls to replay against a fresh market (see ``simulation.runner``).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List

import yaml

SCENARIO_SUFFIXES = {".yaml", ".yml", ".json"}
STEP_KINDS = ("call", "mine")


def load_scenario(path: str | Path) -> Dict[str, object]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")

    with open(path, "r") as f:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    validate_scenario(data)
    data.setdefault("name", path.stem)
    return data


def validate_scenario(data: object) -> None:
    """Raise ValueError if ``data`` is not a well-formed scenario mapping."""
    if not isinstance(data, dict):
        raise ValueError("Scenario must be a mapping")

    accounts = data.get("accounts", {})
    if not isinstance(accounts, dict):
        raise ValueError("Scenario 'accounts' must map principals to balances")
    for principal, balance in accounts.items():
        if not isinstance(balance, int) or isinstance(balance, bool) or balance < 0:
            raise ValueError(f"Invalid starting balance for {principal}: {balance!r}")

    steps = data.get("steps")
    if not isinstance(steps, list) or not steps:
        raise ValueError("Scenario must contain a non-empty 'steps' list")

    for index, step in enumerate(steps):
        if not isinstance(step, dict):
            raise ValueError(f"Step {index} must be a mapping")
        kinds = [kind for kind in STEP_KINDS if kind in step]
        if len(kinds) != 1:
            raise ValueError(f"Step {index} must have exactly one of {STEP_KINDS}")
        if "call" in step and not step.get("read_only", False) and "sender" not in step:
            raise ValueError(f"Step {index} calls '{step['call']}' without a sender")
        if "mine" in step and (not isinstance(step["mine"], int) or step["mine"] < 0):
            raise ValueError(f"Step {index} must mine a non-negative number of blocks")
        expect = step.get("expect")
        if expect is not None and (not isinstance(expect, dict) or set(expect) - {"ok", "err"} or len(expect) != 1):
            raise ValueError(f"Step {index} 'expect' must be {{ok: value}} or {{err: code}}")


def list_scenario_files(scenario_dir: str | Path) -> List[Path]:
    """List YAML/JSON scenario files in a directory."""
    scenario_dir = Path(scenario_dir)
    if not scenario_dir.exists():
        return []
    return sorted([p for p in scenario_dir.iterdir() if p.suffix.lower() in SCENARIO_SUFFIXES])
