"""Replays scripted call sequences against a fresh in-memory market."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd
from tqdm import tqdm

from ..market import DustPolicy, PredictionMarket, RepeatBetPolicy
from ..utils.config import MarketConfig
from ..utils.scenarios import load_scenario, validate_scenario
from .host import CallResult, MarketHost
from .logging import MarketEventLogger, create_event_logger

RELATIVE_HEIGHT = re.compile(r"^[+-]\d+$")


def _same_value(actual: Any, expected: Any) -> bool:
    # type-exact so that 1 never stands in for True
    if isinstance(expected, Mapping):
        return (
            isinstance(actual, Mapping)
            and set(actual) == set(expected)
            and all(_same_value(actual[key], expected[key]) for key in expected)
        )
    return type(actual) is type(expected) and actual == expected


@dataclass(slots=True)
class StepOutcome:
    """What happened at one scenario step."""

    index: int
    kind: str
    height: int
    function: Optional[str] = None
    sender: Optional[str] = None
    result: Optional[CallResult] = None
    expected: Optional[Mapping[str, Any]] = None

    @property
    def matched(self) -> bool:
        if self.expected is None or self.result is None:
            return True
        if "err" in self.expected:
            return not self.result.ok and _same_value(self.result.error_code, self.expected["err"])
        return self.result.ok and _same_value(self.result.value, self.expected["ok"])

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "step": self.index,
            "kind": self.kind,
            "height": self.height,
            "function": self.function,
            "sender": self.sender,
            "ok": None,
            "value": None,
            "error_code": None,
            "error_name": None,
            "matched": self.matched,
        }
        if self.result is not None:
            record.update(
                ok=self.result.ok,
                value=self.result.value if not isinstance(self.result.value, dict) else str(self.result.value),
                error_code=self.result.error_code,
                error_name=self.result.error_name,
            )
        return record


@dataclass(slots=True)
class ScenarioResult:
    name: str
    steps: List[StepOutcome] = field(default_factory=list)
    market_info: Mapping[str, object] = field(default_factory=dict)
    market_status: Mapping[str, bool] = field(default_factory=dict)
    balances: Mapping[str, int] = field(default_factory=dict)
    final_height: int = 0
    event_logger: Optional[MarketEventLogger] = None

    @property
    def mismatches(self) -> List[StepOutcome]:
        return [step for step in self.steps if not step.matched]

    @property
    def passed(self) -> bool:
        return not self.mismatches

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame.from_records([step.to_record() for step in self.steps])


class ScenarioRunner:
    """Runs one scenario on a fresh host.

    Policies and host settings come from the scenario when present, otherwise
    from ``config``. Without an explicit ``event_logger`` one is created when
    ``config.enable_event_log`` is set, writing to ``config.log_dir``.
    """

    def __init__(
        self,
        scenario: Mapping[str, Any],
        *,
        config: Optional[MarketConfig] = None,
        show_progress: Optional[bool] = None,
        event_logger: Optional[MarketEventLogger] = None,
    ) -> None:
        validate_scenario(scenario)
        self.scenario = scenario
        self.name = str(scenario.get("name", "scenario"))
        self.config = config or MarketConfig()
        self.show_progress = self.config.show_progress if show_progress is None else show_progress
        if event_logger is None and self.config.enable_event_log:
            event_logger = create_event_logger(run_id=self.name, log_dir=self.config.log_dir)
        self.event_logger = event_logger

    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> "ScenarioRunner":
        return cls(load_scenario(path), **kwargs)

    def build_host(self) -> MarketHost:
        repeat_policy = RepeatBetPolicy(self.scenario.get("repeat_bet_policy", self.config.repeat_bet_policy))
        dust_policy = DustPolicy(self.scenario.get("dust_policy", self.config.dust_policy))
        config = self.config

        def factory(custody, clock, sink) -> PredictionMarket:
            return PredictionMarket(
                custody=custody,
                clock=clock,
                principal=config.market_principal,
                question_max_length=config.question_max_length,
                repeat_bet_policy=repeat_policy,
                dust_policy=dust_policy,
                event_sink=sink,
            )

        return MarketHost(
            accounts=self.scenario.get("accounts", {}),
            start_height=int(self.scenario.get("start_height", 1)),
            auto_mine=bool(self.scenario.get("auto_mine", self.config.auto_mine)),
            market_factory=factory,
            event_logger=self.event_logger,
        )

    def run(self) -> ScenarioResult:
        host = self.build_host()
        steps = self.scenario["steps"]
        result = ScenarioResult(name=self.name, event_logger=self.event_logger)

        with tqdm(total=len(steps), desc=f"Scenario {self.name}", unit="step", disable=not self.show_progress) as pbar:
            for index, step in enumerate(steps):
                outcome = self._run_step(host, index, step)
                result.steps.append(outcome)
                if not outcome.matched:
                    pbar.write(
                        f"[Step {index}] {outcome.function} by {outcome.sender}: "
                        f"expected {dict(outcome.expected)}, got {outcome.result.to_dict()}"
                    )
                pbar.set_postfix(height=host.block_height)
                pbar.update(1)

        result.market_info = host.market.get_market_info()
        result.market_status = host.market.get_market_status()
        result.balances = host.custody.balances()
        result.final_height = host.block_height
        return result

    def _run_step(self, host: MarketHost, index: int, step: Mapping[str, Any]) -> StepOutcome:
        height = host.block_height
        if "mine" in step:
            host.mine_empty_blocks(step["mine"])
            return StepOutcome(index=index, kind="mine", height=height)

        function = step["call"]
        sender = step.get("sender")
        args = self._expand_args(function, step.get("args", []), height)
        if step.get("read_only", False):
            call_result = host.call_read_only(function, args)
        else:
            call_result = host.call_public(function, args, sender)
        return StepOutcome(
            index=index,
            kind="call",
            height=height,
            function=function,
            sender=sender,
            result=call_result,
            expected=step.get("expect"),
        )

    @staticmethod
    def _expand_args(function: str, args: Any, height: int) -> Any:
        """Turn ``"+N"`` deadlines into absolute heights."""
        if function != "initialize-market":
            return args

        def absolute(value: Any) -> Any:
            if isinstance(value, str) and RELATIVE_HEIGHT.match(value):
                return height + int(value)
            return value

        if isinstance(args, Mapping):
            expanded = dict(args)
            if "deadline" in expanded:
                expanded["deadline"] = absolute(expanded["deadline"])
            return expanded
        expanded = list(args)
        if len(expanded) > 1:
            expanded[1] = absolute(expanded[1])
        return expanded


def run_scenario_file(path: str | Path, **kwargs) -> ScenarioResult:
    return ScenarioRunner.from_file(path, **kwargs).run()
