"""Day cycle, spawning and delivery bookkeeping.

These are the collaborators that drive the engine: the DayScheduler holds the
current rules for a day, the Spawner produces the day's parcels, and the
AcceptanceStation evaluates each delivered parcel and keeps the score.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from parcel_inspection.config import EconomyConfig
from parcel_inspection.errors import MissingReferenceError
from parcel_inspection.generation.day_rules import DayRuleGenerator
from parcel_inspection.generation.items import ItemRecordGenerator
from parcel_inspection.generation.random_source import RandomSource
from parcel_inspection.models.item import ItemRecord
from parcel_inspection.models.rules import RuleSet
from parcel_inspection.models.verdict import Verdict
from parcel_inspection.rules.evaluator import evaluate

logger = logging.getLogger(__name__)


@dataclass
class DaySummary:
    """Outcome of a finished day."""

    day: int
    correct: int
    incorrect: int
    time_bonus_seconds: float
    fee: int
    next_day_time_seconds: float

    @property
    def net_correct(self) -> int:
        return max(0, self.correct - self.incorrect)


class DayScheduler:
    """Owns the rule set for the current day.

    Rules for the next day are generated when a day finishes, so the display
    layer can show them before the day starts.

    Example:
        ```python
        scheduler = DayScheduler(DayRuleGenerator(), RandomSource(seed=1))
        scheduler.start_day()
        rules = scheduler.current_rules
        summary = scheduler.finish_day(correct=8, incorrect=2)
        ```
    """

    def __init__(
        self,
        rule_generator: DayRuleGenerator,
        rng: RandomSource,
        economy: EconomyConfig | None = None,
    ):
        self.rule_generator = rule_generator
        self.rng = rng
        self.economy = economy or EconomyConfig()
        self.day_count = 0
        self.day_in_progress = False
        self.max_day_time_seconds = self.economy.base_day_time_seconds
        self.history: list[DaySummary] = []
        self._current_rules: RuleSet = rule_generator.generate(rng)

    @property
    def current_rules(self) -> RuleSet:
        """Rules in force (or about to be) for the current day."""
        return self._current_rules

    def start_day(self) -> RuleSet:
        """Begin the next day with the prepared rules."""
        self.day_count += 1
        self.day_in_progress = True
        logger.info(f"Day {self.day_count} started ({self.max_day_time_seconds:.0f}s)")
        return self._current_rules

    def time_bonus(self, correct: int, incorrect: int) -> float:
        """Seconds added to the next day for net correct deliveries."""
        net = max(0, correct - incorrect)
        bonus = net * self.economy.time_bonus_per_net_correct
        return min(max(bonus, 0.0), self.economy.max_bonus_per_day)

    def finish_day(self, correct: int, incorrect: int) -> DaySummary:
        """Close the current day and prepare the next day's rules."""
        if not self.day_in_progress:
            raise RuntimeError("No day in progress")

        self.day_in_progress = False
        bonus = self.time_bonus(correct, incorrect)
        self.max_day_time_seconds += bonus
        fee = self.economy.fee_per_day * self.day_count

        summary = DaySummary(
            day=self.day_count,
            correct=correct,
            incorrect=incorrect,
            time_bonus_seconds=bonus,
            fee=fee,
            next_day_time_seconds=self.max_day_time_seconds,
        )
        self.history.append(summary)

        self._current_rules = self.rule_generator.generate(self.rng)
        logger.info(
            f"Day {summary.day} finished: {correct} correct, {incorrect} incorrect, "
            f"+{bonus:.0f}s bonus, fee {fee}"
        )
        return summary


class Spawner:
    """Produces parcels for a day, up to a fixed count."""

    def __init__(
        self,
        item_generator: ItemRecordGenerator,
        rng: RandomSource,
        max_items_per_day: int = 12,
    ):
        self.item_generator = item_generator
        self.rng = rng
        self.max_items_per_day = max_items_per_day
        self.spawned_this_day = 0

    @property
    def all_spawned(self) -> bool:
        return self.spawned_this_day >= self.max_items_per_day

    def begin_day(self) -> None:
        self.spawned_this_day = 0

    def spawn(self) -> ItemRecord | None:
        """Generate the next parcel, or None once the day's quota is reached."""
        if self.all_spawned:
            return None
        self.spawned_this_day += 1
        return self.item_generator.generate(self.rng)


@dataclass
class AcceptanceStation:
    """End of the belt: evaluates each delivered parcel and keeps score."""

    scheduler: DayScheduler
    economy: EconomyConfig = field(default_factory=EconomyConfig)
    money: int = 0
    correct_this_day: int = 0
    incorrect_this_day: int = 0

    def deliver(self, item: ItemRecord | None) -> Verdict:
        """Evaluate a delivered parcel against the current rules.

        Raises:
            MissingReferenceError: If there is no parcel or no current rule set
        """
        if item is None:
            raise MissingReferenceError("item record")
        rules = self.scheduler.current_rules
        if rules is None:
            raise MissingReferenceError("rule set")

        verdict = evaluate(item, rules)
        if verdict.accepted:
            self.correct_this_day += 1
            self.money += self.economy.reward_per_item
        else:
            self.incorrect_this_day += 1
            self.money -= self.economy.penalty_per_item
            logger.info(
                f"Rejected '{item.display_name}' ({item.item_id}): "
                f"{'; '.join(verdict.reasons)}"
            )
        return verdict

    def close_day(self) -> DaySummary:
        """Finish the scheduler's day, charge the working fee and reset counters."""
        summary = self.scheduler.finish_day(self.correct_this_day, self.incorrect_this_day)
        self.money -= summary.fee
        self.correct_this_day = 0
        self.incorrect_this_day = 0
        return summary
