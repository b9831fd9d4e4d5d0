"""
First-match-wins evaluation of an ordered rule list.

Disabled rules (enabled: false) are dropped before matching; rule order is
otherwise exactly the document order.
"""
import logging
from datetime import datetime
from typing import List, Optional

from status_scheduler.schedule.matcher import matches
from status_scheduler.schedule.models import Rule, ScheduleDocument
from status_scheduler.schedule.timeutil import get_zone, localize

logger = logging.getLogger(__name__)


def active_rules(document: ScheduleDocument) -> List[Rule]:
    """Rules taking part in evaluation, in document order."""
    return [rule for rule in document.rules if rule.enabled is not False]


class ScheduleEvaluator:
    """Evaluates a validated schedule document against instants."""

    def __init__(self, document: ScheduleDocument):
        self.document = document
        self.zone = get_zone(document.timezone)
        self.rules = active_rules(document)
        skipped = len(document.rules) - len(self.rules)
        if skipped:
            logger.debug("Skipping %d disabled rule(s)", skipped)

    def localize(self, instant: datetime) -> datetime:
        return localize(instant, self.zone)

    def find_matching_rule(self, instant: datetime) -> Optional[Rule]:
        """First rule (document order) that matches, or None."""
        local = self.localize(instant)
        for rule in self.rules:
            if matches(rule, local):
                logger.debug("Rule %s matched at %s", rule.id, local.isoformat())
                return rule
        return None

    def get_all_matching_rules(self, instant: datetime) -> List[Rule]:
        """Every matching rule, in order (diagnostics)."""
        local = self.localize(instant)
        return [rule for rule in self.rules if matches(rule, local)]

    def rule_matches(self, rule: Rule, instant: datetime) -> bool:
        return matches(rule, self.localize(instant))
