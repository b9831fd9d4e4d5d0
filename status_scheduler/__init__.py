"""
Status Scheduler - rule engine that decides which profile status applies at a given moment.

Recurring rules (weekly, every N days, specific dates) are evaluated first-match-wins
in the schedule's IANA timezone.
"""
__version__ = "1.0.0"
