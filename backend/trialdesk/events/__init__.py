"""Domain events and the outbox publisher."""

from trialdesk.events.publisher import EventPublisher
from trialdesk.events.trial_events import (
    SessionCompleted,
    TrialAssigned,
    TrialOutcomeRecorded,
    TrialRescheduled,
    TrialStatusChanged,
)

__all__ = [
    "EventPublisher",
    "SessionCompleted",
    "TrialAssigned",
    "TrialOutcomeRecorded",
    "TrialRescheduled",
    "TrialStatusChanged",
]
