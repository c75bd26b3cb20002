from worktrail.models.core import Event, ExpectedDuration, TimeEntry

__all__ = ["Event", "ExpectedDuration", "TimeEntry"]
