# Services package

from ghactivity.services.github import ActivityAggregator, ClientContext

__all__ = [
    "ActivityAggregator",
    "ClientContext",
]
