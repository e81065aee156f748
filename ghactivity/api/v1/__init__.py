from ghactivity.api.v1 import activity

__all__ = [
    "activity",
]
