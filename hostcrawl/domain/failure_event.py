from dataclasses import asdict, dataclass


@dataclass
class FailureEvent:
    """A failed attempt. `resolved_on_retry` flips when a later attempt succeeds."""

    url: str
    depth: int
    reason: str
    attempt: int
    resolved_on_retry: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["resolvedOnRetry"] = data.pop("resolved_on_retry")
        return data
