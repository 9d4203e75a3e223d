"""Error taxonomy for the intake pipeline."""


class IntakeError(Exception):
    """Base error for intake tracking failures."""


class NoJsonFound(IntakeError):  # noqa: N818
    """The completion text contained no JSON candidate at all."""

    def __init__(self) -> None:
        super().__init__("No JSON object found in the response")


class MalformedAiResponse(IntakeError):  # noqa: N818
    """A JSON candidate was found but failed to parse or validate."""

    def __init__(self, stage: str, cause: str) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"Malformed AI response at {stage}: {cause}")


class CorruptedLedger(IntakeError):  # noqa: N818
    """A stored ledger blob could not be decoded."""

    def __init__(self, user_name: str, cause: str) -> None:
        self.user_name = user_name
        self.cause = cause
        super().__init__(f"Stored ledger for {user_name!r} is corrupted: {cause}")


class StoreUnavailable(IntakeError):  # noqa: N818
    """The key-value store failed to complete an operation."""


class InferenceUnavailable(IntakeError):  # noqa: N818
    """The inference endpoint failed or did not answer in time."""


class NotFound(IntakeError):  # noqa: N818
    """No ledger or record matches the request."""


class ReservedUserName(IntakeError):  # noqa: N818
    """A user name collides with a reserved store key prefix."""

    def __init__(self, user_name: str) -> None:
        self.user_name = user_name
        super().__init__(f"User name {user_name!r} uses a reserved prefix")
