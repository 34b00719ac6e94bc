from typing import Protocol

from libs.core.domain.entities import RawDetectionEvent


class RandomSource(Protocol):
    """Random draws used by classification and scheduling.

    ``random.Random`` satisfies this contract, so a seeded instance makes
    classification reproducible.
    """

    def random(self) -> float: ...

    def uniform(self, a: float, b: float) -> float: ...


class DetectionSource(Protocol):
    """Producer of raw detection events, one per dispatcher tick.

    Returns ``None`` when there is nothing to emit on this tick and raises
    ``SourceFailure`` when the tick could not be served.
    """

    def next_event(self) -> RawDetectionEvent | None: ...
