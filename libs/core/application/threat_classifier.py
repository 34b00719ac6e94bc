from libs.core.application.contracts import RandomSource
from libs.core.domain.entities import DetectionType, ThreatLevel

HUMAN_CONFIDENCE_GATE = 0.85
HUMAN_HIGH_PROBABILITY = 0.3
DRONE_HIGH_PROBABILITY = 0.5
PARKING_MARKER = "Parking"


def classify(
    detection_type: DetectionType,
    confidence: float,
    feed_location: str,
    rng: RandomSource,
) -> ThreatLevel:
    """Map a raw detection to a threat level.

    Rules are evaluated in order and the first match wins. Gated rules take
    exactly one draw from ``rng``; other rules take none.
    """
    if detection_type == "human" and confidence > HUMAN_CONFIDENCE_GATE:
        return _draw_gated_level(rng, high_probability=HUMAN_HIGH_PROBABILITY)
    if detection_type == "vehicle" and PARKING_MARKER in feed_location:
        return "Low"
    if detection_type == "drone":
        return _draw_gated_level(rng, high_probability=DRONE_HIGH_PROBABILITY)
    return "Low"


def _draw_gated_level(rng: RandomSource, high_probability: float) -> ThreatLevel:
    if rng.random() < high_probability:
        return "High"
    return "Medium"
