class UnknownFeedError(LookupError):
    """Feed id is not part of the registry roster."""

    def __init__(self, feed_id: str) -> None:
        super().__init__(f"Feed not found: {feed_id}")
        self.feed_id = feed_id


class UnknownAlertError(LookupError):
    """Alert id is not present in the alert queue."""

    def __init__(self, alert_id: str) -> None:
        super().__init__(f"Alert not found: {alert_id}")
        self.alert_id = alert_id


class SourceFailure(RuntimeError):
    """Detection source could not produce an event for the current tick."""
