class AnalysisError(Exception):
    pass


class UnbalancedWindowError(AnalysisError):
    """A modifier was removed without being applied, or applied twice"""

    def __init__(self, actor_id, modifier_id, timestamp, reason):
        self.actor_id = actor_id
        self.modifier_id = modifier_id
        self.timestamp = timestamp
        self.reason = reason
        super().__init__(
            f"Unbalanced modifier window for actor {actor_id}, "
            f"modifier {modifier_id} at {timestamp}: {reason}"
        )

    def to_dict(self):
        return {
            "type": "unbalanced_window",
            "actor_id": self.actor_id,
            "modifier_id": self.modifier_id,
            "timestamp": self.timestamp,
            "message": self.reason,
        }
