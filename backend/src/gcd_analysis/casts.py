from typing import List, Optional

from gcd_analysis.base import BaseAnalyzer
from gcd_analysis.data import GameData


class ActionUse:
    """One logical use of a GCD action

    A cast with a cast time shows up as a ``begincast`` (prepare) followed by a
    ``cast`` (commit). Instant casts only have the commit, interrupted casts
    only have the prepare.
    """

    def __init__(self, action_id, prepare_at=None, commit_at=None):
        assert prepare_at is not None or commit_at is not None
        self.action_id = action_id
        self.prepare_at = prepare_at
        self.commit_at = commit_at

    @property
    def is_interrupted(self):
        return self.prepare_at is not None and self.commit_at is None

    @property
    def is_instant(self):
        return self.commit_at is not None and self.prepare_at is None

    @property
    def start_time(self) -> Optional[int]:
        if self.is_interrupted:
            return None
        if self.prepare_at is not None:
            return self.prepare_at
        return self.commit_at

    def is_taxed(self, game_data: GameData, base_gcd):
        if self.is_instant:
            return False
        action = game_data.lookup_action(self.action_id)
        if action is None or not action.cast_time:
            return False
        return action.cast_time >= base_gcd

    def __eq__(self, other):
        if not isinstance(other, ActionUse):
            return NotImplemented
        return (self.action_id, self.prepare_at, self.commit_at) == (
            other.action_id,
            other.prepare_at,
            other.commit_at,
        )

    def __repr__(self):
        return (
            f"ActionUse({self.action_id}, prepare_at={self.prepare_at}, "
            f"commit_at={self.commit_at})"
        )

    def to_dict(self):
        return {
            "action_id": self.action_id,
            "prepare_at": self.prepare_at,
            "commit_at": self.commit_at,
            "start": self.start_time,
            "is_interrupted": self.is_interrupted,
            "is_instant": self.is_instant,
        }


class CastPairing(BaseAnalyzer):
    def __init__(self, game_data: GameData):
        self._game_data = game_data
        self._uses: List[ActionUse] = []
        self._seen_first_event = False

    @property
    def uses(self):
        return self._uses

    def add_event(self, event) -> Optional[ActionUse]:
        """Returns the use created or completed by this event, if any"""
        if event["type"] not in ("begincast", "cast"):
            return None

        action = self._game_data.lookup_action(event.get("abilityGameID"))
        if action is None or not action.on_gcd:
            return None

        is_first_event = not self._seen_first_event
        self._seen_first_event = True

        if event["type"] == "begincast":
            use = ActionUse(action.id, prepare_at=event["timestamp"])
            self._uses.append(use)
            return use

        # A cast with a cast time before anything else was already in
        # flight when the log started
        if is_first_event and action.cast_time > 0:
            return None

        if self._uses:
            last_use = self._uses[-1]
            if last_use.action_id == action.id and last_use.commit_at is None:
                last_use.commit_at = event["timestamp"]
                return last_use

        use = ActionUse(action.id, commit_at=event["timestamp"])
        self._uses.append(use)
        return use

    def report(self):
        return {
            "casts": {
                "num_uses": len(self._uses),
                "num_interrupted": sum(1 for use in self._uses if use.is_interrupted),
                "num_instant": sum(1 for use in self._uses if use.is_instant),
            }
        }
