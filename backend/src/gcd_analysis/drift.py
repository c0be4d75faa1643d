from typing import Dict, List

from console_table import console
from gcd_analysis.base import BaseAnalyzer
from gcd_analysis.casts import ActionUse, CastPairing
from gcd_analysis.data import GameData


class DriftSlot:
    def __init__(self, action_id, aliases=(), cooldown=None):
        self.action_id = action_id
        # e.g. an upgraded action sharing the base action's cooldown
        self.aliases = tuple(aliases)
        self.cooldown = cooldown

    @property
    def action_ids(self):
        return (self.action_id,) + self.aliases


class DriftCycle:
    def __init__(self, action_id, start):
        self.action_id = action_id
        self.start = start
        self.end = None
        self.cooldown = None
        self.downtime = 0
        self.drift = 0
        self.is_drifted = False
        self.actions: List[ActionUse] = []

    def add_action(self, use: ActionUse):
        self.actions.append(use)

    @property
    def ideal_end(self):
        if self.cooldown is None:
            return None
        return self.start + self.cooldown

    @property
    def last_action_id(self):
        if not self.actions:
            return None
        return self.actions[-1].action_id

    def close(self, timestamp, cooldown, downtime, threshold):
        self.end = timestamp
        self.cooldown = cooldown
        self.downtime = downtime
        self.drift = max(0, timestamp - self.start - cooldown - downtime)
        # Forgive "drift" when downtime covers the whole cooldown, ie. phase
        # transitions
        self.is_drifted = self.drift > threshold and downtime < cooldown

    def to_dict(self):
        return {
            "action_id": self.action_id,
            "start": self.start,
            "end": self.end,
            "ideal_end": self.ideal_end,
            "drift": self.drift,
            "downtime": self.downtime,
            "is_drifted": self.is_drifted,
            "last_action_id": self.last_action_id,
            "actions": [use.to_dict() for use in self.actions],
        }


class DriftTracker(BaseAnalyzer):
    # Forgive insignificant drift, we only care about GCD drift here and not
    # log inconsistencies or weaving
    DRIFT_BUFFER_MS = 1500

    def __init__(
        self,
        slots: List[DriftSlot],
        game_data: GameData,
        downtime,
        start_time=0,
        threshold=DRIFT_BUFFER_MS,
    ):
        self._game_data = game_data
        self._downtime = downtime
        self._threshold = threshold
        self._pairing = CastPairing(game_data)
        self._slot_keys = {}
        self._cooldowns = {}
        self._current_cycles: Dict[int, DriftCycle] = {}
        self._cycles: List[DriftCycle] = []

        for slot in slots:
            for action_id in slot.action_ids:
                self._slot_keys[action_id] = slot.action_id
            self._cooldowns[slot.action_id] = self._get_cooldown(slot)
            self._current_cycles[slot.action_id] = DriftCycle(slot.action_id, start_time)

    def _get_cooldown(self, slot: DriftSlot):
        if slot.cooldown is not None:
            return slot.cooldown
        action = self._game_data.lookup_action(slot.action_id)
        return action.cooldown if action is not None else 0

    @property
    def cycles(self):
        return self._cycles

    @property
    def drifted_cycles(self):
        return [cycle for cycle in self._cycles if cycle.is_drifted]

    def add_event(self, event):
        use = self._pairing.add_event(event)
        if event["type"] != "cast":
            return

        if use is not None:
            for cycle in self._current_cycles.values():
                cycle.add_action(use)

        slot_key = self._slot_keys.get(event["abilityGameID"])
        if slot_key is None:
            return

        cycle = self._current_cycles[slot_key]
        timestamp = event["timestamp"]
        downtime = self._downtime(cycle.start, timestamp)
        cycle.close(timestamp, self._cooldowns[slot_key], downtime, self._threshold)
        self._cycles.append(cycle)
        self._current_cycles[slot_key] = DriftCycle(slot_key, timestamp)

    def report(self):
        drifted = self.drifted_cycles
        return {
            "drift": {
                "num_cycles": len(self._cycles),
                "num_drifted": len(drifted),
                "total_drift": sum(cycle.drift for cycle in drifted),
                "windows": [cycle.to_dict() for cycle in drifted],
            }
        }

    def print(self):
        drifted = self.drifted_cycles
        if not drifted:
            console.print("* None of your tracked GCDs drifted")
            return

        for cycle in drifted:
            action = self._game_data.lookup_action(cycle.last_action_id)
            name = action.name if action else cycle.last_action_id
            console.print(
                f"[red]x[/red] {name} drifted by {cycle.drift / 1000:.1f} seconds "
                f"at {cycle.end / 1000:.1f}s"
            )
