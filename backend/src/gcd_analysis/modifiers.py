import functools
from typing import Dict, List

from gcd_analysis.base import BasePreprocessor, Window
from gcd_analysis.data import GameData
from gcd_analysis.errors import UnbalancedWindowError


class ModifierWindow(Window):
    def __init__(self, actor_id, modifier_id, start, end=None):
        super().__init__(start, end)
        self.actor_id = actor_id
        self.modifier_id = modifier_id

    def is_active(self, timestamp, end_time=None):
        # A window doesn't affect the action that opened it
        end = self.end if self.end is not None else end_time
        if end is None:
            return self.start < timestamp
        return self.start < timestamp <= end


class ActorModifierState:
    def __init__(self, actor_id):
        self.actor_id = actor_id
        self._windows: Dict[int, List[ModifierWindow]] = {}

    def _get_windows(self, modifier_id):
        return self._windows.setdefault(modifier_id, [])

    def active_window(self, modifier_id):
        windows = self._windows.get(modifier_id)
        if not windows or windows[-1].end is not None:
            return None
        return windows[-1]

    def open_window(self, modifier_id, timestamp):
        if self.active_window(modifier_id) is not None:
            raise UnbalancedWindowError(
                self.actor_id,
                modifier_id,
                timestamp,
                "applied while a window was already open",
            )
        window = ModifierWindow(self.actor_id, modifier_id, timestamp)
        self._get_windows(modifier_id).append(window)
        return window

    def close_window(self, modifier_id, timestamp):
        window = self.active_window(modifier_id)
        if window is None:
            raise UnbalancedWindowError(
                self.actor_id,
                modifier_id,
                timestamp,
                "removed without an open window",
            )
        window.end = timestamp
        return window

    @property
    def modifier_ids(self):
        return list(self._windows)

    def windows(self, modifier_id):
        return self._windows.get(modifier_id, [])


class ModifierTracker(BasePreprocessor):
    def __init__(self, game_data: GameData):
        self._game_data = game_data
        self._actors: Dict[int, ActorModifierState] = {}
        self.end_time = None

    def _get_actor_state(self, actor_id):
        return self._actors.setdefault(actor_id, ActorModifierState(actor_id))

    def _speed_modifier(self, status_id):
        status = self._game_data.lookup_status(status_id)
        if status is None:
            return None
        return status.speed_modifier

    def preprocess_event(self, event):
        if event["type"] == "encounterend":
            self.end_time = event["timestamp"]
            return

        if event["type"] not in ("applybuff", "removebuff"):
            return

        status_id = event.get("abilityGameID")
        if self._speed_modifier(status_id) is None:
            return

        actor_state = self._get_actor_state(event["sourceID"])
        if event["type"] == "applybuff":
            actor_state.open_window(status_id, event["timestamp"])
        else:
            actor_state.close_window(status_id, event["timestamp"])

    def actor_state(self, actor_id) -> ActorModifierState:
        return self._actors.get(actor_id) or ActorModifierState(actor_id)

    def get_windows(self, actor_id, modifier_id):
        """Windows for a modifier, with an open window ending at the encounter end"""
        windows = []
        for window in self.actor_state(actor_id).windows(modifier_id):
            end = window.end if window.end is not None else self.end_time
            windows.append(ModifierWindow(actor_id, modifier_id, window.start, end))
        return windows

    def report(self, actor_id):
        windows = []
        for modifier_id in self.actor_state(actor_id).modifier_ids:
            for window in self.get_windows(actor_id, modifier_id):
                windows.append(
                    {
                        "modifier_id": modifier_id,
                        "start": window.start,
                        "end": window.end,
                    }
                )
        windows.sort(key=lambda w: w["start"])
        return {"modifier_windows": windows}

    def is_active(self, actor_id, modifier_id, timestamp):
        return any(
            window.is_active(timestamp, self.end_time)
            for window in self.actor_state(actor_id).windows(modifier_id)
        )

    def active_modifiers(self, actor_id, timestamp):
        return [
            modifier_id
            for modifier_id in self.actor_state(actor_id).modifier_ids
            if self.is_active(actor_id, modifier_id, timestamp)
        ]


class ModifierResolver:
    def __init__(self, tracker: ModifierTracker, game_data: GameData, actor_jobs=None):
        self._tracker = tracker
        self._game_data = game_data
        self._actor_jobs = actor_jobs or {}

    def resolve(self, actor_id, timestamp) -> float:
        scale = self._game_data.job_base_modifier(self._actor_jobs.get(actor_id))

        modifiers = [
            self._game_data.lookup_status(modifier_id).speed_modifier
            for modifier_id in self._tracker.active_modifiers(actor_id, timestamp)
        ]
        return functools.reduce(lambda a, b: a * b, modifiers, scale)
