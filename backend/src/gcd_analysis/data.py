from typing import Optional


class ActionData:
    def __init__(self, id, name, on_gcd=False, cast_time=0, cooldown=0):
        self.id = id
        self.name = name
        self.on_gcd = on_gcd
        # Both in milliseconds
        self.cast_time = cast_time
        self.cooldown = cooldown

    def __repr__(self):
        return f"ActionData({self.id}, {self.name!r})"


class StatusData:
    def __init__(self, id, name, speed_modifier=None):
        self.id = id
        self.name = name
        self.speed_modifier = speed_modifier

    def __repr__(self):
        return f"StatusData({self.id}, {self.name!r})"


JOB_SPEED_MODIFIERS = {
    "MONK": 0.8,
    "NINJA": 0.85,
}

ACTIONS = [
    # Machinist
    ActionData(7411, "Heated Split Shot", on_gcd=True),
    ActionData(7412, "Heated Slug Shot", on_gcd=True),
    ActionData(7413, "Heated Clean Shot", on_gcd=True),
    ActionData(7410, "Heat Blast", on_gcd=True),
    ActionData(2872, "Hot Shot", on_gcd=True, cooldown=40000),
    ActionData(16500, "Air Anchor", on_gcd=True, cooldown=40000),
    ActionData(16498, "Drill", on_gcd=True, cooldown=20000),
    ActionData(16499, "Bioblaster", on_gcd=True, cooldown=20000),
    ActionData(17209, "Hypercharge", cooldown=10000),
    ActionData(2876, "Reassemble", cooldown=55000),
    # Black Mage
    ActionData(141, "Fire", on_gcd=True, cast_time=2500),
    ActionData(152, "Fire III", on_gcd=True, cast_time=3500),
    ActionData(3577, "Fire IV", on_gcd=True, cast_time=2800),
    ActionData(154, "Blizzard III", on_gcd=True, cast_time=3500),
    ActionData(16505, "Despair", on_gcd=True, cast_time=3000),
    ActionData(16507, "Xenoglossy", on_gcd=True),
    ActionData(3573, "Ley Lines", cooldown=90000),
    # Warrior
    ActionData(31, "Heavy Swing", on_gcd=True),
    ActionData(37, "Maim", on_gcd=True),
    ActionData(45, "Storm's Eye", on_gcd=True),
    ActionData(3549, "Fell Cleave", on_gcd=True),
    ActionData(16465, "Inner Chaos", on_gcd=True),
    ActionData(52, "Infuriate", cooldown=60000),
    # White Mage
    ActionData(16533, "Glare", on_gcd=True, cast_time=1500),
    ActionData(16532, "Dia", on_gcd=True),
    ActionData(136, "Presence of Mind", cooldown=150000),
    # Monk
    ActionData(53, "Bootshine", on_gcd=True),
    ActionData(56, "Snap Punch", on_gcd=True),
    ActionData(74, "Dragon Kick", on_gcd=True),
]

STATUSES = [
    StatusData(157, "Presence of Mind", speed_modifier=0.8),
    StatusData(737, "Ley Lines", speed_modifier=0.85),
    StatusData(851, "Reassembled"),
    StatusData(1177, "Inner Release"),
]


class GameData:
    """Read-only action/status lookup injected into the analyzers"""

    def __init__(self, actions=None, statuses=None, job_speed_modifiers=None):
        if actions is None:
            actions = ACTIONS
        if statuses is None:
            statuses = STATUSES
        if job_speed_modifiers is None:
            job_speed_modifiers = JOB_SPEED_MODIFIERS

        self._actions = {action.id: action for action in actions}
        self._statuses = {status.id: status for status in statuses}
        self._job_speed_modifiers = dict(job_speed_modifiers)

    def lookup_action(self, action_id) -> Optional[ActionData]:
        return self._actions.get(action_id)

    def lookup_status(self, status_id) -> Optional[StatusData]:
        return self._statuses.get(status_id)

    def job_base_modifier(self, job) -> float:
        if job is None:
            return 1.0
        return self._job_speed_modifiers.get(job, 1.0)
