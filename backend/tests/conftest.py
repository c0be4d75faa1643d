import pytest

from gcd_analysis.data import ActionData, GameData, StatusData

from log_events import (
    AIR_ANCHOR,
    BIOBLASTER,
    CAST,
    DRILL,
    FILLER,
    HASTE,
    LONG_CAST,
    NO_SPEED,
    SWIFTNESS,
    WEAVE,
)


@pytest.fixture
def game_data():
    return GameData(
        actions=[
            ActionData(FILLER, "Filler", on_gcd=True),
            ActionData(CAST, "Cast", on_gcd=True, cast_time=2500),
            ActionData(LONG_CAST, "Long Cast", on_gcd=True, cast_time=3000),
            ActionData(DRILL, "Drill", on_gcd=True, cooldown=20000),
            ActionData(BIOBLASTER, "Bioblaster", on_gcd=True, cooldown=20000),
            ActionData(AIR_ANCHOR, "Air Anchor", on_gcd=True, cooldown=30000),
            ActionData(WEAVE, "Weave", cooldown=60000),
        ],
        statuses=[
            StatusData(HASTE, "Haste", speed_modifier=0.8),
            StatusData(SWIFTNESS, "Swiftness", speed_modifier=0.85),
            StatusData(NO_SPEED, "No Speed"),
        ],
        job_speed_modifiers={"MONK": 0.8},
    )
