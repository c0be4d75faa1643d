import pytest

from gcd_analysis.casts import ActionUse, CastPairing
from log_events import (
    CAST,
    FILLER,
    HASTE,
    LONG_CAST,
    WEAVE,
    applybuff,
    begincast,
    cast,
)


def pair(game_data, events):
    pairing = CastPairing(game_data)
    for event in events:
        pairing.add_event(event)
    return pairing.uses


class TestActionUse:
    def test_requires_prepare_or_commit(self):
        with pytest.raises(AssertionError):
            ActionUse(FILLER)

    def test_interrupted_has_no_start(self):
        use = ActionUse(CAST, prepare_at=1000)
        assert use.is_interrupted
        assert not use.is_instant
        assert use.start_time is None

    def test_instant_starts_at_commit(self):
        use = ActionUse(FILLER, commit_at=1000)
        assert use.is_instant
        assert use.start_time == 1000

    def test_prepared_starts_at_prepare(self):
        use = ActionUse(CAST, prepare_at=1000, commit_at=3500)
        assert use.start_time == 1000

    def test_is_taxed(self, game_data):
        assert ActionUse(CAST, prepare_at=0, commit_at=2500).is_taxed(game_data, 2500)
        assert ActionUse(LONG_CAST, prepare_at=0, commit_at=3000).is_taxed(
            game_data, 2500
        )

    def test_instant_use_of_cast_action_is_not_taxed(self, game_data):
        assert not ActionUse(CAST, commit_at=0).is_taxed(game_data, 2500)

    def test_instant_action_is_not_taxed(self, game_data):
        assert not ActionUse(FILLER, prepare_at=0, commit_at=0).is_taxed(
            game_data, 2500
        )


class TestCastPairing:
    def test_prepared_cast(self, game_data):
        uses = pair(game_data, [begincast(0, CAST), cast(2500, CAST)])

        assert uses == [ActionUse(CAST, prepare_at=0, commit_at=2500)]
        assert not uses[0].is_interrupted
        assert not uses[0].is_instant

    def test_first_commit_with_cast_time_is_discarded(self, game_data):
        uses = pair(game_data, [cast(0, CAST)])
        assert uses == []

    def test_first_commit_discard_only_applies_to_first_event(self, game_data):
        uses = pair(game_data, [cast(0, CAST), cast(2500, FILLER), cast(5000, CAST)])
        assert uses == [
            ActionUse(FILLER, commit_at=2500),
            ActionUse(CAST, commit_at=5000),
        ]

    def test_first_instant_commit_is_kept(self, game_data):
        uses = pair(game_data, [cast(0, FILLER)])
        assert uses == [ActionUse(FILLER, commit_at=0)]

    def test_interrupted_cast(self, game_data):
        uses = pair(
            game_data,
            [begincast(0, CAST), begincast(1000, CAST), cast(3500, CAST)],
        )
        assert uses == [
            ActionUse(CAST, prepare_at=0),
            ActionUse(CAST, prepare_at=1000, commit_at=3500),
        ]
        assert uses[0].is_interrupted

    def test_commit_of_other_action_is_instant(self, game_data):
        uses = pair(game_data, [begincast(0, CAST), cast(500, FILLER)])
        assert uses == [
            ActionUse(CAST, prepare_at=0),
            ActionUse(FILLER, commit_at=500),
        ]

    def test_unmatched_commit_falls_back_to_instant(self, game_data):
        uses = pair(
            game_data,
            [cast(0, FILLER), begincast(2500, CAST), cast(5000, CAST), cast(7500, CAST)],
        )
        assert uses[-1] == ActionUse(CAST, commit_at=7500)

    def test_ignores_off_gcd_and_unknown_actions(self, game_data):
        uses = pair(
            game_data,
            [cast(0, FILLER), cast(500, WEAVE), cast(1000, 99999), cast(2500, FILLER)],
        )
        assert [use.action_id for use in uses] == [FILLER, FILLER]

    def test_ignores_buff_events(self, game_data):
        uses = pair(game_data, [applybuff(0, HASTE), cast(100, FILLER)])
        assert uses == [ActionUse(FILLER, commit_at=100)]

    def test_add_event_returns_touched_use(self, game_data):
        pairing = CastPairing(game_data)
        prepared = pairing.add_event(begincast(0, CAST))
        committed = pairing.add_event(cast(2500, CAST))
        assert prepared is committed
        assert pairing.add_event(cast(3000, WEAVE)) is None

    def test_pairing_is_deterministic(self, game_data):
        events = [
            cast(0, FILLER),
            begincast(2500, CAST),
            cast(5000, CAST),
            begincast(5100, LONG_CAST),
            cast(6000, FILLER),
        ]
        assert pair(game_data, events) == pair(game_data, events)

    def test_every_use_has_a_timestamp(self, game_data):
        events = [
            cast(0, CAST),
            begincast(100, CAST),
            begincast(200, LONG_CAST),
            cast(3200, LONG_CAST),
            cast(3300, CAST),
            cast(5800, FILLER),
        ]
        for use in pair(game_data, events):
            assert use.prepare_at is not None or use.commit_at is not None

    def test_report(self, game_data):
        pairing = CastPairing(game_data)
        for event in [begincast(0, CAST), cast(100, FILLER), cast(2600, FILLER)]:
            pairing.add_event(event)

        assert pairing.report() == {
            "casts": {"num_uses": 3, "num_interrupted": 1, "num_instant": 2}
        }
