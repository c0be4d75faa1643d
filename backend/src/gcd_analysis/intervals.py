import logging
import math
from collections import defaultdict
from typing import List

from console_table import console, print_table
from gcd_analysis.base import BaseAnalyzer
from gcd_analysis.casts import ActionUse, CastPairing
from gcd_analysis.data import GameData
from gcd_analysis.modifiers import ModifierResolver


class NearestMultiple:
    """Buckets milliseconds to the nearest multiple of ``step``"""

    def __init__(self, step=10):
        self.step = step

    def __call__(self, interval_ms):
        # Half rounds up rather than to even
        return int(math.floor(interval_ms / self.step + 0.5) * self.step)


class CeilDecimals:
    """Buckets to seconds, rounded up to ``places`` decimal places"""

    def __init__(self, places=2):
        self.places = places

    def __call__(self, interval_ms):
        factor = 10**self.places
        # Trim float noise so 2.5 doesn't land in the 2.51 bucket
        shifted = round(interval_ms / 1000 * factor, 6)
        return math.ceil(shifted) / factor


class IntervalHistogram:
    def __init__(self, counts=None):
        self._counts = defaultdict(int)
        if counts:
            self._counts.update(counts)

    def add(self, interval):
        self._counts[interval] += 1

    @property
    def total(self):
        return sum(self._counts.values())

    def most_common(self):
        return sorted(self._counts.items(), key=lambda item: (-item[1], item[0]))

    def as_list(self):
        return [
            {"interval": interval, "count": count}
            for interval, count in sorted(self._counts.items())
        ]

    def __getitem__(self, interval):
        return self._counts.get(interval, 0)

    def __contains__(self, interval):
        return interval in self._counts

    def __len__(self):
        return len(self._counts)

    def __iter__(self):
        return iter(self._counts)

    def __eq__(self, other):
        if isinstance(other, IntervalHistogram):
            return dict(self._counts) == dict(other._counts)
        if isinstance(other, dict):
            return dict(self._counts) == other
        return NotImplemented

    def __repr__(self):
        return f"IntervalHistogram({dict(self._counts)!r})"


class IntervalNormalizer:
    BASE_GCD_MS = 2500
    CASTER_TAX_MS = 100
    SKIPPED_LEADING_USES = 2

    def __init__(
        self,
        game_data: GameData,
        resolver: ModifierResolver,
        bucket=None,
        base_gcd=BASE_GCD_MS,
        caster_tax=CASTER_TAX_MS,
        skip_leading=SKIPPED_LEADING_USES,
    ):
        self._game_data = game_data
        self._resolver = resolver
        self._bucket = bucket or NearestMultiple()
        self._base_gcd = base_gcd
        self._caster_tax = caster_tax
        self._skip_leading = skip_leading

    def normalize(self, actor_id, previous: ActionUse, current: ActionUse):
        interval = current.start_time - previous.start_time
        cast_time_scale = 1

        if previous.is_taxed(self._game_data, self._base_gcd):
            interval -= self._caster_tax
            action = self._game_data.lookup_action(previous.action_id)
            cast_time_scale = action.cast_time / self._base_gcd

        speed_modifier = self._resolver.resolve(actor_id, previous.start_time)
        return interval / cast_time_scale / speed_modifier

    def intervals(self, actor_id, uses: List[ActionUse]):
        for idx in range(max(1, self._skip_leading), len(uses)):
            previous, current = uses[idx - 1], uses[idx]
            if previous.start_time is None or current.start_time is None:
                continue
            yield self.normalize(actor_id, previous, current)

    def histogram(self, actor_id, uses: List[ActionUse]) -> IntervalHistogram:
        histogram = IntervalHistogram()
        for interval in self.intervals(actor_id, uses):
            histogram.add(self._bucket(interval))

        logging.debug(
            f"Actor ID: {actor_id} - Event Intervals {histogram.most_common()}"
        )
        return histogram


class CadenceAnalyzer(BaseAnalyzer):
    def __init__(self, actor_id, game_data: GameData, normalizer: IntervalNormalizer):
        self._actor_id = actor_id
        self._pairing = CastPairing(game_data)
        self._normalizer = normalizer
        self._histogram = None

    @property
    def uses(self):
        return self._pairing.uses

    @property
    def histogram(self) -> IntervalHistogram:
        if self._histogram is None:
            self._histogram = self._normalizer.histogram(self._actor_id, self.uses)
        return self._histogram

    def add_event(self, event):
        self._histogram = None
        self._pairing.add_event(event)

    def report(self):
        ret = {
            "gcd_intervals": {
                "num_intervals": self.histogram.total,
                "histogram": self.histogram.as_list(),
            }
        }
        ret.update(self._pairing.report())
        return ret

    def print(self):
        rows = self.histogram.most_common()[:5]
        if not rows:
            console.print("* No GCD intervals were recorded")
            return
        print_table("GCD Intervals", ["Interval", "Count"], rows)
