import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from gcd_analysis.data import GameData
from gcd_analysis.downtime import no_downtime
from gcd_analysis.drift import DriftCycle, DriftSlot, DriftTracker
from gcd_analysis.errors import UnbalancedWindowError
from gcd_analysis.intervals import (
    CadenceAnalyzer,
    CeilDecimals,
    IntervalHistogram,
    IntervalNormalizer,
    NearestMultiple,
)
from gcd_analysis.modifiers import ModifierResolver, ModifierTracker


class Actor:
    def __init__(self, id, name=None, job=None, is_friendly=True):
        self.id = id
        self.name = name
        self.job = job
        self.is_friendly = is_friendly


def filter_actor_events(actor_id, events):
    return [
        event
        for event in events
        if event.get("sourceID") == actor_id or event["type"] == "encounterend"
    ]


class CadenceAnalysisConfig:
    base_gcd = IntervalNormalizer.BASE_GCD_MS
    caster_tax = IntervalNormalizer.CASTER_TAX_MS
    skip_leading = IntervalNormalizer.SKIPPED_LEADING_USES
    drift_buffer = DriftTracker.DRIFT_BUFFER_MS

    def create_bucket(self):
        return NearestMultiple(10)

    def create_normalizer(self, game_data, resolver):
        return IntervalNormalizer(
            game_data,
            resolver,
            bucket=self.create_bucket(),
            base_gcd=self.base_gcd,
            caster_tax=self.caster_tax,
            skip_leading=self.skip_leading,
        )


class StatisticalCadenceConfig(CadenceAnalysisConfig):
    # The speed stat estimate only drops the very first use
    skip_leading = 1

    def create_bucket(self):
        return CeilDecimals(2)


class ActorAnalysis:
    def __init__(
        self,
        actor_id,
        histogram: Optional[IntervalHistogram] = None,
        estimate_histogram: Optional[IntervalHistogram] = None,
        drift_cycles: Optional[List[DriftCycle]] = None,
        error: Optional[UnbalancedWindowError] = None,
        analysis=None,
    ):
        self.actor_id = actor_id
        self.analysis = analysis or {}
        self.histogram = histogram
        self.estimate_histogram = estimate_histogram
        self.drift_cycles = drift_cycles or []
        self.error = error

    @property
    def succeeded(self):
        return self.error is None

    @property
    def drifted_cycles(self):
        return [cycle for cycle in self.drift_cycles if cycle.is_drifted]

    @property
    def estimated_interval(self):
        """The most common normalized interval in seconds"""
        if not self.estimate_histogram:
            return None
        return self.estimate_histogram.most_common()[0][0]

    def report(self):
        if self.error is not None:
            return {"actor_id": self.actor_id, "error": self.error.to_dict()}

        return {
            "actor_id": self.actor_id,
            "error": None,
            "histogram": self.histogram.as_list(),
            "estimated_interval": self.estimated_interval,
            "drift": [cycle.to_dict() for cycle in self.drift_cycles],
            "num_drifted": len(self.drifted_cycles),
            "analysis": self.analysis,
        }


class Analyzer:
    """Runs the pipeline for a single actor's events"""

    def __init__(
        self,
        actor_id,
        events,
        game_data: GameData,
        job=None,
        drift_slots: List[DriftSlot] = None,
        downtime=None,
        start_time=None,
        config: CadenceAnalysisConfig = None,
    ):
        self._actor_id = actor_id
        self._game_data = game_data
        self._job = job
        self._events = self._filter_events(events)
        self._drift_slots = drift_slots or []
        self._downtime = downtime or no_downtime
        self._start_time = start_time
        self._analysis_config = config or CadenceAnalysisConfig()
        self._modifier_tracker = None
        self._analyzers = []

    def _filter_events(self, events):
        return filter_actor_events(self._actor_id, events)

    def _get_modifier_tracker(self):
        if self._modifier_tracker is None:
            self._modifier_tracker = ModifierTracker(self._game_data)
            for event in self._events:
                self._modifier_tracker.preprocess_event(event)
        return self._modifier_tracker

    def get_resolver(self) -> ModifierResolver:
        return ModifierResolver(
            self._get_modifier_tracker(),
            self._game_data,
            {self._actor_id: self._job},
        )

    def _get_start_time(self):
        if self._start_time is not None:
            return self._start_time
        return self._events[0]["timestamp"] if self._events else 0

    def analyze(self) -> ActorAnalysis:
        resolver = self.get_resolver()

        cadence = CadenceAnalyzer(
            self._actor_id,
            self._game_data,
            self._analysis_config.create_normalizer(self._game_data, resolver),
        )
        estimate = CadenceAnalyzer(
            self._actor_id,
            self._game_data,
            StatisticalCadenceConfig().create_normalizer(self._game_data, resolver),
        )
        analyzers = [cadence, estimate]

        drift = None
        if self._drift_slots:
            drift = DriftTracker(
                self._drift_slots,
                self._game_data,
                self._downtime,
                start_time=self._get_start_time(),
                threshold=self._analysis_config.drift_buffer,
            )
            analyzers.append(drift)

        for event in self._events:
            for analyzer in analyzers:
                analyzer.add_event(event)

        # The estimate is only surfaced through the estimated interval
        self._analyzers = [cadence] + ([drift] if drift else [])
        analysis = self._get_modifier_tracker().report(self._actor_id)
        for analyzer in self._analyzers:
            analysis.update(**analyzer.report())

        return ActorAnalysis(
            self._actor_id,
            histogram=cadence.histogram,
            estimate_histogram=estimate.histogram,
            drift_cycles=drift.cycles if drift else [],
            analysis=analysis,
        )

    def print(self):
        for analyzer in self._analyzers:
            analyzer.print()


def analyze_cadence(
    actor_id, events, game_data: GameData, job=None, config=None
) -> IntervalHistogram:
    analyzer = Analyzer(actor_id, events, game_data, job=job, config=config)
    return analyzer.analyze().histogram


def analyze_drift(
    actor_id,
    slots: List[DriftSlot],
    events,
    downtime,
    game_data: GameData,
    start_time=None,
    threshold=DriftTracker.DRIFT_BUFFER_MS,
) -> List[DriftCycle]:
    """Drift cycles of the actor's own casts of the tracked actions.

    The first cycle of each slot opens at `start_time`. Pass the encounter
    start explicitly; without it the timestamp of the first event in
    `events` is used, whichever actor it belongs to.
    """
    if start_time is None:
        start_time = events[0]["timestamp"] if events else 0

    tracker = DriftTracker(
        slots, game_data, downtime, start_time=start_time, threshold=threshold
    )
    for event in filter_actor_events(actor_id, events):
        tracker.add_event(event)
    return tracker.cycles


def resolve_modifier(actor_id, timestamp, events, game_data: GameData, job=None):
    analyzer = Analyzer(actor_id, events, game_data, job=job)
    return analyzer.get_resolver().resolve(actor_id, timestamp)


def _analyze_actor(actor: Actor, events, game_data, drift_slots, downtime, start_time):
    analyzer = Analyzer(
        actor.id,
        events,
        game_data,
        job=actor.job,
        drift_slots=drift_slots,
        downtime=downtime,
        start_time=start_time,
    )
    try:
        return analyzer.analyze()
    except UnbalancedWindowError as e:
        logging.warning(f"Skipping modifier analysis for actor {actor.id}: {e}")
        return ActorAnalysis(actor.id, error=e)


def analyze_actors(
    events,
    game_data: GameData,
    actors: List[Actor],
    drift_slots: List[DriftSlot] = None,
    downtime=None,
    max_workers=None,
) -> Dict[int, ActorAnalysis]:
    """Analyzes each friendly actor independently

    An actor whose analysis fails is reported with its error, the others still
    get their results.
    """
    start_time = events[0]["timestamp"] if events else 0

    shards = defaultdict(list)
    encounter_events = []
    for event in events:
        if event["type"] == "encounterend":
            encounter_events.append(event)
        else:
            shards[event.get("sourceID")].append(event)

    friendly = [actor for actor in actors if actor.is_friendly]

    def run(actor):
        shard = shards.get(actor.id, []) + encounter_events
        shard.sort(key=lambda e: e["timestamp"])
        return _analyze_actor(actor, shard, game_data, drift_slots, downtime, start_time)

    if max_workers and len(friendly) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(run, friendly))
    else:
        results = [run(actor) for actor in friendly]

    logging.info(
        f"Analyzed {len(results)} actors, "
        f"{sum(1 for r in results if not r.succeeded)} failed"
    )
    return {result.actor_id: result for result in results}
