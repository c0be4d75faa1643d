import logging
import os
from typing import List, Optional

import sentry_sdk
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from sentry_sdk.integrations.aws_lambda import AwsLambdaIntegration

from gcd_analysis.analyze import Actor, analyze_actors
from gcd_analysis.data import GameData
from gcd_analysis.downtime import DowntimeWindows
from gcd_analysis.drift import DriftSlot

SENTRY_ENABLED = os.environ.get("AWS_EXECUTION_ENV") is not None
if SENTRY_ENABLED:
    sentry_sdk.init(
        dsn=os.environ.get("SENTRY_DSN"),
        traces_sample_rate=0.05,
        attach_stacktrace=True,
        integrations=[AwsLambdaIntegration()],
    )
app = FastAPI()

CORS_ALLOW_ORIGINS = os.environ.get(
    "CORS_ALLOW_ORIGINS", "http://localhost:5173"
).split(",")


async def catch_exceptions_middleware(request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        logging.exception(e)
        return Response("Internal server error", status_code=500)


# Add this middleware first so 500 errors have CORS headers
app.middleware("http")(catch_exceptions_middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

EVENT_TYPES = ("begincast", "cast", "applybuff", "removebuff", "encounterend")


class EventModel(BaseModel):
    timestamp: int
    type: str
    sourceID: Optional[int] = None
    abilityGameID: Optional[int] = None


class ActorModel(BaseModel):
    id: int
    name: Optional[str] = None
    job: Optional[str] = None
    is_friendly: bool = True


class DriftSlotModel(BaseModel):
    action_id: int
    aliases: List[int] = []
    cooldown: Optional[int] = None


class AnalyzeRequest(BaseModel):
    events: List[EventModel]
    actors: List[ActorModel]
    drift_slots: List[DriftSlotModel] = []
    downtime: List[List[int]] = []


class AnalyzeResponse(BaseModel):
    data: dict


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/analyze_events", response_model=AnalyzeResponse)
async def analyze_events(request: AnalyzeRequest, response: Response):
    unknown_types = {e.type for e in request.events} - set(EVENT_TYPES)
    if unknown_types:
        response.status_code = 400
        return {"data": {"error": f"Unsupported event types: {sorted(unknown_types)}"}}

    if any(len(window) != 2 for window in request.downtime):
        response.status_code = 400
        return {"data": {"error": "Downtime windows must be [start, end] pairs"}}

    events = [event.model_dump() for event in request.events]
    actors = [
        Actor(actor.id, name=actor.name, job=actor.job, is_friendly=actor.is_friendly)
        for actor in request.actors
    ]
    drift_slots = [
        DriftSlot(slot.action_id, aliases=slot.aliases, cooldown=slot.cooldown)
        for slot in request.drift_slots
    ]
    downtime = DowntimeWindows.from_ranges(request.downtime)

    results = analyze_actors(
        events,
        GameData(),
        actors,
        drift_slots=drift_slots,
        downtime=downtime,
    )
    logging.info(f"Analyzed {len(events)} events for {len(results)} actors")

    response.headers["Cache-Control"] = "no-cache"
    return {
        "data": {
            str(actor_id): result.report() for actor_id, result in results.items()
        }
    }
