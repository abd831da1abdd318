from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import NamedTuple, Optional
import os, json, logging, threading, time
import redis

from shared.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

REDIS_HOST = os.getenv("REDIS_HOST", "redis")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
EVENT_CHANNEL = "appointment.events"
SUBSCRIBE = os.getenv("NOTIFICATIONS_SUBSCRIBE", "1").strip().lower() in {"1", "true", "yes", "y"}


class Notification(NamedTuple):
    kind: str  # provider.new_appointment | customer.confirmation | appointment.status
    recipient: Optional[str]
    appointment_id: Optional[str]


# Delivery is out of scope; notifications are logged for the delivery pipeline.
def _send(kind: str, recipient: Optional[str], appointment: dict) -> Notification:
    n = Notification(kind, recipient, appointment.get("id"))
    logger.info("[NOTIFY] %s -> %s (appointment %s)", n.kind, n.recipient, n.appointment_id)
    return n


def on_appointment_created(appointment: Optional[dict]) -> list[Notification]:
    if not appointment:
        return []
    logger.info("New appointment created: %s", appointment.get("id"))
    sent = []
    if appointment.get("serviceProviderId"):
        sent.append(_send("provider.new_appointment", appointment["serviceProviderId"], appointment))
    if appointment.get("customerId"):
        sent.append(_send("customer.confirmation", appointment["customerId"], appointment))
    return sent


def on_appointment_updated(before: Optional[dict], after: Optional[dict]) -> list[Notification]:
    if not before or not after:
        return []
    if before.get("status") == after.get("status"):
        return []
    logger.info("Appointment status changed from %s to %s", before.get("status"), after.get("status"))
    return [_send("appointment.status", after.get("customerId") or after.get("serviceProviderId"), after)]


def handle_event(payload: dict) -> list[Notification]:
    """
    Payload schema published on appointment writes:
    {
      "type": "appointment.created|appointment.updated",
      "appointmentId": "<id>",
      "data": {...},                      # created
      "before": {...}, "after": {...}     # updated
    }
    """
    kind = payload.get("type")
    appointment_id = payload.get("appointmentId")

    def with_id(doc):
        return {"id": appointment_id, **doc} if isinstance(doc, dict) else None

    if kind == "appointment.created":
        return on_appointment_created(with_id(payload.get("data")))
    if kind == "appointment.updated":
        return on_appointment_updated(with_id(payload.get("before")), with_id(payload.get("after")))
    logger.warning("Ignoring unknown event type: %s", kind)
    return []


def subscriber_thread():
    # reconnect loop with simple backoff
    backoff = 1
    while True:
        try:
            r = redis.Redis(host=REDIS_HOST, port=REDIS_PORT, decode_responses=True)
            pubsub = r.pubsub()
            pubsub.subscribe(EVENT_CHANNEL)
            logger.info("[SUB] listening on redis channel: %s", EVENT_CHANNEL)
            backoff = 1
            for msg in pubsub.listen():
                if msg and msg.get("type") == "message":
                    data = msg.get("data")
                    try:
                        handle_event(json.loads(data))
                    except (ValueError, AttributeError) as e:
                        logger.error("[SUB ERROR] bad payload: %s :: %s", e, data)
        except redis.RedisError as e:
            logger.error("[SUB ERROR] %s; retrying in %ss", e, backoff)
            time.sleep(backoff)
            backoff = min(backoff * 2, 30)


def start_background():
    t = threading.Thread(target=subscriber_thread, daemon=True)
    t.start()
    return t


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if SUBSCRIBE:
        start_background()
    yield


app = FastAPI(title="Notification Service", version="0.2.0", lifespan=lifespan)


@app.get("/health")
def health():
    return {"status": "ok"}


class AppointmentEvent(BaseModel):
    type: str
    appointmentId: str
    data: Optional[dict] = None
    before: Optional[dict] = None
    after: Optional[dict] = None


@app.post("/events/appointments")
def appointment_event(evt: AppointmentEvent):
    if evt.type not in ("appointment.created", "appointment.updated"):
        raise HTTPException(status_code=400, detail=f"unknown event type: {evt.type}")
    sent = handle_event(evt.model_dump())
    return {"delivered": bool(sent), "notifications": [n._asdict() for n in sent]}
