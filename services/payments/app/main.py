from fastapi import FastAPI, Depends, HTTPException
from pydantic import BaseModel
import logging, os, random, string, time
from typing import Optional

from shared.db import get_store
from shared.errors import NotFound, StoreFault
from shared.logging import configure_logging
from shared.schemas import CamelModel
from shared.store import DocumentStore, now_iso

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="payments")

APPOINTMENTS = "appointments"
SIMULATED_DELAY_SECONDS = float(os.getenv("PAYMENT_SIMULATED_DELAY_SECONDS", "1.0"))


@app.get("/health")
def health():
    return {"status": "ok"}


class ProcessPaymentReq(CamelModel):
    appointment_id: Optional[str] = None
    amount: Optional[float] = None
    payment_method: Optional[str] = None


class PaymentResult(BaseModel):
    success: bool
    payment_id: str


def _base36(n: int) -> str:
    alphabet = string.digits + string.ascii_lowercase
    return "".join(random.choice(alphabet) for _ in range(n))


def simulate_payment_processing(amount: float, payment_method: str) -> PaymentResult:
    # Stand-in for a real processor; always succeeds after the configured delay.
    logger.info("Processing %s via %s", amount, payment_method)
    if SIMULATED_DELAY_SECONDS > 0:
        time.sleep(SIMULATED_DELAY_SECONDS)
    return PaymentResult(success=True, payment_id=f"pay_{int(time.time() * 1000)}_{_base36(9)}")


@app.post("/payments/process")
def process_payment(body: ProcessPaymentReq, store: DocumentStore = Depends(get_store)):
    if not body.appointment_id or not body.amount or not body.payment_method:
        raise HTTPException(status_code=400, detail="Missing required payment information")

    logger.info("Processing payment for appointment %s", body.appointment_id)
    result = simulate_payment_processing(body.amount, body.payment_method)
    if not result.success:
        raise HTTPException(status_code=502, detail="Payment processing failed")

    try:
        store.update(APPOINTMENTS, body.appointment_id, {
            "paymentStatus": "completed",
            "paymentId": result.payment_id,
            "paidAt": now_iso(),
        })
    except NotFound:
        raise HTTPException(status_code=404, detail="appointment not found")
    except StoreFault as e:
        raise HTTPException(status_code=502, detail=f"Payment processing failed: {e}")

    return {"success": True, "paymentId": result.payment_id}
