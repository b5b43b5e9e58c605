import logging
import os
from contextlib import asynccontextmanager
from typing import Optional, Tuple

from dotenv import load_dotenv
from fastapi import FastAPI, Depends, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import ReservationStore, StoreWriteError, get_store, init_db
from models import (
    DateReservations,
    ErrorResponse,
    HealthStatus,
    ReservationCreate,
    ReservationCreated,
)
from validation import (
    ALLOWED_SLOTS,
    MSG_INVALID_DATE,
    ValidationFailed,
    is_valid_date,
    validate_reservation_request,
)

logger = logging.getLogger(__name__)

# 1. Configuration (.env first, then the process environment)
load_dotenv()
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
STATIC_DIR = os.environ.get("STATIC_DIR", "public")

MSG_CONFLICT = "이미 예약된 시간이 있습니다."
MSG_CREATED = "예약이 완료되었습니다."
MSG_INVALID_REQUEST = "요청 형식이 올바르지 않습니다."
MSG_SAVE_FAILED = "예약을 저장하지 못했습니다. 잠시 후 다시 시도해주세요."
MSG_INTERNAL = "서버 오류가 발생했습니다."

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _setup_logging() -> None:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def get_allowed_slots() -> Tuple[str, ...]:
    return ALLOWED_SLOTS


@asynccontextmanager
async def lifespan(app: FastAPI):
    _setup_logging()
    init_db()
    logger.info("Reservation API ready (%d bookable slots per day)", len(ALLOWED_SLOTS))
    yield


app = FastAPI(title="December Reservation API", lifespan=lifespan)


# --- Error rendering: every error body carries "message" ---
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": MSG_INVALID_REQUEST},
    )


@app.exception_handler(StoreWriteError)
async def store_write_error_handler(request: Request, exc: StoreWriteError):
    logger.error("Reservation was not saved: %s", exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": MSG_SAVE_FAILED},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": MSG_INTERNAL},
    )


# --- Endpoint 1: GET /api/health ---
@app.get("/api/health", response_model=HealthStatus)
async def health():
    return {"ok": True}


# --- Endpoint 2: GET /api/reservations ---
@app.get(
    "/api/reservations",
    response_model=DateReservations,
    responses=ERROR_RESPONSES,
)
def get_reservations(
    date: str = Query(""),
    store: ReservationStore = Depends(get_store),
):
    date = date.strip()
    if not is_valid_date(date):
        raise HTTPException(status_code=400, detail=MSG_INVALID_DATE)

    return {"date": date, "reservations": store.get_reservations_for_date(date)}


# --- Endpoint 3: POST /api/reservations ---
@app.post(
    "/api/reservations",
    status_code=status.HTTP_201_CREATED,
    response_model=ReservationCreated,
    responses=ERROR_RESPONSES,
)
def create_reservation(
    payload: Optional[ReservationCreate] = None,
    store: ReservationStore = Depends(get_store),
    allowed_slots: Tuple[str, ...] = Depends(get_allowed_slots),
):
    raw = payload.model_dump() if payload is not None else {}

    # Validation
    try:
        booking = validate_reservation_request(raw, allowed_slots)
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=e.message)

    result = store.create_reservation(
        booking.date, booking.slots, booking.name, booking.people
    )
    if not result.created:
        logger.info("Conflict on %s for slots %s", booking.date, result.conflicts)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": MSG_CONFLICT, "conflicts": result.conflicts},
        )

    logger.info(
        "Booked %s %s for %s (%d people)",
        booking.date,
        ", ".join(booking.slots),
        booking.name,
        booking.people,
    )
    return {"message": MSG_CREATED, "date": booking.date, "timeSlots": booking.slots}


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Front-end files, if present. Mounted last so /api routes win.
if os.path.isdir(STATIC_DIR):
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)
