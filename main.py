from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import models  # noqa: F401  registers the tables on Base.metadata
from database import Base, engine
from routes import (
    trips,
    locations,
    places,
    attractions,
    credits,
    payments,
)
from utils.logger import setup_api_logger

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Trip Planner API (Itineraries, Trips, Credits, Places)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# setup file logger for API failures
api_logger = setup_api_logger()


@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
    # log request info and stacktrace
    try:
        body = await request.body()
    except Exception:
        body = b""
    api_logger.exception("Unhandled exception on %s %s | body=%s | error=%s",
                         request.method, request.url.path, body.decode('utf-8', errors='replace'), str(exc))
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    try:
        body = await request.body()
    except Exception:
        body = b""
    api_logger.warning("HTTPException on %s %s | status=%s | body=%s | detail=%s",
                       request.method, request.url.path, exc.status_code,
                       body.decode('utf-8', errors='replace'), str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


@app.get("/")
def root():
    return {"message": "Trip Planner API is running"}


app.include_router(trips.router)
app.include_router(locations.router)
app.include_router(places.router)
app.include_router(attractions.router)
app.include_router(credits.router)
app.include_router(payments.router)
