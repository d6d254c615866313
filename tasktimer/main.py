from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tasktimer import models  # noqa: F401  registers every table on Base.metadata
from tasktimer.database import Base, engine
from tasktimer.errors import AppError
from tasktimer.routers import auth, dashboard, tasks, time_logs
from tasktimer.utils.logger import setup_logger

logger = setup_logger("main")

Base.metadata.create_all(bind=engine)

app = FastAPI(title="TaskTimer API")

# API routers
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(time_logs.router)
app.include_router(dashboard.router)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


# Generic error handler to return JSON errors for unexpected exceptions
@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
