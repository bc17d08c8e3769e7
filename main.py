# main.py
import logging

from fastapi import FastAPI
from routes import user, agency, package, booking, payment, dashboard, email
from database import client, db, ensure_indexes
from services.agency_lifecycle import resume_agency_deletions
from utils.errors import register_exception_handlers
import config
import uvicorn

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Al-Mutamir API")
register_exception_handlers(app)

app.include_router(user.router, prefix="/api/users", tags=["users"])
app.include_router(agency.router, prefix="/api/agencies", tags=["agencies"])
app.include_router(package.router, prefix="/api/packages", tags=["packages"])
app.include_router(booking.router, prefix="/api/bookings", tags=["bookings"])
app.include_router(payment.router, prefix="/api/payments", tags=["payments"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(email.router, prefix="/api/email", tags=["email"])


@app.get("/health")
def health():
    return {"status": "ok", "service": config.PLATFORM_NAME}


@app.on_event("startup")
def startup_db_client():
    ensure_indexes(db)
    resumed = resume_agency_deletions(db)
    if resumed:
        logger.warning("Finished %d interrupted agency deletion(s)", resumed)


@app.on_event("shutdown")
def shutdown_db_client():
    client.close()


if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
