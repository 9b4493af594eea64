import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.core.exceptions import RepositoryError
from backend.database import SessionLocal, engine, ensure_appointment_schema
from backend.models import appointment
from backend.routes import appointment_routes
from backend.seed import seed_database

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(title='Trainer Appointments API')

logger = logging.getLogger(__name__)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': jsonable_encoder(exc.errors())},
    )


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()

    try:
        appointment.Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        return

    if not config.SEED_ON_STARTUP:
        return

    db = SessionLocal()
    try:
        seed_database(db)
    except (RepositoryError, ValueError):
        logger.exception('Failed to seed database.')
    finally:
        db.close()


@app.get('/')
def root():
    return {'status': 'Trainer Appointments API Running'}


app.include_router(appointment_routes.router, prefix='/appointments')


if __name__ == '__main__':
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)
