import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from smart_appointments.core import config
from smart_appointments.database import init_db
from smart_appointments.routes import (
    admin_routes,
    appointment_routes,
    auth_routes,
    notification_routes,
    profile_routes,
    scheduling_routes,
)

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)

config.validate_runtime_config()

app = FastAPI(title='Smart Appointments API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        init_db()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.on_event('shutdown')
async def flush_audit_records() -> None:
    await scheduling_routes.get_audit_sink().drain()


@app.get('/')
def root():
    return {'status': 'Smart Appointments API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(scheduling_routes.router, prefix='/scheduling')
app.include_router(notification_routes.router, prefix='/notifications')
app.include_router(profile_routes.router, prefix='/profile')
app.include_router(admin_routes.router, prefix='/admin')
