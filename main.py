from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from attendance_engine.api.check_ins.routes import router as check_ins_router
from attendance_engine.api.checkin_tokens.routes import router as checkin_tokens_router
from attendance_engine.core import models  # noqa: F401
from attendance_engine.core.config import Environment, settings
from attendance_engine.core.database import create_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.ENVIRONMENT != Environment.TEST:
        create_db()
    yield


app = FastAPI(lifespan=lifespan)

# Include routers
app.include_router(check_ins_router, prefix='/check-ins', tags=['Check Ins'])
app.include_router(
    checkin_tokens_router, prefix='/locations', tags=['Check-In Tokens']
)

origins = ['*']
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.get('/', include_in_schema=False)
def ping():
    return Response(status_code=200)
