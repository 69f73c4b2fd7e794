import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

import questboard.api.deps as deps
from questboard.api.errors import quest_error_handler
from questboard.api.routers.principals import router as principals_router
from questboard.api.routers.quests import router as quests_router
from questboard.core.logging import configure_logging
from questboard.domain.usecase.ports import QuestError

configure_logging(deps.settings)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    await deps.ensure_storage()
    log.info("Quest board ready", extra={"storage": deps.settings.storage})
    yield
    if deps.settings.storage == "mongo":
        from questboard.infra.db import close_client

        await close_client()


app = FastAPI(title="Quest Board API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(QuestError, quest_error_handler)

# Routers
app.include_router(quests_router)
app.include_router(principals_router)


@app.get("/healthz")
def healthz():
    return {"ok": True}


def run() -> None:
    import uvicorn

    uvicorn.run("questboard.api.main:app", host="localhost", port=8000, log_level="info")


if __name__ == "__main__":
    run()
