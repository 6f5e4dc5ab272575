from __future__ import annotations

from fastapi import FastAPI

from .bootstrap import initialize_application
from .routers import auth, settings, users


app = FastAPI(title="CONECTSEAS")

app.include_router(auth.router)
app.include_router(settings.router)
app.include_router(users.router)


@app.on_event("startup")
def _startup():
    initialize_application()


@app.get("/health")
def health():
    return {"status": "ok"}
