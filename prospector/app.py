from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_import_stats
from .analytics.store import get_events, record_import
from .auth.dependencies import require_admin, require_user
from .auth.users import authenticate
from .classification.junk_filter import JunkClassifier
from .pipeline.orchestrator import ImportOrchestrator, ImportResult, ImportStatus
from .prospects.models import (
    STATUS_LABELS,
    BatchDeleteRequest,
    BatchDeleteResponse,
    ImportRequest,
    LoginRequest,
    Prospect,
    ProspectUpdate,
)
from .prospects.service import (
    delete_prospect,
    delete_prospects_by_city,
    list_cities,
    list_prospects,
    update_prospect,
)
from .storage import DEFAULT_STORE_CONFIG, ProspectStore, create_store
from .storage.errors import FailureKind, StoreError
from .storage.writer import ProspectWriter

logger = logging.getLogger(__name__)

_STATUS_BY_KIND: dict[FailureKind, int] = {
    FailureKind.connectivity: 503,
    FailureKind.permission: 403,
    FailureKind.quota: 429,
    FailureKind.not_found: 404,
    FailureKind.unknown: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = create_store(DEFAULT_STORE_CONFIG)
    logger.info("Store ready: %s", DEFAULT_STORE_CONFIG.backend)
    yield
    app.state.store.close()
    app.state.store = None


app = FastAPI(title="Prospector API", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "prospector-secret-change-in-production"),
)


# ── Dependencies ─────────────────────────────────────────────────────────


def get_store(request: Request) -> ProspectStore:
    """The app-owned store client built at startup."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Store is not initialised; run the app through its lifespan")
    return store


def get_classifier() -> JunkClassifier:
    return JunkClassifier()


@app.exception_handler(StoreError)
def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=_STATUS_BY_KIND[exc.kind],
        content={"detail": exc.message, **exc.details},
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/statuses")
def statuses() -> dict[str, str]:
    return {status.value: label for status, label in STATUS_LABELS.items()}


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Imports ──────────────────────────────────────────────────────────────


@app.post("/imports", response_model=ImportResult)
def run_import(
    body: ImportRequest,
    user: dict = Depends(require_user),
    store: ProspectStore = Depends(get_store),
    classifier: JunkClassifier = Depends(get_classifier),
) -> ImportResult | JSONResponse:
    start_time = time.time()
    result = ImportOrchestrator(store, classifier).run(body.city, body.raw_text)
    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_import(result.model_dump(mode="json"), elapsed_ms)

    if result.status is ImportStatus.validation_failed:
        return JSONResponse(status_code=400, content=result.model_dump(mode="json"))
    if result.status is ImportStatus.persistence_failed:
        return JSONResponse(
            status_code=_STATUS_BY_KIND[result.failure_kind or FailureKind.unknown],
            content=result.model_dump(mode="json"),
        )
    return result


# ── Prospects ────────────────────────────────────────────────────────────


@app.get("/prospects", response_model=list[Prospect])
def prospects(
    city: str | None = None,
    user: dict = Depends(require_user),
    store: ProspectStore = Depends(get_store),
) -> list[Prospect]:
    return list_prospects(store, city)


@app.get("/cities")
def cities(
    user: dict = Depends(require_user),
    store: ProspectStore = Depends(get_store),
) -> list[str]:
    return list_cities(store)


@app.patch("/prospects/{prospect_id}", response_model=Prospect)
def patch_prospect(
    prospect_id: str,
    body: ProspectUpdate,
    user: dict = Depends(require_user),
    store: ProspectStore = Depends(get_store),
) -> Prospect:
    return update_prospect(store, prospect_id, body)


@app.delete("/prospects/{prospect_id}")
def remove_prospect(
    prospect_id: str,
    user: dict = Depends(require_user),
    store: ProspectStore = Depends(get_store),
) -> dict:
    delete_prospect(store, prospect_id)
    return {"status": "deleted", "id": prospect_id}


@app.post("/prospects/delete", response_model=BatchDeleteResponse)
def remove_prospects(
    body: BatchDeleteRequest,
    user: dict = Depends(require_user),
    store: ProspectStore = Depends(get_store),
) -> BatchDeleteResponse:
    return BatchDeleteResponse(processed=ProspectWriter(store).delete_batch(body.ids))


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.delete("/cities/{city}/prospects", response_model=BatchDeleteResponse)
def remove_city(
    city: str,
    user: dict = Depends(require_admin),
    store: ProspectStore = Depends(get_store),
) -> BatchDeleteResponse:
    return BatchDeleteResponse(processed=delete_prospects_by_city(store, city))


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_import_stats(get_events())
