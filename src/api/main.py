"""
FastAPI backend: contacts REST API, import/export, backups and server-side functions.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from neo4j import GraphDatabase
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from kontak.application import (
    BackupService,
    ContactRepository,
    ContactService,
    Duplicate,
    ExternalImportService,
    Invalid,
    NotFound,
    OperationFailed,
    TransferService,
)
from kontak.config import STORE_MEMORY, Settings
from kontak.domain import (
    EWALLET_LABELS,
    Contact,
    ContactDraft,
    format_phone_display,
    initials,
)
from kontak.errors import OperationBusy, StorageError
from kontak.formats import FORMATS
from kontak.infrastructure import (
    InMemoryContactRepository,
    LocalBackupStorage,
    LoggingNotifier,
    Neo4jContactRepository,
    OperationGuard,
    ensure_contact_constraints,
    open_neo4j_source,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

# Optional: multi-user placeholder (REST)
USER_ID_HEADER = "X-User-Id"
DEFAULT_USER_ID = "default"

# Per-user repository cache (memory store keeps its data here)
_repository_cache: dict[str, ContactRepository] = {}

_guard = OperationGuard()
_notifier = LoggingNotifier()


def _get_driver(settings: Settings):
    return GraphDatabase.driver(
        settings.neo4j_uri, auth=(settings.neo4j_user, settings.neo4j_password)
    )


def _get_settings(app: FastAPI) -> Settings:
    if getattr(app.state, "settings", None) is None:
        app.state.settings = Settings.from_env()
    return app.state.settings


def _get_cached_driver(app: FastAPI):
    if getattr(app.state, "driver", None) is None:
        app.state.driver = _get_driver(_get_settings(app))
    return app.state.driver


def get_repository(user_id: str, app: FastAPI) -> ContactRepository:
    if user_id in _repository_cache:
        return _repository_cache[user_id]
    factory = getattr(app.state, "repository_factory", None)
    if factory is not None:
        repo = factory(user_id)
    else:
        settings = _get_settings(app)
        if settings.store == STORE_MEMORY:
            repo = InMemoryContactRepository(unique_phone=settings.unique_phone)
        else:
            repo = Neo4jContactRepository(_get_cached_driver(app), user_id=user_id)
    _repository_cache[user_id] = repo
    return repo


def get_backup_service(user_id: str, app: FastAPI) -> BackupService:
    storage_factory = getattr(app.state, "backup_storage_factory", None)
    if storage_factory is not None:
        storage = storage_factory(user_id)
    else:
        storage = LocalBackupStorage(_get_settings(app).backup_dir, bucket=user_id)
    return BackupService(get_repository(user_id, app), storage, _notifier)


def get_external_import_service(user_id: str, app: FastAPI) -> ExternalImportService:
    opener = getattr(app.state, "source_opener", None) or open_neo4j_source
    return ExternalImportService(
        get_repository(user_id, app),
        opener,
        _notifier,
        max_workers=_get_settings(app).import_workers,
    )


def _user_id(x_user_id: str | None) -> str:
    return (x_user_id or "").strip() or DEFAULT_USER_ID


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.driver = None
    settings = _get_settings(app)
    logger.info("Contact store: %s; backups in %s", settings.store, settings.backup_dir)
    try:
        if settings.store != STORE_MEMORY and getattr(app.state, "repository_factory", None) is None:
            app.state.driver = _get_driver(settings)
            ensure_contact_constraints(app.state.driver, unique_phone=settings.unique_phone)
        yield
    finally:
        # Cached Neo4j repositories hold the driver closed below.
        _repository_cache.clear()
        if getattr(app.state, "driver", None) is not None:
            app.state.driver.close()
            app.state.driver = None


app = FastAPI(title="Kontak API", lifespan=lifespan)


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- REST: contacts ---


class ContactBody(BaseModel):
    name: str
    phone: str | None = None
    ewallet: list[str] = []
    email: str | None = None
    company: str | None = None
    notes: str | None = None

    def to_draft(self) -> ContactDraft:
        return ContactDraft(
            name=self.name,
            phone=self.phone,
            ewallet=list(self.ewallet),
            email=self.email,
            company=self.company,
            notes=self.notes,
        )


class ContactItem(BaseModel):
    id: str
    name: str
    phone: str | None = None
    ewallet: list[str] = []
    email: str | None = None
    company: str | None = None
    notes: str | None = None
    created_at: str
    phone_display: str = ""
    initials: str = ""
    ewallet_labels: list[str] = []


def _contact_item(c: Contact) -> ContactItem:
    return ContactItem(
        id=c.id,
        name=c.name,
        phone=c.phone,
        ewallet=list(c.ewallet),
        email=c.email,
        company=c.company,
        notes=c.notes,
        created_at=c.created_at.isoformat(),
        phone_display=format_phone_display(c.phone),
        initials=initials(c.name),
        ewallet_labels=[EWALLET_LABELS.get(t, t) for t in c.ewallet],
    )


def _raise_for(result) -> None:
    """Map failure DTOs onto HTTP errors."""
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    if isinstance(result, NotFound):
        raise HTTPException(status_code=404, detail="Contact not found")
    if isinstance(result, Duplicate):
        raise HTTPException(
            status_code=409,
            detail=f"Phone number already saved for {result.name}",
        )
    if isinstance(result, OperationFailed):
        raise HTTPException(
            status_code=400 if result.format_error else 502, detail=result.error
        )


def _contact_service(x_user_id: str | None, request: Request) -> ContactService:
    return ContactService(get_repository(_user_id(x_user_id), request.app), _notifier)


@app.get("/contacts")
def list_contacts(
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    contacts = _contact_service(x_user_id, request).list_contacts()
    _raise_for(contacts)
    return [_contact_item(c) for c in contacts]


@app.get("/contacts/search")
def search_contacts(
    request: Request,
    q: str = "",
    mode: str = "keywords",
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    try:
        result = _contact_service(x_user_id, request).search_contacts(q, mode=mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    _raise_for(result)
    return {
        "admin_trigger": result.admin_trigger,
        "count": len(result.contacts),
        "contacts": [_contact_item(c) for c in result.contacts],
    }


@app.get("/contacts/phone-check")
def phone_check(
    request: Request,
    phone: str = "",
    exclude_id: str | None = None,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    result = _contact_service(x_user_id, request).check_phone(phone, editing_id=exclude_id)
    if result is None:
        return {"duplicate": False}
    if isinstance(result, OperationFailed):
        _raise_for(result)
    return {"duplicate": True, "contact_id": result.contact_id, "name": result.name}


@app.get("/contacts/{contact_id}")
def get_contact(
    contact_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    contact = _contact_service(x_user_id, request).get_contact(contact_id)
    _raise_for(contact)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return _contact_item(contact)


@app.post("/contacts")
def create_contact(
    body: ContactBody,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    result = _contact_service(x_user_id, request).create_contact(body.to_draft())
    _raise_for(result)
    return JSONResponse(
        content=_contact_item(result.contact).model_dump(),
        status_code=201,
    )


@app.put("/contacts/{contact_id}")
def update_contact(
    contact_id: str,
    body: ContactBody,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    result = _contact_service(x_user_id, request).update_contact(contact_id, body.to_draft())
    _raise_for(result)
    return _contact_item(result.contact)


@app.delete("/contacts/{contact_id}", status_code=204)
def delete_contact(
    contact_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    _raise_for(_contact_service(x_user_id, request).delete_contact(contact_id))
    return Response(status_code=204)


# --- REST: export / import ---


def _check_format(fmt: str) -> None:
    if fmt not in FORMATS:
        raise HTTPException(status_code=404, detail=f"Unsupported format: {fmt}")


@app.get("/export/{fmt}")
def export_contacts(
    fmt: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    _check_format(fmt)
    repo = get_repository(_user_id(x_user_id), request.app)
    result = TransferService(repo, _notifier).export(fmt)
    _raise_for(result)
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


def _run_import(user_id: str, app: FastAPI, fmt: str, text: str):
    with _guard.hold(user_id, "import"):
        return TransferService(get_repository(user_id, app), _notifier).import_text(fmt, text)


@app.post("/import/{fmt}")
async def import_contacts(
    fmt: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    """Import the raw file content sent as the request body."""
    _check_format(fmt)
    raw = await request.body()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail="File must be UTF-8 text") from e
    try:
        result = await run_in_threadpool(
            _run_import, _user_id(x_user_id), request.app, fmt, text
        )
    except OperationBusy as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    _raise_for(result)
    return {"count": result.count, "skipped": result.skipped}


# --- REST: backups ---


def _backup_service(user_id: str, app: FastAPI) -> BackupService:
    try:
        return get_backup_service(user_id, app)
    except StorageError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@app.get("/backups")
def list_backups(
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    service = _backup_service(_user_id(x_user_id), request.app)
    backups = service.list_backups()
    _raise_for(backups)
    return [
        {
            "name": b.name,
            "size": b.size,
            "created_at": b.created_at.isoformat(),
            "label": service.relative_label(b),
        }
        for b in backups
    ]


@app.get("/backups/{name}")
def download_backup(
    name: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    data = _backup_service(_user_id(x_user_id), request.app).download_backup(name)
    _raise_for(data)
    if data is None:
        raise HTTPException(status_code=404, detail="Backup not found")
    return Response(
        content=data,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{name}"'},
    )


@app.delete("/backups/{name}", status_code=204)
def delete_backup(
    name: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    removed = _backup_service(_user_id(x_user_id), request.app).delete_backup(name)
    _raise_for(removed)
    if not removed:
        raise HTTPException(status_code=404, detail="Backup not found")
    return Response(status_code=204)


# --- Server-side functions ---


class ExternalSourceBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source_url: str = Field(alias="sourceUrl")
    source_key: str = Field(alias="sourceKey")
    source_user: str = Field(default="neo4j", alias="sourceUser")


def _function_error(error: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(content={"success": False, "error": error}, status_code=status_code)


@app.post("/functions/backup-contacts")
def backup_contacts(
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    user_id = _user_id(x_user_id)
    try:
        service = get_backup_service(user_id, request.app)
    except StorageError as e:
        return _function_error(str(e), status_code=400)
    try:
        with _guard.hold(user_id, "backup"):
            result = service.create_backup()
    except OperationBusy as e:
        return _function_error(str(e), status_code=409)
    if isinstance(result, OperationFailed):
        return _function_error(result.error)
    return {"success": True, "count": result.count, "message": result.message}


@app.post("/functions/import-external")
def import_external(
    body: ExternalSourceBody,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    user_id = _user_id(x_user_id)
    service = get_external_import_service(user_id, request.app)
    try:
        with _guard.hold(user_id, "import-external"):
            result = service.import_contacts(body.source_url, body.source_key, body.source_user)
    except OperationBusy as e:
        return _function_error(str(e), status_code=409)
    if isinstance(result, OperationFailed):
        return _function_error(result.error)
    return {"success": True, "count": result.count, "message": result.message}


@app.post("/functions/sync-external-ewallets")
def sync_external_ewallets(
    body: ExternalSourceBody,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    user_id = _user_id(x_user_id)
    service = get_external_import_service(user_id, request.app)
    try:
        with _guard.hold(user_id, "import-external"):
            result = service.sync_ewallets(body.source_url, body.source_key, body.source_user)
    except OperationBusy as e:
        return _function_error(str(e), status_code=409)
    if isinstance(result, OperationFailed):
        return _function_error(result.error)
    return {"success": True, "updated": result.updated, "message": result.message}
