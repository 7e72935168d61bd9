from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Security
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, Field

from config import configure_logging, settings
from errors import (
    AlreadyAvailableError,
    ItemNotAvailableError,
    ItemNotFoundError,
    LibraryError,
    WrongVariantError,
)
from library import Library, Outcome, create_library
from utils.validators import BorrowValidator


library: Library = create_library(settings.seed_file)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield

app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

# --- Security ---
api_key_header = APIKeyHeader(name="X-API-Key")

def get_api_key(api_key: str = Security(api_key_header)):
    """Dependency that validates the API key."""
    if api_key == settings.api_key:
        return api_key
    raise HTTPException(
        status_code=403,
        detail="Could not validate credentials",
    )

def get_library() -> Library:
    return library

# --- Models ---
class ItemModel(BaseModel):
    id: int
    type: str
    title: str
    author: str
    available: bool
    borrower: str | None = None
    due_date: str | None = None
    pages: int | None = None
    hours: float | None = None
    issue: str | None = None
    archived: bool | None = None

class FineModel(BaseModel):
    item_id: int
    borrower: str
    days_overdue: int
    amount: float
    timestamp: str

class BorrowRequest(BaseModel):
    borrower: str = Field(..., min_length=1, max_length=100, description="Name of the borrower")
    days: int = Field(default=settings.default_loan_days, ge=1, le=365, description="Loan length in days")

class ReturnResponse(BaseModel):
    item: ItemModel
    fine: FineModel | None = None
    already_available: bool = False

class MessageResponse(BaseModel):
    message: str

class StatsModel(BaseModel):
    total_items: int
    available_items: int
    borrowed_items: int
    by_type: Dict[str, int]
    archived_magazines: int
    total_fines: int
    fines_amount: float

# --- Helpers ---
_STATUS_CODES = {
    ItemNotFoundError: 404,
    ItemNotAvailableError: 409,
    WrongVariantError: 400,
}

def _raise_for(error: LibraryError) -> None:
    """Translate a desk error into an HTTP error response."""
    status_code = _STATUS_CODES.get(type(error), 400)
    raise HTTPException(status_code=status_code, detail={"code": error.code, "message": str(error)})

def _unwrap(outcome: Outcome) -> Any:
    if not outcome.ok:
        _raise_for(outcome.error)
    return outcome.value

# --- Routes ---
@app.get("/health")
def health(desk: Library = Depends(get_library)):
    """Lightweight health endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total_items": len(desk.catalog),
    }

@app.get("/items", response_model=List[ItemModel])
def list_items(desk: Library = Depends(get_library)):
    return [ItemModel(**i.to_dict()) for i in desk.list_items()]

@app.get("/items/{item_id}", response_model=ItemModel)
def get_item(item_id: int, desk: Library = Depends(get_library)):
    """Get a single item by id."""
    item = _unwrap(desk.lookup(item_id))
    return ItemModel(**item.to_dict())

@app.get("/search", response_model=List[ItemModel])
def search_items(q: str = Query("", description="Type name or title fragment"),
                 desk: Library = Depends(get_library)):
    return [ItemModel(**i.to_dict()) for i in desk.search(q)]

@app.post("/items/{item_id}/borrow", response_model=ItemModel, dependencies=[Depends(get_api_key)])
def borrow_item(item_id: int, payload: BorrowRequest, desk: Library = Depends(get_library)):
    if not BorrowValidator.validate_borrower(payload.borrower):
        raise HTTPException(status_code=422, detail="Invalid borrower name.")
    borrower = BorrowValidator.normalize_name(payload.borrower)
    item = _unwrap(desk.borrow(item_id, borrower, payload.days))
    return ItemModel(**item.to_dict())

@app.post("/items/{item_id}/return", response_model=ReturnResponse, dependencies=[Depends(get_api_key)])
def return_item(item_id: int, desk: Library = Depends(get_library)):
    """Return an item. Returning an item that is not lent is reported, not rejected."""
    outcome = desk.return_item(item_id)
    already_available = isinstance(outcome.error, AlreadyAvailableError)
    if not outcome.ok and not already_available:
        _raise_for(outcome.error)

    item = _unwrap(desk.lookup(item_id))
    fine: Optional[FineModel] = FineModel(**outcome.value.to_dict()) if outcome.value else None
    return ReturnResponse(item=ItemModel(**item.to_dict()), fine=fine, already_available=already_available)

@app.post("/items/{item_id}/play", response_model=MessageResponse, dependencies=[Depends(get_api_key)])
def play_item(item_id: int, desk: Library = Depends(get_library)):
    return MessageResponse(message=_unwrap(desk.play(item_id)))

@app.post("/items/{item_id}/archive", response_model=MessageResponse, dependencies=[Depends(get_api_key)])
def archive_item(item_id: int, desk: Library = Depends(get_library)):
    return MessageResponse(message=_unwrap(desk.archive(item_id)))

@app.get("/fines", response_model=List[FineModel])
def list_fines(borrower: Optional[str] = Query(None, description="Only fines charged to this borrower"),
               desk: Library = Depends(get_library)):
    return [FineModel(**f.to_dict()) for f in desk.list_fines(borrower=borrower)]

@app.get("/stats", response_model=StatsModel)
def get_stats(desk: Library = Depends(get_library)):
    return StatsModel(**desk.get_statistics())
