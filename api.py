"""FastAPI service exposing transactions, categories, reports and exports."""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

import crud
import models
from config import CURRENCY_SYMBOL, DAILY_BUCKET_LIMIT, WEEK_START, setup_logging
from database import SessionLocal, init_db
from export import build_text_report, export_filename, transactions_to_csv
from reports import filter_transactions, group_by_category, group_by_time, resolve_date_range, summarize

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    logger.info("Database ready")
    yield


app = FastAPI(title="Finance Tracker API", version="0.1.0", lifespan=lifespan)


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class SnapshotFilter:
    """Query parameters shared by the list, report and export endpoints."""

    def __init__(
        self,
        range: models.RangeKind = Query("all", description="all | today | week | month | year | custom"),
        start: Optional[str] = Query(None, description="Custom range start (YYYY-MM-DD)"),
        end: Optional[str] = Query(None, description="Custom range end (YYYY-MM-DD)"),
        category: str = Query("all", description="'all' or a category id"),
    ):
        self.range = range
        self.start = start
        self.end = end
        self.category = category

    def apply(self, db: Session):
        transactions, categories = crud.load_snapshot(db)
        resolved = resolve_date_range(self.range, self.start, self.end, week_start=WEEK_START)
        return filter_transactions(transactions, resolved, self.category), categories


def _not_found(kind: str, item_id: int):
    raise HTTPException(status_code=404, detail=f"{kind} {item_id} not found")


# --- Transactions ---

@app.get("/transactions", response_model=List[models.Transaction])
def list_transactions(flt: SnapshotFilter = Depends(), db: Session = Depends(get_db)):
    transactions, _ = flt.apply(db)
    return transactions


@app.post("/transactions", response_model=models.Transaction, status_code=201)
def create_transaction(payload: models.TransactionCreate, db: Session = Depends(get_db)):
    return crud.to_transaction_model(crud.create_transaction(db, payload))


@app.put("/transactions/{transaction_id}", response_model=models.Transaction)
def update_transaction(transaction_id: int, payload: models.TransactionUpdate, db: Session = Depends(get_db)):
    txn = crud.update_transaction(db, transaction_id, payload)
    if txn is None:
        _not_found("Transaction", transaction_id)
    return crud.to_transaction_model(txn)


@app.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(transaction_id: int, db: Session = Depends(get_db)):
    if not crud.delete_transaction(db, transaction_id):
        _not_found("Transaction", transaction_id)


# --- Categories ---

@app.get("/categories", response_model=List[models.Category])
def list_categories(db: Session = Depends(get_db)):
    return [crud.to_category_model(c) for c in crud.list_categories(db)]


@app.post("/categories", response_model=models.Category, status_code=201)
def create_category(payload: models.CategoryCreate, db: Session = Depends(get_db)):
    return crud.to_category_model(crud.create_category(db, payload))


@app.put("/categories/{category_id}", response_model=models.Category)
def update_category(category_id: int, payload: models.CategoryUpdate, db: Session = Depends(get_db)):
    category = crud.update_category(db, category_id, payload)
    if category is None:
        _not_found("Category", category_id)
    return crud.to_category_model(category)


@app.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    if not crud.delete_category(db, category_id):
        _not_found("Category", category_id)


# --- Reports ---

@app.get("/reports/summary", response_model=models.Summary)
def report_summary(flt: SnapshotFilter = Depends(), db: Session = Depends(get_db)):
    transactions, _ = flt.apply(db)
    return summarize(transactions)


@app.get("/reports/timeseries", response_model=List[models.TimeBucket])
def report_timeseries(
    granularity: models.Granularity = "day",
    limit: Optional[int] = Query(None, ge=1, description="Keep only the most recent N buckets"),
    flt: SnapshotFilter = Depends(),
    db: Session = Depends(get_db),
):
    transactions, _ = flt.apply(db)
    if limit is None and granularity == "day":
        limit = DAILY_BUCKET_LIMIT
    return group_by_time(transactions, granularity, limit)


@app.get("/reports/categories", response_model=List[models.CategoryBucket])
def report_categories(flt: SnapshotFilter = Depends(), db: Session = Depends(get_db)):
    transactions, categories = flt.apply(db)
    return group_by_category(transactions, categories)


# --- Exports ---

@app.get("/export/csv", response_class=PlainTextResponse)
def export_csv(flt: SnapshotFilter = Depends(), db: Session = Depends(get_db)):
    transactions, categories = flt.apply(db)
    filename = export_filename("csv")
    return PlainTextResponse(
        transactions_to_csv(transactions, categories),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/export/report", response_class=PlainTextResponse)
def export_report(flt: SnapshotFilter = Depends(), db: Session = Depends(get_db)):
    transactions, categories = flt.apply(db)
    filename = export_filename("report")
    return PlainTextResponse(
        build_text_report(transactions, categories, currency=CURRENCY_SYMBOL),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api:app", host="0.0.0.0", port=8001, reload=True)
