from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import List, Optional, Dict
from datetime import datetime
import logging

from config import Settings, load_settings
from exceptions import ExpenseNotFound, InvalidExpense, SplitError
from ledger import ExpenseLedger
from logging_utils import configure_logging
from models import ExpenseCreate, ExpenseResponse, ExpenseUpdate, Share, SplitRequest
from split_calculator import SplitCalculator

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, ledger: Optional[ExpenseLedger] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_title,
        description=settings.app_description,
        version=settings.version,
    )

    # CORS middleware to allow frontend connections
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.ledger = ledger if ledger is not None else ExpenseLedger()

    def get_ledger(request: Request) -> ExpenseLedger:
        return request.app.state.ledger

    # ===== ERROR HANDLERS =====
    @app.exception_handler(SplitError)
    async def split_error_handler(request: Request, exc: SplitError):
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(InvalidExpense)
    async def invalid_expense_handler(request: Request, exc: InvalidExpense):
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ExpenseNotFound)
    async def expense_not_found_handler(request: Request, exc: ExpenseNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    # ===== API ENDPOINTS =====
    @app.get("/")
    async def root():
        return {"message": "Expense Sharing System API"}

    @app.post("/splits/", response_model=List[Share])
    async def preview_split(split: SplitRequest):
        """Compute shares without recording an expense"""
        return SplitCalculator.calculate_shares(
            split.split_type,
            split.amount,
            participants=split.participants,
            percentage_splits=split.percentage_splits,
            exact_shares=split.shares,
        )

    @app.post("/expenses/", response_model=ExpenseResponse, status_code=201)
    async def create_expense(expense: ExpenseCreate, request: Request):
        """Create a new expense"""
        return get_ledger(request).create_expense(expense)

    @app.get("/expenses/", response_model=List[ExpenseResponse])
    async def list_expenses(
        request: Request,
        user_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ):
        """List expenses, optionally filtered by user and date range"""
        return get_ledger(request).list_expenses(user_id=user_id, start_date=start_date, end_date=end_date)

    @app.get("/expenses/{expense_id}", response_model=ExpenseResponse)
    async def get_expense(expense_id: str, request: Request):
        """Get expense details"""
        return get_ledger(request).get_expense(expense_id)

    @app.patch("/expenses/{expense_id}", response_model=ExpenseResponse)
    async def update_expense(expense_id: str, update: ExpenseUpdate, request: Request):
        """Update an expense"""
        return get_ledger(request).update_expense(expense_id, update)

    @app.delete("/expenses/{expense_id}", response_model=Dict[str, str])
    async def delete_expense(expense_id: str, request: Request):
        """Soft delete an expense"""
        return get_ledger(request).delete_expense(expense_id)

    @app.get("/balances/")
    async def get_balances(request: Request, user_id: Optional[str] = None):
        """Settlement-optimized balances, for everyone or for one user"""
        result = get_ledger(request).get_balances(user_id)
        return JSONResponse(content=jsonable_encoder(result, by_alias=True))

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
