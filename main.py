import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

import reviews
import sales
import users
from config import Settings, configure_logging, load_settings
from database import connect, get_db, ping
from errors import ServiceError, ValidationFailed
from schemas import LoginIn, ReviewIn, SaleIn, SaleReplace, TokenResponse, UserIn
from security import get_settings, route_guard

logger = logging.getLogger(__name__)


def _error(status_code: int, kind: str, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": kind, "message": message, **extra})


def create_app(settings: Optional[Settings] = None, client: Optional[MongoClient] = None) -> FastAPI:
    """Build the API.

    ``settings`` defaults to the environment, where a missing required
    variable raises ConfigurationError before anything starts. ``client`` lets
    callers hand in an already constructed MongoClient.
    """
    if settings is None:
        settings = load_settings()
        configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = connect(settings, client)
        try:
            yield
        finally:
            app.state.store.close()
            logger.info("Database connection closed")

    app = FastAPI(title="Sales API", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return _error(exc.status_code, exc.kind, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            {"field": ".".join(str(part) for part in err["loc"][1:]), "problem": err["msg"]}
            for err in exc.errors()
        ]
        return _error(
            ValidationFailed.status_code,
            ValidationFailed.kind,
            "Please provide all required data",
            details=details,
        )

    @app.exception_handler(PyMongoError)
    async def database_error_handler(request: Request, exc: PyMongoError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return _error(500, "internal_error", "Internal server error")

    register_routes(app)
    return app


def register_routes(app: FastAPI) -> None:
    @app.get("/")
    def read_root():
        return {"message": "Sales API"}

    @app.get("/health")
    def health(db: Database = Depends(get_db)):
        try:
            ping(db)
        except PyMongoError as e:
            logger.warning("Database ping failed: %s", e)
            return _error(503, "unavailable", "Database not reachable")
        return {"status": "ok", "database": db.name}

    # Sales
    @app.get("/sales")
    def list_sales(
        db: Database = Depends(get_db),
        claims: Optional[dict] = Depends(route_guard("list_sales")),
    ) -> List[Dict[str, Any]]:
        return sales.list_sales(db)

    @app.get("/sale/{sale_id}")
    def get_sale(sale_id: str, db: Database = Depends(get_db)):
        return sales.get_sale(db, sale_id)

    @app.get("/search")
    def search_sales(
        purchaseMethod: Optional[str] = None,
        item: Optional[str] = None,
        storeLocation: Optional[str] = None,
        db: Database = Depends(get_db),
    ):
        return sales.search_sales(db, purchaseMethod, item, storeLocation)

    @app.post("/new", status_code=201)
    def create_sale(payload: SaleIn, db: Database = Depends(get_db)):
        sale_id = sales.create_sale(db, payload)
        return {"message": "Sale inserted", "id": sale_id}

    # Reviews
    @app.post("/sales/{sale_id}/reviews", status_code=201)
    def add_review(sale_id: str, payload: ReviewIn, db: Database = Depends(get_db)):
        review_id = reviews.add_review(db, sale_id, payload)
        return {"status": "Review added", "review_id": review_id}

    @app.put("/sales/{sale_id}/reviews/{review_id}")
    def update_review(sale_id: str, review_id: str, payload: ReviewIn, db: Database = Depends(get_db)):
        review_id = reviews.update_review(db, sale_id, review_id, payload)
        return {"success": "Review updated", "review_id": review_id}

    @app.delete("/sales/{sale_id}/reviews/{review_id}")
    def delete_review(sale_id: str, review_id: str, db: Database = Depends(get_db)):
        reviews.delete_review(db, sale_id, review_id)
        return {"message": "Review deleted"}

    @app.delete("/sales/{sale_id}")
    def delete_sale(sale_id: str, db: Database = Depends(get_db)):
        sales.delete_sale(db, sale_id)
        return {"status": "Sale deleted"}

    # Users
    @app.post("/users", status_code=201)
    def create_user(payload: UserIn, db: Database = Depends(get_db)):
        user = users.create_user(db, payload)
        return {"status": "User created", "user": user}

    @app.post("/login", response_model=TokenResponse)
    def login(payload: LoginIn, db: Database = Depends(get_db), settings: Settings = Depends(get_settings)):
        return TokenResponse(access_token=users.login(db, payload, settings))

    # Broadest pattern, keep it last
    @app.put("/{sale_id}")
    def replace_sale(sale_id: str, payload: SaleReplace, db: Database = Depends(get_db)):
        sales.replace_sale(db, sale_id, payload)
        return {"status": "Sale successfully updated"}


if __name__ == "__main__":
    import os

    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=port)
