import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import crud, schemas
from .auth import Principal, create_access_token, get_current_principal
from .config import Settings, get_settings
from .db import Base, SessionLocal, engine
from .errors import NextradeError, ValidationError
from .logging_config import configure_logging
from .payments import RazorpayGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(get_settings().log_level)
    # Create tables if not existing. A store we cannot reach is fatal.
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.critical("database connection failed", exc_info=True)
        raise SystemExit(1)
    yield


app = FastAPI(title="NexTrade API", lifespan=lifespan)


# Dependency to get DB session per request

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_gateway(settings: Settings = Depends(get_settings)):
    gateway = RazorpayGateway(settings)
    try:
        yield gateway
    finally:
        gateway.close()


# -------------------- Error envelopes --------------------

def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(NextradeError)
async def nextrade_error_handler(request: Request, exc: NextradeError):
    return _failure(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = ValidationError.default_message
    if errors:
        first = errors[0]
        where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{where}: {first.get('msg')}" if where else first.get("msg", message)
    return _failure(ValidationError.status_code, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _failure(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error", extra={"path": request.url.path})
    return _failure(500, "Internal server error")


@app.get("/health")
async def health():
    return {"status": "ok"}


# -------------------- Auth --------------------

@app.post("/api/signup", response_model=schemas.SignupResponse, status_code=201)
def signup(user: schemas.UserCreate, db: Session = Depends(get_db)):
    created = crud.create_user(db, user)
    return {"success": True, "message": "Account created", "user": created}


@app.post("/api/login", response_model=schemas.LoginResponse)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    user = crud.authenticate(db, payload.email, payload.password)
    token = create_access_token(user.id, user.role, settings)
    return {"success": True, "token": token, "user": user}


@app.get("/api/wholesalers", response_model=schemas.WholesalerList)
def get_wholesalers(db: Session = Depends(get_db)):
    return {"success": True, "wholesalers": crud.list_wholesalers(db)}


# -------------------- Products --------------------

@app.get("/api/products/wholesaler/{wholesaler_id}", response_model=schemas.ProductList)
def get_wholesaler_products(wholesaler_id: int, db: Session = Depends(get_db)):
    return {"success": True, "products": crud.list_products_by_wholesaler(db, wholesaler_id)}


@app.get("/api/products/my", response_model=schemas.ProductList)
def get_my_products(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return {"success": True, "products": crud.list_own_products(db, principal)}


@app.post("/api/products", response_model=schemas.ProductEnvelope, status_code=201)
def create_product(
    product: schemas.ProductCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return {"success": True, "product": crud.create_product(db, principal, product)}


@app.get("/api/products", response_model=schemas.ProductList)
def search_products(search: str = Query(""), db: Session = Depends(get_db)):
    return {"success": True, "products": crud.search_products(db, search)}


@app.put("/api/products/{product_id}", response_model=schemas.ProductEnvelope)
def update_product(
    product_id: int,
    changes: schemas.ProductUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return {"success": True, "product": crud.update_product(db, principal, product_id, changes)}


@app.delete("/api/products/{product_id}", response_model=schemas.SuccessResponse)
def delete_product(product_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    crud.delete_product(db, principal, product_id)
    return {"success": True}


# -------------------- Orders --------------------

@app.post("/api/orders", response_model=schemas.OrderEnvelope, status_code=201)
def create_order(order: schemas.OrderCreate, db: Session = Depends(get_db)):
    return {"success": True, "order": crud.create_order(db, order)}


@app.get("/api/orders", response_model=schemas.OrderList)
def get_orders(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    # Every authenticated caller sees every order; there is no owner to filter on.
    return {"success": True, "orders": crud.list_orders(db)}


# -------------------- Payments --------------------

@app.post("/api/create-order")
def create_charge_order(payload: schemas.ChargeOrderRequest, gateway: RazorpayGateway = Depends(get_gateway)):
    return gateway.create_charge_order(payload.amount)


@app.get("/api/get-razorpay-key", response_model=schemas.GatewayKey)
def get_razorpay_key(gateway: RazorpayGateway = Depends(get_gateway)):
    return {"key": gateway.get_public_key()}
