import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas
from .auth import Principal, hash_password, pwd_context, verify_password
from .errors import DuplicateEmail, Forbidden, InvalidCredentials
from .policy import owned_product_or_forbidden, require_catalog_manager
from .utils import escape_like, normalize_email

logger = logging.getLogger(__name__)


def _newest_first(query, model):
    return query.order_by(model.created_at.desc(), model.id.desc())


# -------------------- Users --------------------

def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == normalize_email(email)).first()


def create_user(db: Session, user: schemas.UserCreate) -> models.User:
    if get_user_by_email(db, user.email) is not None:
        raise DuplicateEmail()

    db_user = models.User(
        name=user.name,
        email=normalize_email(user.email),
        password_hash=hash_password(user.password),
        role=user.role,
        business_name=user.business_name,
        gst_number=user.gst_number,
        shop_name=user.shop_name,
        shop_address=user.shop_address,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError as e:
        # lost a race with a concurrent signup for the same email
        db.rollback()
        raise DuplicateEmail() from e
    db.refresh(db_user)
    logger.info("account created", extra={"user_id": db_user.id, "role": db_user.role.value})
    return db_user


def authenticate(db: Session, email: str, password: str) -> models.User:
    """Return the user for valid credentials.

    Unknown email and wrong password raise the same InvalidCredentials.
    """
    user = get_user_by_email(db, email)
    if user is None:
        # keep response timing close to the wrong-password path
        pwd_context.dummy_verify()
        logger.info("login failed")
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash):
        logger.info("login failed", extra={"user_id": user.id})
        raise InvalidCredentials()
    return user


def list_wholesalers(db: Session) -> List[models.User]:
    query = db.query(models.User).filter(models.User.role == models.Role.WHOLESALER)
    return _newest_first(query, models.User).all()


# -------------------- Products --------------------

def create_product(db: Session, principal: Principal, product: schemas.ProductCreate) -> models.Product:
    require_catalog_manager(principal)
    owner = db.get(models.User, principal.user_id)
    if owner is None or owner.role != models.Role.WHOLESALER:
        # token outlived the account it was issued for
        raise Forbidden("Only wholesalers can manage products")

    db_product = models.Product(**product.model_dump(), wholesaler_id=owner.id)
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    logger.info("product created", extra={"user_id": owner.id, "product_id": db_product.id})
    return db_product


def list_own_products(db: Session, principal: Principal) -> List[models.Product]:
    require_catalog_manager(principal)
    return list_products_by_wholesaler(db, principal.user_id)


def list_products_by_wholesaler(db: Session, wholesaler_id: int) -> List[models.Product]:
    query = db.query(models.Product).filter(models.Product.wholesaler_id == wholesaler_id)
    return _newest_first(query, models.Product).all()


def search_products(db: Session, term: str = "") -> List[models.Product]:
    """Case-insensitive substring match on name or category. Empty term lists everything."""
    query = db.query(models.Product)
    if term:
        pattern = f"%{escape_like(term)}%"
        query = query.filter(
            or_(
                models.Product.name.ilike(pattern, escape="\\"),
                models.Product.category.ilike(pattern, escape="\\"),
            )
        )
    return _newest_first(query, models.Product).all()


def update_product(db: Session, principal: Principal, product_id: int, changes: schemas.ProductUpdate) -> models.Product:
    product = owned_product_or_forbidden(db.get(models.Product, product_id), principal)
    for field, value in changes.model_dump(exclude_unset=True).items():
        setattr(product, field, value)
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("product updated", extra={"user_id": principal.user_id, "product_id": product.id})
    return product


def delete_product(db: Session, principal: Principal, product_id: int) -> None:
    product = owned_product_or_forbidden(db.get(models.Product, product_id), principal)
    db.delete(product)
    db.commit()
    logger.info("product deleted", extra={"user_id": principal.user_id, "product_id": product_id})


# -------------------- Orders --------------------

def create_order(db: Session, order: schemas.OrderCreate) -> models.Order:
    db_order = models.Order(**order.model_dump())
    db.add(db_order)
    db.commit()
    db.refresh(db_order)
    logger.info("order placed", extra={"order_id": db_order.id})
    return db_order


def list_orders(db: Session) -> List[models.Order]:
    return _newest_first(db.query(models.Order), models.Order).all()
