from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from tasktimer.schemas.user import UserCreate, UserLogin, UserOut, TokenOut
from tasktimer.models import User
from tasktimer.errors import Unauthorized, ValidationError
from tasktimer.utils.auth import hash_password, verify_password, create_token, get_current_user
from tasktimer.utils.logger import setup_logger
from tasktimer.database import get_db

logger = setup_logger("auth")

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User) -> TokenOut:
    return TokenOut(access_token=create_token(user), user=UserOut.model_validate(user))


@router.post("/register", response_model=TokenOut, status_code=201)
def register(user: UserCreate, db: Session = Depends(get_db)):
    exists = db.query(User).filter(User.email == user.email).first()
    if exists:
        raise Unauthorized("User already exists")

    try:
        hashed = hash_password(user.password)
    except ValueError as e:
        raise ValidationError(str(e))

    new_user = User(email=user.email, username=user.username, password_hash=hashed)
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent registration took the email after the check above
        db.rollback()
        raise Unauthorized("User already exists")
    db.refresh(new_user)
    logger.info("Registered user %s", new_user.id)
    return _token_response(new_user)


@router.post("/login", response_model=TokenOut)
def login(user: UserLogin, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == user.email).first()
    if not db_user or not verify_password(user.password, db_user.password_hash):
        logger.warning("Failed login for %s", user.email)
        raise Unauthorized("Invalid credentials")
    return _token_response(db_user)


@router.get("/profile", response_model=UserOut)
def profile(user: User = Depends(get_current_user)):
    return user
