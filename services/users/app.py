from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from common import auth
from common.config import get_settings
from common.database import Base, dispose_engine, engine, get_db
from common.dependencies import get_current_user
from common.errors import apply_error_handlers
from common.logging_middleware import add_audit_middleware
from common.models import RoleEnum, User
from common.rate_limit import apply_rate_limiter, limiter
from common.schemas import Token, UserCreate, UserRead

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield
    dispose_engine()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Auth Service", version="1.0.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    apply_error_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "users")
    return fastapi_app


app = create_app()


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "users"}


@app.post("/api/auth/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register_user(request: Request, user_in: UserCreate, db: Session = Depends(get_db)) -> User:
    if db.query(User).filter(User.email == user_in.email).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

    # Anyone may bootstrap the first admin; afterwards admins are not self-service.
    admins_exist = db.query(User).filter(User.role == RoleEnum.ADMIN).first() is not None
    if user_in.role == RoleEnum.ADMIN and admins_exist:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can assign elevated roles")

    user = User(
        name=user_in.name,
        email=user_in.email,
        role=user_in.role,
        hashed_password=auth.hash_password(user_in.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@app.post("/api/auth/login", response_model=Token)
@limiter.limit("10/minute")
def login(request: Request, form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)) -> Token:
    user = auth.authenticate(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")

    access_token = auth.issue_access_token(user)
    return Token(access_token=access_token)


@app.get("/api/auth/me", response_model=UserRead)
@limiter.limit("30/minute")
def read_me(request: Request, current_user: User = Depends(get_current_user)) -> User:
    return current_user
