#!/usr/bin/env python
"""
vinscan/main.py

Sets up the FastAPI application for Vinscan, a personal-finance tracker
(assets, and the expense/income/transfer records that move their balances).

Key Roles:
 - Loads environment variables & configures CORS for frontend integration
 - Maps request validation failures to 400 and storage failures to 500
 - Includes 'user', 'asset' and 'record' routers under /api/v1
 - Provides the login endpoint that issues bearer tokens
"""

import os
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vinscan.database import create_tables, get_db
from vinscan.routers import user, asset, record
from vinscan.schemas.user import LoginRequest, TokenResponse
from vinscan.services.user import authenticate_user
from vinscan.utils.auth import create_access_token

# Load environment variables from a .env file at the project root
load_dotenv()

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# Default CORS origins if none specified (dev environment)
default_origins = (
    "http://127.0.0.1:3000,"
    "http://localhost:3000,"
    "http://127.0.0.1:5173,"
    "http://localhost:5173"
)
raw_origins = os.getenv("CORS_ALLOW_ORIGINS", default_origins)
ALLOWED_ORIGINS = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

# ---------------------------------------------------------
# Initialize the FastAPI application
# ---------------------------------------------------------
app = FastAPI(
    title="Vinscan API",
    description=(
        "API for tracking personal finances: assets (cash, bank, e-wallet) and "
        "the expense, income and transfer records that move their balances. "
        "Bearer-token auth."
    ),
    version="1.0",
)

# ---------------------------------------------------------
# CORS Middleware
# ---------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------
# Error Mapping
# ---------------------------------------------------------
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Missing, malformed or out-of-range input is a 400 in this API.
    """
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# ---------------------------------------------------------
# Database: Create Tables at Startup
# ---------------------------------------------------------
@app.on_event("startup")
def startup_event():
    """
    Ensures tables are created (if not already) when FastAPI starts.
    This won't delete or overwrite existing data; it's idempotent.
    """
    create_tables()


# ---------------------------------------------------------
# Routers (User, Asset, Record)
# ---------------------------------------------------------
app.include_router(user.router, prefix=API_PREFIX, tags=["users"])
app.include_router(asset.router, prefix=f"{API_PREFIX}/assets", tags=["assets"])
app.include_router(record.router, prefix=f"{API_PREFIX}/records", tags=["records"])


# ---------------------------------------------------------
# Login
# ---------------------------------------------------------
@app.post(f"{API_PREFIX}/login", response_model=TokenResponse)
def login(login_req: LoginRequest, db: Session = Depends(get_db)):
    """
    Bearer-token login:
      1) Accepts JSON { "email": "...", "password": "..." }
      2) Look up the user in the DB, check hashed password
      3) Reject unverified emails when verification is required
      4) Return a signed access token and the user id
    """
    user_obj = authenticate_user(login_req.email, login_req.password, db)
    token = create_access_token({"sub": user_obj.id})
    logger.info(f"User {user_obj.id} logged in")
    return {"token": token, "uid": user_obj.id}


# ---------------------------------------------------------
# Root Route
# ---------------------------------------------------------
@app.get(f"{API_PREFIX}/")
def read_root():
    """
    Basic root path to confirm the API is running.
    """
    return {"message": "Vinscan API v1"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("vinscan.main:app", host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
