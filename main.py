import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

import users
from auth import authenticate_user
from catalog import filter_by_category, list_categories, load_challenges, load_programs
from config import Settings, get_settings
from database import Store, get_store, open_store
from errors import ApiError
from schemas import AddCompletedProgram, Challenge, Credentials, UpdateActiveProgram, User

logger = logging.getLogger(__name__)

router = APIRouter()


# --------------------------
# Utility
# --------------------------
def get_challenges(request: Request) -> List[Challenge]:
    return request.app.state.challenges


def message_response(exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "response": exc.message},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"{field}: {first['msg']}" if field else first["msg"]
    else:
        message = "Invalid request"
    # The progress routes answer with a bare {message}
    if request.method == "PATCH":
        return JSONResponse(status_code=400, content={"message": message})
    return JSONResponse(status_code=400, content={"success": False, "response": message})


# --------------------------
# Routes
# --------------------------
@router.get("/", response_class=PlainTextResponse)
def root():
    return "This is the backend of our project"


@router.post("/register", status_code=201)
def register_user(payload: Credentials, store: Store = Depends(get_store)):
    user = users.register(store, payload.username, payload.password)
    return {
        "success": True,
        "response": {
            "username": user.username,
            "accessToken": user.access_token,
            "id": user.id,
        },
    }


@router.post("/login")
def login_user(payload: Credentials, store: Store = Depends(get_store)):
    user = users.login(store, payload.username, payload.password)
    return {"success": True, "response": users.login_payload(user)}


@router.get("/challenges", response_model=List[Challenge])
def get_all_challenges(challenges: List[Challenge] = Depends(get_challenges)):
    return challenges


@router.get("/challenges/{category}", response_model=List[Challenge])
def get_challenges_for_category(category: str, challenges: List[Challenge] = Depends(get_challenges)):
    return filter_by_category(challenges, category)


@router.get("/categories")
def get_categories(challenges: List[Challenge] = Depends(get_challenges)):
    return {"categories": list_categories(challenges)}


@router.get("/profile/{user_id}")
def get_profile(
    user_id: str,
    store: Store = Depends(get_store),
    _user: User = Depends(authenticate_user),
):
    progress = users.get_progress(store, user_id)
    return {"success": True, "response": progress.model_dump(by_alias=True)}


@router.patch("/updateActiveProgram/{username}")
def patch_active_program(username: str, payload: UpdateActiveProgram, store: Store = Depends(get_store)):
    try:
        user = users.update_active_program(
            store, username, payload.category, payload.day, payload.start_date
        )
    except ApiError as exc:
        return message_response(exc)
    return users.public_user(user)


@router.patch("/addCompletedProgram/{username}")
def patch_completed_programs(username: str, payload: AddCompletedProgram, store: Store = Depends(get_store)):
    try:
        user = users.add_completed_program(store, username, payload.program_name)
    except ApiError as exc:
        return message_response(exc)
    return users.public_user(user)


# --------------------------
# App
# --------------------------
def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None) -> FastAPI:
    """
    Build the API.

    Pass `store` to use an already opened store; it is then left open at
    shutdown. Otherwise one is opened from settings at startup and closed at
    shutdown.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.store is None
        if owned:
            app.state.store = open_store(settings)
        try:
            if settings.add_programs:
                load_programs(app.state.store, app.state.challenges)
            yield
        finally:
            if owned:
                app.state.store.close()
                app.state.store = None
                logger.info("Store closed")

    app = FastAPI(title="Hobit API", lifespan=lifespan)
    app.state.store = store
    app.state.challenges = load_challenges(settings.challenges_path)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
