import logging
from contextlib import asynccontextmanager
from typing import Iterator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .db import Client, init_db, make_engine, make_sessionmaker
from .errors import ClientError, ErrorKind
from .reorder import reorder_client
from .repository import ClientRepository
from .schemas import Banner, ClientOut, ClientUpdate, ErrorMessage, Health, Version
from .validation import parse_id, parse_priority, parse_status

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
BAD_REQUEST = {400: {"model": ErrorMessage}}


# === Helpers ===


def client_out(client: Client) -> ClientOut:
    return ClientOut.model_validate(client)


def get_session(request: Request) -> Iterator[Session]:
    with request.app.state.sessionmaker() as session:
        yield session


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """Build the API with its own engine, opened on startup and disposed on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = make_engine(database_url)
        init_db(engine)
        app.state.engine = engine
        app.state.sessionmaker = make_sessionmaker(engine)
        logger.info("connected to %s", engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            engine.dispose()
            logger.info("database connection closed")

    app = FastAPI(title="Shiptivity API", version="1.0.0", lifespan=lifespan)

    # === Error handling ===

    @app.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError):
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.kind.value)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def body_error_handler(request: Request, exc: RequestValidationError):
        for error in exc.errors():
            loc = error.get("loc", ())
            if "priority" in loc:
                return await client_error_handler(request, ClientError(ErrorKind.INVALID_PRIORITY))
            if "status" in loc:
                return await client_error_handler(request, ClientError(ErrorKind.INVALID_STATUS))
        return await request_validation_exception_handler(request, exc)

    # === Health & metadata ===

    @app.get("/", response_model=Banner)
    def banner():
        return Banner()

    @app.get(f"{API_PREFIX}/health", response_model=Health)
    def health():
        return Health()

    @app.get(f"{API_PREFIX}/version", response_model=Version)
    def version():
        return Version()

    # === Client endpoints ===

    @app.get(f"{API_PREFIX}/clients", response_model=list[ClientOut], responses=BAD_REQUEST)
    def list_clients(status: Optional[str] = None, session: Session = Depends(get_session)):
        lane = parse_status(status)
        repo = ClientRepository(session)
        clients = repo.list_by_lane(lane) if lane else repo.list_all()
        return [client_out(c) for c in clients]

    @app.get(f"{API_PREFIX}/clients/{{client_id}}", response_model=ClientOut, responses=BAD_REQUEST)
    def get_client(client_id: str, session: Session = Depends(get_session)):
        client = ClientRepository(session).get_by_id(parse_id(client_id))
        if client is None:
            raise ClientError(ErrorKind.NOT_FOUND)
        return client_out(client)

    @app.put(f"{API_PREFIX}/clients/{{client_id}}", response_model=list[ClientOut], responses=BAD_REQUEST)
    def update_client(
        client_id: str,
        payload: Optional[ClientUpdate] = None,
        session: Session = Depends(get_session),
    ):
        """Change the lane and/or priority of a client.

        Other clients in the lanes involved are renumbered so that each
        lane keeps priorities 1..N. Priority 1 is the top of the lane.
        Returns every client after the change.
        """
        cid = parse_id(client_id)
        payload = payload or ClientUpdate()
        status = parse_status(payload.status)
        priority = parse_priority(payload.priority)
        clients = reorder_client(session, cid, status=status, priority=priority)
        return [client_out(c) for c in clients]

    return app


app = create_app()
