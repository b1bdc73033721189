from dotenv import load_dotenv

load_dotenv(".env.local"); load_dotenv()  # also loads .env if present

import logging  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402
from typing import Any, Optional  # noqa: E402

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.exception_handlers import request_validation_exception_handler  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse  # noqa: E402
from fastapi.staticfiles import StaticFiles  # noqa: E402
from pydantic import BaseModel  # noqa: E402
from pymongo import MongoClient  # noqa: E402

from epass import (  # noqa: E402
    EPassService,
    PassNotFoundError,
    PassRenderer,
    RecordStore,
    Settings,
    VisitorValidationError,
    load_settings,
)
from epass.records import MISSING_FIELDS_MESSAGE  # noqa: E402

logger = logging.getLogger(__name__)


class VisitorSubmission(BaseModel):
    # Validated by RecordStore.
    visitorName: Any = None
    noOfPersons: Any = None
    purpose: Any = None
    contactNumber: Any = None
    visitDate: Any = None


class SubmitResponse(BaseModel):
    success: bool = True
    message: str
    downloadLink: str


def _download_link(request: Request, settings: Settings, filename: str) -> str:
    if settings.public_base_url:
        base_url = settings.public_base_url
    else:
        protocol = request.headers.get("x-forwarded-proto") or request.url.scheme
        host = request.headers.get("host") or request.url.netloc
        base_url = f"{protocol}://{host}"
    return f"{base_url}/pdf/{filename}"


def create_app(settings: Optional[Settings] = None, mongo_client: Optional[MongoClient] = None) -> FastAPI:
    """
    Build the FastAPI app. The Mongo client is opened when the app starts
    (unless one is injected) and closed when it shuts down.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings.pdf_dir.mkdir(parents=True, exist_ok=True)
        client = mongo_client or MongoClient(settings.mongodb_uri, tz_aware=True)
        collection = client[settings.mongodb_database][settings.mongodb_collection]
        app.state.service = EPassService(
            RecordStore(collection),
            PassRenderer(
                settings.pdf_dir,
                settings.public_dir,
                timezone=settings.timezone,
                title=settings.pass_title,
                map_heading=settings.map_heading,
            ),
        )
        logger.info("Visitor backend ready (database=%s, passes=%s)", settings.mongodb_database, settings.pdf_dir)
        try:
            yield
        finally:
            client.close()
            logger.info("Database connection closed")

    app = FastAPI(title="Visitor E-Pass", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(RequestValidationError)
    async def submission_body_error(request: Request, exc: RequestValidationError):
        # /submit answers unreadable bodies like any other incomplete form
        if request.url.path == "/submit":
            return JSONResponse(status_code=400, content={"message": MISSING_FIELDS_MESSAGE})
        return await request_validation_exception_handler(request, exc)

    @app.get("/", response_class=PlainTextResponse)
    def read_root():
        return "Visitor backend API is running."

    @app.post("/submit", response_model=SubmitResponse)
    def submit(req: VisitorSubmission, request: Request):
        service: EPassService = request.app.state.service
        try:
            _, artifact = service.register_visitor(req.model_dump())
        except VisitorValidationError as exc:
            return JSONResponse(status_code=400, content={"message": str(exc)})
        except Exception as exc:
            logger.exception("Error handling form submission")
            return JSONResponse(status_code=500, content={"message": "Server error", "error": str(exc)})

        return SubmitResponse(
            message="E-Pass generated successfully!",
            downloadLink=_download_link(request, settings, artifact.filename),
        )

    @app.get("/pdf/{filename:path}")
    def get_pass(filename: str, request: Request):
        """Download a generated pass by filename"""
        service: EPassService = request.app.state.service
        try:
            path = service.fetch_pass(filename)
        except PassNotFoundError:
            return PlainTextResponse("File not found.", status_code=404)
        return FileResponse(path, media_type="application/pdf", filename=path.name)

    app.mount("/public", StaticFiles(directory=settings.public_dir, check_dir=False), name="public")
    return app


_settings = load_settings()
logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
app = create_app(_settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=_settings.host, port=_settings.port)
