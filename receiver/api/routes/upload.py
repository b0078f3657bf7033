import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect

from receiver.core.assets import AssetNotFoundError, AssetStore
from receiver.core.errors import ProtocolError, UploadError
from receiver.services.multipart_reader import MultipartUploadReader, boundary_from_content_type
from receiver.services.upload_acceptor import AcceptedUpload, UploadAcceptor

logger = logging.getLogger(__name__)

router = APIRouter()


def get_assets(request: Request) -> AssetStore:
    """Return the asset store configured on the app."""
    return request.app.state.assets


def get_acceptor(request: Request) -> UploadAcceptor:
    """Return the upload acceptor configured on the app."""
    return request.app.state.acceptor


@router.get("/upload", response_class=HTMLResponse)
def upload_form(request: Request, assets: AssetStore = Depends(get_assets)) -> Response:
    """Return the upload form exactly as bundled."""
    logger.info("%s %s", request.method, request.url)
    try:
        body = assets.read("index.html")
    except AssetNotFoundError as exc:
        logger.error("%s %s - Error: %s", request.method, request.url, exc)
        return PlainTextResponse(str(exc), status_code=500)
    return HTMLResponse(body)


@router.post("/upload")
async def upload(request: Request, acceptor: UploadAcceptor = Depends(get_acceptor)) -> Response:
    """Accept a multipart upload and store it in the target directory."""
    logger.info("%s %s", request.method, request.url)
    try:
        await _receive(request, acceptor)
    except UploadError as exc:
        return _error_response(request, exc)

    return JSONResponse({"ok": "ok"}, status_code=201)


@router.api_route(
    "/upload",
    methods=["HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
def upload_method_not_allowed(request: Request) -> Response:
    """Refuse every method but GET and POST."""
    logger.info("%s %s", request.method, request.url)
    return Response(status_code=405, headers={"Allow": "GET, POST"})


async def _receive(request: Request, acceptor: UploadAcceptor) -> AcceptedUpload:
    """Stream the request body into a temp file, then move it into place."""
    boundary = boundary_from_content_type(request.headers.get("content-type", ""))
    session = await run_in_threadpool(acceptor.open)
    try:
        reader = MultipartUploadReader(session, boundary)
        async for chunk in request.stream():
            await run_in_threadpool(reader.write, chunk)
        reader.finish()
    except ClientDisconnect as exc:
        session.abort()
        raise ProtocolError("client disconnected before the upload finished") from exc
    except Exception:
        session.abort()
        raise
    return await run_in_threadpool(acceptor.commit, session)


def _error_response(request: Request, exc: UploadError) -> Response:
    """Render client errors as JSON and server errors as plain text."""
    if exc.status_code < 500:
        logger.warning("%s %s - Error: %s", request.method, request.url, exc)
        return JSONResponse({"message": str(exc)}, status_code=exc.status_code)
    logger.error("%s %s - Error: %s", request.method, request.url, exc)
    return PlainTextResponse(str(exc), status_code=exc.status_code)
