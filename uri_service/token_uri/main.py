"""
FastAPI app for the token URI resolution service.

Endpoints:
- GET /health
- GET /tokens/{token_id}/uri
- GET /tokens/{token_id}/config
- PUT /tokens/{token_id}/base-path          (admin)
- PUT /tokens/{token_id}/explicit-uri       (admin)
- DELETE /tokens/{token_id}/explicit-uri    (admin)
- POST /tokens/base-path/batch              (admin)
- GET /contract-metadata
- PUT /contract-metadata                    (admin)
- GET /metadata-schema
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, Path, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth import ADMIN_TOKEN_HEADER, AdminAuthorizer
from .config import ADMIN_TOKEN, DEFAULT_BASE_URI, LOG_LEVEL, STATE_PATH
from .errors import BatchTooLarge, InvalidArgument, LengthMismatch, TokenURIError, Unauthorized
from .registry.config_store import ConfigStore
from .registry.events import log_event
from .registry.filesystem_store import FilesystemConfigStore
from .registry.resolver import UriResolver
from .schemas import (
    BasePathBatchRequest,
    BasePathBatchResponse,
    BasePathConfigRequest,
    ContractMetadataURI,
    ErrorResponse,
    ExplicitURIRequest,
    HealthResponse,
    TokenConfigResponse,
    TokenMetadata,
    TokenURIResponse,
)

logger = logging.getLogger(__name__)

_ERROR_STATUS = {
    InvalidArgument: 400,
    BatchTooLarge: 400,
    LengthMismatch: 400,
    Unauthorized: 401,
}

TokenId = Annotated[int, Path(ge=0, description="Non-negative token identifier")]


def build_store() -> ConfigStore:
    """Store selected by the environment: on disk if a state path is set."""
    if STATE_PATH is not None:
        store: ConfigStore = FilesystemConfigStore(STATE_PATH, default_base_uri=DEFAULT_BASE_URI)
    else:
        store = ConfigStore(default_base_uri=DEFAULT_BASE_URI or "")
    store.subscribe(log_event)
    return store


def attach_store(app: FastAPI, store: ConfigStore) -> None:
    """Point the app at `store` (and a resolver over it)."""
    app.state.store = store
    app.state.resolver = UriResolver(store)


app = FastAPI(
    title="Token URI Resolution Service",
    version="0.1.0",
    description="Resolves token identifiers to metadata locations and manages their URI configuration.",
)

# Read endpoints are public; writes are gated by the admin token instead.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

attach_store(app, build_store())
app.state.authorizer = AdminAuthorizer(ADMIN_TOKEN)
if not app.state.authorizer.enabled:
    logger.warning("TOKEN_URI_ADMIN_TOKEN is not set; write endpoints will reject every request")


@app.exception_handler(TokenURIError)
async def token_uri_error_handler(request: Request, exc: TokenURIError) -> JSONResponse:
    status_code = _ERROR_STATUS.get(type(exc), 400)
    logger.warning("%s %s rejected: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    body = ErrorResponse(detail=str(exc), error=type(exc).__name__)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def require_admin(
    request: Request,
    x_admin_token: Optional[str] = Header(default=None, alias=ADMIN_TOKEN_HEADER),
) -> None:
    authorizer: AdminAuthorizer = request.app.state.authorizer
    authorizer.check(x_admin_token)


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Simple health-check endpoint."""
    return HealthResponse(status="ok")


@app.get("/tokens/{token_id}/uri", response_model=TokenURIResponse)
async def token_uri(token_id: TokenId, request: Request) -> TokenURIResponse:
    """
    Resolve the metadata location for `token_id`.

    Never 404s: an id with no configuration resolves to the collection
    default base path.
    """
    resolver: UriResolver = request.app.state.resolver
    return TokenURIResponse(token_id=token_id, uri=resolver.resolve(token_id))


def _config_response(store: ConfigStore, token_id: int) -> TokenConfigResponse:
    cfg = store.get_token_config(token_id)
    return TokenConfigResponse(
        token_id=token_id,
        explicit_uri=cfg.explicit_uri,
        base_uri=cfg.base_uri,
        use_id_in_path=cfg.use_id_in_path,
        is_configured=cfg.is_configured,
    )


@app.get("/tokens/{token_id}/config", response_model=TokenConfigResponse)
async def token_config(token_id: TokenId, request: Request) -> TokenConfigResponse:
    return _config_response(request.app.state.store, token_id)


# Writes are plain `def` so FastAPI runs them in its threadpool; the
# filesystem store does blocking file I/O on every mutation.
@app.put(
    "/tokens/{token_id}/base-path",
    response_model=TokenConfigResponse,
    dependencies=[Depends(require_admin)],
)
def set_base_path(
    token_id: TokenId, req: BasePathConfigRequest, request: Request
) -> TokenConfigResponse:
    store: ConfigStore = request.app.state.store
    store.set_base_path_config(token_id, req.base_uri, req.use_id_in_path)
    return _config_response(store, token_id)


@app.put(
    "/tokens/{token_id}/explicit-uri",
    response_model=TokenConfigResponse,
    dependencies=[Depends(require_admin)],
)
def set_explicit_uri(
    token_id: TokenId, req: ExplicitURIRequest, request: Request
) -> TokenConfigResponse:
    store: ConfigStore = request.app.state.store
    store.set_explicit_uri(token_id, req.uri)
    return _config_response(store, token_id)


@app.delete(
    "/tokens/{token_id}/explicit-uri",
    response_model=TokenConfigResponse,
    dependencies=[Depends(require_admin)],
)
def clear_explicit_uri(token_id: TokenId, request: Request) -> TokenConfigResponse:
    store: ConfigStore = request.app.state.store
    store.clear_explicit_uri(token_id)
    return _config_response(store, token_id)


@app.post(
    "/tokens/base-path/batch",
    response_model=BasePathBatchResponse,
    dependencies=[Depends(require_admin)],
)
def set_base_path_batch(req: BasePathBatchRequest, request: Request) -> BasePathBatchResponse:
    store: ConfigStore = request.app.state.store
    store.set_base_path_config_batch(req.token_ids, req.base_uris, req.use_id_in_path)
    return BasePathBatchResponse(configured=len(req.token_ids))


@app.get("/contract-metadata", response_model=ContractMetadataURI)
async def get_contract_metadata(request: Request) -> ContractMetadataURI:
    store: ConfigStore = request.app.state.store
    return ContractMetadataURI(uri=store.get_collection_metadata_uri())


@app.put(
    "/contract-metadata",
    response_model=ContractMetadataURI,
    dependencies=[Depends(require_admin)],
)
def set_contract_metadata(req: ContractMetadataURI, request: Request) -> ContractMetadataURI:
    store: ConfigStore = request.app.state.store
    store.set_collection_metadata_uri(req.uri)
    return ContractMetadataURI(uri=store.get_collection_metadata_uri())


@app.get("/metadata-schema")
async def metadata_schema() -> Dict[str, Any]:
    """JSON Schema of the document expected at a resolved token URI."""
    return TokenMetadata.model_json_schema()


def run() -> None:
    """
    Convenience entrypoint if you want to run via:

        python -m token_uri.main

    or via the `token-uri-service` console_script defined in pyproject.toml.
    """
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "token_uri.main:app",
        host="0.0.0.0",
        port=8080,
        reload=False,
    )


if __name__ == "__main__":
    run()
