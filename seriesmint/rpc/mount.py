"""
seriesmint.rpc.mount
--------------------

Mount HTTP endpoints for a :class:`~seriesmint.engine.SeriesMintEngine`:

- REST (prefix ``/series``):
    GET  /series/{series_id}                 -> series record
    GET  /series/{series_id}/root            -> {"root": "0x.."}
    GET  /series/{series_id}/catalogue_size  -> {"size": n}
    GET  /series/events                      -> recent events
    POST /series                             -> addSeries
    POST /series/{series_id}/metadata        -> addMetadataRef
    POST /series/{series_id}/mint            -> mint

- JSON-RPC 2.0 (``POST /rpc``) for every method in
  :data:`seriesmint.rpc.methods.METHODS`.

Engine errors map to HTTP statuses for REST and to JSON-RPC error objects
whose ``data`` carries the error's stable ``code`` and details.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from ..engine import SeriesMintEngine
from ..errors import (AlreadyConsumed, AlreadyMinted, CapacityExhausted,
                      InvalidArgument, InvalidProof, IssuanceFailed, NotFound,
                      SeriesMintError, Unauthorized)
from ..version import __version__
from . import methods as m

logger = logging.getLogger(__name__)

# JSON-RPC error codes (application range is -32000..-32099).
RPC_CODES: Dict[type, int] = {
    InvalidArgument: -32602,
    Unauthorized: -32001,
    NotFound: -32004,
    AlreadyMinted: -32010,
    AlreadyConsumed: -32010,
    InvalidProof: -32011,
    IssuanceFailed: -32012,
    CapacityExhausted: -32013,
}

HTTP_STATUS: Dict[type, int] = {
    InvalidArgument: 400,
    Unauthorized: 403,
    NotFound: 404,
    AlreadyMinted: 409,
    AlreadyConsumed: 409,
    InvalidProof: 422,
    CapacityExhausted: 409,
    IssuanceFailed: 502,
}


def _status_for(err: SeriesMintError) -> int:
    return HTTP_STATUS.get(type(err), 500)


def _http_error(err: SeriesMintError) -> HTTPException:
    return HTTPException(status_code=_status_for(err), detail=err.to_dict())


def rpc_error(err: SeriesMintError) -> Dict[str, Any]:
    return {"code": RPC_CODES.get(type(err), -32000), "message": err.message, "data": err.to_dict()}


def _call(engine: SeriesMintEngine, method: str, params: Dict[str, Any]) -> Any:
    try:
        return m.METHODS[method](engine, params)
    except SeriesMintError as e:
        raise _http_error(e) from e


# --------------------------------------------------------------------------------------
# REST router
# --------------------------------------------------------------------------------------

def get_router(engine: SeriesMintEngine) -> APIRouter:
    r = APIRouter(prefix="/series", tags=["series"])

    @r.get("/events")
    def events(
        start: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=1000),
        name: Optional[str] = Query(None),
    ) -> list:
        return _call(engine, "series.getEvents", {"start": start, "limit": limit, "name": name})

    @r.get("/{series_id}")
    def get_series(series_id: int) -> dict:
        return _call(engine, "series.getSeries", {"seriesId": series_id})

    @r.get("/{series_id}/root")
    def get_root(series_id: int) -> dict:
        return {"root": _call(engine, "series.getRoot", {"seriesId": series_id})}

    @r.get("/{series_id}/catalogue_size")
    def catalogue_size(series_id: int) -> dict:
        return {"size": _call(engine, "series.catalogueSize", {"seriesId": series_id})}

    @r.post("")
    def add_series(body: Dict[str, Any]) -> dict:
        return _call(engine, "series.addSeries", body)

    @r.post("/{series_id}/metadata")
    def add_metadata(series_id: int, body: Dict[str, Any]) -> dict:
        return _call(engine, "series.addMetadataRef", {**body, "seriesId": series_id})

    @r.post("/{series_id}/mint")
    def mint(series_id: int, body: Dict[str, Any]) -> dict:
        return _call(engine, "series.mint", {**body, "seriesId": series_id})

    return r


# --------------------------------------------------------------------------------------
# JSON-RPC
# --------------------------------------------------------------------------------------

def dispatch(engine: SeriesMintEngine, payload: Any) -> Dict[str, Any]:
    """Handle one JSON-RPC 2.0 request object; always returns a response object."""
    req_id: Optional[Union[int, str]] = payload.get("id") if isinstance(payload, dict) else None
    if not isinstance(payload, dict) or payload.get("jsonrpc") != "2.0" or "method" not in payload:
        return {"jsonrpc": "2.0", "id": req_id, "error": {"code": -32600, "message": "invalid request"}}

    method = payload["method"]
    fn = m.METHODS.get(method)
    if fn is None:
        return {"jsonrpc": "2.0", "id": req_id, "error": {"code": -32601, "message": f"method not found: {method}"}}

    params = payload.get("params") or {}
    if not isinstance(params, dict):
        return {"jsonrpc": "2.0", "id": req_id, "error": {"code": -32602, "message": "params must be an object"}}

    try:
        result = fn(engine, params)
    except SeriesMintError as e:
        logger.debug("rpc: %s failed: %s", method, e)
        return {"jsonrpc": "2.0", "id": req_id, "error": rpc_error(e)}
    return {"jsonrpc": "2.0", "id": req_id, "result": result}


def mount(app: FastAPI, engine: SeriesMintEngine, *, rpc_path: str = "/rpc") -> FastAPI:
    app.include_router(get_router(engine))

    @app.post(rpc_path)
    async def jsonrpc(request: Request) -> JSONResponse:
        try:
            payload = json.loads(await request.body())
        except ValueError:
            return JSONResponse({"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "parse error"}})
        return JSONResponse(dispatch(engine, payload))

    logger.info("rpc: mounted /series and %s", rpc_path)
    return app


def create_app(engine: SeriesMintEngine) -> FastAPI:
    app = FastAPI(title="Animica series-mint", version=__version__)
    return mount(app, engine)


__all__ = ["get_router", "dispatch", "mount", "create_app", "rpc_error", "RPC_CODES", "HTTP_STATUS"]
