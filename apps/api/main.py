import sys
import logging
from pathlib import Path


def _ensure_core_on_path() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    core_path = repo_root / "packages" / "core"
    if str(core_path) not in sys.path:
        sys.path.insert(0, str(core_path))


_ensure_core_on_path()

from netutil import (  # noqa: E402
    ParseError,
    Resolver,
    ResolutionError,
    parse_urls,
    resolve_tcp_addrs,
    url_strings_equal,
)
from netutil_settings import build_resolver, load_settings  # noqa: E402

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field


app = FastAPI(title="netutil API")
logger = logging.getLogger("netutil.api")


class NormalizeRequest(BaseModel):
    urls: list[list[str]] = Field(..., min_length=1)


class NormalizeResponse(BaseModel):
    urls: list[list[str]]


class CompareRequest(BaseModel):
    a: list[str]
    b: list[str]


class CompareResponse(BaseModel):
    equal: bool


def get_resolver() -> Resolver:
    try:
        return build_resolver(load_settings())
    except ValueError as exc:
        logger.error("Invalid resolver configuration: %s", exc)
        raise HTTPException(status_code=500, detail=f"invalid configuration: {exc}") from exc


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/urls/normalize", response_model=NormalizeResponse)
def normalize(req: NormalizeRequest, resolver: Resolver = Depends(get_resolver)) -> NormalizeResponse:
    try:
        url_lists = [parse_urls(raws) for raws in req.urls]
    except ParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        resolve_tcp_addrs(*url_lists, resolver=resolver)
    except ResolutionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return NormalizeResponse(urls=[[str(u) for u in urls] for urls in url_lists])


@app.post("/urls/compare", response_model=CompareResponse)
def compare(req: CompareRequest, resolver: Resolver = Depends(get_resolver)) -> CompareResponse:
    return CompareResponse(equal=url_strings_equal(req.a, req.b, resolver=resolver))
