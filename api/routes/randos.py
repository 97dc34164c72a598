"""Rando search routes.

/v0/randos searches the base collection, /v1/randos the custom one. Client
errors return their message as plain text (400); storage failures return a
generic plain-text 500 and are logged with full detail.
"""
import asyncio
import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse

from errors import ClientError, ExecutionError
from models import QueryOptionsModel, SearchResponse
from routes.deps import get_app_state
from storage.variants import BASE, CUSTOM

logger = logging.getLogger(__name__)

router = APIRouter()

QUERY_DURATION_HEADER = "X-Query-Duration"
SERVER_ERROR_MESSAGE = "internal server error"


@router.get("/v0/randos", response_model=SearchResponse, response_model_exclude_none=True)
async def search_base_randos(request: Request, response: Response):
    """Search randos whose identity is the document primary key"""
    return await _search(request, response, BASE.collection)


@router.get("/v1/randos", response_model=SearchResponse, response_model_exclude_none=True)
async def search_custom_randos(request: Request, response: Response):
    """Search randos whose identity is a separate unique attribute"""
    return await _search(request, response, CUSTOM.collection)


async def _search(request: Request, response: Response, collection: str):
    """Run the search pipeline off the event loop and shape the response"""
    pipeline = get_app_state(request).get_search_pipeline(collection)
    try:
        result = await asyncio.to_thread(pipeline.execute, request.url.query)
    except ClientError as e:
        logger.debug(f"Rejected query on {collection}: {e}")
        return PlainTextResponse(str(e), status_code=e.status_code)
    except ExecutionError as e:
        logger.error(f"{request.method} {request.url} failed: {e}")
        return PlainTextResponse(SERVER_ERROR_MESSAGE, status_code=e.status_code)

    logger.info(f"{request.method} {request.url} complete in {result.duration_header}")
    response.headers[QUERY_DURATION_HEADER] = result.duration_header
    return SearchResponse(
        data=result.data,
        options=QueryOptionsModel(**result.options.to_dict()),
        total=result.total
    )
