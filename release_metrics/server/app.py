"""HTTP endpoints for listing releases and aggregating their metrics.

Routes:
- ``GET /api/releases``: release identifiers under the metrics root, newest first
- ``POST /api/process``: ``{"release": ...}`` -> aggregated summary
- ``GET /api/context/{release}``: the LLM context file as a download
"""

import json
from typing import Any, Dict

from loguru import logger
from pydantic import BaseModel, ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from release_metrics.context import CONTEXT_FILE_NAME, render_context
from release_metrics.errors import NotFoundError
from release_metrics.metrics import MetricsAggregator
from release_metrics.releases import list_releases


class ProcessRequest(BaseModel):
    release: str


def _metrics_root(request: Request) -> str:
    return request.app.state.config['metrics']['root']


async def releases_endpoint(request: Request) -> Response:
    try:
        releases = list_releases(_metrics_root(request))
    except NotFoundError:
        return JSONResponse({'error': 'Metrics directory not found'}, status_code=404)
    except Exception:
        logger.exception("Error reading metrics directory")
        return JSONResponse({'error': 'Failed to list releases'}, status_code=500)

    return JSONResponse({'releases': releases})


async def process_endpoint(request: Request) -> Response:
    try:
        body = await request.json()
        payload = ProcessRequest.model_validate(body)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
        return JSONResponse({'error': 'Release date is required'}, status_code=400)

    release = payload.release.strip()
    if not release:
        return JSONResponse({'error': 'Release date is required'}, status_code=400)

    aggregator = MetricsAggregator(request.app.state.config)
    try:
        summary = await aggregator.aggregate_async(_metrics_root(request), release)
    except NotFoundError:
        return JSONResponse({'error': f'Metrics for release {release} not found'}, status_code=404)
    except Exception:
        logger.exception(f"Error processing metrics for release {release}")
        return JSONResponse({'error': 'Failed to process metrics'}, status_code=500)

    return JSONResponse({'success': True, 'data': summary.to_dict()})


async def context_endpoint(request: Request) -> Response:
    release = request.path_params['release']

    aggregator = MetricsAggregator(request.app.state.config)
    try:
        summary = await aggregator.aggregate_async(_metrics_root(request), release)
    except NotFoundError:
        return JSONResponse({'error': f'Metrics for release {release} not found'}, status_code=404)
    except Exception:
        logger.exception(f"Error building context for release {release}")
        return JSONResponse({'error': 'Failed to process metrics'}, status_code=500)

    return PlainTextResponse(
        render_context(summary, release),
        headers={'Content-Disposition': f'attachment; filename="{CONTEXT_FILE_NAME}"'},
    )


def build_app(config: Dict[str, Any]) -> Starlette:
    """Create the Starlette application bound to a configuration."""
    app = Starlette(routes=[
        Route('/api/releases', releases_endpoint, methods=['GET']),
        Route('/api/process', process_endpoint, methods=['POST']),
        Route('/api/context/{release}', context_endpoint, methods=['GET']),
    ])
    app.state.config = config
    return app
