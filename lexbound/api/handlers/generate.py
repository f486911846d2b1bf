"""Generation and context-preview endpoint handlers."""

import logging

from fastapi import HTTPException
from fastapi.responses import JSONResponse

from lexbound.core.errors import CompletionTransportError, InputError, TargetNodeNotFoundError
from lexbound.core.generation_service import GenerationService
from lexbound.models.generation import GenerationRequest, GenerationStatus
from ..models.errors import invalid_request_error, not_found_error, transport_error

logger = logging.getLogger(__name__)


def _input_error(e: InputError) -> HTTPException:
    if isinstance(e, TargetNodeNotFoundError):
        error_response = not_found_error(str(e), param=e.field, code="target_node_not_found")
        return HTTPException(status_code=404, detail=error_response.model_dump())

    error_response = invalid_request_error(str(e), param=e.field)
    return HTTPException(status_code=400, detail=error_response.model_dump())


async def process_generation(request: GenerationRequest, service: GenerationService) -> JSONResponse:
    """Run one constrained generation.

    Rejected and flagged drafts are returned with 200 and their full
    validation report; only input and transport problems are errors.

    Args:
        request: Validated generation request
        service: Generation service

    Returns:
        JSON response with the generation result

    Raises:
        HTTPException: 400/404 for input errors or missing coverage, 502 for
            a failed completion call
    """
    try:
        result = await service.generate(request)
    except InputError as e:
        logger.warning(f"Invalid generation request: {e}")
        raise _input_error(e)
    except CompletionTransportError as e:
        logger.error(f"Text completion failed: {e}")
        raise HTTPException(status_code=502, detail=transport_error(str(e)).model_dump())

    if result.status == GenerationStatus.INSUFFICIENT_AUTHORITY:
        error_response = not_found_error(
            "No authorized reasoning objects found for this query",
            code="insufficient_authority",
            authorized_context=result.authorized_context.to_dict(),
        )
        raise HTTPException(status_code=404, detail=error_response.model_dump())

    return JSONResponse(
        content=result.to_dict(),
        headers={
            "X-Generation-Status": result.status.value,
            "X-Iterations": str(result.iterations),
        },
    )


async def process_context(request: GenerationRequest, service: GenerationService) -> dict:
    """Return the authorized context and compiled instructions without calling a model."""
    try:
        context, instructions = service.prepare(request)
    except InputError as e:
        logger.warning(f"Invalid context request: {e}")
        raise _input_error(e)

    return {
        "authorized_context": context.to_dict(),
        "instructions": instructions,
    }
