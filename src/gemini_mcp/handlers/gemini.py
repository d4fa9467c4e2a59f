"""Gemini tool handler.

Validates tool arguments, runs the gemini invoker and renders the result.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import anyio
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, ErrorData, TextContent
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .base import ToolContext, ToolHandler
from ..errors import GeminiError, RequestValidationError
from ..invokers.types import InvocationRequest
from ..response_formatter import format_text_response, get_formatter
from ..tool_schema import TOOL_DESCRIPTION, TOOL_NAME, create_tool_schema

__all__ = ["GeminiArgs", "GeminiHandler", "build_request"]

logger = logging.getLogger(__name__)


class GeminiArgs(BaseModel):
    """Arguments of the gemini tool, as sent by the MCP client."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    prompt: str = Field(alias="PROMPT")
    sandbox: bool = False
    session_id: str | None = Field(default=None, alias="SESSION_ID")
    return_all_messages: bool = False
    model: str | None = None
    timeout_secs: int | None = Field(default=None, strict=True)


def _invalid_params(message: str) -> McpError:
    return McpError(ErrorData(code=INVALID_PARAMS, message=message))


def _describe_validation_error(e: ValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
        for err in e.errors()
    )
    return f"Invalid arguments: {details}"


def build_request(arguments: dict[str, Any]) -> InvocationRequest:
    """Parse tool arguments into an ``InvocationRequest``.

    Raises:
        McpError: INVALID_PARAMS for malformed or out-of-range arguments
    """
    try:
        args = GeminiArgs.model_validate(arguments)
    except ValidationError as e:
        raise _invalid_params(_describe_validation_error(e)) from e

    if not args.prompt.strip():
        raise _invalid_params(
            "PROMPT is required and must be a non-empty, non-whitespace string"
        )

    try:
        return InvocationRequest(
            prompt=args.prompt,
            sandbox=args.sandbox,
            session_id=args.session_id or None,
            model=args.model,
            return_all_messages=args.return_all_messages,
            timeout_secs=args.timeout_secs,
        )
    except RequestValidationError as e:
        raise _invalid_params(str(e)) from e


class GeminiHandler(ToolHandler):
    """Handler for the ``gemini`` tool."""

    @property
    def name(self) -> str:
        return TOOL_NAME

    @property
    def description(self) -> str:
        return TOOL_DESCRIPTION

    def get_input_schema(self) -> dict[str, Any]:
        return create_tool_schema()

    async def handle(
        self,
        arguments: dict[str, Any],
        ctx: ToolContext,
    ) -> list[TextContent]:
        request = build_request(arguments)
        formatter = get_formatter()

        try:
            result = await ctx.invoker.execute(request)

        except anyio.get_cancelled_exc_class() as e:
            logger.info(f"Tool '{self.name}' cancelled (type={type(e).__name__})")
            raise

        except asyncio.CancelledError:
            logger.info(f"Tool '{self.name}' cancelled via asyncio.CancelledError")
            raise

        except GeminiError as e:
            logger.error(f"Tool '{self.name}' error: {e}")
            raise McpError(
                ErrorData(code=INTERNAL_ERROR, message=f"Failed to execute gemini: {e}")
            ) from e

        logger.debug(
            f"[MCP] call_tool response: success={result.success} "
            f"session_id={result.session_id or '-'} "
            f"events={len(result.all_messages)}"
        )

        if not result.success:
            raise McpError(
                ErrorData(code=INTERNAL_ERROR, message=formatter.format_error(result))
            )

        return format_text_response(formatter.format_success(result))
