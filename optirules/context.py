"""Building request contexts from chat requests."""

from typing import Any, Optional

from optirules.types import RequestContext
from optirules.utils.token_counter import TokenCounter, token_counter


def build_request_context(
    messages: list[dict[str, Any]],
    tools: Optional[list[dict[str, Any]]] = None,
    model: str = "gpt-4",
    counter: Optional[TokenCounter] = None,
) -> RequestContext:
    """Derive the routing facts of a chat request.

    The token count covers the messages and any attached tool definitions.

    Args:
        messages: Chat messages as sent by the client
        tools: Tool/function definitions, if any
        model: Model the client asked for, used to pick a tokenizer
        counter: Token counter to use instead of the shared one

    Returns:
        A fresh RequestContext for this request
    """
    counter = counter or token_counter
    token_count = counter.count_message_tokens(messages, model)
    token_count += counter.count_tool_tokens(tools, model)
    return RequestContext(token_count=token_count, has_tools=bool(tools))
