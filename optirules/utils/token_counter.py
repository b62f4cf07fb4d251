"""Token counting utilities."""

import json
import logging
from typing import Any, Optional, Union

import tiktoken

logger = logging.getLogger(__name__)


class TokenCounter:
    """Token counter for chat requests."""

    # Rough estimates for when no encoder can be loaded
    CHARS_PER_TOKEN = {
        "default": 4,  # ~4 chars per token
        "claude": 3.5,  # Claude uses ~3.5 chars per token
        "gemini": 4,
        "gpt": 4,
    }

    def __init__(self):
        self._encoders: dict[str, Any] = {}

    def _get_encoder(self, model: str):
        """Get tiktoken encoder for a model, or None if none can be loaded."""
        if model not in self._encoders:
            try:
                self._encoders[model] = tiktoken.encoding_for_model(model)
            except KeyError:
                # Not an OpenAI model name, use cl100k_base
                try:
                    self._encoders[model] = tiktoken.get_encoding("cl100k_base")
                except Exception as e:
                    logger.warning("Could not load cl100k_base encoding: %s", e)
                    self._encoders[model] = None
            except Exception as e:
                logger.warning("Could not load tiktoken encoding for %s: %s", model, e)
                self._encoders[model] = None

        return self._encoders[model]

    @staticmethod
    def _encode(encoder, text: str) -> int:
        # Special-token strings in user text (<|endoftext|>, ...) count as plain text
        return len(encoder.encode(text, disallowed_special=()))

    def _chars_per_token(self, model: str) -> float:
        prefix = model.split("-")[0].lower()
        return self.CHARS_PER_TOKEN.get(prefix, self.CHARS_PER_TOKEN["default"])

    def count_tokens(
        self,
        text: Union[str, list[dict]],
        model: str = "gpt-4",
    ) -> int:
        """Count tokens in text.

        Args:
            text: Text or messages to count
            model: Model name

        Returns:
            Token count
        """
        if isinstance(text, list):
            return self.count_message_tokens(text, model)

        if not text:
            return 0

        encoder = self._get_encoder(model)
        if encoder:
            return self._encode(encoder, text)

        return int(len(text) / self._chars_per_token(model)) + 1

    def count_message_tokens(
        self,
        messages: list[dict],
        model: str = "gpt-4",
    ) -> int:
        """Count tokens in messages including formatting overhead.

        Args:
            messages: List of message dictionaries
            model: Model name

        Returns:
            Token count
        """
        if not messages:
            return 0

        encoder = self._get_encoder(model)

        if not encoder:
            total_chars = sum(len(json.dumps(msg, default=str)) for msg in messages)
            return int(total_chars / self._chars_per_token(model)) + len(messages) * 4

        tokens = 0

        for message in messages:
            # Every message follows <|start|>{role/name}\n{content}<|end|>\n
            tokens += 4

            for key, value in message.items():
                if value is None:
                    continue

                tokens += self._encode(encoder, key)

                if isinstance(value, str):
                    tokens += self._encode(encoder, value)
                elif isinstance(value, list):
                    # Content blocks
                    for item in value:
                        if isinstance(item, dict):
                            for v in item.values():
                                tokens += self._encode(encoder, v if isinstance(v, str) else str(v))
                        else:
                            tokens += self._encode(encoder, str(item))
                else:
                    tokens += self._encode(encoder, str(value))

            if message.get("name"):
                tokens -= 1  # Role is omitted if name is present

        tokens += 2  # Every reply is primed with <|start|>assistant<|message|>

        return tokens

    def count_tool_tokens(
        self,
        tools: Optional[list[dict]],
        model: str = "gpt-4",
    ) -> int:
        """Count tokens taken by tool definitions attached to a request."""
        if not tools:
            return 0
        return self.count_tokens(json.dumps(tools, sort_keys=True, default=str), model)


# Global token counter instance
token_counter = TokenCounter()
