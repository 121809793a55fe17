"""
Chat completion requests that respect the model's context limit.

The service prunes the conversation until it fits the model, then hands the
request to an OpenAI-style client (anything exposing
``client.chat.completions.create(**request)``).
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..tokenization.bpe_tokenizer import GPTTokenizer
from .budget import DEFAULT_MAX_ITERATIONS, MessagePruner, TokenBudget
from .messages import ChatMessage


class ChatCompletionService:
    """
    Sends chat completion requests after fitting messages into the token budget.

    Args:
        tokenizer: Tokenizer used for counting
        client: OpenAI-style client
        logger: Logger for pruning steps (default: module logger)
        limits: Model name -> token limit (default: MAX_TOKENS_MAP)
        max_iterations: Pruning passes allowed before giving up

    Example:
        >>> service = ChatCompletionService(tokenizer, OpenAI(api_key=api_key))
        >>> response = service.create_chat_retain_initial_prompt(
        ...     "gpt-3.5-turbo",
        ...     [ChatMessage("system", "Be brief."), ChatMessage("user", "Hi!")],
        ... )
    """

    def __init__(
        self,
        tokenizer: GPTTokenizer,
        client: Any,
        logger: Optional[logging.Logger] = None,
        limits: Optional[Mapping[str, int]] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        self.tokenizer = tokenizer
        self.client = client
        self.log = logger if logger is not None else logging.getLogger(__name__)
        self.budget = TokenBudget(tokenizer, limits)
        self.pruner = MessagePruner(self.budget, max_iterations=max_iterations, logger=self.log)

    @classmethod
    def from_api_key(
        cls, api_key: str, vocab_dir: Union[str, Path], **kwargs
    ) -> "ChatCompletionService":
        """
        Build a service backed by the official OpenAI client.

        Requires the optional ``openai`` package.
        """
        try:
            from openai import OpenAI
        except ImportError:
            raise ImportError(
                "The OpenAI client requires 'openai'. "
                "Install with: pip install openai"
            )

        return cls(GPTTokenizer.from_directory(vocab_dir), OpenAI(api_key=api_key), **kwargs)

    def create_chat(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        temperature: float = 1,
        top_p: float = 1,
        n: int = 1,
        stream: bool = False,
        stop: Optional[List[str]] = None,
        max_tokens: Optional[int] = None,
        presence_penalty: float = 0,
        frequency_penalty: float = 0,
        user: Optional[str] = None,
    ) -> Any:
        """
        Create a chat completion, dropping the oldest messages if needed.

        Returns:
            The client's response
        """
        return self._create(
            model,
            messages,
            retain_first=False,
            temperature=temperature,
            top_p=top_p,
            n=n,
            stream=stream,
            stop=stop,
            max_tokens=max_tokens,
            presence_penalty=presence_penalty,
            frequency_penalty=frequency_penalty,
            user=user,
        )

    def create_chat_retain_initial_prompt(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        temperature: float = 1,
        top_p: float = 1,
        n: int = 1,
        stream: bool = False,
        stop: Optional[List[str]] = None,
        max_tokens: Optional[int] = None,
        presence_penalty: float = 0,
        frequency_penalty: float = 0,
        user: Optional[str] = None,
    ) -> Any:
        """
        Create a chat completion, keeping the first message pinned while pruning.

        Returns:
            The client's response
        """
        return self._create(
            model,
            messages,
            retain_first=True,
            temperature=temperature,
            top_p=top_p,
            n=n,
            stream=stream,
            stop=stop,
            max_tokens=max_tokens,
            presence_penalty=presence_penalty,
            frequency_penalty=frequency_penalty,
            user=user,
        )

    def build_request(
        self, model: str, messages: Sequence[ChatMessage], **options
    ) -> Dict[str, Any]:
        """Request payload; options set to None are left out."""
        request = {"model": model}
        request.update({key: value for key, value in options.items() if value is not None})
        request["messages"] = [message.to_dict() for message in messages]
        return request

    def _create(
        self, model: str, messages: Sequence[ChatMessage], retain_first: bool, **options
    ) -> Any:
        fitted = self.pruner.prune(messages, model, retain_first=retain_first)
        if len(fitted) < len(messages):
            self.log.info(
                "Sending %d of %d messages to %s", len(fitted), len(messages), model
            )

        request = self.build_request(model, fitted, **options)
        return self.client.chat.completions.create(**request)
