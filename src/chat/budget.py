"""
Token budget validation and conversation pruning.

The pruner keeps a chat message list under a model's context limit by
dropping the oldest messages with escalating aggressiveness:

    Checking --(count < limit)--> Fits
    Checking --(count >= limit)--> Overflowing --> Checking

Each overflow removes floor(diff * coefficient) messages, where diff is the
overage and the coefficient starts at 0.01 and grows by 0.01 per pass.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Sequence

from ..tokenization.bpe_tokenizer import GPTTokenizer
from .exceptions import BudgetUnsatisfiableError, TokenBudgetExceeded
from .messages import ChatMessage
from .model_limits import MAX_TOKENS_MAP, get_max_tokens

# Removal coefficient in hundredths: starts at 0.01, grows by 0.01 per pass.
# Integer arithmetic keeps floor(diff * coefficient) exact.
COEFFICIENT_START = 1
COEFFICIENT_STEP = 1

DEFAULT_MAX_ITERATIONS = 200


@dataclass
class PruneStep:
    """
    One pruning pass.

    Attributes:
        iteration: 1-based pass number
        count: Token count that overflowed
        max_tokens: Model token limit
        diff: count - max_tokens
        remove_count: Messages dropped in this pass
        coefficient: Removal coefficient used in this pass
        offset: Total messages dropped from the front of the original list
        remaining: Messages left after this pass (pinned message included)
    """

    iteration: int
    count: int
    max_tokens: int
    diff: int
    remove_count: int
    coefficient: float
    offset: int
    remaining: int


class TokenBudget:
    """
    Checks prompts and message lists against per-model token limits.

    Args:
        tokenizer: Tokenizer used for counting
        limits: Model name -> token limit (default: MAX_TOKENS_MAP)
    """

    def __init__(self, tokenizer: GPTTokenizer, limits: Optional[Mapping[str, int]] = None):
        self.tokenizer = tokenizer
        self.limits = limits if limits is not None else MAX_TOKENS_MAP

    def max_tokens(self, model: str) -> Optional[int]:
        """Token limit of a model, None if unlimited."""
        return get_max_tokens(model, self.limits)

    def _check(self, count: int, model: str):
        max_tokens = self.max_tokens(model)
        # Inclusive: a count equal to the limit does not fit
        if max_tokens is not None and count >= max_tokens:
            raise TokenBudgetExceeded(count, max_tokens)

    def validate_prompt(self, prompt: str, model: str):
        """Raise TokenBudgetExceeded if the prompt does not fit the model."""
        self._check(self.tokenizer.count(prompt), model)

    def validate_messages(self, messages: Sequence[ChatMessage], model: str):
        """Raise TokenBudgetExceeded if the framed messages do not fit the model."""
        self._check(self.tokenizer.count_messages(messages), model)


class MessagePruner:
    """
    Drops the oldest messages until a conversation fits its model.

    Args:
        budget: Token budget used for validation
        max_iterations: Pruning passes allowed before giving up (default: 200)
        logger: Logger for pruning steps (default: module logger)

    Example:
        >>> pruner = MessagePruner(TokenBudget(tokenizer))
        >>> messages = pruner.prune(messages, "gpt-3.5-turbo", retain_first=True)
    """

    def __init__(
        self,
        budget: TokenBudget,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        logger: Optional[logging.Logger] = None,
    ):
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")

        self.budget = budget
        self.max_iterations = max_iterations
        self.log = logger if logger is not None else logging.getLogger(__name__)

    def prune(
        self,
        messages: Sequence[ChatMessage],
        model: str,
        retain_first: bool = False,
        on_step: Optional[Callable[[PruneStep], None]] = None,
    ) -> List[ChatMessage]:
        """
        Return the longest suffix of ``messages`` that fits the model.

        Args:
            messages: Conversation, oldest first (not modified)
            model: Model identifier
            retain_first: Keep the first message (e.g. the system prompt) pinned
            on_step: Called with a PruneStep after every pruning pass

        Returns:
            The fitting messages in their original order

        Raises:
            BudgetUnsatisfiableError: the messages cannot be made to fit
        """
        original = list(messages)
        current = list(original)
        minimal = 1 if retain_first and original else 0

        offset = 0
        coefficient = COEFFICIENT_START
        iteration = 0

        while True:
            try:
                self.budget.validate_messages(current, model)
                return current
            except TokenBudgetExceeded as e:
                if len(current) <= minimal:
                    reason = (
                        "the pinned first message alone exceeds the limit"
                        if minimal else "no messages left to remove"
                    )
                    raise BudgetUnsatisfiableError(e.count, e.max, iteration, reason) from e
                if iteration >= self.max_iterations:
                    raise BudgetUnsatisfiableError(
                        e.count, e.max, iteration, "iteration limit reached"
                    ) from e

                iteration += 1
                diff = e.count - e.max
                remove_count = diff * coefficient // 100
                if diff == 0:
                    # Exactly at the limit still overflows; drop at least one
                    remove_count = max(remove_count, 1)

                self.log.debug(
                    "Max tokens exceeded by %d. Removing %d messages and retrying.",
                    diff,
                    remove_count,
                )

                offset += remove_count
                current = original[offset:]
                if retain_first and original and (not current or current[0] is not original[0]):
                    current.insert(0, original[0])

                if on_step is not None:
                    on_step(PruneStep(
                        iteration=iteration,
                        count=e.count,
                        max_tokens=e.max,
                        diff=diff,
                        remove_count=remove_count,
                        coefficient=coefficient / 100,
                        offset=offset,
                        remaining=len(current),
                    ))

                coefficient += COEFFICIENT_STEP
