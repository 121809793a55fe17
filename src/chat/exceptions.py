"""Token budget errors."""


class TokenBudgetExceeded(ValueError):
    """
    A prompt or message list does not fit a model's token limit.

    Attributes:
        count: Measured number of tokens
        max: Model token limit
    """

    def __init__(self, count: int, max: int):
        self.count = count
        self.max = max
        super().__init__(
            f"The number of tokens ({count}) exceeds the maximum allowed ({max})."
        )


class BudgetUnsatisfiableError(RuntimeError):
    """Pruning cannot bring a message list under the token limit."""

    def __init__(self, count: int, max: int, iterations: int, reason: str):
        self.count = count
        self.max = max
        self.iterations = iterations
        super().__init__(
            f"Cannot fit messages into {max} tokens after {iterations} pruning steps "
            f"({count} tokens remain): {reason}"
        )
