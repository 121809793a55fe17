"""
Chat module.

Provides token budget enforcement for chat completion requests:
- Chat messages and their transport form
- Per-model token limits
- Budget validation and pruning of old messages
- A completion service that prunes before sending
"""

from .messages import (
    ChatMessage,
    ROLE_SYSTEM,
    ROLE_USER,
    ROLE_ASSISTANT,
)

from .model_limits import (
    MAX_TOKENS_MAP,
    get_max_tokens,
    load_model_limits,
)

from .exceptions import (
    TokenBudgetExceeded,
    BudgetUnsatisfiableError,
)

from .budget import (
    TokenBudget,
    MessagePruner,
    PruneStep,
)

from .service import ChatCompletionService

__all__ = [
    'ChatMessage',
    'ROLE_SYSTEM',
    'ROLE_USER',
    'ROLE_ASSISTANT',
    'MAX_TOKENS_MAP',
    'get_max_tokens',
    'load_model_limits',
    'TokenBudgetExceeded',
    'BudgetUnsatisfiableError',
    'TokenBudget',
    'MessagePruner',
    'PruneStep',
    'ChatCompletionService',
]
