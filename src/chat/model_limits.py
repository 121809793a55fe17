"""
Maximum context tokens per model.

Models missing from the table have no enforced limit.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

import yaml


MAX_TOKENS_MAP: Mapping[str, int] = MappingProxyType({
    # GPT-4
    "gpt-4": 8192,
    "gpt-4-0314": 8192,
    "gpt-4-32k": 32768,
    "gpt-4-32k-0314": 32768,

    # GPT-3.5
    "gpt-3.5-turbo": 4096,
    "gpt-3.5-turbo-0301": 4096,
    "text-davinci-003": 4097,
    "text-davinci-002": 4097,
    "code-davinci-002": 8001,

    # GPT-3
    "text-curie-001": 2049,
    "text-babbage-001": 2049,
    "text-ada-001": 2049,
    "davinci": 2049,
    "curie": 2049,
    "babbage": 2049,
    "ada": 2049,
})


def get_max_tokens(model: str, limits: Optional[Mapping[str, int]] = None) -> Optional[int]:
    """Token limit for a model, or None when the model is unlimited."""
    if limits is None:
        limits = MAX_TOKENS_MAP
    return limits.get(model)


def load_model_limits(path: Union[str, Path], include_defaults: bool = True) -> Dict[str, int]:
    """
    Load a model limit table from YAML.

    The file holds a mapping of model name to token limit, either at the top
    level or under a ``model_limits`` key:

        model_limits:
          gpt-4: 8192
          my-finetune: 2048

    Args:
        path: Path to the YAML file
        include_defaults: Start from MAX_TOKENS_MAP and override it

    Returns:
        Model name -> token limit
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Model limits in {path} must be a mapping")

    if "model_limits" in data:
        data = data["model_limits"] or {}
        if not isinstance(data, dict):
            raise ValueError(f"'model_limits' in {path} must be a mapping")

    limits = dict(MAX_TOKENS_MAP) if include_defaults else {}
    for model, max_tokens in data.items():
        if not isinstance(max_tokens, int) or isinstance(max_tokens, bool) or max_tokens <= 0:
            raise ValueError(f"Invalid token limit for {model}: {max_tokens!r}")
        limits[str(model)] = max_tokens

    return limits
