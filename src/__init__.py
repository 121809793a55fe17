"""
Byte-level BPE token counting and chat token-budget enforcement
for GPT-2/GPT-3 style vocabularies.
"""

__version__ = "0.1.0"
