"""
Resolve package: classify user tokens and find the Favro card they refer to.
"""

from .tokens import parse_token, split_tokens, OpaqueId, KeyRef, Unparseable, ScopeHint, ParsedToken
from .cards import CardResolver

__all__ = ["parse_token", "split_tokens", "OpaqueId", "KeyRef", "Unparseable", "ScopeHint", "ParsedToken", "CardResolver"]
