from cinevault.models.registry import ExternalRegistryEntry, ImdbExternalMap
from cinevault.models.suggestion import ContentSuggestion, SuggestionStatus

__all__ = [
    "ContentSuggestion",
    "ExternalRegistryEntry",
    "ImdbExternalMap",
    "SuggestionStatus",
]
