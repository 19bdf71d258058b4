"""
Helpers that shape agent-supplied values into record fields.
"""
from typing import Any, Dict, Iterable, List

from bs4 import BeautifulSoup

from cms_agent.domains.errors import ReferenceValidationError
from cms_agent.domains.records import TextFormat
from cms_agent.interfaces.providers.records import ReferenceResolver


def validate_references(
    reference_ids: Iterable[Any],
    vocabulary: str,
    resolver: ReferenceResolver,
) -> List[Dict[str, str]]:
    """Resolve reference ids into field items, all or nothing.

    Args:
        reference_ids: Ids supplied by the agent
        vocabulary: Vocabulary every id must belong to
        resolver: Vocabulary lookup

    Returns:
        List of {"target_id": id} items in input order, without duplicates

    Raises:
        ReferenceValidationError: on the first id that does not resolve into
            the vocabulary
    """
    items = []
    seen = set()
    for reference_id in reference_ids:
        reference_id = str(reference_id).strip()
        reference = resolver.resolve(reference_id, vocabulary) if reference_id else None
        if reference is None or reference.vocabulary != vocabulary:
            raise ReferenceValidationError(reference_id, vocabulary)
        if reference.id in seen:
            continue
        seen.add(reference.id)
        items.append({"target_id": reference.id})
    return items


def process_ingredients(ingredients: Iterable[Any]) -> List[Dict[str, str]]:
    """Flatten ingredient entries into display strings.

    Entries are either {"quantity": ..., "item": ...} mappings, joined with a
    single space, or bare strings. Anything else, and entries that end up
    empty, are dropped.
    """
    processed = []
    for ingredient in ingredients:
        if isinstance(ingredient, dict):
            if ingredient.get("quantity") is None or ingredient.get("item") is None:
                continue
            text = f"{ingredient['quantity']} {ingredient['item']}".strip()
        elif isinstance(ingredient, str):
            text = ingredient.strip()
        else:
            continue
        if text:
            processed.append({"value": text})
    return processed


def formatted_text(value: str, text_format: TextFormat) -> Dict[str, str]:
    """Build a formatted-text field value."""
    return {"value": value, "format": text_format.value}


def strip_tags(markup: str) -> str:
    """Remove markup from a text field and unescape entities."""
    return BeautifulSoup(markup or "", "html.parser").get_text().strip()
