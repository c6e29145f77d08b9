"""Response formatting utilities."""
import json
from typing import Any, Dict, List, Optional, Sequence


def as_record_list(result: Any) -> List[Dict[str, Any]]:
    """
    Normalize an unwrapped ``result`` into a list of records.

    Args:
        result: ``result`` member of a Table API response

    Returns:
        A list; a single record becomes a one-element list
    """
    if isinstance(result, list):
        return [item for item in result if isinstance(item, dict)]
    if isinstance(result, dict):
        return [result] if result else []
    return []


def select_fields(item: Dict[str, Any], fields: Optional[Sequence[str]]) -> Dict[str, Any]:
    """Keep only the requested fields of a record, in request order."""
    if not fields:
        return item
    return {field: item.get(field) for field in fields}


def format_records(data: Any, fields: Optional[Sequence[str]] = None, indent: int = 2) -> str:
    """
    Render one record or a list of records as JSON text.

    Args:
        data: Record or list of records
        fields: Optional subset of fields to show
        indent: JSON indentation

    Returns:
        JSON string
    """
    if isinstance(data, list):
        data = [select_fields(item, fields) for item in data]
    elif isinstance(data, dict):
        data = select_fields(data, fields)
    return json.dumps(data, indent=indent, sort_keys=not fields, ensure_ascii=False)
