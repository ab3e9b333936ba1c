from __future__ import annotations
from typing import Dict, Mapping, Tuple

DEFAULT_LIMIT = 50
MAX_LIMIT = 200
PAGINATION_PARAMS = ('limit', 'offset')


def normalize_pagination(limit_raw, offset_raw) -> Tuple[int, int]:
    try:
        limit = int(limit_raw) if limit_raw is not None else DEFAULT_LIMIT
        offset = int(offset_raw) if offset_raw is not None else 0
    except ValueError:
        raise ValueError('limit/offset must be int')
    return max(1, min(limit, MAX_LIMIT)), max(0, offset)


def split_list_args(args: Mapping[str, str]) -> Tuple[Dict[str, str], int, int]:
    """Separate query-string filters from pagination params. Raises ValueError on bad ints."""
    limit, offset = normalize_pagination(args.get('limit'), args.get('offset'))
    filters = {k: v for k, v in args.items() if k not in PAGINATION_PARAMS}
    return filters, limit, offset
