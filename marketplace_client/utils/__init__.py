"""유틸리티 함수"""

from .url_utils import (
    add_meta_parameters,
    compute_relative_search_url,
    resolve_url,
    url_encode,
)

__all__ = [
    "add_meta_parameters",
    "compute_relative_search_url",
    "resolve_url",
    "url_encode",
]
