"""Filtering, price parsing and ordering of property records."""

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from estate360.filters.criteria import CriteriaFilter, filter_properties  # noqa: F401
    from estate360.filters.location import matches_location  # noqa: F401
    from estate360.filters.ordering import (  # noqa: F401
        apply_sort,
        featured_only,
        sort_by_featured_order,
        sort_by_newest,
    )
    from estate360.filters.price import parse_price  # noqa: F401

__all__ = [
    "apply_sort",
    "CriteriaFilter",
    "featured_only",
    "filter_properties",
    "matches_location",
    "parse_price",
    "sort_by_featured_order",
    "sort_by_newest",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "apply_sort": (".ordering", "apply_sort"),
    "CriteriaFilter": (".criteria", "CriteriaFilter"),
    "featured_only": (".ordering", "featured_only"),
    "filter_properties": (".criteria", "filter_properties"),
    "matches_location": (".location", "matches_location"),
    "parse_price": (".price", "parse_price"),
    "sort_by_featured_order": (".ordering", "sort_by_featured_order"),
    "sort_by_newest": (".ordering", "sort_by_newest"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr = _LAZY_IMPORTS[name]
        mod = importlib.import_module(module_path, __name__)
        val = getattr(mod, attr)
        globals()[name] = val  # Cache so __getattr__ is only called once
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
