from .options import ANY_OPTION, Dimension, SortDirection
from .page import SearchPage
from .schemas import FilterSelection, Option, SearchResponse

__all__ = ["ANY_OPTION", "Dimension", "FilterSelection", "Option", "SearchPage", "SearchResponse", "SortDirection"]
