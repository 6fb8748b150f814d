from .search import SearchStore, SortOrder
from .ui import Theme, UIStore
