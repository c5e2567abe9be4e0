from calloutdex.index.orchestrator import CalloutIndex
from calloutdex.index.search import SearchOptions, search_callouts, visible_headings

__all__ = ["CalloutIndex", "SearchOptions", "search_callouts", "visible_headings"]
