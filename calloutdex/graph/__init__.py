from calloutdex.graph.graph_builder import RelationshipGraphBuilder
from calloutdex.graph.layout import ColumnLayout
from calloutdex.graph.relations import LinkResolver, Relations, find_relations

__all__ = ["ColumnLayout", "LinkResolver", "Relations", "RelationshipGraphBuilder", "find_relations"]
