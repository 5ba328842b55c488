"""
Deity Graph Builder.

Turns the verse records into a deity -> verse graph for the frontend
visualization: one node per deity, one node per verse reference and one
link for each time a verse names a deity.
"""

from typing import Dict, Iterable, List, Literal

from pydantic import BaseModel

from app.services.verse_store import VerseRecord


class GraphNode(BaseModel):
    id: str
    label: str
    type: Literal["Deity", "Hymn"]


class GraphLink(BaseModel):
    source: str
    target: str


class DeityGraph(BaseModel):
    nodes: List[GraphNode]
    links: List[GraphLink]

    def to_cytoscape(self) -> dict:
        """Wrap every element in the ``{"data": ...}`` envelope Cytoscape expects."""
        return {
            "nodes": [{"data": node.model_dump()} for node in self.nodes],
            "links": [{"data": link.model_dump()} for link in self.links],
        }


def build_deity_graph(records: Iterable[VerseRecord]) -> DeityGraph:
    """
    Build the deity/verse graph.

    Deities are keyed by lowercased name and labelled with the first
    spelling seen. A verse that lists the same deity twice yields two
    links; only nodes are de-duplicated. Deity-to-deity relations are
    not computed.
    """
    labels: Dict[str, str] = {}
    references: Dict[str, List[str]] = {}

    for record in records:
        ref = record.reference
        for deity in record.deities:
            key = deity.lower()
            if key not in labels:
                labels[key] = deity
                references[key] = []
            references[key].append(ref)

    nodes: List[GraphNode] = []
    links: List[GraphLink] = []
    seen_ids = set()

    for key, label in labels.items():
        nodes.append(GraphNode(id=key, label=label, type="Deity"))
        seen_ids.add(key)
        for ref in references[key]:
            if ref not in seen_ids:
                nodes.append(GraphNode(id=ref, label=ref, type="Hymn"))
                seen_ids.add(ref)
            links.append(GraphLink(source=key, target=ref))

    return DeityGraph(nodes=nodes, links=links)
