"""
Deity graph builder tests.

The builder only de-duplicates nodes. A verse that lists the same deity
twice produces two links; the tests below pin that behavior down as it
currently stands rather than as a property the graph must have.
"""

from app.services.deity_graph import build_deity_graph
from app.services.verse_store import VerseRecord


def verse(mandala, hymn, number, deities):
    return VerseRecord(mandala=mandala, hymn=hymn, verse=number, deities=deities)


def node_ids(graph, node_type):
    return [n.id for n in graph.nodes if n.type == node_type]


class TestBuildDeityGraph:
    def test_case_varied_deity_collapses_to_one_node(self):
        graph = build_deity_graph([verse(1, 1, 1, ["Agni"]), verse(1, 1, 2, ["AGNI"])])

        assert node_ids(graph, "Deity") == ["agni"]
        assert node_ids(graph, "Hymn") == ["Rig 1.1.1", "Rig 1.1.2"]
        assert [(l.source, l.target) for l in graph.links] == [
            ("agni", "Rig 1.1.1"),
            ("agni", "Rig 1.1.2"),
        ]

    def test_deity_label_is_first_spelling_seen(self):
        graph = build_deity_graph([verse(1, 1, 1, ["AGNI"]), verse(1, 1, 2, ["Agni"])])

        assert graph.nodes[0].label == "AGNI"

    def test_shared_verse_node_is_emitted_once(self):
        graph = build_deity_graph([verse(9, 1, 1, ["Soma", "Indra"])])

        assert [(n.id, n.type) for n in graph.nodes] == [
            ("soma", "Deity"),
            ("Rig 9.1.1", "Hymn"),
            ("indra", "Deity"),
        ]
        assert len(graph.links) == 2
        assert {l.target for l in graph.links} == {"Rig 9.1.1"}

    def test_node_ids_are_unique(self, records):
        graph = build_deity_graph(records)
        ids = [n.id for n in graph.nodes]

        assert len(ids) == len(set(ids))

    def test_nodes_follow_deity_insertion_order(self, records):
        graph = build_deity_graph(records)

        assert node_ids(graph, "Deity") == ["agni", "indra", "soma"]
        assert [(l.source, l.target) for l in graph.links] == [
            ("agni", "Rig 1.1.1"),
            ("indra", "Rig 1.32.1"),
            ("indra", "Rig 9.1.1"),
            ("soma", "Rig 9.1.1"),
        ]

    def test_repeated_deity_on_one_verse_yields_duplicate_links(self):
        graph = build_deity_graph([verse(1, 1, 1, ["Agni", "agni"])])

        assert node_ids(graph, "Hymn") == ["Rig 1.1.1"]
        assert len(graph.links) == 2

    def test_verses_without_deities_add_nothing(self):
        graph = build_deity_graph([verse(10, 129, 1, [])])

        assert graph.nodes == []
        assert graph.links == []

    def test_deterministic(self, records):
        assert build_deity_graph(records) == build_deity_graph(records)

    def test_cytoscape_envelope(self):
        graph = build_deity_graph([verse(1, 1, 1, ["Agni"])])

        assert graph.to_cytoscape() == {
            "nodes": [
                {"data": {"id": "agni", "label": "Agni", "type": "Deity"}},
                {"data": {"id": "Rig 1.1.1", "label": "Rig 1.1.1", "type": "Hymn"}},
            ],
            "links": [{"data": {"source": "agni", "target": "Rig 1.1.1"}}],
        }
