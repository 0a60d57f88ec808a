"""Execution flow graph of a folder's Ansible-style playbook."""

from typing import List, Optional

from nino.config import Play, Playbook, PlaybookRole, PlaybookTask
from nino.dot import Digraph, Graph
from nino.graph import SOURCE_COLOR, TARGET_COLOR

PROCESSING_ROLE = "OB-Live.nino"
SOURCE_NODE = "source_db"
TARGET_NODE = "target_db"

TASK_ICONS = [
    ("docker", "🐳 "),
    ("cron", "⏰ "),
]


def task_label(task: PlaybookTask) -> str:
    """Task name, prefixed with the icon of the first keyword it mentions."""
    lowered = task.name.lower()
    for keyword, icon in TASK_ICONS:
        if keyword in lowered:
            return icon + task.name
    return task.name


class PlaybookFlow:
    """Chains pre-tasks, source, roles and target of one play.

    `tail` is the node the next segment attaches to; once every role is laid
    out, the chain is closed on the target node if it did not already end there.
    """

    def __init__(self, play: Play):
        self.play = play
        self.graph = Digraph("G")
        self.tail: Optional[str] = None

    def build(self) -> Digraph:
        graph = self.graph
        graph.set("rankdir", "LR")
        graph.set_defaults("graph", {"splines": "ortho", "fontname": "Helvetica", "label": self.play.name, "fontsize": 20})
        graph.set_defaults("node", {"shape": "rect", "style": "rounded", "fontname": "Helvetica"})
        graph.set_defaults("edge", {"fontname": "Helvetica", "fontsize": 10})

        if self.play.pre_tasks:
            self._add_pre_tasks(self.play.pre_tasks)

        self._add_endpoints()
        self._link(graph, SOURCE_NODE)

        for i, role in enumerate(self.play.roles):
            if role.name == PROCESSING_ROLE and role.vars.entities:
                self._add_processing_role(i, role)
            else:
                node = f"role_{i}"
                graph.node(node, label=role.name, shape="cds")
                self._link(graph, node)

        if self.tail != TARGET_NODE:
            graph.edge(self.tail, TARGET_NODE)
            self.tail = TARGET_NODE
        return graph

    def _link(self, graph: Graph, node: str) -> None:
        if self.tail is not None:
            graph.edge(self.tail, node)
        self.tail = node

    def _add_pre_tasks(self, tasks: List[PlaybookTask]) -> None:
        cluster = self.graph.subgraph("cluster_pretasks")
        cluster.set("label", "🛠️ Pre-Tasks")
        cluster.set("style", "rounded")
        cluster.set("color", "grey")
        for i, task in enumerate(tasks):
            node = f"pretask_{i}"
            cluster.node(node, label=task_label(task), shape="rect")
            self._link(cluster, node)

    def _add_endpoints(self) -> None:
        variables = self.play.vars
        self.graph.node(
            SOURCE_NODE,
            label="source",
            tooltip=str(variables.get("source_db", "")),
            shape="cylinder",
            style="filled",
            fillcolor=SOURCE_COLOR,
        )
        self.graph.node(
            TARGET_NODE,
            label="target",
            tooltip=str(variables.get("target_db", "")),
            shape="cylinder",
            style="filled",
            fillcolor=TARGET_COLOR,
        )

    def _add_processing_role(self, index: int, role: PlaybookRole) -> None:
        cluster = self.graph.subgraph(f"cluster_role_{index}")
        cluster.set("label", f"⚙️ {role.name}")
        cluster.set("style", "rounded")
        cluster.set("color", "blue")

        entities = [f"entity_{index}_{j}" for j in range(len(role.vars.entities))]
        for node, entity in zip(entities, role.vars.entities):
            cluster.node(node, label=entity.name, shape="invhouse")
        for previous, node in zip(entities, entities[1:]):
            cluster.edge(previous, node)

        self.graph.edge(self.tail, entities[0])
        self.graph.edge(entities[-1], TARGET_NODE)
        self.tail = TARGET_NODE


def playbook_graph(playbook: Optional[Playbook]) -> Digraph:
    """Build the flow of the first play; an empty playbook gives an empty graph."""
    if playbook is None or not playbook.plays:
        return Digraph("G")
    return PlaybookFlow(playbook.plays[0]).build()


def render_playbook(playbook: Optional[Playbook]) -> str:
    return playbook_graph(playbook).render()
