import random
from typing import Optional

from langgraph.graph import StateGraph, START, END

from ...services.idea_heuristics import DEFAULT_POLICY, HeuristicPolicy
from ...services.idea_validator import RemoteIdeaValidator
from ...services.validation_policy import ValidationPolicy
from ...timing import log_timing
from .nodes import make_decide_node, make_heuristic_node, make_remote_node
from .state import IdeaGateState


def create_idea_gate_graph(
    validator: RemoteIdeaValidator,
    policy: Optional[ValidationPolicy] = None,
    heuristic_policy: Optional[HeuristicPolicy] = None,
    rng: Optional[random.Random] = None,
):
    """
    Create the compiled idea gate graph.

    Structure:
    START -> [heuristic_check, remote_verdict] (parallel)
          -> decide
          -> END
    """
    log_timing("graph", "Creating idea gate graph")

    graph = StateGraph(IdeaGateState)

    graph.add_node("heuristic_check", make_heuristic_node(heuristic_policy or DEFAULT_POLICY))
    graph.add_node("remote_verdict", make_remote_node(validator))
    graph.add_node("decide", make_decide_node(policy or ValidationPolicy(), rng))

    # Both signals start together
    graph.add_edge(START, "heuristic_check")
    graph.add_edge(START, "remote_verdict")

    # decide waits for both
    graph.add_edge(["heuristic_check", "remote_verdict"], "decide")

    graph.add_edge("decide", END)

    return graph.compile()


def initial_state(submission: str) -> IdeaGateState:
    return {
        "submission": submission,
        "heuristic_ok": None,
        "verdict": None,
        "remote_failed": False,
        "result": None,
        "processing_errors": [],
    }
