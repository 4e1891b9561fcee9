from .graph import create_idea_gate_graph, initial_state
from .nodes import decide_result
from .state import IdeaGateState

__all__ = ["create_idea_gate_graph", "initial_state", "decide_result", "IdeaGateState"]
