# app/agent/graph.py
from langgraph.graph import START, END, StateGraph

from app.agent.state import DictationState
from app.agent.nodes import transcribe_node, refine_node, extract_node, route_after_transcribe

builder = StateGraph(DictationState)

builder.add_node("transcribe", transcribe_node)
builder.add_node("refine", refine_node)
builder.add_node("extract", extract_node)

builder.add_edge(START, "transcribe")
builder.add_conditional_edges("transcribe", route_after_transcribe, {
    "refine": "refine",
    "extract": "extract",
})
builder.add_edge("refine", "extract")
builder.add_edge("extract", END)

# no checkpointer: a dictation session is never stored server-side
dictation_graph = builder.compile()
