"""Minimal script: two fields and a per-frame rotation."""

from __future__ import annotations

from blocksharp import EditorSession


def build_session() -> EditorSession:
    session = EditorSession("Spinner")
    session.declare_variable("pivot", "Transform")
    session.declare_variable("degreesPerSecond", "float")

    ws = session.workspace
    step = ws.new_node(
        "arith_float",
        fields={"OP": "*"},
        inputs={
            "A": ws.new_node("var_get", fields={"VAR": "degreesPerSecond"}),
            "B": ws.new_node("time_deltaTime"),
        },
    )
    rotate = ws.new_node(
        "tr_rotate",
        inputs={
            "TR": ws.new_node("var_get", fields={"VAR": "pivot"}),
            "E": ws.new_node("make_vector3", inputs={"Y": step}),
        },
    )
    ws.chain(ws.new_node("evt_update"), rotate)
    return session


if __name__ == "__main__":
    print(build_session().generate(), end="")
