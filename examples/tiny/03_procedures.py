"""Typed procedures: a value-returning helper called from Update."""

from __future__ import annotations

from blocksharp import EditorSession
from blocksharp.block_schemas import PROC_ARG, PROC_CALL_STMT, PROC_CALL_VAL, PROC_DEF


def build_session() -> EditorSession:
    session = EditorSession("Mover")
    session.declare_variable("body", "Rigidbody")
    session.declare_variable("moveSpeed", "float")
    scale = session.declare_procedure("Scaled", "Vector3", [("dir", "Vector3")])
    push = session.declare_procedure("Push", "void", [("force", "Vector3")])

    ws = session.workspace
    scale_def = ws.top_nodes(PROC_DEF)[0]
    ws.connect_statement(
        scale_def,
        "DO",
        ws.new_node(
            "ctrl_return",
            inputs={
                "VALUE": ws.new_node(
                    "vec3_mul",
                    inputs={
                        "V": ws.new_node(PROC_ARG, fields={"PROC": scale.id, "INDEX": 0}),
                        "S": ws.new_node("var_get", fields={"VAR": "moveSpeed"}),
                    },
                )
            },
        ),
    )

    push_def = ws.top_nodes(PROC_DEF)[1]
    ws.connect_statement(
        push_def,
        "DO",
        ws.new_node(
            "rb_addforce",
            fields={"MODE": "Impulse"},
            inputs={
                "RB": ws.new_node("var_get", fields={"VAR": "body"}),
                "F": ws.new_node(PROC_ARG, fields={"PROC": push.id, "INDEX": 0}),
            },
        ),
    )

    jump = ws.new_node(
        "ctrl_if",
        inputs={"COND": ws.new_node("input_getkey", fields={"KEY": "Space", "MODE": "down"})},
    )
    ws.connect_statement(
        jump,
        "DO",
        ws.new_node(
            PROC_CALL_STMT,
            fields={"PROC": push.id},
            inputs={
                "A0": ws.new_node(
                    PROC_CALL_VAL,
                    fields={"PROC": scale.id},
                    inputs={"A0": ws.new_node("tr_up", inputs={"TR": ws.new_node("go_get_transform")})},
                )
            },
        ),
    )
    ws.chain(ws.new_node("evt_update"), jump)
    return session


if __name__ == "__main__":
    print(build_session().generate(), end="")
