"""Event parameters are only usable inside their own handler.

The trigger handler below reads ``collision``, which only exists in collision
handlers, so that statement is emitted as a comment while the rest of the
handler stays active.
"""

from __future__ import annotations

from blocksharp import EditorSession, find_scope_violations


def build_session() -> EditorSession:
    session = EditorSession("Pickup")
    session.declare_variable("lastTouched", "GameObject")
    session.declare_variable("pickups", "List_GameObject")

    ws = session.workspace
    ws.chain(
        ws.new_node("evt_trigger_enter"),
        ws.new_node(
            "list_add",
            fields={"L": "pickups"},
            inputs={"V": ws.new_node("other_get_go")},
        ),
        ws.new_node(
            "var_set",
            fields={"VAR": "lastTouched"},
            inputs={"VALUE": ws.new_node("collision_get_go")},
        ),
        ws.new_node(
            "unity_destroy",
            inputs={
                "O": ws.new_node("other_get_go"),
                "T": ws.new_node("const_float", fields={"N": 0.25}),
            },
        ),
    )
    ws.chain(
        ws.new_node("evt_collision_enter"),
        ws.new_node(
            "var_set",
            fields={"VAR": "lastTouched"},
            inputs={"VALUE": ws.new_node("collision_get_go")},
        ),
    )
    return session


if __name__ == "__main__":
    source = build_session().generate()
    print(source, end="")
    print(f"// scope-out lines: {find_scope_violations(source)}")
