import pytest

from blocksharp.program import Workspace


def _stack(workspace: Workspace):
    hat = workspace.new_node("evt_start")
    first = workspace.new_node("dbg_log")
    second = workspace.new_node("ctrl_break")
    third = workspace.new_node("dbg_log")
    workspace.chain(hat, first, second, third)
    return hat, first, second, third


def test_new_nodes_are_top_level_until_connected():
    workspace = Workspace()
    parent = workspace.new_node("dbg_log")
    child = workspace.new_node("const_string", fields={"S": "hi"})
    assert [node.id for node in workspace.top_nodes()] == [parent.id, child.id]

    workspace.connect_value(parent, "S", child)

    assert workspace.top_nodes() == [parent]
    assert workspace.value_target(parent, "S") is child
    assert workspace.parent_of(child) is parent


def test_top_nodes_filters_by_type_in_order():
    workspace = Workspace()
    first = workspace.new_node("evt_update")
    workspace.new_node("evt_start")
    second = workspace.new_node("evt_update")
    assert workspace.top_nodes("evt_update") == [first, second]


def test_iter_chain_follows_next_links():
    workspace = Workspace()
    hat, first, second, third = _stack(workspace)
    assert list(workspace.iter_chain(first)) == [first, second, third]
    assert list(workspace.iter_chain(None)) == []


def test_a_node_can_only_have_one_parent():
    workspace = Workspace()
    a = workspace.new_node("dbg_log")
    b = workspace.new_node("dbg_log")
    value = workspace.new_node("const_string")
    workspace.connect_value(a, "S", value)

    with pytest.raises(ValueError, match="already connected"):
        workspace.connect_value(b, "S", value)


def test_occupied_sockets_are_rejected():
    workspace = Workspace()
    a = workspace.new_node("dbg_log")
    workspace.connect_value(a, "S", workspace.new_node("const_string"))
    with pytest.raises(ValueError, match="already connected"):
        workspace.connect_value(a, "S", workspace.new_node("const_string"))


def test_cycles_are_rejected():
    workspace = Workspace()
    outer = workspace.new_node("ctrl_if")
    inner = workspace.new_node("ctrl_if")
    workspace.connect_statement(outer, "DO", inner)

    with pytest.raises(ValueError, match="cycle"):
        workspace.connect_statement(inner, "DO", outer)
    with pytest.raises(ValueError, match="cycle"):
        workspace.connect_next(outer, outer)


def test_dispose_heals_the_stack():
    workspace = Workspace()
    hat, first, second, third = _stack(workspace)

    removed = workspace.dispose(second)

    assert removed == 1
    assert list(workspace.iter_chain(workspace.next_node(hat))) == [first, third]
    assert second.id not in workspace.nodes


def test_dispose_removes_value_and_body_subtrees():
    workspace = Workspace()
    loop = workspace.new_node(
        "ctrl_while",
        inputs={"COND": workspace.new_node("const_bool", fields={"B": True})},
    )
    body = workspace.chain(workspace.new_node("dbg_log"), workspace.new_node("dbg_log"))
    workspace.connect_statement(loop, "DO", body)

    assert workspace.dispose(loop) == 4
    assert workspace.nodes == {}
    assert workspace.top_nodes() == []


def test_dispose_heals_into_a_body_socket():
    workspace = Workspace()
    block = workspace.new_node("ctrl_if")
    first = workspace.new_node("dbg_log")
    second = workspace.new_node("ctrl_break")
    workspace.connect_statement(block, "DO", workspace.chain(first, second))

    workspace.dispose(first)

    assert workspace.statement_target(block, "DO") is second
    assert workspace.top_nodes() == [block]


def test_dispose_of_a_top_node_keeps_its_follower_in_place():
    workspace = Workspace()
    before = workspace.new_node("evt_update")
    head = workspace.new_node("dbg_log")
    tail = workspace.new_node("ctrl_break")
    workspace.chain(head, tail)
    after = workspace.new_node("evt_start")

    workspace.dispose(head)

    assert workspace.top_nodes() == [before, tail, after]


def test_dispose_without_healing_removes_the_rest_of_the_chain():
    workspace = Workspace()
    hat, first, second, third = _stack(workspace)

    assert workspace.dispose(first, heal_stack=False) == 3
    assert workspace.next_node(hat) is None
    assert list(workspace.nodes) == [hat.id]


def test_purge_removes_matching_nodes():
    workspace = Workspace()
    hat, first, second, third = _stack(workspace)

    removed = workspace.purge(lambda node: node.type == "dbg_log")

    assert removed == 2
    assert list(workspace.iter_chain(workspace.next_node(hat))) == [second]


def test_variables_keep_declaration_order_and_reject_duplicates():
    workspace = Workspace()
    workspace.add_variable("speed", "float")
    workspace.add_variable("enemies", "List_GameObject")
    assert [v.name for v in workspace.variables] == ["speed", "enemies"]
    assert workspace.variable("speed").type == "float"

    with pytest.raises(ValueError, match="already exists"):
        workspace.add_variable("speed", "int")

    assert workspace.remove_variable("speed") is True
    assert workspace.remove_variable("speed") is False
    assert workspace.variable("speed") is None


def test_to_dict_and_from_dict_rebuild_the_same_tree():
    workspace = Workspace()
    workspace.add_variable("score", "int")
    hat, first, second, third = _stack(workspace)
    workspace.connect_value(first, "S", workspace.new_node("const_string", fields={"S": "a"}))
    workspace.new_node("evt_update")

    payload = workspace.to_dict()
    restored = Workspace.from_dict(payload)

    assert restored.to_dict() == payload
    assert [node.id for node in restored.top_nodes()] == [node.id for node in workspace.top_nodes()]
    assert restored.value_target(restored.node(first.id), "S").field("S") == "a"


def test_from_dict_rejects_dangling_references():
    payload = {
        "variables": [],
        "blocks": [{"id": "a", "type": "dbg_log", "inputs": {"S": "missing"}}],
        "top": ["a"],
    }
    with pytest.raises(KeyError, match="missing"):
        Workspace.from_dict(payload)


def test_from_dict_rejects_shared_children():
    payload = {
        "blocks": [
            {"id": "a", "type": "dbg_log", "inputs": {"S": "c"}},
            {"id": "b", "type": "dbg_log", "inputs": {"S": "c"}},
            {"id": "c", "type": "const_string"},
        ],
    }
    with pytest.raises(ValueError, match="already connected"):
        Workspace.from_dict(payload)


def test_fresh_ids_skip_restored_ids():
    workspace = Workspace.from_dict({"blocks": [{"id": "n1", "type": "evt_start"}]})
    node = workspace.new_node("evt_update")
    assert node.id != "n1"
