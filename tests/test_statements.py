from blocksharp.block_schemas import PROC_ARG, PROC_CALL_STMT, BlockCatalog
from blocksharp.compiler.statements import StatementCompiler
from blocksharp.program import Workspace
from blocksharp.registry import ProcedureArg, ProcedureRegistry, ProcedureSignature
from blocksharp.scope import EventParam, EventScope, GenerationContext, ProcedureScope

MARKER = "// scope-out: generated as comment"


def _registry() -> ProcedureRegistry:
    registry = ProcedureRegistry()
    registry.add(
        ProcedureSignature(
            id="p1",
            name="Add",
            return_type="int",
            args=(ProcedureArg("a", "int"), ProcedureArg("b", "float")),
        )
    )
    registry.add(ProcedureSignature(id="p2", name="Jump"))
    return registry


def compile_stmt(workspace, node, scope=None):
    compiler = StatementCompiler(workspace, BlockCatalog(_registry()))
    return compiler.compile(node, GenerationContext(scope or EventScope()))


def compile_chain(workspace, head, scope=None):
    compiler = StatementCompiler(workspace, BlockCatalog(_registry()))
    return compiler.compile_chain(head, GenerationContext(scope or EventScope()))


def lines_of(workspace, node, scope=None):
    return compile_stmt(workspace, node, scope).lines


def _log(ws, text=""):
    return ws.new_node("dbg_log", inputs={"S": ws.new_node("const_string", fields={"S": text})})


def test_assignment_uses_variable_type_for_empty_value():
    ws = Workspace()
    ws.add_variable("speed", "float")
    assert lines_of(ws, ws.new_node("var_set", fields={"VAR": "speed"})) == ["speed = 0f;"]
    assert lines_of(ws, ws.new_node("var_set")) == ["/* var */ = null;"]


def test_if_else_indents_nested_bodies():
    ws = Workspace()
    branch = ws.new_node("ctrl_if_else", inputs={"COND": ws.new_node("const_bool", fields={"B": True})})
    ws.connect_statement(branch, "DO", _log(ws, "yes"))
    ws.connect_statement(branch, "ELSE", ws.chain(_log(ws, "no"), ws.new_node("ctrl_break")))

    assert lines_of(ws, branch) == [
        "if (true) {",
        '    Debug.Log("yes");',
        "}",
        "else {",
        '    Debug.Log("no");',
        "    break;",
        "}",
    ]


def test_repeat_with_empty_count_loops_zero_times():
    ws = Workspace()
    result = compile_stmt(ws, ws.new_node("ctrl_repeat"))
    assert result.lines == ["for (int __i = 0; __i < 0; __i++) {", "}"]
    assert not result.illegal


def test_nested_repeats_use_distinct_loop_variables():
    ws = Workspace()
    outer = ws.new_node("ctrl_repeat", inputs={"COUNT": ws.new_node("const_int", fields={"N": 3})})
    guard = ws.new_node("ctrl_if")
    inner = ws.new_node("ctrl_repeat", inputs={"COUNT": ws.new_node("const_int", fields={"N": 2})})
    ws.connect_statement(outer, "DO", guard)
    ws.connect_statement(guard, "DO", inner)

    assert lines_of(ws, outer) == [
        "for (int __i = 0; __i < 3; __i++) {",
        "    if (false) {",
        "        for (int __i1 = 0; __i1 < 2; __i1++) {",
        "        }",
        "    }",
        "}",
    ]


def test_while_and_break():
    ws = Workspace()
    loop = ws.new_node("ctrl_while")
    ws.connect_statement(loop, "DO", ws.new_node("ctrl_break"))
    assert lines_of(ws, loop) == ["while (false) {", "    break;", "}"]


def test_engine_operation_templates():
    ws = Workspace()
    cases = {
        "tr_set_pos": "(null).position = Vector3.zero;",
        "tr_set_lrot": "(null).localRotation = Quaternion.identity;",
        "tr_translate": "(null).Translate(Vector3.zero);",
        "tr_lookat_v3": "(null).LookAt(Vector3.zero);",
        "rb_set_mass": "(null).mass = 0f;",
        "rb_movepos": "(null).MovePosition(Vector3.zero);",
        "aud_play": "(null).Play();",
        "aud_set_loop": "(null).loop = false;",
        "anim_set_speed": "(null).speed = 0f;",
        "tmp_set_text": '(null).text = "";',
        "scene_load": 'SceneManager.LoadScene("");',
        "unity_destroy": "Destroy(null, 0f);",
        "dbg_ray": "Debug.DrawRay(Vector3.zero, (Vector3.zero) * 0f);",
    }
    for block_type, expected in cases.items():
        assert lines_of(ws, ws.new_node(block_type)) == [expected], block_type


def test_force_modes_are_whitelisted():
    ws = Workspace()
    impulse = ws.new_node("rb_addforce", fields={"MODE": "Impulse"})
    bogus = ws.new_node("rb_addtorque", fields={"MODE": "Sideways"})
    assert lines_of(ws, impulse) == ["(null).AddForce(Vector3.zero, ForceMode.Impulse);"]
    assert lines_of(ws, bogus) == ["(null).AddTorque(Vector3.zero, ForceMode.Force);"]


def test_animator_calls_quote_their_keys():
    ws = Workspace()
    set_float = ws.new_node("anim_setFloat", fields={"K": "Speed"})
    trigger = ws.new_node("anim_setTrigger", fields={"K": 'Ju"mp'})
    assert lines_of(ws, set_float) == ['(null).SetFloat("Speed", 0f);']
    assert lines_of(ws, trigger) == ['(null).SetTrigger("Ju\\"mp");']


def test_output_receivers_are_optional():
    ws = Workspace()
    raycast = ws.new_node("physics_raycast", fields={"OUTN": "didHit", "HITN": "info"})
    bare_raycast = ws.new_node("physics_raycast", fields={"OUTN": "  "})
    component = ws.new_node("go_getcomponent", fields={"OUTN": "body", "CT": "Rigidbody"})
    spawn = ws.new_node("unity_instantiate")

    assert lines_of(ws, raycast) == [
        "didHit = Physics.Raycast(Vector3.zero, Vector3.zero, out info, 0f);"
    ]
    assert lines_of(ws, bare_raycast) == [
        "Physics.Raycast(Vector3.zero, Vector3.zero, out _, 0f);"
    ]
    assert lines_of(ws, component) == ["body = (null).GetComponent<Rigidbody>();"]
    assert lines_of(ws, spawn) == ["Instantiate(null, Vector3.zero, Quaternion.identity);"]


def test_button_listener_uses_raw_method_name():
    ws = Workspace()
    listener = ws.new_node("btn_addlistener", fields={"FN": "OnPlay"})
    assert lines_of(ws, listener) == ["(null).onClick.AddListener(OnPlay);"]


def test_list_statements():
    ws = Workspace()
    ws.add_variable("names", "List_string")
    assert lines_of(ws, ws.new_node("list_insert", fields={"L": "names"})) == [
        'names.Insert(0, "");'
    ]
    assert lines_of(ws, ws.new_node("list_set", fields={"L": "names"})) == ['names[0] = "";']
    assert lines_of(ws, ws.new_node("list_removeat", fields={"L": "names"})) == [
        "names.RemoveAt(0);"
    ]
    assert lines_of(ws, ws.new_node("list_clear")) == ["/* list */.Clear();"]


def test_procedure_call_statements():
    ws = Workspace()
    with_receiver = ws.new_node(PROC_CALL_STMT, fields={"PROC": "p1", "OUTN": "total"})
    discarded = ws.new_node(PROC_CALL_STMT, fields={"PROC": "p1"})
    void_call = ws.new_node(PROC_CALL_STMT, fields={"PROC": "p2", "OUTN": "ignored"})

    assert lines_of(ws, with_receiver) == ["total = Add(0, 0f);"]
    assert lines_of(ws, discarded) == ["Add(0, 0f);"]
    assert lines_of(ws, void_call) == ["Jump();"]


def test_return_depends_on_enclosing_procedure():
    ws = Workspace()
    bare = ws.new_node("ctrl_return")
    valued = ws.new_node("ctrl_return", inputs={"VALUE": ws.new_node("const_int", fields={"N": 5})})

    assert lines_of(ws, bare, ProcedureScope("p1")) == ["return 0;"]
    assert lines_of(ws, valued, ProcedureScope("p1")) == ["return 5;"]
    assert lines_of(ws, valued, ProcedureScope("p2")) == ["return;"]
    assert lines_of(ws, valued, EventScope()) == ["return;"]


def test_unknown_statement_renders_placeholder():
    ws = Workspace()
    result = compile_stmt(ws, ws.new_node("teleport"))
    assert result.lines == ["/* unknown statement: teleport */"]
    assert not result.illegal


def test_value_block_in_statement_position():
    ws = Workspace()
    assert lines_of(ws, ws.new_node("time_time")) == ["Time.time;"]


def test_illegal_statement_is_commented_and_siblings_continue():
    ws = Workspace()
    ws.add_variable("target", "GameObject")
    illegal = ws.new_node(
        "var_set", fields={"VAR": "target"}, inputs={"VALUE": ws.new_node("collision_get_go")}
    )
    head = ws.chain(_log(ws, "before"), illegal, _log(ws, "after"))

    assert compile_chain(ws, head, EventScope(EventParam.OTHER)) == [
        'Debug.Log("before");',
        MARKER,
        "// target = collision.gameObject;",
        'Debug.Log("after");',
    ]
    assert compile_chain(ws, head, EventScope(EventParam.COLLISION)) == [
        'Debug.Log("before");',
        "target = collision.gameObject;",
        'Debug.Log("after");',
    ]


def test_line_breaks_in_fields_never_escape_a_commented_statement():
    ws = Workspace()
    raycast = ws.new_node(
        "physics_raycast",
        fields={"OUTN": "didHit\nDestroy(gameObject)", "HITN": "info\r\n"},
        inputs={"O": ws.new_node("collision_get_tr")},
    )
    log = ws.new_node(
        "dbg_log", inputs={"S": ws.new_node("const_string", fields={"S": "a\nb\t\"c\""})}
    )
    head = ws.chain(raycast, log)

    assert compile_chain(ws, head, EventScope()) == [
        MARKER,
        "// didHit Destroy(gameObject) = Physics.Raycast(collision.transform, "
        "Vector3.zero, out info, 0f);",
        'Debug.Log("a\\nb\\t\\"c\\"");',
    ]


def test_illegal_condition_comments_out_the_whole_block():
    ws = Workspace()
    branch = ws.new_node("ctrl_if", inputs={"COND": ws.new_node("other_get")})
    ws.connect_statement(branch, "DO", _log(ws, "hit"))

    assert compile_chain(ws, branch, EventScope(EventParam.COLLISION)) == [
        MARKER,
        "// if (other) {",
        '//     Debug.Log("hit");',
        "// }",
    ]


def test_illegal_body_statement_does_not_disable_the_enclosing_block():
    ws = Workspace()
    loop = ws.new_node("ctrl_while", inputs={"COND": ws.new_node("const_bool", fields={"B": True})})
    arg = ws.new_node(PROC_ARG, fields={"PROC": "p1", "INDEX": 0})
    ws.connect_statement(loop, "DO", ws.new_node("dbg_log", inputs={"S": arg}))

    result = compile_stmt(ws, loop, ProcedureScope("p2"))

    assert not result.illegal
    assert result.lines == [
        "while (true) {",
        "    " + MARKER,
        "    // Debug.Log(a);",
        "}",
    ]
