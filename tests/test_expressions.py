from blocksharp.block_schemas import PROC_ARG, PROC_CALL_VAL, BlockCatalog
from blocksharp.compiler.expressions import ExpressionCompiler
from blocksharp.program import Workspace
from blocksharp.registry import ProcedureArg, ProcedureRegistry, ProcedureSignature
from blocksharp.scope import (
    EventParam,
    EventScope,
    GenerationContext,
    GlobalScope,
    ProcedureScope,
)


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
    return registry


def compile_expr(workspace, node, scope=None, registry=None):
    catalog = BlockCatalog(registry or _registry())
    ctx = GenerationContext(scope or GlobalScope())
    return ExpressionCompiler(workspace, catalog).compile(node, ctx)


def code_of(workspace, node, scope=None):
    return compile_expr(workspace, node, scope).code


def test_literals_use_csharp_formatting():
    ws = Workspace()
    assert code_of(ws, ws.new_node("const_int", fields={"N": 42})) == "42"
    assert code_of(ws, ws.new_node("const_int", fields={"N": "3.9"})) == "3"
    assert code_of(ws, ws.new_node("const_int", fields={"N": "abc"})) == "0"
    assert code_of(ws, ws.new_node("const_float", fields={"N": 1.5})) == "1.5f"
    assert code_of(ws, ws.new_node("const_float", fields={"N": 2})) == "2f"
    assert code_of(ws, ws.new_node("const_bool", fields={"B": True})) == "true"
    assert code_of(ws, ws.new_node("const_bool", fields={"B": "false"})) == "false"
    assert code_of(ws, ws.new_node("const_string", fields={"S": 'say "hi"\\'})) == (
        '"say \\"hi\\"\\\\"'
    )


def test_empty_sockets_use_the_expected_type_default():
    ws = Workspace()
    assert code_of(ws, ws.new_node("arith_float")) == "(0f + 0f)"
    assert code_of(ws, ws.new_node("make_vector3")) == "new Vector3(0f, 0f, 0f)"
    assert code_of(ws, ws.new_node("quat_euler")) == "Quaternion.Euler(Vector3.zero)"
    assert code_of(ws, ws.new_node("eq_string")) == '("" == "")'
    assert code_of(ws, ws.new_node("tr_pos")) == "(null).position"


def test_operators_are_fully_parenthesized():
    ws = Workspace()
    inner = ws.new_node(
        "arith_int",
        fields={"OP": "*"},
        inputs={
            "A": ws.new_node("const_int", fields={"N": 2}),
            "B": ws.new_node("const_int", fields={"N": 3}),
        },
    )
    outer = ws.new_node("cmp_int", fields={"OP": "<="}, inputs={"A": inner})
    negated = ws.new_node("logic_not", inputs={"A": outer})

    assert code_of(ws, negated) == "(!(((2 * 3) <= 0)))"


def test_unknown_operator_choice_falls_back_to_first_option():
    ws = Workspace()
    assert code_of(ws, ws.new_node("arith_int", fields={"OP": "%"})) == "(0 + 0)"
    assert code_of(ws, ws.new_node("eq_bool", fields={"OP": "<"})) == "(false == false)"


def test_fixed_infix_casts_and_getters():
    ws = Workspace()
    assert code_of(ws, ws.new_node("vec3_mul")) == "(Vector3.zero * 0f)"
    assert code_of(ws, ws.new_node("logic_or")) == "(false || false)"
    assert code_of(ws, ws.new_node("cast_int_to_float")) == "(float)(0)"
    assert code_of(ws, ws.new_node("cast_float_to_int")) == "(int)(0f)"
    assert code_of(ws, ws.new_node("vec3_magnitude")) == "(Vector3.zero).magnitude"
    assert code_of(ws, ws.new_node("hit_point")) == "(default(RaycastHit)).point"
    assert code_of(ws, ws.new_node("time_deltaTime")) == "Time.deltaTime"
    assert code_of(ws, ws.new_node("vec3_distance")) == "Vector3.Distance(Vector3.zero, Vector3.zero)"


def test_input_blocks():
    ws = Workspace()
    key = ws.new_node("input_getkey", fields={"KEY": "Space", "MODE": "down"})
    mouse = ws.new_node("input_getmouse", fields={"BTN": "7", "MODE": "up"})
    axis = ws.new_node("input_getaxis", fields={"AXIS": "Horizontal"})

    assert code_of(ws, key) == "Input.GetKeyDown(KeyCode.Space)"
    assert code_of(ws, ws.new_node("input_getkey")) == "Input.GetKey(KeyCode.None)"
    assert code_of(ws, mouse) == "Input.GetMouseButtonUp(0)"
    assert code_of(ws, axis) == 'Input.GetAxis("Horizontal")'


def test_variables_and_lists():
    ws = Workspace()
    ws.add_variable("speed", "float")
    ws.add_variable("ids", "List_int")

    assert code_of(ws, ws.new_node("var_get", fields={"VAR": "speed"})) == "speed"
    assert code_of(ws, ws.new_node("var_get")) == "/* var */"
    assert code_of(ws, ws.new_node("list_count", fields={"L": "ids"})) == "ids.Count"
    assert code_of(ws, ws.new_node("list_get", fields={"L": "ids"})) == "ids[0]"
    assert code_of(ws, ws.new_node("list_contains", fields={"L": "ids"})) == "ids.Contains(0)"
    assert code_of(ws, ws.new_node("list_indexof")) == "/* list */.IndexOf(null)"


def test_unknown_node_type_renders_placeholder():
    ws = Workspace()
    result = compile_expr(ws, ws.new_node("teleport"))
    assert result.code == "/* expr */"
    assert not result.illegal


def test_collision_reads_are_legal_only_in_collision_handlers():
    ws = Workspace()
    read = ws.new_node("collision_get_go")

    legal = compile_expr(ws, read, EventScope(EventParam.COLLISION))
    illegal = compile_expr(ws, read, EventScope(EventParam.OTHER))

    assert legal.code == illegal.code == "collision.gameObject"
    assert not legal.illegal
    assert illegal.illegal


def test_illegality_propagates_through_operands():
    ws = Workspace()
    position = ws.new_node("tr_pos", inputs={"TR": ws.new_node("other_get_tr")})
    distance = ws.new_node("vec3_distance", inputs={"A": position})

    result = compile_expr(ws, distance, GlobalScope())

    assert result.code == "Vector3.Distance((other.transform).position, Vector3.zero)"
    assert result.illegal
    assert not compile_expr(ws, distance, EventScope(EventParam.OTHER)).illegal


def test_procedure_call_value_uses_registered_name_and_arguments():
    ws = Workspace()
    call = ws.new_node(
        PROC_CALL_VAL,
        fields={"PROC": "p1"},
        inputs={"A0": ws.new_node("const_int", fields={"N": 2})},
    )
    result = compile_expr(ws, call)
    assert result.code == "Add(2, 0f)"
    assert not result.illegal


def test_procedure_call_value_is_illegal_when_an_argument_is():
    ws = Workspace()
    call = ws.new_node(
        PROC_CALL_VAL,
        fields={"PROC": "p1"},
        inputs={"A1": ws.new_node(PROC_ARG, fields={"PROC": "p1", "INDEX": 1})},
    )
    assert compile_expr(ws, call, ProcedureScope("p1")).code == "Add(0, b)"
    assert not compile_expr(ws, call, ProcedureScope("p1")).illegal
    assert compile_expr(ws, call, EventScope()).illegal


def test_unregistered_procedure_call_keeps_connected_arguments():
    ws = Workspace()
    named = ws.new_node(
        PROC_CALL_VAL,
        fields={"PROC": "zz", "NAME": "Legacy"},
        inputs={"A0": ws.new_node("const_int", fields={"N": 1})},
    )
    anonymous = ws.new_node(PROC_CALL_VAL, fields={"PROC": "zz"})

    assert code_of(ws, named) == "Legacy(1)"
    assert code_of(ws, anonymous) == "Proc_zz()"


def test_procedure_argument_legality():
    ws = Workspace()
    arg = ws.new_node(PROC_ARG, fields={"PROC": "p1", "INDEX": 0})

    assert compile_expr(ws, arg, ProcedureScope("p1")).code == "a"
    assert not compile_expr(ws, arg, ProcedureScope("p1")).illegal
    assert compile_expr(ws, arg, ProcedureScope("p2")).illegal
    assert compile_expr(ws, arg, EventScope()).illegal
    assert compile_expr(ws, arg, GlobalScope()).illegal


def test_unregistered_procedure_argument_falls_back_to_field_name():
    ws = Workspace()
    named = ws.new_node(PROC_ARG, fields={"PROC": "zz", "INDEX": 0, "ARG": "count"})
    bare = ws.new_node(PROC_ARG, fields={"PROC": "zz"})
    assert code_of(ws, named, ProcedureScope("zz")) == "count"
    assert code_of(ws, bare, ProcedureScope("zz")) == "arg"
