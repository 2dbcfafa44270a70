import math

import pytest

from queryscript import evaluate
from queryscript.builtin_function import NativeFunction
from queryscript.environment import Environment
from queryscript.errors import (
    EmptyProgramError, InvalidType, LexingError, MathError, NestingTooDeep,
    ParsingError, QueryError, VariableNotDefined,
)
from queryscript.interpreter import Interpreter, run_file
from queryscript.lexer import Span
from queryscript.parser import parse_program
from queryscript.std import BufferSink
from queryscript.types import ListVal, NoneVal, to_string


def run(source, **kwargs):
    sink = BufferSink()
    result = evaluate(source, sink=sink, **kwargs)
    return result, sink.lines


@pytest.mark.parametrize(
    "source, expected",
    [
        pytest.param('1 + 2 * 3;', 1 + 2 * 3, id="precedence"),
        pytest.param('10 - 4 - 3;', 10 - 4 - 3, id="sub_left_assoc"),
        pytest.param('2 * (3 + 4) / 7;', 2 * (3 + 4) / 7, id="parens"),
        pytest.param('0.1 + 0.2;', 0.1 + 0.2, id="ieee_rounding"),
        pytest.param('7 % 3;', 1.0, id="mod"),
        pytest.param('7.5 % 2;', 1.5, id="mod_fraction"),
        pytest.param('1 / 3;', 1 / 3, id="div"),
        pytest.param('100 / 8 / 5;', 100 / 8 / 5, id="div_left_assoc"),
    ]
)
def test_arithmetic_matches_ieee_doubles(source, expected):
    result, _ = run(source)
    assert result == expected


def test_modulo_keeps_sign_of_dividend():
    result, _ = run('0 - 7 % 3;')
    # unary minus does not exist, so build -7 by subtraction
    assert result == -1.0
    result, _ = run('x = 0 - 7; x % 3;')
    assert result == math.fmod(-7.0, 3.0)


def test_end_to_end_variables():
    result, _ = run('x = 5; y = x + 3; y * 2;')
    assert result == 16.0


def test_result_is_last_statement():
    result, _ = run('1; "two"; [3];')
    assert result == ListVal((3.0,))


def test_assignment_returns_value_and_binds():
    result, _ = run('a = (b = 4) + 1; a * b;')
    assert result == 20.0


def test_reassignment_overwrites():
    result, _ = run('x = 1; x = "now a string"; x;')
    assert result == 'now a string'


def test_read_after_write_returns_same_value():
    result, _ = run('x = [1, "a", []]; x;')
    assert result == ListVal((1.0, 'a', ListVal()))


def test_values_are_not_aliased():
    env = Environment()
    interp = Interpreter(sink=BufferSink())
    interp.run(parse_program('a = [1, 2]; b = a; a = 3;'), env)
    assert env.get('b') == ListVal((1.0, 2.0))
    assert env.get('a') == 3.0


def test_lists():
    assert run('[1, 2, 3];')[0] == ListVal((1.0, 2.0, 3.0))
    assert run('[];')[0] == ListVal(())
    assert run('[1 + 1, "s", [(x = 2)]];')[0] == ListVal((2.0, 's', ListVal((2.0,))))


@pytest.mark.parametrize(
    "source",
    [
        pytest.param('5 / 0;', id="div_zero"),
        pytest.param('5 % 0;', id="mod_zero"),
        pytest.param('5 / 0.0;', id="div_zero_decimal"),
        pytest.param('5 / (0 - 0);', id="div_computed_zero"),
        pytest.param('0 / 0;', id="zero_over_zero"),
    ]
)
def test_division_by_zero_is_math_error(source):
    with pytest.raises(MathError) as excinfo:
        run(source)
    assert excinfo.value.message == 'division by zero'


def test_both_operands_are_evaluated_before_zero_check():
    env = Environment()
    interp = Interpreter(sink=BufferSink())
    with pytest.raises(MathError):
        interp.run(parse_program('(x = 1) / (y = 0);'), env)
    assert env.get('x') == 1.0
    assert env.get('y') == 0.0


@pytest.mark.parametrize(
    "source, op",
    [
        pytest.param('"a" + 1;', '+', id="string_add"),
        pytest.param('1 - "a";', '-', id="string_sub"),
        pytest.param('x = [1]; x / 2;', '/', id="list_div"),
        pytest.param('x = print(1); x % 2;', '%', id="none_mod"),
        pytest.param('print - 1;', '-', id="native_sub"),
    ]
)
def test_arithmetic_on_non_numbers_is_invalid_type(source, op):
    with pytest.raises(InvalidType) as excinfo:
        run(source)
    assert f"'{op}'" in excinfo.value.message


def test_undefined_variable():
    with pytest.raises(VariableNotDefined) as excinfo:
        run('x = 1; y + x;')
    assert excinfo.value.variable == 'y'


def test_calling_unbound_name():
    with pytest.raises(VariableNotDefined) as excinfo:
        run('nothing(1);')
    assert excinfo.value.variable == 'nothing'


def test_calling_non_function():
    with pytest.raises(InvalidType) as excinfo:
        run('f = 3; f(1);')
    assert 'f' in excinfo.value.message


def test_call_argument_is_evaluated_before_lookup():
    with pytest.raises(VariableNotDefined) as excinfo:
        run('missing(also_missing);')
    assert excinfo.value.variable == 'also_missing'


def test_print_goes_to_sink_and_returns_none():
    result, lines = run('print([1,2]);')
    assert result == NoneVal()
    assert lines == ['[1.0, 2.0]']


def test_print_renders_every_kind():
    _, lines = run('print(1); print("s"); print([]); print(print(0)); print(print);')
    assert lines == ['1.0', '"s"', '[]', '0.0', 'None', '<native print>']


def test_print_defaults_to_stdout(capsys):
    evaluate('print("hello");')
    assert capsys.readouterr().out == '"hello"\n'


def test_return_emits_and_yields_value():
    result, lines = run('return x = 2 * 3; x + 1;')
    assert lines == ['6.0']
    assert result == 7.0


def test_return_does_not_stop_the_program():
    result, lines = run('return 1; return 2; 3;')
    assert lines == ['1.0', '2.0']
    assert result == 3.0


def test_first_error_stops_evaluation():
    sink = BufferSink()
    with pytest.raises(VariableNotDefined):
        evaluate('print(1); print(nope); print(2);', sink=sink)
    assert sink.lines == ['1.0']


def test_list_stops_at_first_failing_element():
    sink = BufferSink()
    with pytest.raises(VariableNotDefined):
        evaluate('[(print(1)), missing, (print(2))];', sink=sink)
    assert sink.lines == ['1.0']


def test_empty_program_is_an_error():
    with pytest.raises(EmptyProgramError):
        evaluate('')
    with pytest.raises(EmptyProgramError):
        evaluate('# nothing to see\n')


def test_pipeline_errors_come_first():
    with pytest.raises(LexingError):
        evaluate('1 / 0; @')
    with pytest.raises(ParsingError):
        evaluate('1 / 0; 1 +')


def test_errors_share_a_base_class():
    for source in ('@', '1 +', 'x;', '"a" * 2;', '1 % 0;', ''):
        with pytest.raises(QueryError):
            evaluate(source)


def test_runtime_error_carries_span():
    source = 'a = 1;\nb = a / 0;'
    with pytest.raises(MathError) as excinfo:
        evaluate(source)
    assert excinfo.value.describe(source) == 'MathError: division by zero at line 2, column 5'


def test_host_natives():
    def double(args):
        return ListVal(tuple(a * 2 for a in args))

    result, _ = run('double(21);', natives={'double': double})
    assert result == ListVal((42.0,))


def test_host_native_errors_propagate():
    def strict(args):
        raise InvalidType('strict wants a string')

    with pytest.raises(InvalidType, match='strict wants a string'):
        run('strict(1);', natives={'strict': NativeFunction('strict', strict)})


def test_host_native_may_shadow_print():
    seen = []
    result, lines = run('print(5);', natives={'print': lambda args: seen.extend(args) or 9.0})
    assert seen == [5.0]
    assert lines == []
    assert result == 9.0


def test_each_run_gets_a_fresh_environment():
    interp = Interpreter(sink=BufferSink())
    interp.run(parse_program('x = 1;'))
    with pytest.raises(VariableNotDefined):
        interp.run(parse_program('x;'))


def test_ieee_infinity_propagates():
    big = '9' * 300
    result, _ = run(f'{big} * {big} - {big} * {big};')
    assert math.isnan(result)
    result, _ = run(f'{big} * {big} % 2;')
    assert math.isnan(result)
    assert to_string(run(f'{big} * {big};')[0]) == 'inf'


def test_run_file(tmp_path):
    script = tmp_path / 'sum.qs'
    script.write_text('a = 2;\nb = 3;\na + b;\n', encoding='utf-8')
    assert run_file(str(script), sink=BufferSink()) == 5.0


def test_long_sum_evaluates():
    result, _ = run('+'.join(['1'] * 2000) + ';')
    assert result == 2000.0


def test_long_subtraction_chain_is_left_associative():
    source = ' - '.join(['100'] + ['1'] * 1500) + ';'
    assert run(source)[0] == 100.0 - 1500


def test_long_list_evaluates():
    result, _ = run('[' + ', '.join(['"a"'] * 5000) + '];')
    assert isinstance(result, ListVal)
    assert len(result.items) == 5000


@pytest.mark.parametrize(
    "source",
    [
        pytest.param('[' * 3000 + ']' * 3000 + ';', id="nested_lists"),
        pytest.param('x = ' * 3000 + '1;', id="assignment_chain"),
        pytest.param('print(' * 3000 + '1' + ')' * 3000 + ';', id="nested_calls"),
    ],
)
def test_deep_nesting_is_reported(source):
    with pytest.raises(NestingTooDeep) as excinfo:
        run(source)
    assert isinstance(excinfo.value, QueryError)
    assert str(excinfo.value) == 'NestingTooDeep: expression nests too deeply'
    assert excinfo.value.span == Span(0, len(source) - 1)


def test_deep_nesting_stops_the_program():
    sink = BufferSink()
    with pytest.raises(NestingTooDeep):
        evaluate('print("before");' + 'x = ' * 3000 + '1; print("after");', sink=sink)
    assert sink.lines == ['"before"']
