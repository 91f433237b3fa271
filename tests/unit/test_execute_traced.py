"""Tests for execute_program_traced: traced execution with per-step snapshots."""

from stackc.ir import Opcode
from stackc.run import execute_program, execute_program_traced
from stackc.run_types import VMConfig
from stackc.trace_types import ExecutionTrace, TraceStep
from stackc import constants

from tests.unit.conftest import make_instructions


def _program():
    return make_instructions(
        (Opcode.PUSH, 0),
        (Opcode.PUSH, 4),
        (Opcode.PUSH, 3),
        (Opcode.ADD,),
        (Opcode.RET,),
    )


class TestExecuteTracedBasic:
    def test_returns_execution_trace_type(self):
        _, trace = execute_program_traced(_program())
        assert isinstance(trace, ExecutionTrace)
        assert all(isinstance(s, TraceStep) for s in trace.steps)

    def test_one_step_per_executed_instruction(self):
        _, trace = execute_program_traced(_program())
        assert len(trace.steps) == 5
        assert [s.step_index for s in trace.steps] == [0, 1, 2, 3, 4]

    def test_snapshot_is_taken_before_the_instruction(self):
        _, trace = execute_program_traced(_program())
        add_step = trace.steps[3]
        assert add_step.instruction.opcode == Opcode.ADD
        assert add_step.stack == (0, 4, 3)
        assert add_step.pc == 3

    def test_snapshots_are_independent_of_later_mutation(self):
        _, trace = execute_program_traced(_program())
        assert trace.steps[0].stack == ()
        assert trace.steps[1].stack == (0,)

    def test_final_stack_and_stats(self):
        vm, trace = execute_program_traced(_program())
        assert trace.final_stack == (7,)
        assert trace.final_stack == tuple(vm.stack)
        assert trace.stats.steps == 5
        assert trace.stats.halted_by_return

    def test_traced_and_untraced_runs_agree(self):
        vm_plain, stats = execute_program(_program())
        vm_traced, trace = execute_program_traced(_program())
        assert vm_plain.stack == vm_traced.stack
        assert stats.steps == trace.stats.steps


class TestRender:
    def test_render_layout(self):
        _, trace = execute_program_traced(_program())
        assert trace.steps[2].render() == "\n".join(
            [
                "pc = 2, bp = 0, argc = 0, code = push, 3",
                "[0, 4]",
                constants.TRACE_SEPARATOR,
            ]
        )

    def test_bare_opcode_shows_zero_operand(self):
        _, trace = execute_program_traced(_program())
        assert trace.steps[3].render().splitlines()[0].endswith("code = add, 0")

    def test_empty_stack_renders_as_empty_list(self):
        _, trace = execute_program_traced(_program())
        assert trace.steps[0].render().splitlines()[1] == "[]"


class TestVerbose:
    def test_verbose_prints_each_step(self, capsys):
        execute_program(_program(), VMConfig(verbose=True))
        out = capsys.readouterr().out
        assert out.count(constants.TRACE_SEPARATOR) == 5
        assert "pc = 4, bp = 0, argc = 0, code = ret, 0" in out
        assert "(5 steps)" in out

    def test_quiet_run_prints_nothing(self, capsys):
        execute_program(_program())
        assert capsys.readouterr().out == ""
