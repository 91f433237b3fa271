"""Orchestrator: the fetch-execute loop and the run() entry point."""

from __future__ import annotations

import logging
import time
from typing import Callable

from .codegen import CodeGenerator
from .errors import ErrorKind, VMError
from .ir import Instruction
from .ir_stats import call_site_count
from .lexer import tokenize
from .parser import parse
from .run_types import ExecutionStats, PipelineStats, VMConfig
from .trace_types import ExecutionTrace, TraceStep
from .vm import OutputFn, execute_instruction
from .vm_types import VMState

logger = logging.getLogger(__name__)

StepObserver = Callable[[TraceStep], None]


def _snapshot(step: int, vm: VMState, instruction: Instruction) -> TraceStep:
    return TraceStep(
        step_index=step,
        pc=vm.pc,
        bp=vm.bp,
        argc=vm.argc,
        instruction=instruction,
        stack=tuple(vm.stack),
    )


def _execute(
    instructions: list[Instruction],
    config: VMConfig,
    output: OutputFn,
    observer: StepObserver | None,
) -> tuple[VMState, ExecutionStats]:
    vm = VMState()
    stats = ExecutionStats()
    program_size = len(instructions)

    while vm.pc < program_size and not vm.halted:
        if config.max_steps is not None and stats.steps >= config.max_steps:
            raise VMError(
                ErrorKind.STEP_LIMIT_EXCEEDED,
                f"stopped after {stats.steps} steps at pc={vm.pc}",
            )
        instruction = instructions[vm.pc]
        if observer is not None or config.verbose:
            step = _snapshot(stats.steps, vm, instruction)
            if config.verbose:
                print(step.render())
            if observer is not None:
                observer(step)
        execute_instruction(vm, instruction, program_size, config, output)
        stats.steps += 1
        stats.max_stack_size = max(stats.max_stack_size, len(vm.stack))

    stats.final_stack_size = len(vm.stack)
    stats.halted_by_return = vm.halted
    logger.info(
        "Executed %d steps, final stack size %d", stats.steps, stats.final_stack_size
    )
    if config.verbose:
        print(f"\n({stats.steps} steps)")
    return vm, stats


def execute_program(
    instructions: list[Instruction],
    config: VMConfig = VMConfig(),
    output: OutputFn = print,
) -> tuple[VMState, ExecutionStats]:
    """Run an instruction list from pc 0 until the pc leaves the program.

    Args:
        instructions: Address-indexed program.
        config: Execution configuration (step limit, verbosity, top-level return mode).
        output: Receives values popped by ``print``.

    Returns:
        Tuple of (final VMState, ExecutionStats).
    """
    return _execute(instructions, config, output, None)


def execute_program_traced(
    instructions: list[Instruction],
    config: VMConfig = VMConfig(),
    output: OutputFn = print,
) -> tuple[VMState, ExecutionTrace]:
    """Run like execute_program() but snapshot the machine before every step."""
    steps: list[TraceStep] = []
    vm, stats = _execute(instructions, config, output, steps.append)
    return vm, ExecutionTrace(steps=steps, stats=stats, final_stack=tuple(vm.stack))


def run(
    source: str,
    config: VMConfig = VMConfig(),
    output: OutputFn = print,
) -> VMState:
    """End-to-end: lex → parse → generate → execute.

    Args:
        source: Program text.
        config: Execution configuration; ``verbose`` also prints the
            generated listing and the pipeline statistics.
        output: Receives values popped by ``print``.
    """
    pipeline_start = time.perf_counter()
    stats = PipelineStats(
        source_bytes=len(source.encode("utf-8")),
        source_lines=source.count("\n")
        + (1 if source and not source.endswith("\n") else 0),
    )

    t0 = time.perf_counter()
    tokens = tokenize(source)
    stats.lex_time = time.perf_counter() - t0
    stats.token_count = len(tokens)

    t0 = time.perf_counter()
    tree = parse(tokens)
    stats.parse_time = time.perf_counter() - t0
    stats.toplevel_elements = len(tree.children)

    t0 = time.perf_counter()
    generator = CodeGenerator()
    instructions = generator.generate(tree)
    stats.codegen_time = time.perf_counter() - t0
    stats.instruction_count = len(instructions)
    stats.function_count = len(generator.functions)
    stats.call_site_count = call_site_count(instructions)

    if config.verbose:
        print("═══ Listing ═══")
        for address, inst in enumerate(instructions):
            print(f"  {address:>4}  {inst}")
        print()

    t0 = time.perf_counter()
    vm, exec_stats = execute_program(instructions, config, output)
    stats.execution_time = time.perf_counter() - t0
    stats.execution_steps = exec_stats.steps
    stats.max_stack_size = exec_stats.max_stack_size
    stats.total_time = time.perf_counter() - pipeline_start

    if config.verbose:
        print()
        print(stats.report())

    return vm
