"""Run pipeline data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass

from . import constants


@dataclass(frozen=True)
class VMConfig:
    """Groups VM execution configuration.

    ``max_steps`` of ``None`` runs until the program counter leaves the
    program. With ``halt_on_toplevel_return`` off, ``ret`` in the
    top-level frame is inert and execution falls through to the next
    instruction.
    """

    max_steps: int | None = constants.DEFAULT_MAX_STEPS
    verbose: bool = False
    halt_on_toplevel_return: bool = True


@dataclass
class ExecutionStats:
    """Returned execution metrics from execute_program."""

    steps: int = 0
    max_stack_size: int = 0
    final_stack_size: int = 0
    halted_by_return: bool = False


@dataclass
class PipelineStats:
    """Timing and size statistics for each pipeline stage."""

    source_bytes: int = 0
    source_lines: int = 0

    # Stage timings (seconds)
    lex_time: float = 0.0
    parse_time: float = 0.0
    codegen_time: float = 0.0
    execution_time: float = 0.0
    total_time: float = 0.0

    # Output sizes
    token_count: int = 0
    toplevel_elements: int = 0
    instruction_count: int = 0
    function_count: int = 0
    call_site_count: int = 0

    # Execution stats
    execution_steps: int = 0
    max_stack_size: int = 0

    def report(self) -> str:
        lines = [
            "═══ Pipeline Statistics ═══",
            f"  Source: {self.source_lines} lines, {self.source_bytes} bytes",
            "",
            f"  {'Stage':<20} {'Time':>10}  {'Output':>30}",
            f"  {'─' * 20} {'─' * 10}  {'─' * 30}",
        ]

        stages = [
            ("Lex", self.lex_time, f"{self.token_count} tokens"),
            ("Parse", self.parse_time, f"{self.toplevel_elements} top-level elements"),
            (
                "Generate",
                self.codegen_time,
                f"{self.instruction_count} instructions, {self.function_count} functions",
            ),
            ("Execute (VM)", self.execution_time, f"{self.execution_steps} steps"),
        ]
        for name, t, output in stages:
            time_str = f"{t * 1000:>8.1f}ms"
            lines.append(f"  {name:<20} {time_str:>10}  {output:>30}")

        lines.append(f"  {'─' * 20} {'─' * 10}  {'─' * 30}")
        lines.append(f"  {'Total':<20} {self.total_time * 1000:>8.1f}ms")
        lines.append("")
        lines.append(f"  Call sites: {self.call_site_count}")
        lines.append(f"  Peak stack size: {self.max_stack_size}")
        return "\n".join(lines)
