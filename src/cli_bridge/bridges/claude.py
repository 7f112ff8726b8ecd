"""Bridge to Claude Code, driven through ``claude --print`` with the prompt on stdin."""

from datetime import timedelta
from typing import Literal

from cli_bridge import environment
from cli_bridge.bridges import ROLE, planning_prompt
from cli_bridge.config import BridgeConfig, PromptDelivery
from cli_bridge.tools import ToolCatalog

DEFAULT_TIMEOUT = timedelta(seconds=280)
EMPTY_OUTPUT = "Claude Code completed but returned no output."

BrainstormType = Literal[
    "architecture", "debugging", "optimization", "design_patterns", "general"
]
AnalysisType = Literal[
    "security",
    "performance",
    "maintainability",
    "best_practices",
    "refactoring",
    "debugging",
]
PlanningFocus = Literal[
    "implementation_plan",
    "architecture_review",
    "risk_assessment",
    "alternative_approaches",
]

catalog = ToolCatalog()


@catalog.tool(heading="## Claude Code Brainstorming Session")
def brainstorm_with_claude(
    *,
    problem_description: str,
    context: str | None = None,
    brainstorm_type: BrainstormType,
    include_code_analysis: bool = False,
) -> str:
    """Get Claude Code's perspective on complex technical challenges and brainstorm solutions

    problem_description: Detailed description of the technical challenge or problem
    context: Additional context about your codebase, constraints, or environment
    brainstorm_type: Type of brainstorming session
    include_code_analysis: Whether to include analysis of current codebase
    """
    parts = [
        f"{ROLE} I'm working on a {brainstorm_type} challenge and would like "
        "your perspective.",
        f"Problem: {problem_description}",
    ]
    if context:
        parts.append(f"Context: {context}")
    if include_code_analysis:
        parts.append(
            "Please also analyze the relevant code in the current directory and "
            "incorporate your findings into the brainstorming session."
        )
    parts.append(
        "Please help me brainstorm solutions, approaches, and considerations "
        "for this challenge."
    )
    return "\n\n".join(parts)


@catalog.tool(
    heading="## Claude Code Analysis: {analysis_type}\n\n"
    "**Target:** {file_or_directory_path}"
)
def get_claude_code_analysis(
    *,
    file_or_directory_path: str,
    analysis_type: AnalysisType,
    specific_concerns: str | None = None,
) -> str:
    """Have Claude Code analyze specific files or directories for various aspects

    file_or_directory_path: Path to the file or directory to analyze
    analysis_type: Type of analysis to perform
    specific_concerns: Specific areas or concerns to focus on
    """
    parts = [
        f"{ROLE} Please perform a {analysis_type} analysis of: "
        f"{file_or_directory_path}"
    ]
    if specific_concerns:
        parts.append(f"Focus on these specific concerns: {specific_concerns}")
    parts.append("Please provide detailed insights and recommendations.")
    return "\n\n".join(parts)


@catalog.tool(
    heading="## Collaborative Planning Session\n\n**Focus:** {planning_focus}"
)
def collaborative_planning(
    *,
    project_description: str,
    planning_focus: PlanningFocus,
    constraints: str | None = None,
    goals: str | None = None,
) -> str:
    """Collaborate with Claude Code on implementation planning and architectural decisions

    project_description: Description of the project or feature to plan
    planning_focus: Focus of the planning session
    constraints: Technical or business constraints to consider
    goals: Specific goals or success criteria
    """
    return planning_prompt(project_description, planning_focus, constraints, goals)


def create_bridge() -> BridgeConfig:
    return BridgeConfig(
        name="claude-bridge",
        title="Claude Code Bridge Server",
        summary=(
            "MCP Bridge Server enabling Gemini CLI to consult with Claude Code\n"
            "for brainstorming and collaborative problem-solving."
        ),
        program=environment.get_str("CLAUDE_PROGRAM", "claude"),
        program_args=("--print",),
        delivery=PromptDelivery.STDIN,
        timeout=environment.get_timedelta("CLAUDE_TIMEOUT", DEFAULT_TIMEOUT),
        catalog=catalog,
        empty_output_placeholder=EMPTY_OUTPUT,
    )
