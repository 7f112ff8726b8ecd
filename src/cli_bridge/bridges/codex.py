"""Bridge to the Codex CLI, driven through ``codex -q <prompt>``."""

from cli_bridge import environment
from cli_bridge.bridges import ROLE, planning_prompt
from cli_bridge.config import BridgeConfig, PromptDelivery
from cli_bridge.tools import ToolCatalog

catalog = ToolCatalog()


@catalog.tool(
    heading="## Codex Brainstorming Session\n\n**Challenge:** {problem_description}"
)
def brainstorm_with_codex(
    *,
    problem_description: str,
    context: str | None = None,
    approach_preference: str | None = None,
) -> str:
    """Get Codex's perspective on technical challenges and coding problems

    problem_description: Detailed description of the technical challenge or problem
    context: Additional context about your project, tech stack, or constraints
    approach_preference: Any preferred approaches or technologies to consider
    """
    parts = [
        f"{ROLE} Help me brainstorm solutions for this technical challenge:",
        problem_description,
    ]
    if context:
        parts.append(f"Context: {context}")
    if approach_preference:
        parts.append(f"Preferred approach: {approach_preference}")
    parts.append(
        "Please provide multiple solution approaches with pros/cons and "
        "implementation considerations."
    )
    return "\n\n".join(parts)


@catalog.tool(
    heading="## Codex Code Analysis: {analysis_type}\n\n"
    "**Target:** {file_or_directory_path}"
)
def get_codex_code_analysis(
    *,
    file_or_directory_path: str,
    analysis_type: str = "general",
    specific_concerns: str | None = None,
) -> str:
    """Have Codex analyze specific files or directories for code quality, security, or improvements

    file_or_directory_path: Path to the file or directory to analyze
    analysis_type: Type of analysis: 'security', 'performance', 'architecture', 'refactoring', 'debugging' or 'general'
    specific_concerns: Specific areas of concern or questions about the code
    """
    parts = [f"{ROLE} Analyze this {analysis_type} for: {file_or_directory_path}"]
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
    planning_focus: str,
    constraints: str | None = None,
    goals: str | None = None,
) -> str:
    """Work with Codex on planning complex implementations and architectures

    project_description: Description of the project or feature you're planning
    planning_focus: What aspect to plan: 'implementation', 'architecture', 'testing', 'deployment', etc.
    constraints: Any constraints (time, resources, technology, etc.)
    goals: Specific goals or success criteria
    """
    return planning_prompt(project_description, planning_focus, constraints, goals)


def create_bridge() -> BridgeConfig:
    return BridgeConfig(
        name="codex-bridge",
        title="Codex CLI Bridge Server",
        summary=(
            "MCP Bridge Server enabling Gemini CLI to consult with Codex CLI\n"
            "for code generation, analysis, and collaborative problem-solving."
        ),
        program=environment.get_str("CODEX_PROGRAM", "codex"),
        program_args=("-q",),
        delivery=PromptDelivery.ARGUMENT,
        # unbounded unless CLI_BRIDGE_CODEX_TIMEOUT is set
        timeout=environment.get_optional_timedelta("CODEX_TIMEOUT"),
        catalog=catalog,
    )
