"""Bridge definitions. Each module exposes ``catalog`` and ``create_bridge()``."""

ROLE = "You are a member of my elite software engineering team."


def planning_prompt(
    project_description: str,
    planning_focus: str,
    constraints: str | None,
    goals: str | None,
) -> str:
    """The collaborative-planning prompt, shared by every bridge."""
    parts = [
        f"{ROLE} Let's collaborate on {planning_focus} for this project:",
        f"Project: {project_description}",
    ]
    if constraints:
        parts.append(f"Constraints: {constraints}")
    if goals:
        parts.append(f"Goals: {goals}")
    parts.append(
        "Please help me create a comprehensive plan with actionable steps "
        "and considerations."
    )
    return "\n\n".join(parts)
