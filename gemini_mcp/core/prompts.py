import re
import textwrap

########################################################
########   Change mode                         #########
########################################################

_FILE_TOKEN_PATTERN = re.compile(r"file:(\S+)")

CHANGE_MODE_TEMPLATE = textwrap.dedent(
    """\
    [CHANGEMODE INSTRUCTIONS]
    You are generating code modifications that will be applied by an automated system.
    The output format is critical: edits are applied programmatically without human review.

    INSTRUCTIONS:
    1. Analyze each provided file thoroughly
    2. Identify every location that must change to satisfy the user request
    3. Output each change in the exact format below
    4. The OLD section must be EXACTLY what appears in the file
    5. Provide complete code blocks that directly replace OLD
    6. Verify that line numbers are accurate

    CRITICAL REQUIREMENTS:
    1. Follow the output format exactly, with no deviations
    2. The OLD text must be a unique, exact match that can be found with a plain text search
    3. Include enough surrounding lines to make OLD unique
    4. Copy OLD exactly, including whitespace, indentation and line breaks
    5. Never use partial lines

    OUTPUT FORMAT:
    **FILE: [filename]:[line_number]**
    ```
    OLD:
    [exact code to be replaced]
    NEW:
    [replacement code]
    ```

    EXAMPLE:
    **FILE: src/utils/helper.py:100**
    ```
    OLD:
    def get_message():
        return "Hello World"
    NEW:
    def get_message():
        return "Hello Universe!"
    ```

    USER REQUEST:
    {prompt}
    """
)


def rewrite_file_references(prompt: str) -> str:
    """Turn ``file:path`` tokens into the CLI's ``@path`` inclusion syntax."""
    return _FILE_TOKEN_PATTERN.sub(r"@\1", prompt)


def build_change_mode_prompt(prompt: str) -> str:
    return CHANGE_MODE_TEMPLATE.format(prompt=rewrite_file_references(prompt))


########################################################
########   Brainstorming                       #########
########################################################

METHODOLOGIES: dict[str, str] = {
    "divergent": textwrap.dedent(
        """\
        **Divergent Thinking Approach:**
        - Generate as many ideas as possible without self-censoring
        - Build on wild or seemingly impractical ideas
        - Combine unrelated concepts for unexpected solutions
        - Postpone evaluation until all ideas are generated"""
    ),
    "convergent": textwrap.dedent(
        """\
        **Convergent Thinking Approach:**
        - Refine and improve existing concepts
        - Synthesize related ideas into stronger solutions
        - Prioritize by feasibility and impact
        - Sketch implementation pathways for the top ideas"""
    ),
    "scamper": textwrap.dedent(
        """\
        **SCAMPER Creative Triggers:**
        - **Substitute:** What can be replaced?
        - **Combine:** What can be merged?
        - **Adapt:** What can be borrowed from other domains?
        - **Modify:** What can be magnified, minimized or altered?
        - **Put to other use:** How else can this be used?
        - **Eliminate:** What can be removed or simplified?
        - **Reverse:** What can be rearranged or reversed?"""
    ),
    "design-thinking": textwrap.dedent(
        """\
        **Human-Centered Design Thinking:**
        - **Empathize:** Consider user needs, pain points and contexts
        - **Define:** Frame problems from the user's perspective
        - **Ideate:** Generate user-focused solutions
        - **Prototype mindset:** Favor testable, iterative concepts"""
    ),
    "lateral": textwrap.dedent(
        """\
        **Lateral Thinking Approach:**
        - Make unexpected connections between unrelated fields
        - Challenge fundamental assumptions
        - Apply metaphors and analogies from other domains
        - Reverse conventional thinking patterns"""
    ),
}

DEFAULT_METHODOLOGY = "auto"
METHODOLOGY_NAMES = (*METHODOLOGIES, DEFAULT_METHODOLOGY)


def methodology_instructions(methodology: str, domain: str | None = None) -> str:
    if methodology in METHODOLOGIES:
        return METHODOLOGIES[methodology]
    lead = (
        f"Given the {domain} domain, apply the most effective combination of:"
        if domain
        else "Combine multiple methodologies:"
    )
    return (
        "**Adaptive Approach:**\n"
        f"{lead}\n"
        "- Divergent exploration with domain-specific knowledge\n"
        "- SCAMPER triggers and lateral thinking\n"
        "- A human-centered perspective for practical value"
    )


def build_brainstorm_prompt(
    prompt: str,
    methodology: str = DEFAULT_METHODOLOGY,
    domain: str | None = None,
    constraints: str | None = None,
    existing_context: str | None = None,
    idea_count: int = 12,
    include_analysis: bool = True,
) -> str:
    """Assemble a structured brainstorming prompt for the CLI."""
    sections = [
        "# BRAINSTORMING SESSION",
        f"## Core Challenge\n{prompt}",
        f"## Methodology Framework\n{methodology_instructions(methodology, domain)}",
    ]

    context_lines = []
    if domain:
        context_lines.append(
            f"**Domain Focus:** {domain}. Apply domain-specific knowledge and terminology."
        )
    if constraints:
        context_lines.append(f"**Constraints & Boundaries:** {constraints}")
    if existing_context:
        context_lines.append(f"**Background Context:** {existing_context}")
    if context_lines:
        sections.append("## Context\n" + "\n".join(context_lines))

    sections.append(
        "## Output Requirements\n"
        f"- Generate {idea_count} distinct, creative ideas\n"
        "- Each idea should be unique and non-obvious\n"
        "- Focus on actionable, implementable concepts\n"
        "- Give each idea a clear name and a brief explanation"
    )

    if include_analysis:
        sections.append(
            "## Analysis Framework\n"
            "For each idea, provide:\n"
            "- **Feasibility:** implementation difficulty (1-5)\n"
            "- **Impact:** potential value (1-5)\n"
            "- **Innovation:** uniqueness (1-5)\n"
            "- **Quick Assessment:** one-sentence evaluation"
        )
        idea_format = (
            "### Idea [N]: [Name]\n"
            "**Description:** [2-3 sentences]\n"
            "**Feasibility:** [1-5] | **Impact:** [1-5] | **Innovation:** [1-5]\n"
            "**Assessment:** [brief evaluation]"
        )
    else:
        idea_format = "### Idea [N]: [Name]\n**Description:** [2-3 sentences]"

    sections.append(f"## Format\n{idea_format}")
    sections.append(
        "Before finalizing, remove near-duplicates and make sure every idea satisfies "
        "the constraints.\n\nBegin brainstorming session:"
    )
    return "\n\n".join(sections)
