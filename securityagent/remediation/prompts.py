"""
Remediation prompt construction.
"""

from typing import Dict, Iterable, List

from securityagent.core.findings import Category, RemediationPrompt, sort_categories


ROLE_LINE = "You are a senior security engineer."

# One directive per category, in canonical category order
CATEGORY_DIRECTIVES: Dict[Category, str] = {
    Category.SQL_INJECTION: "- SQL Injection: use parameterized queries instead of string concatenation or interpolation",
    Category.XSS: "- Cross-Site Scripting (XSS): escape user input before embedding it in HTML",
    Category.COMMAND_INJECTION: "- Command Injection: validate or sanitize input and avoid shell-interpreting execution such as exec",
    Category.SECRET_LIKE: "- Hardcoded secrets: read them from environment variables or external configuration (e.g. process.env.SECRET_NAME)",
}

CONTRACT_DIRECTIVES = (
    "- Do NOT change business logic or observable behavior",
    "- Keep the code runnable",
    "- Return ONLY the complete corrected source code",
    "- No explanations, no prose, no markdown code fences",
)


class RemediationPromptBuilder:
    """
    Builds the instruction payload for one flagged file.

    The same inputs always produce the same prompt. Content is passed
    through in full; size limits are the backend's concern.
    """

    def build(
        self,
        file_path: str,
        content: str,
        categories: Iterable[Category],
    ) -> RemediationPrompt:
        ordered = sort_categories(categories)

        instructions: List[str] = [ROLE_LINE, "", "Refactor this code to fix:", ""]
        instructions.extend(CATEGORY_DIRECTIVES[c] for c in ordered)
        instructions.extend(CONTRACT_DIRECTIVES)

        return RemediationPrompt(
            file_path=file_path,
            original_content=content,
            instructions=tuple(instructions),
            categories=frozenset(ordered),
        )
