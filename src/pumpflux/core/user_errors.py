"""User-friendly error formatting for pumpflux.

This module provides base classes for creating clear, actionable error
messages that tell the user what went wrong and how to recover.
"""

from typing import Optional


class UserFriendlyError(Exception):
    """Base class for user-friendly errors with structured formatting.

    Every error follows a three-part structure:
    1. WHAT went wrong (title)
    2. WHY it failed (explanation)
    3. HOW to fix it (suggestions)
    """

    def __init__(
        self,
        title: str,
        explanation: str,
        suggestions: Optional[list[str]] = None,
        technical_details: Optional[str] = None,
    ):
        self.title = title
        self.explanation = explanation
        self.suggestions = suggestions or []
        self.technical_details = technical_details

        message = f"{title}\n\n{explanation}"
        super().__init__(message)

    def format_for_cli(self, verbose: bool = False) -> str:
        """Format the error for CLI display.

        Args:
            verbose: Whether to include technical details

        Returns:
            Formatted error message for terminal display
        """
        lines = [f"Error: {self.title}", ""]

        if self.explanation:
            lines.append(self.explanation)
            lines.append("")

        if self.suggestions:
            lines.append("To fix this:")
            if len(self.suggestions) == 1:
                lines.append(f"  {self.suggestions[0]}")
            else:
                for i, suggestion in enumerate(self.suggestions, 1):
                    lines.append(f"  {i}. {suggestion}")
            lines.append("")

        if verbose and self.technical_details:
            lines.append("Technical details:")
            lines.append(self.technical_details)
            lines.append("")
        elif not verbose and self.technical_details:
            lines.append("Run with --verbose for technical details.")

        return "\n".join(lines).strip()


class ApiUnavailableError(UserFriendlyError):
    """The PumpFlux API could not be reached or returned an error."""

    def __init__(self, base_url: str, technical_details: Optional[str] = None):
        super().__init__(
            title="PumpFlux API request failed",
            explanation=f"The server at {base_url} did not return a usable response.",
            suggestions=[
                "Check the API address: pumpflux settings show",
                "Change it: pumpflux settings set-api-url <url>",
                "Try again in a moment if the server is restarting",
            ],
            technical_details=technical_details,
        )


class NodeTypeMissingError(UserFriendlyError):
    """A workflow node references a service with no known definition."""

    def __init__(self, service: str, known_services: Optional[list[str]] = None):
        if known_services:
            explanation = "Known services:\n" + "\n".join(f"  • {s}" for s in sorted(known_services))
        else:
            explanation = "No node-type definitions are available."

        super().__init__(
            title=f"Unknown service '{service}'",
            explanation=explanation,
            suggestions=[
                "List node types: pumpflux node-types list",
                "Register a definition: pumpflux node-types create --file definition.json",
            ],
        )
