"""Error handling utilities for orbit."""

from __future__ import annotations

from typing import Any


AUTH_MARKERS = ("unauthorized", "forbidden", "authentication", "invalid token", "access denied")


def _is_auth_error(lowered: str) -> bool:
    return any(marker in lowered for marker in AUTH_MARKERS)


def format_error_message(operation: str, error: Exception, context: dict[str, Any] | None = None) -> str:
    """Format a user-friendly error message based on the exception type and context."""
    error_str = str(error)
    lowered = error_str.lower()
    context = context or {}

    # Connection-related errors
    if "connection" in lowered or "timeout" in lowered or "timed out" in lowered:
        profile = context.get("profile", "the registry")
        return (
            f"Failed to connect to {profile}. "
            f"Please check the endpoint and your network. "
            f"Original error: {error_str}"
        )

    # Authentication errors
    if _is_auth_error(lowered):
        return (
            f"Authentication failed. Please check the access token for this profile. "
            f"Original error: {error_str}"
        )

    # Project/target not found
    if "not found" in lowered or "does not exist" in lowered:
        if "target" in operation.lower():
            project = context.get("project", "project")
            return (
                f"Target not found in '{project}'. "
                f"Use 'orbit targets list {project}' to see available targets. "
                f"Original error: {error_str}"
            )
        elif "project" in operation.lower():
            return (
                f"Project not found. "
                f"Use 'orbit projects list' to see available projects. "
                f"Original error: {error_str}"
            )

    if "graphql error" in lowered:
        return f"The registry rejected the request to {operation}. Original error: {error_str}"

    # Generic error with helpful context
    return f"Failed to {operation}: {error_str}"


def suggest_troubleshooting_steps(operation: str, error: Exception) -> list[str]:
    """Suggest troubleshooting steps based on the operation and error."""
    error_str = str(error).lower()
    suggestions = []

    if "connection" in error_str or "timeout" in error_str or "timed out" in error_str:
        suggestions.extend([
            "Verify the profile endpoint is reachable: curl -I <endpoint>",
            "Ensure the correct ORBIT_CONFIG path is set",
            "Increase the profile timeout if the registry is slow",
        ])

    elif _is_auth_error(error_str):
        suggestions.extend([
            "Check the token in your profile (or the variable it references)",
            "Make sure the token has read access to the organization",
        ])

    elif "organization" in error_str:
        suggestions.extend([
            "Set 'organization' for the profile in your config file",
        ])

    elif "not found" in error_str or "does not exist" in error_str:
        if "target" in operation.lower():
            suggestions.extend([
                "List available targets: orbit targets list <project>",
                "Check the project and target slug spelling",
            ])
        else:
            suggestions.extend([
                "List available projects: orbit projects list",
                "Check the project slug spelling",
            ])

    if not suggestions:
        suggestions.extend([
            "Check the logs with -v/--verbose flag for more details",
            "Verify your configuration file is correct",
        ])

    return suggestions


def format_config_error(error: Exception) -> str:
    """Format configuration-related error messages."""
    error_str = str(error)

    if "no config file found" in error_str.lower():
        return (
            "No configuration file found. Please either:\n"
            "  • Set ORBIT_CONFIG=/path/to/config.yaml, or\n"
            "  • Create ~/.config/orbit/config.yaml\n"
            "\n"
            "See the README for configuration examples."
        )

    if "profile not found" in error_str.lower():
        return (
            f"Profile configuration error: {error_str}\n"
            "Check your config file and ensure the profile is properly defined."
        )

    return f"Configuration error: {error_str}"
