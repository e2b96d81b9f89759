"""Error Handler - readable error messages for logs and API responses."""

from typing import Any, Optional

import requests


def format_error_message(
    operation: str,
    error: Exception,
    context: Optional[dict] = None,
    suggestion: Optional[str] = None,
) -> str:
    """
    Format a user-friendly error message.

    Args:
        operation: What operation was being performed (e.g., "Synthesizing line 3")
        error: The exception that occurred
        context: Additional context (e.g., {"run_id": "3f2a...", "speaker": "woman"})
        suggestion: Optional suggestion for how to fix the issue

    Returns:
        Formatted error message
    """
    error_type = type(error).__name__
    error_msg = str(error)

    context_str = ""
    if context:
        context_parts = [f"{k}={v}" for k, v in context.items()]
        context_str = f" ({', '.join(context_parts)})"

    message = f"❌ {operation} failed{context_str}\n"
    message += f"   Error: {error_type}: {error_msg}"

    if suggestion:
        message += f"\n   💡 Suggestion: {suggestion}"

    return message


def upstream_error_message(response: Optional[requests.Response]) -> str:
    """
    Extract the message a Google API returned in its error envelope.

    Falls back to the status code and a truncated body when the response is
    not the usual {"error": {"message": ...}} JSON.
    """
    if response is None:
        return "no response"

    try:
        payload: Any = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return f"{response.status_code}: {error['message']}"
        if isinstance(error, str) and error:
            return f"{response.status_code}: {error}"

    body = (response.text or "").strip()
    if len(body) > 300:
        body = body[:300] + "..."
    return f"{response.status_code}: {body}" if body else f"status {response.status_code}"


def get_fallback_suggestion(service: str, error: Exception) -> Optional[str]:
    """
    Get a suggestion for how to handle a service failure.

    Args:
        service: Service name ("Script Generation", "TTS", "Background Video")
        error: The exception

    Returns:
        Suggestion string or None
    """
    error_msg = str(error).lower()

    if "api key" in error_msg or "401" in error_msg or "403" in error_msg:
        return "Check the Google Cloud API key and that the API is enabled for it."
    if "quota" in error_msg or "429" in error_msg or "rate limit" in error_msg:
        return "Quota or rate limit exceeded. Wait a few minutes and submit the request again."
    if "timeout" in error_msg or "connection" in error_msg:
        return "Network error. Check connectivity to the upstream service and retry."

    if service == "Script Generation":
        return "The model output was not a JSON list of lines. Retry the request."
    if service == "Background Video":
        return "Check the configured default and library video URLs."
    if service == "Media":
        return "Check that the background video is a readable video file."

    return None
