"""
src/orchestrator/prompts.py

Text blocks for the tooling system message.
"""


# Shown under the user's own prompt, after the tool catalog
TOOL_CALL_INSTRUCTIONS: str = (
    "When you need to operate the app, reply with JSON in the form:\n"
    "```\n"
    '{"tool": "<tool_name>", "arguments": {"key": "value"}}\n'
    "```\n"
    "Wrap the JSON in a Markdown code block exactly as shown so it can be parsed reliably.\n"
    "Otherwise, answer with natural language guidance."
)

TOOLING_TEMPLATE: str = (
    "{prompt}\n"
    "\n"
    "Available tools:\n"
    "{tool_list}\n"
    "\n"
    "{instructions}\n"
)

NO_PARAMETERS: str = "- No parameters."

# Follow-up text attached to a screenshot result
SCREENSHOT_SAVED: str = "Screenshot captured and saved to {path}."
SCREENSHOT_DISCLAIMER: str = (
    "Automated visual analysis is not available. "
    "A human must review the image to describe what is on screen."
)
SCREENSHOT_NOT_SAVED: str = "Screenshot captured, but it could not be saved: {error}"

REPEATED_TOOL_REQUEST: str = "Repeated tool request detected, stopping automation."

# Why a start request was refused
NO_WINDOW_SELECTED: str = "Select a window before starting automation."
NO_INSTRUCTION: str = "Type an instruction first."
ALREADY_RUNNING: str = "An automation is already running."
