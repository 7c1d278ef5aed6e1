"""Prompt text and generation parameters for the guidance backend."""

GUIDANCE_MODEL = "gemini/gemini-1.5-flash"
DIRECTIVE_MARKER = "CAD_PROMPT:"

INSTRUCTION_TEMPLATE = (
    "Act as a technical educator. First explain the concept clearly, then provide "
    "a CAD generation prompt using this format:\n"
    f"{DIRECTIVE_MARKER} [Detailed description of a 3D model that visualizes key "
    "components from your explanation]\n"
    "\n"
    "User Query: {query}"
)

DEGRADED_EXPLANATION = "I'm having trouble visualizing that. Let me try again..."
DIRECTIVE_FALLBACK_PREFIX = "3D model showing: "

GENERATION_PARAMS = {
    "temperature": 0.7,
    "top_p": 0.95,
    "top_k": 40,
    "max_tokens": 2048,
}

# Content is technical and educational, so every category is left unblocked.
SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
]


def render_instruction(query: str) -> str:
    return INSTRUCTION_TEMPLATE.format(query=query)


def synthesize_directive(query: str) -> str:
    return f"{DIRECTIVE_FALLBACK_PREFIX}{query}"
