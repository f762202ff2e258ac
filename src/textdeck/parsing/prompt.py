# src/textdeck/parsing/prompt.py
from __future__ import annotations

EXAMPLE = """[
  {
    "title": "AI in practice",
    "coreIdea": "AI is changing how work gets done",
    "arguments": ["Machine learning breakthroughs", "Deep learning applications", "Natural language processing"]
  }
]"""


def build_parse_prompt(text: str) -> str:
    """Prompt asking the model for a bare JSON array of {title, coreIdea, arguments}."""
    return (
        "Convert the following text into presentation slides and return them strictly as JSON.\n"
        "\n"
        "Requirements:\n"
        "1. The output must be a valid JSON array.\n"
        "2. Each slide object has: title, coreIdea (one-sentence core idea), arguments (array of supporting points).\n"
        "3. Keep each title within 15 words.\n"
        "4. Summarize the core idea in a single sentence.\n"
        "5. Provide 3-5 arguments per slide, each no longer than 20 words.\n"
        "6. Write in the same language as the source text.\n"
        "7. Do not include any explanation, return only the JSON.\n"
        "\n"
        f"Example output:\n{EXAMPLE}\n"
        "\n"
        f"Text to convert:\n{text}\n"
        "\n"
        "Return only the valid JSON array described above."
    )
