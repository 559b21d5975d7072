"""Insight prompt construction - Pure functions.

Builds the text prompt sent to the language model from a user question
and a StatsSummary. Output is deterministic for a given input.
"""

from src.core.stats import StatsSummary


# Canned questions offered next to the chat input
QUICK_QUESTIONS = (
    "Where was the strongest earthquake?",
    "Show me recent significant activity",
    "What regions are most active?",
    "Analyze today's seismic trends",
    "Any tsunami threats?",
)

# The only output directives the model is given
FORMATTING_INSTRUCTIONS = (
    "Use ONLY plain text, no markdown formatting",
    "Do NOT use **bold**, *italic*, or any special formatting",
    "Use simple bullet points with • instead of asterisks or dashes",
    "Use emojis very sparingly (1-2 at most if relevant)",
    "Keep paragraphs short and separate ideas with a blank line",
)

RESPONSE_CHECKLIST = (
    "A direct answer to the user's question",
    "Relevant insights from the data",
    "Any patterns or notable observations",
)


def format_top_events(summary: StatsSummary) -> list[str]:
    """Format the ranked top events as prompt lines.

    Pure function.
    """
    return [
        f"{t.rank}. M{t.magnitude:.1f} at {t.location}"
        for t in summary.top_events
    ]


def build_prompt(question: str, summary: StatsSummary) -> str:
    """Build the language-model prompt for a question.

    Pure function.

    Args:
        question: The user's question, included verbatim
        summary: Statistics over the event set being discussed

    Returns:
        Prompt text
    """
    lines = [
        "You are an earthquake analysis assistant. Analyze the following "
        "seismic data and provide a helpful response to the user's question.",
        "",
        f'USER QUESTION: "{question}"',
        "",
        "EARTHQUAKE DATA SUMMARY:",
        f"- Total earthquakes: {summary.total}",
        f"- Magnitude range: {summary.min_magnitude:.1f} to {summary.max_magnitude:.1f}",
        f"- Average magnitude: {summary.average_magnitude:.2f}",
        f"- Significant earthquakes (M4.5+): {summary.significant_count}",
        f"- Recent activity (last hour): {summary.recent_count} events",
        f"- Top {len(summary.top_events)} strongest earthquakes:",
    ]
    lines.extend(f"  {line}" for line in format_top_events(summary))

    lines.append("")
    lines.append("IMPORTANT FORMATTING INSTRUCTIONS:")
    lines.extend(f"- {instruction}" for instruction in FORMATTING_INSTRUCTIONS)

    lines.append("")
    lines.append("Please provide:")
    lines.extend(f"{i}. {item}" for i, item in enumerate(RESPONSE_CHECKLIST, start=1))

    lines.append("")
    lines.append(
        "Be concise but helpful. If the question can't be answered with the "
        "available data, suggest what information would be needed."
    )

    return "\n".join(lines)
