"""Behavior-analysis prompt rendering."""

from __future__ import annotations

import re
from typing import List, Mapping, Optional

from akashchat.interfaces import ChatClient, CompletionOptions, CompletionResult, Message

REQUIRED_FIELDS = ("behavior", "antecedent", "consequence")
OPTIONAL_FIELDS = ("previous_attempts", "emotions_thoughts")
NOT_SPECIFIED = "None specified"
ANALYSIS_TEMPERATURE = 0.5
MARKER_RE = re.compile(r"<<([A-Z_]+)>>")

ANALYSIS_SYSTEM_PROMPT = (
    "You are a behavioral analysis expert who provides detailed, evidence-based analyses "
    "and practical suggestions. Format your response professionally with clear headings "
    "and avoid showing any internal thinking or raw markdown symbols."
)

ANALYSIS_TEMPLATE = """\
Functional behavioral analysis based on radical behaviorism and intervention technique suggestions

BEHAVIORAL DATA:
- Current behavior you want to analyze: "<<BEHAVIOR>>"
- Context or environment in which the behavior occurs: "<<ANTECEDENT>>"
- Immediate consequences of the analyzed behavior (what happens right after the behavior): \
"<<CONSEQUENCE>>"
- Previous attempts to change the analyzed behavior: "<<PREVIOUS_ATTEMPTS>>"
- Emotional or cognitive context (if applicable): "<<EMOTIONS_THOUGHTS>>"

INSTRUCTIONS:
1. First, perform a functional analysis based on radical behaviorism, considering:
   * The context/environment in which the behavior occurs and the immediate consequence \
of the behavior
   * Frequency and intensity of the behavior
   * Other contexts/environments where the same behavior occurs
   * Short and long-term consequences
   * Positive and negative reinforcement, and any punishment
   * Behavioral excesses and deficits (e.g., over- or under-reaction, lack of certain skills)
   * Emotional and cognitive factors influencing the behavior
   * Impact on daily functioning
   * Potential barriers to change
   * Strengths from previous attempts

2. Based on this analysis, suggest 3-4 practical habits. For each habit, provide:
   - Habit name: short and clear title
   - Description: brief explanation of the habit
   - Implementation: detailed step-by-step execution
   - Scientific basis: reference or evidence supporting this habit
   - Link to analysis: explain how the habit addresses specific behavioral patterns

3. After suggesting the habits, provide a habit review process for the user to track \
progress over time. Suggest how to review their progress after 2 weeks and adjust if necessary.

RESPONSE FORMAT (please use this format and the exact keywords - DO NOT CHANGE THE WORD \
'Habits:'):
GENERAL:
[Behavioral analysis, more than 3 paragraphs]

Habits:
1. **[Habit name]**
   - **Description:** [brief description]
   - **Implementation:** [detailed steps]
   - **Scientific Basis:** [reference or evidence]
   - **Link to analysis:** [explanation of how this habit addresses the specific behavior]

[Repeat format for each suggested habit]"""


def build_analysis_prompt(fields: Mapping[str, Optional[str]]) -> str:
    """Render the functional-analysis request for one observed behavior.

    ``behavior``, ``antecedent`` and ``consequence`` must be present; the
    optional fields fall back to "None specified" when missing or empty.
    """
    missing = [name for name in REQUIRED_FIELDS if name not in fields]
    if missing:
        raise ValueError(f"Missing behavior analysis fields: {', '.join(missing)}")

    values = {name.upper(): fields[name] or "" for name in REQUIRED_FIELDS}
    values.update({name.upper(): fields.get(name) or NOT_SPECIFIED for name in OPTIONAL_FIELDS})
    # Single pass so marker text inside a field value is left alone.
    return MARKER_RE.sub(lambda m: values[m.group(1)], ANALYSIS_TEMPLATE)


def build_analysis_messages(fields: Mapping[str, Optional[str]]) -> List[Message]:
    return [
        Message(role="system", content=ANALYSIS_SYSTEM_PROMPT),
        Message(role="user", content=build_analysis_prompt(fields)),
    ]


def analyze_behavior(
    client: ChatClient,
    fields: Mapping[str, Optional[str]],
    model: Optional[str] = None,
) -> CompletionResult:
    """Ask the model for a functional analysis and habit suggestions."""
    return client.complete(
        build_analysis_messages(fields),
        model=model,
        options=CompletionOptions(temperature=ANALYSIS_TEMPERATURE),
    )


__all__ = [
    "ANALYSIS_SYSTEM_PROMPT",
    "analyze_behavior",
    "build_analysis_messages",
    "build_analysis_prompt",
]
