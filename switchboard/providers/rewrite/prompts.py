"""
Rewrite prompt assembly.

Builds the chat messages for a rewrite request from the caller's
instructions, selected presets, style/content augmentation text and,
on a quality retry, the escalation constraint.
"""

from __future__ import annotations

from switchboard.orchestration.types import CapabilityRequest

from ..chat import Message

SYSTEM_PROMPT = (
    "You are an expert text transformation assistant. You rewrite text according "
    "to the instructions given. Return only the rewritten text, as plain prose, "
    "with no preface, commentary or markdown formatting."
)

DEFAULT_INSTRUCTIONS = (
    "Rewrite the text so that it is insightful, well organized and direct. "
    "Develop every point; keep all of the original content."
)

# Atomic presets map to one instruction line. Combo presets list atomic
# preset names separated by ";".
PRESET_TEXT: dict[str, str] = {
    "Mixed cadence + clause sprawl": (
        "Alternate short and long sentences; allow some long sentences to wander with extra clauses."
    ),
    "Asymmetric emphasis": "Over-elaborate one point; compress or skate past another.",
    "One aside": "Add a quick parenthetical remark, factual rather than jokey.",
    "Hedge twice": 'Use two mild uncertainty markers ("probably", "seems", "roughly", "I think").',
    "Local disfluency": "Keep one redundant or slightly awkward phrase that still makes sense.",
    "Analogy injection": "Insert a short, concrete comparison to something unrelated but illustrative.",
    "Topic snap": "Abruptly shift focus once, then return.",
    "Friction detail": "Drop in a small, seemingly unnecessary but plausible real-world detail.",
    "Compression light": "Cut filler and merge short clauses without changing meaning. Target about 15% shorter.",
    "Compression medium": "Trim hard, delete throat-clearing and tighten syntax. Target about 30% shorter.",
    "Compression heavy": "Cut redundancies and collapse repeats, keeping core claims. Target about 45% shorter.",
    "Mixed cadence": "Alternate short (5-12 words) and long (20-35 words) sentences; avoid uniform rhythm.",
    "Clause surgery": "Reorder main and subordinate clauses in about 30% of sentences without changing meaning.",
    "Front-load claim": "Put the main conclusion in the first sentence; evidence follows.",
    "Back-load claim": "Delay the main conclusion to the final two or three sentences.",
    "Seam/pivot": "Drop smooth connectors once; allow one abrupt thematic pivot.",
    "Imply one step": "Omit one obvious inferential step and leave it implicit.",
    "Conditional framing": "Recast one key sentence as 'If/Unless ..., then ...'. Keep content identical.",
    "Local contrast": "Use exactly one contrast marker (but/except/aside) to mark a boundary; add no new facts.",
    "Scope check": "Replace one absolute with a bounded form (e.g. 'in cases like these').",
    "Deflate jargon": "Swap nominalizations for plain verbs where safe (e.g. utilization to use).",
    "Kill stock transitions": "Delete 'Moreover', 'Furthermore' and 'In conclusion' everywhere.",
    "Hedge once": "Use exactly one hedge: probably, roughly or more or less.",
    "Drop intensifiers": "Remove 'very', 'clearly', 'obviously' and 'significantly'.",
    "Low-heat voice": "Prefer plain verbs; avoid showy synonyms.",
    "Concrete benchmark": "Replace one vague scale with a testable one (e.g. 'enough to X').",
    "Cull repeats": "Delete duplicated sentences and ideas; keep the strongest instance.",
    "No lists": "Output continuous prose; remove bullets and numbering.",
    "No meta": "No prefaces, apologies or phrases like 'as requested'.",
    "Exact nouns": "Replace ambiguous pronouns with exact nouns.",
    "Claim lock": "Do not add examples, scenarios or data not present in the source.",
    "Entity lock": "Keep names, counts and attributions exactly as given.",
    # Named styles
    "Academic": (
        "Rewrite in a formal academic style with precise terminology, a scholarly tone and a third-person perspective."
    ),
    "Professional": "Use clear, concise professional language suitable for business communication.",
    "Creative": "Use vivid imagery, varied sentence structure and engaging narrative elements.",
    "Concise": "Make the text as brief as possible while preserving all key information.",
    "Elaborate": "Expand on the ideas, adding depth, examples and explanations.",
    "Intelligent": (
        "Write like someone extremely intelligent who is neither long-winded nor pedantic, "
        "explaining briskly and effectively."
    ),
    # Combos
    "Lean & Sharp": "Compression medium; Mixed cadence; Imply one step; Kill stock transitions",
    "Analytic": "Clause surgery; Front-load claim; Scope check; Exact nouns; No lists",
}


def _is_combo(text: str) -> bool:
    parts = [p.strip() for p in text.split(";")]
    return len(parts) > 1 and all(p in PRESET_TEXT for p in parts)


def expand_presets(selected: list[str] | tuple[str, ...]) -> list[str]:
    """
    Expand preset names to atomic presets, preserving order.

    Combo presets contribute their atomic members; unknown names and
    duplicates are dropped.
    """
    expanded: list[str] = []
    seen: set[str] = set()

    def add(name: str) -> None:
        if name not in seen:
            seen.add(name)
            expanded.append(name)

    for name in selected:
        text = PRESET_TEXT.get(name)
        if text is None:
            continue
        if _is_combo(text):
            for member in text.split(";"):
                add(member.strip())
        else:
            add(name)
    return expanded


def build_preset_block(presets: list[str] | tuple[str, ...], instructions: str | None = None) -> str:
    lines = [f"- {PRESET_TEXT[name]}" for name in expand_presets(presets)]
    if instructions and instructions.strip():
        lines.append(f"- {instructions.strip()}")
    if not lines:
        return ""
    return "Apply ONLY these rewrite instructions (no other goals):\n" + "\n".join(lines)


def build_rewrite_messages(request: CapabilityRequest) -> list[Message]:
    """Chat messages for a rewrite request."""
    options = request.options
    sections: list[str] = []

    block = build_preset_block(options.presets, options.instructions)
    sections.append(block or DEFAULT_INSTRUCTIONS)

    if options.style_text:
        sections.append(
            "Match the writing style of this sample (style only, not its content):\n"
            f'"""\n{options.style_text}\n"""'
        )
    if options.content_text:
        sections.append(
            "Where relevant, draw on this reference material:\n"
            f'"""\n{options.content_text}\n"""'
        )
    if options.escalation:
        sections.append(options.escalation)

    sections.append(f'Text to rewrite:\n"""\n{request.text}\n"""')
    return [Message.system(SYSTEM_PROMPT), Message.user("\n\n".join(sections))]


__all__ = [
    "DEFAULT_INSTRUCTIONS",
    "PRESET_TEXT",
    "SYSTEM_PROMPT",
    "build_preset_block",
    "build_rewrite_messages",
    "expand_presets",
]
