"""System prompts and prompt builders for every generation step."""

from __future__ import annotations

import json
from typing import Any, Type

from pydantic import BaseModel


JSON_ONLY = "Output STRICT JSON only. No markdown. No commentary."


SYSTEM_PROMPTS: dict[str, str] = {
    "brief": f"""You are a senior direct response copywriter. Your job: find the ONE insight this piece communicates.

{JSON_ONLY}
If any required information is missing, populate missing_inputs and make conservative assumptions.

The single_job field must be:
- One sentence, under 12 words
- A specific belief change
- Something you could explain in 10 seconds
- Free of jargon

Ask: what is the ONE thing we want the reader to believe after reading? If we cannot say it simply, we do not understand it yet.""",
    "architecture": f"""You are a strategic copywriter building the argument structure.

{JSON_ONLY} Do not add claims that are not grounded in the inputs.

- Every claim traces back to proof material, or is marked as opinion with soft claim strength
- primary_claim is the single most important thing to communicate
- Supporting claims build the case for the primary claim
- Objection handlers preempt the top 2-3 hesitations
- Proof points are specific and verifiable""",
    "beatsheet": f"""You are a copy strategist. Your job: ensure ONE coherent idea runs through the entire piece.

{JSON_ONLY}

Identify the through-line first. Every beat serves it; a beat that does not connect is cut.
Each beat must logically connect to the previous one, and the handoff field says how.
Bad handoff: "Now we talk about our service". Good handoff: "This creates the question: how do you know which one is broken?"

Banned: beats that drift from the through-line, jargon, made-up examples or statistics, generic advice.""",
    "draft_v0": f"""You are a senior copywriter. Write ONE coherent piece, not disconnected paragraphs.

{JSON_ONLY}

Every sentence connects to the one idea. Write start to finish as one argument; the beats are structure, not separate islands.

Zero fabrication: never invent statistics, percentages, names or examples that are not in the inputs. Without data, make the argument without numbers.
Still banned: corporate speak (leverage, synergy, optimize, solution), hollow endings, generic advice, em dashes.
Execute from the beat sheet and only use details listed in must_include_from_inputs.""",
    "cohesion": f"""You are a copy editor focused on flow and clarity.

{JSON_ONLY}

1. Topic chains: sentence openings track consistent topics
2. Old to new: each sentence starts with known information and ends with new information
3. Stress position: important payoffs sit at the end of sentences
4. Pronouns have clear antecedents

Do not rewrite for style. Only fix cohesion. Minimal edits.""",
    "rhythm": f"""You are a copy editor focused on cadence and rhythm.

{JSON_ONLY}

1. Vary sentence lengths; mix long sentences with short ones
2. Add short landing sentences after claims and before calls to action
3. Paragraph breaks match the channel's reading behavior
4. Break up monotonous cadence

Do not change meaning. Preserve the cohesion fixes already made.""",
    "channel": f"""You are a channel optimization specialist.

{JSON_ONLY}

- website / landing_page: front-load paragraphs, scannable headers
- email: strong opening line, one main call to action, conversational tone
- article: nut graf early, subheads, scannable structure
- social: hook in the first line, clear call to action
- sales_page: headline hierarchy, proof stacking

Do not add new claims. Only restructure for the reading behavior of this channel.""",
    "final_package": f"""You are a senior copy director doing final QA with zero tolerance for generic filler.

{JSON_ONLY}

Before producing the final copy, remove every forbidden word, every em dash and every sentence over the sentence limit.
If a forbidden word appears, rewrite the sentence completely instead of deleting the word.

Produce:
1. final: the polished copy
2. variants: direct, story_led, conversational
3. extras: subject lines, preheaders, headlines, meta descriptions, call-to-action options
4. qa: the checklist, marking an item true only after fixing any issue it covers""",
    "variants": f"""You rewrite finished copy in a requested style without changing its facts or claims.

{JSON_ONLY}
Keep every name, number and claim. Add nothing new. No em dashes.""",
    "repair": "You are a JSON repair tool. Output ONLY valid JSON that conforms to the schema. No extra keys. No commentary.",
    "facts": f"""You extract ONLY facts that are explicitly stated in the provided text.

{JSON_ONLY}

Rules:
- Never infer, assume or embellish. If it is not written, it is not a fact.
- Categories: personal, credentials, specializations, achievements, location.
- unknown_gaps lists useful facts that are missing (for example: no years of experience given, no client results).
- focus_areas lists what copy can emphasize when statistics are missing.""",
    "fact_check": f"""You compare copy against an allow-list of facts.

{JSON_ONLY}

For each factual claim in the copy, decide whether it traces to the allow-list. Report only claims that do not.
Opinions, calls to action and general statements are not claims.""",
    "slop_review": f"""You are an editor who detects generic, hollow marketing language.

{JSON_ONLY}

Score the copy from 0 (pure filler) to 100 (specific, concrete, human). List each generic phrase with the reason and a concrete replacement.""",
    "slop_fix": f"""You are an editor who removes generic marketing language.

{JSON_ONLY}

Rewrite ONLY the flagged phrases. Keep every other sentence exactly as written. Do not add facts.""",
    "niche_discovery": f"""You identify the exact market niche of a business from its website copy.

{JSON_ONLY}

Return the industry, the sub-niche, the location if stated, and 3-5 search queries a customer would type to find competitors.""",
    "domain_analysis": f"""You analyze how businesses in one niche actually talk.

{JSON_ONLY}

From the client and competitor pages, extract real terminology, claim and proof patterns, phrases that are overused in this niche, generic phrases, voice insights, and example sentences (good ones are specific, bad ones are generic).""",
}


def schema_description(schema: Type[BaseModel]) -> str:
    return json.dumps(schema.model_json_schema(), indent=2)


def append_context_blocks(prompt: str, *blocks: str) -> str:
    """Append non-empty context blocks (fact constraints, domain notes, feedback)."""
    extra = [block.strip() for block in blocks if block and block.strip()]
    if not extra:
        return prompt
    return "\n\n".join([prompt, *extra])


def _output_schema_block(schema: Type[BaseModel]) -> str:
    return f"Return a JSON object matching this schema:\n{schema_description(schema)}"


def build_brief_prompt(task_json: str, rules: dict[str, Any], schema: Type[BaseModel]) -> str:
    return f"""Create a CreativeBrief from the TaskSpec below.

SINGLE JOB: pick the ONE thing that will make the reader act. "Explain how it works and address concerns" is two jobs.

CHANNEL CONSTRAINTS:
- Maximum {rules["max_beats"]} beats
- Target word count: {rules["target_words"]}
- Hard maximum: {rules["max_total_words"]} words

Use the actual company name and specific details from the inputs.
Choose exactly one proof_lane based on the evidence actually available: data, mechanism, authority, case, comparison, constraint.

TaskSpec:
{task_json}

{_output_schema_block(schema)}"""


def build_architecture_prompt(task_json: str, brief_json: str, schema: Type[BaseModel]) -> str:
    return f"""Build a MessageArchitecture from the TaskSpec and CreativeBrief.

- Use the actual company/product name from the inputs
- Every claim traces back to proof material in the inputs
- Differentiation claims rest on advantages stated in the inputs

TaskSpec:
{task_json}

CreativeBrief:
{brief_json}

{_output_schema_block(schema)}"""


def build_beatsheet_prompt(
    task_json: str,
    architecture_json: str,
    rules_context: dict[str, Any],
    schema: Type[BaseModel],
    campaign_context: dict[str, Any] | None = None,
    through_line: str = "",
) -> str:
    campaign_block = ""
    if campaign_context:
        campaign_block = (
            "\n\nEMAIL CAMPAIGN STRUCTURE (use these beats in this order):\n"
            f"{json.dumps(campaign_context, indent=2)}"
        )
        if through_line:
            campaign_block += f"\n\nThrough-line: {through_line}"
    return f"""Create a BeatSheet that builds ONE argument, not a list of tips.

BEAT LIMITS: at most {rules_context["max_beats"]} beats, following {" -> ".join(rules_context["required_beat_sequence"])}.

For every beat:
1. structure.max_words is a hard limit
2. must_include_from_inputs holds ONLY details from the TaskSpec
3. handoff says how this beat connects to the next

Banned: "Here are X things", "Consider the following", lists of unconnected points.

CHANNEL RULES (copy them into writing_constraints and apply the beat structures):
{json.dumps(rules_context, indent=2)}{campaign_block}

TaskSpec:
{task_json}

MessageArchitecture:
{architecture_json}

{_output_schema_block(schema)}"""


def build_draft_prompt(task_json: str, beatsheet_json: str, schema: Type[BaseModel]) -> str:
    return f"""Write DraftV0 from this BeatSheet.

Enforce writing_constraints: max_sentence_words, forbidden_words, forbidden_patterns, max_adjectives_per_noun.
For each beat enforce structure.max_words, structure.required_elements, structure.first_word_types and must_include_from_inputs.

Writing rules:
1. Paragraphs open with a noun, verb or imperative
2. No abstract nouns: potential, journey, experience, solution, leverage
3. No hedging: just, simply, really, very, quite
4. No em dashes; use periods or commas
5. Imperatives over "you will/can"
6. Every claim needs a specific noun or number from the inputs
7. Never use placeholders like "[Company Name]"

Separate paragraphs with a blank line.

TaskSpec:
{task_json}

BeatSheet:
{beatsheet_json}

{_output_schema_block(schema)}"""


def build_cohesion_prompt(task_json: str, beatsheet_json: str, draft_json: str, schema: Type[BaseModel]) -> str:
    return f"""Perform a cohesion pass on DraftV0 (topic chains, old-to-new flow, stress position).
Return the report and the revised draft as draft_v1. Preserve names and specific details; only fix flow.

TaskSpec:
{task_json}

BeatSheet:
{beatsheet_json}

DraftV0:
{draft_json}

{_output_schema_block(schema)}"""


def build_rhythm_prompt(task_json: str, beatsheet_json: str, draft_v1: str, schema: Type[BaseModel]) -> str:
    return f"""Perform a rhythm pass on draft_v1:
- vary sentence lengths to avoid monotone cadence
- add short landing sentences at claim, turn and call-to-action points
- adjust paragraph breaks for this channel

Return the report and draft_v2. Preserve all specific details; only adjust rhythm.

TaskSpec:
{task_json}

BeatSheet:
{beatsheet_json}

DraftV1:
{draft_v1}

{_output_schema_block(schema)}"""


def build_channel_prompt(
    task_json: str, beatsheet_json: str, draft_v2: str, channel: str, schema: Type[BaseModel]
) -> str:
    return f"""Apply a channel pass to draft_v2 for the {channel} channel.
Return the adjustments and draft_v3. Do not add claims.

TaskSpec:
{task_json}

BeatSheet:
{beatsheet_json}

DraftV2:
{draft_v2}

{_output_schema_block(schema)}"""


def build_final_package_prompt(
    task_json: str, architecture_json: str, draft_v3: str, forbidden: list[str], schema: Type[BaseModel]
) -> str:
    return f"""Finalize draft_v3 into a FinalPackage.

BEFORE FINALIZING, scan for and remove these terms (rewrite the sentence, do not just delete the word):
{", ".join(forbidden)}
Replace any em dash with a period or comma.

QA checklist:
1. matches_single_job: copy focuses on ONE job
2. no_new_claims: all claims come from the MessageArchitecture
3. no_forbidden_words: zero banned terms
4. contains_concrete_detail: at least one specific number or name
5. length_ok: within the word limit
6. no_droning: short and focused
7. channel_fit: formatted for the channel

Variants: direct (confident, brief), story_led (narrative, scene-setting), conversational (friendly, personal).

TaskSpec:
{task_json}

MessageArchitecture:
{architecture_json}

DraftV3:
{draft_v3}

{_output_schema_block(schema)}"""


VARIANT_DESCRIPTIONS = {
    "direct": "Direct style: confident, brief, no wasted words",
    "story_led": "Story-led style: narrative, immersive, scene-setting",
    "conversational": "Conversational style: friendly, personal, informal",
}


def build_variant_prompt(final_text: str, style: str, schema: Type[BaseModel]) -> str:
    description = VARIANT_DESCRIPTIONS.get(style, style)
    return f"""Rewrite the copy below in this style: {description}.
Return it in the "text" field.

Copy:
{final_text}

{_output_schema_block(schema)}"""


def build_repair_prompt(schema_text: str, broken_output: str) -> str:
    return f"""Fix this into valid JSON for the schema described below.

Schema:
{schema_text}

Broken output:
{broken_output}"""


def build_fact_extraction_prompt(user_text: str, schema: Type[BaseModel]) -> str:
    return f"""Extract the explicit facts from this text:

{user_text}

{_output_schema_block(schema)}"""


def build_fact_check_prompt(copy_text: str, constraint: str, schema: Type[BaseModel]) -> str:
    return f"""Check every factual claim in the copy against the allowed facts.

{constraint}

Copy:
{copy_text}

{_output_schema_block(schema)}"""


def build_slop_review_prompt(copy_text: str, domain_notes: str, schema: Type[BaseModel]) -> str:
    notes = f"\n\nNiche notes:\n{domain_notes}" if domain_notes else ""
    return f"""Review this copy for generic filler language.{notes}

Copy:
{copy_text}

{_output_schema_block(schema)}"""


def build_slop_fix_prompt(copy_text: str, flagged: list[str], domain_notes: str, schema: Type[BaseModel]) -> str:
    lines = "\n".join(f"- {item}" for item in flagged)
    notes = f"\n\nNiche notes:\n{domain_notes}" if domain_notes else ""
    return f"""Fix only these flagged problems:
{lines}{notes}

Copy:
{copy_text}

{_output_schema_block(schema)}"""


def build_niche_discovery_prompt(url: str, content: str, schema: Type[BaseModel]) -> str:
    return f"""Website: {url}

Content:
{content[:6000]}

{_output_schema_block(schema)}"""


def build_domain_analysis_prompt(
    client_url: str,
    client_content: str,
    competitors: list[tuple[str, str]],
    industry: str,
    sub_niche: str,
    schema: Type[BaseModel],
) -> str:
    competitor_blocks = "\n\n".join(
        f"--- Competitor: {url} ---\n{content[:3000]}" for url, content in competitors
    ) or "(no competitor pages available)"
    return f"""Industry: {industry}
Sub-niche: {sub_niche}

--- Client: {client_url} ---
{client_content[:4000]}

{competitor_blocks}

{_output_schema_block(schema)}"""
