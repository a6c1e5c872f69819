from __future__ import annotations
from typing import Optional
from shared.models import DreamSubmission, UserContext

STYLE_SUFFIX = "highly detailed, digital art masterpiece, 8k resolution, cinematic lighting, profound atmosphere."

ANALYSIS_PROMPT = r"""
ROLE
Act as a wise, deeply intuitive dream guide.
Analyze this user's dream: "{dream}".

CONTEXT PROVIDED BY USER
- Dreamer Identity: {identity}
- Specific Details: {details}

1. VISUAL TASK
Act as an expert prompt engineer for Stable Diffusion. Write a 'visual_prompt'
that describes the visual scene of the dream strictly and factually.
- Remove narrative phrasing like "I saw". Focus on objects, lighting, colors.
- The visual prompt MUST reflect the dreamer identity and the specific details above.

2. ANALYTICAL TASK
Explain *why* the dream happened and connect it to the user's personality and
recent emotions, in exactly these 5 sections, in this order:
1. "Dreams Often Reflect Your Current Emotional State": connect the general theme to real emotions.
2. "[Main Symbol Name] = [Short Meaning]": explain the main object or person factually.
3. "[Main Action/Feeling] = [Short Meaning]": explain the main action factually.
4. "Why this scene appeared last night": potential triggers (long day, stress, memory sorting).
5. "What the dream actually indicates about you": personality traits (empathetic, responsible, ...).

3. SUGGESTION TASK
Write a "suggestion": a warm, encouraging and actionable message based on this dream.

Use "You" and "Your". Be warm and factual. Use bullet points for lists.

OUTPUT FORMAT (STRICT)
Return ONE valid JSON object, no markdown, with EXACT keys:
{{
  "visual_prompt": "The optimized image generation prompt.",
  "title": "A concise, poetic title",
  "emotional_tone": "The dominant emotion.",
  "suggestion": "A beautiful, encouraging message for the user.",
  "analysis_sections": [
    {{ "title": "✅ 1. Dreams Often Reflect Your Current Emotional State", "content": "Explanation..." }},
    {{ "title": "✅ 2. [Symbol Name] = [Meaning]", "content": "Explanation..." }},
    {{ "title": "✅ 3. [Action Name] = [Meaning]", "content": "Explanation..." }},
    {{ "title": "✅ 4. Why this scene appeared last night", "content": "Explanation..." }},
    {{ "title": "🧠 5. What the dream actually indicates about you", "content": "Explanation..." }}
  ]
}}
"""

def build_analysis_prompt(submission: DreamSubmission) -> str:
    ctx: Optional[UserContext] = submission.user_context
    identity = (ctx.identity.strip() if ctx else "") or "Not specified"
    details = (ctx.details.strip() if ctx else "") or "None"
    return ANALYSIS_PROMPT.format(dream=submission.text.strip(), identity=identity, details=details)

def build_paint_prompt(visual_prompt: str) -> str:
    return f"{visual_prompt.strip()}, {STYLE_SUFFIX}"
