# campaign_service/services/prompts.py
"""
Prompt construction for campaign asset generation.

Each builder returns a `PromptSpec` holding the system prompt, the user
prompt and the sampling settings for one generation call.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from campaign_service.models.enums import Platform
from campaign_service.schemas.campaign import GenerateCampaignConfig, SourceContent

COPYWRITER_SYSTEM_PROMPT = (
    "You are an expert marketing copywriter for course creators and coaches. "
    "Generate compelling, conversion-focused content."
)
EMAIL_SYSTEM_PROMPT = "You are an expert email marketing copywriter."
PAGE_VARIANT_SYSTEM_PROMPT = "You are an expert at creating high-converting landing page copy."

EMAIL_ARC = [
    ("Awareness", "introduce the problem"),
    ("Consideration", "present the solution"),
    ("Conversion", "strong CTA with urgency"),
]
PAGE_VARIANT_APPROACHES = [
    "benefit-focused",
    "feature-focused",
    "curiosity-driven",
    "social proof",
    "urgency",
]


@dataclass(frozen=True)
class PlatformSpec:
    max_length: int
    style: str


PLATFORM_SPECS: Dict[Platform, PlatformSpec] = {
    Platform.TWITTER: PlatformSpec(280, "concise with hashtags"),
    Platform.INSTAGRAM: PlatformSpec(2200, "storytelling with emojis"),
    Platform.FACEBOOK: PlatformSpec(63206, "conversational and community-focused"),
    Platform.LINKEDIN: PlatformSpec(3000, "professional thought leadership"),
    Platform.TIKTOK: PlatformSpec(2200, "trendy and engaging"),
}


@dataclass(frozen=True)
class PromptSpec:
    system_prompt: str
    user_prompt: str
    max_tokens: int
    temperature: float


def _source_lines(source: SourceContent, include_price: bool = False) -> List[str]:
    lines = [f"Title: {source.title}", f"Description: {source.description}"]
    if include_price and source.price:
        lines.append(f"Price: {source.price} {source.currency or ''}".rstrip())
    return lines


def social_posts_prompt(
    platform: Platform, source: SourceContent, config: GenerateCampaignConfig, count: int
) -> PromptSpec:
    spec = PLATFORM_SPECS[platform]
    context = _source_lines(source, include_price=True)
    if config.target_audience:
        context.append(f"Target Audience: {config.target_audience}")
    context.append(f"Goal: {config.goal.value}")
    context.append(f"Tone: {config.tone.value}")
    context_block = "\n".join(context)

    user_prompt = f"""Create {count} {platform.value} posts for launching this product:

{context_block}

Requirements:
- Each post max {spec.max_length} characters
- Style: {spec.style}
- Include relevant hashtags (2-4 per post)
- Focus on different benefits/angles
- Include clear CTAs
- Vary emotional hooks (curiosity, urgency, social proof, education)

Return JSON array format:
[
  {{"content": "post text here #hashtag"}}
]"""
    return PromptSpec(COPYWRITER_SYSTEM_PROMPT, user_prompt, max_tokens=2048, temperature=0.8)


def email_arc(count: int) -> List[Tuple[str, str]]:
    """Phase of each email; the sequence always ends on Conversion."""
    if count <= 0:
        return []
    if count == 1:
        return [EMAIL_ARC[-1]]
    last = len(EMAIL_ARC) - 1
    return [EMAIL_ARC[int(i * last / (count - 1) + 0.5)] for i in range(count)]


def email_sequence_prompt(
    source: SourceContent, config: GenerateCampaignConfig, count: int
) -> PromptSpec:
    context_block = "\n".join(
        _source_lines(source) + [f"Goal: {config.goal.value}", f"Tone: {config.tone.value}"]
    )
    arc_lines = "\n".join(
        f"- Email {i + 1}: {phase} ({purpose})" for i, (phase, purpose) in enumerate(email_arc(count))
    )
    user_prompt = f"""Create a {count}-email sequence for launching this product:

{context_block}

Email sequence strategy:
{arc_lines}

For each email, provide:
- Subject line
- Preview text
- Email body (HTML-friendly)

Return JSON array format:
[
  {{
    "subject": "subject line",
    "preview": "preview text",
    "body": "email body content"
  }}
]"""
    return PromptSpec(EMAIL_SYSTEM_PROMPT, user_prompt, max_tokens=3072, temperature=0.7)


def page_variants_prompt(
    source: SourceContent, config: GenerateCampaignConfig, count: int
) -> PromptSpec:
    approaches = "\n".join(f"- {a}" for a in PAGE_VARIANT_APPROACHES)
    user_prompt = f"""Create {count} landing page headline variants for A/B testing:

Product: {source.title}
Description: {source.description}
Goal: {config.goal.value}

Create variants with different approaches, one approach per variant:
{approaches}

For each variant, provide:
- Headline
- Subheadline
- CTA button text

Return JSON array format:
[
  {{
    "approach": "benefit-focused",
    "headline": "headline text",
    "subheadline": "subheadline text",
    "cta": "CTA text"
  }}
]"""
    return PromptSpec(PAGE_VARIANT_SYSTEM_PROMPT, user_prompt, max_tokens=1536, temperature=0.8)
