"""
Message Builder

Builds the chat messages sent for each evaluation mode.

Content composition per mode:
- plain_text: prompt + raw input text
- images: prompt + captured lines (JSON, indented); raw input text when capture failed
- post_image: prompt + stored image, or prompt + raw input text when there is no image
- article: prompt + "Article title: ...\\nArticle content: ..."
- linkedin_message: one text prompt interpolating the profile fields
"""

import json

from prompt_gauge.domain.constants import DEFAULT_LINKEDIN_SIGNAL, LINKEDIN_SIGNALS, PARSER_INSTRUCTION
from prompt_gauge.domain.value_objects import ProfileInput
from prompt_gauge.infrastructure.model_clients.base import Message


def text_part(text: str) -> dict:
    return {"type": "text", "text": text}


def image_part(image_url: str) -> dict:
    return {"type": "image_url", "image_url": {"url": image_url}}


def user_message(*parts: dict) -> Message:
    return {"role": "user", "content": list(parts)}


def build_text_message(prompt_text: str, input_text: str) -> Message:
    return user_message(text_part(prompt_text), text_part(input_text))


def build_lines_message(prompt_text: str, lines: list[str]) -> Message:
    return user_message(text_part(prompt_text), text_part(json.dumps(lines, indent=2, ensure_ascii=False)))


def build_image_message(prompt_text: str, image_url: str) -> Message:
    return user_message(text_part(prompt_text), image_part(image_url))


def build_article_message(prompt_text: str, title: str, article_text: str) -> Message:
    return user_message(
        text_part(prompt_text),
        text_part(f"Article title: {title}\nArticle content: {article_text}"),
    )


def build_parse_message(raw_output: str) -> Message:
    return user_message(text_part(f"{PARSER_INSTRUCTION}\n\n{raw_output}"))


def build_linkedin_prompt(prompt_text: str, profile: ProfileInput) -> str:
    """
    Outreach prompt for one profile

    The case study line is included only when enabled and non-empty. Unknown
    signals fall back to "like".
    """
    case_study_section = ""
    if profile.include_case_study and profile.case_study and profile.case_study.strip():
        case_study_section = f"Études de cas: {profile.case_study.strip()}"

    signal = profile.signal if profile.signal in LINKEDIN_SIGNALS else DEFAULT_LINKEDIN_SIGNAL

    return (
        f"{prompt_text}\n"
        f"\n"
        f"Nom: {profile.name}\n"
        f"Titre: {profile.title}\n"
        f"Rôle: {profile.role}\n"
        f"Résumé du profil: {profile.summary.strip()}\n"
        f"{case_study_section}\n"
        f"Signal LinkedIn: {signal}"
    )


def build_linkedin_message(prompt_text: str, profile: ProfileInput) -> Message:
    return {"role": "user", "content": build_linkedin_prompt(prompt_text, profile)}
