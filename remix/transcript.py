from typing import Sequence
from urllib.parse import quote

from remix.models import Recipe


TITLE = "🍳 *Kitchen Remix AI Recipes*"
SHARE_URL = "https://wa.me/?text="

# Characters encodeURIComponent leaves alone.
_UNRESERVED = "-_.!~*'()"


def build_transcript(recipes: Sequence[Recipe], summary: str | None = None) -> str:
    """Plain text version of the recipes, WhatsApp markup included."""
    if not recipes:
        return ""

    lines = [TITLE, f"{summary}\n" if summary else ""]
    for i, recipe in enumerate(recipes, start=1):
        lines.append(f"*{i}. {recipe.name}*")
        lines.append(recipe.description)
        lines.append("_Ingredients_:")
        lines.extend(f"• {ingredient}" for ingredient in recipe.ingredients)
        lines.append("_Steps_:")
        lines.extend(f"{n}. {step}" for n, step in enumerate(recipe.steps, start=1))
        lines.append("")
    return "\n".join(lines).strip()


def share_link(transcript: str) -> str:
    return SHARE_URL + quote(transcript, safe=_UNRESERVED)
