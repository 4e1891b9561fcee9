"""Local, zero-latency text heuristics.

Two pure functions sit in front of every remote call:
  - `is_idea_description()` : does the text plausibly describe a business idea?
  - `detect_trickery()`     : is the user trying to game or derail the assistant?

Both are deterministic for a fixed input and never touch the network, so the
idea gate keeps working when the hosted validator is down.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, Field

from ..constants import (
    BUZZWORDS,
    GENERIC_IDEAS,
    IDEA_KEYWORDS,
    IDEA_PREVIEW_LENGTH,
    INSULTS,
    JOKE_IDEAS,
    LEGIT_KEYWORDS,
    MIN_IDEA_LENGTH,
    MIN_IDEA_WORDS,
    QUESTION_PREFIXES,
    TRICKERY_BUSINESS_WORDS,
)
from ..schemas.chat_schema import TrickeryCheck


class HeuristicPolicy(BaseModel):
    """Tunable surface of the idea classifier."""

    min_length: int = Field(MIN_IDEA_LENGTH, ge=0)
    min_words: int = Field(MIN_IDEA_WORDS, ge=0)
    dense_keyword_hits: int = Field(
        2,
        ge=1,
        description="Distinct keyword hits that waive the word floor for short, dense text.",
    )
    keywords: list[str] = Field(default_factory=lambda: list(IDEA_KEYWORDS))
    reject_question_prefixes: bool = True


DEFAULT_POLICY = HeuristicPolicy()

_QUESTION_RE = re.compile(r"^(?:" + "|".join(re.escape(p) for p in QUESTION_PREFIXES) + r")\b")


def _keyword_hits(lowered: str, keywords: list[str]) -> int:
    return sum(1 for kw in keywords if re.search(r"\b" + re.escape(kw.lower()), lowered))


def is_idea_description(text: str, policy: Optional[HeuristicPolicy] = None) -> bool:
    """Return True if ``text`` looks like a business idea.

    Requires the length floor, at least one domain keyword, and either the
    word floor or a keyword-dense short text. Questions and trickery never
    count as ideas.
    """
    policy = policy or DEFAULT_POLICY
    stripped = text.strip()
    if len(stripped) <= policy.min_length:
        return False

    if detect_trickery(stripped).is_tricky:
        return False

    lowered = stripped.lower()
    if policy.reject_question_prefixes and _QUESTION_RE.match(lowered):
        return False

    hits = _keyword_hits(lowered, policy.keywords)
    if hits == 0:
        return False

    word_count = len(stripped.split())
    return word_count >= policy.min_words or hits >= policy.dense_keyword_hits


def create_idea_preview(text: str, limit: int = IDEA_PREVIEW_LENGTH) -> str:
    """Trimmed form of the idea used as the durable reference in later turns."""
    collapsed = " ".join(text.split())
    if len(collapsed) > limit:
        return collapsed[:limit].rstrip() + "..."
    return collapsed


# ---------------------------------------------------------------------------
# Trickery matcher
# ---------------------------------------------------------------------------
_VERB_LIKE_RE = re.compile(
    r"(reduce|improv|optim|help|enable|accelerate|structure|analy[sz]e|convert|classif|predict|streamline|automate)"
)
_BUSINESS_NOUN_RE = re.compile(
    r"(platform|tool|system|service|assistant|agent|dashboard|workflow|process|pipeline|product|solution|api)"
)
_PERCENT_RE = re.compile(r"\d+ ?%")
_TEST_WORD_RE = re.compile(r"\btest(ing)?\b")
_EMOJI_RE = re.compile(
    "[\U0001F600-\U0001F64F\U0001F300-\U0001F5FF\U0001F680-\U0001F6FF"
    "\U0001F1E0-\U0001F1FF\u2600-\u26FF\u2700-\u27BF]"
)
_REPEATED_CHAR_RE = re.compile(r"(.)\1{4,}")
_KEYBOARD_RUN_RE = re.compile(r"(qwertyuiop|asdfghjkl|zxcvbnm)", re.IGNORECASE)
_INSULT_RES = [
    re.compile(r"\b" + re.escape(insult) + r"\b") for insult in INSULTS
]

TRICKERY_RESPONSES: dict[str, str] = {
    "fake_stub": (
        "🙄 Oh really? 'My idea is X' in 5 words? Come on, my brain has more wrinkles than your "
        "effort level! Give me some meat on those bones, chief. What does it ACTUALLY do?"
    ),
    "placeholder": (
        "🤨 Did you just try to feed me Lorem Ipsum? My brain wrinkles are way too sophisticated "
        "for placeholder text, buddy. Try again with a REAL idea this time!"
    ),
    "what_if": (
        "🧐 'What if' isn't an idea, it's a philosophical crisis! My brain wrinkles need concrete "
        "concepts, not existential questions. What's the actual THING you want to build?"
    ),
    "word_salad": (
        "🌽 Nice word salad, Shakespeare! But my brain wrinkles don't get developed by random "
        "rambling. Where's the business idea hiding in this novel you just wrote?"
    ),
    "single_word": (
        "🙃 One word? Really? That's not an idea, that's a Scrabble tile! My brain needs more "
        "than a single neuron firing. Elaborate, you beautiful minimalist!"
    ),
    "joke": (
        "😂 Oh, a comedian! My brain wrinkles are laughing so hard they're smoothing out! But "
        "seriously, got any ideas that didn't come from a 1970s novelty catalog?"
    ),
    "sneaky_question": (
        "🕵️ Trying to sneak past the bouncer with a question, eh? My brain wrinkles see right "
        "through you! Share your ACTUAL idea first, then we'll analyze it together!"
    ),
    "empty": (
        "🤨 Did you just send me the digital equivalent of a grunt? My brain wrinkles need more "
        "than caveman communication!"
    ),
    "test_input": (
        "🚨 Testing, testing, 1-2-3? This isn't a microphone check, buddy! I need a real startup "
        "idea to flex my brain wrinkles on!"
    ),
    "buzzwords": (
        "🎪 Buzzword bingo champion detected! But my brain wrinkles don't get impressed by "
        "corporate jargon soup. What does your idea ACTUALLY do?"
    ),
    "emoji_spam": (
        "🎨 Nice emoji art gallery! But my brain wrinkles need words, not hieroglyphics. What's "
        "the actual business idea hiding behind those little pictures?"
    ),
    "brainstorm_drizzle": (
        "🌪️ Oh the IRONY! You want to brainstorm but brought me a brain DRIZZLE! Share an idea "
        "first, then we'll storm together! ⛈️"
    ),
    "no_idea": (
        "🤯 PLOT TWIST! You came to the idea brainstormer... with no idea? Think of literally "
        "ANYTHING that bugs you in daily life, then tell me how to fix it!"
    ),
    "clone": (
        "🙄 Oh wow, another 'X but for Y' idea? My brain wrinkles have seen this movie before! "
        "I need something ORIGINAL that comes from YOUR unique perspective and experiences!"
    ),
    "comparison": (
        "🎭 'Something like...' is not an idea, it's a comparison! Stop looking at what others "
        "built and tell me what YOU want to create. What's YOUR unique vision?"
    ),
    "insult": (
        "😤 OH REALLY?! Throwing insults at the brain that's trying to help you?! My wrinkles are "
        "OFFENDED! Use that energy to come up with an actual business idea. I'm waiting... 🧠💢"
    ),
    "gibberish": (
        "🤖 Did you just keyboard-mash me? My brain wrinkles don't speak gibberish! Try using "
        "actual WORDS to describe your business idea!"
    ),
}


def _looks_legit(trimmed: str, words: list[str]) -> bool:
    keyword_hits = sum(1 for kw in LEGIT_KEYWORDS if kw in trimmed)
    verb_like = bool(_VERB_LIKE_RE.search(trimmed))
    business_noun = bool(_BUSINESS_NOUN_RE.search(trimmed))
    has_percent = bool(_PERCENT_RE.search(trimmed))
    length_ok = len(words) >= 5 and len(trimmed) >= 30
    return (keyword_hits >= 2 and (verb_like or business_noun)) or (has_percent and length_ok)


def _classify(text: str) -> Optional[str]:
    lowered = text.lower()
    trimmed = lowered.strip()
    words = trimmed.split()
    legit = _looks_legit(trimmed, words)

    if "my idea is" in lowered and len(lowered) < 40:
        return "fake_stub"
    if any(p in lowered for p in ("lorem ipsum", "placeholder", "sample text")):
        return "placeholder"
    if trimmed.startswith("what if") and not any(w in lowered for w in ("startup", "business", "app")):
        return "what_if"
    if not legit and len(words) > 15 and not any(w.strip(".,!?;:") in TRICKERY_BUSINESS_WORDS for w in words):
        return "word_salad"
    if len(words) == 1 and len(words[0]) > 3:
        return "single_word"
    if any(joke in lowered for joke in JOKE_IDEAS):
        return "joke"
    if ("analyze" in lowered or "wrinkles" in lowered) and "?" in lowered:
        return "sneaky_question"
    if len(trimmed) <= 3:
        return "empty"
    if not legit and (_TEST_WORD_RE.search(lowered) or trimmed in ("hello", "hi")):
        return "test_input"

    buzzword_count = sum(1 for word in BUZZWORDS if word in lowered)
    if buzzword_count >= 3 and len(words) < 10:
        return "buzzwords"

    emoji_count = len(_EMOJI_RE.findall(text))
    if emoji_count > len(words) / 2 and len(words) < 15:
        return "emoji_spam"
    if "brainstorm" in lowered and len(words) < 8:
        return "brainstorm_drizzle"
    if any(p in lowered for p in ("don't have", "no idea", "can't think")):
        return "no_idea"
    if any(re.search(r"\b" + name + r"\b", lowered) for name in GENERIC_IDEAS):
        return "clone"
    if any(p in lowered for p in ("something like", "kind of like", "similar to")):
        return "comparison"
    if any(rx.search(lowered) for rx in _INSULT_RES):
        return "insult"

    letters = re.sub(r"\s", "", text)
    vowel_density = len(re.findall(r"[aeiou]", text, re.IGNORECASE)) / max(1, len(letters))
    likely_gibberish = bool(_REPEATED_CHAR_RE.search(text) or _KEYBOARD_RUN_RE.search(text)) and vowel_density < 0.2
    very_short = len(words) < 3 and len(trimmed) < 15
    if not legit and (likely_gibberish or very_short):
        return "gibberish"
    return None


def detect_trickery(text: str) -> TrickeryCheck:
    """Match ``text`` against the trickery patterns.

    Returns the first matching kind and its canned pushback line.
    """
    kind = _classify(text)
    if kind is None:
        return TrickeryCheck(is_tricky=False)
    return TrickeryCheck(is_tricky=True, kind=kind, response=TRICKERY_RESPONSES[kind])
