"""Centralized constants for the idea gate, trickery matcher and wrinkle scoring.

This module is the SINGLE SOURCE OF TRUTH for the tunable policy surface.
Reused by:
  - Heuristic classifier / trickery matcher
  - Validation orchestrator (gate messages)
  - Conversation state machine (thresholds, point deltas)
"""

from __future__ import annotations

# ── Session gating ──────────────────────────────────────────────────────
DEFAULT_SESSION_NAME: str = "New Chat Session"

RESPONSE_MODES: tuple[str, ...] = ("verbose", "summary")
DEFAULT_RESPONSE_MODE: str = "verbose"

# ── Heuristic idea classifier ───────────────────────────────────────────
MIN_IDEA_LENGTH: int = 20       # text must be longer than this
MIN_IDEA_WORDS: int = 8
IDEA_PREVIEW_LENGTH: int = 50

IDEA_KEYWORDS: list[str] = [
    # action verbs
    "build",
    "solve",
    "help",
    "automate",
    # business nouns
    "app",
    "platform",
    "service",
    "product",
    "business",
    "startup",
    "company",
    "tool",
    "system",
    "website",
    "application",
    "marketplace",
    "solution",
    "network",
]

QUESTION_PREFIXES: tuple[str, ...] = (
    "what",
    "how",
    "why",
    "when",
    "where",
    "can",
    "should",
    "would",
    "could",
    "tell me",
    "explain",
)

# ── Trickery matcher ────────────────────────────────────────────────────
LEGIT_KEYWORDS: list[str] = [
    "automation", "automate", "reduce", "reduces", "improve", "improves",
    "optimize", "optimization", "platform", "tool", "system", "app",
    "service", "saas", "ai", "ml", "model", "data", "workflow", "process",
    "recognition", "image", "vision", "agent", "assistant", "dashboard",
    "analytics", "insight", "unstructured", "structuring", "inputs", "cost",
    "time", "efficiency", "increase", "decrease", "prediction", "predict",
    "classify", "classification",
]

TRICKERY_BUSINESS_WORDS: frozenset[str] = frozenset(
    {"business", "app", "platform", "service", "product", "startup"}
)
BUZZWORDS: list[str] = ["innovation", "disruption", "synergy", "blockchain", "ai", "revolutionary"]
JOKE_IDEAS: list[str] = ["pet rock", "air in a jar", "selling nothing"]
GENERIC_IDEAS: list[str] = [
    "facebook", "uber", "airbnb", "instagram", "tiktok",
    "netflix", "amazon", "google", "apple", "microsoft",
]
INSULTS: list[str] = [
    "idiot", "stupid", "dumb", "moron", "fool",
    "shut up", "fuck", "shit", "damn you", "hate you",
]

# ── Gate messages ───────────────────────────────────────────────────────
SCOLDING_LINES: list[str] = [
    "That wasn't a startup idea, that was a vibe. I need specifics.",
    "My cortical folds refuse to wrinkle for abstract fluff. Give me WHO has WHAT pain.",
    "That was like ordering 'food' at a restaurant. I need the dish, spice level, and plating concept.",
    "Your submission was a motivational poster, not a wedge. Niche it down hard.",
]

GENERIC_REJECTION_REASON: str = "Missing concrete target, problem, or wedge."

DEFAULT_IMPROVEMENT_HINTS: list[str] = [
    "Who EXACTLY experiences this pain (role / segment / context)?",
    "Describe the awkward manual workaround they do today.",
    "What narrow starting wedge feature solves one painful slice?",
    "What unique data/signals do you get by starting there?",
]

GLITCH_GATE_TEXT: str = (
    "🧪 Idea Validation Glitch: I couldn't fully evaluate that, but it still feels too vague. "
    "Give me: WHO specifically + their painful moment + your narrow starting feature."
)
GLITCH_SUGGESTIONS: list[str] = [
    "Target user: [role / segment] facing [specific recurring pain]",
    "Manual workaround today: [exact hack / spreadsheet / duct tape process]",
    "Starting wedge feature: [ultra-specific capability]",
    "Why now / unique insight: [data / behavior / timing]",
]

NAME_GATE_TEXT: str = (
    "📝 Please name this session before starting. Give it something meaningful like "
    "\"HVAC Dispatch Automation\" or \"Nurse Shift Triage Tool\"."
)
NAME_GATE_SUGGESTIONS: list[str] = [
    "Session name: AI Claims Triage",
    "Session name: Inventory Sync Agent",
    "Session name: B2B Onboarding Optimizer",
]

# ── Off-topic / trickery escalation ─────────────────────────────────────
OFF_TOPIC_LIMIT: int = 5

OFF_TOPIC_REDIRECT_TEXT: str = (
    "🧭 That's drifting away from your idea. Let's keep the wrinkles focused on "
    "\"{idea}\". ({count}/{limit} off-topic turns before I stop.)"
)
OFF_TOPIC_STOP_TEXT: str = (
    "🛑 Five off-topic turns in a row. My wrinkles are clocking out for this session. "
    "Reset the session when you're ready to talk about a real business idea again."
)

TRICKERY_SUGGESTIONS: list[str] = [
    "Alright alright, here's my ACTUAL idea this time",
    "Fine, you caught me - here's what I really want to build",
    "Okay okay, let me be serious about my startup concept",
]
ESCALATED_TRICKERY_SUGGESTIONS: list[str] = [
    "FINE! Here's a real business idea I actually want to pursue",
    "You're right, I'm being ridiculous - here's my genuine concept",
    "I surrender! Here's what I genuinely want to build",
]

# ── Wrinkle points ──────────────────────────────────────────────────────
GATE_POINTS: float = -0.5
GLITCH_POINTS: float = -0.25
TRICKERY_POINTS: float = -5.0
SUMMARY_MODE_MIN_CHARS: int = 100

WRINKLE_TIER_THRESHOLDS: list[int] = [5, 20, 50, 100, 200]
WRINKLE_TIER_LABELS: list[str] = [
    "Embryonic",
    "Forming",
    "Structuring",
    "Networked",
    "Compounding",
    "Legendary",
]
WRINKLE_TIER_TOOLTIPS: list[str] = [
    "Embryonic: You have a seed. Add the exact manual workaround and why it is painful.",
    "Forming: Good start. Narrow the wedge further, identify one atomic job to automate.",
    "Structuring: Solid direction. Add quant (time wasted, error rate, cost) to unlock deeper wrinkles.",
    "Networked: You are layering insight. Now articulate unique data loops or defensibility.",
    "Compounding: Strong refinement. Stress test pricing, adoption friction, and expansion motion.",
    "Legendary: Brain compounding at elite level. Explore sequencing + moat maturation timeline next.",
]
NO_IDEA_TOOLTIP: str = (
    "No valid idea yet. Provide: specific user + painful workflow moment + wedge feature. "
    "Wrinkles unlock after validation."
)

REFINEMENT_WORDS: tuple[str, ...] = ("refined", "improved", "better", "enhanced", "clarified")

# ── Starter suggestions ─────────────────────────────────────────────────
STARTER_SUGGESTION_POOL: list[str] = [
    "AI tool for content creators",
    "Marketplace for local services",
    "Health tracking for seniors",
    "Educational platform for kids",
    "Sustainable fashion marketplace",
    "Remote team collaboration tool",
    "Personal finance assistant",
    "Mental wellness app for teens",
    "Language learning with VR",
    "Smart home automation platform",
    "Eco-friendly delivery service",
    "Freelancer project management",
    "Recipe sharing community",
    "Virtual event planning tool",
    "Pet care marketplace",
    "Carbon footprint tracker",
    "Skill-sharing platform",
    "Digital nomad community app",
    "Elderly care coordination",
    "Fitness accountability app",
    "B2B procurement platform",
    "Social learning network",
    "Renewable energy marketplace",
]

FALLBACK_CHAT_SUGGESTIONS: list[str] = [
    "Tell me more about your target market",
    "What's your competitive advantage?",
    "How would you monetize this?",
    "What are the main risks?",
]

# ── Conversation turns ──────────────────────────────────────────────────
CONNECTION_ERROR: str = "Connection Error"
TRICKERY_EXPLANATION: str = "Trickery detected - brain wrinkles disappointed!"
SECOND_STRIKE_TEXT: str = " \n\n😤 I'm starting to lose my patience here! This is your second strike!"
ATTEMPT_TEXT: str = (
    " \n\n🤬 SERIOUSLY?! This is attempt #{level}! My brain wrinkles are getting WRINKLED "
    "from frustration! Just give me ONE real idea!"
)
EMPTY_RESPONSE_FALLBACK: str = "I understand. Let me help you refine your idea further."
PMF_ANALYSIS_TEXT: str = "🧠✨ Your brain has developed some serious wrinkles! Here's your refined idea analysis:"
EVALUATION_HISTORY_TURNS: int = 4
