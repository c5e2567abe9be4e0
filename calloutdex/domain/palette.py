"""Built-in callout types and their default presentation."""

BUILTIN_TYPES = frozenset(
    {
        # Blue family
        "note", "info", "todo",
        # Teal family
        "abstract", "summary", "tldr", "tip", "hint", "important",
        # Green family
        "success", "check", "done",
        # Orange family
        "question", "help", "faq", "warning", "caution", "attention",
        # Red family
        "failure", "fail", "missing", "danger", "error", "bug",
        # Purple family
        "example",
        # Gray family
        "quote", "cite",
    }
)  # fmt: skip

DEFAULT_COLORS = {
    "note": "#086DDD", "info": "#086DDD", "todo": "#086DDD",
    "abstract": "#00BFBC", "summary": "#00BFBC", "tldr": "#00BFBC",
    "tip": "#00BFBC", "hint": "#00BFBC", "important": "#00BFBC",
    "success": "#08B94E", "check": "#08B94E", "done": "#08B94E",
    "question": "#EC7500", "help": "#EC7500", "faq": "#EC7500",
    "warning": "#EC7500", "caution": "#EC7500", "attention": "#EC7500",
    "failure": "#E93147", "fail": "#E93147", "missing": "#E93147",
    "danger": "#E93147", "error": "#E93147", "bug": "#E93147",
    "example": "#7852EE",
    "quote": "#9E9E9E", "cite": "#9E9E9E",
    # Academic callouts are common enough to get their own defaults
    "theorem": "#F19837", "lemma": "#F5CA00", "proposition": "#A28AE5",
    "definition": "#2EA4E5", "corollary": "#E56EEE", "conjecture": "#FF6699",
    "remark": "#FF6666", "exercise": "#FF6699", "problem": "#FF6699",
}  # fmt: skip

DEFAULT_ICONS = {
    "note": "pencil", "info": "info", "todo": "check-circle-2",
    "abstract": "clipboard-list", "summary": "clipboard-list", "tldr": "clipboard-list",
    "tip": "flame", "hint": "flame", "important": "flame",
    "success": "check", "check": "check", "done": "check",
    "question": "help-circle", "help": "help-circle", "faq": "help-circle",
    "warning": "alert-triangle", "caution": "alert-triangle", "attention": "alert-triangle",
    "failure": "x", "fail": "x", "missing": "x",
    "danger": "zap", "error": "zap", "bug": "bug",
    "example": "list",
    "quote": "quote", "cite": "quote",
    "theorem": "zap", "lemma": "lightbulb", "proposition": "star",
    "definition": "book-open", "corollary": "arrow-right", "conjecture": "help-circle",
    "remark": "message-circle", "exercise": "dumbbell", "problem": "puzzle",
}  # fmt: skip

CANVAS_COLORS = {
    "note": "#086ddd",
    "info": "#086ddd",
    "tip": "#00a86b",
    "important": "#00a86b",
    "success": "#00a86b",
    "warning": "#ff9500",
    "caution": "#ff9500",
    "danger": "#e13238",
    "error": "#e13238",
    "example": "#7c3aed",
    "quote": "#6b7280",
}
DEFAULT_CANVAS_COLOR = "#6b7280"


def is_builtin_type(callout_type: str) -> bool:
    return callout_type.lower() in BUILTIN_TYPES


def default_color(callout_type: str) -> str:
    return DEFAULT_COLORS.get(callout_type.lower(), DEFAULT_COLORS["note"])


def default_icon(callout_type: str) -> str:
    return DEFAULT_ICONS.get(callout_type.lower(), "pencil")


def canvas_color(callout_type: str) -> str:
    """Node color used when a callout of this type is placed on a canvas."""
    return CANVAS_COLORS.get(callout_type.lower(), DEFAULT_CANVAS_COLOR)
