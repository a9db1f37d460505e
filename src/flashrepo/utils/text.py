# src/flashrepo/utils/text.py


def normalize_content(text: str) -> str:
    """Drops leading and trailing blank lines and ends the text with exactly one newline."""
    lines = text.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        return "\n"
    lines[-1] = lines[-1].rstrip()
    return "\n".join(lines) + "\n"


def format_count(n: int) -> str:
    return f"{n:,}"


def format_kilo(n: int) -> str:
    # Half-up, so 1,500 characters reads as 2K
    return f"{(n + 500) // 1000}K"
